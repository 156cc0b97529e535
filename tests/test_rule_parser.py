import pytest

from rules.errors import (
    AmbiguousBanTargetError,
    GeneratedTeamBanError,
    NoBanTargetMatchError,
    RuleSyntaxError,
    UnknownRuleError,
)
from rules.loader import FormatRegistry
from rules.parser import RuleParser
from rules.schema import Allowed, BanRule, ComplexBan, ComplexTeamBan, Forbidden, SimpleRule


@pytest.fixture
def parser(registry: FormatRegistry) -> RuleParser:
    return RuleParser(registry)


def test_rule_references_become_simple_rules(parser: RuleParser) -> None:
    assert parser.parse("Standard") == SimpleRule("standard")
    assert parser.parse("[Gen 7] OU") == SimpleRule("gen7ou")

    suppressed = parser.parse("!Team Preview")
    assert suppressed == SimpleRule("teampreview", suppressed=True)
    assert suppressed.key == "!teampreview"


def test_unknown_rule_reference(parser: RuleParser) -> None:
    with pytest.raises(UnknownRuleError) as excinfo:
        parser.parse("Rainbow Clause")
    assert excinfo.value.code == "ERR_UNKNOWN_RULE"


def test_ban_targets_are_categorised(parser: RuleParser) -> None:
    assert parser.parse("-Baton Pass") == BanRule("-", "move:batonpass")
    assert parser.parse("+Drought") == BanRule("+", "ability:drought")
    assert parser.parse("-Soul Dew").key == "-item:souldew"
    assert parser.parse("-Chansey").key == "-pokemon:chansey"
    assert parser.parse("-Uber").key == "-pokemontag:uber"
    assert parser.parse("-LC Uber").key == "-pokemontag:lcuber"
    assert parser.parse("-Mega").key == "-pokemontag:mega"


def test_unreleased_and_illegal_pass_through(parser: RuleParser) -> None:
    assert parser.parse("-Unreleased") == BanRule("-", "unreleased")
    assert parser.parse("-Illegal").key == "-illegal"


def test_species_with_formes_ban_the_whole_family(parser: RuleParser) -> None:
    assert parser.parse("-Kyurem").key == "-basespecies:kyurem"
    assert parser.parse("-Kyurem-Black").key == "-pokemon:kyuremblack"
    assert parser.parse("-Vulpix-Base").key == "-pokemon:vulpix"


def test_aliases_are_followed(parser: RuleParser) -> None:
    assert parser.parse("-Kyub").key == "-pokemon:kyuremblack"
    assert parser.parse("-megagengar").key == "-pokemon:gengarmega"


def test_ambiguous_target_needs_a_category(parser: RuleParser) -> None:
    with pytest.raises(AmbiguousBanTargetError) as excinfo:
        parser.parse("-Metronome")
    assert sorted(excinfo.value.matches) == ["item:metronome", "move:metronome"]

    assert parser.parse("-item:Metronome").key == "-item:metronome"
    assert parser.parse("-Move:Metronome").key == "-move:metronome"


def test_unmatched_target(parser: RuleParser) -> None:
    with pytest.raises(NoBanTargetMatchError):
        parser.parse("-Missingno")
    with pytest.raises(NoBanTargetMatchError):
        parser.parse("-ability:Baton Pass")


def test_combination_bans(parser: RuleParser) -> None:
    assert parser.parse("-Smeargle + Ingrain") == ComplexBan(
        "Smeargle + Ingrain", "", Forbidden(0), ("pokemon:smeargle", "move:ingrain")
    )
    assert parser.parse("+Smeargle + Ingrain") == ComplexBan(
        "Smeargle + Ingrain", "", Allowed(), ("pokemon:smeargle", "move:ingrain")
    )
    assert parser.parse("-Hypnosis+Gengarite").rule == "Hypnosis + Gengarite"


def test_team_combination_bans(parser: RuleParser) -> None:
    assert parser.parse("-Drizzle ++ Swift Swim") == ComplexTeamBan(
        "Drizzle ++ Swift Swim", "", Forbidden(0), ("ability:drizzle", "ability:swiftswim")
    )
    assert parser.parse("-Baton Pass > 1") == ComplexTeamBan(
        "Baton Pass", "", Forbidden(1), ("move:batonpass",)
    )
    assert parser.parse("+Baton Pass > 1") == ComplexTeamBan(
        "Baton Pass", "", Allowed(), ("move:batonpass",)
    )


def test_single_target_limited_to_zero_is_confusing(parser: RuleParser) -> None:
    with pytest.raises(RuleSyntaxError, match="Confusing rule"):
        parser.parse("-Baton Pass > 0")


def test_bans_are_rejected_for_generated_teams(parser: RuleParser, registry: FormatRegistry) -> None:
    random_battle = registry.get_format("gen7randombattle")

    with pytest.raises(GeneratedTeamBanError) as excinfo:
        parser.parse("-Uber", random_battle)
    assert isinstance(excinfo.value, RuleSyntaxError)
    assert excinfo.value.code == "ERR_GENERATED_TEAM_BAN"
    assert excinfo.value.format_name == "[Gen 7] Random Battle"
    assert parser.parse("Sleep Clause Mod", random_battle) == SimpleRule("sleepclausemod")


def test_targets_resolve_against_the_declaring_format(parser: RuleParser, registry: FormatRegistry) -> None:
    assert parser.parse("-Scrafty", registry.get_format("gen3ou")).key == "-pokemon:scrafty"
