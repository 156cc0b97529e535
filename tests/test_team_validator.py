from typing import List

from core.sets import PokemonSet, Team, load_team_from_export
from rules.engine import RuleTableResolver
from validator.teams import TeamValidator


def _pokemon(species: str, ability: str, *moves: str, **fields) -> PokemonSet:
    data = {"species": species, "ability": ability, "nature": "Modest", "moves": list(moves) or ["Surf"]}
    data.update(fields)
    return PokemonSet.model_validate(data)


def _pikachus(count: int) -> List[PokemonSet]:
    return [_pokemon("Pikachu", "Static", "Thunderbolt") for _ in range(count)]


def test_empty_team(team_validator: TeamValidator) -> None:
    assert team_validator.validate([], "gen7ou") == ["Your team has no Pokémon."]


def test_unknown_format(team_validator: TeamValidator) -> None:
    assert team_validator.validate(_pikachus(1), "gen0nothing") == ["gen0nothing is not a valid format."]


def test_oversized_team_reports_once_plus_member_problems(team_validator: TeamValidator) -> None:
    team = _pikachus(6) + [_pokemon("Pikachu", "Static", "Thunderbolt", level=0)]

    assert team_validator.validate(team, "gen7anythinggoes") == [
        "Your team has more than six Pokémon.",
        "Pikachu must be at least level 1.",
    ]
    assert team_validator.validate(_pikachus(6), "gen7anythinggoes") == []


def test_kyurem_formes_are_limited_together(team_validator: TeamValidator) -> None:
    black = _pokemon("Kyurem-Black", "Teravolt")
    white = _pokemon("Kyurem-White", "Turboblaze")
    expected = ["You cannot have more than one Kyurem-Black/Kyurem-White."]

    assert team_validator.validate([white, black], "gen7anythinggoes") == expected
    assert team_validator.validate([white, white], "gen7anythinggoes") == expected
    assert team_validator.validate([black, black, white], "gen7anythinggoes") == expected
    assert team_validator.validate([white, _pokemon("Kyurem", "Pressure")], "gen7anythinggoes") == []


def test_necrozma_formes_are_limited_separately(team_validator: TeamValidator) -> None:
    dusk = _pokemon("Necrozma-Dusk-Mane", "Prism Armor")
    dawn = _pokemon("Necrozma-Dawn-Wings", "Prism Armor")

    assert team_validator.validate([dusk, dusk], "gen7anythinggoes") == [
        "You cannot have more than one Necrozma-Dusk-Mane."
    ]
    assert team_validator.validate([dusk, dawn], "gen7anythinggoes") == []


def test_species_clause(team_validator: TeamValidator) -> None:
    assert team_validator.validate(_pikachus(2), "gen7ou") == [
        "You are limited to one of each Pokémon by Species Clause (you have more than one Pikachu)."
    ]
    assert team_validator.validate(_pikachus(2), "gen7anythinggoes") == []


def test_species_clause_counts_formes_by_number(team_validator: TeamValidator) -> None:
    team = [_pokemon("Pikachu", "Static", "Thunderbolt"), _pokemon("Pikachu-Cosplay", "Lightning Rod", "Thunderbolt")]

    problems = team_validator.validate(team, "gen7ou")
    assert problems[-1] == "You are limited to one of each Pokémon by Species Clause (you have more than one Pikachu)."


def test_nickname_clause(team_validator: TeamValidator) -> None:
    team = [
        _pokemon("Pikachu", "Static", "Thunderbolt", name="Sparky"),
        _pokemon("Raichu", "Static", "Thunderbolt", name="Sparky"),
    ]

    assert team_validator.validate(team, "gen7ou") == [
        "Your Pokémon must have different nicknames (you have more than one Sparky)."
    ]


def test_species_names_are_not_nicknames(team_validator: TeamValidator) -> None:
    team = [
        _pokemon("Pikachu", "Static", "Thunderbolt", name="Pikachu"),
        _pokemon("Raichu", "Static", "Thunderbolt", name="Pikachu"),
    ]

    assert team_validator.validate(team, "gen7ou") == []


def test_baton_pass_clause_limits_passers(team_validator: TeamValidator) -> None:
    team = [
        _pokemon("Smeargle", "Own Tempo", "Baton Pass", "Protect"),
        _pokemon("Scrafty", "Shed Skin", "Baton Pass", "Protect"),
    ]

    assert team_validator.validate(team, "gen7ou@@@Baton Pass Clause,+Baton Pass") == [
        "Team has 2 Pokémon with Baton Pass despite Baton Pass Clause's limit of 1."
    ]
    assert team_validator.validate(team[:1], "gen7ou@@@Baton Pass Clause,+Baton Pass") == []


def test_gen5ou_weather_pairs(team_validator: TeamValidator) -> None:
    rain = [_pokemon("Politoed", "Drizzle"), _pokemon("Kingdra", "Swift Swim")]
    sun = [_pokemon("Ninetales", "Drought", "Tackle"), _pokemon("Shiftry", "Chlorophyll", "Leaf Blade")]

    assert team_validator.validate(rain, "gen5ou") == ["Drizzle and Swift Swim may not be used on the same team."]
    assert team_validator.validate(sun, "gen5ou") == ["Drought and Chlorophyll may not be used on the same team."]
    assert team_validator.validate(rain, "gen6ou") == []
    assert team_validator.validate(rain[:1], "gen5ou") == []


def test_complex_team_bans_from_custom_rules(team_validator: TeamValidator) -> None:
    rain = [_pokemon("Politoed", "Drizzle"), _pokemon("Kingdra", "Swift Swim")]
    passers = [
        _pokemon("Smeargle", "Own Tempo", "Baton Pass"),
        _pokemon("Scrafty", "Shed Skin", "Baton Pass"),
    ]

    assert team_validator.validate(rain, "gen7anythinggoes@@@-Drizzle ++ Swift Swim") == [
        "Your team has the combination of Drizzle ++ Swift Swim, which is banned."
    ]
    assert team_validator.validate(passers, "gen7anythinggoes@@@-Baton Pass > 1") == [
        "You are limited to 1 of Baton Pass."
    ]
    assert team_validator.validate(passers[:1], "gen7anythinggoes@@@-Baton Pass > 1") == []


def test_team_format_is_used_by_default(team_validator: TeamValidator) -> None:
    team = Team(format="gen7ou", sets=_pikachus(2))

    assert len(team_validator.validate(team)) == 1
    assert team_validator.validate(team, "gen7anythinggoes") == []


def test_validate_all(team_validator: TeamValidator) -> None:
    exported = load_team_from_export(
        "Sparky (Pikachu) @ Leftovers\nAbility: Static\nTimid Nature\n- Thunderbolt\n- Surf\n",
        format="gen7ou",
    )
    results = team_validator.validate_all(
        {"clean": exported, "empty": Team(format="gen7ou", sets=[])}
    )

    assert results == {"clean": [], "empty": ["Your team has no Pokémon."]}


def test_from_resolver(resolver: RuleTableResolver) -> None:
    validator = TeamValidator.from_resolver(resolver)

    assert validator.resolver is resolver
    assert validator.validate(_pikachus(1), "gen7ou") == []
