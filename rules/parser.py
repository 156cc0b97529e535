"""Parser for the textual rule grammar used in rulesets and ban lists.

Grammar::

    rule    := ["!"] <format or rule name>
             | ("-" | "+") targets [">" N]
    targets := target (("+" | "++") target)*
    target  := [category ":"] name

``+`` joins targets that must co-occur on one Pokémon, ``++`` joins targets
counted across the whole team.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Mapping, Optional, Tuple

from core.dex import Dex
from core.ids import to_id

from .errors import (
    AmbiguousBanTargetError,
    GeneratedTeamBanError,
    NoBanTargetMatchError,
    RuleSyntaxError,
    UnknownRuleError,
)
from .schema import Allowed, BanLimit, BanRule, ComplexBan, ComplexTeamBan, Forbidden, Format, RuleSpec, SimpleRule

if TYPE_CHECKING:  # pragma: no cover
    from .loader import FormatRegistry

CATEGORIES: Tuple[str, ...] = ("pokemon", "move", "ability", "item", "pokemontag")

VALID_TAGS = frozenset(
    [
        # singles tiers
        "uber", "ou", "uubl", "uu", "rubl", "ru", "nubl", "nu", "publ", "pu", "zu",
        "nfe", "lcuber", "lc", "cap", "caplc", "capnfe",
        # doubles tiers
        "duber", "dou", "dbl", "duu",
        # custom tags
        "mega",
    ]
)

PASSTHROUGH_TARGETS = ("unreleased", "illegal")


class RuleParser:
    """Turns rule strings into :data:`RuleSpec` values."""

    def __init__(self, registry: "FormatRegistry") -> None:
        self._registry = registry

    def parse(self, rule: str, format: Optional[Format] = None) -> RuleSpec:
        """Parse ``rule`` declared by ``format`` (when known)."""

        rule = rule.strip()
        dex = self._dex_for(format)
        prefix = rule[:1]
        if prefix in ("-", "+"):
            if format is not None and format.team:
                raise GeneratedTeamBanError(format.name)
            body = rule[1:]
            if ">" in body or "+" in body:
                return self._parse_combination(rule, prefix, body, dex)
            return BanRule(prefix, self.resolve_ban_target(body, dex))  # type: ignore[arg-type]

        identifier = to_id(rule)
        if not self._registry.has_format(identifier):
            raise UnknownRuleError(rule)
        return SimpleRule(identifier, suppressed=rule.startswith("!"))

    def resolve_ban_target(self, rule: str, dex: Optional[Dex] = None) -> str:
        """Return the categorised key (``move:batonpass``) that ``rule`` names."""

        dex = dex or self._registry.default_dex
        identifier = to_id(rule)
        if identifier in PASSTHROUGH_TARGETS:
            return identifier

        categories = CATEGORIES
        lowered = rule.strip().lower()
        for category in CATEGORIES:
            if lowered.startswith(f"{category}:"):
                categories = (category,)
                identifier = identifier[len(category):]
                break

        tag_id = identifier
        identifier = dex.resolve_alias(identifier)
        tables: Mapping[str, Mapping[str, object]] = {
            "pokemon": dex.species_table,
            "move": dex.move_table,
            "ability": dex.ability_table,
            "item": dex.item_table,
        }

        matches: List[str] = []
        for category in categories:
            if category == "pokemontag":
                if tag_id in VALID_TAGS:
                    matches.append(f"pokemontag:{tag_id}")
                continue
            table = tables[category]
            if identifier in table:
                if category == "pokemon" and dex.species_table[identifier].other_formes:
                    matches.append(f"basespecies:{identifier}")
                    continue
                matches.append(f"{category}:{identifier}")
            elif category == "pokemon" and identifier.endswith("base"):
                base_id = identifier[: -len("base")]
                if base_id in table:
                    matches.append(f"pokemon:{base_id}")

        if len(matches) > 1:
            raise AmbiguousBanTargetError(rule, matches)
        if not matches:
            raise NoBanTargetMatchError(rule)
        return matches[0]

    # ------------------------------------------------------------------ helpers
    def _parse_combination(self, rule: str, prefix: str, body: str, dex: Dex) -> RuleSpec:
        limit: BanLimit = Allowed() if prefix == "+" else Forbidden(0)
        gt_index = body.rfind(">")
        if gt_index >= 0 and body[gt_index + 1:].strip().isdigit():
            if isinstance(limit, Forbidden):
                limit = Forbidden(int(body[gt_index + 1:].strip()))
            body = body[:gt_index]

        check_team = "++" in body
        names = [name.strip() for name in body.split("++" if check_team else "+")]
        bounded = isinstance(limit, Allowed) or limit.limit > 0
        if len(names) == 1 and bounded:
            check_team = True
        inner_rule = (" ++ " if check_team else " + ").join(names)
        targets = tuple(self.resolve_ban_target(name, dex) for name in names)

        if check_team:
            return ComplexTeamBan(inner_rule, "", limit, targets)
        if len(targets) > 1 or bounded:
            return ComplexBan(inner_rule, "", limit, targets)
        raise RuleSyntaxError(f"Confusing rule {rule}")

    def _dex_for(self, format: Optional[Format]) -> Dex:
        if format is not None and format.exists:
            return self._registry.dex_for(format)
        return self._registry.default_dex


__all__ = ["CATEGORIES", "PASSTHROUGH_TARGETS", "RuleParser", "VALID_TAGS"]
