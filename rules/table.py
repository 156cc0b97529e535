"""The resolved, flattened view of a format's rules.

A :class:`RuleTable` maps rule keys to the name of the format they were
inherited from (the empty string for rules the format declares itself).  Keys
take one of these shapes:

- ``<ruleid>``: a rule or sub-format in effect, e.g. ``speciesclause``
- ``!<ruleid>``: a rule suppressed so that it is not inherited
- ``-<category>:<thing>``: a ban, e.g. ``-move:batonpass``
- ``+<category>:<thing>``: an unban overriding an inherited ban

where ``<category>`` is ``pokemon``, ``basespecies``, ``move``, ``ability``,
``item`` or ``pokemontag``.  ``-unreleased`` and ``-illegal`` have no
category.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple, TypeVar

from .schema import ComplexBan, ComplexTeamBan, _CombinationBan

_GROUPS = {
    "pokemon": "species",
    "basespecies": "base_species",
    "move": "moves",
    "ability": "abilities",
    "item": "items",
    "pokemontag": "tags",
}

B = TypeVar("B", bound=_CombinationBan)


@dataclass(frozen=True)
class Ban:
    """Target identifiers grouped by category.

    A set matches when every populated group is satisfied: the single valued
    groups (species, base species, ability, item) need any listed value, the
    multi valued ones (moves, tags, uncategorised) need all of them.
    """

    species: FrozenSet[str] = frozenset()
    base_species: FrozenSet[str] = frozenset()
    moves: FrozenSet[str] = frozenset()
    abilities: FrozenSet[str] = frozenset()
    items: FrozenSet[str] = frozenset()
    tags: FrozenSet[str] = frozenset()
    other: FrozenSet[str] = frozenset()

    @classmethod
    def from_targets(cls, targets: Iterable[str]) -> "Ban":
        groups: Dict[str, set] = {name: set() for name in _GROUPS.values()}
        other = set()
        for target in targets:
            category, sep, identifier = target.partition(":")
            group = _GROUPS.get(category) if sep else None
            if group is None:
                other.add(target)
            else:
                groups[group].add(identifier)
        return cls(other=frozenset(other), **{name: frozenset(values) for name, values in groups.items()})

    def keys(self) -> FrozenSet[str]:
        keys = set(self.other)
        for category, group in _GROUPS.items():
            keys.update(f"{category}:{identifier}" for identifier in getattr(self, group))
        return frozenset(keys)

    def count(self, has: Iterable[str]) -> int:
        return len(self.keys() & set(has))

    def matches(self, has: Iterable[str]) -> bool:
        present = set(has)
        for category in ("pokemon", "basespecies", "ability", "item"):
            values = getattr(self, _GROUPS[category])
            if values and not any(f"{category}:{value}" in present for value in values):
                return False
        for category in ("move", "pokemontag"):
            values = getattr(self, _GROUPS[category])
            if any(f"{category}:{value}" not in present for value in values):
                return False
        return self.other <= present

    def bans_move(self, move_id: str) -> bool:
        return move_id in self.moves

    def bans_ability(self, ability_id: str) -> bool:
        return ability_id in self.abilities


@dataclass(frozen=True)
class LegalityHook:
    """A named legality check and the format that declared it."""

    name: str
    source: str


class RuleTable:
    """Rule keys in effect for a format plus its combination bans."""

    def __init__(self) -> None:
        self._rules: Dict[str, str] = {}
        self.complex_bans: List[ComplexBan] = []
        self.complex_team_bans: List[ComplexTeamBan] = []
        self.check_learnset: Optional[LegalityHook] = None

    # ------------------------------------------------------------ mapping API
    def has(self, key: str) -> bool:
        return key in self._rules

    def get(self, key: str) -> Optional[str]:
        return self._rules.get(key)

    def set(self, key: str, source: str) -> None:
        """Record ``key``; suppressing ``!x`` drops any positive ``x`` first."""

        if key.startswith("!"):
            self._rules.pop(key[1:], None)
        self._rules[key] = source

    def delete(self, key: str) -> None:
        self._rules.pop(key, None)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._rules.items()))

    def __contains__(self, key: object) -> bool:
        return key in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    # ------------------------------------------------------------------ bans
    def check(self, thing: str) -> str:
        """Return why ``thing`` is banned, or ``""`` when it is allowed."""

        return self.get_reason(f"-{thing}")

    def get_reason(self, key: str) -> str:
        source = self._rules.get(key)
        if source is None:
            return ""
        return f"banned by {source}" if source else "banned"

    def add_complex_ban(self, ban: ComplexBan) -> None:
        self._merge(self.complex_bans, ban)

    def add_complex_team_ban(self, ban: ComplexTeamBan) -> None:
        self._merge(self.complex_team_bans, ban)

    @staticmethod
    def _merge(entries: List[B], ban: B) -> None:
        for index, existing in enumerate(entries):
            if existing.key == ban.key:
                if existing.unbounded:
                    return
                entries[index] = ban
                return
        entries.append(ban)

    # --------------------------------------------------------------- export
    def to_payload(self) -> Dict[str, Any]:
        """Plain data view, handy for comparisons and debugging."""

        hook = None
        if self.check_learnset is not None:
            hook = {"name": self.check_learnset.name, "source": self.check_learnset.source}
        return {
            "rules": dict(self._rules),
            "complex_bans": [ban.to_payload() for ban in self.complex_bans],
            "complex_team_bans": [ban.to_payload() for ban in self.complex_team_bans],
            "check_learnset": hook,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return (
            f"RuleTable(rules={len(self._rules)}, complex_bans={len(self.complex_bans)}, "
            f"complex_team_bans={len(self.complex_team_bans)})"
        )


__all__ = ["Ban", "LegalityHook", "RuleTable"]
