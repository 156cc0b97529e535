"""Format definitions and the parsed form of textual rules.

``FormatRecord`` validates one raw entry of the format list (JSON or Python
dicts); :class:`Format` is the immutable descriptor the rest of the code works
with.  Rule strings such as ``"-Baton Pass"`` or ``"Smeargle + Ingrain"`` are
parsed once into the ``RuleSpec`` union below and never re-parsed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel
from pydantic.alias_generators import to_camel

from core.dex import gen_from_mod
from core.ids import to_id

_TIER_RE = re.compile(r"^\[Gen \d+\]\s*(?P<tier>.+)$")

EffectType = Literal["Format", "Ruleset", "Rule", "ValidatorRule"]


class FormatRecord(BaseModel):
    """A single raw entry of the format list."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    section: str = ""
    mod: Optional[str] = None
    effect_type: EffectType = "Format"
    desc: str = ""
    ruleset: List[str] = Field(default_factory=list)
    banlist: List[str] = Field(default_factory=list)
    unbanlist: List[str] = Field(default_factory=list)
    team: Optional[str] = Field(default=None, description="Team generator for random formats")
    game_type: str = "singles"
    max_level: int = Field(default=100, ge=1)
    default_level: Optional[int] = Field(default=None, ge=1)
    check_learnset: Optional[str] = Field(
        default=None,
        description="Name of a registered legality check that replaces the default one",
    )


class FormatRecordCollection(RootModel[List[FormatRecord]]):
    """Helper root model to validate the ordered format list."""


@dataclass(frozen=True)
class Format:
    """Immutable format descriptor.

    A descriptor with ``custom_rules`` is a derived format: its ``key`` embeds
    the custom rules so that it never collides with its base format.
    """

    name: str
    id: str
    mod: str = "gen7"
    gen: int = 7
    tier: str = ""
    effect_type: str = "Format"
    desc: str = ""
    ruleset: Tuple[str, ...] = ()
    banlist: Tuple[str, ...] = ()
    unbanlist: Tuple[str, ...] = ()
    custom_rules: Optional[Tuple[str, ...]] = None
    team: Optional[str] = None
    max_level: int = 100
    default_level: int = 100
    check_learnset: Optional[str] = None
    exists: bool = True

    @classmethod
    def from_record(cls, record: FormatRecord, *, default_mod: str) -> "Format":
        mod = record.mod or default_mod
        tier_match = _TIER_RE.match(record.name)
        if tier_match:
            tier = tier_match.group("tier").strip()
        elif record.effect_type == "Format":
            tier = record.name
        else:
            tier = ""
        return cls(
            name=record.name,
            id=to_id(record.name),
            mod=mod,
            gen=gen_from_mod(mod),
            tier=tier,
            effect_type=record.effect_type,
            desc=record.desc,
            ruleset=tuple(record.ruleset),
            banlist=tuple(record.banlist),
            unbanlist=tuple(record.unbanlist),
            team=record.team,
            max_level=record.max_level,
            default_level=record.default_level or record.max_level,
            check_learnset=record.check_learnset,
        )

    @classmethod
    def missing(cls, name: str) -> "Format":
        return cls(name=name, id=to_id(name), exists=False)

    @property
    def key(self) -> str:
        if self.custom_rules:
            return f"{self.id}@@@{','.join(self.custom_rules)}"
        return self.id

    def with_custom_rules(self, rules: Tuple[str, ...]) -> "Format":
        return replace(self, custom_rules=tuple(rules))

    def __str__(self) -> str:
        return self.name


# --------------------------------------------------------------------- limits
@dataclass(frozen=True)
class Forbidden:
    """The combination is banned; with ``limit`` > 0 only beyond that count."""

    limit: int = 0


@dataclass(frozen=True)
class Allowed:
    """An unban that shields the combination from later bans."""


BanLimit = Union[Forbidden, Allowed]


# ---------------------------------------------------------------- rule specs
@dataclass(frozen=True)
class SimpleRule:
    """Reference to another format/rule, optionally suppressed with ``!``."""

    rule_id: str
    suppressed: bool = False

    @property
    def key(self) -> str:
        return f"!{self.rule_id}" if self.suppressed else self.rule_id


@dataclass(frozen=True)
class BanRule:
    """``-target`` or ``+target`` for a single categorised target."""

    prefix: Literal["-", "+"]
    target: str

    @property
    def key(self) -> str:
        return f"{self.prefix}{self.target}"


@dataclass(frozen=True)
class _CombinationBan:
    rule: str
    source: str
    limit: BanLimit
    targets: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def key(self) -> str:
        return to_id(self.rule)

    @property
    def unbounded(self) -> bool:
        return isinstance(self.limit, Allowed)

    def with_source(self, source: str):
        return replace(self, source=source)

    def to_payload(self) -> Dict[str, Any]:
        limit: Any = "allowed" if self.unbounded else self.limit.limit  # type: ignore[union-attr]
        return {
            "rule": self.rule,
            "source": self.source,
            "limit": limit,
            "targets": list(self.targets),
        }


@dataclass(frozen=True)
class ComplexBan(_CombinationBan):
    """Combination of targets on a single Pokémon."""


@dataclass(frozen=True)
class ComplexTeamBan(_CombinationBan):
    """Combination of targets counted across a whole team."""


RuleSpec = Union[SimpleRule, BanRule, ComplexBan, ComplexTeamBan]


__all__ = [
    "Allowed",
    "BanLimit",
    "BanRule",
    "ComplexBan",
    "ComplexTeamBan",
    "Forbidden",
    "Format",
    "FormatRecord",
    "FormatRecordCollection",
    "RuleSpec",
    "SimpleRule",
]
