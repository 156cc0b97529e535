"""Input models for a single configured Pokémon ("set") and a team of them.

Sets are user supplied.  The models normalise the shape of the data once at
construction (stat tables are completed, stat names canonicalised, gender
upper-cased) but deliberately leave *values* unchecked: out of range IVs or an
unknown nature are legality problems reported by the validators, not
construction errors.

Two loaders are provided, mirroring the deck loaders of the card engine: one
for JSON-like dictionaries and one for the plain-text export format used by
common team builders::

    Rotom-Wash @ Leftovers
    Ability: Levitate
    EVs: 252 HP / 4 SpA / 252 SpD
    Calm Nature
    IVs: 0 Atk
    - Volt Switch
    - Hydro Pump
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .stats import STAT_LABELS, STAT_NAMES, fill_stats

_STAT_ALIASES: Dict[str, str] = {label.lower(): stat for stat, label in STAT_LABELS.items()}
_STAT_ALIASES.update({stat: stat for stat in STAT_NAMES})
_STAT_ALIASES.update({"spc": "spa", "satk": "spa", "sdef": "spd", "spdef": "spd"})

_GENDERS = {"", "M", "F", "N"}


def _canonical_stats(values: Optional[Mapping[str, Any]], default: int) -> Dict[str, int]:
    table: Dict[str, int] = {}
    for key, value in (values or {}).items():
        stat = _STAT_ALIASES.get(str(key).strip().lower())
        if stat is None:
            raise ValueError(f"Unknown stat {key!r}")
        table[stat] = value
    return fill_stats(table, default)


class PokemonSet(BaseModel):
    """One configured Pokémon."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: str = ""
    species: str = Field(..., min_length=1)
    item: str = ""
    ability: str = ""
    moves: List[str] = Field(default_factory=list)
    nature: str = ""
    gender: str = ""
    evs: Dict[str, int] = Field(default_factory=lambda: fill_stats(None, 0))
    ivs: Dict[str, int] = Field(default_factory=lambda: fill_stats(None, 31))
    level: Optional[int] = None
    shiny: bool = False
    hp_type: str = Field(default="", alias="hpType")
    happiness: int = 255
    pokeball: str = ""

    @field_validator("evs", mode="before")
    @classmethod
    def _complete_evs(cls, value: Any) -> Dict[str, int]:
        return _canonical_stats(value, 0)

    @field_validator("ivs", mode="before")
    @classmethod
    def _complete_ivs(cls, value: Any) -> Dict[str, int]:
        return _canonical_stats(value, 31)

    @field_validator("gender", mode="before")
    @classmethod
    def _normalise_gender(cls, value: Any) -> str:
        gender = (value or "").strip().upper()
        if gender not in _GENDERS:
            raise ValueError(f"gender must be one of M, F or N, not {value!r}")
        return gender

    @property
    def display_name(self) -> str:
        return self.name or self.species


class Team(BaseModel):
    """An ordered collection of sets, optionally bound to a format name."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    format: Optional[str] = None
    sets: List[PokemonSet] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.sets)


def load_team_from_json(data: Mapping[str, Any]) -> Team:
    """Create a :class:`Team` from a JSON-like dictionary.

    Accepts either ``{"format": ..., "sets": [...]}`` or a bare list of sets
    wrapped as ``{"sets": [...]}``.
    """

    return Team.model_validate(dict(data))


def load_team_from_json_file(path: str) -> Team:
    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if isinstance(data, list):
        data = {"sets": data}
    return load_team_from_json(data)


_GENDER_SUFFIX_RE = re.compile(r"\s+\((?P<gender>[MF])\)$")
_NICKNAME_RE = re.compile(r"^(?P<name>.+?)\s+\((?P<species>[^()]+)\)$")
_EV_ENTRY_RE = re.compile(r"^(?P<value>-?\d+)\s+(?P<stat>[A-Za-z]+)$")


def _parse_stat_line(text: str) -> Dict[str, int]:
    stats: Dict[str, int] = {}
    for chunk in text.split("/"):
        match = _EV_ENTRY_RE.match(chunk.strip())
        if match is None:
            raise ValueError(f"Unrecognised stat entry: {chunk.strip()!r}")
        stats[match.group("stat")] = int(match.group("value"))
    return stats


def _parse_export_block(lines: List[str]) -> PokemonSet:
    header, *rest = lines
    fields: Dict[str, Any] = {"moves": []}

    if " @ " in header:
        header, item = header.rsplit(" @ ", 1)
        fields["item"] = item.strip()
    header = header.strip()
    gender_match = _GENDER_SUFFIX_RE.search(header)
    if gender_match:
        fields["gender"] = gender_match.group("gender")
        header = header[: gender_match.start()]
    nickname_match = _NICKNAME_RE.match(header)
    if nickname_match:
        fields["name"] = nickname_match.group("name").strip()
        fields["species"] = nickname_match.group("species").strip()
    else:
        fields["species"] = header

    for line in rest:
        if line.startswith("-"):
            fields["moves"].append(line[1:].strip())
        elif line.startswith("Ability:"):
            fields["ability"] = line.split(":", 1)[1].strip()
        elif line.startswith("Level:"):
            fields["level"] = int(line.split(":", 1)[1])
        elif line.startswith("Shiny:"):
            fields["shiny"] = line.split(":", 1)[1].strip().lower() == "yes"
        elif line.startswith("Happiness:"):
            fields["happiness"] = int(line.split(":", 1)[1])
        elif line.startswith("Hidden Power:"):
            fields["hp_type"] = line.split(":", 1)[1].strip()
        elif line.startswith("EVs:"):
            fields["evs"] = _parse_stat_line(line.split(":", 1)[1])
        elif line.startswith("IVs:"):
            fields["ivs"] = _parse_stat_line(line.split(":", 1)[1])
        elif line.endswith(" Nature"):
            fields["nature"] = line[: -len(" Nature")].strip()
        else:
            raise ValueError(f"Unrecognised team export line: {line!r}")
    return PokemonSet.model_validate(fields)


def load_team_from_export(text: str, *, format: Optional[str] = None) -> Team:
    """Parse the plain-text export format; sets are separated by blank lines."""

    sets: List[PokemonSet] = []
    block: List[str] = []
    for raw_line in text.splitlines() + [""]:
        line = raw_line.strip()
        if line:
            block.append(line)
            continue
        if block:
            sets.append(_parse_export_block(block))
            block = []
    return Team(format=format, sets=sets)


__all__ = [
    "PokemonSet",
    "Team",
    "load_team_from_export",
    "load_team_from_json",
    "load_team_from_json_file",
]
