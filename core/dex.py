"""Read-only entity tables (species, moves, items, abilities) and generation views.

The tables are external data: this module only models the fields the rule
resolver and validators read.  Field names are snake_case but every model also
accepts the camelCase spelling used by Showdown-style data dumps, so both
``base_species`` and ``baseSpecies`` load.

A :class:`Dex` is a view of the tables for a single generation ("mod").
Lookups through a view hide entries introduced in later generations, while the
raw tables stay available for ban-target resolution which is generation
agnostic.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Literal, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .ids import to_id
from .stats import HIDDEN_POWER_TYPES, get_nature, get_type

_MOD_PATTERN = re.compile(r"^gen(\d+)")

HIDDEN_POWER_ID = "hiddenpower"


class _Entity(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str = Field(..., min_length=1)
    num: int = 0
    gen: int = 0
    is_nonstandard: Optional[str] = None

    @property
    def id(self) -> str:
        return to_id(self.name)


class Species(_Entity):
    """A species or alternate forme."""

    base_species: str = ""
    forme: str = ""
    types: List[str] = Field(default_factory=list)
    gender: Optional[Literal["M", "F", "N"]] = None
    gender_ratio: Optional[Dict[str, float]] = None
    abilities: Dict[str, str] = Field(default_factory=dict)
    egg_groups: List[str] = Field(default_factory=list)
    prevo: str = ""
    evos: List[str] = Field(default_factory=list)
    tier: str = ""
    other_formes: List[str] = Field(default_factory=list)
    battle_only: bool = False
    required_ability: str = ""
    required_items: List[str] = Field(default_factory=list)
    required_move: str = ""
    unreleased_hidden: bool = False
    male_only_hidden: bool = False

    @model_validator(mode="before")
    @classmethod
    def _default_base_species(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            data = dict(data)
            if not (data.get("base_species") or data.get("baseSpecies")):
                data["base_species"] = data.get("name", "")
            if data.get("gender") == "":
                data["gender"] = None
        return data

    @property
    def is_mega(self) -> bool:
        return self.forme.startswith("Mega")

    @property
    def nfe(self) -> bool:
        """Not fully evolved."""

        return bool(self.evos)

    @property
    def hidden_ability(self) -> str:
        return self.abilities.get("H", "")


class Move(_Entity):
    type: str = "Normal"
    category: str = "Status"
    ohko: Union[bool, str] = False
    boosts: Optional[Dict[str, int]] = None
    z_move_boost: Optional[Dict[str, int]] = None


class Item(_Entity):
    z_move: Union[bool, str, None] = None
    z_move_type: Optional[str] = None
    mega_stone: Optional[str] = None
    forced_forme: Optional[str] = None


class Ability(_Entity):
    pass


E = TypeVar("E", bound=_Entity)


def gen_from_mod(mod: str) -> int:
    """Return the generation number encoded in a mod tag such as ``gen7``."""

    match = _MOD_PATTERN.match(mod or "")
    if match is None:
        raise ValueError(f"Mod {mod!r} does not name a generation")
    return int(match.group(1))


def _parse_table(model: Type[E], raw: Optional[Mapping[str, Any]]) -> Dict[str, E]:
    if not raw:
        return {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"{model.__name__} table must be a mapping keyed by identifier")
    return {to_id(key): model.model_validate(value) for key, value in raw.items()}


class Dex:
    """Generation-scoped lookups over the shared entity tables."""

    def __init__(
        self,
        mod: str,
        *,
        species: Mapping[str, Species],
        moves: Mapping[str, Move],
        items: Mapping[str, Item],
        abilities: Mapping[str, Ability],
        aliases: Optional[Mapping[str, str]] = None,
        gen: Optional[int] = None,
    ) -> None:
        self.mod = mod
        self.gen = gen if gen is not None else gen_from_mod(mod)
        self._species = species
        self._moves = moves
        self._items = items
        self._abilities = abilities
        self._aliases = {to_id(key): value for key, value in (aliases or {}).items()}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, mod: str, gen: Optional[int] = None) -> "Dex":
        """Build a dex from a JSON-like payload of the four tables plus aliases."""

        return cls(
            mod,
            gen=gen,
            species=_parse_table(Species, payload.get("species")),
            moves=_parse_table(Move, payload.get("moves")),
            items=_parse_table(Item, payload.get("items")),
            abilities=_parse_table(Ability, payload.get("abilities")),
            aliases=payload.get("aliases"),
        )

    def with_gen(self, gen: int) -> "Dex":
        """Return a view of the same tables for another generation."""

        return Dex(
            f"gen{gen}",
            gen=gen,
            species=self._species,
            moves=self._moves,
            items=self._items,
            abilities=self._abilities,
            aliases=self._aliases,
        )

    # ------------------------------------------------------------------ tables
    @property
    def species_table(self) -> Mapping[str, Species]:
        return self._species

    @property
    def move_table(self) -> Mapping[str, Move]:
        return self._moves

    @property
    def item_table(self) -> Mapping[str, Item]:
        return self._items

    @property
    def ability_table(self) -> Mapping[str, Ability]:
        return self._abilities

    def resolve_alias(self, identifier: str) -> str:
        alias = self._aliases.get(identifier)
        return to_id(alias) if alias else identifier

    # ----------------------------------------------------------------- lookups
    def get_species(self, name: Optional[str]) -> Optional[Species]:
        return self._lookup(self._species, name)

    def get_move(self, name: Optional[str]) -> Optional[Move]:
        move = self._lookup(self._moves, name)
        if move is not None:
            return move
        identifier = self.resolve_alias(to_id(name))
        if identifier.startswith(HIDDEN_POWER_ID) and len(identifier) > len(HIDDEN_POWER_ID):
            base = self._lookup(self._moves, HIDDEN_POWER_ID)
            hp_type = get_type(identifier[len(HIDDEN_POWER_ID):])
            if base is not None and hp_type in HIDDEN_POWER_TYPES:
                return base.model_copy(update={"name": f"{base.name} {hp_type}", "type": hp_type})
        return None

    def get_item(self, name: Optional[str]) -> Optional[Item]:
        return self._lookup(self._items, name)

    def get_ability(self, name: Optional[str]) -> Optional[Ability]:
        return self._lookup(self._abilities, name)

    def get_nature(self, name: Optional[str]) -> Optional[str]:
        return get_nature(name)

    def _lookup(self, table: Mapping[str, E], name: Optional[str]) -> Optional[E]:
        identifier = to_id(name)
        if not identifier:
            return None
        entry = table.get(identifier)
        if entry is None:
            entry = table.get(self.resolve_alias(identifier))
        if entry is None or entry.gen > self.gen:
            return None
        return entry

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"Dex(mod={self.mod!r}, species={len(self._species)}, moves={len(self._moves)})"


class DexCollection(Mapping[str, Dex]):
    """Mapping of mod tag (``gen1`` … ``gen7``) to :class:`Dex` views."""

    def __init__(self, dexes: Iterable[Dex]) -> None:
        self._dexes: Dict[str, Dex] = {dex.mod: dex for dex in dexes}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, gens: Iterable[int] = range(1, 8)) -> "DexCollection":
        """Share one set of tables across several generations."""

        gens = list(gens)
        base = Dex.from_payload(payload, mod=f"gen{max(gens)}")
        return cls(base.with_gen(gen) for gen in gens)

    @classmethod
    def from_mod_payloads(cls, payloads: Mapping[str, Mapping[str, Any]]) -> "DexCollection":
        """Build one independent snapshot per mod."""

        return cls(Dex.from_payload(payload, mod=mod) for mod, payload in payloads.items())

    @classmethod
    def load_from_json(cls, path: Path, *, gens: Iterable[int] = range(1, 8)) -> "DexCollection":
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if "mods" in payload:
            return cls.from_mod_payloads(payload["mods"])
        return cls.from_payload(payload, gens=gens)

    def __getitem__(self, mod: str) -> Dex:
        return self._dexes[mod]

    def __iter__(self) -> Iterator[str]:
        return iter(self._dexes)

    def __len__(self) -> int:
        return len(self._dexes)


__all__ = [
    "Ability",
    "Dex",
    "DexCollection",
    "Item",
    "Move",
    "Species",
    "gen_from_mod",
]
