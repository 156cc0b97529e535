"""Stat tables, natures and the IV/DV arithmetic used by legality checks.

Generation 1 and 2 store determinant values (DVs, 0-15) rather than IVs; sets
always carry IVs (0-31) and the helpers below convert with ``iv // 2``.  Hidden
Power's type is derived from IV parity in generation 3+ and from the Attack
and Defense DVs before that.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

STAT_NAMES = ("hp", "atk", "def", "spa", "spd", "spe")

STAT_LABELS: Dict[str, str] = {
    "hp": "HP",
    "atk": "Atk",
    "def": "Def",
    "spa": "SpA",
    "spd": "SpD",
    "spe": "Spe",
}

NATURES = (
    "Adamant", "Bashful", "Bold", "Brave", "Calm",
    "Careful", "Docile", "Gentle", "Hardy", "Hasty",
    "Impish", "Jolly", "Lax", "Lonely", "Mild",
    "Modest", "Naive", "Naughty", "Quiet", "Quirky",
    "Rash", "Relaxed", "Sassy", "Serious", "Timid",
)

TYPES = (
    "Bug", "Dark", "Dragon", "Electric", "Fairy", "Fighting",
    "Fire", "Flying", "Ghost", "Grass", "Ground", "Ice",
    "Normal", "Poison", "Psychic", "Rock", "Steel", "Water",
)

HIDDEN_POWER_TYPES = (
    "Fighting", "Flying", "Poison", "Ground",
    "Rock", "Bug", "Ghost", "Steel",
    "Fire", "Water", "Grass", "Electric",
    "Psychic", "Ice", "Dragon", "Dark",
)

# Bit weight of each IV's parity in the generation 3+ Hidden Power formula.
_HP_TYPE_BITS = {"hp": 1, "atk": 2, "def": 4, "spe": 8, "spa": 16, "spd": 32}

_NATURE_INDEX = {name.lower(): name for name in NATURES}
_TYPE_INDEX = {name.lower(): name for name in TYPES}


def get_nature(name: Optional[str]) -> Optional[str]:
    """Return the canonical nature name or ``None`` when unknown."""

    if not name:
        return None
    return _NATURE_INDEX.get(name.strip().lower())


def get_type(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    return _TYPE_INDEX.get(name.strip().lower())


def fill_stats(values: Optional[Mapping[str, int]], default: int) -> Dict[str, int]:
    """Return a complete stats table, filling missing stats with ``default``."""

    table = {stat: default for stat in STAT_NAMES}
    if values:
        table.update(values)
    return table


def iv_to_dv(iv: int) -> int:
    return iv // 2


def ivs_to_dvs(ivs: Mapping[str, int]) -> Dict[str, int]:
    return {stat: iv_to_dv(ivs[stat]) for stat in STAT_NAMES}


def expected_hp_dv(ivs: Mapping[str, int]) -> int:
    """HP DV implied by the low bit of the Atk, Def, Spe and Spc DVs."""

    dvs = ivs_to_dvs(ivs)
    return (
        (dvs["atk"] % 2) * 8
        + (dvs["def"] % 2) * 4
        + (dvs["spe"] % 2) * 2
        + (dvs["spa"] % 2)
    )


def gen2_shiny_from_ivs(ivs: Mapping[str, int]) -> bool:
    """Generation 2 shininess is fully determined by the DVs."""

    dvs = ivs_to_dvs(ivs)
    return (
        dvs["def"] == 10
        and dvs["spe"] == 10
        and dvs["spa"] == 10
        and dvs["atk"] % 4 >= 2
    )


def hidden_power_type(ivs: Mapping[str, int], gen: int) -> str:
    """Return the Hidden Power type produced by ``ivs`` in generation ``gen``."""

    if gen <= 2:
        atk_dv = iv_to_dv(ivs["atk"])
        def_dv = iv_to_dv(ivs["def"])
        return HIDDEN_POWER_TYPES[4 * (atk_dv % 4) + (def_dv % 4)]
    total = sum(weight * (ivs[stat] % 2) for stat, weight in _HP_TYPE_BITS.items())
    return HIDDEN_POWER_TYPES[total * 15 // 63]


__all__ = [
    "HIDDEN_POWER_TYPES",
    "NATURES",
    "STAT_LABELS",
    "STAT_NAMES",
    "TYPES",
    "expected_hp_dv",
    "fill_stats",
    "gen2_shiny_from_ivs",
    "get_nature",
    "get_type",
    "hidden_power_type",
    "iv_to_dv",
    "ivs_to_dvs",
]
