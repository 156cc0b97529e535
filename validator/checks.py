"""Clause checks that cannot be written as plain ban-list entries."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Tuple

from core.dex import Item, Move, Species
from rules.table import Ban

# (rule id, display name, banned targets)
ClauseBan = Tuple[str, str, Ban]

OHKO_CLAUSE = "ohkoclause"
BATON_PASS_CLAUSE = "batonpassclause"
LITTLE_CUP = "littlecup"
SPECIES_CLAUSE = "speciesclause"
NICKNAME_CLAUSE = "nicknameclause"
ALLOW_CAP = "allowcap"

EVASION_MOVES = Ban(moves=frozenset({"minimize", "doubleteam"}))
SWAGGER = Ban(moves=frozenset({"swagger"}))
EVASION_ABILITIES = Ban(abilities=frozenset({"sandveil", "snowcloak"}))
MOODY = Ban(abilities=frozenset({"moody"}))

MOVE_CLAUSES: Tuple[ClauseBan, ...] = (
    ("evasionmovesclause", "Evasion Moves Clause", EVASION_MOVES),
    ("swaggerclause", "Swagger Clause", SWAGGER),
)
ABILITY_CLAUSES: Tuple[ClauseBan, ...] = (
    ("evasionabilitiesclause", "Evasion Abilities Clause", EVASION_ABILITIES),
    ("moodyclause", "Moody Clause", MOODY),
)

SLEEP_MOVES = frozenset({"hypnosis", "lovelykiss", "sing", "sleeppowder", "spore"})
TRAP_MOVES = frozenset({"meanlook", "spiderweb"})

SPEED_BOOST_ABILITIES = frozenset({"motordrive", "rattled", "speedboost", "steadfast", "weakarmor"})
SPEED_BOOST_ITEMS = frozenset({"blazikenite", "eeviumz", "kommoniumz", "salacberry"})
NON_SPEED_BOOST_ABILITIES = frozenset(
    {
        "angerpoint", "competitive", "defiant", "download", "justified",
        "lightningrod", "moxie", "sapsipper", "stormdrain",
    }
)
NON_SPEED_BOOST_ITEMS = frozenset(
    {
        "absorbbulb", "apicotberry", "cellbattery", "eeviumz", "ganlonberry",
        "keeberry", "kommoniumz", "liechiberry", "luminousmoss", "marangaberry",
        "petayaberry", "snowball", "starfberry", "weaknesspolicy",
    }
)
NON_SPEED_BOOST_MOVES = frozenset(
    {
        "acupressure", "bellydrum", "chargebeam", "curse", "diamondstorm",
        "fellstinger", "fierydance", "flowershield", "poweruppunch", "rage",
        "rototiller", "skullbash", "stockpile",
    }
)

_NON_SPEED_STATS = ("atk", "def", "spa", "spd")

# Team-wide ability pairs rejected in [Gen 5] OU.
WEATHER_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("Drizzle", "Swift Swim"),
    ("Drought", "Chlorophyll"),
)

# Formes limited to one per team; each species name maps to its group label.
UNIQUE_FORME_GROUPS: Tuple[str, ...] = (
    "Kyurem-Black/Kyurem-White",
    "Necrozma-Dusk-Mane",
    "Necrozma-Dawn-Wings",
)
UNIQUE_FORMES = {
    "Kyurem-Black": "Kyurem-Black/Kyurem-White",
    "Kyurem-White": "Kyurem-Black/Kyurem-White",
    "Necrozma-Dusk-Mane": "Necrozma-Dusk-Mane",
    "Necrozma-Dawn-Wings": "Necrozma-Dawn-Wings",
}


def is_legendary(species: Species, shiny: bool = False) -> bool:
    """Species that are guaranteed three perfect IVs from generation 6 on."""

    undiscovered = bool(species.egg_groups) and species.egg_groups[0] == "Undiscovered"
    return (
        (undiscovered or species.name == "Manaphy")
        and not species.prevo
        and not species.nfe
        and species.name != "Unown"
        and species.base_species != "Pikachu"
        and (species.base_species != "Diancie" or not shiny)
    )


def has_sleep_trap(move_ids: Iterable[str]) -> bool:
    """Generation 2 forbids a sleep move together with a trapping move."""

    moves = set(move_ids)
    return bool(moves & SLEEP_MOVES) and bool(moves & TRAP_MOVES)


def gen2_gender_threshold(species: Species) -> int:
    """Attack DV at or above which a generation 2 Pokémon is male."""

    ratio: Mapping[str, float] = species.gender_ratio or {"M": 0.5, "F": 0.5}
    threshold = int(ratio.get("F", 0.5) * 16)
    if threshold == 4:
        return 5
    if threshold == 8:
        return 7
    return threshold


def _raises(boosts: Optional[Mapping[str, int]], stats: Iterable[str]) -> bool:
    return bool(boosts) and any(boosts.get(stat, 0) > 0 for stat in stats)


def can_pass_speed_and_other(moves: Iterable[Move], ability_id: str, item: Optional[Item]) -> bool:
    """True when the set can pass a Speed boost together with another boost.

    Boost sources are tracked as ``True`` for moves, abilities and items and
    as the move name for Z-move boosts; two distinct Z-moves cannot both be
    used, so that combination does not count.
    """

    speed_boosted: object = False
    non_speed_boosted: object = False
    z_crystal = item is not None and bool(item.z_move)

    for move in moves:
        if move.id == "flamecharge" or _raises(move.boosts, ("spe",)):
            speed_boosted = True
        if move.id in NON_SPEED_BOOST_MOVES or _raises(move.boosts, _NON_SPEED_STATS):
            non_speed_boosted = True
        if z_crystal and move.type == item.z_move_type:
            if _raises(move.z_move_boost, ("spe",)) and not speed_boosted:
                speed_boosted = move.name
            if _raises(move.z_move_boost, _NON_SPEED_STATS):
                if not non_speed_boosted or move.name == speed_boosted:
                    non_speed_boosted = move.name

    item_id = item.id if item is not None else ""
    if ability_id in SPEED_BOOST_ABILITIES or item_id in SPEED_BOOST_ITEMS:
        speed_boosted = True
    if not speed_boosted:
        return False

    if ability_id in NON_SPEED_BOOST_ABILITIES or item_id in NON_SPEED_BOOST_ITEMS:
        non_speed_boosted = True
    if not non_speed_boosted:
        return False

    both_z_moves = isinstance(speed_boosted, str) and isinstance(non_speed_boosted, str)
    return not (both_z_moves and speed_boosted != non_speed_boosted)


__all__ = [
    "ABILITY_CLAUSES",
    "ALLOW_CAP",
    "BATON_PASS_CLAUSE",
    "EVASION_ABILITIES",
    "EVASION_MOVES",
    "LITTLE_CUP",
    "MOODY",
    "MOVE_CLAUSES",
    "NICKNAME_CLAUSE",
    "OHKO_CLAUSE",
    "SLEEP_MOVES",
    "SPECIES_CLAUSE",
    "SWAGGER",
    "TRAP_MOVES",
    "UNIQUE_FORMES",
    "UNIQUE_FORME_GROUPS",
    "WEATHER_PAIRS",
    "can_pass_speed_and_other",
    "gen2_gender_threshold",
    "has_sleep_trap",
    "is_legendary",
]
