"""Core helpers shared by the rule resolver and the validators."""

from .config import DEFAULT_CONFIG, ValidatorConfig
from .dex import Ability, Dex, DexCollection, Item, Move, Species
from .errors import ConfigurationError, ErrorDetails
from .ids import to_id
from .sets import (
    PokemonSet,
    Team,
    load_team_from_export,
    load_team_from_json,
    load_team_from_json_file,
)

__all__ = [
    "Ability",
    "ConfigurationError",
    "DEFAULT_CONFIG",
    "Dex",
    "DexCollection",
    "ErrorDetails",
    "Item",
    "Move",
    "PokemonSet",
    "Species",
    "Team",
    "ValidatorConfig",
    "load_team_from_export",
    "load_team_from_json",
    "load_team_from_json_file",
    "to_id",
]
