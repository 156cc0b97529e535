"""Tunable limits shared by the resolver and the validators."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidatorConfig:
    """Numeric limits used while resolving formats and validating teams."""

    max_team_size: int = 6
    max_moves: int = 4
    max_rule_depth: int = 16
    max_iv: int = 31
    max_ev: int = 255
    max_total_evs: int = 510
    little_cup_level: int = 5
    default_mod: str = "gen7"


DEFAULT_CONFIG = ValidatorConfig()


__all__ = ["DEFAULT_CONFIG", "ValidatorConfig"]
