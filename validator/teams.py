"""Team-wide legality checks layered on top of :class:`SetValidator`."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Mapping, Optional, Sequence, Set, Union

from core.config import ValidatorConfig
from core.ids import to_id
from core.sets import PokemonSet, Team
from rules.engine import RuleTableResolver
from rules.schema import Format
from rules.table import Ban, RuleTable

from .checks import (
    BATON_PASS_CLAUSE,
    NICKNAME_CLAUSE,
    SPECIES_CLAUSE,
    UNIQUE_FORME_GROUPS,
    UNIQUE_FORMES,
    WEATHER_PAIRS,
)
from .sets import MoveLegalityCheck, SetValidator

LOGGER = logging.getLogger(__name__)

_COUNT_WORDS = {1: "one", 2: "two", 3: "three", 4: "four", 5: "five", 6: "six"}

WEATHER_PAIR_FORMAT = "gen5ou"


class TeamValidator:
    """Validates whole teams; every set is also checked on its own."""

    def __init__(self, set_validator: SetValidator, *, config: Optional[ValidatorConfig] = None) -> None:
        self.set_validator = set_validator
        self.resolver = set_validator.resolver
        self.config = config or set_validator.config

    @classmethod
    def from_resolver(
        cls,
        resolver: RuleTableResolver,
        *,
        hooks: Optional[Mapping[str, MoveLegalityCheck]] = None,
        config: Optional[ValidatorConfig] = None,
    ) -> "TeamValidator":
        return cls(SetValidator(resolver, hooks=hooks, config=config), config=config)

    def validate(
        self,
        team: Union[Team, Sequence[PokemonSet]],
        format: Union[str, Format, None] = None,
    ) -> List[str]:
        """Return every problem found in ``team``.

        ``format`` defaults to the team's own format name.
        """

        if isinstance(team, Team):
            sets = list(team.sets)
            format = format if format is not None else team.format
        else:
            sets = list(team)
        format = self.set_validator.get_format(format or "")
        if not format.exists:
            return [f"{format.name} is not a valid format."]
        table = self.resolver.resolve(format)

        problems: List[str] = []
        if not sets:
            problems.append("Your team has no Pokémon.")
        max_size = self.config.max_team_size
        if len(sets) > max_size:
            problems.append(f"Your team has more than {_COUNT_WORDS.get(max_size, str(max_size))} Pokémon.")

        nicknames: Set[str] = set()
        species_nums: Set[int] = set()
        formes: Counter = Counter()
        team_has: Counter = Counter()
        abilities: Set[str] = set()
        baton_passers = 0

        for pokemon in sets:
            report = self.set_validator.check(pokemon, format)
            problems.extend(report.problems)
            species = report.species
            if species is None:
                continue

            if table.has(NICKNAME_CLAUSE) and pokemon.name and pokemon.name != species.base_species:
                if pokemon.name in nicknames:
                    problems.append(
                        f"Your Pokémon must have different nicknames (you have more than one {pokemon.name})."
                    )
                nicknames.add(pokemon.name)
            if table.has(SPECIES_CLAUSE):
                if species.num in species_nums:
                    problems.append(
                        "You are limited to one of each Pokémon by Species Clause "
                        f"(you have more than one {species.base_species})."
                    )
                species_nums.add(species.num)

            group = UNIQUE_FORMES.get(species.name)
            if group:
                formes[group] += 1
            if "move:batonpass" in report.has:
                baton_passers += 1
            abilities.add(to_id(pokemon.ability))
            team_has.update(report.has)

        for group in UNIQUE_FORME_GROUPS:
            if formes[group] > 1:
                problems.append(f"You cannot have more than one {group}.")

        if table.has(BATON_PASS_CLAUSE) and baton_passers > 1:
            problems.append(
                f"Team has {baton_passers} Pokémon with Baton Pass despite Baton Pass Clause's limit of 1."
            )

        if format.id == WEATHER_PAIR_FORMAT:
            for weather, abuser in WEATHER_PAIRS:
                if to_id(weather) in abilities and to_id(abuser) in abilities:
                    problems.append(f"{weather} and {abuser} may not be used on the same team.")

        problems.extend(self._complex_team_ban_problems(table, team_has))
        LOGGER.debug("Team of %d in %s: %d problem(s)", len(sets), format.key, len(problems))
        return problems

    @staticmethod
    def _complex_team_ban_problems(table: RuleTable, team_has: Counter) -> List[str]:
        problems: List[str] = []
        for ban in table.complex_team_bans:
            if ban.unbounded:
                continue
            keys = Ban.from_targets(ban.targets).keys()
            limit = ban.limit.limit  # type: ignore[union-attr]
            by = f" by {ban.source}" if ban.source else ""
            if limit == 0:
                if all(team_has[key] for key in keys):
                    problems.append(f"Your team has the combination of {ban.rule}, which is banned{by}.")
                continue
            count = sum(team_has[key] for key in keys)
            if count > limit:
                problems.append(f"You are limited to {limit} of {ban.rule}{by}.")
        return problems

    def validate_all(self, teams: Mapping[str, Team]) -> Dict[str, List[str]]:
        """Validate several named teams, each against its own format."""

        return {name: self.validate(team) for name, team in teams.items()}


__all__ = ["TeamValidator", "WEATHER_PAIR_FORMAT"]
