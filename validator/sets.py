"""Legality checks for a single Pokémon set against a format's rule table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Union

from core.config import ValidatorConfig
from core.dex import Ability, Dex, Item, Move, Species
from core.ids import to_id
from core.sets import PokemonSet
from core.stats import (
    HIDDEN_POWER_TYPES,
    STAT_LABELS,
    STAT_NAMES,
    expected_hp_dv,
    gen2_shiny_from_ivs,
    get_type,
    hidden_power_type,
    iv_to_dv,
)
from rules.engine import RuleTableResolver
from rules.errors import UnknownHookError
from rules.loader import CUSTOM_RULES_SEPARATOR
from rules.schema import ComplexBan, Format
from rules.table import Ban, RuleTable

from .checks import (
    ABILITY_CLAUSES,
    ALLOW_CAP,
    BATON_PASS_CLAUSE,
    LITTLE_CUP,
    MOVE_CLAUSES,
    OHKO_CLAUSE,
    can_pass_speed_and_other,
    gen2_gender_threshold,
    has_sleep_trap,
    is_legendary,
)

LOGGER = logging.getLogger(__name__)

# Called once per resolvable move; returns a problem or ``None``.
MoveLegalityCheck = Callable[[Move, PokemonSet, Format, Dex], Optional[str]]

HIDDEN_POWER_ID = "hiddenpower"


@dataclass
class SetReport:
    """Problems found for one set plus the feature keys it was checked with."""

    problems: List[str] = field(default_factory=list)
    has: FrozenSet[str] = frozenset()
    species: Optional[Species] = None

    @property
    def valid(self) -> bool:
        return not self.problems

    def to_payload(self) -> Dict[str, object]:
        return {
            "problems": list(self.problems),
            "has": sorted(self.has),
            "species": self.species.name if self.species is not None else None,
        }


@dataclass
class _SetContext:
    """Working state shared by the individual checks of one validation."""

    pokemon: PokemonSet
    format: Format
    table: RuleTable
    dex: Dex
    species: Species
    level: int
    problems: List[str] = field(default_factory=list)
    has: Set[str] = field(default_factory=set)
    item: Optional[Item] = None
    ability: Optional[Ability] = None
    moves: Dict[str, Move] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.pokemon.display_name

    @property
    def gen(self) -> int:
        return self.dex.gen

    @property
    def allow_cap(self) -> bool:
        return self.table.has(ALLOW_CAP)

    def add(self, problem: str) -> None:
        self.problems.append(problem)


class SetValidator:
    """Validates individual sets; shares the resolver's rule table cache."""

    def __init__(
        self,
        resolver: RuleTableResolver,
        *,
        hooks: Optional[Mapping[str, MoveLegalityCheck]] = None,
        config: Optional[ValidatorConfig] = None,
    ) -> None:
        self.resolver = resolver
        self.registry = resolver.registry
        self.config = config or resolver.config
        self._hooks: Dict[str, MoveLegalityCheck] = dict(hooks or {})

    def register_hook(self, name: str, check: MoveLegalityCheck) -> None:
        self._hooks[name] = check

    def get_format(self, format: Union[str, Format]) -> Format:
        """Resolve a format name, validating any ``@@@`` custom rules first."""

        if isinstance(format, Format):
            return format
        if CUSTOM_RULES_SEPARATOR in format and self.registry.get_format(format).exists:
            format = self.resolver.validate_format(format)
        return self.registry.get_format(format)

    def validate(self, pokemon: PokemonSet, format: Union[str, Format]) -> List[str]:
        return self.check(pokemon, format).problems

    def check(self, pokemon: PokemonSet, format: Union[str, Format]) -> SetReport:
        format = self.get_format(format)
        if not format.exists:
            return SetReport([f"{format.name} is not a valid format."])
        table = self.resolver.resolve(format)
        hook = self._hook_for(table)
        dex = self.registry.dex_for(format)

        species = dex.get_species(pokemon.species)
        if species is None:
            return SetReport([f"{pokemon.species} is not a valid species for generation {dex.gen}."])

        level = pokemon.level if pokemon.level is not None else format.default_level
        ctx = _SetContext(pokemon=pokemon, format=format, table=table, dex=dex, species=species, level=level)

        self._check_species(ctx)
        self._check_item(ctx)
        self._check_ability(ctx)
        self._check_level(ctx)
        self._check_gender(ctx)
        self._check_ivs(ctx)
        self._check_evs(ctx)
        self._check_nature(ctx)
        self._check_moves(ctx, hook)
        self._check_hidden_power(ctx)
        self._check_forme(ctx)
        self._check_complex_bans(ctx)

        LOGGER.debug("%s in %s: %d problem(s)", ctx.name, format.key, len(ctx.problems))
        return SetReport(ctx.problems, frozenset(ctx.has), species)

    # ------------------------------------------------------------------ helpers
    def _hook_for(self, table: RuleTable) -> Optional[MoveLegalityCheck]:
        if table.check_learnset is None:
            return None
        hook = self._hooks.get(table.check_learnset.name)
        if hook is None:
            raise UnknownHookError(table.check_learnset.name)
        return hook

    @staticmethod
    def species_ban_reason(species: Species, table: RuleTable) -> str:
        """Why ``species`` is banned, checking the most specific key first.

        An explicit ``+`` unban of a more specific key shields the species from
        the broader ones (``+pokemon:x`` beats ``-pokemontag:uber``).
        """

        keys = [f"pokemon:{species.id}", f"basespecies:{to_id(species.base_species)}"]
        if to_id(species.tier):
            keys.append(f"pokemontag:{to_id(species.tier)}")
        if species.is_mega:
            keys.append("pokemontag:mega")
        for key in keys:
            reason = table.check(key)
            if reason:
                return reason
            if table.has(f"+{key}"):
                return ""
        return ""

    def _check_species(self, ctx: _SetContext) -> None:
        species = ctx.species
        ctx.has.add(f"pokemon:{species.id}")
        ctx.has.add(f"basespecies:{to_id(species.base_species)}")
        if to_id(species.tier):
            ctx.has.add(f"pokemontag:{to_id(species.tier)}")
        if species.is_mega:
            ctx.has.add("pokemontag:mega")

        reason = self.species_ban_reason(species, ctx.table)
        if reason:
            ctx.add(f"{species.name} is {reason}.")

        if species.tier == "Illegal" and ctx.table.has("-illegal"):
            ctx.add(f"{ctx.name} does not exist outside of generation {species.gen}.")
        elif species.tier == "Unreleased" and ctx.table.has("-unreleased"):
            ctx.add(f"{ctx.name} is unreleased in generation {ctx.gen}.")
        if species.is_nonstandard and not ctx.allow_cap:
            ctx.add(f"{species.name} does not exist.")

    def _check_item(self, ctx: _SetContext) -> None:
        raw = ctx.pokemon.item
        if not raw:
            return
        if ctx.gen < 2:
            ctx.add(f"Held items do not exist in generation {ctx.gen} ({ctx.name} has item {raw}).")
            return
        item = ctx.dex.get_item(raw)
        if item is None:
            ctx.add(f"{raw} is not a valid item for generation {ctx.gen}.")
            return
        ctx.item = item
        ctx.has.add(f"item:{item.id}")

        reason = ctx.table.check(f"item:{item.id}")
        if reason:
            ctx.add(f"{ctx.name}'s item {item.name} is {reason}.")
        if item.is_nonstandard and not ctx.allow_cap:
            ctx.add(f"{item.name} does not exist.")
        if ctx.gen == 4 and item.id == "griseousorb" and ctx.species.num != 487:
            ctx.add("Griseous Orb can only be held by Giratina in generation 4.")

    def _check_ability(self, ctx: _SetContext) -> None:
        raw = ctx.pokemon.ability
        if ctx.gen < 3:
            if raw:
                ctx.add(f"Abilities do not exist in generation {ctx.gen} ({ctx.name} has ability {raw}).")
            return
        if not raw:
            ctx.add(f"{ctx.name} needs to have an ability.")
            return
        ability = ctx.dex.get_ability(raw)
        if ability is None:
            ctx.add(f"{raw} is not a valid ability for generation {ctx.gen}.")
            return
        ctx.ability = ability
        ctx.has.add(f"ability:{ability.id}")

        reason = ctx.table.check(f"ability:{ability.id}")
        if reason:
            ctx.add(f"{ctx.name}'s ability {ability.name} is {reason}.")
        else:
            for rule, label, ban in ABILITY_CLAUSES:
                if ctx.table.has(rule) and ban.bans_ability(ability.id):
                    ctx.add(f"{ability.name} is banned by {label}.")
        if ability.is_nonstandard and not ctx.allow_cap:
            ctx.add(f"{ability.name} does not exist.")

        species = ctx.species
        if ability.id not in {to_id(name) for name in species.abilities.values()}:
            ctx.add(f"{ctx.name} can't have {ability.name}.")
        if ability.id == "battlebond" and species.id == "greninja" and ctx.pokemon.gender != "M":
            ctx.add(f"{ctx.name} must be male to have Battle Bond.")
        if species.hidden_ability and ability.id == to_id(species.hidden_ability):
            self._check_hidden_ability(ctx, ability)

    @staticmethod
    def _check_hidden_ability(ctx: _SetContext, ability: Ability) -> None:
        species = ctx.species
        if species.unreleased_hidden and ctx.table.has("-unreleased"):
            ctx.add(f"{ctx.name}'s hidden ability is unreleased.")
        elif ctx.gen == 6 and ability.id == "symbiosis" and species.name.endswith(("Orange", "White")):
            ctx.add(f"{ctx.name}'s hidden ability is unreleased for the Orange and White forms.")
        elif ctx.gen == 5 and ctx.level < 10 and (species.male_only_hidden or species.gender == "N"):
            ctx.add(f"{ctx.name} must be at least level 10 with its hidden ability.")
        if species.male_only_hidden and ctx.pokemon.gender and ctx.pokemon.gender != "M":
            ctx.add(f"{ctx.name} must be male to have its hidden ability.")

    def _check_level(self, ctx: _SetContext) -> None:
        level = ctx.level
        if level < 1:
            ctx.add(f"{ctx.name} must be at least level 1.")
        if ctx.table.has(LITTLE_CUP):
            if ctx.species.prevo:
                ctx.add(f"{ctx.name} isn't the first in its evolution family.")
            elif not ctx.species.nfe:
                ctx.add(f"{ctx.name} doesn't have an evolution family.")
            if level > self.config.little_cup_level:
                ctx.add(f"{ctx.name} must be level {self.config.little_cup_level} or under in Little Cup.")
        elif level > ctx.format.max_level:
            ctx.add(f"{ctx.name} is higher than level {ctx.format.max_level}.")

    @staticmethod
    def _check_gender(ctx: _SetContext) -> None:
        gender = ctx.pokemon.gender
        if not gender:
            return
        species = ctx.species
        if species.gender:
            if gender != species.gender:
                ctx.add(f"{ctx.name} is the wrong gender for its species ({gender} vs. {species.gender}).")
            return
        if gender == "N":
            ctx.add(f"{ctx.name} can't be genderless.")
            return
        if ctx.gen == 2:
            atk_dv = iv_to_dv(ctx.pokemon.ivs["atk"])
            expected = "M" if atk_dv >= gen2_gender_threshold(species) else "F"
            if gender != expected:
                ctx.add(
                    f"{ctx.name} is {gender}, but it has an Atk DV of {atk_dv}, "
                    f"which makes its gender {expected}."
                )

    def _check_ivs(self, ctx: _SetContext) -> None:
        ivs = ctx.pokemon.ivs
        max_iv = self.config.max_iv
        for stat in STAT_NAMES:
            if not 0 <= ivs[stat] <= max_iv:
                ctx.add(
                    f"{ctx.name} has an invalid {STAT_LABELS[stat]} IV ({ivs[stat]}); "
                    f"IVs must be between 0 and {max_iv}."
                )

        if ctx.gen >= 6 and is_legendary(ctx.species, ctx.pokemon.shiny):
            perfect = sum(1 for stat in STAT_NAMES if ivs[stat] >= max_iv)
            if perfect < 3:
                ctx.add(
                    f"{ctx.name} must have at least three perfect IVs because it's a legendary "
                    f"in generation {ctx.gen}."
                )

        if ctx.gen >= 3:
            return
        if ivs["spa"] != ivs["spd"]:
            ctx.add(
                f"Before generation 3, SpA and SpD IVs must match "
                f"({ctx.name} has {ivs['spa']} SpA and {ivs['spd']} SpD IVs)."
            )
        if ctx.gen == 2:
            hp_dv = iv_to_dv(ivs["hp"])
            expected_hp = expected_hp_dv(ivs)
            if hp_dv != expected_hp:
                ctx.add(
                    f"{ctx.name} has an HP DV of {hp_dv}, but its Atk, Def, Spe and Spc DVs "
                    f"give it an HP DV of {expected_hp}."
                )
            if gen2_shiny_from_ivs(ivs) != ctx.pokemon.shiny:
                shiny = "shiny" if ctx.pokemon.shiny else "not shiny"
                ctx.add(f"{ctx.name} is {shiny}, which does not match its DVs.")

    def _check_evs(self, ctx: _SetContext) -> None:
        evs = ctx.pokemon.evs
        max_ev = self.config.max_ev
        for stat in STAT_NAMES:
            if not 0 <= evs[stat] <= max_ev:
                ctx.add(
                    f"{ctx.name} has an invalid {STAT_LABELS[stat]} EV ({evs[stat]}); "
                    f"EVs must be between 0 and {max_ev}."
                )
        if ctx.gen >= 3:
            total = sum(evs[stat] for stat in STAT_NAMES)
            if total > self.config.max_total_evs:
                ctx.add(f"{ctx.name} has more than {self.config.max_total_evs} total EVs.")
        elif evs["spa"] != evs["spd"]:
            ctx.add(
                f"Before generation 3, SpA and SpD EVs must match "
                f"({ctx.name} has {evs['spa']} SpA and {evs['spd']} SpD EVs)."
            )

    @staticmethod
    def _check_nature(ctx: _SetContext) -> None:
        raw = ctx.pokemon.nature
        nature = ctx.dex.get_nature(raw)
        if ctx.gen < 3:
            if nature:
                ctx.add(f"Natures do not exist in generation {ctx.gen} ({ctx.name} has {nature}).")
            return
        if not raw:
            ctx.add(f"{ctx.name} requires a nature in generation {ctx.gen}.")
        elif nature is None:
            ctx.add(f"{raw} is not a valid nature in generation {ctx.gen}.")

    def _check_moves(self, ctx: _SetContext, hook: Optional[MoveLegalityCheck]) -> None:
        raw_moves: Sequence[str] = ctx.pokemon.moves
        if not raw_moves:
            ctx.add(f"{ctx.name} must have at least one move.")
            return
        if len(raw_moves) > self.config.max_moves:
            ctx.add(f"{ctx.name} has more than {self.config.max_moves} moves.")

        table = ctx.table
        for raw in raw_moves:
            move = ctx.dex.get_move(raw)
            if move is None:
                ctx.add(f"{raw} is not a valid move for generation {ctx.gen}.")
                continue
            if move.id in ctx.moves:
                ctx.add(f"{ctx.name} may not have duplicate moves ({move.name} is duplicated).")
                continue
            ctx.moves[move.id] = move
            ctx.has.add(f"move:{move.id}")

            if hook is not None:
                problem = hook(move, ctx.pokemon, ctx.format, ctx.dex)
                if problem:
                    ctx.add(problem)
            if move.is_nonstandard and not ctx.allow_cap:
                ctx.add(f"{move.name} does not exist.")
                continue
            reason = table.check(f"move:{move.id}")
            if reason:
                ctx.add(f"{ctx.name}'s move {move.name} is {reason}.")
                continue
            if table.has(OHKO_CLAUSE) and move.ohko:
                ctx.add(f"{move.name} is banned by OHKO Clause.")
                continue
            for rule, label, ban in MOVE_CLAUSES:
                if table.has(rule) and ban.bans_move(move.id):
                    ctx.add(f"{move.name} is banned by {label}.")
                    break

        if ctx.gen == 2 and has_sleep_trap(ctx.moves):
            ctx.add(
                f"{ctx.name} has both a sleeping and a trapping move, "
                f"a combination which is banned in generation 2."
            )
        if (
            table.has(BATON_PASS_CLAUSE)
            and "batonpass" in ctx.moves
            and can_pass_speed_and_other(ctx.moves.values(), to_id(ctx.pokemon.ability), ctx.item)
        ):
            ctx.add(
                f"{ctx.name} can Baton Pass both Speed and a different stat, "
                f"which is banned by Baton Pass Clause."
            )

    def _check_hidden_power(self, ctx: _SetContext) -> None:
        declared: Optional[str] = None
        if ctx.pokemon.hp_type:
            declared = get_type(ctx.pokemon.hp_type)
            if declared not in HIDDEN_POWER_TYPES:
                ctx.add(f"{ctx.name}'s Hidden Power type ({ctx.pokemon.hp_type}) is invalid.")
                declared = None

        hidden_powers = [move for move in ctx.moves.values() if move.id.startswith(HIDDEN_POWER_ID)]
        if not hidden_powers:
            return
        typed = [move.type for move in hidden_powers if move.id != HIDDEN_POWER_ID]
        move_type = typed[0] if typed else None
        if move_type and declared and move_type != declared:
            ctx.add(f"{ctx.name}'s Hidden Power type ({declared}) does not match its move (Hidden Power {move_type}).")

        hp_type = move_type or declared
        if hp_type is None:
            return
        if not (ctx.gen >= 7 and ctx.level == 100):
            iv_type = hidden_power_type(ctx.pokemon.ivs, ctx.gen)
            if iv_type != hp_type:
                ctx.add(f"{ctx.name} has Hidden Power {hp_type}, but its IVs are for Hidden Power {iv_type}.")
        if ctx.gen >= 6 and hp_type == "Fighting" and is_legendary(ctx.species, ctx.pokemon.shiny):
            ctx.add(
                f"{ctx.name} can't have Hidden Power Fighting because it must have "
                f"at least three perfect IVs as a legendary."
            )

    @staticmethod
    def _check_forme(ctx: _SetContext) -> None:
        species = ctx.species
        item_name = ctx.item.name if ctx.item is not None else ""
        required_items = " or ".join(species.required_items)
        if len(species.required_items) > 1:
            required_items = f"either {required_items}"

        if species.battle_only:
            if species.required_ability and to_id(ctx.pokemon.ability) != to_id(species.required_ability):
                ctx.add(f"{species.name} transforms in-battle with {species.required_ability}.")
            if species.required_items and item_name not in species.required_items:
                ctx.add(f"{species.name} transforms in-battle with {required_items}.")
            if species.required_move and to_id(species.required_move) not in ctx.moves:
                ctx.add(f"{species.name} transforms in-battle with {species.required_move}.")
            return

        if species.required_ability and to_id(ctx.pokemon.ability) != to_id(species.required_ability):
            ctx.add(f"{ctx.name} needs the ability {species.required_ability}.")
        if species.required_items and item_name not in species.required_items:
            ctx.add(f"{ctx.name} needs to hold {required_items}.")
        if species.required_move and to_id(species.required_move) not in ctx.moves:
            ctx.add(f"{ctx.name} needs to have the move {species.required_move}.")

    @staticmethod
    def _check_complex_bans(ctx: _SetContext) -> None:
        for ban in ctx.table.complex_bans:
            if ban.unbounded:
                continue
            targets = Ban.from_targets(ban.targets)
            limit = ban.limit.limit  # type: ignore[union-attr]
            if limit == 0:
                if targets.matches(ctx.has):
                    ctx.add(f"{ctx.name} has the combination of {ban.rule}, which is {_banned_by(ban)}.")
            elif targets.count(ctx.has) > limit:
                by = f" by {ban.source}" if ban.source else ""
                ctx.add(f"{ctx.name} is limited to {limit} of {ban.rule}{by}.")


def _banned_by(ban: ComplexBan) -> str:
    return f"banned by {ban.source}" if ban.source else "banned"


__all__ = ["MoveLegalityCheck", "SetReport", "SetValidator"]
