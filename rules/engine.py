"""Resolution of a format's transitive rules into a flat :class:`RuleTable`."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple, Union

from core.config import ValidatorConfig
from core.errors import ConfigurationError

from .errors import (
    ConflictingHookError,
    CyclicFormatReferenceError,
    DuplicateCustomRulesError,
    ExcessiveRecursionError,
    UnknownFormatError,
)
from .loader import CUSTOM_RULES_SEPARATOR, FormatRegistry
from .parser import RuleParser
from .schema import BanRule, ComplexBan, ComplexTeamBan, Format, SimpleRule
from .table import LegalityHook, RuleTable

LOGGER = logging.getLogger(__name__)

_CUSTOM_RULE_NOISE = re.compile(r"[\r\n|]")


class RuleTableResolver:
    """Computes and memoises rule tables.

    Tables are cached by :attr:`Format.key`.  Entries are computed outside of
    any lock and stored with ``setdefault`` so concurrent callers resolving the
    same format end up sharing whichever equivalent table landed first.
    """

    def __init__(
        self,
        registry: FormatRegistry,
        *,
        parser: Optional[RuleParser] = None,
        config: Optional[ValidatorConfig] = None,
    ) -> None:
        self.registry = registry
        self.parser = parser or RuleParser(registry)
        self.config = config or registry.config
        self._cache: Dict[str, RuleTable] = {}

    def resolve(self, format: Union[str, Format], depth: int = 0) -> RuleTable:
        """Return the rule table of ``format`` (a descriptor or a name)."""

        if isinstance(format, str):
            format = self.registry.get_format(format)
        return self._resolve(format, depth, ())

    def clear(self) -> None:
        self._cache.clear()

    def validate_format(self, name: str) -> str:
        """Check ``name`` (optionally ``name@@@rule1,rule2``) and return its key.

        Custom rules already present in the base table are dropped; raises
        :class:`DuplicateCustomRulesError` when nothing is left.
        """

        base_name, separator, custom_string = name.partition(CUSTOM_RULES_SEPARATOR)
        format = self.registry.get_format(base_name)
        if not format.exists:
            raise UnknownFormatError(base_name)
        if not separator:
            return format.id

        table = self.resolve(format)
        custom_rules: List[str] = []
        for raw_rule in custom_string.split(","):
            rule = _CUSTOM_RULE_NOISE.sub("", raw_rule).strip()
            if not rule:
                continue
            spec = self.parser.parse(rule, format)
            if isinstance(spec, (SimpleRule, BanRule)) and table.has(spec.key):
                LOGGER.debug("Custom rule %r already in effect for %s", rule, format.id)
                continue
            custom_rules.append(rule)
        if not custom_rules:
            raise DuplicateCustomRulesError()

        derived = self.registry.with_custom_rules(format, custom_rules)
        self.resolve(derived)
        return derived.key

    # ------------------------------------------------------------------ helpers
    def _resolve(self, format: Format, depth: int, stack: Tuple[str, ...]) -> RuleTable:
        cached = self._cache.get(format.key)
        if cached is not None:
            return cached
        try:
            table = self._build(format, depth, stack + (format.key,))
        except ConfigurationError as exc:
            raise exc.in_format(format.name)

        stored = self._cache.setdefault(format.key, table)
        LOGGER.debug(
            "Resolved %s: %d rules, %d complex bans, %d team bans",
            format.key,
            len(stored),
            len(stored.complex_bans),
            len(stored.complex_team_bans),
        )
        return stored

    def _build(self, format: Format, depth: int, stack: Tuple[str, ...]) -> RuleTable:
        table = RuleTable()
        if format.check_learnset:
            table.check_learnset = LegalityHook(format.check_learnset, format.name)

        for rule in self._working_rules(format):
            spec = self.parser.parse(rule, format)
            if isinstance(spec, ComplexTeamBan):
                table.add_complex_team_ban(spec)
                continue
            if isinstance(spec, ComplexBan):
                table.add_complex_ban(spec)
                continue
            if isinstance(spec, BanRule):
                if spec.prefix == "+":
                    table.delete(f"-{spec.target}")
                table.set(spec.key, "")
                continue
            if spec.suppressed:
                table.set(spec.key, "")
                continue

            subformat = self.registry.get_format(spec.rule_id)
            suppression = table.get(f"!{subformat.id}")
            if suppression == "":
                continue
            if suppression is not None:
                table.delete(f"!{subformat.id}")
            table.set(subformat.id, "")
            if not subformat.exists:
                continue
            if subformat.key in stack:
                raise CyclicFormatReferenceError([*stack, subformat.key])
            if depth > self.config.max_rule_depth:
                raise ExcessiveRecursionError(
                    f"Excessive ruleTable recursion in {format.name}: {rule} of {list(format.ruleset)}"
                )
            subtable = self._resolve(subformat, depth + 1, stack)
            self._inherit(table, subtable, subformat, format)
        return table

    @staticmethod
    def _working_rules(format: Format) -> List[str]:
        rules = list(format.ruleset)
        rules.extend(f"-{ban}" for ban in format.banlist)
        rules.extend(f"+{unban}" for unban in format.unbanlist)
        for rule in format.custom_rules or ():
            if rule.startswith("!"):
                rules.insert(0, rule)
            else:
                rules.append(rule)
        return rules

    @staticmethod
    def _inherit(table: RuleTable, subtable: RuleTable, subformat: Format, format: Format) -> None:
        for key, source in subtable.items():
            if table.has(f"!{key}") or table.has(key):
                continue
            # a sub-format's suppression never removes a rule declared here
            if key.startswith("!") and table.get(key[1:]) == "":
                continue
            table.set(key, source or subformat.name)

        for ban in subtable.complex_bans:
            table.add_complex_ban(ban if ban.source else ban.with_source(subformat.name))
        for team_ban in subtable.complex_team_bans:
            table.add_complex_team_ban(team_ban if team_ban.source else team_ban.with_source(subformat.name))

        inherited = subtable.check_learnset
        if inherited is None:
            return
        current = table.check_learnset
        if current is None:
            table.check_learnset = inherited
        elif current.name != inherited.name:
            raise ConflictingHookError(
                f'"{format.name}" has conflicting move validation rules from '
                f'"{current.source}" and "{inherited.source}"'
            )


__all__ = ["RuleTableResolver"]
