"""Custom exceptions raised while loading formats and resolving rule tables."""

from __future__ import annotations

from core.errors import ConfigurationError, ErrorDetails


class FormatConfigError(ConfigurationError, ValueError):
    """Raised when static format definitions are malformed."""

    error_code = "ERR_FORMAT_CONFIG"


class UnknownFormatError(ConfigurationError, KeyError):
    """Raised when a format name cannot be resolved."""

    error_code = "ERR_UNKNOWN_FORMAT"

    def __init__(self, name: str) -> None:
        super().__init__(f'Unrecognized format "{name}"')
        self.name = name

    def __str__(self) -> str:
        return self.details.message


class RuleSyntaxError(ConfigurationError, ValueError):
    """Raised when a textual rule cannot be parsed."""

    error_code = "ERR_RULE_SYNTAX"


class UnknownRuleError(RuleSyntaxError):
    error_code = "ERR_UNKNOWN_RULE"

    def __init__(self, rule: str) -> None:
        super().__init__(f'Unrecognized rule "{rule}"')
        self.rule = rule


class AmbiguousBanTargetError(RuleSyntaxError):
    error_code = "ERR_AMBIGUOUS_BAN"

    def __init__(self, target: str, matches: list[str]) -> None:
        super().__init__(
            f'More than one thing matches "{target}"; please use something like '
            f'"-item:metronome" to disambiguate'
        )
        self.target = target
        self.matches = matches


class NoBanTargetMatchError(RuleSyntaxError):
    error_code = "ERR_NO_BAN_MATCH"

    def __init__(self, target: str) -> None:
        super().__init__(f'Nothing matches "{target}"')
        self.target = target


class GeneratedTeamBanError(RuleSyntaxError):
    """Raised when a ban is declared on a format whose teams are generated."""

    error_code = "ERR_GENERATED_TEAM_BAN"

    def __init__(self, format_name: str) -> None:
        message = f"We don't currently support bans in generated teams ({format_name})"
        super().__init__(
            message, details=ErrorDetails(code=self.error_code, message=message, format_name=format_name)
        )


class ExcessiveRecursionError(ConfigurationError, RecursionError):
    error_code = "ERR_EXCESSIVE_RECURSION"


class CyclicFormatReferenceError(ConfigurationError, ValueError):
    """Raised when a format transitively includes itself."""

    error_code = "ERR_CYCLIC_FORMAT"

    def __init__(self, chain: list[str]) -> None:
        super().__init__(f"Cyclic format reference: {' -> '.join(chain)}")
        self.chain = chain


class ConflictingHookError(ConfigurationError, ValueError):
    error_code = "ERR_CONFLICTING_HOOK"


class UnknownHookError(ConfigurationError, KeyError):
    error_code = "ERR_UNKNOWN_HOOK"

    def __init__(self, hook: str) -> None:
        super().__init__(f"Legality check '{hook}' is not registered")
        self.hook = hook

    def __str__(self) -> str:
        return self.details.message


class DuplicateCustomRulesError(ConfigurationError, ValueError):
    error_code = "ERR_DUPLICATE_CUSTOM_RULES"

    def __init__(self) -> None:
        super().__init__("The format already has your custom rules")


__all__ = [
    "AmbiguousBanTargetError",
    "ConflictingHookError",
    "CyclicFormatReferenceError",
    "DuplicateCustomRulesError",
    "ExcessiveRecursionError",
    "FormatConfigError",
    "GeneratedTeamBanError",
    "NoBanTargetMatchError",
    "RuleSyntaxError",
    "UnknownFormatError",
    "UnknownHookError",
    "UnknownRuleError",
]
