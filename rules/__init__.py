"""Public package interface for format loading and rule resolution."""

from .engine import RuleTableResolver
from .errors import (
    AmbiguousBanTargetError,
    ConflictingHookError,
    CyclicFormatReferenceError,
    DuplicateCustomRulesError,
    ExcessiveRecursionError,
    FormatConfigError,
    GeneratedTeamBanError,
    NoBanTargetMatchError,
    RuleSyntaxError,
    UnknownFormatError,
    UnknownHookError,
    UnknownRuleError,
)
from .loader import FormatRegistry, load_default_formats
from .parser import RuleParser
from .schema import (
    Allowed,
    BanRule,
    ComplexBan,
    ComplexTeamBan,
    Forbidden,
    Format,
    FormatRecord,
    RuleSpec,
    SimpleRule,
)
from .table import Ban, LegalityHook, RuleTable

__all__ = [
    "Allowed",
    "AmbiguousBanTargetError",
    "Ban",
    "BanRule",
    "ComplexBan",
    "ComplexTeamBan",
    "ConflictingHookError",
    "CyclicFormatReferenceError",
    "DuplicateCustomRulesError",
    "ExcessiveRecursionError",
    "Forbidden",
    "Format",
    "FormatConfigError",
    "FormatRecord",
    "FormatRegistry",
    "GeneratedTeamBanError",
    "LegalityHook",
    "NoBanTargetMatchError",
    "RuleParser",
    "RuleSpec",
    "RuleSyntaxError",
    "RuleTable",
    "RuleTableResolver",
    "SimpleRule",
    "UnknownFormatError",
    "UnknownHookError",
    "UnknownRuleError",
    "load_default_formats",
]
