"""Custom exception types used across the project."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorDetails:
    """Structured metadata associated with an exception.

    ``format_name`` is the format whose resolution raised, when known.
    """

    code: str
    message: str
    format_name: Optional[str] = None


class ConfigurationError(Exception):
    """Base class for errors caused by broken format or rule configuration.

    These are fatal: they abort whatever triggered rule resolution and are
    never expected for ordinary user supplied sets or teams.
    """

    error_code = "ERR_CONFIGURATION"

    def __init__(self, message: str, *, details: ErrorDetails | None = None) -> None:
        super().__init__(message)
        self.details = details or ErrorDetails(code=self.error_code, message=message)

    @property
    def code(self) -> str:
        return self.details.code

    @property
    def format_name(self) -> Optional[str]:
        return self.details.format_name

    def in_format(self, format_name: str) -> "ConfigurationError":
        """Record the innermost format being resolved; outer formats don't overwrite it."""

        if self.details.format_name is None:
            self.details.format_name = format_name
        return self


__all__ = ["ConfigurationError", "ErrorDetails"]
