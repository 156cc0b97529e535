"""Set and team validators."""

from .sets import MoveLegalityCheck, SetReport, SetValidator
from .teams import TeamValidator

__all__ = ["MoveLegalityCheck", "SetReport", "SetValidator", "TeamValidator"]
