"""barista-log: Record espresso shots, the gear behind them, and get coaching."""

from barista_log.coaching import BaristaCoach, CoachingResult, CoachingState, build_prompt
from barista_log.core import BaristaLog, open_log, reset_all_data
from barista_log.forms import ExtractionDraft
from barista_log.preferences import Preferences
from barista_log.schema import AppTheme, Bean, Brewer, Extraction, Grinder, WeightPrecision, WeightUnit
from barista_log.store import EntityStore, StoreEvent

__version__ = "0.1.0"

__all__ = [
    "AppTheme",
    "BaristaCoach",
    "BaristaLog",
    "Bean",
    "Brewer",
    "CoachingResult",
    "CoachingState",
    "EntityStore",
    "Extraction",
    "ExtractionDraft",
    "Grinder",
    "Preferences",
    "StoreEvent",
    "WeightPrecision",
    "WeightUnit",
    "build_prompt",
    "open_log",
    "reset_all_data",
    "__version__",
]
