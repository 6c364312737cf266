"""Coaching for barista-log."""

from barista_log.coaching.base import BaseCoach, UnavailableCoach
from barista_log.coaching.prompt import COACH_INSTRUCTIONS, build_prompt
from barista_log.coaching.session import BaristaCoach, CoachingResult, CoachingState

__all__ = [
    "BaseCoach",
    "BaristaCoach",
    "COACH_INSTRUCTIONS",
    "CoachingResult",
    "CoachingState",
    "UnavailableCoach",
    "build_prompt",
]
