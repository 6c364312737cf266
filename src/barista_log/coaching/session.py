"""Per-extraction coaching state around a text-generation capability."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from barista_log.coaching.base import BaseCoach
from barista_log.coaching.prompt import COACH_INSTRUCTIONS, build_prompt
from barista_log.exceptions import AnalysisFailure, CapabilityUnavailableError
from barista_log.preferences import Preferences
from barista_log.schema import Extraction
from barista_log.store import EntityStore, StoreEvent

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "Could not analyze"


class CoachingState(str, Enum):
    DISABLED = "disabled"
    UNAVAILABLE = "unavailable"
    IDLE = "idle"
    ANALYZING = "analyzing"
    READY = "ready"
    FAILED = "failed"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class CoachingResult:
    extraction_id: str
    state: CoachingState
    summary: str | None = None
    error: str | None = None


class BaristaCoach:
    """Runs coaching requests and keeps their results in memory.

    Results are keyed by extraction identity and never persisted. Only one
    request per extraction is meaningful: asking again while a request is
    outstanding, or after a summary exists, returns the current state. When
    an extraction is deleted while its request is outstanding, the eventual
    result is discarded.
    """

    def __init__(
        self,
        capability: BaseCoach,
        preferences: Preferences | None = None,
        *,
        instructions: str = COACH_INSTRUCTIONS,
    ):
        self.capability = capability
        self.preferences = preferences
        self.instructions = instructions
        self._results: dict[str, CoachingResult] = {}
        self._pending: dict[str, object] = {}

    @property
    def enabled(self) -> bool:
        return self.preferences.ai_coaching_enabled if self.preferences is not None else True

    def is_available(self) -> bool:
        return self.capability.is_available()

    def attach(self, store: EntityStore) -> Callable[[], None]:
        """Drop state for extractions as they are deleted from ``store``."""
        return store.subscribe(self._on_store_event)

    def status(self, extraction_id: str) -> CoachingResult:
        if not self.enabled:
            return CoachingResult(extraction_id, CoachingState.DISABLED)
        if not self.is_available():
            return CoachingResult(extraction_id, CoachingState.UNAVAILABLE)
        if extraction_id in self._pending:
            return CoachingResult(extraction_id, CoachingState.ANALYZING)
        return self._results.get(extraction_id) or CoachingResult(extraction_id, CoachingState.IDLE)

    async def analyze(self, target: Extraction, history: Iterable[Extraction] = ()) -> CoachingResult:
        """Request coaching for ``target`` using same-bean ``history`` as context."""
        if target.id is None:
            raise ValueError("extraction must be saved before it can be analyzed")

        extraction_id = target.id
        current = self.status(extraction_id)
        if current.state not in (CoachingState.IDLE, CoachingState.FAILED):
            return current

        token = object()
        self._pending[extraction_id] = token
        self._results.pop(extraction_id, None)
        prompt = build_prompt(target, history)
        logger.debug("Coaching prompt for %s:\n%s", extraction_id, prompt)

        try:
            summary = await asyncio.to_thread(self.capability.generate, self.instructions, prompt)
        except CapabilityUnavailableError:
            outcome = CoachingResult(extraction_id, CoachingState.UNAVAILABLE)
        except AnalysisFailure as exc:
            logger.warning("Coaching failed for %s: %s", extraction_id, exc)
            outcome = CoachingResult(extraction_id, CoachingState.FAILED, error=ANALYSIS_FAILED_MESSAGE)
        except Exception:
            logger.exception("Coaching capability raised unexpectedly for %s", extraction_id)
            outcome = CoachingResult(extraction_id, CoachingState.FAILED, error=ANALYSIS_FAILED_MESSAGE)
        else:
            outcome = CoachingResult(extraction_id, CoachingState.READY, summary=summary)

        if self._pending.get(extraction_id) is not token:
            logger.info("Discarding coaching result for removed extraction %s", extraction_id)
            return CoachingResult(extraction_id, CoachingState.DISCARDED)

        del self._pending[extraction_id]
        if outcome.state is not CoachingState.UNAVAILABLE:
            self._results[extraction_id] = outcome
        return outcome

    def clear(self, extraction_id: str) -> None:
        """Forget the stored result so the next ``analyze`` runs again."""
        self._results.pop(extraction_id, None)

    def _forget(self, extraction_id: str) -> None:
        self._pending.pop(extraction_id, None)
        self._results.pop(extraction_id, None)

    def _on_store_event(self, event: StoreEvent) -> None:
        if event.action == "reset":
            self._pending.clear()
            self._results.clear()
        elif event.action == "deleted" and event.identity is not None:
            self._forget(event.identity)
