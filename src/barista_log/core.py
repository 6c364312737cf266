"""Wiring: choose a coaching capability and open a log workspace."""

import logging
from dataclasses import dataclass

from barista_log.coaching.base import BaseCoach, UnavailableCoach
from barista_log.coaching.session import BaristaCoach
from barista_log.config import AppConfig
from barista_log.preferences import Preferences
from barista_log.store import EntityStore

logger = logging.getLogger(__name__)


def _build_gemini_coach(api_key: str | None, model: str | None) -> BaseCoach:
    from barista_log.coaching.gemini import GeminiCoach

    return GeminiCoach(api_key=api_key, model=model)


def _select_coach(provider: str | None, api_key: str | None, model: str | None = None) -> BaseCoach:
    provider_name = (provider or "gemini").strip().lower()
    if provider_name == "gemini":
        return _build_gemini_coach(api_key, model)
    if provider_name in {"none", "off", "disabled"}:
        return UnavailableCoach()
    raise ValueError(f"Unsupported coach provider: {provider_name}")


@dataclass
class BaristaLog:
    """The store, preferences and coach a front end works with."""

    config: AppConfig
    store: EntityStore
    preferences: Preferences
    coach: BaristaCoach


def open_log(config: AppConfig | None = None, *, capability: BaseCoach | None = None) -> BaristaLog:
    """Open the store and preferences described by ``config``.

    Args:
        config: Settings. Defaults to ``AppConfig.from_env()``.
        capability: Coaching capability. Defaults to the configured provider.
    """
    config = config or AppConfig.from_env()
    store = EntityStore(config.resolved_database_url, echo=config.echo_sql)
    preferences = Preferences(config.resolved_preferences_path)
    if capability is None:
        capability = _select_coach(config.coach_provider, config.gemini_api_key, config.coach_model)
    coach = BaristaCoach(capability, preferences)
    coach.attach(store)
    logger.debug("Opened log at %s", config.resolved_database_url)
    return BaristaLog(config=config, store=store, preferences=preferences, coach=coach)


def reset_all_data(store: EntityStore, preferences: Preferences) -> None:
    """Delete every record, then restore preferences to defaults.

    If the store cannot be cleared the PersistenceError propagates and
    preferences are left as they were.
    """
    store.reset()
    preferences.reset()
    logger.info("All data reset")
