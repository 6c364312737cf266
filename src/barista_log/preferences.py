"""User preferences backed by a small JSON file."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

from barista_log.schema import AppTheme, WeightPrecision, WeightUnit

logger = logging.getLogger(__name__)

T = TypeVar("T")

WEIGHT_UNIT = "weight_unit"
WEIGHT_PRECISION = "weight_precision"
THEME = "theme"
DEFAULT_GRINDER_NAME = "default_grinder_name"
DEFAULT_BREWER_NAME = "default_brewer_name"
AI_COACHING_ENABLED = "ai_coaching_enabled"
HAS_ONBOARDED = "has_onboarded"
DEBUG_SHOW_ONBOARDING = "debug_show_onboarding"

DEFAULTS: dict[str, Any] = {
    WEIGHT_UNIT: WeightUnit.GRAMS,
    WEIGHT_PRECISION: WeightPrecision.ONE,
    THEME: AppTheme.SYSTEM,
    DEFAULT_GRINDER_NAME: "",
    DEFAULT_BREWER_NAME: "",
    AI_COACHING_ENABLED: True,
    HAS_ONBOARDED: False,
    DEBUG_SHOW_ONBOARDING: False,
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class Preferences:
    """Key/value settings, loaded on first access and written on every set.

    Stored values that cannot be coerced to the type of the requested default
    are ignored and the default is returned. ``path=None`` keeps everything
    in memory.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path).expanduser() if path is not None else None
        self._values: dict[str, Any] | None = None

    def get(self, key: str, default: T) -> T:
        raw = self._load().get(key)
        if raw is None:
            return default
        try:
            return _coerce(raw, default)
        except (TypeError, ValueError):
            logger.debug("Ignoring stored %s=%r", key, raw)
            return default

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``. Values JSON cannot encode are logged and dropped."""
        values = dict(self._load())
        values[key] = _to_json(value)
        self._commit(values)

    def reset(self) -> None:
        """Restore every recognized key to its default."""
        self._commit({key: _to_json(value) for key, value in DEFAULTS.items()})

    # typed accessors

    @property
    def weight_unit(self) -> WeightUnit:
        return self.get(WEIGHT_UNIT, DEFAULTS[WEIGHT_UNIT])

    @weight_unit.setter
    def weight_unit(self, value: WeightUnit) -> None:
        self.set(WEIGHT_UNIT, WeightUnit(value))

    @property
    def weight_precision(self) -> WeightPrecision:
        return self.get(WEIGHT_PRECISION, DEFAULTS[WEIGHT_PRECISION])

    @weight_precision.setter
    def weight_precision(self, value: WeightPrecision) -> None:
        self.set(WEIGHT_PRECISION, WeightPrecision(value))

    @property
    def theme(self) -> AppTheme:
        return self.get(THEME, DEFAULTS[THEME])

    @theme.setter
    def theme(self, value: AppTheme) -> None:
        self.set(THEME, AppTheme(value))

    @property
    def default_grinder_name(self) -> str:
        return self.get(DEFAULT_GRINDER_NAME, "")

    @default_grinder_name.setter
    def default_grinder_name(self, value: str) -> None:
        self.set(DEFAULT_GRINDER_NAME, value or "")

    @property
    def default_brewer_name(self) -> str:
        return self.get(DEFAULT_BREWER_NAME, "")

    @default_brewer_name.setter
    def default_brewer_name(self, value: str) -> None:
        self.set(DEFAULT_BREWER_NAME, value or "")

    @property
    def ai_coaching_enabled(self) -> bool:
        return self.get(AI_COACHING_ENABLED, True)

    @ai_coaching_enabled.setter
    def ai_coaching_enabled(self, value: bool) -> None:
        self.set(AI_COACHING_ENABLED, bool(value))

    @property
    def has_onboarded(self) -> bool:
        return self.get(HAS_ONBOARDED, False)

    @has_onboarded.setter
    def has_onboarded(self, value: bool) -> None:
        self.set(HAS_ONBOARDED, bool(value))

    @property
    def debug_show_onboarding(self) -> bool:
        return self.get(DEBUG_SHOW_ONBOARDING, False)

    @debug_show_onboarding.setter
    def debug_show_onboarding(self, value: bool) -> None:
        self.set(DEBUG_SHOW_ONBOARDING, bool(value))

    @property
    def should_show_onboarding(self) -> bool:
        return not self.has_onboarded or self.debug_show_onboarding

    def as_dict(self) -> dict[str, Any]:
        return {key: self.get(key, default) for key, default in DEFAULTS.items()}

    # storage

    def _load(self) -> dict[str, Any]:
        if self._values is None:
            self._values = self._read()
        return self._values

    def _read(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw) if raw.strip() else {}
        except (OSError, ValueError) as exc:
            logger.debug("Unreadable preferences at %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _commit(self, values: dict[str, Any]) -> None:
        try:
            text = json.dumps(values, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring preferences that cannot be stored: %s", exc)
            return
        self._values = values
        self._save(text)

    def _save(self, text: str) -> None:
        if self.path is None:
            return
        tmp: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile("w", delete=False, dir=self.path.parent, encoding="utf-8") as tf:
                tmp = Path(tf.name)
                tf.write(text)
            os.replace(tmp, self.path)
            tmp = None
        except OSError as exc:
            logger.warning("Could not write preferences to %s: %s", self.path, exc)
        finally:
            if tmp is not None:
                tmp.unlink(missing_ok=True)


def parse_value(key: str, text: str) -> Any:
    """Convert command-line text to the type stored under a recognized key."""
    if key not in DEFAULTS:
        raise ValueError(f"Unknown preference: {key}")
    return _coerce(text, DEFAULTS[key])


def _coerce(raw: Any, default: T) -> T:
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if isinstance(default, Enum):
        if isinstance(default, int) and isinstance(raw, str):
            raw = int(raw)
        return type(default)(raw)
    if isinstance(default, (int, float, str)):
        if isinstance(raw, bool) and not isinstance(default, str):
            raise TypeError("boolean stored for a numeric preference")
        return type(default)(raw)
    return raw


def _to_json(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value
