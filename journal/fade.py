"""Fade-rate resolution and the opacity decay law.

Two rate formulas exist and are deliberately kept apart:

* default mode scales the fixed base rate by ``0.5 + intensity * 0.5``, so
  every emotion fades faster the more intensely it was felt;
* settings mode uses the user's own base rates, and for the positive
  emotions (JOY, LOVE, HOPE) inverts the relationship with ``2 - intensity``
  so that strong happy memories linger while strong painful ones dissipate.

Opacity is a pure function of elapsed time, the resolved rate and the view
count; persisting it is the lifecycle controller's job.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import current_app

from journal.emotions import DEFAULT_FADE_RATES, POSITIVE_EMOTIONS, EmotionLabel
from journal.errors import SettingsUnavailable
from journal.models import utcnow
from journal.repository import FadeSettingsStore

MIN_FADE_RATE = 0.1
HOURS_PER_FADE_WEEK = 24 * 7
VIEW_PENALTY = 0.05
TRANSFORM_THRESHOLD = 0.05

DEFAULT_MODE = 'default'
SETTINGS_MODE = 'settings'


def _floor(rate: float) -> float:
    return max(MIN_FADE_RATE, rate)


def resolve_default_rate(emotion, intensity: float) -> float:
    base = DEFAULT_FADE_RATES[EmotionLabel.coerce(emotion)]
    return _floor(base * (0.5 + intensity * 0.5))


def resolve_settings_rate(emotion, intensity: float, base: float) -> float:
    if EmotionLabel.coerce(emotion) in POSITIVE_EMOTIONS:
        return _floor(base * (2 - intensity))
    return _floor(base * (0.5 + intensity))


class FadeRateResolver:
    """Resolve an entry's fade rate in either default or settings mode."""

    def __init__(self, mode: str = DEFAULT_MODE, settings_store: Optional[FadeSettingsStore] = None):
        if mode not in (DEFAULT_MODE, SETTINGS_MODE):
            raise ValueError(f'Unknown fade rate mode: {mode}')
        self.mode = mode
        self.settings_store = settings_store or FadeSettingsStore()

    def resolve(self, emotion, intensity: float, user_id: Optional[int] = None) -> float:
        if self.mode == DEFAULT_MODE or user_id is None:
            return resolve_default_rate(emotion, intensity)

        try:
            settings = self.settings_store.get_or_create_default(user_id)
        except SettingsUnavailable as exc:
            current_app.logger.warning('%s; falling back to default fade rates', exc)
            return resolve_default_rate(emotion, intensity)
        return resolve_settings_rate(emotion, intensity, settings.rate_for(emotion))


def current_opacity(fade_start_date: datetime, fade_rate: float, view_count: int,
                    now: Optional[datetime] = None) -> float:
    """Opacity in [0, 1] after the elapsed time and recorded views."""
    if now is None:
        now = utcnow()

    hours_passed = (now - fade_start_date).total_seconds() / 3600.0
    fade_progress = hours_passed / HOURS_PER_FADE_WEEK
    adjusted_fade_progress = fade_progress * fade_rate
    view_penalty = view_count * VIEW_PENALTY

    opacity = 1.0 - adjusted_fade_progress - view_penalty
    return max(0.0, min(1.0, opacity))


def entry_opacity(entry, fade_rate: Optional[float] = None, now: Optional[datetime] = None) -> float:
    rate = entry.fade_rate if fade_rate is None else fade_rate
    return current_opacity(entry.fade_start_date, rate, entry.view_count, now=now)


def should_transform(opacity: float) -> bool:
    return opacity <= TRANSFORM_THRESHOLD
