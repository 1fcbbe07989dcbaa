"""Entry lifecycle: FADING -> TRANSFORMED.

Every mutation is a read, a pure recomputation, and a conditional write that
only lands if the row is still fading and its view count is what we read.
Losing that race means someone else changed the entry in between, so we
re-read and recompute.  Once an entry is transformed the latch never opens
again and every operation returns it untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from flask import current_app

from journal.errors import ConcurrentUpdateError, NotFoundError
from journal.fade import SETTINGS_MODE, FadeRateResolver, current_opacity, entry_opacity, should_transform
from journal.models import DiaryEntry, utcnow
from journal.repository import EntryStore

VIEW_STEP = 1
ACCELERATE_STEP = 5
RATE_CHANGE_TOLERANCE = 0.01
OPACITY_WRITE_TOLERANCE = 0.01


@dataclass
class RecalculationResult:
    entry: DiaryEntry
    transformed: bool = False
    rate_changed: bool = False


def transform_fields(now):
    return {
        'is_fully_faded': True,
        'current_opacity': 0.0,
        'transformed_at': now,
    }


class EntryLifecycle:
    """Applies views, accelerations and recalculations to diary entries."""

    def __init__(self, store: Optional[EntryStore] = None,
                 resolver: Optional[FadeRateResolver] = None,
                 max_retries: Optional[int] = None,
                 clock: Callable = utcnow):
        self.store = store or EntryStore()
        self.resolver = resolver or FadeRateResolver(SETTINGS_MODE)
        self.max_retries = max_retries
        self.clock = clock

    def _retries(self) -> int:
        if self.max_retries is not None:
            return self.max_retries
        return current_app.config.get('FADE_MAX_RETRIES', 3)

    def _load(self, entry_id: str) -> DiaryEntry:
        entry = self.store.find_by_id(entry_id)
        if entry is None:
            raise NotFoundError(f'Entry {entry_id} not found')
        return entry

    def _apply(self, entry_id: str, plan) -> RecalculationResult:
        """Run *plan* against fresh reads until its conditional write lands.

        ``plan(entry, now)`` returns ``(fields, transformed, rate_changed)``;
        ``fields`` may be empty when nothing needs writing.
        """
        attempts = self._retries() + 1
        for _ in range(attempts):
            entry = self._load(entry_id)
            if entry.is_fully_faded:
                return RecalculationResult(entry)

            now = self.clock()
            fields, transformed, rate_changed = plan(entry, now)
            if not fields:
                return RecalculationResult(entry, rate_changed=rate_changed)

            if self.store.conditional_update(entry.id, entry.view_count, fields):
                if transformed:
                    current_app.logger.info('Entry %s faded away and was transformed', entry_id)
                return RecalculationResult(self._load(entry_id), transformed, rate_changed)

            current_app.logger.debug('Entry %s changed under us, retrying', entry_id)

        raise ConcurrentUpdateError(f'Entry {entry_id} kept changing; gave up after {attempts} attempts')

    def _viewed(self, step: int):
        def plan(entry, now):
            view_count = entry.view_count + step
            opacity = current_opacity(entry.fade_start_date, entry.fade_rate, view_count, now=now)
            fields = {
                'view_count': view_count,
                'last_viewed_at': now,
                'current_opacity': opacity,
            }
            if should_transform(opacity):
                fields.update(transform_fields(now))
                return fields, True, False
            return fields, False, False
        return plan

    def view(self, entry_id: str) -> DiaryEntry:
        return self._apply(entry_id, self._viewed(VIEW_STEP)).entry

    def accelerate_fade(self, entry_id: str) -> DiaryEntry:
        return self._apply(entry_id, self._viewed(ACCELERATE_STEP)).entry

    def recalculate(self, entry_id: str) -> RecalculationResult:
        def plan(entry, now):
            fade_rate = self.resolver.resolve(entry.emotion, entry.emotion_score, entry.user_id)
            rate_changed = abs(entry.fade_rate - fade_rate) > RATE_CHANGE_TOLERANCE
            opacity = entry_opacity(entry, fade_rate, now=now)
            fields = {'fade_rate': fade_rate, 'current_opacity': opacity}
            if should_transform(opacity):
                fields.update(transform_fields(now))
                return fields, True, rate_changed
            return fields, False, rate_changed
        return self._apply(entry_id, plan)

    def refresh(self, entry_id: str) -> DiaryEntry:
        """Recompute opacity with the stored rate, writing only meaningful moves."""
        def plan(entry, now):
            opacity = entry_opacity(entry, now=now)
            if should_transform(opacity):
                return transform_fields(now), True, False
            if abs(entry.current_opacity - opacity) > OPACITY_WRITE_TOLERANCE:
                return {'current_opacity': opacity}, False, False
            return {}, False, False

        return self._apply(entry_id, plan).entry
