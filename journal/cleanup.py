"""Batch recalculation of every fading entry."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from journal.errors import FadeError
from journal.lifecycle import EntryLifecycle, RecalculationResult
from journal.repository import EntryStore, entry_ids


@dataclass
class CleanupReport:
    """Outcome of one cleanup run.

    ``total_processed`` counts every entry the batch attempted, failures
    included; ``failed`` lists the ones that could not be recalculated.
    """

    transformed: List[str] = field(default_factory=list)
    recalculated: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    total_processed: int = 0

    def record(self, entry_id: str, result: Optional[RecalculationResult]):
        if result is None:
            self.failed.append(entry_id)
            return
        if result.transformed:
            self.transformed.append(entry_id)
        if result.rate_changed:
            self.recalculated.append(entry_id)

    def to_dict(self):
        return {
            'message': 'Cleanup completed',
            'fullyFadedEntries': len(self.transformed),
            'recalculatedEntries': len(self.recalculated),
            'totalProcessed': self.total_processed,
            'failedEntries': len(self.failed),
        }


def _recalculate_one(lifecycle: EntryLifecycle, entry_id: str) -> Optional[RecalculationResult]:
    try:
        return lifecycle.recalculate(entry_id)
    except (FadeError, SQLAlchemyError) as exc:
        db.session.rollback()
        current_app.logger.error('Cleanup failed for entry %s: %s', entry_id, exc)
        return None


def _recalculate_in_context(app, lifecycle: EntryLifecycle, entry_id: str) -> Optional[RecalculationResult]:
    # Each worker gets its own app context and therefore its own session.
    with app.app_context():
        return _recalculate_one(lifecycle, entry_id)


def run_cleanup(max_workers: Optional[int] = None, lifecycle: Optional[EntryLifecycle] = None) -> CleanupReport:
    """Recalculate every fading entry and latch the ones that faded out.

    One entry failing is logged and counted; the rest of the batch still runs.
    """
    if max_workers is None:
        max_workers = current_app.config.get('CLEANUP_MAX_WORKERS', 1)
    lifecycle = lifecycle or EntryLifecycle()

    ids = entry_ids(EntryStore().find_many_not_transformed())
    report = CleanupReport(total_processed=len(ids))

    if max_workers <= 1 or len(ids) <= 1:
        for entry_id in ids:
            report.record(entry_id, _recalculate_one(lifecycle, entry_id))
    else:
        app = current_app._get_current_object()
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = pool.map(lambda entry_id: _recalculate_in_context(app, lifecycle, entry_id), ids)
            for entry_id, result in zip(ids, results):
                report.record(entry_id, result)

    current_app.logger.info(
        'Cleanup processed %d entries: %d transformed, %d recalculated, %d failed',
        report.total_processed, len(report.transformed), len(report.recalculated), len(report.failed),
    )
    return report
