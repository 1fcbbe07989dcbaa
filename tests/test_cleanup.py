"""
Unit tests for the batch cleanup.
"""
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app import create_app
from app.extensions import db
from auth.models import User
from journal.cleanup import run_cleanup
from journal.emotions import EmotionLabel
from journal.errors import PersistenceError
from journal.lifecycle import EntryLifecycle
from journal.models import DiaryEntry, FadeSettings, utcnow
from journal.repository import EntryStore


class BrokenForOne(EntryLifecycle):
    """Fails the store write for a single entry."""

    def __init__(self, broken_id):
        super().__init__()
        self.broken_id = broken_id

    def recalculate(self, entry_id):
        if entry_id == self.broken_id:
            raise PersistenceError('disk on fire')
        return super().recalculate(entry_id)


class ReadFailsForOne(EntryStore):
    """Raises a driver error when loading a single entry."""

    def __init__(self, broken_id):
        self.broken_id = broken_id

    def find_by_id(self, entry_id):
        if entry_id == self.broken_id:
            raise OperationalError('SELECT', {}, Exception('disk I/O error'))
        return super().find_by_id(entry_id)


@pytest.fixture()
def file_app(tmp_path):
    """App on a file-backed SQLite database so worker threads share data."""
    app = create_app('testing', {
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{tmp_path / "diary.db"}',
        'CLEANUP_MAX_WORKERS': 4,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


def _seed(app, specs):
    """Insert entries for one user, one per (emotion, score, rate, hours_ago)."""
    with app.app_context():
        user = User.query.filter_by(username='threaded').first()
        if user is None:
            user = User(username='threaded', email='threaded@example.com', password='password123')
            db.session.add(user)
            db.session.commit()
            db.session.add(FadeSettings(user_id=user.id))
        entries = [
            DiaryEntry(
                user_id=user.id,
                content='Some words about today.',
                emotion=emotion,
                emotion_score=score,
                fade_rate=fade_rate,
                fade_start_date=utcnow() - timedelta(hours=hours_ago),
                current_opacity=1.0,
            )
            for emotion, score, fade_rate, hours_ago in specs
        ]
        db.session.add_all(entries)
        db.session.commit()
        return [entry.id for entry in entries]


class TestRunCleanup:

    def test_counts(self, ctx, user, make_entry):
        """Test transformed, recalculated and total counts."""
        make_entry(user.id, emotion=EmotionLabel.ANGER, score=1.0, fade_rate=3.0, hours_ago=200)
        make_entry(user.id, emotion=EmotionLabel.JOY, score=1.0, fade_rate=0.3, hours_ago=1)
        make_entry(user.id, emotion=EmotionLabel.SADNESS, score=0.5, fade_rate=0.75, hours_ago=1)

        report = run_cleanup()

        assert report.total_processed == 3
        assert len(report.transformed) == 1
        # SADNESS at 0.5 resolves to 1.5 in settings mode.
        assert len(report.recalculated) == 1
        assert report.failed == []
        assert DiaryEntry.query.filter_by(is_fully_faded=True).count() == 1

    def test_transformed_entries_are_skipped(self, ctx, user, make_entry):
        make_entry(user.id, emotion=EmotionLabel.ANGER, score=1.0, fade_rate=3.0, hours_ago=200)

        first = run_cleanup()
        second = run_cleanup()

        assert first.to_dict()['fullyFadedEntries'] == 1
        assert second.to_dict() == {
            'message': 'Cleanup completed',
            'fullyFadedEntries': 0,
            'recalculatedEntries': 0,
            'totalProcessed': 0,
            'failedEntries': 0,
        }

    def test_one_failure_does_not_stop_the_batch(self, ctx, user, make_entry):
        broken = make_entry(user.id, emotion=EmotionLabel.ANGER, score=1.0, fade_rate=3.0, hours_ago=200)
        healthy = make_entry(user.id, emotion=EmotionLabel.ANGER, score=1.0, fade_rate=3.0, hours_ago=200)

        report = run_cleanup(max_workers=1, lifecycle=BrokenForOne(broken))

        assert report.total_processed == 2
        assert report.failed == [broken]
        assert report.transformed == [healthy]

    def test_read_failure_does_not_stop_the_batch(self, ctx, user, make_entry):
        """Test a database error while loading one entry is counted as a failure."""
        broken = make_entry(user.id, emotion=EmotionLabel.ANGER, score=1.0, fade_rate=3.0, hours_ago=200)
        healthy = make_entry(user.id, emotion=EmotionLabel.ANGER, score=1.0, fade_rate=3.0, hours_ago=200)

        report = run_cleanup(max_workers=1, lifecycle=EntryLifecycle(store=ReadFailsForOne(broken)))

        assert report.failed == [broken]
        assert report.transformed == [healthy]
        assert report.to_dict()['totalProcessed'] == 2
        assert db.session.get(DiaryEntry, healthy).is_fully_faded is True

    def test_empty_store(self, ctx):
        report = run_cleanup()

        assert report.total_processed == 0
        assert report.to_dict()['totalProcessed'] == 0


class TestThreadedCleanup:
    """Test the worker pool path against a shared database file."""

    def test_workers_process_every_entry(self, file_app):
        faded = _seed(file_app, [(EmotionLabel.ANGER, 1.0, 3.0, 200)] * 3)
        fresh = _seed(file_app, [(EmotionLabel.NEUTRAL, 0.5, 1.0, 1)] * 3)

        with file_app.app_context():
            report = run_cleanup(max_workers=4)

            assert report.to_dict()['totalProcessed'] == 6
            assert sorted(report.transformed) == sorted(faded)
            assert report.failed == []
            assert DiaryEntry.query.filter_by(is_fully_faded=True).count() == 3
            assert all(not db.session.get(DiaryEntry, entry_id).is_fully_faded for entry_id in fresh)

    def test_workers_use_the_given_lifecycle(self, file_app):
        broken, *healthy = _seed(file_app, [(EmotionLabel.ANGER, 1.0, 3.0, 200)] * 3)

        with file_app.app_context():
            report = run_cleanup(max_workers=3, lifecycle=BrokenForOne(broken))

            assert report.failed == [broken]
            assert sorted(report.transformed) == sorted(healthy)

