"""SQLAlchemy-backed record stores for diary entries and fade settings."""

from __future__ import annotations

from typing import Iterable, List, Optional

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.extensions import db
from journal.errors import PersistenceError, SettingsUnavailable, ValidationError
from journal.models import SETTINGS_COLUMNS, DiaryEntry, FadeSettings

ENTRY_FILTERS = ('all', 'fading', 'transformed')


class EntryStore:
    """Persistence operations for DiaryEntry rows."""

    def create(self, **fields) -> DiaryEntry:
        entry = DiaryEntry(**fields)
        try:
            db.session.add(entry)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(f'Failed to create entry: {exc}') from exc
        return entry

    def find_by_id(self, entry_id: str) -> Optional[DiaryEntry]:
        return self._read(lambda: db.session.get(DiaryEntry, entry_id, populate_existing=True))

    def find_for_user(self, entry_id: str, user_id: int) -> Optional[DiaryEntry]:
        return self._read(lambda: DiaryEntry.query.filter_by(id=entry_id, user_id=user_id).first())

    def find_many_not_transformed(self) -> List[DiaryEntry]:
        return DiaryEntry.query.filter(DiaryEntry.is_fully_faded.is_(False)).all()

    def list_for_user(self, user_id: int, entry_filter: str = 'all') -> List[DiaryEntry]:
        if entry_filter not in ENTRY_FILTERS:
            raise ValidationError(f'filter must be one of: {", ".join(ENTRY_FILTERS)}')

        query = DiaryEntry.query.filter_by(user_id=user_id)
        if entry_filter == 'fading':
            query = query.filter(DiaryEntry.is_fully_faded.is_(False))
        elif entry_filter == 'transformed':
            query = query.filter(DiaryEntry.is_fully_faded.is_(True))
        return query.order_by(DiaryEntry.created_at.desc()).all()

    def update(self, entry_id: str, fields: dict) -> None:
        """Unconditional partial update keyed by id."""
        self._execute(sa.update(DiaryEntry).where(DiaryEntry.id == entry_id).values(**fields))

    def conditional_update(self, entry_id: str, expected_view_count: int, fields: dict) -> bool:
        """Write *fields* only if the row is still fading and unviewed since it was read.

        Returns False when another writer got there first.
        """
        stmt = (
            sa.update(DiaryEntry)
            .where(
                DiaryEntry.id == entry_id,
                DiaryEntry.is_fully_faded.is_(False),
                DiaryEntry.view_count == expected_view_count,
            )
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        return self._execute(stmt) == 1

    def _read(self, query):
        try:
            return query()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(f'Failed to read entry: {exc}') from exc

    def _execute(self, stmt) -> int:
        try:
            result = db.session.execute(stmt)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(f'Failed to update entry: {exc}') from exc
        return result.rowcount


class FadeSettingsStore:
    """Persistence operations for per-user FadeSettings."""

    def find_by_user(self, user_id: int) -> Optional[FadeSettings]:
        return FadeSettings.query.filter_by(user_id=user_id).first()

    def create_with_defaults(self, user_id: int) -> FadeSettings:
        settings = FadeSettings(user_id=user_id)
        db.session.add(settings)
        db.session.commit()
        return settings

    def get_or_create_default(self, user_id: int) -> FadeSettings:
        """Return the user's settings, inserting the defaults on first access.

        Two concurrent first reads race on the unique user_id; the loser
        rolls back and reads the winner's row.
        """
        try:
            settings = self.find_by_user(user_id)
            if settings is not None:
                return settings
            try:
                return self.create_with_defaults(user_id)
            except IntegrityError:
                db.session.rollback()
                settings = self.find_by_user(user_id)
                if settings is None:
                    raise
                return settings
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise SettingsUnavailable(f'Could not load fade settings for user {user_id}: {exc}') from exc

    def upsert(self, user_id: int, rates: dict) -> FadeSettings:
        """Apply column->rate values to the user's settings, creating them if needed."""
        unknown = set(rates) - {column for column, _ in SETTINGS_COLUMNS.values()}
        if unknown:
            raise ValidationError(f'Unknown settings: {", ".join(sorted(unknown))}')

        try:
            settings = self.get_or_create_default(user_id)
            for column, value in rates.items():
                setattr(settings, column, value)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(f'Failed to save fade settings: {exc}') from exc
        return settings


def entry_ids(entries: Iterable[DiaryEntry]) -> List[str]:
    return [entry.id for entry in entries]
