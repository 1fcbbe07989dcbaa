"""SQLAlchemy-backed record store for garden plants."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from garden.models import GardenPlant
from journal.errors import PersistenceError


class GardenPlantStore:

    def find_by_source_entry(self, entry_id: str) -> Optional[GardenPlant]:
        return GardenPlant.query.filter_by(diary_entry_id=entry_id).first()

    def create_many(self, plants: List[GardenPlant]) -> List[GardenPlant]:
        """Insert *plants* in one transaction.

        IntegrityError is left to the caller, who knows how to resolve a
        duplicate source entry.
        """
        if not plants:
            return []
        try:
            db.session.add_all(plants)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        return plants

    def list_for_user(self, user_id: int) -> List[GardenPlant]:
        return GardenPlant.query.filter_by(user_id=user_id).order_by(GardenPlant.created_at.asc()).all()

    def count_for_user(self, user_id: int) -> int:
        try:
            return GardenPlant.query.filter_by(user_id=user_id).count()
        except SQLAlchemyError as exc:
            raise PersistenceError(f'Failed to count plants: {exc}') from exc
