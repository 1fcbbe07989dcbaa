"""Turning fully faded diary entries into garden plants."""

from __future__ import annotations

import math
import random
from typing import List, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from garden.models import GardenPlant
from garden.repository import GardenPlantStore
from journal.emotions import PLANT_COLORS, PLANT_TYPES, EmotionLabel
from journal.errors import PersistenceError, ValidationError
from journal.models import DiaryEntry

POSITION_X_RANGE = (10.0, 90.0)
POSITION_Y_RANGE = (20.0, 80.0)


def growth_stage_for(score: float) -> int:
    return min(5, max(1, math.floor(score * 5) + 1))


def build_plant(entry: DiaryEntry, rng=random) -> GardenPlant:
    """Derive an unsaved plant for *entry*; only the position is random."""
    emotion = EmotionLabel.coerce(entry.emotion)
    score = entry.emotion_score
    return GardenPlant(
        user_id=entry.user_id,
        diary_entry_id=entry.id,
        plant_type=PLANT_TYPES[emotion],
        color=PLANT_COLORS[emotion],
        growth_stage=growth_stage_for(score),
        size=0.8 + score * 0.4,
        beauty=score,
        position_x=rng.uniform(*POSITION_X_RANGE),
        position_y=rng.uniform(*POSITION_Y_RANGE),
    )


def ensure_plant(entry: DiaryEntry, store: GardenPlantStore = None, rng=random) -> Tuple[GardenPlant, bool]:
    """Return the entry's plant, creating it on first call.

    Returns ``(plant, created)``.  A concurrent creator losing the race on
    the unique source entry gets the winner's plant back.
    """
    if not entry.is_fully_faded:
        raise ValidationError(f'Entry {entry.id} has not faded yet')

    store = store or GardenPlantStore()
    existing = store.find_by_source_entry(entry.id)
    if existing is not None:
        return existing, False

    try:
        plant, = store.create_many([build_plant(entry, rng)])
    except IntegrityError:
        existing = store.find_by_source_entry(entry.id)
        if existing is None:
            raise PersistenceError(f'Could not create plant for entry {entry.id}')
        return existing, False
    except SQLAlchemyError as exc:
        raise PersistenceError(f'Could not create plant for entry {entry.id}: {exc}') from exc

    current_app.logger.info('Planted %s for entry %s', plant.plant_type.value, entry.id)
    return plant, True


def entries_without_plants(user_id: int) -> List[DiaryEntry]:
    return (
        DiaryEntry.query
        .outerjoin(GardenPlant, GardenPlant.diary_entry_id == DiaryEntry.id)
        .filter(
            DiaryEntry.user_id == user_id,
            DiaryEntry.is_fully_faded.is_(True),
            GardenPlant.id.is_(None),
        )
        .all()
    )


def ensure_garden(user_id: int, store: GardenPlantStore = None, rng=random) -> List[GardenPlant]:
    """Plant every transformed entry of *user_id* that has no plant yet.

    Returns the newly created plants.
    """
    store = store or GardenPlantStore()
    entries = entries_without_plants(user_id)
    if not entries:
        return []

    try:
        return store.create_many([build_plant(entry, rng) for entry in entries])
    except IntegrityError:
        # Someone planted part of this batch already; settle it entry by entry.
        current_app.logger.warning('Garden batch for user %s collided, planting one by one', user_id)
        created = []
        for entry in entries_without_plants(user_id):
            plant, was_created = ensure_plant(entry, store, rng)
            if was_created:
                created.append(plant)
        return created
    except SQLAlchemyError as exc:
        raise PersistenceError(f'Could not create plants for user {user_id}: {exc}') from exc
