"""
Unit tests for the garden transformer.
"""
import random

import pytest

from app.extensions import db
from garden.models import GardenPlant
from garden.transformer import ensure_garden, ensure_plant, growth_stage_for
from journal.emotions import EmotionLabel, PlantType
from journal.errors import ValidationError
from journal.models import DiaryEntry, utcnow


def _faded(make_entry, user_id, emotion, score):
    return make_entry(user_id, emotion=emotion, score=score,
                      is_fully_faded=True, current_opacity=0.0, transformed_at=utcnow())


class TestGrowthStage:

    @pytest.mark.parametrize('score, stage', [
        (0.0, 1), (0.19, 1), (0.2, 2), (0.5, 3), (0.79, 4), (0.8, 5), (1.0, 5),
    ])
    def test_stage_from_score(self, score, stage):
        assert growth_stage_for(score) == stage


class TestEnsurePlant:

    def test_derived_fields(self, ctx, user, make_entry):
        """Test type, color, size and beauty follow the emotion tables."""
        entry = db.session.get(DiaryEntry, _faded(make_entry, user.id, EmotionLabel.SADNESS, 0.5))

        plant, created = ensure_plant(entry, rng=random.Random(7))

        assert created is True
        assert plant.plant_type is PlantType.TREE
        assert plant.color == '#87CEEB'
        assert plant.growth_stage == 3
        assert plant.size == pytest.approx(1.0)
        assert plant.beauty == 0.5
        assert 10 <= plant.position_x <= 90
        assert 20 <= plant.position_y <= 80

    def test_idempotent_and_position_stable(self, ctx, user, make_entry):
        """Test a second call returns the same plant without redrawing its position."""
        entry = db.session.get(DiaryEntry, _faded(make_entry, user.id, EmotionLabel.JOY, 0.9))

        first, created_first = ensure_plant(entry, rng=random.Random(1))
        position = (first.position_x, first.position_y)
        second, created_second = ensure_plant(entry, rng=random.Random(2))

        assert created_first is True
        assert created_second is False
        assert second.id == first.id
        assert (second.position_x, second.position_y) == position
        assert GardenPlant.query.filter_by(diary_entry_id=entry.id).count() == 1

    def test_fading_entry_rejected(self, ctx, user, make_entry):
        entry = db.session.get(DiaryEntry, make_entry(user.id))

        with pytest.raises(ValidationError):
            ensure_plant(entry)

    @pytest.mark.parametrize('emotion, plant_type, color', [
        (EmotionLabel.LOVE, PlantType.FLOWER, '#FFB6C1'),
        (EmotionLabel.HOPE, PlantType.CRYSTAL, '#DDA0DD'),
        (EmotionLabel.ANGER, PlantType.CRYSTAL, '#FF6B6B'),
        (EmotionLabel.ANXIETY, PlantType.SUCCULENT, '#98FB98'),
        (EmotionLabel.FEAR, PlantType.MOSS, '#90EE90'),
        (EmotionLabel.NEUTRAL, PlantType.VINE, '#E6E6FA'),
    ])
    def test_emotion_tables(self, ctx, user, make_entry, emotion, plant_type, color):
        entry = db.session.get(DiaryEntry, _faded(make_entry, user.id, emotion, 0.0))

        plant, _ = ensure_plant(entry)

        assert plant.plant_type is plant_type
        assert plant.color == color
        assert plant.growth_stage == 1
        assert plant.size == pytest.approx(0.8)


class TestEnsureGarden:

    def test_plants_only_missing_entries(self, ctx, user, make_entry):
        first = _faded(make_entry, user.id, EmotionLabel.JOY, 0.4)
        _faded(make_entry, user.id, EmotionLabel.FEAR, 0.6)
        make_entry(user.id)  # still fading

        ensure_plant(db.session.get(DiaryEntry, first))
        created = ensure_garden(user.id)

        assert len(created) == 1
        assert GardenPlant.query.filter_by(user_id=user.id).count() == 2
        assert ensure_garden(user.id) == []

    def test_other_users_untouched(self, ctx, user, other_user, make_entry):
        _faded(make_entry, other_user.id, EmotionLabel.JOY, 0.4)

        assert ensure_garden(user.id) == []
        assert GardenPlant.query.count() == 0
