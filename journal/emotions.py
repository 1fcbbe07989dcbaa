"""Emotion labels and the fixed lookup tables keyed by them."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType


class EmotionLabel(str, enum.Enum):
    ANGER = 'ANGER'
    SADNESS = 'SADNESS'
    ANXIETY = 'ANXIETY'
    JOY = 'JOY'
    LOVE = 'LOVE'
    FEAR = 'FEAR'
    HOPE = 'HOPE'
    NEUTRAL = 'NEUTRAL'

    @classmethod
    def coerce(cls, value) -> 'EmotionLabel':
        """Return the label for *value*, or NEUTRAL when it is not one of ours."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        return cls.NEUTRAL


class PlantType(str, enum.Enum):
    FLOWER = 'FLOWER'
    TREE = 'TREE'
    SUCCULENT = 'SUCCULENT'
    VINE = 'VINE'
    MOSS = 'MOSS'
    CRYSTAL = 'CRYSTAL'


POSITIVE_EMOTIONS = frozenset({EmotionLabel.JOY, EmotionLabel.LOVE, EmotionLabel.HOPE})

DEFAULT_FADE_RATES = MappingProxyType({
    EmotionLabel.ANGER: 2.0,
    EmotionLabel.SADNESS: 1.5,
    EmotionLabel.ANXIETY: 1.8,
    EmotionLabel.JOY: 0.3,
    EmotionLabel.LOVE: 0.2,
    EmotionLabel.FEAR: 1.7,
    EmotionLabel.HOPE: 0.4,
    EmotionLabel.NEUTRAL: 1.0,
})

PLANT_TYPES = MappingProxyType({
    EmotionLabel.JOY: PlantType.FLOWER,
    EmotionLabel.LOVE: PlantType.FLOWER,
    EmotionLabel.HOPE: PlantType.CRYSTAL,
    EmotionLabel.SADNESS: PlantType.TREE,
    EmotionLabel.ANGER: PlantType.CRYSTAL,
    EmotionLabel.ANXIETY: PlantType.SUCCULENT,
    EmotionLabel.FEAR: PlantType.MOSS,
    EmotionLabel.NEUTRAL: PlantType.VINE,
})

PLANT_COLORS = MappingProxyType({
    EmotionLabel.JOY: '#FFD700',
    EmotionLabel.LOVE: '#FFB6C1',
    EmotionLabel.HOPE: '#DDA0DD',
    EmotionLabel.SADNESS: '#87CEEB',
    EmotionLabel.ANGER: '#FF6B6B',
    EmotionLabel.ANXIETY: '#98FB98',
    EmotionLabel.FEAR: '#90EE90',
    EmotionLabel.NEUTRAL: '#E6E6FA',
})


@dataclass(frozen=True)
class EmotionAnalysis:
    """Result of classifying one piece of diary text."""

    emotion: EmotionLabel
    intensity: float
    confidence: float

    def to_dict(self):
        return {
            'emotion': self.emotion.value,
            'intensity': self.intensity,
            'confidence': self.confidence,
        }


FALLBACK_ANALYSIS = EmotionAnalysis(EmotionLabel.NEUTRAL, 0.5, 0.3)
