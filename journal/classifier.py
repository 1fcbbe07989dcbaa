"""Emotion classification for diary text.

`EmotionClassifier.classify` asks an OpenAI chat model for the dominant
emotion of a piece of text and normalises whatever comes back into an
`EmotionAnalysis`.  It never raises: a missing API key, a network error, a
timeout or an unparsable answer all produce the NEUTRAL fallback analysis,
so entry creation never depends on the classifier being healthy.
"""

from __future__ import annotations

import json
import math
from typing import Any, Optional

from flask import current_app

from journal.emotions import FALLBACK_ANALYSIS, EmotionAnalysis, EmotionLabel
from journal.errors import ClassificationFailure

SYSTEM_INSTRUCTION = (
    "You analyse the emotional content of personal diary entries. "
    "Respond ONLY with a JSON object, no markdown and no explanation."
)

PROMPT_TEMPLATE = """Analyze the dominant emotion of the following text.

Text: "{text}"

Return exactly this shape:
{{
  "emotion": "ANGER|SADNESS|ANXIETY|JOY|LOVE|FEAR|HOPE|NEUTRAL",
  "intensity": 0.0-1.0,
  "confidence": 0.0-1.0
}}

Guidelines:
- ANGER: rage, fury, irritation, annoyance
- SADNESS: grief, sorrow, depression, melancholy
- ANXIETY: worry, stress, nervousness, panic
- JOY: happiness, excitement, delight, pleasure
- LOVE: affection, romantic feelings, care, warmth
- FEAR: terror, phobia, dread, apprehension
- HOPE: optimism, faith, expectation, aspiration
- NEUTRAL: calm, balanced, factual, mundane
"""

DEFAULT_SCORE = 0.5


def _exact_label(value: Any) -> EmotionLabel:
    """Only the eight upper-case labels count; anything else is NEUTRAL."""
    if not isinstance(value, str):
        return EmotionLabel.NEUTRAL
    try:
        return EmotionLabel(value)
    except ValueError:
        return EmotionLabel.NEUTRAL


def _clamp_unit(value: Any) -> float:
    """Clamp *value* into [0, 1]; anything non-numeric becomes 0.5."""
    if isinstance(value, bool) or value is None:
        return DEFAULT_SCORE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_SCORE
    if math.isnan(number):
        return DEFAULT_SCORE
    return max(0.0, min(1.0, number))


def extract_json_object(text: str) -> dict:
    """Return the first JSON object embedded in *text*.

    Models like to wrap their answer in prose or code fences, so every `{`
    is tried as the start of an object until one decodes.
    """
    decoder = json.JSONDecoder()
    start = text.find('{')
    while start != -1:
        try:
            obj, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            obj = None
        if isinstance(obj, dict):
            return obj
        start = text.find('{', start + 1)
    raise ClassificationFailure('No valid JSON object found in response')


def parse_analysis(raw: Optional[str]) -> EmotionAnalysis:
    """Turn a raw model answer into a normalised EmotionAnalysis."""
    if not raw or not raw.strip():
        raise ClassificationFailure('Empty response from classifier')

    data = extract_json_object(raw)
    return EmotionAnalysis(
        emotion=_exact_label(data.get('emotion')),
        intensity=_clamp_unit(data.get('intensity')),
        confidence=_clamp_unit(data.get('confidence')),
    )


class EmotionClassifier:
    """Adapter around the OpenAI chat completions API."""

    def __init__(self, client=None, model: str = 'gpt-4o-mini', timeout: float = 20):
        self.client = client
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> 'EmotionClassifier':
        client = None
        api_key = config.get('OPENAI_API_KEY')
        if api_key:
            from openai import OpenAI
            client = OpenAI(api_key=api_key)
        return cls(
            client=client,
            model=config.get('OPENAI_MODEL', 'gpt-4o-mini'),
            timeout=config.get('OPENAI_TIMEOUT', 20),
        )

    def _call_openai(self, text: str) -> Optional[str]:
        if self.client is None:
            raise ClassificationFailure('OpenAI not configured')

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": PROMPT_TEMPLATE.format(text=text)},
            ],
            temperature=0.2,
            max_tokens=100,
            timeout=self.timeout,
        )
        return response.choices[0].message.content

    def classify(self, text: str) -> EmotionAnalysis:
        """Classify *text*, falling back to NEUTRAL on any failure."""
        try:
            return parse_analysis(self._call_openai(text))
        except Exception as exc:  # noqa: BLE001 - any failure triggers fallback
            current_app.logger.error('Emotion analysis failed (%s); using neutral fallback', exc)
            return FALLBACK_ANALYSIS


def get_classifier() -> EmotionClassifier:
    """Return the classifier bound to the current app, building it on first use."""
    classifier = current_app.extensions.get('emotion_classifier')
    if classifier is None:
        classifier = EmotionClassifier.from_config(current_app.config)
        current_app.extensions['emotion_classifier'] = classifier
    return classifier
