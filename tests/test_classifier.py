"""
Unit tests for the emotion classifier adapter.
"""
import pytest

from journal.classifier import EmotionClassifier, extract_json_object, parse_analysis
from journal.emotions import FALLBACK_ANALYSIS, EmotionLabel
from journal.errors import ClassificationFailure
from tests.conftest import FakeOpenAI


class TestParseAnalysis:
    """Test normalisation of raw model answers."""

    def test_plain_json(self):
        """Test a well-formed answer passes through."""
        analysis = parse_analysis('{"emotion": "JOY", "intensity": 0.8, "confidence": 0.9}')

        assert analysis.emotion is EmotionLabel.JOY
        assert analysis.intensity == 0.8
        assert analysis.confidence == 0.9

    def test_json_wrapped_in_prose(self):
        """Test the first JSON object is found inside surrounding text."""
        raw = 'Sure! Here you go:\n```json\n{"emotion": "FEAR", "intensity": 0.4, "confidence": 0.7}\n```\nHope {that} helps.'
        analysis = parse_analysis(raw)

        assert analysis.emotion is EmotionLabel.FEAR
        assert analysis.intensity == 0.4

    def test_unknown_emotion_becomes_neutral(self):
        """Test labels outside the closed set are coerced to NEUTRAL."""
        analysis = parse_analysis('{"emotion": "BOREDOM", "intensity": 0.6, "confidence": 0.6}')
        assert analysis.emotion is EmotionLabel.NEUTRAL

    def test_missing_emotion_becomes_neutral(self):
        analysis = parse_analysis('{"intensity": 0.6}')

        assert analysis.emotion is EmotionLabel.NEUTRAL
        assert analysis.confidence == 0.5

    @pytest.mark.parametrize('label', ['"love"', '" JOY "', '"Hope"', '3', '["ANGER"]'])
    def test_inexact_emotion_becomes_neutral(self, label):
        """Test only exact upper-case labels are accepted."""
        assert parse_analysis(f'{{"emotion": {label}}}').emotion is EmotionLabel.NEUTRAL

    @pytest.mark.parametrize('raw_value, expected', [
        (1.7, 1.0),
        (-0.3, 0.0),
        (0, 0.0),
        ('"0.25"', 0.25),
        ('"very"', 0.5),
        ('null', 0.5),
        ('true', 0.5),
    ])
    def test_intensity_is_clamped(self, raw_value, expected):
        """Test intensity is clamped into [0, 1] with a 0.5 default."""
        analysis = parse_analysis(f'{{"emotion": "ANGER", "intensity": {raw_value}, "confidence": 0.9}}')
        assert analysis.intensity == expected

    def test_confidence_clamped_independently(self):
        analysis = parse_analysis('{"emotion": "HOPE", "intensity": 0.2, "confidence": 4}')

        assert analysis.intensity == 0.2
        assert analysis.confidence == 1.0

    @pytest.mark.parametrize('raw', ['', '   ', None, 'no json here', '{broken', '[1, 2, 3]'])
    def test_unusable_answers_raise(self, raw):
        with pytest.raises(ClassificationFailure):
            parse_analysis(raw)

    def test_extract_skips_invalid_brace(self):
        """Test a stray brace before the real object is skipped."""
        assert extract_json_object('{oops} {"emotion": "JOY"}') == {'emotion': 'JOY'}


class TestEmotionClassifier:
    """Test the adapter never lets a failure escape."""

    def test_classify_uses_client(self, ctx):
        fake = FakeOpenAI('{"emotion": "SADNESS", "intensity": 0.9, "confidence": 0.8}')
        classifier = EmotionClassifier(client=fake, model='test-model')

        analysis = classifier.classify('My cat ran away.')

        assert analysis.emotion is EmotionLabel.SADNESS
        assert len(fake.calls) == 1
        assert fake.calls[0]['model'] == 'test-model'
        assert 'My cat ran away.' in fake.calls[0]['messages'][1]['content']

    def test_client_error_falls_back(self, ctx):
        classifier = EmotionClassifier(client=FakeOpenAI(error=TimeoutError('too slow')))
        assert classifier.classify('anything') == FALLBACK_ANALYSIS

    def test_malformed_reply_falls_back(self, ctx):
        classifier = EmotionClassifier(client=FakeOpenAI('I feel like it is ANGER'))
        assert classifier.classify('anything') == FALLBACK_ANALYSIS

    def test_unconfigured_client_falls_back(self, ctx):
        analysis = EmotionClassifier(client=None).classify('anything')

        assert analysis.emotion is EmotionLabel.NEUTRAL
        assert analysis.intensity == 0.5
        assert analysis.confidence == 0.3

    def test_from_config_without_key_has_no_client(self, ctx):
        classifier = EmotionClassifier.from_config({'OPENAI_API_KEY': None, 'OPENAI_MODEL': 'm', 'OPENAI_TIMEOUT': 5})

        assert classifier.client is None
        assert classifier.model == 'm'
        assert classifier.timeout == 5
