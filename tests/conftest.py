"""
Pytest configuration and fixtures.
"""
import sys
from datetime import timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app import create_app
from app.extensions import db
from auth.models import User
from journal.classifier import EmotionClassifier
from journal.emotions import EmotionLabel
from journal.models import DiaryEntry, utcnow


class FakeOpenAI:
    """Stands in for openai.OpenAI; returns canned chat completions."""

    def __init__(self, reply='{"emotion": "NEUTRAL", "intensity": 0.5, "confidence": 0.9}', error=None):
        self.reply = reply
        self.error = error
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture()
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def ctx(app):
    """Push an application context for unit tests of the core."""
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def fake_openai(app):
    fake = FakeOpenAI()
    app.extensions['emotion_classifier'] = EmotionClassifier(client=fake)
    return fake


def _create_user(app, username):
    with app.app_context():
        user = User(username=username, email=f'{username}@example.com', password='password123')
        db.session.add(user)
        db.session.commit()
        return user.id, user.generate_auth_token()


@pytest.fixture()
def user(app):
    user_id, token = _create_user(app, 'diarist')
    return SimpleNamespace(id=user_id, headers={'Authorization': f'Bearer {token}'})


@pytest.fixture()
def other_user(app):
    user_id, token = _create_user(app, 'stranger')
    return SimpleNamespace(id=user_id, headers={'Authorization': f'Bearer {token}'})


@pytest.fixture()
def make_entry(app):
    """Insert an entry directly, bypassing classification. Returns its id."""

    def _make(user_id, emotion=EmotionLabel.NEUTRAL, score=0.5, fade_rate=1.0,
              hours_ago=0.0, view_count=0, **fields):
        with app.app_context():
            fields.setdefault('content', 'Some words about today.')
            fields.setdefault('current_opacity', 1.0)
            entry = DiaryEntry(
                user_id=user_id,
                emotion=emotion,
                emotion_score=score,
                fade_rate=fade_rate,
                fade_start_date=utcnow() - timedelta(hours=hours_ago),
                view_count=view_count,
                **fields
            )
            db.session.add(entry)
            db.session.commit()
            return entry.id

    return _make
