import uuid
from datetime import datetime, timezone

from app.extensions import db
from journal.emotions import DEFAULT_FADE_RATES, EmotionLabel


def utcnow():
    """Naive UTC timestamp, matching how the columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_id():
    return str(uuid.uuid4())


def _isoformat(value):
    return value.isoformat() if value else None


class DiaryEntry(db.Model):
    """A diary entry that fades over time."""
    __tablename__ = 'diary_entries'

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=True)
    content = db.Column(db.Text, nullable=False)

    emotion = db.Column(db.Enum(EmotionLabel, name='emotion_label'), nullable=False, default=EmotionLabel.NEUTRAL)
    emotion_score = db.Column(db.Float, nullable=False, default=0.5)

    fade_start_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    fade_rate = db.Column(db.Float, nullable=False, default=1.0)
    current_opacity = db.Column(db.Float, nullable=False, default=1.0)
    view_count = db.Column(db.Integer, nullable=False, default=0)
    last_viewed_at = db.Column(db.DateTime, nullable=True)
    is_fully_faded = db.Column(db.Boolean, nullable=False, default=False, index=True)
    transformed_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        """Return entry data as dictionary."""
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'content': self.content,
            'emotion': self.emotion.value,
            'emotionScore': self.emotion_score,
            'fadeStartDate': _isoformat(self.fade_start_date),
            'fadeRate': self.fade_rate,
            'currentOpacity': self.current_opacity,
            'viewCount': self.view_count,
            'lastViewedAt': _isoformat(self.last_viewed_at),
            'isFullyFaded': self.is_fully_faded,
            'transformedAt': _isoformat(self.transformed_at),
            'createdAt': _isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<DiaryEntry {self.id} {self.emotion.value} opacity={self.current_opacity:.2f}>'


# Column holding the base rate for each emotion, and its key in the JSON payload.
SETTINGS_COLUMNS = {
    EmotionLabel.ANGER: ('anger_fade_rate', 'angerFadeRate'),
    EmotionLabel.SADNESS: ('sadness_fade_rate', 'sadnessFadeRate'),
    EmotionLabel.ANXIETY: ('anxiety_fade_rate', 'anxietyFadeRate'),
    EmotionLabel.JOY: ('joy_fade_rate', 'joyFadeRate'),
    EmotionLabel.LOVE: ('love_fade_rate', 'loveFadeRate'),
    EmotionLabel.FEAR: ('fear_fade_rate', 'fearFadeRate'),
    EmotionLabel.HOPE: ('hope_fade_rate', 'hopeFadeRate'),
    EmotionLabel.NEUTRAL: ('neutral_fade_rate', 'neutralFadeRate'),
}


class FadeSettings(db.Model):
    """Per-user base fade rates, one row per user."""
    __tablename__ = 'fade_settings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)

    anger_fade_rate = db.Column(db.Float, nullable=False, default=DEFAULT_FADE_RATES[EmotionLabel.ANGER])
    sadness_fade_rate = db.Column(db.Float, nullable=False, default=DEFAULT_FADE_RATES[EmotionLabel.SADNESS])
    anxiety_fade_rate = db.Column(db.Float, nullable=False, default=DEFAULT_FADE_RATES[EmotionLabel.ANXIETY])
    joy_fade_rate = db.Column(db.Float, nullable=False, default=DEFAULT_FADE_RATES[EmotionLabel.JOY])
    love_fade_rate = db.Column(db.Float, nullable=False, default=DEFAULT_FADE_RATES[EmotionLabel.LOVE])
    fear_fade_rate = db.Column(db.Float, nullable=False, default=DEFAULT_FADE_RATES[EmotionLabel.FEAR])
    hope_fade_rate = db.Column(db.Float, nullable=False, default=DEFAULT_FADE_RATES[EmotionLabel.HOPE])
    neutral_fade_rate = db.Column(db.Float, nullable=False, default=DEFAULT_FADE_RATES[EmotionLabel.NEUTRAL])

    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def rate_for(self, emotion):
        column, _ = SETTINGS_COLUMNS[EmotionLabel.coerce(emotion)]
        return getattr(self, column)

    def to_dict(self):
        """Return settings as the camelCase payload the API speaks."""
        data = {key: getattr(self, column) for column, key in SETTINGS_COLUMNS.values()}
        data['userId'] = self.user_id
        return data

    def __repr__(self):
        return f'<FadeSettings user={self.user_id}>'
