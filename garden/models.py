import uuid

from app.extensions import db
from journal.emotions import PlantType
from journal.models import utcnow


def _new_id():
    return str(uuid.uuid4())


class GardenPlant(db.Model):
    """A plant grown from a fully faded diary entry."""
    __tablename__ = 'garden_plants'

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    diary_entry_id = db.Column(db.String(36), db.ForeignKey('diary_entries.id'), nullable=False, unique=True)

    plant_type = db.Column(db.Enum(PlantType, name='plant_type'), nullable=False)
    color = db.Column(db.String(7), nullable=False)
    growth_stage = db.Column(db.Integer, nullable=False, default=1)
    size = db.Column(db.Float, nullable=False, default=1.0)
    beauty = db.Column(db.Float, nullable=False, default=0.5)
    # Drawn once when the plant is created and never recomputed.
    position_x = db.Column(db.Float, nullable=False)
    position_y = db.Column(db.Float, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)

    diary_entry = db.relationship('DiaryEntry', backref=db.backref('garden_plant', uselist=False))

    def to_dict(self):
        """Return plant data with a summary of the entry it grew from."""
        data = {
            'id': self.id,
            'userId': self.user_id,
            'diaryEntryId': self.diary_entry_id,
            'plantType': self.plant_type.value,
            'color': self.color,
            'growthStage': self.growth_stage,
            'size': self.size,
            'beauty': self.beauty,
            'positionX': self.position_x,
            'positionY': self.position_y,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
        entry = self.diary_entry
        if entry is not None:
            data['emotion'] = entry.emotion.value
            data['diaryEntry'] = {
                'emotion': entry.emotion.value,
                'emotionScore': entry.emotion_score,
                'createdAt': entry.created_at.isoformat() if entry.created_at else None,
                'transformedAt': entry.transformed_at.isoformat() if entry.transformed_at else None,
            }
        return data

    def __repr__(self):
        return f'<GardenPlant {self.plant_type.value} entry={self.diary_entry_id}>'
