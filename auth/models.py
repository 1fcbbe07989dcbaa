from datetime import timedelta
from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token
from app.extensions import db
from journal.models import utcnow

class User(db.Model):
    """Diary owner; every entry, plant and settings row hangs off a user."""
    __tablename__ = 'users'
    
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    is_active = db.Column(db.Boolean, default=True)
    
    # Relationships
    entries = db.relationship('DiaryEntry', backref='author', lazy=True, cascade='all, delete-orphan')
    plants = db.relationship('GardenPlant', backref='owner', lazy=True, cascade='all, delete-orphan')
    fade_settings = db.relationship('FadeSettings', backref='user', uselist=False, cascade='all, delete-orphan')
    
    def __init__(self, **kwargs):
        password = kwargs.pop('password', None)
        super(User, self).__init__(**kwargs)
        if password is not None:
            self.set_password(password)
    
    def set_password(self, password):
        """Create hashed password."""
        self.password_hash = generate_password_hash(password)
    
    def check_password(self, password):
        """Check hashed password."""
        return check_password_hash(self.password_hash, password)
    
    def generate_auth_token(self, expires_in=3600):
        """Generate JWT token for the user."""
        expires = timedelta(seconds=expires_in)
        return create_access_token(identity=str(self.id), expires_delta=expires)
    
    def to_dict(self):
        """Return user data as dictionary."""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'created_at': self.created_at.isoformat()
        }
    
    def __repr__(self):
        return f'<User {self.username}>'
