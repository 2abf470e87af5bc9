"""User model definition.
Owner of activities, unlock records and the cumulative XP counter.
"""
from datetime import datetime

from extensions import db

class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(80))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Preferences
    timezone = db.Column(db.String(50), default='UTC')
    region = db.Column(db.String(50), default='IN')  # Used for grid intensity and tariffs

    # Cumulative XP, updated read-modify-write on every logged activity
    total_xp = db.Column(db.Integer, nullable=False, default=0)

    # Relationships
    activities = db.relationship('Activity', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    achievements = db.relationship('UserAchievement', backref='user', lazy='dynamic', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'display_name': self.display_name,
            'timezone': self.timezone,
            'region': self.region,
            'total_xp': self.total_xp,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<User {self.email}>'
