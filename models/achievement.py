"""Achievement unlock records.
The catalog itself is static data in services.achievement_service; only the
per-user unlock is stored. The unique constraint is what guarantees an
achievement is unlocked at most once per user.
"""
from datetime import datetime
from extensions import db

class UserAchievement(db.Model):
    __tablename__ = 'user_achievement'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'achievement_id', name='uq_user_achievement'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    achievement_id = db.Column(db.String(50), nullable=False)
    unlocked_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'achievement_id': self.achievement_id,
            'unlocked_at': self.unlocked_at.isoformat() if self.unlocked_at else None,
        }

    def __repr__(self):
        return f'<UserAchievement {self.user_id} - {self.achievement_id}>'
