"""Community challenge models.
Community-wide challenges are persisted; personalised challenges are not and
are generated on request by services.challenge_service.
"""
from datetime import datetime, date
from extensions import db

class CommunityChallenge(db.Model):
    __tablename__ = 'community_challenge'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(20), nullable=False)
    goal = db.Column(db.Float, nullable=False)
    current_progress = db.Column(db.Float, nullable=False, default=0.0)
    reward = db.Column(db.String(120), nullable=False)
    start_date = db.Column(db.Date, default=date.today, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    participants = db.relationship('ChallengeParticipant', backref='challenge', lazy='dynamic',
                                   cascade='all, delete-orphan')

    @property
    def progress_percentage(self) -> float:
        if not self.goal:
            return 0.0
        return min(100.0, self.current_progress / self.goal * 100)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'goal': self.goal,
            'current_progress': self.current_progress,
            'progress_percentage': self.progress_percentage,
            'participants': self.participants.count(),
            'reward': self.reward,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'is_active': self.is_active,
        }

    def __repr__(self) -> str:
        return f'<CommunityChallenge {self.title}: {self.current_progress}/{self.goal}>'


class ChallengeParticipant(db.Model):
    __tablename__ = 'challenge_participant'
    __table_args__ = (
        db.UniqueConstraint('challenge_id', 'user_id', name='uq_challenge_participant'),
    )

    id = db.Column(db.Integer, primary_key=True)
    challenge_id = db.Column(db.Integer, db.ForeignKey('community_challenge.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    progress = db.Column(db.Float, nullable=False, default=0.0)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            'challenge_id': self.challenge_id,
            'user_id': self.user_id,
            'progress': self.progress,
            'joined_at': self.joined_at.isoformat() if self.joined_at else None,
        }
