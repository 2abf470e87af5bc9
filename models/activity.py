"""Activity model definition.
Represents one logged eco-activity together with the impact computed when it
was logged. Impact columns are written once and never recomputed, so changes
to the factor tables do not rewrite history.
"""
from datetime import datetime
from extensions import db

class Activity(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    category = db.Column(db.String(20), nullable=False)
    activity_type = db.Column(db.String(50), nullable=False)
    amount = db.Column(db.Float, nullable=False)

    # Computed at creation time
    co2_impact = db.Column(db.Float, nullable=False, default=0.0)
    financial_impact = db.Column(db.Float, nullable=False, default=0.0)
    accuracy = db.Column(db.Float)
    source = db.Column(db.String(100))
    xp_awarded = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)  # UTC

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'category': self.category,
            'activity_type': self.activity_type,
            'amount': self.amount,
            'co2_impact': self.co2_impact,
            'financial_impact': self.financial_impact,
            'accuracy': self.accuracy,
            'source': self.source,
            'xp_awarded': self.xp_awarded,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f'<Activity {self.user_id} - {self.category}/{self.activity_type} x{self.amount}>'
