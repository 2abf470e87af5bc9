"""Personal finance models: transactions, monthly budgets and savings goals."""
from datetime import datetime, date
from extensions import db

class FinancialTransaction(db.Model):
    __tablename__ = 'financial_transaction'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    type = db.Column(db.String(10), nullable=False)  # income, expense
    category = db.Column(db.String(50), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    description = db.Column(db.String(255), default='')
    date = db.Column(db.Date, default=date.today, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'type': self.type,
            'category': self.category,
            'amount': self.amount,
            'description': self.description,
            'date': self.date.isoformat() if self.date else None,
        }

    def __repr__(self):
        return f'<FinancialTransaction {self.user_id} {self.type} {self.amount}>'


class Budget(db.Model):
    __table_args__ = (
        db.UniqueConstraint('user_id', 'category', name='uq_budget_category'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    category = db.Column(db.String(50), nullable=False)
    monthly_limit = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self, spent: float = 0.0):
        return {
            'id': self.id,
            'category': self.category,
            'monthly_limit': self.monthly_limit,
            'spent': spent,
            'remaining': self.monthly_limit - spent,
            'over_budget': spent > self.monthly_limit,
        }


class FinancialGoal(db.Model):
    __tablename__ = 'financial_goal'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    title = db.Column(db.String(120), nullable=False)
    target_amount = db.Column(db.Float, nullable=False)
    current_amount = db.Column(db.Float, nullable=False, default=0.0)
    target_date = db.Column(db.Date, nullable=False)
    category = db.Column(db.String(50), nullable=False, default='savings')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def progress_percentage(self) -> float:
        if self.target_amount <= 0:
            return 100.0
        return min(100.0, self.current_amount / self.target_amount * 100)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'target_amount': self.target_amount,
            'current_amount': self.current_amount,
            'progress_percentage': self.progress_percentage,
            'is_achieved': self.current_amount >= self.target_amount,
            'target_date': self.target_date.isoformat() if self.target_date else None,
            'category': self.category,
        }
