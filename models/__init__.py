"""Database models package.

This package contains the SQLAlchemy ORM model definitions for the application.
Each model lives in its own module and is re-exported here for convenience.
The `init_default_challenges` helper populates the database with a few
community challenges.
"""
from datetime import date, timedelta

# Re-export model classes from individual modules
from .user import User  # noqa: F401
from .activity import Activity  # noqa: F401
from .achievement import UserAchievement  # noqa: F401
from .challenge import CommunityChallenge, ChallengeParticipant  # noqa: F401
from .finance import FinancialTransaction, Budget, FinancialGoal  # noqa: F401

__all__ = [
    "User",
    "Activity",
    "UserAchievement",
    "CommunityChallenge",
    "ChallengeParticipant",
    "FinancialTransaction",
    "Budget",
    "FinancialGoal",
    "init_default_challenges",
]

def init_default_challenges():
    """
    Initialize database with the standing community challenges.
    """
    from extensions import db

    today = date.today()
    default_challenges = [
        {"title": "Plant-Based Month", "category": "food", "goal": 1000,
         "description": "Community goal: 1000 plant-based meals this month",
         "reward": "Herbivore Collective badge", "days": 30},
        {"title": "Car-Free Week", "category": "travel", "goal": 5000,
         "description": "Travel 5000 km together by bike, bus or on foot",
         "reward": "Green Commuter badge", "days": 7},
        {"title": "Power Down", "category": "energy", "goal": 2000,
         "description": "Log 2000 kWh of efficient or solar energy use",
         "reward": "Bright Idea badge", "days": 30},
        {"title": "Second Life", "category": "shopping", "goal": 500,
         "description": "Buy 500 second-hand or reusable items as a community",
         "reward": "Circular Champion badge", "days": 30},
    ]

    for data in default_challenges:
        existing = CommunityChallenge.query.filter_by(title=data["title"], is_active=True).first()
        if existing:
            continue
        db.session.add(CommunityChallenge(
            title=data["title"],
            description=data["description"],
            category=data["category"],
            goal=data["goal"],
            reward=data["reward"],
            start_date=today,
            end_date=today + timedelta(days=data["days"]),
        ))

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
