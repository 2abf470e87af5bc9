"""Challenge service functions.

Personalised challenges are generated from the user's current stats on every
request and never stored. Community challenges are persisted and shared.
"""
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Set

from sqlalchemy.exc import IntegrityError

from extensions import db
from models import CommunityChallenge, ChallengeParticipant
from services.timezone_service import local_today

CHALLENGE_DAYS = 7


def generate_challenges(stats, now: Optional[datetime] = None) -> List[Dict]:
    """Short-term goals based on the user's behavioural skew."""
    if now is None:
        now = datetime.utcnow()
    deadline = now + timedelta(days=CHALLENGE_DAYS)
    challenges = []

    if stats.car_usage > stats.eco_transport_count:
        challenges.append({
            'id': 'green_commute',
            'title': 'Green Commute Challenge',
            'description': 'Use eco-friendly transport 5 times this week',
            'target': 5,
            'current': 0,
            'reward': '100 XP + Transport Master badge',
            'deadline': deadline,
        })

    if stats.meat_consumption > stats.plant_based_meals:
        challenges.append({
            'id': 'plant_power',
            'title': 'Plant Power Week',
            'description': 'Try 3 plant-based meals this week',
            'target': 3,
            'current': 0,
            'reward': '80 XP + Herbivore Hero badge',
            'deadline': deadline,
        })

    challenges.append({
        'id': 'daily_consistency',
        'title': 'Daily Consistency',
        'description': 'Log at least one activity every day for 7 days',
        'target': 7,
        'current': stats.current_streak,
        'reward': '200 XP + Consistency King badge',
        'deadline': deadline,
    })

    return challenges


def get_active_community_challenges(today: date = None) -> List[CommunityChallenge]:
    """Active challenges whose end date has not passed."""
    if today is None:
        today = local_today()
    return CommunityChallenge.query.filter(
        CommunityChallenge.is_active == True,  # noqa: E712
        CommunityChallenge.end_date >= today
    ).order_by(CommunityChallenge.end_date).all()


def create_community_challenge(title: str, description: str, category: str, goal: float,
                               reward: str, end_date: date, start_date: date = None) -> CommunityChallenge:
    challenge = CommunityChallenge(
        title=title,
        description=description,
        category=category,
        goal=goal,
        reward=reward,
        start_date=start_date or local_today(),
        end_date=end_date
    )
    db.session.add(challenge)
    db.session.commit()
    return challenge


def join_challenge(user_id: int, challenge_id: int) -> Optional[ChallengeParticipant]:
    """Join a community challenge. Joining twice returns the existing entry."""
    challenge = db.session.get(CommunityChallenge, challenge_id)
    if not challenge or not challenge.is_active:
        return None

    existing = ChallengeParticipant.query.filter_by(user_id=user_id, challenge_id=challenge_id).first()
    if existing:
        return existing

    participant = ChallengeParticipant(user_id=user_id, challenge_id=challenge_id)
    db.session.add(participant)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent join won the race
        db.session.rollback()
        return ChallengeParticipant.query.filter_by(user_id=user_id, challenge_id=challenge_id).first()
    return participant


def update_challenge_progress(user_id: int, challenge_id: int, amount: float) -> Optional[ChallengeParticipant]:
    """Credit ``amount`` towards a joined challenge; the shared total is capped at the goal."""
    participant = ChallengeParticipant.query.filter_by(user_id=user_id, challenge_id=challenge_id).first()
    if not participant or amount <= 0:
        return participant

    challenge = participant.challenge
    participant.progress += amount
    challenge.current_progress = min(challenge.goal, challenge.current_progress + amount)
    db.session.commit()
    return participant


def credit_activity_to_challenges(user_id: int, category: str, amount: float, today: date = None) -> int:
    """Credit a logged activity to every joined challenge in its category that is running today."""
    if today is None:
        today = local_today()
    participants = ChallengeParticipant.query.join(CommunityChallenge).filter(
        ChallengeParticipant.user_id == user_id,
        CommunityChallenge.category == category,
        CommunityChallenge.is_active == True,  # noqa: E712
        CommunityChallenge.start_date <= today,
        CommunityChallenge.end_date >= today
    ).all()

    for participant in participants:
        update_challenge_progress(user_id, participant.challenge_id, amount)
    return len(participants)


def joined_challenge_ids(user_id: int) -> Set[int]:
    rows = ChallengeParticipant.query.filter_by(user_id=user_id).all()
    return {row.challenge_id for row in rows}
