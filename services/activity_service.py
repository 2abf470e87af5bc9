"""Activity-related service functions.

The first half of this module is the record store used by the engine:
listing and appending activities, reading cumulative XP and recording
achievement unlocks exactly once. ``log_activity`` coordinates the full flow
for one newly logged activity.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import current_app, has_app_context
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from models import Activity, ChallengeParticipant, User, UserAchievement
from services import achievement_service, gamification_service
from services.challenge_service import credit_activity_to_challenges
from services.exceptions import AchievementAlreadyUnlocked
from services.impact_factors import is_eco_choice
from services.impact_service import ImpactResult
from services.stats_service import build_user_stats
from services.streak_service import compute_streak
from services.timezone_service import app_timezone, local_today

logger = logging.getLogger('activity')


# --- record store -----------------------------------------------------------

def list_activities(user_id: int, since: Optional[datetime] = None) -> List[Activity]:
    """All activities for a user, oldest first. ``since`` is an inclusive UTC bound."""
    query = Activity.query.filter(Activity.user_id == user_id)
    if since is not None:
        query = query.filter(Activity.created_at >= since)
    return query.order_by(Activity.created_at, Activity.id).all()


def recent_activities(user_id: int, page: int = 1, per_page: int = 20):
    """Newest-first page of a user's activities."""
    return Activity.query.filter_by(user_id=user_id).order_by(
        Activity.created_at.desc(), Activity.id.desc()
    ).paginate(page=page, per_page=per_page, error_out=False)


def append_activity(user_id: int, category: str, activity_type: str, amount: float,
                    impact: ImpactResult, created_at: Optional[datetime] = None,
                    xp_awarded: int = 0, commit: bool = True) -> int:
    """Persist an activity with its already computed impact and return its id."""
    activity = Activity(
        user_id=user_id,
        category=category,
        activity_type=activity_type,
        amount=amount,
        co2_impact=impact.co2_impact,
        financial_impact=impact.financial_impact,
        accuracy=impact.accuracy,
        source=impact.source,
        xp_awarded=xp_awarded,
        created_at=created_at or datetime.utcnow(),
    )
    db.session.add(activity)
    if commit:
        db.session.commit()
    else:
        db.session.flush()
    return activity.id


def get_cumulative_xp(user_id: int) -> int:
    user = db.session.get(User, user_id)
    if not user:
        return 0
    return user.total_xp or 0


def get_unlocked_ids(user_id: int) -> List[str]:
    rows = UserAchievement.query.filter_by(user_id=user_id).order_by(UserAchievement.unlocked_at).all()
    return [row.achievement_id for row in rows]


def _insert_unlock(user_id: int, achievement_id: str) -> UserAchievement:
    unlock = UserAchievement(user_id=user_id, achievement_id=achievement_id)
    db.session.add(unlock)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AchievementAlreadyUnlocked(user_id, achievement_id) from None
    return unlock


def record_achievement_unlock(user_id: int, achievement_id: str) -> bool:
    """Record an unlock. Returns False when the user already had it."""
    try:
        _insert_unlock(user_id, achievement_id)
    except AchievementAlreadyUnlocked:
        logger.info(f"Achievement {achievement_id} already unlocked for user {user_id}")
        return False
    logger.info(f"User {user_id} unlocked achievement {achievement_id}")
    return True


# --- orchestration ----------------------------------------------------------

def _xp_settings() -> Dict[str, float]:
    config = current_app.config if has_app_context() else {}
    return {
        'base': config.get('XP_BASE', gamification_service.XP_BASE),
        'co2_weight': config.get('XP_CO2_WEIGHT', gamification_service.XP_CO2_WEIGHT),
        'cost_weight': config.get('XP_COST_WEIGHT', gamification_service.XP_COST_WEIGHT),
    }


def _add_xp(user: User, amount: int) -> int:
    # Increment in SQL, never write back a total computed in Python
    db.session.execute(
        db.update(User).where(User.id == user.id).values(total_xp=User.total_xp + amount)
    )
    db.session.refresh(user)
    return user.total_xp


def log_activity(user_id: int, category: str, activity_type: str, amount,
                 created_at: Optional[datetime] = None, calculator=None) -> Optional[Dict[str, Any]]:
    """
    Log one activity and apply every consequence of it.

    Args:
        user_id: Owner of the activity
        category: travel, food, shopping or energy
        activity_type: Type within the category
        amount: Quantity in the category's unit
        created_at: UTC creation time (defaults to now)
        calculator: Impact calculator; defaults to the application's

    Returns:
        Reward summary dict, or None if the user does not exist.

    Raises:
        ImpactCalculationError: For unknown types or invalid amounts. Nothing
            is persisted in that case.
    """
    user = db.session.get(User, user_id)
    if not user:
        return None

    if calculator is None:
        calculator = current_app.extensions['impact_calculator']
    impact = calculator.compute(category, activity_type, amount, region=user.region)

    created_at = created_at or datetime.utcnow()
    tz = app_timezone()
    today = local_today(tz)
    history = list_activities(user_id)

    streak = compute_streak([a.created_at for a in history] + [created_at], today=today, tz=tz)
    xp = gamification_service.award_xp(
        impact.co2_impact, impact.financial_impact, streak.multiplier, **_xp_settings()
    )
    level_before = gamification_service.current_level(user.total_xp or 0)

    try:
        activity_id = append_activity(
            user_id, category, activity_type, float(amount), impact,
            created_at=created_at, xp_awarded=xp, commit=False,
        )
        total_xp = _add_xp(user, xp)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info(f"User {user_id} logged {category}/{activity_type} x{amount}: +{xp} XP")

    activity = db.session.get(Activity, activity_id)
    joined = ChallengeParticipant.query.filter_by(user_id=user_id).count()
    stats = build_user_stats(history + [activity], today=today, tz=tz,
                             total_xp=total_xp, challenges_joined=joined)

    unlocked = []
    for achievement in achievement_service.newly_unlocked(stats, get_unlocked_ids(user_id)):
        if record_achievement_unlock(user_id, achievement.id):
            unlocked.append(achievement)

    bonus = sum(achievement.xp_reward for achievement in unlocked)
    if bonus:
        total_xp = _add_xp(user, bonus)
        db.session.commit()

    if is_eco_choice(category, activity_type):
        credit_activity_to_challenges(user_id, category, float(amount), today=today)

    level_after = gamification_service.current_level(total_xp)
    leveled_up = level_after.level > level_before.level

    message = f"Activity logged! +{xp} XP"
    if streak.multiplier > 1:
        message += f" ({streak.multiplier}x streak bonus)"
    if leveled_up:
        message += f". Level up: {level_after.title}!"

    return {
        'activity': activity.to_dict(),
        'impact': impact.to_dict(),
        'xp_awarded': xp,
        'bonus_xp': bonus,
        'total_xp': total_xp,
        'streak': streak.to_dict(),
        'new_achievements': [achievement.to_dict() for achievement in unlocked],
        'leveled_up': leveled_up,
        'level': gamification_service.level_progress(total_xp),
        'message': message,
    }
