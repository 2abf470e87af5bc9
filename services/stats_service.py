"""UserStats aggregation.

``build_user_stats`` is a pure roll-up over a list of activity records (ORM
rows or anything exposing the same attributes). ``get_user_stats`` loads the
records for a user and applies it.
"""
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from typing import Iterable, Optional

from services import impact_factors as factors
from services.streak_service import compute_streak
from services.timezone_service import app_timezone, local_today, to_local_date


@dataclass(frozen=True)
class UserStats:
    total_co2_saved: float = 0.0
    total_money_saved: float = 0.0
    weekly_co2_saved: float = 0.0
    weekly_money_saved: float = 0.0
    total_activities: int = 0
    eco_transport_count: int = 0
    car_usage: int = 0
    plant_based_meals: int = 0
    meat_consumption: int = 0
    category_diversity: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    zero_emission_days: int = 0
    challenges_joined: int = 0
    total_xp: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def build_user_stats(activities: Iterable, today: Optional[date] = None, tz: Optional[str] = None,
                     total_xp: int = 0, challenges_joined: int = 0) -> UserStats:
    """Aggregate statistics for one user's activities."""
    tz = tz or app_timezone()
    if today is None:
        today = local_today(tz)
    week_start = today - timedelta(days=6)

    activities = list(activities)
    kinds = defaultdict(int)
    categories = set()
    travel_co2_by_day = defaultdict(float)
    total_co2 = total_money = weekly_co2 = weekly_money = 0.0

    for activity in activities:
        co2 = activity.co2_impact or 0.0
        money = activity.financial_impact or 0.0
        day = to_local_date(activity.created_at, tz)

        total_co2 += co2
        total_money += money
        if week_start <= day <= today:
            weekly_co2 += co2
            weekly_money += money

        categories.add(activity.category)
        kind = factors.classify(activity.category, activity.activity_type)
        if kind:
            kinds[kind] += 1
        if activity.category == factors.TRAVEL:
            travel_co2_by_day[day] += co2

    streak = compute_streak((a.created_at for a in activities), today=today, tz=tz)

    return UserStats(
        total_co2_saved=round(total_co2, 2),
        total_money_saved=round(total_money, 2),
        weekly_co2_saved=round(weekly_co2, 2),
        weekly_money_saved=round(weekly_money, 2),
        total_activities=len(activities),
        eco_transport_count=kinds[factors.KIND_ECO_TRANSPORT],
        car_usage=kinds[factors.KIND_CAR],
        plant_based_meals=kinds[factors.KIND_PLANT_BASED],
        meat_consumption=kinds[factors.KIND_MEAT],
        category_diversity=len(categories),
        current_streak=streak.current,
        longest_streak=streak.longest,
        zero_emission_days=sum(1 for co2 in travel_co2_by_day.values() if co2 == 0),
        challenges_joined=challenges_joined,
        total_xp=total_xp,
    )


def get_user_stats(user_id: int, today: Optional[date] = None) -> Optional[UserStats]:
    """Load a user's activities and aggregate them."""
    from extensions import db
    from models import User, ChallengeParticipant
    from services.activity_service import list_activities

    user = db.session.get(User, user_id)
    if not user:
        return None

    joined = ChallengeParticipant.query.filter_by(user_id=user_id).count()
    return build_user_stats(
        list_activities(user_id),
        today=today,
        total_xp=user.total_xp or 0,
        challenges_joined=joined,
    )
