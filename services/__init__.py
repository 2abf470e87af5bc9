"""Business logic service layer.

The engine modules (impact, streak, gamification, achievement, challenge,
leaderboard and analytics) are pure computations over activity records.
``activity_service`` and ``finance_service`` coordinate them with the
database so route handlers stay thin.
"""

from services.impact_service import compute_impact, EnhancedImpactCalculator  # noqa: F401
from services.streak_service import compute_streak  # noqa: F401
from services.gamification_service import award_xp, level_progress  # noqa: F401
from services.stats_service import build_user_stats, get_user_stats  # noqa: F401
from services.activity_service import (
    list_activities,
    append_activity,
    get_cumulative_xp,
    record_achievement_unlock,
    log_activity,
)  # noqa: F401


__all__ = [
    "compute_impact",
    "EnhancedImpactCalculator",
    "compute_streak",
    "award_xp",
    "level_progress",
    "build_user_stats",
    "get_user_stats",
    "list_activities",
    "append_activity",
    "get_cumulative_xp",
    "record_achievement_unlock",
    "log_activity",
]
