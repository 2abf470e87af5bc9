"""Leaderboard scoring and ranking."""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple

from extensions import db
from models import User


@dataclass(frozen=True)
class ScoreWeights:
    co2: float = 10
    streak: float = 50
    diversity: float = 100


DEFAULT_WEIGHTS = ScoreWeights()


def weights_from_config(config) -> ScoreWeights:
    return ScoreWeights(
        co2=config.get('LEADERBOARD_CO2_WEIGHT', DEFAULT_WEIGHTS.co2),
        streak=config.get('LEADERBOARD_STREAK_WEIGHT', DEFAULT_WEIGHTS.streak),
        diversity=config.get('LEADERBOARD_DIVERSITY_WEIGHT', DEFAULT_WEIGHTS.diversity),
    )


def score(stats, weights: ScoreWeights = DEFAULT_WEIGHTS) -> float:
    """Single comparable number: CO2 saved, streak length and category diversity."""
    return (stats.total_co2_saved * weights.co2
            + stats.current_streak * weights.streak
            + stats.category_diversity * weights.diversity)


def rank(entries: Iterable[Tuple[int, object]], weights: ScoreWeights = DEFAULT_WEIGHTS) -> List[dict]:
    """Rank (user_id, stats) pairs by score, highest first; ties go to the lower user id."""
    scored = [(user_id, stats, score(stats, weights)) for user_id, stats in entries]
    scored.sort(key=lambda item: (-item[2], item[0]))
    return [
        {
            'rank': position,
            'user_id': user_id,
            'score': round(value, 2),
            'co2_saved': stats.total_co2_saved,
            'streak_days': stats.current_streak,
            'category_diversity': stats.category_diversity,
        }
        for position, (user_id, stats, value) in enumerate(scored, start=1)
    ]


def build_leaderboard(limit: int = 20, weights: ScoreWeights = DEFAULT_WEIGHTS,
                      today: Optional[date] = None) -> List[dict]:
    """Score every user from their stored activities."""
    from services.stats_service import get_user_stats

    users = db.session.execute(db.select(User)).scalars().all()
    entries = [(user.id, get_user_stats(user.id, today=today)) for user in users]
    ranked = rank(entries, weights)[:limit]

    names = {user.id: user.display_name or user.email.split('@')[0] for user in users}
    for entry in ranked:
        entry['display_name'] = names.get(entry['user_id'])
    return ranked
