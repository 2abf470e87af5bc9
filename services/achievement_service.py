"""Achievement catalog and evaluation.

Each achievement is a row of data: a UserStats metric and the threshold it
must reach. Evaluation is pure; recording unlocks exactly once is done by
``services.activity_service.record_achievement_unlock``.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

COMMON = 'Common'
RARE = 'Rare'
EPIC = 'Epic'
LEGENDARY = 'Legendary'


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    icon: str
    rarity: str
    xp_reward: int
    metric: str  # UserStats field the predicate reads
    threshold: float
    max_progress: int

    def is_satisfied(self, stats) -> bool:
        return getattr(stats, self.metric, 0) >= self.threshold

    def progress(self, stats) -> float:
        return min(getattr(stats, self.metric, 0), self.max_progress)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'icon': self.icon,
            'rarity': self.rarity,
            'xp_reward': self.xp_reward,
            'max_progress': self.max_progress,
        }


ACHIEVEMENTS = (
    Achievement('first_activity', 'First Steps', 'Log your first eco-activity',
                '👶', COMMON, 50, 'total_activities', 1, 1),
    Achievement('week_streak', 'Weekly Warrior', 'Maintain a 7-day activity streak',
                '🔥', RARE, 200, 'current_streak', 7, 7),
    Achievement('transport_switch', 'Transport Transformer',
                'Switch from car to eco-friendly transport 10 times',
                '🚲', RARE, 150, 'eco_transport_count', 10, 10),
    Achievement('co2_saver_100', 'CO₂ Saver', 'Save 100kg of CO₂ emissions',
                '🌬️', EPIC, 300, 'total_co2_saved', 100, 100),
    Achievement('money_saver_5000', 'Penny Pincher', 'Save ₹5,000 through eco-choices',
                '💰', EPIC, 250, 'total_money_saved', 5000, 5000),
    Achievement('month_perfect', 'Monthly Master', 'Log activities every day for a month',
                '📅', EPIC, 500, 'longest_streak', 30, 30),
    Achievement('plant_based_champion', 'Plant-Based Champion', 'Choose plant-based meals 100 times',
                '🥬', EPIC, 400, 'plant_based_meals', 100, 100),
    Achievement('zero_emissions_week', 'Zero Emissions Hero',
                'Achieve net-zero transport emissions on 7 days',
                '⚡', LEGENDARY, 1000, 'zero_emission_days', 7, 7),
    Achievement('community_leader', 'Community Leader', 'Join 50 community challenges',
                '👑', LEGENDARY, 1500, 'challenges_joined', 50, 50),
)

ACHIEVEMENTS_BY_ID = {achievement.id: achievement for achievement in ACHIEVEMENTS}


def get_achievement(achievement_id: str) -> Optional[Achievement]:
    return ACHIEVEMENTS_BY_ID.get(achievement_id)


def evaluate(stats) -> List[Achievement]:
    """Every catalog entry whose predicate holds for ``stats``."""
    return [achievement for achievement in ACHIEVEMENTS if achievement.is_satisfied(stats)]


def newly_unlocked(stats, already_unlocked: Iterable[str]) -> List[Achievement]:
    unlocked = set(already_unlocked)
    return [achievement for achievement in evaluate(stats) if achievement.id not in unlocked]


def achievement_progress(stats, unlocked: Iterable[str] = ()) -> List[dict]:
    """Catalog with per-user progress, e.g. 23/30 for a month-long streak."""
    unlocked = set(unlocked)
    result = []
    for achievement in ACHIEVEMENTS:
        entry = achievement.to_dict()
        entry['progress'] = achievement.progress(stats)
        entry['progress_percentage'] = entry['progress'] / achievement.max_progress * 100
        entry['unlocked'] = achievement.id in unlocked
        result.append(entry)
    return result
