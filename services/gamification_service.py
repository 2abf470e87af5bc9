"""XP awards and the level ladder."""
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

XP_BASE = 10
XP_CO2_WEIGHT = 2
XP_COST_WEIGHT = 0.01


@dataclass(frozen=True)
class Level:
    level: int
    title: str
    xp_threshold: int
    benefits: Tuple[str, ...] = field(default_factory=tuple)
    icon: str = ''

    def to_dict(self) -> dict:
        return {
            'level': self.level,
            'title': self.title,
            'xp_threshold': self.xp_threshold,
            'benefits': list(self.benefits),
            'icon': self.icon,
        }


# Ordered ascending by threshold; the last rung is terminal
LEVELS: Tuple[Level, ...] = (
    Level(1, 'Eco Novice', 0, ('Basic tracking',), '🌱'),
    Level(2, 'Green Explorer', 100, ('AI suggestions',), '🌿'),
    Level(3, 'Sustainability Seeker', 300, ('Advanced analytics',), '🍃'),
    Level(4, 'Climate Champion', 700, ('Community features',), '🌳'),
    Level(5, 'Carbon Ninja', 1300, ('Premium insights',), '🥷'),
    Level(6, 'Eco Warrior', 2100, ('Leadership board',), '⚔️'),
    Level(7, 'Planet Protector', 3100, ('Custom goals',), '🛡️'),
    Level(8, 'Green Guru', 4300, ('Mentor status',), '🧘'),
    Level(9, 'Sustainability Sage', 5800, ('Expert insights',), '🧙'),
    Level(10, 'Earth Guardian', 7800, ('Ultimate status',), '🌍'),
)


def award_xp(co2_impact: float, financial_impact: float, multiplier: float = 1.0,
             base: float = XP_BASE, co2_weight: float = XP_CO2_WEIGHT,
             cost_weight: float = XP_COST_WEIGHT) -> int:
    """XP earned for one activity.

    The raw award is floored to an integer before the streak multiplier is
    applied, and floored again afterwards so totals stay integral.
    """
    raw = math.floor(base + co2_weight * max(0.0, co2_impact) + cost_weight * max(0.0, financial_impact))
    return int(math.floor(raw * multiplier))


def _level_index(total_xp: int, ladder: Tuple[Level, ...] = LEVELS) -> int:
    xp = max(0, total_xp)
    for index in range(len(ladder) - 1, -1, -1):
        if xp >= ladder[index].xp_threshold:
            return index
    return 0


def current_level(total_xp: int, ladder: Tuple[Level, ...] = LEVELS) -> Level:
    return ladder[_level_index(total_xp, ladder)]


def next_level(total_xp: int, ladder: Tuple[Level, ...] = LEVELS) -> Optional[Level]:
    index = _level_index(total_xp, ladder) + 1
    return ladder[index] if index < len(ladder) else None


def progress_percent(total_xp: int, ladder: Tuple[Level, ...] = LEVELS) -> float:
    """Progress from the current rung to the next, clamped to [0, 100]."""
    current = current_level(total_xp, ladder)
    upcoming = next_level(total_xp, ladder)
    if upcoming is None:
        return 100.0
    span = upcoming.xp_threshold - current.xp_threshold
    percent = (max(0, total_xp) - current.xp_threshold) / span * 100
    return min(100.0, max(0.0, percent))


def level_progress(total_xp: int) -> dict:
    current = current_level(total_xp)
    upcoming = next_level(total_xp)
    return {
        'total_xp': total_xp,
        'current_level': current.to_dict(),
        'next_level': upcoming.to_dict() if upcoming else None,
        'xp_to_next': (upcoming.xp_threshold - max(0, total_xp)) if upcoming else 0,
        'progress_percent': progress_percent(total_xp),
    }


def all_levels() -> List[dict]:
    return [level.to_dict() for level in LEVELS]
