"""
Unit tests for the achievement catalog and evaluation.
"""
import pytest
from dataclasses import replace

from services.achievement_service import (
    ACHIEVEMENTS, achievement_progress, evaluate, get_achievement, newly_unlocked,
)
from services.stats_service import UserStats


def ids(achievements):
    return [achievement.id for achievement in achievements]


class TestEvaluate:

    def test_no_activities_unlocks_nothing(self):
        assert evaluate(UserStats(total_activities=0)) == []

    def test_first_activity_only(self):
        assert ids(evaluate(UserStats(total_activities=1))) == ['first_activity']

    @pytest.mark.parametrize('achievement', ACHIEVEMENTS, ids=lambda a: a.id)
    def test_threshold_is_inclusive(self, achievement):
        at_threshold = replace(UserStats(), **{achievement.metric: achievement.threshold})
        below = replace(UserStats(), **{achievement.metric: achievement.threshold - 1})

        assert achievement.id in ids(evaluate(at_threshold))
        assert achievement.id not in ids(evaluate(below))

    def test_idempotent(self):
        stats = UserStats(total_activities=20, current_streak=8, longest_streak=8, eco_transport_count=12)
        assert evaluate(stats) == evaluate(stats)
        assert ids(evaluate(stats)) == ['first_activity', 'week_streak', 'transport_switch']

    def test_month_perfect_uses_longest_streak(self):
        stats = UserStats(total_activities=30, current_streak=0, longest_streak=30)
        assert 'month_perfect' in ids(evaluate(stats))

    def test_community_leader_counts_joined_challenges(self):
        assert 'community_leader' in ids(evaluate(UserStats(challenges_joined=50)))
        assert 'community_leader' not in ids(evaluate(UserStats(challenges_joined=49)))


class TestNewlyUnlocked:

    def test_excludes_recorded(self):
        stats = UserStats(total_activities=5, current_streak=7, longest_streak=7)
        assert ids(newly_unlocked(stats, ['first_activity'])) == ['week_streak']

    def test_nothing_new(self):
        stats = UserStats(total_activities=5)
        assert newly_unlocked(stats, {'first_activity'}) == []


class TestProgress:

    def test_progress_is_capped(self):
        stats = UserStats(total_activities=3, longest_streak=23, plant_based_meals=250)
        progress = {entry['id']: entry for entry in achievement_progress(stats, ['first_activity'])}

        assert progress['month_perfect']['progress'] == 23
        assert progress['month_perfect']['progress_percentage'] == pytest.approx(23 / 30 * 100)
        assert progress['plant_based_champion']['progress'] == 100
        assert progress['plant_based_champion']['progress_percentage'] == 100
        assert progress['first_activity']['unlocked'] is True
        assert progress['week_streak']['unlocked'] is False

    def test_catalog_lookup(self):
        achievement = get_achievement('zero_emissions_week')
        assert achievement.rarity == 'Legendary'
        assert achievement.xp_reward == 1000
        assert get_achievement('does_not_exist') is None

    def test_catalog_size(self):
        assert len(ACHIEVEMENTS) == 9
        assert len({achievement.id for achievement in ACHIEVEMENTS}) == 9
