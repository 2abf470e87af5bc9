"""
Unit tests for the activity record store and the logging flow.
"""
import pytest
from datetime import datetime, timedelta
from unittest.mock import Mock

from extensions import db
from models import Activity, CommunityChallenge, User, UserAchievement
from services import activity_service, challenge_service
from services.exceptions import InvalidAmount, UnknownActivityType
from services.impact_service import ImpactResult


class TestRecordStore:

    def test_append_and_list(self, db_session, test_user, static_impact):
        now = datetime.utcnow()
        later_id = activity_service.append_activity(test_user.id, 'travel', 'Car', 10, static_impact, created_at=now)
        earlier_id = activity_service.append_activity(test_user.id, 'travel', 'Car', 10, static_impact,
                                                      created_at=now - timedelta(hours=3))

        activities = activity_service.list_activities(test_user.id)

        assert [a.id for a in activities] == [earlier_id, later_id]
        assert activities[0].co2_impact == 2.1
        assert activities[0].source == 'Static estimates'

    def test_list_since(self, db_session, test_user, static_impact):
        now = datetime.utcnow()
        activity_service.append_activity(test_user.id, 'food', 'Vegan', 1, static_impact, created_at=now - timedelta(days=3))
        recent = activity_service.append_activity(test_user.id, 'food', 'Vegan', 1, static_impact, created_at=now)

        activities = activity_service.list_activities(test_user.id, since=now - timedelta(days=1))

        assert [a.id for a in activities] == [recent]

    def test_list_only_own(self, db_session, test_user, other_user, static_impact):
        activity_service.append_activity(other_user.id, 'food', 'Meat', 1, static_impact)
        assert activity_service.list_activities(test_user.id) == []

    def test_cumulative_xp(self, db_session, test_user):
        assert activity_service.get_cumulative_xp(test_user.id) == 0
        test_user.total_xp = 340
        db_session.commit()
        assert activity_service.get_cumulative_xp(test_user.id) == 340
        assert activity_service.get_cumulative_xp(999) == 0

    def test_unlock_recorded_once(self, db_session, test_user):
        assert activity_service.record_achievement_unlock(test_user.id, 'first_activity') is True
        assert activity_service.record_achievement_unlock(test_user.id, 'first_activity') is False
        assert UserAchievement.query.filter_by(user_id=test_user.id).count() == 1

    def test_unlock_is_per_user(self, db_session, test_user, other_user):
        assert activity_service.record_achievement_unlock(test_user.id, 'week_streak')
        assert activity_service.record_achievement_unlock(other_user.id, 'week_streak')
        assert activity_service.get_unlocked_ids(test_user.id) == ['week_streak']


class TestLogActivity:

    def test_first_activity(self, app, test_user):
        result = activity_service.log_activity(test_user.id, 'travel', 'Car', 5)

        # floor(10 + 2*1.05 + 0.01*40) = 12
        assert result['xp_awarded'] == 12
        assert result['impact']['co2_impact'] == pytest.approx(1.05)
        assert [a['id'] for a in result['new_achievements']] == ['first_activity']
        assert result['bonus_xp'] == 50
        assert result['total_xp'] == 62
        assert result['streak']['current'] == 1
        assert result['activity']['xp_awarded'] == 12
        assert result['message'].startswith('Activity logged! +12 XP')
        assert activity_service.get_cumulative_xp(test_user.id) == 62

    def test_second_activity_no_repeat_unlock(self, app, test_user):
        activity_service.log_activity(test_user.id, 'food', 'Vegan', 1)
        result = activity_service.log_activity(test_user.id, 'food', 'Vegan', 1)

        assert result['new_achievements'] == []
        assert result['bonus_xp'] == 0
        assert UserAchievement.query.filter_by(user_id=test_user.id).count() == 1

    def test_streak_multiplier_applied(self, app, test_user, add_activity):
        now = datetime.utcnow()
        add_activity(test_user, 'food', 'Vegan', 1, created_at=now - timedelta(days=1))
        add_activity(test_user, 'food', 'Vegan', 1, created_at=now - timedelta(days=2))

        result = activity_service.log_activity(test_user.id, 'travel', 'Car', 5, created_at=now)

        assert result['streak']['current'] == 3
        assert result['streak']['multiplier'] == 1.5
        assert result['xp_awarded'] == 18
        assert '1.5x streak bonus' in result['message']

    def test_level_up(self, app, db_session, test_user):
        test_user.total_xp = 90
        db_session.commit()

        # 10 + 2*10 + 0.01*2000 = 50 XP takes the user past 100
        result = activity_service.log_activity(test_user.id, 'shopping', 'Electronics', 1)

        assert result['leveled_up'] is True
        assert result['level']['current_level']['level'] == 2
        assert 'Level up' in result['message']

    @pytest.mark.parametrize('category,activity_type,amount,error', [
        ('travel', 'Teleport', 5, UnknownActivityType),
        ('gardening', 'Compost', 5, UnknownActivityType),
        ('travel', 'Car', -5, InvalidAmount),
        ('travel', 'Car', 'far', InvalidAmount),
    ])
    def test_rejected_activity_not_persisted(self, app, test_user, category, activity_type, amount, error):
        with pytest.raises(error):
            activity_service.log_activity(test_user.id, category, activity_type, amount)

        assert Activity.query.count() == 0
        assert activity_service.get_cumulative_xp(test_user.id) == 0

    def test_unknown_user(self, app):
        assert activity_service.log_activity(999, 'travel', 'Car', 5) is None

    def test_injected_calculator(self, app, test_user):
        calculator = Mock()
        calculator.compute.return_value = ImpactResult(3.0, 50.0, accuracy=0.9, source='Test source')

        result = activity_service.log_activity(test_user.id, 'energy', 'Electricity', 6, calculator=calculator)

        calculator.compute.assert_called_once_with('energy', 'Electricity', 6, region='IN')
        assert result['activity']['source'] == 'Test source'
        assert result['xp_awarded'] == 16

    def test_eco_choice_credits_challenges(self, app, test_user, community_challenges):
        travel = CommunityChallenge.query.filter_by(category='travel').first()
        challenge_service.join_challenge(test_user.id, travel.id)

        activity_service.log_activity(test_user.id, 'travel', 'Bike', 12)
        activity_service.log_activity(test_user.id, 'travel', 'Car', 30)

        assert travel.current_progress == 12


class TestConcurrentXp:

    def test_interleaved_awards_are_not_lost(self, app, test_user):
        user_id = test_user.id
        user = db.session.get(User, user_id)

        # First request: award applied but not yet committed
        activity_service._add_xp(user, 10)

        # Second request completes in its own session in between
        with app.app_context():
            result = activity_service.log_activity(user_id, 'travel', 'Car', 10)
            assert result['xp_awarded'] + result['bonus_xp'] == 65

        db.session.commit()

        assert activity_service.get_cumulative_xp(user_id) == 75

    def test_increment_ignores_stale_in_memory_total(self, db_session, test_user):
        db_session.execute(
            db.update(User).where(User.id == test_user.id).values(total_xp=40)
            .execution_options(synchronize_session=False)
        )

        assert activity_service._add_xp(test_user, 5) == 45
