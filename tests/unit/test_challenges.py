"""
Unit tests for personalised and community challenges.
"""
import pytest
from datetime import date, datetime, timedelta

from models import ChallengeParticipant, CommunityChallenge
from services import challenge_service
from services.stats_service import UserStats

NOW = datetime(2024, 6, 15, 9, 30)


def challenge_ids(challenges):
    return [challenge['id'] for challenge in challenges]


class TestGeneratedChallenges:

    def test_car_heavy_user_gets_green_commute(self):
        stats = UserStats(car_usage=4, eco_transport_count=1)
        challenges = challenge_service.generate_challenges(stats, now=NOW)
        assert challenge_ids(challenges) == ['green_commute', 'daily_consistency']
        assert challenges[0]['target'] == 5

    def test_meat_heavy_user_gets_plant_power(self):
        stats = UserStats(meat_consumption=3, plant_based_meals=2)
        challenges = challenge_service.generate_challenges(stats, now=NOW)
        assert 'plant_power' in challenge_ids(challenges)

    def test_balanced_user_only_gets_consistency(self):
        stats = UserStats(car_usage=2, eco_transport_count=2, meat_consumption=1, plant_based_meals=1)
        assert challenge_ids(challenge_service.generate_challenges(stats, now=NOW)) == ['daily_consistency']

    def test_consistency_tracks_current_streak(self):
        stats = UserStats(current_streak=4)
        consistency = challenge_service.generate_challenges(stats, now=NOW)[-1]
        assert consistency['current'] == 4
        assert consistency['target'] == 7

    def test_deadline_one_week_out(self):
        for challenge in challenge_service.generate_challenges(UserStats(car_usage=1), now=NOW):
            assert challenge['deadline'] == NOW + timedelta(days=7)

    def test_recomputed_not_shared(self):
        stats = UserStats()
        first = challenge_service.generate_challenges(stats, now=NOW)
        first[0]['current'] = 99
        assert challenge_service.generate_challenges(stats, now=NOW)[0]['current'] == 0


class TestCommunityChallenges:

    def test_default_challenges_seeded(self, db_session, community_challenges):
        active = challenge_service.get_active_community_challenges()
        assert {c.title for c in active} == {'Plant-Based Month', 'Car-Free Week', 'Power Down', 'Second Life'}

    def test_seeding_twice_does_not_duplicate(self, db_session, community_challenges):
        from models import init_default_challenges
        init_default_challenges()
        assert CommunityChallenge.query.count() == 4

    def test_expired_challenges_hidden(self, db_session):
        challenge_service.create_community_challenge(
            'Old', 'Finished challenge', 'food', 10, 'badge',
            end_date=date(2020, 1, 31), start_date=date(2020, 1, 1))
        assert challenge_service.get_active_community_challenges() == []

    def test_join_is_idempotent(self, db_session, test_user, community_challenges):
        challenge = CommunityChallenge.query.filter_by(title='Car-Free Week').first()

        first = challenge_service.join_challenge(test_user.id, challenge.id)
        second = challenge_service.join_challenge(test_user.id, challenge.id)

        assert first.id == second.id
        assert ChallengeParticipant.query.filter_by(user_id=test_user.id).count() == 1
        assert challenge_service.joined_challenge_ids(test_user.id) == {challenge.id}

    def test_join_unknown_challenge(self, db_session, test_user):
        assert challenge_service.join_challenge(test_user.id, 999) is None

    def test_progress_capped_at_goal(self, db_session, test_user):
        challenge = challenge_service.create_community_challenge(
            'Tiny', 'Ten kilometres together', 'travel', 10, 'badge',
            end_date=date.today() + timedelta(days=3))
        challenge_service.join_challenge(test_user.id, challenge.id)

        participant = challenge_service.update_challenge_progress(test_user.id, challenge.id, 25)

        assert participant.progress == 25
        assert challenge.current_progress == 10
        assert challenge.progress_percentage == 100

    def test_progress_requires_membership(self, db_session, test_user, community_challenges):
        challenge = CommunityChallenge.query.first()
        assert challenge_service.update_challenge_progress(test_user.id, challenge.id, 5) is None
        assert challenge.current_progress == 0

    def test_credit_only_matching_category(self, db_session, test_user, community_challenges):
        travel = CommunityChallenge.query.filter_by(category='travel').first()
        food = CommunityChallenge.query.filter_by(category='food').first()
        challenge_service.join_challenge(test_user.id, travel.id)
        challenge_service.join_challenge(test_user.id, food.id)

        credited = challenge_service.credit_activity_to_challenges(test_user.id, 'travel', 12)

        assert credited == 1
        assert travel.current_progress == 12
        assert food.current_progress == 0

    def test_credit_waits_for_start_date(self, db_session, test_user):
        today = date(2024, 6, 15)
        upcoming = challenge_service.create_community_challenge(
            'Monsoon Miles', 'Cycle through the rains', 'travel', 100, 'badge',
            end_date=today + timedelta(days=30), start_date=today + timedelta(days=1))
        challenge_service.join_challenge(test_user.id, upcoming.id)

        assert challenge_service.credit_activity_to_challenges(test_user.id, 'travel', 12, today=today) == 0
        assert upcoming.current_progress == 0

        tomorrow = today + timedelta(days=1)
        assert challenge_service.credit_activity_to_challenges(test_user.id, 'travel', 12, today=tomorrow) == 1
        assert upcoming.current_progress == 12

    def test_to_dict(self, db_session, test_user, community_challenges):
        challenge = CommunityChallenge.query.filter_by(title='Second Life').first()
        challenge_service.join_challenge(test_user.id, challenge.id)

        data = challenge.to_dict()

        assert data['participants'] == 1
        assert data['goal'] == 500
        assert data['progress_percentage'] == 0
