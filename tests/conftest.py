"""
Pytest configuration and shared fixtures for the test suite.
"""
import pytest
from datetime import datetime, timedelta

from app import create_app, db
from models import User, init_default_challenges
from services.activity_service import append_activity
from services.impact_service import compute_impact, ImpactResult
from tests.helpers import TODAY, at_noon, make_record


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app('testing')
    app.config.update({
        'SECRET_KEY': 'test-secret-key',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def db_session(app):
    """Create database session."""
    with app.app_context():
        yield db.session


@pytest.fixture
def test_user(db_session):
    """Create test user."""
    user = User(email='test@example.com', display_name='Tester')
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def other_user(db_session):
    user = User(email='other@example.com', display_name='Other')
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def logged_in_client(client, test_user):
    """Test client with the test user in the session."""
    with client.session_transaction() as sess:
        sess['user_id'] = test_user.id
    return client


@pytest.fixture
def community_challenges(db_session):
    init_default_challenges()


@pytest.fixture
def add_activity(db_session):
    """Store an activity directly, bypassing XP and achievements."""
    def _add(user, category, activity_type, amount, created_at=None):
        impact = compute_impact(category, activity_type, amount)
        return append_activity(user.id, category, activity_type, amount, impact,
                               created_at=created_at or datetime.utcnow())
    return _add


@pytest.fixture
def record():
    return make_record


@pytest.fixture
def static_impact():
    return ImpactResult(co2_impact=2.1, financial_impact=80.0)


@pytest.fixture
def week_of_records():
    """One activity per day for the 7 days ending at TODAY."""
    return [
        make_record('travel', 'Bike', 10, at_noon(TODAY - timedelta(days=offset)))
        for offset in range(7)
    ]
