"""Session helpers shared by the JSON blueprints.

Registration and login are handled outside this service; a request is
authenticated when the session carries a ``user_id``.
"""
from functools import wraps

from flask import jsonify, session

from extensions import db
from models import User


def login_required(f):
    """Decorator to require a logged-in user for API routes"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user_id' not in session or get_current_user() is None:
            return jsonify({'success': False, 'message': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function


def get_current_user():
    """Get current logged in user"""
    if 'user_id' in session:
        return db.session.get(User, session['user_id'])
    return None
