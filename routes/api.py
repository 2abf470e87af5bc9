from flask import Blueprint, current_app, jsonify, request

from routes.auth import get_current_user, login_required
from services import achievement_service, challenge_service, suggestion_service
from services.activity_service import get_unlocked_ids, list_activities, log_activity, recent_activities
from services.analytics_service import get_user_analytics
from services.gamification_service import all_levels, level_progress
from services.impact_factors import UNITS, activity_types
from services.leaderboard_service import build_leaderboard, weights_from_config
from services.stats_service import get_user_stats
from services.streak_service import streak_multiplier
from services.timezone_service import local_today

api_bp = Blueprint('api', __name__)

MAX_ANALYTICS_DAYS = 365


def _int_arg(name, default, minimum=1, maximum=None):
    """Parse a positive integer query argument; returns None when invalid."""
    raw = request.args.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return None
    if value < minimum or (maximum is not None and value > maximum):
        return None
    return value


@api_bp.route('/activities', methods=['POST'])
@login_required
def create_activity():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({'success': False, 'message': 'No data provided'}), 400

    category = data.get('category')
    activity_type = data.get('activity_type') or data.get('type')
    amount = data.get('amount')
    if not category or not activity_type or amount is None:
        return jsonify({'success': False, 'message': 'category, activity_type and amount are required'}), 400

    user = get_current_user()
    result = log_activity(user.id, category, activity_type, amount)
    return jsonify({'success': True, **result}), 201


@api_bp.route('/activities', methods=['GET'])
@login_required
def get_activities():
    page = _int_arg('page', 1)
    if page is None:
        return jsonify({'success': False, 'message': 'page must be a positive integer'}), 400

    user = get_current_user()
    pagination = recent_activities(user.id, page=page, per_page=current_app.config['ACTIVITIES_PER_PAGE'])
    return jsonify({
        'success': True,
        'activities': [activity.to_dict() for activity in pagination.items],
        'page': pagination.page,
        'pages': pagination.pages,
        'total': pagination.total,
    })


@api_bp.route('/activity-types', methods=['GET'])
def get_activity_types():
    return jsonify({'success': True, 'activity_types': activity_types(), 'units': UNITS})


@api_bp.route('/stats', methods=['GET'])
@login_required
def get_stats():
    user = get_current_user()
    stats = get_user_stats(user.id)
    return jsonify({
        'success': True,
        'stats': stats.to_dict(),
        'streak_multiplier': streak_multiplier(stats.current_streak),
    })


@api_bp.route('/progress', methods=['GET'])
@login_required
def get_progress():
    user = get_current_user()
    stats = get_user_stats(user.id)
    return jsonify({
        'success': True,
        'progress': level_progress(stats.total_xp),
        'streak': {
            'current': stats.current_streak,
            'longest': stats.longest_streak,
            'multiplier': streak_multiplier(stats.current_streak),
        },
        'levels': all_levels(),
    })


@api_bp.route('/achievements', methods=['GET'])
@login_required
def get_achievements():
    user = get_current_user()
    stats = get_user_stats(user.id)
    unlocked = get_unlocked_ids(user.id)
    return jsonify({
        'success': True,
        'achievements': achievement_service.achievement_progress(stats, unlocked),
        'unlocked_count': len(unlocked),
    })


@api_bp.route('/challenges', methods=['GET'])
@login_required
def get_challenges():
    user = get_current_user()
    challenges = challenge_service.generate_challenges(get_user_stats(user.id))
    for challenge in challenges:
        challenge['deadline'] = challenge['deadline'].isoformat()
    return jsonify({'success': True, 'challenges': challenges})


@api_bp.route('/community-challenges', methods=['GET'])
@login_required
def get_community_challenges():
    user = get_current_user()
    joined = challenge_service.joined_challenge_ids(user.id)
    challenges = []
    for challenge in challenge_service.get_active_community_challenges(local_today()):
        entry = challenge.to_dict()
        entry['joined'] = challenge.id in joined
        challenges.append(entry)
    return jsonify({'success': True, 'challenges': challenges})


@api_bp.route('/community-challenges/<int:challenge_id>/join', methods=['POST'])
@login_required
def join_community_challenge(challenge_id):
    user = get_current_user()
    participant = challenge_service.join_challenge(user.id, challenge_id)
    if participant is None:
        return jsonify({'success': False, 'message': 'Challenge not found'}), 404

    current_app.logger.info(f'User {user.id} joined challenge {challenge_id}')
    return jsonify({
        'success': True,
        'challenge': participant.challenge.to_dict(),
        'progress': participant.progress,
    })


@api_bp.route('/leaderboard', methods=['GET'])
@login_required
def get_leaderboard():
    limit = _int_arg('limit', current_app.config['LEADERBOARD_SIZE'], maximum=100)
    if limit is None:
        return jsonify({'success': False, 'message': 'limit must be between 1 and 100'}), 400

    user = get_current_user()
    entries = build_leaderboard(limit=limit, weights=weights_from_config(current_app.config))
    for entry in entries:
        entry['is_current_user'] = entry['user_id'] == user.id
    return jsonify({'success': True, 'leaderboard': entries})


@api_bp.route('/analytics', methods=['GET'])
@login_required
def get_analytics():
    days = _int_arg('days', current_app.config['ANALYTICS_DEFAULT_DAYS'], maximum=MAX_ANALYTICS_DAYS)
    if days is None:
        return jsonify({'success': False, 'message': f'days must be between 1 and {MAX_ANALYTICS_DAYS}'}), 400

    user = get_current_user()
    return jsonify({'success': True, 'analytics': get_user_analytics(user.id, days=days)})


@api_bp.route('/suggestions/validate', methods=['POST'])
@login_required
def validate_suggestions():
    data = request.get_json(silent=True)
    suggestions = data.get('suggestions') if isinstance(data, dict) else None
    if not isinstance(suggestions, list):
        return jsonify({'success': False, 'message': 'suggestions must be a list'}), 400

    user = get_current_user()
    validated = suggestion_service.validate_suggestions(suggestions, list_activities(user.id))
    return jsonify({
        'success': True,
        'suggestions': validated,
        'rejected': len(suggestions) - len(validated),
    })
