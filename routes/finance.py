from flask import Blueprint, jsonify, request

from routes.auth import get_current_user, login_required
from services import finance_service

finance_bp = Blueprint('finance', __name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@finance_bp.route('/transactions', methods=['GET'])
@login_required
def get_transactions():
    user = get_current_user()
    transactions = finance_service.list_transactions(user.id)
    return jsonify({'success': True, 'transactions': [t.to_dict() for t in transactions]})


@finance_bp.route('/transactions', methods=['POST'])
@login_required
def create_transaction():
    data = _json_body()
    user = get_current_user()
    transaction = finance_service.add_transaction(
        user.id,
        type=data.get('type'),
        category=data.get('category'),
        amount=data.get('amount'),
        description=data.get('description', ''),
        on=data.get('date'),
    )
    return jsonify({'success': True, 'transaction': transaction.to_dict()}), 201


@finance_bp.route('/budgets', methods=['GET'])
@login_required
def get_budgets():
    user = get_current_user()
    return jsonify({'success': True, 'budgets': finance_service.get_budgets(user.id)})


@finance_bp.route('/budgets', methods=['POST'])
@login_required
def save_budget():
    data = _json_body()
    user = get_current_user()
    budget = finance_service.set_budget(user.id, data.get('category'), data.get('monthly_limit'))
    return jsonify({'success': True, 'budget': budget.to_dict()})


@finance_bp.route('/goals', methods=['GET'])
@login_required
def get_goals():
    user = get_current_user()
    return jsonify({'success': True, 'goals': [goal.to_dict() for goal in finance_service.list_goals(user.id)]})


@finance_bp.route('/goals', methods=['POST'])
@login_required
def create_goal():
    data = _json_body()
    user = get_current_user()
    goal = finance_service.create_goal(
        user.id,
        title=data.get('title'),
        target_amount=data.get('target_amount'),
        target_date=data.get('target_date'),
        current_amount=data.get('current_amount', 0),
        category=data.get('category', 'savings'),
    )
    return jsonify({'success': True, 'goal': goal.to_dict()}), 201


@finance_bp.route('/goals/<int:goal_id>/contribute', methods=['POST'])
@login_required
def contribute(goal_id):
    user = get_current_user()
    goal = finance_service.contribute_to_goal(user.id, goal_id, _json_body().get('amount'))
    if goal is None:
        return jsonify({'success': False, 'message': 'Goal not found'}), 404
    return jsonify({'success': True, 'goal': goal.to_dict()})


@finance_bp.route('/summary', methods=['GET'])
@login_required
def get_summary():
    user = get_current_user()
    return jsonify({'success': True, 'summary': finance_service.get_summary(user.id)})
