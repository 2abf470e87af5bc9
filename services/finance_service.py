"""Finance-related service functions.

Transactions, per-category monthly budgets and savings goals, plus a summary
that folds in the money side of logged eco-activities.
"""
import logging
import math
from calendar import monthrange
from collections import defaultdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from extensions import db
from models import Activity, Budget, FinancialGoal, FinancialTransaction
from services.exceptions import FinanceValidationError
from services.impact_factors import ECO_KINDS, classify
from services.timezone_service import app_timezone, local_today, to_local_date

logger = logging.getLogger('finance')

TRANSACTION_TYPES = ('income', 'expense')


def _positive_amount(value, field: str = 'amount') -> float:
    if isinstance(value, bool):
        raise FinanceValidationError(f"{field} must be a number")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise FinanceValidationError(f"{field} must be a number") from None
    if not math.isfinite(amount) or amount <= 0:
        raise FinanceValidationError(f"{field} must be greater than zero")
    return amount


def _required_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise FinanceValidationError(f"{field} is required")
    return value.strip()


def _parse_date(value, field: str = 'date') -> date:
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise FinanceValidationError(f"{field} must be a date in YYYY-MM-DD format") from None


def month_bounds(day: date) -> Tuple[date, date]:
    return day.replace(day=1), day.replace(day=monthrange(day.year, day.month)[1])


# --- transactions -------------------------------------------------------------

def add_transaction(user_id: int, type: str, category: str, amount, description: str = '',
                    on: Optional[Any] = None) -> FinancialTransaction:
    if type not in TRANSACTION_TYPES:
        raise FinanceValidationError("type must be 'income' or 'expense'")

    transaction = FinancialTransaction(
        user_id=user_id,
        type=type,
        category=_required_text(category, 'category'),
        amount=_positive_amount(amount),
        description=(description or '').strip(),
        date=_parse_date(on) if on is not None else local_today(),
    )
    db.session.add(transaction)
    db.session.commit()
    logger.info(f"User {user_id} added {type} of {transaction.amount} in {transaction.category}")
    return transaction


def list_transactions(user_id: int, start: Optional[date] = None, end: Optional[date] = None) -> List[FinancialTransaction]:
    """Transactions newest first, optionally limited to an inclusive date range."""
    query = FinancialTransaction.query.filter_by(user_id=user_id)
    if start is not None:
        query = query.filter(FinancialTransaction.date >= start)
    if end is not None:
        query = query.filter(FinancialTransaction.date <= end)
    return query.order_by(FinancialTransaction.date.desc(), FinancialTransaction.id.desc()).all()


# --- budgets ----------------------------------------------------------------

def set_budget(user_id: int, category: str, monthly_limit) -> Budget:
    """Create the budget for a category or replace its limit."""
    category = _required_text(category, 'category')
    limit = _positive_amount(monthly_limit, 'monthly_limit')

    budget = Budget.query.filter_by(user_id=user_id, category=category).first()
    if budget:
        budget.monthly_limit = limit
    else:
        budget = Budget(user_id=user_id, category=category, monthly_limit=limit)
        db.session.add(budget)
    db.session.commit()
    return budget


def category_spending(transactions) -> Dict[str, float]:
    spending = defaultdict(float)
    for transaction in transactions:
        if transaction.type == 'expense':
            spending[transaction.category] += transaction.amount
    return dict(spending)


def get_budgets(user_id: int, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Budgets with what has been spent against them this month."""
    start, end = month_bounds(today or local_today())
    spent = category_spending(list_transactions(user_id, start, end))
    budgets = Budget.query.filter_by(user_id=user_id).order_by(Budget.category).all()
    return [budget.to_dict(spent.get(budget.category, 0.0)) for budget in budgets]


# --- goals --------------------------------------------------------------------

def create_goal(user_id: int, title: str, target_amount, target_date, current_amount=0,
                category: str = 'savings') -> FinancialGoal:
    current = 0.0 if current_amount in (None, 0, '0') else _positive_amount(current_amount, 'current_amount')
    goal = FinancialGoal(
        user_id=user_id,
        title=_required_text(title, 'title'),
        target_amount=_positive_amount(target_amount, 'target_amount'),
        current_amount=current,
        target_date=_parse_date(target_date, 'target_date'),
        category=(category or 'savings').strip() or 'savings',
    )
    db.session.add(goal)
    db.session.commit()
    return goal


def contribute_to_goal(user_id: int, goal_id: int, amount) -> Optional[FinancialGoal]:
    goal = FinancialGoal.query.filter_by(id=goal_id, user_id=user_id).first()
    if not goal:
        return None
    goal.current_amount += _positive_amount(amount)
    db.session.commit()
    return goal


def list_goals(user_id: int) -> List[FinancialGoal]:
    return FinancialGoal.query.filter_by(user_id=user_id).order_by(FinancialGoal.target_date).all()


# --- summary ------------------------------------------------------------------

def eco_savings(activities, start: Optional[date] = None, end: Optional[date] = None) -> float:
    """Money side of eco-choice activities, optionally within a date range."""
    tz = app_timezone()
    total = 0.0
    for activity in activities:
        if classify(activity.category, activity.activity_type) not in ECO_KINDS:
            continue
        day = to_local_date(activity.created_at, tz)
        if (start and day < start) or (end and day > end):
            continue
        total += activity.financial_impact or 0.0
    return total


def get_summary(user_id: int, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or local_today()
    start, end = month_bounds(today)

    transactions = list_transactions(user_id)
    monthly = [t for t in transactions if start <= t.date <= end]
    activities = Activity.query.filter_by(user_id=user_id).all()

    def total(items, kind):
        return sum(t.amount for t in items if t.type == kind)

    total_income = total(transactions, 'income')
    total_expenses = total(transactions, 'expense')
    total_eco = eco_savings(activities)

    return {
        'total_income': total_income,
        'total_expenses': total_expenses,
        'total_eco_savings': total_eco,
        'net_savings': total_income - total_expenses + total_eco,
        'monthly_income': total(monthly, 'income'),
        'monthly_expenses': total(monthly, 'expense'),
        'monthly_eco_savings': eco_savings(activities, start, end),
        'category_spending': category_spending(transactions),
        'month': start.strftime('%Y-%m'),
    }
