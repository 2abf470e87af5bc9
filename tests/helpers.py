"""Shared builders for tests of the pure engine functions."""
from datetime import date, datetime, time
from types import SimpleNamespace

from services.impact_service import compute_impact

TODAY = date(2024, 6, 15)


def at_noon(day):
    """Naive UTC datetime at noon on ``day``."""
    return datetime.combine(day, time(12, 0))


def make_record(category, activity_type, amount, created_at, co2=None, cost=None):
    """In-memory activity record with static impact unless overridden."""
    impact = compute_impact(category, activity_type, amount)
    return SimpleNamespace(
        category=category,
        activity_type=activity_type,
        amount=amount,
        co2_impact=impact.co2_impact if co2 is None else co2,
        financial_impact=impact.financial_impact if cost is None else cost,
        created_at=created_at,
    )
