"""Activity analytics: daily series, category breakdown, weekly trends, projections.

All day bucketing uses the application timezone. Functions take the list of
activity records and a reference ``today`` so results are reproducible.
"""
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

import pandas as pd

from services.impact_factors import CATEGORIES
from services.timezone_service import app_timezone, local_today, to_local_date

COLUMNS = ['date', 'category', 'activity_type', 'co2_impact', 'financial_impact']

TREE_CO2_PER_YEAR = 21.8  # kg absorbed by an average tree per year
CAR_CO2_PER_MILE = 0.404  # kg emitted by an average car per mile
NATIONAL_AVERAGE_CO2 = 1900  # kg per person per year
CO2_REDUCTION_GOAL = 0.2
COST_SAVING_GOAL = 0.15


def activities_to_df(activities: Iterable, tz: Optional[str] = None) -> pd.DataFrame:
    tz = tz or app_timezone()
    rows = [
        (to_local_date(a.created_at, tz), a.category, a.activity_type,
         float(a.co2_impact or 0.0), float(a.financial_impact or 0.0))
        for a in activities
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def _window(df: pd.DataFrame, start: date, end: date) -> pd.DataFrame:
    if df.empty:
        return df
    return df[(df['date'] >= start) & (df['date'] <= end)]


def _totals(df: pd.DataFrame) -> Dict[str, float]:
    return {
        'activities': int(len(df)),
        'co2_impact': float(df['co2_impact'].sum()) if not df.empty else 0.0,
        'financial_impact': float(df['financial_impact'].sum()) if not df.empty else 0.0,
    }


def percentage_change(current: float, previous: float) -> float:
    """Relative change in percent; defined as 0 when there is no previous value."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def daily_series(df: pd.DataFrame, days: int, today: date) -> List[Dict]:
    """Dense per-day totals for the ``days`` days ending at ``today``, oldest first."""
    if days < 1:
        raise ValueError('days must be at least 1')

    index = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    window = _window(df, index[0], today)

    if window.empty:
        grouped = pd.DataFrame(0, index=index, columns=['activities', 'co2_impact', 'financial_impact'])
    else:
        grouped = window.groupby('date').agg(
            activities=('category', 'size'),
            co2_impact=('co2_impact', 'sum'),
            financial_impact=('financial_impact', 'sum'),
        ).reindex(index, fill_value=0)

    return [
        {
            'date': day.isoformat(),
            'activities': int(row.activities),
            'co2_impact': float(row.co2_impact),
            'financial_impact': float(row.financial_impact),
        }
        for day, row in zip(index, grouped.itertuples(index=False))
    ]


def category_breakdown(df: pd.DataFrame, days: int, today: date) -> List[Dict]:
    window = _window(df, today - timedelta(days=days - 1), today)
    breakdown = []
    for category in CATEGORIES:
        subset = window[window['category'] == category] if not window.empty else window
        totals = _totals(subset)
        count = totals['activities']
        breakdown.append({
            'category': category,
            'activities': count,
            'co2_impact': totals['co2_impact'],
            'financial_impact': totals['financial_impact'],
            'avg_co2': totals['co2_impact'] / count if count else 0.0,
            'avg_cost': totals['financial_impact'] / count if count else 0.0,
        })
    return breakdown


def weekly_trends(df: pd.DataFrame, today: date) -> Dict:
    """Last 7 days against the 7 days before, with percentage changes."""
    current_start = today - timedelta(days=6)
    previous_start = current_start - timedelta(days=7)

    def summarize(window: pd.DataFrame) -> Dict[str, float]:
        totals = _totals(window)
        return {
            'activities': totals['activities'],
            'co2_saved': totals['co2_impact'],
            'money_saved': totals['financial_impact'],
            'eco_score': totals['activities'] * 10 + totals['co2_impact'],
        }

    current = summarize(_window(df, current_start, today))
    previous = summarize(_window(df, previous_start, current_start - timedelta(days=1)))

    return {
        'current_week': current,
        'previous_week': previous,
        'trends': {
            'activities_change': percentage_change(current['activities'], previous['activities']),
            'co2_change': percentage_change(current['co2_saved'], previous['co2_saved']),
            'money_change': percentage_change(current['money_saved'], previous['money_saved']),
            'eco_score_change': percentage_change(current['eco_score'], previous['eco_score']),
        },
    }


def projections(df: pd.DataFrame, today: date) -> Optional[Dict]:
    """30/365-day projections from the last 7 days' daily average.

    Withheld (None) until the history spans at least 7 calendar days.
    """
    if df.empty or df['date'].min() > today - timedelta(days=6):
        return None

    recent = _totals(_window(df, today - timedelta(days=6), today))
    avg_co2 = recent['co2_impact'] / 7
    avg_cost = recent['financial_impact'] / 7

    return {
        'avg_daily': {'co2_impact': avg_co2, 'financial_impact': avg_cost},
        'monthly_projection': {'co2_impact': avg_co2 * 30, 'financial_impact': avg_cost * 30},
        'yearly_projection': {'co2_impact': avg_co2 * 365, 'financial_impact': avg_cost * 365},
        'goals': {
            'co2_reduction': avg_co2 * 30 * CO2_REDUCTION_GOAL,
            'cost_saving': avg_cost * 30 * COST_SAVING_GOAL,
        },
    }


def impact_equivalents(df: pd.DataFrame) -> Dict:
    total_co2 = float(df['co2_impact'].sum()) if not df.empty else 0.0
    return {
        'total_co2': total_co2,
        'trees_equivalent': total_co2 / TREE_CO2_PER_YEAR,
        'car_miles_equivalent': total_co2 / CAR_CO2_PER_MILE,
        'carbon_neutral_activities': int((df['co2_impact'] <= 0).sum()) if not df.empty else 0,
    }


def national_comparison(df: pd.DataFrame, today: date) -> Optional[Dict]:
    """Annualised CO2 against the national per-capita average."""
    if df.empty:
        return None
    span_days = (today - df['date'].min()).days + 1
    annual = float(df['co2_impact'].sum()) / max(1, span_days) * 365
    return {
        'user_annual_co2': annual,
        'national_average_co2': NATIONAL_AVERAGE_CO2,
        'percentage_diff': (annual - NATIONAL_AVERAGE_CO2) / NATIONAL_AVERAGE_CO2 * 100,
    }


def build_analytics(activities: Iterable, days: int = 30, today: Optional[date] = None,
                    tz: Optional[str] = None) -> Dict:
    tz = tz or app_timezone()
    if today is None:
        today = local_today(tz)
    df = activities_to_df(activities, tz)

    return {
        'window_days': days,
        'today': today.isoformat(),
        'totals': _totals(_window(df, today - timedelta(days=days - 1), today)),
        'time_series': daily_series(df, days, today),
        'categories': category_breakdown(df, days, today),
        'weekly_trends': weekly_trends(df, today),
        'predictions': projections(df, today),
        'impact': impact_equivalents(df),
        'comparisons': national_comparison(df, today),
    }


def get_user_analytics(user_id: int, days: int = 30, today: Optional[date] = None) -> Dict:
    from services.activity_service import list_activities
    return build_analytics(list_activities(user_id), days=days, today=today)
