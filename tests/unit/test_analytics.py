"""
Unit tests for analytics aggregation.
"""
import pytest
from datetime import datetime, timedelta

from services.analytics_service import (
    activities_to_df, build_analytics, category_breakdown, daily_series, impact_equivalents,
    national_comparison, percentage_change, projections, weekly_trends,
)
from tests.helpers import TODAY, at_noon, make_record


def df_of(*records):
    return activities_to_df(records, tz='UTC')


def on(offset, category='travel', activity_type='Bike', amount=10, **overrides):
    return make_record(category, activity_type, amount, at_noon(TODAY - timedelta(days=offset)), **overrides)


class TestDailySeries:

    def test_dense_and_ordered(self):
        series = daily_series(df_of(on(0), on(3), on(3)), 7, TODAY)

        assert len(series) == 7
        assert series[0]['date'] == (TODAY - timedelta(days=6)).isoformat()
        assert series[-1]['date'] == TODAY.isoformat()
        assert [entry['activities'] for entry in series] == [0, 0, 0, 2, 0, 0, 1]

    def test_empty_history_is_zero_filled(self):
        series = daily_series(df_of(), 30, TODAY)
        assert len(series) == 30
        assert all(entry['activities'] == 0 and entry['co2_impact'] == 0 for entry in series)

    def test_activity_outside_window_ignored(self):
        series = daily_series(df_of(on(10)), 7, TODAY)
        assert sum(entry['activities'] for entry in series) == 0

    def test_sums_per_day(self):
        series = daily_series(df_of(on(0, co2=1.5, cost=10), on(0, co2=2.0, cost=5)), 1, TODAY)
        assert series == [{
            'date': TODAY.isoformat(), 'activities': 2, 'co2_impact': 3.5, 'financial_impact': 15.0,
        }]

    def test_days_must_be_positive(self):
        with pytest.raises(ValueError):
            daily_series(df_of(), 0, TODAY)


class TestCategoryBreakdown:

    def test_all_categories_reported(self):
        breakdown = category_breakdown(df_of(on(0), on(1, 'food', 'Vegan', 2)), 7, TODAY)
        by_category = {entry['category']: entry for entry in breakdown}

        assert set(by_category) == {'travel', 'food', 'shopping', 'energy'}
        assert by_category['food']['activities'] == 1
        assert by_category['food']['co2_impact'] == pytest.approx(1.0)
        assert by_category['food']['avg_cost'] == pytest.approx(120)
        assert by_category['shopping']['activities'] == 0
        assert by_category['shopping']['avg_co2'] == 0.0


class TestWeeklyTrends:

    def test_zero_previous_week_gives_zero_change(self):
        trends = weekly_trends(df_of(on(0, co2=5.0, cost=0)), TODAY)

        assert trends['previous_week']['co2_saved'] == 0
        assert trends['current_week']['co2_saved'] == 5.0
        assert trends['trends']['co2_change'] == 0
        assert trends['trends']['activities_change'] == 0

    def test_week_over_week_change(self):
        trends = weekly_trends(df_of(
            on(0, co2=3.0, cost=10), on(6, co2=3.0, cost=10),
            on(7, co2=2.0, cost=10), on(13, co2=2.0, cost=10),
        ), TODAY)

        assert trends['current_week']['activities'] == 2
        assert trends['previous_week']['activities'] == 2
        assert trends['trends']['co2_change'] == pytest.approx(50.0)
        assert trends['trends']['money_change'] == 0
        # eco score: 2*10 + 6 vs 2*10 + 4
        assert trends['current_week']['eco_score'] == pytest.approx(26)
        assert trends['trends']['eco_score_change'] == pytest.approx((26 - 24) / 24 * 100)

    def test_percentage_change(self):
        assert percentage_change(5, 0) == 0
        assert percentage_change(0, 4) == -100
        assert percentage_change(6, 4) == 50


class TestProjections:

    def test_withheld_with_short_history(self):
        assert projections(df_of(on(0), on(5)), TODAY) is None

    def test_withheld_without_history(self):
        assert projections(df_of(), TODAY) is None

    def test_from_last_seven_days(self):
        result = projections(df_of(on(6, co2=7.0, cost=70), on(0, co2=7.0, cost=70), on(20, co2=100, cost=0)), TODAY)

        assert result['avg_daily']['co2_impact'] == pytest.approx(2.0)
        assert result['monthly_projection']['co2_impact'] == pytest.approx(60.0)
        assert result['yearly_projection']['financial_impact'] == pytest.approx(20 * 365)
        assert result['goals']['co2_reduction'] == pytest.approx(12.0)
        assert result['goals']['cost_saving'] == pytest.approx(600 * 0.15)


class TestEquivalentsAndComparison:

    def test_impact_equivalents(self):
        result = impact_equivalents(df_of(on(0, co2=21.8), on(1, 'travel', 'Walking', 3)))
        assert result['trees_equivalent'] == pytest.approx(1.0)
        assert result['car_miles_equivalent'] == pytest.approx(21.8 / 0.404)
        assert result['carbon_neutral_activities'] == 1

    def test_national_comparison(self):
        # 10 kg over a 10-day span annualises to 365 kg
        result = national_comparison(df_of(on(9, co2=10.0)), TODAY)
        assert result['user_annual_co2'] == pytest.approx(365.0)
        assert result['national_average_co2'] == 1900
        assert result['percentage_diff'] == pytest.approx((365 - 1900) / 1900 * 100)

    def test_national_comparison_without_data(self):
        assert national_comparison(df_of(), TODAY) is None


class TestBuildAnalytics:

    def test_totals_match_series(self, week_of_records):
        analytics = build_analytics(week_of_records, days=30, today=TODAY, tz='UTC')

        series_total = sum(entry['co2_impact'] for entry in analytics['time_series'])
        assert len(analytics['time_series']) == 30
        assert analytics['totals']['activities'] == 7
        assert analytics['totals']['co2_impact'] == pytest.approx(series_total)
        assert analytics['predictions'] is not None
        assert analytics['weekly_trends']['current_week']['activities'] == 7

    def test_days_bucketed_in_configured_timezone(self):
        late = make_record('food', 'Vegan', 1, datetime(2024, 6, 14, 23, 0))
        in_utc = build_analytics([late], days=2, today=TODAY, tz='UTC')
        in_kolkata = build_analytics([late], days=2, today=TODAY, tz='Asia/Kolkata')

        assert in_utc['time_series'][0]['activities'] == 1
        assert in_kolkata['time_series'][1]['activities'] == 1

    def test_empty(self):
        analytics = build_analytics([], days=7, today=TODAY, tz='UTC')
        assert analytics['totals'] == {'activities': 0, 'co2_impact': 0.0, 'financial_impact': 0.0}
        assert analytics['predictions'] is None
        assert analytics['comparisons'] is None
