"""
Tests for sales_velocity module
Tests trend classification, stock turn days and performance ranking
"""

import pytest
import pandas as pd
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sales_velocity import (
    TREND_DECREASING,
    TREND_INCREASING,
    TREND_STABLE,
    VELOCITY_COLUMNS,
    analyze_sales_velocity,
    classify_sales_trend,
    filter_velocity_by_category,
    get_category_performance,
)
from conftest import assert_columns_exist, assert_log_contains, build_product_series


class TestSalesTrend:
    """Test first-3 vs last-3 trend classification"""

    def test_increasing(self):
        series = build_product_series("Rice", sold=[1, 1, 1, 5, 5, 5], stock=[9] * 6)
        assert classify_sales_trend(series) == TREND_INCREASING

    def test_decreasing(self):
        series = build_product_series("Rice", sold=[5, 5, 5, 1, 1, 1], stock=[9] * 6)
        assert classify_sales_trend(series) == TREND_DECREASING

    def test_stable(self):
        series = build_product_series("Rice", sold=[3, 3, 3, 3], stock=[9] * 4)
        assert classify_sales_trend(series) == TREND_STABLE

    def test_overlapping_windows(self):
        """Test that short series compare overlapping windows"""
        # first 3 = [1, 2, 3] (mean 2), last 3 = [2, 3, 4] (mean 3)
        series = build_product_series("Rice", sold=[1, 2, 3, 4], stock=[9] * 4)
        assert classify_sales_trend(series) == TREND_INCREASING

    def test_two_records_identical_windows(self):
        """Test that with two records both windows are the whole series"""
        series = build_product_series("Rice", sold=[1, 9], stock=[9, 9])
        assert classify_sales_trend(series) == TREND_STABLE


class TestAnalyzeSalesVelocity:
    """Test the velocity ranking"""

    @pytest.fixture
    def velocity_input(self):
        return pd.concat([
            build_product_series("Slow", sold=[1, 1, 1], stock=[100, 99, 98], category="Home"),
            build_product_series("Fast", sold=[10, 10, 10], stock=[30, 20, 10], category="Dairy"),
            build_product_series("Dead", sold=[0, 0], stock=[5, 5], category="Home"),
            build_product_series("Single", sold=[50], stock=[1], category="Home"),
        ], ignore_index=True)

    def test_singletons_left_out(self, velocity_input):
        """Test that products with one record are excluded silently"""
        logs, velocity = analyze_sales_velocity(velocity_input)
        assert "Single" not in velocity['product'].tolist()
        assert_log_contains(logs, "1 products with fewer than 2 records left out")

    def test_sorted_by_performance(self, velocity_input):
        """Test descending performance score"""
        _, velocity = analyze_sales_velocity(velocity_input)
        assert velocity['product'].tolist() == ["Fast", "Slow", "Dead"]
        assert velocity['performance_score'].is_monotonic_decreasing

    def test_performance_score(self, velocity_input):
        """Test (total sales * avg sales) / max(stock, 1)"""
        _, velocity = analyze_sales_velocity(velocity_input)
        fast = velocity.set_index('product').loc["Fast"]
        assert fast['performance_score'] == pytest.approx(30 * 10 / 10)

    def test_stock_turn_sentinel_iff_no_sales(self, velocity_input):
        """Test stock turn days is 999 exactly when average sales are 0"""
        _, velocity = analyze_sales_velocity(velocity_input)
        for _, row in velocity.iterrows():
            assert (row['stock_turn_days'] == 999) == (row['avg_daily_sales'] == 0)

    def test_stock_turn_uses_full_history(self):
        """Test the full-history average, not the trailing window"""
        df = build_product_series("Rice", sold=[20, 0, 0, 0, 0, 0], stock=[60, 60, 60, 60, 60, 60])
        _, velocity = analyze_sales_velocity(df)
        # full-history avg = 20 / 6
        assert velocity['stock_turn_days'].iloc[0] == pytest.approx(60 / (20 / 6))

    def test_zero_stock_floor(self):
        """Test that zero stock uses a floor of 1 in the score"""
        df = build_product_series("Rice", sold=[2, 2], stock=[2, 0])
        _, velocity = analyze_sales_velocity(df)
        assert velocity['performance_score'].iloc[0] == pytest.approx(4 * 2 / 1)

    def test_empty(self, empty_inventory_df):
        """Test no data"""
        logs, velocity = analyze_sales_velocity(empty_inventory_df)
        assert velocity.empty
        assert_columns_exist(velocity, VELOCITY_COLUMNS)


class TestCategoryPerformance:
    """Test category rollups for the analytics page"""

    def test_category_totals(self):
        df = pd.concat([
            build_product_series("A", sold=[1, 1], stock=[9, 8], category="Home"),
            build_product_series("B", sold=[5, 5], stock=[9, 4], category="Dairy"),
        ], ignore_index=True)
        _, velocity = analyze_sales_velocity(df)
        performance = get_category_performance(df, velocity)

        assert performance['category'].tolist() == ["Dairy", "Home"]
        assert performance['total_sales'].tolist() == [10, 2]
        assert performance['record_count'].tolist() == [2, 2]

    def test_filter_by_category(self):
        df = pd.concat([
            build_product_series("A", sold=[1, 1], stock=[9, 8], category="Home"),
            build_product_series("B", sold=[5, 5], stock=[9, 4], category="Dairy"),
        ], ignore_index=True)
        _, velocity = analyze_sales_velocity(df)

        assert filter_velocity_by_category(velocity, "Home")['product'].tolist() == ["A"]
        assert len(filter_velocity_by_category(velocity, "All")) == 2
