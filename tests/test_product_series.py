"""
Tests for product_series module
Tests grouping, trailing averages and the shared product index
"""

import pytest
import pandas as pd
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from product_series import ProductIndex, find_matching_products, group_by_product, trailing_average_sales
from conftest import build_inventory_frame, build_product_series


class TestGroupByProduct:
    """Test the product series grouper"""

    def test_groups_sorted_by_date(self):
        """Test that every group is non-decreasing in date"""
        df = build_inventory_frame([
            ("2026-10-03", "Milk", 1, 5),
            ("2026-10-01", "Bread", 2, 9),
            ("2026-10-01", "Milk", 3, 7),
            ("2026-10-02", "Milk", 2, 6),
        ])
        groups = group_by_product(df)

        assert list(groups) == ["Milk", "Bread"]
        for series in groups.values():
            assert series['date'].is_monotonic_increasing

    def test_no_record_lost_or_duplicated(self, mixed_inventory_df):
        """Test that group sizes add up to the input"""
        groups = group_by_product(mixed_inventory_df)
        assert sum(len(series) for series in groups.values()) == len(mixed_inventory_df)

    def test_same_date_keeps_input_order(self):
        """Test stable sort for duplicate dates"""
        df = build_inventory_frame([
            ("2026-10-01", "Milk", 1, 10),
            ("2026-10-01", "Milk", 2, 9),
        ])
        series = group_by_product(df)["Milk"]
        assert series['sold'].tolist() == [1, 2]

    def test_exact_product_identity(self):
        """Test that ids differing only in case are different products"""
        df = build_inventory_frame([
            ("2026-10-01", "milk", 1, 10),
            ("2026-10-01", "Milk", 1, 10),
        ])
        assert len(group_by_product(df)) == 2

    def test_empty(self, empty_inventory_df):
        """Test that an empty dataset has no groups"""
        assert group_by_product(empty_inventory_df) == {}


class TestTrailingAverage:
    """Test trailing-window averages"""

    def test_uses_last_five(self):
        """Test that only the last 5 records count"""
        series = build_product_series("Rice", sold=[100, 1, 1, 1, 1, 1], stock=[9] * 6)
        assert trailing_average_sales(series) == 1.0

    def test_shorter_series_uses_all(self):
        """Test that a short series averages every record"""
        series = build_product_series("Rice", sold=[2, 4], stock=[9, 9])
        assert trailing_average_sales(series) == 3.0

    def test_custom_window(self):
        """Test an explicit window"""
        series = build_product_series("Rice", sold=[1, 2, 3], stock=[9] * 3)
        assert trailing_average_sales(series, window=2) == 2.5


class TestFindMatchingProducts:
    """Test keyword matching over a product list"""

    def test_case_insensitive_substring(self):
        """Test case-insensitive substring matching, input order, no duplicates"""
        products = ["Diya Lamp", "Sweet Box", "Umbrella", "Diya Lamp"]
        assert find_matching_products(products, ["DIYA", "box"]) == ["Diya Lamp", "Sweet Box"]
        assert find_matching_products(products, ["fan"]) == []

    def test_index_match_agrees_with_list_match(self):
        """Test that the index memo gives the same answer as a direct scan"""
        df = pd.concat([
            build_product_series("Rain Coat", sold=[1] * 3, stock=[9, 8, 7]),
            build_product_series("Umbrella", sold=[1] * 3, stock=[9, 8, 7]),
        ], ignore_index=True)
        index = ProductIndex(df)
        keywords = ["umbrella", "coat"]
        assert index.match(keywords) == find_matching_products(index.products, keywords)
        assert index.match(keywords) == ["Rain Coat", "Umbrella"]


class TestProductIndex:
    """Test the shared per-run index"""

    @pytest.fixture
    def index(self):
        df = pd.concat([
            build_product_series("Diya Lamp", sold=[10] * 5, stock=[90, 80, 70, 60, 50]),
            build_product_series("Sweet Box", sold=[1, 2, 3], stock=[30, 28, 25]),
            build_product_series("Umbrella", sold=[2] * 5, stock=[58, 56, 54, 52, 50]),
        ], ignore_index=True)
        return ProductIndex(df)

    def test_products_in_catalog_order(self, index):
        """Test first-appearance order"""
        assert index.products == ["Diya Lamp", "Sweet Box", "Umbrella"]
        assert len(index) == 3
        assert "Umbrella" in index

    def test_latest_snapshot(self, index):
        """Test current stock and trailing average"""
        assert index.current_stock("Diya Lamp") == 50
        assert index.trailing_avg("Diya Lamp") == 10
        assert index.trailing_avg("Sweet Box") == 2

    def test_keyword_match_case_insensitive(self, index):
        """Test substring matching regardless of case"""
        assert index.match(["DIYA"]) == ["Diya Lamp"]
        assert index.match(["sweet", "lamp"]) == ["Diya Lamp", "Sweet Box"]

    def test_keyword_match_no_duplicates(self, index):
        """Test that a product matching several keywords appears once"""
        assert index.match(["diya", "lamp", "light"]) == ["Diya Lamp"]

    def test_keyword_match_none(self, index):
        """Test no match"""
        assert index.match(["fan", "cooler"]) == []

    def test_category(self, index):
        """Test category lookup from the latest record"""
        assert index.category("Umbrella") == "General"
