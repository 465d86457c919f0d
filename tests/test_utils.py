"""
Tests for utils module
Tests report builders and Excel/CSV export
"""

import pytest
import pandas as pd
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from business_rules import TYPE_FESTIVAL, TYPE_URGENT, URGENCY_CRITICAL, URGENCY_HIGH
from inventory_metrics import calculate_key_metrics
from recommendation_engine import Recommendation
from restock_prediction import generate_restock_predictions
from utils import (
    build_inventory_report,
    build_recommendations_export,
    build_restock_export,
    build_summary_report,
    dataframe_to_csv_bytes,
    get_export_filename,
    get_filtered_data_as_excel,
    strip_markdown_bold,
)

REPORT_DATE = "2026-10-17"


@pytest.fixture
def recommendations():
    return [
        Recommendation(
            type=TYPE_FESTIVAL, title="Diwali Preparation",
            reason="🎉 **Diwali** is coming in **2 days**!", products=["Diya", "Sweet Box"],
            urgency=URGENCY_HIGH, action_needed=90.0,
        ),
        Recommendation(
            type=TYPE_URGENT, title="Critical Stock Shortages",
            reason="🚨 **URGENT STOCK ALERTS**", products=["Milk"], urgency=URGENCY_CRITICAL,
        ),
    ]


class TestReportBuilders:
    """Test CSV report builders"""

    def test_strip_markdown_bold(self):
        assert strip_markdown_bold("**Diya**: BUY **90** units") == "Diya: BUY 90 units"

    def test_inventory_report(self, mixed_inventory_df):
        report = build_inventory_report(mixed_inventory_df, REPORT_DATE)

        assert list(report.columns) == ['Date', 'Product', 'Category', 'Sold', 'Stock', 'Season', 'Generated_Date']
        assert len(report) == len(mixed_inventory_df)
        assert report['Date'].iloc[0] == "2026-10-01"
        assert (report['Generated_Date'] == REPORT_DATE).all()

    def test_recommendations_export(self, recommendations):
        report = build_recommendations_export(recommendations, REPORT_DATE)

        assert report['ID'].tolist() == [1, 2]
        assert report['Products'].iloc[0] == "Diya, Sweet Box"
        assert report['Products_Count'].tolist() == [2, 1]
        assert report['Reason'].iloc[0] == "🎉 Diwali is coming in 2 days!"

    def test_recommendations_export_empty(self):
        assert build_recommendations_export([], REPORT_DATE).empty

    def test_restock_export(self, mixed_inventory_df):
        _, predictions = generate_restock_predictions(mixed_inventory_df)
        predictions.loc[predictions['product'] == "Rice", 'restock_date'] = pd.NaT
        report = build_restock_export(predictions, REPORT_DATE)

        milk = report.set_index('Product').loc["Milk"]
        assert milk['Avg_Daily_Sales'] == 3.75
        assert milk['Restock_Date'] == "2026-10-04"
        assert report.set_index('Product').loc["Rice", 'Restock_Date'] == "N/A"

    def test_restock_export_rounds_average(self):
        predictions = pd.DataFrame([{
            'product': "Tea", 'category': "Beverages", 'current_stock': 10.0, 'avg_daily_sales': 1.23456,
            'restock_date': pd.Timestamp("2026-10-20"), 'reason': "Based on 1.2 daily sales avg",
            'days_until_restock': 8.1, 'safety_buffer_days': 7, 'status': "MODERATE", 'status_label': "",
        }])
        report = build_restock_export(predictions, REPORT_DATE)
        assert report['Avg_Daily_Sales'].iloc[0] == 1.23

    def test_summary_report(self, mixed_inventory_df, recommendations):
        _, predictions = generate_restock_predictions(mixed_inventory_df)
        metrics = calculate_key_metrics(mixed_inventory_df)
        report = build_summary_report(mixed_inventory_df, metrics, recommendations, predictions, REPORT_DATE)

        row = report.iloc[0]
        assert len(report) == 1
        assert row['Report_Date'] == REPORT_DATE
        assert row['Total_Products'] == 3
        assert row['Critical_Recommendations'] == 1
        assert row['High_Priority_Recommendations'] == 1
        assert row['Festival_Recommendations'] == 1
        assert row['Urgent_Stock_Alerts'] == 1
        assert row['Products_Needing_Immediate_Restock'] == 1
        assert row['Products_With_Low_Stock'] == 1
        assert row['Data_Points_Analyzed'] == len(mixed_inventory_df)

    def test_export_filename(self):
        assert get_export_filename("restock_predictions", REPORT_DATE) == "restock_predictions_2026-10-17.csv"


class TestExcelExport:
    """Test Excel export functionality"""

    def test_get_filtered_data_as_excel_returns_bytes(self):
        """Test that Excel export returns bytes"""
        df = pd.DataFrame({
            'col1': [1, 2, 3],
            'col2': ['a', 'b', 'c']
        })

        result = get_filtered_data_as_excel({"Test Sheet": (df, False)})
        assert isinstance(result, bytes)
        assert len(result) > 0

    def test_get_filtered_data_as_excel_empty_dataframe(self):
        """Test Excel export with only empty DataFrames still produces a workbook"""
        result = get_filtered_data_as_excel({"Empty Sheet": (pd.DataFrame(), False)})
        assert isinstance(result, bytes)
        assert len(result) > 0

    def test_get_filtered_data_as_excel_with_dates(self, mixed_inventory_df):
        """Test that datetime columns do not break the export"""
        result = get_filtered_data_as_excel({"Inventory": (mixed_inventory_df, False)})
        assert isinstance(result, bytes)
        assert 'date' in mixed_inventory_df.columns
        assert pd.api.types.is_datetime64_any_dtype(mixed_inventory_df['date'])

    def test_skips_non_dataframes(self):
        result = get_filtered_data_as_excel({
            "Not A Frame": ([1, 2], False),
            "Frame": (pd.DataFrame({'a': [1]}), True),
        })
        assert isinstance(result, bytes)

    def test_csv_bytes(self):
        df = pd.DataFrame({'a': [1, 2]})
        assert dataframe_to_csv_bytes(df) == b"a\n1\n2\n"
