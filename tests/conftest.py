"""
Pytest configuration and shared fixtures for all tests
Centralized mock data and utilities
"""

import pytest
import pandas as pd
import io
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# ===== SHARED MOCK DATA FIXTURES =====

@pytest.fixture
def mock_inventory_csv():
    """
    Creates mock inventory CSV with various scenarios:
    - ISO and US date formats
    - Product names with surrounding whitespace
    - A row without a category (gets a default)
    - Thousands separator in Stock
    - A missing product, an invalid date and a non-numeric Sold value (rejected)
    """
    csv_data = (
        "Date,Product,Category,Sold,Stock\n"
        "2026-10-01,Milk,Dairy,2,10\n"
        "10/2/2026,  Milk ,Dairy,3,8\n"
        "2026-10-03,Milk,Dairy,5,5\n"
        "2026-10-04,Milk,Dairy,5,0\n"
        "2026-10-01,Diya Lamp,Festival Items,10,\"1,200\"\n"
        "2026-10-02,Diya Lamp,,12,1188\n"
        "2026-10-03,,Dairy,1,1\n"
        "NOT-A-DATE,Milk,Dairy,1,1\n"
        "2026-10-05,Milk,Dairy,lots,1\n"
    )
    return "inventory.csv", io.StringIO(csv_data)

@pytest.fixture(autouse=True)
def mock_read_csv(monkeypatch, mock_inventory_csv):
    """
    Auto-used fixture that intercepts all pd.read_csv calls and returns
    appropriate mock data. This allows tests to run without real CSV files.

    The fixture maps filenames to mock data streams.
    """
    mocks = {
        "inventory.csv": mock_inventory_csv[1],
    }

    original_read_csv = pd.read_csv

    def new_read_csv(filepath_or_buffer, *args, **kwargs):
        """
        Replacement read_csv that checks if file is a mock,
        otherwise falls back to original function
        """
        if isinstance(filepath_or_buffer, str):
            filename = os.path.basename(filepath_or_buffer)
            if filename in mocks:
                mocks[filename].seek(0)
                return original_read_csv(mocks[filename], *args, **kwargs)

        return original_read_csv(filepath_or_buffer, *args, **kwargs)

    monkeypatch.setattr(pd, "read_csv", new_read_csv)

@pytest.fixture(autouse=True)
def mock_inventory_file(monkeypatch):
    """Make os.path.isfile report the mocked inventory.csv as present."""
    original_isfile = os.path.isfile

    def new_isfile(path):
        if os.path.basename(str(path)) == "inventory.csv":
            return True
        return original_isfile(path)

    monkeypatch.setattr(os.path, "isfile", new_isfile)

# ===== HELPER FIXTURES =====

def build_inventory_frame(rows):
    """
    Build normalized inventory records from (date, product, sold, stock[, category]) tuples.

    Season is derived from the date, matching the normalizer output.
    """
    from business_rules import SEASON_BY_MONTH

    records = []
    for row in rows:
        date, product, sold, stock = row[:4]
        category = row[4] if len(row) > 4 else "General"
        date = pd.Timestamp(date)
        records.append({
            'date': date,
            'product': product,
            'sold': float(sold),
            'stock': float(stock),
            'category': category,
            'season': SEASON_BY_MONTH[date.month],
        })
    return pd.DataFrame(records, columns=['date', 'product', 'sold', 'stock', 'category', 'season'])

def build_product_series(product, sold, stock, start="2026-10-01", category="General"):
    """Consecutive daily records for one product."""
    dates = pd.date_range(start, periods=len(sold), freq='D')
    return build_inventory_frame([
        (date, product, s, k, category) for date, s, k in zip(dates, sold, stock)
    ])

@pytest.fixture
def milk_series():
    """Scenario: Milk runs out on the 4th day"""
    return build_product_series("Milk", sold=[2, 3, 5, 5], stock=[10, 8, 5, 0], category="Dairy")

@pytest.fixture
def mixed_inventory_df():
    """
    Three products:
    - Milk: out of stock at the last record
    - Bread: 2 days of stock left (critical)
    - Rice: plenty of stock, increasing sales
    """
    return pd.concat([
        build_product_series("Milk", sold=[2, 3, 5, 5], stock=[10, 8, 5, 0], category="Dairy"),
        build_product_series("Bread", sold=[4, 4, 4, 4, 4], stock=[40, 30, 20, 12, 8], category="Grains"),
        build_product_series("Rice", sold=[1, 1, 2, 3, 3], stock=[500, 499, 497, 494, 491], category="Grains"),
    ], ignore_index=True)

@pytest.fixture
def empty_inventory_df():
    """Normalized inventory frame with no rows"""
    return build_inventory_frame([])

# ===== UTILITY FUNCTIONS FOR TESTS =====

def assert_log_contains(logs, expected_message):
    """
    Helper to assert that a log message contains expected text

    Args:
        logs: List of log messages
        expected_message: Text expected to be in one of the logs
    """
    log_text = " ".join(logs)
    assert expected_message in log_text, f"Expected '{expected_message}' not found in logs: {log_text}"

def assert_columns_exist(df, columns):
    """
    Helper to assert that DataFrame contains required columns

    Args:
        df: Pandas DataFrame
        columns: List of column names that should exist
    """
    missing = set(columns) - set(df.columns)
    assert not missing, f"Missing required columns: {missing}"

def assert_no_nulls(df, columns):
    """
    Helper to assert that specified columns have no null values

    Args:
        df: Pandas DataFrame
        columns: List of column names to check
    """
    for col in columns:
        null_count = df[col].isna().sum()
        assert null_count == 0, f"Column '{col}' has {null_count} null values"
