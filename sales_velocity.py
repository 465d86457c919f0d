"""
Sales Velocity Module

Ranks products by commercial importance and classifies sales momentum.

- Trend: mean units sold over the last 3 records vs the first 3
- Stock turn days: current stock / full-history average daily sales
- Performance score: (total sales * avg daily sales) / max(current stock, 1)
"""

from datetime import datetime

import numpy as np
import pandas as pd

from business_rules import VELOCITY_RULES
from product_series import group_by_product

TREND_INCREASING = 'Increasing'
TREND_DECREASING = 'Decreasing'
TREND_STABLE = 'Stable'

VELOCITY_COLUMNS = [
    'product', 'category', 'total_sales', 'avg_daily_sales', 'current_stock',
    'sales_trend', 'stock_turn_days', 'performance_score'
]


def classify_sales_trend(series: pd.DataFrame, window: int = None) -> str:
    """
    Compare the mean of the last `window` records against the first `window`.

    The windows overlap when the series is shorter than 2 * window.

    Args:
        series: One product's records, ascending by date
        window: Records per side (defaults to VELOCITY_RULES['trend_window'])

    Returns:
        'Increasing', 'Decreasing' or 'Stable'
    """
    window = window or VELOCITY_RULES['trend_window']
    recent_avg = series['sold'].tail(window).mean()
    early_avg = series['sold'].head(window).mean()

    if recent_avg > early_avg:
        return TREND_INCREASING
    if recent_avg < early_avg:
        return TREND_DECREASING
    return TREND_STABLE


def analyze_sales_velocity(df: pd.DataFrame):
    """
    Velocity and performance ranking for every product with enough history.

    Products with fewer than VELOCITY_RULES['min_records'] records are left
    out silently. Output is sorted by performance score, highest first;
    ties keep grouping order.

    Args:
        df: Normalized inventory data

    Returns:
        tuple: (logs, velocity_df)
    """
    logs = []
    start_time = datetime.now()
    logs.append("--- Sales Velocity Analyzer ---")

    if df.empty:
        logs.append("WARNING: No inventory data provided")
        return logs, pd.DataFrame(columns=VELOCITY_COLUMNS)

    groups = group_by_product(df)
    rows = []
    skipped = 0

    for product, series in groups.items():
        if len(series) < VELOCITY_RULES['min_records']:
            skipped += 1
            continue
        try:
            rows.append({
                'product': product,
                'category': series['category'].iloc[-1],
                'total_sales': float(series['sold'].sum()),
                'avg_daily_sales': float(series['sold'].mean()),
                'current_stock': float(series['stock'].iloc[-1]),
                'sales_trend': classify_sales_trend(series),
            })
        except Exception as e:
            logs.append(f"ERROR: Velocity analysis failed for '{product}': {e}")

    velocity = pd.DataFrame(rows, columns=VELOCITY_COLUMNS[:6])

    if velocity.empty:
        logs.append("INFO: No products with enough history for velocity analysis")
        return logs, pd.DataFrame(columns=VELOCITY_COLUMNS)

    avg_sales = velocity['avg_daily_sales'].to_numpy()
    stock = velocity['current_stock'].to_numpy()

    # Full-history average, not the restock predictor's trailing window
    velocity['stock_turn_days'] = np.where(
        avg_sales > 0,
        stock / np.where(avg_sales > 0, avg_sales, 1),
        VELOCITY_RULES['no_turn_sentinel']
    )
    velocity['performance_score'] = (
        velocity['total_sales'] * velocity['avg_daily_sales']
    ) / np.maximum(stock, VELOCITY_RULES['stock_floor'])

    velocity = velocity.sort_values('performance_score', ascending=False, kind='mergesort').reset_index(drop=True)

    logs.append(f"INFO: Ranked {len(velocity)} products by performance score")
    if skipped:
        logs.append(f"INFO: {skipped} products with fewer than {VELOCITY_RULES['min_records']} records left out")
    for trend, count in velocity['sales_trend'].value_counts().items():
        logs.append(f"INFO: {count} products {trend}")

    total_time = (datetime.now() - start_time).total_seconds()
    logs.append(f"INFO: Velocity analysis completed in {total_time:.2f} seconds")

    return logs, velocity


def get_category_performance(df: pd.DataFrame, velocity_df: pd.DataFrame) -> pd.DataFrame:
    """
    Sales and average performance score per category.

    Args:
        df: Normalized inventory data
        velocity_df: Output of analyze_sales_velocity()

    Returns:
        DataFrame with columns: category, total_sales, record_count, avg_performance
        sorted by total_sales descending
    """
    columns = ['category', 'total_sales', 'record_count', 'avg_performance']
    if df.empty:
        return pd.DataFrame(columns=columns)

    performance = df.groupby('category', sort=False).agg(
        total_sales=('sold', 'sum'),
        record_count=('sold', 'size'),
    ).reset_index()

    if velocity_df.empty:
        performance['avg_performance'] = 0.0
    else:
        avg_score = velocity_df.groupby('category')['performance_score'].mean()
        performance['avg_performance'] = performance['category'].map(avg_score).fillna(0.0)

    return performance.sort_values('total_sales', ascending=False, kind='mergesort').reset_index(drop=True)[columns]


def filter_velocity_by_category(velocity_df: pd.DataFrame, category='All') -> pd.DataFrame:
    """Restrict the ranking to one category ('All' keeps everything)."""
    if velocity_df.empty or not category or category == 'All':
        return velocity_df
    return velocity_df[velocity_df['category'] == category].reset_index(drop=True)
