"""
Restock Prediction Module

Estimates when each product has to be restocked, BEFORE it runs out, from
its most recent sales velocity:
- Trailing-window average daily sales (last 5 observations)
- Raw days of stock remaining
- Safety-buffered restock date (1/3/7 day buffer by remaining cover)
- Stock status tiers (Out of Stock / Critical / Low / Moderate / Good)

Key Features:
- One estimator produces both the safe restock date and the raw days of
  stock, so the date and the status tier come from the same numbers
- Recency bias: only the trailing window feeds the estimate
- Per-product isolation: a bad series is logged and skipped
"""

from datetime import datetime

import pandas as pd

from business_rules import (
    RESTOCK_RULES,
    STATUS_CRITICAL,
    STATUS_GOOD,
    STATUS_LABELS,
    STATUS_LOW,
    STATUS_MODERATE,
    STATUS_ORDER,
    STATUS_OUT_OF_STOCK,
    get_safety_buffer_days,
)
from product_series import group_by_product, trailing_average_sales

REASON_INSUFFICIENT_DATA = "Insufficient data"
REASON_OUT_OF_STOCK = "OUT OF STOCK - Restock immediately!"
REASON_NO_SALES_TREND = "No sales trend available"

PREDICTION_COLUMNS = [
    'product', 'category', 'current_stock', 'avg_daily_sales', 'restock_date',
    'reason', 'days_until_restock', 'safety_buffer_days', 'status', 'status_label'
]


def classify_stock_status(current_stock, avg_daily_sales):
    """
    Raw days of stock and the status tier for a product.

    Args:
        current_stock: Units on hand at the latest observation
        avg_daily_sales: Trailing-window average daily sales

    Returns:
        tuple: (days_until_restock, status)
        - days_until_restock is 0 when out of stock and the 999 sentinel
          when there are no sales to divide by
    """
    tiers = RESTOCK_RULES['status_tiers']

    if current_stock <= 0:
        return 0.0, STATUS_OUT_OF_STOCK

    if avg_daily_sales <= 0:
        return float(RESTOCK_RULES['no_estimate_sentinel']), STATUS_GOOD

    days = current_stock / avg_daily_sales
    if days <= tiers['critical_days']:
        status = STATUS_CRITICAL
    elif days <= tiers['low_days']:
        status = STATUS_LOW
    elif days <= tiers['moderate_days']:
        status = STATUS_MODERATE
    else:
        status = STATUS_GOOD
    return days, status


def estimate_depletion(series: pd.DataFrame, window: int = None) -> dict:
    """
    Estimate depletion for one product's chronologically sorted series.

    Rules:
    1. Fewer than RESTOCK_RULES['min_records'] records: no date ("Insufficient data").
       The status tier is still reported, so a short series at zero stock
       shows as OUT_OF_STOCK without a date.
    2. Stock at the latest observation <= 0: restock date is that
       observation's date ("restock immediately"), overriding the sales trend.
    3. Trailing average sales <= 0: no date ("No sales trend available").
    4. Otherwise days_until_empty = stock / avg; subtract the safety buffer
       tier; restock date = latest date + whole days remaining (never before
       the latest date).

    Args:
        series: One product's records, ascending by date
        window: Trailing window (defaults to RESTOCK_RULES['trailing_window'])

    Returns:
        dict with current_stock, current_date, avg_daily_sales, restock_date,
        reason, days_until_restock, safety_buffer_days, status
    """
    window = window or RESTOCK_RULES['trailing_window']

    latest = series.iloc[-1]
    current_stock = float(latest['stock'])
    current_date = pd.Timestamp(latest['date'])
    avg_daily_sales = trailing_average_sales(series, window)
    days_until_restock, status = classify_stock_status(current_stock, avg_daily_sales)

    estimate = {
        'current_stock': current_stock,
        'current_date': current_date,
        'avg_daily_sales': avg_daily_sales,
        'restock_date': None,
        'reason': REASON_INSUFFICIENT_DATA,
        'days_until_restock': days_until_restock,
        'safety_buffer_days': None,
        'status': status,
    }

    if len(series) < RESTOCK_RULES['min_records']:
        return estimate

    if current_stock <= 0:
        estimate['restock_date'] = current_date
        estimate['reason'] = REASON_OUT_OF_STOCK
        return estimate

    if avg_daily_sales <= 0:
        estimate['reason'] = REASON_NO_SALES_TREND
        return estimate

    days_until_empty = current_stock / avg_daily_sales
    buffer_days = get_safety_buffer_days(current_stock, avg_daily_sales)
    restock_days = max(0.0, days_until_empty - buffer_days)

    # Whole calendar days; a fractional remainder does not push the date out
    estimate['restock_date'] = current_date + pd.Timedelta(days=int(restock_days))
    estimate['safety_buffer_days'] = buffer_days
    estimate['reason'] = f"Based on {avg_daily_sales:.1f} daily sales avg"
    return estimate


def predict_restock_date(series: pd.DataFrame):
    """
    Predict when a product needs restocking.

    Args:
        series: One product's records, ascending by date

    Returns:
        tuple: (restock_date or None, reason)
    """
    if series.empty:
        return None, REASON_INSUFFICIENT_DATA
    estimate = estimate_depletion(series)
    return estimate['restock_date'], estimate['reason']


def generate_restock_predictions(df: pd.DataFrame):
    """
    Restock prediction for every product in the dataset.

    Args:
        df: Normalized inventory data

    Returns:
        tuple: (logs, predictions_df)
        - predictions_df has one row per product, in grouping order
    """
    logs = []
    start_time = datetime.now()
    logs.append("--- Restock Prediction Engine ---")

    if df.empty:
        logs.append("WARNING: No inventory data provided")
        return logs, pd.DataFrame(columns=PREDICTION_COLUMNS)

    groups = group_by_product(df)
    logs.append(f"INFO: Predicting restock dates for {len(groups)} products")

    rows = []
    for product, series in groups.items():
        try:
            estimate = estimate_depletion(series)
        except Exception as e:
            logs.append(f"ERROR: Restock prediction failed for '{product}': {e}")
            continue

        rows.append({
            'product': product,
            'category': series['category'].iloc[-1],
            'current_stock': estimate['current_stock'],
            'avg_daily_sales': estimate['avg_daily_sales'],
            'restock_date': estimate['restock_date'],
            'reason': estimate['reason'],
            'days_until_restock': estimate['days_until_restock'],
            'safety_buffer_days': estimate['safety_buffer_days'],
            'status': estimate['status'],
            'status_label': STATUS_LABELS[estimate['status']],
        })

    predictions = pd.DataFrame(rows, columns=PREDICTION_COLUMNS)

    status_counts = predictions['status'].value_counts()
    for status in STATUS_ORDER:
        if status in status_counts:
            logs.append(f"INFO: {status_counts[status]} products at {status}")

    insufficient = (predictions['reason'] == REASON_INSUFFICIENT_DATA).sum()
    if insufficient:
        logs.append(f"WARNING: {insufficient} products have fewer than {RESTOCK_RULES['min_records']} records - no restock date")

    total_time = (datetime.now() - start_time).total_seconds()
    logs.append(f"INFO: Restock prediction completed in {total_time:.2f} seconds")

    return logs, predictions


# ===== PREDICTION VIEWS =====

def sort_predictions_by_urgency(predictions_df: pd.DataFrame) -> pd.DataFrame:
    """
    Out-of-stock products first, then ascending days until restock.

    Args:
        predictions_df: Output of generate_restock_predictions()

    Returns:
        Sorted copy
    """
    if predictions_df.empty:
        return predictions_df.copy()

    ordered = predictions_df.assign(_in_stock=predictions_df['current_stock'] > 0)
    ordered = ordered.sort_values(['_in_stock', 'days_until_restock'], ascending=[True, True], kind='mergesort')
    return ordered.drop(columns='_in_stock').reset_index(drop=True)


def get_critical_items(predictions_df: pd.DataFrame) -> pd.DataFrame:
    """Products needing immediate attention (out of stock or critical), most urgent first."""
    if predictions_df.empty:
        return predictions_df.copy()

    critical = predictions_df[predictions_df['status'].isin([STATUS_OUT_OF_STOCK, STATUS_CRITICAL])]
    return sort_predictions_by_urgency(critical)


def get_status_distribution(predictions_df: pd.DataFrame) -> pd.DataFrame:
    """
    Product count per status tier, most urgent tier first, empty tiers dropped.

    Returns:
        DataFrame with columns: status, label, count
    """
    columns = ['status', 'label', 'count']
    if predictions_df.empty:
        return pd.DataFrame(columns=columns)

    counts = predictions_df['status'].value_counts()
    rows = [
        {'status': status, 'label': STATUS_LABELS[status], 'count': int(counts[status])}
        for status in STATUS_ORDER
        if counts.get(status, 0) > 0
    ]
    return pd.DataFrame(rows, columns=columns)


def get_prediction_summary_metrics(predictions_df: pd.DataFrame) -> dict:
    """
    Calculate summary metrics for the predictions view

    Args:
        predictions_df: Output of generate_restock_predictions()

    Returns:
        dict: Summary metrics for display
    """
    if predictions_df.empty:
        return {}

    sentinel = RESTOCK_RULES['no_estimate_sentinel']
    status = predictions_df['status']

    finite_days = predictions_df.loc[
        (predictions_df['days_until_restock'] != sentinel) & (status != STATUS_OUT_OF_STOCK),
        'days_until_restock'
    ]

    return {
        'total_products': len(predictions_df),
        'out_of_stock_count': int((status == STATUS_OUT_OF_STOCK).sum()),
        'critical_count': int((status == STATUS_CRITICAL).sum()),
        'low_count': int((status == STATUS_LOW).sum()),
        'moderate_count': int((status == STATUS_MODERATE).sum()),
        'good_count': int((status == STATUS_GOOD).sum()),
        'dated_count': int(predictions_df['restock_date'].notna().sum()),
        'avg_days_of_stock': float(finite_days.mean()) if not finite_days.empty else 0.0,
    }
