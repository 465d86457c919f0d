"""
Inventory Metrics Module
Dataset-wide rollups for the KPI row and the overview charts.
"""

import pandas as pd


def calculate_key_metrics(df: pd.DataFrame, previous_df: pd.DataFrame = None) -> dict:
    """
    Key metrics over the (filtered) dataset.

    Args:
        df: Normalized inventory data
        previous_df: Prior-period data for the sales delta (optional)

    Returns:
        dict: total_sales, avg_stock, unique_products, out_of_stock, delta_sales
        (all zero for an empty dataset)
    """
    metrics = {
        'total_sales': 0,
        'avg_stock': 0,
        'unique_products': 0,
        'out_of_stock': 0,
        'delta_sales': 0,
    }

    if df is None or df.empty:
        return metrics

    metrics['total_sales'] = float(df['sold'].sum())
    metrics['avg_stock'] = float(df['stock'].sum()) / len(df)
    metrics['unique_products'] = int(df['product'].nunique())
    metrics['out_of_stock'] = int((df['stock'] <= 0).sum())

    if previous_df is not None:
        previous_sales = float(previous_df['sold'].sum()) if not previous_df.empty else 0.0
        metrics['delta_sales'] = metrics['total_sales'] - previous_sales

    return metrics


def get_sales_over_time(df: pd.DataFrame) -> pd.DataFrame:
    """Total units sold per date, ascending."""
    if df.empty:
        return pd.DataFrame(columns=['date', 'sales'])

    sales = df.groupby('date', as_index=False)['sold'].sum()
    return sales.rename(columns={'sold': 'sales'}).sort_values('date').reset_index(drop=True)


def get_category_sales(df: pd.DataFrame) -> pd.DataFrame:
    """Total units sold and total stock per category, in first-appearance order."""
    if df.empty:
        return pd.DataFrame(columns=['category', 'sales', 'stock'])

    return df.groupby('category', sort=False, as_index=False).agg(
        sales=('sold', 'sum'),
        stock=('stock', 'sum'),
    )


def get_stock_status_counts(predictions_df: pd.DataFrame) -> dict:
    """
    Product counts for the overview stock health cards.

    - out_of_stock: current stock <= 0
    - low_stock: 0 < current stock < 3 days of trailing sales
    - good_stock: current stock >= 7 days of trailing sales

    Args:
        predictions_df: Output of generate_restock_predictions()

    Returns:
        dict with out_of_stock, low_stock, good_stock
    """
    if predictions_df.empty:
        return {'out_of_stock': 0, 'low_stock': 0, 'good_stock': 0}

    stock = predictions_df['current_stock']
    avg_sales = predictions_df['avg_daily_sales']

    return {
        'out_of_stock': int((stock <= 0).sum()),
        'low_stock': int(((stock > 0) & (stock < avg_sales * 3)).sum()),
        'good_stock': int((stock >= avg_sales * 7).sum()),
    }
