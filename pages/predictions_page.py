"""
Restock Predictions Page
When each product needs restocking, with status tiers and days of stock
"""

import streamlit as st
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from ui_components import (
    STATUS_COLORS, render_page_header, render_kpi_row, render_chart, render_data_table,
    render_empty_state, build_status_pie, build_bar_chart, format_number, format_date, format_days_until,
)
from business_rules import (
    DASHBOARD_RULES, RESTOCK_RULES, STATUS_CRITICAL, STATUS_LABELS, STATUS_LOW, STATUS_ORDER, STATUS_OUT_OF_STOCK,
)
from restock_prediction import get_prediction_summary_metrics, get_status_distribution, sort_predictions_by_urgency


def build_prediction_display(predictions_df):
    """Rename and format prediction columns for the table"""
    display = sort_predictions_by_urgency(predictions_df)
    display = display.assign(
        restock_date=display['restock_date'].map(format_date),
        avg_daily_sales=display['avg_daily_sales'].round(1),
        days_until_restock=display['days_until_restock'].map(
            lambda days: format_days_until(days, RESTOCK_RULES['no_estimate_sentinel'])
        ),
    )
    return display[['product', 'category', 'current_stock', 'avg_daily_sales', 'days_until_restock',
                    'restock_date', 'status_label', 'reason']].rename(columns={
        'product': 'Product',
        'category': 'Category',
        'current_stock': 'Current Stock',
        'avg_daily_sales': 'Avg Daily Sales',
        'days_until_restock': 'Days of Stock',
        'restock_date': 'Restock By',
        'status_label': 'Status',
        'reason': 'Reason',
    })


def render_days_of_stock_chart(predictions_df):
    """Horizontal bars for the products with the least stock cover"""
    cap = DASHBOARD_RULES['chart_days_cap']
    top_n = DASHBOARD_RULES['chart_top_n']
    chart_df = sort_predictions_by_urgency(predictions_df).head(top_n)
    chart_df = chart_df.assign(days=chart_df['days_until_restock'].clip(upper=cap))

    fig = build_bar_chart(chart_df, 'product', 'days', orientation='h')
    fig.update_traces(marker_color=[STATUS_COLORS.get(status) for status in chart_df['status']])
    fig.update_layout(xaxis_title=f'Days of Stock (capped at {cap})', yaxis=dict(autorange='reversed'))
    render_chart(fig, title=f"⏳ {top_n} Products Closest to Running Out")


def render_predictions_page(predictions_df):
    """
    Render the restock predictions page

    Args:
        predictions_df: Output of generate_restock_predictions()
    """
    render_page_header("Restock Predictions", icon="📅",
                       subtitle=f"Trailing {RESTOCK_RULES['trailing_window']}-day sales rate with a safety buffer")

    if predictions_df.empty:
        render_empty_state("No predictions available")
        return

    metrics = get_prediction_summary_metrics(predictions_df)
    render_kpi_row({
        "Products": {"value": metrics['total_products']},
        STATUS_LABELS[STATUS_OUT_OF_STOCK]: {"value": metrics['out_of_stock_count']},
        STATUS_LABELS[STATUS_CRITICAL]: {"value": metrics['critical_count']},
        STATUS_LABELS[STATUS_LOW]: {"value": metrics['low_count']},
        "Avg Days of Stock": {
            "value": format_number(metrics['avg_days_of_stock'], 'days'),
            "help": "Excludes out-of-stock products and products with no sales"
        },
    })

    col1, col2 = st.columns([1, 2])
    with col1:
        render_chart(build_status_pie(get_status_distribution(predictions_df)), title="Stock Status")
    with col2:
        render_days_of_stock_chart(predictions_df)

    status_filter = st.multiselect(
        "Filter by status",
        options=STATUS_ORDER,
        default=STATUS_ORDER,
        format_func=lambda status: STATUS_LABELS[status],
        key="prediction_status_filter"
    )
    filtered = predictions_df[predictions_df['status'].isin(status_filter)]

    render_data_table(build_prediction_display(filtered), title="📋 All Predictions",
                      download_filename="restock_predictions.csv")
