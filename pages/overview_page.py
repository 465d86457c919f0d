"""
Overview Page
Sales trend, category breakdown and stock health at a glance
"""

import streamlit as st
import plotly.graph_objects as go
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from ui_components import render_page_header, render_kpi_row, render_chart, render_data_table, render_empty_state, build_line_chart
from inventory_metrics import get_sales_over_time, get_category_sales, get_stock_status_counts
from restock_prediction import get_critical_items


def render_category_chart(category_sales):
    """Grouped bars: units sold and stock on hand per category"""
    fig = go.Figure()
    fig.add_trace(go.Bar(x=category_sales['category'], y=category_sales['sales'], name='Sales'))
    fig.add_trace(go.Bar(x=category_sales['category'], y=category_sales['stock'], name='Stock'))
    fig.update_layout(barmode='group', xaxis_title='Category', yaxis_title='Units')
    render_chart(fig, title="📦 Sales and Stock by Category")


def render_overview_page(filtered_df, predictions_df):
    """
    Render the overview page

    Args:
        filtered_df: Inventory data after season/date filters
        predictions_df: Restock predictions over the full history
    """
    render_page_header("Overview", icon="📊", subtitle="Sales trend and stock health")

    stock_counts = get_stock_status_counts(predictions_df)
    render_kpi_row({
        "🔴 Out of Stock": {
            "value": stock_counts['out_of_stock'],
            "help": "Products whose latest stock is at or below zero"
        },
        "🟠 Low Stock": {
            "value": stock_counts['low_stock'],
            "help": "Less than 3 days of stock at the recent sales rate"
        },
        "🟢 Good Stock": {
            "value": stock_counts['good_stock'],
            "help": "At least 7 days of stock at the recent sales rate"
        },
    })

    if filtered_df.empty:
        render_empty_state("No records in the selected period")
        return

    col1, col2 = st.columns(2)
    with col1:
        sales_over_time = get_sales_over_time(filtered_df)
        fig = build_line_chart(sales_over_time, 'date', 'sales')
        fig.update_layout(xaxis_title='Date', yaxis_title='Units Sold')
        render_chart(fig, title="📈 Daily Sales")
    with col2:
        render_category_chart(get_category_sales(filtered_df))

    critical = get_critical_items(predictions_df)
    if critical.empty:
        st.success("✅ No products need immediate restocking")
    else:
        display = critical[['product', 'category', 'current_stock', 'avg_daily_sales', 'status_label', 'reason']].rename(columns={
            'product': 'Product',
            'category': 'Category',
            'current_stock': 'Current Stock',
            'avg_daily_sales': 'Avg Daily Sales',
            'status_label': 'Status',
            'reason': 'Reason',
        })
        display['Avg Daily Sales'] = display['Avg Daily Sales'].round(1)
        render_data_table(display, title="🚨 Needs Immediate Attention", downloadable=False)
