"""
Sales Analytics Page
Velocity ranking, sales trends and category performance
"""

import streamlit as st
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from ui_components import render_page_header, render_chart, render_data_table, render_empty_state, build_bar_chart
from business_rules import DASHBOARD_RULES
from sales_velocity import TREND_DECREASING, TREND_INCREASING, TREND_STABLE, get_category_performance, filter_velocity_by_category

TREND_ICONS = {
    TREND_INCREASING: "📈",
    TREND_DECREASING: "📉",
    TREND_STABLE: "➡️",
}


def render_analytics_page(filtered_df, velocity_df):
    """
    Render the sales analytics page

    Args:
        filtered_df: Inventory data after season/date filters
        velocity_df: Output of analyze_sales_velocity()
    """
    render_page_header("Sales Analytics", icon="📈", subtitle="Which products drive sales, and where they are heading")

    if velocity_df.empty:
        render_empty_state("Not enough history for velocity analysis (2+ records per product needed)")
        return

    categories = ['All'] + sorted(velocity_df['category'].dropna().unique().tolist())
    category = st.selectbox("Category", options=categories, index=0, key="analytics_category_filter")
    velocity = filter_velocity_by_category(velocity_df, category)

    top_n = DASHBOARD_RULES['chart_top_n']
    col1, col2 = st.columns(2)
    with col1:
        fig = build_bar_chart(velocity.head(top_n), 'product', 'performance_score', orientation='h')
        fig.update_layout(xaxis_title='Performance Score', yaxis=dict(autorange='reversed'))
        render_chart(fig, title=f"🏆 Top {top_n} by Performance")
    with col2:
        trend_counts = velocity['sales_trend'].value_counts().reindex(list(TREND_ICONS), fill_value=0)
        trend_df = trend_counts.rename_axis('trend').reset_index(name='count')
        trend_df['trend'] = trend_df['trend'].map(lambda trend: f"{TREND_ICONS[trend]} {trend}")
        render_chart(build_bar_chart(trend_df, 'trend', 'count'), title="Sales Trends")

    performance = get_category_performance(filtered_df, velocity_df)
    if not performance.empty:
        fig = build_bar_chart(performance, 'category', 'total_sales')
        fig.update_layout(yaxis_title='Units Sold')
        render_chart(fig, title="📦 Category Performance")

    display = velocity.assign(
        sales_trend=velocity['sales_trend'].map(lambda trend: f"{TREND_ICONS.get(trend, '')} {trend}"),
        avg_daily_sales=velocity['avg_daily_sales'].round(1),
        stock_turn_days=velocity['stock_turn_days'].round(1),
        performance_score=velocity['performance_score'].round(1),
    ).rename(columns={
        'product': 'Product',
        'category': 'Category',
        'total_sales': 'Total Sales',
        'avg_daily_sales': 'Avg Daily Sales',
        'current_stock': 'Current Stock',
        'sales_trend': 'Trend',
        'stock_turn_days': 'Stock Turn Days',
        'performance_score': 'Performance Score',
    })
    render_data_table(display, title="📋 Velocity Ranking", download_filename="sales_velocity.csv")
