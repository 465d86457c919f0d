"""
Inventory Analytics Dashboard
Restock predictions, smart recommendations and sales analytics
"""

import os
from datetime import datetime

import pytz
import streamlit as st

from business_rules import DASHBOARD_RULES, SEASONS, get_today
from data_loader import filter_inventory_data, get_prior_period_data, load_inventory_data
from inventory_metrics import calculate_key_metrics
from recommendation_engine import (
    generate_smart_recommendations,
    get_upcoming_festivals,
    get_weather_profile,
)
from restock_prediction import generate_restock_predictions
from sales_velocity import analyze_sales_velocity
from ui_components import format_delta, format_number, render_data_status, render_kpi_row, render_navigation

from pages.overview_page import render_overview_page
from pages.recommendations_page import render_recommendations_page
from pages.predictions_page import render_predictions_page
from pages.analytics_page import render_analytics_page
from pages.export_page import render_export_page
from pages.data_upload_page import render_data_upload_page
from pages.logs_page import render_logs_page

INVENTORY_FILE_PATH = os.environ.get("INVENTORY_FILE_PATH", "inventory_data.csv")
CACHE_TIMEOUT_SECONDS = 3600

# ===== PAGE CONFIGURATION =====
st.set_page_config(
    page_title="Inventory Analytics Dashboard",
    page_icon="📦",
    layout="wide",
    initial_sidebar_state="expanded"
)

# ===== DATA LOADING =====
# upload_signature is part of the cache key so a new upload reloads the data

@st.cache_data(ttl=CACHE_TIMEOUT_SECONDS, show_spinner="Loading inventory data...")
def get_inventory_data(path, upload_signature=None):
    return load_inventory_data(path, file_key='inventory')

@st.cache_data(ttl=CACHE_TIMEOUT_SECONDS, show_spinner="Predicting restock dates...")
def get_restock_predictions(df):
    return generate_restock_predictions(df)

@st.cache_data(ttl=CACHE_TIMEOUT_SECONDS, show_spinner="Analyzing sales velocity...")
def get_sales_velocity(df):
    return analyze_sales_velocity(df)

@st.cache_data(ttl=CACHE_TIMEOUT_SECONDS, show_spinner="Generating recommendations...")
def get_recommendations(df, today):
    upcoming_festivals = get_upcoming_festivals(today, DASHBOARD_RULES['festival_horizon_days'])
    weather_profile = get_weather_profile(today)
    logs, recommendations = generate_smart_recommendations(df, upcoming_festivals, weather_profile)
    return logs, recommendations, upcoming_festivals, weather_profile


def get_upload_signature():
    """(name, size) of the uploaded inventory file, or None"""
    uploaded = st.session_state.get('uploaded_files', {}).get('inventory')
    if uploaded is None:
        return None
    return (getattr(uploaded, 'name', 'upload'), getattr(uploaded, 'size', None))


def render_sidebar_filters(df):
    """
    Season and date-range filters

    Returns:
        tuple: (season, start_date, end_date)
    """
    st.sidebar.header("🔍 Filters")

    season = st.sidebar.selectbox("Season", options=['All'] + SEASONS, index=0, key="season_filter")

    min_date = df['date'].min().date()
    max_date = df['date'].max().date()
    date_range = st.sidebar.date_input(
        "Date Range",
        value=(min_date, max_date),
        min_value=min_date,
        max_value=max_date,
        key="date_filter"
    )

    # date_input returns a single date while a range is being picked
    if isinstance(date_range, (list, tuple)) and len(date_range) == 2:
        start_date, end_date = date_range
    else:
        start_date, end_date = min_date, max_date

    return season, start_date, end_date


def main():
    """Main application entry point"""

    selected_page = render_navigation()

    if 'uploaded_files' not in st.session_state:
        st.session_state.uploaded_files = {}

    if selected_page == "data_upload":
        render_data_upload_page()
        return

    logs_load, inventory_df, error_df = get_inventory_data(INVENTORY_FILE_PATH, get_upload_signature())
    debug_logs = list(logs_load)

    if inventory_df.empty:
        st.title("📦 Inventory Analytics Dashboard")
        st.warning("No inventory data loaded. Upload a CSV on the **📤 Data Upload** page.")
        st.caption(f"Or place the file at: {os.path.abspath(INVENTORY_FILE_PATH)}")
        if not error_df.empty:
            st.error(f"{len(error_df)} rows failed validation - see the Logs page for details.")
        if selected_page == "logs":
            render_logs_page(debug_logs, error_df)
        return

    season, start_date, end_date = render_sidebar_filters(inventory_df)
    filtered_df = filter_inventory_data(inventory_df, season, start_date, end_date)

    # Sales delta compares against the window of equal length just before start_date
    previous_df = get_prior_period_data(inventory_df, start_date, end_date)
    if season != 'All' and not previous_df.empty:
        previous_df = previous_df[previous_df['season'] == season]
    key_metrics = calculate_key_metrics(filtered_df, previous_df if not previous_df.empty else None)

    # Restock predictions always see the full history
    logs_restock, predictions_df = get_restock_predictions(inventory_df)
    debug_logs.extend(logs_restock)

    today = get_today()
    logs_recs, recommendations, upcoming_festivals, weather_profile = get_recommendations(filtered_df, today)
    debug_logs.extend(logs_recs)

    logs_velocity, velocity_df = get_sales_velocity(filtered_df)
    debug_logs.extend(logs_velocity)

    render_data_status(datetime.now(pytz.timezone(DASHBOARD_RULES['timezone'])), len(filtered_df))

    st.sidebar.divider()
    if st.sidebar.button("🔄 Refresh Data", width='stretch', help="Clear cache and reload"):
        st.cache_data.clear()
        st.rerun()

    st.title("📦 Inventory Analytics Dashboard")
    st.caption(f"Today is {today.strftime('%A, %B %d, %Y')} ({DASHBOARD_RULES['timezone']})")

    if filtered_df.empty:
        st.warning("No records match the selected filters.")

    render_kpi_row({
        "Total Sales": {
            "value": format_number(key_metrics['total_sales']),
            "delta": format_delta(key_metrics['delta_sales']),
            "help": "Units sold in the selected period, with the change against the previous period of equal length"
        },
        "Average Stock": {
            "value": format_number(key_metrics['avg_stock'], 'decimal'),
            "help": "Mean stock across all records in the selection"
        },
        "Products": {
            "value": format_number(key_metrics['unique_products']),
        },
        "Out of Stock Records": {
            "value": format_number(key_metrics['out_of_stock']),
            "help": "Records with stock at or below zero"
        },
    })
    st.divider()

    if selected_page == "overview":
        render_overview_page(filtered_df, predictions_df)

    elif selected_page == "recommendations":
        render_recommendations_page(recommendations, upcoming_festivals, weather_profile)

    elif selected_page == "predictions":
        render_predictions_page(predictions_df)

    elif selected_page == "analytics":
        render_analytics_page(filtered_df, velocity_df)

    elif selected_page == "export":
        render_export_page(filtered_df, key_metrics, recommendations, predictions_df, today)

    elif selected_page == "logs":
        render_logs_page(debug_logs, error_df)


if __name__ == "__main__":
    main()
