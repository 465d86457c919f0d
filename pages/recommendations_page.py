"""
Smart Recommendations Page
Festival, weather and shortage recommendations, most urgent first
"""

import streamlit as st
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from ui_components import render_page_header, render_kpi_row, render_recommendation_card, render_section_header
from business_rules import DASHBOARD_RULES, URGENCY_CRITICAL, URGENCY_HIGH, URGENCY_ORDER
from recommendation_engine import sort_recommendations_by_urgency, summarize_recommendations


def render_signal_panel(upcoming_festivals, weather_profile):
    """What the engine is reacting to: festivals in the horizon and the season's weather"""
    col1, col2 = st.columns(2)

    with col1:
        st.markdown("**🎉 Upcoming Festivals**")
        if not upcoming_festivals:
            st.caption(f"No festivals in the next {DASHBOARD_RULES['festival_horizon_days']} days")
        for festival in upcoming_festivals:
            st.caption(f"{festival.name}: {festival.date:%d %b %Y} (in {festival.days_until} days)")

    with col2:
        st.markdown("**🌤 Weather Outlook**")
        if weather_profile is None:
            st.caption("No weather profile")
        else:
            st.caption(weather_profile.forecast)
            st.caption(f"Watching: {', '.join(weather_profile.keywords)}")


def render_recommendations_page(recommendations, upcoming_festivals, weather_profile):
    """
    Render the recommendations page

    Args:
        recommendations: list of Recommendation
        upcoming_festivals: list of FestivalEvent
        weather_profile: WeatherProfile or None
    """
    render_page_header("Smart Recommendations", icon="🧠",
                       subtitle="What to buy now, based on festivals, weather and stock levels")

    render_signal_panel(upcoming_festivals, weather_profile)
    st.divider()

    if not recommendations:
        st.success("✅ Inventory is balanced - no actions needed right now")
        return

    summary = summarize_recommendations(recommendations)
    render_kpi_row({
        f"{urgency}": {"value": summary['by_urgency'].get(urgency, 0)}
        for urgency in URGENCY_ORDER
    })

    urgency_filter = st.multiselect(
        "Show urgency",
        options=URGENCY_ORDER,
        default=URGENCY_ORDER,
        key="recommendation_urgency_filter"
    )

    render_section_header(f"📋 {summary['total']} Recommendations")
    for rec in sort_recommendations_by_urgency(recommendations):
        if rec.urgency not in urgency_filter:
            continue
        render_recommendation_card(rec, expanded=rec.urgency in (URGENCY_CRITICAL, URGENCY_HIGH))
