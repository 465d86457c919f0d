"""
Export Page
CSV downloads for each report and a combined Excel workbook
"""

import streamlit as st
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from ui_components import render_page_header, render_info_box
from utils import (
    build_inventory_report,
    build_recommendations_export,
    build_restock_export,
    build_summary_report,
    dataframe_to_csv_bytes,
    get_export_filename,
    get_filtered_data_as_excel,
)


def render_download(column, title, description, df, prefix, today, key):
    """One export card with a CSV download button"""
    with column:
        st.markdown(f"**{title}**")
        st.caption(description)
        st.caption(f"{len(df):,} rows")
        st.download_button(
            label="📥 Download CSV",
            data=dataframe_to_csv_bytes(df),
            file_name=get_export_filename(prefix, today),
            mime="text/csv",
            disabled=df.empty,
            key=key,
        )


def render_export_page(filtered_df, key_metrics, recommendations, predictions_df, today):
    """
    Render the export page

    Args:
        filtered_df: Inventory data after season/date filters
        key_metrics: Output of calculate_key_metrics()
        recommendations: list of Recommendation
        predictions_df: Output of generate_restock_predictions()
        today: Report date
    """
    render_page_header("Export", icon="📥", subtitle="Download the analysis for offline use")

    inventory_report = build_inventory_report(filtered_df, today)
    recommendations_report = build_recommendations_export(recommendations, today)
    restock_report = build_restock_export(predictions_df, today)
    summary_report = build_summary_report(filtered_df, key_metrics, recommendations, predictions_df, today)

    col1, col2 = st.columns(2)
    render_download(col1, "📊 Inventory Analysis", "Filtered records with season and category",
                    inventory_report, "inventory_analysis", today, "export_inventory")
    render_download(col2, "🧠 Recommendations", "Every recommendation with its reasoning",
                    recommendations_report, "recommendations", today, "export_recommendations")

    col3, col4 = st.columns(2)
    render_download(col3, "📅 Restock Predictions", "Restock dates, days of stock and status",
                    restock_report, "restock_predictions", today, "export_restock")
    render_download(col4, "📋 Summary Report", "Key metrics and recommendation counts",
                    summary_report, "inventory_summary", today, "export_summary")

    if recommendations_report.empty:
        render_info_box("No recommendations available to export", type="info")

    st.divider()
    st.subheader("📦 All Reports (Excel)")
    st.caption("One workbook, one sheet per report; empty reports are left out")
    excel_bytes = get_filtered_data_as_excel({
        "Summary": (summary_report, False),
        "Recommendations": (recommendations_report, False),
        "Restock Predictions": (restock_report, False),
        "Inventory Analysis": (inventory_report, False),
    })
    st.download_button(
        label="📥 Download Excel Workbook",
        data=excel_bytes,
        file_name=get_export_filename("inventory_report", today, extension="xlsx"),
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        key="export_excel",
    )

    with st.expander("Preview Summary Report"):
        st.dataframe(summary_report.T.rename(columns={0: 'Value'}), width='stretch')
