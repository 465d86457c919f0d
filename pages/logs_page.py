"""
Logs Page
Processing logs from every stage and rows rejected by validation
"""

import streamlit as st


def split_log_sections(logs):
    """
    Group a flat log list into stages by their '--- Stage ---' banners

    Returns:
        list of (stage_name, [log lines])
    """
    sections = []
    for log in logs:
        if log.startswith("---") and log.endswith("---"):
            sections.append((log.strip("- "), []))
        elif sections:
            sections[-1][1].append(log)
        else:
            sections.append(("General", [log]))
    return sections


def render_logs_page(logs, error_df):
    """Render processing logs and validation errors"""

    st.title("🔧 Logs")

    all_errors = [log for log in logs if log.startswith("ERROR:")]
    all_warnings = [log for log in logs if log.startswith("WARNING:")]

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Log Lines", len(logs))
    with col2:
        st.metric("Warnings", len(all_warnings), delta="⚠️" if all_warnings else None)
    with col3:
        st.metric("Rejected Rows", len(error_df), delta="❌" if not error_df.empty else None)

    st.divider()
    st.header("📋 Processing Logs")

    if not logs:
        st.info("No logs yet")

    for stage, stage_logs in split_log_sections(logs):
        has_errors = any(log.startswith("ERROR:") for log in stage_logs)
        with st.expander(f"{'❌' if has_errors else '📄'} {stage}", expanded=has_errors):
            for log in stage_logs:
                if log.startswith("ERROR:"):
                    st.error(log)
                elif log.startswith("WARNING:"):
                    st.warning(log)
                else:
                    st.text(log)

    st.divider()
    st.header("🚫 Rejected Rows")
    if error_df.empty:
        st.success("✅ All rows passed validation")
    else:
        st.caption("These rows were skipped when loading the data")
        st.dataframe(error_df, width='stretch')
        st.download_button(
            label="📥 Download Rejected Rows",
            data=error_df.to_csv(index=False).encode('utf-8'),
            file_name="rejected_rows.csv",
            mime="text/csv",
        )
