"""
Data Upload Page
Upload the daily sales/stock CSV with validation and template export
"""

import streamlit as st
import pandas as pd
from datetime import datetime
import os
import sys
from io import BytesIO

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from ui_components import render_page_header, render_info_box
from business_rules import INPUT_RULES
from data_loader import validate_inventory_rows

# ===== FILE CONFIGURATION =====

FILE_KEY = "inventory"

FILE_CONFIG = {
    "display_name": "Inventory Data",
    "description": "One row per product per day: units sold and stock on hand",
    "required_columns": INPUT_RULES["required_columns"],
    "optional_columns": INPUT_RULES["optional_columns"],
    "sample_data": {
        "Date": ["2026-10-01", "2026-10-01", "2026-10-02", "2026-10-02"],
        "Product": ["Diya Set", "Umbrella", "Diya Set", "Umbrella"],
        "Category": ["Festival", "Seasonal", "Festival", "Seasonal"],
        "Sold": [12, 3, 15, 4],
        "Stock": [88, 40, 73, 36],
    }
}

# ===== VALIDATION FUNCTIONS =====

def validate_file(df):
    """
    Validate an uploaded inventory file

    Missing required columns fail the file. Rows with unparsable values are
    reported as warnings; they are dropped when the data is loaded.

    Returns:
        (is_valid, errors_list, warnings_list)
    """
    errors = []
    warnings = []

    columns = [str(col).strip() for col in df.columns]
    missing_cols = [col for col in FILE_CONFIG["required_columns"] if col not in columns]
    if missing_cols:
        errors.append(f"Missing required columns: {', '.join(missing_cols)}")
        return False, errors, warnings

    if df.empty:
        errors.append("File has no data rows")
        return False, errors, warnings

    _, valid_df, error_df = validate_inventory_rows(df.set_axis(columns, axis=1))
    if valid_df.empty:
        errors.append("No valid data rows found in the uploaded file")
    if not error_df.empty:
        for reason, count in error_df['error_reason'].value_counts().items():
            warnings.append(f"{count} rows skipped: {reason}")

    return len(errors) == 0, errors, warnings


def create_template():
    """Create a CSV template with sample rows for download"""
    template_df = pd.DataFrame(FILE_CONFIG["sample_data"])

    output = BytesIO()
    template_df.to_csv(output, index=False)
    output.seek(0)

    return output


# ===== MAIN RENDER FUNCTION =====

def render_data_upload_page():
    """Main data upload page render function"""

    render_page_header(
        "Data Upload",
        icon="📤",
        subtitle="Upload your inventory CSV with validation and template export"
    )

    if 'uploaded_files' not in st.session_state:
        st.session_state.uploaded_files = {}

    if 'upload_history' not in st.session_state:
        st.session_state.upload_history = []

    with st.expander("📖 Instructions", expanded=False):
        st.markdown(f"""
        **Required columns:** {', '.join(FILE_CONFIG['required_columns'])}

        **Optional columns:** {', '.join(FILE_CONFIG['optional_columns'])}

        - `Date` accepts ISO (2026-10-01) or US (10/1/2026) dates
        - `Sold` and `Stock` must be numbers; thousands separators are fine
        - Products without a `Category` are assigned one automatically
        - Rows with a missing date, product or quantity are skipped and listed on the Logs page
        """)

    st.divider()

    col1, col2 = st.columns([3, 1])

    with col1:
        uploaded_file = st.file_uploader(
            f"Upload {FILE_CONFIG['display_name']} (CSV)",
            type="csv",
            key="inventory_upload",
            help=FILE_CONFIG["description"]
        )

    with col2:
        st.download_button(
            label="📄 Template",
            data=create_template(),
            file_name="inventory_template.csv",
            mime="text/csv",
            help="Download a CSV template with sample rows"
        )

    if uploaded_file is not None:
        try:
            df = pd.read_csv(uploaded_file, dtype=str)
            uploaded_file.seek(0)
            is_valid, errors, warnings = validate_file(df)

            if is_valid:
                st.session_state.uploaded_files[FILE_KEY] = uploaded_file
                st.session_state.upload_history.append({
                    "file": uploaded_file.name,
                    "rows": len(df),
                    "status": "Success",
                    "timestamp": datetime.now()
                })
                st.success(f"✅ File validated successfully! Loaded {len(df):,} rows")
                for warning in warnings:
                    st.warning(f"⚠️ {warning}")
                with st.expander("Preview Data (first 5 rows)", expanded=False):
                    st.dataframe(df.head(), width='stretch')
            else:
                st.error("❌ Validation failed:")
                for error in errors:
                    st.error(f"  • {error}")
                st.session_state.upload_history.append({
                    "file": uploaded_file.name,
                    "rows": len(df),
                    "status": "Failed",
                    "timestamp": datetime.now()
                })

        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            st.error(f"❌ Error reading file: {str(e)}")

    elif FILE_KEY in st.session_state.uploaded_files:
        current = st.session_state.uploaded_files[FILE_KEY]
        st.info(f"ℹ️ Currently loaded: {getattr(current, 'name', 'uploaded file')}")

    if st.session_state.uploaded_files.get(FILE_KEY) is not None:
        if st.button("🗑️ Clear Uploaded Data"):
            st.session_state.uploaded_files.pop(FILE_KEY, None)
            st.cache_data.clear()
            st.rerun()

    if st.session_state.upload_history:
        st.divider()
        st.subheader("📜 Upload History")
        history_df = pd.DataFrame(st.session_state.upload_history)
        history_df['timestamp'] = history_df['timestamp'].dt.strftime('%Y-%m-%d %H:%M:%S')
        st.dataframe(history_df.iloc[::-1], width='stretch', hide_index=True)
    else:
        render_info_box("No files uploaded yet in this session", type="info")
