"""
UI Components Module
Reusable Streamlit/Plotly building blocks for the Inventory Analytics Dashboard
"""

import streamlit as st
import plotly.graph_objects as go

from business_rules import (
    STATUS_CRITICAL,
    STATUS_GOOD,
    STATUS_LOW,
    STATUS_MODERATE,
    STATUS_OUT_OF_STOCK,
    URGENCY_CRITICAL,
    URGENCY_HIGH,
    URGENCY_LOW,
    URGENCY_MEDIUM,
)

URGENCY_ICONS = {
    URGENCY_CRITICAL: "🔴",
    URGENCY_HIGH: "🟠",
    URGENCY_MEDIUM: "🟡",
    URGENCY_LOW: "🟢",
}

STATUS_COLORS = {
    STATUS_OUT_OF_STOCK: "#d62728",
    STATUS_CRITICAL: "#ff7f0e",
    STATUS_LOW: "#ffbb33",
    STATUS_MODERATE: "#1f77b4",
    STATUS_GOOD: "#2ca02c",
}

# ===== UI LAYOUT HELPERS =====

def render_page_header(title, icon="📦", subtitle=None):
    """Render consistent page headers"""
    st.title(f"{icon} {title}")
    if subtitle:
        st.caption(subtitle)
    st.divider()

def render_kpi_row(metrics_dict):
    """
    Render a row of KPI metrics

    Args:
        metrics_dict: Dict with format {"Label": {"value": "123", "delta": "+5", "help": "Help text"}}
    """
    cols = st.columns(len(metrics_dict))
    for idx, (label, data) in enumerate(metrics_dict.items()):
        with cols[idx]:
            raw_value = data.get("value", "N/A")
            if raw_value is None or (isinstance(raw_value, str) and raw_value.strip() == ""):
                display_value = "N/A"
            else:
                display_value = raw_value

            st.metric(
                label=label,
                value=display_value,
                delta=data.get("delta"),
                help=data.get("help")
            )

def render_data_table(df, title=None, max_rows=100, downloadable=True, download_filename="data.csv"):
    """
    Render a data table with optional download

    Args:
        df: Pandas DataFrame
        title: Optional section title
        max_rows: Maximum rows to display
        downloadable: Show download button
        download_filename: Name for downloaded file
    """
    if title:
        st.subheader(title)

    if df.empty:
        st.info("No data available")
        return

    st.dataframe(df.head(max_rows), width='stretch', hide_index=True)

    if len(df) > max_rows:
        st.caption(f"Showing first {max_rows} of {len(df)} records")

    if downloadable:
        csv = df.to_csv(index=False).encode('utf-8')
        st.download_button(
            label="📥 Download Full Data",
            data=csv,
            file_name=download_filename,
            mime="text/csv",
            key=f"download_{download_filename}_{id(df)}"
        )

def render_chart(fig, title=None, height=400):
    """
    Render a Plotly chart with consistent styling

    Args:
        fig: Plotly figure object
        title: Optional chart title
        height: Chart height in pixels
    """
    if title:
        st.subheader(title)

    fig.update_layout(
        height=height,
        margin=dict(l=20, r=20, t=40, b=20),
        template="plotly_white"
    )

    st.plotly_chart(fig, width='stretch')

def render_info_box(message, type="info"):
    """
    Render an info/warning/error box

    Args:
        message: Message to display
        type: "info", "warning", "error", "success"
    """
    if type == "info":
        st.info(message)
    elif type == "warning":
        st.warning(message)
    elif type == "error":
        st.error(message)
    elif type == "success":
        st.success(message)

def render_section_header(title, description=None):
    """Render a section header with optional description"""
    st.subheader(title)
    if description:
        st.caption(description)

def render_recommendation_card(recommendation, expanded=False):
    """
    Render one recommendation as an expander with its markdown reason

    Args:
        recommendation: Recommendation
        expanded: Open the expander by default
    """
    icon = URGENCY_ICONS.get(recommendation.urgency, "⚪")
    header = f"{icon} [{recommendation.urgency}] {recommendation.title}"
    with st.expander(header, expanded=expanded):
        st.markdown(recommendation.reason)
        cols = st.columns(3)
        cols[0].caption(f"Type: {recommendation.type}")
        cols[1].caption(f"Products: {len(recommendation.products)}")
        if recommendation.action_needed is not None:
            cols[2].caption(f"Units to buy: {format_number(round(recommendation.action_needed))}")

# ===== CHART BUILDERS =====

def build_bar_chart(df, x, y, color=None, title=None, orientation='v'):
    """Plain bar chart; `color` is a single color or None"""
    fig = go.Figure(go.Bar(
        x=df[x] if orientation == 'v' else df[y],
        y=df[y] if orientation == 'v' else df[x],
        orientation=orientation,
        marker_color=color,
    ))
    if title:
        fig.update_layout(title=title)
    return fig

def build_line_chart(df, x, y, title=None):
    """Line chart with markers"""
    fig = go.Figure(go.Scatter(x=df[x], y=df[y], mode='lines+markers'))
    if title:
        fig.update_layout(title=title)
    return fig

def build_status_pie(distribution_df, title=None):
    """
    Donut chart of stock status tiers

    Args:
        distribution_df: Output of get_status_distribution()
    """
    fig = go.Figure(go.Pie(
        labels=distribution_df['label'],
        values=distribution_df['count'],
        marker=dict(colors=[STATUS_COLORS.get(status, "#7f7f7f") for status in distribution_df['status']]),
        hole=0.4,
    ))
    if title:
        fig.update_layout(title=title)
    return fig

# ===== NAVIGATION HELPERS =====

def get_main_navigation():
    """
    Define main navigation menu structure
    Returns list of menu items with page info
    """
    return [
        {
            "id": "overview",
            "label": "📊 Overview",
            "description": "Key metrics, sales trend and stock health"
        },
        {
            "id": "recommendations",
            "label": "🧠 Smart Recommendations",
            "description": "Festival, weather and shortage actions"
        },
        {
            "id": "predictions",
            "label": "📅 Restock Predictions",
            "description": "When each product needs restocking"
        },
        {
            "id": "analytics",
            "label": "📈 Sales Analytics",
            "description": "Velocity, trends and category performance"
        },
        {
            "id": "export",
            "label": "📥 Export",
            "description": "Download reports as CSV or Excel"
        },
        {
            "id": "data_upload",
            "label": "📤 Data Upload",
            "description": "Upload inventory data and get the template"
        },
        {
            "id": "logs",
            "label": "🔧 Logs",
            "description": "Processing logs and validation errors"
        }
    ]

def render_navigation():
    """
    Render main navigation menu in sidebar
    Returns selected page ID
    """
    st.sidebar.title("📦 Inventory Analytics")
    st.sidebar.caption("Restock predictions and smart recommendations")
    st.sidebar.divider()

    menu_items = get_main_navigation()

    selected = st.sidebar.radio(
        "Navigation",
        options=[item["label"] for item in menu_items],
        key="main_nav"
    )

    selected_page = next((item for item in menu_items if item["label"] == selected), None)

    if selected_page:
        st.sidebar.caption(selected_page["description"])

    st.sidebar.divider()

    return selected_page["id"] if selected_page else "overview"

# ===== DATA STATUS INDICATOR =====

def render_data_status(data_load_time=None, record_count=None):
    """Render data status indicator"""
    st.sidebar.divider()
    st.sidebar.caption("📊 Data Status")

    if data_load_time:
        st.sidebar.caption(f"Last Updated: {data_load_time.strftime('%H:%M:%S')}")

    if record_count:
        st.sidebar.caption(f"Records: {record_count:,}")

    st.sidebar.success("✓ Data Loaded")

# ===== EMPTY STATE HANDLERS =====

def render_empty_state(message="No data available"):
    """Render empty state"""
    st.info(f"ℹ️ {message}")

# ===== UTILITY FORMATTERS =====

def format_number(value, format_type="integer"):
    """Format numbers consistently"""
    if value is None:
        return "N/A"

    formats = {
        'integer': '{:,.0f}',
        'percentage': '{:.1f}%',
        'decimal': '{:.2f}',
        'days': '{:.1f} days',
    }

    try:
        return formats.get(format_type, '{}').format(value)
    except (TypeError, ValueError):
        return str(value)

def format_delta(value):
    """Signed delta for st.metric; None when there is nothing to compare"""
    if value is None or value == 0:
        return None
    return f"{value:+,.0f}"

def format_date(date_value, format_str='%Y-%m-%d'):
    """Format dates consistently"""
    if date_value is None:
        return "N/A"

    try:
        if isinstance(date_value, str):
            return date_value
        if date_value != date_value:  # NaT
            return "N/A"
        return date_value.strftime(format_str)
    except (AttributeError, ValueError):
        return str(date_value)

def format_days_until(days, sentinel=999):
    """'3.2 days', 'Out of stock' or 'No sales'"""
    if days is None:
        return "N/A"
    if days >= sentinel:
        return "No sales"
    if days <= 0:
        return "Out of stock"
    return format_number(days, 'days')
