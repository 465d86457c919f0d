import io  # Required for Excel export
import re

import pandas as pd

from business_rules import EXPORT_RULES
from inventory_metrics import get_stock_status_counts
from recommendation_engine import summarize_recommendations

BOLD_MARKER_PATTERN = re.compile(r"\*\*(.*?)\*\*")


def _format_date(value, missing=None):
    """Format a date as YYYY-MM-DD, or return the missing marker."""
    missing = EXPORT_RULES['missing_value'] if missing is None else missing
    if value is None or pd.isna(value):
        return missing
    return pd.Timestamp(value).strftime(EXPORT_RULES['date_format'])


def strip_markdown_bold(text: str) -> str:
    """'**Diya**: BUY 90' -> 'Diya: BUY 90'"""
    return BOLD_MARKER_PATTERN.sub(r"\1", text or "")


# --- Export Builders ---

def build_inventory_report(df: pd.DataFrame, generated_date) -> pd.DataFrame:
    """
    Normalized records with a Generated_Date column, for the inventory analysis CSV.

    Args:
        df: Normalized (filtered) inventory data
        generated_date: Report date

    Returns:
        DataFrame with Date, Product, Category, Sold, Stock, Season, Generated_Date
    """
    columns = ['Date', 'Product', 'Category', 'Sold', 'Stock', 'Season', 'Generated_Date']
    if df.empty:
        return pd.DataFrame(columns=columns)

    report = pd.DataFrame({
        'Date': df['date'].map(_format_date),
        'Product': df['product'],
        'Category': df['category'],
        'Sold': df['sold'],
        'Stock': df['stock'],
        'Season': df['season'],
    })
    report['Generated_Date'] = _format_date(generated_date)
    return report.reset_index(drop=True)[columns]


def build_recommendations_export(recommendations, generated_date) -> pd.DataFrame:
    """
    One row per recommendation; markdown bold markers stripped from the reason.

    Args:
        recommendations: list of Recommendation
        generated_date: Report date

    Returns:
        DataFrame with ID, Type, Title, Urgency, Products_Count, Products, Reason, Generated_Date
    """
    columns = ['ID', 'Type', 'Title', 'Urgency', 'Products_Count', 'Products', 'Reason', 'Generated_Date']
    report_date = _format_date(generated_date)

    rows = [
        {
            'ID': position,
            'Type': rec.type,
            'Title': rec.title,
            'Urgency': rec.urgency,
            'Products_Count': len(rec.products),
            'Products': ", ".join(rec.products),
            'Reason': strip_markdown_bold(rec.reason),
            'Generated_Date': report_date,
        }
        for position, rec in enumerate(recommendations, start=1)
    ]
    return pd.DataFrame(rows, columns=columns)


def build_restock_export(predictions_df: pd.DataFrame, generated_date) -> pd.DataFrame:
    """
    Restock predictions for the CSV download.

    Average daily sales are rounded; missing restock dates become 'N/A'.

    Args:
        predictions_df: Output of generate_restock_predictions()
        generated_date: Report date

    Returns:
        DataFrame with Product, Category, Current_Stock, Avg_Daily_Sales,
        Days_Until_Restock, Restock_Date, Status, Reason, Generated_Date
    """
    columns = [
        'Product', 'Category', 'Current_Stock', 'Avg_Daily_Sales', 'Days_Until_Restock',
        'Restock_Date', 'Status', 'Reason', 'Generated_Date'
    ]
    if predictions_df.empty:
        return pd.DataFrame(columns=columns)

    missing = EXPORT_RULES['missing_value']
    export = pd.DataFrame({
        'Product': predictions_df['product'],
        'Category': predictions_df['category'],
        'Current_Stock': predictions_df['current_stock'],
        'Avg_Daily_Sales': predictions_df['avg_daily_sales'].round(EXPORT_RULES['avg_sales_decimals']),
        'Days_Until_Restock': predictions_df['days_until_restock'].round(1),
        'Restock_Date': predictions_df['restock_date'].map(_format_date),
        'Status': predictions_df['status'].fillna('Unknown'),
        'Reason': predictions_df['reason'],
    })
    export['Days_Until_Restock'] = export['Days_Until_Restock'].astype(object).where(
        export['Days_Until_Restock'].notna(), missing
    )
    export['Generated_Date'] = _format_date(generated_date)
    return export.reset_index(drop=True)[columns]


def build_summary_report(df: pd.DataFrame, key_metrics: dict, recommendations, predictions_df: pd.DataFrame,
                         generated_date) -> pd.DataFrame:
    """
    Single-row summary: key metrics, recommendation counts and restock counts.

    Args:
        df: Normalized (filtered) inventory data
        key_metrics: Output of calculate_key_metrics()
        recommendations: list of Recommendation
        predictions_df: Output of generate_restock_predictions()
        generated_date: Report date

    Returns:
        One-row DataFrame
    """
    summary = summarize_recommendations(recommendations)
    by_urgency = summary['by_urgency']
    by_type = summary['by_type']
    stock_counts = get_stock_status_counts(predictions_df)

    row = {
        'Report_Date': _format_date(generated_date),
        'Total_Products': key_metrics.get('unique_products', 0),
        'Total_Sales': key_metrics.get('total_sales', 0),
        'Average_Stock': round(key_metrics.get('avg_stock', 0), 2),
        'Out_Of_Stock_Items': key_metrics.get('out_of_stock', 0),
        'Critical_Recommendations': by_urgency.get('Critical', 0),
        'High_Priority_Recommendations': by_urgency.get('High', 0),
        'Medium_Priority_Recommendations': by_urgency.get('Medium', 0),
        'Low_Priority_Recommendations': by_urgency.get('Low', 0),
        'Festival_Recommendations': by_type.get('Festival', 0),
        'Weather_Recommendations': by_type.get('Weather', 0),
        'Urgent_Stock_Alerts': by_type.get('Urgent', 0),
        'Products_Needing_Immediate_Restock': stock_counts['out_of_stock'],
        'Products_With_Low_Stock': stock_counts['low_stock'],
        'Data_Points_Analyzed': len(df),
    }
    return pd.DataFrame([row])


def get_export_filename(prefix: str, generated_date, extension: str = 'csv') -> str:
    """'restock_predictions' -> 'restock_predictions_2026-10-17.csv'"""
    return f"{prefix}_{_format_date(generated_date)}.{extension}"


# --- Data Export Functions ---

def dataframe_to_csv_bytes(df: pd.DataFrame) -> bytes:
    """UTF-8 CSV without the index, for st.download_button."""
    return df.to_csv(index=False).encode('utf-8')


def get_filtered_data_as_excel(dfs_to_export_dict):
    """
    Processes a dictionary of dataframes
    and returns an Excel file as a bytes object for download.
    The dictionary format is { "sheet_name": (dataframe, include_index_bool) }

    Empty sheets and non-DataFrame values are skipped. Datetime columns are
    written as YYYY-MM-DD text. Only copies a frame when it has datetime columns.
    """
    output = io.BytesIO()

    with pd.ExcelWriter(output, engine=EXPORT_RULES['excel_engine']) as writer:
        written = 0
        for sheet_name, (df, include_index) in dfs_to_export_dict.items():

            if not isinstance(df, pd.DataFrame):
                print(f"Skipping {sheet_name}: Not a DataFrame.")
                continue
            if df.empty:
                print(f"Skipping {sheet_name}: DataFrame is empty.")
                continue

            df_to_export = df
            datetime_cols = [col for col in df.columns if pd.api.types.is_datetime64_any_dtype(df[col])]

            if datetime_cols:
                df_to_export = df.copy()
                for col in datetime_cols:
                    if df_to_export[col].dt.tz is not None:
                        df_to_export[col] = df_to_export[col].dt.tz_localize(None)
                    df_to_export[col] = df_to_export[col].dt.strftime(EXPORT_RULES['date_format'])

            # Excel sheet names are capped at 31 characters
            sheet = str(sheet_name)[:31]
            df_to_export.to_excel(writer, sheet_name=sheet, index=include_index)
            written += 1

            # Auto-adjust column widths
            worksheet = writer.sheets[sheet]
            offset = 1 if include_index else 0
            for idx, col in enumerate(df_to_export.columns):
                series = df_to_export[col]
                max_len = max(
                    series.astype(str).map(len).max(),
                    len(str(series.name))
                ) + 2
                worksheet.set_column(idx + offset, idx + offset, max_len)

        if written == 0:
            # A workbook needs at least one sheet
            pd.DataFrame().to_excel(writer, sheet_name='Empty', index=False)

    return output.getvalue()
