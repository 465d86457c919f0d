import hashlib
import time

import numpy as np
import pandas as pd

from business_rules import CATEGORY_RULES, INPUT_RULES, SEASON_BY_MONTH
from file_loader import safe_read_csv

# === Helper Functions ===

LOAD_TIMEOUT_SECONDS = 30


def clean_string_column(series: pd.Series) -> pd.Series:
    """
    Strip surrounding whitespace from a string column, keeping missing values missing.

    Args:
        series: Pandas Series with string data

    Returns:
        Cleaned Series (NaN stays NaN, blanks become NaN)
    """
    cleaned = series.where(series.isna(), series.astype(str).str.strip())
    return cleaned.replace('', np.nan)


def to_numeric_column(series: pd.Series, remove_commas: bool = False) -> pd.Series:
    """
    Convert a column to numeric, leaving NaN where a value is not a number
    or is infinite.

    Unlike a silent fillna(0), invalid cells stay visible so the validation
    step can reject the row instead of inventing a zero.

    Args:
        series: Pandas Series to convert
        remove_commas: If True, remove thousands separators before conversion

    Returns:
        Numeric Series
    """
    if remove_commas:
        series = series.where(series.isna(), series.astype(str).str.replace(',', '', regex=False))
    numeric = pd.to_numeric(series, errors='coerce')
    # inf/-inf parse as numbers but are not usable quantities
    return numeric.replace([np.inf, -np.inf], np.nan)


def parse_date_column(series: pd.Series) -> pd.Series:
    """Parse a date column (mixed formats allowed), midnight-normalized; unparsable -> NaT."""
    parsed = pd.to_datetime(series, errors='coerce', format='mixed')
    return parsed.dt.normalize()


def check_columns(df, required_cols, filename, logs):
    """Helper function to check for missing columns."""
    missing_cols = [col for col in required_cols if col not in df.columns]
    if missing_cols:
        logs.append(f"ERROR: '{filename}' is missing required columns: {', '.join(missing_cols)}")
        return False
    return True


# === Season & Category Derivation ===

def get_season_from_date(date) -> str:
    """
    Map a calendar date to its season.

    Dec-Feb -> Winter, Mar-May -> Spring, Jun-Aug -> Summer, Sep-Nov -> Autumn.
    """
    return SEASON_BY_MONTH[pd.Timestamp(date).month]


def assign_default_category(product, categories=None, strategy=None) -> str:
    """
    Deterministic category for a product that arrived without one.

    With the 'hash' strategy a stable md5 digest of the product id picks an
    entry from the category list, so every row of the same product lands in
    the same category on every run. With 'uncategorized' the fallback label
    is used.

    Args:
        product: Product identifier
        categories: Category list (defaults to CATEGORY_RULES['categories'])
        strategy: 'hash' or 'uncategorized' (defaults to CATEGORY_RULES['default_strategy'])

    Returns:
        Category name
    """
    categories = categories if categories is not None else CATEGORY_RULES['categories']
    strategy = strategy or CATEGORY_RULES['default_strategy']

    if strategy != 'hash' or not categories:
        return CATEGORY_RULES['fallback_label']

    digest = hashlib.md5(str(product).encode('utf-8')).hexdigest()
    return categories[int(digest, 16) % len(categories)]


# === Validation (caller side of the normalizer contract) ===

def validate_inventory_rows(raw_df: pd.DataFrame):
    """
    Split raw rows into valid rows and rejected rows.

    A row is valid when Date and Product are present, Date parses to a
    calendar date, and Sold/Stock are numeric. Rejection is per row and
    never stops the load.

    Args:
        raw_df: DataFrame with source columns (Date, Product, Sold, Stock, ...)

    Returns:
        tuple: (logs, valid_df, error_df)
        - valid_df keeps the source columns and original order
        - error_df holds rejected rows with an 'error_reason' column
    """
    logs = []
    logs.append("--- Inventory Row Validation ---")

    if raw_df.empty:
        logs.append("WARNING: No rows to validate")
        return logs, raw_df.copy(), pd.DataFrame()

    product = clean_string_column(raw_df['Product'])
    date_raw = clean_string_column(raw_df['Date'])
    parsed_dates = parse_date_column(date_raw)
    sold = to_numeric_column(raw_df['Sold'], remove_commas=True)
    stock = to_numeric_column(raw_df['Stock'], remove_commas=True)

    reasons = pd.Series('', index=raw_df.index, dtype=object)
    reasons = reasons.mask(stock.isna(), 'Non-numeric Stock')
    reasons = reasons.mask(sold.isna(), 'Non-numeric Sold')
    reasons = reasons.mask(date_raw.notna() & parsed_dates.isna(), 'Unparsable Date')
    reasons = reasons.mask(product.isna(), 'Missing Product')
    reasons = reasons.mask(date_raw.isna(), 'Missing Date')

    invalid_mask = reasons != ''
    error_df = raw_df[invalid_mask].copy()
    if not error_df.empty:
        error_df['error_reason'] = reasons[invalid_mask]
        for reason, count in error_df['error_reason'].value_counts().items():
            logs.append(f"WARNING: Rejected {count} rows - {reason}")

    valid_df = raw_df[~invalid_mask].copy()
    logs.append(f"INFO: {len(valid_df)} of {len(raw_df)} rows passed validation")

    return logs, valid_df, error_df


# === Record Normalizer ===

def process_inventory_data(df: pd.DataFrame, categories=None, strategy=None) -> pd.DataFrame:
    """
    Normalize validated source rows into typed, dated, categorized records.

    One output row per input row, in input order. Dates are parsed once,
    Sold/Stock become numbers, missing categories get a deterministic
    default and the season is derived from the date (any Season column in
    the source is ignored).

    Args:
        df: Validated rows with source columns
        categories: Category list for the default (optional)
        strategy: Category default strategy (optional)

    Returns:
        DataFrame with columns: date, product, sold, stock, category, season
        (plus restock_hint when the source had Restock_Date)

    Raises:
        ValueError: if any row's date cannot be parsed
    """
    columns = ['date', 'product', 'sold', 'stock', 'category', 'season']

    if df.empty:
        return pd.DataFrame(columns=columns)

    column_map = {src: dst for src, dst in INPUT_RULES['column_map'].items() if src in df.columns}
    processed = df[list(column_map.keys())].rename(columns=column_map).copy()

    processed['date'] = parse_date_column(processed['date'])
    if processed['date'].isna().any():
        bad_rows = processed.index[processed['date'].isna()].tolist()
        raise ValueError(f"Unparsable date in rows {bad_rows}; validate rows before normalizing")

    processed['product'] = processed['product'].astype(str).str.strip()
    processed['sold'] = to_numeric_column(processed['sold'], remove_commas=True).fillna(0)
    processed['stock'] = to_numeric_column(processed['stock'], remove_commas=True).fillna(0)

    if 'category' in processed.columns:
        processed['category'] = clean_string_column(processed['category']).astype(object)
    else:
        processed['category'] = pd.Series(np.nan, index=processed.index, dtype=object)

    missing_category = processed['category'].isna()
    if missing_category.any():
        processed.loc[missing_category, 'category'] = processed.loc[missing_category, 'product'].map(
            lambda product: assign_default_category(product, categories, strategy)
        )

    processed['season'] = processed['date'].dt.month.map(SEASON_BY_MONTH)

    if 'restock_hint' in processed.columns:
        processed['restock_hint'] = pd.to_datetime(processed['restock_hint'], errors='coerce', format='mixed')
        columns = columns + ['restock_hint']

    return processed[columns]


# === Inventory Loader ===

def load_inventory_data(inventory_path=None, file_key='inventory'):
    """
    Load the daily sales/stock CSV, validate rows and normalize them.

    Args:
        inventory_path: file path or buffer (used if no upload exists in session state)
        file_key: session state key for an uploaded file (default 'inventory')

    Returns: logs (list), dataframe, error_dataframe
    """
    logs = []
    start_time = time.time()
    logs.append("--- Inventory Data Loader ---")

    try:
        raw_df = safe_read_csv(file_key, inventory_path, dtype=str, skip_blank_lines=True)
        logs.append(f"INFO: Loaded {len(raw_df)} rows from inventory CSV.")
    except Exception as e:
        logs.append(f"ERROR: Failed to read inventory CSV: {e}")
        return logs, pd.DataFrame(), pd.DataFrame()

    raw_df.columns = [str(col).strip() for col in raw_df.columns]

    if not check_columns(raw_df, INPUT_RULES['required_columns'], "inventory CSV", logs):
        return logs, pd.DataFrame(), pd.DataFrame()

    validation_logs, valid_df, error_df = validate_inventory_rows(raw_df)
    logs.extend(validation_logs)

    if valid_df.empty:
        logs.append("ERROR: No valid data rows found in the uploaded file")
        return logs, pd.DataFrame(), error_df

    df = process_inventory_data(valid_df)
    logs.append(
        f"INFO: Normalized {len(df)} records for {df['product'].nunique()} products "
        f"({df['date'].min():%Y-%m-%d} to {df['date'].max():%Y-%m-%d})."
    )

    total_time = time.time() - start_time
    logs.append(f"INFO: Inventory Data Loader finished in {total_time:.2f} seconds.")
    if total_time > LOAD_TIMEOUT_SECONDS:
        logs.append(f"WARNING: This loader took longer than {LOAD_TIMEOUT_SECONDS} seconds!")

    return logs, df, error_df


# === Filters ===

def filter_inventory_data(df: pd.DataFrame, season='All', start_date=None, end_date=None) -> pd.DataFrame:
    """
    Apply the dashboard's season and date-range filters.

    Args:
        df: Normalized inventory data
        season: Season name or 'All'
        start_date: Inclusive start (date, string or None)
        end_date: Inclusive end (date, string or None)

    Returns:
        Filtered copy of df
    """
    if df.empty:
        return df.copy()

    mask = pd.Series(True, index=df.index)
    if season and season != 'All':
        mask &= df['season'] == season
    if start_date is not None:
        mask &= df['date'] >= pd.Timestamp(start_date)
    if end_date is not None:
        mask &= df['date'] <= pd.Timestamp(end_date)

    return df[mask].copy()


def get_prior_period_data(df: pd.DataFrame, start_date, end_date) -> pd.DataFrame:
    """
    Rows from the window of equal length that ends the day before start_date.

    Used as the comparison dataset for the sales delta KPI.

    Args:
        df: Normalized inventory data
        start_date: Inclusive start of the current window
        end_date: Inclusive end of the current window

    Returns:
        DataFrame (possibly empty)
    """
    if df.empty or start_date is None or end_date is None:
        return df.iloc[0:0].copy()

    start = pd.Timestamp(start_date).normalize()
    end = pd.Timestamp(end_date).normalize()
    window_days = (end - start).days + 1
    if window_days <= 0:
        return df.iloc[0:0].copy()

    prior_end = start - pd.Timedelta(days=1)
    prior_start = prior_end - pd.Timedelta(days=window_days - 1)

    return df[(df['date'] >= prior_start) & (df['date'] <= prior_end)].copy()
