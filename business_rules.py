"""
Business Rules Configuration
Centralized definitions for reference tables, thresholds, and business logic.
This file allows rules to be changed in one place without modifying tool code.

Every engine entry point takes these tables as parameters (defaulting to the
constants below), so a calendar or weather map can be swapped without
touching the analytics modules.
"""

from datetime import datetime
import pytz

# ===== FESTIVAL CALENDAR =====

# Keyword tokens matched (case-insensitive substring) against product names
FESTIVAL_KEYWORDS = {
    "Diwali": ["sweet", "laddu", "jamun", "diya", "lamp", "light", "decoration", "rangoli", "candle"],
    "Bhai Dooj": ["sweet", "gift", "flower", "tilak", "dry fruit", "laddu"],
    "Christmas": ["cake", "wine", "gift", "decoration", "tree", "star", "wrapping"],
    "Makar Sankranti": ["sesame", "til", "jaggery", "kite", "sweet", "laddu"],
    "Maha Shivratri": ["milk", "honey", "fruit", "flower", "bel", "leaves"],
    "Holi": ["color", "gulal", "sweet", "gujiya", "thandai", "water", "gun", "balloon"],
    "Janmashtami": ["butter", "milk", "sweet", "flower", "krishna", "idol", "flute"],
    "Ganesh Chaturthi": ["modak", "flower", "decoration", "sweet", "fruit", "ganesh", "idol", "coconut"],
    "Dussehra": ["sweet", "flower", "decoration", "traditional", "clothes"],
}

FESTIVAL_DATES = {
    # 2024-2025
    "2024-10-31": "Diwali",
    "2024-11-15": "Bhai Dooj",
    "2024-12-25": "Christmas",
    "2025-01-14": "Makar Sankranti",
    "2025-02-26": "Maha Shivratri",
    "2025-03-13": "Holi",
    "2025-08-30": "Janmashtami",
    "2025-09-05": "Ganesh Chaturthi",
    "2025-10-10": "Dussehra",
    # 2025-2026
    "2025-10-20": "Diwali",
    "2025-10-23": "Bhai Dooj",
    "2025-12-25": "Christmas",
    "2026-01-14": "Makar Sankranti",
    "2026-02-15": "Maha Shivratri",
    "2026-03-04": "Holi",
    "2026-09-04": "Janmashtami",
    "2026-09-14": "Ganesh Chaturthi",
    "2026-10-20": "Dussehra",
    # 2026-2027
    "2026-11-08": "Diwali",
    "2026-11-11": "Bhai Dooj",
    "2026-12-25": "Christmas",
    "2027-01-14": "Makar Sankranti",
}

# date (YYYY-MM-DD) -> {"name": ..., "keywords": [...]}
FESTIVAL_CALENDAR = {
    date_str: {"name": name, "keywords": FESTIVAL_KEYWORDS[name]}
    for date_str, name in FESTIVAL_DATES.items()
}


# ===== WEATHER / SEASON RULES =====

# Season -> weather condition and forecast text. There is no live weather
# feed; the current season stands in for the forecast.
SEASON_WEATHER = {
    "Summer": {"condition": "hot", "forecast": "Summer season - Hot weather expected"},
    "Winter": {"condition": "cold", "forecast": "Winter season - Cold weather expected"},
    "Spring": {"condition": "rainy", "forecast": "Spring season - Variable weather expected"},
    "Autumn": {"condition": "rainy", "forecast": "Autumn season - Variable weather expected"},
}

WEATHER_PRODUCT_MAP = {
    "hot": ["ice", "cream", "cold", "drink", "fan", "cooler", "cotton", "sunscreen", "water"],
    "cold": ["heater", "warm", "blanket", "hot", "coffee", "tea", "winter", "jacket", "coat"],
    "rainy": ["umbrella", "raincoat", "boot", "hot", "warm", "waterproof"],
}

# Month number -> season name
SEASON_BY_MONTH = {
    12: "Winter", 1: "Winter", 2: "Winter",
    3: "Spring", 4: "Spring", 5: "Spring",
    6: "Summer", 7: "Summer", 8: "Summer",
    9: "Autumn", 10: "Autumn", 11: "Autumn",
}

SEASONS = ["Winter", "Spring", "Summer", "Autumn"]


# ===== CATEGORY RULES =====

CATEGORY_RULES = {
    "categories": [
        "Vegetables", "Fruits", "Grains", "Dairy", "Meat", "Seafood",
        "Oils", "Sweets", "Festival Items", "Clothing", "Electronics",
        "Home", "Beverages", "Frozen", "Cosmetics", "Flowers"
    ],
    # 'hash': stable md5 of the product id picks a category from the list
    # 'uncategorized': every missing category becomes the fallback label
    "default_strategy": "hash",
    "fallback_label": "Uncategorized",
}


# ===== INPUT DATA RULES =====

INPUT_RULES = {
    "required_columns": ["Date", "Product", "Sold", "Stock"],
    "optional_columns": ["Category", "Season", "Restock_Date"],
    # Source column -> normalized column
    "column_map": {
        "Date": "date",
        "Product": "product",
        "Sold": "sold",
        "Stock": "stock",
        "Category": "category",
        "Restock_Date": "restock_hint",
    },
}


# ===== RESTOCK PREDICTION RULES =====

RESTOCK_RULES = {
    "min_records": 3,           # Fewer records -> "Insufficient data"
    "trailing_window": 5,       # Most recent N records drive the sales average
    "no_estimate_sentinel": 999,
    # Safety buffer tiers: (stock cover in days of sales, buffer days).
    # Evaluated in order; the last tier applies when no earlier one does.
    "safety_buffer_tiers": [
        (3, 1),
        (7, 3),
        (None, 7),
    ],
    # Status tiers on raw days of stock (inclusive upper bounds)
    "status_tiers": {
        "critical_days": 2,
        "low_days": 5,
        "moderate_days": 10,
    },
}

STATUS_OUT_OF_STOCK = "OUT_OF_STOCK"
STATUS_CRITICAL = "CRITICAL"
STATUS_LOW = "LOW"
STATUS_MODERATE = "MODERATE"
STATUS_GOOD = "GOOD"

# Display order (most urgent first) and labels for the predictions view
STATUS_ORDER = [STATUS_OUT_OF_STOCK, STATUS_CRITICAL, STATUS_LOW, STATUS_MODERATE, STATUS_GOOD]
STATUS_LABELS = {
    STATUS_OUT_OF_STOCK: "🚨 OUT OF STOCK",
    STATUS_CRITICAL: "🔴 CRITICAL (≤2 days)",
    STATUS_LOW: "🟠 LOW (≤5 days)",
    STATUS_MODERATE: "🟡 MODERATE (≤10 days)",
    STATUS_GOOD: "🟢 GOOD (>10 days)",
}


# ===== VELOCITY RULES =====

VELOCITY_RULES = {
    "min_records": 2,        # Products with fewer records are left out of the ranking
    "trend_window": 3,       # First N vs last N records decide the trend
    "no_turn_sentinel": 999,
    "stock_floor": 1,        # Denominator floor for the performance score
}


# ===== RECOMMENDATION RULES =====

URGENCY_CRITICAL = "Critical"
URGENCY_HIGH = "High"
URGENCY_MEDIUM = "Medium"
URGENCY_LOW = "Low"
URGENCY_ORDER = [URGENCY_CRITICAL, URGENCY_HIGH, URGENCY_MEDIUM, URGENCY_LOW]

TYPE_FESTIVAL = "Festival"
TYPE_WEATHER = "Weather"
TYPE_URGENT = "Urgent"
TYPE_HISTORICAL = "Historical"
RECOMMENDATION_TYPES = [TYPE_FESTIVAL, TYPE_WEATHER, TYPE_URGENT, TYPE_HISTORICAL]

RECOMMENDATION_RULES = {
    "festival": {
        "horizon_days": 30,
        "imminent_days": 3,        # <= this -> multiplier 2.0 and High urgency
        "soon_days": 7,            # <= this -> Medium urgency, otherwise Low
        "imminent_multiplier": 2.0,
        "default_multiplier": 1.5,
        "cover_days": 7,           # Target stock = avg * multiplier * cover_days
    },
    "weather": {
        "multiplier": 1.3,
        "cover_days": 10,
        "urgency": URGENCY_MEDIUM,
    },
    "shortage": {
        "low_stock_days": 3,       # stock < avg * low_stock_days -> LOW_STOCK
        "urgency": URGENCY_CRITICAL,
    },
    "historical": {
        # Growing products whose stock covers fewer days than this at their
        # long-run rate get an early heads-up
        "max_cover_days": 14,
        "urgency": URGENCY_LOW,
    },
    "trailing_window": 5,
}


# ===== EXPORT RULES =====

EXPORT_RULES = {
    "date_format": "%Y-%m-%d",
    "missing_value": "N/A",
    "avg_sales_decimals": 2,
    "excel_engine": "xlsxwriter",
}


# ===== DASHBOARD RULES =====

DASHBOARD_RULES = {
    "timezone": "Asia/Kolkata",
    "festival_horizon_days": RECOMMENDATION_RULES["festival"]["horizon_days"],
    "chart_top_n": 10,
    "chart_days_cap": 30,   # Days-of-stock bars are capped for readability
}


# ===== HELPER FUNCTIONS =====

def get_today(timezone_name=None):
    """
    Get today's calendar date in the dashboard timezone.

    Festival countdowns are day-granular, so "today" has to be pinned to
    the store's timezone rather than the server clock.

    Args:
        timezone_name: pytz timezone name (defaults to DASHBOARD_RULES['timezone'])

    Returns:
        datetime.date
    """
    tz = pytz.timezone(timezone_name or DASHBOARD_RULES["timezone"])
    return datetime.now(tz).date()


def get_safety_buffer_days(current_stock, avg_daily_sales):
    """
    Pick the safety buffer tier for a product's remaining stock.

    Args:
        current_stock: Units on hand (> 0)
        avg_daily_sales: Trailing average daily sales (> 0)

    Returns:
        Buffer in days
    """
    buffer_days = None
    for cover_days, days in RESTOCK_RULES["safety_buffer_tiers"]:
        if cover_days is None or current_stock < avg_daily_sales * cover_days:
            buffer_days = days
            break
    return buffer_days


def get_urgency_rank(urgency):
    """Sort key for urgency tiers (Critical first, unknown last)."""
    if urgency in URGENCY_ORDER:
        return URGENCY_ORDER.index(urgency)
    return len(URGENCY_ORDER)
