"""
Recommendation Engine Module

Turns calendar events, the seasonal weather signal and shortage detection
into a short list of actionable recommendations.

Rules are evaluators sharing one contract, evaluate(index) -> [Recommendation],
and all of them read the same ProductIndex built once per run:
- FestivalEvaluator: stock up for festivals inside the horizon
- WeatherEvaluator: stock up for the current season's weather
- ShortageEvaluator: out-of-stock and low-stock alerts
- HistoricalTrendEvaluator: growing products about to outrun their stock (opt-in)

Output order follows the evaluator list (festivals in date order, then
weather, then urgent). Consumers sort by urgency for display.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd

from business_rules import (
    FESTIVAL_CALENDAR,
    RECOMMENDATION_RULES,
    RECOMMENDATION_TYPES,
    SEASON_WEATHER,
    TYPE_FESTIVAL,
    TYPE_HISTORICAL,
    TYPE_URGENT,
    TYPE_WEATHER,
    URGENCY_HIGH,
    URGENCY_LOW,
    URGENCY_MEDIUM,
    URGENCY_ORDER,
    WEATHER_PRODUCT_MAP,
    get_today,
    get_urgency_rank,
)
from data_loader import get_season_from_date
from product_series import ProductIndex
from sales_velocity import TREND_INCREASING, classify_sales_trend

ISSUE_OUT_OF_STOCK = 'OUT_OF_STOCK'
ISSUE_LOW_STOCK = 'LOW_STOCK'


# ===== DATA CLASSES =====

@dataclass
class FestivalEvent:
    """A calendar festival with the keyword tokens used to match products."""
    date: pd.Timestamp
    name: str
    keywords: List[str]
    days_until: int = 0


@dataclass
class WeatherProfile:
    """Weather condition for the current season."""
    condition: str  # hot / cold / rainy
    keywords: List[str]
    forecast: str


@dataclass
class Recommendation:
    """One actionable recommendation."""
    type: str        # Festival / Weather / Urgent / Historical
    title: str
    reason: str
    products: List[str]
    urgency: str     # Critical / High / Medium / Low
    action_needed: Optional[float] = None
    details: List[Dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


# ===== REFERENCE DATA LOOKUPS =====

def get_upcoming_festivals(today=None, horizon_days=None, calendar=None) -> List[FestivalEvent]:
    """
    Festivals between today and today + horizon_days (inclusive), soonest first.

    Args:
        today: Reference date (defaults to get_today())
        horizon_days: Look-ahead window (defaults to the festival rule horizon)
        calendar: {date_str: {"name", "keywords"}} (defaults to FESTIVAL_CALENDAR)

    Returns:
        list of FestivalEvent
    """
    today = pd.Timestamp(today if today is not None else get_today()).normalize()
    if horizon_days is None:
        horizon_days = RECOMMENDATION_RULES['festival']['horizon_days']
    calendar = calendar if calendar is not None else FESTIVAL_CALENDAR

    upcoming = []
    for date_str, info in calendar.items():
        festival_date = pd.Timestamp(date_str).normalize()
        days_until = (festival_date - today).days
        if 0 <= days_until <= horizon_days:
            upcoming.append(FestivalEvent(
                date=festival_date,
                name=info['name'],
                keywords=list(info.get('keywords', [])),
                days_until=days_until,
            ))

    return sorted(upcoming, key=lambda festival: festival.days_until)


def get_weather_profile(today=None, season_weather=None, weather_map=None) -> WeatherProfile:
    """
    Weather condition, keywords and forecast text for today's season.

    Args:
        today: Reference date (defaults to get_today())
        season_weather: {season: {"condition", "forecast"}} (defaults to SEASON_WEATHER)
        weather_map: {condition: [keywords]} (defaults to WEATHER_PRODUCT_MAP)

    Returns:
        WeatherProfile
    """
    today = today if today is not None else get_today()
    season_weather = season_weather if season_weather is not None else SEASON_WEATHER
    weather_map = weather_map if weather_map is not None else WEATHER_PRODUCT_MAP

    season = get_season_from_date(today)
    season_info = season_weather.get(season, {'condition': 'rainy', 'forecast': f"{season} season - Variable weather expected"})
    condition = season_info['condition']

    return WeatherProfile(
        condition=condition,
        keywords=list(weather_map.get(condition, [])),
        forecast=season_info['forecast'],
    )


# ===== EVALUATORS =====

class RecommendationEvaluator:
    """Base class: one rule producing zero or more recommendations."""

    name = "evaluator"

    def evaluate(self, index: ProductIndex) -> List[Recommendation]:
        raise NotImplementedError


class FestivalEvaluator(RecommendationEvaluator):
    """Stock up for festivals inside the horizon, one recommendation per festival."""

    name = "festival"

    def __init__(self, festivals: List[FestivalEvent], rules: dict = None):
        self.festivals = sorted(festivals or [], key=lambda festival: festival.days_until)
        self.rules = rules or RECOMMENDATION_RULES['festival']

    def get_multiplier(self, days_until):
        if days_until <= self.rules['imminent_days']:
            return self.rules['imminent_multiplier']
        return self.rules['default_multiplier']

    def get_urgency(self, days_until):
        if days_until <= self.rules['imminent_days']:
            return URGENCY_HIGH
        if days_until <= self.rules['soon_days']:
            return URGENCY_MEDIUM
        return URGENCY_LOW

    def evaluate(self, index: ProductIndex) -> List[Recommendation]:
        recommendations = []

        for festival in self.festivals:
            multiplier = self.get_multiplier(festival.days_until)
            advice = []

            for product in index.match(festival.keywords):
                avg_sales = index.trailing_avg(product)
                current_stock = index.current_stock(product)
                recommended = avg_sales * multiplier * self.rules['cover_days']

                if current_stock < recommended:
                    advice.append({
                        'product': product,
                        'current_stock': current_stock,
                        'recommended': recommended,
                        'shortage': recommended - current_stock,
                        'avg_sales': avg_sales,
                    })

            if not advice:
                continue

            reason = f"🎉 **{festival.name}** is coming in **{festival.days_until} days**!\n\n"
            for item in advice:
                reason += f"• **{item['product']}**: Current stock {round(item['current_stock'])} units\n"
                reason += f"  - Average daily sales: {item['avg_sales']:.1f} units\n"
                reason += f"  - Recommended stock: {round(item['recommended'])} units\n"
                reason += f"  - **BUY {round(item['shortage'])} more units** for festival demand!\n\n"

            recommendations.append(Recommendation(
                type=TYPE_FESTIVAL,
                title=f"{festival.name} Preparation",
                reason=reason,
                products=[item['product'] for item in advice],
                urgency=self.get_urgency(festival.days_until),
                action_needed=sum(item['shortage'] for item in advice),
                details=advice,
            ))

        return recommendations


class WeatherEvaluator(RecommendationEvaluator):
    """Stock up for the current season's weather (no horizon: always 'now')."""

    name = "weather"

    def __init__(self, profile: WeatherProfile, rules: dict = None):
        self.profile = profile
        self.rules = rules or RECOMMENDATION_RULES['weather']

    def evaluate(self, index: ProductIndex) -> List[Recommendation]:
        if self.profile is None:
            return []

        advice = []
        for product in index.match(self.profile.keywords):
            avg_sales = index.trailing_avg(product)
            current_stock = index.current_stock(product)
            recommended = avg_sales * self.rules['multiplier'] * self.rules['cover_days']

            if current_stock < recommended:
                advice.append({
                    'product': product,
                    'current_stock': current_stock,
                    'recommended': recommended,
                    'shortage': recommended - current_stock,
                    'avg_sales': avg_sales,
                })

        if not advice:
            return []

        reason = f"🌤 **{self.profile.forecast}**\n\n"
        for item in advice:
            reason += f"• **{item['product']}**: Stock up for {self.profile.condition} weather\n"
            reason += f"  - Current stock: {round(item['current_stock'])} units\n"
            reason += f"  - **Increase by {round(item['shortage'])} units** for weather demand\n\n"

        return [Recommendation(
            type=TYPE_WEATHER,
            title=f"{self.profile.condition.capitalize()} Weather Preparation",
            reason=reason,
            products=[item['product'] for item in advice],
            urgency=self.rules['urgency'],
            details=advice,
        )]


class ShortageEvaluator(RecommendationEvaluator):
    """Single aggregated alert covering every out-of-stock or low-stock product."""

    name = "shortage"

    def __init__(self, rules: dict = None):
        self.rules = rules or RECOMMENDATION_RULES['shortage']

    def evaluate(self, index: ProductIndex) -> List[Recommendation]:
        alerts = []

        for product in index.products:
            avg_sales = index.trailing_avg(product)
            current_stock = index.current_stock(product)

            if current_stock <= 0:
                alerts.append({
                    'product': product,
                    'issue': ISSUE_OUT_OF_STOCK,
                    'action': 'Restock immediately!',
                    'current_stock': current_stock,
                    'avg_sales': avg_sales,
                    'days_remaining': 0.0,
                })
            elif avg_sales > 0 and current_stock < avg_sales * self.rules['low_stock_days']:
                days_remaining = current_stock / avg_sales
                alerts.append({
                    'product': product,
                    'issue': ISSUE_LOW_STOCK,
                    'action': f"Only {days_remaining:.1f} days left",
                    'current_stock': current_stock,
                    'avg_sales': avg_sales,
                    'days_remaining': days_remaining,
                })

        if not alerts:
            return []

        reason = "🚨 **URGENT STOCK ALERTS**\n\n"
        for alert in alerts:
            issue = alert['issue'].replace('_', ' ')
            reason += f"• **{alert['product']}**: {issue}\n"
            reason += f"  - {alert['action']}\n"
            reason += f"  - Average daily sales: {alert['avg_sales']:.1f} units\n\n"

        return [Recommendation(
            type=TYPE_URGENT,
            title="Critical Stock Shortages",
            reason=reason,
            products=[alert['product'] for alert in alerts],
            urgency=self.rules['urgency'],
            details=alerts,
        )]


class HistoricalTrendEvaluator(RecommendationEvaluator):
    """
    Growing products whose stock will not last the cover window.

    Uses the full-history average (the velocity view of the product) rather
    than the trailing window, and the same first-3/last-3 trend test as the
    velocity ranking.
    """

    name = "historical"

    def __init__(self, rules: dict = None):
        self.rules = rules or RECOMMENDATION_RULES['historical']

    def evaluate(self, index: ProductIndex) -> List[Recommendation]:
        advice = []
        max_cover = self.rules['max_cover_days']

        for product in index.products:
            series = index.series(product)
            if len(series) < 2:
                continue

            avg_sales = float(series['sold'].mean())
            current_stock = index.current_stock(product)
            if avg_sales <= 0 or current_stock <= 0:
                continue
            if classify_sales_trend(series) != TREND_INCREASING:
                continue

            cover_days = current_stock / avg_sales
            if cover_days < max_cover:
                recommended = avg_sales * max_cover
                advice.append({
                    'product': product,
                    'current_stock': current_stock,
                    'recommended': recommended,
                    'shortage': recommended - current_stock,
                    'avg_sales': avg_sales,
                    'cover_days': cover_days,
                })

        if not advice:
            return []

        reason = "📈 **Sales are growing faster than stock**\n\n"
        for item in advice:
            reason += f"• **{item['product']}**: {item['cover_days']:.1f} days of cover at {item['avg_sales']:.1f} units/day\n"
            reason += f"  - **Add {round(item['shortage'])} units** to reach {max_cover} days of cover\n\n"

        return [Recommendation(
            type=TYPE_HISTORICAL,
            title="Rising Demand Watchlist",
            reason=reason,
            products=[item['product'] for item in advice],
            urgency=self.rules['urgency'],
            action_needed=sum(item['shortage'] for item in advice),
            details=advice,
        )]


def build_default_evaluators(upcoming_festivals, weather_profile) -> List[RecommendationEvaluator]:
    """Festival, weather and shortage rules, in output order."""
    return [
        FestivalEvaluator(upcoming_festivals),
        WeatherEvaluator(weather_profile),
        ShortageEvaluator(),
    ]


# ===== ENGINE =====

def generate_smart_recommendations(df: pd.DataFrame, upcoming_festivals, weather_profile, evaluators=None):
    """
    Run every evaluator over one shared ProductIndex.

    An evaluator that finds nothing contributes nothing; one that raises is
    logged and skipped. An empty result means inventory is balanced.

    Args:
        df: Normalized (filtered) inventory data
        upcoming_festivals: list of FestivalEvent (see get_upcoming_festivals)
        weather_profile: WeatherProfile or None (see get_weather_profile)
        evaluators: Evaluator list (defaults to build_default_evaluators())

    Returns:
        tuple: (logs, recommendations)
    """
    logs = []
    start_time = datetime.now()
    logs.append("--- Smart Recommendation Engine ---")

    if df.empty:
        logs.append("WARNING: No inventory data provided")
        return logs, []

    if evaluators is None:
        evaluators = build_default_evaluators(upcoming_festivals, weather_profile)

    index = ProductIndex(df, window=RECOMMENDATION_RULES['trailing_window'])
    logs.append(f"INFO: Indexed {len(index)} products for {len(evaluators)} rules")
    if upcoming_festivals:
        names = ", ".join(f"{festival.name} ({festival.days_until}d)" for festival in upcoming_festivals)
        logs.append(f"INFO: Upcoming festivals: {names}")

    recommendations = []
    for evaluator in evaluators:
        try:
            produced = evaluator.evaluate(index)
        except Exception as e:
            logs.append(f"ERROR: '{evaluator.name}' rule failed: {e}")
            continue
        logs.append(f"INFO: '{evaluator.name}' rule produced {len(produced)} recommendations")
        recommendations.extend(produced)

    if not recommendations:
        logs.append("INFO: No recommendations - inventory is balanced")

    total_time = (datetime.now() - start_time).total_seconds()
    logs.append(f"INFO: Recommendation engine completed in {total_time:.2f} seconds")

    return logs, recommendations


def sort_recommendations_by_urgency(recommendations: List[Recommendation]) -> List[Recommendation]:
    """Critical first, then High, Medium, Low; original order within a tier."""
    return sorted(recommendations, key=lambda rec: get_urgency_rank(rec.urgency))


def summarize_recommendations(recommendations: List[Recommendation]) -> dict:
    """
    Recommendation counts by urgency and by type.

    Returns:
        dict: {'by_urgency': {...}, 'by_type': {...}, 'total': n}
    """
    by_urgency = {urgency: 0 for urgency in URGENCY_ORDER}
    by_type = {rec_type: 0 for rec_type in RECOMMENDATION_TYPES}
    for rec in recommendations:
        by_urgency[rec.urgency] = by_urgency.get(rec.urgency, 0) + 1
        by_type[rec.type] = by_type.get(rec.type, 0) + 1

    return {'by_urgency': by_urgency, 'by_type': by_type, 'total': len(recommendations)}
