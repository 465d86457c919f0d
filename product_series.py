"""
Product Series Module

Partitions normalized inventory records by product and keeps each partition
in chronological order. A ProductIndex wraps the partitions for one analysis
run so every rule (festival, weather, shortage, ...) reads the same series,
latest snapshot and trailing averages instead of re-filtering the dataset.
"""

from typing import Dict, List, Optional

import pandas as pd

from business_rules import RESTOCK_RULES


def group_by_product(df: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """
    Group records by exact product id, each group sorted ascending by date.

    Products appear in order of first appearance. The sort is stable, so
    records sharing a date keep their original relative order. No record is
    dropped or duplicated.

    Args:
        df: Normalized inventory data (needs 'product' and 'date')

    Returns:
        dict: {product: DataFrame}
    """
    if df.empty:
        return {}

    groups = {}
    for product, product_df in df.groupby('product', sort=False):
        groups[product] = product_df.sort_values('date', kind='mergesort')
    return groups


def trailing_average_sales(series: pd.DataFrame, window: int = None) -> float:
    """
    Mean units sold over the last min(window, n) records of a sorted series.

    Args:
        series: One product's records, ascending by date
        window: Trailing window size (defaults to RESTOCK_RULES['trailing_window'])

    Returns:
        float (0.0 for an empty series)
    """
    window = window or RESTOCK_RULES['trailing_window']
    if series.empty:
        return 0.0
    return float(series['sold'].tail(window).mean())


def find_matching_products(products, keywords) -> List[str]:
    """
    Products whose name contains any keyword, case-insensitive.

    Args:
        products: Iterable of product ids
        keywords: Iterable of keyword tokens

    Returns:
        list: Matches in input order, duplicates removed
    """
    tokens = [str(keyword).lower() for keyword in keywords]
    matches = []
    seen = set()
    for product in products:
        if product in seen:
            continue
        name = str(product).lower()
        if any(token in name for token in tokens):
            matches.append(product)
            seen.add(product)
    return matches


class ProductIndex:
    """Per-run lookup of product series, latest snapshot and keyword matches."""

    def __init__(self, df: pd.DataFrame, window: int = None):
        self.window = window or RESTOCK_RULES['trailing_window']
        self._series = group_by_product(df)
        self._keyword_matches = {}
        self._trailing_avg = {}

    @property
    def products(self) -> List[str]:
        """Distinct product ids in first-appearance order."""
        return list(self._series.keys())

    def __len__(self):
        return len(self._series)

    def __contains__(self, product):
        return product in self._series

    def series(self, product: str) -> pd.DataFrame:
        return self._series[product]

    def latest(self, product: str) -> pd.Series:
        """The most recent record of a product."""
        return self._series[product].iloc[-1]

    def current_stock(self, product: str) -> float:
        return float(self.latest(product)['stock'])

    def trailing_avg(self, product: str) -> float:
        if product not in self._trailing_avg:
            self._trailing_avg[product] = trailing_average_sales(self._series[product], self.window)
        return self._trailing_avg[product]

    def match(self, keywords) -> List[str]:
        """
        Products whose name contains any keyword (case-insensitive substring).

        Results per keyword are memoised, so a keyword shared by several
        festivals or by a festival and the weather map scans the catalog once.

        Args:
            keywords: Iterable of keyword tokens

        Returns:
            list: Matching products in catalog order, no duplicates
        """
        matched = set()
        for keyword in keywords:
            token = str(keyword).lower()
            if token not in self._keyword_matches:
                self._keyword_matches[token] = set(find_matching_products(self._series, [token]))
            matched |= self._keyword_matches[token]
        return [product for product in self._series if product in matched]

    def category(self, product: str) -> Optional[str]:
        latest = self.latest(product)
        return latest['category'] if 'category' in latest.index else None
