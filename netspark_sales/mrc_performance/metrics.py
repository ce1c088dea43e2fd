# netspark_sales/mrc_performance/metrics.py
"""
Aggregations and View Builders for MRC Performance

Handles all derived views over the normalized sales frame:
- Bucket aggregation by month / seller / (month, seller)
- YTD / MTD overview totals
- Monthly trend (zero-filled) and wireline vs mobility split
- Seller leaderboard and month-by-month stack ranking
- Current month and rolling window seller breakdowns
- Individual sales list with paging and subtotals
- Quota attainment and quota performance table

Every builder is a pure function of the frame it was given plus its
arguments. An empty frame yields zeroed / empty results, never an error.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .constants import (
    WIRELINE, WIRELESS, BUCKET_COLUMNS, QUOTA_SORT_OPTIONS,
    SALES_PAGE_SIZE, ROLLING_WINDOW_MONTHS,
)
from .filters import (
    Page, apply_exact_filters, filter_and_sort_sellers, paginate, sort_rows,
)
from .records import month_of, month_sort_key, trailing_months

logger = logging.getLogger(__name__)

# measure name -> normalized column
MEASURES = {
    'mrc': 'effective_mrc',
    'gaap': 'effective_gaap',
}


def _measure_column(measure: str) -> str:
    if measure not in MEASURES:
        raise ValueError(f"Unknown measure '{measure}'. Expected one of: {', '.join(MEASURES)}")
    return MEASURES[measure]


# =============================================================================
# AGGREGATOR
# =============================================================================

def aggregate(
    sales_df: pd.DataFrame,
    keys: Union[str, Sequence[str]],
    measure: str = 'mrc'
) -> pd.DataFrame:
    """
    Group rows by key column(s) and sum wireline / wireless / total.

    Buckets are listed in order of first appearance. Month-keyed
    aggregations skip rows whose month could not be parsed.

    Args:
        sales_df: Normalized sales frame
        keys: 'month', 'seller' or a composite like ['month', 'seller']
        measure: 'mrc' (upgrade override applied) or 'gaap'

    Returns:
        DataFrame indexed by the key(s) with wireline, wireless, total
    """
    keys = [keys] if isinstance(keys, str) else list(keys)
    value_col = _measure_column(measure)

    df = sales_df
    if 'month' in keys:
        df = df[df['month_valid']]

    is_wireline = (df['product_class'] == WIRELINE).to_numpy()
    values = df[value_col].to_numpy(dtype=float)

    work = df[keys].copy()
    work[WIRELINE] = np.where(is_wireline, values, 0.0)
    work[WIRELESS] = np.where(is_wireline, 0.0, values)

    buckets = work.groupby(keys, sort=False)[[WIRELINE, WIRELESS]].sum()
    buckets.index.names = keys
    buckets['total'] = buckets[WIRELINE] + buckets[WIRELESS]
    return buckets[BUCKET_COLUMNS]


def rank_sellers(buckets: pd.DataFrame) -> pd.DataFrame:
    """
    Turn seller buckets into ranked entries.

    Stable descending sort on total; ties keep bucket order, which is
    first appearance in the input.

    Returns:
        DataFrame with seller, total, rank
    """
    ranked = buckets.reset_index()[['seller', 'total']]
    ranked = ranked.sort_values('total', ascending=False, kind='stable').reset_index(drop=True)
    ranked['rank'] = range(1, len(ranked) + 1)
    return ranked


def filter_months(sales_df: pd.DataFrame, months: Sequence[str]) -> pd.DataFrame:
    """Valid rows whose month is one of the given labels."""
    return sales_df[sales_df['month_valid'] & sales_df['month'].isin(list(months))]


def filter_year(sales_df: pd.DataFrame, year: int) -> pd.DataFrame:
    """Valid rows in a calendar year."""
    return sales_df[sales_df['month_valid'] & (sales_df['year'] == year)]


# =============================================================================
# RESULT CONTAINERS
# =============================================================================

@dataclass
class SellerBreakdown:
    """
    Per-seller wireline / wireless / total for one month.

    Attributes:
        month: Month label
        rows: seller, wireline, wireless, total, rank (filtered + sorted)
        totals: Column sums over the displayed rows
    """
    month: str
    rows: pd.DataFrame
    totals: Dict[str, float] = field(default_factory=dict)


@dataclass
class SalesListView:
    """
    Individual sales list state.

    Attributes:
        page: Current page of sorted rows
        filtered: All filtered rows in display order (feeds CSV export)
        grand_total: Effective MRC over the filtered rows
        seller_totals: seller, total over the filtered rows
    """
    page: Page
    filtered: pd.DataFrame
    grand_total: float
    seller_totals: pd.DataFrame


@dataclass
class StackRankTimeline:
    """
    Month-by-month stack ranking.

    Attributes:
        months: Months in display order
        cells: seller, month, rank, delta (long form; NA = no data)
        ytd: seller, total, rank over all months
    """
    months: List[str]
    cells: pd.DataFrame
    ytd: pd.DataFrame

    def to_wide(self, sort_month: Optional[str] = None) -> pd.DataFrame:
        """
        One row per seller with ytd_rank, ytd_total and per-month rank/delta.

        Ordered by YTD rank, or by rank in sort_month when given; sellers
        without a rank in that month go last.
        """
        sellers = list(dict.fromkeys(self.cells['seller'])) if not self.cells.empty else []
        wide = pd.DataFrame({'seller': pd.Series(sellers, dtype=object)})

        ytd = self.ytd.rename(columns={'total': 'ytd_total', 'rank': 'ytd_rank'})
        wide = wide.merge(ytd, on='seller', how='left')
        wide['ytd_total'] = wide['ytd_total'].fillna(0.0)
        wide['ytd_rank'] = wide['ytd_rank'].astype('Int64')

        for month in self.months:
            month_cells = self.cells[self.cells['month'] == month][['seller', 'rank', 'delta']]
            month_cells = month_cells.rename(columns={'rank': f'{month} rank', 'delta': f'{month} delta'})
            wide = wide.merge(month_cells, on='seller', how='left')

        order_col = f'{sort_month} rank' if sort_month else 'ytd_rank'
        if order_col in wide.columns and not wide.empty:
            wide = wide.sort_values(order_col, kind='stable', na_position='last')

        return wide.reset_index(drop=True)


# =============================================================================
# METRICS
# =============================================================================

class MRCMetrics:
    """
    View builders for the MRC dashboards.

    Usage:
        metrics = MRCMetrics(sales_df, quotas_df)

        overview = metrics.calculate_overview_metrics(date.today())
        trend = metrics.monthly_trend(months_of_year(2025))
        leaderboard = metrics.seller_leaderboard()
    """

    def __init__(
        self,
        sales_df: pd.DataFrame,
        quotas_df: pd.DataFrame = None
    ):
        """
        Initialize with data.

        Args:
            sales_df: Normalized sales frame (see records.normalize_records)
            quotas_df: representative, monthly_quota (optional)
        """
        self.sales_df = sales_df
        self.quotas_df = quotas_df if quotas_df is not None else pd.DataFrame(
            columns=['representative', 'monthly_quota']
        )

    # =========================================================================
    # OVERVIEW METRICS
    # =========================================================================

    def calculate_overview_metrics(
        self,
        reference_date: date,
        measure: str = 'mrc'
    ) -> Dict:
        """
        Headline totals for metric cards.

        Args:
            reference_date: Anchor for YTD (calendar year) and MTD (month)
            measure: 'mrc' or 'gaap'

        Returns:
            Dict with ytd, mtd, total (all rows) and record counts
        """
        df = self.sales_df
        value_col = _measure_column(measure)

        if df.empty:
            return {'ytd': 0.0, 'mtd': 0.0, 'total': 0.0, 'record_count': 0, 'ytd_record_count': 0}

        ytd_rows = filter_year(df, reference_date.year)
        mtd_rows = filter_months(df, [month_of(reference_date)])

        return {
            'ytd': float(ytd_rows[value_col].sum()),
            'mtd': float(mtd_rows[value_col].sum()),
            'total': float(df[value_col].sum()),
            'record_count': len(df),
            'ytd_record_count': len(ytd_rows),
        }

    # =========================================================================
    # MONTHLY TREND
    # =========================================================================

    def monthly_trend(self, months: Sequence[str], measure: str = 'mrc') -> pd.DataFrame:
        """
        One row per requested month, zero-filled. Malformed labels are dropped.

        Args:
            months: Month labels in display order (e.g. months_of_year(2025))
            measure: 'mrc' or 'gaap'

        Returns:
            DataFrame with month, wireline, wireless, total
        """
        months = [m for m in months if month_sort_key(m) is not None]
        buckets = aggregate(filter_months(self.sales_df, months), 'month', measure)
        trend = buckets.reindex(months, fill_value=0.0)
        trend.index.name = 'month'
        return trend.reset_index().astype({c: 'float64' for c in BUCKET_COLUMNS})

    def monthly_series(self, measure: str = 'mrc') -> pd.DataFrame:
        """Every month present in the data, oldest first (no zero-fill)."""
        buckets = aggregate(self.sales_df, 'month', measure).reset_index()
        if buckets.empty:
            return buckets
        buckets['_ordinal'] = [year * 12 + idx for year, idx in map(month_sort_key, buckets['month'])]
        return (
            buckets.sort_values('_ordinal', kind='stable')
            .drop(columns='_ordinal')
            .reset_index(drop=True)
        )

    def class_breakdown(
        self,
        months: Optional[Sequence[str]] = None,
        measure: str = 'mrc'
    ) -> pd.DataFrame:
        """
        Wireline vs mobility totals.

        Args:
            months: Restrict to these months (None = every row)
            measure: 'mrc' or 'gaap'

        Returns:
            DataFrame with name ('Wireline' / 'Mobility') and value
        """
        df = filter_months(self.sales_df, months) if months is not None else self.sales_df
        value_col = _measure_column(measure)

        wireline = float(df.loc[df['product_class'] == WIRELINE, value_col].sum())
        wireless = float(df.loc[df['product_class'] == WIRELESS, value_col].sum())

        return pd.DataFrame({
            'name': ['Wireline', 'Mobility'],
            'value': [wireline, wireless],
        })

    # =========================================================================
    # LEADERBOARD
    # =========================================================================

    def seller_leaderboard(self, sales_df: pd.DataFrame = None) -> pd.DataFrame:
        """
        Rank sellers over the whole supplied frame.

        No time filter is applied here; pass a pre-filtered frame (e.g.
        filter_year) to rank a period.

        Returns:
            DataFrame with seller, total, rank
        """
        df = self.sales_df if sales_df is None else sales_df
        return rank_sellers(aggregate(df, 'seller'))

    # =========================================================================
    # SELLER BREAKDOWNS
    # =========================================================================

    def seller_breakdown(
        self,
        month: str,
        name_filter: Optional[str] = None,
        sort_key: str = 'total'
    ) -> SellerBreakdown:
        """Per-seller breakdown for one month, filtered and sorted."""
        buckets = aggregate(filter_months(self.sales_df, [month]), 'seller').reset_index()
        rows = filter_and_sort_sellers(buckets, name_filter, sort_key)

        totals = {col: float(rows[col].sum()) for col in BUCKET_COLUMNS}
        return SellerBreakdown(month=month, rows=rows, totals=totals)

    def current_month_detail(
        self,
        reference_date: date,
        name_filter: Optional[str] = None,
        sort_key: str = 'total'
    ) -> SellerBreakdown:
        """
        Seller breakdown for the month containing reference_date.

        Column totals are recomputed over the rows left after filtering.
        """
        return self.seller_breakdown(month_of(reference_date), name_filter, sort_key)

    def rolling_window(
        self,
        reference_date: date,
        window_size: int = ROLLING_WINDOW_MONTHS,
        name_filter: Optional[str] = None,
        sort_key: str = 'total'
    ) -> List[SellerBreakdown]:
        """
        One seller breakdown per month in the trailing window, oldest first.

        Always returns window_size entries, empty months included.
        """
        return [
            self.seller_breakdown(month, name_filter, sort_key)
            for month in trailing_months(reference_date, window_size)
        ]

    def seller_month_sales(self, seller: str, month: str) -> pd.DataFrame:
        """Raw rows behind one seller's monthly figure (drill-down)."""
        df = self.sales_df
        return df[(df['month'] == month) & (df['seller'] == seller)].reset_index(drop=True)

    # =========================================================================
    # INDIVIDUAL SALES
    # =========================================================================

    def individual_sales(
        self,
        filters: Dict[str, Optional[str]] = None,
        sort_key: str = 'month',
        page: int = 0,
        page_size: int = SALES_PAGE_SIZE
    ) -> SalesListView:
        """
        Filtered, sorted and paged list of raw rows.

        Args:
            filters: Exact matches on month / seller / type (None = any)
            sort_key: month, seller, mrc, wireline or wireless
            page: Zero-based page index (clamped)
            page_size: Rows per page

        Returns:
            SalesListView
        """
        df = self.sales_df[self.sales_df['month_valid']]
        filtered = apply_exact_filters(df, filters or {})
        ordered = self._sort_sales(filtered, sort_key)

        seller_totals = (
            filtered.groupby('seller', sort=False)['effective_mrc'].sum()
            .reset_index()
            .rename(columns={'effective_mrc': 'total'})
        )

        return SalesListView(
            page=paginate(ordered, page, page_size),
            filtered=ordered,
            grand_total=float(filtered['effective_mrc'].sum()),
            seller_totals=seller_totals
        )

    @staticmethod
    def _sort_sales(df: pd.DataFrame, sort_key: str) -> pd.DataFrame:
        """Stable sort for the sales list; class sorts score other rows as 0."""
        if sort_key == 'month':
            return sort_rows(df, 'month_ordinal', ascending=True)
        if sort_key == 'seller':
            return sort_rows(df, 'seller', ascending=True)
        if sort_key == 'mrc':
            return sort_rows(df, 'effective_mrc', ascending=False)
        if sort_key in (WIRELINE, WIRELESS):
            if df.empty:
                return df
            score = df['effective_mrc'].where(df['product_class'] == sort_key, 0.0)
            order = score.sort_values(ascending=False, kind='stable').index
            return df.loc[order]
        raise ValueError(f"Unknown sort key '{sort_key}' for the sales list")

    # =========================================================================
    # QUOTAS
    # =========================================================================

    def get_quota(self, representative: str) -> float:
        """Monthly quota for a representative; 0 when not in the table."""
        names = self.quotas_df['representative'].astype(str).str.lower()
        match = self.quotas_df[names == representative.lower()]
        if match.empty:
            return 0.0
        return float(match['monthly_quota'].iloc[0])

    def _rep_mrc_by_month(self, representative: str) -> pd.Series:
        df = self.sales_df[self.sales_df['month_valid']]
        rep_rows = df[df['seller'].str.lower() == representative.lower()]
        return rep_rows.groupby('month', sort=False)['effective_mrc'].sum()

    @staticmethod
    def _progress_percent(amount: float, quota: float) -> float:
        return amount / quota * 100 if quota > 0 else 0.0

    def quota_attainment(
        self,
        representative: str,
        months: Sequence[str]
    ) -> pd.DataFrame:
        """
        Monthly quota vs MRC for one representative.

        Seller names match the representative case-insensitively.

        Returns:
            DataFrame with month, quota, mrc, ratio, progress_percent
            (one row per requested month)
        """
        quota = self.get_quota(representative)
        by_month = self._rep_mrc_by_month(representative)

        rows = []
        for month in months:
            mrc = float(by_month.get(month, 0.0))
            ratio = mrc / quota if quota > 0 else 0.0
            rows.append({
                'month': month,
                'quota': quota,
                'mrc': mrc,
                'ratio': ratio,
                'progress_percent': ratio * 100,
            })

        return pd.DataFrame(rows, columns=['month', 'quota', 'mrc', 'ratio', 'progress_percent'])

    def quota_performance(
        self,
        reference_month: str,
        sort_by: str = 'name',
        ascending: bool = True
    ) -> pd.DataFrame:
        """
        Every representative's quota progress for one month.

        Args:
            reference_month: Month label to measure
            sort_by: 'name', 'mrc' or 'progress'
            ascending: Sort direction

        Returns:
            DataFrame with representative, monthly_quota, current_mrc, progress_percent
        """
        if sort_by not in QUOTA_SORT_OPTIONS:
            raise ValueError(f"Unknown quota sort '{sort_by}'. Expected one of: {', '.join(QUOTA_SORT_OPTIONS)}")

        month_rows = filter_months(self.sales_df, [reference_month])
        seller_lower = month_rows['seller'].str.lower()

        rows = []
        for rep in self.quotas_df.itertuples(index=False):
            name = str(rep.representative)
            quota = float(rep.monthly_quota)
            mrc = float(month_rows.loc[seller_lower == name.lower(), 'effective_mrc'].sum())
            rows.append({
                'representative': name,
                'monthly_quota': quota,
                'current_mrc': mrc,
                'progress_percent': self._progress_percent(mrc, quota),
            })

        table = pd.DataFrame(
            rows, columns=['representative', 'monthly_quota', 'current_mrc', 'progress_percent']
        )
        return sort_rows(table, QUOTA_SORT_OPTIONS[sort_by], ascending).reset_index(drop=True)

    # =========================================================================
    # STACK RANK TIMELINE
    # =========================================================================

    def stack_rank_timeline(self, months: Sequence[str]) -> StackRankTimeline:
        """
        Rank every seller in every month, with movement vs the previous month.

        delta = previous_rank - current_rank (positive = moved up). The
        first month, and any month where either rank is missing, has no
        delta (NA rather than 0).
        """
        months = list(months)
        monthly_ranks: Dict[str, Dict[str, int]] = {}
        sellers: List[str] = []

        for month in months:
            ranked = rank_sellers(aggregate(filter_months(self.sales_df, [month]), 'seller'))
            monthly_ranks[month] = dict(zip(ranked['seller'], ranked['rank']))
            for seller in ranked['seller']:
                if seller not in sellers:
                    sellers.append(seller)

        cells = []
        for seller in sellers:
            previous = None
            for idx, month in enumerate(months):
                rank = monthly_ranks[month].get(seller)
                delta = previous - rank if idx > 0 and previous is not None and rank is not None else None
                cells.append({'seller': seller, 'month': month, 'rank': rank, 'delta': delta})
                previous = rank

        cells_df = pd.DataFrame(cells, columns=['seller', 'month', 'rank', 'delta'])
        cells_df = cells_df.astype({'rank': 'Int64', 'delta': 'Int64'})

        ytd = rank_sellers(aggregate(filter_months(self.sales_df, months), 'seller'))

        return StackRankTimeline(months=months, cells=cells_df, ytd=ytd)
