# netspark_sales/mrc_performance/filters.py
"""
Filter / Sort Pipeline and Filter Widgets for MRC Performance

Pure post-processing applied to view builder output:
- Case-insensitive substring text filter on one field
- Exact-match filters (month / seller / type)
- Stable sorts from a fixed set of keys per view
- Pagination

Plus the Streamlit widgets that collect those choices.
None of the pipeline functions mutate their input.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd
import streamlit as st

from .constants import (
    SELLER_SORT_OPTIONS, SELLER_SORT_LABELS,
    SALES_LIST_SORT_OPTIONS, SALES_LIST_SORT_LABELS,
    QUOTA_SORT_LABELS, SALES_PAGE_SIZE,
)
from .records import sort_months

logger = logging.getLogger(__name__)


# =============================================================================
# TEXT / EXACT FILTERS
# =============================================================================

def apply_text_filter(
    df: pd.DataFrame,
    column: str,
    query: Optional[str]
) -> pd.DataFrame:
    """
    Keep rows whose column contains the query (case-insensitive).

    An empty or blank query passes every row.
    """
    query = (query or "").strip().lower()
    if df.empty or not query:
        return df

    mask = df[column].astype(str).str.lower().str.contains(query, regex=False, na=False)
    filtered = df[mask]
    logger.debug(f"Text filter '{query}' on {column}: {len(df)} -> {len(filtered)} rows")
    return filtered


def apply_exact_filters(
    df: pd.DataFrame,
    filters: Mapping[str, Optional[str]]
) -> pd.DataFrame:
    """
    Keep rows matching every non-empty filter exactly.

    Args:
        df: Rows to filter
        filters: column -> required value; None / "" means "any"
    """
    if df.empty:
        return df

    mask = pd.Series(True, index=df.index)
    for column, value in filters.items():
        if value:
            mask &= df[column] == value
    return df[mask]


# =============================================================================
# SORTING
# =============================================================================

def sort_rows(df: pd.DataFrame, column: str, ascending: bool) -> pd.DataFrame:
    """
    Stable sort on one column; equal keys keep their input order.

    Text columns compare case-insensitively.
    """
    if df.empty:
        return df

    if pd.api.types.is_numeric_dtype(df[column]):
        return df.sort_values(column, ascending=ascending, kind='stable')

    return df.sort_values(
        column,
        ascending=ascending,
        kind='stable',
        key=lambda s: s.astype(str).str.lower()
    )


def resolve_sort(
    sort_key: str,
    options: Mapping[str, Tuple[str, bool]]
) -> Tuple[str, bool]:
    """Look up (column, ascending) for an enumerated sort key."""
    if sort_key not in options:
        raise ValueError(f"Unknown sort key '{sort_key}'. Expected one of: {', '.join(options)}")
    return options[sort_key]


def filter_and_sort_sellers(
    rows: pd.DataFrame,
    name_filter: Optional[str] = None,
    sort_key: str = 'total'
) -> pd.DataFrame:
    """
    Seller breakdown pipeline shared by the current-month and rolling views.

    Filter on seller name, then stable sort, then renumber rank 1..n.
    """
    column, ascending = resolve_sort(sort_key, SELLER_SORT_OPTIONS)

    result = apply_text_filter(rows, 'seller', name_filter)
    result = sort_rows(result, column, ascending).reset_index(drop=True)
    result['rank'] = range(1, len(result) + 1)
    return result


# =============================================================================
# PAGINATION
# =============================================================================

@dataclass
class Page:
    """
    One page of rows.

    Attributes:
        rows: Rows on this page
        page: Zero-based page index actually served (clamped)
        total_pages: Number of pages (0 when there are no rows)
        total_rows: Rows across all pages
    """
    rows: pd.DataFrame
    page: int
    total_pages: int
    total_rows: int


def paginate(df: pd.DataFrame, page: int, page_size: int = SALES_PAGE_SIZE) -> Page:
    """Slice a fixed-size page; out-of-range pages are clamped."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    total_rows = len(df)
    total_pages = math.ceil(total_rows / page_size)
    page = max(0, min(page, total_pages - 1)) if total_pages else 0

    start = page * page_size
    return Page(
        rows=df.iloc[start:start + page_size],
        page=page,
        total_pages=total_pages,
        total_rows=total_rows
    )


# =============================================================================
# FILTER WIDGETS
# =============================================================================

@dataclass
class SellerControls:
    """Name filter + sort key chosen for a seller breakdown."""
    name_filter: str
    sort_key: str


@dataclass
class SalesListControls:
    """Exact filters + sort chosen for the individual sales list."""
    month: Optional[str]
    seller: Optional[str]
    sale_type: Optional[str]
    sort_key: str

    def as_filters(self) -> Dict[str, Optional[str]]:
        return {'month': self.month, 'seller': self.seller, 'type': self.sale_type}


class DashboardFilters:
    """
    Streamlit widgets feeding the pipeline.

    Usage:
        filters_ui = DashboardFilters()
        reference_date = filters_ui.render_reference_date()
        controls = filters_ui.render_seller_controls("current_month")
    """

    # =========================================================================
    # SIDEBAR
    # =========================================================================

    def render_reference_date(self, key: str = "reference_date") -> date:
        """Sidebar date that anchors YTD / MTD / rolling windows."""
        with st.sidebar:
            st.markdown("### 📅 Reporting Period")
            reference_date = st.date_input(
                "As of",
                value=date.today(),
                key=key,
                help="Current month, YTD and rolling windows are computed relative to this date"
            )
        return reference_date

    # =========================================================================
    # INLINE CONTROLS
    # =========================================================================

    def render_seller_controls(self, key: str) -> SellerControls:
        """Name filter and sort select rendered side by side."""
        col_filter, col_sort = st.columns([2, 1])

        with col_filter:
            name_filter = st.text_input(
                "Filter by Seller",
                placeholder="Type seller name...",
                key=f"{key}_name_filter"
            )

        with col_sort:
            sort_key = st.selectbox(
                "Sort By",
                options=list(SELLER_SORT_LABELS.keys()),
                format_func=lambda k: SELLER_SORT_LABELS[k],
                key=f"{key}_sort"
            )

        return SellerControls(name_filter=name_filter, sort_key=sort_key)

    def render_sales_list_controls(
        self,
        sales_df: pd.DataFrame,
        key: str = "sales_list"
    ) -> SalesListControls:
        """Month / seller / type selectors built from the valid rows."""
        valid = sales_df[sales_df['month_valid']] if not sales_df.empty else sales_df

        months = sort_months(valid['month'].unique()) if not valid.empty else []
        sellers = sorted(valid['seller'].unique()) if not valid.empty else []
        types = sorted(valid['type'].unique()) if not valid.empty else []

        col1, col2, col3, col4 = st.columns(4)

        with col1:
            month = st.selectbox("Month", ["All"] + months, key=f"{key}_month")
        with col2:
            seller = st.selectbox("Seller", ["All"] + sellers, key=f"{key}_seller")
        with col3:
            sale_type = st.selectbox("Type", ["All"] + types, key=f"{key}_type")
        with col4:
            sort_key = st.selectbox(
                "Sort By",
                options=SALES_LIST_SORT_OPTIONS,
                format_func=lambda k: SALES_LIST_SORT_LABELS[k],
                key=f"{key}_sort"
            )

        return SalesListControls(
            month=None if month == "All" else month,
            seller=None if seller == "All" else seller,
            sale_type=None if sale_type == "All" else sale_type,
            sort_key=sort_key
        )

    def render_quota_sort(self, key: str = "quota_sort") -> Tuple[str, bool]:
        """Select for the quota performance table; returns (sort_by, ascending)."""
        options: List[Tuple[str, bool]] = list(QUOTA_SORT_LABELS.keys())
        choice = st.selectbox(
            "Sort By",
            options=options,
            format_func=lambda k: QUOTA_SORT_LABELS[k],
            key=key
        )
        return choice
