# netspark_sales/mrc_performance/fragments.py
"""
Streamlit Fragments for MRC Performance

Uses @st.fragment to enable partial reruns for filter-heavy sections.
Each fragment only reruns when its internal widgets change,
NOT when the sidebar or other sections change.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Sequence

import pandas as pd
import streamlit as st

from .charts import MRCCharts, describe_seller_totals
from .constants import CSV_FILE_NAME, SALES_PAGE_SIZE, WIRELINE, WIRELESS
from .export import MRCExport, sales_to_csv
from .filters import DashboardFilters
from .formatters import format_currency
from .metrics import MRCMetrics, SellerBreakdown
from .records import new_records, record_ids

logger = logging.getLogger(__name__)

filters_ui = DashboardFilters()


def _breakdown_display(breakdown: SellerBreakdown) -> pd.DataFrame:
    rows = breakdown.rows
    return pd.DataFrame({
        'Rank': rows['rank'],
        'Seller': rows['seller'],
        'Wireline': rows[WIRELINE].apply(format_currency),
        'Wireless': rows[WIRELESS].apply(format_currency),
        'Total': rows['total'].apply(format_currency),
    })


def _sales_display(rows: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame({
        'Month': rows['month'],
        'Seller': rows['seller'],
        'Type': rows['type'],
        'MRC': rows['mrc'].apply(format_currency),
        'Counted MRC': rows['effective_mrc'].apply(format_currency),
        'Customer': rows['customer'].replace('', '-'),
    })


# =============================================================================
# NEW SALE NOTIFICATIONS
# =============================================================================

def notify_new_sales(records: Iterable[Any], state_key: str = 'known_record_ids'):
    """
    Toast each record that was not in the previous snapshot.

    The first snapshot of a session only seeds the known ids.
    """
    records = list(records)
    previous_ids = st.session_state.get(state_key)

    if previous_ids is not None:
        for record in new_records(previous_ids, records):
            st.toast(
                f"🎉 New Sale! {record.seller}: {format_currency(record.effective_mrc)} ({record.type or 'Sale'})"
            )
            logger.info(f"New sale detected: {record.id} ({record.seller})")

    st.session_state[state_key] = record_ids(records)


# =============================================================================
# FRAGMENT: CURRENT MONTH DETAIL
# =============================================================================

@st.fragment
def current_month_fragment(
    metrics: MRCMetrics,
    reference_date: date,
    fragment_key: str = "current_month"
):
    """Per-seller breakdown for the reference month with a drill-down."""
    controls = filters_ui.render_seller_controls(fragment_key)
    breakdown = metrics.current_month_detail(reference_date, controls.name_filter, controls.sort_key)

    st.markdown(f"#### 📅 {breakdown.month}")

    if breakdown.rows.empty:
        st.info("No sales recorded for this month yet")
        return

    st.dataframe(_breakdown_display(breakdown), hide_index=True, use_container_width=True)
    st.caption(describe_seller_totals(breakdown.totals))

    with st.expander("🔍 Seller drill-down"):
        seller = st.selectbox(
            "Seller",
            options=list(breakdown.rows['seller']),
            key=f"{fragment_key}_drilldown"
        )
        detail = metrics.seller_month_sales(seller, breakdown.month)
        st.dataframe(_sales_display(detail), hide_index=True, use_container_width=True)


# =============================================================================
# FRAGMENT: ROLLING WINDOW
# =============================================================================

@st.fragment
def rolling_window_fragment(
    metrics: MRCMetrics,
    reference_date: date,
    window_size: int,
    fragment_key: str = "rolling"
):
    """One seller breakdown per trailing month, side by side."""
    controls = filters_ui.render_seller_controls(fragment_key)
    window = metrics.rolling_window(reference_date, window_size, controls.name_filter, controls.sort_key)

    columns = st.columns(len(window))
    for col, breakdown in zip(columns, window):
        with col:
            st.markdown(f"**{breakdown.month}**")
            if breakdown.rows.empty:
                st.caption("No sales")
                continue
            display = _breakdown_display(breakdown)[['Rank', 'Seller', 'Total']]
            st.dataframe(display, hide_index=True, use_container_width=True)
            st.caption(f"Total {format_currency(breakdown.totals.get('total', 0))}")


# =============================================================================
# FRAGMENT: INDIVIDUAL SALES
# =============================================================================

@st.fragment
def sales_list_fragment(
    metrics: MRCMetrics,
    page_size: int = SALES_PAGE_SIZE,
    fragment_key: str = "sales_list"
):
    """Filterable, paged list of every sale with CSV download."""
    controls = filters_ui.render_sales_list_controls(metrics.sales_df, fragment_key)

    # Back to the first page whenever the filters change
    page_key = f"{fragment_key}_page"
    signature = (controls.month, controls.seller, controls.sale_type, controls.sort_key)
    if st.session_state.get(f"{fragment_key}_signature") != signature:
        st.session_state[f"{fragment_key}_signature"] = signature
        st.session_state[page_key] = 0

    view = metrics.individual_sales(
        filters=controls.as_filters(),
        sort_key=controls.sort_key,
        page=st.session_state.get(page_key, 0),
        page_size=page_size
    )
    page = view.page

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Filtered MRC", format_currency(view.grand_total))
    with col2:
        st.metric("Sales", f"{page.total_rows:,}")

    if page.total_rows == 0:
        st.info("No sales match the selected filters")
        return

    st.dataframe(_sales_display(page.rows), hide_index=True, use_container_width=True)

    col_prev, col_info, col_next = st.columns([1, 2, 1])
    with col_prev:
        if st.button("◀ Previous", key=f"{fragment_key}_prev", disabled=page.page == 0):
            st.session_state[page_key] = page.page - 1
            st.rerun(scope="fragment")
    with col_info:
        st.caption(f"Page {page.page + 1} of {page.total_pages}")
    with col_next:
        if st.button("Next ▶", key=f"{fragment_key}_next", disabled=page.page >= page.total_pages - 1):
            st.session_state[page_key] = page.page + 1
            st.rerun(scope="fragment")

    with st.expander("👥 Totals by seller"):
        totals = view.seller_totals.copy()
        totals['total'] = totals['total'].apply(format_currency)
        st.dataframe(
            totals.rename(columns={'seller': 'Seller', 'total': 'MRC'}),
            hide_index=True,
            use_container_width=True
        )

    st.download_button(
        label="📥 Download CSV",
        data=sales_to_csv(view.filtered),
        file_name=CSV_FILE_NAME,
        mime="text/csv",
        key=f"{fragment_key}_csv"
    )


# =============================================================================
# FRAGMENT: QUOTA PERFORMANCE
# =============================================================================

@st.fragment
def quota_performance_fragment(
    metrics: MRCMetrics,
    reference_month: str,
    fragment_key: str = "quota_performance"
):
    """Quota progress for every representative in one month."""
    sort_by, ascending = filters_ui.render_quota_sort(f"{fragment_key}_sort")
    table = metrics.quota_performance(reference_month, sort_by, ascending)

    if table.empty:
        st.info("No quota table loaded")
        return

    st.dataframe(
        MRCCharts.style_quota_table(table).relabel_index(
            ['Representative', 'Monthly Quota', 'Current MRC', 'Progress'], axis=1
        ),
        hide_index=True,
        use_container_width=True
    )


@st.fragment
def quota_attainment_fragment(
    metrics: MRCMetrics,
    months: Sequence[str],
    fragment_key: str = "quota_attainment"
):
    """Month by month attainment chart for one representative."""
    representatives = list(metrics.quotas_df['representative'])
    if not representatives:
        st.info("No quota table loaded")
        return

    representative = st.selectbox("Representative", representatives, key=f"{fragment_key}_rep")
    attainment = metrics.quota_attainment(representative, months)

    st.altair_chart(
        MRCCharts.build_quota_attainment_chart(attainment, title=f"🎯 {representative}"),
        use_container_width=True
    )


# =============================================================================
# FRAGMENT: STACK RANK
# =============================================================================

@st.fragment
def stack_rank_fragment(
    metrics: MRCMetrics,
    months: List[str],
    fragment_key: str = "stack_rank"
):
    """Rank per month with movement arrows, sortable by any month."""
    timeline = metrics.stack_rank_timeline(months)

    sort_choice = st.selectbox(
        "Order by",
        options=["YTD"] + months,
        key=f"{fragment_key}_sort"
    )
    wide = timeline.to_wide(None if sort_choice == "YTD" else sort_choice)
    MRCCharts.render_stack_rank_table(wide, months)


# =============================================================================
# FRAGMENT: EXCEL EXPORT
# =============================================================================

@st.fragment
def export_report_fragment(
    overview: Dict,
    monthly_df: pd.DataFrame,
    leaderboard_df: pd.DataFrame,
    sales_df: pd.DataFrame,
    reference_date: date,
    fragment_key: str = "export"
):
    """Build the Excel report only when asked for."""
    if st.button("📊 Generate Excel Report", key=f"{fragment_key}_generate"):
        with st.spinner("Building report..."):
            exporter = MRCExport()
            st.session_state[f"{fragment_key}_bytes"] = exporter.create_report(
                overview=overview,
                monthly_df=monthly_df,
                leaderboard_df=leaderboard_df,
                filters={'reference_date': reference_date},
                sales_df=sales_df
            ).getvalue()

    report = st.session_state.get(f"{fragment_key}_bytes")
    if report:
        st.download_button(
            label="📥 Download Report",
            data=report,
            file_name=f"mrc_performance_{datetime.now():%Y%m%d_%H%M}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            key=f"{fragment_key}_download"
        )
