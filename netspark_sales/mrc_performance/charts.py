# netspark_sales/mrc_performance/charts.py
"""
Altair Chart Builders for MRC Performance

All visualization components using Altair:
- KPI summary cards (using st.metric)
- Monthly trend chart (stacked wireline / wireless bars + total line)
- Wireline vs mobility donut
- Quota attainment bars coloured by attainment band
- Stack rank table with movement arrows
"""

import logging
from typing import Dict, List, Optional

import altair as alt
import pandas as pd
import streamlit as st

from .constants import COLORS, CHART_HEIGHT, PIE_CHART_WIDTH, PIE_CHART_HEIGHT, WIRELINE, WIRELESS
from .formatters import format_currency, format_percent, format_rank_movement

logger = logging.getLogger(__name__)

CLASS_LABELS = {WIRELINE: 'Wireline', WIRELESS: 'Wireless'}


def attainment_band(ratio: float) -> str:
    """Colour band for a quota ratio: red <50%, orange 50-99%, green >=100%."""
    if ratio >= 1:
        return 'good'
    if ratio >= 0.5:
        return 'mid'
    return 'low'


class MRCCharts:
    """
    Chart builders for the MRC dashboards.

    All methods are static - can be called without instantiation.

    Usage:
        MRCCharts.render_kpi_cards(overview)
        chart = MRCCharts.build_monthly_trend_chart(trend_df)
        st.altair_chart(chart, use_container_width=True)
    """

    # =========================================================================
    # KPI CARDS (Using st.metric)
    # =========================================================================

    @staticmethod
    def render_kpi_cards(overview: Dict, label: str = "MRC"):
        """
        YTD / MTD / record count cards.

        Args:
            overview: Output of MRCMetrics.calculate_overview_metrics
            label: Measure name shown on the cards (MRC or GAAP)
        """
        with st.container(border=True):
            col1, col2, col3 = st.columns(3)

            with col1:
                st.metric(
                    label=f"YTD {label}",
                    value=format_currency(overview.get('ytd', 0)),
                    help="Calendar year to date" + (". Upgrades count as $15.00." if label == "MRC" else "")
                )
            with col2:
                st.metric(
                    label=f"MTD {label}",
                    value=format_currency(overview.get('mtd', 0)),
                    help="Month containing the reporting date"
                )
            with col3:
                st.metric(
                    label="Sales (YTD)",
                    value=f"{overview.get('ytd_record_count', 0):,}",
                    delta=f"{overview.get('record_count', 0):,} all time",
                    delta_color="off"
                )

    # =========================================================================
    # MONTHLY TREND
    # =========================================================================

    @staticmethod
    def build_monthly_trend_chart(
        monthly_df: pd.DataFrame,
        title: str = "📈 Monthly MRC",
        label: str = "MRC"
    ) -> alt.Chart:
        """
        Stacked wireline / wireless bars with a total line.

        Args:
            monthly_df: month, wireline, wireless, total (display order)
            title: Chart title
            label: Measure name for axis and tooltips

        Returns:
            Altair chart
        """
        if monthly_df.empty:
            return MRCCharts._empty_chart("No data available")

        month_order = list(monthly_df['month'])

        bar_data = monthly_df.melt(
            id_vars=['month'],
            value_vars=[WIRELINE, WIRELESS],
            var_name='Class',
            value_name='Amount'
        )
        bar_data['Class'] = bar_data['Class'].map(CLASS_LABELS)

        color_scale = alt.Scale(
            domain=[CLASS_LABELS[WIRELINE], CLASS_LABELS[WIRELESS]],
            range=[COLORS[WIRELINE], COLORS[WIRELESS]]
        )

        bars = alt.Chart(bar_data).mark_bar().encode(
            x=alt.X('month:N', sort=month_order, title='Month'),
            y=alt.Y('Amount:Q', stack='zero', title=f"{label} (USD)", axis=alt.Axis(format="~s")),
            color=alt.Color("Class:N", scale=color_scale, legend=alt.Legend(orient='bottom')),
            tooltip=[
                alt.Tooltip('month:N', title='Month'),
                alt.Tooltip('Class:N', title='Class'),
                alt.Tooltip("Amount:Q", title=label, format='$,.2f')
            ]
        )

        line = alt.Chart(monthly_df).mark_line(
            point=True,
            color=COLORS['total'],
            strokeWidth=2
        ).encode(
            x=alt.X('month:N', sort=month_order),
            y=alt.Y('total:Q'),
            tooltip=[
                alt.Tooltip('month:N', title='Month'),
                alt.Tooltip("total:Q", title=f"Total {label}", format='$,.2f')
            ]
        )

        return alt.layer(bars, line).properties(
            height=CHART_HEIGHT,
            title=title
        )

    # =========================================================================
    # CLASS BREAKDOWN
    # =========================================================================

    @staticmethod
    def build_class_pie_chart(
        breakdown_df: pd.DataFrame,
        title: str = "Wireline vs Mobility"
    ) -> alt.Chart:
        """
        Donut chart of the class split.

        Args:
            breakdown_df: name, value (see MRCMetrics.class_breakdown)
        """
        if breakdown_df.empty or breakdown_df['value'].sum() == 0:
            return MRCCharts._empty_chart("No sales in this period")

        total = breakdown_df['value'].sum()
        df = breakdown_df.copy()
        df['share'] = df['value'] / total

        color_scale = alt.Scale(
            domain=['Wireline', 'Mobility'],
            range=[COLORS[WIRELINE], COLORS[WIRELESS]]
        )

        return alt.Chart(df).mark_arc(innerRadius=60).encode(
            theta=alt.Theta('value:Q'),
            color=alt.Color('name:N', scale=color_scale, legend=alt.Legend(orient='bottom', title=None)),
            tooltip=[
                alt.Tooltip('name:N', title='Class'),
                alt.Tooltip('value:Q', title='MRC', format='$,.2f'),
                alt.Tooltip('share:Q', title='Share', format='.1%')
            ]
        ).properties(
            width=PIE_CHART_WIDTH,
            height=PIE_CHART_HEIGHT,
            title=title
        )

    # =========================================================================
    # QUOTA
    # =========================================================================

    @staticmethod
    def build_quota_attainment_chart(
        attainment_df: pd.DataFrame,
        title: str = "🎯 Quota Attainment"
    ) -> alt.Chart:
        """
        Monthly MRC bars coloured by attainment band, with the quota as a rule.

        Args:
            attainment_df: month, quota, mrc, ratio, progress_percent
        """
        if attainment_df.empty:
            return MRCCharts._empty_chart("No quota data")

        df = attainment_df.copy()
        df['band'] = df['ratio'].apply(attainment_band)
        month_order = list(df['month'])

        band_scale = alt.Scale(
            domain=['low', 'mid', 'good'],
            range=[COLORS['attainment_low'], COLORS['attainment_mid'], COLORS['attainment_good']]
        )

        bars = alt.Chart(df).mark_bar().encode(
            x=alt.X('month:N', sort=month_order, title='Month'),
            y=alt.Y('mrc:Q', title='MRC (USD)', axis=alt.Axis(format='~s')),
            color=alt.Color('band:N', scale=band_scale, legend=None),
            tooltip=[
                alt.Tooltip('month:N', title='Month'),
                alt.Tooltip('mrc:Q', title='MRC', format='$,.2f'),
                alt.Tooltip('quota:Q', title='Quota', format='$,.2f'),
                alt.Tooltip('progress_percent:Q', title='Progress %', format='.1f')
            ]
        )

        quota_rule = alt.Chart(df).mark_rule(
            color=COLORS['quota'],
            strokeDash=[4, 4]
        ).encode(
            y=alt.Y('mean(quota):Q')
        )

        return alt.layer(bars, quota_rule).properties(
            height=CHART_HEIGHT,
            title=title
        )

    @staticmethod
    def style_quota_table(quota_df: pd.DataFrame):
        """Currency / percent display with the progress column coloured by band."""
        def band_color(value):
            ratio = (value or 0) / 100
            return f"color: {COLORS['attainment_' + attainment_band(ratio)]}"

        return quota_df.style.format({
            'monthly_quota': format_currency,
            'current_mrc': format_currency,
            'progress_percent': format_percent,
        }).map(band_color, subset=['progress_percent'])

    # =========================================================================
    # STACK RANK
    # =========================================================================

    @staticmethod
    def render_stack_rank_table(wide_df: pd.DataFrame, months: List[str]):
        """
        Rank per month with movement arrows.

        Args:
            wide_df: StackRankTimeline.to_wide() output
            months: Month columns to show, in order
        """
        if wide_df.empty:
            st.info("No sales to rank for the selected period")
            return

        display = pd.DataFrame({
            'YTD Rank': wide_df['ytd_rank'],
            'Seller': wide_df['seller'],
            'YTD MRC': wide_df['ytd_total'].apply(format_currency),
        })

        for month in months:
            ranks = wide_df[f'{month} rank']
            deltas = wide_df[f'{month} delta']
            display[month] = [
                '-' if pd.isna(rank) else f"#{int(rank)} {format_rank_movement(delta)}"
                for rank, delta in zip(ranks, deltas)
            ]

        st.dataframe(display, hide_index=True, use_container_width=True)

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _empty_chart(message: str = "No data") -> alt.Chart:
        """Placeholder chart with a centred message."""
        return alt.Chart(pd.DataFrame({'text': [message]})).mark_text(
            size=14,
            color=COLORS['text_dark']
        ).encode(
            text='text:N'
        ).properties(
            height=CHART_HEIGHT
        )


def describe_seller_totals(totals: Dict[str, float]) -> Optional[str]:
    """Caption under a seller breakdown table."""
    if not totals:
        return None
    return (
        f"Totals: Wireline {format_currency(totals.get(WIRELINE, 0))} · "
        f"Wireless {format_currency(totals.get(WIRELESS, 0))} · "
        f"Total {format_currency(totals.get('total', 0))}"
    )
