from datetime import date

import pandas as pd
import pytest

from netspark_sales.mrc_performance.metrics import (
    MRCMetrics,
    aggregate,
    filter_months,
    rank_sellers,
)
from netspark_sales.mrc_performance.records import months_of_year, normalize_records

from conftest import make_doc


# =============================================================================
# AGGREGATOR
# =============================================================================

def test_upgrade_forces_fifteen_in_monthly_trend():
    df = normalize_records([
        make_doc('A', 'January 2025', 100, 'Wireline New'),
        make_doc('A', 'January 2025', 50, 'Mobility Upgrade'),
    ])

    trend = MRCMetrics(df).monthly_trend(['January 2025'])

    row = trend.iloc[0]
    assert row['month'] == 'January 2025'
    assert row['wireline'] == 100.0
    assert row['wireless'] == 15.0
    assert row['total'] == 115.0


def test_malformed_month_excluded_from_month_views():
    df = normalize_records([
        make_doc('A', 'January 2025', 100, 'Wireline New'),
        make_doc('B', 'Feb 2025', 500, 'Wireline New'),
        make_doc('C', 'March', 70, 'Mobility New'),
        make_doc('D', 'Marchtember 2025', 30, 'Mobility New'),
    ])
    metrics = MRCMetrics(df)

    trend = metrics.monthly_trend(['January 2025', 'February 2025', 'March 2025'])
    assert trend['total'].tolist() == [100.0, 0.0, 0.0]

    leaderboard = metrics.seller_leaderboard(filter_months(df, ['January 2025']))
    assert leaderboard['seller'].tolist() == ['A']
    assert leaderboard['total'].tolist() == [100.0]

    assert list(aggregate(df, 'month').index) == ['January 2025']


def test_aggregate_keeps_first_appearance_order(sales_df):
    buckets = aggregate(sales_df, 'month')
    assert list(buckets.index) == ['January 2025', 'February 2025', 'March 2025']

    sellers = aggregate(sales_df, 'seller')
    assert list(sellers.index) == ['Alice', 'Bob', 'Carol', 'Dan', 'Unknown']


def test_aggregate_composite_key(sales_df):
    buckets = aggregate(sales_df, ['month', 'seller'])

    assert buckets.index.names == ['month', 'seller']
    assert buckets.loc[('January 2025', 'Alice'), 'total'] == 115.0
    assert buckets.loc[('March 2025', 'Bob'), 'wireline'] == 40.0


@pytest.mark.parametrize("keys", ['month', 'seller', ['month', 'seller']])
def test_aggregate_conservation(sales_df, keys):
    buckets = aggregate(sales_df, keys)
    included = sales_df[sales_df['month_valid']] if 'month' in keys else sales_df

    assert buckets['wireline'].sum() + buckets['wireless'].sum() == pytest.approx(buckets['total'].sum())
    assert buckets['total'].sum() == pytest.approx(included['effective_mrc'].sum())


def test_aggregate_is_idempotent(sales_df):
    first = aggregate(sales_df, ['month', 'seller'])
    second = aggregate(sales_df, ['month', 'seller'])
    pd.testing.assert_frame_equal(first, second)


def _case_variant_sellers():
    return normalize_records([
        make_doc('Bob Smith', 'January 2025', 100, 'Wireline New'),
        make_doc('bob smith', 'January 2025', 50, 'Mobility New'),
    ])


def test_seller_grouping_is_case_sensitive():
    buckets = aggregate(_case_variant_sellers(), 'seller')
    assert buckets.index.tolist() == ['Bob Smith', 'bob smith']
    assert buckets['total'].tolist() == [100.0, 50.0]


def test_leaderboard_keeps_case_variants_apart():
    leaderboard = MRCMetrics(_case_variant_sellers()).seller_leaderboard()
    assert leaderboard['seller'].tolist() == ['Bob Smith', 'bob smith']
    assert leaderboard['rank'].tolist() == [1, 2]


def test_current_month_detail_keeps_case_variants_apart():
    detail = MRCMetrics(_case_variant_sellers()).current_month_detail(date(2025, 1, 20))
    assert detail.rows['seller'].tolist() == ['Bob Smith', 'bob smith']
    assert detail.rows['wireline'].tolist() == [100.0, 0.0]
    assert detail.rows['wireless'].tolist() == [0.0, 50.0]


def test_aggregate_empty_frame():
    buckets = aggregate(normalize_records([]), 'month')
    assert buckets.empty
    assert list(buckets.columns) == ['wireline', 'wireless', 'total']


def test_aggregate_unknown_measure(sales_df):
    with pytest.raises(ValueError):
        aggregate(sales_df, 'seller', measure='revenue')


# =============================================================================
# OVERVIEW / TREND
# =============================================================================

def test_overview_metrics(metrics):
    overview = metrics.calculate_overview_metrics(date(2025, 3, 15))

    assert overview['ytd'] == pytest.approx(735.0)
    assert overview['mtd'] == pytest.approx(340.0)
    assert overview['record_count'] == 8
    assert overview['ytd_record_count'] == 7


def test_overview_metrics_gaap(metrics):
    overview = metrics.calculate_overview_metrics(date(2025, 3, 15), measure='gaap')
    assert overview['mtd'] == pytest.approx(1200.0)


def test_overview_metrics_empty():
    overview = MRCMetrics(normalize_records([])).calculate_overview_metrics(date(2025, 3, 15))
    assert overview['ytd'] == 0.0
    assert overview['mtd'] == 0.0
    assert overview['record_count'] == 0


def test_monthly_trend_zero_fills_every_month(metrics):
    trend = metrics.monthly_trend(months_of_year(2025))

    assert trend['month'].tolist() == months_of_year(2025)
    assert trend['total'].tolist()[:4] == [115.0, 280.0, 340.0, 0.0]
    april = trend.iloc[3]
    assert (april['wireline'], april['wireless'], april['total']) == (0.0, 0.0, 0.0)


def test_monthly_trend_empty_input_still_zero_filled():
    trend = MRCMetrics(normalize_records([])).monthly_trend(['January 2025', 'February 2025'])
    assert len(trend) == 2
    assert trend['total'].tolist() == [0.0, 0.0]


def test_monthly_trend_drops_malformed_labels(metrics):
    trend = metrics.monthly_trend(['January 2025', 'Feb 2025', 'March'])
    assert trend['month'].tolist() == ['January 2025']
    assert trend['total'].tolist() == [115.0]


def test_monthly_series_is_chronological():
    df = normalize_records([
        make_doc('A', 'March 2025', 10, 'Wireline'),
        make_doc('A', 'November 2024', 20, 'Wireline'),
        make_doc('A', 'January 2025', 30, 'Wireline'),
    ])
    series = MRCMetrics(df).monthly_series()
    assert series['month'].tolist() == ['November 2024', 'January 2025', 'March 2025']


def test_class_breakdown(metrics):
    breakdown = metrics.class_breakdown(months_of_year(2025))

    assert breakdown['name'].tolist() == ['Wireline', 'Mobility']
    assert breakdown['value'].tolist() == pytest.approx([220.0, 515.0])


# =============================================================================
# LEADERBOARD
# =============================================================================

def test_leaderboard_ties_keep_input_order():
    df = normalize_records([
        make_doc('X', 'January 2025', 200, 'Wireline'),
        make_doc('Y', 'January 2025', 200, 'Wireline'),
        make_doc('Z', 'January 2025', 500, 'Wireline'),
    ])

    leaderboard = MRCMetrics(df).seller_leaderboard()

    assert leaderboard['seller'].tolist() == ['Z', 'X', 'Y']
    assert leaderboard['rank'].tolist() == [1, 2, 3]
    assert leaderboard['total'].tolist() == [500.0, 200.0, 200.0]


def test_leaderboard_repeatable(sales_df):
    first = rank_sellers(aggregate(sales_df, 'seller'))
    second = rank_sellers(aggregate(sales_df, 'seller'))
    pd.testing.assert_frame_equal(first, second)


# =============================================================================
# SELLER BREAKDOWNS
# =============================================================================

def test_current_month_detail(metrics):
    detail = metrics.current_month_detail(date(2025, 2, 10))

    assert detail.month == 'February 2025'
    assert detail.rows['seller'].tolist() == ['Bob', 'Carol']
    assert detail.rows['rank'].tolist() == [1, 2]
    assert detail.totals['total'] == 280.0


def test_current_month_detail_filter_recomputes_totals(metrics):
    detail = metrics.current_month_detail(date(2025, 2, 10), name_filter='  CAR ')

    assert detail.rows['seller'].tolist() == ['Carol']
    assert detail.rows['rank'].tolist() == [1]
    assert detail.totals == {'wireline': 80.0, 'wireless': 0.0, 'total': 80.0}


@pytest.mark.parametrize("sort_key, expected", [
    ('total', ['Bob', 'Carol']),
    ('wireline', ['Carol', 'Bob']),
    ('wireless', ['Bob', 'Carol']),
    ('seller', ['Bob', 'Carol']),
])
def test_current_month_detail_sorts(metrics, sort_key, expected):
    detail = metrics.current_month_detail(date(2025, 2, 10), sort_key=sort_key)
    assert detail.rows['seller'].tolist() == expected


def test_current_month_detail_unknown_sort(metrics):
    with pytest.raises(ValueError):
        metrics.current_month_detail(date(2025, 2, 10), sort_key='customer')


def test_rolling_window_always_has_window_size_months():
    window = MRCMetrics(normalize_records([])).rolling_window(date(2025, 3, 15), 3)

    assert [b.month for b in window] == ['January 2025', 'February 2025', 'March 2025']
    assert all(b.rows.empty for b in window)


def test_rolling_window_breakdowns(metrics):
    window = metrics.rolling_window(date(2025, 3, 15), 3, name_filter='b')

    assert [b.rows['seller'].tolist() for b in window] == [[], ['Bob'], ['Bob']]
    assert window[2].totals['total'] == 40.0


def test_seller_month_sales(metrics):
    rows = metrics.seller_month_sales('Alice', 'January 2025')
    assert rows['id'].tolist() == ['1', '2']


# =============================================================================
# INDIVIDUAL SALES
# =============================================================================

def test_individual_sales_excludes_invalid_months(metrics):
    view = metrics.individual_sales(sort_key='mrc')

    assert view.page.total_rows == 7
    assert view.filtered['id'].tolist() == ['6', '3', '1', '4', '5', '2', '8']
    assert view.grand_total == pytest.approx(735.0)


def test_individual_sales_filters_and_subtotals(metrics):
    view = metrics.individual_sales(filters={'seller': 'Alice', 'month': None, 'type': None})

    assert view.page.total_rows == 3
    assert view.grand_total == pytest.approx(415.0)
    assert view.seller_totals.to_dict('records') == [{'seller': 'Alice', 'total': 415.0}]


def test_individual_sales_month_sort_is_chronological(metrics):
    view = metrics.individual_sales(sort_key='month')
    assert view.filtered['month'].tolist() == (
        ['January 2025'] * 2 + ['February 2025'] * 2 + ['March 2025'] * 3
    )


def test_individual_sales_class_sort_scores_others_zero(metrics):
    view = metrics.individual_sales(sort_key='wireline')
    assert view.filtered['id'].tolist() == ['1', '4', '5', '2', '3', '6', '8']


def test_individual_sales_paging(metrics):
    view = metrics.individual_sales(sort_key='mrc', page=2, page_size=3)
    assert view.page.total_pages == 3
    assert view.page.rows['id'].tolist() == ['8']

    clamped = metrics.individual_sales(sort_key='mrc', page=99, page_size=3)
    assert clamped.page.page == 2
    # subtotals cover the whole filtered set, not the page
    assert clamped.grand_total == pytest.approx(735.0)


def test_individual_sales_unknown_sort(metrics):
    with pytest.raises(ValueError):
        metrics.individual_sales(sort_key='customer')


# =============================================================================
# QUOTAS
# =============================================================================

def test_quota_zero_gives_zero_progress():
    df = normalize_records([make_doc('Adam Meyer', 'January 2025', 500, 'Wireline New')])
    quotas = pd.DataFrame({'representative': ['Adam Meyer'], 'monthly_quota': [0.0]})
    metrics = MRCMetrics(df, quotas)

    attainment = metrics.quota_attainment('Adam Meyer', ['January 2025'])
    assert attainment.loc[0, 'mrc'] == 500.0
    assert attainment.loc[0, 'progress_percent'] == 0.0
    assert attainment.loc[0, 'ratio'] == 0.0

    table = metrics.quota_performance('January 2025')
    assert table.loc[0, 'progress_percent'] == 0.0


def test_quota_attainment_per_month(metrics):
    attainment = metrics.quota_attainment('Bob', ['February 2025', 'March 2025', 'April 2025'])

    assert attainment['quota'].tolist() == [100.0] * 3
    assert attainment['mrc'].tolist() == [200.0, 40.0, 0.0]
    assert attainment['ratio'].tolist() == pytest.approx([2.0, 0.4, 0.0])


def test_quota_lookup_ignores_case(metrics):
    assert metrics.get_quota('alice') == 500.0
    assert metrics.quota_attainment('BOB', ['February 2025']).loc[0, 'mrc'] == 200.0


def test_quota_attainment_unknown_rep(metrics):
    attainment = metrics.quota_attainment('Nobody', ['March 2025'])
    assert attainment.loc[0, 'quota'] == 0.0
    assert attainment.loc[0, 'progress_percent'] == 0.0


def test_quota_performance_sorting(metrics):
    by_progress = metrics.quota_performance('March 2025', sort_by='progress', ascending=False)
    assert by_progress['representative'].tolist() == ['Alice', 'Bob', 'Carol']
    assert by_progress['progress_percent'].tolist() == pytest.approx([60.0, 40.0, 0.0])

    by_name = metrics.quota_performance('March 2025', sort_by='name', ascending=False)
    assert by_name['representative'].tolist() == ['Carol', 'Bob', 'Alice']

    by_mrc = metrics.quota_performance('March 2025', sort_by='mrc', ascending=True)
    assert by_mrc['current_mrc'].tolist() == [0.0, 40.0, 300.0]


def test_quota_performance_matches_names_case_insensitively(sales_df):
    quotas = pd.DataFrame({'representative': ['ALICE'], 'monthly_quota': [300.0]})
    table = MRCMetrics(sales_df, quotas).quota_performance('March 2025')
    assert table.loc[0, 'current_mrc'] == 300.0
    assert table.loc[0, 'progress_percent'] == 100.0


def test_quota_performance_unknown_sort(metrics):
    with pytest.raises(ValueError):
        metrics.quota_performance('March 2025', sort_by='quota')


# =============================================================================
# STACK RANK
# =============================================================================

Q1 = ['January 2025', 'February 2025', 'March 2025']


def _cell(timeline, seller, month):
    cells = timeline.cells
    return cells[(cells['seller'] == seller) & (cells['month'] == month)].iloc[0]


def test_stack_rank_first_month_has_no_delta(metrics):
    timeline = metrics.stack_rank_timeline(Q1)
    first = timeline.cells[timeline.cells['month'] == 'January 2025']

    assert first['delta'].isna().all()
    assert _cell(timeline, 'Alice', 'January 2025')['rank'] == 1


def test_stack_rank_deltas(metrics):
    timeline = metrics.stack_rank_timeline(Q1)

    bob_march = _cell(timeline, 'Bob', 'March 2025')
    assert bob_march['rank'] == 2
    assert bob_march['delta'] == -1

    # missing previous rank means no movement data, not zero
    assert pd.isna(_cell(timeline, 'Alice', 'March 2025')['delta'])
    assert pd.isna(_cell(timeline, 'Carol', 'March 2025')['rank'])


def test_stack_rank_ytd(metrics):
    timeline = metrics.stack_rank_timeline(Q1)

    assert timeline.ytd['seller'].tolist() == ['Alice', 'Bob', 'Carol', 'Unknown']
    assert timeline.ytd['total'].tolist() == [415.0, 240.0, 80.0, 0.0]


def test_stack_rank_wide_ordering(metrics):
    timeline = metrics.stack_rank_timeline(Q1)

    assert timeline.to_wide()['seller'].tolist() == ['Alice', 'Bob', 'Carol', 'Unknown']
    assert timeline.to_wide('February 2025')['seller'].tolist() == ['Bob', 'Carol', 'Alice', 'Unknown']


def test_stack_rank_ties_keep_input_order():
    df = normalize_records([
        make_doc('X', 'January 2025', 100, 'Wireline'),
        make_doc('Y', 'January 2025', 100, 'Wireline'),
    ])
    timeline = MRCMetrics(df).stack_rank_timeline(['January 2025'])
    assert timeline.ytd['seller'].tolist() == ['X', 'Y']
    assert _cell(timeline, 'Y', 'January 2025')['rank'] == 2


def test_stack_rank_empty():
    timeline = MRCMetrics(normalize_records([])).stack_rank_timeline(Q1)
    assert timeline.cells.empty
    assert timeline.to_wide().empty
