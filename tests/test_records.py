from datetime import date

import pytest

from netspark_sales.mrc_performance.records import (
    SalesRecord,
    classify_sale_type,
    effective_mrc,
    month_sort_key,
    months_of_year,
    new_records,
    normalize_records,
    record_ids,
    sort_months,
    trailing_months,
)


@pytest.mark.parametrize("amount", [0, 1000000, -25, None, float('nan'), 'n/a'])
@pytest.mark.parametrize("sale_type", ["Mobility Upgrade", "UPGRADE", "wireline upgrade"])
def test_upgrade_always_counts_fifteen(amount, sale_type):
    assert effective_mrc(amount, sale_type) == 15.0


def test_effective_mrc_without_upgrade():
    assert effective_mrc(42.5, "Wireline New") == 42.5
    assert effective_mrc("12.5", "Mobility New") == 12.5
    assert effective_mrc(None, "Mobility New") == 0.0
    assert effective_mrc(float('nan'), None) == 0.0
    assert effective_mrc("garbage", "Wireline") == 0.0


@pytest.mark.parametrize("sale_type, expected", [
    ("Wireline New", "wireline"),
    ("WIRELINE renewal", "wireline"),
    ("Mobility New", "wireless"),
    ("Mobility Upgrade", "wireless"),
    ("Fiber", "wireless"),
    ("", "wireless"),
    (None, "wireless"),
])
def test_classify_sale_type(sale_type, expected):
    assert classify_sale_type(sale_type) == expected


def test_month_sort_key_parses_full_month_names():
    assert month_sort_key("January 2025") == (2025, 0)
    assert month_sort_key("December 2024") == (2024, 11)
    assert month_sort_key("January 2025") > month_sort_key("December 2024")


@pytest.mark.parametrize("month", [
    "March", "Marchtember 2025", "Feb 2025", "march 2025", "March 25",
    "March 2025 extra", "March  2025", "", None, 2025,
])
def test_month_sort_key_rejects_malformed(month):
    assert month_sort_key(month) is None


def test_trailing_months_oldest_first():
    assert trailing_months(date(2025, 3, 15), 3) == ["January 2025", "February 2025", "March 2025"]


def test_trailing_months_crosses_year_boundary():
    assert trailing_months(date(2025, 1, 10), 3) == ["November 2024", "December 2024", "January 2025"]
    assert trailing_months(date(2025, 1, 10), 0) == []


def test_months_of_year_and_sort_months():
    months = months_of_year(2025)
    assert len(months) == 12
    assert months[0] == "January 2025"
    assert months[-1] == "December 2025"

    assert sort_months(["March 2025", "Feb 2025", "December 2024", "January 2025"]) == [
        "December 2024", "January 2025", "March 2025"
    ]


def test_from_document_defaults_missing_fields():
    record = SalesRecord.from_document({})

    assert record.seller == "Unknown"
    assert record.month == ""
    assert record.mrc == 0.0
    assert record.gaap == 0.0
    assert record.type == ""
    assert record.id is None
    assert record.month_key is None
    assert record.product_class == "wireless"


def test_from_document_reads_source_fields():
    record = SalesRecord.from_document({
        'id': 'abc', 'Seller': '', 'Month': 'May 2025', 'MRC': '75', 'Type': 'Wireline New',
        'GAAP': 900, 'Customer': 'Acme', 'Notes': 'rush',
    })

    assert record.id == 'abc'
    assert record.seller == "Unknown"
    assert record.mrc == 75.0
    assert record.effective_mrc == 75.0
    assert record.product_class == "wireline"
    assert record.month_key == (2025, 4)
    assert record.customer == 'Acme'


def test_normalize_records_flags_invalid_months(sales_df):
    assert len(sales_df) == 8
    assert list(sales_df.index) == list(range(8))
    assert sales_df['month_valid'].tolist() == [True] * 6 + [False, True]
    assert sales_df.loc[1, 'effective_mrc'] == 15.0
    assert sales_df.loc[1, 'mrc'] == 50.0
    assert sales_df.loc[7, 'seller'] == "Unknown"


def test_normalize_records_empty():
    df = normalize_records([])

    assert df.empty
    assert 'effective_mrc' in df.columns
    assert 'month_valid' in df.columns


def test_normalize_records_accepts_sales_records():
    df = normalize_records([SalesRecord(seller='Zed', month='June 2025', mrc=10, type='Mobility')])
    assert df.loc[0, 'month_ordinal'] == 2025 * 12 + 5


def test_new_records_diff(sample_docs):
    fresh = new_records({'1', '2', '3'}, sample_docs)

    assert [r.id for r in fresh] == ['4', '5', '6', '7', '8']
    assert all(isinstance(r, SalesRecord) for r in fresh)


def test_new_records_ignores_records_without_id():
    docs = [{'Seller': 'A', 'Month': 'May 2025', 'MRC': 1}]
    assert new_records(set(), docs) == []
    assert record_ids(docs) == set()


def test_record_ids(sample_docs):
    assert record_ids(sample_docs) == {str(i) for i in range(1, 9)}
