import pandas as pd
import pytest

from netspark_sales.mrc_performance.metrics import MRCMetrics
from netspark_sales.mrc_performance.records import normalize_records


def make_doc(seller, month, mrc, sale_type, doc_id=None, **extra):
    doc = {'Seller': seller, 'Month': month, 'MRC': mrc, 'Type': sale_type}
    if doc_id is not None:
        doc['id'] = doc_id
    doc.update(extra)
    return doc


@pytest.fixture
def sample_docs():
    # Q1 2025: Jan 115, Feb 280, Mar 340 once the upgrade rule applies
    return [
        make_doc('Alice', 'January 2025', 100, 'Wireline New', '1'),
        make_doc('Alice', 'January 2025', 50, 'Mobility Upgrade', '2'),
        make_doc('Bob', 'February 2025', 200, 'Mobility New', '3'),
        make_doc('Carol', 'February 2025', 80, 'Wireline Renewal', '4'),
        make_doc('Bob', 'March 2025', 40, 'Wireline New', '5'),
        make_doc('Alice', 'March 2025', 300, 'Mobility New', '6', GAAP=1200),
        make_doc('Dan', 'Feb 2025', 999, 'Wireline New', '7'),
        {'id': '8', 'Month': 'March 2025', 'MRC': None, 'Type': 'Mobility New'},
    ]


@pytest.fixture
def sales_df(sample_docs):
    return normalize_records(sample_docs)


@pytest.fixture
def quotas_df():
    return pd.DataFrame({
        'representative': ['Alice', 'Bob', 'Carol'],
        'monthly_quota': [500.0, 100.0, 0.0],
    })


@pytest.fixture
def metrics(sales_df, quotas_df):
    return MRCMetrics(sales_df, quotas_df)
