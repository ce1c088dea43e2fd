# netspark_sales/mrc_performance/__init__.py
"""
MRC Performance Module

Aggregation engine and page components for the MRC sales dashboards.
All components are self-contained within this module.

Components:
- records: SalesRecord normalization, month keys, new-record diff
- access_control: Email -> role resolution and seller scoping
- queries: Firestore record fetch and quota table loading
- metrics: Aggregations, rankings, rolling windows, quota attainment
- filters: Filter / sort / paging pipeline and filter widgets
- charts: Altair visualizations
- export: CSV and formatted Excel export

Usage:
    from netspark_sales.mrc_performance import (
        AccessControl,
        SalesQueries,
        MRCMetrics,
        DashboardFilters,
        MRCCharts,
        MRCExport,
        normalize_records,
    )
"""

from .access_control import AccessControl, RoleResolver
from .queries import SalesQueries, DataLoadError, load_quota_table
from .metrics import MRCMetrics, aggregate, rank_sellers
from .filters import DashboardFilters, paginate, filter_and_sort_sellers
from .charts import MRCCharts
from .export import MRCExport, sales_to_csv
from .formatters import format_currency
from .records import (
    SalesRecord,
    normalize_records,
    empty_sales_frame,
    new_records,
    record_ids,
    month_of,
    months_of_year,
    trailing_months,
)

# Constants
from .constants import (
    COLORS,
    MONTH_NAMES,
    UPGRADE_MRC,
    TEAM_ACCESS_ROLES,
    MANAGEMENT_ACCESS_ROLES,
    EXECUTIVE_ACCESS_ROLES,
    CHART_HEIGHT,
)

__all__ = [
    # Classes
    'AccessControl',
    'RoleResolver',
    'SalesQueries',
    'DataLoadError',
    'MRCMetrics',
    'DashboardFilters',
    'MRCCharts',
    'MRCExport',
    'SalesRecord',

    # Functions
    'load_quota_table',
    'aggregate',
    'rank_sellers',
    'paginate',
    'filter_and_sort_sellers',
    'sales_to_csv',
    'format_currency',
    'normalize_records',
    'empty_sales_frame',
    'new_records',
    'record_ids',
    'month_of',
    'months_of_year',
    'trailing_months',

    # Constants
    'COLORS',
    'MONTH_NAMES',
    'UPGRADE_MRC',
    'TEAM_ACCESS_ROLES',
    'MANAGEMENT_ACCESS_ROLES',
    'EXECUTIVE_ACCESS_ROLES',
    'CHART_HEIGHT',
]

__version__ = '1.0.0'
