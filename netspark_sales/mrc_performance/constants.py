# netspark_sales/mrc_performance/constants.py
"""
Constants for MRC Performance Module

Centralized configuration for:
- Role definitions
- Month naming
- Business rules (upgrade override, product classes)
- Sort options per view
- Color schemes and chart settings
"""

# =====================================================================
# ROLE DEFINITIONS
# =====================================================================

ROLE_EXECUTIVE = 'executive'
ROLE_MANAGER = 'manager'
ROLE_SELLER = 'seller'
ROLE_NONE = 'none'

# Which roles may open which dashboard
TEAM_ACCESS_ROLES = [ROLE_SELLER, ROLE_MANAGER, ROLE_EXECUTIVE]
MANAGEMENT_ACCESS_ROLES = [ROLE_MANAGER, ROLE_EXECUTIVE]
EXECUTIVE_ACCESS_ROLES = [ROLE_EXECUTIVE]

DEFAULT_ALLOWED_DOMAIN = "@netsparktelecom.com"

# =====================================================================
# MONTH NAMING
# =====================================================================

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
]

MONTH_INDEX = {name: idx for idx, name in enumerate(MONTH_NAMES)}

# =====================================================================
# BUSINESS RULES
# =====================================================================

# "Upgrade" rows count as a flat MRC regardless of recorded value
UPGRADE_KEYWORD = "upgrade"
UPGRADE_MRC = 15.0

WIRELINE = 'wireline'
WIRELESS = 'wireless'

UNKNOWN_SELLER = "Unknown"

# =====================================================================
# NORMALIZED RECORD COLUMNS
# =====================================================================

RECORD_COLUMNS = [
    'id', 'seller', 'month', 'mrc', 'type', 'gaap', 'customer', 'notes',
    'effective_mrc', 'effective_gaap', 'product_class',
    'month_valid', 'year', 'month_index', 'month_ordinal',
]

BUCKET_COLUMNS = [WIRELINE, WIRELESS, 'total']

# =====================================================================
# SORT OPTIONS
# =====================================================================

# key -> (column, ascending)
SELLER_SORT_OPTIONS = {
    'total': ('total', False),
    'wireline': ('wireline', False),
    'wireless': ('wireless', False),
    'seller': ('seller', True),
}

SELLER_SORT_LABELS = {
    'total': "Total MRC (High → Low)",
    'wireline': "Wireline MRC (High → Low)",
    'wireless': "Wireless MRC (High → Low)",
    'seller': "Seller Name (A → Z)",
}

SALES_LIST_SORT_OPTIONS = ['month', 'seller', 'mrc', 'wireline', 'wireless']

SALES_LIST_SORT_LABELS = {
    'month': "Month (Oldest → Newest)",
    'seller': "Seller (A → Z)",
    'mrc': "MRC (High → Low)",
    'wireline': "Wireline MRC (High → Low)",
    'wireless': "Wireless MRC (High → Low)",
}

# key -> column
QUOTA_SORT_OPTIONS = {
    'name': 'representative',
    'mrc': 'current_mrc',
    'progress': 'progress_percent',
}

QUOTA_SORT_LABELS = {
    ('name', True): "Seller Name (A → Z)",
    ('name', False): "Seller Name (Z → A)",
    ('mrc', True): "Current MRC (Low → High)",
    ('mrc', False): "Current MRC (High → Low)",
    ('progress', True): "Progress % (Low → High)",
    ('progress', False): "Progress % (High → Low)",
}

# =====================================================================
# PAGING & WINDOWS
# =====================================================================

SALES_PAGE_SIZE = 50
ROLLING_WINDOW_MONTHS = 3
RECENT_SALES_LIMIT = 20

# =====================================================================
# EXPORT SETTINGS
# =====================================================================

CSV_HEADER = ["Month", "Seller", "MRC", "Type"]
CSV_FILE_NAME = "individual_sales.csv"

EXCEL_STYLES = {
    "header_fill_color": "1f77b4",
    "header_font_color": "FFFFFF",
    "currency_format": '"$"#,##0.00',
}

# =====================================================================
# COLOR SCHEME
# =====================================================================

COLORS = {
    WIRELINE: "#4a90e2",        # Blue
    WIRELESS: "#ff6f32",        # Orange
    "total": "#2ca02c",         # Green

    # Quota attainment bands
    "attainment_low": "#dc3545",     # Red (<50%)
    "attainment_mid": "#ff6f32",     # Orange (50-99%)
    "attainment_good": "#28a745",    # Green (≥100%)
    "quota": "#4a90e2",

    "text_dark": "#333333",
    "grid": "#e0e0e0",
}

# =====================================================================
# CHART DIMENSIONS
# =====================================================================

CHART_HEIGHT = 340
PIE_CHART_WIDTH = 400
PIE_CHART_HEIGHT = 300

# =====================================================================
# CACHE SETTINGS
# =====================================================================

CACHE_TTL_SECONDS = 300
