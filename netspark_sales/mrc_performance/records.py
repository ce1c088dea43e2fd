# netspark_sales/mrc_performance/records.py
"""
Sales Record Normalization

Ingestion boundary for raw Firestore documents:
- SalesRecord value object with every field defaulted
- Money normalizer (upgrade override)
- Product class classifier (wireline / wireless)
- Chronological month keys and month windows
- Conversion to the normalized DataFrame every view builder consumes

Nothing downstream of normalize_records() re-checks field presence.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

import pandas as pd

from .constants import (
    MONTH_NAMES, MONTH_INDEX, UPGRADE_KEYWORD, UPGRADE_MRC,
    WIRELINE, WIRELESS, UNKNOWN_SELLER, RECORD_COLUMNS,
)

logger = logging.getLogger(__name__)

MonthKey = Tuple[int, int]


# =============================================================================
# MONEY NORMALIZER
# =============================================================================

def to_amount(value: Any) -> float:
    """Coerce a raw monetary value to float; absent, NaN or garbage -> 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if pd.isna(amount):
        return 0.0
    return amount


def is_upgrade(sale_type: Optional[str]) -> bool:
    return UPGRADE_KEYWORD in (sale_type or "").lower()


def effective_mrc(amount: Any, sale_type: Optional[str]) -> float:
    """
    MRC that counts toward every aggregation.

    Upgrades are worth a flat $15 whatever was recorded (including zero,
    negative or missing amounts). Everything else counts its recorded MRC.
    """
    if is_upgrade(sale_type):
        return UPGRADE_MRC
    return to_amount(amount)


# =============================================================================
# TYPE CLASSIFIER
# =============================================================================

def classify_sale_type(sale_type: Optional[str]) -> str:
    """'wireline' when the type mentions wireline, otherwise 'wireless'."""
    if WIRELINE in (sale_type or "").lower():
        return WIRELINE
    return WIRELESS


# =============================================================================
# CHRONOLOGICAL KEY
# =============================================================================

def month_sort_key(month: Any) -> Optional[MonthKey]:
    """
    Parse "March 2025" into (2025, 2).

    Returns None for anything that is not exactly "<FullMonthName> <YYYY>";
    callers drop those rows from month-keyed views.
    """
    if not isinstance(month, str):
        return None

    parts = month.split(" ")
    if len(parts) != 2:
        return None

    name, year = parts
    if name not in MONTH_INDEX:
        return None
    if len(year) != 4 or not (year.isascii() and year.isdigit()):
        return None

    return int(year), MONTH_INDEX[name]


def month_label(year: int, month_index: int) -> str:
    """(2025, 2) -> "March 2025"."""
    return f"{MONTH_NAMES[month_index]} {year}"


def month_of(reference_date: date) -> str:
    """Month label containing the reference date."""
    return month_label(reference_date.year, reference_date.month - 1)


def months_of_year(year: int) -> List[str]:
    """All twelve month labels of a calendar year, January first."""
    return [month_label(year, idx) for idx in range(12)]


def trailing_months(reference_date: date, window_size: int) -> List[str]:
    """
    The window_size months ending at the reference month, oldest first.

    trailing_months(date(2025, 3, 15), 3) -> January, February, March 2025
    """
    if window_size <= 0:
        return []

    ordinal = reference_date.year * 12 + (reference_date.month - 1)
    months = []
    for offset in range(window_size - 1, -1, -1):
        year, month_index = divmod(ordinal - offset, 12)
        months.append(month_label(year, month_index))
    return months


def sort_months(months: Iterable[str]) -> List[str]:
    """Valid month labels in chronological order; invalid labels dropped."""
    keyed = [(month_sort_key(m), m) for m in months]
    return [m for key, m in sorted((k, m) for k, m in keyed if k is not None)]


# =============================================================================
# SALES RECORD
# =============================================================================

def _first_present(doc: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in doc and doc[name] is not None:
            return doc[name]
    return None


@dataclass(frozen=True)
class SalesRecord:
    """
    Fully defaulted sales record.

    Attributes:
        id: Document id (None for ad-hoc records)
        seller: Seller name or handle, "Unknown" when absent
        month: "<FullMonthName> <YYYY>" as recorded (may be malformed)
        mrc: Recorded MRC, 0 when absent
        type: Free-text sale type, "" when absent
        gaap: Recorded GAAP value, 0 when absent
        customer: Display only
        notes: Display only
    """
    id: Optional[str] = None
    seller: str = UNKNOWN_SELLER
    month: str = ""
    mrc: float = 0.0
    type: str = ""
    gaap: float = 0.0
    customer: str = ""
    notes: str = ""

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> 'SalesRecord':
        """Build from a raw document using the source field names (Seller, MRC, ...)."""
        seller = _first_present(doc, 'Seller', 'seller')
        if seller is None or seller == "":
            seller = UNKNOWN_SELLER

        month = _first_present(doc, 'Month', 'month')
        sale_type = _first_present(doc, 'Type', 'type')
        customer = _first_present(doc, 'Customer', 'customer')
        notes = _first_present(doc, 'Notes', 'notes')
        doc_id = _first_present(doc, 'id')

        return cls(
            id=str(doc_id) if doc_id is not None else None,
            seller=str(seller),
            month=month if isinstance(month, str) else "",
            mrc=to_amount(_first_present(doc, 'MRC', 'mrc', 'amount')),
            type=str(sale_type) if sale_type is not None else "",
            gaap=to_amount(_first_present(doc, 'GAAP', 'gaap')),
            customer=str(customer) if customer is not None else "",
            notes=str(notes) if notes is not None else "",
        )

    @property
    def effective_mrc(self) -> float:
        return effective_mrc(self.mrc, self.type)

    @property
    def product_class(self) -> str:
        return classify_sale_type(self.type)

    @property
    def month_key(self) -> Optional[MonthKey]:
        return month_sort_key(self.month)

    def to_row(self) -> Dict[str, Any]:
        """Flatten into a normalized DataFrame row."""
        key = self.month_key
        return {
            'id': self.id,
            'seller': self.seller,
            'month': self.month,
            'mrc': self.mrc,
            'type': self.type,
            'gaap': self.gaap,
            'customer': self.customer,
            'notes': self.notes,
            'effective_mrc': self.effective_mrc,
            # Override is an MRC rule; GAAP keeps its recorded value
            'effective_gaap': self.gaap,
            'product_class': self.product_class,
            'month_valid': key is not None,
            'year': key[0] if key else None,
            'month_index': key[1] if key else None,
            'month_ordinal': key[0] * 12 + key[1] if key else None,
        }


RecordLike = Union[SalesRecord, Mapping[str, Any]]


def to_sales_record(item: RecordLike) -> SalesRecord:
    if isinstance(item, SalesRecord):
        return item
    return SalesRecord.from_document(item)


# =============================================================================
# NORMALIZED DATAFRAME
# =============================================================================

_COLUMN_DTYPES = {
    'mrc': 'float64',
    'gaap': 'float64',
    'effective_mrc': 'float64',
    'effective_gaap': 'float64',
    'month_valid': 'bool',
    'year': 'Int64',
    'month_index': 'Int64',
    'month_ordinal': 'Int64',
}


def empty_sales_frame() -> pd.DataFrame:
    """Normalized frame with every column and no rows."""
    return pd.DataFrame(columns=RECORD_COLUMNS).astype(_COLUMN_DTYPES)


def normalize_records(records: Iterable[RecordLike]) -> pd.DataFrame:
    """
    Normalize raw documents (or SalesRecords) into the engine's DataFrame.

    Row order follows input order; it drives every tie-break downstream.

    Args:
        records: Raw Firestore dicts or SalesRecord instances

    Returns:
        DataFrame with RECORD_COLUMNS and a 0..n-1 RangeIndex
    """
    rows = [to_sales_record(item).to_row() for item in records]

    if not rows:
        return empty_sales_frame()

    df = pd.DataFrame(rows, columns=RECORD_COLUMNS).astype(_COLUMN_DTYPES)

    invalid = int((~df['month_valid']).sum())
    if invalid:
        logger.info(f"{invalid} of {len(df)} sales records have a malformed month and are excluded from month views")

    return df


# =============================================================================
# NEW RECORD DETECTION
# =============================================================================

def record_ids(records: Iterable[RecordLike]) -> Set[str]:
    return {r.id for r in map(to_sales_record, records) if r.id is not None}


def new_records(
    previous_ids: Set[str],
    records: Iterable[RecordLike]
) -> List[SalesRecord]:
    """
    Records whose id was not seen in the previous snapshot.

    Args:
        previous_ids: Ids from the previous fetch
        records: Current snapshot

    Returns:
        New SalesRecords in snapshot order
    """
    fresh = []
    for item in records:
        record = to_sales_record(item)
        if record.id is not None and record.id not in previous_ids:
            fresh.append(record)
    return fresh
