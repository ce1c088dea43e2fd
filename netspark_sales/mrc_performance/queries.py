# netspark_sales/mrc_performance/queries.py
"""
Data Loading for MRC Performance

Handles all reads the dashboards need:
- Sales records from the Firestore sales collection
- Monthly quota table (injected CSV)

Uses @st.cache_data for the remote fetch and for the normalized frame built
from it, both keyed on the collection. The view builders never fetch.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd
import streamlit as st
from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions

from netspark_sales.config import config
from netspark_sales.firestore import fetch_collection
from .access_control import AccessControl
from .constants import CACHE_TTL_SECONDS
from .records import empty_sales_frame, normalize_records

logger = logging.getLogger(__name__)

QUOTA_COLUMNS = ['representative', 'monthly_quota']


class DataLoadError(Exception):
    """Raised when the record source cannot be read."""


def load_quota_table(source: Union[str, Path, pd.DataFrame]) -> pd.DataFrame:
    """
    Load representative -> monthly quota.

    Args:
        source: CSV path with representative,monthly_quota columns, or an
            already-built DataFrame

    Returns:
        DataFrame with representative (str) and monthly_quota (float);
        empty when the file is missing
    """
    if isinstance(source, pd.DataFrame):
        table = source.copy()
    else:
        try:
            table = pd.read_csv(source)
        except FileNotFoundError:
            logger.warning(f"Quota table not found: {source}")
            return pd.DataFrame(columns=QUOTA_COLUMNS).astype({'monthly_quota': 'float64'})

    missing = [c for c in QUOTA_COLUMNS if c not in table.columns]
    if missing:
        raise ValueError(f"Quota table missing columns: {', '.join(missing)}")

    table = table[QUOTA_COLUMNS].copy()
    table['representative'] = table['representative'].astype(str).str.strip()
    table['monthly_quota'] = pd.to_numeric(table['monthly_quota'], errors='coerce').fillna(0.0)

    logger.info(f"Loaded {len(table)} quota rows")
    return table.reset_index(drop=True)


class SalesQueries:
    """
    Data loading class for the MRC dashboards.

    Usage:
        access = AccessControl(user_role, user_email)
        queries = SalesQueries(access, collection="combined_sales_mrc")

        records = queries.get_sales_records()
        sales_df = queries.get_sales_frame()
    """

    def __init__(self, access_control: AccessControl, collection: str):
        """
        Initialize with access control.

        Args:
            access_control: AccessControl instance for role checks
            collection: Firestore collection holding sales documents
        """
        self.access = access_control
        self.collection = collection

    # =========================================================================
    # SALES RECORDS
    # =========================================================================

    def get_sales_records(self) -> List[Dict[str, Any]]:
        """
        Fetch the full sales snapshot (cached).

        Returns:
            Raw documents (id + source fields)

        Raises:
            DataLoadError: record source unreachable
        """
        if not self.access.can_view_team():
            logger.warning(f"Role '{self.access.user_role}' may not read sales data")
            return []

        try:
            return _fetch_sales_documents_cached(self.collection)
        except (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError, ValueError) as e:
            logger.error(f"Error fetching sales records from '{self.collection}': {e}")
            raise DataLoadError("Failed to fetch sales data. Please try again later.") from e

    def get_sales_frame(self) -> pd.DataFrame:
        """
        Normalized sales frame for the view builders (cached per snapshot).

        Returns:
            DataFrame from normalize_records(); empty for role 'none'

        Raises:
            DataLoadError: record source unreachable
        """
        if not self.access.can_view_team():
            logger.warning(f"Role '{self.access.user_role}' may not read sales data")
            return empty_sales_frame()

        try:
            return _load_sales_frame_cached(self.collection)
        except (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError, ValueError) as e:
            logger.error(f"Error loading sales frame from '{self.collection}': {e}")
            raise DataLoadError("Failed to fetch sales data. Please try again later.") from e

    @staticmethod
    def refresh():
        """Drop cached snapshots so the next read hits Firestore."""
        _fetch_sales_documents_cached.clear()
        _load_sales_frame_cached.clear()
        logger.info("Sales snapshot cache cleared")

    # =========================================================================
    # QUOTAS
    # =========================================================================

    def get_quota_table(self, path: Union[str, Path]) -> pd.DataFrame:
        if not self.access.can_view_management():
            return pd.DataFrame(columns=QUOTA_COLUMNS)
        return _load_quota_table_cached(str(path))


# =============================================================================
# CACHED QUERY FUNCTIONS (Module-level for st.cache_data)
# =============================================================================

SNAPSHOT_TTL = config.get_app_setting("CACHE_TTL_SECONDS", CACHE_TTL_SECONDS)


@st.cache_data(ttl=SNAPSHOT_TTL, show_spinner="Loading sales data...")
def _fetch_sales_documents_cached(collection: str) -> List[Dict[str, Any]]:
    return fetch_collection(collection)


@st.cache_data(ttl=SNAPSHOT_TTL)
def _load_quota_table_cached(path: str) -> pd.DataFrame:
    return load_quota_table(path)


@st.cache_data(ttl=SNAPSHOT_TTL)
def _load_sales_frame_cached(collection: str) -> pd.DataFrame:
    return normalize_records(_fetch_sales_documents_cached(collection))
