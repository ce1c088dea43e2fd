# netspark_sales/mrc_performance/access_control.py
"""
Role-based Access Control for MRC Performance

Resolves a role from the signed-in email and decides what data a user sees:
- executive: team, management and executive (GAAP) dashboards
- manager: team and management dashboards
- seller: team dashboard + own sales on the landing page
- none: nothing

Allow-lists are injected (config / JSON file), never hard-coded here.
"""

import logging
from typing import Iterable, List, Optional

import pandas as pd

from .constants import (
    ROLE_EXECUTIVE, ROLE_MANAGER, ROLE_SELLER, ROLE_NONE,
    TEAM_ACCESS_ROLES, MANAGEMENT_ACCESS_ROLES, EXECUTIVE_ACCESS_ROLES,
    DEFAULT_ALLOWED_DOMAIN,
)

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    if not email or not isinstance(email, str):
        return ''
    return email.strip().lower()


def seller_name_from_email(email: str) -> str:
    """
    Seller name a record would carry for this user.

    "jane.doe@netsparktelecom.com" -> "jane doe"
    """
    local_part = normalize_email(email).split('@')[0]
    return local_part.replace('.', ' ')


class RoleResolver:
    """
    Pure email -> role lookup.

    Usage:
        resolver = RoleResolver(
            executive_emails=access['executive_emails'],
            manager_emails=access['manager_emails'],
            allowed_domain=access['allowed_domain']
        )
        role = resolver.role_of("jane.doe@netsparktelecom.com")  # 'seller'
    """

    def __init__(
        self,
        executive_emails: Iterable[str] = (),
        manager_emails: Iterable[str] = (),
        allowed_domain: str = DEFAULT_ALLOWED_DOMAIN
    ):
        self.executive_emails = {normalize_email(e) for e in executive_emails if normalize_email(e)}
        self.manager_emails = {normalize_email(e) for e in manager_emails if normalize_email(e)}
        self.allowed_domain = allowed_domain.strip().lower()

    def is_allowed_domain(self, email: Optional[str]) -> bool:
        return normalize_email(email).endswith(self.allowed_domain)

    def role_of(self, email: Optional[str]) -> str:
        """
        Resolve role for an email.

        Returns:
            'executive', 'manager', 'seller' or 'none'
        """
        normalized = normalize_email(email)
        if not normalized:
            return ROLE_NONE

        if normalized in self.executive_emails:
            return ROLE_EXECUTIVE
        if normalized in self.manager_emails:
            return ROLE_MANAGER
        if normalized.endswith(self.allowed_domain):
            return ROLE_SELLER
        return ROLE_NONE

    def __repr__(self) -> str:
        return (
            f"RoleResolver(executives={len(self.executive_emails)}, "
            f"managers={len(self.manager_emails)}, domain='{self.allowed_domain}')"
        )


class AccessControl:
    """
    Decide which dashboards and rows a signed-in user may see.

    Usage:
        access = AccessControl(
            user_role=st.session_state.user_role,
            user_email=st.session_state.user_email
        )

        if access.can_view_management():
            ...

        my_sales = access.filter_own_sales(sales_df)
    """

    def __init__(self, user_role: str, user_email: str):
        """
        Initialize access control.

        Args:
            user_role: Role from RoleResolver
            user_email: Signed-in email
        """
        self.user_role = user_role.lower() if user_role else ROLE_NONE
        self.user_email = normalize_email(user_email)

        logger.info(f"AccessControl initialized: role={self.user_role}, email={self.user_email}")

    # =========================================================================
    # DASHBOARD ACCESS
    # =========================================================================

    def can_view_team(self) -> bool:
        return self.user_role in TEAM_ACCESS_ROLES

    def can_view_management(self) -> bool:
        return self.user_role in MANAGEMENT_ACCESS_ROLES

    def can_view_executive(self) -> bool:
        return self.user_role in EXECUTIVE_ACCESS_ROLES

    def get_navigation(self) -> List[str]:
        """Dashboards this user may open, in menu order."""
        pages = []
        if self.can_view_team():
            pages.append('team')
        if self.can_view_management():
            pages.append('management')
        if self.can_view_executive():
            pages.append('executive')
        return pages

    # =========================================================================
    # DATA FILTERING
    # =========================================================================

    def seller_identities(self) -> List[str]:
        """Lowercased seller values that belong to this user."""
        if not self.user_email:
            return []
        return [seller_name_from_email(self.user_email), self.user_email]

    def filter_own_sales(
        self,
        df: pd.DataFrame,
        seller_col: str = 'seller'
    ) -> pd.DataFrame:
        """
        Rows whose seller is the signed-in user.

        Matches the email local part with dots as spaces, or the full
        email, case-insensitively.

        Args:
            df: Normalized sales frame
            seller_col: Column holding seller names

        Returns:
            Filtered DataFrame
        """
        if df.empty:
            return df

        identities = self.seller_identities()
        if not identities:
            logger.warning("No user email for seller scoping, returning empty DataFrame")
            return df.head(0)

        filtered = df[df[seller_col].astype(str).str.lower().isin(identities)]
        logger.debug(f"Seller scope for {self.user_email}: {len(df)} -> {len(filtered)} rows")

        return filtered

    def __repr__(self) -> str:
        return (
            f"AccessControl(role='{self.user_role}', "
            f"email='{self.user_email}')"
        )
