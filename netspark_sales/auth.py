# netspark_sales/auth.py
"""
Authentication Manager for Streamlit Apps

Version: 1.0.0
Features:
- Email/password sign-in through the Firebase Auth REST API
- Corporate domain and verified-email enforcement
- Role resolution from injected allow-lists
- Session management with timeout
"""

import streamlit as st
import requests
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple, List
import logging

from .config import config
from .mrc_performance.access_control import RoleResolver, normalize_email, seller_name_from_email
from .mrc_performance.constants import ROLE_NONE

logger = logging.getLogger(__name__)

FIREBASE_AUTH_URL = "https://identitytoolkit.googleapis.com/v1/accounts"

# Firebase error codes -> message shown on the login form
AUTH_ERROR_MESSAGES = {
    'EMAIL_NOT_FOUND': "Invalid email or password",
    'INVALID_PASSWORD': "Invalid email or password",
    'INVALID_LOGIN_CREDENTIALS': "Invalid email or password",
    'INVALID_EMAIL': "Invalid email or password",
    'USER_DISABLED': "Account is disabled. Please contact administrator.",
    'TOO_MANY_ATTEMPTS_TRY_LATER': "Too many failed attempts. Please try again later.",
}


class FirebaseAuthError(Exception):
    """Error payload returned by the Firebase Auth REST API."""

    def __init__(self, code: str):
        super().__init__(code)
        # "TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled..." -> first token
        self.code = code.split(':')[0].strip()

    @property
    def user_message(self) -> str:
        return AUTH_ERROR_MESSAGES.get(self.code, "Authentication failed. Please try again.")


class AuthManager:
    """Authentication manager for Streamlit apps"""

    def __init__(self, resolver: Optional[RoleResolver] = None, api_key: Optional[str] = None):
        self.session_timeout = timedelta(
            hours=config.get_app_setting("SESSION_TIMEOUT_HOURS", 8)
        )
        self.request_timeout = config.get_app_setting("AUTH_TIMEOUT_SECONDS", 10)
        self.api_key = api_key or config.get_firebase_config().get('api_key')

        if resolver is None:
            access = config.get_access_config()
            resolver = RoleResolver(
                executive_emails=access['executive_emails'],
                manager_emails=access['manager_emails'],
                allowed_domain=access['allowed_domain']
            )
        self.resolver = resolver

    # ==================== FIREBASE REST ====================

    def _post(self, method: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Call an accounts:<method> endpoint

        Raises:
            FirebaseAuthError: API answered with an error payload
            requests.RequestException: network failure
        """
        response = requests.post(
            f"{FIREBASE_AUTH_URL}:{method}",
            params={'key': self.api_key},
            json=body,
            timeout=self.request_timeout
        )

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code != 200:
            code = data.get('error', {}).get('message', f"HTTP_{response.status_code}")
            raise FirebaseAuthError(code)

        return data

    def _is_email_verified(self, id_token: str) -> bool:
        data = self._post("lookup", {'idToken': id_token})
        users = data.get('users', [])
        return bool(users and users[0].get('emailVerified', False))

    # ==================== AUTHENTICATION ====================

    def authenticate(self, email: str, password: str) -> Tuple[bool, Optional[Dict]]:
        """
        Authenticate user against Firebase Auth

        Args:
            email: Corporate email
            password: Plain text password

        Returns:
            Tuple of (success: bool, user_info: dict or error: dict)
        """
        email = normalize_email(email)
        if not email or not password:
            return False, {"error": "Please enter both email and password"}

        if not self.resolver.is_allowed_domain(email):
            logger.warning(f"Login attempt from outside domain: {email}")
            return False, {"error": f"Only {self.resolver.allowed_domain} emails are allowed"}

        if not self.api_key:
            logger.error("Firebase API key missing, cannot authenticate")
            return False, {"error": "Authentication is not configured. Please contact IT support."}

        try:
            session = self._post("signInWithPassword", {
                'email': email,
                'password': password,
                'returnSecureToken': True
            })

            if not self._is_email_verified(session['idToken']):
                logger.warning(f"Login attempt with unverified email: {email}")
                return False, {
                    "error": "Please verify your email address before signing in.",
                    "unverified": True
                }

        except FirebaseAuthError as e:
            logger.warning(f"Firebase rejected login for {email}: {e.code}")
            return False, {"error": e.user_message}
        except requests.RequestException as e:
            logger.error(f"Authentication error: {e}")
            return False, {"error": "Authentication failed. Please try again."}

        role = self.resolver.role_of(email)
        if role == ROLE_NONE:
            logger.warning(f"No role for user: {email}")
            return False, {"error": "Access denied for this account."}

        logger.info(f"User {email} authenticated successfully (role={role})")

        seller_name = seller_name_from_email(email)
        return True, {
            'id': session.get('localId'),
            'email': email,
            'role': role,
            'seller_name': seller_name,
            'full_name': session.get('displayName') or seller_name.title(),
            'login_time': datetime.now()
        }

    # ==================== SESSION MANAGEMENT ====================

    def check_session(self) -> bool:
        """Check if user session is valid and not expired"""
        if not st.session_state.get('authenticated'):
            return False

        login_time = st.session_state.get('login_time')
        if login_time:
            elapsed = datetime.now() - login_time
            if elapsed > self.session_timeout:
                logger.info(f"Session expired for user: {st.session_state.get('user_email')}")
                self.logout()
                return False

        return True

    def login(self, user_info: Dict):
        """Initialize user session after successful authentication"""
        st.session_state.authenticated = True
        st.session_state.user_id = user_info['id']
        st.session_state.user_email = user_info['email']
        st.session_state.user_role = user_info['role']
        st.session_state.user_fullname = user_info['full_name']
        st.session_state.seller_name = user_info['seller_name']
        st.session_state.login_time = user_info['login_time']

        logger.info(f"User {user_info['email']} logged in as {user_info['role']}")

    def logout(self):
        """Clear user session and cache"""
        email = st.session_state.get('user_email', 'Unknown')

        auth_keys = [
            'authenticated', 'user_id', 'user_email', 'user_role',
            'user_fullname', 'seller_name', 'login_time',
            'known_record_ids'
        ]

        for key in auth_keys:
            if key in st.session_state:
                del st.session_state[key]

        st.cache_data.clear()

        logger.info(f"User {email} logged out")

    # ==================== ACCESS CONTROL ====================

    def require_auth(self) -> bool:
        """
        Require authentication to access a page
        Use at the beginning of each protected page
        """
        if not self.check_session():
            st.warning("⚠️ Please login to access this page")
            st.stop()
            return False
        return True

    def require_role(self, allowed_roles: List[str]) -> bool:
        """
        Require specific role(s) to access a page

        Args:
            allowed_roles: List of role names that can access

        Usage:
            auth.require_role(MANAGEMENT_ACCESS_ROLES)
        """
        if not self.require_auth():
            return False

        current_role = st.session_state.get('user_role', '')

        if current_role not in allowed_roles:
            st.error(f"🚫 Access denied. Required role: {', '.join(allowed_roles)}")
            st.stop()
            return False

        return True

    # ==================== USER INFO HELPERS ====================

    def get_user_display_name(self) -> str:
        if st.session_state.get('user_fullname'):
            return st.session_state.user_fullname
        return st.session_state.get('user_email', 'User')


# ==================== MODULE EXPORTS ====================

__all__ = [
    'AuthManager',
    'FirebaseAuthError',
]
