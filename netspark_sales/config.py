# netspark_sales/config.py
"""
Centralized Configuration Management

Version: 1.0.0
Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Type-safe getters with defaults
- Injected access lists and quota table locations
"""

import os
import json
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field

# Initialize logger
logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_QUOTA_TABLE_PATH = PROJECT_ROOT / "data" / "monthly_quotas.csv"
DEFAULT_ROLE_LISTS_PATH = PROJECT_ROOT / "data" / "access_roles.json"


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


def _split_emails(raw: Optional[str]) -> List[str]:
    """Split a comma separated env value into trimmed, lowercased emails."""
    if not raw:
        return []
    return [e.strip().lower() for e in raw.split(",") if e.strip()]


@dataclass
class FirebaseConfig:
    """Firebase / Firestore configuration container"""
    api_key: Optional[str] = None
    project_id: Optional[str] = None
    collection: str = "combined_sales_mrc"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'api_key': self.api_key,
            'project_id': self.project_id,
            'collection': self.collection
        }

    def is_configured(self) -> bool:
        return bool(self.api_key and self.project_id)


@dataclass
class AccessConfig:
    """Allowed domain and role allow-lists"""
    allowed_domain: str = "@netsparktelecom.com"
    executive_emails: List[str] = field(default_factory=list)
    manager_emails: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'allowed_domain': self.allowed_domain,
            'executive_emails': list(self.executive_emails),
            'manager_emails': list(self.manager_emails)
        }


def load_role_lists(path: Path) -> Dict[str, List[str]]:
    """
    Load executive/manager allow-lists from a JSON file.

    Expected shape: {"executive": [...], "manager": [...]}
    Missing or unreadable files yield empty lists.
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning(f"Role list file not found: {path}")
        return {'executive': [], 'manager': []}
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read role list file {path}: {e}")
        return {'executive': [], 'manager': []}

    return {
        'executive': [str(e).strip().lower() for e in data.get('executive', [])],
        'manager': [str(e).strip().lower() for e in data.get('manager', [])],
    }


class Config:
    """
    Centralized configuration management

    Usage:
        from netspark_sales.config import config

        # Firebase settings
        firebase = config.get_firebase_config()

        # Role allow-lists
        access = config.get_access_config()

        # App settings
        timeout = config.get_app_setting("SESSION_TIMEOUT_HOURS", 8)

        # Feature flags
        if config.is_feature_enabled("NEW_SALE_TOASTS"):
            ...
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        # Firebase
        fb_secrets = st.secrets.get("FIREBASE", {})
        self._firebase_config = FirebaseConfig(
            api_key=fb_secrets.get("API_KEY"),
            project_id=fb_secrets.get("PROJECT_ID"),
            collection=fb_secrets.get("SALES_COLLECTION", "combined_sales_mrc")
        )

        # Access lists
        access_secrets = st.secrets.get("ACCESS", {})
        role_lists = self._resolve_role_lists(
            access_secrets.get("EXECUTIVE_EMAILS"),
            access_secrets.get("MANAGER_EMAILS"),
            access_secrets.get("ROLE_LISTS_PATH")
        )
        self._access_config = AccessConfig(
            allowed_domain=access_secrets.get("ALLOWED_EMAIL_DOMAIN", "@netsparktelecom.com"),
            executive_emails=role_lists['executive'],
            manager_emails=role_lists['manager']
        )

        # Data tables
        data_secrets = st.secrets.get("DATA", {})
        self._quota_table_path = Path(
            data_secrets.get("QUOTA_TABLE_PATH", DEFAULT_QUOTA_TABLE_PATH)
        )

        # Google Cloud
        self._google_service_account = dict(st.secrets.get("gcp_service_account", {}))

        logger.info("☁️ Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local .env file"""
        # Find and load .env file
        env_paths = [
            Path.cwd() / ".env",
            PROJECT_ROOT / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        # Firebase
        self._firebase_config = FirebaseConfig(
            api_key=os.getenv("FIREBASE_API_KEY"),
            project_id=os.getenv("FIREBASE_PROJECT_ID"),
            collection=os.getenv("SALES_COLLECTION", "combined_sales_mrc")
        )

        if not self._firebase_config.is_configured():
            logger.warning("Firebase configuration incomplete. Check FIREBASE_API_KEY / FIREBASE_PROJECT_ID in .env")

        # Access lists
        role_lists = self._resolve_role_lists(
            os.getenv("EXECUTIVE_EMAILS"),
            os.getenv("MANAGER_EMAILS"),
            os.getenv("ROLE_LISTS_PATH")
        )
        self._access_config = AccessConfig(
            allowed_domain=os.getenv("ALLOWED_EMAIL_DOMAIN", "@netsparktelecom.com"),
            executive_emails=role_lists['executive'],
            manager_emails=role_lists['manager']
        )

        # Data tables
        self._quota_table_path = Path(
            os.getenv("QUOTA_TABLE_PATH", str(DEFAULT_QUOTA_TABLE_PATH))
        )

        # Google Cloud
        self._google_service_account = {}
        credentials_path = os.getenv("GOOGLE_CREDENTIALS_PATH", "credentials.json")
        if os.path.exists(credentials_path):
            try:
                with open(credentials_path, "r") as f:
                    self._google_service_account = json.load(f)
            except Exception as e:
                logger.warning(f"Could not load Google credentials: {e}")

        logger.info("💻 Running in LOCAL environment")

    def _resolve_role_lists(
        self,
        executive_raw: Any,
        manager_raw: Any,
        path: Optional[str]
    ) -> Dict[str, List[str]]:
        """Explicit lists win; otherwise fall back to the JSON file."""
        if executive_raw or manager_raw:
            return {
                'executive': self._as_email_list(executive_raw),
                'manager': self._as_email_list(manager_raw),
            }
        return load_role_lists(Path(path) if path else DEFAULT_ROLE_LISTS_PATH)

    @staticmethod
    def _as_email_list(raw: Any) -> List[str]:
        # secrets.toml gives lists, .env gives comma separated strings
        if isinstance(raw, (list, tuple)):
            return [str(e).strip().lower() for e in raw if str(e).strip()]
        return _split_emails(raw)

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Session
            "SESSION_TIMEOUT_HOURS": int(os.getenv("SESSION_TIMEOUT_HOURS", "8")),

            # Dashboard behaviour
            "SALES_PAGE_SIZE": int(os.getenv("SALES_PAGE_SIZE", "50")),
            "ROLLING_WINDOW_MONTHS": int(os.getenv("ROLLING_WINDOW_MONTHS", "3")),

            # Cache
            "CACHE_TTL_SECONDS": int(os.getenv("CACHE_TTL_SECONDS", "300")),

            # HTTP
            "AUTH_TIMEOUT_SECONDS": int(os.getenv("AUTH_TIMEOUT_SECONDS", "10")),

            # Feature flags
            "ENABLE_NEW_SALE_TOASTS": os.getenv("ENABLE_NEW_SALE_TOASTS", "true").lower() == "true",
            "ENABLE_EXCEL_EXPORT": os.getenv("ENABLE_EXCEL_EXPORT", "true").lower() == "true",
            "ENABLE_DEBUG_MODE": os.getenv("ENABLE_DEBUG_MODE", "false").lower() == "true",
        }

    def _log_config_status(self):
        """Log configuration status"""
        fb = self._firebase_config
        logger.info(f"✅ Firebase: {'Configured' if fb.is_configured() else 'Not configured'} (collection={fb.collection})")
        logger.info(f"✅ Access lists: {len(self._access_config.executive_emails)} executives, "
                    f"{len(self._access_config.manager_emails)} managers")
        logger.info(f"✅ Quota table: {self._quota_table_path}")
        logger.info(f"✅ Google: {'Loaded' if self._google_service_account else 'Not configured'}")

    # ==================== PUBLIC GETTERS ====================

    def get_firebase_config(self) -> Dict[str, Any]:
        """Get Firebase configuration as dictionary"""
        return self._firebase_config.to_dict()

    def get_access_config(self) -> Dict[str, Any]:
        """Get allowed domain and role allow-lists"""
        return self._access_config.to_dict()

    def get_quota_table_path(self) -> Path:
        """Get location of the monthly quota table"""
        return self._quota_table_path

    def get_google_service_account(self) -> Dict[str, Any]:
        """Get Google service account configuration"""
        return self._google_service_account.copy()

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)

    def is_feature_enabled(self, feature: str) -> bool:
        """Check if feature is enabled"""
        key = f"ENABLE_{feature.upper()}"
        return self._app_config.get(key, True)

    # ==================== PROPERTIES ====================

    @property
    def firebase_config(self) -> Dict[str, Any]:
        return self.get_firebase_config()

    @property
    def app_config(self) -> Dict[str, Any]:
        return self._app_config.copy()


# ==================== SINGLETON INSTANCE ====================

config = Config()

IS_RUNNING_ON_CLOUD = config.is_cloud
FIREBASE_CONFIG = config.firebase_config
APP_CONFIG = config.app_config

__all__ = [
    'config',
    'Config',
    'load_role_lists',
    'IS_RUNNING_ON_CLOUD',
    'FIREBASE_CONFIG',
    'APP_CONFIG',
]
