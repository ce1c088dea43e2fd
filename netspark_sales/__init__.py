# netspark_sales/__init__.py
"""
Shared Utilities Package for the MRC Sales Dashboards

This package contains common utilities shared across all pages:
- auth: Firebase sign-in and session management
- config: Configuration management (local + Streamlit Cloud)
- firestore: Firestore client management

Usage:
    from netspark_sales.auth import AuthManager
    from netspark_sales.firestore import check_firestore_connection
    from netspark_sales.config import config

    # Or import commonly used items directly
    from netspark_sales import AuthManager, config
"""

# Configuration
from .config import (
    config,
    Config,
    IS_RUNNING_ON_CLOUD,
    FIREBASE_CONFIG,
    APP_CONFIG,
)

# Firestore
from .firestore import (
    get_firestore_client,
    check_firestore_connection,
    fetch_collection,
)

# Authentication
from .auth import (
    AuthManager,
    FirebaseAuthError,
)

__all__ = [
    # Config
    'config',
    'Config',
    'IS_RUNNING_ON_CLOUD',
    'FIREBASE_CONFIG',
    'APP_CONFIG',

    # Firestore
    'get_firestore_client',
    'check_firestore_connection',
    'fetch_collection',

    # Auth
    'AuthManager',
    'FirebaseAuthError',
]

__version__ = '1.0.0'
