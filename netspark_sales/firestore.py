# netspark_sales/firestore.py
"""
Firestore Client Management

Version: 1.0.0
Features:
- Singleton client with thread-safe double-checked locking
- Service account credentials from config (secrets or credentials.json)
- Health check utility
- Read-only collection fetch helper
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore
from google.oauth2 import service_account

from .config import config

logger = logging.getLogger(__name__)

# ==================== SINGLETON CLIENT ====================

_client = None
_client_lock = threading.Lock()


def get_firestore_client() -> firestore.Client:
    """
    Get Firestore client (singleton pattern)

    Thread-safe implementation using double-checked locking.

    Returns:
        google.cloud.firestore.Client instance
    """
    global _client

    if _client is None:
        with _client_lock:
            if _client is None:
                _client = _create_client()

    return _client


def _create_client() -> firestore.Client:
    """Create new Firestore client with configured credentials"""
    firebase_config = config.get_firebase_config()
    service_account_info = config.get_google_service_account()

    project_id = firebase_config.get('project_id') or service_account_info.get('project_id')
    if not project_id:
        raise ValueError("Missing Firebase project id. Set FIREBASE_PROJECT_ID or provide a service account.")

    if service_account_info:
        credentials = service_account.Credentials.from_service_account_info(service_account_info)
        logger.info(f"🔌 Creating Firestore client for project {project_id} (service account)")
        return firestore.Client(project=project_id, credentials=credentials)

    logger.info(f"🔌 Creating Firestore client for project {project_id} (default credentials)")
    return firestore.Client(project=project_id)


# ==================== CONNECTION CHECK ====================

def check_firestore_connection() -> Tuple[bool, Optional[str]]:
    """
    Check if the sales collection is reachable

    Returns:
        Tuple of (is_connected: bool, error_message: str or None)
    """
    collection = config.get_firebase_config().get('collection')
    try:
        client = get_firestore_client()
        list(client.collection(collection).limit(1).stream())
        return True, None
    except ValueError as e:
        logger.error(f"❌ Firestore not configured: {e}")
        return False, str(e)
    except auth_exceptions.GoogleAuthError as e:
        logger.error(f"❌ Firestore credentials rejected: {e}")
        return False, "Cannot authenticate to the sales database. Please contact IT support."
    except gcp_exceptions.GoogleAPIError as e:
        logger.error(f"❌ Firestore connection failed: {e}")
        return False, "Cannot reach the sales database. Please check your network connection."


# ==================== QUERY HELPERS ====================

def fetch_collection(name: str) -> List[Dict[str, Any]]:
    """
    Read every document of a collection

    Args:
        name: Collection name

    Returns:
        List of document dicts, each with its document id under 'id'
    """
    client = get_firestore_client()
    docs = [{**(doc.to_dict() or {}), 'id': doc.id} for doc in client.collection(name).stream()]
    logger.info(f"Fetched {len(docs)} documents from '{name}'")
    return docs


# ==================== EXPORTS ====================

__all__ = [
    'get_firestore_client',
    'check_firestore_connection',
    'fetch_collection',
]
