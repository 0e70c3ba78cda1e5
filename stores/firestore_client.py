import logging
from typing import Any, Dict, Optional

from google.cloud import firestore
from google.oauth2 import service_account

from errors import ConfigError

logger = logging.getLogger("recipe_service")

RECIPES_COLLECTION = "recipes"
RECIPIENTS_COLLECTION = "email_recipients"
PREFERENCES_COLLECTION = "meal_preferences"

# Firestore rejects batches with more writes than this
MAX_BATCH_WRITES = 500


def create_firestore_client(credentials_info: Dict[str, Any], project_id: Optional[str] = None) -> firestore.Client:
    """
    Builds the process-wide Firestore client from a service-account JSON blob.
    Called once at startup; the client is then injected into every store.
    """
    try:
        credentials = service_account.Credentials.from_service_account_info(credentials_info)
    except (ValueError, KeyError) as e:
        raise ConfigError(f"Invalid Firebase service-account credentials: {e}")

    project = project_id or credentials_info.get("project_id")
    if not project:
        raise ConfigError("Firestore project id missing from credentials and FIREBASE_PROJECT_ID")

    client = firestore.Client(project=project, credentials=credentials)
    logger.info(f"Connected to Firestore project '{project}'")
    return client


def chunked(items, size: int = MAX_BATCH_WRITES):
    for start in range(0, len(items), size):
        yield items[start:start + size]
