import asyncio
import logging
from typing import Iterable, List

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import firestore

from errors import StoreError
from stores.firestore_client import RECIPIENTS_COLLECTION, chunked
from utils.email_utils import normalize_email, split_valid

logger = logging.getLogger("recipe_service")


class RecipientStore:
    """
    The recipient set. Each address is its own document keyed by the address,
    so writing an address that already exists is a no-op.
    """

    def __init__(self, client: firestore.Client):
        self.client = client

    async def list_recipients(self) -> List[str]:
        return await asyncio.to_thread(self._list_recipients_sync)

    async def add_recipients(self, emails: Iterable[str]) -> List[str]:
        """Merges `emails` into the stored set and returns the whole merged set."""
        return await asyncio.to_thread(self._add_recipients_sync, list(emails))

    def _list_recipients_sync(self) -> List[str]:
        try:
            docs = list(self.client.collection(RECIPIENTS_COLLECTION).stream())
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(f"Failed to read emails from Firestore: {e}")
            raise StoreError(f"list_recipients failed: {e}")

        # Older documents may hold mixed-case addresses
        stored = set()
        for doc in docs:
            data = doc.to_dict() or {}
            email = normalize_email(data.get("email") or doc.id)
            if email:
                stored.add(email)
        return sorted(stored)

    def _add_recipients_sync(self, emails: List[str]) -> List[str]:
        valid, invalid = split_valid(emails)
        if invalid:
            logger.warning(f"Skipping {len(invalid)} invalid email(s): {', '.join(invalid[:10])}")

        stored = set(self._list_recipients_sync())
        new_emails = [email for email in valid if email not in stored]
        if not new_emails:
            return sorted(stored)

        collection = self.client.collection(RECIPIENTS_COLLECTION)
        try:
            for chunk in chunked(new_emails):
                batch = self.client.batch()
                for email in chunk:
                    batch.set(collection.document(email), {"email": email})
                batch.commit()
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(f"Failed to store new recipients: {e}")
            raise StoreError(f"add_recipients failed: {e}")

        logger.info(f"Added {len(new_emails)} new recipient(s)")
        return sorted(stored.union(new_emails))
