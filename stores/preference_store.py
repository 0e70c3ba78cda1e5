import asyncio
import logging
from typing import List, Tuple

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import firestore

from errors import StoreError
from models.preference import MealPreference, MealSlot
from stores.firestore_client import PREFERENCES_COLLECTION

logger = logging.getLogger("recipe_service")


class PreferenceStore:
    def __init__(self, client: firestore.Client):
        self.client = client

    async def set_preference(self, preference: MealPreference) -> None:
        """Overwrites the whole document for this email; the latest write wins."""
        await asyncio.to_thread(self._set_preference_sync, preference)

    async def list_preferences(self, slot: MealSlot) -> List[Tuple[str, bool]]:
        return await asyncio.to_thread(self._list_preferences_sync, slot)

    async def opted_in(self, slot: MealSlot) -> List[str]:
        return [email for email, wants in await self.list_preferences(slot) if wants]

    def _set_preference_sync(self, preference: MealPreference) -> None:
        try:
            self.client.collection(PREFERENCES_COLLECTION).document(preference.email).set(preference.model_dump())
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(f"Failed to save meal preference for {preference.email}: {e}")
            raise StoreError(f"set_preference failed for {preference.email}: {e}")

    def _list_preferences_sync(self, slot: MealSlot) -> List[Tuple[str, bool]]:
        try:
            docs = list(self.client.collection(PREFERENCES_COLLECTION).stream())
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(f"Failed to read meal preferences for {slot.value}: {e}")
            raise StoreError(f"list_preferences failed for {slot.value}: {e}")

        preferences = []
        for doc in docs:
            data = doc.to_dict() or {}
            email = data.get("email") or doc.id
            preferences.append((email, bool(data.get(slot.value, False))))
        return preferences
