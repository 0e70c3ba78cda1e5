import asyncio
import logging
import random
from typing import List, Sequence

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import firestore
from pydantic import ValidationError as PydanticValidationError

from errors import NotFoundError, StoreError
from models.recipe import Recipe
from stores.firestore_client import RECIPES_COLLECTION, chunked

logger = logging.getLogger("recipe_service")


class RecipeStore:
    """One Firestore document per recipe. Recipes are never updated in place."""

    def __init__(self, client: firestore.Client):
        self.client = client

    async def list_recipes(self) -> List[Recipe]:
        """Raises NotFoundError when the collection holds no readable recipe."""
        return await asyncio.to_thread(self._list_recipes_sync)

    async def add_recipes(self, recipes: Sequence[Recipe]) -> int:
        return await asyncio.to_thread(self._add_recipes_sync, list(recipes))

    async def random_recipe(self) -> Recipe:
        recipes = await self.list_recipes()
        return random.choice(recipes)

    def _list_recipes_sync(self) -> List[Recipe]:
        try:
            docs = list(self.client.collection(RECIPES_COLLECTION).stream())
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(f"Failed to read recipes from Firestore: {e}")
            raise StoreError(f"list_recipes failed: {e}")

        recipes = []
        for doc in docs:
            try:
                recipes.append(Recipe.model_validate(doc.to_dict() or {}))
            except PydanticValidationError as e:
                logger.error(f"Error parsing recipe document {doc.id}: {e}")

        if not recipes:
            raise NotFoundError("No recipes found")
        return recipes

    def _add_recipes_sync(self, recipes: List[Recipe]) -> int:
        if not recipes:
            return 0

        collection = self.client.collection(RECIPES_COLLECTION)
        written = 0
        try:
            for chunk in chunked(recipes):
                batch = self.client.batch()
                for recipe in chunk:
                    batch.set(collection.document(), recipe.model_dump())
                batch.commit()
                written += len(chunk)
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(f"Firestore batch commit error after {written}/{len(recipes)} recipes: {e}")
            raise StoreError(f"add_recipes failed: {e}")

        logger.info(f"Stored {written} recipes")
        return written
