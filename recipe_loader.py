import csv
import json
import os
import logging
from typing import List

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from errors import ValidationError
from models.recipe import Recipe

logger = logging.getLogger("recipe_service")

# Separator for ingredient and instruction cells in CSV files
LIST_SEPARATOR = "|"

_RECIPES = TypeAdapter(List[Recipe])


def _split(cell: str) -> List[str]:
    return [part.strip() for part in (cell or "").split(LIST_SEPARATOR) if part.strip()]


class RecipeLoader:
    """
    Reads recipes for bulk import from a JSON array (same shape as /add-recipe)
    or a CSV with title, description, ingredients and instructions columns.
    """

    def __init__(self, base_path: str = "."):
        self.base_path = base_path

    def load(self, filename: str) -> List[Recipe]:
        filepath = os.path.join(self.base_path, filename)
        if not os.path.exists(filepath):
            raise ValidationError(f"Recipe file not found: {filepath}")

        if filepath.lower().endswith(".csv"):
            recipes = self._load_csv(filepath)
        else:
            recipes = self._load_json(filepath)
        logger.info(f"Loaded {len(recipes)} recipes from {filename}")
        return recipes

    def _load_json(self, filepath: str) -> List[Recipe]:
        try:
            with open(filepath, mode='r', encoding='utf-8-sig') as f:
                return _RECIPES.validate_python(json.load(f))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            raise ValidationError(f"Invalid recipe file {filepath}: {e}")

    def _load_csv(self, filepath: str) -> List[Recipe]:
        recipes = []
        skipped = 0
        with open(filepath, mode='r', encoding='utf-8-sig', newline='') as f:
            reader = csv.DictReader(f)
            for row in reader:
                row = {(key or "").strip().lower(): (val or "") for key, val in row.items()}
                title = row.get("title", "").strip()
                if not title:
                    skipped += 1
                    continue
                recipes.append(Recipe(
                    title=title,
                    description=row.get("description", "").strip(),
                    ingredients=_split(row.get("ingredients", "")),
                    instructions=_split(row.get("instructions", "")),
                ))

        if skipped > 0:
            logger.info(f"Skipped {skipped} rows without a title in {filepath}")
        return recipes
