import json
import logging
import re
from typing import List, Optional, Sequence

import openai
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from errors import ConfigError, UpstreamError, ValidationError
from models.recipe import Recipe
from models.requests import MAX_INGREDIENTS, MIN_INGREDIENTS

logger = logging.getLogger("recipe_service")

DEFAULT_MODEL = "gpt-4o-mini"
TIMEOUT = 60 * 2

RECIPE_PROMPT = (
    "Generate {count} healthy recipes using ONLY the following ingredients: {ingredients}. "
    "Each recipe should be returned as a JSON object with fields: title, description, "
    "ingredients (as an array of strings), and instructions (as an array of strings). "
    "Return an array of {count} such recipes in JSON."
)

_FENCED_JSON = re.compile(r"```(?:json)?(.*?)```", re.DOTALL)
_RECIPES = TypeAdapter(List[Recipe])


def extract_json(raw: str) -> str:
    """Returns the contents of the first fenced code block, or the whole reply trimmed."""
    match = _FENCED_JSON.search(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()


def build_prompt(ingredients: Sequence[str], count: int) -> str:
    return RECIPE_PROMPT.format(count=count, ingredients=", ".join(ingredients))


def validate_ingredients(ingredients: Sequence[str]) -> List[str]:
    cleaned = [i.strip() for i in ingredients if i and i.strip()]
    if not MIN_INGREDIENTS <= len(cleaned) <= MAX_INGREDIENTS:
        raise ValidationError(
            f"Please provide between {MIN_INGREDIENTS} and {MAX_INGREDIENTS} ingredients"
        )
    return cleaned


class RecipeGenerator:
    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        count: int = 5,
        client: Optional[openai.AsyncOpenAI] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.count = count
        self._client = client

    @property
    def client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise ConfigError("OPENAI_API_KEY not configured")
            self._client = openai.AsyncOpenAI(api_key=self.api_key, timeout=TIMEOUT)
        return self._client

    async def generate(self, ingredients: Sequence[str]) -> List[Recipe]:
        ingredients = validate_ingredients(ingredients)
        prompt = build_prompt(ingredients, self.count)

        logger.info(f"Generating {self.count} recipes from {len(ingredients)} ingredients with {self.model}")
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise UpstreamError(f"OpenAI request failed: {e}", "OpenAI API returned an error")

        if not resp.choices:
            logger.error("OpenAI response contained no choices")
            raise UpstreamError("OpenAI response contained no choices", "Failed to parse OpenAI response")

        content = resp.choices[0].message.content or ""
        return self.parse_recipes(content)

    def parse_recipes(self, content: str) -> List[Recipe]:
        decoded = extract_json(content)
        try:
            return _RECIPES.validate_python(json.loads(decoded))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error(f"Failed to decode recipes: {e}\nContent: {decoded}")
            raise UpstreamError(
                f"Could not decode recipes from model output: {e}",
                "Failed to decode recipes. Check OpenAI output format.",
            )
