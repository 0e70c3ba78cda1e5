from pydantic import BaseModel
from typing import List, Optional

MIN_INGREDIENTS = 1
MAX_INGREDIENTS = 10


class EmailRequest(BaseModel):
    receivers: Optional[List[str]] = []


class SingleEmailRequest(BaseModel):
    email: Optional[str] = None


class MealPreferenceRequest(BaseModel):
    email: Optional[str] = None
    breakfast: bool = False
    lunch: bool = False
    dinner: bool = False


class IngredientsRequest(BaseModel):
    ingredients: List[str]
