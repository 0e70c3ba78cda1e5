from pydantic import BaseModel
from enum import Enum


class MealSlot(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class MealPreference(BaseModel):
    email: str
    breakfast: bool = False
    lunch: bool = False
    dinner: bool = False
