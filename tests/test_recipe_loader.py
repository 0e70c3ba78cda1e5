import json
import pytest

from errors import ValidationError
from recipe_loader import RecipeLoader


def test_load_json(tmp_path, sample_recipe):
    (tmp_path / "recipes.json").write_text(json.dumps([sample_recipe.model_dump()]), encoding="utf-8")
    assert RecipeLoader(str(tmp_path)).load("recipes.json") == [sample_recipe]


def test_load_csv(tmp_path):
    (tmp_path / "recipes.csv").write_text(
        "Title,Description,Ingredients,Instructions\n"
        "Porridge,Warm and simple,oats|milk| salt ,Simmer oats in milk.|Season.\n"
        ",missing title,x,y\n",
        encoding="utf-8",
    )
    recipes = RecipeLoader(str(tmp_path)).load("recipes.csv")

    assert len(recipes) == 1
    assert recipes[0].title == "Porridge"
    assert recipes[0].ingredients == ["oats", "milk", "salt"]
    assert recipes[0].instructions == ["Simmer oats in milk.", "Season."]


def test_missing_file(tmp_path):
    with pytest.raises(ValidationError):
        RecipeLoader(str(tmp_path)).load("nope.json")


def test_invalid_json(tmp_path):
    (tmp_path / "bad.json").write_text('[{"description": "no title"}]', encoding="utf-8")
    with pytest.raises(ValidationError):
        RecipeLoader(str(tmp_path)).load("bad.json")
