"""
Shared stand settings: the ingredient list, burger recipes, the
active recipe and item prices.

Each lives in its own document of the settings table, keyed by
setting_id ("ingredients", "recipes", "activeRecipe", "prices").
"""
import logging
import uuid

from aws_config import SETTINGS_TABLE
from aws_lib.dynamodb_client import DynamoDBClient

from ..domain import DEFAULT_PRICES
from ..exceptions import NotFound

logger = logging.getLogger(__name__)

ddb = DynamoDBClient()

DEFAULT_INGREDIENTS = [
    "bun", "meat", "tomato", "cucumber", "lettuce",
    "cheese", "onion", "ketchup", "mustard",
]
DEFAULT_RECIPE_NAME = "Classic burger"


def _key(setting_id):
    return {"setting_id": setting_id}


# ingredients
def get_ingredients():
    return ddb.get(SETTINGS_TABLE, _key("ingredients")).get("ingredients", [])


def add_ingredient(ingredient):
    ingredients = get_ingredients()
    if ingredient in ingredients:
        return
    ingredients.append(ingredient)
    ddb.put(SETTINGS_TABLE, dict(_key("ingredients"), ingredients=ingredients))
    logger.info("Ingredient %s added", ingredient)


def delete_ingredient(ingredient):
    ingredients = [i for i in get_ingredients() if i != ingredient]
    ddb.put(SETTINGS_TABLE, dict(_key("ingredients"), ingredients=ingredients))


# recipes
def get_recipes():
    return ddb.get(SETTINGS_TABLE, _key("recipes")).get("recipes", [])


def _save_recipes(recipes):
    ddb.put(SETTINGS_TABLE, dict(_key("recipes"), recipes=recipes))


def create_recipe(name, ingredients, active=False):
    recipe = {
        "id": uuid.uuid4().hex,
        "name": name,
        "ingredients": list(ingredients),
        "is_active": False,
    }
    _save_recipes(get_recipes() + [recipe])
    logger.info("Recipe %s created", name)
    if active:
        set_active_recipe(recipe["id"])
    return recipe["id"]


def update_recipe(recipe_id, name, ingredients):
    recipes = get_recipes()
    if not any(r["id"] == recipe_id for r in recipes):
        raise NotFound("Recipe", recipe_id)

    updated = [
        dict(r, name=name, ingredients=list(ingredients)) if r["id"] == recipe_id else r
        for r in recipes
    ]
    _save_recipes(updated)

    # keep the customization dialog in sync with the edited recipe
    recipe = next(r for r in updated if r["id"] == recipe_id)
    if recipe.get("is_active"):
        _write_active_recipe(recipe)


def delete_recipe(recipe_id):
    recipes = get_recipes()
    _save_recipes([r for r in recipes if r["id"] != recipe_id])
    if any(r["id"] == recipe_id and r.get("is_active") for r in recipes):
        ddb.delete(SETTINGS_TABLE, _key("activeRecipe"))
        logger.info("Active recipe %s deleted", recipe_id)


def set_active_recipe(recipe_id):
    recipes = get_recipes()
    if not any(r["id"] == recipe_id for r in recipes):
        raise NotFound("Recipe", recipe_id)

    updated = [dict(r, is_active=(r["id"] == recipe_id)) for r in recipes]
    _save_recipes(updated)
    _write_active_recipe(next(r for r in updated if r["id"] == recipe_id))
    logger.info("Active recipe set to %s", recipe_id)


def _write_active_recipe(recipe):
    ddb.put(SETTINGS_TABLE, dict(
        _key("activeRecipe"),
        recipe_name=recipe["name"],
        ingredients=recipe["ingredients"],
    ))


def get_active_recipe():
    """{"recipe_name", "ingredients"} or None when no recipe was activated."""
    active = ddb.get(SETTINGS_TABLE, _key("activeRecipe"))
    if not active:
        return None
    return {"recipe_name": active.get("recipe_name", ""), "ingredients": active.get("ingredients", [])}


def get_active_ingredients():
    active = get_active_recipe()
    return active["ingredients"] if active else []


# prices
def get_prices():
    prices = ddb.get(SETTINGS_TABLE, _key("prices"))
    if not prices:
        return dict(DEFAULT_PRICES)
    return {
        "burger_price": prices.get("burger_price", DEFAULT_PRICES["burger_price"]),
        "fries_price": prices.get("fries_price", DEFAULT_PRICES["fries_price"]),
    }


def update_prices(burger_price, fries_price):
    ddb.put(SETTINGS_TABLE, dict(_key("prices"), burger_price=burger_price, fries_price=fries_price))
    logger.info("Prices updated: burger=%s fries=%s", burger_price, fries_price)


def seed_defaults():
    """Default ingredients plus an active classic recipe."""
    ddb.put(SETTINGS_TABLE, dict(_key("ingredients"), ingredients=DEFAULT_INGREDIENTS))
    _save_recipes([])
    create_recipe(DEFAULT_RECIPE_NAME, DEFAULT_INGREDIENTS, active=True)
