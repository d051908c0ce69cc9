"""Menu and catalog service helpers shared by API, HTML and Streamlit routes."""

from __future__ import annotations

import unicodedata
from collections.abc import Sequence
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session, selectinload

from qrmenu.models.menu import Category, Dish, Option, OptionGroup
from qrmenu.models.order import OrderItem
from qrmenu.schemas.menu import (
    CategoryCreate,
    DishCreate,
    DishDetail,
    DishRead,
    KidsMenuTile,
    MenuSection,
    OptionCreate,
    OptionGroupCreate,
    OptionGroupRead,
)
from qrmenu.utils.money import quantize_money

KIDS_THEMES: dict[str, str] = {
    "hamburger": "🍔",
    "pizza": "🍕",
    "gateau": "🧁",
    "boisson": "🥤",
}
DEFAULT_KIDS_THEME: str = "hamburger"

OPTION_EMOJIS: dict[str, str] = {
    "pain brioché": "🥖",
    "pain céréales": "🌾",
    "sans gluten": "🥬",
    "ketchup": "🍅",
    "mayonnaise": "🥚",
    "sauce bbq": "🍖",
}

NON_NULLABLE_DISH_FIELDS: set[str] = {"name", "price", "category", "is_available"}


# -------------------------
# Diner-facing reads
# -------------------------

def list_available_dishes(db: Session, restaurant_id: int) -> list[DishRead]:
    """Return available dishes ordered by category, then name."""
    rows = db.scalars(
        select(Dish)
        .where(Dish.restaurant_id == restaurant_id, Dish.is_available.is_(True))
        .order_by(Dish.category.asc(), Dish.name.asc())
    ).all()
    return [DishRead.model_validate(row) for row in rows]


def group_by_category(dishes: Sequence[DishRead]) -> list[MenuSection]:
    """Split an ordered dish list into menu sections, keeping order."""
    sections: dict[str, list[DishRead]] = {}
    for dish in dishes:
        sections.setdefault(dish.category, []).append(dish)
    return [MenuSection(category=category, dishes=items) for category, items in sections.items()]


def load_option_groups(db: Session, dish: Dish | DishRead) -> list[OptionGroupRead]:
    """Return dish-level and category-level groups for a dish, in display order."""
    rows = db.scalars(
        select(OptionGroup)
        .options(selectinload(OptionGroup.options))
        .where(or_(OptionGroup.dish_id == dish.id, OptionGroup.category == dish.category))
        .order_by(OptionGroup.display_order.asc(), OptionGroup.id.asc())
    ).all()
    return [OptionGroupRead.model_validate(row) for row in rows]


def get_dish_detail(db: Session, dish_id: int, restaurant_id: int | None = None) -> DishDetail | None:
    """Return a dish with its option groups, or None when unknown."""
    dish = db.get(Dish, dish_id)
    if dish is None or (restaurant_id is not None and dish.restaurant_id != restaurant_id):
        return None
    base = DishRead.model_validate(dish)
    return DishDetail(**base.model_dump(), option_groups=load_option_groups(db, dish))


def kids_theme(category: str) -> str:
    """Map a category name to one of the kids menu themes."""
    normalized = unicodedata.normalize("NFKD", category.lower())
    normalized = "".join(char for char in normalized if not unicodedata.combining(char))
    if "burger" in normalized:
        return "hamburger"
    if "pizza" in normalized:
        return "pizza"
    if "gateau" in normalized or "dessert" in normalized:
        return "gateau"
    if "boisson" in normalized:
        return "boisson"
    return DEFAULT_KIDS_THEME


def build_kids_menu(dishes: Sequence[DishRead]) -> list[KidsMenuTile]:
    """Return one tile per category, using the first dish of each category."""
    tiles: list[KidsMenuTile] = []
    seen: set[str] = set()
    for dish in dishes:
        if dish.category in seen:
            continue
        seen.add(dish.category)
        theme = kids_theme(dish.category)
        tiles.append(KidsMenuTile(category=dish.category, theme=theme, emoji=KIDS_THEMES[theme], dish=dish))
    return tiles


def option_emoji(option_name: str) -> str:
    return OPTION_EMOJIS.get(option_name.strip().lower(), "⭐")


# -------------------------
# Staff catalog management
# -------------------------

def list_dishes(db: Session, restaurant_id: int) -> list[Dish]:
    """Return every dish of a restaurant, available or not."""
    return list(
        db.scalars(
            select(Dish).where(Dish.restaurant_id == restaurant_id).order_by(Dish.category.asc(), Dish.name.asc())
        ).all()
    )


def create_dish(db: Session, restaurant_id: int, payload: DishCreate) -> Dish:
    data = payload.model_dump()
    data["price"] = quantize_money(data["price"])
    dish = Dish(restaurant_id=restaurant_id, **data)
    db.add(dish)
    db.commit()
    db.refresh(dish)
    return dish


def update_dish(db: Session, dish: Dish, updates: dict[str, Any]) -> Dish:
    for key, value in updates.items():
        if value is None and key in NON_NULLABLE_DISH_FIELDS:
            continue
        if key == "price":
            value = quantize_money(value)
        setattr(dish, key, value)
    db.commit()
    db.refresh(dish)
    return dish


def set_dish_availability(db: Session, dish: Dish, is_available: bool) -> Dish:
    dish.is_available = is_available
    db.commit()
    db.refresh(dish)
    return dish


def delete_dish(db: Session, dish: Dish) -> None:
    """Delete a dish and its own option groups; past order lines keep their snapshot."""
    db.execute(update(OrderItem).where(OrderItem.dish_id == dish.id).values(dish_id=None))
    db.delete(dish)
    db.commit()


def list_categories(db: Session, restaurant_id: int) -> list[Category]:
    return list(
        db.scalars(
            select(Category)
            .where(Category.restaurant_id == restaurant_id)
            .order_by(Category.display_order.asc(), Category.name.asc())
        ).all()
    )


def create_category(db: Session, restaurant_id: int, payload: CategoryCreate) -> Category:
    category = Category(restaurant_id=restaurant_id, **payload.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category: Category) -> None:
    db.delete(category)
    db.commit()


def list_option_groups(db: Session, *, dish_id: int | None = None, category: str | None = None) -> list[OptionGroup]:
    """Return groups attached to a dish or a category, with options loaded."""
    statement = select(OptionGroup).options(selectinload(OptionGroup.options))
    if dish_id is not None:
        statement = statement.where(OptionGroup.dish_id == dish_id)
    if category is not None:
        statement = statement.where(OptionGroup.category == category)
    statement = statement.order_by(OptionGroup.display_order.asc(), OptionGroup.id.asc())
    return list(db.scalars(statement).all())


def create_option_group(db: Session, payload: OptionGroupCreate) -> OptionGroup:
    group = OptionGroup(**payload.model_dump())
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def update_option_group(db: Session, group: OptionGroup, updates: dict[str, Any]) -> OptionGroup:
    for key, value in updates.items():
        if value is None:
            continue
        setattr(group, key, value)
    db.commit()
    db.refresh(group)
    return group


def delete_option_group(db: Session, group: OptionGroup) -> None:
    """Delete a group together with its options."""
    db.delete(group)
    db.commit()


def create_option(db: Session, payload: OptionCreate) -> Option:
    data = payload.model_dump()
    data["price_modifier"] = quantize_money(data["price_modifier"])
    option = Option(**data)
    db.add(option)
    db.commit()
    db.refresh(option)
    return option


def update_option(db: Session, option: Option, updates: dict[str, Any]) -> Option:
    for key, value in updates.items():
        if value is None:
            continue
        if key == "price_modifier":
            value = quantize_money(value)
        setattr(option, key, value)
    db.commit()
    db.refresh(option)
    return option


def delete_option(db: Session, option: Option) -> None:
    db.delete(option)
    db.commit()
