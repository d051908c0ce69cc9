"""Database seeding helpers."""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from qrmenu.core.config import settings
from qrmenu.models.menu import Category, Dish, Option, OptionGroup
from qrmenu.models.restaurant import DiningTable
from qrmenu.services.restaurant_service import get_or_create_default_restaurant
from qrmenu.services.table_service import qr_code_for

logger = logging.getLogger(__name__)

DEMO_TABLE_COUNT: int = 5

DEMO_CATEGORIES: list[tuple[str, str]] = [
    ("Burgers", "🍔"),
    ("Pizzas", "🍕"),
    ("Desserts", "🧁"),
    ("Boissons", "🥤"),
]

DEMO_DISHES: list[dict] = [
    {"name": "Burger", "category": "Burgers", "price": Decimal("8.00"), "description": "Steak haché, cheddar, salade"},
    {"name": "Burger végétarien", "category": "Burgers", "price": Decimal("9.00"), "description": "Galette de légumes"},
    {"name": "Pizza Margherita", "category": "Pizzas", "price": Decimal("10.50"), "description": "Tomate, mozzarella, basilic"},
    {"name": "Gâteau au chocolat", "category": "Desserts", "price": Decimal("5.00"), "description": None},
    {"name": "Limonade", "category": "Boissons", "price": Decimal("3.00"), "description": None},
]


def _add_group(
    db: Session,
    *,
    name: str,
    options: list[tuple[str, str]],
    dish: Dish | None = None,
    category: str | None = None,
    is_required: bool = False,
    allow_multiple: bool = False,
    display_order: int = 0,
) -> OptionGroup:
    group = OptionGroup(
        dish=dish,
        category=category,
        name=name,
        is_required=is_required,
        allow_multiple=allow_multiple,
        display_order=display_order,
    )
    for position, (option_name, modifier) in enumerate(options):
        group.options.append(Option(name=option_name, price_modifier=Decimal(modifier), display_order=position))
    db.add(group)
    return group


def ensure_demo_menu(db: Session) -> bool:
    """Populate an empty restaurant with a small menu and tables.

    Returns:
        bool: True when demo data was written.
    """
    if not settings.seed_demo_menu:
        return False

    restaurant = get_or_create_default_restaurant(db)
    dish_count = db.scalar(select(func.count(Dish.id)).where(Dish.restaurant_id == restaurant.id)) or 0
    if dish_count:
        logger.info("[BOOTSTRAP] Menu already present; demo seed skipped.")
        return False

    for position, (name, emoji) in enumerate(DEMO_CATEGORIES):
        db.add(Category(restaurant_id=restaurant.id, name=name, emoji=emoji, display_order=position))

    dishes: dict[str, Dish] = {}
    for payload in DEMO_DISHES:
        dish = Dish(restaurant_id=restaurant.id, is_available=True, **payload)
        db.add(dish)
        dishes[dish.name] = dish

    _add_group(
        db,
        dish=dishes["Burger"],
        name="Pain",
        is_required=True,
        options=[("Pain brioché", "0.00"), ("Pain céréales", "0.50"), ("Sans gluten", "1.00")],
    )
    _add_group(
        db,
        category="Burgers",
        name="Sauces",
        allow_multiple=True,
        display_order=1,
        options=[("Ketchup", "0.00"), ("Mayonnaise", "0.00"), ("Sauce BBQ", "0.30")],
    )

    existing_numbers = set(
        db.scalars(select(DiningTable.table_number).where(DiningTable.restaurant_id == restaurant.id)).all()
    )
    for number in range(1, DEMO_TABLE_COUNT + 1):
        if number in existing_numbers:
            continue
        db.add(
            DiningTable(
                restaurant_id=restaurant.id,
                table_number=number,
                qr_code_data=qr_code_for(number),
                is_active=True,
            )
        )

    db.commit()
    logger.info("[BOOTSTRAP] Demo menu seeded for %s", restaurant.name)
    return True
