"""Catalog reads, kids menu and catalog writes."""

from decimal import Decimal

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from qrmenu.db.base import Base
from qrmenu.models import Dish, DiningTable, Option, OptionGroup, Order, OrderItem, Restaurant
from qrmenu.schemas.menu import DishRead
from qrmenu.services.menu_service import (
    build_kids_menu,
    delete_dish,
    get_dish_detail,
    group_by_category,
    kids_theme,
    list_available_dishes,
    load_option_groups,
    option_emoji,
)


def _build_session_local() -> sessionmaker:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _seed(session: Session) -> dict[str, int]:
    restaurant = Restaurant(name="Bistro", is_active=True)
    session.add(restaurant)
    session.flush()
    burger = Dish(restaurant_id=restaurant.id, name="Burger", price=Decimal("8.00"), category="Burgers")
    veggie = Dish(restaurant_id=restaurant.id, name="Avocado burger", price=Decimal("9.00"), category="Burgers")
    cake = Dish(restaurant_id=restaurant.id, name="Gâteau", price=Decimal("5.00"), category="Gâteaux")
    hidden = Dish(
        restaurant_id=restaurant.id, name="Soup", price=Decimal("4.00"), category="Entrées", is_available=False
    )
    session.add_all([burger, veggie, cake, hidden])
    session.flush()

    sauces = OptionGroup(category="Burgers", name="Sauces", allow_multiple=True, display_order=2)
    sauces.options.append(Option(name="Ketchup", price_modifier=Decimal("0.00"), display_order=1))
    sauces.options.append(Option(name="Sauce BBQ", price_modifier=Decimal("0.30"), display_order=0))
    bread = OptionGroup(dish_id=burger.id, name="Bread", is_required=True, display_order=1)
    bread.options.append(Option(name="Pain brioché", price_modifier=Decimal("0.00")))
    session.add_all([sauces, bread])
    session.commit()
    return {"restaurant": restaurant.id, "burger": burger.id, "veggie": veggie.id, "hidden": hidden.id}


def test_available_dishes_are_ordered_by_category_then_name() -> None:
    session_local = _build_session_local()
    with session_local() as session:
        ids = _seed(session)
        dishes = list_available_dishes(session, ids["restaurant"])

    assert [dish.name for dish in dishes] == ["Avocado burger", "Burger", "Gâteau"]
    sections = group_by_category(dishes)
    assert [(section.category, len(section.dishes)) for section in sections] == [("Burgers", 2), ("Gâteaux", 1)]


def test_dish_and_category_groups_are_merged_in_display_order() -> None:
    session_local = _build_session_local()
    with session_local() as session:
        ids = _seed(session)
        burger = session.get(Dish, ids["burger"])
        veggie = session.get(Dish, ids["veggie"])
        burger_groups = load_option_groups(session, burger)
        veggie_groups = load_option_groups(session, veggie)

    assert [group.name for group in burger_groups] == ["Bread", "Sauces"]
    assert [option.name for option in burger_groups[1].options] == ["Sauce BBQ", "Ketchup"]
    assert [group.name for group in veggie_groups] == ["Sauces"]


def test_dish_detail_is_scoped_to_restaurant() -> None:
    session_local = _build_session_local()
    with session_local() as session:
        ids = _seed(session)
        detail = get_dish_detail(session, ids["burger"], ids["restaurant"])
        foreign = get_dish_detail(session, ids["burger"], ids["restaurant"] + 1)

    assert detail is not None
    assert len(detail.option_groups) == 2
    assert foreign is None


def test_kids_menu_has_one_themed_tile_per_category() -> None:
    dishes = [
        DishRead(id=1, restaurant_id=1, name="Mini burger", price=Decimal("6"), category="Burgers", is_available=True),
        DishRead(id=2, restaurant_id=1, name="Maxi burger", price=Decimal("9"), category="Burgers", is_available=True),
        DishRead(id=3, restaurant_id=1, name="Reine", price=Decimal("8"), category="Pizzas", is_available=True),
        DishRead(id=4, restaurant_id=1, name="Fondant", price=Decimal("4"), category="Gâteaux", is_available=True),
        DishRead(id=5, restaurant_id=1, name="Sirop", price=Decimal("2"), category="Boissons", is_available=True),
    ]
    tiles = build_kids_menu(dishes)

    assert [(tile.category, tile.theme, tile.dish.name) for tile in tiles] == [
        ("Burgers", "hamburger", "Mini burger"),
        ("Pizzas", "pizza", "Reine"),
        ("Gâteaux", "gateau", "Fondant"),
        ("Boissons", "boisson", "Sirop"),
    ]
    assert tiles[1].emoji == "🍕"


def test_unknown_category_falls_back_to_hamburger_theme() -> None:
    assert kids_theme("Salades") == "hamburger"


def test_option_emoji_defaults_to_star() -> None:
    assert option_emoji("Pain brioché") == "🥖"
    assert option_emoji("Truffle") == "⭐"


def test_delete_dish_removes_its_groups_but_keeps_order_history() -> None:
    session_local = _build_session_local()
    with session_local() as session:
        ids = _seed(session)
        table = DiningTable(restaurant_id=ids["restaurant"], table_number=1, qr_code_data="table-1")
        session.add(table)
        session.flush()
        order = Order(restaurant_id=ids["restaurant"], table_id=table.id, total=Decimal("8.00"))
        order.items.append(
            OrderItem(
                dish_id=ids["burger"],
                dish_name="Burger",
                quantity=1,
                unit_price=Decimal("8.00"),
                subtotal=Decimal("8.00"),
                options_selected=[],
            )
        )
        session.add(order)
        session.commit()

        delete_dish(session, session.get(Dish, ids["burger"]))

        item = session.scalars(select(OrderItem)).one()
        assert item.dish_id is None
        assert item.dish_name == "Burger"
        remaining_groups = session.scalars(select(OptionGroup.name)).all()
        assert remaining_groups == ["Sauces"]
        assert session.scalar(select(func.count(Option.id))) == 2
