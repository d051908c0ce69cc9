"""Cart composition and pricing."""

from decimal import Decimal

import pytest

from qrmenu.schemas.menu import DishDetail, DishRead, OptionGroupRead, OptionRead
from qrmenu.services.cart import Cart
from qrmenu.services.customization import SelectionValidationError, resolve_selection

BURGER = DishRead(id=1, restaurant_id=1, name="Burger", price=Decimal("8.00"), category="Burgers", is_available=True)
LEMONADE = DishRead(id=2, restaurant_id=1, name="Lemonade", price=Decimal("5.50"), category="Drinks", is_available=True)
BREAD = OptionGroupRead(
    id=1,
    dish_id=1,
    name="Bread",
    is_required=True,
    allow_multiple=False,
    options=[
        OptionRead(id=10, option_group_id=1, name="Brioche", price_modifier=Decimal("0.00")),
        OptionRead(id=11, option_group_id=1, name="Multigrain", price_modifier=Decimal("0.50")),
    ],
)


def _burger_cart() -> Cart:
    cart = Cart()
    cart.add_line_item(BURGER, [BREAD], resolve_selection([BREAD], [11]))
    return cart


def test_multigrain_burger_times_two_costs_seventeen() -> None:
    cart = _burger_cart()
    cart.update_line_item(0, 2)

    line = cart.items[0]
    assert line.unit_price == Decimal("8.50")
    assert line.subtotal == Decimal("17.00")
    assert cart.total() == Decimal("17.00")
    assert cart.total_item_count() == 2


def test_new_line_starts_at_quantity_one_with_trimmed_comment() -> None:
    cart = Cart()
    line = cart.add_line_item(LEMONADE, [], [], comment="  no ice  ")
    assert line.quantity == 1
    assert line.comment == "no ice"
    assert line.base_price == Decimal("5.50")


def test_missing_required_group_blocks_the_line() -> None:
    cart = Cart()
    with pytest.raises(SelectionValidationError):
        cart.add_line_item(BURGER, [BREAD], [])
    assert cart.is_empty()


def test_unavailable_dish_cannot_be_added() -> None:
    cart = Cart()
    hidden = BURGER.model_copy(update={"is_available": False})
    with pytest.raises(SelectionValidationError):
        cart.add_line_item(hidden, [], [])


def test_identical_additions_stay_separate_lines() -> None:
    cart = _burger_cart()
    cart.add_line_item(BURGER, [BREAD], resolve_selection([BREAD], [11]))
    assert len(cart) == 2


def test_quantity_zero_removes_line_and_negative_is_rejected() -> None:
    cart = _burger_cart()
    with pytest.raises(ValueError):
        cart.update_line_item(0, -1)
    cart.update_line_item(0, 0)
    assert cart.is_empty()


def test_out_of_range_edits_are_ignored() -> None:
    cart = _burger_cart()
    cart.update_line_item(5, 3)
    cart.remove_line_item(5)
    assert cart.total_item_count() == 1


def test_editing_quantity_keeps_the_price_fixed_at_add_time() -> None:
    cart = _burger_cart()
    cart.update_line_item(0, 3, comment="well done")
    line = cart.items[0]
    assert line.unit_price == Decimal("8.50")
    assert line.comment == "well done"
    assert cart.total() == Decimal("25.50")


def test_removing_the_same_index_twice_is_a_no_op_the_second_time() -> None:
    cart = _burger_cart()
    cart.add_line_item(LEMONADE, [], [])

    cart.remove_line_item(1)
    cart.remove_line_item(1)

    assert [line.dish_name for line in cart.items] == ["Burger"]


def _catalog(*dishes: DishDetail):
    by_id = {dish.id: dish for dish in dishes}
    return by_id.get


BURGER_DETAIL = DishDetail(**BURGER.model_dump(), option_groups=[BREAD])
LEMONADE_DETAIL = DishDetail(**LEMONADE.model_dump())


def test_session_payload_keeps_only_line_references() -> None:
    cart = _burger_cart()
    cart.update_line_item(0, 2, comment="no pickles")
    cart.add_line_item(LEMONADE, [], [])

    payload = cart.to_session()

    assert payload == [
        {"dish_id": 1, "option_ids": [11], "quantity": 2, "comment": "no pickles", "unit_price": "8.50"},
        {"dish_id": 2, "unit_price": "5.50"},
    ]


def test_session_payload_restores_the_same_cart() -> None:
    cart = _burger_cart()
    cart.add_line_item(LEMONADE, [], [])

    restored = Cart.from_session(cart.to_session(), _catalog(BURGER_DETAIL, LEMONADE_DETAIL))

    assert restored.items == cart.items
    assert restored.total() == Decimal("14.00")


def test_restore_keeps_the_price_fixed_at_add_time() -> None:
    cart = _burger_cart()
    repriced = BURGER_DETAIL.model_copy(update={"price": Decimal("9.00")})

    restored = Cart.from_session(cart.to_session(), _catalog(repriced))

    assert restored.items[0].unit_price == Decimal("8.50")


def test_restore_drops_lines_whose_dish_or_option_is_gone() -> None:
    cart = _burger_cart()
    cart.add_line_item(LEMONADE, [], [])
    no_multigrain = BREAD.model_copy(update={"options": BREAD.options[:1]})
    burger_without_option = BURGER_DETAIL.model_copy(update={"option_groups": [no_multigrain]})

    without_lemonade = Cart.from_session(cart.to_session(), _catalog(BURGER_DETAIL))
    without_option = Cart.from_session(cart.to_session(), _catalog(burger_without_option, LEMONADE_DETAIL))

    assert [line.dish_name for line in without_lemonade.items] == ["Burger"]
    assert [line.dish_name for line in without_option.items] == ["Lemonade"]


def test_comments_are_capped() -> None:
    cart = Cart()
    line = cart.add_line_item(LEMONADE, [], [], comment="x" * 500)
    assert len(line.comment) == 200


def test_empty_cart_totals() -> None:
    cart = Cart.from_session(None, _catalog())
    assert cart.total() == Decimal("0.00")
    assert cart.total_item_count() == 0
