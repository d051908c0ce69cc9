"""Option selection rules for dish customization."""

from decimal import Decimal

import pytest

from qrmenu.schemas.menu import OptionGroupRead, OptionRead
from qrmenu.services.customization import (
    SelectionValidationError,
    can_add_to_cart,
    deselect_option,
    ensure_can_add_to_cart,
    is_group_valid,
    missing_required_groups,
    price_with_options,
    resolve_selection,
    select_option,
    toggle_option,
)


def _group(group_id: int, name: str, *, required: bool, multiple: bool, options: list[tuple[int, str, str]]) -> OptionGroupRead:
    return OptionGroupRead(
        id=group_id,
        dish_id=1,
        name=name,
        is_required=required,
        allow_multiple=multiple,
        options=[
            OptionRead(id=option_id, option_group_id=group_id, name=option_name, price_modifier=Decimal(modifier))
            for option_id, option_name, modifier in options
        ],
    )


BREAD = _group(1, "Bread", required=True, multiple=False, options=[(10, "Brioche", "0.00"), (11, "Multigrain", "0.50")])
SAUCES = _group(2, "Sauces", required=True, multiple=True, options=[(20, "Ketchup", "0.00"), (21, "BBQ", "0.30")])
EXTRAS = _group(3, "Extras", required=False, multiple=True, options=[(30, "Bacon", "1.50")])


def test_dish_without_groups_is_always_addable() -> None:
    assert can_add_to_cart([], []) is True
    ensure_can_add_to_cart([], [])


def test_optional_group_is_valid_without_selection() -> None:
    assert is_group_valid(EXTRAS, []) is True


def test_required_single_select_needs_exactly_one_pick() -> None:
    assert is_group_valid(BREAD, []) is False
    picked = select_option([], BREAD, BREAD.options[1])
    assert is_group_valid(BREAD, picked) is True


def test_required_multi_select_needs_at_least_one_pick() -> None:
    assert is_group_valid(SAUCES, []) is False
    picked = select_option([], SAUCES, SAUCES.options[0])
    picked = select_option(picked, SAUCES, SAUCES.options[1])
    assert len(picked) == 2
    assert is_group_valid(SAUCES, picked) is True


def test_single_select_replaces_previous_pick_of_same_group() -> None:
    picked = select_option([], BREAD, BREAD.options[0])
    picked = select_option(picked, SAUCES, SAUCES.options[0])
    picked = select_option(picked, BREAD, BREAD.options[1])

    bread_picks = [selection for selection in picked if selection.group_id == BREAD.id]
    assert [selection.option_name for selection in bread_picks] == ["Multigrain"]
    assert any(selection.group_id == SAUCES.id for selection in picked)


def test_multi_select_ignores_duplicate_pick() -> None:
    picked = select_option([], SAUCES, SAUCES.options[0])
    assert select_option(picked, SAUCES, SAUCES.options[0]) == picked


def test_deselect_and_toggle_leave_other_groups_untouched() -> None:
    picked = select_option([], BREAD, BREAD.options[0])
    picked = toggle_option(picked, SAUCES, SAUCES.options[1], checked=True)
    assert len(picked) == 2

    picked = toggle_option(picked, SAUCES, SAUCES.options[1], checked=False)
    assert [selection.option_id for selection in picked] == [10]
    assert deselect_option(picked, 999) == picked


def test_missing_required_groups_are_reported_by_name() -> None:
    groups = [BREAD, SAUCES, EXTRAS]
    picked = select_option([], SAUCES, SAUCES.options[0])

    assert [group.name for group in missing_required_groups(groups, picked)] == ["Bread"]
    assert can_add_to_cart(groups, picked) is False
    with pytest.raises(SelectionValidationError) as exc_info:
        ensure_can_add_to_cart(groups, picked)
    assert exc_info.value.group_names == ["Bread"]
    assert "Bread" in str(exc_info.value)


def test_resolve_selection_rejects_option_of_another_dish() -> None:
    with pytest.raises(SelectionValidationError):
        resolve_selection([BREAD], [99])


def test_resolve_selection_keeps_last_single_select_choice() -> None:
    picked = resolve_selection([BREAD, SAUCES], [10, 20, 11])
    assert [selection.option_id for selection in picked] == [20, 11]


def test_price_with_options_adds_every_modifier() -> None:
    picked = resolve_selection([BREAD, SAUCES], [11, 21])
    assert price_with_options(Decimal("8.00"), picked) == Decimal("8.80")
