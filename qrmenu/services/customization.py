"""Option selection rules for dish customization.

Every function here is pure: it takes the dish's option groups and the
current selection list and returns a verdict or a new list. Nothing is
looked up in the database or the session.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from qrmenu.schemas.cart import SelectedOption
from qrmenu.schemas.menu import OptionGroupRead, OptionRead


class SelectionValidationError(ValueError):
    """Raised when a selection set cannot be turned into a cart line."""

    def __init__(self, message: str, group_names: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.group_names: list[str] = list(group_names)


def _selections_for_group(selections: Iterable[SelectedOption], group_id: int) -> list[SelectedOption]:
    return [selection for selection in selections if selection.group_id == group_id]


def is_group_valid(group: OptionGroupRead, selections: Sequence[SelectedOption]) -> bool:
    """Return whether the selections satisfy one group."""
    if not group.is_required:
        return True
    count = len(_selections_for_group(selections, group.id))
    if group.allow_multiple:
        return count >= 1
    return count == 1


def missing_required_groups(
    groups: Sequence[OptionGroupRead],
    selections: Sequence[SelectedOption],
) -> list[OptionGroupRead]:
    """Return groups that still block the line, in display order."""
    return [group for group in groups if not is_group_valid(group, selections)]


def can_add_to_cart(groups: Sequence[OptionGroupRead], selections: Sequence[SelectedOption]) -> bool:
    """Return whether every group is satisfied. A dish without groups always is."""
    return all(is_group_valid(group, selections) for group in groups)


def ensure_can_add_to_cart(groups: Sequence[OptionGroupRead], selections: Sequence[SelectedOption]) -> None:
    """Raise SelectionValidationError naming the unsatisfied groups."""
    missing = missing_required_groups(groups, selections)
    if missing:
        names = [group.name for group in missing]
        raise SelectionValidationError(f"Missing required options: {', '.join(names)}", names)


def to_selected_option(group: OptionGroupRead, option: OptionRead) -> SelectedOption:
    return SelectedOption(
        group_id=group.id,
        group_name=group.name,
        option_id=option.id,
        option_name=option.name,
        price_modifier=option.price_modifier,
    )


def select_option(
    selections: Sequence[SelectedOption],
    group: OptionGroupRead,
    option: OptionRead,
) -> list[SelectedOption]:
    """Return selections with option picked.

    Single-select groups keep at most one entry: the previous pick of the same
    group is replaced. Multi-select groups accumulate.
    """
    if group.allow_multiple:
        if any(selection.option_id == option.id for selection in selections):
            return list(selections)
        return [*selections, to_selected_option(group, option)]
    kept = [selection for selection in selections if selection.group_id != group.id]
    return [*kept, to_selected_option(group, option)]


def deselect_option(selections: Sequence[SelectedOption], option_id: int) -> list[SelectedOption]:
    """Return selections without the given option; other entries untouched."""
    return [selection for selection in selections if selection.option_id != option_id]


def toggle_option(
    selections: Sequence[SelectedOption],
    group: OptionGroupRead,
    option: OptionRead,
    checked: bool,
) -> list[SelectedOption]:
    """Apply a checkbox or radio change."""
    if checked:
        return select_option(selections, group, option)
    return deselect_option(selections, option.id)


def resolve_selection(groups: Sequence[OptionGroupRead], option_ids: Iterable[int]) -> list[SelectedOption]:
    """Build a selection list from submitted option ids, in submission order."""
    index: dict[int, tuple[OptionGroupRead, OptionRead]] = {
        option.id: (group, option) for group in groups for option in group.options
    }
    selections: list[SelectedOption] = []
    for option_id in option_ids:
        resolved = index.get(option_id)
        if resolved is None:
            raise SelectionValidationError(f"Option {option_id} is not offered for this dish")
        group, option = resolved
        selections = select_option(selections, group, option)
    return selections


def price_with_options(base_price: Decimal, selections: Iterable[SelectedOption]) -> Decimal:
    """Return base price plus every selected modifier."""
    return base_price + sum((selection.price_modifier for selection in selections), Decimal("0"))
