"""Diner cart: composes validated selections into priced line items."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from decimal import Decimal
from typing import Any

from qrmenu.schemas.cart import COMMENT_MAX_LENGTH, CartLineItem, CartLineRef, SelectedOption
from qrmenu.schemas.menu import DishDetail, DishRead, OptionGroupRead
from qrmenu.services.customization import (
    SelectionValidationError,
    ensure_can_add_to_cart,
    price_with_options,
    resolve_selection,
)
from qrmenu.utils.money import quantize_money

logger = logging.getLogger(__name__)


def _clean_comment(comment: str | None) -> str | None:
    return (comment or "").strip()[:COMMENT_MAX_LENGTH] or None


class Cart:
    """Ordered line items for one browsing session.

    Line prices are fixed when the line is added; later quantity or comment
    edits never re-price it.
    """

    def __init__(self, items: Sequence[CartLineItem] | None = None) -> None:
        self._items: list[CartLineItem] = list(items or [])

    @property
    def items(self) -> list[CartLineItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def add_line_item(
        self,
        dish: DishRead,
        groups: Sequence[OptionGroupRead],
        selected_options: Sequence[SelectedOption],
        comment: str | None = None,
    ) -> CartLineItem:
        """Append a new line with quantity 1."""
        if not dish.is_available:
            raise SelectionValidationError(f"{dish.name} is not available")
        ensure_can_add_to_cart(groups, selected_options)
        item = CartLineItem(
            dish_id=dish.id,
            dish_name=dish.name,
            base_price=quantize_money(dish.price),
            quantity=1,
            selected_options=list(selected_options),
            comment=_clean_comment(comment),
            unit_price=quantize_money(price_with_options(dish.price, selected_options)),
        )
        self._items.append(item)
        return item

    def update_line_item(self, index: int, quantity: int, comment: str | None = None) -> None:
        """Set quantity and comment; quantity 0 removes the line."""
        if quantity < 0:
            raise ValueError("Quantity must be >= 0")
        if not 0 <= index < len(self._items):
            return
        if quantity == 0:
            self.remove_line_item(index)
            return
        current = self._items[index]
        self._items[index] = current.model_copy(
            update={"quantity": quantity, "comment": _clean_comment(comment)},
        )

    def remove_line_item(self, index: int) -> None:
        if 0 <= index < len(self._items):
            del self._items[index]

    def total_item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def total(self) -> Decimal:
        return quantize_money(sum((item.subtotal for item in self._items), Decimal("0")))

    def clear(self) -> None:
        self._items.clear()

    def to_session(self) -> list[dict[str, Any]]:
        """Return compact line references for the signed session cookie."""
        return [
            CartLineRef(
                dish_id=item.dish_id,
                option_ids=[option.option_id for option in item.selected_options],
                quantity=item.quantity,
                comment=item.comment,
                unit_price=item.unit_price,
            ).model_dump(mode="json", exclude_defaults=True)
            for item in self._items
        ]

    @classmethod
    def from_session(
        cls,
        data: list[dict[str, Any]] | None,
        lookup: Callable[[int], DishDetail | None],
    ) -> "Cart":
        """Rebuild line items from session references.

        Lines whose dish or options no longer exist in the catalog are dropped.
        """
        items: list[CartLineItem] = []
        for row in data or []:
            ref = CartLineRef.model_validate(row)
            dish = lookup(ref.dish_id)
            if dish is None:
                logger.info("Dropping cart line for removed dish %s", ref.dish_id)
                continue
            try:
                selections = resolve_selection(dish.option_groups, ref.option_ids)
            except SelectionValidationError:
                logger.info("Dropping cart line for %s: options changed", dish.name)
                continue
            items.append(
                CartLineItem(
                    dish_id=dish.id,
                    dish_name=dish.name,
                    base_price=quantize_money(dish.price),
                    quantity=ref.quantity,
                    selected_options=selections,
                    comment=ref.comment,
                    unit_price=quantize_money(ref.unit_price),
                )
            )
        return cls(items)
