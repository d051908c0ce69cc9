"""Diner table session stored in the signed session cookie.

The session holds two values, the table number and the restaurant id, plus
compact cart line references. Routes read them once and pass a
SessionContext / Cart to the services.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from qrmenu.models.restaurant import DiningTable
from qrmenu.schemas.cart import CartLineRef
from qrmenu.schemas.menu import DishDetail
from qrmenu.schemas.session import SessionContext
from qrmenu.services.cart import Cart
from qrmenu.services.menu_service import get_dish_detail

TABLE_SCAN_PATH: str = "/table-scan"
CART_SESSION_KEY: str = "cart"


def bind_table(request: Request, table: DiningTable) -> SessionContext:
    """Attach the diner session to a scanned table and start an empty cart."""
    context = SessionContext(table_number=table.table_number, restaurant_id=table.restaurant_id)
    previous = get_session_context(request)
    request.session["table_number"] = context.table_number
    request.session["restaurant_id"] = context.restaurant_id
    if previous != context:
        request.session[CART_SESSION_KEY] = []
    return context


def clear_table(request: Request) -> None:
    for key in ("table_number", "restaurant_id", CART_SESSION_KEY):
        request.session.pop(key, None)


def get_session_context(request: Request) -> SessionContext | None:
    """Return the table context or None when the diner has not scanned a table."""
    table_number = request.session.get("table_number")
    restaurant_id = request.session.get("restaurant_id")
    if table_number is None or restaurant_id is None:
        return None
    try:
        return SessionContext(table_number=table_number, restaurant_id=restaurant_id)
    except ValidationError:
        return None


def require_session_context(request: Request) -> SessionContext:
    """API dependency: the table context, or 400 when it is missing."""
    context = get_session_context(request)
    if context is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Table session is missing")
    return context


def load_cart(request: Request, db: Session) -> Cart:
    """Rebuild the cart from the session references and the current catalog."""
    context = get_session_context(request)
    restaurant_id = context.restaurant_id if context else None
    details: dict[int, DishDetail | None] = {}

    def _lookup(dish_id: int) -> DishDetail | None:
        if dish_id not in details:
            details[dish_id] = get_dish_detail(db, dish_id, restaurant_id)
        return details[dish_id]

    try:
        return Cart.from_session(request.session.get(CART_SESSION_KEY), _lookup)
    except ValidationError:
        request.session[CART_SESSION_KEY] = []
        return Cart()


def cart_item_count(request: Request) -> int:
    """Number of items in the cart, read from the session alone."""
    try:
        refs = [CartLineRef.model_validate(row) for row in request.session.get(CART_SESSION_KEY) or []]
    except ValidationError:
        return 0
    return sum(ref.quantity for ref in refs)


def save_cart(request: Request, cart: Cart) -> None:
    request.session[CART_SESSION_KEY] = cart.to_session()
