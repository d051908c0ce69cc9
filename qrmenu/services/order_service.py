"""Order submission and lifecycle operations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from qrmenu.models.menu import Dish
from qrmenu.models.order import Order, OrderItem
from qrmenu.models.restaurant import DiningTable
from qrmenu.schemas.order import OrderAction, OrderChangeEvent, OrderItemRead, OrderRead
from qrmenu.schemas.session import SessionContext
from qrmenu.services.cart import Cart
from qrmenu.services.change_feed import OrderChangeFeed, order_changes
from qrmenu.services.order_status import INITIAL_STATUS, advance, available_action
from qrmenu.services.table_service import get_table_by_number
from qrmenu.utils.money import quantize_money

logger = logging.getLogger(__name__)


class MissingTableSessionError(Exception):
    """Raised when no active table backs the diner session."""


class EmptyCartError(Exception):
    """Raised when submitting a cart without lines."""


class UnavailableDishError(Exception):
    """Raised when a cart line points at a dish that was removed or hidden."""


class OrderNotFoundError(LookupError):
    """Raised when an order id does not exist."""


def resolve_session_table(db: Session, context: SessionContext | None) -> DiningTable:
    """Return the active table named by the session context."""
    if context is None:
        raise MissingTableSessionError("Table session is missing")
    table = get_table_by_number(db, context.restaurant_id, context.table_number)
    if table is None or not table.is_active:
        raise MissingTableSessionError(f"Table {context.table_number} is not available")
    return table


def ensure_dishes_orderable(db: Session, restaurant_id: int, cart: Cart) -> None:
    dish_ids = {line.dish_id for line in cart.items}
    orderable = set(
        db.scalars(
            select(Dish.id).where(
                Dish.id.in_(dish_ids),
                Dish.restaurant_id == restaurant_id,
                Dish.is_available.is_(True),
            )
        )
    )
    gone = [line.dish_name for line in cart.items if line.dish_id not in orderable]
    if gone:
        raise UnavailableDishError(f"No longer available: {', '.join(gone)}")


def submit_order(
    db: Session,
    context: SessionContext | None,
    cart: Cart,
    *,
    now: datetime | None = None,
    feed: OrderChangeFeed = order_changes,
) -> Order:
    """Persist the cart as one order with one row per line, all or nothing.

    Subtotals and the order total are recomputed here from each line's unit
    price and quantity.
    """
    table = resolve_session_table(db, context)
    if cart.is_empty():
        raise EmptyCartError("Cart is empty")
    ensure_dishes_orderable(db, table.restaurant_id, cart)

    created_at = now or datetime.now(timezone.utc)
    order = Order(
        restaurant_id=table.restaurant_id,
        table_id=table.id,
        status=INITIAL_STATUS,
        created_at=created_at,
        status_updated_at=created_at,
    )
    total = Decimal("0.00")
    for line in cart.items:
        unit_price = quantize_money(line.unit_price)
        subtotal = quantize_money(unit_price * line.quantity)
        total += subtotal
        order.items.append(
            OrderItem(
                dish_id=line.dish_id,
                dish_name=line.dish_name,
                quantity=line.quantity,
                unit_price=unit_price,
                subtotal=subtotal,
                comment=line.comment,
                options_selected=[option.model_dump(mode="json") for option in line.selected_options],
            )
        )
    order.total = quantize_money(total)

    db.add(order)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[ORDER] Submission failed for table %s", table.table_number)
        raise
    db.refresh(order)

    logger.info("[ORDER] #%s submitted from table %s, total %s", order.id, table.table_number, order.total)
    feed.publish(
        OrderChangeEvent(
            type="order_created",
            order_id=order.id,
            status=order.status,
            table_number=table.table_number,
        )
    )
    return order


def serialize_order(order: Order) -> OrderRead:
    action = available_action(order.status)
    return OrderRead(
        id=order.id,
        table_id=order.table_id,
        table_number=order.table.table_number,
        total=order.total,
        status=order.status,
        created_at=order.created_at,
        status_updated_at=order.status_updated_at,
        items=[OrderItemRead.model_validate(item) for item in order.items],
        next_action=OrderAction(target_status=action[0], label=action[1]) if action else None,
    )


def list_orders(db: Session, restaurant_id: int, status: str | None = None) -> list[Order]:
    """Return orders newest first, optionally limited to one status."""
    statement = (
        select(Order)
        .options(selectinload(Order.items), joinedload(Order.table))
        .where(Order.restaurant_id == restaurant_id)
    )
    if status is not None:
        statement = statement.where(Order.status == status)
    statement = statement.order_by(Order.created_at.desc(), Order.id.desc())
    return list(db.scalars(statement).unique().all())


def get_order(db: Session, order_id: int, restaurant_id: int | None = None) -> Order | None:
    order = db.get(Order, order_id)
    if order is None or (restaurant_id is not None and order.restaurant_id != restaurant_id):
        return None
    return order


def advance_order_status(
    db: Session,
    order_id: int,
    expected_current: str,
    *,
    restaurant_id: int | None = None,
    now: datetime | None = None,
    feed: OrderChangeFeed = order_changes,
) -> Order:
    """Move an order one step forward from the status the caller saw."""
    order = get_order(db, order_id, restaurant_id)
    if order is None:
        raise OrderNotFoundError(f"Order {order_id} not found")
    previous = order.status
    advance(order, expected_current, now or datetime.now(timezone.utc))
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[ORDER] Status update failed for #%s", order_id)
        raise
    db.refresh(order)

    logger.info("[ORDER] #%s status %s -> %s", order.id, previous, order.status)
    feed.publish(
        OrderChangeEvent(
            type="order_status_changed",
            order_id=order.id,
            status=order.status,
            table_number=order.table.table_number,
        )
    )
    return order
