"""Staff order endpoints and the order change WebSocket."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qrmenu.api.deps import get_staff_restaurant_id
from qrmenu.core.config import settings
from qrmenu.core.security import STAFF_ROLES, require_roles, resolve_token_user
from qrmenu.db import session as db_session
from qrmenu.db.session import get_db
from qrmenu.models.user import User
from qrmenu.schemas.order import OrderAdvanceRequest, OrderChangeEvent, OrderRead, OrderStatus
from qrmenu.services.change_feed import order_changes
from qrmenu.services.order_service import (
    OrderNotFoundError,
    advance_order_status,
    get_order,
    list_orders,
    serialize_order,
)
from qrmenu.services.order_status import StatusTransitionError

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[OrderRead])
def get_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
    _: User = Depends(require_roles(STAFF_ROLES)),
) -> list[OrderRead]:
    """Return orders newest first, each with the one action staff can take."""
    return [serialize_order(order) for order in list_orders(db, restaurant_id, status_filter)]


@router.get("/{order_id}", response_model=OrderRead)
def get_single_order(
    order_id: int,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
    _: User = Depends(require_roles(STAFF_ROLES)),
) -> OrderRead:
    order = get_order(db, order_id, restaurant_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return serialize_order(order)


@router.post("/{order_id}/advance", response_model=OrderRead)
def advance_order(
    order_id: int,
    payload: OrderAdvanceRequest,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
    _: User = Depends(require_roles(STAFF_ROLES)),
) -> OrderRead:
    """Move an order one step forward from the status shown to staff."""
    try:
        order = advance_order_status(db, order_id, payload.expected_status, restaurant_id=restaurant_id)
    except OrderNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found") from exc
    except StatusTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Order status could not be saved, please try again",
        ) from exc
    return serialize_order(order)


def _websocket_is_staff(websocket: WebSocket) -> bool:
    token = websocket.query_params.get("token")
    if token:
        with db_session.SessionLocal() as db:
            try:
                user = resolve_token_user(db, token)
            except HTTPException:
                return False
            return user.role in STAFF_ROLES
    role = websocket.scope.get("session", {}).get("role")
    return str(role or "").upper() in STAFF_ROLES


@router.websocket("/changes")
async def order_changes_socket(websocket: WebSocket) -> None:
    """Push order change notifications; clients re-fetch the order list on each one."""
    if not await run_in_threadpool(_websocket_is_staff, websocket):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[OrderChangeEvent] = asyncio.Queue()

    def _forward(event: OrderChangeEvent) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, event)

    async def _send_events() -> None:
        while True:
            try:
                event = await asyncio.wait_for(queue.get(), timeout=settings.change_feed_ping_seconds)
            except asyncio.TimeoutError:
                event = OrderChangeEvent(type="ping")
            await websocket.send_json(event.model_dump(mode="json"))

    with order_changes.subscription(_forward):
        await websocket.accept()
        sender = asyncio.create_task(_send_events())
        try:
            # Client messages are ignored; receiving only surfaces the disconnect.
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.debug("Order change socket disconnected")
        finally:
            sender.cancel()
            (outcome,) = await asyncio.gather(sender, return_exceptions=True)
            if isinstance(outcome, Exception):
                logger.debug("Order change sender stopped: %r", outcome)
