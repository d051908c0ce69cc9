"""Diner cart endpoints backed by the session cookie."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qrmenu.db.session import get_db
from qrmenu.schemas.cart import CartAddRequest, CartResponse, CartUpdateRequest
from qrmenu.schemas.order import OrderRead
from qrmenu.schemas.session import SessionContext
from qrmenu.services.cart import Cart
from qrmenu.services.customization import SelectionValidationError, resolve_selection
from qrmenu.services.menu_service import get_dish_detail
from qrmenu.services.order_service import (
    EmptyCartError,
    MissingTableSessionError,
    UnavailableDishError,
    serialize_order,
    submit_order,
)
from qrmenu.table_session import load_cart, require_session_context, save_cart

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


def _cart_response(context: SessionContext, cart: Cart) -> CartResponse:
    return CartResponse(
        table_number=context.table_number,
        items=cart.items,
        total_item_count=cart.total_item_count(),
        total=cart.total(),
    )


@router.get("", response_model=CartResponse)
def get_cart(
    request: Request,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_session_context),
) -> CartResponse:
    return _cart_response(context, load_cart(request, db))


@router.post("/items", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
def add_cart_item(
    payload: CartAddRequest,
    request: Request,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_session_context),
) -> CartResponse:
    """Add a customized dish to the cart with quantity 1."""
    detail = get_dish_detail(db, payload.dish_id, context.restaurant_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dish not found")

    cart = load_cart(request, db)
    try:
        selections = resolve_selection(detail.option_groups, payload.option_ids)
        cart.add_line_item(detail, detail.option_groups, selections, payload.comment)
    except SelectionValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    save_cart(request, cart)
    return _cart_response(context, cart)


@router.patch("/items/{index}", response_model=CartResponse)
def update_cart_item(
    index: int,
    payload: CartUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_session_context),
) -> CartResponse:
    """Change quantity and comment; quantity 0 removes the line."""
    cart = load_cart(request, db)
    cart.update_line_item(index, payload.quantity, payload.comment)
    save_cart(request, cart)
    return _cart_response(context, cart)


@router.delete("/items/{index}", response_model=CartResponse)
def remove_cart_item(
    index: int,
    request: Request,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_session_context),
) -> CartResponse:
    cart = load_cart(request, db)
    cart.remove_line_item(index)
    save_cart(request, cart)
    return _cart_response(context, cart)


@router.post("/submit", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def submit_cart(
    request: Request,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_session_context),
) -> OrderRead:
    """Turn the cart into an order; the cart is emptied only on success."""
    cart = load_cart(request, db)
    try:
        order = submit_order(db, context, cart)
    except (MissingTableSessionError, EmptyCartError, UnavailableDishError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Order could not be saved, please try again",
        ) from exc
    cart.clear()
    save_cart(request, cart)
    return serialize_order(order)
