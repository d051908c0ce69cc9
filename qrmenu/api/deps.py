"""Shared API dependencies."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from qrmenu.db.session import get_db
from qrmenu.services.restaurant_service import get_or_create_default_restaurant
from qrmenu.table_session import get_session_context


def get_staff_restaurant_id(db: Session = Depends(get_db)) -> int:
    """Restaurant managed by staff accounts."""
    return get_or_create_default_restaurant(db).id


def get_menu_restaurant_id(request: Request, db: Session = Depends(get_db)) -> int:
    """Restaurant of the diner's table, falling back to the default one."""
    context = get_session_context(request)
    if context is not None:
        return context.restaurant_id
    return get_or_create_default_restaurant(db).id
