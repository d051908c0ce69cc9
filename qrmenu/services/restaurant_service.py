"""Restaurant bootstrap helpers."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from qrmenu.core.config import settings
from qrmenu.models.restaurant import Restaurant

logger = logging.getLogger(__name__)


def get_default_restaurant(db: Session) -> Restaurant | None:
    """Return the first active restaurant."""
    return db.scalar(
        select(Restaurant).where(Restaurant.is_active.is_(True)).order_by(Restaurant.id.asc()).limit(1)
    )


def get_or_create_default_restaurant(db: Session) -> Restaurant:
    restaurant = get_default_restaurant(db)
    if restaurant is not None:
        return restaurant
    restaurant = Restaurant(name=settings.default_restaurant_name, is_active=True)
    db.add(restaurant)
    db.commit()
    db.refresh(restaurant)
    logger.info("[BOOTSTRAP] Default restaurant created: %s", restaurant.name)
    return restaurant
