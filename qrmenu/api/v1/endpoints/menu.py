"""Public menu endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from qrmenu.api.deps import get_menu_restaurant_id
from qrmenu.db.session import get_db
from qrmenu.models.menu import Category
from qrmenu.schemas.menu import CategoryRead, DishDetail, DishRead, KidsMenuTile, MenuSection
from qrmenu.services.menu_service import (
    build_kids_menu,
    get_dish_detail,
    group_by_category,
    list_available_dishes,
    list_categories,
)

router: APIRouter = APIRouter()


@router.get("", response_model=list[MenuSection])
def get_menu(
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_menu_restaurant_id),
) -> list[MenuSection]:
    """Return available dishes grouped by category."""
    return group_by_category(list_available_dishes(db, restaurant_id))


@router.get("/dishes", response_model=list[DishRead])
def get_dishes(
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_menu_restaurant_id),
) -> list[DishRead]:
    return list_available_dishes(db, restaurant_id)


@router.get("/dishes/{dish_id}", response_model=DishDetail)
def get_dish(
    dish_id: int,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_menu_restaurant_id),
) -> DishDetail:
    """Return a dish with the option groups its customization dialog shows."""
    detail = get_dish_detail(db, dish_id, restaurant_id)
    if detail is None or not detail.is_available:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dish not found")
    return detail


@router.get("/kids", response_model=list[KidsMenuTile])
def get_kids_menu(
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_menu_restaurant_id),
) -> list[KidsMenuTile]:
    """Return one big tile per category for the kids menu."""
    return build_kids_menu(list_available_dishes(db, restaurant_id))


@router.get("/categories", response_model=list[CategoryRead])
def get_categories(
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_menu_restaurant_id),
) -> list[Category]:
    return list_categories(db, restaurant_id)
