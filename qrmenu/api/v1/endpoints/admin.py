"""Catalog management endpoints for managers."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from qrmenu.api.deps import get_staff_restaurant_id
from qrmenu.core.security import CATALOG_ROLES, require_roles
from qrmenu.db.session import get_db
from qrmenu.models.menu import Category, Dish, Option, OptionGroup
from qrmenu.models.user import User
from qrmenu.schemas.menu import (
    CategoryCreate,
    CategoryRead,
    DishCreate,
    DishRead,
    DishUpdate,
    OptionCreate,
    OptionGroupCreate,
    OptionGroupRead,
    OptionGroupUpdate,
    OptionRead,
    OptionUpdate,
)
from qrmenu.services import menu_service

router: APIRouter = APIRouter(dependencies=[Depends(require_roles(CATALOG_ROLES))])


class AvailabilityUpdate(BaseModel):
    is_available: bool


def _get_dish_or_404(db: Session, dish_id: int, restaurant_id: int) -> Dish:
    dish = db.get(Dish, dish_id)
    if dish is None or dish.restaurant_id != restaurant_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dish not found")
    return dish


def _get_group_or_404(db: Session, group_id: int) -> OptionGroup:
    group = db.get(OptionGroup, group_id)
    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Option group not found")
    return group


# -------------------------
# Dishes
# -------------------------

@router.get("/dishes", response_model=list[DishRead])
def list_dishes(db: Session = Depends(get_db), restaurant_id: int = Depends(get_staff_restaurant_id)) -> list[Dish]:
    return menu_service.list_dishes(db, restaurant_id)


@router.post("/dishes", response_model=DishRead, status_code=status.HTTP_201_CREATED)
def create_dish(
    payload: DishCreate,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
) -> Dish:
    return menu_service.create_dish(db, restaurant_id, payload)


@router.put("/dishes/{dish_id}", response_model=DishRead)
def update_dish(
    dish_id: int,
    payload: DishUpdate,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
) -> Dish:
    dish = _get_dish_or_404(db, dish_id, restaurant_id)
    return menu_service.update_dish(db, dish, payload.model_dump(exclude_unset=True))


@router.post("/dishes/{dish_id}/availability", response_model=DishRead)
def set_dish_availability(
    dish_id: int,
    payload: AvailabilityUpdate,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
) -> Dish:
    """Show or hide a dish on the diner menu without deleting it."""
    dish = _get_dish_or_404(db, dish_id, restaurant_id)
    return menu_service.set_dish_availability(db, dish, payload.is_available)


@router.delete("/dishes/{dish_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_dish(
    dish_id: int,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
) -> Response:
    dish = _get_dish_or_404(db, dish_id, restaurant_id)
    menu_service.delete_dish(db, dish)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -------------------------
# Categories
# -------------------------

@router.get("/categories", response_model=list[CategoryRead])
def list_categories(
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
) -> list[Category]:
    return menu_service.list_categories(db, restaurant_id)


@router.post("/categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
) -> Category:
    return menu_service.create_category(db, restaurant_id, payload)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
) -> Response:
    category = db.get(Category, category_id)
    if category is None or category.restaurant_id != restaurant_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    menu_service.delete_category(db, category)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -------------------------
# Option groups and options
# -------------------------

@router.get("/dishes/{dish_id}/option-groups", response_model=list[OptionGroupRead])
def list_dish_option_groups(
    dish_id: int,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
) -> list[OptionGroup]:
    """Groups attached directly to the dish; category-wide groups are listed separately."""
    _get_dish_or_404(db, dish_id, restaurant_id)
    return menu_service.list_option_groups(db, dish_id=dish_id)


@router.get("/option-groups", response_model=list[OptionGroupRead])
def list_category_option_groups(
    category: str = Query(min_length=1),
    db: Session = Depends(get_db),
) -> list[OptionGroup]:
    return menu_service.list_option_groups(db, category=category)


@router.post("/option-groups", response_model=OptionGroupRead, status_code=status.HTTP_201_CREATED)
def create_option_group(
    payload: OptionGroupCreate,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
) -> OptionGroup:
    if payload.dish_id is not None:
        _get_dish_or_404(db, payload.dish_id, restaurant_id)
    return menu_service.create_option_group(db, payload)


@router.put("/option-groups/{group_id}", response_model=OptionGroupRead)
def update_option_group(
    group_id: int,
    payload: OptionGroupUpdate,
    db: Session = Depends(get_db),
) -> OptionGroup:
    group = _get_group_or_404(db, group_id)
    return menu_service.update_option_group(db, group, payload.model_dump(exclude_unset=True))


@router.delete("/option-groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_option_group(group_id: int, db: Session = Depends(get_db)) -> Response:
    group = _get_group_or_404(db, group_id)
    menu_service.delete_option_group(db, group)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/options", response_model=OptionRead, status_code=status.HTTP_201_CREATED)
def create_option(payload: OptionCreate, db: Session = Depends(get_db)) -> Option:
    _get_group_or_404(db, payload.option_group_id)
    return menu_service.create_option(db, payload)


@router.put("/options/{option_id}", response_model=OptionRead)
def update_option(option_id: int, payload: OptionUpdate, db: Session = Depends(get_db)) -> Option:
    option = db.get(Option, option_id)
    if option is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Option not found")
    return menu_service.update_option(db, option, payload.model_dump(exclude_unset=True))


@router.delete("/options/{option_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_option(option_id: int, db: Session = Depends(get_db)) -> Response:
    option = db.get(Option, option_id)
    if option is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Option not found")
    menu_service.delete_option(db, option)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
