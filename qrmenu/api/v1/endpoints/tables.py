"""Dining table management endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from qrmenu.api.deps import get_staff_restaurant_id
from qrmenu.core.security import CATALOG_ROLES, require_roles
from qrmenu.db.session import get_db
from qrmenu.models.restaurant import DiningTable
from qrmenu.models.user import User
from qrmenu.schemas.table import TableCreate, TableRead
from qrmenu.services.table_service import DuplicateTableError, create_table, list_tables, toggle_table_active

router: APIRouter = APIRouter()


@router.get("", response_model=list[TableRead])
def get_tables(
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
    _: User = Depends(require_roles(CATALOG_ROLES)),
) -> list[DiningTable]:
    return list_tables(db, restaurant_id)


@router.post("", response_model=TableRead, status_code=status.HTTP_201_CREATED)
def add_table(
    payload: TableCreate,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
    _: User = Depends(require_roles(CATALOG_ROLES)),
) -> DiningTable:
    """Create a table; its QR code data is derived from the number."""
    try:
        return create_table(db, restaurant_id, payload.table_number)
    except DuplicateTableError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/{table_id}/toggle", response_model=TableRead)
def toggle_table(
    table_id: int,
    db: Session = Depends(get_db),
    restaurant_id: int = Depends(get_staff_restaurant_id),
    _: User = Depends(require_roles(CATALOG_ROLES)),
) -> DiningTable:
    table = db.get(DiningTable, table_id)
    if table is None or table.restaurant_id != restaurant_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Table not found")
    return toggle_table_active(db, table)
