"""Dining table management and QR lookups."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qrmenu.models.restaurant import DiningTable


class DuplicateTableError(Exception):
    """Raised when a table number is already used in the restaurant."""


def qr_code_for(table_number: int) -> str:
    return f"table-{table_number}"


def list_tables(db: Session, restaurant_id: int) -> list[DiningTable]:
    return list(
        db.scalars(
            select(DiningTable)
            .where(DiningTable.restaurant_id == restaurant_id)
            .order_by(DiningTable.table_number.asc())
        ).all()
    )


def get_table_by_number(db: Session, restaurant_id: int, table_number: int) -> DiningTable | None:
    return db.scalar(
        select(DiningTable)
        .where(DiningTable.restaurant_id == restaurant_id, DiningTable.table_number == table_number)
        .limit(1)
    )


def resolve_table_by_qr(db: Session, qr_code_data: str) -> DiningTable | None:
    """Return the active table behind a scanned QR code."""
    return db.scalar(
        select(DiningTable)
        .where(DiningTable.qr_code_data == qr_code_data.strip(), DiningTable.is_active.is_(True))
        .limit(1)
    )


def create_table(db: Session, restaurant_id: int, table_number: int) -> DiningTable:
    """Create an active table whose QR code encodes its number."""
    if get_table_by_number(db, restaurant_id, table_number) is not None:
        raise DuplicateTableError(f"Table {table_number} already exists")
    table = DiningTable(
        restaurant_id=restaurant_id,
        table_number=table_number,
        qr_code_data=qr_code_for(table_number),
        is_active=True,
    )
    db.add(table)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateTableError(f"Table {table_number} already exists") from exc
    db.refresh(table)
    return table


def toggle_table_active(db: Session, table: DiningTable) -> DiningTable:
    table.is_active = not table.is_active
    db.commit()
    db.refresh(table)
    return table
