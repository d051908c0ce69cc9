"""Lightweight schema migrations for SQLite databases."""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)


def _sqlite_column_names(connection: Connection, table_name: str) -> set[str]:
    """Return column names for a SQLite table using PRAGMA table_info."""
    rows = connection.execute(text(f"PRAGMA table_info({table_name});")).mappings().all()
    return {str(row["name"]) for row in rows}


def _sqlite_index_names(connection: Connection, table_name: str) -> set[str]:
    """Return index names for a SQLite table using PRAGMA index_list."""
    rows = connection.execute(text(f"PRAGMA index_list({table_name});")).mappings().all()
    return {str(row["name"]) for row in rows}


def ensure_sqlite_schema(engine: Engine) -> None:
    """Apply lightweight schema updates for SQLite databases created by older builds."""
    if engine.dialect.name != "sqlite":
        return

    with engine.begin() as connection:
        table_rows = connection.execute(text("SELECT name FROM sqlite_master WHERE type='table';")).all()
        table_names: set[str] = {str(row[0]) for row in table_rows}

        if "orders" in table_names:
            orders_columns = _sqlite_column_names(connection, "orders")
            if "status_updated_at" not in orders_columns:
                connection.execute(text("ALTER TABLE orders ADD COLUMN status_updated_at DATETIME"))
                connection.execute(text("UPDATE orders SET status_updated_at = created_at"))
                logger.info("[MIGRATION] orders.status_updated_at added")
            index_names = _sqlite_index_names(connection, "orders")
            if "ix_orders_status" not in index_names:
                connection.execute(text("CREATE INDEX IF NOT EXISTS ix_orders_status ON orders(status)"))

        if "order_items" in table_names:
            order_items_columns = _sqlite_column_names(connection, "order_items")
            if "options_selected" not in order_items_columns:
                connection.execute(
                    text("ALTER TABLE order_items ADD COLUMN options_selected JSON NOT NULL DEFAULT '[]'")
                )
                logger.info("[MIGRATION] order_items.options_selected added")
            if "comment" not in order_items_columns:
                connection.execute(text("ALTER TABLE order_items ADD COLUMN comment TEXT"))

        if "dish_option_groups" in table_names:
            group_columns = _sqlite_column_names(connection, "dish_option_groups")
            if "category" not in group_columns:
                connection.execute(text("ALTER TABLE dish_option_groups ADD COLUMN category VARCHAR(128)"))
                logger.info("[MIGRATION] dish_option_groups.category added")

        if "dishes" in table_names:
            dish_columns = _sqlite_column_names(connection, "dishes")
            if "image_url" not in dish_columns:
                connection.execute(text("ALTER TABLE dishes ADD COLUMN image_url VARCHAR(512)"))
