"""Shared DB helpers for the Streamlit back-office."""

from datetime import datetime

from sqlalchemy.orm import Session

from qrmenu.db import session as db_session
from qrmenu.db.base import Base
from qrmenu.db.migrations import ensure_sqlite_schema

Base.metadata.create_all(bind=db_session.engine)
ensure_sqlite_schema(db_session.engine)


def get_session() -> Session:
    return db_session.SessionLocal()


def now_string() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M")
