"""User service operations."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from qrmenu.models.user import User, normalize_user_role


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username.strip()).limit(1))


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.username.asc())).all())


def create_user(
    db: Session,
    username: str,
    hashed_password: str,
    role: str,
    email: str | None = None,
) -> User:
    user = User(
        username=username.strip(),
        password_hash=hashed_password,
        role=normalize_user_role(role),
        email=email,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
