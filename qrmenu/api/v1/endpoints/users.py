"""Staff account endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from qrmenu.core.security import ADMIN_ROLES, get_password_hash, require_roles
from qrmenu.db.session import get_db
from qrmenu.models.user import User, normalize_user_role
from qrmenu.schemas.user import UserCreate, UserRead
from qrmenu.services.user_service import create_user, get_user_by_username, list_users

router: APIRouter = APIRouter()


@router.get("", response_model=list[UserRead])
def get_users(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(ADMIN_ROLES)),
) -> list[User]:
    return list_users(db)


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_staff_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(ADMIN_ROLES)),
) -> User:
    """Create a staff account."""
    try:
        role = normalize_user_role(payload.role)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if get_user_by_username(db, payload.username) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already registered")
    return create_user(
        db=db,
        username=payload.username,
        hashed_password=get_password_hash(payload.password),
        role=role,
        email=payload.email,
    )
