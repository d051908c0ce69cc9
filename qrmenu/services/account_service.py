"""Staff account provisioning and authentication helpers."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from qrmenu.core.config import settings
from qrmenu.core.security import get_password_hash, verify_password
from qrmenu.models.user import User
from qrmenu.services.user_service import create_user, get_user_by_username

logger = logging.getLogger(__name__)


def ensure_default_admin(db: Session) -> bool:
    """Create the ADMIN_USER account when configured and missing.

    Returns:
        bool: True when an admin account with that username is present after the call.
    """
    if not settings.admin_user or not settings.admin_pass:
        logger.info("[BOOTSTRAP] ADMIN_USER/ADMIN_PASS not set; skipping default admin.")
        return False

    existing = get_user_by_username(db, settings.admin_user)
    if existing is not None:
        if not existing.is_active:
            existing.is_active = True
            db.commit()
            logger.info("[BOOTSTRAP] Admin exists but was inactive; account re-activated.")
        return True

    create_user(
        db=db,
        username=settings.admin_user,
        hashed_password=get_password_hash(settings.admin_pass),
        role="ADMIN",
    )
    logger.info("[BOOTSTRAP] Default admin account created: %s", settings.admin_user)
    return True


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    """Return the active user matching the credentials, or None."""
    user = get_user_by_username(db, username)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        logger.warning("[AUTH] Failed login for username=%s", username)
        return None
    return user
