"""Session-based staff authentication helpers for server-rendered routes."""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import RedirectResponse

from qrmenu.models.user import User

STAFF_LOGIN_PATH: str = "/staff/login"

SessionUser = dict[str, Any]


def login_session(request: Request, user: User) -> None:
    request.session["user_id"] = user.id
    request.session["role"] = user.role
    request.session["username"] = user.username


def logout_session(request: Request) -> None:
    for key in ("user_id", "role", "username"):
        request.session.pop(key, None)


def get_current_user(request: Request) -> SessionUser | None:
    """Return current authenticated staff snapshot from session."""
    user_id = request.session.get("user_id")
    role = request.session.get("role")
    username = request.session.get("username")
    if user_id and role and username:
        return {"user_id": user_id, "role": role, "username": username}
    return None


def require_role(request: Request, allowed: set[str]) -> SessionUser | RedirectResponse:
    """Return the session user or a redirect to the staff login page."""
    current = get_current_user(request)
    if current is None or str(current.get("role", "")).upper() not in allowed:
        return RedirectResponse(url=STAFF_LOGIN_PATH, status_code=303)
    return current
