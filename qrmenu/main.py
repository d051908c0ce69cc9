"""FastAPI entrypoint for QR table ordering."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from urllib.parse import parse_qs, quote_plus

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware

from qrmenu.api.v1.api import api_router
from qrmenu.auth import STAFF_LOGIN_PATH, get_current_user, login_session, logout_session, require_role
from qrmenu.core.config import settings
from qrmenu.core.security import STAFF_ROLES
from qrmenu.db import session as db_session
from qrmenu.db.base import Base
from qrmenu.db.migrations import ensure_sqlite_schema
from qrmenu.db.seed import ensure_demo_menu
from qrmenu.db.session import get_db
from qrmenu.schemas.order import OrderRead
from qrmenu.services.account_service import authenticate_user, ensure_default_admin
from qrmenu.services.customization import SelectionValidationError, resolve_selection
from qrmenu.services.menu_service import (
    build_kids_menu,
    get_dish_detail,
    group_by_category,
    list_available_dishes,
    option_emoji,
)
from qrmenu.services.order_service import (
    EmptyCartError,
    MissingTableSessionError,
    OrderNotFoundError,
    UnavailableDishError,
    advance_order_status,
    list_orders,
    serialize_order,
    submit_order,
)
from qrmenu.services.order_status import ORDER_STATUSES, STATUS_LABELS, StatusTransitionError
from qrmenu.services.restaurant_service import get_or_create_default_restaurant
from qrmenu.services.table_service import resolve_table_by_qr
from qrmenu.table_session import (
    TABLE_SCAN_PATH,
    bind_table,
    cart_item_count,
    get_session_context,
    load_cart,
    save_cart,
)
from qrmenu.utils.money import format_eur

BASE_DIR = Path(__file__).resolve().parent
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    same_site="lax",
    https_only=False,
    max_age=60 * 60 * 12,
)
app.include_router(api_router, prefix="/api/v1")
app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.filters["eur"] = format_eur
templates.env.globals["option_emoji"] = option_emoji
templates.env.globals["status_labels"] = STATUS_LABELS


def inject_globals(request: Request) -> dict[str, object]:
    """Inject common session-derived values for Jinja templates."""
    context = get_session_context(request)
    return {
        "table_number": context.table_number if context else None,
        "cart_count": cart_item_count(request) if context else 0,
        "current_user_role": request.session.get("role"),
        "current_username": request.session.get("username"),
    }


def render_template(request: Request, name: str, context: dict | None = None, status_code: int = 200):
    """Render a template with required request object and shared global context."""
    payload = {"request": request, **inject_globals(request)}
    if context:
        payload.update(context)
    return templates.TemplateResponse(request, name, payload, status_code=status_code)


def _redirect(url: str, *, message: str | None = None, error: str | None = None, anchor: str = "") -> RedirectResponse:
    if message:
        url = f"{url}?message={quote_plus(message)}"
    elif error:
        url = f"{url}?error={quote_plus(error)}"
    return RedirectResponse(url=f"{url}{anchor}", status_code=303)


async def _form_values(request: Request) -> dict[str, list[str]]:
    body = (await request.body()).decode()
    return parse_qs(body, keep_blank_values=True)


async def _form_data(request: Request) -> dict[str, str]:
    parsed = await _form_values(request)
    return {key: values[-1] if values else "" for key, values in parsed.items()}


@app.on_event("startup")
def startup() -> None:
    logger.info("[BOOTSTRAP] Starting %s (env=%s)", settings.app_name, settings.app_env)
    if not os.getenv("SESSION_SECRET"):
        logger.warning("SESSION_SECRET not set; using development fallback secret.")
    Base.metadata.create_all(bind=db_session.engine)
    ensure_sqlite_schema(db_session.engine)
    with db_session.SessionLocal() as session:
        try:
            restaurant = get_or_create_default_restaurant(session)
            admin_present = ensure_default_admin(session)
            ensure_demo_menu(session)
            logger.info(
                "[BOOTSTRAP] restaurant=%s default admin present: %s",
                restaurant.name,
                "yes" if admin_present else "no",
            )
        except SQLAlchemyError:
            logger.exception("[BOOTSTRAP] Seed/bootstrap failed; continuing startup.")


# -------------------------
# Diner pages
# -------------------------

@app.get("/", response_class=HTMLResponse)
def root(request: Request):
    if get_session_context(request) is None:
        return RedirectResponse(url=TABLE_SCAN_PATH, status_code=303)
    return RedirectResponse(url="/menu", status_code=303)


@app.get(TABLE_SCAN_PATH, response_class=HTMLResponse)
def table_scan_page(request: Request, error: str | None = None):
    return render_template(request, "table_scan.html", {"error": error})


@app.post(TABLE_SCAN_PATH, response_class=RedirectResponse)
async def table_scan_submit(request: Request, db: Session = Depends(get_db)):
    form = await _form_data(request)
    table = resolve_table_by_qr(db, form.get("qr_code_data", ""))
    if table is None:
        return render_template(
            request,
            "table_scan.html",
            {"error": "Unknown or inactive table code."},
            status_code=404,
        )
    bind_table(request, table)
    return RedirectResponse(url="/menu", status_code=303)


@app.get("/t/{qr_code_data}", response_class=RedirectResponse)
def table_link(request: Request, qr_code_data: str, db: Session = Depends(get_db)):
    """Target of the printed QR code: binds the table and opens the menu."""
    table = resolve_table_by_qr(db, qr_code_data)
    if table is None:
        return _redirect(TABLE_SCAN_PATH, error="Unknown or inactive table code.")
    bind_table(request, table)
    logger.info("Table %s scanned", table.table_number)
    return RedirectResponse(url="/menu", status_code=303)


@app.get("/menu", response_class=HTMLResponse)
def menu_page(
    request: Request,
    message: str | None = None,
    error: str | None = None,
    db: Session = Depends(get_db),
):
    context = get_session_context(request)
    if context is None:
        return RedirectResponse(url=TABLE_SCAN_PATH, status_code=303)
    dishes = list_available_dishes(db, context.restaurant_id)
    details = {dish.id: get_dish_detail(db, dish.id, context.restaurant_id) for dish in dishes}
    return render_template(
        request,
        "menu.html",
        {
            "sections": group_by_category(dishes),
            "details": details,
            "message": message,
            "error": error,
        },
    )


@app.get("/menu/kids", response_class=HTMLResponse)
def kids_menu_page(request: Request, db: Session = Depends(get_db)):
    context = get_session_context(request)
    if context is None:
        return RedirectResponse(url=TABLE_SCAN_PATH, status_code=303)
    tiles = build_kids_menu(list_available_dishes(db, context.restaurant_id))
    details = {tile.dish.id: get_dish_detail(db, tile.dish.id, context.restaurant_id) for tile in tiles}
    return render_template(request, "kids_menu.html", {"tiles": tiles, "details": details})


@app.get("/cart", response_class=HTMLResponse)
def cart_page(
    request: Request,
    message: str | None = None,
    error: str | None = None,
    db: Session = Depends(get_db),
):
    context = get_session_context(request)
    if context is None:
        return RedirectResponse(url=TABLE_SCAN_PATH, status_code=303)
    cart = load_cart(request, db)
    return render_template(
        request,
        "cart.html",
        {"items": cart.items, "total": cart.total(), "message": message, "error": error},
    )


@app.post("/cart/add", response_class=RedirectResponse)
async def cart_add(request: Request, db: Session = Depends(get_db)):
    context = get_session_context(request)
    if context is None:
        return RedirectResponse(url=TABLE_SCAN_PATH, status_code=303)
    form = await _form_values(request)
    return_to = (form.get("return_to") or ["/menu"])[-1]
    if return_to not in {"/menu", "/menu/kids"}:
        return_to = "/menu"
    try:
        dish_id = int((form.get("dish_id") or [""])[-1])
        option_ids = [int(value) for value in form.get("option_id", []) if value]
    except ValueError:
        return _redirect(return_to, error="Invalid selection.")
    comment = (form.get("comment") or [""])[-1]

    detail = get_dish_detail(db, dish_id, context.restaurant_id)
    if detail is None:
        return _redirect(return_to, error="Dish not found.")
    cart = load_cart(request, db)
    try:
        selections = resolve_selection(detail.option_groups, option_ids)
        cart.add_line_item(detail, detail.option_groups, selections, comment)
    except SelectionValidationError as exc:
        return _redirect(return_to, error=str(exc), anchor=f"#dish-{dish_id}")
    save_cart(request, cart)
    return _redirect(return_to, message=f"{detail.name} added to your order.")


@app.post("/cart/items/{index}/update", response_class=RedirectResponse)
async def cart_update(request: Request, index: int, db: Session = Depends(get_db)):
    if get_session_context(request) is None:
        return RedirectResponse(url=TABLE_SCAN_PATH, status_code=303)
    form = await _form_data(request)
    try:
        quantity = int(form.get("quantity", "1"))
        cart = load_cart(request, db)
        cart.update_line_item(index, quantity, form.get("comment"))
    except ValueError:
        return _redirect("/cart", error="Quantity must be a whole number of at least 0.")
    save_cart(request, cart)
    return RedirectResponse(url="/cart", status_code=303)


@app.post("/cart/items/{index}/remove", response_class=RedirectResponse)
def cart_remove(request: Request, index: int, db: Session = Depends(get_db)):
    if get_session_context(request) is None:
        return RedirectResponse(url=TABLE_SCAN_PATH, status_code=303)
    cart = load_cart(request, db)
    cart.remove_line_item(index)
    save_cart(request, cart)
    return RedirectResponse(url="/cart", status_code=303)


@app.post("/cart/submit", response_class=RedirectResponse)
def cart_submit(request: Request, db: Session = Depends(get_db)):
    context = get_session_context(request)
    if context is None:
        return RedirectResponse(url=TABLE_SCAN_PATH, status_code=303)
    cart = load_cart(request, db)
    try:
        order = submit_order(db, context, cart)
    except (MissingTableSessionError, EmptyCartError, UnavailableDishError) as exc:
        return _redirect("/cart", error=str(exc))
    except SQLAlchemyError:
        return _redirect("/cart", error="Your order could not be sent. Please try again.")
    cart.clear()
    save_cart(request, cart)
    return _redirect("/cart", message=f"Order #{order.id} sent to the kitchen.")


# -------------------------
# Staff pages
# -------------------------

@app.get(STAFF_LOGIN_PATH, response_class=HTMLResponse)
def staff_login_page(request: Request, error: str | None = None):
    current = get_current_user(request)
    if current and str(current["role"]).upper() in STAFF_ROLES:
        return RedirectResponse(url="/staff/orders", status_code=303)
    return render_template(request, "staff_login.html", {"error": error})


@app.post(STAFF_LOGIN_PATH, response_class=RedirectResponse)
async def staff_login_submit(request: Request, db: Session = Depends(get_db)):
    form = await _form_data(request)
    user = authenticate_user(db, form.get("username", "").strip(), form.get("password", ""))
    if user is None:
        return render_template(
            request,
            "staff_login.html",
            {"error": "Invalid username or password"},
            status_code=401,
        )
    login_session(request, user)
    logger.info("[AUTH] Staff login username=%s role=%s", user.username, user.role)
    return RedirectResponse(url="/staff/orders", status_code=303)


@app.get("/staff/logout", response_class=RedirectResponse)
def staff_logout(request: Request):
    logout_session(request)
    return RedirectResponse(url=STAFF_LOGIN_PATH, status_code=303)


@app.get("/staff/orders", response_class=HTMLResponse)
def staff_orders_page(
    request: Request,
    status: str | None = None,
    message: str | None = None,
    error: str | None = None,
    db: Session = Depends(get_db),
):
    current = require_role(request, STAFF_ROLES)
    if isinstance(current, RedirectResponse):
        return current
    status_filter = status if status in ORDER_STATUSES else None
    restaurant = get_or_create_default_restaurant(db)
    orders: list[OrderRead] = [serialize_order(order) for order in list_orders(db, restaurant.id, status_filter)]
    return render_template(
        request,
        "staff_orders.html",
        {
            "orders": orders,
            "statuses": ORDER_STATUSES,
            "status_filter": status_filter,
            "message": message,
            "error": error,
        },
    )


@app.post("/staff/orders/{order_id}/advance", response_class=RedirectResponse)
async def staff_order_advance(request: Request, order_id: int, db: Session = Depends(get_db)):
    current = require_role(request, STAFF_ROLES)
    if isinstance(current, RedirectResponse):
        return current
    form = await _form_data(request)
    restaurant = get_or_create_default_restaurant(db)
    try:
        order = advance_order_status(db, order_id, form.get("expected_status", ""), restaurant_id=restaurant.id)
    except OrderNotFoundError:
        return _redirect("/staff/orders", error=f"Order #{order_id} not found.")
    except StatusTransitionError:
        return _redirect("/staff/orders", error=f"Order #{order_id} was already updated; the list has been refreshed.")
    except SQLAlchemyError:
        return _redirect("/staff/orders", error=f"Order #{order_id} could not be updated. Please try again.")
    return _redirect("/staff/orders", message=f"Order #{order.id} is now {STATUS_LABELS[order.status]}.")
