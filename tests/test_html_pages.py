"""Server-rendered diner and staff pages."""

from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from qrmenu.core.security import get_password_hash
from qrmenu.db import session as db_session
from qrmenu.db.base import Base
from qrmenu.main import app
from qrmenu.models import Dish, DiningTable, Option, OptionGroup, Order, Restaurant, User


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _setup(tmp_path: Path, monkeypatch, name: str) -> sessionmaker:
    engine = _build_test_engine(tmp_path / name)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    with testing_session_local() as session:
        restaurant = Restaurant(name="Bistro", is_active=True)
        session.add(restaurant)
        session.flush()
        burger = Dish(restaurant_id=restaurant.id, name="Burger", price=Decimal("8.00"), category="Burgers")
        session.add(burger)
        session.flush()
        bread = OptionGroup(dish_id=burger.id, name="Bread", is_required=True)
        bread.options.append(Option(name="Brioche", price_modifier=Decimal("0.00"), display_order=0))
        bread.options.append(Option(name="Multigrain", price_modifier=Decimal("0.50"), display_order=1))
        session.add(bread)
        session.add(DiningTable(restaurant_id=restaurant.id, table_number=2, qr_code_data="table-2"))
        session.add(User(username="sam", password_hash=get_password_hash("secret123"), role="SERVER"))
        session.commit()
    return testing_session_local


def test_pages_without_table_redirect_to_scan(tmp_path: Path, monkeypatch) -> None:
    _setup(tmp_path, monkeypatch, "test_pages_redirect.db")

    with TestClient(app) as client:
        root = client.get("/", follow_redirects=False)
        menu = client.get("/menu", follow_redirects=False)
        cart = client.get("/cart", follow_redirects=False)
        scan_page = client.get("/table-scan")
        bad_scan = client.post("/table-scan", data={"qr_code_data": "nope"})
        bad_link = client.get("/t/nope", follow_redirects=False)

    assert root.headers["location"] == "/table-scan"
    assert menu.status_code == 303
    assert menu.headers["location"] == "/table-scan"
    assert cart.headers["location"] == "/table-scan"
    assert scan_page.status_code == 200
    assert bad_scan.status_code == 404
    assert "Unknown or inactive table code." in bad_scan.text
    assert bad_link.headers["location"].startswith("/table-scan?error=")


def test_qr_link_menu_cart_and_submit(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _setup(tmp_path, monkeypatch, "test_pages_order.db")

    with TestClient(app) as client:
        scanned = client.get("/t/table-2", follow_redirects=False)
        menu = client.get("/menu")
        kids = client.get("/menu/kids")
        rejected = client.post("/cart/add", data={"dish_id": "1"}, follow_redirects=False)
        added = client.post("/cart/add", data={"dish_id": "1", "option_id": ["2"]}, follow_redirects=False)
        client.post("/cart/items/0/update", data={"quantity": "2", "comment": ""}, follow_redirects=False)
        cart = client.get("/cart")
        submitted = client.post("/cart/submit", follow_redirects=False)
        empty_cart = client.get("/cart")

    assert scanned.headers["location"] == "/menu"
    assert "Table 2" in menu.text
    assert "Multigrain" in menu.text
    assert "🍔" in kids.text
    assert "error=" in rejected.headers["location"]
    assert "Bread" in rejected.headers["location"]
    assert "message=" in added.headers["location"]
    assert "17.00 €" in cart.text
    assert "message=" in submitted.headers["location"]
    assert "Your cart is empty" in empty_cart.text

    with testing_session_local() as session:
        order = session.scalars(select(Order)).one()
        assert order.total == Decimal("17.00")
        assert order.status == "received"


def test_staff_login_and_advance_from_board(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _setup(tmp_path, monkeypatch, "test_pages_staff.db")

    with TestClient(app) as client:
        client.get("/t/table-2")
        client.post("/cart/add", data={"dish_id": "1", "option_id": ["1"]})
        client.post("/cart/submit")

        anonymous = client.get("/staff/orders", follow_redirects=False)
        failed = client.post("/staff/login", data={"username": "sam", "password": "wrong"})
        logged_in = client.post(
            "/staff/login", data={"username": "sam", "password": "secret123"}, follow_redirects=False
        )
        board = client.get("/staff/orders")
        advanced = client.post(
            "/staff/orders/1/advance", data={"expected_status": "received"}, follow_redirects=False
        )
        stale = client.post("/staff/orders/1/advance", data={"expected_status": "received"}, follow_redirects=False)
        client.get("/staff/logout")
        after_logout = client.get("/staff/orders", follow_redirects=False)

    assert anonymous.headers["location"] == "/staff/login"
    assert failed.status_code == 401
    assert logged_in.headers["location"] == "/staff/orders"
    assert "Start preparing" in board.text
    assert "Table 2" in board.text
    assert "message=" in advanced.headers["location"]
    assert "error=" in stale.headers["location"]
    assert after_logout.status_code == 303

    with testing_session_local() as session:
        assert session.get(Order, 1).status == "preparing"


def _failing_commit(self) -> None:
    raise OperationalError("COMMIT", {}, Exception("database is locked"))


def test_board_shows_an_error_when_the_status_cannot_be_saved(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _setup(tmp_path, monkeypatch, "test_pages_advance_failure.db")

    with TestClient(app) as client:
        client.get("/t/table-2")
        client.post("/cart/add", data={"dish_id": "1", "option_id": ["1"]})
        client.post("/cart/submit")
        client.post("/staff/login", data={"username": "sam", "password": "secret123"})
        with monkeypatch.context() as patch:
            patch.setattr(Session, "commit", _failing_commit)
            failed = client.post(
                "/staff/orders/1/advance", data={"expected_status": "received"}, follow_redirects=False
            )

    assert failed.status_code == 303
    assert failed.headers["location"].startswith("/staff/orders?error=")
    with testing_session_local() as session:
        assert session.get(Order, 1).status == "received"
