"""Staff order board API: listing, advancing and role checks."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from qrmenu.core.security import get_password_hash
from qrmenu.db import session as db_session
from qrmenu.db.base import Base
from qrmenu.main import app
from qrmenu.models import DiningTable, Order, OrderItem, Restaurant, User


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
        table = DiningTable(restaurant_id=restaurant.id, table_number=3, qr_code_data="table-3")
        session.add(table)
        for username, role in (("boss", "ADMIN"), ("manon", "MANAGER"), ("sam", "SERVER")):
            session.add(User(username=username, password_hash=get_password_hash("secret123"), role=role))
        session.flush()
        base_time = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        for offset, status in enumerate(("received", "ready", "paid")):
            order = Order(
                restaurant_id=restaurant.id,
                table_id=table.id,
                total=Decimal("8.00"),
                status=status,
                created_at=base_time + timedelta(minutes=offset),
                status_updated_at=base_time + timedelta(minutes=offset),
            )
            order.items.append(
                OrderItem(
                    dish_name="Burger",
                    quantity=1,
                    unit_price=Decimal("8.00"),
                    subtotal=Decimal("8.00"),
                    options_selected=[],
                )
            )
            session.add(order)
        session.commit()
    return testing_session_local


def _auth_headers(client: TestClient, username: str) -> dict[str, str]:
    response = client.post("/api/v1/auth/login", json={"username": username, "password": "secret123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_orders_are_listed_newest_first_with_their_single_action(tmp_path: Path, monkeypatch) -> None:
    _setup(tmp_path, monkeypatch, "test_staff_list.db")

    with TestClient(app) as client:
        headers = _auth_headers(client, "sam")
        response = client.get("/api/v1/orders", headers=headers)
        filtered = client.get("/api/v1/orders", params={"status": "ready"}, headers=headers)

    assert response.status_code == 200
    orders = response.json()
    assert [order["status"] for order in orders] == ["paid", "ready", "received"]
    assert orders[0]["next_action"] is None
    assert orders[1]["next_action"] == {"target_status": "served", "label": "Mark served"}
    assert orders[0]["table_number"] == 3
    assert [order["status"] for order in filtered.json()] == ["ready"]


def test_ready_order_advances_to_served_only(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _setup(tmp_path, monkeypatch, "test_staff_advance.db")

    with TestClient(app) as client:
        headers = _auth_headers(client, "sam")
        advanced = client.post("/api/v1/orders/2/advance", json={"expected_status": "ready"}, headers=headers)
        stale = client.post("/api/v1/orders/2/advance", json={"expected_status": "ready"}, headers=headers)

    assert advanced.status_code == 200
    assert advanced.json()["status"] == "served"
    assert advanced.json()["next_action"]["target_status"] == "paid"
    assert stale.status_code == 409

    with testing_session_local() as session:
        order = session.get(Order, 2)
        assert order.status == "served"
        assert order.status_updated_at is not None


def test_paid_order_and_unknown_order_cannot_advance(tmp_path: Path, monkeypatch) -> None:
    _setup(tmp_path, monkeypatch, "test_staff_terminal.db")

    with TestClient(app) as client:
        headers = _auth_headers(client, "manon")
        paid = client.post("/api/v1/orders/3/advance", json={"expected_status": "paid"}, headers=headers)
        missing = client.post("/api/v1/orders/99/advance", json={"expected_status": "received"}, headers=headers)
        bad_status = client.post("/api/v1/orders/1/advance", json={"expected_status": "cancelled"}, headers=headers)

    assert paid.status_code == 409
    assert missing.status_code == 404
    assert bad_status.status_code == 422


def test_order_endpoints_require_a_staff_token(tmp_path: Path, monkeypatch) -> None:
    _setup(tmp_path, monkeypatch, "test_staff_auth.db")

    with TestClient(app) as client:
        anonymous = client.get("/api/v1/orders")
        forged = client.get("/api/v1/orders", headers={"Authorization": "Bearer not-a-token"})
        wrong_password = client.post("/api/v1/auth/login", json={"username": "sam", "password": "nope"})

    assert anonymous.status_code in {401, 403}
    assert forged.status_code == 401
    assert wrong_password.status_code == 401


def test_server_cannot_manage_catalog_or_users(tmp_path: Path, monkeypatch) -> None:
    _setup(tmp_path, monkeypatch, "test_staff_roles.db")

    with TestClient(app) as client:
        server_headers = _auth_headers(client, "sam")
        manager_headers = _auth_headers(client, "manon")
        admin_headers = _auth_headers(client, "boss")

        server_dishes = client.get("/api/v1/admin/dishes", headers=server_headers)
        server_tables = client.get("/api/v1/tables", headers=server_headers)
        manager_dishes = client.get("/api/v1/admin/dishes", headers=manager_headers)
        manager_users = client.get("/api/v1/users", headers=manager_headers)
        admin_users = client.get("/api/v1/users", headers=admin_headers)
        me = client.get("/api/v1/auth/me", headers=manager_headers)

    assert server_dishes.status_code == 403
    assert server_tables.status_code == 403
    assert manager_dishes.status_code == 200
    assert manager_users.status_code == 403
    assert admin_users.status_code == 200
    assert {user["username"] for user in admin_users.json()} == {"boss", "manon", "sam"}
    assert me.json()["role"] == "MANAGER"


def test_admin_creates_staff_accounts(tmp_path: Path, monkeypatch) -> None:
    _setup(tmp_path, monkeypatch, "test_staff_create_user.db")

    with TestClient(app) as client:
        headers = _auth_headers(client, "boss")
        created = client.post(
            "/api/v1/users",
            json={"username": "lea", "password": "secret123", "role": "waiter"},
            headers=headers,
        )
        duplicate = client.post(
            "/api/v1/users",
            json={"username": "lea", "password": "secret123", "role": "SERVER"},
            headers=headers,
        )
        unknown_role = client.post(
            "/api/v1/users",
            json={"username": "max", "password": "secret123", "role": "CHEF"},
            headers=headers,
        )
        login = client.post("/api/v1/auth/login", json={"username": "lea", "password": "secret123"})

    assert created.status_code == 201
    assert created.json()["role"] == "SERVER"
    assert duplicate.status_code == 400
    assert unknown_role.status_code == 400
    assert login.status_code == 200


def _failing_commit(self) -> None:
    raise OperationalError("COMMIT", {}, Exception("database is locked"))


def test_advance_reports_storage_failure_and_keeps_status(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _setup(tmp_path, monkeypatch, "test_staff_advance_failure.db")

    with TestClient(app) as client:
        headers = _auth_headers(client, "boss")
        with monkeypatch.context() as patch:
            patch.setattr(Session, "commit", _failing_commit)
            failed = client.post("/api/v1/orders/1/advance", json={"expected_status": "received"}, headers=headers)
        listed = client.get("/api/v1/orders/1", headers=headers)
        retried = client.post("/api/v1/orders/1/advance", json={"expected_status": "received"}, headers=headers)

    assert failed.status_code == 503
    assert listed.json()["status"] == "received"
    assert retried.status_code == 200
    assert retried.json()["status"] == "preparing"
    with testing_session_local() as session:
        assert session.get(Order, 1).status == "preparing"
