"""
Pytest fixtures for SalesDash backend tests.

Provides test database setup, users with different capability levels,
bearer-token headers and a small product catalogue.
"""

from datetime import date

import pytest
from salesdash import create_app
from salesdash.config import TestingConfig
from salesdash.extensions import db
from salesdash.models import UserPermission, Employee, Product, PriceHistory, Customer
from salesdash.models.auth import PERMISSION_FLAGS, ROLE_ADMIN, ROLE_CUSTOMER
from salesdash.services import auth_service, session_service
from salesdash.time_utils import utcnow


PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


def make_user(email: str, role: str, first_name: str, last_name: str, flags: dict | None = None):
    user = auth_service.create_user(email, PASSWORD, first_name=first_name, last_name=last_name, role=role)
    if flags is not None:
        row = UserPermission(user_id=user.id, **{f: bool(flags.get(f)) for f in PERMISSION_FLAGS})
        db.session.add(row)
        db.session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(db_session):
    return make_user("admin@salesdash.test", ROLE_ADMIN, "Admin", "User")


@pytest.fixture(scope='function')
def clerk_user(db_session):
    """Non-admin holding every add/edit/delete flag."""
    return make_user(
        "clerk@salesdash.test", ROLE_CUSTOMER, "Carla", "Clerk",
        flags={f: True for f in PERMISSION_FLAGS},
    )


@pytest.fixture(scope='function')
def viewer_user(db_session):
    """Non-admin with no user_permissions row."""
    return make_user("viewer@salesdash.test", ROLE_CUSTOMER, "Vic", "Viewer")


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def headers_for(user) -> dict:
    _session, token = session_service.create_session(user.id)
    return auth_headers(token)


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return headers_for(admin_user)


@pytest.fixture(scope='function')
def clerk_headers(clerk_user):
    return headers_for(clerk_user)


@pytest.fixture(scope='function')
def viewer_headers(viewer_user):
    return headers_for(viewer_user)


@pytest.fixture(scope='function')
def catalog(db_session):
    """Two products with dated prices and one employee."""
    db_session.add(Employee(empno="E001", firstname="Maria", lastname="Santos"))
    db_session.add(Product(prodcode="AK0001", description="Apple Kiwi Juice", unit="bottle"))
    db_session.add(Product(prodcode="NB0001", description="Notebook A5", unit="pc"))
    db_session.add(PriceHistory(prodcode="AK0001", effdate=date(2024, 1, 1), unitprice_cents=4500))
    db_session.add(PriceHistory(prodcode="AK0001", effdate=date(2024, 6, 1), unitprice_cents=4900))
    db_session.add(PriceHistory(prodcode="NB0001", effdate=date(2024, 1, 1), unitprice_cents=5000))
    db_session.commit()


@pytest.fixture(scope='function')
def customer(db_session, admin_user):
    row = Customer(custno="C0001", custname="Acme", address="1 Main St", payterm="COD")
    row.stamp_created(admin_user.id, utcnow())
    db_session.add(row)
    db_session.commit()
    return row
