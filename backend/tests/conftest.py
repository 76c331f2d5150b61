"""
Pytest fixtures for back office tests.

Provides test database setup, a test client, and small factories for users,
categories and catalog items.
"""

from decimal import Decimal

import pytest
from backoffice import create_app
from backoffice.extensions import db
from backoffice.models import Category, Item, User


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'ATTENDANCE_AUTO_CLOSE_ENABLED': False,
    })

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
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_user(db_session):
    """Factory: make_user("anna", full_name="Anna Nowak", role="ADMIN")."""
    def _make(username="cashier", *, full_name=None, role="USER"):
        user = User(
            username=username,
            email=f"{username}@backoffice.test",
            password_hash="x",
            full_name=full_name or username.title(),
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture(scope='function')
def make_category(db_session):
    def _make(name="Groceries", vat_rate="8.00"):
        category = Category(name=name, vat_rate=Decimal(vat_rate))
        db_session.add(category)
        db_session.commit()
        return category
    return _make


@pytest.fixture(scope='function')
def make_item(db_session):
    """Factory for catalog items; price and vat_rate accept strings."""
    def _make(name="Milk", *, stock=10, price="2.50", barcode=None, category=None, vat_rate=None, batch_id=None):
        item = Item(
            name=name,
            price=Decimal(price),
            stock_quantity=stock,
            barcode=barcode,
            category=category,
            vat_rate=Decimal(vat_rate) if vat_rate is not None else None,
            batch_id=batch_id,
        )
        db_session.add(item)
        db_session.commit()
        return item
    return _make


@pytest.fixture(scope='function')
def cashier(make_user):
    return make_user("cashier", full_name="Casey Cashier")
