import datetime
from decimal import Decimal

import pytest
from flask_jwt_extended import create_access_token

from fintrack import create_app
from fintrack.config import TestConfig
from fintrack.extensions import db
from fintrack.models import User, Category, Transaction


@pytest.fixture()
def app():
    """
    Fresh application with an in-memory SQLite database per test.
    """
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def ctx(app):
    """
    Pushes an app context for tests that work with the models directly.
    Do not combine with ``client``: Flask-Login caches the user on ``g``.
    """
    with app.app_context():
        yield db.session
        db.session.rollback()


def create_user(app, username):
    with app.app_context():
        user = User(username=username, email=f"{username}@example.com")
        user.set_password("secret123")
        db.session.add(user)
        db.session.commit()
        return user.id


def bearer(app, user_id):
    with app.app_context():
        token = create_access_token(identity=str(user_id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def user_id(app):
    return create_user(app, "alice")


@pytest.fixture()
def other_user_id(app):
    return create_user(app, "bob")


@pytest.fixture()
def auth_headers(app, user_id):
    return bearer(app, user_id)


@pytest.fixture()
def other_headers(app, other_user_id):
    return bearer(app, other_user_id)


@pytest.fixture()
def make_category(app):
    def _make(name="Groceries", type="expense", user_id=None, color="#EF4444", icon="cart"):
        with app.app_context():
            cat = Category(name=name, type=type, user_id=user_id, color=color, icon=icon)
            db.session.add(cat)
            db.session.commit()
            return cat.id
    return _make


@pytest.fixture()
def make_transaction(app):
    def _make(user_id, amount, on_date=None, type="expense", category_id=None, description="test"):
        with app.app_context():
            tx = Transaction(
                user_id=user_id,
                amount=Decimal(str(amount)),
                type=type,
                date=on_date or datetime.date.today(),
                category_id=category_id,
                description=description,
            )
            db.session.add(tx)
            db.session.commit()
            return tx.id
    return _make
