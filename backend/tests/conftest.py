"""
Pytest fixtures for pshop backend tests.

Provides an in-memory database, the Flask test client, and two registered
tenants (user_a, user_b) with live session tokens.
"""

import pytest

from pshop import create_app
from pshop.extensions import db

ADMIN_CODE = "test-admin-code"
PASSWORD = "secret-pass"

# Long enough to survive the write-side photo filter
PHOTO = "data:image/png;base64," + "A" * 200


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'BCRYPT_ROUNDS': 4,
        'PSHOP_ADMIN_CODE': ADMIN_CODE,
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
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


def register(client, username: str, password: str = PASSWORD, admin_code: str = ADMIN_CODE):
    return client.post('/api/auth?action=register', json={
        'username': username,
        'password': password,
        'adminCode': admin_code,
    })


def login(client, username: str, password: str = PASSWORD):
    return client.post('/api/auth?action=login', json={
        'username': username,
        'password': password,
    })


def auth_headers(token: str) -> dict:
    """Helper to create session headers."""
    return {'X-Session-Id': token}


def _tenant(client, username):
    response = register(client, username)
    assert response.status_code == 200, response.json
    data = response.json['data']
    token = data['session']['id']
    return {
        'user': data['user'],
        'token': token,
        'headers': auth_headers(token),
    }


@pytest.fixture(scope='function')
def user_a(client, db_session):
    """Registered tenant A."""
    return _tenant(client, 'alice')


@pytest.fixture(scope='function')
def user_b(client, db_session):
    """Registered tenant B."""
    return _tenant(client, 'bob')


def product_payload(**overrides) -> dict:
    payload = {
        'name': 'Desk Lamp',
        'description': 'LED, warm white',
        'category': 'Lighting',
        'partnerPrice': 10,
        'resalePrice': 25,
        'stock': 5,
        'photos': [],
        'specifications': {},
    }
    payload.update(overrides)
    return payload


def create_product(client, headers, **overrides) -> dict:
    response = client.post('/api/data?resource=products', json=product_payload(**overrides), headers=headers)
    assert response.status_code == 200, response.json
    return response.json['data']['product']
