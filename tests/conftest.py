"""Shared fixtures for the server and client tests."""

import pytest

from config import TestConfig
from intrafiles import create_app, db
from intrafiles.models import Category, Folder
from helpers import make_user


@pytest.fixture
def app(tmp_path):
    """Create an app bound to an in-memory database and a temp upload folder.

    Yields:
        Flask application configured for testing.
    """
    class Config(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / 'uploads')

    app = create_app(Config)
    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def user(app):
    """Create the active test user.

    Returns:
        Dict with id, user_name and the clear password.
    """
    return make_user(app, 'alice', name='Alice Martin', department='HR')


@pytest.fixture
def auth_headers(client, user):
    """Log the test user in through the API.

    Returns:
        Authorization header carrying the bearer token.
    """
    response = client.post('/api/auth/login', json={
        'user_name': user['user_name'],
        'password': user['password'],
    })
    assert response.status_code == 200
    return {'Authorization': f"Bearer {response.get_json()['token']}"}


@pytest.fixture
def category(app, user):
    """Create the 'HR' category.

    Returns:
        Category id.
    """
    with app.app_context():
        cat = Category(name='HR', description='Human resources', created_by=user['id'])
        db.session.add(cat)
        db.session.commit()
        return cat.id


@pytest.fixture
def folder(app, user, category):
    """Create the top level 'Policies' folder of the HR category.

    Returns:
        Folder id.
    """
    with app.app_context():
        f = Folder(name='Policies', path='Policies', category_id=category, created_by=user['id'])
        db.session.add(f)
        db.session.commit()
        return f.id

