"""Small builders shared by the test modules."""

import io

from intrafiles import db
from intrafiles.models import User


def make_user(app, user_name, password='secret123', **fields):
    """Create a user directly in the database.

    Returns:
        Dict with id, user_name and the clear password.
    """
    with app.app_context():
        user = User(user_name=user_name, name=fields.pop('name', user_name.title()), **fields)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return {'id': user.id, 'user_name': user_name, 'password': password}


def upload_part(name, content=b'hello world'):
    """A (stream, filename) pair as the Flask test client expects for files."""
    return io.BytesIO(content), name
