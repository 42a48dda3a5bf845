# intrafiles/utils/security.py
from datetime import datetime, timedelta, timezone

from flask import current_app
from jose import JWTError, jwt


def create_access_token(user) -> str:
    """Signs the login token: {id, role, name} + exp (JWT_EXPIRES_MINUTES)."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=current_app.config['JWT_EXPIRES_MINUTES'])
    to_encode = {'id': user.id, 'role': user.role, 'name': user.name, 'exp': expire}
    return jwt.encode(to_encode, current_app.config['JWT_SECRET'], algorithm=current_app.config['JWT_ALGORITHM'])


def decode_access_token(token: str):
    """Returns the token payload, or None when invalid or expired."""
    try:
        return jwt.decode(
            token, current_app.config['JWT_SECRET'], algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except JWTError as e:
        current_app.logger.debug("Rejected token: %s", e)
        return None
