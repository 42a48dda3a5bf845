# intrafiles/models/user.py
from flask_login import UserMixin
from sqlalchemy import event

from intrafiles import bcrypt, db


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    user_name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(150), unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(50), nullable=False, default='user')
    department = db.Column(db.String(100))
    position = db.Column(db.String(100))
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=db.func.now())
    last_login = db.Column(db.DateTime)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Checks a password; legacy plain-text rows are re-hashed on first match."""
        if not self.password_hash:
            return False

        if not self.password_hash.startswith(('$2a$', '$2b$', '$2y$')):
            if self.password_hash == password:
                self.set_password(password)
                db.session.commit()
                return True
            return False

        return bcrypt.check_password_hash(self.password_hash, password)

    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self):
        return {
            'id': self.id,
            'user_name': self.user_name,
            'name': self.name,
            'email': self.email,
            'department': self.department,
            'position': self.position,
            'role': self.role,
        }


@event.listens_for(User.password_hash, 'set', retval=True)
def hash_password_on_set(target, value, oldvalue, initiator):
    """
    Hashes any plain value assigned to user.password_hash.
    Values that already look like a bcrypt hash are kept as they are.
    """
    if value is None:
        return value

    if str(value).startswith(('$2a$', '$2b$', '$2y$')):
        return value

    return bcrypt.generate_password_hash(value).decode('utf-8')
