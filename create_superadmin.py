# create_superadmin.py
# Run once after the first deployment to get an admin account
import os

from intrafiles import create_app, db
from intrafiles.models.user import User

ADMIN_USER_NAME = os.getenv('ADMIN_USER_NAME', 'admin')
ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', 'ChangeMeNow2025!')

app = create_app()

with app.app_context():
    if User.query.filter_by(role='admin').first():
        print("An admin account already exists.")
    else:
        admin = User(
            user_name=ADMIN_USER_NAME,
            name="Administrator",
            role="admin",
            department="IT",
            is_active=True
        )
        admin.set_password(ADMIN_PASSWORD)
        db.session.add(admin)
        db.session.commit()
        print("Admin account created.")
        print(f"Username : {ADMIN_USER_NAME}")
        print("Password : taken from ADMIN_PASSWORD (change the default!)")
