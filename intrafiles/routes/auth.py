# intrafiles/routes/auth.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from intrafiles import db
from intrafiles.models import User
from intrafiles.utils.security import create_access_token

auth_bp = Blueprint('auth', __name__)


#route for login, returns a bearer token
@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user_name = str(data.get('user_name') or '').strip()
    password = data.get('password') or ''

    if not user_name or not password:
        return jsonify({"error": "Username and password are required"}), 400

    user = User.query.filter_by(user_name=user_name).first()
    if not user or not user.check_password(password):
        current_app.logger.info("Failed login for %s", user_name)
        return jsonify({"error": "Invalid username or password"}), 401

    if not user.is_active:
        return jsonify({"error": "Account is disabled"}), 403

    user.last_login = db.func.now()
    db.session.commit()

    return jsonify({
        "message": "Login successful",
        "token": create_access_token(user),
        "user": user.to_dict(),
    })


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({"user": current_user.to_dict()})
