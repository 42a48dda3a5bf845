# intrafiles/__init__.py
import logging
import os

from flask import Flask, jsonify
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException

from config import Config

# === CREATE THE EXTENSIONS ===
db = SQLAlchemy()
login_manager = LoginManager()
bcrypt = Bcrypt()
cors = CORS()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # === UPLOAD FOLDER ===
    upload_folder = app.config['UPLOAD_FOLDER']
    if not os.path.exists(upload_folder):
        app.logger.info("Creating upload folder: %s", upload_folder)
        os.makedirs(upload_folder, exist_ok=True)

    # === MODELS ===
    from intrafiles.models import User  # registers every model for create_all

    # === INIT DB, LOGIN MANAGER, BCRYPT, CORS ===
    db.init_app(app)
    login_manager.init_app(app)
    bcrypt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})

    # === USER LOADERS ===
    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # Bearer JWT on every API call, no server-side session
    @login_manager.request_loader
    def load_user_from_request(request):
        from intrafiles.utils.security import decode_access_token

        header = request.headers.get('Authorization', '')
        if not header.startswith('Bearer '):
            return None
        payload = decode_access_token(header[len('Bearer '):].strip())
        if not payload or payload.get('id') is None:
            return None
        user = db.session.get(User, int(payload['id']))
        if user is None or not user.is_active:
            return None
        return user

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required"}), 401

    # === JSON ERRORS ===
    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(413)
    def handle_too_large(e):
        limit = app.config.get('MAX_CONTENT_LENGTH') or 0
        return jsonify({"error": f"Request too large (max {limit // (1024 * 1024)} MB)."}), 413

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.exception("Unhandled error: %s", e)
        db.session.rollback()
        return jsonify({"error": "Internal server error"}), 500

    # === BLUEPRINTS ===
    from .routes.auth import auth_bp
    from .routes.categories import categories_bp
    from .routes.folders import folders_bp
    from .routes.files import files_bp
    from .routes.search import search_bp
    from .routes.activity import activity_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(categories_bp, url_prefix='/api/categories')
    app.register_blueprint(folders_bp, url_prefix='/api/folders')
    app.register_blueprint(files_bp, url_prefix='/api/files')
    app.register_blueprint(search_bp, url_prefix='/api/search')
    app.register_blueprint(activity_bp, url_prefix='/api/activity')

    with app.app_context():
        db.create_all()

    return app
