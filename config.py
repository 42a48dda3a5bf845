# config.py
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-change-in-production-2025!'
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or 'sqlite:///intrafiles.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT issued by /api/auth/login : payload {id, role, name}, 1 hour
    JWT_SECRET = os.getenv('JWT_SECRET') or 'supersecretkey'
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES_MINUTES = int(os.getenv('JWT_EXPIRES_MINUTES', 60))

    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER') or os.path.join(BASE_DIR, 'uploads')

    # 50 MB per file, a bulk request may carry many of them
    MAX_FILE_SIZE = 50 * 1024 * 1024
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', 500 * 1024 * 1024))
    MAX_FILES_PER_REQUEST = 10
    BULK_MAX_FILES = 100

    # ==========================================================
    # ALLOWED EXTENSIONS
    # ==========================================================
    ALLOWED_EXTENSIONS = {
        # ─── Images ───
        'jpg', 'jpeg', 'png', 'gif', 'bmp', 'webp', 'svg',

        # ─── Documents ───
        'pdf', 'doc', 'docx', 'xls', 'xlsx', 'ppt', 'pptx',

        # ─── Text ───
        'txt', 'csv', 'json', 'xml', 'html', 'css', 'js',

        # ─── Video ───
        'mp4', 'avi', 'mov', 'wmv', 'flv', 'webm',

        # ─── Audio ───
        'mp3', 'wav', 'flac', 'aac', 'ogg',

        # ─── Archives ───
        'zip', 'rar', '7z', 'tar', 'gz',
    }

    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'test-secret'
    JWT_SECRET = 'test-jwt-secret'
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = 'DEBUG'
