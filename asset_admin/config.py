import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-this'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f'sqlite:///{BASE_DIR}/data/asset_management.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # JSON API: forms validate request bodies, no browser session to protect
    WTF_CSRF_ENABLED = False

    TOKEN_MAX_AGE = int(os.environ.get('TOKEN_MAX_AGE') or 8 * 60 * 60)
    DEFAULT_PAGE_NUMBER = 1
    DEFAULT_PAGE_SIZE = int(os.environ.get('DEFAULT_PAGE_SIZE') or 5)
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    CORS_ORIGIN = os.environ.get('CORS_ORIGIN') or '*'

    # First admin account, created by seed_db() when a password is given
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME') or 'admin'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')
    ADMIN_LOCATION = os.environ.get('ADMIN_LOCATION') or 'HCM'


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    LOG_LEVEL = 'WARNING'
    BCRYPT_LOG_ROUNDS = 4
    ADMIN_PASSWORD = None
