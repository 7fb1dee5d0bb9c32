"""
Configuration for the Emission Test Portal
Supports development, testing, and production environments
"""
import os
from datetime import timedelta


class Config:
    """Base configuration"""
    # Flask
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        raise ValueError('SECRET_KEY environment variable is required for security')

    # Database (only used by the sql storage backend)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Document storage
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'sql')
    TESTS_COLLECTION = os.environ.get('TESTS_COLLECTION', 'pollution_tests')
    USERS_COLLECTION = os.environ.get('USERS_COLLECTION', 'users')
    FIREBASE_CREDENTIALS = os.environ.get('FIREBASE_CREDENTIALS')
    FIREBASE_PROJECT_ID = os.environ.get('FIREBASE_PROJECT_ID')

    # Reporting
    REPORT_TIMEZONE = os.environ.get('REPORT_TIMEZONE', 'UTC')
    REPORTS_PER_PAGE = int(os.environ.get('REPORTS_PER_PAGE', 50))

    # Bootstrap admin account
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@example.com')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'admin123')

    # Session
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Security headers
    PREFERRED_URL_SCHEME = 'https'


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    SQLALCHEMY_ECHO = False
    SESSION_COOKIE_SECURE = False
    PREFERRED_URL_SCHEME = 'http'

    @staticmethod
    def init_db_uri():
        """Get database URI for development"""
        project_root = os.path.abspath(os.path.dirname(__file__))
        instance_path = os.path.join(project_root, 'instance')
        os.makedirs(instance_path, exist_ok=True)
        db_path = os.path.join(instance_path, 'emission_portal.db')
        return f'sqlite:///{db_path}'


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    STORAGE_BACKEND = 'memory'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SESSION_COOKIE_SECURE = False
    PREFERRED_URL_SCHEME = 'http'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'firestore')

    @staticmethod
    def init_db_uri():
        """Get database URI for production (sql backend only)"""
        db_url = os.environ.get('DATABASE_URL')
        if not db_url:
            return None

        # Handle heroku postgres:// -> postgresql://
        if db_url.startswith('postgres://'):
            db_url = db_url.replace('postgres://', 'postgresql://', 1)

        return db_url


def get_config():
    """Get configuration based on environment"""
    env = os.environ.get('FLASK_ENV', 'development').lower()

    if env == 'testing':
        return TestingConfig
    elif env == 'production':
        return ProductionConfig
    else:
        return DevelopmentConfig
