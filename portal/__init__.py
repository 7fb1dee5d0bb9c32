"""
Application factory for the Emission Test Portal
"""
import os
import logging
from flask import Flask, render_template
from portal.extensions import login_manager
from portal.models.user import User
from portal.services.repository import init_repository, get_repository


def setup_logging(app):
    """Configure logging for the application"""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        # Application logger
        file_handler = logging.FileHandler('logs/app.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        # Security logger
        security_handler = logging.FileHandler('logs/security.log')
        security_handler.setFormatter(logging.Formatter(
            '%(asctime)s [SECURITY] %(levelname)s: %(message)s'
        ))
        security_handler.setLevel(logging.INFO)
        security_logger = logging.getLogger('security')
        security_logger.addHandler(security_handler)
        security_logger.setLevel(logging.INFO)
        app.security_logger = security_logger

        app.logger.setLevel(logging.INFO)
        app.logger.info('Emission Test Portal startup')
    else:
        # Development/Testing logging
        app.logger.setLevel(logging.DEBUG)


def create_app(config=None):
    """
    Create and configure the Flask application

    ``config`` may be a configuration class or a plain dict whose keys
    override the environment-selected configuration (used by tests).
    """
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

    app = Flask(
        __name__,
        instance_relative_config=True,
        template_folder=os.path.join(project_root, 'templates'),
        static_folder=os.path.join(project_root, 'static')
    )

    overrides = None
    if isinstance(config, dict):
        overrides = config
        config = None

    if config is None or isinstance(config, str):
        from config import get_config
        config = get_config()

    app.config.from_object(config)

    if hasattr(config, 'init_db_uri'):
        db_uri = config.init_db_uri()
        if db_uri:
            app.config['SQLALCHEMY_DATABASE_URI'] = db_uri

    if overrides:
        app.config.update(overrides)

    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        # Fallback to instance SQLite
        instance_path = os.path.join(project_root, 'instance')
        os.makedirs(instance_path, exist_ok=True)
        db_path = os.path.join(instance_path, 'emission_portal.db')
        app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{db_path}'

    # Setup logging before storage so backend selection is recorded
    setup_logging(app)

    # Initialize extensions and storage
    init_repository(app)
    login_manager.init_app(app)

    # User loader for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        doc = get_repository().get_user(user_id)
        return User.from_document(doc) if doc else None

    # Register blueprints
    from portal.blueprints.public.routes import public_bp
    from portal.blueprints.auth.routes import auth_bp
    from portal.blueprints.dashboard.routes import dashboard_bp
    from portal.blueprints.reports.routes import reports_bp
    from portal.blueprints.users.routes import users_bp

    app.register_blueprint(public_bp, url_prefix='')
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')
    app.register_blueprint(reports_bp, url_prefix='/reports')
    app.register_blueprint(users_bp, url_prefix='/users')

    # Add security headers middleware
    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-XSS-Protection'] = '1; mode=block'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # HSTS (only in production)
        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        csp = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; "
            "connect-src 'self'; "
            "frame-ancestors 'none'"
        )
        response.headers['Content-Security-Policy'] = csp

        return response

    # Trust proxy headers in production
    if not app.debug:
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    # Template filters
    @app.template_filter('datetimeformat')
    def datetimeformat_filter(value, fmt='%Y-%m-%d'):
        """Format any stored date representation"""
        from datetime import datetime, date
        from portal.services.records import normalize_date, EPOCH
        if value is None or value == '':
            return ''
        if isinstance(value, date) and not isinstance(value, datetime):
            value = datetime.combine(value, datetime.min.time())
        elif not isinstance(value, datetime):
            value = normalize_date(value)
            if value == EPOCH:
                return 'N/A'
        return value.strftime(fmt)

    # Register error handlers
    @app.errorhandler(403)
    def forbidden_error(error):
        return render_template('errors/403.html'), 403

    @app.errorhandler(404)
    def not_found_error(error):
        return render_template('errors/404.html'), 404

    @app.errorhandler(429)
    def too_many_requests_error(error):
        return render_template('errors/429.html'), 429

    @app.errorhandler(500)
    def internal_error(error):
        return render_template('errors/500.html'), 500

    with app.app_context():
        initialize_storage()

    return app


def initialize_storage():
    """
    Create the bootstrap admin account if the users collection has none
    """
    from datetime import datetime, timezone
    from flask import current_app

    repository = get_repository()
    if any(doc.get('role') == 'admin' for doc in repository.list_users()):
        return

    admin_email = current_app.config['ADMIN_EMAIL'].strip().lower()
    admin_password = current_app.config['ADMIN_PASSWORD']
    admin = User(
        id=None,
        email=admin_email,
        name='System Administrator',
        role='admin',
        created_at=datetime.now(timezone.utc).isoformat()
    )
    admin.set_password(admin_password)
    repository.create_user(admin.to_document())
    current_app.logger.info(f"Created default admin user - email: {admin_email}")
