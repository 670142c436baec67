from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import logging
import os

db = SQLAlchemy()


def create_app(config_name=None):
    """Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    from config import config
    app.config.from_object(config.get(config_name, config['default']))

    from app.logging_setup import configure_logging
    configure_logging(app)
    _init_sentry(app)

    # Initialize extensions
    db.init_app(app)
    CORS(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})

    from app.extensions import limiter
    limiter.init_app(app)

    from app.middleware import RequestIdMiddleware
    app.wsgi_app = RequestIdMiddleware(app.wsgi_app)

    # Booking engine collaborators
    from app.services.settings import DatabaseSettings
    from app.services.notifications import NotificationDispatcher
    settings = DatabaseSettings()
    app.extensions['cablink.settings'] = settings
    app.extensions['cablink.dispatcher'] = NotificationDispatcher.from_config(app.config, settings)

    # Register blueprints
    from app.routes import bookings_bp, settings_bp, subscriptions_bp, notifications_bp

    api_prefix = app.config['API_PREFIX']
    app.register_blueprint(bookings_bp, url_prefix=f'{api_prefix}/bookings')
    app.register_blueprint(settings_bp, url_prefix=f'{api_prefix}/settings')
    app.register_blueprint(subscriptions_bp, url_prefix=f'{api_prefix}/subscriptions')
    app.register_blueprint(notifications_bp, url_prefix=f'{api_prefix}/notifications')

    from app.errors import register_error_handlers
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health():
        return {'status': 'healthy', 'service': 'cablink-backend'}, 200

    @app.errorhandler(429)
    def ratelimit_handler(e):
        return jsonify({'error': 'Too many requests. Please try again later.'}), 429

    # Create all tables on startup
    from app import models  # noqa: F401
    with app.app_context():
        db.create_all()

    if app.config.get('ENABLE_SCHEDULER'):
        from app.scheduler import init_scheduler
        app.extensions['cablink.scheduler'] = init_scheduler(app)

    return app


def _init_sentry(app):
    """Sentry error monitoring (optional -- only active when SENTRY_DSN is set)"""
    dsn = app.config.get('SENTRY_DSN')
    if not dsn:
        return
    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=0.1,
    )
    logging.getLogger(__name__).info('Sentry error monitoring enabled')
