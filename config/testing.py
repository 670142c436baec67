"""
Testing configuration for the CabLink backend
"""
import os
from config.settings import Config


class TestingConfig(Config):
    """Testing configuration with isolated database and safe defaults"""

    TESTING = True
    DEBUG = False

    # Use in-memory SQLite for fast tests
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'TEST_DATABASE_URL',
        'sqlite:///:memory:'
    )
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Disable rate limiting in tests
    RATELIMIT_ENABLED = False

    # Deliver notifications inline so tests can observe them
    NOTIFICATION_ASYNC = False
    NOTIFICATION_CHANNELS = ['Email', 'SMS', 'WhatsApp']

    # Never reach real providers
    TWILIO_ACCOUNT_SID = None
    TWILIO_AUTH_TOKEN = None
    RESEND_API_KEY = None
    SENDGRID_API_KEY = None

    PRIVATE_ESTIMATE_KM_PER_DAY = 150.0
    TRUST_CLIENT_PRIVATE_PRICE = False

    ENABLE_SCHEDULER = False
    SENTRY_DSN = None

    # Logging
    LOG_LEVEL = 'WARNING'

    # CORS - allow all in tests
    CORS_ORIGINS = ['http://localhost:5173', 'http://localhost:3000']
