"""
Configuration settings for different environments
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _database_url():
    url = os.environ.get('DATABASE_URL') or 'sqlite:///cablink.db'
    # Fix postgres:// to postgresql:// for SQLAlchemy 2.x
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def _channels(raw):
    return [c.strip() for c in raw.split(',') if c.strip()]


class Config:
    """Base configuration"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    API_PREFIX = '/api'

    # Database
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
    }

    # CORS
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

    # Rate limiting (memory:// unless REDIS_URL is set)
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'

    # Pagination
    ITEMS_PER_PAGE = 6
    MAX_ITEMS_PER_PAGE = 100

    # Pricing
    PRIVATE_ESTIMATE_KM_PER_DAY = float(os.environ.get('PRIVATE_ESTIMATE_KM_PER_DAY', '150'))
    TRUST_CLIENT_PRIVATE_PRICE = os.environ.get('TRUST_CLIENT_PRIVATE_PRICE', 'false').lower() in ['true', 'on', '1']

    # Notifications
    NOTIFICATION_CHANNELS = _channels(os.environ.get('NOTIFICATION_CHANNELS', 'Email,SMS,WhatsApp'))
    NOTIFICATION_ASYNC = True

    # SMS / WhatsApp
    TWILIO_ACCOUNT_SID = os.environ.get('TWILIO_ACCOUNT_SID')
    TWILIO_AUTH_TOKEN = os.environ.get('TWILIO_AUTH_TOKEN')
    TWILIO_PHONE_NUMBER = os.environ.get('TWILIO_PHONE_NUMBER')
    TWILIO_WHATSAPP_NUMBER = os.environ.get('TWILIO_WHATSAPP_NUMBER')

    # Email: Resend (preferred) or SendGrid (legacy)
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY')
    SENDGRID_API_KEY = os.environ.get('SENDGRID_API_KEY')
    EMAIL_FROM = os.environ.get('EMAIL_FROM', 'bookings@cablink.in')
    EMAIL_FROM_NAME = os.environ.get('EMAIL_FROM_NAME', 'CabLink')

    # Scheduler
    ENABLE_SCHEDULER = os.environ.get('ENABLE_SCHEDULER', '').lower() == 'true'
    PAYMENT_REMINDER_INTERVAL_HOURS = int(os.environ.get('PAYMENT_REMINDER_INTERVAL_HOURS', 24))

    # Monitoring
    SENTRY_DSN = os.environ.get('SENTRY_DSN')

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    # Production-specific settings
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 20,
        'max_overflow': 40,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }
