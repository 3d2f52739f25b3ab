"""
Configuration settings for Stock Forecast
"""

import os
from datetime import timedelta


class Config:
    """Base configuration"""
    # App
    APP_NAME = "Stock Forecast"
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        'sqlite:///stock_forecast.db'
    )
    # Fix for Render PostgreSQL URLs
    if SQLALCHEMY_DATABASE_URI and SQLALCHEMY_DATABASE_URI.startswith('postgres://'):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # Rate limiting
    RATELIMIT_DEFAULT = os.environ.get('RATELIMIT_DEFAULT', "100 per minute")
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL', 'memory://')

    # Session
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)

    # Forecasting
    FORECAST_DEFAULT_PERIODS = int(os.environ.get('FORECAST_DEFAULT_PERIODS', 30))
    FORECAST_HISTORY_DAYS = int(os.environ.get('FORECAST_HISTORY_DAYS', 90))
    DASHBOARD_FORECAST_PERIODS = int(os.environ.get('DASHBOARD_FORECAST_PERIODS', 6))
    DASHBOARD_TREND_MONTHS = int(os.environ.get('DASHBOARD_TREND_MONTHS', 12))

    # Listing and orders
    DEFAULT_PAGE_SIZE = int(os.environ.get('DEFAULT_PAGE_SIZE', 10))
    ORDER_AUTO_REJECT_DAYS = int(os.environ.get('ORDER_AUTO_REJECT_DAYS', 7))


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        'sqlite:///stock_forecast_dev.db'
    )


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False

    # Ensure secret key is set in production
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY and os.environ.get('FLASK_ENV') == 'production':
        raise ValueError("SECRET_KEY must be set in production")


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    RATELIMIT_ENABLED = False


# Config mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Get config based on environment"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
