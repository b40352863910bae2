"""
Configuration management for the duty roster service
Handles environment-based settings for storage, week numbering and quotas

Uses the lazy validation pattern so development and testing can run without
production secrets.
"""
import secrets
from decouple import UndefinedValueError, config
from typing import Optional


class Config:
    """Base configuration class"""
    # Flask settings
    SECRET_KEY = config('SECRET_KEY', default=secrets.token_hex(32))
    SQLALCHEMY_DATABASE_URI = config('DATABASE_URL', default='sqlite:///instance/roster.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging settings
    LOG_LEVEL = config('LOG_LEVEL', default='INFO')
    LOG_FILE = config('LOG_FILE', default='logs/roster.log')

    # Document storage: 'database' keeps JSON documents in SQL, 'filesystem' under STORAGE_DATA_DIR
    STORAGE_BACKEND = config('STORAGE_BACKEND', default='database')
    STORAGE_DATA_DIR = config('STORAGE_DATA_DIR', default='data')
    STORAGE_WRITE_RETRIES = config('STORAGE_WRITE_RETRIES', default=3, cast=int)
    STORAGE_LOCK_TIMEOUT = config('STORAGE_LOCK_TIMEOUT', default=10, cast=float)

    # Week numbering and alternating-week availability
    WEEK_START_DAY = config('WEEK_START_DAY', default='Saturday')
    WEEK_PARITY_STRATEGY = config('WEEK_PARITY_STRATEGY', default='week-number')
    OPEN_ENDED_RULE_END = config('OPEN_ENDED_RULE_END', default='2100-01-01')

    # Period administration
    PERIOD_MIN_YEAR = config('PERIOD_MIN_YEAR', default=2020, cast=int)
    PERIOD_MAX_YEAR = config('PERIOD_MAX_YEAR', default=2030, cast=int)

    # Rate limiting
    RATELIMIT_ENABLED = config('RATELIMIT_ENABLED', default=True, cast=bool)
    RATELIMIT_DEFAULT = config('RATELIMIT_DEFAULT', default='300 per hour')

    @classmethod
    def validate(cls) -> None:
        """
        Validate configuration - can be called explicitly or on-demand

        Raises:
            ValueError: If required configuration is missing
        """
        pass  # Base config has no required validation


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    STORAGE_BACKEND = 'database'
    RATELIMIT_ENABLED = False
    LOG_FILE = 'logs/roster-test.log'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    # Session Security
    SESSION_COOKIE_SECURE = config('SESSION_COOKIE_SECURE', default=True, cast=bool)
    SESSION_COOKIE_HTTPONLY = config('SESSION_COOKIE_HTTPONLY', default=True, cast=bool)

    # Database Connection Pool (for production databases)
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': config('DB_POOL_SIZE', default=10, cast=int),
        'pool_recycle': config('DB_POOL_RECYCLE', default=3600, cast=int),
        'pool_pre_ping': True,
        'max_overflow': config('DB_MAX_OVERFLOW', default=20, cast=int),
    }

    # Logging
    LOG_LEVEL = config('LOG_LEVEL', default='WARNING')

    @classmethod
    def validate(cls) -> None:
        """
        Production mode: validate all required settings

        Raises:
            ValueError: If any required configuration is missing
        """
        try:
            secret_key = config('SECRET_KEY')
        except UndefinedValueError:
            raise ValueError(
                "SECRET_KEY environment variable must be set in production. "
                "Generate a secure key with: python -c 'import secrets; print(secrets.token_hex(32))'"
            )

        if len(secret_key) < 32:
            raise ValueError(
                f"SECRET_KEY must be at least 32 characters in production (current: {len(secret_key)})."
            )

        if cls.STORAGE_BACKEND not in ('database', 'filesystem'):
            raise ValueError(f"Unknown STORAGE_BACKEND '{cls.STORAGE_BACKEND}'")


# Configuration mapping
config_mapping = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: Optional[str] = None, validate: bool = False) -> type:
    """
    Get configuration class based on environment.

    Args:
        config_name: Environment name ('development', 'testing', 'production')
        validate: Whether to validate configuration immediately (default: False)

    Returns:
        Config class for the specified environment

    Raises:
        ValueError: If validation is enabled and required variables are missing

    Example:
        >>> config = get_config('production', validate=True)
    """
    if config_name is None:
        config_name = config('FLASK_ENV', default='development')

    config_class = config_mapping.get(config_name, DevelopmentConfig)

    if validate:
        config_class.validate()

    return config_class
