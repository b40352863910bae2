"""
Flask application factory.

This module implements the application factory pattern for creating
Flask application instances with different configurations.
"""

from flask import Flask
import os
from datetime import datetime

from .extensions import db, migrate, limiter
from .config import get_config


def create_app(config_name=None):
    """
    Application factory function.

    Args:
        config_name: Configuration name (development, testing, production)
                    If None, determined from environment

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Apply ProxyFix for correct IP and scheme handling behind the gateway
    from werkzeug.middleware.proxy_fix import ProxyFix
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # Load configuration
    config_class = get_config(config_name, validate=config_name == 'production')
    app.config.from_object(config_class)

    app.config['VERSION'] = datetime.now().strftime('%Y%m%d%H%M%S')

    # Ensure instance directory exists
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    os.makedirs(os.path.join(basedir, "instance"), exist_ok=True)

    # Update database URI to use absolute path
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///instance/'):
        db_name = app.config['SQLALCHEMY_DATABASE_URI'][len('sqlite:///instance/'):]
        app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{os.path.join(basedir, "instance", db_name)}'

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Initialize rate limiter
    limiter.init_app(app)
    limiter._default_limits = [app.config.get('RATELIMIT_DEFAULT', '300 per hour')]
    limiter._enabled = app.config.get('RATELIMIT_ENABLED', True)

    # Configure logging and error handling
    from roster.error_handlers import setup_logging, register_error_handlers
    setup_logging(app)
    register_error_handlers(app)

    # Initialize database models
    from roster.models import init_models, model_registry
    models = init_models(db)

    model_registry.init_app(app)
    model_registry.register(models)

    # Bind the document store
    from roster.storage import init_storage
    init_storage(app, db, models)

    register_blueprints(app)

    return app


def register_blueprints(app):
    """Register all Flask blueprints."""
    from roster.routes import (
        health_bp,
        availability_bp,
        exceptions_bp,
        periods_bp,
        desiderata_bp,
        reports_bp,
    )

    app.register_blueprint(health_bp)
    app.register_blueprint(availability_bp)
    app.register_blueprint(exceptions_bp)
    app.register_blueprint(periods_bp)
    app.register_blueprint(desiderata_bp)
    app.register_blueprint(reports_bp)

    # Orchestrator probes must never be throttled
    limiter.exempt(health_bp)


def init_db(app):
    """Initialize the database."""
    with app.app_context():
        db.create_all()
