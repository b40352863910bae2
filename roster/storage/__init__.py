"""
Document storage for the duty roster service

The store is chosen by STORAGE_BACKEND and bound to the app in create_app().

Usage:
    from roster.storage import get_repository

    repo = get_repository()
    periods = repo.read_periods('north', 2026)
"""
from flask import current_app

from .base import Document, DocumentStore
from .database import DatabaseDocumentStore
from .filesystem import FileDocumentStore
from .repository import (
    SiteRepository,
    site_key,
    periods_key,
    events_key,
    settings_key,
)

__all__ = [
    'Document',
    'DocumentStore',
    'DatabaseDocumentStore',
    'FileDocumentStore',
    'SiteRepository',
    'site_key',
    'periods_key',
    'events_key',
    'settings_key',
    'init_storage',
    'get_repository',
]


def init_storage(app, db, models):
    """
    Build the configured document store and attach a repository to the app

    Args:
        app: Flask application
        db: Flask-SQLAlchemy instance
        models: Model classes from init_models()

    Returns:
        SiteRepository bound to the store
    """
    backend = app.config.get('STORAGE_BACKEND', 'database')
    if backend == 'filesystem':
        store = FileDocumentStore(
            app.config.get('STORAGE_DATA_DIR', 'data'),
            lock_timeout=app.config.get('STORAGE_LOCK_TIMEOUT', 10),
        )
    elif backend == 'database':
        store = DatabaseDocumentStore(db, models['StoredDocument'])
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND '{backend}'")

    repository = SiteRepository(store, retries=app.config.get('STORAGE_WRITE_RETRIES', 3))
    app.extensions['roster_repository'] = repository
    app.logger.info(f"Document storage backend: {backend}")
    return repository


def get_repository() -> SiteRepository:
    """
    Get the repository of the current app

    Raises:
        RuntimeError: If storage was not initialized for this app
    """
    if 'roster_repository' not in current_app.extensions:
        raise RuntimeError("Storage not initialized. Ensure init_storage(app, db, models) is called.")
    return current_app.extensions['roster_repository']
