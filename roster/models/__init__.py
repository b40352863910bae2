"""
Database models for the duty roster service
Centralizes SQLAlchemy model creation using the factory pattern
"""
from .stored_document import create_stored_document_model


def init_models(db):
    """
    Initialize all models with the database instance

    Args:
        db: SQLAlchemy database instance

    Returns:
        dict: Dictionary containing all model classes
    """
    StoredDocument = create_stored_document_model(db)

    return {
        'StoredDocument': StoredDocument,
    }


__all__ = [
    'init_models',
    'create_stored_document_model',
    'model_registry',
    'get_models',
]

from .registry import model_registry, get_models
