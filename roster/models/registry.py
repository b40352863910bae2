"""
Model Registry - centralized model access using the Flask extension pattern

Models are built by factory functions at app creation time, so code that
needs a model class looks it up here instead of importing it.

Usage:
    from roster.models import get_models

    StoredDocument = get_models()['StoredDocument']
"""
from flask import current_app
from typing import Dict, Any, Optional


class ModelRegistry:
    """Flask extension holding the model classes built for this app"""

    def __init__(self, app=None):
        self.models: Dict[str, Any] = {}
        if app:
            self.init_app(app)

    def init_app(self, app):
        app.extensions['models'] = self

    def register(self, models_dict: Dict[str, Any]):
        """
        Register all models with the registry

        Args:
            models_dict: Dictionary mapping model names to model classes
        """
        self.models = models_dict

    def get(self, model_name: str) -> Optional[Any]:
        return self.models.get(model_name)

    def __getitem__(self, model_name: str) -> Any:
        return self.models[model_name]


# Global instance
model_registry = ModelRegistry()


def get_models() -> Dict[str, Any]:
    """
    Get all registered models from the current app context

    Raises:
        RuntimeError: If the registry was not initialized for this app
    """
    if 'models' not in current_app.extensions:
        raise RuntimeError(
            "ModelRegistry not initialized. "
            "Ensure model_registry.init_app(app) is called during app setup."
        )

    return current_app.extensions['models'].models
