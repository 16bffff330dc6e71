"""
Embedding model registry configuration.
Loads and saves the registered embedding models from a YAML file of the form:

    models:
      minilm:
        name: all-minilm
        dims: 384
        type: ollama
"""

from typing import Dict, Any, List, Optional, Union
import yaml
from pathlib import Path

from elastic_fluent.models.schemas import ModelEntry
from elastic_fluent.utils.logger import LoggerMixin
from .settings import settings


class ModelRegistryManager(LoggerMixin):
    """Manages model registry loading and saving."""

    def __init__(self, registry_path: Optional[Union[str, Path]] = None):
        """Initialize the registry manager."""
        self.registry_path = Path(registry_path) if registry_path else None
        self._models: Optional[List[ModelEntry]] = None

    @staticmethod
    def parse_registry(data: Optional[Dict[str, Any]]) -> List[ModelEntry]:
        """
        Convert registry data into model entries.

        Args:
            data: Mapping with a `models` section keyed by model id

        Returns:
            List of ModelEntry, in file order
        """
        models = (data or {}).get("models") or {}
        return [
            ModelEntry(
                model_id=model_id,
                model_name=entry["name"],
                dimensions=entry["dims"],
                provider_type=entry.get("type", "ollama")
            )
            for model_id, entry in models.items()
        ]

    def load_registry(self, registry_path: Optional[Union[str, Path]] = None) -> List[ModelEntry]:
        """
        Load model entries from a YAML file, or an empty registry.

        Args:
            registry_path: Path to YAML registry file

        Returns:
            List of ModelEntry instances
        """
        if registry_path:
            self.registry_path = Path(registry_path)

        if self.registry_path and self.registry_path.exists():
            try:
                with open(self.registry_path, 'r') as f:
                    registry_data = yaml.safe_load(f)

                self._models = self.parse_registry(registry_data)
                self.logger.info(f"Loaded {len(self._models)} models from {self.registry_path}")

            except Exception as e:
                self.logger.warning(f"Failed to load model registry from {self.registry_path}: {e}")
                self.logger.info("Using empty model registry")
                self._models = []
        else:
            self.logger.info("No model registry file found, using empty registry")
            self._models = []

        return self._models

    def get_models(self) -> List[ModelEntry]:
        """Get registered models, loading if necessary."""
        if self._models is None:
            return self.load_registry()
        return self._models

    def save_registry(self, models: List[ModelEntry], path: Optional[Union[str, Path]] = None) -> None:
        """
        Save model entries to a YAML file.

        Args:
            models: Entries to save
            path: Optional path to save to, uses self.registry_path if not provided
        """
        save_path = Path(path) if path else self.registry_path
        if not save_path:
            raise ValueError("No save path specified")

        save_path.parent.mkdir(parents=True, exist_ok=True)

        registry_data = {
            "models": {
                entry.model_id: {
                    "name": entry.model_name,
                    "dims": entry.dimensions,
                    "type": entry.provider_type.value
                }
                for entry in models
            }
        }

        with open(save_path, 'w') as f:
            yaml.dump(registry_data, f, default_flow_style=False, indent=2, sort_keys=False)

        self.logger.info(f"Saved {len(models)} models to {save_path}")


# Global registry manager instance
_registry_manager: Optional[ModelRegistryManager] = None


def get_model_registry_manager(registry_path: Optional[Union[str, Path]] = None) -> ModelRegistryManager:
    """Get global model registry manager."""
    global _registry_manager
    if _registry_manager is None:
        _registry_manager = ModelRegistryManager(registry_path or settings.MODEL_REGISTRY_PATH)
    return _registry_manager


def get_registered_models(registry_path: Optional[Union[str, Path]] = None) -> List[ModelEntry]:
    """Get the models of the global registry."""
    manager = get_model_registry_manager(registry_path)
    return manager.get_models()
