"""
Argus User Configuration

Hierarchical config system with global defaults + local overrides:
- Global: ~/.argus/config.json (cross-project settings)
- Local: .argus/config.json (project-specific overrides)

Config structure:
{
  "search": {
    "top_k": 5,                    // Results per query
    "max_file_size": 100000,       // Characters kept per document
    "similarity_threshold": 0.5,
    "include_extensions": null,    // e.g. [".py", ".ts"]
    "exclude_patterns": null,      // null -> built-in defaults
    "max_related": null            // Cap on graph-expanded files (null -> min(top_k, 5))
  },
  "embeddings": {
    "provider": "local",           // local | openai | google
    "api_key": null,               // Falls back to provider env vars
    "model": null,
    "dimensions": 128
  }
}
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from argus.embeddings.factory import EmbeddingsConfig
from argus.exceptions import ConfigError
from argus.logging_config import logger
from argus.schemas import SearchConfig


# Default configuration
DEFAULT_CONFIG = {
    "search": {
        "top_k": 5,
        "max_file_size": 100_000,
        "similarity_threshold": 0.5,
        "include_extensions": None,
        "exclude_patterns": None,
        "max_related": None,
    },
    "embeddings": {
        "provider": "local",
        "api_key": None,
        "model": None,
        "dimensions": 128,
    },
}


class UserConfig:
    """
    Manages hierarchical user configuration.

    Load order (with override):
    1. Default config (hardcoded)
    2. Global config (~/.argus/config.json)
    3. Local config (<project>/.argus/config.json)
    """

    def __init__(self, project_root: Optional[Path] = None, global_config_path: Optional[Path] = None):
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.global_config_path = global_config_path or Path.home() / ".argus" / "config.json"
        self.local_config_path = self.project_root / ".argus" / "config.json"

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        config = copy.deepcopy(DEFAULT_CONFIG)

        for label, path in (("global", self.global_config_path), ("local", self.local_config_path)):
            if not path.exists():
                continue
            try:
                with open(path, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load {label} config: {e}")
                continue
            if not isinstance(loaded, dict):
                logger.warning(f"Ignoring {label} config at {path}: expected a JSON object")
                continue
            config = self._deep_merge(config, loaded)
            logger.debug(f"Loaded {label} config from {path}")

        return config

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """
        Deep merge two dictionaries, with override taking precedence.
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value by dot-separated key.

        Examples:
            config.get("search.top_k")          # 5
            config.get("embeddings.provider")   # "local"
        """
        value = self._config

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def search_config(self, **overrides: Any) -> SearchConfig:
        """
        Build a SearchConfig from the "search" section. Non-None overrides win.

        Raises:
            ConfigError: the merged values are invalid
        """
        values = dict(self.get("search", {}))
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return SearchConfig(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid search config: {e}") from e

    def embeddings_config(self, **overrides: Any) -> EmbeddingsConfig:
        """
        Build an EmbeddingsConfig from the "embeddings" section. Non-None overrides win.

        Raises:
            ConfigError: the merged values are invalid
            UnsupportedProviderError: the provider name is unknown
        """
        values = dict(self.get("embeddings", {}))
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return EmbeddingsConfig(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid embeddings config: {e}") from e

    def get_all(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config)

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._config = self._load_config()
