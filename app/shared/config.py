"""
Centralized configuration management.

Sources, later overriding earlier:
1) `env.example` (committed, safe placeholders)
2) `env.local` (optional, MUST NOT be committed)
3) System environment variables (highest priority)
"""

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger

DEFAULT_DATABASE_URL = 'postgresql://localhost:5432/postgres'


class EnvironConfig:
    """
    Singleton configuration class that loads environment variables from env files
    and system environment, providing dictionary-like access with default values.
    """

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(EnvironConfig, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._config = {}
            self._load_config()
            EnvironConfig._initialized = True

    def _load_config(self):
        root = Path(__file__).parent.parent.parent

        example_path = root / "env.example"
        if example_path.exists():
            self._config.update(dotenv_values(example_path))
            logger.info("Loaded environment variables from {}", example_path)

        local_path = root / "env.local"
        if local_path.exists():
            self._config.update(dotenv_values(local_path))
            logger.info("Loaded and overrode environment variables from {}", local_path)

        self._config.update(os.environ)

    def __getitem__(self, key):
        if key not in self._config:
            raise KeyError(f"Configuration key '{key}' not found")

        return self._config[key]

    def get(self, key, default=None):
        return self._config.get(key, default)

    def clear(self):
        """Clear configuration. Useful for testing."""
        self._config.clear()
        logger.info("Configuration cleared")

    def reload(self):
        """Reload configuration from files and environment."""
        self._config.clear()
        self._load_config()
        logger.info("Configuration reloaded")

    def __contains__(self, key):
        return key in self._config

    def __iter__(self):
        return iter(self._config)

    def keys(self):
        return self._config.keys()

    def values(self):
        return self._config.values()

    def items(self):
        return self._config.items()

    def get_database_url(self, label: str = "default") -> str:
        """
        Get database connection URL for a specific label.

        Lookup order for the default label is DATABASE_URL_DEFAULT,
        POSTGRES_URL_DEFAULT, DATABASE_URL, POSTGRES_URL, then a local fallback.
        Other labels use DATABASE_URL_<LABEL> or POSTGRES_URL_<LABEL>.

        Args:
            label: Database connection label (default: "default")

        Returns:
            str: Database connection URL, empty when a non-default label is unknown
        """
        suffix = label.upper()
        candidates = [f'DATABASE_URL_{suffix}', f'POSTGRES_URL_{suffix}']
        if label == "default":
            candidates += ['DATABASE_URL', 'POSTGRES_URL']

        for key in candidates:
            url = self.get(key)
            if url:
                return url

        return DEFAULT_DATABASE_URL if label == "default" else ''


# Global configuration instance
config = EnvironConfig()
