"""
Configuration loader for SlideFlix

Handles loading and merging of YAML configuration files with environment variable overrides.
"""

import os
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List

logger = logging.getLogger(__name__)

ENV_PREFIX = 'SLIDEFLIX_'


class ConfigLoader:
    """
    Loads and manages configuration from YAML files with cascading priority:
    1. Default configuration (slideflix/config/default.yaml)
    2. User configuration (config/config.yaml at project root)
    3. Environment variable overrides (SLIDEFLIX_SECTION_KEY format)
    """

    def __init__(self, user_config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """
        Initialize configuration loader

        Args:
            user_config_path: Path to user config file (default: config/config.yaml at project root)
            environ: Environment mapping used for overrides (default: os.environ)
        """
        self.package_dir = Path(__file__).parent
        self.default_config_path = self.package_dir / "default.yaml"

        if user_config_path:
            self.user_config_path = Path(user_config_path)
        else:
            # slideflix/config/ -> project root -> config/
            project_root = self.package_dir.parent.parent
            self.user_config_path = project_root / "config" / "config.yaml"

        self._environ = environ
        self.config = self._load_config()

    def _load_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML file and return as dictionary"""
        if not file_path.exists():
            logger.debug(f"Config file not found: {file_path}")
            return {}

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Error loading config from {file_path}: {e}")
            return {}

        return config or {}

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recursively merge two configuration dictionaries

        Args:
            base: Base configuration
            override: Configuration to merge on top

        Returns:
            Merged configuration
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _coerce(raw: str) -> Any:
        """Parse an environment string as int, float or bool, else keep it."""
        try:
            if '.' in raw:
                return float(raw)
            return int(raw)
        except ValueError:
            pass

        lowered = raw.lower()
        if lowered in ('true', 'yes'):
            return True
        if lowered in ('false', 'no'):
            return False
        return raw

    def _resolve_path(self, config: Dict[str, Any], parts: List[str]) -> Optional[List[str]]:
        """
        Map underscore-separated parts onto a key path.

        Keys that themselves contain underscores (``timeout_seconds``) are
        matched greedily against the keys already present, so
        ``ENCODE_TIMEOUT_SECONDS`` resolves to ``encode.timeout_seconds``.
        Unknown tails become a single leaf key.
        """
        path: List[str] = []
        current: Any = config
        i = 0
        while i < len(parts):
            if not isinstance(current, dict):
                return None

            matched = None
            for j in range(len(parts), i, -1):
                candidate = '_'.join(parts[i:j])
                if candidate in current:
                    matched = (candidate, j)
                    break

            if matched is None:
                if not path:
                    # Unknown section: first part names it
                    path.append(parts[i])
                    i += 1
                path.append('_'.join(parts[i:]))
                return path

            key, i = matched
            path.append(key)
            current = current[key]

        return path

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides to configuration

        Environment variables should be in format: SLIDEFLIX_SECTION_KEY
        Example: SLIDEFLIX_ENCODE_TIMEOUT_SECONDS=60

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with environment overrides applied
        """
        result = self._merge_configs({}, config)
        environ = self._environ if self._environ is not None else os.environ

        for env_key, env_value in environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue

            parts = env_key[len(ENV_PREFIX):].lower().split('_')
            if len(parts) < 2:
                continue

            path = self._resolve_path(result, parts)
            if not path or len(path) < 2:
                continue

            current = result
            for part in path[:-1]:
                if part not in current:
                    current[part] = {}
                elif not isinstance(current[part], dict):
                    # Can't override non-dict value with nested structure
                    break
                current = current[part]
            else:
                current[path[-1]] = self._coerce(env_value)
                logger.debug(f"Applied env override: {env_key} -> {'.'.join(path)}")

        return result

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration with cascading priority

        Returns:
            Merged configuration dictionary
        """
        logger.debug(f"Loading default config from: {self.default_config_path}")
        config = self._load_yaml(self.default_config_path)

        if self.user_config_path.exists():
            logger.info(f"Loading user config from: {self.user_config_path}")
            config = self._merge_configs(config, self._load_yaml(self.user_config_path))
        else:
            logger.debug(f"No user config found at: {self.user_config_path}")

        return self._apply_env_overrides(config)

    def get(self, *keys, default: Any = None) -> Any:
        """
        Get configuration value using dot notation or multiple keys

        Examples:
            config.get('encode', 'crf')
            config.get('encode.crf')
            config.get('composition', 'canvas', 'width', default=1920)
        """
        if len(keys) == 1 and isinstance(keys[0], str) and '.' in keys[0]:
            keys = keys[0].split('.')

        current = self.config
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section, or an empty dict."""
        return self.get(section, default={}) or {}

    def reload(self) -> None:
        """Reload configuration from files"""
        self.config = self._load_config()
        logger.info("Configuration reloaded")

    def __repr__(self) -> str:
        return f"ConfigLoader(default={self.default_config_path}, user={self.user_config_path})"
