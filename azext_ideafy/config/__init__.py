"""Extension configuration management."""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from knack.util import CLIError

logger = logging.getLogger(__name__)


def _sanitize_for_yaml(data: Any) -> Any:
    """Recursively convert values to plain Python types for safe YAML.

    Azure CLI wraps parameter defaults in ``knack.validators.DefaultStr``
    (a *str* subclass).  ``yaml.safe_dump`` refuses such subclasses, so
    they are coerced to the corresponding built-in type before saving.
    """
    if isinstance(data, dict):
        return {str(k): _sanitize_for_yaml(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_sanitize_for_yaml(item) for item in data]
    # Order matters: bool before int (bool is an int subclass)
    if isinstance(data, bool):
        return bool(data)
    if isinstance(data, int):
        return int(data)
    if isinstance(data, float):
        return float(data)
    if isinstance(data, str):
        return str(data)
    return data


# --- value validation helpers ---

_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)

_INT_KEYS = frozenset({"api.timeout", "api.chunk_size"})
_BOOL_KEYS = frozenset({"stream.flush_trailing_fragment", "stream.show_live"})
_TRUE_VALUES = frozenset({"true", "yes", "1", "on"})
_FALSE_VALUES = frozenset({"false", "no", "0", "off"})

DEFAULT_API_URL = "https://ideafy-blue.vercel.app/analyze"

# Environment variables that override the file, mapped to config keys.
ENV_OVERRIDES = {
    "IDEAFY_API_URL": "api.url",
    "IDEAFY_TIMEOUT": "api.timeout",
}

DEFAULT_CONFIG = {
    "api": {
        "url": DEFAULT_API_URL,
        # Seconds to wait for the connection and between streamed bytes.
        "timeout": 300,
        # Bytes per read; 0 yields data as soon as it arrives.
        "chunk_size": 0,
    },
    "analysis": {
        "trends": "auto",
        "competitors": "auto",
    },
    "stream": {
        "flush_trailing_fragment": False,
        "show_live": True,
    },
}


class IdeafyConfig:
    """Manages ideafy.yaml configuration.

    Provides dot-notation get/set for nested config values and handles
    persistence to disk.  The file is optional: when it does not exist
    the built-in defaults apply.
    """

    CONFIG_FILENAME = "ideafy.yaml"

    def __init__(self, config_dir: str | None = None):
        self.config_dir = Path(config_dir or Path.cwd())
        self.config_path = self.config_dir / self.CONFIG_FILENAME
        self._config: dict = copy.deepcopy(DEFAULT_CONFIG)
        self._stored: dict = copy.deepcopy(DEFAULT_CONFIG)

    # ------------------------------------------------------------------ #
    #  Persistence                                                        #
    # ------------------------------------------------------------------ #

    def load(self) -> dict:
        """Load ideafy.yaml over the defaults, then apply env overrides.

        Returns:
            The merged config dict.

        Raises:
            CLIError if the file exists but is not valid YAML.
        """
        self._stored = self._read_file()
        self._config = copy.deepcopy(self._stored)

        for env_name, key in ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value:
                self._set_nested(self._config, key, self._coerce_value(key, value))

        return self._config

    def _read_file(self) -> dict:
        """Return the defaults merged with ideafy.yaml (no env overrides)."""
        data = copy.deepcopy(DEFAULT_CONFIG)
        if not self.config_path.exists():
            logger.debug("No %s found in %s, using defaults", self.CONFIG_FILENAME, self.config_dir)
            return data

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise CLIError(f"Invalid configuration file {self.config_path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise CLIError(f"Invalid configuration file {self.config_path}: expected a mapping.")
        self._apply_overrides_to(data, loaded)
        return data

    def save(self):
        """Persist the file-backed configuration to ideafy.yaml.

        Environment overrides only apply to the running process and are
        never written back.
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                _sanitize_for_yaml(self._stored),
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

        logger.debug("Configuration saved to %s", self.config_path)

    def create_default(self, overrides: dict | None = None) -> dict:
        """Write a new configuration file from the defaults.

        Args:
            overrides: Values to override in the default config.  Each
                leaf is validated like ``set``.

        Returns:
            The new config dict.
        """
        self._stored = copy.deepcopy(DEFAULT_CONFIG)
        for key, value in self._flatten(overrides or {}):
            self._set_nested(self._stored, key, self._coerce_value(key, value))
        self.save()
        self._config = copy.deepcopy(self._stored)
        return self.to_dict()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-separated key.

        Examples:
            config.get("api.url")
            config.get("stream.show_live")
        """
        current = self._config
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def set(self, key: str, value: Any):
        """Validate, set and persist a config value by dot-separated key."""
        coerced = self._coerce_value(key, value)
        if key not in dict(self._flatten(DEFAULT_CONFIG)):
            logger.warning("'%s' is not a known ideafy setting; it is saved but has no effect.", key)
        self._set_nested(self._stored, key, coerced)
        self._set_nested(self._config, key, coerced)
        self.save()

    def to_dict(self) -> dict:
        return copy.deepcopy(self._config)

    def exists(self) -> bool:
        return self.config_path.exists()

    # ------------------------------------------------------------------ #
    #  Validation                                                         #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _coerce_value(key: str, value: Any) -> Any:
        """Enforce constraints at config-set time and return the typed value.

        Rules:
          - api.url must be an http(s) URL.
          - api.timeout and api.chunk_size must be non-negative integers.
          - stream.* flags must be booleans (true/false/yes/no/1/0).
        """
        if key == "api.url":
            url = str(value).strip()
            if not _URL_PATTERN.match(url):
                raise CLIError(
                    f"Invalid analysis endpoint: {value}\n"
                    "The endpoint must be an http:// or https:// URL."
                )
            return url

        if key in _INT_KEYS:
            try:
                number = int(str(value).strip())
            except ValueError:
                raise CLIError(f"'{key}' must be an integer, got '{value}'.")
            if number < 0:
                raise CLIError(f"'{key}' must not be negative, got {number}.")
            return number

        if key in _BOOL_KEYS:
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _TRUE_VALUES:
                return True
            if text in _FALSE_VALUES:
                return False
            raise CLIError(f"'{key}' must be true or false, got '{value}'.")

        if key in ("analysis.trends", "analysis.competitors"):
            return str(value).strip() or "auto"

        return value

    # ------------------------------------------------------------------ #
    #  Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _apply_overrides_to(self, base: dict, overlay: dict):
        """Recursively merge *overlay* into *base*."""

        def merge(b: dict, o: dict):
            for key, value in o.items():
                if isinstance(value, dict) and isinstance(b.get(key), dict):
                    merge(b[key], value)
                else:
                    b[key] = value

        merge(base, overlay)

    @staticmethod
    def _set_nested(target: dict, key: str, value: Any):
        """Set a dot-separated *key* in *target*, creating intermediate dicts."""
        parts = key.split(".")
        current = target
        for part in parts[:-1]:
            if part not in current or not isinstance(current[part], dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    @classmethod
    def _flatten(cls, data: dict, prefix: str = "") -> list[tuple[str, Any]]:
        """Return ``(dotted_key, leaf_value)`` pairs for a nested dict."""
        pairs = []
        for key, value in data.items():
            dotted = f"{prefix}{key}"
            if isinstance(value, dict):
                pairs.extend(cls._flatten(value, dotted + "."))
            else:
                pairs.append((dotted, value))
        return pairs
