#!/usr/bin/env python3
"""
Configuration store: user preferences, app metadata and API credentials

Two documents live in the per-user config directory (default ~/.reel-cli):

    config.json       { "user": {...}, "app": {...}, "lastUpdated": "..." }
    credentials.json  { "apiKey": "...", "encrypted": false, "lastUsed": "..." }

Both are written with owner-only permissions. Loading is forgiving: every
field is merged against its default, and a stored value that is missing or
invalid falls back to the default (with a warning when a stored value is
discarded) instead of failing the whole program.

API key resolution order (the only place TMDB_API_KEY is read):
1. credentials.json
2. TMDB_API_KEY environment variable
"""

import json
import logging
import os
import tempfile
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from reellib.constants import (
    API_KEY_ENV_VAR, CONFIG_DIR_MODE, CONFIG_FILE_MODE, CONFIG_FILENAME,
    CREDENTIALS_FILENAME, DEFAULT_APP_CONFIG, DEFAULT_CONFIG_DIR,
    DEFAULT_USER_CONFIG, IMAGE_QUALITIES, LOG_LEVELS, MAX_IMAGE_SIZES,
)
from reellib.errors import ReelError
from reellib.models import AppConfig, ConfigFile, Credentials, UserConfig, utc_timestamp

logger = logging.getLogger(__name__)

# Fields restricted to an enumeration: document key -> allowed values
_ENUM_FIELDS = {
    'imageQuality': IMAGE_QUALITIES,
    'maxImageSize': MAX_IMAGE_SIZES,
    'logLevel': LOG_LEVELS,
}


def load_config(config_path: Path) -> Any:
    """Load a JSON configuration document"""
    with open(config_path, 'r', encoding='utf-8') as f:
        return json.load(f)


class ConfigManager:
    """Single authority for reading and writing configuration and credentials"""

    def __init__(self, config_dir: Optional[Path] = None,
                 environ: Optional[Mapping[str, str]] = None):
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
        self.config_path = self.config_dir / CONFIG_FILENAME
        self.credentials_path = self.config_dir / CREDENTIALS_FILENAME
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def resolve_config_directory(self) -> Path:
        """Return the config directory, creating it owner-only if absent"""
        if not self.config_dir.is_dir():
            try:
                self.config_dir.mkdir(parents=True, exist_ok=True, mode=CONFIG_DIR_MODE)
            except OSError as e:
                raise ReelError.configuration(
                    f"Failed to create config directory: {e}", path=str(self.config_dir)
                ) from e
        return self.config_dir

    # ------------------------------------------------------------------
    # config.json
    # ------------------------------------------------------------------

    def load_config(self) -> ConfigFile:
        """
        Load config.json merged with defaults.

        Returns a fresh default ConfigFile (not persisted) when the file does
        not exist. Raises a configuration ReelError when the file cannot be
        read or is not a JSON object.
        """
        if not self.config_path.exists():
            return self._default_config()

        try:
            document = load_config(self.config_path)
        except (OSError, ValueError) as e:
            raise ReelError.configuration(
                f"Failed to load configuration: {e}", path=str(self.config_path)
            ) from e

        if not isinstance(document, dict):
            raise ReelError.configuration(
                "Failed to load configuration: document is not a JSON object",
                path=str(self.config_path),
            )

        return self._merge_with_defaults(document)

    def save_config(self, config: ConfigFile) -> None:
        """Stamp lastUpdated and atomically rewrite config.json"""
        config.last_updated = utc_timestamp()
        self._write_document(self.config_path, config.to_dict(), 'configuration')
        logger.debug(f"Saved configuration to {self.config_path}")

    def update_user_config(self, **updates) -> ConfigFile:
        """
        Load, apply user preference updates, save.

        Keys are UserConfig attribute names (image_quality=..., etc.).
        Unknown names or invalid enumerated values raise a configuration
        ReelError; nothing is written in that case.
        """
        config = self.load_config()
        known = {f.name for f in fields(UserConfig)}

        for name, value in updates.items():
            if name not in known:
                raise ReelError.configuration(f"Unknown user setting: {name}", setting=name)
            key = UserConfig.KEYS[name]
            allowed = _ENUM_FIELDS.get(key)
            if allowed and value not in allowed:
                raise ReelError.configuration(
                    f"Invalid value for {name}: {value!r}. Must be one of: {', '.join(allowed)}",
                    setting=name, value=value,
                )
            setattr(config.user, name, value)

        self.save_config(config)
        return config

    # ------------------------------------------------------------------
    # credentials.json
    # ------------------------------------------------------------------

    def load_credentials(self) -> Optional[str]:
        """Stored API key, or None when the file is missing or unreadable"""
        if not self.credentials_path.exists():
            return None

        try:
            with open(self.credentials_path, 'r', encoding='utf-8') as f:
                credentials = json.load(f)
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable credentials file {self.credentials_path}: {e}")
            return None

        if not isinstance(credentials, dict):
            return None
        api_key = credentials.get('apiKey')
        return api_key if isinstance(api_key, str) and api_key else None

    def save_credentials(self, api_key: str) -> None:
        # TODO: encrypt the stored key once a keyring backend is chosen
        credentials = Credentials(api_key=api_key, encrypted=False, last_used=utc_timestamp())
        self._write_document(self.credentials_path, credentials.to_dict(), 'credentials')
        logger.debug(f"Saved credentials to {self.credentials_path}")

    def get_api_key(self) -> Optional[str]:
        """API key from credentials.json, else TMDB_API_KEY, else None"""
        api_key = self.load_credentials()
        if api_key:
            return api_key
        return self.environ.get(API_KEY_ENV_VAR) or None

    def is_configured(self) -> bool:
        api_key = self.get_api_key()
        return bool(api_key and api_key.strip())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _default_config(self) -> ConfigFile:
        return ConfigFile(user=UserConfig(), app=AppConfig(), last_updated=utc_timestamp())

    def _write_document(self, path: Path, document: Dict, label: str) -> None:
        """Write JSON via a temp file + rename so readers never see a partial file"""
        try:
            self.resolve_config_directory()
            fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.stem}-", suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                os.chmod(tmp_name, CONFIG_FILE_MODE)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise ReelError.configuration(f"Failed to save {label}: {e}", path=str(path)) from e

    def _merge_with_defaults(self, document: Dict) -> ConfigFile:
        user_values = self._merge_section(document.get('user'), DEFAULT_USER_CONFIG, 'user')
        app_values = self._merge_section(document.get('app'), DEFAULT_APP_CONFIG, 'app')

        user = UserConfig(**{attr: user_values[key] for attr, key in UserConfig.KEYS.items()})
        app = AppConfig(**{attr: app_values[key] for attr, key in AppConfig.KEYS.items()})

        last_updated = document.get('lastUpdated')
        if not isinstance(last_updated, str) or not last_updated:
            last_updated = utc_timestamp()

        return ConfigFile(user=user, app=app, last_updated=last_updated)

    def _merge_section(self, stored: Any, defaults: Dict[str, Any], section: str) -> Dict[str, Any]:
        """Overlay stored values on defaults, keeping only well-typed, valid ones"""
        merged = dict(defaults)

        if stored is None:
            return merged
        if not isinstance(stored, dict):
            logger.warning(f"Ignoring malformed '{section}' section in {self.config_path}; using defaults")
            return merged

        for key, default in defaults.items():
            if key not in stored:
                continue
            value = stored[key]

            if key == 'tmdbApiKey' and not value:
                # Legacy field: empty/null simply means "not set"
                continue

            allowed = _ENUM_FIELDS.get(key)
            if allowed is not None:
                valid = value in allowed
            elif isinstance(default, bool):
                valid = isinstance(value, bool)
            else:
                valid = isinstance(value, str) and bool(value.strip())

            if valid:
                merged[key] = value
            else:
                logger.warning(
                    f"Discarding invalid stored setting {section}.{key}={value!r}; "
                    f"using default {default!r}"
                )

        return merged
