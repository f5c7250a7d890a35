"""YAML + environment configuration loader for SnakDansk."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Mapping
import logging

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "debug": False,
    "openai": {
        "api_key": None,
        "chat_model": "gpt-4o-mini",
        "transcription_model": "whisper-1",
        "base_url": "https://api.openai.com/v1",
    },
    "google_cloud": {
        "credentials_path": None,
        "project_id": None,
        "client_email": None,
        "private_key": None,
    },
    "chat": {
        "temperature": 0.7,
        "max_tokens": 500,
        "structured_replies": True,
    },
    "transcription": {
        "backend": "google",
        "language": "da-DK",
        "model": "latest_long",
    },
    "speech": {
        "language": "da-DK",
        "voice": "da-DK-Neural2-D",
        "pitch": 0.0,
        "speaking_rate": 1.0,
        "cache_capacity": 256,
        "cache_ttl_seconds": None,
        "translation_pause_seconds": 1.0,
    },
    "audio": {
        "sample_rate": 16000,
        "chunk_size": 1024,
        "channels": 1,
        "level_divisor": 128.0,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8080,
    },
    "logging": {
        "level": "INFO",
        "file_path": "data/logs/snakdansk.log",
        "console_output": True,
    },
}

# environment variable -> (dotted key, transform)
ENV_OVERRIDES = {
    "OPENAI_API_KEY": ("openai.api_key", None),
    "GOOGLE_APPLICATION_CREDENTIALS": ("google_cloud.credentials_path", None),
    "GOOGLE_PROJECT_ID": ("google_cloud.project_id", None),
    "GOOGLE_CLIENT_EMAIL": ("google_cloud.client_email", None),
    "GOOGLE_PRIVATE_KEY": ("google_cloud.private_key", lambda v: v.replace("\\n", "\n")),
    "DEBUG_MODE": ("debug", lambda v: v.strip().lower() == "true"),
}


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class SnakDanskConfig:
    """SnakDansk configuration: built-in defaults, YAML file, then environment."""

    def __init__(self, config_path: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, only defaults and
                        environment variables are used.
            environ: Environment mapping, defaults to os.environ
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is not None and not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        self.config = copy.deepcopy(DEFAULT_CONFIG)
        if self.config_file is not None:
            logger.info(f"Loading configuration from: {self.config_file}")
            _deep_merge(self.config, self._load_config())
        self._apply_environment(os.environ if environ is None else environ)

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        self._resolve_paths(config)
        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        google = config.get('google_cloud') or {}
        creds_path = google.get('credentials_path')
        if creds_path and not os.path.isabs(creds_path):
            google['credentials_path'] = str(config_dir / creds_path)

        log_config = config.get('logging') or {}
        log_path = log_config.get('file_path')
        if log_path and not os.path.isabs(log_path):
            log_config['file_path'] = str(config_dir / log_path)

    def _apply_environment(self, environ: Mapping[str, str]) -> None:
        for var, (key_path, transform) in ENV_OVERRIDES.items():
            raw = environ.get(var)
            if raw is None or raw == "":
                continue
            self.set(key_path, transform(raw) if transform else raw)
            logger.debug(f"Configuration key '{key_path}' taken from ${var}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'speech.voice').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation."""
        keys = key_path.split('.')
        config_dict = self.config
        for key in keys[:-1]:
            config_dict = config_dict.setdefault(key, {})
        config_dict[keys[-1]] = value

    def is_debug_enabled(self) -> bool:
        return bool(self.get('debug', False))

    def get_openai_api_key(self) -> str:
        """Get the language-model API key - raises if not configured."""
        api_key = self.get('openai.api_key')
        if not api_key:
            raise ValueError("OpenAI API key not configured (set OPENAI_API_KEY or openai.api_key)")
        return api_key

    def get_google_credentials_path(self) -> Optional[str]:
        """Get Google service account file path, or None when inline credentials are used."""
        creds_path = self.get('google_cloud.credentials_path')
        if not creds_path:
            return None

        creds_file = Path(creds_path)
        if not creds_file.exists():
            raise FileNotFoundError(f"Google credentials file not found: {creds_path}")
        return str(creds_file.absolute())

    def get_google_credentials_info(self) -> Dict[str, str]:
        """Build service account info from the inline project/email/key settings."""
        client_email = self.get('google_cloud.client_email')
        private_key = self.get('google_cloud.private_key')
        if not client_email or not private_key:
            raise ValueError(
                "Google credentials not configured: set google_cloud.credentials_path "
                "or GOOGLE_CLIENT_EMAIL and GOOGLE_PRIVATE_KEY"
            )
        return {
            "type": "service_account",
            "project_id": self.get('google_cloud.project_id'),
            "client_email": client_email,
            "private_key": private_key,
            "token_uri": "https://oauth2.googleapis.com/token",
        }
