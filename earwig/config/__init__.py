"""YAML configuration loader for Earwig."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/earwig/earwig.yaml")

# Environment variables that override values from the YAML file
ENV_OVERRIDES = {
    'MEMO_MOUSE_DEVICE': 'input.device_path',
    'MEMO_AUDIO_DEVICE': 'audio.device',
    'MEMO_OUTPUT_DIR': 'storage.output_directory',
    'MEMO_WHISPER_URL': 'transcription.url',
    'MEMO_NTFY_TOPIC': 'notification.url',
}

REQUIRED_KEYS = (
    'input.device_path',
    'storage.output_directory',
    'transcription.url',
    'notification.url',
)


def resolve_config_path(config_path: Optional[str] = None) -> Path:
    """Pick the config file: explicit path, then $EARWIG_CONFIG, then the default location."""
    if config_path:
        return Path(config_path)
    env_path = os.environ.get('EARWIG_CONFIG')
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH.expanduser()


class EarwigConfig:
    """Earwig configuration loader."""

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, uses $EARWIG_CONFIG
                        or ~/.config/earwig/earwig.yaml.
            environ: Environment mapping for overrides (defaults to os.environ)
        """
        self.config_file = resolve_config_path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()
        self._apply_env_overrides(os.environ if environ is None else environ)
        self._validate()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        self._resolve_paths(config)
        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        if isinstance(config.get('storage'), dict) and 'output_directory' in config['storage']:
            output_dir = os.path.expanduser(str(config['storage']['output_directory']))
            if not os.path.isabs(output_dir):
                output_dir = str(config_dir / output_dir)
            config['storage']['output_directory'] = output_dir

        if isinstance(config.get('logging'), dict) and 'file_path' in config['logging']:
            log_path = os.path.expanduser(str(config['logging']['file_path']))
            if not os.path.isabs(log_path):
                log_path = str(config_dir / log_path)
            config['logging']['file_path'] = log_path

    def _apply_env_overrides(self, environ) -> None:
        for env_name, key_path in ENV_OVERRIDES.items():
            value = environ.get(env_name)
            if value:
                logger.info(f"Overriding '{key_path}' from ${env_name}")
                self.set(key_path, value)

    def _validate(self) -> None:
        missing = [key for key in REQUIRED_KEYS if not self.get(key)]
        if missing:
            raise ValueError(f"Missing required configuration keys: {', '.join(missing)}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'input.device_path').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'audio.device')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if not isinstance(config_dict.get(key), dict):
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_output_directory(self) -> str:
        """Get the directory recordings are written to."""
        output_dir = self.get('storage.output_directory')
        return str(Path(output_dir).expanduser().absolute())

    def get_input_device_path(self) -> str:
        return str(self.get('input.device_path'))

    def get_button(self) -> Any:
        return self.get('input.button', 'BTN_LEFT')

    def get_reconnect_delay(self) -> float:
        return float(self.get('input.reconnect_delay_seconds', 5.0))

    def get_audio_device(self) -> Any:
        return self.get('audio.device', 'default')

    def get_chunk_size(self) -> int:
        return int(self.get('audio.chunk_size', 1024))
