# pinned_cert_tls/config/loader.py
"""
Configuration Loading Logic.

Bridges raw YAML files on disk and the Pydantic models in `config_models.py`:
locates and reads the file, parses YAML, validates it into PinnedTlsConfig,
and logs low-level failures with context before re-raising.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from pinned_cert_tls.config.config_models import PinnedTlsConfig

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH: Path = Path('config/pinned_tls.yaml')


def load_config(config_path: Path | str | None = None) -> PinnedTlsConfig:
    """Load and validate pinned TLS configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file. If None, defaults
                    to 'config/pinned_tls.yaml' relative to the working directory.

    Returns:
        Validated PinnedTlsConfig instance.

    Raises:
        FileNotFoundError: If config file does not exist at the specified path.
        yaml.YAMLError: If the YAML file is malformed.
        ValueError: If configuration fails Pydantic validation.

    Example:
        >>> config = load_config('config/pinned_tls.yaml')
        >>> factory = PinnedCertTrustFactory.from_config(config.tls)
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
        logger.debug('No config path provided, using default: %s', DEFAULT_CONFIG_PATH)
    else:
        config_path = Path(config_path)

    logger.info('Loading pinned TLS configuration from: %s', config_path)

    if not config_path.exists():
        error_message: str = f'Configuration file not found: {config_path}'
        logger.error(error_message)
        raise FileNotFoundError(error_message)

    try:
        with Path.open(config_path, encoding='utf-8') as config_file:
            raw_config_data: Any = yaml.safe_load(config_file)
    except yaml.YAMLError as error:
        error_message = f'Failed to parse YAML configuration: {error}'
        logger.error(error_message)
        raise yaml.YAMLError(error_message) from error

    if not isinstance(raw_config_data, dict):
        error_message = (
            f'Configuration root must be a mapping, got: {type(raw_config_data).__name__}'
        )
        logger.error(error_message)
        raise ValueError(error_message)

    # pydantic.ValidationError is a ValueError subclass
    try:
        validated_config = PinnedTlsConfig(**raw_config_data)
    except ValueError as error:
        error_message = f'Configuration validation failed: {error}'
        logger.error(error_message)
        raise ValueError(error_message) from error

    logger.info('Configuration loaded and validated successfully')
    return validated_config
