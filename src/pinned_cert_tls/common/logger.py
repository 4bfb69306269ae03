# pinned_cert_tls/common/logger.py
"""
Logging configuration for the pinned_cert_tls package.

Provides centralized logging setup so that certificate resolution, parsing
and SSL context construction all log with the same format and destinations.
"""

import logging
import sys
from pathlib import Path

from pinned_cert_tls.config import LoggingConfig

__all__: list[str] = ['PACKAGE_LOGGER_NAME', 'setup_logger']

PACKAGE_LOGGER_NAME: str = 'pinned_cert_tls'


def setup_logger(
    logging_level: int | None = None,
    config: LoggingConfig | None = None,
) -> logging.Logger:
    """
    Set up logging for the pinned_cert_tls package.

    Configures the package-level logger so that every module logger created
    with ``logging.getLogger(__name__)`` inherits its handlers and level.

    The function is idempotent - calling it multiple times resets and
    reconfigures the handlers based on the provided arguments.

    Args:
        logging_level: Console level (e.g., logging.INFO) used when NO config
                      object is provided. Defaults to INFO.
        config: Optional validated configuration object. If provided:
                - Console logging uses config.console_level
                - File logging is enabled if config.file_path is set
                - The 'logging_level' argument is ignored.

    Returns:
        The package-level logger ('pinned_cert_tls').

    Example:
        >>> setup_logger(logging_level=logging.DEBUG)

        >>> config = load_config('pinned_tls.yaml')
        >>> setup_logger(config=config.logging)
    """
    package_logger: logging.Logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    # Clear existing handlers so repeated calls do not duplicate output
    package_logger.handlers.clear()

    log_format: logging.Formatter = logging.Formatter(
        fmt='%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    # --- 1. Configure Console Handler ---
    if logging_level is None:
        logging_level = logging.INFO
    if config:
        console_level: int = config.get_console_level_int()
    else:
        console_level = logging_level

    console_handler: logging.Handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_format)
    console_handler.setLevel(console_level)
    package_logger.addHandler(console_handler)

    # --- 2. Configure File Handler (Config Only) ---
    file_level: int | None = config.get_file_level_int() if config else None

    if config and config.file_path and file_level is not None:
        log_file_path: Path = config.file_path
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler: logging.FileHandler = logging.FileHandler(
            filename=str(log_file_path),
            mode='a',
            encoding='utf-8',
        )
        file_handler.setFormatter(log_format)
        file_handler.setLevel(file_level)
        package_logger.addHandler(file_handler)

    # --- 3. Set Package Logger Level ---
    # The logger's level must be the most verbose of its handlers
    effective_level: int = console_level
    if file_level is not None:
        effective_level = min(console_level, file_level)

    package_logger.setLevel(effective_level)

    return package_logger
