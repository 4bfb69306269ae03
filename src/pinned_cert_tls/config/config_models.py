# pinned_cert_tls/config/config_models.py
"""
Configuration models for pinned certificate TLS.

Design Decisions:
-----------------
- All models use `extra='forbid'` to catch typos and invalid fields in YAML
  configuration files early, preventing silent misconfiguration.

- No logging occurs within this module because the logging configuration itself
  is defined here. Logging must be configured by the caller after loading config.

- The certificate argument is a SecretStr: inline PEM text is public data, but
  the same field also names files and variables, and keeping it out of repr()
  avoids dumping whole certificates into logs and tracebacks.

Usage:
------
    import yaml
    from pinned_cert_tls.config.config_models import PinnedTlsConfig

    with open('pinned_tls.yaml', 'r') as config_file:
        raw_config = yaml.safe_load(config_file)

    config = PinnedTlsConfig.model_validate(raw_config)
"""

from pathlib import Path
from typing import Literal, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

__all__: list[str] = [
    'LogLevelName',
    'LoggingConfig',
    'PinnedTlsConfig',
    'TlsConfig',
    'TlsVersionName',
]

# =============================================================================
# Type Aliases
# =============================================================================

LogLevelName = Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

LOG_LEVEL_VALUES: frozenset[int] = frozenset({10, 20, 30, 40, 50})

# Avoids importing logging in the model layer
LOG_LEVEL_NAME_TO_INT: dict[LogLevelName, int] = {
    'DEBUG': 10,
    'INFO': 20,
    'WARNING': 30,
    'ERROR': 40,
    'CRITICAL': 50,
}

TlsVersionName = Literal['TLSv1.2', 'TLSv1.3']


# =============================================================================
# TLS Configuration
# =============================================================================


class TlsConfig(BaseModel):
    """Connection-level settings for the pinned certificate trust factory.

    Attributes:
        ssl_factory_arg: Where the pinned certificate comes from. One of
            ``file:<path>``, ``classpath:<name>``, ``env:<VAR>``,
            ``sys:<KEY>`` or inline PEM text. Masked in repr and logs.
        check_hostname: Also verify the server host name against the pinned
            certificate. Off by default; the pin already identifies the peer.
        minimum_version: Lowest TLS protocol version to negotiate.
        classpath_package: Package that ``classpath:`` names are resolved
            against. If None, names must be ``<package>/<path>``.
    """

    model_config = ConfigDict(extra='forbid')

    ssl_factory_arg: SecretStr = Field(
        description='Certificate source: file:, classpath:, env:, sys: or inline PEM',
    )
    check_hostname: bool = Field(
        default=False,
        description='Verify the server host name in addition to the pin',
    )
    minimum_version: TlsVersionName = Field(
        default='TLSv1.2',
        description="Lowest TLS version: 'TLSv1.2' or 'TLSv1.3'",
    )
    classpath_package: str | None = Field(
        default=None,
        description='Default package for classpath: resource names',
    )

    @field_validator('ssl_factory_arg')
    @classmethod
    def validate_ssl_factory_arg_not_empty(cls, ssl_factory_arg: SecretStr) -> SecretStr:
        """Ensure the certificate argument is not empty.

        Args:
            ssl_factory_arg: The certificate source string.

        Returns:
            The validated value.

        Raises:
            ValueError: If the value is empty.
        """
        if not ssl_factory_arg.get_secret_value():
            raise ValueError('ssl_factory_arg cannot be empty')
        return ssl_factory_arg


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Configuration for application logging output.

    Console output is always enabled; file output is enabled by providing a
    file_path. The file_level defaults to DEBUG if not specified.

    Attributes:
        file_path: Path to log file. None disables file logging.
            Extension .log is appended automatically if missing.
        console_level: Minimum log level for console output.
            Accepts level name or numeric value.
        file_level: Minimum log level for file output. Defaults to DEBUG if
            file_path is provided.
    """

    model_config = ConfigDict(extra='forbid')

    file_path: Path | None = Field(
        default=None,
        description='Log file path (.log extension auto-added). None disables file logging.',
    )
    console_level: LogLevelName | int = Field(
        default='INFO',
        description="Console log level: 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL', or int",
    )
    file_level: LogLevelName | int | None = Field(
        default=None,
        description='File log level. None disables file logging.',
    )

    @field_validator('file_path', mode='before')
    @classmethod
    def normalize_log_file_path(cls, path_value: str | Path | None) -> Path | None:
        if path_value is None:
            return None

        path_string: str = str(path_value)

        if not path_string.lower().endswith('.log'):
            path_string = f'{path_string}.log'

        return Path(path_string)

    @field_validator('console_level', 'file_level', mode='after')
    @classmethod
    def validate_numeric_log_level(
        cls, level_value: LogLevelName | int | None
    ) -> LogLevelName | int | None:
        """Validate numeric log levels are standard Python logging values.

        Raises:
            ValueError: If numeric level is not a standard logging value.
        """
        if level_value is None or isinstance(level_value, str):
            return level_value

        if level_value not in LOG_LEVEL_VALUES:
            raise ValueError(
                f'Numeric log level must be one of {sorted(LOG_LEVEL_VALUES)}, '
                f'got: {level_value}'
            )

        return level_value

    @model_validator(mode='after')
    def ensure_file_logging_configuration_consistency(self) -> Self:
        """Default file_level to DEBUG when only file_path is set.

        Raises:
            ValueError: If file_level is set but file_path is missing.
        """
        has_file_path: bool = self.file_path is not None
        has_file_level: bool = self.file_level is not None

        if has_file_path and not has_file_level:
            self.file_level = 'DEBUG'

        if has_file_level and not has_file_path:
            raise ValueError(
                'file_level is specified but file_path is missing. '
                'Provide file_path to enable file logging, or remove file_level.'
            )

        return self

    def get_console_level_int(self) -> int:
        if isinstance(self.console_level, int):
            return self.console_level
        return LOG_LEVEL_NAME_TO_INT[self.console_level]

    def get_file_level_int(self) -> int | None:
        if self.file_level is None:
            return None
        if isinstance(self.file_level, int):
            return self.file_level
        return LOG_LEVEL_NAME_TO_INT[self.file_level]


# =============================================================================
# Root Configuration
# =============================================================================


class PinnedTlsConfig(BaseModel):
    """Root configuration model.

    Attributes:
        tls: Pinned certificate and TLS settings.
        logging: Logging configuration for console and file output.
    """

    model_config = ConfigDict(extra='forbid')

    tls: TlsConfig = Field(
        description='Pinned certificate source and TLS settings',
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description='Application logging configuration',
    )
