"""
Configuration Package for pinned_cert_tls.

Exposes the configuration models and the loader function.
"""

from pinned_cert_tls.config.config_models import (
    LoggingConfig,
    PinnedTlsConfig,
    TlsConfig,
    TlsVersionName,
)
from pinned_cert_tls.config.loader import load_config

__all__: list[str] = [
    'LoggingConfig',
    'PinnedTlsConfig',
    'TlsConfig',
    'TlsVersionName',
    'load_config',
]
