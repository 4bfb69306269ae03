# pinned_cert_tls/__init__.py
"""
Pinned Cert TLS - TLS client trust pinned to a single server certificate.

Builds a client SSL context for database connectors that trusts exactly one
pre-shared certificate instead of a CA chain. The certificate is located
from a single configuration string:

    file:<path>                        local file (PEM or DER)
    classpath:<package>/<path>         packaged resource
    env:<VAR>                          environment variable value
    sys:<KEY>                          process-wide property value
    -----BEGIN CERTIFICATE-----...     inline PEM

Quick Start:
    >>> from pinned_cert_tls import PinnedCertTrustFactory
    >>>
    >>> factory = PinnedCertTrustFactory('env:MYDB_CERT')
    >>> tls_socket = factory.create_connection(('db.internal', 5432), timeout=10)

From YAML configuration:
    >>> from pinned_cert_tls import PinnedCertTrustFactory, load_config, setup_logger
    >>>
    >>> config = load_config('config/pinned_tls.yaml')
    >>> setup_logger(config=config.logging)
    >>> factory = PinnedCertTrustFactory.from_config(config.tls)
"""

__version__ = '0.1.0'

from pinned_cert_tls.common import build_pinned_ssl_context, setup_logger
from pinned_cert_tls.config import load_config
from pinned_cert_tls.errors import (
    CertificateParseError,
    ConfigurationError,
    PinnedCertSecurityError,
    ResourceNotFoundError,
    SecurityConfigurationError,
)
from pinned_cert_tls.factory import PinnedCertTrustFactory
from pinned_cert_tls.properties import (
    SystemProperties,
    clear_property,
    get_property,
    set_property,
    system_properties,
)
from pinned_cert_tls.resources import PackageResourceLoader, ResourceLoader
from pinned_cert_tls.sources import CertificateSource

__all__: list[str] = [
    'CertificateParseError',
    'CertificateSource',
    'ConfigurationError',
    'PackageResourceLoader',
    'PinnedCertSecurityError',
    'PinnedCertTrustFactory',
    'ResourceLoader',
    'ResourceNotFoundError',
    'SecurityConfigurationError',
    'SystemProperties',
    '__version__',
    'build_pinned_ssl_context',
    'clear_property',
    'get_property',
    'load_config',
    'set_property',
    'setup_logger',
    'system_properties',
]
