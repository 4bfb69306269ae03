# pinned_cert_tls/common/__init__.py

from pinned_cert_tls.common.logger import setup_logger
from pinned_cert_tls.common.pinned_context import TLS_VERSIONS, build_pinned_ssl_context

__all__: list[str] = [
    'TLS_VERSIONS',
    'build_pinned_ssl_context',
    'setup_logger',
]
