# pinned_cert_tls/common/pinned_context.py
"""
SSL Context Factory using a single pinned certificate.

This module builds client-side SSL contexts whose only trust anchor is the
certificate held by a PinnedTrustStore. Neither the operating system trust
store nor Python's bundled certificates (certifi) are consulted.

Primary Use Case:
    Database connections to servers whose certificate is distributed out of
    band (self-signed, or issued by a CA the client does not want to trust
    wholesale). A man-in-the-middle presenting any other certificate, even a
    publicly trusted one, fails the handshake.

Verification Details:
    - PROTOCOL_TLS_CLIENT with CERT_REQUIRED: the peer must present a
      certificate and it must chain to the pinned anchor.
    - VERIFY_X509_PARTIAL_CHAIN: the pinned certificate is accepted as a
      trust anchor even when it is a leaf issued by some other CA.
    - No client certificate is loaded.
    - Host name checking is off by default; the pin identifies the server.
"""

import logging
import ssl
from ssl import SSLContext, TLSVersion
from typing import Final

from pinned_cert_tls.trust_store import PinnedTrustStore

__all__: list[str] = ['TLS_VERSIONS', 'build_pinned_ssl_context']

logger: logging.Logger = logging.getLogger(__name__)

TLS_VERSIONS: Final[dict[str, TLSVersion]] = {
    'TLSv1.2': TLSVersion.TLSv1_2,
    'TLSv1.3': TLSVersion.TLSv1_3,
}


def build_pinned_ssl_context(
    trust_store: PinnedTrustStore,
    check_hostname: bool = False,
    minimum_version: TLSVersion = TLSVersion.TLSv1_2,
) -> SSLContext:
    """
    Create an SSLContext that trusts only the pinned certificate.

    Args:
        trust_store: Store holding exactly one certificate.
        check_hostname: Also match the server host name against the
            certificate. Requires server_hostname when wrapping sockets.
        minimum_version: Lowest TLS protocol version to negotiate.

    Returns:
        SSLContext: Configured client context.

    Raises:
        SecurityConfigurationError: If the trust store is empty.
        ssl.SSLError: If OpenSSL rejects the certificate or settings.
        ValueError: If an unsupported protocol version is requested.

    Notes:
        - PROTOCOL_TLS_CLIENT does not load default CA certificates
        - Safe for library code (no global state is touched)
    """
    cadata: bytes = trust_store.to_cadata()

    # Explicit protocol for clarity and security
    ssl_context: SSLContext = SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ssl_context.minimum_version = minimum_version
    ssl_context.check_hostname = check_hostname
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.verify_flags |= ssl.VERIFY_X509_PARTIAL_CHAIN
    ssl_context.load_verify_locations(cadata=cadata)

    logger.debug(
        'Built pinned SSLContext: check_hostname=%s, minimum_version=%s',
        check_hostname,
        minimum_version.name,
    )
    return ssl_context
