# pinned_cert_tls/factory.py
"""
TLS client socket factory pinned to a single certificate.

PinnedCertTrustFactory turns one configuration string into a ready-to-use
client SSL context whose only trust anchor is a pre-shared server
certificate. Compared with disabling verification this defeats
man-in-the-middle attacks; compared with trusting a CA bundle it pins the
exact server certificate.

Construction Pipeline:
----------------------
    configuration string
      -> CertificateSourceResolver.resolve()   prefix dispatch, no I/O
      -> CertificateSourceResolver.open()      binary stream
      -> parse_certificate()                   first X.509 cert, stream closed
      -> PinnedTrustStore                      single entry, random alias
      -> build_pinned_ssl_context()            SSLContext, no client identity

Everything happens inside __init__. Construction either returns a complete
factory or raises; no half-built object is ever observable.

Error Policy:
-------------
- ConfigurationError, CertificateParseError and OSError raised while reading
  the certificate propagate unchanged.
- ssl.SSLError / ValueError / OSError raised while assembling the trust store
  or SSL context are wrapped in SecurityConfigurationError with the original
  chained as __cause__.
- Errors that indicate a programming defect (TypeError, AttributeError)
  propagate unwrapped.

Usage:
------
    from pinned_cert_tls import PinnedCertTrustFactory

    factory = PinnedCertTrustFactory('file:/etc/pki/db/server.crt')
    with factory.create_connection(('db.internal', 5432), timeout=10) as tls_socket:
        tls_socket.sendall(payload)

    # Or hand the context to any library that accepts one
    connection = await asyncpg.connect(dsn, ssl=factory.ssl_context)
"""

import logging
import socket
import ssl
import uuid
from collections.abc import Mapping
from ssl import SSLContext, SSLSocket, TLSVersion
from typing import Any, BinaryIO, Self

from cryptography import x509

from pinned_cert_tls.certificate import certificate_fingerprint, parse_certificate
from pinned_cert_tls.common import TLS_VERSIONS, build_pinned_ssl_context
from pinned_cert_tls.config import TlsConfig
from pinned_cert_tls.errors import (
    ConfigurationError,
    PinnedCertSecurityError,
    SecurityConfigurationError,
)
from pinned_cert_tls.resources import PackageResourceLoader, ResourceLoader
from pinned_cert_tls.sources import (
    CertificateSource,
    CertificateSourceResolver,
    ResolvedSource,
)
from pinned_cert_tls.trust_store import PinnedTrustStore, TrustAnchor

__all__: list[str] = ['PinnedCertTrustFactory']

logger: logging.Logger = logging.getLogger(__name__)


class PinnedCertTrustFactory:
    """
    Client socket factory that trusts exactly one pinned certificate.

    The factory is immutable after construction and performs no further I/O
    against the certificate source, so a single instance can be shared by
    concurrent connection attempts. Separate instances share nothing.

    Args:
        ssl_factory_arg: Certificate source string (``file:``, ``classpath:``,
            ``env:``, ``sys:`` or inline PEM).
        resource_loader: Loader for ``classpath:`` names.
        environ: Mapping used for ``env:`` lookups instead of os.environ.
        properties: Mapping used for ``sys:`` lookups instead of the shared
            system_properties bag.
        check_hostname: Also verify the server host name.
        minimum_version: Lowest TLS version to negotiate.

    Raises:
        ConfigurationError: If the argument is missing, empty, has an
            unknown prefix, or names an unset/empty variable or property.
        OSError: If the certificate file or resource cannot be read
            (ResourceNotFoundError for unresolved resources).
        CertificateParseError: If the bytes are not a valid certificate.
        SecurityConfigurationError: If the SSL context cannot be built.
    """

    def __init__(
        self,
        ssl_factory_arg: str | None,
        *,
        resource_loader: ResourceLoader | None = None,
        environ: Mapping[str, str] | None = None,
        properties: Mapping[str, str] | None = None,
        check_hostname: bool = False,
        minimum_version: TLSVersion = TLSVersion.TLSv1_2,
    ) -> None:
        if ssl_factory_arg is None or ssl_factory_arg == '':
            error_message: str = 'The ssl_factory_arg property may not be empty.'
            logger.error(error_message)
            raise ConfigurationError(error_message)

        resolver = CertificateSourceResolver(
            resource_loader=resource_loader,
            environ=environ,
            properties=properties,
        )
        resolved: ResolvedSource = resolver.resolve(ssl_factory_arg)
        certificate: x509.Certificate = self._read_certificate(resolver, resolved)

        anchor: TrustAnchor
        anchor, self._ssl_context = self._build_trust(
            certificate,
            check_hostname=check_hostname,
            minimum_version=minimum_version,
        )

        self._source: CertificateSource = resolved.source
        self._check_hostname: bool = check_hostname
        self._fingerprint: str = certificate_fingerprint(anchor.certificate)

        logger.info(
            'Pinned server certificate from %s source: subject=%s, sha256=%s',
            resolved.source.value,
            certificate.subject.rfc4514_string(),
            self._fingerprint,
        )

    @classmethod
    def from_config(cls, tls_config: TlsConfig, **overrides: Any) -> Self:
        """
        Build a factory from validated TlsConfig.

        Args:
            tls_config: TLS section of the application configuration.
            **overrides: Keyword arguments forwarded to the constructor,
                taking precedence over values derived from the config
                (e.g., environ or properties for testing).

        Returns:
            Configured PinnedCertTrustFactory.
        """
        options: dict[str, Any] = {
            'check_hostname': tls_config.check_hostname,
            'minimum_version': TLS_VERSIONS[tls_config.minimum_version],
        }
        if tls_config.classpath_package is not None:
            options['resource_loader'] = PackageResourceLoader(
                default_package=tls_config.classpath_package
            )
        options.update(overrides)

        return cls(tls_config.ssl_factory_arg.get_secret_value(), **options)

    # -------------------------------------------------------------------------
    # Construction Steps
    # -------------------------------------------------------------------------

    @staticmethod
    def _read_certificate(
        resolver: CertificateSourceResolver,
        resolved: ResolvedSource,
    ) -> x509.Certificate:
        """Open the source, parse it, and always close the stream exactly once."""
        stream: BinaryIO = resolver.open(resolved)
        try:
            return parse_certificate(stream)
        finally:
            _close_stream(stream, resolved)

    @staticmethod
    def _build_trust(
        certificate: x509.Certificate,
        check_hostname: bool,
        minimum_version: TLSVersion,
    ) -> tuple[TrustAnchor, SSLContext]:
        """Install the certificate in a fresh trust store and build the context."""
        try:
            trust_store = PinnedTrustStore()
            anchor: TrustAnchor = trust_store.set_certificate_entry(
                str(uuid.uuid4()), certificate
            )
            ssl_context: SSLContext = build_pinned_ssl_context(
                trust_store,
                check_hostname=check_hostname,
                minimum_version=minimum_version,
            )
        except PinnedCertSecurityError:
            raise
        except (ssl.SSLError, ValueError, OSError) as build_error:
            logger.error('Failed to build pinned SSL context: %s', build_error)
            raise SecurityConfigurationError(
                'An error occurred building the pinned SSL context'
            ) from build_error

        return anchor, ssl_context

    # -------------------------------------------------------------------------
    # Socket Factory Capability
    # -------------------------------------------------------------------------

    @property
    def ssl_context(self) -> SSLContext:
        """
        The client SSLContext trusting only the pinned certificate.

        This is the live context shared by wrap_socket() and
        create_connection(). Treat it as read-only: calling
        load_verify_locations() or load_default_certs() on it adds trust
        anchors to every connection this factory opens.
        """
        return self._ssl_context

    @property
    def source(self) -> CertificateSource:
        """The source the pinned certificate was read from."""
        return self._source

    @property
    def fingerprint(self) -> str:
        """SHA-256 fingerprint of the pinned certificate."""
        return self._fingerprint

    def wrap_socket(
        self,
        sock: socket.socket,
        server_hostname: str | None = None,
        do_handshake_on_connect: bool = True,
    ) -> SSLSocket:
        """
        Wrap a connected socket in a TLS session validated against the pin.

        Args:
            sock: Connected TCP socket. Ownership passes to the returned
                SSLSocket.
            server_hostname: Host name for SNI and, when check_hostname is
                enabled, for host name verification.
            do_handshake_on_connect: Perform the handshake immediately.

        Returns:
            SSLSocket wrapping ``sock``.

        Raises:
            ssl.SSLCertVerificationError: If the peer certificate does not
                match the pinned certificate.
        """
        return self._ssl_context.wrap_socket(
            sock,
            server_hostname=server_hostname,
            do_handshake_on_connect=do_handshake_on_connect,
        )

    def create_connection(
        self,
        address: tuple[str, int],
        timeout: float | None = None,
        server_hostname: str | None = None,
    ) -> SSLSocket:
        """
        Open a TCP connection and complete a pinned TLS handshake.

        Args:
            address: (host, port) to connect to.
            timeout: Socket timeout in seconds; None leaves the default.
            server_hostname: Overrides the host used for SNI and host name
                verification. Defaults to ``address[0]``.

        Returns:
            Connected, handshaken SSLSocket.

        Raises:
            OSError: If the TCP connection fails.
            ssl.SSLError: If the TLS handshake fails, including
                SSLCertVerificationError for an unpinned peer.
        """
        host: str = address[0]
        raw_socket: socket.socket = (
            socket.create_connection(address)
            if timeout is None
            else socket.create_connection(address, timeout=timeout)
        )

        try:
            return self.wrap_socket(
                raw_socket,
                server_hostname=server_hostname if server_hostname is not None else host,
            )
        except BaseException:
            raw_socket.close()
            raise

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}(source={self._source.value!r}, '
            f'sha256={self._fingerprint!r}, check_hostname={self._check_hostname})'
        )


def _close_stream(stream: BinaryIO, resolved: ResolvedSource) -> None:
    """Close a certificate stream; a close failure is logged, never raised."""
    try:
        stream.close()
    except Exception:  # noqa: BLE001
        logger.warning(
            'Failed to close certificate stream for %s source',
            resolved.source.value,
            exc_info=True,
        )
