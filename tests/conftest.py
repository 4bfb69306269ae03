"""
Shared pytest fixtures for pinned_cert_tls tests.

Certificates are generated at test time with `cryptography` so no key
material is checked in. A small threaded TLS server is provided for
end-to-end handshake checks against the pinned SSL context.
"""

import io
import ipaddress
import socket
import ssl
import threading
import uuid
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import BinaryIO, NamedTuple

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from pinned_cert_tls.properties import system_properties

SERVER_GREETING: bytes = b'pinned-ok'


# =============================================================================
# Certificate Helpers
# =============================================================================


class CertKeyPair(NamedTuple):
    """A certificate and its private key."""

    certificate: x509.Certificate
    private_key: ec.EllipticCurvePrivateKey

    @property
    def cert_pem(self) -> str:
        return self.certificate.public_bytes(serialization.Encoding.PEM).decode('ascii')

    @property
    def cert_der(self) -> bytes:
        return self.certificate.public_bytes(serialization.Encoding.DER)

    @property
    def key_pem(self) -> bytes:
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )


def build_certificate(
    common_name: str,
    issuer: CertKeyPair | None = None,
    is_ca: bool = False,
) -> CertKeyPair:
    """
    Create a certificate for tests.

    Args:
        common_name: Subject CN.
        issuer: Signing certificate and key. If None, the certificate is
            self-signed.
        is_ca: Mark the certificate as a CA (for issuing leaf certificates).

    Returns:
        CertKeyPair with the new certificate and its key.
    """
    private_key: ec.EllipticCurvePrivateKey = ec.generate_private_key(ec.SECP256R1())
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now: datetime = datetime.now(UTC)

    issuer_name: x509.Name = issuer.certificate.subject if issuer else subject
    signing_key: ec.EllipticCurvePrivateKey = issuer.private_key if issuer else private_key

    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer_name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .add_extension(
            x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()),
            critical=False,
        )
    )

    if is_ca:
        builder = builder.add_extension(
            x509.BasicConstraints(ca=True, path_length=None), critical=True
        ).add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=True,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
    else:
        builder = builder.add_extension(
            x509.SubjectAlternativeName(
                [
                    x509.DNSName('localhost'),
                    x509.IPAddress(ipaddress.ip_address('127.0.0.1')),
                ]
            ),
            critical=False,
        )

    if issuer is not None:
        builder = builder.add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(
                issuer.private_key.public_key()
            ),
            critical=False,
        )

    certificate: x509.Certificate = builder.sign(signing_key, hashes.SHA256())
    return CertKeyPair(certificate=certificate, private_key=private_key)


# =============================================================================
# Certificate Fixtures
# =============================================================================


@pytest.fixture(scope='session')
def pinned_pair() -> CertKeyPair:
    """Self-signed certificate that tests pin."""
    return build_certificate('pinned.test')


@pytest.fixture(scope='session')
def other_pair() -> CertKeyPair:
    """A different self-signed certificate with the same subject."""
    return build_certificate('pinned.test')


@pytest.fixture(scope='session')
def ca_pair() -> CertKeyPair:
    """A CA certificate standing in for a publicly trusted issuer."""
    return build_certificate('Test Public Root CA', is_ca=True)


@pytest.fixture(scope='session')
def ca_signed_pair(ca_pair: CertKeyPair) -> CertKeyPair:
    """Leaf certificate issued by ca_pair."""
    return build_certificate('pinned.test', issuer=ca_pair)


@pytest.fixture
def pinned_pem(pinned_pair: CertKeyPair) -> str:
    return pinned_pair.cert_pem


@pytest.fixture
def pinned_cert_file(tmp_path: Path, pinned_pem: str) -> Path:
    """PEM file containing the pinned certificate."""
    cert_path: Path = tmp_path / 'server.crt'
    cert_path.write_text(pinned_pem, encoding='ascii')
    return cert_path


@pytest.fixture
def cert_package(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    pinned_pem: str,
) -> str:
    """
    Create an importable package shipping the pinned certificate.

    Returns:
        Package name; the certificate lives at ``<package>/certs/server.crt``.
    """
    package_name: str = f'pinned_test_certs_{uuid.uuid4().hex}'
    package_root: Path = tmp_path / 'site'
    package_dir: Path = package_root / package_name
    (package_dir / 'certs').mkdir(parents=True)
    (package_dir / '__init__.py').write_text('', encoding='utf-8')
    (package_dir / 'certs' / 'server.crt').write_text(pinned_pem, encoding='ascii')

    monkeypatch.syspath_prepend(str(package_root))
    return package_name


@pytest.fixture(autouse=True)
def isolated_system_properties() -> Iterator[None]:
    """Keep the process-wide property bag clean between tests."""
    system_properties.clear()
    yield
    system_properties.clear()


# =============================================================================
# Stream and Loader Doubles
# =============================================================================


class TrackingStream(io.BytesIO):
    """BytesIO that counts close() calls and can fail on close."""

    def __init__(self, data: bytes, fail_on_close: bool = False) -> None:
        super().__init__(data)
        self.close_calls: int = 0
        self._fail_on_close: bool = fail_on_close

    def close(self) -> None:
        self.close_calls += 1
        super().close()
        if self._fail_on_close:
            raise OSError('simulated close failure')


class StubResourceLoader:
    """ResourceLoader serving pre-built streams and recording calls."""

    def __init__(self, streams: dict[str, BinaryIO] | None = None) -> None:
        self.streams: dict[str, BinaryIO] = streams or {}
        self.exists_calls: list[str] = []
        self.open_calls: list[str] = []

    def exists(self, name: str) -> bool:
        self.exists_calls.append(name)
        return name in self.streams

    def open(self, name: str) -> BinaryIO:
        self.open_calls.append(name)
        return self.streams[name]


@pytest.fixture
def make_tracking_stream() -> type[TrackingStream]:
    """Provide the TrackingStream class: make_tracking_stream(data, fail_on_close)."""
    return TrackingStream


@pytest.fixture
def make_stub_loader() -> type[StubResourceLoader]:
    """Provide the StubResourceLoader class: make_stub_loader({name: stream})."""
    return StubResourceLoader


# =============================================================================
# TLS Server
# =============================================================================


@contextmanager
def _serve_tls(pair: CertKeyPair, directory: Path, chain: str = '') -> Iterator[int]:
    cert_path: Path = directory / f'serve-{id(pair)}.crt'
    key_path: Path = directory / f'serve-{id(pair)}.key'
    cert_path.write_text(pair.cert_pem + chain, encoding='ascii')
    key_path.write_bytes(pair.key_pem)

    server_context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    server_context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path))

    listener: socket.socket = socket.create_server(('127.0.0.1', 0))
    listener.settimeout(10)

    def serve_one() -> None:
        try:
            connection, _ = listener.accept()
        except OSError:
            return
        with connection:
            connection.settimeout(10)
            try:
                with server_context.wrap_socket(connection, server_side=True) as tls:
                    tls.sendall(SERVER_GREETING)
            except (ssl.SSLError, OSError):
                # Expected when the client rejects our certificate
                return

    server_thread = threading.Thread(target=serve_one, daemon=True)
    server_thread.start()
    try:
        yield listener.getsockname()[1]
    finally:
        listener.close()
        server_thread.join(timeout=10)


TlsServer = Callable[..., AbstractContextManager[int]]


@pytest.fixture
def tls_server(tmp_path: Path) -> TlsServer:
    """
    Start a one-shot local TLS server presenting a given certificate.

    Usage:
        with tls_server(pinned_pair) as port:
            ...
    """

    def start(pair: CertKeyPair, chain: str = '') -> AbstractContextManager[int]:
        return _serve_tls(pair, tmp_path, chain)

    return start
