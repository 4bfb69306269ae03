# pinned_cert_tls/certificate.py
"""
X.509 certificate parsing for the pinned trust anchor.

Accepts the same inputs a standard single-certificate parser does: PEM text
(optionally preceded by whitespace) or raw DER. Exactly one certificate is
consumed; anything after it is ignored.

Trailing Data Policy:
---------------------
    - PEM: the leading block must be a ``CERTIFICATE``; only that block is
      decoded, so later blocks (even malformed ones) are ignored.
    - DER: the outer SEQUENCE length is read from the header and only those
      bytes are decoded, so a DER certificate followed by junk still parses.

Multiple pinned certificates are not supported; a bundle silently pins its
first entry.
"""

import logging
import re
from typing import BinaryIO, Final

from cryptography import x509
from cryptography.hazmat.primitives import hashes

from pinned_cert_tls.errors import CertificateParseError

__all__: list[str] = ['certificate_fingerprint', 'parse_certificate']

logger: logging.Logger = logging.getLogger(__name__)

PEM_BEGIN_MARKER: Final[bytes] = b'-----BEGIN'
PEM_CERTIFICATE_BLOCK: Final[re.Pattern[bytes]] = re.compile(
    rb'-----BEGIN (?:X509 )?CERTIFICATE-----.*?-----END (?:X509 )?CERTIFICATE-----',
    re.DOTALL,
)

# ASN.1 DER tag for a constructed SEQUENCE (the outer Certificate structure)
DER_SEQUENCE_TAG: Final[int] = 0x30
DER_LONG_FORM_BIT: Final[int] = 0x80
DER_LENGTH_OCTETS_MASK: Final[int] = 0x7F
DER_MAX_LENGTH_OCTETS: Final[int] = 4


def parse_certificate(stream: BinaryIO) -> x509.Certificate:
    """
    Read a stream and parse the first X.509 certificate in it.

    Args:
        stream: Binary stream containing PEM or DER certificate bytes. The
            stream is read to the end but not closed.

    Returns:
        The parsed certificate.

    Raises:
        CertificateParseError: If the stream is empty or its bytes do not
            decode to a valid certificate.
    """
    certificate_bytes: bytes = stream.read()

    if not certificate_bytes.strip():
        error_message: str = 'Certificate source is empty'
        logger.error(error_message)
        raise CertificateParseError(error_message)

    try:
        if certificate_bytes.lstrip().startswith(PEM_BEGIN_MARKER):
            certificate: x509.Certificate = x509.load_pem_x509_certificate(
                _first_pem_block(certificate_bytes)
            )
        else:
            der_length: int = _der_element_length(certificate_bytes)
            certificate = x509.load_der_x509_certificate(certificate_bytes[:der_length])
    except ValueError as parse_error:
        error_message = f'Failed to parse X.509 certificate: {parse_error}'
        logger.error(error_message)
        raise CertificateParseError(error_message) from parse_error

    logger.debug(
        'Parsed certificate subject=%s issuer=%s',
        certificate.subject.rfc4514_string(),
        certificate.issuer.rfc4514_string(),
    )
    return certificate


def certificate_fingerprint(certificate: x509.Certificate) -> str:
    """Return the colon-separated uppercase SHA-256 fingerprint."""
    digest: bytes = certificate.fingerprint(hashes.SHA256())
    return ':'.join(f'{octet:02X}' for octet in digest)


def _der_element_length(data: bytes) -> int:
    """
    Return the total encoded length (header + body) of the leading DER SEQUENCE.

    Raises:
        ValueError: If the header is not a SEQUENCE, uses an unsupported
            length encoding, or claims more bytes than are available.
    """
    if len(data) < 2 or data[0] != DER_SEQUENCE_TAG:  # noqa: PLR2004
        raise ValueError('data is neither PEM nor a DER SEQUENCE')

    first_length_octet: int = data[1]
    if not first_length_octet & DER_LONG_FORM_BIT:
        header_length: int = 2
        body_length: int = first_length_octet
    else:
        length_octet_count: int = first_length_octet & DER_LENGTH_OCTETS_MASK
        if length_octet_count == 0 or length_octet_count > DER_MAX_LENGTH_OCTETS:
            raise ValueError('unsupported DER length encoding')
        header_length = 2 + length_octet_count
        if len(data) < header_length:
            raise ValueError('truncated DER length header')
        body_length = int.from_bytes(data[2:header_length], 'big')

    total_length: int = header_length + body_length
    if total_length > len(data):
        raise ValueError(
            f'truncated DER certificate: expected {total_length} bytes, got {len(data)}'
        )
    return total_length


def _first_pem_block(data: bytes) -> bytes:
    """
    Return the leading PEM ``CERTIFICATE`` block, armor included.

    Raises:
        ValueError: If the first armored block is not a certificate or has
            no matching END line.
    """
    match: re.Match[bytes] | None = PEM_CERTIFICATE_BLOCK.match(data.lstrip())
    if match is None:
        raise ValueError('first PEM block is not a complete CERTIFICATE')
    return match.group(0)
