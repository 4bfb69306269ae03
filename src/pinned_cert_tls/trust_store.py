# pinned_cert_tls/trust_store.py
"""
Single-entry trust store.

The store starts empty (no operating-system or certifi roots) and accepts
exactly one certificate. Its only output is the DER encoding of that
certificate, which is handed to ``SSLContext.load_verify_locations``.
"""

import logging

from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding
from pydantic import BaseModel, ConfigDict, Field

from pinned_cert_tls.errors import SecurityConfigurationError

__all__: list[str] = ['PinnedTrustStore', 'TrustAnchor']

logger: logging.Logger = logging.getLogger(__name__)


class TrustAnchor(BaseModel):
    """
    A pinned certificate and the label it is stored under.

    Attributes:
        alias: Caller-generated unique label. Carries no meaning and is
            never looked up.
        certificate: The parsed X.509 certificate.
    """

    model_config = ConfigDict(
        extra='forbid',
        frozen=True,
        arbitrary_types_allowed=True,
    )

    alias: str = Field(min_length=1)
    certificate: x509.Certificate


class PinnedTrustStore:
    """Trust store container holding at most one TrustAnchor."""

    def __init__(self) -> None:
        self._anchor: TrustAnchor | None = None

    def __len__(self) -> int:
        return 0 if self._anchor is None else 1

    def set_certificate_entry(
        self,
        alias: str,
        certificate: x509.Certificate,
    ) -> TrustAnchor:
        """
        Install the pinned certificate.

        Args:
            alias: Unique label for the entry.
            certificate: Certificate to trust.

        Returns:
            The stored TrustAnchor.

        Raises:
            SecurityConfigurationError: If a certificate is already installed.
        """
        if self._anchor is not None:
            error_message: str = 'Pinned trust store already holds a certificate'
            logger.error(error_message)
            raise SecurityConfigurationError(error_message)

        self._anchor = TrustAnchor(alias=alias, certificate=certificate)
        logger.debug('Installed pinned certificate under alias %s', alias)
        return self._anchor

    def to_cadata(self) -> bytes:
        """
        Return the DER bytes of the pinned certificate.

        Raises:
            SecurityConfigurationError: If the store is empty.
        """
        if self._anchor is None:
            error_message: str = 'Pinned trust store is empty'
            logger.error(error_message)
            raise SecurityConfigurationError(error_message)

        return self._anchor.certificate.public_bytes(Encoding.DER)
