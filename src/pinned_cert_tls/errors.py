# pinned_cert_tls/errors.py
"""
Exception hierarchy for pinned certificate trust construction.

Caller-input problems (bad configuration string, unreadable certificate
bytes) are raised as their own specific types. Failures inside the platform
TLS stack are wrapped in SecurityConfigurationError with the original
exception chained as ``__cause__``.

Hierarchy:
----------
    PinnedCertSecurityError
    ├── ConfigurationError
    ├── CertificateParseError
    └── SecurityConfigurationError

    ResourceNotFoundError (FileNotFoundError)

Missing files surface as the builtin FileNotFoundError / OSError and missing
embedded resources as ResourceNotFoundError, so callers can handle every
"source could not be read" case with a single ``except OSError``.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pinned_cert_tls.sources import CertificateSource

__all__: list[str] = [
    'CertificateParseError',
    'ConfigurationError',
    'PinnedCertSecurityError',
    'ResourceNotFoundError',
    'SecurityConfigurationError',
]


class PinnedCertSecurityError(Exception):
    """
    Base exception for pinned certificate errors.

    Catch this to handle every configuration, parsing and TLS assembly
    failure raised by this package. I/O failures on the certificate source
    are OSError subclasses and are not part of this tree.
    """

    pass


class ConfigurationError(PinnedCertSecurityError, ValueError):
    """
    Raised when the certificate configuration string is unusable.

    Covers a missing or empty argument, an unsupported prefix, and an
    environment variable or system property that is unset or empty.

    Attributes:
        source: The certificate source being resolved when the error
            occurred, or None when no prefix matched.
    """

    def __init__(
        self,
        message: str,
        source: 'CertificateSource | None' = None,
    ) -> None:
        super().__init__(message)
        self.source: 'CertificateSource | None' = source


class CertificateParseError(PinnedCertSecurityError):
    """Raised when the resolved bytes do not decode to an X.509 certificate."""

    pass


class SecurityConfigurationError(PinnedCertSecurityError):
    """
    Raised when the trust store or SSL context cannot be assembled.

    The underlying ssl/OpenSSL error is always available as ``__cause__``.
    """

    pass


class ResourceNotFoundError(FileNotFoundError):
    """
    Raised when an embedded resource cannot be located by the resource loader.

    Attributes:
        resource_name: The resource name that failed to resolve.
    """

    def __init__(self, resource_name: str) -> None:
        super().__init__(f'Certificate resource not found: {resource_name!r}')
        self.resource_name: str = resource_name
