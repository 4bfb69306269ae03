# pinned_cert_tls/sources.py
"""
Certificate source resolution.

A single configuration string tells the connector where the pinned
certificate lives. The prefix of that string selects the source:

    file:/etc/pki/db/server.crt        local filesystem path
    classpath:myapp.certs/server.crt   packaged resource (see resources.py)
    env:MYDB_CERT                      environment variable value
    sys:mydb_cert                      process-wide property (see properties.py)
    -----BEGIN CERTIFICATE-----...     the PEM text itself

Dispatch Order:
---------------
Prefixes are checked in the order above and the first match wins. Only when
no prefix matches is the string tested for the inline PEM marker; anything
else is a ConfigurationError that lists every accepted form.

Resolution is split in two steps so the decision can be inspected without
I/O: resolve() maps the string to a ResolvedSource, open() turns that into a
binary stream. The caller owns the returned stream and must close it.
"""

import io
import logging
import os
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Final, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from pinned_cert_tls.errors import ConfigurationError, ResourceNotFoundError
from pinned_cert_tls.properties import system_properties
from pinned_cert_tls.resources import PackageResourceLoader, ResourceLoader

__all__: list[str] = [
    'CLASSPATH_PREFIX',
    'ENV_PREFIX',
    'FILE_PREFIX',
    'PEM_CERTIFICATE_MARKER',
    'SYS_PROP_PREFIX',
    'CertificateSource',
    'CertificateSourceResolver',
    'ResolvedSource',
]

logger: logging.Logger = logging.getLogger(__name__)

FILE_PREFIX: Final[str] = 'file:'
CLASSPATH_PREFIX: Final[str] = 'classpath:'
ENV_PREFIX: Final[str] = 'env:'
SYS_PROP_PREFIX: Final[str] = 'sys:'
PEM_CERTIFICATE_MARKER: Final[str] = '-----BEGIN CERTIFICATE-----'


class CertificateSource(str, Enum):
    """Where the pinned certificate bytes are read from."""

    FILE = 'file'
    CLASSPATH = 'classpath'
    ENVIRONMENT = 'env'
    SYSTEM_PROPERTY = 'sys'
    INLINE_PEM = 'inline'


class ResolvedSource(BaseModel):
    """
    Outcome of prefix dispatch, before any I/O.

    Attributes:
        source: The selected certificate source.
        location: Path, resource name, variable name or property key with the
            prefix removed. For INLINE_PEM this is the full PEM text, so it
            is excluded from repr to keep certificates out of log lines.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    source: CertificateSource
    location: str = Field(repr=False)


class SourceRule(NamedTuple):
    """One entry of the ordered prefix dispatch table."""

    prefix: str
    source: CertificateSource
    opener: Callable[[str], BinaryIO]


class CertificateSourceResolver:
    """
    Maps a configuration string to an open certificate byte stream.

    All external collaborators are injectable so tests (and embedding
    applications) can control exactly what each prefix sees.

    Args:
        resource_loader: Loader for ``classpath:`` names. Defaults to a
            PackageResourceLoader with no default package.
        environ: Mapping consulted for ``env:``. Defaults to os.environ.
        properties: Mapping consulted for ``sys:``. Defaults to the shared
            system_properties bag.
    """

    def __init__(
        self,
        resource_loader: ResourceLoader | None = None,
        environ: Mapping[str, str] | None = None,
        properties: Mapping[str, str] | None = None,
    ) -> None:
        self._resource_loader: ResourceLoader = (
            resource_loader if resource_loader is not None else PackageResourceLoader()
        )
        self._environ: Mapping[str, str] = environ if environ is not None else os.environ
        self._properties: Mapping[str, str] = (
            properties if properties is not None else system_properties
        )

        # Order is significant: first matching prefix wins
        self._rules: tuple[SourceRule, ...] = (
            SourceRule(FILE_PREFIX, CertificateSource.FILE, self._open_file),
            SourceRule(CLASSPATH_PREFIX, CertificateSource.CLASSPATH, self._open_resource),
            SourceRule(ENV_PREFIX, CertificateSource.ENVIRONMENT, self._open_environment),
            SourceRule(SYS_PROP_PREFIX, CertificateSource.SYSTEM_PROPERTY, self._open_property),
        )

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def resolve(self, ssl_factory_arg: str) -> ResolvedSource:
        """
        Select the certificate source for a configuration string.

        Args:
            ssl_factory_arg: Non-empty configuration string.

        Returns:
            ResolvedSource describing where the bytes will come from.

        Raises:
            ConfigurationError: If no prefix matches and the string is not
                inline PEM.
        """
        for rule in self._rules:
            if ssl_factory_arg.startswith(rule.prefix):
                return ResolvedSource(
                    source=rule.source,
                    location=ssl_factory_arg[len(rule.prefix) :],
                )

        if ssl_factory_arg.startswith(PEM_CERTIFICATE_MARKER):
            return ResolvedSource(
                source=CertificateSource.INLINE_PEM,
                location=ssl_factory_arg,
            )

        error_message: str = (
            f'The certificate argument must start with the prefix '
            f'{FILE_PREFIX}, {CLASSPATH_PREFIX}, {ENV_PREFIX}, {SYS_PROP_PREFIX}, '
            f'or {PEM_CERTIFICATE_MARKER}'
        )
        logger.error(error_message)
        raise ConfigurationError(error_message)

    def open(self, resolved: ResolvedSource) -> BinaryIO:
        """
        Open the byte stream for a resolved source.

        Args:
            resolved: Result of resolve().

        Returns:
            Binary stream positioned at the start of the certificate bytes.

        Raises:
            OSError: If a file cannot be opened.
            ResourceNotFoundError: If a classpath resource does not exist.
            ConfigurationError: If an environment variable or property is
                unset or empty.
        """
        if resolved.source is CertificateSource.INLINE_PEM:
            return _text_stream(resolved.location)

        for rule in self._rules:
            if rule.source is resolved.source:
                return rule.opener(resolved.location)

        raise ValueError(f'No opener registered for source {resolved.source!r}')

    # -------------------------------------------------------------------------
    # Source Openers
    # -------------------------------------------------------------------------

    def _open_file(self, path: str) -> BinaryIO:
        logger.debug('Reading pinned certificate from file %r', path)
        # Buffered binary reader; FileNotFoundError / PermissionError propagate
        return Path(path).open('rb')

    def _open_resource(self, name: str) -> BinaryIO:
        logger.debug('Reading pinned certificate from resource %r', name)
        if not self._resource_loader.exists(name):
            logger.error('Certificate resource not found: %r', name)
            raise ResourceNotFoundError(name)
        return self._resource_loader.open(name)

    def _open_environment(self, variable_name: str) -> BinaryIO:
        logger.debug('Reading pinned certificate from environment variable %r', variable_name)
        value: str | None = self._environ.get(variable_name)
        if not value:
            error_message: str = (
                "The environment variable containing the server's SSL certificate "
                f'must not be empty: {variable_name!r}'
            )
            logger.error(error_message)
            raise ConfigurationError(error_message, source=CertificateSource.ENVIRONMENT)
        return _text_stream(value)

    def _open_property(self, property_name: str) -> BinaryIO:
        logger.debug('Reading pinned certificate from system property %r', property_name)
        value: str | None = self._properties.get(property_name)
        if not value:
            error_message: str = (
                "The system property containing the server's SSL certificate "
                f'must not be empty: {property_name!r}'
            )
            logger.error(error_message)
            raise ConfigurationError(
                error_message, source=CertificateSource.SYSTEM_PROPERTY
            )
        return _text_stream(value)


def _text_stream(value: str) -> BinaryIO:
    """Encode certificate text as UTF-8; unencodable characters become '?'."""
    # os.environ carries undecodable bytes as lone surrogates
    return io.BytesIO(value.encode('utf-8', errors='replace'))
