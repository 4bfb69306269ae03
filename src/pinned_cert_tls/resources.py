# pinned_cert_tls/resources.py
"""
Resource loading for the ``classpath:`` certificate source.

Certificates shipped inside an application package are located through a
ResourceLoader. The default implementation is backed by
``importlib.resources`` so it works for regular directories, zipped
packages and installed wheels alike.

Resource Names:
---------------
PackageResourceLoader accepts names in the form ``<dotted.package>/<path>``:

    classpath:myapp.certs/server.crt

When constructed with ``default_package``, the whole name is a path relative
to that package instead:

    PackageResourceLoader(default_package='myapp')
    classpath:certs/server.crt

Custom loaders only need ``exists()`` and ``open()``; the factory always asks
``exists()`` first so an unresolvable name is reported before any stream is
created.
"""

import logging
from importlib import resources
from importlib.resources.abc import Traversable
from typing import BinaryIO, Protocol, runtime_checkable

from pinned_cert_tls.errors import ResourceNotFoundError

__all__: list[str] = ['PackageResourceLoader', 'ResourceLoader']

logger: logging.Logger = logging.getLogger(__name__)


@runtime_checkable
class ResourceLoader(Protocol):
    """Capability to locate and open named binary resources."""

    def exists(self, name: str) -> bool:
        """Return True if ``name`` resolves to a readable resource."""
        ...

    def open(self, name: str) -> BinaryIO:
        """Open ``name`` for binary reading; the caller closes the stream."""
        ...


class PackageResourceLoader:
    """
    ResourceLoader backed by ``importlib.resources``.

    Args:
        default_package: Dotted package name that resource names are resolved
            against. If None, each name must carry its own package prefix.
    """

    def __init__(self, default_package: str | None = None) -> None:
        self._default_package: str | None = default_package

    def _locate(self, name: str) -> Traversable | None:
        if self._default_package is not None:
            package_name: str = self._default_package
            relative_path: str = name
        else:
            package_name, separator, relative_path = name.partition('/')
            if not separator or not package_name or not relative_path:
                logger.debug('Resource name %r has no package prefix', name)
                return None

        try:
            package_root: Traversable = resources.files(package_name)
        except ModuleNotFoundError:
            logger.debug('Resource package %r is not importable', package_name)
            return None

        return package_root.joinpath(relative_path.lstrip('/'))

    def exists(self, name: str) -> bool:
        resource: Traversable | None = self._locate(name)
        return resource is not None and resource.is_file()

    def open(self, name: str) -> BinaryIO:
        resource: Traversable | None = self._locate(name)
        if resource is None or not resource.is_file():
            raise ResourceNotFoundError(name)
        return resource.open('rb')
