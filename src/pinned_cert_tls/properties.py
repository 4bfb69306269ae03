# pinned_cert_tls/properties.py
"""
Process-wide named properties.

A small key/value store, separate from environment variables, that an
embedding application can populate at runtime. The ``sys:`` certificate
source reads from it, so a certificate can be handed to the connector
without touching ``os.environ`` or the filesystem.

Usage:
------
    from pinned_cert_tls.properties import set_property

    set_property('mydb_cert', pem_text)
    factory = PinnedCertTrustFactory('sys:mydb_cert')
"""

import threading
from collections.abc import Iterator, Mapping

__all__: list[str] = [
    'SystemProperties',
    'clear_property',
    'get_property',
    'set_property',
    'system_properties',
]


class SystemProperties(Mapping[str, str]):
    """
    Thread-safe, mutable string property bag.

    Implements the read-only Mapping protocol so it can be passed anywhere a
    ``Mapping[str, str]`` is expected; mutation goes through set() and clear().
    """

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._lock: threading.Lock = threading.Lock()
        self._values: dict[str, str] = dict(initial or {})

    def __getitem__(self, key: str) -> str:
        with self._lock:
            return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def set(self, key: str, value: str) -> None:
        """Set ``key`` to ``value``, replacing any previous value."""
        with self._lock:
            self._values[key] = value

    def clear(self, key: str | None = None) -> None:
        """Remove ``key``, or every property when ``key`` is None."""
        with self._lock:
            if key is None:
                self._values.clear()
            else:
                self._values.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a point-in-time copy of all properties."""
        with self._lock:
            return dict(self._values)


# Shared by every factory that does not receive an explicit mapping
system_properties: SystemProperties = SystemProperties()


def get_property(key: str, default: str | None = None) -> str | None:
    """Return the process-wide property ``key``, or ``default`` if unset."""
    return system_properties.get(key, default)


def set_property(key: str, value: str) -> None:
    """Set a process-wide property."""
    system_properties.set(key, value)


def clear_property(key: str) -> None:
    """Remove a process-wide property if present."""
    system_properties.clear(key)
