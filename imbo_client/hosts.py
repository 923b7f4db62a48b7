"""Host selection for single and sharded Imbo deployments."""

import zlib
from typing import Iterable, Sequence, Tuple, Union

from .exceptions import ConfigurationError, InvalidIdentifierError


def select_host(hosts: Sequence[str], image_identifier: str) -> str:
    """
    Pick the host responsible for an image.

    With one host it is returned as is. Otherwise the CRC32 of the
    identifier, modulo the number of hosts, indexes into the list, so the
    same identifier always lands on the same shard.
    """
    if not hosts:
        raise ConfigurationError("At least one server URL is required")
    if len(hosts) == 1:
        return hosts[0]
    if not image_identifier:
        raise InvalidIdentifierError("Image identifier cannot be empty")

    checksum = zlib.crc32(image_identifier.encode('utf-8')) & 0xffffffff
    return hosts[checksum % len(hosts)]


class ServerPool:
    """Ordered, immutable list of server base URLs."""

    __slots__ = ('_hosts',)

    def __init__(self, hosts: Union[str, Iterable[str]]):
        if isinstance(hosts, str):
            hosts = [hosts]

        normalized = []
        for host in hosts:
            if not host or not host.strip():
                raise ConfigurationError("Server URL cannot be empty")
            normalized.append(host.strip().rstrip('/'))

        if not normalized:
            raise ConfigurationError("At least one server URL is required")

        self._hosts: Tuple[str, ...] = tuple(normalized)

    @property
    def hosts(self) -> Tuple[str, ...]:
        return self._hosts

    @property
    def primary(self) -> str:
        """Host used for resources that are not sharded (user, status, stats)."""
        return self._hosts[0]

    def select(self, image_identifier: str) -> str:
        return select_host(self._hosts, image_identifier)

    def __len__(self):
        return len(self._hosts)

    def __iter__(self):
        return iter(self._hosts)

    def __eq__(self, other):
        if not isinstance(other, ServerPool):
            return NotImplemented
        return self._hosts == other._hosts

    def __hash__(self):
        return hash(self._hosts)

    def __repr__(self):
        return f"ServerPool({list(self._hosts)!r})"
