import logging
from typing import Any, Callable, Iterable, List, Tuple, TypeVar
from urllib.parse import urlsplit

import etcd

from ..config import DEFAULT_ETCD_TIMEOUT
from ..errors import SourceConnectionError, SourceReadError
from ..models import Frozen, Token, parse_timestamp

logger = logging.getLogger(__name__)

TOKEN_NAMESPACE = "/token_origin"
FROZEN_FAMILY = "_frozen"

T = TypeVar("T")


def parse_endpoints(endpoints: Iterable[str]) -> Tuple[str, Tuple[Tuple[str, int], ...]]:
    """Split ``http://host:port`` endpoints into a protocol and host/port pairs."""
    protocol = None
    hosts: List[Tuple[str, int]] = []
    for endpoint in endpoints:
        parts = urlsplit(endpoint)
        if not parts.hostname:
            raise SourceConnectionError(f"Invalid etcd endpoint: {endpoint!r}")
        scheme = parts.scheme or "http"
        if protocol is not None and scheme != protocol:
            raise SourceConnectionError("All etcd endpoints must use the same scheme")
        protocol = scheme
        hosts.append((parts.hostname, parts.port or 2379))
    if not hosts:
        raise SourceConnectionError("No etcd endpoints given")
    return protocol, tuple(hosts)


class SourceReader:
    """
    Enumerates frozen markers and subdomain tokens from the 0.4.x etcd store.

    Read-only: nothing here writes to etcd.
    """

    def __init__(self, client: Any, prefix: str) -> None:
        self._client = client
        self.prefix = prefix.rstrip("/")

    @classmethod
    def connect(
        cls,
        endpoints: Iterable[str],
        prefix: str,
        timeout: float = DEFAULT_ETCD_TIMEOUT,
    ) -> "SourceReader":
        protocol, hosts = parse_endpoints(endpoints)
        try:
            if len(hosts) == 1:
                host, port = hosts[0]
                client = etcd.Client(host=host, port=port, protocol=protocol,
                                     read_timeout=timeout)
            else:
                client = etcd.Client(host=hosts, protocol=protocol,
                                     read_timeout=timeout, allow_reconnect=True)
        except etcd.EtcdException as e:
            raise SourceConnectionError(f"Failed to connect to etcd {hosts}: {e}") from e
        logger.debug("Connected to etcd %s://%s", protocol, hosts)
        return cls(client, prefix)

    @property
    def frozen_namespace(self) -> str:
        return f"{self.prefix}/{FROZEN_FAMILY}"

    def list_frozen(self) -> List[Frozen]:
        return self._list(
            self.frozen_namespace,
            lambda node: Frozen(path=node.key, expiration=parse_timestamp(node.expiration)),
        )

    def list_tokens(self) -> List[Token]:
        return self._list(
            TOKEN_NAMESPACE,
            lambda node: Token(path=node.key, token=node.value or "",
                               expiration=parse_timestamp(node.expiration)),
        )

    def _list(self, path: str, build: Callable[[Any], T]) -> List[T]:
        try:
            result = self._client.read(path, recursive=True)
        except etcd.EtcdKeyNotFound:
            logger.info("Namespace %s does not exist; nothing to migrate", path)
            return []
        except etcd.EtcdException as e:
            raise SourceReadError(f"Failed to list {path}: {e}") from e

        records: List[T] = []
        for node in result.leaves:
            # an empty directory yields itself as its only leaf
            if node.dir or node.key.rstrip("/") == path.rstrip("/"):
                continue
            try:
                records.append(build(node))
            except ValueError as e:
                raise SourceReadError(f"Malformed entry {node.key} under {path}: {e}") from e
        logger.info("Read %d entries under %s", len(records), path)
        return records
