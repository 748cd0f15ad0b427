import logging
import threading
from typing import Any, Dict

from ..errors import TransportError
from ..models import Domain, Frozen, Token
from ..utils import get_endpoint
from .client import RDNSClient, wrap_error

logger = logging.getLogger(__name__)


class Importer:
    """
    Wraps the 0.5.x ``/v1/migrate/*`` endpoints.

    POSTs run inside an exclusive write section so that a caller which
    migrates records concurrently never interleaves writes.
    """

    def __init__(self, client: RDNSClient) -> None:
        self._client = client
        self._write_lock = threading.Lock()

    def post_frozen(self, frozen: Frozen) -> None:
        self._post("post_frozen", "frozen", frozen.to_json())

    def post_token(self, token: Token) -> None:
        self._post("post_token", "token", token.to_json())

    def post_record(self, domain: Domain) -> None:
        self._post("post_record", "record", domain.to_json())

    def _post(self, op: str, name: str, payload: Dict[str, Any]) -> None:
        endpoint = get_endpoint(name)
        with self._write_lock:
            try:
                self._client.post(endpoint, payload)
            except TransportError as e:
                raise wrap_error(op, e) from e
        logger.debug("%s: posted %s", op, payload.get("path") or payload.get("fqdn"))
