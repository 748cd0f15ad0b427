import logging
from typing import Any, Dict, Optional

import requests

from ..config import DEFAULT_HTTP_TIMEOUT
from ..errors import APIError, TransportError
from ..models import Response

logger = logging.getLogger(__name__)


class RDNSClient:
    """JSON transport for the RDNS v1 HTTP API (both 0.4.x and 0.5.x)."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        strict_status: bool = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.strict_status = strict_status
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def __enter__(self) -> "RDNSClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def request(
        self,
        method: str,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        bearer: Optional[str] = None,
    ) -> Response:
        """Send a request and decode the ``{status, msg, data, token}`` envelope."""
        url = self.url(endpoint)
        headers: Dict[str, str] = {}
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        try:
            resp = self._session.request(method, url, json=payload, headers=headers,
                                         timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        try:
            envelope = Response.from_json(resp.json())
        except (TypeError, ValueError) as e:
            raise TransportError(f"decode response error: {resp.text}") from e

        logger.debug("got response entry: %r", envelope)
        self._check_status(resp.status_code, envelope)
        return envelope

    def get(self, endpoint: str, bearer: Optional[str] = None) -> Response:
        return self.request("GET", endpoint, bearer=bearer)

    def post(self, endpoint: str, payload: Dict[str, Any]) -> Response:
        return self.request("POST", endpoint, payload=payload)

    def _check_status(self, code: int, envelope: Response) -> None:
        if self.strict_status:
            if not 200 <= code < 300:
                raise APIError(
                    f"got request error: {envelope.message or f'HTTP {code}'}",
                    status=code,
                )
            return
        # 0.4.x compatible: only an error when the server also sent a message
        if (code < 200 or code > 300) and envelope.message:
            raise APIError(f"got request error: {envelope.message}", status=code)


def wrap_error(op: str, e: TransportError) -> TransportError:
    """Prefix a transport error with the operation that triggered it."""
    message = f"{op}: failed to execute a request: {e}"
    if isinstance(e, APIError):
        return APIError(message, status=e.status)
    return TransportError(message)
