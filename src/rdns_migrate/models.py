"""
Wire types shared by the etcd reader and both RDNS APIs.

Every record is immutable once built; rewrites go through
``dataclasses.replace`` and yield a fresh copy.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp as written by etcd (nanosecond precision)."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def _expect(value: Any, kind: type, name: str) -> Any:
    if not isinstance(value, kind):
        raise ValueError(f"Unexpected {name} in response: {value!r}")
    return value


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


@dataclass(frozen=True)
class Token:
    path: str
    token: str
    expiration: Optional[datetime] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "token": self.token,
            "expiration": format_timestamp(self.expiration),
        }


@dataclass(frozen=True)
class Frozen:
    path: str
    expiration: Optional[datetime] = None

    def to_json(self) -> Dict[str, Any]:
        return {"path": self.path, "expiration": format_timestamp(self.expiration)}


@dataclass(frozen=True)
class Domain:
    fqdn: str = ""
    hosts: List[str] = field(default_factory=list)
    subdomain: Dict[str, List[str]] = field(default_factory=dict)
    text: str = ""
    token: str = ""
    expiration: Optional[datetime] = None

    @property
    def has_hosts(self) -> bool:
        return len(self.hosts) >= 1

    @property
    def has_text(self) -> bool:
        return self.text != ""

    def to_json(self) -> Dict[str, Any]:
        """Serialize, omitting empty optional fields the way the API expects."""
        body: Dict[str, Any] = {"fqdn": self.fqdn}
        if self.hosts:
            body["hosts"] = list(self.hosts)
        if self.subdomain:
            body["subdomain"] = {k: list(v) for k, v in self.subdomain.items()}
        if self.text:
            body["text"] = self.text
        if self.token:
            body["token"] = self.token
        body["expiration"] = format_timestamp(self.expiration)
        return body

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "Domain":
        data = _expect(data or {}, dict, "data")
        subdomain = _expect(data.get("subdomain") or {}, dict, "subdomain")
        expiration = data.get("expiration")
        if expiration is not None:
            _expect(expiration, str, "expiration")
        return cls(
            fqdn=_expect(data.get("fqdn") or "", str, "fqdn"),
            hosts=list(_expect(data.get("hosts") or [], list, "hosts")),
            subdomain={k: list(_expect(v or [], list, f"subdomain.{k}"))
                       for k, v in subdomain.items()},
            text=_expect(data.get("text") or "", str, "text"),
            token=_expect(data.get("token") or "", str, "token"),
            expiration=parse_timestamp(expiration),
        )


@dataclass(frozen=True)
class Response:
    status: int = 0
    message: str = ""
    data: Domain = field(default_factory=Domain)
    token: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Response":
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected response envelope: {data!r}")
        return cls(
            status=int(data.get("status") or 0),
            message=_expect(data.get("msg") or "", str, "msg"),
            data=Domain.from_json(data.get("data")),
            token=_expect(data.get("token") or "", str, "token"),
        )
