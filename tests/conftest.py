import json
from types import SimpleNamespace
from typing import Any, Dict, Optional, Tuple
from unittest.mock import MagicMock

import etcd
import pytest

from rdns_migrate.rdns.client import RDNSClient

SRC_API = "http://legacy.test"
DST_API = "http://dst.test"


def make_response(status: int = 200, body: Optional[Any] = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    if body is None:
        body = {"status": status, "msg": ""}
    if isinstance(body, str):
        resp.json.side_effect = ValueError("not json")
        resp.text = body
    else:
        resp.json.return_value = body
        resp.text = json.dumps(body)
    return resp


def envelope(data: Optional[Dict[str, Any]] = None, status: int = 200, msg: str = "") -> Dict[str, Any]:
    return {"status": status, "msg": msg, "data": data or {}, "token": ""}


class FakeSession:
    """Stands in for requests.Session, routing on (method, url)."""

    def __init__(self, routes: Optional[Dict[Tuple[str, str], Any]] = None) -> None:
        self.routes = routes or {}
        self.headers: Dict[str, str] = {}
        self.calls = []
        self.closed = False

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append(SimpleNamespace(
            method=method,
            url=url,
            body=json,
            headers=headers or {},
            timeout=timeout,
        ))
        route = self.routes.get((method, url))
        if isinstance(route, Exception):
            raise route
        if route is None:
            return make_response(200, envelope())
        return route

    def posts(self, url: str):
        return [c.body for c in self.calls if c.method == "POST" and c.url == url]

    def close(self):
        self.closed = True


def etcd_node(key: str, value: str = "", expiration: Optional[str] = None, is_dir: bool = False):
    return SimpleNamespace(key=key, value=value, expiration=expiration, dir=is_dir)


class FakeEtcd:
    """Minimal etcd.Client double: ``read`` returns preset leaves or raises."""

    def __init__(self, tree: Optional[Dict[str, Any]] = None) -> None:
        self.tree = tree or {}
        self.reads = []

    def read(self, key, recursive=False):
        self.reads.append((key, recursive))
        entry = self.tree.get(key)
        if isinstance(entry, Exception):
            raise entry
        if entry is None:
            raise etcd.EtcdKeyNotFound(f"Key not found : {key}")
        return SimpleNamespace(leaves=iter(entry))


@pytest.fixture
def src_session():
    return FakeSession()


@pytest.fixture
def dst_session():
    return FakeSession()


@pytest.fixture
def src_client(src_session):
    return RDNSClient(SRC_API, session=src_session)


@pytest.fixture
def dst_client(dst_session):
    return RDNSClient(DST_API, session=dst_session)
