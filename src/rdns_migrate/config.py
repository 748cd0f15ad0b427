import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlsplit

from .errors import ConfigError

DEFAULT_SRC_ENDPOINTS = "http://127.0.0.1:2379"
DEFAULT_SRC_API_ENDPOINT = "http://127.0.0.1:9333"
DEFAULT_SRC_PREFIX = "/rdns"
DEFAULT_DOMAIN = "lb.rancher.cloud"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_ETCD_TIMEOUT = 1.0

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def split_endpoints(value: str) -> List[str]:
    return [e.strip() for e in value.split(",") if e.strip()]


def _is_http_url(value: str) -> bool:
    parts = urlsplit(value)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


@dataclass
class MigrationConfig:
    dst_api_endpoint: str
    src_endpoints: List[str] = field(default_factory=lambda: [DEFAULT_SRC_ENDPOINTS])
    src_api_endpoint: str = DEFAULT_SRC_API_ENDPOINT
    src_prefix: str = DEFAULT_SRC_PREFIX
    src_domain: str = DEFAULT_DOMAIN
    dst_domain: str = DEFAULT_DOMAIN
    debug: bool = False
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    etcd_timeout: float = DEFAULT_ETCD_TIMEOUT
    strict_status: bool = True
    dry_run: bool = False
    report: Optional[Path] = None

    def validate(self) -> "MigrationConfig":
        if not self.dst_api_endpoint:
            raise ConfigError("dst_api_endpoint is required (--dst_api_endpoint or DST_API_ENDPOINT)")
        for name, url in (("src_api_endpoint", self.src_api_endpoint),
                          ("dst_api_endpoint", self.dst_api_endpoint)):
            if not _is_http_url(url):
                raise ConfigError(f"{name} must be an http(s) URL, got {url!r}")
        if not self.src_endpoints:
            raise ConfigError("at least one etcd endpoint is required")
        for endpoint in self.src_endpoints:
            if not _is_http_url(endpoint):
                raise ConfigError(f"etcd endpoint must be an http(s) URL, got {endpoint!r}")
        if not self.src_domain or not self.dst_domain:
            raise ConfigError("src_domain and dst_domain must not be empty")
        if self.http_timeout <= 0 or self.etcd_timeout <= 0:
            raise ConfigError("timeouts must be positive")
        return self
