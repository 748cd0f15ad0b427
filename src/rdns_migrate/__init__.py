"""Migrate RDNS state from 0.4.x (etcd v2) to 0.5.x (HTTP API)."""

__version__ = "0.1.0"
