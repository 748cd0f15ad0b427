"""Clients for the RDNS v1 HTTP API."""

from .client import RDNSClient
from .fetcher import LegacyFetcher
from .importer import Importer

__all__ = ["RDNSClient", "LegacyFetcher", "Importer"]
