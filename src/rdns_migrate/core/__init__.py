"""
Core package: orchestration of the migration.
Exposes the Coordinator which ties together the etcd reader, the legacy
API fetcher and the destination importer.
"""

from .coordinator import Coordinator
from .report import MigrationReport, MigrationSummary, RecordOutcome

__all__ = [
    "Coordinator",
    "MigrationReport",
    "MigrationSummary",
    "RecordOutcome",
]
