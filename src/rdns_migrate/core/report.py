import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional

import pandas as pd

logger = logging.getLogger(__name__)

OK = "ok"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass(frozen=True)
class RecordOutcome:
    kind: str
    identifier: str
    status: str
    error: Optional[str] = None


@dataclass
class MigrationReport:
    """Per-record outcomes of one migration pass."""

    name: str
    outcomes: List[RecordOutcome] = field(default_factory=list)

    def add_success(self, kind: str, identifier: str) -> None:
        self.outcomes.append(RecordOutcome(kind, identifier, OK))

    def add_failure(self, kind: str, identifier: str, error: BaseException) -> None:
        self.outcomes.append(RecordOutcome(kind, identifier, FAILED, str(error)))

    def add_skipped(self, kind: str, identifier: str, reason: str) -> None:
        self.outcomes.append(RecordOutcome(kind, identifier, SKIPPED, reason))

    def _count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def succeeded(self) -> int:
        return self._count(OK)

    @property
    def failed(self) -> int:
        return self._count(FAILED)

    @property
    def skipped(self) -> int:
        return self._count(SKIPPED)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def failures(self) -> List[RecordOutcome]:
        return [o for o in self.outcomes if o.status == FAILED]

    def to_frame(self) -> pd.DataFrame:
        columns = ["pass", "kind", "identifier", "status", "error"]
        rows = [{"pass": self.name, **asdict(o)} for o in self.outcomes]
        return pd.DataFrame(rows, columns=columns)


@dataclass
class MigrationSummary:
    frozen: MigrationReport
    records: MigrationReport

    @property
    def reports(self) -> List[MigrationReport]:
        return [self.frozen, self.records]

    @property
    def succeeded(self) -> int:
        return sum(r.succeeded for r in self.reports)

    @property
    def failed(self) -> int:
        return sum(r.failed for r in self.reports)

    @property
    def skipped(self) -> int:
        return sum(r.skipped for r in self.reports)

    def to_frame(self) -> pd.DataFrame:
        return pd.concat([r.to_frame() for r in self.reports], ignore_index=True)

    def save(self, path: Path) -> Path:
        """Write every outcome to ``path`` (parquet if the suffix says so, else CSV)."""
        df = self.to_frame()
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix == ".parquet":
            df.to_parquet(path, index=False)
        else:
            df.to_csv(path, index=False)
        logger.info("Saved %d outcomes to %s", len(df), path)
        return path
