import logging
import sys
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, TypeVar

from tqdm import tqdm

from ..errors import MigrationError
from ..models import Domain, Token
from ..rdns.fetcher import LegacyFetcher
from ..rdns.importer import Importer
from ..store.reader import SourceReader
from ..transformer import Transformer, domain_from_key, unwrap_acme_text
from .report import MigrationReport, MigrationSummary

logger = logging.getLogger(__name__)

T = TypeVar("T")

# per-record failures; anything else is a bug and should propagate
RECORD_ERRORS = (MigrationError, ValueError)


class Coordinator:
    """
    Drives the 0.4.x -> 0.5.x migration.

    Frozen markers go first, then tokens together with their A and ACME TXT
    records. A failing record is logged and counted; the batch never aborts
    on it. Enumeration failures on the source store do propagate.
    """

    def __init__(
        self,
        reader: SourceReader,
        fetcher: LegacyFetcher,
        importer: Importer,
        transformer: Transformer,
        dry_run: bool = False,
        progress: Optional[bool] = None,
    ) -> None:
        self._reader = reader
        self._fetcher = fetcher
        self._importer = importer
        self._transformer = transformer
        self._dry_run = dry_run
        self._progress = sys.stderr.isatty() if progress is None else progress

    def _iter(self, items: Sequence[T], desc: str) -> Iterable[T]:
        return tqdm(items, desc=desc, unit="rec", disable=not self._progress)

    def run(self) -> MigrationSummary:
        frozen = self.migrate_frozen()
        records = self.migrate_records()
        return MigrationSummary(frozen=frozen, records=records)

    def migrate_frozen(self) -> MigrationReport:
        report = MigrationReport("frozen")
        entries = self._reader.list_frozen()
        logger.info("Migrating %d frozen domains…", len(entries))

        for f in self._iter(entries, "frozen"):
            try:
                payload = self._transformer.frozen_payload(f)
                if self._dry_run:
                    report.add_skipped("frozen", payload.path, "dry run")
                    continue
                self._importer.post_frozen(payload)
            except RECORD_ERRORS as e:
                logger.error("Frozen %s: %s", f.path, e)
                report.add_failure("frozen", f.path, e)
                continue
            report.add_success("frozen", payload.path)

        self._log_report(report)
        return report

    def migrate_records(self) -> MigrationReport:
        report = MigrationReport("records")
        tokens = self._reader.list_tokens()
        logger.info("Migrating %d tokens…", len(tokens))

        a_records: List[Domain] = []
        txt_records: List[Domain] = []

        for t in self._iter(tokens, "tokens"):
            try:
                self._migrate_token(t, report)
            except RECORD_ERRORS as e:
                logger.error("Token %s: %s", t.path, e)
                report.add_failure("token", t.path, e)
                continue

            fqdn = domain_from_key(t.path)
            try:
                da = self._fetcher.query_a_record(t)
            except RECORD_ERRORS as e:
                logger.error("A record %s: %s", fqdn, e)
                report.add_failure("a", fqdn, e)
                continue
            if da.has_hosts:
                a_records.append(da)

            try:
                dt = self._fetcher.query_txt_record(t)
            except RECORD_ERRORS as e:
                logger.error("TXT record _acme-challenge.%s: %s", fqdn, e)
                report.add_failure("txt", f"_acme-challenge.{fqdn}", e)
                continue
            if dt.has_text:
                text = unwrap_acme_text(dt.text)
                if text:
                    txt_records.append(replace(dt, text=text))
                else:
                    logger.debug("Dropping empty ACME text for %s", fqdn)

        logger.info("Collected %d A records and %d TXT records",
                    len(a_records), len(txt_records))
        for d in self._iter(a_records + txt_records, "records"):
            self._migrate_record(d, report)

        self._log_report(report)
        return report

    def _migrate_token(self, token: Token, report: MigrationReport) -> None:
        payload = self._transformer.token_payload(token)
        if self._dry_run:
            report.add_skipped("token", payload.path, "dry run")
            return
        self._importer.post_token(payload)
        report.add_success("token", payload.path)

    def _migrate_record(self, domain: Domain, report: MigrationReport) -> None:
        kind = "txt" if domain.has_text else "a"
        try:
            payload = self._transformer.record_payload(domain)
            if self._dry_run:
                report.add_skipped(kind, payload.fqdn, "dry run")
                return
            self._importer.post_record(payload)
        except RECORD_ERRORS as e:
            logger.error("Record %s: %s", domain.fqdn, e)
            report.add_failure(kind, domain.fqdn, e)
            return
        report.add_success(kind, payload.fqdn)

    def _log_report(self, report: MigrationReport) -> None:
        logger.info("Finished %s: %d ok, %d failed, %d skipped",
                    report.name, report.succeeded, report.failed, report.skipped)
