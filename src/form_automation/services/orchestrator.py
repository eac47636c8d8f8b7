"""
Submission Orchestrator

Drives one browser session through a sequence of records. Each record goes
navigate -> challenge check -> fill -> submit and ends in exactly one terminal
status (success, captcha-blocked or error) before the next record starts.
Record failures are contained to that record; run-level failures (missing
configuration, no records, browser launch) are raised before anything is
logged.
"""

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Sequence, Union

from playwright.async_api import Page

from ..browsers import BrowserManager, ChallengeDetector, FormFiller
from ..config import DEFAULT_POST_SUBMIT_TIMEOUT_MS
from ..errors import BrowserLaunchError, NoRecordsError
from ..records import FormRecord
from .ledger import RunLedger, RunStats, SubmissionLogEntry, SubmissionStatus
from .site_config import SiteConfigProvider, SiteConfiguration


logger = logging.getLogger(__name__)

CAPTCHA_MESSAGE = "CAPTCHA detected, submission skipped"

RecordLike = Union[FormRecord, Mapping[str, str]]


def _record_fields(record: RecordLike) -> dict[str, str]:
    if isinstance(record, FormRecord):
        return record.as_fields()
    return {key: str(value) for key, value in record.items() if value is not None}


class SubmissionOrchestrator:
    """Runs a batch of records against the configured target site."""

    def __init__(
        self,
        ledger: RunLedger,
        config_provider: SiteConfigProvider,
        browser_factory: Callable[[], BrowserManager],
        detector: Optional[ChallengeDetector] = None,
        filler: Optional[FormFiller] = None,
        post_submit_timeout_ms: int = DEFAULT_POST_SUBMIT_TIMEOUT_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.ledger = ledger
        self.config_provider = config_provider
        self.browser_factory = browser_factory
        self.detector = detector or ChallengeDetector()
        self.filler = filler or FormFiller()
        self.post_submit_timeout_ms = post_submit_timeout_ms
        self._sleep = sleep

    async def run(self, records: Sequence[RecordLike], run_id: str) -> RunStats:
        """
        Submit every record in order and return the outcome counters.

        Raises NoRecordsError, ConfigurationError or BrowserLaunchError before
        any submission entry is written. Once the browser is up, the returned
        counters always add up to len(records).
        """
        logger.info("[%s] Starting processing for %d records.", run_id, len(records))

        if not records:
            raise NoRecordsError("No records to process.")

        config = self.config_provider.load()

        browser = self.browser_factory()
        await browser.start()

        stats = RunStats()
        try:
            try:
                page = await browser.new_page()
            except Exception as e:
                raise BrowserLaunchError(f"Could not open a browser page: {e}") from e

            total = len(records)
            for index, record in enumerate(records, start=1):
                entry = await self._process_record(page, record, index, total, config, run_id)
                self.ledger.log_submission(entry)
                stats.record(entry.status)

                # Pace submissions; nothing to wait for after the last one.
                if index < total:
                    await self._sleep(config.delay_ms / 1000)
        finally:
            await browser.stop()

        logger.info(
            "[%s] Finished: %d submitted, %d failed, %d captcha-blocked.",
            run_id, stats.submitted_count, stats.failed_count, stats.captcha_blocked_count,
        )
        return stats

    async def _process_record(
        self,
        page: Page,
        record: RecordLike,
        index: int,
        total: int,
        config: SiteConfiguration,
        run_id: str,
    ) -> SubmissionLogEntry:
        """Take one record from pending to a terminal status."""
        fields = _record_fields(record)
        entry = SubmissionLogEntry(
            run_id=run_id,
            record_index=index,
            subject_name=fields.get("name") or "N/A",
        )

        try:
            logger.info("[%s] Processing record %d/%d: %s", run_id, index, total, entry.subject_name)
            await page.goto(config.target_url, wait_until="networkidle")

            if await self.detector.detect(page):
                logger.warning("[%s] CAPTCHA detected on page for record %d. Skipping.", run_id, index)
                return self._finalize(entry, SubmissionStatus.CAPTCHA_BLOCKED, CAPTCHA_MESSAGE)

            filled = await self.filler.fill(page, fields, config.selectors)
            logger.debug("[%s] Filled %d fields for record %d", run_id, len(filled), index)
            await self.filler.submit(page, config.selectors, self.post_submit_timeout_ms)

        except Exception as e:
            logger.error("[%s] Failed to process record %d: %s", run_id, index, e)
            return self._finalize(entry, SubmissionStatus.ERROR, str(e) or e.__class__.__name__)

        logger.info("[%s] Successfully submitted record %d", run_id, index)
        return self._finalize(entry, SubmissionStatus.SUCCESS, f"Submitted successfully to {page.url}")

    @staticmethod
    def _finalize(entry: SubmissionLogEntry, status: SubmissionStatus, message: str) -> SubmissionLogEntry:
        return entry.model_copy(update={
            "status": status,
            "message": message,
            "timestamp": datetime.now(timezone.utc),
        })
