"""
Automation Runs

Entry points that start a run: a PDF landing in the upload bucket (batch) and
an authenticated client request carrying records (interactive). Both own the
run document's lifecycle: created as processing, finalized exactly once.
"""

import logging
import time
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import AutomationError, NoRecordsError, UnauthenticatedError
from ..sources import extract_text_from_pdf, parse_records, records_from_payload
from ..storage import LocalBucket
from .ledger import RunLedger, RunRecord, RunStats
from .orchestrator import SubmissionOrchestrator


logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
UI_SOURCE = "ui"


class StorageObjectEvent(BaseModel):
    """Notification that an object finished uploading to the bucket."""
    model_config = ConfigDict(populate_by_name=True)

    bucket: str = ""
    name: str
    content_type: str = Field(default="", alias="contentType")


class AutomationResponse(BaseModel):
    """Result returned to an interactive caller."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    run_id: str = Field(alias="runId")


class RunService:
    """Starts and finalizes automation runs."""

    def __init__(
        self,
        ledger: RunLedger,
        orchestrator: SubmissionOrchestrator,
        bucket: LocalBucket,
        upload_prefix: str = "uploads/",
        clock: Callable[[], float] = time.time,
    ):
        self.ledger = ledger
        self.orchestrator = orchestrator
        self.bucket = bucket
        self.upload_prefix = upload_prefix
        self._clock = clock

    async def handle_uploaded_object(self, event: StorageObjectEvent) -> Optional[RunRecord]:
        """
        Process a PDF uploaded under the upload prefix.

        Other objects are skipped without touching the ledger. Failures end up
        on the run document rather than being raised.
        """
        if not event.content_type.startswith(PDF_CONTENT_TYPE):
            logger.info("Skipping %s: not a PDF.", event.name)
            return None
        if not event.name.startswith(self.upload_prefix):
            logger.info("Skipping %s: not in the %s folder.", event.name, self.upload_prefix)
            return None

        run_id = event.name.rsplit("/", 1)[-1]
        logger.info("Processing file: %s", run_id)
        self.ledger.start_run(run_id)

        try:
            pdf_bytes = self.bucket.download(event.name)
            records = parse_records(extract_text_from_pdf(pdf_bytes))
            logger.info("Found %d records in the PDF.", len(records))
            if not records:
                raise NoRecordsError("No records found in PDF text.")

            stats = await self.orchestrator.run(records, run_id)
        except Exception as e:
            logger.exception("Error processing file %s", run_id)
            self.ledger.fail_run(run_id, str(e))
        else:
            self.ledger.complete_run(run_id, stats)
            logger.info("Processing complete for file %s.", run_id)

        return self.ledger.get_run(run_id)

    async def run_for_user(self, records: Any, user_id: Optional[str]) -> AutomationResponse:
        """
        Run client-supplied records on behalf of an authenticated user.

        Unauthenticated callers and malformed payloads are rejected before a
        run document is created. A failed run is recorded and re-raised as an
        internal error.
        """
        if not user_id:
            raise UnauthenticatedError("The function must be called while authenticated.")

        form_records = records_from_payload(records)
        run_id = f"ui-{int(self._clock() * 1000)}"
        logger.info("[%s] Received automation request from user %s", run_id, user_id)

        self.ledger.start_run(run_id, source=UI_SOURCE, user=user_id)

        try:
            stats: RunStats = await self.orchestrator.run(form_records, run_id)
        except Exception as e:
            logger.exception("[%s] Error during UI automation", run_id)
            self.ledger.fail_run(run_id, str(e))
            raise AutomationError(str(e)) from e

        self.ledger.complete_run(run_id, stats)
        logger.info("[%s] UI automation complete.", run_id)
        return AutomationResponse(success=True, message="Automation finished successfully.", run_id=run_id)
