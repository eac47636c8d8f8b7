"""
Run Ledger

Durable audit trail for automation runs: one run document per run, keyed by run
id, and one submission log entry per attempted record.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..storage import DocumentStore


RUNS_COLLECTION = "uploadsMeta"
SUBMISSIONS_COLLECTION = "submissionLogs"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionStatus(str, Enum):
    """Outcome of a single record submission."""
    PENDING = "pending"                  # In flight, never persisted
    SUCCESS = "success"
    CAPTCHA_BLOCKED = "captcha-blocked"  # Skipped, not a failure
    ERROR = "error"


class RunStatus(str, Enum):
    """Lifecycle of a run."""
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


class _LedgerModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmissionLogEntry(_LedgerModel):
    """One attempted record within a run."""
    run_id: str
    record_index: int = Field(ge=1)
    subject_name: str
    status: SubmissionStatus = SubmissionStatus.PENDING
    message: str = ""
    timestamp: datetime = Field(default_factory=_utcnow)


class RunStats(_LedgerModel):
    """Aggregate outcome counters for a run."""
    submitted_count: int = 0
    failed_count: int = 0
    captcha_blocked_count: int = 0

    @property
    def total(self) -> int:
        return self.submitted_count + self.failed_count + self.captcha_blocked_count

    def record(self, status: SubmissionStatus) -> None:
        if status == SubmissionStatus.SUCCESS:
            self.submitted_count += 1
        elif status == SubmissionStatus.CAPTCHA_BLOCKED:
            self.captcha_blocked_count += 1
        elif status == SubmissionStatus.ERROR:
            self.failed_count += 1
        else:
            raise ValueError(f"Not a terminal status: {status.value}")


class RunRecord(RunStats):
    """Run document stored in the runs collection."""
    run_id: str
    status: RunStatus = RunStatus.PROCESSING
    created_at: datetime = Field(default_factory=_utcnow)
    source: Optional[str] = None
    user: Optional[str] = None
    message: Optional[str] = None


class RunLedger:
    """Reads and writes run documents and submission log entries."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def start_run(self, run_id: str, source: Optional[str] = None, user: Optional[str] = None) -> RunRecord:
        """Create the run document in the processing state with zero counters."""
        run = RunRecord(run_id=run_id, source=source, user=user)
        self.store.set(RUNS_COLLECTION, run_id, run.model_dump(mode="json", by_alias=True, exclude_none=True))
        return run

    def complete_run(self, run_id: str, stats: RunStats) -> None:
        """Mark a run done with its final counters."""
        fields = stats.model_dump(mode="json", by_alias=True, include={"submitted_count", "failed_count", "captcha_blocked_count"})
        fields["status"] = RunStatus.DONE.value
        self.store.update(RUNS_COLLECTION, run_id, fields)

    def fail_run(self, run_id: str, message: str) -> None:
        """Mark a run as errored with a human-readable message."""
        self.store.update(RUNS_COLLECTION, run_id, {"status": RunStatus.ERROR.value, "message": message})

    def log_submission(self, entry: SubmissionLogEntry) -> str:
        """Append a finalized submission entry. Returns the generated entry id."""
        if entry.status == SubmissionStatus.PENDING:
            raise ValueError("Submission entries are written with a terminal status only")
        return self.store.add(SUBMISSIONS_COLLECTION, entry.model_dump(mode="json", by_alias=True))

    def get_run(self, run_id: str) -> Optional[RunRecord]:
        data = self.store.get(RUNS_COLLECTION, run_id)
        return RunRecord.model_validate(data) if data is not None else None

    def submissions(self, run_id: str) -> list[SubmissionLogEntry]:
        entries = [
            SubmissionLogEntry.model_validate(doc)
            for doc in self.store.where(SUBMISSIONS_COLLECTION, "runId", run_id)
        ]
        return sorted(entries, key=lambda entry: entry.record_index)
