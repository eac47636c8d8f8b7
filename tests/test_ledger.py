"""
Tests for RunLedger and the document stores behind it.
"""

import pytest

from form_automation.services import (
    RunLedger,
    RunStats,
    RunStatus,
    RUNS_COLLECTION,
    SubmissionLogEntry,
    SubmissionStatus,
)
from form_automation.storage import DocumentNotFoundError, InMemoryDocumentStore
from form_automation.storage.sqlalchemy_store import SQLAlchemyDocumentStore


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryDocumentStore()
    else:
        store = SQLAlchemyDocumentStore(f"sqlite:///{tmp_path / 'ledger.db'}")
        yield store
        store.close()


# ============ Run Records ============

class TestRunRecords:
    """Tests for the run document lifecycle."""

    def test_start_run(self, any_store):
        """Should create a processing run with zero counters."""
        RunLedger(any_store).start_run("file.pdf")

        doc = any_store.get(RUNS_COLLECTION, "file.pdf")
        assert doc["status"] == "processing"
        assert doc["submittedCount"] == 0
        assert doc["failedCount"] == 0
        assert doc["captchaBlockedCount"] == 0
        assert "createdAt" in doc
        assert "source" not in doc

    def test_start_run_with_attribution(self, any_store):
        """Should tag UI runs with source and user."""
        run = RunLedger(any_store).start_run("ui-1", source="ui", user="uid-7")

        assert run.user == "uid-7"
        assert any_store.get(RUNS_COLLECTION, "ui-1")["source"] == "ui"

    def test_complete_run(self, any_store):
        """Should set done with the final counters."""
        ledger = RunLedger(any_store)
        ledger.start_run("r")
        ledger.complete_run("r", RunStats(submitted_count=3, failed_count=1, captcha_blocked_count=2))

        run = ledger.get_run("r")
        assert run.status == RunStatus.DONE
        assert (run.submitted_count, run.failed_count, run.captcha_blocked_count) == (3, 1, 2)

    def test_fail_run(self, any_store):
        """Should set error with a message."""
        ledger = RunLedger(any_store)
        ledger.start_run("r")
        ledger.fail_run("r", "No records found in PDF text.")

        run = ledger.get_run("r")
        assert run.status == RunStatus.ERROR
        assert run.message == "No records found in PDF text."

    def test_update_unknown_run(self, any_store):
        """Should refuse to finalize a run that was never started."""
        with pytest.raises(DocumentNotFoundError):
            RunLedger(any_store).fail_run("missing", "x")

    def test_get_unknown_run(self, any_store):
        assert RunLedger(any_store).get_run("missing") is None


# ============ Submission Entries ============

class TestSubmissionEntries:
    """Tests for per-record log entries."""

    def test_log_and_read_back(self, any_store):
        """Should store entries keyed back to their run, ordered by index."""
        ledger = RunLedger(any_store)
        ledger.log_submission(SubmissionLogEntry(run_id="r", record_index=2, subject_name="Bob",
                                                 status=SubmissionStatus.ERROR, message="boom"))
        ledger.log_submission(SubmissionLogEntry(run_id="r", record_index=1, subject_name="Ann",
                                                 status=SubmissionStatus.SUCCESS, message="ok"))
        ledger.log_submission(SubmissionLogEntry(run_id="other", record_index=1, subject_name="Cy",
                                                 status=SubmissionStatus.SUCCESS))

        entries = ledger.submissions("r")
        assert [(e.record_index, e.status) for e in entries] == [
            (1, SubmissionStatus.SUCCESS),
            (2, SubmissionStatus.ERROR),
        ]

    def test_stored_shape(self, any_store):
        """Should store camelCase fields with the status value."""
        entry_id = RunLedger(any_store).log_submission(
            SubmissionLogEntry(run_id="r", record_index=1, subject_name="Ann",
                               status=SubmissionStatus.CAPTCHA_BLOCKED, message="skipped")
        )

        doc = any_store.get("submissionLogs", entry_id)
        assert doc["runId"] == "r"
        assert doc["recordIndex"] == 1
        assert doc["subjectName"] == "Ann"
        assert doc["status"] == "captcha-blocked"

    def test_pending_entries_rejected(self, any_store):
        """Should only write entries with a terminal status."""
        with pytest.raises(ValueError):
            RunLedger(any_store).log_submission(SubmissionLogEntry(run_id="r", record_index=1, subject_name="Ann"))


class TestRunStats:
    """Tests for the counter accumulator."""

    def test_record_each_status(self):
        stats = RunStats()
        for status in (SubmissionStatus.SUCCESS, SubmissionStatus.ERROR,
                       SubmissionStatus.CAPTCHA_BLOCKED, SubmissionStatus.SUCCESS):
            stats.record(status)

        assert (stats.submitted_count, stats.failed_count, stats.captcha_blocked_count) == (2, 1, 1)
        assert stats.total == 4

    def test_pending_not_counted(self):
        with pytest.raises(ValueError):
            RunStats().record(SubmissionStatus.PENDING)
