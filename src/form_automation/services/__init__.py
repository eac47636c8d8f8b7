"""
Services Package

Core business logic: site configuration, the submission orchestrator, the run
ledger, run entry points and AI record generation.
"""

from .site_config import (
    SiteConfiguration,
    SiteConfigProvider,
    DEFAULT_DELAY_MS,
)
from .ledger import (
    RunLedger,
    RunRecord,
    RunStats,
    RunStatus,
    SubmissionLogEntry,
    SubmissionStatus,
    RUNS_COLLECTION,
    SUBMISSIONS_COLLECTION,
)
from .orchestrator import SubmissionOrchestrator, CAPTCHA_MESSAGE
from .runs import RunService, StorageObjectEvent, AutomationResponse
from .record_generator import RecordGenerator, GenerateRecordRequest

__all__ = [
    "SiteConfiguration",
    "SiteConfigProvider",
    "DEFAULT_DELAY_MS",
    "RunLedger",
    "RunRecord",
    "RunStats",
    "RunStatus",
    "SubmissionLogEntry",
    "SubmissionStatus",
    "RUNS_COLLECTION",
    "SUBMISSIONS_COLLECTION",
    "SubmissionOrchestrator",
    "CAPTCHA_MESSAGE",
    "RunService",
    "StorageObjectEvent",
    "AutomationResponse",
    "RecordGenerator",
    "GenerateRecordRequest",
]
