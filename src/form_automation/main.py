"""
Form Automation Service

HTTP surface for:
- Interactive automation runs from client-supplied records
- Batch runs from PDFs uploaded to the bucket
- Site mapping configuration
- Run and submission ledger lookups
- AI record generation
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import PurePath
from typing import Optional

from fastapi import BackgroundTasks, Depends, FastAPI, File, Header, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .browsers import BrowserManager
from .config import Settings, get_settings
from .errors import AutomationError, InvalidArgumentError, UnauthenticatedError
from .storage import DocumentStore, LocalBucket, create_document_store
from .services import (
    GenerateRecordRequest,
    RecordGenerator,
    RunLedger,
    RunService,
    SiteConfigProvider,
    SiteConfiguration,
    StorageObjectEvent,
    SubmissionOrchestrator,
)


logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    "unauthenticated": 401,
    "invalid-argument": 400,
    "failed-precondition": 412,
    "unavailable": 503,
    "internal": 500,
}


def http_error(error: AutomationError) -> HTTPException:
    """Map an automation error onto an HTTP error with a `{code, message}` detail."""
    return HTTPException(
        status_code=ERROR_STATUS_CODES.get(error.code, 500),
        detail={"code": error.code, "message": error.message},
    )


# ============================================================================
# Dependencies
# ============================================================================

@lru_cache(maxsize=1)
def get_store() -> DocumentStore:
    return create_document_store(get_settings().database_url)


@lru_cache(maxsize=1)
def get_bucket() -> LocalBucket:
    return LocalBucket(get_settings().bucket_dir)


def get_run_service(
    store: DocumentStore = Depends(get_store),
    bucket: LocalBucket = Depends(get_bucket),
    settings: Settings = Depends(get_settings),
) -> RunService:
    """Wire a run service; each run gets its own browser session."""
    ledger = RunLedger(store)
    orchestrator = SubmissionOrchestrator(
        ledger,
        SiteConfigProvider(store),
        browser_factory=lambda: BrowserManager(headless=settings.headless),
        post_submit_timeout_ms=settings.post_submit_timeout_ms,
    )
    return RunService(ledger, orchestrator, bucket, upload_prefix=settings.upload_prefix)


def get_record_generator(settings: Settings = Depends(get_settings)) -> RecordGenerator:
    return RecordGenerator(api_key=settings.openai_api_key, model=settings.openai_model)


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """Resolve a bearer token to a user id, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return settings.api_tokens.get(token.strip())


def require_user(user_id: Optional[str] = Depends(get_current_user)) -> str:
    if not user_id:
        raise http_error(UnauthenticatedError("The function must be called while authenticated."))
    return user_id


# ============================================================================
# Application
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Form Automation Service starting...")
    yield
    if get_store.cache_info().currsize:
        get_store().close()
    logger.info("Form Automation Service stopped.")


app = FastAPI(
    title="Form Automation Service",
    description="Automated form submission from profile records with a per-record audit trail",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "form-automation",
        "version": __version__,
    }


# ============================================================================
# Automation Runs
# ============================================================================

@app.post("/automation/run")
async def run_form_automation(
    request: Request,
    user_id: str = Depends(require_user),
    run_service: RunService = Depends(get_run_service),
):
    """
    Run the automation over client-supplied records.

    Body: `{"records": [...]}`. Returns `{success, message, runId}` once every
    record has been attempted.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    records = payload.get("records") if isinstance(payload, dict) else None

    try:
        result = await run_service.run_for_user(records, user_id)
    except AutomationError as e:
        raise http_error(e)

    return result.model_dump(by_alias=True)


@app.post("/uploads", status_code=202)
async def upload_pdf(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    user_id: str = Depends(require_user),
    bucket: LocalBucket = Depends(get_bucket),
    settings: Settings = Depends(get_settings),
    run_service: RunService = Depends(get_run_service),
):
    """
    Store an uploaded PDF under the upload prefix and process it in the
    background, the same way a bucket notification would.
    """
    filename = PurePath(file.filename or "").name
    if not filename.lower().endswith(".pdf"):
        raise http_error(InvalidArgumentError("Only PDF files are supported"))

    file_id = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}_{filename}"
    object_name = f"{settings.upload_prefix}{file_id}"
    bucket.upload(object_name, await file.read())
    logger.info("User %s uploaded %s", user_id, object_name)

    event = StorageObjectEvent(bucket=bucket.name, name=object_name, content_type="application/pdf")
    background_tasks.add_task(run_service.handle_uploaded_object, event)

    return {"runId": file_id, "object": object_name, "status": "accepted"}


@app.post("/events/storage")
async def storage_object_finalized(
    event: StorageObjectEvent,
    _user_id: str = Depends(require_user),
    run_service: RunService = Depends(get_run_service),
):
    """Bucket notification hook: runs the automation for a new PDF upload."""
    run = await run_service.handle_uploaded_object(event)
    if run is None:
        return {"skipped": True, "object": event.name}
    return run.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================================
# Run Ledger
# ============================================================================

@app.get("/runs/{run_id}")
def get_run(
    run_id: str,
    _user_id: str = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    run = RunLedger(store).get_run(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail={"code": "not-found", "message": "Run not found"})
    return run.model_dump(mode="json", by_alias=True, exclude_none=True)


@app.get("/runs/{run_id}/submissions")
def get_run_submissions(
    run_id: str,
    _user_id: str = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    entries = RunLedger(store).submissions(run_id)
    return {
        "runId": run_id,
        "submissions": [entry.model_dump(mode="json", by_alias=True) for entry in entries],
    }


# ============================================================================
# Site Configuration
# ============================================================================

@app.get("/config/site-mapping")
def get_site_mapping(
    _user_id: str = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        config = SiteConfigProvider(store).load()
    except AutomationError as e:
        raise http_error(e)
    return config.model_dump(by_alias=True)


@app.put("/config/site-mapping")
def put_site_mapping(
    config: SiteConfiguration,
    _user_id: str = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    SiteConfigProvider(store).save(config)
    return config.model_dump(by_alias=True)


# ============================================================================
# AI Record Generation
# ============================================================================

@app.post("/records/generate")
def generate_record(
    request: GenerateRecordRequest,
    _user_id: str = Depends(require_user),
    generator: RecordGenerator = Depends(get_record_generator),
):
    """Generate one form record from a free-text description."""
    try:
        record = generator.generate(request)
    except AutomationError as e:
        raise http_error(e)
    return record.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
