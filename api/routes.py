import logging

from fastapi import APIRouter, Depends, HTTPException

from analyzer.interactions import (
    REPLACEMENT_BACKLOG,
    REPLACEMENT_MODEL,
    InteractionService,
)
from analyzer.pipeline import get_payload, resolve_screenshot_paths, run_analysis
from analyzer.scanner import scan_url
from api.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
    ScanRequest,
    ScanResponse,
    TaskSubmittedResponse,
)
from config import settings, uses_model_replacements
from core.store import RecommendationStore, get_store
from utils.clients.anthropic import ModelGateway, get_model_gateway
from utils.clients.screenshots import ScreenshotCapturer, get_screenshot_capturer
from utils.storage import LocalObjectStorage, get_storage

logger = logging.getLogger(__name__)

# Create router
router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@router.get("/")
async def root():
    return {
        "service": "Site Design Advisor",
        "status": "running",
        "endpoints": {
            "scan": "/scan (POST)",
            "analyze": "/analyze (POST)",
            "analyze_async": "/analyze/async (POST)",
        },
    }


@router.get("/health")
async def health_check():
    return {"status": "healthy"}


@router.post("/scan", response_model=ScanResponse, responses=ERROR_RESPONSES)
def scan_website(
    request: ScanRequest,
    store: RecommendationStore = Depends(get_store),
    storage: LocalObjectStorage = Depends(get_storage),
    capturer: ScreenshotCapturer = Depends(get_screenshot_capturer),
):
    """
    Captures a full-page screenshot of the URL and stores it.

    Returns the scan id and the storage path to pass to /analyze as
    screenshotPath.
    """
    if not request.url or not request.url.strip():
        raise HTTPException(status_code=400, detail="Missing url")
    return scan_url(store, capturer, storage, request.url.strip())


@router.post("/analyze", response_model=AnalyzeResponse, responses=ERROR_RESPONSES)
def analyze_website(
    request: AnalyzeRequest,
    store: RecommendationStore = Depends(get_store),
    gateway: ModelGateway = Depends(get_model_gateway),
):
    """
    Runs a design analysis, or applies an upvote/downvote.

    Initial analysis: {url?, screenshotPath? | screenshotPaths?, context?}
    Interaction: {action: "upvote" | "downvote", rec_id, analysis_id}

    Both return the ranked payload: the top 3 as "recommendations" and the
    full ranked set as "recommendations_all".
    """
    if request.is_interaction:
        service = InteractionService(
            store,
            gateway=gateway,
            replacement_strategy=(
                REPLACEMENT_MODEL if uses_model_replacements() else REPLACEMENT_BACKLOG
            ),
            prompt_prefix=settings.PROMPT_PREFIX,
        )
        return service.handle(request.analysis_id, request.action, request.rec_id)

    paths = resolve_screenshot_paths(request.screenshotPath, request.screenshotPaths)
    return run_analysis(
        store,
        gateway,
        url=request.url,
        screenshot_paths=paths,
        context=request.context or {},
        prompt_prefix=settings.PROMPT_PREFIX,
    )


@router.get(
    "/analyses/{analysis_id}", response_model=AnalyzeResponse, responses=ERROR_RESPONSES
)
def get_analysis(analysis_id: str, store: RecommendationStore = Depends(get_store)):
    """Current ranked payload of an analysis."""
    return get_payload(store, analysis_id)


@router.post("/analyze/async", response_model=TaskSubmittedResponse)
def analyze_website_async(request: AnalyzeRequest):
    """
    Submit an initial analysis for background processing.
    Returns immediately with a task_id for status polling.
    """
    if request.is_interaction:
        raise HTTPException(
            status_code=400, detail="Interactions are only accepted on /analyze"
        )

    from tasks.analysis import analyze_design

    try:
        task = analyze_design.delay(
            request.url,
            resolve_screenshot_paths(request.screenshotPath, request.screenshotPaths),
            request.context or {},
        )
    except Exception as e:
        logger.error(f"❌ Failed to submit analysis task: {e}")
        raise HTTPException(
            status_code=500, detail=f"Failed to submit analysis task: {str(e)}"
        )

    return {
        "task_id": task.id,
        "status": "PENDING",
        "message": "Analysis task submitted successfully",
        "poll_url": f"/analyze/status/{task.id}",
    }


@router.get("/analyze/status/{task_id}")
def get_task_status(task_id: str):
    """
    Check the status of a background analysis task.

    Returns:
        - PENDING: Task is waiting in queue
        - STARTED / PROGRESS: Task is being processed
        - SUCCESS: Task completed (includes the ranked payload as "result")
        - FAILURE: Task failed (includes "error")
    """
    from celery.result import AsyncResult
    from core.celery import celery_app

    try:
        task = AsyncResult(task_id, app=celery_app)
        response = {"task_id": task_id, "status": task.state}

        if task.state == "PENDING":
            response["message"] = "Task is waiting in queue"
        elif task.state in ("STARTED", "PROGRESS"):
            response["message"] = "Task is being processed"
            if isinstance(task.info, dict):
                response["progress"] = task.info
        elif task.state == "SUCCESS":
            response["message"] = "Task completed successfully"
            response["result"] = task.result
        elif task.state == "FAILURE":
            response["message"] = "Task failed"
            response["error"] = str(task.info)
        else:
            response["message"] = f"Unknown state: {task.state}"

        return response

    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Failed to get task status: {str(e)}"
        )


@router.get("/status/detailed")
def detailed_status_check(store: RecommendationStore = Depends(get_store)):
    """
    Enhanced status check with Redis, Celery and model configuration.
    """
    status_info = {
        "api": "healthy",
        "redis": "unknown",
        "celery": "unknown",
        "anthropic_api": "configured" if settings.ANTHROPIC_API_KEY else "missing",
        "screenshot_provider": settings.SCREENSHOT_PROVIDER,
        "replacement_strategy": settings.REPLACEMENT_STRATEGY,
    }

    if store.ping():
        status_info["redis"] = "connected"
        status_info["redis_stats"] = store.get_stats()
    else:
        status_info["redis"] = "disconnected"

    try:
        from core.celery import celery_app

        active_workers = celery_app.control.inspect(timeout=1.0).active()
        if active_workers:
            status_info["celery"] = "workers_active"
            status_info["celery_workers"] = list(active_workers.keys())
        else:
            status_info["celery"] = "no_workers"
    except Exception as e:
        status_info["celery"] = f"error: {str(e)}"

    critical_components = [status_info["redis"], status_info["anthropic_api"]]
    if any(c in ("missing", "disconnected") for c in critical_components):
        status_info["overall_status"] = "degraded"
    else:
        status_info["overall_status"] = "healthy"

    return status_info
