"""
Indexing API Routes
Endpoints for rebuilding suggestion indexes and signalling data updates

Security: endpoints require the X-API-Key header when INDEXING_API_KEY is set
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field

from govcon_search.core.config import settings
from govcon_search.core.logging import get_logger
from govcon_search.core.startup import AppServices
from govcon_search.api.dependencies import get_services, verify_api_key

logger = get_logger(__name__)

router = APIRouter(prefix="/indexing", tags=["indexing"], dependencies=[Depends(verify_api_key)])


class DataUpdatedRequest(BaseModel):
    """Request model for the data-updated hook"""
    source: str = Field(default="manual", description="What changed the data (csv-import, sync, ...)")


class IndexingResponse(BaseModel):
    """Response model for indexing operations"""
    job_id: str
    status: str
    message: str
    started_at: str


class JobStatusResponse(BaseModel):
    """Response model for job status"""
    job_id: str
    status: str
    started_at: str
    completed_at: Optional[str] = None
    progress: Optional[Dict[str, Any]] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def prune_finished_jobs(jobs: Dict[str, Dict[str, Any]], limit: int) -> None:
    """Drop the oldest completed or failed jobs until at most limit remain"""
    finished = [job_id for job_id, job in jobs.items() if job["status"] in ("completed", "failed")]
    for job_id in finished[:max(0, len(jobs) - limit)]:
        del jobs[job_id]


def run_semantic_rebuild(services: AppServices, job_id: str) -> None:
    """
    Background task to rebuild the semantic suggestion index

    Args:
        services: Application services
        job_id: Job ID for tracking
    """
    job = services.indexing_jobs[job_id]

    def on_progress(processed: int, total: int) -> None:
        job["progress"] = {"processed": processed, "total": total}

    try:
        logger.info(f"Starting semantic index rebuild job: {job_id}")
        job["status"] = "running"

        count = services.semantic_engine.rebuild(progress_callback=on_progress)

        job["status"] = "completed"
        job["completed_at"] = _now()
        job["result"] = {"indexed_items": count}
        logger.info(f"Completed semantic index rebuild job: {job_id}", extra={"indexed_items": count})

    except Exception as e:
        logger.error(f"Semantic index rebuild job {job_id} failed: {e}", exc_info=True)
        job["status"] = "failed"
        job["completed_at"] = _now()
        job["error"] = str(e)


@router.post("/rebuild", response_model=IndexingResponse)
def trigger_rebuild(background_tasks: BackgroundTasks, services: AppServices = Depends(get_services)):
    """Rebuild the semantic suggestion index in the background"""
    job_id = f"rebuild_{uuid.uuid4().hex[:12]}"
    started_at = _now()
    prune_finished_jobs(services.indexing_jobs, max(0, settings.MAX_TRACKED_JOBS - 1))
    services.indexing_jobs[job_id] = {
        "job_id": job_id,
        "status": "queued",
        "started_at": started_at,
        "completed_at": None,
        "progress": None,
        "result": None,
        "error": None,
    }

    background_tasks.add_task(run_semantic_rebuild, services, job_id)
    logger.info(f"Queued semantic index rebuild job: {job_id}")

    return IndexingResponse(
        job_id=job_id,
        status="queued",
        message="Semantic index rebuild started",
        started_at=started_at,
    )


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
def get_job_status(job_id: str, services: AppServices = Depends(get_services)):
    """Status of an indexing job"""
    job = services.indexing_jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return JobStatusResponse(**job)


@router.post("/data-updated")
def data_updated(
    request: Optional[DataUpdatedRequest] = None,
    services: AppServices = Depends(get_services),
):
    """
    Signal that contract data changed

    Refreshes the store snapshot and invalidates both suggestion caches;
    they rebuild lazily on the next request.
    """
    source = request.source if request else "manual"
    result = services.data_updated(source)
    status = "ok" if not result["failed"] else "partial"
    return {"status": status, "source": source, **result}


@router.get("/stats")
def indexing_stats(services: AppServices = Depends(get_services)):
    """Semantic index and lexical cache statistics"""
    try:
        return {
            "semantic": services.semantic_engine.get_index_stats(),
            "lexical": services.lexical_engine.cache_stats(),
            "contracts": services.store.count_contracts(),
            "jobs": len(services.indexing_jobs),
        }
    except Exception as e:
        logger.error(f"Failed to collect indexing stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Stats failed: {str(e)}")
