"""
Health Check API Routes
Health, readiness and liveness endpoints
"""
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from govcon_search import __version__
from govcon_search.core.config import settings
from govcon_search.core.logging import get_logger
from govcon_search.core.startup import check_memory_usage

logger = get_logger(__name__)

# Track startup time for monitoring
_startup_time = datetime.now(timezone.utc)

router = APIRouter(tags=["health"])


@router.get("/health")
@router.get("/health/", include_in_schema=False)
def health_check(request: Request):
    """
    System health check endpoint

    Checks the contract store, embedding provider, configuration and
    system resources. Returns 503 only when the service is unhealthy;
    degraded components still return 200.

    Example Response:
        ```json
        {
          "status": "healthy",
          "version": "1.0.0",
          "components": {
            "store": "connected",
            "embeddings": "hashing",
            "config": "valid"
          }
        }
        ```
    """
    start_time = time.time()

    health_status = {
        "status": "healthy",
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime_seconds": (datetime.now(timezone.utc) - _startup_time).total_seconds(),
        "components": {}
    }

    services = getattr(request.app.state, "services", None)

    # Check contract store
    if services is None:
        health_status["components"]["store"] = "not_initialized"
        health_status["status"] = "unhealthy"
    else:
        try:
            if services.store.health_check():
                health_status["components"]["store"] = "connected"
            else:
                health_status["components"]["store"] = "disconnected"
                health_status["status"] = "unhealthy"
            health_status["components"]["store_backend"] = services.store.name
        except Exception as e:
            health_status["components"]["store"] = "error"
            health_status["components"]["store_error"] = str(e)
            health_status["status"] = "unhealthy"
            logger.error(f"Store health check failed: {e}")

    # Check configuration
    try:
        settings.validate_store_backend()
        settings.validate_embedding_provider()
        settings.validate_phrase_range()
        settings.validate_table_name()
        health_status["components"]["config"] = "valid"
    except Exception as e:
        health_status["components"]["config"] = "invalid"
        health_status["components"]["config_error"] = str(e)
        health_status["status"] = "unhealthy"
        logger.error(f"Configuration validation failed: {e}")

    # Check embedding provider
    if settings.EMBEDDING_PROVIDER == "openai":
        if settings.OPENAI_API_KEY:
            health_status["components"]["embeddings"] = "openai_configured"
        else:
            health_status["components"]["embeddings"] = "openai_not_configured"
            health_status["status"] = "degraded" if health_status["status"] == "healthy" else health_status["status"]
    else:
        health_status["components"]["embeddings"] = settings.EMBEDDING_PROVIDER

    # Check system resources
    try:
        memory_stats = check_memory_usage()
        if memory_stats:
            health_status["system"] = memory_stats
            if memory_stats.get("memory_percent", 0) > 85:
                health_status.setdefault("warnings", []).append("High memory usage")
            if memory_stats.get("disk_percent", 0) > 90:
                health_status.setdefault("warnings", []).append("Low disk space")
    except Exception as e:
        logger.warning(f"Could not check system resources: {e}")

    response_time_ms = (time.time() - start_time) * 1000
    health_status["response_time_ms"] = round(response_time_ms, 2)

    if response_time_ms > 1000:  # > 1 second
        health_status.setdefault("warnings", []).append("Slow health check response")

    status_code = 503 if health_status["status"] == "unhealthy" else 200
    return JSONResponse(content=health_status, status_code=status_code)


@router.get("/liveness")
@router.get("/liveness/", include_in_schema=False)
def liveness_check():
    """Returns 200 while the process is alive"""
    return JSONResponse(
        content={
            "alive": True,
            "timestamp": datetime.now(timezone.utc).isoformat()
        },
        status_code=200
    )
