"""
API Dependencies
Shared FastAPI dependencies for the route modules
"""
from typing import Optional

from fastapi import Header, HTTPException, Request

from govcon_search.core.config import settings
from govcon_search.core.logging import get_logger
from govcon_search.core.startup import AppServices

logger = get_logger(__name__)


def get_services(request: Request) -> AppServices:
    """Services built by the lifespan manager (or injected by create_app)"""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return services


def verify_api_key(x_api_key: Optional[str] = Header(None, description="API Key for authentication")) -> bool:
    """
    Verify API key for indexing endpoints

    Raises:
        HTTPException: If API key is missing or invalid
    """
    expected_key = settings.INDEXING_API_KEY

    # If no API key is configured, allow access (for development)
    if not expected_key:
        logger.warning("No INDEXING_API_KEY configured - indexing endpoints are unprotected!")
        return True

    if x_api_key != expected_key:
        logger.warning("Invalid API key attempt")
        raise HTTPException(status_code=401, detail="Invalid API key")

    return True
