"""
FastAPI Application
Main application entry point
"""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from govcon_search import __version__
from govcon_search.core.config import settings
from govcon_search.core.logging import get_logger
from govcon_search.core.startup import AppServices, lifespan_manager
from govcon_search.api.routes import health, indexing, search, suggestions

logger = get_logger(__name__)


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        services: Pre-built services; when omitted the lifespan manager builds them

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Contract Opportunity Search API",
        description="Search, ranking and related-term suggestions for government contract opportunities",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan_manager,
    )
    app.state.services = services

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, specify allowed origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(search.router)
    app.include_router(suggestions.router)
    app.include_router(indexing.router)
    app.include_router(health.router)

    @app.get("/")
    def root():
        """API information"""
        return JSONResponse(content={
            "name": "Contract Opportunity Search API",
            "version": __version__,
            "description": "Search, ranking and related-term suggestions for government contract opportunities",
            "endpoints": {
                "search": "/search",
                "suggestions": "/suggestions",
                "semantic_suggestions": "/suggestions/semantic",
                "indexing": "/indexing",
                "health": "/health",
                "docs": "/docs",
                "redoc": "/redoc"
            },
            "features": [
                "Automatic strategy selection (exact, phrase, semantic, OR)",
                "Field-weighted relevance ranking",
                "Status, agency and award amount filters",
                "Lexical and embedding-based related-term suggestions",
                "Memory, Postgres and Supabase contract stores"
            ]
        })

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "govcon_search.api.app:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
