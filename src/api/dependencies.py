from __future__ import annotations

from fastapi import HTTPException, Request

from src.search import SearchService


def get_search_service(request: Request) -> SearchService:
    """SearchService published on app.state by the lifespan hook."""
    service = getattr(request.app.state, "search_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Search service is not ready")
    return service
