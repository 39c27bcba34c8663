from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from src.api.dependencies import get_search_service
from src.search import SearchService
from src.vectorstore import VectorStoreError

from .search import SearchResponse


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


def _parse_limit(raw: Optional[str]) -> Optional[int]:
    """Integer limit from the query string; anything unparsable is ignored."""
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logger.debug("Ignoring invalid limit %r", raw)
        return None


@router.get(
    "",
    summary="Products similar to a given product",
    response_model=SearchResponse,
)
def get_recommendations(
    product: Optional[str] = Query(None, description="Seed product name."),
    limit: Optional[str] = Query(
        None, description="Number of results to return (default 5)."
    ),
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    if not product:
        raise HTTPException(status_code=400, detail="product parameter is required")

    try:
        products = service.recommend(product, _parse_limit(limit))
    except VectorStoreError as exc:
        raise HTTPException(
            status_code=500, detail=f"Recommendation failed: {exc}"
        ) from exc

    return SearchResponse.from_products(products)
