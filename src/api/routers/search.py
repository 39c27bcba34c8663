from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from src.api.dependencies import get_search_service
from src.search import SearchService
from src.vectorstore import Product, VectorStoreError


router = APIRouter(prefix="/search", tags=["search"])


class SearchRequest(BaseModel):
    query: str = Field("", description="Natural-language search query.")
    limit: Optional[int] = Field(
        default=None,
        description="Number of results to return. Missing or non-positive means 10.",
    )

    @field_validator("query", mode="before")
    @classmethod
    def null_query_is_empty(cls, value):
        return "" if value is None else value


class ProductResult(BaseModel):
    id: str = Field(..., description="Catalog identifier of the product.")
    name: str = Field("", description="Product name.")
    description: str = Field("", description="Product description.")
    category: str = Field("", description="Taxonomy label assigned at load time.")

    @classmethod
    def from_product(cls, product: Product) -> "ProductResult":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            category=product.category,
        )


class SearchResponse(BaseModel):
    products: List[ProductResult] = Field(default_factory=list)
    count: int = Field(0, description="Number of products returned.")

    @classmethod
    def from_products(cls, products: List[Product]) -> "SearchResponse":
        items = [ProductResult.from_product(p) for p in products]
        return cls(products=items, count=len(items))


@router.post(
    "",
    summary="Semantic product search",
    response_model=SearchResponse,
)
def search_products(
    request: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """Near-text search over the product catalog."""

    try:
        products = service.search(request.query, request.limit)
    except VectorStoreError as exc:
        raise HTTPException(status_code=500, detail=f"Search failed: {exc}") from exc

    return SearchResponse.from_products(products)
