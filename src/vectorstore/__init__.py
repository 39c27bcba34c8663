"""Vector store adapters for the product collection.

The service only talks to the store through ``ProductStore``; the concrete
backend (Weaviate by default, Milvus optionally) is picked from settings once
at startup and handed to the loader and the search service.
"""

from __future__ import annotations

from src.config import Settings, VectorStoreBackend

from .base import ProductStore, VectorStoreError
from .schemas import CATEGORIES, DEFAULT_CATEGORY, Product


def create_product_store(settings: Settings) -> ProductStore:
    if settings.vector_store == VectorStoreBackend.milvus:
        from .milvus_store import MilvusProductStore

        return MilvusProductStore(
            settings.milvus_uri,
            token=settings.milvus_token,
            collection=settings.collection_name,
            dim=settings.embedding_dim,
            embedding_model=settings.embedding_model,
        )

    from .weaviate_store import WeaviateProductStore

    return WeaviateProductStore(
        settings.weaviate_host,
        collection=settings.collection_name,
        scheme=settings.weaviate_scheme,
        grpc_port=settings.weaviate_grpc_port,
        api_key=settings.weaviate_api_key,
        openai_api_key=settings.openai_api_key,
    )


__all__ = [
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "Product",
    "ProductStore",
    "VectorStoreError",
    "create_product_store",
]
