from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.catalog import CatalogLoader, Categorizer, build_categorizer
from src.config import Settings, load_settings
from src.search import SearchService, SearchServiceConfig
from src.vectorstore import ProductStore, VectorStoreError, create_product_store

from .routers.recommendations import router as recommendations_router
from .routers.search import router as search_router


logger = logging.getLogger(__name__)

SERVICE_NAME = "vector-search-api"


def _startup(app: FastAPI) -> None:
    """Prepare the store and catalog; failures degrade, never abort startup."""
    settings: Settings = app.state.settings
    store: ProductStore = app.state.store

    try:
        store.ensure_collection()
    except VectorStoreError as e:
        logger.error("Error ensuring product collection: %s", e)

    categorizer: Optional[Categorizer] = app.state.categorizer
    owned = categorizer is None
    if owned:
        categorizer = build_categorizer(settings)
    try:
        app.state.load_report = CatalogLoader(store, categorizer).load_if_empty(
            settings.products_file
        )
    finally:
        # Injected categorizers belong to the caller
        if owned:
            categorizer.close()

    app.state.search_service = SearchService(
        store, SearchServiceConfig(max_results=settings.max_results)
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.store is None:
        app.state.store = create_product_store(app.state.settings)
    try:
        _startup(app)
        yield
    finally:
        app.state.store.close()


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400, content={"detail": jsonable_encoder(exc.errors())}
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[ProductStore] = None,
    categorizer: Optional[Categorizer] = None,
) -> FastAPI:
    """Build the FastAPI application.

    ``store`` and ``categorizer`` default to the ones described by
    ``settings``; tests pass doubles instead.
    """
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s"
    )

    app = FastAPI(title="Product Vector Search API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.categorizer = categorizer
    app.state.search_service = None
    app.state.load_report = None

    # CORS: allow the storefront frontend to call this API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(search_router)
    app.include_router(recommendations_router)

    @app.get("/health", tags=["ops"], summary="Health check")
    async def health():
        return {"status": "healthy", "service": SERVICE_NAME}

    return app


def main() -> None:
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":  # pragma: no cover
    main()
