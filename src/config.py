"""Runtime configuration.

Values come from the process environment; an optional ``.env`` file in the
working directory is loaded first so local runs don't need exported vars.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from dotenv import load_dotenv


class CategorizerStrategy(str, Enum):
    heuristic = "heuristic"
    language_model = "language-model-with-fallback"


class VectorStoreBackend(str, Enum):
    weaviate = "weaviate"
    milvus = "milvus"


@dataclass(frozen=True)
class Settings:
    weaviate_host: str = "localhost:8080"
    weaviate_scheme: str = "http"
    weaviate_grpc_port: int = 50051
    weaviate_api_key: Optional[str] = None

    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"
    openai_timeout: float = 30.0

    categorizer_strategy: CategorizerStrategy = CategorizerStrategy.heuristic
    vector_store: VectorStoreBackend = VectorStoreBackend.weaviate
    collection_name: str = "Product"

    milvus_uri: str = "http://localhost:19530"
    milvus_token: str = "root:Milvus"
    embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = 1536

    products_file: str = "documents.txt"
    max_results: int = 100
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000"]
    )
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return the env value, treating empty strings as unset."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(key: str, default: int) -> int:
    raw = _env(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from e


def _env_float(key: str, default: float) -> float:
    raw = _env(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be a number, got {raw!r}") from e


def _env_enum(key: str, enum_cls, default):
    raw = _env(key)
    if raw is None:
        return default
    try:
        return enum_cls(raw.lower())
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"{key} must be one of: {allowed}; got {raw!r}") from e


def load_settings(*, dotenv: bool = True) -> Settings:
    """Build Settings from the environment.

    Raises:
        ValueError: If a variable holds a value of the wrong type or an
            unknown enum member.
    """
    if dotenv:
        load_dotenv(override=False)

    defaults = Settings()

    scheme = (_env("WEAVIATE_SCHEME", defaults.weaviate_scheme) or "").lower()
    if scheme not in ("http", "https"):
        raise ValueError(f"WEAVIATE_SCHEME must be 'http' or 'https', got {scheme!r}")

    max_results = _env_int("MAX_RESULTS", defaults.max_results)
    if max_results < 1:
        raise ValueError(f"MAX_RESULTS must be positive, got {max_results}")

    origins_raw = _env("CORS_ORIGINS")
    cors_origins = (
        [o.strip() for o in origins_raw.split(",") if o.strip()]
        if origins_raw
        else list(defaults.cors_origins)
    )

    return Settings(
        weaviate_host=_env("WEAVIATE_HOST", defaults.weaviate_host),
        weaviate_scheme=scheme,
        weaviate_grpc_port=_env_int("WEAVIATE_GRPC_PORT", defaults.weaviate_grpc_port),
        weaviate_api_key=_env("WEAVIATE_API_KEY"),
        openai_api_key=_env("OPENAI_API_KEY"),
        openai_base_url=_env("OPENAI_BASE_URL", defaults.openai_base_url).rstrip("/"),
        openai_model=_env("OPENAI_MODEL", defaults.openai_model),
        openai_timeout=_env_float("OPENAI_TIMEOUT", defaults.openai_timeout),
        categorizer_strategy=_env_enum(
            "CATEGORIZER_STRATEGY", CategorizerStrategy, defaults.categorizer_strategy
        ),
        vector_store=_env_enum("VECTOR_STORE", VectorStoreBackend, defaults.vector_store),
        collection_name=_env("PRODUCT_COLLECTION", defaults.collection_name),
        milvus_uri=_env("MILVUS_URI", defaults.milvus_uri),
        milvus_token=_env("MILVUS_TOKEN", defaults.milvus_token),
        embedding_model=_env("EMBEDDING_MODEL", defaults.embedding_model),
        embedding_dim=_env_int("EMBEDDING_DIM", defaults.embedding_dim),
        products_file=_env("PRODUCTS_FILE", defaults.products_file),
        max_results=max_results,
        cors_origins=cors_origins,
        host=_env("HOST", defaults.host),
        port=_env_int("PORT", defaults.port),
        log_level=(_env("LOG_LEVEL", defaults.log_level) or "INFO").upper(),
    )
