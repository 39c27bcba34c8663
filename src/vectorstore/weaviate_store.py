from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple

import weaviate
from weaviate.classes.config import Configure, DataType, Property
from weaviate.classes.init import Auth

from .base import ProductStore, VectorStoreError
from .schemas import ID_PROPERTY, VECTORIZED_PROPERTIES, Product


logger = logging.getLogger(__name__)


def split_host(host: str, *, secure: bool = False) -> Tuple[str, int]:
    """Split ``host[:port]`` (scheme prefix tolerated) into host and port."""
    value = host.strip()
    for prefix in ("http://", "https://"):
        if value.startswith(prefix):
            value = value[len(prefix):]
    value = value.rstrip("/")
    name, sep, port = value.rpartition(":")
    if sep and port.isdigit():
        return name, int(port)
    return value, 443 if secure else 80


class WeaviateProductStore(ProductStore):
    """Product collection in Weaviate, vectorized by ``text2vec-openai``.

    The client connects on first use, so a Weaviate instance that is down at
    startup does not prevent the API from coming up.
    """

    def __init__(
        self,
        host: str = "localhost:8080",
        *,
        collection: str = "Product",
        scheme: str = "http",
        grpc_port: int = 50051,
        api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        client: Optional[weaviate.WeaviateClient] = None,
    ) -> None:
        self.host = host
        self.collection = collection
        self.secure = scheme == "https"
        self.grpc_port = grpc_port
        self.api_key = api_key
        self.openai_api_key = openai_api_key
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self) -> weaviate.WeaviateClient:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = self._connect()
        return self._client

    def _connect(self) -> weaviate.WeaviateClient:
        http_host, http_port = split_host(self.host, secure=self.secure)
        headers: Dict[str, str] = {}
        if self.openai_api_key:
            # Forwarded to the text2vec-openai module for vectorization.
            headers["X-OpenAI-Api-Key"] = self.openai_api_key
        auth = Auth.api_key(self.api_key) if self.api_key else None

        logger.info(
            "Connecting to Weaviate at %s:%s (grpc port %s)",
            http_host,
            http_port,
            self.grpc_port,
        )
        try:
            return weaviate.connect_to_custom(
                http_host=http_host,
                http_port=http_port,
                http_secure=self.secure,
                grpc_host=http_host,
                grpc_port=self.grpc_port,
                grpc_secure=self.secure,
                headers=headers or None,
                auth_credentials=auth,
            )
        except Exception as e:
            raise VectorStoreError(f"Failed to connect to Weaviate: {e}") from e

    def ensure_collection(self) -> bool:
        try:
            if self.client.collections.exists(self.collection):
                logger.info("Collection '%s' already exists", self.collection)
                return False

            properties = [
                Property(name=name, data_type=DataType.TEXT)
                for name in VECTORIZED_PROPERTIES
            ]
            properties.append(
                Property(
                    name=ID_PROPERTY, data_type=DataType.TEXT, skip_vectorization=True
                )
            )
            self.client.collections.create(
                name=self.collection,
                properties=properties,
                vector_config=Configure.Vectors.text2vec_openai(),
            )
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(
                f"Failed to ensure collection '{self.collection}': {e}"
            ) from e
        logger.info("Collection '%s' created", self.collection)
        return True

    def count(self) -> int:
        try:
            result = self.client.collections.get(self.collection).aggregate.over_all(
                total_count=True
            )
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Failed to count products: {e}") from e
        return int(result.total_count or 0)

    def insert_many(self, products: Sequence[Product]) -> int:
        if not products:
            return 0
        try:
            result = self.client.collections.get(self.collection).data.insert_many(
                [p.to_properties() for p in products]
            )
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Batch insert failed: {e}") from e

        errors = result.errors or {}
        for index, err in list(errors.items())[:5]:
            logger.warning(
                "Insert of product #%s rejected: %s", index, getattr(err, "message", err)
            )
        return len(products) - len(errors)

    def near_text(self, text: str, limit: int) -> List[Dict[str, Any]]:
        try:
            # No return_properties: older collections lack product_id.
            response = self.client.collections.get(self.collection).query.near_text(
                query=text,
                limit=limit,
            )
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Near-text query failed: {e}") from e
        return [dict(obj.properties or {}) for obj in response.objects]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
