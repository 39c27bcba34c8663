import logging
import threading
from typing import Any, Dict, List, Optional, Sequence

from pymilvus import DataType, Function, FunctionType, MilvusClient

from .base import ProductStore, VectorStoreError
from .schemas import ID_PROPERTY, Product


logger = logging.getLogger(__name__)

OUTPUT_FIELDS = ["id", "name", "description", "category"]


def get_milvus_client(
    uri: str = "http://localhost:19530", token: Optional[str] = "root:Milvus"
) -> MilvusClient:
    """Create a Milvus client. MilvusClient connects eagerly."""
    return MilvusClient(uri=uri, token=token or "")


def embedding_text(product: Product) -> str:
    """Text fed to the collection's embedding function."""
    return f"{product.name}. {product.description}. Category: {product.category}"


class CollectionManager:
    """Manages the Milvus product collection schema.

    Embeddings are computed server-side by a TEXTEMBEDDING function, so
    inserts and searches send raw text just like Weaviate's near-text.
    """

    def __init__(
        self,
        client: MilvusClient,
        name: str = "Product",
        *,
        dim: int = 1536,
        provider: str = "openai",
        model_name: str = "text-embedding-3-small",
    ) -> None:
        self.client = client
        self.name = name
        self.dim = dim
        self.provider = provider
        self.model_name = model_name

    def ensure_collection(self) -> bool:
        if self.client.has_collection(self.name):
            logger.info("Collection '%s' already exists", self.name)
            return False

        schema = MilvusClient.create_schema(auto_id=False)
        # Catalog identifiers are sequential integers
        schema.add_field(field_name="id", datatype=DataType.INT64, is_primary=True)
        schema.add_field(field_name="name", datatype=DataType.VARCHAR, max_length=512)
        schema.add_field(
            field_name="description", datatype=DataType.VARCHAR, max_length=4000
        )
        schema.add_field(field_name="category", datatype=DataType.VARCHAR, max_length=64)
        schema.add_field(field_name="text", datatype=DataType.VARCHAR, max_length=8000)
        schema.add_field(
            field_name="text_dense", datatype=DataType.FLOAT_VECTOR, dim=self.dim
        )

        schema.add_function(
            Function(
                name="text_embedding",
                function_type=FunctionType.TEXTEMBEDDING,
                input_field_names=["text"],
                output_field_names=["text_dense"],
                params={"provider": self.provider, "model_name": self.model_name},
            )
        )

        index_params = self.client.prepare_index_params()
        index_params.add_index(
            field_name="text_dense",
            index_name="text_dense_index",
            index_type="AUTOINDEX",
            metric_type="COSINE",
        )

        self.client.create_collection(
            collection_name=self.name, schema=schema, index_params=index_params
        )
        logger.info("Collection '%s' created", self.name)
        return True


class MilvusProductStore(ProductStore):
    """Product collection in Milvus; delegates lifecycle to a CollectionManager."""

    def __init__(
        self,
        uri: str = "http://localhost:19530",
        *,
        token: Optional[str] = "root:Milvus",
        collection: str = "Product",
        dim: int = 1536,
        embedding_model: str = "text-embedding-3-small",
        client: Optional[MilvusClient] = None,
    ) -> None:
        self.uri = uri
        self.token = token
        self.collection = collection
        self.dim = dim
        self.embedding_model = embedding_model
        self._client = client
        self._manager: Optional[CollectionManager] = None
        self._lock = threading.Lock()

    @property
    def client(self) -> MilvusClient:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    logger.info("Connecting to Milvus at %s", self.uri)
                    try:
                        self._client = get_milvus_client(self.uri, self.token)
                    except Exception as e:
                        raise VectorStoreError(f"Failed to connect to Milvus: {e}") from e
        return self._client

    @property
    def manager(self) -> CollectionManager:
        if self._manager is None:
            self._manager = CollectionManager(
                self.client,
                name=self.collection,
                dim=self.dim,
                model_name=self.embedding_model,
            )
        return self._manager

    def ensure_collection(self) -> bool:
        try:
            return self.manager.ensure_collection()
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(
                f"Failed to ensure collection '{self.collection}': {e}"
            ) from e

    def count(self) -> int:
        try:
            rows = self.client.query(
                collection_name=self.collection,
                filter="",
                output_fields=["count(*)"],
            )
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Failed to count products: {e}") from e
        if not rows:
            return 0
        return int(rows[0].get("count(*)", 0))

    def insert_many(self, products: Sequence[Product]) -> int:
        if not products:
            return 0
        rows = []
        for p in products:
            try:
                pid = int(p.id)
            except ValueError as e:
                raise VectorStoreError(f"Product id {p.id!r} is not an integer") from e
            rows.append(
                {
                    "id": pid,
                    "name": p.name,
                    "description": p.description,
                    "category": p.category,
                    "text": embedding_text(p),
                }
            )
        try:
            result = self.client.insert(collection_name=self.collection, data=rows)
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Batch insert failed: {e}") from e
        return int(result.get("insert_count", len(rows)))

    def near_text(self, text: str, limit: int) -> List[Dict[str, Any]]:
        try:
            results = self.client.search(
                collection_name=self.collection,
                data=[text],
                anns_field="text_dense",
                limit=limit,
                output_fields=OUTPUT_FIELDS,
            )
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Near-text query failed: {e}") from e
        if not results:
            return []
        return [self._hit_to_properties(hit) for hit in results[0]]

    @staticmethod
    def _hit_to_properties(hit) -> Dict[str, Any]:
        """Flatten a search hit into the same property dict Weaviate returns."""
        if hasattr(hit, "get"):
            entity = hit.get("entity")
            hit_id = hit.get("id")
        else:
            entity = getattr(hit, "entity", None)
            hit_id = getattr(hit, "id", None)
        entity = dict(entity or {})
        pid = entity.get("id", hit_id)
        props = {k: entity.get(k) for k in ("name", "description", "category")}
        props[ID_PROPERTY] = str(pid) if pid is not None else None
        return props

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
