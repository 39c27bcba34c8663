from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from src.vectorstore import VectorStoreError
from src.vectorstore.schemas import Product
from src.vectorstore.weaviate_store import WeaviateProductStore, split_host


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def store(client):
    return WeaviateProductStore(collection="Product", client=client)


def _collection(client):
    return client.collections.get.return_value


@pytest.mark.parametrize(
    "host, secure, expected",
    [
        ("localhost:8080", False, ("localhost", 8080)),
        ("weaviate.internal", False, ("weaviate.internal", 80)),
        ("weaviate.internal", True, ("weaviate.internal", 443)),
        ("http://10.0.0.5:9000/", False, ("10.0.0.5", 9000)),
    ],
)
def test_split_host(host, secure, expected):
    assert split_host(host, secure=secure) == expected


class TestEnsureCollection:
    def test_existing_collection_untouched(self, store, client):
        client.collections.exists.return_value = True
        assert store.ensure_collection() is False
        client.collections.create.assert_not_called()

    def test_creates_vectorized_schema(self, store, client):
        client.collections.exists.return_value = False
        assert store.ensure_collection() is True

        kwargs = client.collections.create.call_args.kwargs
        assert kwargs["name"] == "Product"
        props = {p.name: p for p in kwargs["properties"]}
        assert set(props) == {"name", "description", "category", "product_id"}
        assert props["product_id"].skip_vectorization is True
        assert kwargs["vector_config"] is not None

    def test_errors_are_wrapped(self, store, client):
        client.collections.exists.side_effect = RuntimeError("connection refused")
        with pytest.raises(VectorStoreError, match="connection refused"):
            store.ensure_collection()


class TestDataOperations:
    def test_count(self, store, client):
        _collection(client).aggregate.over_all.return_value = SimpleNamespace(total_count=42)
        assert store.count() == 42
        _collection(client).aggregate.over_all.assert_called_once_with(total_count=True)

    def test_count_none_is_zero(self, store, client):
        _collection(client).aggregate.over_all.return_value = SimpleNamespace(total_count=None)
        assert store.count() == 0

    def test_insert_many_single_batch(self, store, client):
        _collection(client).data.insert_many.return_value = SimpleNamespace(
            errors={1: SimpleNamespace(message="bad object")}
        )
        products = [
            Product(id="1", name="iPhone 15 Pro", description="Phone", category="smartphones"),
            Product(id="2", name="Broken", description="?", category="electronics"),
        ]
        assert store.insert_many(products) == 1

        _collection(client).data.insert_many.assert_called_once()
        [objects] = _collection(client).data.insert_many.call_args.args
        assert objects[0] == {
            "product_id": "1",
            "name": "iPhone 15 Pro",
            "description": "Phone",
            "category": "smartphones",
        }

    def test_insert_nothing(self, store, client):
        assert store.insert_many([]) == 0
        _collection(client).data.insert_many.assert_not_called()

    def test_insert_failure(self, store, client):
        _collection(client).data.insert_many.side_effect = RuntimeError("timeout")
        with pytest.raises(VectorStoreError, match="Batch insert failed"):
            store.insert_many([Product(id="1", name="a", description="b")])

    def test_near_text(self, store, client):
        _collection(client).query.near_text.return_value = SimpleNamespace(
            objects=[
                SimpleNamespace(properties={"product_id": "7", "name": "AirPods"}),
                SimpleNamespace(properties={"name": "Legacy"}),
            ]
        )
        hits = store.near_text("earbuds", 2)
        assert hits == [{"product_id": "7", "name": "AirPods"}, {"name": "Legacy"}]
        _collection(client).query.near_text.assert_called_once_with(query="earbuds", limit=2)
        client.collections.get.assert_called_with("Product")

    def test_near_text_failure(self, store, client):
        _collection(client).query.near_text.side_effect = RuntimeError("grpc unavailable")
        with pytest.raises(VectorStoreError, match="Near-text query failed"):
            store.near_text("q", 5)


class TestConnection:
    def test_connects_lazily_with_credentials(self):
        with patch("src.vectorstore.weaviate_store.weaviate.connect_to_custom") as connect:
            store = WeaviateProductStore(
                "weaviate.example.com:443",
                scheme="https",
                grpc_port=50052,
                api_key="wv-key",
                openai_api_key="sk-test",
            )
            connect.assert_not_called()
            assert store.client is connect.return_value
            assert store.client is connect.return_value

        connect.assert_called_once()
        kwargs = connect.call_args.kwargs
        assert kwargs["http_host"] == "weaviate.example.com"
        assert kwargs["http_port"] == 443
        assert kwargs["http_secure"] is True
        assert kwargs["grpc_port"] == 50052
        assert kwargs["grpc_secure"] is True
        assert kwargs["headers"] == {"X-OpenAI-Api-Key": "sk-test"}
        assert kwargs["auth_credentials"] is not None

    def test_connection_failure(self):
        with patch(
            "src.vectorstore.weaviate_store.weaviate.connect_to_custom",
            side_effect=RuntimeError("refused"),
        ):
            store = WeaviateProductStore("localhost:8080")
            with pytest.raises(VectorStoreError, match="Failed to connect"):
                store.count()

    def test_close(self, store, client):
        store.close()
        client.close.assert_called_once()
        store.close()
        client.close.assert_called_once()
