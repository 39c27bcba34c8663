import pytest

from src.config import CategorizerStrategy, VectorStoreBackend, load_settings
from src.vectorstore import create_product_store
from src.vectorstore.milvus_store import MilvusProductStore
from src.vectorstore.weaviate_store import WeaviateProductStore


ENV_VARS = [
    "WEAVIATE_HOST",
    "WEAVIATE_SCHEME",
    "WEAVIATE_GRPC_PORT",
    "WEAVIATE_API_KEY",
    "OPENAI_API_KEY",
    "CATEGORIZER_STRATEGY",
    "VECTOR_STORE",
    "PRODUCT_COLLECTION",
    "PRODUCTS_FILE",
    "MAX_RESULTS",
    "CORS_ORIGINS",
    "PORT",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_VARS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    settings = load_settings(dotenv=False)
    assert settings.weaviate_host == "localhost:8080"
    assert settings.weaviate_api_key is None
    assert settings.openai_api_key is None
    assert settings.port == 8080
    assert settings.categorizer_strategy == CategorizerStrategy.heuristic
    assert settings.vector_store == VectorStoreBackend.weaviate
    assert settings.products_file == "documents.txt"
    assert settings.cors_origins == ["http://localhost:3000"]


def test_overrides(monkeypatch):
    monkeypatch.setenv("WEAVIATE_HOST", "weaviate:9090")
    monkeypatch.setenv("WEAVIATE_API_KEY", "secret")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("CATEGORIZER_STRATEGY", "Language-Model-With-Fallback")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings(dotenv=False)
    assert settings.weaviate_host == "weaviate:9090"
    assert settings.weaviate_api_key == "secret"
    assert settings.port == 9000
    assert settings.categorizer_strategy == CategorizerStrategy.language_model
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"


def test_empty_values_count_as_unset(monkeypatch):
    monkeypatch.setenv("WEAVIATE_API_KEY", "")
    monkeypatch.setenv("PORT", "  ")
    settings = load_settings(dotenv=False)
    assert settings.weaviate_api_key is None
    assert settings.port == 8080


@pytest.mark.parametrize(
    "key, value, message",
    [
        ("PORT", "eighty", "PORT must be an integer"),
        ("CATEGORIZER_STRATEGY", "magic", "CATEGORIZER_STRATEGY must be one of"),
        ("VECTOR_STORE", "redis", "VECTOR_STORE must be one of"),
        ("WEAVIATE_SCHEME", "ftp", "WEAVIATE_SCHEME"),
        ("MAX_RESULTS", "0", "MAX_RESULTS must be positive"),
    ],
)
def test_invalid_values(monkeypatch, key, value, message):
    monkeypatch.setenv(key, value)
    with pytest.raises(ValueError, match=message):
        load_settings(dotenv=False)


@pytest.mark.parametrize(
    "backend, store_cls",
    [("weaviate", WeaviateProductStore), ("milvus", MilvusProductStore)],
)
def test_store_factory_is_lazy(monkeypatch, backend, store_cls):
    monkeypatch.setenv("VECTOR_STORE", backend)
    store = create_product_store(load_settings(dotenv=False))
    assert isinstance(store, store_cls)
    assert store.collection == "Product"
    # Nothing connects until the first call
    assert store._client is None
