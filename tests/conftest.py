from __future__ import annotations

from typing import Any, Dict, List, Sequence

import pytest

from src.catalog import KeywordCategorizer
from src.vectorstore.base import ProductStore, VectorStoreError
from src.vectorstore.schemas import Product


class FakeProductStore(ProductStore):
    """In-memory ProductStore double.

    near_text returns stored records in insertion order; ``fail_on`` names
    operations that should raise VectorStoreError.
    """

    def __init__(self, products: Sequence[Product] = (), *, fail_on: Sequence[str] = ()):
        self.collection = "Product"
        self.records: List[Dict[str, Any]] = [p.to_properties() for p in products]
        self.fail_on = set(fail_on)
        self.collection_exists = False
        self.insert_calls = 0
        self.queries: List[tuple] = []
        self.closed = False

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise VectorStoreError(f"{op} unavailable")

    def ensure_collection(self) -> bool:
        self._maybe_fail("ensure_collection")
        created = not self.collection_exists
        self.collection_exists = True
        return created

    def count(self) -> int:
        self._maybe_fail("count")
        return len(self.records)

    def insert_many(self, products: Sequence[Product]) -> int:
        self._maybe_fail("insert_many")
        self.insert_calls += 1
        self.records.extend(p.to_properties() for p in products)
        return len(products)

    def near_text(self, text: str, limit: int) -> List[Dict[str, Any]]:
        self._maybe_fail("near_text")
        self.queries.append((text, limit))
        return [dict(r) for r in self.records[:limit]]

    def close(self) -> None:
        self.closed = True


SAMPLE_MANIFEST = """\
iPhone 15 Pro - Latest flagship smartphone
MacBook Air M3 - Thin and light laptop
iPad Pro 12.9 - Tablet with M2 chip
AirPods Pro 2 - Wireless earbuds with noise cancellation
Sony WH-1000XM5 - Wireless headphones

this line has no delimiter
Apple Watch Series 9 - Smartwatch with health tracking
GoPro HERO12 Black - Waterproof action camera
PlayStation 5 - Gaming console
Tesla Model 3 - Electric sedan
Dyson V15 Detect - Cordless vacuum cleaner
Peloton Bike+ - Indoor exercise bike
Kindle Paperwhite - Waterproof e-reader
Amazon Echo Dot - Smart speaker with Alexa
Anker PowerCore 20000 - Portable charger
"""


@pytest.fixture
def keyword_categorizer() -> KeywordCategorizer:
    return KeywordCategorizer()


@pytest.fixture
def fake_store() -> FakeProductStore:
    return FakeProductStore()


@pytest.fixture
def manifest_path(tmp_path):
    path = tmp_path / "documents.txt"
    path.write_text(SAMPLE_MANIFEST, encoding="utf-8")
    return path
