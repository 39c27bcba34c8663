from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from .schemas import Product


class VectorStoreError(RuntimeError):
    """Raised by store adapters when the backing vector database call fails."""


class ProductStore(ABC):
    """Operations the service needs from the external vector database.

    Implementations own the client handle. They are created once at startup
    and shared read-only across requests, so they must not keep per-request
    state.
    """

    collection: str

    @abstractmethod
    def ensure_collection(self) -> bool:
        """Create the product collection if missing. Returns True if created."""

    @abstractmethod
    def count(self) -> int:
        """Number of product records currently stored."""

    @abstractmethod
    def insert_many(self, products: Sequence[Product]) -> int:
        """Bulk insert in a single call. Returns the number of records accepted."""

    @abstractmethod
    def near_text(self, text: str, limit: int) -> List[Dict[str, Any]]:
        """Stored properties of the ``limit`` records closest to ``text``, best first."""

    def close(self) -> None:  # pragma: no cover - trivial default
        return None
