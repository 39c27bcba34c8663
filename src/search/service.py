from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from src.vectorstore.base import ProductStore
from src.vectorstore.schemas import Product


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchServiceConfig:
    search_limit: int = 10
    recommendation_limit: int = 5
    max_results: int = 100


class SearchService:
    """Application-layer search service.

    Implements:
      1) Search by free-text query
      2) Recommendations seeded by a product name

    Both are near-text queries against the product store; ordering is the
    store's similarity ranking. Store failures propagate as VectorStoreError.
    """

    def __init__(self, store: ProductStore, config: SearchServiceConfig | None = None):
        self.store = store
        self.config = config or SearchServiceConfig()

    def search(self, query: str, limit: Optional[int] = None) -> List[Product]:
        """Search by a natural-language query string."""
        return self._near_text(query, self._resolve_limit(limit, self.config.search_limit))

    def recommend(self, product_name: str, limit: Optional[int] = None) -> List[Product]:
        """Products similar to the given product name."""
        return self._near_text(
            product_name, self._resolve_limit(limit, self.config.recommendation_limit)
        )

    def _resolve_limit(self, limit: Optional[int], default: int) -> int:
        if limit is None or limit <= 0:
            return default
        if limit > self.config.max_results:
            logger.debug("Clamping limit %d to %d", limit, self.config.max_results)
            return self.config.max_results
        return limit

    def _near_text(self, text: str, limit: int) -> List[Product]:
        hits = self.store.near_text(text, limit)
        return [
            Product.from_properties(props, fallback_id=str(position))
            for position, props in enumerate(hits, start=1)
        ]
