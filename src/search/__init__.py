"""Search application layer.

Two scenarios used by the API:
- Search by free-text query
- Recommendations for a product name

Both delegate similarity ranking to the vector store.
"""

from .service import SearchService, SearchServiceConfig

__all__ = ["SearchService", "SearchServiceConfig"]
