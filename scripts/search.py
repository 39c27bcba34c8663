"""Near-text product search from the command line.

Configuration via constants below (no CLI args). Run:
	python scripts/search.py

Environment (see src/config.py):
	VECTOR_STORE     (weaviate | milvus, default weaviate)
	WEAVIATE_HOST    (default localhost:8080)
	OPENAI_API_KEY   (forwarded to the store's vectorizer)
"""

from __future__ import annotations

import logging
from pathlib import Path
import sys
from typing import List

# Ensure the repository root is importable when run as a plain script
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
	sys.path.insert(0, str(ROOT_DIR))

from src.config import load_settings  # noqa: E402
from src.search import SearchService, SearchServiceConfig  # noqa: E402
from src.vectorstore import Product, create_product_store  # noqa: E402
from src.vectorstore.schemas import format_product  # noqa: E402


# ---------------------------------------------------------------------------
# Configuration Constants
# ---------------------------------------------------------------------------
QUERY_TEXT: str = "wireless headphones"
TOP_K: int = 5
LOG_LEVEL: str = "INFO"


def search(query: str, top_k: int = TOP_K) -> List[Product]:
	"""Run one search and log an aggregated multi-line block with the results."""
	logger = logging.getLogger(__name__)

	settings = load_settings()
	store = create_product_store(settings)
	try:
		service = SearchService(store, SearchServiceConfig(max_results=settings.max_results))
		products = service.search(query, top_k)
	finally:
		store.close()

	lines: List[str] = [f"Returned {len(products)} of K={top_k} results. \nQuery: {query!r} \n"]
	for idx, product in enumerate(products, start=1):
		lines.append(f"{idx}. {format_product(product)}")
	logger.info("\n".join(lines))
	return products


def main() -> int:
	logging.basicConfig(
		level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
		format="%(asctime)s %(levelname)s %(name)s - %(message)s",
	)
	try:
		search(QUERY_TEXT, TOP_K)
		return 0
	except Exception as e:  # pragma: no cover
		logging.exception("Search failed: %s", e)
		return 1


if __name__ == "__main__":  # pragma: no cover
	raise SystemExit(main())
