"""Load the product manifest into the vector store without starting the API.

Same steps the API performs at startup: ensure the collection exists, then
load the manifest if the collection is empty. Run:
	python scripts/load_catalog.py [path/to/documents.txt]

The manifest path defaults to PRODUCTS_FILE (documents.txt).
"""

from __future__ import annotations

import logging
from pathlib import Path
import sys

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
	sys.path.insert(0, str(ROOT_DIR))

from src.catalog import CatalogLoader, build_categorizer  # noqa: E402
from src.config import load_settings  # noqa: E402
from src.vectorstore import VectorStoreError, create_product_store  # noqa: E402


logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
	argv = sys.argv[1:] if argv is None else argv
	settings = load_settings()
	logging.basicConfig(
		level=getattr(logging, settings.log_level, logging.INFO),
		format="%(asctime)s - %(levelname)s - %(message)s",
	)
	manifest = argv[0] if argv else settings.products_file

	store = create_product_store(settings)
	categorizer = build_categorizer(settings)
	try:
		try:
			store.ensure_collection()
		except VectorStoreError as e:
			logger.error("Could not ensure collection '%s': %s", settings.collection_name, e)
			return 1
		report = CatalogLoader(store, categorizer).load_if_empty(manifest)
	finally:
		categorizer.close()
		store.close()

	print(
		f"status={report.status} existing={report.existing} "
		f"inserted={report.inserted} skipped={report.skipped}"
	)
	return 1 if report.status == "error" else 0


if __name__ == "__main__":  # pragma: no cover
	raise SystemExit(main())
