from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from src.vectorstore.base import ProductStore, VectorStoreError
from src.vectorstore.schemas import Product

from .categorizer import Categorizer


logger = logging.getLogger(__name__)

MANIFEST_DELIMITER = " - "


@dataclass
class ManifestParseResult:
    products: List[Product] = field(default_factory=list)
    skipped: int = 0


@dataclass
class LoadReport:
    """Outcome of a catalog load attempt.

    status is one of "loaded", "skipped" (store already populated) or "error".
    """

    status: str
    existing: int = 0
    inserted: int = 0
    skipped: int = 0
    error: Optional[str] = None


def parse_manifest_line(line: str) -> Optional[Tuple[str, str]]:
    """Split a ``Name - Description`` line; None for blank or malformed lines."""
    text = line.strip()
    if not text:
        return None
    name, sep, description = text.partition(MANIFEST_DELIMITER)
    if not sep:
        return None
    return name, description


def parse_manifest(lines: Iterable[str], categorizer: Categorizer) -> ManifestParseResult:
    """Turn manifest lines into categorized products numbered from 1."""
    result = ManifestParseResult()
    for lineno, line in enumerate(lines, start=1):
        parsed = parse_manifest_line(line)
        if parsed is None:
            if line.strip():
                result.skipped += 1
                logger.debug("Skipping manifest line %d without ' - ': %r", lineno, line.strip())
            continue
        name, description = parsed
        result.products.append(
            Product(
                id=str(len(result.products) + 1),
                name=name,
                description=description,
                category=categorizer.categorize(name, description),
            )
        )
    return result


class CatalogLoader:
    """Loads the product manifest into the store once.

    Every failure is logged and reported in the returned LoadReport; nothing
    is raised, so the API keeps starting with whatever the store holds.
    """

    def __init__(self, store: ProductStore, categorizer: Categorizer) -> None:
        self.store = store
        self.categorizer = categorizer

    def load_if_empty(self, manifest_path: Path | str) -> LoadReport:
        try:
            existing = self.store.count()
        except VectorStoreError as e:
            logger.error("Could not check product count, skipping catalog load: %s", e)
            return LoadReport(status="error", error=str(e))

        if existing > 0:
            logger.info("Products already loaded: %d", existing)
            return LoadReport(status="skipped", existing=existing)

        path = Path(manifest_path)
        try:
            # Undecodable bytes become U+FFFD so the rest of the file still loads
            with path.open("r", encoding="utf-8", errors="replace") as f:
                parsed = parse_manifest(f, self.categorizer)
        except OSError as e:
            logger.error("Error reading manifest %s: %s", path, e)
            return LoadReport(status="error", error=str(e))

        if parsed.skipped:
            logger.warning(
                "Skipped %d malformed manifest line(s) in %s", parsed.skipped, path
            )

        try:
            inserted = self.store.insert_many(parsed.products)
        except VectorStoreError as e:
            logger.error("Error batch inserting products: %s", e)
            return LoadReport(status="error", skipped=parsed.skipped, error=str(e))

        logger.info(
            "Loaded %d of %d products from %s", inserted, len(parsed.products), path
        )
        return LoadReport(status="loaded", inserted=inserted, skipped=parsed.skipped)
