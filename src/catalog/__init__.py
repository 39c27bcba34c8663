"""Catalog ingestion: manifest parsing, categorization and the one-time load."""

from .categorizer import (
    Categorizer,
    KeywordCategorizer,
    LanguageModelCategorizer,
    build_categorizer,
)
from .loader import CatalogLoader, LoadReport, parse_manifest, parse_manifest_line

__all__ = [
    "CatalogLoader",
    "Categorizer",
    "KeywordCategorizer",
    "LanguageModelCategorizer",
    "LoadReport",
    "build_categorizer",
    "parse_manifest",
    "parse_manifest_line",
]
