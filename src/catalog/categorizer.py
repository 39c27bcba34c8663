from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx
import yaml

from src.config import CategorizerStrategy, Settings
from src.vectorstore.schemas import CATEGORIES, DEFAULT_CATEGORY


logger = logging.getLogger(__name__)

KEYWORDS_FILE_PATH = Path(__file__).parent / "categories.yaml"

PROMPT_TEMPLATE = """Categorize this product into one of these categories: {categories}

Product: {name}
Description: {description}

Return only the category name that best fits this product. Choose the most specific and appropriate category."""


def load_config(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a given YAML file path.

    Raises:
        FileNotFoundError: If the configuration file is not found.
        ValueError: If there is an error parsing the YAML file.
    """
    path = Path(config_path)

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise FileNotFoundError(f"Configuration file not found: {path}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file '{path}': {e}") from e

    return data or {}


def load_keyword_table(
    config_path: Path | str = KEYWORDS_FILE_PATH,
) -> Dict[str, List[str]]:
    """Read the ordered category -> keywords table.

    Raises:
        ValueError: If the table is malformed or names a category outside
            the taxonomy.
    """
    cfg = load_config(config_path)
    table = cfg.get("keywords") if isinstance(cfg, dict) else None
    if not isinstance(table, dict):
        raise ValueError(f"'{config_path}' has no 'keywords' mapping")
    return validate_keyword_table(table)


def validate_keyword_table(table: Mapping[str, Sequence[str]]) -> Dict[str, List[str]]:
    result: Dict[str, List[str]] = {}
    for category, keywords in table.items():
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category in keyword table: {category!r}")
        if isinstance(keywords, str) or not isinstance(keywords, (list, tuple)):
            raise ValueError(f"Keywords for {category!r} must be a list")
        result[category] = [str(k).lower() for k in keywords if str(k).strip()]
    return result


class Categorizer(ABC):
    """Assigns exactly one taxonomy label to a product."""

    @abstractmethod
    def categorize(self, name: str, description: str) -> str: ...

    def close(self) -> None:
        return None


class KeywordCategorizer(Categorizer):
    """Offline substring matching on the lower-cased product name.

    The description is accepted for interface parity but not inspected.
    """

    def __init__(self, keywords: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        self.keywords = (
            validate_keyword_table(keywords) if keywords is not None else load_keyword_table()
        )

    def categorize(self, name: str, description: str = "") -> str:
        lowered = (name or "").lower()
        for category, keywords in self.keywords.items():
            for keyword in keywords:
                if keyword in lowered:
                    return category
        return DEFAULT_CATEGORY


class LanguageModelCategorizer(Categorizer):
    """Asks a chat-completions endpoint for the label.

    Any failure, or a reply that is not exactly one of the taxonomy labels,
    is answered by ``fallback`` instead. ``categorize`` never raises.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-3.5-turbo",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        temperature: float = 0.1,
        max_tokens: int = 50,
        fallback: Optional[Categorizer] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.fallback = fallback or KeywordCategorizer()
        self._owns_client = http_client is None
        self.http = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def build_prompt(self, name: str, description: str) -> str:
        return PROMPT_TEMPLATE.format(
            categories=", ".join(CATEGORIES), name=name, description=description
        )

    def categorize(self, name: str, description: str = "") -> str:
        try:
            label = self._complete(self.build_prompt(name, description))
        except Exception as e:
            logger.warning("Model categorization failed for %r, using keywords: %s", name, e)
            return self.fallback.categorize(name, description)

        if label in CATEGORIES:
            return label
        logger.warning(
            "Model returned unknown category %r for %r, using keywords", label, name
        )
        return self.fallback.categorize(name, description)

    def _complete(self, prompt: str) -> Optional[str]:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        resp = self.http.post("/chat/completions", json=payload, headers=self._headers)
        resp.raise_for_status()
        data = resp.json()
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            return None
        content = (choices[0].get("message") or {}).get("content")
        if not isinstance(content, str):
            return None
        return content.strip().lower()

    def close(self) -> None:
        if self._owns_client:
            self.http.close()


def build_categorizer(
    settings: Settings, *, http_client: Optional[httpx.Client] = None
) -> Categorizer:
    """Resolve the configured strategy once, at startup."""
    keywords = KeywordCategorizer()
    if settings.categorizer_strategy != CategorizerStrategy.language_model:
        return keywords
    if not settings.openai_api_key:
        logger.warning(
            "CATEGORIZER_STRATEGY=%s but OPENAI_API_KEY is not set; using keyword categorizer",
            settings.categorizer_strategy.value,
        )
        return keywords
    logger.info("Using model categorizer (%s)", settings.openai_model)
    return LanguageModelCategorizer(
        settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        timeout=settings.openai_timeout,
        fallback=keywords,
        http_client=http_client,
    )
