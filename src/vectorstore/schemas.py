from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


# Closed taxonomy; "electronics" is the catch-all.
CATEGORIES = (
    "smartphones",
    "laptops",
    "tablets",
    "audio",
    "wearables",
    "cameras",
    "gaming",
    "automotive",
    "appliances",
    "fitness",
    "e-readers",
    "smart-home",
    "accessories",
    "electronics",
)
DEFAULT_CATEGORY = "electronics"

# Text properties embedded by the store's vectorizer.
VECTORIZED_PROPERTIES = ("name", "description", "category")
# Catalog identifier, stored alongside but never vectorized.
ID_PROPERTY = "product_id"


@dataclass
class Product:
    id: str
    name: str
    description: str
    category: str = DEFAULT_CATEGORY

    def to_properties(self) -> Dict[str, Any]:
        return {
            ID_PROPERTY: self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
        }

    @classmethod
    def from_properties(
        cls, properties: Mapping[str, Any], *, fallback_id: Optional[str] = None
    ) -> "Product":
        """Build a Product from stored properties.

        Collections created before ``product_id`` existed only carry the three
        vectorized fields; ``fallback_id`` fills the gap for those.
        """
        stored_id = properties.get(ID_PROPERTY)
        pid = str(stored_id) if stored_id not in (None, "") else (fallback_id or "")
        return cls(
            id=pid,
            name=_as_str(properties.get("name")),
            description=_as_str(properties.get("description")),
            category=_as_str(properties.get("category")),
        )


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def format_product(product: Product, max_len: int = 80) -> str:
    """Compact one-line representation for logs/printing.

    Example: "id=3; category=audio; name=AirPods Pro; description=Noise..."
    """
    desc = product.description
    if len(desc) > max_len:
        desc = desc[: max(0, max_len - 3)] + "..."
    return (
        f"id={product.id}; category={product.category}; "
        f"name={product.name}; description={desc}"
    )
