"""Read-only catalog snapshots for offline use by the CLI."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from services.pricing import PriceCategory, Tax
from services.variant_combinations import VariantAxis


class CatalogSnapshot(BaseModel):
    """Variant types, price categories and taxes as exported from the dashboard."""

    variant_types: list[VariantAxis] = Field(default_factory=list)
    price_categories: list[PriceCategory] = Field(default_factory=list)
    taxes: list[Tax] = Field(default_factory=list)

    def sorted_categories(self) -> list[PriceCategory]:
        return sorted(self.price_categories, key=lambda c: c.order)

    def find_axis(self, ref: str) -> VariantAxis | None:
        """Find a variant type by case-insensitive name, then by id."""
        wanted = ref.strip().lower()
        for axis in self.variant_types:
            if axis.name.strip().lower() == wanted:
                return axis
        for axis in self.variant_types:
            if str(axis.id) == ref.strip():
                return axis
        return None


def load_catalog(path: str | Path) -> CatalogSnapshot:
    """Load a catalog snapshot JSON file.

    Raises:
        FileNotFoundError: If *path* does not exist.
        pydantic.ValidationError: If the file does not match the schema.
    """
    path = Path(path)
    if not path.exists():
        msg = f"File not found: {path}"
        raise FileNotFoundError(msg)
    return CatalogSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
