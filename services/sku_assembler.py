"""Variant SKU and display name assembly.

The variant SKU is the base SKU, a hyphen, and the value codes of the
combination concatenated in axis display order::

    ARPBW0001-BKLH   (Black, Left Hand)

Distinct combinations only get distinct SKUs when value codes are
unique within each axis.  That is the caller's responsibility; the
assembler does not check it.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Mapping

from pydantic import BaseModel

from services.code_generator import (
    generate_from_name,
    generate_variant_code,
    value_code_table,
)
from services.variant_combinations import (
    CombinationEntry,
    SelectedVariant,
    VariantAxis,
    VariantCombination,
    expand_combinations,
)
from utils.codes import format_code

logger = logging.getLogger(__name__)


class ValueCodeSource:
    """Looks up value codes, generating one for values that lack it.

    Generated codes avoid every code already used on the same axis and
    stay stable for a value for the lifetime of the source.  Build a new
    source per assembly run.
    """

    def __init__(
        self,
        axis_catalog: Iterable[VariantAxis] = (),
        mappings: Mapping[str, str] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._taken: dict[str, set[str]] = {}
        self._assigned: dict[tuple[str, str], str] = {}
        self._mappings = mappings if mappings is not None else value_code_table()
        self._rng = rng
        for axis in axis_catalog:
            self._taken[str(axis.id)] = {format_code(v.code) for v in axis.values if v.code}

    def code_for(self, entry: CombinationEntry) -> str:
        if entry.value_code:
            return format_code(entry.value_code)

        axis_key = str(entry.axis_id)
        value_key = (axis_key, entry.value_name.strip().upper())
        if value_key in self._assigned:
            return self._assigned[value_key]

        taken = self._taken.setdefault(axis_key, set())
        code = generate_from_name(entry.value_name, taken, self._mappings, rng=self._rng)
        taken.add(code)
        self._assigned[value_key] = code
        logger.debug("Generated code %s for %s=%s", code, entry.axis_name, entry.value_name)
        return code


def assemble_sku(
    base_sku: str,
    combination: VariantCombination,
    code_source: ValueCodeSource | None = None,
) -> str:
    """Return ``{base_sku}-{code1code2...}`` for *combination*.

    An empty combination yields the base SKU unchanged.

    Raises ValueError if base_sku is empty.
    """
    if not base_sku:
        msg = "base SKU is required"
        raise ValueError(msg)

    source = code_source or ValueCodeSource()
    codes = "".join(source.code_for(entry) for entry in combination.sorted_entries())
    if not codes:
        return base_sku
    return f"{base_sku}-{codes}"


def assemble_name(
    brand: str,
    product_type: str,
    product_name: str,
    combination: VariantCombination,
) -> str:
    """Human-readable variant name, e.g. ``Hoyt Recurve Satori Black Left``.

    Empty parts are left out so words are always one space apart.
    """
    variant_text = " ".join(e.value_name for e in combination.sorted_entries())
    parts = (brand, product_type, product_name, variant_text)
    return " ".join(p.strip() for p in parts if p and p.strip())


# ---------------------------------------------------------------------------
# Bulk variant creation
# ---------------------------------------------------------------------------


class VariantDraft(BaseModel):
    """A variant ready to be shown in the bulk-creation form."""

    sku: str
    name: str
    variant_code: str
    combination: VariantCombination


def build_variants(
    base_sku: str,
    selected: Iterable[SelectedVariant],
    axis_catalog: Iterable[VariantAxis],
    *,
    brand: str = "",
    product_type: str = "",
    product_name: str = "",
    existing_codes: Iterable[str] = (),
    mappings: Mapping[str, str] | None = None,
    rng: random.Random | None = None,
) -> list[VariantDraft]:
    """Expand the selection and assemble SKU, name and number per variant.

    Variant codes are the sequential numbers of the combinations in
    expansion order, so re-running with the same input numbers the same
    variants the same way.  Returns an empty list without a base SKU.
    """
    if not base_sku:
        return []

    catalog = list(axis_catalog)
    existing = list(existing_codes)
    source = ValueCodeSource(catalog, mappings=mappings, rng=rng)
    combinations = expand_combinations(selected, catalog)

    drafts: list[VariantDraft] = []
    seen_skus: set[str] = set()
    for index, combination in enumerate(combinations):
        sku = assemble_sku(base_sku, combination, source)
        if sku in seen_skus:
            logger.warning("Duplicate variant SKU %s; value codes are not unique per axis", sku)
        seen_skus.add(sku)

        variant_code = generate_variant_code(base_sku, existing, index=index, rng=rng)
        drafts.append(
            VariantDraft(
                sku=sku,
                name=assemble_name(brand, product_type, product_name, combination),
                variant_code=variant_code.unique_code,
                combination=combination,
            )
        )
    return drafts
