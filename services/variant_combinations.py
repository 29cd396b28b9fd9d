"""Expansion of selected variant axes into concrete variant combinations.

A product selects some values on some axes (Color: Black, Red; Size: S,
M, L) and gets one variant per element of the cross product, in the
nested order the axes and values were supplied.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_ORDER = 999


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class VariantValue(BaseModel):
    """One value of a variant axis, e.g. ``Black`` on ``Color``."""

    id: int | str
    name: str
    code: str | None = None
    order: int = DEFAULT_ORDER


class VariantAxis(BaseModel):
    """A variant type such as Color or Draw Weight."""

    id: int | str
    name: str
    values: list[VariantValue] = Field(default_factory=list)
    display_order: int = DEFAULT_ORDER
    status: bool = True

    def find_value(self, ref: int | str) -> VariantValue | None:
        """Look a value up by reference.

        Integers are ids.  Strings are case-insensitive names first and
        ids only when no name matches, so a value named ``"30"`` wins over
        a different value whose id is 30.
        """
        if isinstance(ref, str):
            wanted = ref.strip().lower()
            for value in self.values:
                if value.name.strip().lower() == wanted:
                    return value
            for value in self.values:
                if str(value.id) == ref.strip():
                    return value
            return None
        for value in self.values:
            if value.id == ref or str(value.id) == str(ref):
                return value
        return None


class SelectedVariant(BaseModel):
    """The values a product uses on one axis (ids or names)."""

    axis_id: int | str
    values: list[int | str] = Field(default_factory=list)


class CombinationEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    axis_id: int | str
    axis_name: str
    value_id: int | str | None
    value_name: str
    value_code: str | None = None
    order: int = DEFAULT_ORDER
    value_order: int = DEFAULT_ORDER


class VariantCombination(BaseModel):
    """One concrete variant: a value for every applied axis."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[CombinationEntry, ...] = ()

    def sorted_entries(self) -> list[CombinationEntry]:
        """Entries by axis display order, value order breaking ties."""
        return sorted(self.entries, key=lambda e: (e.order, e.value_order))


# ---------------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------------


def _find_axis(axis_id: int | str, axis_catalog: Iterable[VariantAxis]) -> VariantAxis | None:
    for axis in axis_catalog:
        if axis.id == axis_id or str(axis.id) == str(axis_id):
            return axis
    return None


def _resolve_entries(axis: VariantAxis, refs: list[int | str]) -> list[CombinationEntry]:
    """Turn selected value refs into entries, dropping blanks and repeats.

    A name that matches no catalog value is kept as an ad-hoc value
    without a code.
    """
    entries: list[CombinationEntry] = []
    seen: set[tuple[str, str]] = set()
    for ref in refs:
        if ref is None or (isinstance(ref, str) and not ref.strip()):
            continue

        value = axis.find_value(ref)
        if value is not None:
            entry = CombinationEntry(
                axis_id=axis.id,
                axis_name=axis.name,
                value_id=value.id,
                value_name=value.name,
                value_code=value.code or None,
                order=axis.display_order,
                value_order=value.order,
            )
        elif isinstance(ref, str):
            entry = CombinationEntry(
                axis_id=axis.id,
                axis_name=axis.name,
                value_id=None,
                value_name=ref.strip(),
                order=axis.display_order,
            )
        else:
            logger.debug("Value %r not found on axis %s, skipping", ref, axis.name)
            continue

        identity = (
            ("id", str(entry.value_id))
            if entry.value_id is not None
            else ("name", entry.value_name.lower())
        )
        if identity in seen:
            continue
        seen.add(identity)
        entries.append(entry)
    return entries


def expand_combinations(
    selected: Iterable[SelectedVariant],
    axis_catalog: Iterable[VariantAxis],
) -> list[VariantCombination]:
    """Return the cross product of the selected values, axis by axis.

    Axes missing from *axis_catalog*, or with no usable values, are
    skipped rather than emptying the result.  With nothing applied the
    result is a single empty combination.

    The output order follows the input: for each new axis, every value
    is paired with every combination built so far, so the first axis
    varies fastest.
    """
    catalog = list(axis_catalog)
    combinations: list[tuple[CombinationEntry, ...]] = [()]

    for selection in selected:
        axis = _find_axis(selection.axis_id, catalog)
        if axis is None:
            logger.debug("Axis %s not in catalog, skipping", selection.axis_id)
            continue

        entries = _resolve_entries(axis, selection.values)
        if not entries:
            logger.debug("No values selected for axis %s, skipping", axis.name)
            continue

        combinations = [
            (*combination, entry) for entry in entries for combination in combinations
        ]

    return [VariantCombination(entries=c) for c in combinations]
