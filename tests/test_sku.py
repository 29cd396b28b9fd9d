"""Tests for utils.sku and services.sku_assembler."""

from __future__ import annotations

import logging
import random

import pytest

from config import settings
from services.code_generator import _cached_mappings
from services.sku_assembler import (
    ValueCodeSource,
    assemble_name,
    assemble_sku,
    build_variants,
)
from services.variant_combinations import (
    CombinationEntry,
    SelectedVariant,
    VariantAxis,
    VariantCombination,
    VariantValue,
    expand_combinations,
)
from utils.sku import generate_sku


class TestGenerateSku:
    def test_basic(self) -> None:
        assert generate_sku("hyt", "rc", "0001") == "HYTRC0001"

    def test_random_digits(self, rng: random.Random) -> None:
        sku = generate_sku("HYT", "RC", rng=rng)
        assert sku.startswith("HYTRC")
        assert len(sku) == 9
        assert sku[5:].isdigit()

    def test_missing_codes(self) -> None:
        assert generate_sku("", "RC", "0001") == ""
        assert generate_sku("HYT", "", "0001") == ""


class TestAssembleSku:
    def test_codes_in_display_order(self, axis_catalog: list[VariantAxis]) -> None:
        selected = [
            SelectedVariant(axis_id=1, values=[11]),
            SelectedVariant(axis_id=2, values=[21]),
            SelectedVariant(axis_id=3, values=[33]),
        ]
        combination = expand_combinations(selected, axis_catalog)[0]
        # Hand (1), Color (2), Draw Weight (3)
        assert assemble_sku("HYTRC0001", combination) == "HYTRC0001-LHBK40"

    def test_strip_prefix_round_trip(self, axis_catalog: list[VariantAxis]) -> None:
        selected = [
            SelectedVariant(axis_id=3, values=[31, 32]),
            SelectedVariant(axis_id=1, values=[11, 12]),
        ]
        for combination in expand_combinations(selected, axis_catalog):
            sku = assemble_sku("BASE", combination)
            expected = "".join(e.value_code for e in combination.sorted_entries())
            assert sku.removeprefix("BASE-") == expected

    def test_generates_missing_codes(self, axis_catalog: list[VariantAxis]) -> None:
        combination = expand_combinations(
            [SelectedVariant(axis_id=1, values=["Camo"])], axis_catalog
        )[0]
        source = ValueCodeSource(axis_catalog)
        assert assemble_sku("BASE", combination, source) == "BASE-CO"

    def test_generated_code_avoids_axis_codes(self) -> None:
        axis = VariantAxis(
            id=1,
            name="Color",
            values=[
                VariantValue(id=1, name="Coral", code="CL"),
                VariantValue(id=2, name="Camel"),
            ],
        )
        combination = expand_combinations([SelectedVariant(axis_id=1, values=[2])], [axis])[0]
        assert assemble_sku("BASE", combination, ValueCodeSource([axis])) == "BASE-C1"

    def test_empty_combination(self) -> None:
        assert assemble_sku("BASE", VariantCombination()) == "BASE"

    def test_unreadable_mappings_file(
        self, tmp_path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _cached_mappings.cache_clear()
        monkeypatch.setattr(settings, "value_code_mappings_path", str(tmp_path / "missing.json"))
        combination = VariantCombination(
            entries=(CombinationEntry(axis_id=1, axis_name="Color", value_id=None, value_name="Black"),)
        )
        assert assemble_sku("BASE", VariantCombination()) == "BASE"
        assert assemble_sku("BASE", combination) == "BASE-BK"
        _cached_mappings.cache_clear()

    def test_requires_base_sku(self) -> None:
        with pytest.raises(ValueError, match="base SKU is required"):
            assemble_sku("", VariantCombination())

    def test_distinct_combinations_distinct_skus(self, axis_catalog: list[VariantAxis]) -> None:
        selected = [
            SelectedVariant(axis_id=1, values=[11, 12, 13]),
            SelectedVariant(axis_id=2, values=[21, 22]),
            SelectedVariant(axis_id=3, values=[31, 32, 33]),
        ]
        source = ValueCodeSource(axis_catalog)
        skus = [assemble_sku("B", c, source) for c in expand_combinations(selected, axis_catalog)]
        assert len(skus) == 18
        assert len(set(skus)) == 18


class TestValueCodeSource:
    def test_stable_per_value(self) -> None:
        source = ValueCodeSource()
        entry = CombinationEntry(axis_id=1, axis_name="Color", value_id=None, value_name="Camo")
        assert source.code_for(entry) == source.code_for(entry) == "CO"

    def test_distinct_within_axis(self) -> None:
        source = ValueCodeSource()
        first = CombinationEntry(axis_id=1, axis_name="Color", value_id=None, value_name="Camo")
        second = CombinationEntry(axis_id=1, axis_name="Color", value_id=None, value_name="Coco")
        assert source.code_for(first) == "CO"
        assert source.code_for(second) == "C1"

    def test_independent_axes(self) -> None:
        source = ValueCodeSource()
        color = CombinationEntry(axis_id=1, axis_name="Color", value_id=None, value_name="Camo")
        grip = CombinationEntry(axis_id=2, axis_name="Grip", value_id=None, value_name="Cork")
        assert source.code_for(color) == "CO"
        assert source.code_for(grip) == "CK"

    def test_existing_code_uppercased(self) -> None:
        entry = CombinationEntry(
            axis_id=1, axis_name="Color", value_id=1, value_name="Black", value_code="bk"
        )
        assert ValueCodeSource().code_for(entry) == "BK"


class TestAssembleName:
    def test_sorted_by_display_order(self, axis_catalog: list[VariantAxis]) -> None:
        selected = [
            SelectedVariant(axis_id=1, values=[11]),
            SelectedVariant(axis_id=2, values=[22]),
        ]
        combination = expand_combinations(selected, axis_catalog)[0]
        name = assemble_name("Hoyt", "Recurve", "Satori", combination)
        assert name == "Hoyt Recurve Satori Right Black"

    def test_trims_empty_parts(self) -> None:
        assert assemble_name("", "", "Satori", VariantCombination()) == "Satori"

    def test_value_order_breaks_ties(self) -> None:
        combination = VariantCombination(
            entries=(
                CombinationEntry(axis_id=1, axis_name="A", value_id=1, value_name="Two",
                                 order=1, value_order=2),
                CombinationEntry(axis_id=2, axis_name="B", value_id=2, value_name="One",
                                 order=1, value_order=1),
            )
        )
        assert assemble_name("X", "Y", "Z", combination) == "X Y Z One Two"


class TestBuildVariants:
    def test_full_flow(self, axis_catalog: list[VariantAxis]) -> None:
        selected = [
            SelectedVariant(axis_id=1, values=[11, 12]),
            SelectedVariant(axis_id=2, values=[21]),
        ]
        drafts = build_variants(
            "HYTRC0001",
            selected,
            axis_catalog,
            brand="Hoyt",
            product_type="Recurve",
            product_name="Satori",
        )
        assert [d.sku for d in drafts] == ["HYTRC0001-LHBK", "HYTRC0001-LHRD"]
        assert [d.variant_code for d in drafts] == ["0001", "0002"]
        assert drafts[1].name == "Hoyt Recurve Satori Left Red"

    def test_no_base_sku(self, axis_catalog: list[VariantAxis]) -> None:
        assert build_variants("", [SelectedVariant(axis_id=1, values=[11])], axis_catalog) == []

    def test_reproducible(self, axis_catalog: list[VariantAxis]) -> None:
        selected = [
            SelectedVariant(axis_id=1, values=[11, 12, 13]),
            SelectedVariant(axis_id=3, values=[31, 32]),
        ]
        first = build_variants("B", selected, axis_catalog)
        second = build_variants("B", selected, axis_catalog)
        assert first == second

    def test_duplicate_skus_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        axis = VariantAxis(
            id=1,
            name="Color",
            values=[
                VariantValue(id=1, name="Black", code="BK"),
                VariantValue(id=2, name="Dark", code="BK"),
            ],
        )
        with caplog.at_level(logging.WARNING, logger="services.sku_assembler"):
            drafts = build_variants("B", [SelectedVariant(axis_id=1, values=[1, 2])], [axis])
        assert [d.sku for d in drafts] == ["B-BK", "B-BK"]
        assert "Duplicate variant SKU B-BK" in caplog.text
