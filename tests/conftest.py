"""Shared test fixtures."""

from __future__ import annotations

import json
import random
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from flask import Flask
from flask.testing import FlaskClient

from services.pricing import PriceCategory, Tax
from services.variant_combinations import VariantAxis, VariantValue


@pytest.fixture
def rng() -> random.Random:
    """Seeded RNG so random code generation is reproducible."""
    return random.Random(1234)


@pytest.fixture
def color_axis() -> VariantAxis:
    return VariantAxis(
        id=1,
        name="Color",
        display_order=2,
        values=[
            VariantValue(id=11, name="Black", code="BK", order=1),
            VariantValue(id=12, name="Red", code="RD", order=2),
            VariantValue(id=13, name="Camo", order=3),
        ],
    )


@pytest.fixture
def hand_axis() -> VariantAxis:
    return VariantAxis(
        id=2,
        name="Hand",
        display_order=1,
        values=[
            VariantValue(id=21, name="Left", code="LH", order=1),
            VariantValue(id=22, name="Right", code="RH", order=2),
        ],
    )


@pytest.fixture
def weight_axis() -> VariantAxis:
    return VariantAxis(
        id=3,
        name="Draw Weight",
        display_order=3,
        values=[
            VariantValue(id=31, name="30 lbs", code="30", order=1),
            VariantValue(id=32, name="35 lbs", code="35", order=2),
            VariantValue(id=33, name="40 lbs", code="40", order=3),
        ],
    )


@pytest.fixture
def axis_catalog(
    color_axis: VariantAxis,
    hand_axis: VariantAxis,
    weight_axis: VariantAxis,
) -> list[VariantAxis]:
    return [color_axis, hand_axis, weight_axis]


@pytest.fixture
def price_categories() -> list[PriceCategory]:
    return [
        PriceCategory(id=1, name="Elite", percentage=10, order=1),
        PriceCategory(id=2, name="Super", percentage=20, order=2),
        PriceCategory(id=3, name="Basic", percentage=30, order=3),
    ]


@pytest.fixture
def taxes() -> list[Tax]:
    return [
        Tax(id="ppn", name="PPN", percentage=11, status="active"),
        Tax(id="lux", name="Luxury", percentage=20, status="inactive"),
    ]


@pytest.fixture
def catalog_data(
    axis_catalog: list[VariantAxis],
    price_categories: list[PriceCategory],
    taxes: list[Tax],
) -> dict[str, Any]:
    return {
        "variant_types": [a.model_dump() for a in axis_catalog],
        "price_categories": [c.model_dump() for c in price_categories],
        "taxes": [t.model_dump() for t in taxes],
    }


@pytest.fixture
def catalog_file(tmp_path: Path, catalog_data: dict[str, Any]) -> Path:
    """Catalog snapshot written to a JSON file."""
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(catalog_data), encoding="utf-8")
    return path


@pytest.fixture
def app() -> Flask:
    from api.app import create_app

    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app: Flask) -> Generator[FlaskClient, None, None]:
    with app.test_client() as client:
        yield client
