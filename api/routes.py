"""API endpoints for previewing codes, variants, prices and labels.

Nothing here is persisted: the form calls these endpoints while the user
edits, then submits the result to the catalog API itself.
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Any, Literal

from flask import Blueprint, jsonify, request, send_file
from pydantic import BaseModel, Field

from api.errors import handle_errors
from api.exceptions import ValidationError
from services.barcode_generator import render_labels
from services.code_generator import (
    generate_brand_code,
    generate_from_name,
    generate_location_code,
    generate_product_type_code,
    generate_random_code,
    generate_variant_code,
)
from services.pricing import PriceCategory, Tax, price_product
from services.sku_assembler import build_variants
from services.variant_combinations import SelectedVariant, VariantAxis
from utils.codes import (
    UNIQUE_CODE_MAX_LENGTH,
    check_code,
    is_valid_brand_code,
    is_valid_location_code,
    is_valid_product_type_code,
    is_valid_unique_code,
    is_valid_value_code,
    is_valid_variant_code,
)
from utils.sku import generate_sku

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")

_VALIDATORS = {
    "unique": is_valid_unique_code,
    "variant": is_valid_variant_code,
    "value": is_valid_value_code,
    "brand": is_valid_brand_code,
    "product-type": is_valid_product_type_code,
    "location": is_valid_location_code,
}


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class CodeCheckRequest(BaseModel):
    code: str
    kind: Literal["unique", "variant", "value", "brand", "product-type", "location"] = "unique"
    existing_codes: list[str] = Field(default_factory=list)


class CodeGenerateRequest(BaseModel):
    kind: Literal["random", "value", "variant", "brand", "product-type", "location"]
    existing_codes: list[str] = Field(default_factory=list)
    length: int = Field(default=4, ge=1, le=UNIQUE_CODE_MAX_LENGTH)
    name: str = ""
    base_sku: str = ""
    index: int | None = Field(default=None, ge=0)
    custom_code: str | None = None
    location_type: str = "others"


class VariantPreviewRequest(BaseModel):
    base_sku: str = ""
    brand_code: str = ""
    product_type_code: str = ""
    unique_code: str | None = None
    brand: str = ""
    product_type: str = ""
    product_name: str = ""
    selected: list[SelectedVariant] = Field(default_factory=list)
    variant_types: list[VariantAxis] = Field(default_factory=list)
    existing_codes: list[str] = Field(default_factory=list)


class PricePreviewRequest(BaseModel):
    usd_price: Any = None
    exchange_rate: Any = None
    adjustment_percentage: Any = None
    categories: list[PriceCategory] = Field(default_factory=list)
    taxes: list[Tax] = Field(default_factory=list)


class LabelRequest(BaseModel):
    labels: list[dict[str, str]] = Field(min_length=1)
    label_size: str | None = None


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


# ===========================================================================
# Codes
# ===========================================================================


@api_bp.route("/codes/validate", methods=["POST"])
@handle_errors
def validate_code() -> tuple:
    """Check an entered code's format and uniqueness."""
    req = CodeCheckRequest.model_validate(_json_body())
    result = check_code(req.code, req.existing_codes, _VALIDATORS[req.kind])
    return jsonify(result.model_dump(mode="json")), 200


@api_bp.route("/codes/generate", methods=["POST"])
@handle_errors
def generate_code() -> tuple:
    """Generate a fresh code of the requested kind."""
    req = CodeGenerateRequest.model_validate(_json_body())

    if req.kind == "random":
        code = generate_random_code(req.length, req.existing_codes)
    elif req.kind == "value":
        if not req.name.strip():
            raise ValidationError("name is required for value codes")
        code = generate_from_name(req.name, req.existing_codes)
    elif req.kind == "variant":
        code = generate_variant_code(
            req.base_sku, req.existing_codes, req.index, req.custom_code
        ).unique_code
    elif req.kind == "brand":
        code = generate_brand_code(req.existing_codes)
    elif req.kind == "product-type":
        code = generate_product_type_code(req.existing_codes)
    else:
        code = generate_location_code(req.location_type)

    return jsonify({"kind": req.kind, "code": code}), 200


# ===========================================================================
# Variants
# ===========================================================================


@api_bp.route("/variants/preview", methods=["POST"])
@handle_errors
def preview_variants() -> tuple:
    """Expand the selected variant values into SKUs and names."""
    req = VariantPreviewRequest.model_validate(_json_body())

    base_sku = req.base_sku or generate_sku(
        req.brand_code, req.product_type_code, req.unique_code
    )
    if not base_sku:
        raise ValidationError("base_sku, or brand_code and product_type_code, are required")

    drafts = build_variants(
        base_sku,
        req.selected,
        req.variant_types,
        brand=req.brand,
        product_type=req.product_type,
        product_name=req.product_name,
        existing_codes=req.existing_codes,
    )
    return jsonify({
        "base_sku": base_sku,
        "count": len(drafts),
        "variants": [d.model_dump(mode="json") for d in drafts],
    }), 200


# ===========================================================================
# Prices
# ===========================================================================


@api_bp.route("/prices/preview", methods=["POST"])
@handle_errors
def preview_prices() -> tuple:
    """Run the price pipeline for one product."""
    req = PricePreviewRequest.model_validate(_json_body())
    breakdown = price_product(
        req.usd_price,
        req.exchange_rate,
        req.adjustment_percentage,
        req.categories,
        req.taxes,
    )
    return jsonify(breakdown.model_dump(mode="json")), 200


# ===========================================================================
# Labels
# ===========================================================================


@api_bp.route("/labels", methods=["POST"])
@handle_errors
def print_labels():
    """Render a label PDF for the given SKUs."""
    req = LabelRequest.model_validate(_json_body())
    for label in req.labels:
        if not label.get("sku"):
            raise ValidationError("Every label needs a sku")

    pdf = render_labels(req.labels, req.label_size)
    return send_file(
        BytesIO(pdf),
        mimetype="application/pdf",
        as_attachment=True,
        download_name="labels.pdf",
    )
