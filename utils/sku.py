"""Base SKU generation utility."""

from __future__ import annotations

import logging
import random

from services.code_generator import DIGITS
from utils.codes import VARIANT_CODE_LENGTH

logger = logging.getLogger(__name__)


def generate_sku(
    brand_code: str,
    product_type_code: str,
    unique_code: str | None = None,
    *,
    rng: random.Random | None = None,
) -> str:
    """Generate the base SKU shared by every variant of a product.

    Format: BRANDCODE + TYPECODE + UNIQUECODE, uppercased, no separators.
    Four random digits stand in for a missing unique code.  Returns an
    empty string when the brand or product type code is missing.
    """
    if not brand_code or not product_type_code:
        logger.warning(
            "Missing brand or product type code for SKU generation (brand=%r, type=%r)",
            brand_code,
            product_type_code,
        )
        return ""

    rng = rng or random
    code = unique_code or "".join(rng.choice(DIGITS) for _ in range(VARIANT_CODE_LENGTH))
    return f"{brand_code}{product_type_code}{code}".upper()
