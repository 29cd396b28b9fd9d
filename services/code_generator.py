"""Code generation for variants, variant values, brands and locations.

Every generator takes the caller's current set of taken codes and only
reads it.  Random generation is capped; when the cap is reached the
generator raises :class:`GenerationExhausted` instead of spinning.
"""

from __future__ import annotations

import functools
import json
import logging
import random
import re
import string
import time
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import NamedTuple

from api.exceptions import ConflictError
from config import settings
from utils.codes import (
    VALUE_CODE_LENGTH,
    VARIANT_CODE_LENGTH,
    format_code,
    is_valid_unique_code,
    normalize_codes,
)

logger = logging.getLogger(__name__)

ALPHANUMERIC = string.ascii_uppercase + string.digits
LETTERS = string.ascii_uppercase
DIGITS = string.digits

FILLER_CHAR = "X"

# Common value names and their shorthand.  Overridable through
# VALUE_CODE_MAPPINGS_PATH or the ``mappings`` argument.
DEFAULT_VALUE_CODES: dict[str, str] = {
    "BLACK": "BK",
    "BLUE": "BL",
    "RED": "RD",
    "GREEN": "GN",
    "WHITE": "WT",
    "YELLOW": "YL",
    "PURPLE": "PR",
    "ORANGE": "OR",
    "BROWN": "BR",
    "GREY": "GY",
    "GRAY": "GY",
    "SILVER": "SL",
    "GOLD": "GD",
    "LEFT": "LH",
    "RIGHT": "RH",
    "SMALL": "SM",
    "MEDIUM": "MD",
    "LARGE": "LG",
    "EXTRA": "XL",
}

LOCATION_PREFIXES: dict[str, str] = {
    "warehouse": "WH",
    "store": "ST",
    "affiliate": "AF",
    "others": "OT",
}

_WORD_SPLIT_RE = re.compile(r"[\s-]+")
_NON_ALNUM_RE = re.compile(r"[^A-Z0-9]")


class GenerationExhausted(ConflictError):
    """Raised when no free code could be found within the attempt cap."""


# ---------------------------------------------------------------------------
# Random and sequential codes
# ---------------------------------------------------------------------------


def generate_random_code(
    length: int,
    existing_codes: Iterable[str] = (),
    *,
    alphabet: str = ALPHANUMERIC,
    max_attempts: int | None = None,
    rng: random.Random | None = None,
) -> str:
    """Draw random codes of *length* until one is not in *existing_codes*.

    Raises:
        ValueError: If *length* < 1.
        GenerationExhausted: If *max_attempts* draws all collided.
    """
    if length < 1:
        msg = "length must be at least 1"
        raise ValueError(msg)

    rng = rng or random
    taken = normalize_codes(existing_codes)
    attempts = max_attempts if max_attempts is not None else settings.random_code_max_attempts

    for _ in range(attempts):
        code = "".join(rng.choice(alphabet) for _ in range(length))
        if code not in taken:
            return code

    msg = f"Unable to generate a unique {length}-character code after {attempts} attempts"
    raise GenerationExhausted(msg)


def generate_sequential_code(index: int) -> str:
    """Return ``index + 1`` zero-padded to four digits (0 -> ``0001``).

    Raises ValueError if index < 0.
    """
    if index < 0:
        msg = "index must not be negative"
        raise ValueError(msg)
    return f"{index + 1:0{VARIANT_CODE_LENGTH}d}"


# ---------------------------------------------------------------------------
# Value codes derived from names
# ---------------------------------------------------------------------------


def load_value_code_mappings(path: str | Path | None = None) -> dict[str, str]:
    """Return the name -> code lookup table.

    The built-in table is used unless *path* (or the configured
    ``value_code_mappings_path``) names a JSON object, whose entries are
    merged over the defaults.
    """
    mappings = dict(DEFAULT_VALUE_CODES)
    source = path or settings.value_code_mappings_path
    if not source:
        return mappings

    data = json.loads(Path(source).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        msg = f"Value code mappings in {source} must be a JSON object"
        raise ValueError(msg)

    overrides = {str(k).strip().upper(): format_code(str(v)) for k, v in data.items()}
    logger.info("Loaded %d value code mappings from %s", len(overrides), source)
    mappings.update(overrides)
    return mappings


@functools.lru_cache(maxsize=8)
def _cached_mappings(source: str) -> Mapping[str, str]:
    try:
        mappings = load_value_code_mappings(source) if source else dict(DEFAULT_VALUE_CODES)
    except (OSError, ValueError) as exc:
        logger.warning(
            "Could not load value code mappings from %s, using defaults: %s", source, exc
        )
        mappings = dict(DEFAULT_VALUE_CODES)
    return MappingProxyType(mappings)


def value_code_table() -> Mapping[str, str]:
    """The configured lookup table, read from disk once per mappings path.

    An unreadable or malformed mappings file falls back to
    :data:`DEFAULT_VALUE_CODES`.
    """
    return _cached_mappings(settings.value_code_mappings_path)


def _derive_from_words(clean_name: str) -> str:
    words = [_NON_ALNUM_RE.sub("", w) for w in _WORD_SPLIT_RE.split(clean_name)]
    words = [w for w in words if w]
    if not words:
        return ""

    if len(words) > 1:
        return "".join(word[0] for word in words[:2])

    distinct = list(dict.fromkeys(words[0]))
    if len(distinct) > 1:
        return distinct[0] + distinct[-1]
    return distinct[0].ljust(VALUE_CODE_LENGTH, FILLER_CHAR)


def generate_from_name(
    value_name: str,
    existing_codes: Iterable[str] = (),
    mappings: Mapping[str, str] | None = None,
    *,
    rng: random.Random | None = None,
) -> str:
    """Derive a 2-character code for a variant value such as ``"Black"``.

    Tried in order, each stage only when the previous one produced an
    empty or taken code:

    1. the lookup table (``BLACK`` -> ``BK``)
    2. initials of the first two words (``Dark Green`` -> ``DG``)
    3. first and last distinct character (``Camo`` -> ``CO``), padded
       with ``X`` for single-character words
    4. first character plus a digit 1-9
    5. a random 2-character code
    """
    taken = normalize_codes(existing_codes)
    clean_name = value_name.strip().upper()
    table = mappings if mappings is not None else value_code_table()

    code = format_code(table.get(clean_name, ""))
    if not code or code in taken:
        derived = _derive_from_words(clean_name)
        if derived:
            code = derived

    if code and code not in taken:
        return code

    first = _NON_ALNUM_RE.sub("", clean_name)[:1]
    if first:
        for digit in range(1, 10):
            candidate = f"{first}{digit}"
            if candidate not in taken:
                return candidate

    logger.debug("Falling back to a random value code for %r", value_name)
    return generate_random_code(VALUE_CODE_LENGTH, taken, rng=rng)


# ---------------------------------------------------------------------------
# Variant codes
# ---------------------------------------------------------------------------


class VariantCode(NamedTuple):
    base_sku: str
    unique_code: str


class VariantCodeRequest(NamedTuple):
    """Inputs shared by every variant code strategy."""

    taken: set[str]
    index: int | None
    custom_code: str | None
    rng: random.Random | None


VariantCodeStrategy = Callable[[VariantCodeRequest], str | None]


def custom_code_strategy(request: VariantCodeRequest) -> str | None:
    """Use the code the user typed, if it is well-formed and free."""
    if not request.custom_code:
        return None
    code = format_code(request.custom_code)
    if is_valid_unique_code(code) and code not in request.taken:
        return code
    return None


def sequential_code_strategy(request: VariantCodeRequest) -> str | None:
    """Number the variant by its position; the caller keeps indexes unique."""
    if request.index is None:
        return None
    return generate_sequential_code(request.index)


def random_code_strategy(request: VariantCodeRequest) -> str | None:
    return generate_random_code(
        VARIANT_CODE_LENGTH, request.taken, alphabet=DIGITS, rng=request.rng
    )


VARIANT_CODE_STRATEGIES: tuple[VariantCodeStrategy, ...] = (
    custom_code_strategy,
    sequential_code_strategy,
    random_code_strategy,
)


def generate_variant_code(
    base_sku: str,
    existing_codes: Iterable[str] = (),
    index: int | None = None,
    custom_code: str | None = None,
    *,
    strategies: Iterable[VariantCodeStrategy] = VARIANT_CODE_STRATEGIES,
    rng: random.Random | None = None,
) -> VariantCode:
    """Pick the unique code for one variant of *base_sku*.

    Strategies are tried in order and the first candidate wins.

    Raises:
        GenerationExhausted: If the random fallback hit its cap, or no
            strategy produced a candidate.
    """
    request = VariantCodeRequest(
        taken=normalize_codes(existing_codes),
        index=index,
        custom_code=custom_code,
        rng=rng,
    )
    for strategy in strategies:
        code = strategy(request)
        if code is not None:
            return VariantCode(base_sku=base_sku, unique_code=code)

    msg = f"No variant code strategy produced a code for {base_sku}"
    raise GenerationExhausted(msg)


def format_variant_sku(variant_code: VariantCode) -> str:
    return f"{variant_code.base_sku}-{variant_code.unique_code}"


def is_unique_variant_code(code: str, base_sku: str, existing_skus: Iterable[str]) -> bool:
    """Return False if ``{base_sku}-{code}`` is already among *existing_skus*."""
    target_code = format_code(code)
    for sku in existing_skus:
        sku_base, _, sku_code = sku.partition("-")
        if sku_base == base_sku and format_code(sku_code) == target_code:
            return False
    return True


# ---------------------------------------------------------------------------
# Brand, product type and location codes
# ---------------------------------------------------------------------------


def generate_brand_code(
    existing_codes: Iterable[str] = (),
    *,
    rng: random.Random | None = None,
) -> str:
    """Random 3-letter brand code."""
    return generate_random_code(3, existing_codes, alphabet=LETTERS, rng=rng)


def generate_product_type_code(
    existing_codes: Iterable[str] = (),
    *,
    max_attempts: int | None = None,
    rng: random.Random | None = None,
) -> str:
    """Next free 2-letter product type code.

    Walks ``AA``..``AZ`` then ``BA``..``BZ`` before falling back to random
    letter pairs for the rest of the attempt budget.
    """
    rng = rng or random
    taken = normalize_codes(existing_codes)
    attempts = (
        max_attempts if max_attempts is not None else settings.product_type_code_max_attempts
    )

    for attempt in range(attempts):
        if attempt < 26:
            code = LETTERS[0] + LETTERS[attempt]
        elif attempt < 52:
            code = LETTERS[1] + LETTERS[attempt - 26]
        else:
            code = "".join(rng.choice(LETTERS) for _ in range(2))
        if code not in taken:
            return code

    msg = f"Unable to generate a unique product type code after {attempts} attempts"
    raise GenerationExhausted(msg)


def generate_location_code(location_type: str, now: float | None = None) -> str:
    """Location code such as ``WH-0421`` from the type and a timestamp.

    *now* is a POSIX timestamp in seconds; defaults to the current time.
    """
    prefix = LOCATION_PREFIXES.get(location_type, LOCATION_PREFIXES["others"])
    millis = int((time.time() if now is None else now) * 1000)
    return f"{prefix}-{millis % 10000:04d}"
