"""Validation and formatting of human-entered catalog codes.

Covers the unique code that disambiguates variants sharing a base SKU,
the 4-digit sequential variant code, the 2-character variant value code,
and the brand / product type / location codes edited on their own screens.

Nothing in here raises for bad input: format and collision problems are
reported through :class:`CodeCheck` so forms can show a field error.
"""

from __future__ import annotations

import re
import string
from collections.abc import Callable, Iterable
from enum import Enum

from pydantic import BaseModel

UNIQUE_CODE_MAX_LENGTH = 10
VARIANT_CODE_LENGTH = 4
VALUE_CODE_LENGTH = 2

_UNIQUE_CODE_RE = re.compile(r"[A-Za-z0-9]{1,%d}" % UNIQUE_CODE_MAX_LENGTH)
_VARIANT_CODE_RE = re.compile(r"[0-9]{%d}" % VARIANT_CODE_LENGTH)
_VALUE_CODE_RE = re.compile(r"[A-Z0-9]{%d}" % VALUE_CODE_LENGTH)
_ALNUM_RE = re.compile(r"[A-Za-z0-9]+")
_LOCATION_CODE_RE = re.compile(r"[A-Z]{2}-[0-9]{4}")
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")
_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_valid_unique_code(code: str) -> bool:
    """Return True if *code* is 1-10 ASCII letters or digits."""
    return bool(code) and _UNIQUE_CODE_RE.fullmatch(code) is not None


def is_valid_variant_code(code: str) -> bool:
    """Return True if *code* is exactly four decimal digits."""
    return bool(code) and _VARIANT_CODE_RE.fullmatch(code) is not None


def is_valid_value_code(code: str) -> bool:
    """Return True if *code* is a 2-character uppercase value code."""
    return bool(code) and _VALUE_CODE_RE.fullmatch(code) is not None


def is_valid_brand_code(code: str) -> bool:
    """Brand codes are optional; when present, up to 10 alphanumerics."""
    if code == "":
        return True
    return len(code) <= UNIQUE_CODE_MAX_LENGTH and _ALNUM_RE.fullmatch(code) is not None


def is_valid_product_type_code(code: str) -> bool:
    return bool(code) and _ALNUM_RE.fullmatch(code) is not None


def is_valid_location_code(code: str) -> bool:
    """Return True for codes shaped like ``WH-0421``."""
    return bool(code) and _LOCATION_CODE_RE.fullmatch(code) is not None


def is_unique_among(code: str, existing_codes: Iterable[str]) -> bool:
    """Case-insensitive check that *code* is not already taken."""
    return format_code(code) not in normalize_codes(existing_codes)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_code(code: str) -> str:
    """Uppercase ASCII letters only; other characters and the length are kept."""
    return code.translate(_ASCII_UPPER)


def normalize_codes(codes: Iterable[str]) -> set[str]:
    """Uppercase every code into a set suitable for membership tests."""
    return {format_code(c) for c in codes if c}


def sanitize_input(raw: str, max_length: int = UNIQUE_CODE_MAX_LENGTH) -> str:
    """Drop every non-alphanumeric character and truncate to *max_length*.

    Idempotent: sanitizing an already sanitized value returns it unchanged.
    """
    return _NON_ALNUM_RE.sub("", raw)[:max_length]


def sanitize_unique_code(raw: str) -> str:
    return sanitize_input(raw, UNIQUE_CODE_MAX_LENGTH)


def sanitize_variant_code(raw: str) -> str:
    return sanitize_input(raw, VARIANT_CODE_LENGTH)


# ---------------------------------------------------------------------------
# Field-level check
# ---------------------------------------------------------------------------


class CodeIssue(str, Enum):
    INVALID = "invalid"
    DUPLICATE = "duplicate"


class CodeCheck(BaseModel):
    """Outcome of checking an entered code against format and uniqueness."""

    code: str
    valid: bool
    unique: bool
    issue: CodeIssue | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.issue is None


def check_code(
    code: str,
    existing_codes: Iterable[str] = (),
    validator: Callable[[str], bool] = is_valid_unique_code,
) -> CodeCheck:
    """Format *code*, then report whether it is well-formed and unused.

    A malformed code is reported as ``invalid`` even if it also collides;
    the user has to fix the format first.
    """
    formatted = format_code(code)
    valid = validator(formatted)
    unique = is_unique_among(formatted, existing_codes)

    if not valid:
        return CodeCheck(
            code=formatted,
            valid=False,
            unique=unique,
            issue=CodeIssue.INVALID,
            message=f"Code {formatted!r} has an invalid format",
        )
    if not unique:
        return CodeCheck(
            code=formatted,
            valid=True,
            unique=False,
            issue=CodeIssue.DUPLICATE,
            message=f"Code {formatted!r} is already in use",
        )
    return CodeCheck(code=formatted, valid=True, unique=True)
