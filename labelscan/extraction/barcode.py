"""Pallet label barcode patterns and normalization.

Labels carry either a ``PRM`` or a bare ``P`` prefix followed by two
six-digit groups. OCR frequently drops the hyphens, so matches are
normalized back to the canonical ``PRM-DDDDDD-DDDDDD`` /
``P-DDDDDD-DDDDDD`` form.
"""

import re

# Digits are ASCII only; re.ASCII keeps \d from matching other scripts.
_FLAGS = re.IGNORECASE | re.ASCII

# Priority order: hyphenated forms before unhyphenated, PRM before P.
BARCODE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("prm_hyphenated", re.compile(r"PRM-\d{6}-\d{6}", _FLAGS)),
    ("p_hyphenated", re.compile(r"P-\d{6}-\d{6}", _FLAGS)),
    ("prm_compact", re.compile(r"PRM\d{12}", _FLAGS)),
    ("p_compact", re.compile(r"P\d{12}", _FLAGS)),
]

_CANONICAL_RE = re.compile(r"(?:PRM|P)-\d{6}-\d{6}", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_barcode(raw: str) -> str:
    """Convert a matched barcode into its canonical hyphenated form.

    Args:
        raw: Barcode text as matched in the OCR output.

    Returns:
        The barcode with whitespace removed, the prefix upper-cased and
        hyphens inserted after the prefix and the first digit group.
    """
    barcode = _WHITESPACE_RE.sub("", raw).upper()
    if "-" in barcode:
        return barcode

    if barcode.startswith("PRM"):
        return f"PRM-{barcode[3:9]}-{barcode[9:]}"
    if barcode.startswith("P"):
        return f"P-{barcode[1:7]}-{barcode[7:]}"
    return barcode


def is_canonical_barcode(value: str) -> bool:
    """Return ``True`` if ``value`` is in canonical barcode form."""
    return bool(_CANONICAL_RE.fullmatch(value))
