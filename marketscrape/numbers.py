"""Locale-aware text to number conversion.

Marketplace pages mix Indonesian formatting (``Rp1.234.567``, ``4,9``) with
English formatting (``1,234.5``, ``4.9``) depending on the component, so every
numeric field goes through these helpers instead of ``int()``/``float()``.
"""

import re
from typing import Optional

__all__ = [
    "extract_integer",
    "extract_float",
    "extract_abbreviated_count",
]

# Currency prefix, grouping separators and the parentheses around counts like "(1.234)"
_INTEGER_NOISE_RE = re.compile(r"Rp|[().,]")
_DIGITS_RE = re.compile(r"\d+")
_DECIMAL_RE = re.compile(r"\d[\d.,]*")

# "rb" (ribu, thousand), "jt" (juta, million), plus English "k"/"m"
_ABBREVIATED_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*(rb|ribu|jt|juta|k|m)\b", re.IGNORECASE)
_MULTIPLIERS = {
    "rb": 1_000,
    "ribu": 1_000,
    "k": 1_000,
    "jt": 1_000_000,
    "juta": 1_000_000,
    "m": 1_000_000,
}


def extract_integer(text: Optional[str]) -> Optional[int]:
    """Return the first run of digits after stripping currency and punctuation.

    >>> extract_integer("Rp1.234.567")
    1234567
    >>> extract_integer("(1.024)")
    1024
    """
    if not text:
        return None
    cleaned = _INTEGER_NOISE_RE.sub("", text).strip()
    match = _DIGITS_RE.search(cleaned)
    if not match:
        return None
    return int(match.group(0))


def _canonicalize_decimal(raw: str) -> str:
    """Turn a matched numeric string into something ``float()`` accepts."""
    has_dot = "." in raw
    has_comma = "," in raw

    if has_dot and has_comma:
        # Whichever separator comes last is the decimal mark
        if raw.rfind(",") > raw.rfind("."):
            return raw.replace(".", "").replace(",", ".")
        return raw.replace(",", "")

    separator = "," if has_comma else "." if has_dot else None
    if separator is None:
        return raw

    parts = raw.split(separator)
    if len(parts) > 2:
        # Repeated separator can only be digit grouping
        return "".join(parts)

    head, tail = parts
    if len(tail) == 3 and head not in ("", "0"):
        # "1.234" / "1,234": grouping, not a decimal
        return head + tail
    return f"{head}.{tail}"


def extract_float(text: Optional[str]) -> Optional[float]:
    """Match the first decimal-looking substring and parse it as a float.

    Handles both ``1.234,5`` and ``1,234.5`` conventions as well as bare
    ``4,9`` / ``4.9`` ratings.
    """
    if not text:
        return None
    match = _DECIMAL_RE.search(text)
    if not match:
        return None

    raw = match.group(0).rstrip(".,")
    try:
        return float(_canonicalize_decimal(raw))
    except ValueError:
        return None


def extract_abbreviated_count(text: Optional[str]) -> Optional[int]:
    """Parse counters such as ``Terjual 2,5 rb+`` (2500) or ``1 jt`` (1000000).

    Falls back to :func:`extract_integer` when no multiplier suffix is present.
    """
    if not text:
        return None
    match = _ABBREVIATED_RE.search(text)
    if match:
        value = extract_float(match.group(1))
        if value is not None:
            return int(round(value * _MULTIPLIERS[match.group(2).lower()]))
    return extract_integer(text)
