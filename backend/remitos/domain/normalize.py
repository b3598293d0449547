# backend/remitos/domain/normalize.py
"""Text normalization used as the join key between catalog and notes.

Descriptions typed by hand at the origin and descriptions stored in the
catalog differ in case, accents and spacing:

    "Auricular  Redragón "  -> "auricular redragon"
    "AURICULAR REDRAGON"    -> "auricular redragon"
"""

import re
import unicodedata
from typing import Any

_SPACES = re.compile(r"\s+")
_CODE_SHAPE = re.compile(r"^\d{6,}$")


def clean_text(value: Any) -> str:
    """str() + strip, with None mapped to the empty string."""
    if value is None:
        return ""
    return str(value).strip()


def normalize_text(value: Any) -> str:
    """Case-fold, strip diacritics and collapse whitespace."""
    text = clean_text(value)
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _SPACES.sub(" ", stripped).casefold().strip()


def looks_like_code(value: Any) -> bool:
    """True for barcode-shaped input (six or more digits, spaces ignored)."""
    return bool(_CODE_SHAPE.match(_SPACES.sub("", clean_text(value))))


def to_int(value: Any, default: int = 0) -> int:
    """Lenient integer parsing for persisted or spreadsheet data."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    m = re.match(r"^\s*([+-]?\d+)", str(value))
    return int(m.group(1)) if m else default
