"""
Free-text normalization for organization names.

"Univ. Tecnológica del Perú " → "univ tecnologica del peru"
"""
import re
import unicodedata
from typing import Optional

_NON_ALNUM = re.compile(r'[^a-z0-9\s]')
_WHITESPACE = re.compile(r'\s+')


def strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize('NFD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: Optional[str]) -> str:
    """Lowercase, strip accents, replace punctuation with spaces, collapse whitespace.

    Never raises; None or empty input yields ''.
    """
    if not text:
        return ''
    value = strip_diacritics(str(text).strip().lower())
    value = _NON_ALNUM.sub(' ', value)
    return _WHITESPACE.sub(' ', value).strip()
