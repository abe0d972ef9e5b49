"""
Field name normalization.

PDF field names of the Wohngeld form contain German umlauts, and depending on
how a template was produced those umlauts arrive intact, decomposed, or as
UTF-8 bytes that were decoded as Latin-1 ("StaatsangehÃ¶rigkeit"). Both the
classifier and the binding engine compare names through `normalize` so all
variants collapse to the same ASCII key.
"""

from __future__ import annotations

import re
import unicodedata

# UTF-8 umlauts decoded as cp1252 or as Latin-1
_MOJIBAKE = (
    ("Ã¤", "ä"),
    ("Ã¶", "ö"),
    ("Ã¼", "ü"),
    ("ÃŸ", "ß"),
    ("Ã\x9f", "ß"),
    ("Ã„", "Ä"),
    ("Ã\x84", "Ä"),
    ("Ã–", "Ö"),
    ("Ã\x96", "Ö"),
    ("Ãœ", "Ü"),
    ("Ã\x9c", "Ü"),
)

_DIGRAPHS = (
    ("ä", "ae"),
    ("ö", "oe"),
    ("ü", "ue"),
    ("ß", "ss"),
)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def fold(name: str) -> str:
    """Lowercase `name` and replace umlauts by digraphs, keeping delimiters."""
    if not name:
        return ""
    text = str(name)
    for broken, fixed in _MOJIBAKE:
        text = text.replace(broken, fixed)
    text = unicodedata.normalize("NFC", text).lower()
    for umlaut, digraph in _DIGRAPHS:
        text = text.replace(umlaut, digraph)
    return text


def normalize(name: str) -> str:
    """
    Canonical comparison key for a field name or keyword.

    >>> normalize("MZ1.3-ET_PersAngStaatsangehörigkeit")
    'mz13etpersangstaatsangehoerigkeit'
    """
    return _NON_ALNUM.sub("", fold(name))
