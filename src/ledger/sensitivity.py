from __future__ import annotations

import re

_LONG_NUMBER = re.compile(r"\d{5,}")
_PRICE_WORD = re.compile(r"bought|sold|price|margin", re.IGNORECASE)
_DIGIT = re.compile(r"\d")


def contains_sensitive_data(text: str) -> bool:
    """
    Best-effort check for text that still looks like raw pricing data.

    Flags long digit runs and price-ish words followed (anywhere later) by a
    number. Only the first price word needs checking: it has the longest
    tail, so any digit after a later keyword also follows the first one.
    It misses prices written in words or split by separators, and it flags
    harmless text such as "margin improved in 2023"; treat it as a tripwire,
    not a guarantee.
    """
    if _LONG_NUMBER.search(text):
        return True
    keyword = _PRICE_WORD.search(text)
    return keyword is not None and _DIGIT.search(text, keyword.end()) is not None
