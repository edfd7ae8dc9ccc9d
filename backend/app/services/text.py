"""
East Village Everything — Text Normalization
==============================================

What:  The storage rules for place fields, applied identically on create
       and update.

Rules:
    Phone:     strip every non-digit; keep the result only if exactly
               10 digits remain, otherwise store NULL.
                   "(212) 555-1234" → "2125551234"
                   "555-1234"       → None
    Line text: specials and notes store each newline ("\\n" or "\\r\\n") as
               "<br/>". Edit forms reverse this with from_html_breaks().
    Optional:  empty strings are stored as NULL.
"""

import re
from typing import Optional

_NON_DIGITS = re.compile(r"[^0-9]")
_NEWLINE = re.compile(r"\r?\n")
_HTML_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)

LINE_BREAK = "<br/>"


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    if not phone:
        return None
    digits = _NON_DIGITS.sub("", phone)
    return digits if len(digits) == 10 else None


def to_html_breaks(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return _NEWLINE.sub(LINE_BREAK, text)


def from_html_breaks(text: Optional[str]) -> str:
    """Reverse of to_html_breaks for edit forms; NULL becomes ''."""
    if not text:
        return ""
    return _HTML_BREAK.sub("\n", text)


def empty_to_none(value: Optional[str]) -> Optional[str]:
    return value or None
