from __future__ import annotations

import re

from ..core import constants

_NON_DIGITS = re.compile(r"\D")


def mask_national_id(national_id: str) -> str:
    """Show only the last four digits: ``XXXX XXXX 1234``."""
    digits = _NON_DIGITS.sub("", national_id or "")
    if len(digits) != constants.NATIONAL_ID_DIGITS:
        return national_id
    return f"XXXX XXXX {digits[-4:]}"


def format_phone(phone: str) -> str:
    digits = _NON_DIGITS.sub("", phone or "")
    if len(digits) != constants.PHONE_DIGITS:
        return phone
    return f"+91 {digits[:5]} {digits[5:]}"
