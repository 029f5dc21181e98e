"""
Contact Masking

Hints shown to the employee about where a passcode was sent.
"""

import re

_PHONE_PATTERN = re.compile(r"^(\+\d{1,3})\s*(.*)$")


def mask_email(email: str) -> str:
    """j***@example.com - first character of the local part, real domain."""
    local, sep, domain = email.partition("@")
    if not sep or not local:
        return "***"
    return f"{local[0]}***@{domain}"


def mask_phone(phone: str) -> str:
    """+91 98***43210 - country code, first two digits, last five digits."""
    match = _PHONE_PATTERN.match(phone.strip())
    if match:
        country_code, national = match.group(1), match.group(2)
    else:
        country_code, national = "", phone

    digits = re.sub(r"\D", "", national)
    if len(digits) <= 7:
        # Too short to keep both ends visible
        visible = digits[:2]
        masked = f"{visible}***"
    else:
        masked = f"{digits[:2]}***{digits[-5:]}"

    return f"{country_code} {masked}" if country_code else masked
