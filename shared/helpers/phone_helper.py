import re

SUBSCRIBER_DIGITS = 9

NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: str | None) -> str | None:
    """Reduce a phone number to its national subscriber part.

    "0722 123 456", "+254722123456" and "722123456" all become "722123456".
    """
    if phone is None:
        return None
    digits = NON_DIGITS.sub("", phone)
    if not digits:
        return None
    return digits[-SUBSCRIBER_DIGITS:]


def same_phone(a: str | None, b: str | None) -> bool:
    na, nb = normalize_phone(a), normalize_phone(b)
    return na is not None and na == nb
