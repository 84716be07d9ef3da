"""
CPF (national tax identifier) validation.

All helpers are pure; the workflow calls `validate` on every keystroke and
before every remote action.
"""
import re

CPF_LENGTH = 11

_NON_DIGITS = re.compile(r"\D+")


def only_digits(raw) -> str:
    return _NON_DIGITS.sub("", raw or "")


def _check_digit(digits: str, count: int) -> int:
    # digit i (1-indexed) is weighted by (count + 2 - i): 10..2 for the first, 11..2 for the second
    total = sum(int(d) * (count + 1 - i) for i, d in enumerate(digits[:count]))
    remainder = (total * 10) % 11
    return 0 if remainder in (10, 11) else remainder


def validate(raw) -> bool:
    """
    Strict predicate: True only for 11 digits (separators ignored), not all the
    same digit, with both check digits matching.
    """
    s = only_digits(raw)
    if len(s) != CPF_LENGTH or len(set(s)) == 1:
        return False
    if _check_digit(s, 9) != int(s[9]):
        return False
    return _check_digit(s, 10) == int(s[10])


def normalize(raw) -> str:
    """Digits-only form used on the wire and in the session store."""
    return only_digits(raw)


def show_invalid_hint(raw) -> bool:
    # Only flag once the user has typed something
    return len(raw or "") > 0 and not validate(raw)


def format_identifier(raw) -> str:
    """000.000.000-00 rendering for the snapshot; input that is not 11 digits comes back untouched."""
    s = only_digits(raw)
    if len(s) != CPF_LENGTH:
        return raw or ""
    return f"{s[:3]}.{s[3:6]}.{s[6:9]}-{s[9:]}"
