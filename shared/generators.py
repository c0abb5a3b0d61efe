"""
Short code generators.

Codes are drawn from the base58 alphabet, which leaves out characters that
are easy to misread (``0``/``O`` and ``I``/``l``). Every character is picked
with ``secrets.choice`` so codes cannot be predicted from earlier ones.
"""

from __future__ import annotations

import secrets

from errors import InvalidArgumentError

ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_ALPHABET_SET = frozenset(ALPHABET)

DEFAULT_CODE_LENGTH = 6
MIN_CODE_LENGTH = 1
MAX_CODE_LENGTH = 20


def _check_length(length: int) -> None:
    if (
        isinstance(length, bool)
        or not isinstance(length, int)
        or not MIN_CODE_LENGTH <= length <= MAX_CODE_LENGTH
    ):
        raise InvalidArgumentError(
            f"Length must be between {MIN_CODE_LENGTH} and {MAX_CODE_LENGTH} characters",
            field="length",
            details={"min": MIN_CODE_LENGTH, "max": MAX_CODE_LENGTH},
        )


def generate_short_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Generate a random short code.

    Args:
        length: Number of characters, 1 to 20 inclusive (default 6).

    Returns:
        Random string over ``ALPHABET``.

    Raises:
        InvalidArgumentError: if *length* is out of range.
    """
    _check_length(length)
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def generate_short_codes(count: int, length: int = DEFAULT_CODE_LENGTH) -> list[str]:
    """Generate *count* distinct short codes of the same length.

    Keeps drawing until enough distinct codes are collected, so *count* may
    not exceed the number of codes that exist at *length*.
    """
    _check_length(length)
    if count < 0 or count > len(ALPHABET) ** length:
        raise InvalidArgumentError(
            f"Cannot generate {count} distinct codes of length {length}",
            field="count",
        )

    codes: set[str] = set()
    while len(codes) < count:
        codes.add(generate_short_code(length))
    return list(codes)


def is_valid_short_code(short_code: str) -> bool:
    """Return True if *short_code* is non-empty and uses only ``ALPHABET``."""
    return bool(short_code) and all(ch in _ALPHABET_SET for ch in short_code)


def sanitize_short_code(custom_code: str) -> str:
    """Strip every character that is not part of ``ALPHABET``."""
    if not custom_code:
        return ""
    return "".join(ch for ch in custom_code if ch in _ALPHABET_SET)


def generate_patterned_short_code(pattern: str, placeholder: str = "X") -> str:
    """Generate a code following *pattern*.

    Each *placeholder* character becomes a random alphabet character; every
    other character is copied as is, e.g. ``"go-XXXX"`` -> ``"go-7fQa"``.
    """
    return "".join(
        secrets.choice(ALPHABET) if ch == placeholder else ch for ch in pattern
    )
