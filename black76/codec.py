"""
codec.py - Wire format of the Black-76 precompile

Request (61 bytes, big-endian unsigned, optionally preceded by a 4-byte selector):

    [0, 4)    time to expiry in seconds
    [4, 12)   discount factor
    [12, 28)  volatility
    [28, 44)  forward price
    [44, 60)  strike price
    [60, 61)  exponent

Response (96 bytes): call [0, 32), put [32, 64), delta [64, 96), each a
big-endian unsigned word at the caller's exponent.
"""

import logging
from typing import Optional

from .core import (
    INPUT_FIELDS,
    INPUT_LENGTH,
    SELECTOR_LENGTH,
    WORD_LENGTH,
    InvalidInputLength,
    OptionQuote,
    PricingResult,
)

logger = logging.getLogger(__name__)


def strip_selector(data: bytes) -> bytes:
    """
    Drop the 4-byte selector prefix if one is present.

    Anything longer than 61 bytes is taken to carry a prefix; what remains
    (or the original input) must be exactly 61 bytes.

    Raises:
        InvalidInputLength: If the payload is not 61 bytes.
    """
    payload = data[SELECTOR_LENGTH:] if len(data) > INPUT_LENGTH else data
    if len(payload) != INPUT_LENGTH:
        logger.warning("rejected request of %d bytes", len(data))
        raise InvalidInputLength(
            f"expected {INPUT_LENGTH} bytes or a {SELECTOR_LENGTH}-byte selector plus "
            f"{INPUT_LENGTH} bytes, got {len(data)}"
        )
    return payload


def decode_quote(data: bytes) -> OptionQuote:
    """Parse a request into an OptionQuote. No validation beyond length."""
    payload = strip_selector(bytes(data))
    values = {
        name: int.from_bytes(payload[start:end], "big")
        for name, start, end in INPUT_FIELDS
    }
    return OptionQuote(**values)


def encode_quote(quote: OptionQuote, selector: Optional[bytes] = None) -> bytes:
    """
    Build a request from a quote (inverse of decode_quote).

    Raises:
        ValueError: If a field does not fit its byte width or the selector is not 4 bytes.
    """
    parts = []
    if selector is not None:
        if len(selector) != SELECTOR_LENGTH:
            raise ValueError(f"selector must be {SELECTOR_LENGTH} bytes, got {len(selector)}")
        parts.append(bytes(selector))
    for name, start, end in INPUT_FIELDS:
        value = getattr(quote, name)
        width = end - start
        if value.bit_length() > 8 * width:
            raise ValueError(f"{name}={value} does not fit in {width} bytes")
        parts.append(value.to_bytes(width, "big"))
    return b"".join(parts)


def encode_word(value: int) -> bytes:
    """
    Encode one magnitude as a 32-byte big-endian word.

    A value outside [0, 2**256) means the scale discipline upstream was
    broken; it is never truncated.

    Raises:
        OverflowError: If the value cannot be represented in one word.
    """
    if value < 0 or value.bit_length() > 8 * WORD_LENGTH:
        raise OverflowError(f"value {value} does not fit in a {WORD_LENGTH}-byte word")
    return value.to_bytes(WORD_LENGTH, "big")


def encode_result(result: PricingResult) -> bytes:
    """Pack call, put and delta into the 96-byte response."""
    return encode_word(result.call) + encode_word(result.put) + encode_word(result.delta)


def decode_result(data: bytes, exponent: int) -> PricingResult:
    """Unpack a 96-byte response; the exponent is not carried on the wire."""
    if len(data) != 3 * WORD_LENGTH:
        raise ValueError(f"expected {3 * WORD_LENGTH} bytes, got {len(data)}")
    call, put, delta = (
        int.from_bytes(data[i:i + WORD_LENGTH], "big")
        for i in range(0, 3 * WORD_LENGTH, WORD_LENGTH)
    )
    return PricingResult(call, put, delta, exponent)
