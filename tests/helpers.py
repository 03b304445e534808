"""
helpers.py - Request and quote builders for black76 tests

Quotes are written with human-readable decimal strings and converted to
magnitudes at the requested exponent.
"""

from decimal import Decimal

from black76 import (
    FixedPoint,
    OptionQuote,
    SECONDS_PER_YEAR,
    encode_quote,
)


def make_quote(
    forward="100",
    strike="100",
    volatility="0.2",
    discount="1",
    seconds: int = SECONDS_PER_YEAR,
    exponent: int = 18,
) -> OptionQuote:
    """Build a quote from decimal strings at the given exponent."""
    def scaled(value) -> int:
        return FixedPoint.from_decimal(Decimal(value), exponent).magnitude

    return OptionQuote(
        expiry_seconds=seconds,
        discount=scaled(discount),
        volatility=scaled(volatility),
        forward=scaled(forward),
        strike=scaled(strike),
        exponent=exponent,
    )


def make_request(selector: bytes = None, **kwargs) -> bytes:
    """Build a wire request; kwargs as for make_quote."""
    return encode_quote(make_quote(**kwargs), selector)


def as_float(magnitude: int, exponent: int = 18) -> float:
    return float(FixedPoint(magnitude, exponent).to_decimal())
