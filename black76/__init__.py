"""
black76 - Deterministic fixed-point Black-76 pricing

Prices European options on a forward (call, put, call delta) entirely in
integer fixed-point arithmetic at a caller-chosen decimal exponent, so that
every participant in a shared validation environment derives the same bytes
from the same request.

Usage:
    from black76 import Black76Precompile, OptionQuote, encode_quote

    quote = OptionQuote(
        expiry_seconds=31_536_000,
        discount=10**18,
        volatility=2 * 10**17,
        forward=100 * 10**18,
        strike=100 * 10**18,
        exponent=18,
    )
    precompile = Black76Precompile()
    output = precompile.run(encode_quote(quote))   # 96 bytes: call | put | delta
"""

# Core types
from .core import (
    FixedPoint,
    OptionQuote,
    PricingResult,
    WorkingScale,
    RunStatus,
    RunResult,
    Black76Error,
    InvalidInputLength,
    UnknownSelector,
    InternalFault,
    DEFAULT_EXPONENT,
    SECONDS_PER_YEAR,
    BLACK76_GAS,
    INPUT_LENGTH,
    OUTPUT_LENGTH,
    SELECTOR_PRICES_DELTA,
    SELECTOR_PRICES,
    SELECTOR_DELTA,
)

# Configuration
from .config import PrecompileConfig, DEFAULT_CONFIG

# Wire format
from .codec import (
    strip_selector,
    decode_quote,
    encode_quote,
    encode_word,
    encode_result,
    decode_result,
)

# Precision normalisation
from .scaling import ScalingPlan, plan_for, normalize_quote, denormalize_result

# Numerics
from .numerics import Numerics, DecimalNumerics, FloatNumerics, numerics_for

# Engine
from .engine import (
    Black76Engine,
    annualise,
    total_volatility,
    standard_call,
    price_at_scale,
    price_quote,
)

# Call boundary
from .precompile import Black76Precompile

__all__ = [
    # Core
    "FixedPoint",
    "OptionQuote",
    "PricingResult",
    "WorkingScale",
    "RunStatus",
    "RunResult",
    "Black76Error",
    "InvalidInputLength",
    "UnknownSelector",
    "InternalFault",
    "DEFAULT_EXPONENT",
    "SECONDS_PER_YEAR",
    "BLACK76_GAS",
    "INPUT_LENGTH",
    "OUTPUT_LENGTH",
    "SELECTOR_PRICES_DELTA",
    "SELECTOR_PRICES",
    "SELECTOR_DELTA",
    # Configuration
    "PrecompileConfig",
    "DEFAULT_CONFIG",
    # Wire format
    "strip_selector",
    "decode_quote",
    "encode_quote",
    "encode_word",
    "encode_result",
    "decode_result",
    # Precision normalisation
    "ScalingPlan",
    "plan_for",
    "normalize_quote",
    "denormalize_result",
    # Numerics
    "Numerics",
    "DecimalNumerics",
    "FloatNumerics",
    "numerics_for",
    # Engine
    "Black76Engine",
    "annualise",
    "total_volatility",
    "standard_call",
    "price_at_scale",
    "price_quote",
    # Call boundary
    "Black76Precompile",
]
