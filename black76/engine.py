"""
engine.py - Fixed-point Black-76 call, put and delta

Every quantity is an integer magnitude on the call's working scale S
(S = 10**exponent). A product of two scaled values is floor-divided by S
to stay on scale. Real numbers appear only at the two transcendental
functions, reached through a Numerics backend.

    τ        = seconds · S / 31_536_000
    σ√τ      = σ · isqrt(τ · S) / S
    F_D, K_D = F · D / S, K · D / S
    m        = K · S / F
    d1       = (σ²τ/2 − ln m) · S / σ√τ
    d2       = d1 − σ√τ
    c        = max(0, Φ(d1) − m · Φ(d2) / S)     standardised call
    p        = c + m − S if c + m ≥ S else 0     standardised put
    call     = min(c · F_D / S, F_D)
    put      = min(p · F_D / S, K_D)
    delta    = Φ(d1) · D / S
"""

import logging
import math
from typing import Optional, Tuple

from .config import DEFAULT_CONFIG, PrecompileConfig
from .core import (
    DEFAULT_EXPONENT,
    DEFAULT_GUARD_DIGITS,
    MAX_TOTAL_VOLATILITY,
    SECONDS_PER_YEAR,
    OptionQuote,
    PricingResult,
    WorkingScale,
)
from .numerics import Numerics, numerics_for
from .scaling import denormalize_result, normalize_quote, plan_for

logger = logging.getLogger(__name__)


def annualise(seconds: int, scale: WorkingScale) -> int:
    """Seconds -> years on the working scale."""
    return seconds * scale.unit // SECONDS_PER_YEAR


def total_volatility(volatility: int, annualised: int, scale: WorkingScale) -> int:
    """σ·√τ on the working scale, with an exact integer square root."""
    return volatility * math.isqrt(annualised * scale.unit) // scale.unit


def standard_call(
    moneyness: int,
    total_vol: int,
    scale: WorkingScale,
    numerics: Numerics,
) -> Tuple[int, int]:
    """
    Call price and delta for a unit forward and strike equal to moneyness.

    Returns:
        (standardised call price, standardised delta), both on the working scale.
    """
    unit = scale.unit
    if total_vol >= MAX_TOTAL_VOLATILITY * unit:
        return unit, unit

    # One smallest unit stands in for zero; only guards the divisions.
    vol = total_vol or 1
    money = moneyness or 1

    k = scale.from_real(numerics.log(scale.to_real(money), scale.context))
    half_variance = (vol // 2) * vol // unit
    d1 = (half_variance - k) * unit // vol
    d2 = d1 - vol

    cdf_d1 = scale.from_real(numerics.normal_cdf(scale.to_real(d1), scale.context))
    cdf_d2 = scale.from_real(numerics.normal_cdf(scale.to_real(d2), scale.context))
    d2_term = money * cdf_d2 // unit

    logger.debug("standard_call k=%d d1=%d d2=%d N(d1)=%d N(d2)=%d", k, d1, d2, cdf_d1, cdf_d2)
    return max(0, cdf_d1 - d2_term), cdf_d1


def price_at_scale(quote: OptionQuote, scale: WorkingScale, numerics: Numerics) -> PricingResult:
    """Price a quote whose magnitudes are already on the working scale."""
    unit = scale.unit
    total_vol = total_volatility(quote.volatility, annualise(quote.expiry_seconds, scale), scale)
    forward_discounted = quote.forward * quote.discount // unit

    if quote.strike == 0:
        logger.debug("zero strike: call is the discounted forward")
        return PricingResult(forward_discounted, 0, quote.discount, scale.exponent)

    strike_discounted = quote.strike * quote.discount // unit
    if quote.forward == 0:
        logger.debug("zero forward: put is the discounted strike")
        return PricingResult(0, strike_discounted, 0, scale.exponent)

    moneyness = quote.strike * unit // quote.forward
    std_call, std_delta = standard_call(moneyness, total_vol, scale, numerics)

    # Parity on the standardised scale is bounded below by zero.
    std_put = std_call + moneyness
    std_put = std_put - unit if std_put >= unit else 0

    call = std_call * forward_discounted // unit
    put = std_put * forward_discounted // unit
    delta = std_delta * quote.discount // unit

    return PricingResult(
        call=min(call, forward_discounted),
        put=min(put, strike_discounted),
        delta=delta,
        exponent=scale.exponent,
    )


class Black76Engine:
    """
    In-process pricing capability.

    Holds only immutable settings and a stateless numerics backend, so one
    engine may serve concurrent calls at different exponents.
    """

    def __init__(
        self,
        numerics: Optional[Numerics] = None,
        default_exponent: int = DEFAULT_EXPONENT,
        guard_digits: int = DEFAULT_GUARD_DIGITS,
    ):
        self.numerics = numerics if numerics is not None else numerics_for("decimal")
        self.default_exponent = default_exponent
        self.guard_digits = guard_digits

    @classmethod
    def from_config(cls, config: PrecompileConfig = DEFAULT_CONFIG) -> "Black76Engine":
        return cls(numerics_for(config.numerics), config.default_exponent, config.guard_digits)

    def price(self, quote: OptionQuote) -> PricingResult:
        """Price a quote and return results at the quote's own exponent."""
        plan = plan_for(quote.exponent, self.default_exponent, self.guard_digits)
        working = normalize_quote(quote, plan)
        result = price_at_scale(working, plan.scale, self.numerics)
        return denormalize_result(result, plan)

    def __repr__(self):
        return f"Black76Engine({self.numerics!r}, default_exponent={self.default_exponent})"


def price_quote(quote: OptionQuote, config: Optional[PrecompileConfig] = None) -> PricingResult:
    """Functional form of Black76Engine.price."""
    return Black76Engine.from_config(config or DEFAULT_CONFIG).price(quote)
