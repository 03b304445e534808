"""
reference.py - Floating-point Black-76 formulas

Closed-form European Black-76 on a forward, with a discount factor and
time to expiry in seconds (365-day year). Used to validate the fixed-point
engine; the deterministic pricing path never calls into this module except
through FloatNumerics.

Provides:
- Normal distribution functions (CDF, PDF)
- d1, d2
- Call and put prices
- Call and put delta
- Intrinsic value at or after expiry

All functions accept scalars or numpy arrays.
"""

import math
import numpy as np
from typing import Union
from scipy.special import erf as scipy_erf

from .core import SECONDS_PER_YEAR


Numeric = Union[float, np.ndarray]

SQRT_2 = math.sqrt(2.0)
INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


# ============================================================================
# NORMAL DISTRIBUTION FUNCTIONS
# ============================================================================

def normal_cdf(x: Numeric) -> Numeric:
    """Φ(x) through scipy's erf; float64 accuracy, weak far in the left tail."""
    return 0.5 * (1.0 + scipy_erf(np.asarray(x) / SQRT_2))


def normal_pdf(x: Numeric) -> Numeric:
    """φ(x) = exp(-x²/2) / √(2π)."""
    x = np.asarray(x, dtype=float)
    return INV_SQRT_2PI * np.exp(-0.5 * x * x)


# ============================================================================
# D1 AND D2
# ============================================================================

def _validate_inputs(f: Numeric, k: Numeric, seconds: Numeric, v: Numeric) -> None:
    """Reject inputs for which the closed form divides by zero or takes log of zero."""
    for name, value in (("forward", f), ("strike", k), ("seconds to expiry", seconds), ("volatility", v)):
        arr = np.asarray(value, dtype=float)
        if not np.all(np.isfinite(arr)) or np.any(arr <= 0):
            raise ValueError(f"{name} must be positive and finite")


def d1(f: Numeric, k: Numeric, seconds: Numeric, v: Numeric) -> Numeric:
    """
    d1 = (ln(F/K) + 0.5*σ²*τ) / (σ*√τ)

    Raises:
        ValueError: If any input is non-positive or not finite
    """
    _validate_inputs(f, k, seconds, v)
    tau = np.asarray(seconds) / SECONDS_PER_YEAR
    return (np.log(f / k) + 0.5 * v * v * tau) / (v * np.sqrt(tau))


def d2(f: Numeric, k: Numeric, seconds: Numeric, v: Numeric) -> Numeric:
    """
    d2 = d1 - σ*√τ

    Raises:
        ValueError: If any input is non-positive or not finite
    """
    tau = np.asarray(seconds) / SECONDS_PER_YEAR
    return d1(f, k, seconds, v) - v * np.sqrt(tau)


# ============================================================================
# PRICES
# ============================================================================

def price_expired(f: Numeric, k: Numeric, is_call: bool = True, discount: Numeric = 1.0) -> Numeric:
    """Discounted intrinsic value, used when no time is left."""
    payoff = np.maximum(f - k, 0.0) if is_call else np.maximum(k - f, 0.0)
    return discount * payoff


def _split_expiry(seconds: Numeric):
    """Mask of expired entries, and seconds with those entries replaced by a placeholder year."""
    seconds = np.asarray(seconds, dtype=float)
    expired = seconds <= 0
    return expired, np.where(expired, SECONDS_PER_YEAR, seconds)


def call(f: Numeric, k: Numeric, seconds: Numeric, v: Numeric, discount: Numeric = 1.0) -> Numeric:
    """
    Black-76 call price; intrinsic value where no time is left.

    C = D * (F*N(d1) - K*N(d2))
    """
    expired, live = _split_expiry(seconds)
    intrinsic = price_expired(f, k, True, discount)
    if np.all(expired):
        return intrinsic
    d1_val = d1(f, k, live, v)
    d2_val = d2(f, k, live, v)
    price = discount * (f * normal_cdf(d1_val) - k * normal_cdf(d2_val))
    return np.where(expired, intrinsic, price)[()]


def put(f: Numeric, k: Numeric, seconds: Numeric, v: Numeric, discount: Numeric = 1.0) -> Numeric:
    """
    Black-76 put price; intrinsic value where no time is left.

    P = D * (K*N(-d2) - F*N(-d1))
    """
    expired, live = _split_expiry(seconds)
    intrinsic = price_expired(f, k, False, discount)
    if np.all(expired):
        return intrinsic
    d1_val = d1(f, k, live, v)
    d2_val = d2(f, k, live, v)
    price = discount * (k * normal_cdf(-d2_val) - f * normal_cdf(-d1_val))
    return np.where(expired, intrinsic, price)[()]


# ============================================================================
# DELTA
# ============================================================================

def call_delta(f: Numeric, k: Numeric, seconds: Numeric, v: Numeric, discount: Numeric = 1.0) -> Numeric:
    """Call delta: D * N(d1). Zero once expired."""
    expired, live = _split_expiry(seconds)
    if np.all(expired):
        return 0.0 * np.asarray(f)
    return np.where(expired, 0.0, discount * normal_cdf(d1(f, k, live, v)))[()]


def put_delta(f: Numeric, k: Numeric, seconds: Numeric, v: Numeric, discount: Numeric = 1.0) -> Numeric:
    """Put delta: D * (N(d1) - 1). Zero once expired."""
    expired, live = _split_expiry(seconds)
    if np.all(expired):
        return 0.0 * np.asarray(f)
    return np.where(expired, 0.0, discount * (normal_cdf(d1(f, k, live, v)) - 1.0))[()]
