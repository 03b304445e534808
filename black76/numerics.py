"""
numerics.py - Natural logarithm and standard normal CDF

The engine needs exactly two transcendental functions. Both are reached
through a Numerics backend so a deployment can choose how they are
evaluated:

- DecimalNumerics: pure software Decimal arithmetic in the call's own
  context. Bit-identical on every platform; this is the default.
- FloatNumerics: converts to binary floating point and evaluates with
  math.log and scipy's erf. Kept for comparison with float pricing
  and for diagnostics.

Normal CDF series (all terms share the sign of x, so no alternating sum):

    Φ(x) = 1/2 + φ(x) * Σ_{n≥0} x^(2n+1) / (1·3·5···(2n+1))

Past |x| ≥ isqrt(4.62·prec) + 2 the density is below 10^-prec and Φ is
returned as exactly 0 or 1.
"""

import math
from decimal import Context, Decimal, localcontext
from functools import lru_cache
from typing import Dict, Protocol, runtime_checkable

from .reference import normal_cdf as float_normal_cdf


# Extra digits used inside the series and for π.
SERIES_GUARD_DIGITS = 10

ZERO = Decimal(0)
HALF = Decimal("0.5")
ONE = Decimal(1)


@runtime_checkable
class Numerics(Protocol):
    """
    Transcendental functions used by the engine.

    Implementations must be stateless: one instance is shared by every call.
    """
    name: str

    def log(self, x: Decimal, context: Context) -> Decimal:
        """Natural logarithm of a positive x."""
        ...

    def normal_cdf(self, x: Decimal, context: Context) -> Decimal:
        """Standard normal CDF, a value in [0, 1]."""
        ...


# ============================================================================
# DETERMINISTIC DECIMAL BACKEND
# ============================================================================

@lru_cache(maxsize=64)
def _pi(prec: int) -> Decimal:
    """π to prec digits by the 3 + 3/24 + ... series."""
    with localcontext(Context(prec=prec + 2)):
        three = Decimal(3)
        last, t, s, n, na, d, da = 0, three, three, 1, 0, 0, 24
        while s != last:
            last = s
            n, na = n + na, na + 8
            d, da = d + da, da + 32
            t = (t * n) / d
            s += t
    with localcontext(Context(prec=prec)):
        return +s


@lru_cache(maxsize=64)
def _inv_sqrt_two_pi(prec: int) -> Decimal:
    with localcontext(Context(prec=prec)):
        return ONE / (2 * _pi(prec)).sqrt()


def tail_cutoff(prec: int) -> int:
    """|x| beyond which φ(x) < 10^-prec (4.62 > 2·ln 10)."""
    return math.isqrt(prec * 462 // 100 + 1) + 2


def decimal_normal_cdf(x: Decimal, context: Context) -> Decimal:
    """Φ(x) in the given context; see module docstring for the series."""
    if x.is_zero():
        return HALF
    cutoff = tail_cutoff(context.prec)
    if x <= -cutoff:
        return ZERO
    if x >= cutoff:
        return ONE

    with localcontext(context) as ctx:
        ctx.prec += SERIES_GUARD_DIGITS
        x = +x
        x2 = x * x
        term = total = x
        n = 1
        while True:
            n += 2
            term = term * x2 / n
            updated = total + term
            if updated == total:
                break
            total = updated
        density = (-x2 / 2).exp() * _inv_sqrt_two_pi(ctx.prec)
        result = HALF + density * total

    with localcontext(context):
        return min(ONE, max(ZERO, +result))


class DecimalNumerics:
    """Platform-independent log and normal CDF on Decimal."""

    name = "decimal"

    def log(self, x: Decimal, context: Context) -> Decimal:
        return context.ln(x)

    def normal_cdf(self, x: Decimal, context: Context) -> Decimal:
        return decimal_normal_cdf(x, context)

    def __repr__(self):
        return "DecimalNumerics()"


# ============================================================================
# FLOAT REFERENCE BACKEND
# ============================================================================

class FloatNumerics:
    """
    Float round-trip: Decimal -> float64 -> transcendental -> Decimal.

    Results depend on the platform's libm and are not guaranteed
    bit-identical across hosts.
    """

    name = "float"

    def log(self, x: Decimal, context: Context) -> Decimal:
        return Decimal(math.log(float(x)))

    def normal_cdf(self, x: Decimal, context: Context) -> Decimal:
        return Decimal(float(float_normal_cdf(float(x))))

    def __repr__(self):
        return "FloatNumerics()"


NUMERICS: Dict[str, Numerics] = {
    DecimalNumerics.name: DecimalNumerics(),
    FloatNumerics.name: FloatNumerics(),
}


def numerics_for(name: str) -> Numerics:
    """Look up a shared backend by name."""
    try:
        return NUMERICS[name]
    except KeyError:
        raise ValueError(f"Unknown numerics backend {name!r}; expected one of {sorted(NUMERICS)}") from None
