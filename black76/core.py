"""
Core types for the fixed-point Black-76 precompile.

This module provides the foundational data structures shared by every stage
of a pricing call:
1. Constants: wire layout, default working exponent, gas quote
2. Exceptions: Black76Error and the failure types surfaced to callers
3. Immutable data structures: FixedPoint, OptionQuote, PricingResult
4. WorkingScale: the call-local decimal scale and its Decimal context
5. RunStatus / RunResult: explicit success/failure outcome of a call

Nothing in this module holds mutable module-level state. Every scale and
Decimal context is constructed per call and passed explicitly.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, Context, ROUND_HALF_EVEN, MAX_EMAX, MIN_EMIN
from enum import Enum
from typing import Dict, Optional, Tuple


# ============================================================================
# CONSTANTS
# ============================================================================

# Canonical working exponent. Requests below it are lifted onto it,
# requests above it are priced at their own exponent.
DEFAULT_EXPONENT = 32

# Extra significant digits carried by the per-call Decimal context on top
# of the working exponent.
DEFAULT_GUARD_DIGITS = 20

# Seconds in a 365-day year.
SECONDS_PER_YEAR = 365 * 24 * 60 * 60

# Total volatility (in units of the working scale) at which the standard
# call saturates to full scale.
MAX_TOTAL_VOLATILITY = 24

# Fixed gas quote; never derived from the input.
BLACK76_GAS = 300

# Wire layout
SELECTOR_LENGTH = 4
INPUT_LENGTH = 61
WORD_LENGTH = 32
OUTPUT_LENGTH = 3 * WORD_LENGTH
MAX_EXPONENT = 255

# (field name, start offset, end offset) within the 61-byte payload.
INPUT_FIELDS: Tuple[Tuple[str, int, int], ...] = (
    ("expiry_seconds", 0, 4),
    ("discount", 4, 12),
    ("volatility", 12, 28),
    ("forward", 28, 44),
    ("strike", 44, 60),
    ("exponent", 60, 61),
)

# Function selectors of the precompile ABI.
# prices_delta(uint32,uint64,uint128,uint128,uint128,int8)(uint128,uint128,uint128)
SELECTOR_PRICES_DELTA = bytes.fromhex("5f53183d")
# prices(uint32,uint64,uint128,uint128,uint128,int8)(uint128,uint128)
SELECTOR_PRICES = bytes.fromhex("10251f08")
# delta(uint32,uint64,uint128,uint128,uint128,int8)(uint128)
SELECTOR_DELTA = bytes.fromhex("129ab31e")


# ============================================================================
# EXCEPTIONS
# ============================================================================

class Black76Error(Exception):
    """Base exception for all precompile errors."""
    pass


class InvalidInputLength(Black76Error):
    """Raised when a request is neither 61 bytes nor a 4-byte selector plus 61 bytes."""
    pass


class UnknownSelector(Black76Error):
    """Raised when a selector-routed call names a function the precompile does not expose."""
    pass


class InternalFault(Black76Error):
    """
    Raised at the call boundary when pricing fails for any reason other than
    a malformed request. The original exception is chained as __cause__.
    """
    pass


# ============================================================================
# FIXED-POINT VALUES
# ============================================================================

@dataclass(frozen=True, slots=True)
class FixedPoint:
    """
    A real number stored as an integer magnitude over 10**exponent.

    Attributes:
        magnitude: Integer numerator (unbounded).
        exponent: Decimal exponent of the implicit denominator.
    """
    magnitude: int
    exponent: int

    def __post_init__(self):
        if not isinstance(self.magnitude, int) or isinstance(self.magnitude, bool):
            raise ValueError(f"FixedPoint magnitude must be int, got {type(self.magnitude)}")
        if self.magnitude < 0:
            raise ValueError(f"FixedPoint magnitude must be non-negative, got {self.magnitude}")
        if not isinstance(self.exponent, int) or self.exponent < 0:
            raise ValueError(f"FixedPoint exponent must be a non-negative int, got {self.exponent}")

    @classmethod
    def from_decimal(cls, value, exponent: int) -> FixedPoint:
        """Truncate a Decimal (or decimal string) onto the given exponent, toward zero."""
        value = Decimal(value)
        if not value.is_finite():
            raise ValueError(f"FixedPoint value must be finite, got {value}")
        sign, digits, exp = value.as_tuple()
        coefficient = int("".join(map(str, digits)))
        shift = exp + exponent
        if shift >= 0:
            magnitude = coefficient * 10 ** shift
        else:
            magnitude = coefficient // 10 ** -shift
        return cls(-magnitude if sign else magnitude, exponent)

    def to_decimal(self) -> Decimal:
        # String construction is exact; no context rounding applies.
        return Decimal(f"{self.magnitude}e-{self.exponent}")

    def rescale(self, exponent: int) -> FixedPoint:
        """Re-express on another exponent; decreasing precision floors."""
        if exponent >= self.exponent:
            return FixedPoint(self.magnitude * 10 ** (exponent - self.exponent), exponent)
        return FixedPoint(self.magnitude // 10 ** (self.exponent - exponent), exponent)

    def __repr__(self) -> str:
        return f"FixedPoint({self.to_decimal()} @1e-{self.exponent})"


@dataclass(frozen=True, slots=True)
class OptionQuote:
    """
    One pricing request.

    Attributes:
        expiry_seconds: Time to expiry in seconds (plain integer, not scaled).
        discount: Discount factor magnitude.
        volatility: Annualised volatility magnitude.
        forward: Forward price magnitude.
        strike: Strike price magnitude.
        exponent: Decimal exponent shared by the four magnitudes above.
    """
    expiry_seconds: int
    discount: int
    volatility: int
    forward: int
    strike: int
    exponent: int

    def __post_init__(self):
        for name in ("expiry_seconds", "discount", "volatility", "forward", "strike"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"OptionQuote {name} must be int, got {type(value)}")
            if value < 0:
                raise ValueError(f"OptionQuote {name} must be non-negative, got {value}")
        if not isinstance(self.exponent, int) or not 0 <= self.exponent <= MAX_EXPONENT:
            raise ValueError(f"OptionQuote exponent must be in [0, {MAX_EXPONENT}], got {self.exponent}")

    def field(self, name: str) -> FixedPoint:
        """Return one of the scaled fields as a FixedPoint."""
        if name not in ("discount", "volatility", "forward", "strike"):
            raise ValueError(f"{name} is not a fixed-point field")
        return FixedPoint(getattr(self, name), self.exponent)

    @property
    def discounted_forward(self) -> int:
        return self.forward * self.discount // 10 ** self.exponent

    @property
    def discounted_strike(self) -> int:
        return self.strike * self.discount // 10 ** self.exponent


@dataclass(frozen=True, slots=True)
class PricingResult:
    """
    Call price, put price and call delta at a single exponent.

    Invariants after pricing:
        0 <= call <= discounted forward
        0 <= put <= discounted strike
        0 <= delta <= discount
    """
    call: int
    put: int
    delta: int
    exponent: int

    def as_fixed_points(self) -> Tuple[FixedPoint, FixedPoint, FixedPoint]:
        return (
            FixedPoint(self.call, self.exponent),
            FixedPoint(self.put, self.exponent),
            FixedPoint(self.delta, self.exponent),
        )

    def as_decimals(self) -> Dict[str, Decimal]:
        call, put, delta = self.as_fixed_points()
        return {"call": call.to_decimal(), "put": put.to_decimal(), "delta": delta.to_decimal()}


# ============================================================================
# WORKING SCALE
# ============================================================================

@dataclass(frozen=True)
class WorkingScale:
    """
    Call-local decimal scale used for all internal arithmetic.

    unit is 10**exponent. context is a Decimal context owned by this scale
    alone; it is never installed as the thread's current context, only
    passed to the operations that need it.
    """
    exponent: int
    unit: int
    context: Context

    @classmethod
    def for_exponent(cls, exponent: int, guard_digits: int = DEFAULT_GUARD_DIGITS) -> WorkingScale:
        context = Context(
            prec=exponent + guard_digits,
            rounding=ROUND_HALF_EVEN,
            Emax=MAX_EMAX,
            Emin=MIN_EMIN,
        )
        return cls(exponent, 10 ** exponent, context)

    def to_real(self, magnitude: int) -> Decimal:
        """Magnitude on this scale -> Decimal, rounded to the context precision."""
        return Decimal(magnitude).scaleb(-self.exponent, self.context)

    def from_real(self, value: Decimal) -> int:
        """Decimal -> magnitude on this scale, truncated toward zero."""
        return int(value.scaleb(self.exponent, self.context))


# ============================================================================
# CALL OUTCOME
# ============================================================================

class RunStatus(Enum):
    """
    Outcome of a precompile call.

    OK: Output holds the encoded result.
    INVALID_INPUT: Request length violated the wire contract.
    UNKNOWN_SELECTOR: Selector-routed call named an unsupported function.
    INTERNAL_FAULT: Pricing failed unexpectedly; the host keeps running.
    """
    OK = "ok"
    INVALID_INPUT = "invalid_input"
    UNKNOWN_SELECTOR = "unknown_selector"
    INTERNAL_FAULT = "internal_fault"

    @property
    def code(self) -> int:
        """Stable status code for hosts that report integers (0 = success)."""
        return _STATUS_CODES[self]


_STATUS_CODES = {
    RunStatus.OK: 0,
    RunStatus.INVALID_INPUT: 1,
    RunStatus.UNKNOWN_SELECTOR: 2,
    RunStatus.INTERNAL_FAULT: 3,
}


@dataclass(frozen=True, slots=True)
class RunResult:
    """Explicit result of a call; output is empty unless status is OK."""
    status: RunStatus
    output: bytes = b""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.OK

    @property
    def code(self) -> int:
        return self.status.code

    def __repr__(self) -> str:
        if self.ok:
            return f"RunResult(ok, {len(self.output)} bytes)"
        return f"RunResult({self.status.value}: {self.error})"
