"""
scaling.py - Precision normalisation

All magnitudes of a request are lifted onto one working exponent before
pricing and the results are brought back to the requested exponent
afterwards:

    requested > default  -> price at the requested exponent, no rescaling
    requested == default -> no change
    requested < default  -> multiply discount, volatility, forward and strike
                            by 10**(default - requested); divide call, put
                            and delta by the same multiplier at the end

Time to expiry is a count of seconds and is never rescaled.
"""

from dataclasses import dataclass, replace

from .core import DEFAULT_EXPONENT, DEFAULT_GUARD_DIGITS, OptionQuote, PricingResult, WorkingScale


@dataclass(frozen=True)
class ScalingPlan:
    """Per-call normalisation: the working scale plus the downscale multiplier."""
    requested_exponent: int
    scale: WorkingScale
    multiplier: int

    @property
    def rescaled(self) -> bool:
        return self.multiplier != 1


def plan_for(
    exponent: int,
    default_exponent: int = DEFAULT_EXPONENT,
    guard_digits: int = DEFAULT_GUARD_DIGITS,
) -> ScalingPlan:
    """Choose the working scale for a request at the given exponent."""
    if exponent >= default_exponent:
        return ScalingPlan(exponent, WorkingScale.for_exponent(exponent, guard_digits), 1)
    multiplier = 10 ** (default_exponent - exponent)
    return ScalingPlan(exponent, WorkingScale.for_exponent(default_exponent, guard_digits), multiplier)


def normalize_quote(quote: OptionQuote, plan: ScalingPlan) -> OptionQuote:
    """Re-express the quote's fixed-point fields on the working scale."""
    if not plan.rescaled:
        return quote
    m = plan.multiplier
    return replace(
        quote,
        discount=quote.discount * m,
        volatility=quote.volatility * m,
        forward=quote.forward * m,
        strike=quote.strike * m,
        exponent=plan.scale.exponent,
    )


def denormalize_result(result: PricingResult, plan: ScalingPlan) -> PricingResult:
    """Bring a working-scale result back to the requested exponent."""
    if not plan.rescaled:
        return result
    m = plan.multiplier
    return PricingResult(
        call=result.call // m,
        put=result.put // m,
        delta=result.delta // m,
        exponent=plan.requested_exponent,
    )
