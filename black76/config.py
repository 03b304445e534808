"""
config.py - Deployment configuration for the Black-76 precompile

A PrecompileConfig is immutable and is read, never mutated, by every call.
Selecting a numerics backend here is how a deployment chooses between the
deterministic in-process evaluation and the float reference evaluation.
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping

from .core import BLACK76_GAS, DEFAULT_EXPONENT, DEFAULT_GUARD_DIGITS, MAX_EXPONENT


NUMERICS_BACKENDS = ("decimal", "float")


@dataclass(frozen=True, slots=True)
class PrecompileConfig:
    """
    Tunables for a precompile deployment.

    Attributes:
        default_exponent: Canonical working exponent (requests below it are lifted onto it).
        gas: Constant returned by required_gas.
        numerics: Name of the log/normal-CDF backend ("decimal" or "float").
        guard_digits: Extra Decimal digits carried above the working exponent.
    """
    default_exponent: int = DEFAULT_EXPONENT
    gas: int = BLACK76_GAS
    numerics: str = "decimal"
    guard_digits: int = DEFAULT_GUARD_DIGITS

    def __post_init__(self):
        if not 0 <= self.default_exponent <= MAX_EXPONENT:
            raise ValueError(f"default_exponent must be in [0, {MAX_EXPONENT}], got {self.default_exponent}")
        if self.gas < 0:
            raise ValueError(f"gas must be non-negative, got {self.gas}")
        if self.numerics not in NUMERICS_BACKENDS:
            raise ValueError(f"numerics must be one of {NUMERICS_BACKENDS}, got {self.numerics!r}")
        if self.guard_digits < 1:
            raise ValueError(f"guard_digits must be positive, got {self.guard_digits}")

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> "PrecompileConfig":
        """Build a config from a settings dict, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(settings) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**dict(settings))


DEFAULT_CONFIG = PrecompileConfig()
