"""
precompile.py - Call boundary of the Black-76 precompile

Three ways in:

- run(data) -> bytes: the canonical contract. A request is 61 bytes, or a
  4-byte prefix (ignored) plus 61 bytes; the response is 96 bytes. Raises
  InvalidInputLength for a malformed request and InternalFault for any
  other failure.
- execute(data) -> RunResult: same contract, never raises. Hosts that must
  not be brought down by a single request call this.
- call(data) -> bytes: selector-routed variant. The 4-byte prefix picks the
  response shape (prices and delta, prices only, or delta only).

required_gas is a constant and may be called before any of them.
"""

import logging
from typing import Callable, Dict

from .codec import decode_quote, encode_result, encode_word
from .config import DEFAULT_CONFIG, PrecompileConfig
from .core import (
    INPUT_LENGTH,
    SELECTOR_DELTA,
    SELECTOR_LENGTH,
    SELECTOR_PRICES,
    SELECTOR_PRICES_DELTA,
    Black76Error,
    InternalFault,
    InvalidInputLength,
    PricingResult,
    RunResult,
    RunStatus,
    UnknownSelector,
)
from .engine import Black76Engine

logger = logging.getLogger(__name__)


def _prices_delta(result: PricingResult) -> bytes:
    return encode_result(result)


def _prices(result: PricingResult) -> bytes:
    return encode_word(result.call) + encode_word(result.put)


def _delta(result: PricingResult) -> bytes:
    return encode_word(result.delta)


SELECTORS: Dict[bytes, Callable[[PricingResult], bytes]] = {
    SELECTOR_PRICES_DELTA: _prices_delta,
    SELECTOR_PRICES: _prices,
    SELECTOR_DELTA: _delta,
}

_ERROR_STATUS = {
    InvalidInputLength: RunStatus.INVALID_INPUT,
    UnknownSelector: RunStatus.UNKNOWN_SELECTOR,
    InternalFault: RunStatus.INTERNAL_FAULT,
}


class Black76Precompile:
    """
    Deterministic Black-76 pricing over a byte interface.

    Example:
        precompile = Black76Precompile()
        gas = precompile.required_gas(data)
        output = precompile.run(data)   # 96 bytes: call | put | delta
    """

    def __init__(self, config: PrecompileConfig = DEFAULT_CONFIG):
        self.config = config
        self.engine = Black76Engine.from_config(config)

    def required_gas(self, data: bytes) -> int:
        """Constant gas quote; the input is not inspected."""
        return self.config.gas

    def run(self, data: bytes) -> bytes:
        """
        Price a request and return the 96-byte response.

        Raises:
            InvalidInputLength: If the request length is not 61 or 4 + 61.
            InternalFault: If pricing fails for any other reason.
        """
        return self._guarded(lambda: encode_result(self.engine.price(decode_quote(data))))

    def call(self, data: bytes) -> bytes:
        """
        Selector-routed pricing.

        Raises:
            InvalidInputLength: If the payload after the selector is not 61 bytes.
            UnknownSelector: If the selector is not one of SELECTORS.
            InternalFault: If pricing fails for any other reason.
        """
        return self._guarded(lambda: self._route(data))

    def _route(self, data: bytes) -> bytes:
        data = bytes(data)
        if len(data) < SELECTOR_LENGTH:
            logger.warning("rejected call without selector (%d bytes)", len(data))
            raise InvalidInputLength(f"expected a {SELECTOR_LENGTH}-byte selector, got {len(data)} bytes")
        selector, payload = data[:SELECTOR_LENGTH], data[SELECTOR_LENGTH:]
        encoder = SELECTORS.get(selector)
        if encoder is None:
            logger.warning("rejected unknown selector 0x%s", selector.hex())
            raise UnknownSelector(f"unknown selector 0x{selector.hex()}")
        if len(payload) != INPUT_LENGTH:
            logger.warning("rejected payload of %d bytes for selector 0x%s", len(payload), selector.hex())
            raise InvalidInputLength(f"expected {INPUT_LENGTH} bytes after the selector, got {len(payload)}")
        return encoder(self.engine.price(decode_quote(payload)))

    def execute(self, data: bytes) -> RunResult:
        """Run without raising; failures come back as a RunResult status."""
        return self._capture(self.run, data)

    def execute_call(self, data: bytes) -> RunResult:
        """Selector-routed call without raising."""
        return self._capture(self.call, data)

    def _guarded(self, compute: Callable[[], bytes]) -> bytes:
        try:
            return compute()
        except Black76Error:
            raise
        except Exception as exc:
            logger.exception("black76 pricing fault")
            raise InternalFault(f"{type(exc).__name__}: {exc}") from exc

    def _capture(self, entry: Callable[[bytes], bytes], data: bytes) -> RunResult:
        try:
            return RunResult(RunStatus.OK, entry(data))
        except Black76Error as exc:
            return RunResult(_ERROR_STATUS.get(type(exc), RunStatus.INTERNAL_FAULT), error=str(exc))

    def __repr__(self):
        return f"Black76Precompile({self.config!r})"
