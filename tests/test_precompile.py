"""
test_precompile.py - Unit tests for precompile.py

Tests:
- run(): 96-byte layout, prefix handling, length failures
- required_gas(): constant, callable before run
- execute(): explicit RunResult for success, invalid input and internal faults
- call(): selector routing and its failures
- Configuration
"""

import pytest

from black76 import (
    BLACK76_GAS,
    Black76Engine,
    Black76Precompile,
    InternalFault,
    InvalidInputLength,
    PrecompileConfig,
    RunStatus,
    SECONDS_PER_YEAR,
    SELECTOR_DELTA,
    SELECTOR_PRICES,
    SELECTOR_PRICES_DELTA,
    UnknownSelector,
    decode_result,
)
from black76 import reference
from tests.helpers import as_float, make_quote, make_request


class BrokenNumerics:
    """Numerics backend that faults on every call."""

    name = "broken"

    def log(self, x, context):
        raise ZeroDivisionError("boom")

    def normal_cdf(self, x, context):
        raise ZeroDivisionError("boom")


class TestRun:
    """Tests for run()."""

    def test_output_layout(self, precompile):
        out = precompile.run(make_request())
        assert len(out) == 96
        result = decode_result(out, 18)
        assert as_float(result.call) == pytest.approx(7.96556745540579, rel=1e-12)
        assert as_float(result.put) == pytest.approx(7.96556745540579, rel=1e-12)
        assert as_float(result.delta) == pytest.approx(0.539827837277029, rel=1e-12)

    def test_prefixed_input(self, precompile):
        plain = precompile.run(make_request())
        prefixed = precompile.run(make_request(selector=b"\x00\x00\x00\x00"))
        assert plain == prefixed

    def test_any_prefix_accepted(self, precompile):
        assert precompile.run(make_request(selector=b"\xff\xff\xff\xff")) == precompile.run(make_request())

    @pytest.mark.parametrize("length", [60, 62])
    def test_bad_length(self, precompile, length):
        with pytest.raises(InvalidInputLength):
            precompile.run(bytes(length))

    def test_prefixed_65_accepted(self, precompile):
        assert len(precompile.run(bytes(65))) == 96

    def test_all_zero_input(self, precompile):
        # Zero strike branch: forward and discount are zero too
        assert precompile.run(bytes(61)) == bytes(96)

    def test_zero_strike_request(self, precompile):
        quote = make_quote(forward="50", strike="0", discount="0.8")
        result = decode_result(precompile.run(make_request(forward="50", strike="0", discount="0.8")), 18)
        assert result.call == quote.discounted_forward
        assert result.put == 0
        assert result.delta == quote.discount

    def test_zero_forward_request(self, precompile):
        quote = make_quote(forward="0", strike="50", discount="0.8")
        result = decode_result(precompile.run(make_request(forward="0", strike="50", discount="0.8")), 18)
        assert (result.call, result.put, result.delta) == (0, quote.discounted_strike, 0)

    def test_low_exponent_results_at_requested_scale(self, precompile):
        out = precompile.run(make_request(exponent=6))
        result = decode_result(out, 6)
        assert result.call == 7_965_567
        assert result.delta == 539_827

    def test_high_exponent_results_at_requested_scale(self, precompile):
        # Field widths cap the magnitudes at exponent 40
        discount = "0.000000000000000000001"
        data = make_request(forward="0.01", strike="0.01", volatility="0.02", discount=discount, exponent=40)
        result = decode_result(precompile.run(data), 40)
        expected = float(reference.call_delta(0.01, 0.01, SECONDS_PER_YEAR, 0.02, 1e-21))
        assert as_float(result.delta, 40) == pytest.approx(expected, rel=1e-9)
        assert result.call <= make_quote(forward="0.01", discount=discount, exponent=40).discounted_forward

    def test_non_bytes_request_is_internal_fault(self, precompile):
        with pytest.raises(InternalFault) as info:
            precompile.run("not bytes")
        assert isinstance(info.value.__cause__, TypeError)

    def test_length_error_not_wrapped(self, precompile):
        with pytest.raises(InvalidInputLength) as info:
            precompile.run(bytes(60))
        assert not isinstance(info.value, InternalFault)
        assert info.value.__cause__ is None

    def test_internal_fault_wrapped(self, precompile):
        precompile.engine = Black76Engine(numerics=BrokenNumerics())
        with pytest.raises(InternalFault) as info:
            precompile.run(make_request())
        assert isinstance(info.value.__cause__, ZeroDivisionError)


class TestRequiredGas:
    """Tests for required_gas()."""

    def test_constant(self, precompile):
        assert precompile.required_gas(b"") == BLACK76_GAS == 300
        assert precompile.required_gas(make_request()) == 300
        assert precompile.required_gas(bytes(1000)) == 300

    def test_configured(self):
        assert Black76Precompile(PrecompileConfig(gas=1234)).required_gas(b"") == 1234


class TestExecute:
    """Tests for execute() and execute_call()."""

    def test_success(self, precompile):
        result = precompile.execute(make_request())
        assert result.ok
        assert result.status is RunStatus.OK
        assert result.code == 0
        assert result.output == precompile.run(make_request())
        assert result.error is None

    def test_invalid_input(self, precompile):
        result = precompile.execute(bytes(60))
        assert not result.ok
        assert result.status is RunStatus.INVALID_INPUT
        assert result.code == 1
        assert result.output == b""
        assert "60" in result.error

    def test_internal_fault(self, precompile):
        precompile.engine = Black76Engine(numerics=BrokenNumerics())
        result = precompile.execute(make_request())
        assert result.status is RunStatus.INTERNAL_FAULT
        assert result.code == 3
        assert "ZeroDivisionError" in result.error

    def test_degenerate_does_not_need_numerics(self, precompile):
        precompile.engine = Black76Engine(numerics=BrokenNumerics())
        assert precompile.execute(make_request(strike="0")).ok

    def test_non_bytes_input(self, precompile):
        result = precompile.execute(None)
        assert result.status is RunStatus.INTERNAL_FAULT
        assert "TypeError" in result.error

    def test_unknown_selector_status(self, precompile):
        result = precompile.execute_call(make_request(selector=b"\x00\x00\x00\x00"))
        assert result.status is RunStatus.UNKNOWN_SELECTOR
        assert result.code == 2


class TestSelectorCall:
    """Tests for call()."""

    def test_prices_delta(self, precompile):
        full = precompile.run(make_request())
        assert precompile.call(make_request(selector=SELECTOR_PRICES_DELTA)) == full

    def test_prices(self, precompile):
        full = precompile.run(make_request())
        out = precompile.call(make_request(selector=SELECTOR_PRICES))
        assert len(out) == 64
        assert out == full[:64]

    def test_delta(self, precompile):
        full = precompile.run(make_request())
        out = precompile.call(make_request(selector=SELECTOR_DELTA))
        assert len(out) == 32
        assert out == full[64:]

    def test_unknown_selector(self, precompile):
        with pytest.raises(UnknownSelector):
            precompile.call(make_request(selector=b"\xde\xad\xbe\xef"))

    def test_missing_selector(self, precompile):
        with pytest.raises(InvalidInputLength):
            precompile.call(b"\x5f\x53")

    def test_unprefixed_payload_rejected(self, precompile):
        with pytest.raises((InvalidInputLength, UnknownSelector)):
            precompile.call(make_request())

    def test_non_bytes_request_is_internal_fault(self, precompile):
        with pytest.raises(InternalFault):
            precompile.call(12345.0)

    def test_short_payload(self, precompile):
        with pytest.raises(InvalidInputLength):
            precompile.call(SELECTOR_PRICES + bytes(60))


class TestConfiguration:
    """Tests for PrecompileConfig."""

    def test_defaults(self):
        config = PrecompileConfig()
        assert config.default_exponent == 32
        assert config.gas == 300
        assert config.numerics == "decimal"

    def test_from_mapping(self):
        config = PrecompileConfig.from_mapping({"gas": 10, "numerics": "float"})
        assert config.gas == 10
        assert config.numerics == "float"

    def test_from_mapping_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="colour"):
            PrecompileConfig.from_mapping({"colour": "blue"})

    @pytest.mark.parametrize("kwargs", [
        {"numerics": "gpu"},
        {"default_exponent": 300},
        {"gas": -1},
        {"guard_digits": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            PrecompileConfig(**kwargs)

    def test_float_deployment_close_to_default(self):
        exact = decode_result(Black76Precompile().run(make_request()), 18)
        approx = decode_result(Black76Precompile(PrecompileConfig(numerics="float")).run(make_request()), 18)
        assert as_float(approx.call) == pytest.approx(as_float(exact.call), rel=1e-12)

    def test_config_is_frozen(self):
        config = PrecompileConfig()
        with pytest.raises(Exception):
            config.gas = 1
