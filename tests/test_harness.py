"""
test_harness.py — Tests for the soundness harness

Tests cover:
- Boundary values and record spaces
- Width rounding
- Reference IEEE-754 semantics where Python's math module raises
- HarnessConfig validation
- check_unary / check_add / check_all on the real library
- Detection of a deliberately unsound transfer function
"""

import math

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fpdomain import FP, FloatArg, No, Width, Yes, map_float, ops
from fpdomain import harness
from fpdomain.harness import (
    HarnessConfig,
    REFERENCE_UNARY,
    Violation,
    all_tier_records,
    boundary_values,
    check_add,
    check_all,
    check_unary,
    reference_powi,
    round_to_width,
    yes_no_records,
)


# ==============================================================================
# Value and record spaces
# ==============================================================================

class TestSpaces:
    """Tests for the enumerated value and record spaces."""

    @pytest.mark.parametrize("width", list(Width))
    def test_boundary_values_ordered(self, width):
        values = boundary_values(width)

        assert math.isnan(values[0])
        ordered = values[1:]
        for a, b in zip(ordered, ordered[1:]):
            if a == b:
                # -0.0 then 0.0
                assert a == 0.0
                assert math.copysign(1.0, a) < 0 < math.copysign(1.0, b)
            else:
                assert a < b

    @pytest.mark.parametrize("width", list(Width))
    def test_boundary_values_cover_shapes(self, width):
        values = boundary_values(width)

        assert -math.inf in values and math.inf in values
        assert any(0 < v < 1.2e-38 for v in values)  # a subnormal
        assert sum(1 for v in values if v == 0) == 2

    def test_f32_values_are_representable(self):
        for v in boundary_values(Width.F32):
            if not math.isnan(v):
                assert round_to_width(v, Width.F32) == v

    def test_record_space_sizes(self):
        assert len(yes_no_records()) == 32
        assert len(set(yes_no_records())) == 32
        assert len(all_tier_records()) == 1024

    def test_config_selects_record_space(self):
        assert len(HarnessConfig().record_space()) == 32
        assert len(HarnessConfig(records="all_tiers").record_space()) == 1024


class TestRoundToWidth:
    """Tests for f32 rounding."""

    def test_f64_is_untouched(self):
        assert round_to_width(0.1, Width.F64) == 0.1

    def test_f32_rounds(self):
        assert round_to_width(0.1, Width.F32) != 0.1
        assert round_to_width(1.5, Width.F32) == 1.5

    def test_f32_overflow_is_signed_infinity(self):
        assert round_to_width(1e39, Width.F32) == math.inf
        assert round_to_width(-1e39, Width.F32) == -math.inf

    def test_f32_underflow_keeps_sign(self):
        result = round_to_width(-1e-50, Width.F32)
        assert result == 0.0
        assert math.copysign(1.0, result) < 0

    def test_non_finite_pass_through(self):
        assert math.isnan(round_to_width(math.nan, Width.F32))
        assert round_to_width(-math.inf, Width.F32) == -math.inf


# ==============================================================================
# Reference semantics
# ==============================================================================

class TestReferenceSemantics:
    """IEEE-754 results where the math module would raise."""

    @pytest.mark.parametrize("name, value, expected", [
        ("ln", 0.0, -math.inf),
        ("ln", -0.0, -math.inf),
        ("log2", math.inf, math.inf),
        ("exp", 1000.0, math.inf),
        ("exp2", 2000.0, math.inf),
        ("exp_m1", 1000.0, math.inf),
        ("exp_m1", -math.inf, -1.0),
        ("sinh", -1000.0, -math.inf),
        ("cosh", -1000.0, math.inf),
        ("atanh", 1.0, math.inf),
        ("atanh", -1.0, -math.inf),
        ("ln_1p", -1.0, -math.inf),
        ("recip", -0.0, -math.inf),
        ("recip", math.inf, 0.0),
        ("signum", 0.0, 1.0),
        ("signum", -0.0, -1.0),
        ("signum", -math.inf, -1.0),
        ("round", 2.5, 3.0),
        ("round", -2.5, -3.0),
        ("to_degrees", 1.7976931348623157e308, math.inf),
    ])
    def test_special_values(self, name, value, expected):
        assert REFERENCE_UNARY[name](value) == expected

    @pytest.mark.parametrize("name, value", [
        ("ln", -1.0),
        ("sqrt", -1.0),
        ("sin", math.inf),
        ("tan", -math.inf),
        ("asin", 2.0),
        ("acos", -math.inf),
        ("acosh", 0.5),
        ("atanh", 2.0),
        ("ln_1p", -2.0),
        ("fract", math.inf),
    ])
    def test_nan_results(self, name, value):
        assert math.isnan(REFERENCE_UNARY[name](value))

    @pytest.mark.parametrize("name, value", [
        ("ceil", -0.5),
        ("trunc", -0.7),
        ("round", -0.2),
        ("sqrt", -0.0),
    ])
    def test_negative_zero_results(self, name, value):
        result = REFERENCE_UNARY[name](value)
        assert result == 0.0
        assert math.copysign(1.0, result) < 0

    def test_fract_of_negative_integer_is_positive_zero(self):
        result = REFERENCE_UNARY["fract"](-2.0)
        assert result == 0.0
        assert math.copysign(1.0, result) > 0

    def test_powi(self):
        assert reference_powi(2.0, 3) == 8.0
        assert reference_powi(math.nan, 0) == 1.0
        assert reference_powi(1e200, 2) == math.inf
        assert reference_powi(-0.0, -1) == -math.inf


# ==============================================================================
# Configuration
# ==============================================================================

class TestHarnessConfig:
    """Tests for HarnessConfig validation."""

    def test_defaults(self):
        config = HarnessConfig()
        assert config.records == "yes_no"
        assert 2 in config.powi_exponents
        assert config.max_violations == 100

    def test_unknown_record_strategy_raises(self):
        with pytest.raises(ValueError):
            HarnessConfig(records="everything")

    def test_non_positive_max_violations_raises(self):
        with pytest.raises(ValueError):
            HarnessConfig(max_violations=0)

    def test_empty_powi_exponents_raises(self):
        # an empty list would check nothing and report powi as sound
        with pytest.raises(ValueError):
            HarnessConfig(powi_exponents=())

    def test_extra_values_are_rounded_and_appended(self):
        config = HarnessConfig(extra_values=(0.1,))
        values = config.value_space(Width.F32)

        assert len(values) == len(boundary_values(Width.F32)) + 1
        assert values[-1] == round_to_width(0.1, Width.F32)
        assert values[-1] != 0.1

    def test_unknown_operation_raises(self):
        with pytest.raises(ValueError):
            check_unary("gamma", Width.F64)


# ==============================================================================
# Checks on the real library
# ==============================================================================

class TestChecks:
    """The shipped transfer functions are sound on the harness spaces."""

    @pytest.mark.parametrize("width", list(Width))
    def test_check_all_clean(self, width):
        assert check_all(width) == []

    def test_check_unary_all_tiers(self):
        config = HarnessConfig(records="all_tiers", powi_exponents=(-1, 2))
        for name in ("recip", "ln", "fract", "powi", "exp_m1"):
            assert check_unary(name, Width.F64, config) == []

    def test_check_add_f32(self):
        assert check_add(Width.F32) == []


# ==============================================================================
# Deepest subnormals
# ==============================================================================

SMALLEST_SUBNORMAL = {
    Width.F64: 5e-324,
    Width.F32: 1.401298464324817e-45,
}


class TestDeepSubnormals:
    """
    The exact table is not sound for the smallest subnormal of each width:
    recip overflows to an infinity and to_radians flushes to zero. These
    tests pin that limit so it cannot widen unnoticed.
    """

    @pytest.mark.parametrize("width", list(Width))
    def test_smallest_subnormal_is_representable(self, width):
        tiny = SMALLEST_SUBNORMAL[width]
        assert round_to_width(tiny, width) == tiny
        assert round_to_width(tiny / 2, width) == 0.0

    @pytest.mark.parametrize("width", list(Width))
    def test_recip_overflows(self, width):
        tiny = SMALLEST_SUBNORMAL[width]
        config = HarnessConfig(extra_values=(tiny, -tiny))
        violations = check_unary("recip", width, config)

        assert violations
        assert {v.inputs[0] for v in violations} <= {tiny, -tiny}
        for v in violations:
            assert math.isinf(v.result)
            assert v.input_records[0].zero == No
            assert v.output_record.infinite == No

    @pytest.mark.parametrize("width", list(Width))
    def test_to_radians_flushes_to_zero(self, width):
        tiny = SMALLEST_SUBNORMAL[width]
        violations = check_unary("to_radians", width, HarnessConfig(extra_values=(tiny,)))

        assert violations
        for v in violations:
            assert v.inputs == (tiny,)
            assert v.result == 0.0
            assert v.output_record.zero == No

    @pytest.mark.parametrize("name", ["sqrt", "ln", "exp", "neg", "to_degrees", "sin"])
    def test_other_operations_stay_sound(self, name):
        tiny = SMALLEST_SUBNORMAL[Width.F64]
        config = HarnessConfig(extra_values=(tiny, -tiny))
        assert check_unary(name, Width.F64, config) == []

    def test_shipped_boundary_values_avoid_them(self):
        for width in Width:
            tiny = SMALLEST_SUBNORMAL[width]
            assert tiny not in boundary_values(width)


# ==============================================================================
# Detection
# ==============================================================================

class TestViolationDetection:
    """The harness must catch an unsound transfer function."""

    @pytest.fixture
    def unsound_sqrt(self, monkeypatch):
        # Forgets that negative inputs give NaN
        def sqrt(arg: FloatArg) -> FloatArg:
            return map_float(arg, lambda fp: fp)

        monkeypatch.setitem(harness.UNARY_OPS, "sqrt", sqrt)

    def test_violation_reported(self, unsound_sqrt, caplog):
        with caplog.at_level("WARNING", logger="fpdomain.harness"):
            violations = check_unary("sqrt", Width.F64)

        assert violations
        first = violations[0]
        assert isinstance(first, Violation)
        assert first.op == "sqrt"
        assert math.isnan(first.result)
        assert first.input_records[0].negative == Yes
        assert first.output_record.nan == No
        assert "Soundness violation" in caplog.text
        assert "sqrt(" in str(first)

    def test_max_violations_caps_report(self, unsound_sqrt):
        violations = check_unary("sqrt", Width.F64, HarnessConfig(max_violations=3))
        assert len(violations) == 3

    def test_unsound_add_detected(self, monkeypatch):
        def add(lhs, rhs):
            return FloatArg.of(lhs.width, lhs.possibilities | rhs.possibilities)

        monkeypatch.setattr(harness, "add", add)
        violations = check_add(Width.F64, HarnessConfig(max_violations=5))

        assert len(violations) == 5
        assert all(v.op == "add" for v in violations)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
