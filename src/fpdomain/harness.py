"""
harness.py — Soundness harness for transfer functions

================================================================================
WHAT IT CHECKS
================================================================================

For an operation `op` with concrete semantics `f`:

    for every record R, every value v with R.accept(v):
        op(R).accept(f(v))                      must hold

The harness enumerates a finite but representative slice of both spaces:

    values   boundary_values(width): NaN, ±inf, ±max, ±pi, ±1, ±0, subnormals...
    records  yes_no_records():  all 32 records over {Yes, No}
             all_tier_records(): all 1024 records over the four tiers

and runs the real floating-point operation as ground truth. Python's `math`
module raises where IEEE-754 returns NaN or an infinity, so each operation
has a reference implementation below that returns the IEEE result instead.

================================================================================
USAGE
================================================================================

    from fpdomain import Width
    from fpdomain.harness import check_all, check_unary, HarnessConfig

    violations = check_all(Width.F32)
    assert not violations

    strict = HarnessConfig(records="all_tiers", powi_exponents=(2, 3))
    violations = check_unary("recip", Width.F64, strict)

================================================================================
"""

from __future__ import annotations
from dataclasses import dataclass
from itertools import product
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple
import logging
import math
import struct

from .core import FloatArg, FloatPossibilities, Possible, Width
from .ops import UNARY_OPS
from .add import add


logger = logging.getLogger(__name__)


# ==============================================================================
# CONFIGURATION
# ==============================================================================

RECORD_STRATEGIES = ("yes_no", "all_tiers")


@dataclass(frozen=True)
class HarnessConfig:
    """
    Knobs for a soundness run.

    Defaults match the coarse but exhaustive {Yes, No} coverage. The
    "all_tiers" strategy is 32 times larger; avoid it for check_add, whose
    cost is quadratic in the number of accepted (value, record) pairs.
    """
    records: str = "yes_no"

    # powi has no exponent argument at the abstract level, the concrete
    # side is checked against each of these
    powi_exponents: Tuple[int, ...] = (-2, -1, 0, 1, 2, 3)

    # Stop collecting after this many violations
    max_violations: int = 100

    # Appended to boundary_values(width), rounded to the width
    extra_values: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if self.records not in RECORD_STRATEGIES:
            raise ValueError(
                f"Unknown record strategy {self.records!r}, "
                f"expected one of {RECORD_STRATEGIES}"
            )
        if not self.powi_exponents:
            raise ValueError("powi_exponents must not be empty")
        if self.max_violations <= 0:
            raise ValueError(f"max_violations must be > 0, got {self.max_violations}")

    def record_space(self) -> List[FloatPossibilities]:
        if self.records == "all_tiers":
            return all_tier_records()
        return yes_no_records()

    def value_space(self, width: Width) -> List[float]:
        extras = [round_to_width(v, width) for v in self.extra_values]
        return boundary_values(width) + extras


DEFAULT_CONFIG = HarnessConfig()


# ==============================================================================
# VALUE AND RECORD SPACES
# ==============================================================================

F32_MAX = 3.4028234663852886e38
F32_MIN_POSITIVE = 1.1754943508222875e-38


def round_to_width(value: float, width: Width) -> float:
    """
    Round a Python float to the nearest value of the given width.

    Finite values beyond the f32 range overflow to a signed infinity.
    """
    if width is Width.F64 or not math.isfinite(value):
        return value
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def boundary_values(width: Width) -> List[float]:
    """
    Canonical boundary values, ordered from -inf to +inf with NaN first.

    The subnormals are shallow ones whose reciprocal stays finite and whose
    radian conversion stays non-zero: the deepest subnormals overflow under
    recip and flush to zero under to_radians. Pass them through
    HarnessConfig.extra_values to see those violations.
    """
    if width is Width.F32:
        max_, min_positive, subnormal = F32_MAX, F32_MIN_POSITIVE, 5.0e-39
    else:
        max_, min_positive, subnormal = 1.7976931348623157e308, 2.2250738585072014e-308, 1.0e-308

    positives = [
        subnormal,
        min_positive,
        1.0,
        math.pi / 2,
        2.0,
        math.e,
        math.pi,
        max_ / 2,
        max_,
    ]
    positives = [round_to_width(v, width) for v in positives]

    return (
        [math.nan, -math.inf]
        + [-v for v in reversed(positives)]
        + [-0.0, 0.0]
        + positives
        + [math.inf]
    )


def yes_no_records() -> List[FloatPossibilities]:
    """All 32 records whose fields are Yes or No."""
    return _records_over((Possible.YES, Possible.NO))


def all_tier_records() -> List[FloatPossibilities]:
    """All 1024 records over the four tiers."""
    return _records_over(tuple(Possible))


def _records_over(tiers: Sequence[Possible]) -> List[FloatPossibilities]:
    return [
        FloatPossibilities(nan=n, zero=z, infinite=i, positive=p, negative=m)
        for n, z, i, p, m in product(tiers, repeat=5)
    ]


def accepted_pairs(
    values: Sequence[float],
    records: Sequence[FloatPossibilities],
) -> Iterator[Tuple[float, FloatPossibilities]]:
    """Every (value, record) pair where the record accepts the value."""
    for value in values:
        for record in records:
            if record.accept(value):
                yield value, record


# ==============================================================================
# REFERENCE IEEE-754 SEMANTICS
# ==============================================================================

def _integral(rounder: Callable[[float], int]) -> Callable[[float], float]:
    # Integral rounding keeps the sign bit: ceil(-0.5) == -0.0
    def op(x: float) -> float:
        if not math.isfinite(x):
            return x
        return math.copysign(float(rounder(x)), x)
    return op


def _round_half_away(x: float) -> int:
    magnitude = abs(x)
    r = math.floor(magnitude)
    if magnitude - r >= 0.5:
        r += 1
    return r if x >= 0 else -r


_trunc = _integral(math.trunc)


def _fract(x: float) -> float:
    if not math.isfinite(x):
        return math.nan
    return x - _trunc(x)


def _signum(x: float) -> float:
    if math.isnan(x):
        return x
    return math.copysign(1.0, x)


def _sqrt(x: float) -> float:
    if x < 0:
        return math.nan
    return math.sqrt(x)


def _overflowing(fn: Callable[[float], float], odd: bool) -> Callable[[float], float]:
    # math raises OverflowError where IEEE-754 returns an infinity
    def op(x: float) -> float:
        try:
            return fn(x)
        except OverflowError:
            return math.copysign(math.inf, x) if odd else math.inf
    return op


def _logarithm(fn: Callable[[float], float]) -> Callable[[float], float]:
    def op(x: float) -> float:
        if math.isnan(x) or x < 0:
            return math.nan
        if x == 0:
            return -math.inf
        return fn(x)
    return op


def _ln_1p(x: float) -> float:
    if math.isnan(x) or x < -1:
        return math.nan
    if x == -1:
        return -math.inf
    return math.log1p(x)


def _periodic(fn: Callable[[float], float]) -> Callable[[float], float]:
    def op(x: float) -> float:
        if math.isinf(x):
            return math.nan
        return fn(x)
    return op


def _unit_domain(fn: Callable[[float], float]) -> Callable[[float], float]:
    def op(x: float) -> float:
        if abs(x) > 1:
            return math.nan
        return fn(x)
    return op


def _acosh(x: float) -> float:
    if x < 1:
        return math.nan
    return math.acosh(x)


def _atanh(x: float) -> float:
    if abs(x) > 1:
        return math.nan
    if abs(x) == 1:
        return math.copysign(math.inf, x)
    return math.atanh(x)


def _recip(x: float) -> float:
    if x == 0:
        return math.copysign(math.inf, x)
    try:
        return 1.0 / x
    except OverflowError:
        return math.copysign(math.inf, x)


def reference_powi(x: float, exponent: int) -> float:
    """Repeated multiplication, so overflow yields inf instead of raising."""
    result = 1.0
    for _ in range(abs(exponent)):
        result *= x
    if exponent < 0:
        return _recip(result)
    return result


REFERENCE_UNARY: Dict[str, Callable[[float], float]] = {
    "neg": lambda x: -x,
    "abs": math.fabs,
    "ceil": _integral(math.ceil),
    "floor": _integral(math.floor),
    "round": _integral(_round_half_away),
    "trunc": _trunc,
    "fract": _fract,
    "signum": _signum,
    "sqrt": _sqrt,
    "exp": _overflowing(math.exp, odd=False),
    "exp2": _overflowing(math.exp2, odd=False),
    "ln": _logarithm(math.log),
    "log2": _logarithm(math.log2),
    "log10": _logarithm(math.log10),
    "to_degrees": lambda x: x * (180.0 / math.pi),
    "to_radians": lambda x: x * (math.pi / 180.0),
    "cbrt": math.cbrt,
    "sin": _periodic(math.sin),
    "cos": _periodic(math.cos),
    "tan": _periodic(math.tan),
    "asin": _unit_domain(math.asin),
    "acos": _unit_domain(math.acos),
    "atan": math.atan,
    "exp_m1": _overflowing(math.expm1, odd=False),
    "ln_1p": _ln_1p,
    "sinh": _overflowing(math.sinh, odd=True),
    "cosh": _overflowing(math.cosh, odd=False),
    "tanh": math.tanh,
    "asinh": math.asinh,
    "acosh": _acosh,
    "atanh": _atanh,
    "recip": _recip,
    # powi is driven by HarnessConfig.powi_exponents, see check_unary
    "powi": lambda x: reference_powi(x, 2),
}


def reference_add(lhs: float, rhs: float) -> float:
    return lhs + rhs


# ==============================================================================
# SOUNDNESS CHECKS
# ==============================================================================

@dataclass(frozen=True)
class Violation:
    """One concrete counterexample to soundness."""
    op: str
    width: Width
    inputs: Tuple[float, ...]
    input_records: Tuple[FloatPossibilities, ...]
    result: float
    output_record: FloatPossibilities

    def __str__(self) -> str:
        args = ", ".join(repr(v) for v in self.inputs)
        return (
            f"{self.op}({args}) = {self.result!r} [{self.width.label}] "
            f"not accepted by {self.output_record!r}"
        )


def _concrete_unary(name: str, config: HarnessConfig) -> List[Tuple[str, Callable[[float], float]]]:
    if name == "powi":
        return [
            (f"powi[{n}]", lambda x, n=n: reference_powi(x, n))
            for n in config.powi_exponents
        ]
    return [(name, REFERENCE_UNARY[name])]


def check_unary(
    name: str,
    width: Width,
    config: Optional[HarnessConfig] = None,
) -> List[Violation]:
    """
    Check one unary transfer function against its reference semantics.

    Returns the violations found (empty when sound).

    Raises:
        ValueError: if `name` is not a known unary operation
    """
    if name not in UNARY_OPS:
        raise ValueError(f"Unknown unary operation: {name!r}")
    config = config or DEFAULT_CONFIG

    transfer = UNARY_OPS[name]
    pairs = list(accepted_pairs(config.value_space(width), config.record_space()))
    violations: List[Violation] = []

    for label, concrete in _concrete_unary(name, config):
        for value, record in pairs:
            result = round_to_width(concrete(value), width)
            output = transfer(FloatArg.of(width, record)).possibilities
            if output.accept(result):
                continue

            violation = Violation(label, width, (value,), (record,), result, output)
            logger.warning("Soundness violation: %s", violation)
            violations.append(violation)
            if len(violations) >= config.max_violations:
                return violations

    logger.debug("%s [%s]: %d pairs checked", name, width.label, len(pairs))
    return violations


def check_add(width: Width, config: Optional[HarnessConfig] = None) -> List[Violation]:
    """Check addition over the cross product of accepted (value, record) pairs."""
    config = config or DEFAULT_CONFIG
    pairs = list(accepted_pairs(config.value_space(width), config.record_space()))

    # Output records only depend on the record pair
    outputs: Dict[Tuple[FloatPossibilities, FloatPossibilities], FloatPossibilities] = {}
    violations: List[Violation] = []

    for lhs_value, lhs_record in pairs:
        for rhs_value, rhs_record in pairs:
            key = (lhs_record, rhs_record)
            if key not in outputs:
                outputs[key] = add(
                    FloatArg.of(width, lhs_record),
                    FloatArg.of(width, rhs_record),
                ).possibilities
            output = outputs[key]

            result = round_to_width(reference_add(lhs_value, rhs_value), width)
            if output.accept(result):
                continue

            violation = Violation(
                "add", width,
                (lhs_value, rhs_value), (lhs_record, rhs_record),
                result, output,
            )
            logger.warning("Soundness violation: %s", violation)
            violations.append(violation)
            if len(violations) >= config.max_violations:
                return violations

    logger.debug("add [%s]: %d pairs checked", width.label, len(pairs) ** 2)
    return violations


def check_all(width: Width, config: Optional[HarnessConfig] = None) -> List[Violation]:
    """Every unary operation, then addition."""
    violations: List[Violation] = []
    for name in UNARY_OPS:
        violations.extend(check_unary(name, width, config))
    violations.extend(check_add(width, config))
    return violations
