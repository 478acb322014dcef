"""
fpdomain — Abstract domain for IEEE-754 floating-point shapes

Predicts what the result of a float operation MIGHT be (NaN, zero,
infinite, positive, negative) from what its inputs might be, without
ever computing a value. Meant for static analyzers, fuzzers and
property-testing frameworks deciding whether a check such as
`if result.is_nan()` is reachable.

================================================================================
QUICK START
================================================================================

Basic usage:

    from fpdomain import FloatArg, No, ops, add

    # A finite, non-NaN f64 that may be zero or of either sign
    x = FloatArg.f64(nan=No, infinite=No)

    ops.sqrt(x).fp.nan          # Possible.YES: x may be negative
    ops.exp(x).fp.negative      # Possible.NO

    # Two finite positives may still overflow
    p = FloatArg.f64(nan=No, infinite=No, negative=No)
    add(p, p).fp.infinite       # Possible.SHOULD_NOT

Width safety:

    add(FloatArg.f32(), FloatArg.f64())   # raises WidthMismatchError

Soundness harness:

    from fpdomain import Width
    from fpdomain.harness import check_all

    assert not check_all(Width.F64)

================================================================================
"""

# Core domain
from .core import (
    Possible,
    Yes,
    Should,
    ShouldNot,
    No,
    FloatPossibilities,
    FP,
    ANY_POSSIBILITIES,
    ZERO_POSSIBILITIES,
    ZERO_NEG_POSSIBILITIES,
    INF_POSSIBILITIES,
    INF_NEG_POSSIBILITIES,
    Width,
    FloatArg,
    WidthMismatchError,
    map_float,
    map_float2,
)

# Transfer functions
from . import ops
from .ops import UNARY_OPS
from .add import add, OVERFLOW

__version__ = "0.3.0"
__license__ = "MIT"

__all__ = [
    # Core
    "Possible",
    "Yes",
    "Should",
    "ShouldNot",
    "No",
    "FloatPossibilities",
    "FP",
    "ANY_POSSIBILITIES",
    "ZERO_POSSIBILITIES",
    "ZERO_NEG_POSSIBILITIES",
    "INF_POSSIBILITIES",
    "INF_NEG_POSSIBILITIES",
    "Width",
    "FloatArg",
    "WidthMismatchError",
    "map_float",
    "map_float2",
    # Transfer functions
    "ops",
    "UNARY_OPS",
    "add",
    "OVERFLOW",
]
