"""
ops.py — Unary transfer functions

================================================================================
CONTRACT
================================================================================

Every function here maps a width-tagged record describing the possible
shape of an input to a width-tagged record describing the possible shape
of the result:

    FloatArg(F64, x-shape)  ──op──▶  FloatArg(F64, op(x)-shape)

Properties:
- Pure and total: no I/O, no state, no error path
- Width preserving: the output carries the input's width tag
- Sound: if `arg.accept(v)` then `op(arg).accept(f(v))` for the real
  floating-point operation `f`

Each function declares the record-level transformation as a nested
`possibilities` function and hands it to `map_float`, so width handling
lives in one place.

================================================================================
"""

from __future__ import annotations
from typing import Callable, Dict

from .core import FloatArg, FloatPossibilities as FP, No, Yes, map_float


UnaryOp = Callable[[FloatArg], FloatArg]


# ==============================================================================
# SIGN AND ROUNDING
# ==============================================================================

def neg(arg: FloatArg) -> FloatArg:
    def possibilities(fp: FP) -> FP:
        return fp.replace(positive=fp.negative, negative=fp.positive)

    return map_float(arg, possibilities)


def abs(arg: FloatArg) -> FloatArg:
    """Absolute value. Shadows the builtin inside this module only."""
    def possibilities(fp: FP) -> FP:
        return fp.replace(positive=fp.positive | fp.negative, negative=No)

    return map_float(arg, possibilities)


def ceil(arg: FloatArg) -> FloatArg:
    """Values in (-1, 0) round up to -0.0."""
    def possibilities(fp: FP) -> FP:
        return fp.replace(zero=fp.zero | fp.negative)

    return map_float(arg, possibilities)


def floor(arg: FloatArg) -> FloatArg:
    """Values in (0, 1) round down to +0.0."""
    def possibilities(fp: FP) -> FP:
        return fp.replace(zero=fp.zero | fp.positive)

    return map_float(arg, possibilities)


def round(arg: FloatArg) -> FloatArg:
    def possibilities(fp: FP) -> FP:
        return fp.replace(zero=Yes)

    return map_float(arg, possibilities)


def trunc(arg: FloatArg) -> FloatArg:
    def possibilities(fp: FP) -> FP:
        return fp.replace(zero=Yes)

    return map_float(arg, possibilities)


def fract(arg: FloatArg) -> FloatArg:
    """
    Fractional part, `x - trunc(x)`.

    An integral input yields POSITIVE zero whatever its sign, and an
    infinite input yields NaN.
    """
    def possibilities(fp: FP) -> FP:
        return FP(
            nan=fp.nan | fp.infinite,
            zero=Yes,
            infinite=fp.infinite,
            positive=fp.positive | fp.negative,
            negative=fp.negative,
        )

    return map_float(arg, possibilities)


def signum(arg: FloatArg) -> FloatArg:
    def possibilities(fp: FP) -> FP:
        return fp.replace(zero=No, infinite=No)

    return map_float(arg, possibilities)


# ==============================================================================
# POWERS, EXPONENTIALS, LOGARITHMS
# ==============================================================================

def sqrt(arg: FloatArg) -> FloatArg:
    """sqrt(-0.0) is -0.0; any other negative input is NaN."""
    def possibilities(fp: FP) -> FP:
        return fp.replace(nan=fp.nan | fp.negative)

    return map_float(arg, possibilities)


def cbrt(arg: FloatArg) -> FloatArg:
    return arg


def exp(arg: FloatArg) -> FloatArg:
    """Underflows to +0.0 for large negative inputs, overflows for large positive ones."""
    def possibilities(fp: FP) -> FP:
        return FP(
            nan=fp.nan,
            zero=fp.negative,
            infinite=fp.positive,
            positive=Yes,
            negative=No,
        )

    return map_float(arg, possibilities)


def exp2(arg: FloatArg) -> FloatArg:
    return exp(arg)


def exp_m1(arg: FloatArg) -> FloatArg:
    """exp(x) - 1: bounded below by -1, so only positive inputs overflow."""
    def possibilities(fp: FP) -> FP:
        return fp.replace(infinite=fp.positive)

    return map_float(arg, possibilities)


def ln(arg: FloatArg) -> FloatArg:
    """
    Natural logarithm.

    ln(±0) = -inf, ln(+inf) = +inf, ln(negative) = NaN, ln(1) = 0.
    """
    def possibilities(fp: FP) -> FP:
        return FP(
            nan=fp.nan | fp.negative,
            zero=fp.positive,
            infinite=fp.infinite | fp.zero,
            positive=Yes,
            negative=Yes,
        )

    return map_float(arg, possibilities)


def log2(arg: FloatArg) -> FloatArg:
    return ln(arg)


def log10(arg: FloatArg) -> FloatArg:
    return ln(arg)


def ln_1p(arg: FloatArg) -> FloatArg:
    """ln(1 + x): -1 maps to -inf, anything below it to NaN."""
    def possibilities(fp: FP) -> FP:
        return fp.replace(
            nan=fp.nan | fp.negative,
            infinite=fp.infinite | fp.negative,
        )

    return map_float(arg, possibilities)


def recip(arg: FloatArg) -> FloatArg:
    """1 / x: zeros and infinities swap places, the sign is kept."""
    def possibilities(fp: FP) -> FP:
        return fp.replace(zero=fp.infinite, infinite=fp.zero)

    return map_float(arg, possibilities)


def powi(arg: FloatArg) -> FloatArg:
    """
    Integer power with an unknown exponent.

    Any exponent may overflow or underflow, even exponents make the result
    positive, odd ones keep the input sign.
    """
    def possibilities(fp: FP) -> FP:
        return fp.replace(zero=Yes, infinite=Yes, positive=Yes)

    return map_float(arg, possibilities)


# ==============================================================================
# ANGLE CONVERSION
# ==============================================================================

def to_degrees(arg: FloatArg) -> FloatArg:
    def possibilities(fp: FP) -> FP:
        # large finite inputs overflow
        return fp.replace(infinite=Yes)

    return map_float(arg, possibilities)


def to_radians(arg: FloatArg) -> FloatArg:
    return arg


# ==============================================================================
# TRIGONOMETRY
# ==============================================================================

def sin(arg: FloatArg) -> FloatArg:
    """Bounded in [-1, 1]; NaN for infinite input."""
    def possibilities(fp: FP) -> FP:
        return FP(
            nan=fp.nan | fp.infinite,
            zero=Yes,
            infinite=No,
            positive=Yes,
            negative=Yes,
        )

    return map_float(arg, possibilities)


def cos(arg: FloatArg) -> FloatArg:
    return sin(arg)


def tan(arg: FloatArg) -> FloatArg:
    def possibilities(fp: FP) -> FP:
        return FP(
            nan=fp.nan | fp.infinite,
            zero=Yes,
            infinite=Yes,
            positive=Yes,
            negative=Yes,
        )

    return map_float(arg, possibilities)


def asin(arg: FloatArg) -> FloatArg:
    """Odd function; NaN outside [-1, 1]."""
    def possibilities(fp: FP) -> FP:
        return fp.replace(nan=Yes, infinite=No)

    return map_float(arg, possibilities)


def acos(arg: FloatArg) -> FloatArg:
    """Result in [0, pi] whatever the input; NaN outside [-1, 1]."""
    def possibilities(fp: FP) -> FP:
        return FP(nan=Yes, zero=Yes, infinite=No, positive=Yes, negative=No)

    return map_float(arg, possibilities)


def atan(arg: FloatArg) -> FloatArg:
    def possibilities(fp: FP) -> FP:
        return fp.replace(infinite=No)

    return map_float(arg, possibilities)


# ==============================================================================
# HYPERBOLIC
# ==============================================================================

def sinh(arg: FloatArg) -> FloatArg:
    def possibilities(fp: FP) -> FP:
        return fp.replace(infinite=Yes)

    return map_float(arg, possibilities)


def cosh(arg: FloatArg) -> FloatArg:
    def possibilities(fp: FP) -> FP:
        return FP(nan=fp.nan, zero=Yes, infinite=Yes, positive=Yes, negative=No)

    return map_float(arg, possibilities)


def tanh(arg: FloatArg) -> FloatArg:
    """Saturates at ±1, never infinite."""
    def possibilities(fp: FP) -> FP:
        return fp.replace(infinite=No)

    return map_float(arg, possibilities)


def asinh(arg: FloatArg) -> FloatArg:
    def possibilities(fp: FP) -> FP:
        return fp.replace(infinite=Yes)

    return map_float(arg, possibilities)


def acosh(arg: FloatArg) -> FloatArg:
    """acosh(1) = 0, NaN below 1."""
    def possibilities(fp: FP) -> FP:
        return FP(nan=Yes, zero=Yes, infinite=Yes, positive=Yes, negative=No)

    return map_float(arg, possibilities)


def atanh(arg: FloatArg) -> FloatArg:
    """atanh(±1) = ±inf, NaN outside [-1, 1]."""
    def possibilities(fp: FP) -> FP:
        return fp.replace(nan=Yes, infinite=Yes)

    return map_float(arg, possibilities)


# ==============================================================================
# REGISTRY
# ==============================================================================

UNARY_OPS: Dict[str, UnaryOp] = {
    "neg": neg,
    "abs": abs,
    "ceil": ceil,
    "floor": floor,
    "round": round,
    "trunc": trunc,
    "fract": fract,
    "signum": signum,
    "sqrt": sqrt,
    "exp": exp,
    "exp2": exp2,
    "ln": ln,
    "log2": log2,
    "log10": log10,
    "to_degrees": to_degrees,
    "to_radians": to_radians,
    "cbrt": cbrt,
    "sin": sin,
    "cos": cos,
    "tan": tan,
    "asin": asin,
    "acos": acos,
    "atan": atan,
    "exp_m1": exp_m1,
    "ln_1p": ln_1p,
    "sinh": sinh,
    "cosh": cosh,
    "tanh": tanh,
    "asinh": asinh,
    "acosh": acosh,
    "atanh": atanh,
    "recip": recip,
    "powi": powi,
}
