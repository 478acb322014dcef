"""
add.py — Addition transfer function

Addition is the only operation whose result shape depends on the JOINT
shape of both operands, so it gets its own module instead of a row in
the unary table.

    lhs ─┐
         ├─ union ─┬─ same-sign overflow      ─▶ infinite |= ShouldNot
    rhs ─┘         ├─ opposite infinities      ─▶ nan      |= ...
                   └─ opposite-sign cancelling ─▶ zero     |= ...
"""

from __future__ import annotations

from .core import FloatArg, FloatPossibilities as FP, No, ShouldNot, map_float2


# Two large same-sign finite operands may overflow. Theoretically the sum
# of two finite values is finite, hence ShouldNot rather than Yes.
OVERFLOW = FP(nan=No, zero=No, infinite=ShouldNot, positive=No, negative=No)


def add(lhs: FloatArg, rhs: FloatArg) -> FloatArg:
    """
    Shape of `lhs + rhs`.

    Raises:
        WidthMismatchError: if the operands carry different width tags
    """
    def possibilities(fp1: FP, fp2: FP) -> FP:
        res = fp1 | fp2

        # Negative overflow
        if (fp1.negative & fp2.negative) is not No:
            res = res | OVERFLOW

        # Positive overflow
        if (fp1.positive & fp2.positive) is not No:
            res = res | OVERFLOW

        # inf + -inf
        both_inf = fp1.infinite & fp2.infinite
        opposite = (fp1.positive & fp2.negative) | (fp1.negative & fp2.positive)

        return res.replace(
            nan=res.nan | (both_inf & opposite),
            # x + -x == +0.0, finite or not
            zero=res.zero | opposite,
        )

    return map_float2(lhs, rhs, possibilities)
