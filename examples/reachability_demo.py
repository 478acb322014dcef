#!/usr/bin/env python3
"""
reachability_demo.py — Is `if result.is_nan()` ever reachable?

================================================================================
THE QUESTION
================================================================================

    def f(x):              # x: finite f64, never NaN
        y = math.sqrt(x)
        z = y + 1.0
        if math.isnan(z):  # dead code?
            ...

A static analyzer cannot run f on every float. It can, however, push a
summary of what x MIGHT be through each operation and look at the summary
of z.

================================================================================
THE ANSWER (This Demo)
================================================================================

    x = FloatArg.f64(nan=No, infinite=No)
    z = add(ops.sqrt(x), ONE)
    z.fp.nan   # Possible.YES: x may be negative, so sqrt(x) may be NaN

Restricting x to non-negative values makes the branch dead:

    x = FloatArg.f64(nan=No, infinite=No, negative=No)
    z.fp.nan   # Possible.NO

================================================================================
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fpdomain import FloatArg, FP, No, Width, WidthMismatchError, add, ops
from fpdomain.harness import check_all


ONE = FloatArg.f64(FP.abstract(1.0))


def demonstrate_reachability():
    """Follow the shape of x through sqrt and +."""
    print("=" * 60)
    print("REACHABILITY")
    print("=" * 60)
    print()

    for label, x in [
        ("finite x", FloatArg.f64(nan=No, infinite=No)),
        ("finite x >= 0", FloatArg.f64(nan=No, infinite=No, negative=No)),
    ]:
        y = ops.sqrt(x)
        z = add(y, ONE)
        print(f"{label}:")
        print(f"  x          = {x}")
        print(f"  sqrt(x)    = {y}")
        print(f"  sqrt(x)+1  = {z}")
        print(f"  isnan(z) reachable? {z.fp.nan.is_possible()}")
        print()


def demonstrate_overflow():
    """Two finite positives: infinity is a ShouldNot, not a Yes."""
    print("=" * 60)
    print("OVERFLOW")
    print("=" * 60)
    print()

    p = FloatArg.f64(nan=No, zero=No, infinite=No, negative=No)
    print(f"p     = {p}")
    print(f"p + p = {add(p, p)}")
    print(f"Concrete witness: {sys.float_info.max} * 2 = {sys.float_info.max * 2}")
    print()


def demonstrate_width_safety():
    """Mixing f32 and f64 fails loudly."""
    print("=" * 60)
    print("WIDTH SAFETY")
    print("=" * 60)
    print()

    print(">>> add(FloatArg.f32(), FloatArg.f64())")
    try:
        add(FloatArg.f32(), FloatArg.f64())
    except WidthMismatchError as e:
        print(f"WidthMismatchError: {e}")
    print()


def demonstrate_soundness():
    """Run the harness over every operation and both widths."""
    print("=" * 60)
    print("SOUNDNESS")
    print("=" * 60)
    print()

    for width in Width:
        violations = check_all(width)
        print(f"{width.label}: {len(violations)} violations")
        for v in violations[:5]:
            print(f"  {v}")
    print()


def main():
    """Run all demonstrations."""
    demonstrate_reachability()
    demonstrate_overflow()
    demonstrate_width_safety()
    demonstrate_soundness()


if __name__ == "__main__":
    main()
