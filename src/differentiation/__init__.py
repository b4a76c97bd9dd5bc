"""
Numerical differentiation by finite differences.
"""

from src.differentiation.finite_difference import (
    DEFAULT_EXTRA_PRECISION,
    DerivativeDirection,
    difference_coefficients,
    differentiate,
)

__all__ = [
    "DEFAULT_EXTRA_PRECISION",
    "DerivativeDirection",
    "difference_coefficients",
    "differentiate",
]
