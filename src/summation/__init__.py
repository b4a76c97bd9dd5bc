"""
Summation of series by the Euler–Maclaurin formula.
"""

from src.summation.euler_maclaurin import (
    EULER_MACLAURIN_EXTRA_PRECISION,
    EULER_MACLAURIN_MAX_TERMS,
    IntegrationMethod,
    bernoulli_number,
    euler_maclaurin_sum,
)

__all__ = [
    "EULER_MACLAURIN_EXTRA_PRECISION",
    "EULER_MACLAURIN_MAX_TERMS",
    "IntegrationMethod",
    "bernoulli_number",
    "euler_maclaurin_sum",
]
