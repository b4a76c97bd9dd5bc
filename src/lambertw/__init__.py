"""
Lambert W function (branches 0 and −1).
"""

from src.lambertw.evaluator import (
    BRANCH_SERIES_RADIUS,
    LAMBERTW_EXTRA_PRECISION,
    LAMBERTW_MAX_ITERATIONS,
    lambert_w,
)

__all__ = [
    "BRANCH_SERIES_RADIUS",
    "LAMBERTW_EXTRA_PRECISION",
    "LAMBERTW_MAX_ITERATIONS",
    "lambert_w",
]
