"""
Quadrature engine: node generators, domain transform, error estimator
and adaptive integrators.
"""

from src.quadrature.error_estimate import estimate_error
from src.quadrature.gauss_legendre import (
    gauss_legendre_nodes,
    gauss_legendre_point_count,
    gauss_legendre_working_precision,
)
from src.quadrature.integrator import (
    NODE_CACHE_SIZE,
    GaussLegendreIntegrator,
    IntegratorConfig,
    QuadratureIntegrator,
    TanhSinhIntegrator,
    drop_caches,
    guess_degree,
    quad_gauss_legendre,
    quad_tanh_sinh,
)
from src.quadrature.tanh_sinh import tanh_sinh_nodes
from src.quadrature.domain_transform import IntervalKind, classify_interval, transform

__all__ = [
    # Node generators
    "gauss_legendre_nodes",
    "gauss_legendre_point_count",
    "gauss_legendre_working_precision",
    "tanh_sinh_nodes",
    # Domain transform
    "IntervalKind",
    "classify_interval",
    "transform",
    # Error estimator
    "estimate_error",
    # Integrators
    "NODE_CACHE_SIZE",
    "GaussLegendreIntegrator",
    "IntegratorConfig",
    "QuadratureIntegrator",
    "TanhSinhIntegrator",
    "drop_caches",
    "guess_degree",
    "quad_gauss_legendre",
    "quad_tanh_sinh",
]
