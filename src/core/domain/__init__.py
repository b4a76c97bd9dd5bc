"""
Domain models and value objects.

Contains quadrature nodes and results, and the prime factor mapping.
"""

from src.core.domain.factors import (
    SIGN_FACTOR,
    FactorMapping,
    record_factor,
    reconstruct,
)
from src.core.domain.quadrature import (
    NodeSequence,
    QuadratureNode,
    QuadratureResult,
    copy_nodes,
)

__all__ = [
    # Quadrature
    "QuadratureNode",
    "NodeSequence",
    "QuadratureResult",
    "copy_nodes",
    # Factors
    "FactorMapping",
    "SIGN_FACTOR",
    "record_factor",
    "reconstruct",
]
