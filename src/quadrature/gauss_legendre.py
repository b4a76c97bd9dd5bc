"""
Gauss–Legendre Nodes — узлы и веса на каноническом отрезке [−1, 1]

Узлы — корни многочлена Лежандра Pₙ, n = 3·2^(degree−1).

degree = 1: классическое 3-точечное правило
    (√(3/5), 5/9), (−√(3/5), 5/9), (0, 8/9)

degree > 1: для j = 1..⌊n/2⌋
    r₀ = cos(π(j − 0.25)/(n + 0.5))              (double precision)
    P₀ = 1, P₁ = r, P_k = ((2k−1)·r·P_{k−1} − (k−1)·P_{k−2})/k
    P'ₙ = n(r·Pₙ − Pₙ₋₁)/(r² − 1)
    r ← r − Pₙ/P'ₙ  пока |Pₙ/P'ₙ| > ε
    w = 2/((1 − r²)·P'ₙ²)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Рабочая точность precision + max(precision // 2, GAUSS_LEGENDRE_MIN_EXTRA_PRECISION)
2. ε = 2^(−precision−8)
3. Узлы выдаются симметричными парами (r, w), (−r, w)
4. Σ w = 2 (с точностью рабочего контекста)
"""

import logging
import math
from typing import Final

import gmpy2
from gmpy2 import mpfr

from src.core.domain.quadrature import NodeSequence, QuadratureNode
from src.core.math.context import working_context
from src.core.math.errors import ConvergenceFailure
from src.core.math.numerical_safeguards import (
    power_of_two,
    validate_degree,
    validate_precision,
)

logger = logging.getLogger(__name__)

# =============================================================================
# ПАРАМЕТРЫ
# =============================================================================

# Дополнительные биты порога сходимости Newton: ε = 2^(−precision − 8)
NEWTON_TOLERANCE_EXTRA_BITS: Final[int] = 8

# Максимальное число шагов Newton на один корень
NEWTON_MAX_ITERATIONS: Final[int] = 100

# Минимальный запас рабочей точности над precision
GAUSS_LEGENDRE_MIN_EXTRA_PRECISION: Final[int] = 32


def gauss_legendre_point_count(degree: int) -> int:
    """
    Число узлов правила степени degree: 3·2^(degree−1).

    Examples:
        >>> gauss_legendre_point_count(1)
        3
        >>> gauss_legendre_point_count(4)
        24
    """
    validate_degree(degree)
    return 3 * 2 ** (degree - 1)


def gauss_legendre_working_precision(precision: int) -> int:
    """
    Рабочая точность генератора: precision + max(precision // 2, 32).

    Examples:
        >>> gauss_legendre_working_precision(100)
        150
        >>> gauss_legendre_working_precision(10)
        42
    """
    return precision + max(precision // 2, GAUSS_LEGENDRE_MIN_EXTRA_PRECISION)


def gauss_legendre_nodes(precision: int, degree: int) -> NodeSequence:
    """
    Узлы и веса Gauss–Legendre на [−1, 1].

    Args:
        precision: Целевая точность в битах
        degree: Степень правила (>= 1)

    Returns:
        Последовательность из 3·2^(degree−1) узлов

    Raises:
        DomainError: precision < 1 или degree < 1
        ConvergenceFailure: Newton не сошёлся за NEWTON_MAX_ITERATIONS шагов

    Examples:
        >>> nodes = gauss_legendre_nodes(53, 1)
        >>> [float(node.w) for node in nodes]  # doctest: +ELLIPSIS
        [0.555..., 0.555..., 0.888...]
    """
    validate_precision(precision)
    validate_degree(degree)

    eps = power_of_two(-precision - NEWTON_TOLERANCE_EXTRA_BITS)
    working_precision = gauss_legendre_working_precision(precision)

    with working_context(working_precision):
        if degree == 1:
            x = gmpy2.sqrt(mpfr(3) / 5)
            w = mpfr(5) / 9
            return [
                QuadratureNode(x, w),
                QuadratureNode(-x, w),
                QuadratureNode(mpfr(0), mpfr(8) / 9),
            ]

        n = gauss_legendre_point_count(degree)
        nodes: NodeSequence = []

        for j in range(1, n // 2 + 1):
            r = mpfr(math.cos(math.pi * (j - 0.25) / (n + 0.5)))
            r, derivative = _newton_legendre_root(r, n, eps)

            w = 2 / ((1 - r * r) * derivative * derivative)
            nodes.append(QuadratureNode(r, w))
            nodes.append(QuadratureNode(-r, w))

    logger.debug(
        "Generated %d Gauss-Legendre nodes (degree=%d, precision=%d)",
        len(nodes), degree, precision,
    )
    return nodes


def _newton_legendre_root(r, n: int, eps):
    """
    Уточнение корня Pₙ методом Newton.

    Returns:
        (r, P'ₙ(r)) — корень и производная в последней точке итерации
    """
    for _ in range(NEWTON_MAX_ITERATIONS):
        p_curr = mpfr(1)
        p_prev = mpfr(0)
        for k in range(1, n + 1):
            p_curr, p_prev = ((2 * k - 1) * r * p_curr - (k - 1) * p_prev) / k, p_curr

        derivative = n * (r * p_curr - p_prev) / (r * r - 1)
        correction = p_curr / derivative
        r -= correction

        if abs(correction) <= eps:
            return r, derivative

    logger.warning(
        "Newton iteration for Legendre root did not converge (n=%d, r=%s)", n, r
    )
    raise ConvergenceFailure(
        f"Legendre root refinement did not converge in {NEWTON_MAX_ITERATIONS} "
        f"iterations (n={n})"
    )
