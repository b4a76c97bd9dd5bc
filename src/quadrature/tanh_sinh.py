"""
Tanh-Sinh Nodes — double-exponential узлы на (−1, 1)

Замена переменной x = tanh(π/2·sinh t) с шагом h по t:
    a = (π/4)·e^t,  b = (π/4)·e^(−t)     (a − b = π/2·sinh t)
    c = e^(a − b),  co = (c + 1/c)/2,  si = (c − 1/c)/2
    x = si/co,      w = (a + b)/co²

degree = 1: h = 2^(−1), первый узел (0, π/2), далее все t = k·h
degree > 1: h = 2·2^(−degree), t = 2^(−degree)·(1, 3, 5, ...) — только
новые узлы уровня (чётные уже учтены предыдущими уровнями)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Рабочая точность precision + 30
2. Генерация прекращается при |x − 1| ≤ 2^(−precision−10)
3. Не более 1 + 20·2^degree шагов
"""

import logging
from typing import Final, Optional

import gmpy2
from gmpy2 import mpfr

from src.core.domain.quadrature import NodeSequence, QuadratureNode
from src.core.math.constants import ConstantCache, default_constants
from src.core.math.context import working_context
from src.core.math.numerical_safeguards import (
    power_of_two,
    validate_degree,
    validate_precision,
)

logger = logging.getLogger(__name__)

# =============================================================================
# ПАРАМЕТРЫ
# =============================================================================

# Дополнительные биты рабочей точности генератора
TANH_SINH_EXTRA_PRECISION: Final[int] = 30

# Дополнительные биты порога отсечения: |x − 1| ≤ 2^(−precision − 10)
TANH_SINH_TOLERANCE_EXTRA_BITS: Final[int] = 10

# Множитель лимита шагов: 1 + TANH_SINH_STEP_FACTOR·2^degree
TANH_SINH_STEP_FACTOR: Final[int] = 20


def tanh_sinh_nodes(
    precision: int,
    degree: int,
    constants: Optional[ConstantCache] = None,
) -> NodeSequence:
    """
    Узлы и веса tanh-sinh уровня degree.

    Args:
        precision: Целевая точность в битах
        degree: Уровень (>= 1)
        constants: Кэш констант (по умолчанию общий)

    Returns:
        Последовательность узлов; для degree = 1 начинается с (0, π/2)

    Raises:
        DomainError: precision < 1 или degree < 1
    """
    validate_precision(precision)
    validate_degree(degree)

    if constants is None:
        constants = default_constants()

    working_precision = precision + TANH_SINH_EXTRA_PRECISION
    nodes: NodeSequence = []

    with working_context(working_precision):
        pi = constants.pi(working_precision)
        tol = power_of_two(-precision - TANH_SINH_TOLERANCE_EXTRA_BITS)
        t0 = power_of_two(-degree)

        if degree == 1:
            nodes.append(QuadratureNode(mpfr(0), pi / 2))
            h = t0
        else:
            h = 2 * t0

        exp_h = gmpy2.exp(h)
        exp_minus_h = 1 / exp_h

        exp_t0 = gmpy2.exp(t0)
        a = pi / 4 * exp_t0
        b = pi / 4 / exp_t0

        for _ in range(1 + TANH_SINH_STEP_FACTOR * 2 ** degree):
            c = gmpy2.exp(a - b)
            d = 1 / c
            co = (c + d) / 2
            si = (c - d) / 2
            x = si / co
            w = (a + b) / (co * co)

            if abs(x - 1) <= tol:
                break

            a *= exp_h
            b *= exp_minus_h
            nodes.append(QuadratureNode(x, w))
            nodes.append(QuadratureNode(-x, w))

    logger.debug(
        "Generated %d tanh-sinh nodes (degree=%d, precision=%d)",
        len(nodes), degree, precision,
    )
    return nodes
