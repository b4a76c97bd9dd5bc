"""
Domain Transform — перенос канонических узлов на произвольный интервал

Переписывает последовательность узлов на месте с [−1, 1] на [a, b]:

    [a, b] конечный:  x' = c·x + d,  w' = c·w,  c = (b − a)/2, d = (b + a)/2
    (−∞, +∞):          x' = x/√(1 − x²),  w' = w/(1 − x²)^(3/2)
    (−∞, b]:           u = 2/(x + 1),  x' = b − u + 1,  w' = w·u²/2
    [a, +∞):           u = 2/(x + 1),  x' = a + u − 1,  w' = w·u²/2
    (+∞, −∞):          перенос на (−∞, +∞) и смена знака весов

Любая другая комбинация бесконечных границ (а также NaN) — DomainError,
узлы при этом не изменяются.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. a = −1, b = 1 → узлы не изменяются (идемпотентность)
2. Границы округляются до precision перед использованием
3. Проверка интервала выполняется до первой модификации
"""

from enum import Enum

import gmpy2
from gmpy2 import mpfr

from src.core.domain.quadrature import NodeSequence
from src.core.math.context import working_context
from src.core.math.errors import DomainError
from src.core.math.numerical_safeguards import to_real, validate_precision


class IntervalKind(str, Enum):
    """Тип интервала интегрирования по бесконечности границ."""

    FINITE = "FINITE"
    REAL_LINE = "REAL_LINE"
    LOWER_INFINITE = "LOWER_INFINITE"
    UPPER_INFINITE = "UPPER_INFINITE"
    REVERSED_REAL_LINE = "REVERSED_REAL_LINE"


def classify_interval(a, b) -> IntervalKind:
    """
    Классификация интервала [a, b].

    Raises:
        DomainError: Несовместимые бесконечные границы или NaN

    Examples:
        >>> classify_interval(mpfr(0), gmpy2.inf())
        <IntervalKind.UPPER_INFINITE: 'UPPER_INFINITE'>
    """
    if gmpy2.is_nan(a) or gmpy2.is_nan(b):
        raise DomainError(f"Invalid interval: [{a}, {b}]")

    a_inf = gmpy2.is_infinite(a)
    b_inf = gmpy2.is_infinite(b)

    if not a_inf and not b_inf:
        return IntervalKind.FINITE
    if a_inf and a < 0 and b_inf and b > 0:
        return IntervalKind.REAL_LINE
    if a_inf and a < 0 and not b_inf:
        return IntervalKind.LOWER_INFINITE
    if not a_inf and b_inf and b > 0:
        return IntervalKind.UPPER_INFINITE
    if a_inf and a > 0 and b_inf and b < 0:
        return IntervalKind.REVERSED_REAL_LINE

    raise DomainError(f"Invalid interval: [{a}, {b}]")


def transform(precision: int, nodes: NodeSequence, a, b) -> None:
    """
    Перенос узлов с [−1, 1] на [a, b] на месте.

    Args:
        precision: Точность вычислений в битах
        nodes: Канонические узлы (изменяются на месте)
        a: Нижняя граница (mpfr/int/float/str, допускается ±∞)
        b: Верхняя граница

    Raises:
        DomainError: Недопустимый интервал (узлы не изменены)

    Examples:
        >>> from src.core.domain.quadrature import QuadratureNode
        >>> nodes = [QuadratureNode(mpfr("0.5"), mpfr(1))]
        >>> transform(53, nodes, 2, 6)
        >>> nodes[0].x, nodes[0].w
        (mpfr('5.0'), mpfr('2.0'))
    """
    validate_precision(precision)

    with working_context(precision):
        a = mpfr(to_real(a))
        b = mpfr(to_real(b))
        kind = classify_interval(a, b)

        if kind is IntervalKind.FINITE:
            if a == -1 and b == 1:
                return
            c = (b - a) / 2
            d = (b + a) / 2
            for node in nodes:
                node.x = c * node.x + d
                node.w = c * node.w

        elif kind is IntervalKind.REAL_LINE:
            for node in nodes:
                # (1 − x)(1 + x) сохраняет младшие биты у |x| → 1
                one_minus_x2 = (1 - node.x) * (1 + node.x)
                rsqrt = gmpy2.rec_sqrt(one_minus_x2)
                node.x = node.x * rsqrt
                node.w = node.w * rsqrt / one_minus_x2

        elif kind is IntervalKind.LOWER_INFINITE:
            for node in nodes:
                u = 2 / (node.x + 1)
                node.x = b - u + 1
                node.w = node.w * u * u / 2

        elif kind is IntervalKind.UPPER_INFINITE:
            for node in nodes:
                u = 2 / (node.x + 1)
                node.x = a + u - 1
                node.w = node.w * u * u / 2

        else:
            transform(precision, nodes, b, a)
            for node in nodes:
                node.w = -node.w
