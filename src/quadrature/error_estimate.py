"""
Error Estimator — эвристическая оценка ошибки по последовательности сходимости

Последовательность оценок интеграла (последняя — самая свежая):

    1 элемент:               epsilon
    2 элемента:              |v₂ − v₁|
    последние три равны:     0
    иначе:
        d1 = log10|last − prev|
        d2 = log10|last − prevprev|
        d3 = −precision
        d4 = min(max(max(d1²/d2, 2·d1), d3), 0)
        error = 10^⌊d4⌋

min/max NaN-aware (gmpy2.minnum/maxnum): NaN-операнд игнорируется.
Результат ограничен сверху 1 и снизу 10^(−precision).
"""

from typing import Sequence

import gmpy2
from gmpy2 import mpfr

from src.core.math.context import working_context
from src.core.math.errors import DomainError
from src.core.math.numerical_safeguards import validate_precision


def estimate_error(precision: int, epsilon, estimates: Sequence):
    """
    Оценка ошибки последней оценки интеграла.

    Args:
        precision: Точность вычислений в битах
        epsilon: Значение, возвращаемое для одноэлементной последовательности
        estimates: Оценки интеграла, самая свежая — последняя

    Returns:
        mpfr оценка абсолютной ошибки

    Raises:
        DomainError: Пустая последовательность

    Examples:
        >>> estimate_error(53, mpfr("1e-10"), [mpfr(1)])
        mpfr('1.0000000000000000e-10')
        >>> estimate_error(53, mpfr("1e-10"), [mpfr(1), mpfr("1.5")])
        mpfr('0.5')
    """
    validate_precision(precision)

    if len(estimates) == 0:
        raise DomainError("Cannot estimate error of an empty convergence sequence")

    if len(estimates) == 1:
        return epsilon

    with working_context(precision):
        last = estimates[-1]
        prev = estimates[-2]

        if len(estimates) == 2:
            return abs(last - prev)

        prevprev = estimates[-3]
        if last == prev and prev == prevprev:
            return mpfr(0)

        d1 = gmpy2.log10(abs(last - prev))
        d2 = gmpy2.log10(abs(last - prevprev))
        d3 = mpfr(-precision)
        d4 = gmpy2.minnum(
            gmpy2.maxnum(gmpy2.maxnum(d1 * d1 / d2, 2 * d1), d3),
            mpfr(0),
        )
        return gmpy2.exp10(gmpy2.floor(d4))
