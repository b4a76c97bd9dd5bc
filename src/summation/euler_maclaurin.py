"""
Euler–Maclaurin Summation — сумма Σ_{n=a}^{b} f(n) через интеграл

    Σ f(n) ≈ ∫_a^b f + (f(a) + f(b))/2
             + Σ_{k нечётн.} B_{k+1}/(k+1)! · (f⁽ᵏ⁾(b) − f⁽ᵏ⁾(a))

Ряд асимптотический: члены сначала убывают, затем растут. Суммирование
(рабочая точность precision + EULER_MACLAURIN_EXTRA_PRECISION) прекращается:
- |член| < 2^(−precision − 4) при k > 4: член добавляется, ряд сошёлся
- |предыдущий|/|член| < 10 при k > 4: ряд отвергнут, |член| идёт в ошибку

Производные на бесконечных границах (a = −∞, b = +∞) равны нулю, концевой
член f/2 для них не добавляется.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. a ≠ +∞, b ≠ −∞, границы не NaN (иначе DomainError)
2. Не более EULER_MACLAURIN_MAX_TERMS производных на границу
3. Ошибка = ошибка интеграла + отвергнутый член ряда
4. Числа Бернулли точные (mpq)
"""

import logging
import threading
from enum import Enum
from itertools import count, repeat
from typing import Callable, Final, Iterable, Iterator, Optional

import gmpy2
from gmpy2 import mpfr, mpq

from src.core.domain.quadrature import QuadratureResult
from src.core.math.context import NumericContext, working_context
from src.core.math.errors import DomainError
from src.core.math.numerical_safeguards import power_of_two, to_real
from src.differentiation.finite_difference import differentiate
from src.quadrature.integrator import quad_gauss_legendre, quad_tanh_sinh

logger = logging.getLogger(__name__)

# =============================================================================
# ПАРАМЕТРЫ
# =============================================================================

# Дополнительные биты рабочей точности
EULER_MACLAURIN_EXTRA_PRECISION: Final[int] = 10

# Порог сходимости: |член| < 2^(−precision − 4)
EULER_MACLAURIN_TOLERANCE_EXTRA_BITS: Final[int] = 4

# Минимальное отношение соседних членов; меньшее значит расходимость ряда
EULER_MACLAURIN_REJECT_RATIO: Final[int] = 10

# Члены с k <= EULER_MACLAURIN_MIN_ORDER не проверяются на остановку
EULER_MACLAURIN_MIN_ORDER: Final[int] = 4

# Максимальное число производных на границу
EULER_MACLAURIN_MAX_TERMS: Final[int] = 10000


class IntegrationMethod(str, Enum):
    """Квадратура для интеграла в формуле Euler–Maclaurin."""

    TANH_SINH = "TANH_SINH"
    GAUSS_LEGENDRE = "GAUSS_LEGENDRE"


_QUADRATURE = {
    IntegrationMethod.TANH_SINH: quad_tanh_sinh,
    IntegrationMethod.GAUSS_LEGENDRE: quad_gauss_legendre,
}


# =============================================================================
# BERNOULLI NUMBERS
# =============================================================================

_BERNOULLI: list = [mpq(1)]
_BERNOULLI_LOCK = threading.Lock()


def bernoulli_number(n: int):
    """
    Точное число Бернулли Bₙ (B₁ = −1/2).

    B_m = −1/(m + 1) · Σ_{k<m} C(m + 1, k)·B_k

    Raises:
        DomainError: n < 0

    Examples:
        >>> bernoulli_number(2)
        mpq(1,6)
        >>> bernoulli_number(12)
        mpq(-691,2730)
    """
    if n < 0:
        raise DomainError(f"Bernoulli index must be >= 0, got {n}")

    with _BERNOULLI_LOCK:
        for m in range(len(_BERNOULLI), n + 1):
            total = mpq(0)
            for k in range(m):
                total += gmpy2.comb(m + 1, k) * _BERNOULLI[k]
            _BERNOULLI.append(-total / (m + 1))
        return _BERNOULLI[n]


# =============================================================================
# PUBLIC API
# =============================================================================


def euler_maclaurin_sum(
    ctx: NumericContext,
    f: Callable,
    a,
    b,
    a_diffs: Optional[Iterable] = None,
    b_diffs: Optional[Iterable] = None,
    integral: Optional[QuadratureResult] = None,
    method: IntegrationMethod = IntegrationMethod.TANH_SINH,
) -> QuadratureResult:
    """
    Σ_{n=a}^{b} f(n) по формуле Euler–Maclaurin.

    Args:
        ctx: Численный контекст результата
        f: Функция mpfr → mpfr
        a: Нижняя граница (допускается −∞)
        b: Верхняя граница (допускается +∞)
        a_diffs: f⁽ᵏ⁾(a), k = 0, 1, … (по умолчанию численно через differentiate)
        b_diffs: f⁽ᵏ⁾(b), k = 0, 1, …
        integral: Готовая пара (∫_a^b f, ошибка); иначе вычисляется методом method
        method: Квадратура для интеграла

    Returns:
        QuadratureResult(сумма, оценка ошибки) в точности ctx

    Raises:
        DomainError: Недопустимые границы

    Examples:
        >>> ctx = NumericContext(precision=53)
        >>> float(euler_maclaurin_sum(ctx, lambda x: x * x, 0, 10).value)
        385.0
    """
    method = IntegrationMethod(method)
    working_ctx = ctx.with_extra_precision(EULER_MACLAURIN_EXTRA_PRECISION)
    eps = power_of_two(-ctx.precision - EULER_MACLAURIN_TOLERANCE_EXTRA_BITS)

    with working_context(working_ctx.precision):
        a = to_real(a)
        b = to_real(b)
        if gmpy2.is_nan(a) or gmpy2.is_nan(b) or a == gmpy2.inf() or b == -gmpy2.inf():
            raise DomainError(f"Invalid summation bounds: [{a}, {b}]")

        a_lower_infinite = gmpy2.is_infinite(a)
        b_upper_infinite = gmpy2.is_infinite(b)

        if a_lower_infinite:
            a_derivatives: Iterator = repeat(mpfr(0))
        else:
            a_derivatives = iter(a_diffs) if a_diffs is not None else _derivatives(ctx, f, a)

        if b_upper_infinite:
            b_derivatives: Iterator = repeat(mpfr(0))
        else:
            b_derivatives = iter(b_diffs) if b_diffs is not None else _derivatives(ctx, f, b)

        total, series_error = _correction_series(
            a_derivatives, b_derivatives, eps
        )

        if not a_lower_infinite:
            total += f(a) / 2
        if not b_upper_infinite:
            total += f(b) / 2

    if integral is None:
        integral = _QUADRATURE[method](working_ctx, f, [a, b])
    integral_value, integral_error = integral

    with working_context(working_ctx.precision):
        total += integral_value
        error = series_error + integral_error

    return QuadratureResult(ctx.round(total), ctx.round(error))


def _derivatives(ctx: NumericContext, f: Callable, x) -> Iterator:
    """f⁽ᵏ⁾(x), k = 0, 1, …"""
    for order in count():
        yield differentiate(ctx, f, x, n=order)


def _correction_series(a_derivatives: Iterator, b_derivatives: Iterator, eps):
    """
    Σ_{k нечётн.} B_{k+1}/(k+1)! · (f⁽ᵏ⁾(b) − f⁽ᵏ⁾(a)) с правилами остановки.

    Returns:
        (сумма, ошибка): ошибка ненулевая, если ряд отвергнут
    """
    total = mpfr(0)
    error = mpfr(0)
    previous = mpfr(0)

    pairs = zip(a_derivatives, b_derivatives)
    for k, (da, db) in zip(range(EULER_MACLAURIN_MAX_TERMS), pairs):
        if k % 2 == 0:
            continue

        term = (db - da) * bernoulli_number(k + 1) / gmpy2.fac(k + 1)
        mag = abs(term)

        if k > EULER_MACLAURIN_MIN_ORDER and mag < eps:
            total += term
            logger.debug("Euler-Maclaurin series converged at order %d", k)
            break
        if k > EULER_MACLAURIN_MIN_ORDER and abs(previous) / mag < EULER_MACLAURIN_REJECT_RATIO:
            error += mag
            logger.debug(
                "Euler-Maclaurin series rejected at order %d, error term %s", k, mag
            )
            break

        total += term
        previous = term

    return total, error
