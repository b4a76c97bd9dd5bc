"""
Numerical Differentiation — производные конечными разностями

n-я производная f в точке x через n-ю конечную разность:

    Δⁿ = Σ_k b_k · f(x + s_k·h),  b₀ = (−1)ⁿ,  b_{k+1} = b_k·(k − n)/(k + 1)
    f⁽ⁿ⁾(x) ≈ Δⁿ / normⁿ

    LEFT / RIGHT:  s_k = 0, 1, …, n;         norm = ∓h / h
    CENTRAL:       s_k = −n, −n + 2, …, n;   norm = 2h

Шаг h = 2^(−precision − extra_precision − hextra), где hextra = mag(x) + 1
при relative=True. Рабочая точность (precision + 2·extra_precision)·(n + 1)
компенсирует сокращение старших разрядов в Δⁿ.

singular=True сдвигает x на h/2, чтобы f не вычислялась точно в x.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. n < 0 → DomainError
2. n = 0 и singular=False → f(x) без разностей
3. Коэффициенты b_k — точные целые (биномиальные со знаком)
"""

from enum import Enum
from typing import Callable, Final

import gmpy2
from gmpy2 import mpfr

from src.core.math.context import NumericContext, working_context
from src.core.math.errors import DomainError
from src.core.math.numerical_safeguards import magnitude, power_of_two, to_real

# =============================================================================
# ПАРАМЕТРЫ
# =============================================================================

# Дополнительные биты точности по умолчанию
DEFAULT_EXTRA_PRECISION: Final[int] = 10


class DerivativeDirection(str, Enum):
    """Направление конечной разности."""

    LEFT = "LEFT"
    CENTRAL = "CENTRAL"
    RIGHT = "RIGHT"


def difference_coefficients(n: int) -> list[int]:
    """
    Коэффициенты n-й разности: b₀ = (−1)ⁿ, b_{k+1} = b_k·(k − n)/(k + 1).

    Examples:
        >>> difference_coefficients(2)
        [1, -2, 1]
        >>> difference_coefficients(3)
        [-1, 3, -3, 1]
    """
    if n < 0:
        raise DomainError(f"Derivative order must be >= 0, got {n}")

    coefficients = []
    b = -1 if n % 2 else 1
    for k in range(n + 1):
        coefficients.append(b)
        b = b * (k - n) // (k + 1)
    return coefficients


def differentiate(
    ctx: NumericContext,
    f: Callable,
    x,
    n: int = 1,
    direction: DerivativeDirection = DerivativeDirection.CENTRAL,
    extra_precision: int = DEFAULT_EXTRA_PRECISION,
    relative: bool = False,
    singular: bool = False,
):
    """
    n-я производная f в точке x.

    Args:
        ctx: Численный контекст результата
        f: Функция mpfr → mpfr (вызывается в рабочем контексте)
        x: Точка дифференцирования
        n: Порядок производной (>= 0)
        direction: LEFT, CENTRAL или RIGHT
        extra_precision: Дополнительные биты для шага и рабочей точности
        relative: Масштабировать шаг по величине x
        singular: В x особенность, f не вычисляется точно в x

    Returns:
        mpfr в точности ctx

    Raises:
        DomainError: n < 0

    Examples:
        >>> ctx = NumericContext(precision=53)
        >>> float(differentiate(ctx, lambda t: t ** 3, 2, n=2))
        12.0
    """
    if n < 0:
        raise DomainError(f"Derivative order must be >= 0, got {n}")

    direction = DerivativeDirection(direction)

    if n == 0 and not singular:
        with working_context(ctx.precision):
            return ctx.round(f(to_real(x)))

    working_precision = (ctx.precision + 2 * extra_precision) * (n + 1)

    with working_context(working_precision):
        x = to_real(x)

        hextra = 0
        if relative and not gmpy2.is_zero(x):
            hextra = int(magnitude(x)) + 1

        h = power_of_two(-ctx.precision - extra_precision - hextra)

        if direction is DerivativeDirection.CENTRAL:
            norm = 2 * h
            steps = range(-n, n + 1, 2)
        else:
            if direction is DerivativeDirection.LEFT:
                h = -h
            norm = h
            steps = range(n + 1)

        if singular:
            x = x + h / 2

        total = mpfr(0)
        for b, k in zip(difference_coefficients(n), steps):
            total += b * f(x + k * h)

        result = total / norm ** n

    return ctx.round(result)
