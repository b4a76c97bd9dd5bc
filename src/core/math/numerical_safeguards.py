"""
Numerical Safeguards — примитивы над вещественными mpfr

Модуль обеспечивает общие проверки и вспомогательные функции:
- magnitude: floor(log2|x|) с соглашениями ±∞ для 0 и ∞
- Конверсия входов (int/float/str/Fraction/mpfr) в mpfr без потери точности
- Проверки NaN/Inf для mpfr
- Валидация целочисленных параметров (precision, degree)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. magnitude(0) = −∞, magnitude(±∞) = +∞, magnitude(NaN) = +∞
2. mpfr входы не округляются при конверсии (точность сохраняется)
3. Все операции детерминированы и воспроизводимы
"""

import math
from fractions import Fraction
from typing import Final

import gmpy2
from gmpy2 import mpfr

from src.core.math.errors import DomainError

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Минимальная точность mpfr (бит мантиссы)
MIN_PRECISION_BITS: Final[int] = 1

# Минимальная степень квадратурной формулы
MIN_QUADRATURE_DEGREE: Final[int] = 1


# =============================================================================
# MAGNITUDE
# =============================================================================


def magnitude(x) -> float:
    """
    Логарифмическая величина числа: floor(log2|x|).

    Используется для измерения сходимости и катастрофического сокращения
    в битах. Знак аргумента не влияет на результат.

    Args:
        x: mpfr (или значение, приводимое к mpfr)

    Returns:
        - -inf для x == 0
        - +inf для ±∞ и NaN
        - floor(log2|x|) как float (целое значение) иначе

    Examples:
        >>> magnitude(mpfr(1))
        0.0
        >>> magnitude(mpfr(-1000))
        9.0
        >>> magnitude(mpfr("0.375"))
        -2.0
        >>> magnitude(mpfr(0))
        -inf
    """
    if not isinstance(x, mpfr):
        x = to_real(x)
    if gmpy2.is_zero(x):
        return -math.inf
    if not gmpy2.is_finite(x):
        return math.inf
    # x = m * 2^e, 0.5 <= |m| < 1  =>  floor(log2|x|) = e - 1
    return float(gmpy2.get_exp(x) - 1)


# =============================================================================
# КОНВЕРСИЯ И ПРОВЕРКИ
# =============================================================================


def to_real(value):
    """
    Конверсия входа в mpfr.

    mpfr возвращается как есть (точность сохраняется). int, float, str и
    Fraction конвертируются в точности текущего gmpy2 контекста; вызывающий
    код устанавливает рабочий контекст до конверсии.

    Args:
        value: mpfr, int, mpz, float, str или Fraction

    Returns:
        mpfr

    Raises:
        TypeError: Если тип не поддерживается
    """
    if isinstance(value, mpfr):
        return value
    if isinstance(value, bool):
        raise TypeError(f"Unsupported real value type: {type(value).__name__}")
    if isinstance(value, (int, float, str, Fraction, gmpy2.mpz, gmpy2.mpq)):
        return mpfr(value)
    raise TypeError(f"Unsupported real value type: {type(value).__name__}")


def is_valid_real(value) -> bool:
    """
    Проверка, является ли mpfr конечным (не NaN, не Inf).

    Examples:
        >>> is_valid_real(mpfr(1))
        True
        >>> is_valid_real(gmpy2.inf())
        False
    """
    return bool(gmpy2.is_finite(value))


def power_of_two(exponent: int):
    """
    Точное значение 2^exponent в текущем контексте.

    Examples:
        >>> power_of_two(-3)
        mpfr('0.125')
    """
    return gmpy2.mul_2exp(mpfr(1), exponent)


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_precision(precision: int, name: str = "precision") -> None:
    """
    Валидация точности в битах.

    Raises:
        DomainError: Если precision не целое или < MIN_PRECISION_BITS
    """
    if isinstance(precision, bool) or not isinstance(precision, int):
        raise DomainError(f"{name} must be an integer, got {precision!r}")

    if precision < MIN_PRECISION_BITS:
        raise DomainError(f"{name} must be >= {MIN_PRECISION_BITS}, got {precision}")


def validate_degree(degree: int) -> None:
    """
    Валидация степени квадратурной формулы.

    Raises:
        DomainError: Если degree не целое или < MIN_QUADRATURE_DEGREE
    """
    if isinstance(degree, bool) or not isinstance(degree, int):
        raise DomainError(f"degree must be an integer, got {degree!r}")

    if degree < MIN_QUADRATURE_DEGREE:
        raise DomainError(f"degree must be >= {MIN_QUADRATURE_DEGREE}, got {degree}")
