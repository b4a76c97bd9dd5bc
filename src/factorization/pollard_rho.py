"""
Integer Factorization — Pollard's rho с оптимизацией Brent

Разложение целого числа на простые множители:
    factor(n) → {prime: multiplicity}

Схема:
1. Знак: n < 0 → записывается −1 → 1, далее |n|
2. Пробное деление на простые < TRIAL_DIVISION_BOUND
3. Pollard's rho (Brent) для составного остатка

Pollard's rho:
    x ← (x² mod n) + a
    P ← P·(z − x) mod n
    каждые BATCH_GCD_INTERVAL шагов: g = gcd(P, n)
    g ≠ 1 → повторный проход y по той же рекурренции до gcd(z − y, n) ≠ 1

Составной множитель t раскладывается с константой a + 1 (выход из
вырожденного цикла). Повторные попытки хранятся в явном стеке пар (n, a),
а не в рекурсии, поэтому глубина стека вызовов ограничена.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Π factor^multiplicity == n (знак через ключ −1)
2. Все ключи — простые (с вероятностью ошибки ≤ 4^−PRIMALITY_CERTAINTY)
3. factor(0) == {}, factor(±1) == {} / {−1: 1}
4. Ошибки наружу не выходят; ретраи с a + 1 — часть алгоритма
"""

import logging
from typing import Final

import gmpy2
from gmpy2 import mpz

from src.core.domain.factors import SIGN_FACTOR, FactorMapping, record_factor

logger = logging.getLogger(__name__)

# =============================================================================
# ПАРАМЕТРЫ ФАКТОРИЗАЦИИ
# =============================================================================

# Число раундов Miller-Rabin для проверки простоты (gmpy2.is_prime)
PRIMALITY_CERTAINTY: Final[int] = 50

# Интервал (в шагах рекурренции) между batch-GCD проверками
BATCH_GCD_INTERVAL: Final[int] = 32

# Граница пробного деления перед Pollard's rho
TRIAL_DIVISION_BOUND: Final[int] = 1000

# Начальное значение циклических переменных x, z, y
RHO_SEED: Final[int] = 2


def is_probable_prime(n) -> bool:
    """Вероятностная проверка простоты с PRIMALITY_CERTAINTY раундами."""
    return bool(gmpy2.is_prime(n, PRIMALITY_CERTAINTY))


# =============================================================================
# TRIAL DIVISION
# =============================================================================


def factor_using_division(
    factors: FactorMapping,
    n,
    bound: int = TRIAL_DIVISION_BOUND,
):
    """
    Пробное деление n на простые, меньшие bound.

    Найденные множители записываются в factors. Если остаток гарантированно
    прост (p² > остатка), он тоже записывается и возвращается 1.

    Args:
        factors: Отображение, пополняемое на месте
        n: Положительное целое
        bound: Верхняя граница пробных делителей (не включительно)

    Returns:
        Остаток (mpz), не имеющий простых делителей < bound

    Examples:
        >>> factors = {}
        >>> factor_using_division(factors, 720)
        mpz(1)
        >>> factors
        {2: 4, 3: 2, 5: 1}
    """
    n = mpz(n)
    p = mpz(2)

    while p < bound and n > 1:
        if p * p > n:
            record_factor(factors, n)
            return mpz(1)

        n, multiplicity = gmpy2.remove(n, p)
        if multiplicity:
            record_factor(factors, p, multiplicity)

        p = gmpy2.next_prime(p)

    return n


# =============================================================================
# POLLARD'S RHO (BRENT)
# =============================================================================


def factor_using_pollard_rho(factors: FactorMapping, n, a: int = 1) -> None:
    """
    Разложение n методом Pollard's rho с оптимизацией Brent.

    Составные множители, найденные по ходу, раскладываются повторно с
    константой a + 1; пары (n, a) обрабатываются из явного стека.

    Args:
        factors: Отображение prime → multiplicity, пополняемое на месте
        n: Целое > 1 (обычно составное без малых делителей)
        a: Аддитивная константа рекурренции x ← x² + a

    Examples:
        >>> factors = {}
        >>> factor_using_pollard_rho(factors, 8051)
        >>> sorted(factors.items())
        [(83, 1), (97, 1)]
    """
    pending: list[tuple[mpz, int]] = [(mpz(n), a)]

    while pending:
        n, a = pending.pop()

        if n == 1:
            continue
        if is_probable_prime(n):
            record_factor(factors, n)
            continue

        _rho_split(factors, n, a, pending)


def _rho_split(
    factors: FactorMapping,
    n: mpz,
    a: int,
    pending: list[tuple[mpz, int]],
) -> None:
    """
    Один проход Pollard's rho для составного n с константой a.

    Простые множители записываются в factors, составные добавляются в
    pending с константой a + 1.
    """
    x = z = y = mpz(RHO_SEED)
    p = mpz(1)
    k = 1
    l = 1

    while n != 1:
        x, z, y, p, k, l, t = _find_divisor(n, a, x, z, y, p, k, l)

        n //= t

        if is_probable_prime(t):
            logger.debug("Pollard rho: prime factor %s (a=%d)", t, a)
            record_factor(factors, t)
        else:
            logger.debug("Pollard rho: composite factor %s, retry with a=%d", t, a + 1)
            pending.append((t, a + 1))

        if is_probable_prime(n):
            record_factor(factors, n)
            return

        x %= n
        z %= n
        y %= n


def _find_divisor(n: mpz, a: int, x, z, y, p, k: int, l: int):
    """
    Поиск нетривиального делителя n по расписанию Brent.

    Returns:
        (x, z, y, p, k, l, t): состояние цикла и найденный делитель t > 1
    """
    while True:
        while True:
            x = x * x % n + a
            p = p * (z - x) % n

            if k % BATCH_GCD_INTERVAL == 1:
                g = gmpy2.gcd(p, n)
                if g != 1:
                    # Повторный проход y от последней контрольной точки
                    while True:
                        y = y * y % n + a
                        t = gmpy2.gcd(z - y, n)
                        if t != 1:
                            return x, z, y, p, k, l, t
                y = x

            k -= 1
            if k == 0:
                break

        # Бюджет исчерпан: новая точка отсчёта и удвоение длины серии
        z = x
        k = l
        l = 2 * l
        for _ in range(k):
            x = x * x % n + a
        y = x


# =============================================================================
# PUBLIC API
# =============================================================================


def factor(n) -> FactorMapping:
    """
    Разложение целого числа на простые множители.

    Args:
        n: int или mpz

    Returns:
        {prime: multiplicity}; ключ −1 фиксирует отрицательный знак.
        factor(0) возвращает пустое отображение.

    Raises:
        TypeError: Если n не целое

    Examples:
        >>> factor(12)
        {2: 2, 3: 1}
        >>> factor(-12)
        {-1: 1, 2: 2, 3: 1}
        >>> factor(1)
        {}
    """
    if isinstance(n, bool) or not isinstance(n, (int, mpz)):
        raise TypeError(f"factor() requires an integer, got {type(n).__name__}")

    factors: FactorMapping = {}
    n = mpz(n)

    if n == 0:
        return factors

    if n < 0:
        record_factor(factors, SIGN_FACTOR)
        n = -n

    n = factor_using_division(factors, n)
    if n == 1:
        return factors

    if is_probable_prime(n):
        record_factor(factors, n)
        return factors

    logger.debug("Trial division left composite cofactor %s, running Pollard rho", n)
    factor_using_pollard_rho(factors, n)
    return factors
