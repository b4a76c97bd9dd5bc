"""
Lambert W — ветви k = 0 и k = −1 функции, обратной w·e^w

Решение уравнения w·e^w = z в вещественных числах:
- k = 0:  главная ветвь, z ∈ [−1/e, +∞), W ∈ [−1, +∞)
- k = −1: нижняя ветвь, z ∈ [−1/e, 0),   W ∈ (−∞, −1]

Алгоритм (рабочая точность precision + LAMBERTW_EXTRA_PRECISION):
1. Специальные значения: W(0) = 0 (k = 0), −∞ (k = −1); W₀(+∞) = +∞
2. Начальное приближение:
   - |z + 1/e| < BRANCH_SERIES_RADIUS: ряд Пюизё по p = ±√(2e(z + 1/e))
     (при достаточной близости к −1/e ряд сходится сам и Halley не нужен)
   - иначе асимптотики / аппроксимации по ветви
3. Halley: w ← w − Δ/(wew + ew − (w + 2)Δ/(2w + 2)), Δ = w·e^w − z
   Сходимость: mag(w' − w) ≤ mag(w') − (precision − 5)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Ветви k ∉ {0, −1} и z без вещественного значения → NaN (не исключение)
2. Halley ограничен LAMBERTW_MAX_ITERATIONS шагами, далее ConvergenceFailure
3. Результат округляется до precision в режиме rounding
"""

import logging
from typing import Final

import gmpy2
from gmpy2 import mpfr

from src.core.math.constants import default_constants
from src.core.math.context import NumericContext, RoundingMode, working_context
from src.core.math.errors import ConvergenceFailure
from src.core.math.numerical_safeguards import magnitude, to_real, validate_precision

logger = logging.getLogger(__name__)

# =============================================================================
# ПАРАМЕТРЫ LAMBERT W
# =============================================================================

# Максимальное число итераций Halley
LAMBERTW_MAX_ITERATIONS: Final[int] = 100

# Дополнительные биты рабочей точности
LAMBERTW_EXTRA_PRECISION: Final[int] = 30

# Запас (бит) между точностью результата и порогом сходимости
LAMBERTW_TOLERANCE_MARGIN: Final[int] = 5

# Радиус окрестности −1/e, в которой используется ряд Пюизё
BRANCH_SERIES_RADIUS: Final[float] = 0.05

# Коэффициенты аппроксимации W(z) ≈ −1 ± c1·√(z + 1/e) − c2·(z + 1/e)
BRANCH_APPROX_SQRT_COEF: Final[str] = "2.33164398159712"
BRANCH_APPROX_LINEAR_COEF: Final[str] = "1.81218788563936"

# Граница, ниже которой используется аппроксимация у точки ветвления
BRANCH_APPROX_THRESHOLD: Final[float] = -0.2

# Граница линейной аппроксимации главной ветви: W₀(z) ≈ 0.2 + 0.3·z
LINEAR_APPROX_THRESHOLD: Final[float] = 2.5

SUPPORTED_BRANCHES: Final[tuple[int, ...]] = (0, -1)


# =============================================================================
# PUBLIC API
# =============================================================================


def lambert_w(
    precision: int,
    z,
    k: int = 0,
    rounding: RoundingMode = RoundingMode.NEAREST,
):
    """
    Lambert W_k(z) с точностью precision бит.

    Args:
        precision: Точность результата в битах
        z: Аргумент (mpfr/int/float/str/Fraction)
        k: Ветвь (0 или −1; прочие → NaN)
        rounding: Режим округления результата

    Returns:
        mpfr w: w·e^w = z; NaN для неподдерживаемых ветвей и z вне области

    Raises:
        DomainError: precision < 1
        ConvergenceFailure: Halley не сошёлся за LAMBERTW_MAX_ITERATIONS шагов

    Examples:
        >>> float(lambert_w(53, 1))  # Omega
        0.5671432904097838
        >>> lambert_w(53, 0)
        mpfr('0.0')
    """
    validate_precision(precision)
    ctx = NumericContext(precision=precision, rounding=rounding)
    working_precision = precision + LAMBERTW_EXTRA_PRECISION

    with working_context(working_precision):
        z = to_real(z)
        w = _lambert_w_real(z, k, precision, working_precision)

    return ctx.round(w)


def _lambert_w_real(z, k: int, precision: int, working_precision: int):
    if k not in SUPPORTED_BRANCHES or gmpy2.is_nan(z):
        return gmpy2.nan()

    if gmpy2.is_zero(z):
        return mpfr(0) if k == 0 else -gmpy2.inf()

    if gmpy2.is_infinite(z):
        return z if (k == 0 and z > 0) else gmpy2.nan()

    if k == -1 and z > 0:
        return gmpy2.nan()

    constants = default_constants()
    delta = z + constants.e_inv(working_precision)

    if delta < 0:
        if magnitude(delta) >= -precision:
            return gmpy2.nan()
        # Отрицательный δ в пределах округления входа: z = −1/e
        delta = mpfr(0)

    tol = precision - LAMBERTW_TOLERANCE_MARGIN

    if abs(delta) < BRANCH_SERIES_RADIUS:
        w, converged = _branch_point_series(
            delta, k, tol, constants.e(working_precision)
        )
        if converged:
            logger.debug("Lambert W series converged near branch point (k=%d)", k)
            return w
    else:
        w = _initial_guess(z, delta, k)

    return _halley(z, w, tol)


# =============================================================================
# INITIAL APPROXIMATIONS
# =============================================================================


def _branch_point_series(delta, k: int, tol: int, e):
    """
    Ряд Пюизё в окрестности точки ветвления −1/e.

    W = Σ u_l·p^l,  p = √(2e·δ)  (p → −p для k = −1)

    u₀ = −1, u₁ = 1, a₀ = 2, a₁ = −1
    a_l = Σ_{j=2}^{l−1} u_j·u_{l+1−j}
    u_l = (l − 1)(u_{l−2}/2 + a_{l−2}/4)/(l + 1) − a_l/2 − u_{l−1}/(l + 1)

    Число членов ограничено max(2, −mag δ): вдали от −1/e частичная сумма
    служит только начальным приближением для Halley.

    Returns:
        (сумма, True если член ряда стал меньше 2^(−tol))
    """
    p = gmpy2.sqrt(2 * e * delta)
    if k == -1:
        p = -p

    max_terms = max(2.0, -magnitude(delta))

    u = [mpfr(-1), mpfr(1)]
    a = [mpfr(2), mpfr(-1)]
    total = mpfr(0)
    p_power = mpfr(1)

    l = 0
    while l < max_terms:
        if l >= 2:
            a_l = mpfr(0)
            for j in range(2, l):
                a_l += u[j] * u[l + 1 - j]
            a.append(a_l)
            u.append(
                (l - 1) * (u[l - 2] / 2 + a[l - 2] / 4) / (l + 1)
                - a_l / 2
                - u[l - 1] / (l + 1)
            )

        term = u[l] * p_power
        total += term
        if magnitude(term) < -tol:
            return total, True

        p_power *= p
        l += 1

    return total, False


def _initial_guess(z, delta, k: int):
    """
    Начальное приближение вне окрестности ряда.

    k = 0:
        z < −0.2      → −1 + c1·√δ − c2·δ
        |z| < 1/2     → z(1 − z)
        z < 2.5       → 0.2 + 0.3·z
        иначе         → l₁ − l₂ + l₂/l₁ + l₂(l₂ − 2)/(2l₁²), l₁ = ln z, l₂ = ln l₁

    k = −1 (z < 0):
        z < −0.2      → −1 − c1·√δ − c2·δ
        иначе         → l₁ − ln(−l₁), l₁ = ln(−z)
    """
    sqrt_coef = mpfr(BRANCH_APPROX_SQRT_COEF)
    linear_coef = mpfr(BRANCH_APPROX_LINEAR_COEF)

    if k == 0:
        if z < BRANCH_APPROX_THRESHOLD:
            return -1 + sqrt_coef * gmpy2.sqrt(delta) - linear_coef * delta
        if magnitude(z) < -1:
            return z * (1 - z)
        if z < LINEAR_APPROX_THRESHOLD:
            return mpfr("0.2") + mpfr("0.3") * z
        l1 = gmpy2.log(z)
        l2 = gmpy2.log(l1)
        return l1 - l2 + l2 / l1 + l2 * (l2 - 2) / (2 * l1 * l1)

    if z < BRANCH_APPROX_THRESHOLD:
        return -1 - sqrt_coef * gmpy2.sqrt(delta) - linear_coef * delta
    l1 = gmpy2.log(-z)
    return l1 - gmpy2.log(-l1)


# =============================================================================
# HALLEY REFINEMENT
# =============================================================================


def _halley(z, w, tol: int):
    """
    Уточнение корня w·e^w − z = 0 итерацией Halley.

    Raises:
        ConvergenceFailure: Бюджет LAMBERTW_MAX_ITERATIONS исчерпан
    """
    for iteration in range(LAMBERTW_MAX_ITERATIONS):
        ew = gmpy2.exp(w)
        wew = w * ew
        residual = wew - z
        w_next = w - residual / (wew + ew - (w + 2) * residual / (2 * w + 2))

        if not gmpy2.is_nan(w_next) and (
            magnitude(w_next - w) <= magnitude(w_next) - tol
        ):
            logger.debug("Lambert W Halley converged in %d iterations", iteration + 1)
            return w_next

        w = w_next

    logger.warning(
        "Lambert W Halley iteration did not converge: z=%s, last w=%s", z, w
    )
    raise ConvergenceFailure(
        f"Lambert W iteration failed to converge in {LAMBERTW_MAX_ITERATIONS} "
        f"iterations (z={z})"
    )
