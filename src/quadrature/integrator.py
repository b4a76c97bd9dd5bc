"""
Adaptive Integrators — Gauss–Legendre и tanh-sinh квадратуры

Интеграл по последовательным под-интервалам points:
    ∫ f = Σ_i ∫_{points[i]}^{points[i+1]} f

Для каждого под-интервала степени 1..max_degree суммируются по очереди,
последовательность оценок передаётся в estimate_error; итерация
прекращается, когда оценка ошибки < epsilon (начиная со степени 2).

    epsilon          = 2^(1 − precision)
    working          = precision + extra_precision
    точность узлов   = working + node_extra_precision
    max_degree       = guess_degree(precision) по умолчанию

Суммы:
    Gauss–Legendre:  S_d = Σ wᵢ f(xᵢ)
    tanh-sinh:       S_d = h·(S_{d−1}/(2h) + Σ wᵢ f(xᵢ)),  h = 2^(−d)

Узлы кэшируются по ключу (precision, degree, a, b); при промахе
канонический набор (−1, 1) копируется и переносится на [a, b] вместо
повторной генерации. Интервал (−∞, +∞) сворачивается в (0, +∞) с
подынтегральной функцией f(−x) + f(x).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Кэш узлов ограничен (LRU, NODE_CACHE_SIZE) и потокобезопасен
2. Кэшированные последовательности не модифицируются суммированием
3. f вызывается внутри рабочего gmpy2 контекста
4. Результат округляется до точности и режима ctx
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Final, Optional, Sequence

import gmpy2
from gmpy2 import mpfr

from src.core.cache import LRUCache
from src.core.domain.quadrature import NodeSequence, QuadratureResult, copy_nodes
from src.core.math.constants import (
    ConstantCache,
    clear_constant_cache,
    default_constants,
)
from src.core.math.context import NumericContext, working_context
from src.core.math.errors import DomainError
from src.core.math.numerical_safeguards import (
    power_of_two,
    to_real,
    validate_degree,
)
from src.quadrature.error_estimate import estimate_error
from src.quadrature.gauss_legendre import gauss_legendre_nodes
from src.quadrature.tanh_sinh import tanh_sinh_nodes
from src.quadrature.domain_transform import transform

logger = logging.getLogger(__name__)

RealFunction = Callable[[mpfr], object]

# =============================================================================
# ПАРАМЕТРЫ ИНТЕГРАТОРОВ
# =============================================================================

# Дополнительные биты рабочей точности суммирования
INTEGRATOR_EXTRA_PRECISION: Final[int] = 20

# Дополнительные биты точности узлов сверх рабочей
NODE_EXTRA_PRECISION: Final[int] = 20

# Максимальное число наборов узлов в кэше одного интегратора
NODE_CACHE_SIZE: Final[int] = 256

# Базовая степень guess_degree и точность (бит), на которую она рассчитана
BASE_DEGREE: Final[int] = 6
BASE_DEGREE_PRECISION: Final[int] = 30


@dataclass(frozen=True)
class IntegratorConfig:
    """Конфигурация адаптивного интегратора."""

    extra_precision: int = INTEGRATOR_EXTRA_PRECISION
    node_extra_precision: int = NODE_EXTRA_PRECISION
    node_cache_size: int = NODE_CACHE_SIZE


def guess_degree(precision: int) -> int:
    """
    Степень квадратуры по умолчанию для точности precision.

    6 + max(0, ⌈log2(precision/30)⌉)

    Examples:
        >>> guess_degree(30)
        6
        >>> guess_degree(53)
        7
        >>> guess_degree(1000)
        12
    """
    return BASE_DEGREE + max(0, math.ceil(math.log2(precision / BASE_DEGREE_PRECISION)))


# =============================================================================
# BASE INTEGRATOR
# =============================================================================


class QuadratureIntegrator(ABC):
    """
    Базовый адаптивный интегратор.

    Подклассы определяют генерацию канонических узлов (calc_nodes) и
    суммирование очередной степени (sum_next).
    """

    def __init__(
        self,
        config: Optional[IntegratorConfig] = None,
        constants: Optional[ConstantCache] = None,
    ):
        self.config = IntegratorConfig() if config is None else config
        self.constants = default_constants() if constants is None else constants
        self._node_cache: LRUCache[tuple, NodeSequence] = LRUCache(
            self.config.node_cache_size
        )

    @abstractmethod
    def calc_nodes(self, precision: int, degree: int) -> NodeSequence:
        """Канонические узлы степени degree на [−1, 1]."""

    @abstractmethod
    def sum_next(
        self,
        f: RealFunction,
        nodes: NodeSequence,
        degree: int,
        previous: Sequence,
    ):
        """Оценка интеграла степени degree по узлам и предыдущим оценкам."""

    def get_nodes(self, precision: int, degree: int, a, b) -> NodeSequence:
        """
        Узлы степени degree, перенесённые на [a, b], из кэша или вычисленные.

        Возвращаемая последовательность принадлежит кэшу и не должна
        модифицироваться.
        """
        key = (precision, degree, a, b)
        nodes = self._node_cache.get(key)
        if nodes is not None:
            return nodes

        canonical_key = (precision, degree, mpfr(-1), mpfr(1))
        canonical = self._node_cache.get(canonical_key)
        if canonical is None:
            logger.debug(
                "Node cache miss: %s degree=%d precision=%d",
                type(self).__name__, degree, precision,
            )
            canonical = self.calc_nodes(precision, degree)
            self._node_cache.put(canonical_key, canonical)

        if key == canonical_key:
            return canonical

        nodes = copy_nodes(canonical)
        transform(precision, nodes, a, b)
        self._node_cache.put(key, nodes)
        return nodes

    def drop_caches(self) -> None:
        """Очистка кэша узлов интегратора."""
        self._node_cache.clear()

    def quad(
        self,
        ctx: NumericContext,
        f: RealFunction,
        points: Sequence,
        max_degree: Optional[int] = None,
    ) -> QuadratureResult:
        """
        Интеграл f по последовательным под-интервалам points.

        Args:
            ctx: Численный контекст результата
            f: Функция mpfr → mpfr (вызывается в рабочем контексте)
            points: Границы под-интервалов (>= 2, допускаются ±∞)
            max_degree: Максимальная степень (по умолчанию guess_degree)

        Returns:
            QuadratureResult(value, error) в точности ctx

        Raises:
            DomainError: Меньше двух точек, max_degree < 1, недопустимый интервал
        """
        if len(points) < 2:
            raise DomainError(
                f"At least two integration points are required, got {len(points)}"
            )

        if max_degree is None:
            max_degree = guess_degree(ctx.precision)
        validate_degree(max_degree)

        working_precision = ctx.precision + self.config.extra_precision
        node_precision = working_precision + self.config.node_extra_precision
        epsilon = power_of_two(1 - ctx.precision)

        with working_context(working_precision):
            bounds = [mpfr(to_real(point)) for point in points]
            total = mpfr(0)
            total_error = mpfr(0)

            for a, b in zip(bounds, bounds[1:]):
                if a == b:
                    continue

                g = f
                if gmpy2.is_infinite(a) and a < 0 and gmpy2.is_infinite(b) and b > 0:
                    a = mpfr(0)
                    g = _fold_symmetric(f)

                value, error = self._integrate_interval(
                    g, a, b, working_precision, node_precision, epsilon, max_degree
                )
                total += value
                total_error += error

        return QuadratureResult(ctx.round(total), ctx.round(total_error))

    def _integrate_interval(
        self,
        f: RealFunction,
        a,
        b,
        working_precision: int,
        node_precision: int,
        epsilon,
        max_degree: int,
    ):
        estimates = []
        error = epsilon

        for degree in range(1, max_degree + 1):
            nodes = self.get_nodes(node_precision, degree, a, b)
            estimates.append(self.sum_next(f, nodes, degree, estimates))

            if degree > 1:
                error = estimate_error(working_precision, epsilon, estimates)
                if error < epsilon:
                    logger.debug(
                        "Quadrature converged on [%s, %s] at degree %d", a, b, degree
                    )
                    break

        return estimates[-1], error


def _fold_symmetric(f: RealFunction) -> RealFunction:
    """f(−x) + f(x) для интегрирования по (0, +∞) вместо (−∞, +∞)."""

    def folded(x):
        return f(-x) + f(x)

    return folded


# =============================================================================
# CONCRETE INTEGRATORS
# =============================================================================


class GaussLegendreIntegrator(QuadratureIntegrator):
    """
    Gauss–Legendre квадратура.

    Эффективна для гладких функций на конечных интервалах; генерация узлов
    высокой степени дороже, чем для tanh-sinh.
    """

    def calc_nodes(self, precision: int, degree: int) -> NodeSequence:
        return gauss_legendre_nodes(precision, degree)

    def sum_next(self, f, nodes, degree, previous):
        total = mpfr(0)
        for node in nodes:
            total += node.w * f(node.x)
        return total


class TanhSinhIntegrator(QuadratureIntegrator):
    """
    Tanh-sinh (double-exponential) квадратура.

    Устойчива к особенностям на концах интервала. Внутренние особенности
    следует выносить в границы под-интервалов через points.
    """

    def calc_nodes(self, precision: int, degree: int) -> NodeSequence:
        return tanh_sinh_nodes(precision, degree, self.constants)

    def sum_next(self, f, nodes, degree, previous):
        h = power_of_two(-degree)
        total = previous[-1] / (2 * h) if previous else mpfr(0)
        for node in nodes:
            total += node.w * f(node.x)
        return total * h


# =============================================================================
# MODULE-LEVEL API
# =============================================================================

_GAUSS_LEGENDRE = GaussLegendreIntegrator()
_TANH_SINH = TanhSinhIntegrator()


def quad_gauss_legendre(
    ctx: NumericContext,
    f: RealFunction,
    points: Sequence,
    max_degree: Optional[int] = None,
) -> QuadratureResult:
    """
    Интеграл f по points квадратурой Gauss–Legendre.

    Examples:
        >>> ctx = NumericContext(precision=53)
        >>> result = quad_gauss_legendre(ctx, lambda x: x * x, [0, 1])
        >>> float(result.value)  # doctest: +ELLIPSIS
        0.3333333333333333...
    """
    return _GAUSS_LEGENDRE.quad(ctx, f, points, max_degree)


def quad_tanh_sinh(
    ctx: NumericContext,
    f: RealFunction,
    points: Sequence,
    max_degree: Optional[int] = None,
) -> QuadratureResult:
    """Интеграл f по points квадратурой tanh-sinh."""
    return _TANH_SINH.quad(ctx, f, points, max_degree)


def drop_caches() -> None:
    """
    Очистка кэшей узлов общих интеграторов и общего кэша констант.

    Идемпотентна; на корректность последующих вычислений не влияет.
    """
    _GAUSS_LEGENDRE.drop_caches()
    _TANH_SINH.drop_caches()
    clear_constant_cache()
