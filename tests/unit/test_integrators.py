"""
Тесты для адаптивных интеграторов Gauss–Legendre и tanh-sinh

Проверяемые инварианты:
1. Интегралы гладких функций вычисляются с точностью контекста
2. Бесконечные интервалы и особенности на концах (tanh-sinh)
3. Сумма по под-интервалам points, совпадающие точки пропускаются
4. Кэш узлов: повторное использование и переиспользование канонического набора
5. drop_caches() очищает кэши
"""

import dataclasses

import gmpy2
import pytest
from gmpy2 import mpfr

from src.core.math.constants import ConstantCache, default_constants
from src.core.math.context import NumericContext, RoundingMode
from src.core.math.errors import DomainError
from src.quadrature.gauss_legendre import gauss_legendre_nodes
from src.quadrature.integrator import (
    NODE_CACHE_SIZE,
    GaussLegendreIntegrator,
    IntegratorConfig,
    TanhSinhIntegrator,
    drop_caches,
    guess_degree,
    quad_gauss_legendre,
    quad_tanh_sinh,
)

INF = gmpy2.inf()


@pytest.fixture
def ctx():
    return NumericContext(precision=53)


def _close(value, expected, bits):
    with gmpy2.context(precision=200):
        return abs(value - expected) < mpfr(2) ** -bits


def _pi(precision=200):
    with gmpy2.context(precision=precision):
        return gmpy2.const_pi()


# =============================================================================
# ТЕСТЫ: Gauss–Legendre
# =============================================================================


class TestQuadGaussLegendre:
    """Тесты quad_gauss_legendre."""

    def test_polynomial(self, ctx):
        result = quad_gauss_legendre(ctx, lambda x: x * x, [0, 1])
        with gmpy2.context(precision=200):
            expected = mpfr(1) / 3
        assert _close(result.value, expected, 50)

    def test_sine_over_half_period(self, ctx):
        result = quad_gauss_legendre(ctx, gmpy2.sin, [0, _pi(53)])
        assert _close(result.value, 2, 45)
        assert result.error < mpfr(2) ** -40

    def test_exponential(self, ctx):
        result = quad_gauss_legendre(ctx, gmpy2.exp, [0, 1])
        with gmpy2.context(precision=200):
            expected = gmpy2.exp(1) - 1
        assert _close(result.value, expected, 48)

    def test_multiple_subintervals(self, ctx):
        """Сумма по [0, 1] и [1, 2]"""
        result = quad_gauss_legendre(ctx, lambda x: x * x, [0, 1, 2])
        with gmpy2.context(precision=200):
            expected = mpfr(8) / 3
        assert _close(result.value, expected, 48)

    def test_equal_points_contribute_nothing(self, ctx):
        result = quad_gauss_legendre(ctx, lambda x: x * x, [1, 1])
        assert result.value == 0
        assert result.error == 0

    def test_reversed_interval(self, ctx):
        result = quad_gauss_legendre(ctx, lambda x: x * x, [1, 0])
        with gmpy2.context(precision=200):
            expected = -mpfr(1) / 3
        assert _close(result.value, expected, 50)

    def test_result_precision_and_rounding(self):
        down = NumericContext(precision=30, rounding=RoundingMode.DOWN)
        up = NumericContext(precision=30, rounding=RoundingMode.UP)
        value_down = quad_gauss_legendre(down, lambda x: x * x, [0, 1]).value
        value_up = quad_gauss_legendre(up, lambda x: x * x, [0, 1]).value

        assert value_down.precision == 30
        assert value_up > value_down

    def test_higher_precision(self):
        ctx = NumericContext(precision=200)
        result = quad_gauss_legendre(ctx, gmpy2.exp, [0, 1])
        with gmpy2.context(precision=400):
            expected = gmpy2.exp(1) - 1
            assert abs(result.value - expected) < mpfr(2) ** -190


# =============================================================================
# ТЕСТЫ: tanh-sinh
# =============================================================================


class TestQuadTanhSinh:
    """Тесты quad_tanh_sinh."""

    def test_polynomial(self, ctx):
        result = quad_tanh_sinh(ctx, lambda x: x * x, [0, 1])
        with gmpy2.context(precision=200):
            expected = mpfr(1) / 3
        assert _close(result.value, expected, 45)

    def test_endpoint_singularity(self, ctx):
        """∫₀¹ √x dx = 2/3"""
        result = quad_tanh_sinh(ctx, gmpy2.sqrt, [0, 1])
        with gmpy2.context(precision=200):
            expected = mpfr(2) / 3
        assert _close(result.value, expected, 40)

    def test_gaussian_over_real_line(self, ctx):
        """∫ e^(−x²) по (−∞, ∞) = √π"""
        result = quad_tanh_sinh(ctx, lambda x: gmpy2.exp(-x * x), [-INF, INF])
        with gmpy2.context(precision=200):
            expected = gmpy2.sqrt(gmpy2.const_pi())
        assert _close(result.value, expected, 40)

    def test_exponential_decay_half_line(self, ctx):
        """∫₀^∞ e^(−x) dx = 1"""
        result = quad_tanh_sinh(ctx, lambda x: gmpy2.exp(-x), [0, INF])
        assert _close(result.value, 1, 40)

    def test_lower_infinite(self, ctx):
        """∫_{−∞}^0 e^x dx = 1"""
        result = quad_tanh_sinh(ctx, gmpy2.exp, [-INF, 0])
        assert _close(result.value, 1, 40)

    def test_reversed_real_line(self, ctx):
        forward = quad_tanh_sinh(ctx, lambda x: gmpy2.exp(-x * x), [-INF, INF])
        backward = quad_tanh_sinh(ctx, lambda x: gmpy2.exp(-x * x), [INF, -INF])
        assert _close(backward.value, -forward.value, 40)


# =============================================================================
# ТЕСТЫ: валидация
# =============================================================================


class TestQuadValidation:
    """Тесты валидации входов интеграторов."""

    def test_too_few_points(self, ctx):
        with pytest.raises(DomainError, match="At least two"):
            quad_gauss_legendre(ctx, lambda x: x, [0])

    def test_invalid_max_degree(self, ctx):
        with pytest.raises(DomainError, match="degree"):
            quad_tanh_sinh(ctx, lambda x: x, [0, 1], max_degree=0)

    def test_invalid_interval(self, ctx):
        with pytest.raises(DomainError, match="Invalid interval"):
            quad_gauss_legendre(ctx, lambda x: x, [INF, 0])

    def test_max_degree_one(self, ctx):
        """Одна степень: оценка ошибки равна epsilon"""
        result = quad_gauss_legendre(ctx, lambda x: x * x, [0, 1], max_degree=1)
        assert _close(result.value, mpfr(1) / 3, 50)
        assert result.error == mpfr(2) ** (1 - 53)


# =============================================================================
# ТЕСТЫ: кэш узлов и конфигурация
# =============================================================================


class CountingGaussLegendre(GaussLegendreIntegrator):
    """Интегратор, считающий генерации узлов."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.generated = []

    def calc_nodes(self, precision, degree):
        self.generated.append((precision, degree))
        return super().calc_nodes(precision, degree)


class TestNodeCache:
    """Тесты кэша узлов."""

    def test_same_key_returns_cached_sequence(self):
        integrator = GaussLegendreIntegrator()
        first = integrator.get_nodes(93, 2, mpfr(0), mpfr(1))
        assert integrator.get_nodes(93, 2, mpfr(0), mpfr(1)) is first

    def test_canonical_set_reused_for_new_interval(self):
        integrator = CountingGaussLegendre()
        on_unit = integrator.get_nodes(93, 2, mpfr(0), mpfr(1))
        on_other = integrator.get_nodes(93, 2, mpfr(2), mpfr(5))

        assert integrator.generated == [(93, 2)]
        assert len(on_unit) == len(on_other) == 6
        assert on_unit is not on_other

    def test_canonical_set_not_modified(self):
        integrator = GaussLegendreIntegrator()
        canonical = integrator.get_nodes(93, 1, mpfr(-1), mpfr(1))
        integrator.get_nodes(93, 1, mpfr(0), INF)

        expected = gauss_legendre_nodes(93, 1)
        assert [(n.x, n.w) for n in canonical] == [(n.x, n.w) for n in expected]

    def test_drop_caches_forces_regeneration(self):
        integrator = CountingGaussLegendre()
        integrator.get_nodes(93, 1, mpfr(0), mpfr(1))
        integrator.drop_caches()
        integrator.get_nodes(93, 1, mpfr(0), mpfr(1))
        assert integrator.generated == [(93, 1), (93, 1)]

    def test_quad_reuses_nodes_between_calls(self, ctx):
        integrator = CountingGaussLegendre()
        integrator.quad(ctx, lambda x: x * x, [0, 1])
        generated = len(integrator.generated)
        integrator.quad(ctx, lambda x: x * x * x, [0, 1])
        assert len(integrator.generated) == generated

    def test_bounded_cache(self):
        integrator = CountingGaussLegendre(IntegratorConfig(node_cache_size=2))
        for b in range(1, 5):
            integrator.get_nodes(93, 1, mpfr(0), mpfr(b))
        assert len(integrator._node_cache) == 2


class TestModuleDropCaches:
    """Тесты drop_caches на уровне модуля."""

    def test_clears_constant_cache(self, ctx):
        quad_tanh_sinh(ctx, lambda x: x, [0, 1], max_degree=2)
        assert len(default_constants()) > 0
        drop_caches()
        assert len(default_constants()) == 0

    def test_idempotent(self, ctx):
        drop_caches()
        drop_caches()
        result = quad_gauss_legendre(ctx, lambda x: x * x, [0, 1])
        assert _close(result.value, mpfr(1) / 3, 50)


class TestIntegratorConfig:
    """Тесты IntegratorConfig и guess_degree."""

    def test_defaults(self):
        config = IntegratorConfig()
        assert config.extra_precision == 20
        assert config.node_extra_precision == 20
        assert config.node_cache_size == NODE_CACHE_SIZE == 256

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            IntegratorConfig().extra_precision = 5

    @pytest.mark.parametrize(
        "precision, degree",
        [(10, 6), (30, 6), (53, 7), (120, 8), (1000, 12)],
    )
    def test_guess_degree(self, precision, degree):
        assert guess_degree(precision) == degree

    def test_empty_constant_cache_is_kept(self):
        """Пустой ConstantCache не подменяется общим экземпляром"""
        constants = ConstantCache()
        assert len(constants) == 0

        integrator = TanhSinhIntegrator(constants=constants)
        assert integrator.constants is constants
        assert integrator.constants is not default_constants()

    def test_explicit_config_is_kept(self):
        config = IntegratorConfig(extra_precision=5, node_cache_size=4)
        integrator = GaussLegendreIntegrator(config=config)
        assert integrator.config is config

    def test_tanh_sinh_integrator_uses_own_constants(self, ctx):
        constants = ConstantCache()
        integrator = TanhSinhIntegrator(constants=constants)
        result = integrator.quad(ctx, lambda x: x, [0, 2], max_degree=3)
        assert _close(result.value, 2, 40)
        assert len(constants) > 0
