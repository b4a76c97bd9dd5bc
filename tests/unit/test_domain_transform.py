"""
Тесты для Domain Transform — перенос узлов на [a, b]

Проверяемые инварианты:
1. Конечный интервал: x → c·x + d, w → c·w
2. a = −1, b = 1: узлы не изменяются
3. Бесконечные границы: формулы для (−∞, ∞), (−∞, b], [a, ∞), (∞, −∞)
4. Недопустимый интервал → DomainError, узлы не изменены
"""

import gmpy2
import pytest
from gmpy2 import mpfr

from src.core.domain.quadrature import QuadratureNode, copy_nodes
from src.core.math.errors import DomainError
from src.quadrature.domain_transform import (
    IntervalKind,
    classify_interval,
    transform,
)
from src.quadrature.gauss_legendre import gauss_legendre_nodes

INF = gmpy2.inf()


@pytest.fixture
def canonical_nodes():
    """Канонические узлы Gauss–Legendre степени 2"""
    return gauss_legendre_nodes(53, 2)


@pytest.fixture
def half_node():
    """Один узел (0.5, 1)"""
    return [QuadratureNode(mpfr("0.5"), mpfr(1))]


def _snapshot(nodes):
    return [(node.x, node.w) for node in nodes]


class TestTransformFinite:
    """Тесты конечного интервала."""

    def test_maps_to_2_6(self, canonical_nodes):
        """[2, 6]: c = 2, d = 4 → x' = 2x + 4, w' = 2w"""
        original = copy_nodes(canonical_nodes)
        transform(53, canonical_nodes, 2, 6)

        for before, after in zip(original, canonical_nodes):
            assert float(after.x) == pytest.approx(2 * float(before.x) + 4, abs=1e-14)
            assert float(after.w) == pytest.approx(2 * float(before.w), abs=1e-14)

    def test_identity_interval_unchanged(self, canonical_nodes):
        """a = −1, b = 1: идемпотентность"""
        original = _snapshot(canonical_nodes)
        transform(53, canonical_nodes, -1, 1)
        transform(53, canonical_nodes, mpfr(-1), mpfr(1))
        assert _snapshot(canonical_nodes) == original

    def test_reversed_finite_negates_weights(self, half_node):
        """[1, 0]: c = −1/2"""
        transform(53, half_node, 1, 0)
        assert half_node[0].x == mpfr("0.25")
        assert half_node[0].w == mpfr("-0.5")

    def test_weights_sum_to_length(self, canonical_nodes):
        transform(53, canonical_nodes, 0, 3)
        with gmpy2.context(precision=100):
            total = sum((node.w for node in canonical_nodes), mpfr(0))
        assert float(total) == pytest.approx(3.0, abs=1e-14)

    def test_bounds_rounded_to_precision(self, half_node):
        """Границы округляются до precision до использования"""
        transform(10, half_node, 0, "0.1")
        assert half_node[0].x.precision == 10

    def test_bounds_rounded_at_single_bit(self):
        """precision = 1: 5 → 4, 7 → 8, вес умножается на (8 − 4)/2 = 2"""
        nodes = [QuadratureNode(mpfr(0), mpfr(1))]
        transform(1, nodes, mpfr(5), mpfr(7))
        assert nodes[0].w == 2
        assert nodes[0].w.precision == 1


class TestTransformInfinite:
    """Тесты бесконечных интервалов."""

    def test_upper_infinite(self):
        """[a, ∞): u = 2/(x + 1), x' = a + u − 1, w' = w·u²/2"""
        nodes = [QuadratureNode(mpfr(0), mpfr(1)), QuadratureNode(mpfr("0.5"), mpfr(1))]
        transform(53, nodes, 0, INF)

        assert nodes[0].x == 1 and nodes[0].w == 2
        assert float(nodes[1].x) == pytest.approx(1 / 3, abs=1e-15)
        assert float(nodes[1].w) == pytest.approx((4 / 3) ** 2 / 2, abs=1e-15)

    def test_lower_infinite(self):
        """(−∞, b]: x' = b − u + 1"""
        nodes = [QuadratureNode(mpfr(0), mpfr(1))]
        transform(53, nodes, -INF, 3)
        assert nodes[0].x == 2
        assert nodes[0].w == 2

    def test_real_line(self, half_node):
        """(−∞, ∞): x' = x/√(1 − x²), w' = w/(1 − x²)^(3/2)"""
        transform(53, half_node, -INF, INF)
        assert float(half_node[0].x) == pytest.approx(0.5 / 0.75 ** 0.5, abs=1e-15)
        assert float(half_node[0].w) == pytest.approx(0.75 ** -1.5, abs=1e-14)

    def test_reversed_real_line(self, canonical_nodes):
        """(∞, −∞): абсциссы как у (−∞, ∞), веса с обратным знаком"""
        forward = copy_nodes(canonical_nodes)
        transform(53, forward, -INF, INF)
        transform(53, canonical_nodes, INF, -INF)

        for f_node, r_node in zip(forward, canonical_nodes):
            assert r_node.x == f_node.x
            assert r_node.w == -f_node.w


class TestTransformInvalid:
    """Тесты недопустимых интервалов."""

    @pytest.mark.parametrize(
        "a, b",
        [
            (INF, 0),
            (0, -INF),
            (-INF, -INF),
            (INF, INF),
            (gmpy2.nan(), 1),
            (0, gmpy2.nan()),
        ],
    )
    def test_invalid_interval_leaves_nodes(self, canonical_nodes, a, b):
        original = _snapshot(canonical_nodes)
        with pytest.raises(DomainError, match="Invalid interval"):
            transform(53, canonical_nodes, a, b)
        assert _snapshot(canonical_nodes) == original


class TestClassifyInterval:
    """Тесты classify_interval."""

    def test_kinds(self):
        assert classify_interval(mpfr(0), mpfr(1)) is IntervalKind.FINITE
        assert classify_interval(-INF, INF) is IntervalKind.REAL_LINE
        assert classify_interval(-INF, mpfr(0)) is IntervalKind.LOWER_INFINITE
        assert classify_interval(mpfr(0), INF) is IntervalKind.UPPER_INFINITE
        assert classify_interval(INF, -INF) is IntervalKind.REVERSED_REAL_LINE

    def test_invalid(self):
        with pytest.raises(DomainError):
            classify_interval(INF, mpfr(0))
