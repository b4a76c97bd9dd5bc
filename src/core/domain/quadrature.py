"""
Quadrature Domain — узлы и результаты квадратур

- QuadratureNode: пара (абсцисса x, вес w) в рабочей точности
- NodeSequence: упорядоченная append-only последовательность узлов
- QuadratureResult: (значение интеграла, оценка ошибки)

Узлы изменяемы: преобразование области (transform) переписывает x и w
на месте, без дополнительных аллокаций последовательности.
"""

from dataclasses import dataclass
from typing import Any, NamedTuple


@dataclass(slots=True)
class QuadratureNode:
    """Узел квадратурной формулы: ∫f ≈ Σ w·f(x)."""

    x: Any  # mpfr
    w: Any  # mpfr

    def copy(self) -> "QuadratureNode":
        """Независимая копия узла (mpfr immutable, копируется только пара)."""
        return QuadratureNode(self.x, self.w)


NodeSequence = list[QuadratureNode]


def copy_nodes(nodes: NodeSequence) -> NodeSequence:
    """Deep copy последовательности узлов."""
    return [node.copy() for node in nodes]


class QuadratureResult(NamedTuple):
    """
    Результат интегрирования.

    Attributes:
        value: Приближение интеграла (mpfr, точность контекста)
        error: Оценка абсолютной ошибки (mpfr)
    """

    value: Any
    error: Any
