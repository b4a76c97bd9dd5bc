"""
NumericContext — точность и режим округления

Численный контекст (precision, rounding) передаётся явно в каждую
вещественную операцию и никогда не хранится глобально.

- precision: число бит мантиссы (>= 1)
- rounding: закрытое перечисление {UP, DOWN, NEAREST, ZERO}

Отображение RoundingMode → константы gmpy2 выполняется чистой функцией
to_gmpy2_round, без полиморфизма во время исполнения.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Контекст immutable (frozen=True)
2. Вычисления внутри алгоритмов идут в рабочем контексте с округлением
   к ближайшему; режим пользователя применяется только к результату
3. Контекст gmpy2 вызывающего кода не изменяется (gmpy2 контексты
   thread-local и восстанавливаются на выходе из with-блока)
"""

from enum import Enum

import gmpy2
from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class RoundingMode(str, Enum):
    """
    Режим округления результата.

    UP — к +∞, DOWN — к −∞, NEAREST — к ближайшему (ties to even),
    ZERO — к нулю.
    """

    UP = "UP"
    DOWN = "DOWN"
    NEAREST = "NEAREST"
    ZERO = "ZERO"


_GMPY2_ROUNDING = {
    RoundingMode.UP: gmpy2.RoundUp,
    RoundingMode.DOWN: gmpy2.RoundDown,
    RoundingMode.NEAREST: gmpy2.RoundToNearest,
    RoundingMode.ZERO: gmpy2.RoundToZero,
}


def to_gmpy2_round(mode: RoundingMode | str) -> int:
    """
    Отображение RoundingMode в константу округления gmpy2.

    Args:
        mode: RoundingMode или его строковое значение ("UP", "NEAREST", ...)

    Returns:
        gmpy2.RoundUp / RoundDown / RoundToNearest / RoundToZero

    Raises:
        ValueError: Если mode не является допустимым режимом

    Examples:
        >>> to_gmpy2_round(RoundingMode.NEAREST) == gmpy2.RoundToNearest
        True
        >>> to_gmpy2_round("ZERO") == gmpy2.RoundToZero
        True
    """
    return _GMPY2_ROUNDING[RoundingMode(mode)]


def working_context(precision: int):
    """
    Рабочий gmpy2 контекст для промежуточных вычислений.

    Всегда округление к ближайшему; используется как `with working_context(p):`.
    """
    if precision < 1:
        raise ValueError(f"precision must be >= 1, got {precision}")
    return gmpy2.context(precision=precision, round=gmpy2.RoundToNearest)


# =============================================================================
# NUMERIC CONTEXT MODEL
# =============================================================================


class NumericContext(BaseModel):
    """
    Численный контекст операции.

    Immutable модель (frozen=True). Некорректная точность отвергается
    pydantic (ValidationError, подкласс ValueError).
    """

    precision: int = Field(..., ge=1, description="Точность мантиссы в битах")
    rounding: RoundingMode = Field(
        RoundingMode.NEAREST, description="Режим округления результата"
    )

    model_config = {"frozen": True}

    def gmpy2_context(self):
        """gmpy2 контекст с точностью и округлением этого NumericContext."""
        return gmpy2.context(
            precision=self.precision,
            round=to_gmpy2_round(self.rounding),
        )

    def with_extra_precision(self, bits: int) -> "NumericContext":
        """
        Новый контекст с точностью, увеличенной на bits.

        Examples:
            >>> NumericContext(precision=53).with_extra_precision(20).precision
            73
        """
        return NumericContext(precision=self.precision + bits, rounding=self.rounding)

    def round(self, value) -> gmpy2.mpfr:
        """
        Округление значения до precision бит в режиме rounding.

        Args:
            value: mpfr/int/float/str/Fraction

        Returns:
            mpfr с точностью ровно self.precision
        """
        with self.gmpy2_context():
            return gmpy2.mpfr(value)
