"""
Constant Cache — кэш математических констант по точности

Ленивый, ограниченный по размеру кэш значений π, γ (Euler), e и e^(−1)
для ранее запрошенных точностей. Используется генератором узлов tanh-sinh
и Lambert W.

Кэш — исключительно оптимизация: clear() можно вызывать в любой момент,
следующий запрос просто пересчитает значение. clear() также освобождает
внутренний кэш констант MPFR (gmpy2.free_cache).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Значение для (name, precision) вычисляется с точностью ровно precision
   бит и округлением к ближайшему
2. Безопасен для параллельного чтения (LRUCache с блокировкой)
3. clear() идемпотентен
"""

import logging
from typing import Callable, Final

import gmpy2

from src.core.cache import LRUCache
from src.core.math.context import working_context
from src.core.math.numerical_safeguards import validate_precision

logger = logging.getLogger(__name__)

# =============================================================================
# ПАРАМЕТРЫ КЭША
# =============================================================================

# Максимальное число пар (константа, точность) в кэше
CONSTANT_CACHE_SIZE: Final[int] = 64


_CONSTANT_FACTORIES: dict[str, Callable[[], "gmpy2.mpfr"]] = {
    "pi": gmpy2.const_pi,
    "euler": gmpy2.const_euler,
    "e": lambda: gmpy2.exp(1),
    "e_inv": lambda: gmpy2.exp(-1),
}


class ConstantCache:
    """
    Precision-keyed кэш констант.

    Examples:
        >>> constants = ConstantCache()
        >>> constants.pi(53) == gmpy2.const_pi(53)
        True
    """

    def __init__(self, maxsize: int = CONSTANT_CACHE_SIZE):
        self._cache: LRUCache[tuple[str, int], "gmpy2.mpfr"] = LRUCache(maxsize)

    def get(self, name: str, precision: int):
        """
        Константа name с точностью precision бит.

        Args:
            name: "pi", "euler", "e" или "e_inv"
            precision: Точность в битах

        Raises:
            KeyError: Неизвестная константа
            DomainError: Недопустимая точность
        """
        if name not in _CONSTANT_FACTORIES:
            raise KeyError(f"Unknown constant: {name!r}")
        validate_precision(precision)

        def compute():
            logger.debug("Computing constant %s at %d bits", name, precision)
            with working_context(precision):
                return _CONSTANT_FACTORIES[name]()

        return self._cache.get_or_compute((name, precision), compute)

    def pi(self, precision: int):
        """π с точностью precision бит."""
        return self.get("pi", precision)

    def euler(self, precision: int):
        """Константа Эйлера–Маскерони γ с точностью precision бит."""
        return self.get("euler", precision)

    def e(self, precision: int):
        """e с точностью precision бит."""
        return self.get("e", precision)

    def e_inv(self, precision: int):
        """e^(−1) с точностью precision бит."""
        return self.get("e_inv", precision)

    def clear(self) -> None:
        """Очистка кэша и внутреннего кэша констант MPFR."""
        self._cache.clear()
        gmpy2.free_cache()

    def __len__(self) -> int:
        return len(self._cache)


# Общий кэш компонентов quadrature и lambertw
_DEFAULT_CONSTANTS = ConstantCache()


def default_constants() -> ConstantCache:
    """Общий экземпляр ConstantCache, используемый по умолчанию."""
    return _DEFAULT_CONSTANTS


def const_pi(precision: int):
    """π с точностью precision бит (через общий кэш)."""
    return _DEFAULT_CONSTANTS.pi(precision)


def const_euler(precision: int):
    """γ = 0.5772156649... с точностью precision бит (через общий кэш)."""
    return _DEFAULT_CONSTANTS.euler(precision)


def clear_constant_cache() -> None:
    """Очистка общего кэша констант."""
    _DEFAULT_CONSTANTS.clear()
