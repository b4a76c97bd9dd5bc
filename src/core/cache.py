"""
Bounded LRU Cache — потокобезопасный кэш с вытеснением LRU

Используется кэшем констант (π, γ, e) и кэшами узлов квадратур.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Размер кэша никогда не превышает maxsize
2. get/put/clear атомарны относительно друг друга (общий Lock)
3. clear() идемпотентен
4. Корректность вызывающего кода не зависит от содержимого кэша
"""

import threading
from collections import OrderedDict
from typing import Callable, Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """
    Кэш фиксированного размера с политикой Least-Recently-Used.

    Examples:
        >>> cache = LRUCache(maxsize=2)
        >>> cache.put("a", 1)
        >>> cache.put("b", 2)
        >>> cache.get("a")
        1
        >>> cache.put("c", 3)  # вытесняет "b"
        >>> cache.get("b") is None
        True
    """

    def __init__(self, maxsize: int):
        if maxsize < 1:
            raise ValueError(f"maxsize must be >= 1, got {maxsize}")

        self.maxsize = maxsize
        self._data: "OrderedDict[K, V]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: K) -> Optional[V]:
        """Значение по ключу (None если отсутствует); ключ становится most-recent."""
        with self._lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def put(self, key: K, value: V) -> None:
        """Запись значения; при переполнении вытесняется least-recent ключ."""
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self.maxsize:
                self._data.popitem(last=False)

    def get_or_compute(self, key: K, factory: Callable[[], V]) -> V:
        """
        Значение по ключу, вычисляемое factory() при промахе.

        factory вызывается вне блокировки: два потока могут вычислить одно
        значение параллельно, в кэше останется последнее.
        """
        value = self.get(key)
        if value is None:
            value = factory()
            self.put(key, value)
        return value

    def clear(self) -> None:
        """Очистка кэша."""
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data
