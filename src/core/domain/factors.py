"""
Factor Mapping — отображение простой множитель → кратность

Ключ −1 (если присутствует) фиксирует знак исходного числа.
Порядок вставки не важен, ключи уникальны, кратности >= 1.
"""

FactorMapping = dict[int, int]

# Ключ, фиксирующий отрицательный знак факторизуемого числа
SIGN_FACTOR: int = -1


def record_factor(factors: FactorMapping, factor: int, count: int = 1) -> None:
    """
    Увеличение кратности множителя factor на count.

    Examples:
        >>> factors = {}
        >>> record_factor(factors, 3)
        >>> record_factor(factors, 3)
        >>> factors
        {3: 2}
    """
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")

    key = int(factor)
    factors[key] = factors.get(key, 0) + count


def reconstruct(factors: FactorMapping) -> int:
    """
    Восстановление числа по разложению: Π factor^multiplicity.

    Пустое разложение соответствует 1 (разложение 0 также пустое, см. factor).

    Examples:
        >>> reconstruct({2: 2, 3: 1})
        12
        >>> reconstruct({-1: 1, 2: 2, 3: 1})
        -12
    """
    result = 1
    for factor, multiplicity in factors.items():
        result *= factor ** multiplicity
    return result
