"""
Numeric Errors — типизированные ошибки численных алгоритмов

Иерархия исключений, общая для всех компонентов (factorization, quadrature,
lambertw, differentiation):

    NumericError (ArithmeticError)
    ├── DomainError (+ ValueError)   — недопустимый математический вход
    └── ConvergenceFailure           — итерация исчерпала бюджет

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Ошибка поднимается в точке нарушения, без повторных попыток
2. Внутренние ретраи алгоритмов (Pollard rho с a+1, series → Halley)
   ошибками не являются и наружу не выходят
3. Неподдерживаемые ветви Lambert W возвращают NaN, а не исключение
"""


class NumericError(ArithmeticError):
    """Базовый класс ошибок численных алгоритмов."""
    pass


class DomainError(NumericError, ValueError):
    """
    Недопустимый математический вход.

    Примеры: несовместимые бесконечные границы интегрирования,
    degree < 1 для генератора узлов, пустая последовательность
    сходимости, отрицательный порядок производной.
    """
    pass


class ConvergenceFailure(NumericError):
    """
    Итерационный процесс не достиг требуемой точности за отведённый бюджет.

    Поднимается Halley-итерацией Lambert W после LAMBERTW_MAX_ITERATIONS шагов.
    """
    pass
