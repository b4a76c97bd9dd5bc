"""
Core math modules

Арифметический фундамент поверх gmpy2 (GMP/MPFR): числовой контекст,
типизированные ошибки, magnitude и кэш констант.
"""

# Errors
from src.core.math.errors import (
    ConvergenceFailure,
    DomainError,
    NumericError,
)

# Numeric context
from src.core.math.context import (
    NumericContext,
    RoundingMode,
    to_gmpy2_round,
    working_context,
)

# Numerical Safeguards
from src.core.math.numerical_safeguards import (
    MIN_PRECISION_BITS,
    MIN_QUADRATURE_DEGREE,
    is_valid_real,
    magnitude,
    power_of_two,
    to_real,
    validate_degree,
    validate_precision,
)

# Constant Cache
from src.core.math.constants import (
    CONSTANT_CACHE_SIZE,
    ConstantCache,
    clear_constant_cache,
    const_euler,
    const_pi,
    default_constants,
)

__all__ = [
    # Errors
    "NumericError",
    "DomainError",
    "ConvergenceFailure",
    # Context
    "NumericContext",
    "RoundingMode",
    "to_gmpy2_round",
    "working_context",
    # Numerical Safeguards: Constants
    "MIN_PRECISION_BITS",
    "MIN_QUADRATURE_DEGREE",
    # Numerical Safeguards: Functions
    "is_valid_real",
    "magnitude",
    "power_of_two",
    "to_real",
    "validate_degree",
    "validate_precision",
    # Constant Cache
    "CONSTANT_CACHE_SIZE",
    "ConstantCache",
    "clear_constant_cache",
    "const_euler",
    "const_pi",
    "default_constants",
]
