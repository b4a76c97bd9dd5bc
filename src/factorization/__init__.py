"""
Integer factorization (Pollard's rho, Brent variant).
"""

from src.factorization.pollard_rho import (
    BATCH_GCD_INTERVAL,
    PRIMALITY_CERTAINTY,
    TRIAL_DIVISION_BOUND,
    factor,
    factor_using_division,
    factor_using_pollard_rho,
    is_probable_prime,
)

__all__ = [
    # Constants
    "BATCH_GCD_INTERVAL",
    "PRIMALITY_CERTAINTY",
    "TRIAL_DIVISION_BOUND",
    # Functions
    "factor",
    "factor_using_division",
    "factor_using_pollard_rho",
    "is_probable_prime",
]
