"""
Core numeric context, value objects, and shared caches.

This module contains the foundational building blocks shared by the
factorization, quadrature, Lambert W and differentiation components.
"""
