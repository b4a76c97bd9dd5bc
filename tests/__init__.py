"""
Test suite for mp-numerics

Contains:
- tests/unit/          : Unit tests for individual modules
"""
