"""Gauss-Seidel load flow module for SeidelFlow.

Provides complex phasor helpers, Y-bus construction, the Gauss-Seidel
solver and post-solution power mismatch evaluation.
"""
