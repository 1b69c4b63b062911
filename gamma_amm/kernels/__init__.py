"""
Kernel layer.

This package groups the deterministic integer kernels used by the pool engine.
`gamma_amm/kernels/python/` contains the production Python kernels: pure
functions with explicit rounding rules and typed results.
"""
