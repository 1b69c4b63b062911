"""
gamma-amm: constant-product liquidity pool engine with dynamic fees,
partner fee attribution and time-weighted liquidity rewards.
"""

__version__ = "0.1.0"
