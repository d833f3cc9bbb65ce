"""
Nilo Trust: composite risk scoring for Solana tokens, wallets and code repositories.

Combines independent, unreliable signal sources (holder distribution, DEX
activity, mint/freeze authority, creator history, repository activity) into
one normalized trust score and risk tier. Degrades instead of failing when a
source is down, and memoizes results under a staleness window.
"""

__version__ = "0.1.0"
