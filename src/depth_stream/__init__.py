"""Hyperliquid 현물 L2 오더북 실시간 수집기"""

__version__ = "0.1.0"
