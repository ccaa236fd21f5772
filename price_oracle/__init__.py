"""
TradeOgre MWC/USDT price oracle.
"""
__version__ = "1.0.0"
