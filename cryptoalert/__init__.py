"""
CryptoAlert

Polls CoinGecko for coin prices, compares them against user-defined
thresholds and e-mails the owner when an alert fires.
"""

__version__ = "0.1.0"
