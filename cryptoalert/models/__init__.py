"""
Database Models

All SQLAlchemy models for the application.
"""

from cryptoalert.models.alert import Alert
from cryptoalert.models.price_history import PriceHistory

__all__ = ["Alert", "PriceHistory"]
