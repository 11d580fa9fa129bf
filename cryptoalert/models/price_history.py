"""
Price History Model

Append-only price samples, one per coin per evaluation pass.
"""

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String

from cryptoalert.database import Base
from cryptoalert.utils.clock import utcnow


class PriceHistory(Base):
    """Price sample captured during an evaluation pass."""

    __tablename__ = "price_history"

    id = Column(Integer, primary_key=True, index=True)
    coin_id = Column(String, nullable=False)
    price = Column(Numeric(28, 8), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        # "Latest N samples for bitcoin"
        Index("ix_price_history_coin_timestamp", "coin_id", "timestamp"),
    )

    def __repr__(self):
        return f"<PriceHistory {self.coin_id} @ {self.timestamp}: ${self.price}>"
