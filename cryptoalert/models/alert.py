"""
Alert Model

Represents a user's request to be e-mailed when a coin crosses a target
price in a given direction.

Lifecycle:
- Created active and untriggered
- Deactivated by the user (is_active = False), or
- Triggered by the evaluation pass (triggered_at set)
Both end states are terminal; rows are never deleted.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, Numeric, String

from cryptoalert.database import Base
from cryptoalert.utils.clock import utcnow

CONDITION_ABOVE = "above"
CONDITION_BELOW = "below"
CONDITIONS = (CONDITION_ABOVE, CONDITION_BELOW)


class Alert(Base):
    """Price threshold alert."""

    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, index=True)
    coin_id = Column(String, nullable=False, index=True)  # CoinGecko id, e.g. "bitcoin"
    coin_name = Column(String, nullable=False)  # Display name, e.g. "Bitcoin"
    target_price = Column(Numeric(28, 8), nullable=False)
    condition = Column(String(5), nullable=False)  # "above" | "below"
    email = Column(String, nullable=False, index=True)

    # Alert state
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    triggered_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("condition IN ('above', 'below')", name="ck_alerts_condition"),
    )

    def __repr__(self):
        return (
            f"<Alert(id={self.id}, coin={self.coin_id}, "
            f"condition={self.condition}, target={self.target_price}, "
            f"active={self.is_active}, triggered_at={self.triggered_at})>"
        )
