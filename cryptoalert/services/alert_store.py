"""
Alert Store

Persistence for alerts and price history. Every operation opens its own
session and commits on its own; nothing spans more than one statement.
"""

from decimal import Decimal
from typing import List

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from cryptoalert.models.alert import CONDITIONS, Alert
from cryptoalert.models.price_history import PriceHistory
from cryptoalert.utils.clock import utcnow
from cryptoalert.utils.logger import create_logger

logger = create_logger(__name__)


class AlertStore:
    """Service for reading and writing alerts and price samples."""

    def __init__(self, session_factory: sessionmaker):
        """
        Initialize alert store.

        Args:
            session_factory: SQLAlchemy session factory
        """
        self.session_factory = session_factory

    def create_alert(
        self,
        coin_id: str,
        coin_name: str,
        target_price: Decimal,
        condition: str,
        email: str,
    ) -> int:
        """
        Create a new active alert.

        Args:
            coin_id: CoinGecko coin id (e.g., "bitcoin")
            coin_name: Display name (e.g., "Bitcoin")
            target_price: Threshold price in USD
            condition: "above" or "below"
            email: Recipient address

        Returns:
            int: New alert id

        Raises:
            ValueError: If condition is not "above" or "below"
            SQLAlchemyError: If the insert fails (including the CHECK constraint)
        """
        if condition not in CONDITIONS:
            raise ValueError(f"Invalid condition: {condition}")

        with self.session_factory() as db:
            try:
                alert = Alert(
                    coin_id=coin_id,
                    coin_name=coin_name,
                    target_price=target_price,
                    condition=condition,
                    email=email,
                    is_active=True,
                    created_at=utcnow(),
                )
                db.add(alert)
                db.commit()
                db.refresh(alert)
            except SQLAlchemyError as e:
                logger.error(f"Error creating alert for {coin_id}: {e}")
                db.rollback()
                raise

        logger.info(
            f"Alert created: id={alert.id}, coin={coin_id}, "
            f"condition={condition}, target={target_price}"
        )
        return alert.id

    def list_active_alerts(self) -> List[Alert]:
        """
        List alerts that are active and not yet triggered, newest first.

        Returns:
            list: Eligible alerts
        """
        with self.session_factory() as db:
            return (
                db.query(Alert)
                .filter(Alert.is_active == True, Alert.triggered_at.is_(None))  # noqa: E712
                .order_by(Alert.created_at.desc(), Alert.id.desc())
                .all()
            )

    def list_active_alerts_for_coin(self, coin_id: str) -> List[Alert]:
        """
        List eligible alerts for one coin, newest first.

        Args:
            coin_id: CoinGecko coin id

        Returns:
            list: Eligible alerts for the coin
        """
        with self.session_factory() as db:
            return (
                db.query(Alert)
                .filter(
                    Alert.coin_id == coin_id,
                    Alert.is_active == True,  # noqa: E712
                    Alert.triggered_at.is_(None),
                )
                .order_by(Alert.created_at.desc(), Alert.id.desc())
                .all()
            )

    def count_active_alerts_for_email(self, email: str) -> int:
        """Count eligible alerts owned by a recipient."""
        with self.session_factory() as db:
            return (
                db.query(func.count(Alert.id))
                .filter(
                    Alert.email == email,
                    Alert.is_active == True,  # noqa: E712
                    Alert.triggered_at.is_(None),
                )
                .scalar()
            )

    def deactivate(self, alert_id: int) -> int:
        """
        Deactivate an eligible alert.

        Args:
            alert_id: Alert id

        Returns:
            int: Rows affected (0 if the alert does not exist, is already
                inactive or has already triggered)
        """
        with self.session_factory() as db:
            try:
                changes = (
                    db.query(Alert)
                    .filter(
                        Alert.id == alert_id,
                        Alert.is_active == True,  # noqa: E712
                        Alert.triggered_at.is_(None),
                    )
                    .update({Alert.is_active: False}, synchronize_session=False)
                )
                db.commit()
            except SQLAlchemyError as e:
                logger.error(f"Error deactivating alert {alert_id}: {e}")
                db.rollback()
                raise

        if changes:
            logger.info(f"Alert deactivated: id={alert_id}")
        return changes

    def mark_triggered(self, alert_id: int) -> int:
        """
        Set triggered_at on an eligible alert.

        Args:
            alert_id: Alert id

        Returns:
            int: Rows affected (0 if the alert is no longer eligible)
        """
        with self.session_factory() as db:
            try:
                changes = (
                    db.query(Alert)
                    .filter(
                        Alert.id == alert_id,
                        Alert.is_active == True,  # noqa: E712
                        Alert.triggered_at.is_(None),
                    )
                    .update({Alert.triggered_at: utcnow()}, synchronize_session=False)
                )
                db.commit()
            except SQLAlchemyError as e:
                logger.error(f"Error marking alert {alert_id} triggered: {e}")
                db.rollback()
                raise

        return changes

    def record_price_sample(self, coin_id: str, price: Decimal) -> int:
        """
        Append a price history sample.

        Args:
            coin_id: CoinGecko coin id
            price: Price in USD

        Returns:
            int: New sample id
        """
        with self.session_factory() as db:
            try:
                sample = PriceHistory(coin_id=coin_id, price=price, timestamp=utcnow())
                db.add(sample)
                db.commit()
                db.refresh(sample)
            except SQLAlchemyError as e:
                logger.error(f"Error recording price sample for {coin_id}: {e}")
                db.rollback()
                raise

        logger.debug(f"Price sample: {coin_id} = ${price}")
        return sample.id

    def list_price_history(self, coin_id: str, limit: int = 100) -> List[PriceHistory]:
        """
        List the most recent price samples for a coin, newest first.

        Args:
            coin_id: CoinGecko coin id
            limit: Maximum number of samples

        Returns:
            list: Price samples
        """
        with self.session_factory() as db:
            return (
                db.query(PriceHistory)
                .filter(PriceHistory.coin_id == coin_id)
                .order_by(PriceHistory.timestamp.desc(), PriceHistory.id.desc())
                .limit(limit)
                .all()
            )

    def ping(self) -> bool:
        """Check that the database answers a trivial query."""
        try:
            with self.session_factory() as db:
                db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False
