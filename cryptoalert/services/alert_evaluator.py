"""
Alert Evaluation Service

Runs one evaluation pass over all eligible alerts:
1. Load active, untriggered alerts
2. Fetch prices for the distinct coins in a single batched request
3. Record one price history sample per priced coin
4. Compare each alert against its coin's price (inclusive boundaries)
5. Mark fired alerts triggered, then e-mail the owner

Alerts fire at most once: triggering removes them from later passes, and a
failed e-mail does not undo the trigger. A storage error on one alert is
logged and the pass moves on to the next alert.
"""

import threading
from decimal import Decimal
from typing import Dict, List, Optional

from cryptoalert.models.alert import CONDITION_ABOVE, CONDITION_BELOW, Alert
from cryptoalert.services.alert_store import AlertStore
from cryptoalert.services.notification_service import EmailNotificationService
from cryptoalert.services.price_service import CoinPriceService, PriceFetchError
from cryptoalert.utils.logger import create_logger

logger = create_logger(__name__)


class AlertEvaluator:
    """Service for evaluating price alerts against current prices."""

    def __init__(
        self,
        store: AlertStore,
        price_service: CoinPriceService,
        notifier: EmailNotificationService,
    ):
        """
        Initialize alert evaluator.

        Args:
            store: Alert and price history persistence
            price_service: Source of current coin prices
            notifier: Sends e-mails for fired alerts
        """
        self.store = store
        self.price_service = price_service
        self.notifier = notifier
        self._pass_lock = threading.Lock()

    @staticmethod
    def should_trigger(alert: Alert, current_price: Decimal) -> bool:
        """
        Check if alert condition is met.

        Boundaries are inclusive: a price exactly at the target fires.

        Example:
            Target: $50,000, condition "above"
            Current: $50,000.00
            Result: TRIGGER

        Args:
            alert: Alert to evaluate
            current_price: Current coin price

        Returns:
            bool: True if alert should be triggered
        """
        target = Decimal(alert.target_price)
        price = Decimal(current_price)

        if alert.condition == CONDITION_ABOVE:
            return price >= target
        elif alert.condition == CONDITION_BELOW:
            return price <= target

        logger.warning(f"Unknown alert condition: {alert.condition} (alert {alert.id})")
        return False

    def run_pass(self) -> Dict:
        """
        Run one evaluation pass unless another pass is already running.

        Returns:
            dict: Pass summary
            {
                "status": "success" | "skipped" | "aborted" | "error",
                "alerts_checked": 3,
                "coins_priced": 2,
                "samples_recorded": 2,
                "alerts_triggered": 1,
                "notifications_sent": 1,
                "reason": "...",          # skipped / aborted / error only
            }
        """
        if not self._pass_lock.acquire(blocking=False):
            logger.warning("Evaluation pass already in progress, skipping")
            return {"status": "skipped", "reason": "pass_in_progress"}

        summary = _empty_summary()
        try:
            self._evaluate(summary)
        except Exception as e:
            logger.error(f"Error in alert evaluation pass: {e}", exc_info=True)
            summary["status"] = "error"
            summary["reason"] = str(e)
        finally:
            self._pass_lock.release()

        return summary

    def _evaluate(self, summary: Dict):
        alerts = self.store.list_active_alerts()
        summary["alerts_checked"] = len(alerts)

        if not alerts:
            logger.debug("No active alerts, nothing to evaluate")
            return

        # One request for all coins, however many alerts share them
        coin_ids = sorted({alert.coin_id for alert in alerts})
        logger.info(f"Checking {len(alerts)} alert(s) across {len(coin_ids)} coin(s)")

        try:
            prices = self.price_service.get_prices(coin_ids)
        except PriceFetchError as e:
            logger.error(f"Price fetch failed, aborting pass: {e}")
            summary["status"] = "aborted"
            summary["reason"] = "price_fetch_failed"
            return

        summary["coins_priced"] = len(prices)
        summary["samples_recorded"] = self._record_samples(coin_ids, prices)

        for alert in alerts:
            current_price = _price_of(prices, alert.coin_id)
            if current_price is None:
                logger.debug(f"No price for {alert.coin_id}, skipping alert {alert.id}")
                continue

            if not self.should_trigger(alert, current_price):
                continue

            try:
                changes = self.store.mark_triggered(alert.id)
            except Exception as e:
                logger.error(f"Failed to mark alert {alert.id} triggered: {e}")
                continue

            if not changes:
                logger.info(f"Alert {alert.id} no longer eligible, not triggering")
                continue

            summary["alerts_triggered"] += 1
            logger.info(
                f"Alert triggered for {alert.coin_name}: ${current_price} "
                f"({alert.condition} target ${alert.target_price}), alert_id={alert.id}"
            )

            if self.notifier.notify(alert, current_price):
                summary["notifications_sent"] += 1

        logger.info(
            f"Alert check completed: checked={summary['alerts_checked']}, "
            f"triggered={summary['alerts_triggered']}, sent={summary['notifications_sent']}"
        )

    def _record_samples(self, coin_ids: List[str], prices: Dict[str, Dict]) -> int:
        recorded = 0
        for coin_id in coin_ids:
            price = _price_of(prices, coin_id)
            if price is None:
                continue
            try:
                self.store.record_price_sample(coin_id, price)
                recorded += 1
            except Exception as e:
                logger.error(f"Failed to record price history for {coin_id}: {e}")
        return recorded


def _price_of(prices: Dict[str, Dict], coin_id: str) -> Optional[Decimal]:
    quote = prices.get(coin_id)
    if not quote:
        return None
    return quote.get("price")


def _empty_summary() -> Dict:
    return {
        "status": "success",
        "alerts_checked": 0,
        "coins_priced": 0,
        "samples_recorded": 0,
        "alerts_triggered": 0,
        "notifications_sent": 0,
    }
