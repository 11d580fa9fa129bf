"""
Evaluation Pass Guard

Serialises evaluation passes across processes with a non-blocking Redis lock.
Both the scheduled Celery task and the on-demand HTTP endpoint go through
run_guarded_pass, so at most one pass runs at a time deployment-wide.
"""

from typing import Dict

from redis import Redis as RedisClient
from redis.exceptions import LockError, RedisError

from cryptoalert.services.alert_evaluator import AlertEvaluator
from cryptoalert.utils.logger import create_logger

logger = create_logger(__name__)

PASS_LOCK_NAME = "cryptoalert:evaluation-pass"

# Seconds after which an abandoned lock expires (matches the task time limit)
PASS_LOCK_TIMEOUT = 600


def run_guarded_pass(
    evaluator: AlertEvaluator,
    redis_client: RedisClient,
    lock_timeout: int = PASS_LOCK_TIMEOUT,
) -> Dict:
    """
    Run one evaluation pass while holding the cross-process pass lock.

    Args:
        evaluator: Alert evaluator
        redis_client: Redis client used for the lock
        lock_timeout: Seconds after which an abandoned lock expires

    Returns:
        dict: Pass summary, or {"status": "skipped", ...} when another pass
            holds the lock or Redis is unavailable
    """
    lock = redis_client.lock(PASS_LOCK_NAME, timeout=lock_timeout, blocking=False)

    try:
        acquired = lock.acquire(blocking=False)
    except RedisError as e:
        logger.error(f"Could not acquire evaluation pass lock: {e}")
        return {"status": "skipped", "reason": "lock_unavailable"}

    if not acquired:
        logger.warning("Another evaluation pass holds the lock, skipping")
        return {"status": "skipped", "reason": "pass_in_progress"}

    try:
        return evaluator.run_pass()
    finally:
        try:
            lock.release()
        except LockError as e:
            # Lock expired before the pass finished
            logger.warning(f"Evaluation pass lock already released: {e}")
