from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from cryptoalert.config import Settings
from cryptoalert.dependencies import get_evaluator, get_redis, get_settings, get_store
from cryptoalert.schemas.alert import (
    AlertCreate,
    AlertCreated,
    AlertOut,
    EvaluationPassOut,
    MessageOut,
    PriceHistoryOut,
)
from cryptoalert.services.alert_evaluator import AlertEvaluator
from cryptoalert.services.alert_store import AlertStore
from cryptoalert.services.pass_guard import run_guarded_pass
from cryptoalert.utils.logger import create_logger

logger = create_logger(__name__)
router = APIRouter(prefix="/api", tags=["Alerts"])


@router.post(
    "/alerts",
    status_code=status.HTTP_201_CREATED,
    response_model=AlertCreated,
    summary="Create a price alert",
    responses={400: {"description": "Missing field, invalid condition or quota reached."}},
)
def create_alert(
    payload: AlertCreate,
    store: AlertStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Create an alert that fires once when the coin's price crosses the target.

    Args:
        payload: coinId, coinName, targetPrice, condition ("above"/"below"), email

    Returns:
        dict: Confirmation message and the new alert id

    Raises:
        HTTPException: 400 when the recipient already has the maximum number
            of active alerts, 500 on storage errors
    """
    email = payload.email.strip()
    try:
        active_count = store.count_active_alerts_for_email(email)
        if active_count >= settings.max_alerts_per_email:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Maximum of {settings.max_alerts_per_email} active alerts per email reached",
            )

        alert_id = store.create_alert(
            coin_id=payload.coinId.strip().lower(),
            coin_name=payload.coinName.strip(),
            target_price=payload.targetPrice,
            condition=payload.condition,
            email=email,
        )
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create alert",
        )

    return {"message": "Alert created successfully", "alertId": alert_id}


@router.get("/alerts", response_model=List[AlertOut], summary="List active alerts")
def list_alerts(store: AlertStore = Depends(get_store)):
    """Active, untriggered alerts, newest first."""
    try:
        return store.list_active_alerts()
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch alerts",
        )


@router.delete("/alerts/{alert_id}", response_model=MessageOut, summary="Deactivate an alert")
def delete_alert(alert_id: int, store: AlertStore = Depends(get_store)):
    try:
        changes = store.deactivate(alert_id)
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete alert",
        )

    if changes == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")

    return {"message": "Alert deleted successfully"}


@router.post(
    "/alerts/check",
    response_model=EvaluationPassOut,
    response_model_exclude_none=True,
    summary="Run an evaluation pass now",
)
def check_alerts(
    evaluator: AlertEvaluator = Depends(get_evaluator),
    redis_client=Depends(get_redis),
):
    """
    Run one evaluation pass on demand.

    Takes the same pass lock as the scheduled task; while another pass holds
    it, this one returns status "skipped" without touching any alert.
    """
    logger.info("On-demand evaluation pass requested")
    return run_guarded_pass(evaluator, redis_client)


@router.get(
    "/history/{coin_id}",
    response_model=List[PriceHistoryOut],
    summary="Price history for a coin",
)
def price_history(
    coin_id: str,
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of samples."),
    store: AlertStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Recorded price samples, newest first."""
    if limit is None:
        limit = settings.price_history_default_limit
    limit = min(limit, settings.max_price_history)

    try:
        return store.list_price_history(coin_id.lower(), limit)
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch price history",
        )
