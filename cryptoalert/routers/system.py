import smtplib

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from cryptoalert.dependencies import get_services
from cryptoalert.schemas.alert import EmailTestRequest, HealthOut, MessageOut
from cryptoalert.services.notification_service import EmailNotConfiguredError
from cryptoalert.utils.logger import create_logger

logger = create_logger(__name__)
router = APIRouter()


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
def index():
    return "CryptoAlert - Cryptocurrency Price Monitoring System"


@router.get("/api/health", response_model=HealthOut, tags=["System"], summary="Liveness and dependency health")
def health(services=Depends(get_services)):
    """
    Report liveness plus storage and price-source reachability.

    Always answers 200 while the process is up; "status" is "DEGRADED" when a
    dependency is unhealthy.
    """
    database_ok = services.store.ping()
    price_source_ok = services.price_service.ping()

    return {
        "status": "OK" if database_ok and price_source_ok else "DEGRADED",
        "database": "ok" if database_ok else "unavailable",
        "price_source": "ok" if price_source_ok else "unreachable",
        "email_enabled": services.notifier.enabled,
    }


@router.post(
    "/api/test-email",
    response_model=MessageOut,
    tags=["System"],
    summary="Send a test e-mail",
    responses={503: {"description": "Email is not configured."}},
)
def send_test_email(payload: EmailTestRequest, services=Depends(get_services)):
    try:
        services.notifier.send_test_email(payload.email)
    except EmailNotConfiguredError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Email service not configured",
        )
    except (smtplib.SMTPException, OSError):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send test email",
        )

    return {"message": "Test email sent successfully"}
