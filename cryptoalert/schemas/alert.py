from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Prices travel as JSON numbers, not strings
Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class AlertCreate(BaseModel):
    coinId: str = Field(..., min_length=1, description="CoinGecko coin id, e.g. 'bitcoin'.")
    coinName: str = Field(..., min_length=1, description="Display name, e.g. 'Bitcoin'.")
    targetPrice: Decimal = Field(..., gt=0, description="Threshold price in USD.")
    condition: Literal["above", "below"] = Field(..., description="Crossing direction.")
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Notification recipient.")


class AlertCreated(BaseModel):
    message: str
    alertId: int


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    coin_id: str
    coin_name: str
    target_price: Price
    condition: str
    email: str
    is_active: bool
    created_at: datetime
    triggered_at: Optional[datetime] = None


class PriceHistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    coin_id: str
    price: Price
    timestamp: datetime


class PriceOut(BaseModel):
    coin: str
    price: Price
    change24h: Optional[Price] = None


class CoinOut(BaseModel):
    id: str
    symbol: str
    name: str


class EmailTestRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Recipient of the test message.")


class MessageOut(BaseModel):
    message: str


class EvaluationPassOut(BaseModel):
    status: str
    alerts_checked: int = 0
    coins_priced: int = 0
    samples_recorded: int = 0
    alerts_triggered: int = 0
    notifications_sent: int = 0
    reason: Optional[str] = None


class HealthOut(BaseModel):
    status: str
    database: str
    price_source: str
    email_enabled: bool
