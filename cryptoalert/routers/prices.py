from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from cryptoalert.config import Settings
from cryptoalert.dependencies import get_price_service, get_settings
from cryptoalert.schemas.alert import CoinOut, PriceOut
from cryptoalert.services.price_service import CoinPriceService, PriceFetchError

router = APIRouter(prefix="/api", tags=["Prices"])


@router.get(
    "/price/{coin_id}",
    response_model=PriceOut,
    summary="Current price of a coin",
    responses={404: {"description": "Coin not found."}},
)
def get_price(coin_id: str, price_service: CoinPriceService = Depends(get_price_service)):
    coin_id = coin_id.lower()
    try:
        price_data = price_service.get_price(coin_id)
    except PriceFetchError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch price",
        )

    if not price_data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Coin not found")

    return {
        "coin": coin_id,
        "price": price_data["price"],
        "change24h": price_data["change24h"],
    }


@router.get("/coins", response_model=List[CoinOut], summary="Supported coins")
def list_coins(
    price_service: CoinPriceService = Depends(get_price_service),
    settings: Settings = Depends(get_settings),
):
    try:
        return price_service.get_coins(limit=settings.coins_list_limit)
    except PriceFetchError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch coins list",
        )
