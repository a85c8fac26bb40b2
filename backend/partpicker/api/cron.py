"""Protected trigger for the stored price refresh."""

from fastapi import APIRouter, Depends

from partpicker.dependencies import get_price_refresh_service, verify_cron_secret
from partpicker.schemas import PriceRefreshResponse
from partpicker.services.price_refresh import PriceRefreshService

router = APIRouter()


@router.get("/update-prices", response_model=PriceRefreshResponse, dependencies=[Depends(verify_cron_secret)])
async def update_prices(service: PriceRefreshService = Depends(get_price_refresh_service)):
    """Re-scrape every stored price. Requires the cron bearer secret."""
    stats = await service.refresh_all()
    return PriceRefreshResponse(success=True, message="Price update completed", stats=stats)
