from fastapi import APIRouter, Depends, HTTPException, status

from ..models import ScrapeRequest, ScrapeResponse
from ..monitors import MonitorService, get_monitor_service

router = APIRouter()


@router.post("/scrape", response_model=ScrapeResponse)
async def scrape(request: ScrapeRequest, service: MonitorService = Depends(get_monitor_service)):
    """Extract title and price for one product URL. Unreachable pages come back simulated."""
    try:
        record = await service.extract(str(request.url))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ScrapeResponse(data=record)
