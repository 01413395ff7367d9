from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..models import (
    IntervalSuggestion,
    MessageResponse,
    MonitorList,
    MonitorRequest,
    MonitorResponse,
    PriceUpdateRequest,
    StopMonitorRequest,
    TimerInfo,
)
from ..monitors import MonitorNotFound, MonitorService, get_monitor_service

router = APIRouter()

INTERVAL_SUGGESTIONS = [
    IntervalSuggestion(label="Every 5 minutes", seconds=300),
    IntervalSuggestion(label="Every 15 minutes", seconds=900),
    IntervalSuggestion(label="Every hour", seconds=3600),
    IntervalSuggestion(label="Every 6 hours", seconds=21600),
    IntervalSuggestion(label="Twice a day", seconds=43200),
    IntervalSuggestion(label="Once a day", seconds=86400),
]


@router.post("/monitor", response_model=MonitorResponse, status_code=status.HTTP_201_CREATED)
async def start_monitor(request: MonitorRequest, service: MonitorService = Depends(get_monitor_service)):
    url = str(request.url)
    try:
        monitor, notified = await service.start(url, request.email, request.target_price, request.check_interval)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MonitorResponse(
        message=f"Monitoring {url} every {monitor.check_interval} seconds",
        data=monitor,
        notified=notified,
    )


@router.post("/monitor/stop", response_model=MessageResponse)
async def stop_monitor(request: StopMonitorRequest, service: MonitorService = Depends(get_monitor_service)):
    url = str(request.url)
    if await service.stop(url):
        return MessageResponse(message=f"Stopped monitoring {url}")
    return MessageResponse(message=f"No active monitor for {url}")


@router.post("/monitor/update-price", response_model=MonitorResponse)
async def update_price(request: PriceUpdateRequest, service: MonitorService = Depends(get_monitor_service)):
    url = str(request.url)
    try:
        monitor, notified = await service.update_price(url, request.current_price, request.send_notification)
    except MonitorNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MonitorResponse(message=f"Price for {url} set to {request.current_price}", data=monitor, notified=notified)


@router.get("/monitors", response_model=MonitorList)
def list_monitors(
    email: Optional[str] = Query(default=None),
    service: MonitorService = Depends(get_monitor_service),
):
    return MonitorList(data=service.list_monitors(email))


@router.get("/timer-info", response_model=TimerInfo)
def timer_info():
    """Common check intervals in seconds."""
    return TimerInfo(suggestions=INTERVAL_SUGGESTIONS)
