from fastapi import APIRouter, Depends, HTTPException, status

from ..models import MessageResponse, NotifyRequest
from ..monitors import MonitorService, get_monitor_service
from ..notifier import NotificationError

router = APIRouter()


@router.post("/notify", response_model=MessageResponse)
async def notify(request: NotifyRequest, service: MonitorService = Depends(get_monitor_service)):
    product = request.product
    try:
        await service.send_notification(
            request.email,
            product.title,
            str(product.url),
            product.target_price,
            request.current_price,
            product.price,
        )
    except NotificationError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Email delivery failed: {exc}",
        ) from exc
    return MessageResponse(message=f"Notification sent to {request.email}")
