from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, HttpUrl

from pricescrape.schema import ProductRecord


# --- /api/scrape ---
class ScrapeRequest(BaseModel):
    url: HttpUrl


class ScrapeResponse(BaseModel):
    success: bool = True
    data: ProductRecord


# --- monitors ---
# One monitor per product URL; lives only as long as the process.
class Monitor(BaseModel):
    monitor_id: str
    url: str
    email: EmailStr
    target_price: float
    check_interval: int  # seconds
    next_check_at: Optional[datetime] = None
    is_active: bool = True
    title: Optional[str] = None
    last_price: Optional[float] = None
    last_checked: Optional[datetime] = None
    manual_price_update: bool = False
    is_simulated: bool = False


class MonitorRequest(BaseModel):
    url: HttpUrl
    email: EmailStr
    target_price: float = Field(gt=0)
    check_interval: Optional[int] = Field(default=None, gt=0)


class StopMonitorRequest(BaseModel):
    url: HttpUrl


class PriceUpdateRequest(BaseModel):
    url: HttpUrl
    current_price: float = Field(gt=0)
    send_notification: bool = False


class MonitorResponse(BaseModel):
    success: bool = True
    message: str
    data: Optional[Monitor] = None
    notified: bool = False


class MonitorList(BaseModel):
    success: bool = True
    data: List[Monitor] = []


# --- /api/notify ---
class NotifyProduct(BaseModel):
    title: str = Field(min_length=1)
    url: HttpUrl
    target_price: float = Field(gt=0)
    price: Optional[float] = None  # previous known price, for the savings line


class NotifyRequest(BaseModel):
    email: EmailStr
    product: NotifyProduct
    current_price: float = Field(gt=0)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# --- /api/timer-info ---
class IntervalSuggestion(BaseModel):
    label: str
    seconds: int


class TimerInfo(BaseModel):
    minute: int = 60
    hour: int = 3600
    day: int = 86400
    week: int = 604800
    month: int = 2592000  # 30 days
    suggestions: List[IntervalSuggestion] = []
