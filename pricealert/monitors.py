import asyncio
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from fastapi import Request
from slugify import slugify

from pricescrape import ProductRecord, extract_product

from .config import Settings
from .models import Monitor
from .notifier import NotificationError, send_price_drop_email

logger = logging.getLogger(__name__)

Extractor = Callable[[str], Awaitable[ProductRecord]]
# (email, title, url, target_price, current_price, previous_price) -> None; blocking
Notifier = Callable[..., None]


class MonitorNotFound(Exception):
    def __init__(self, url: str):
        super().__init__(f"no active monitor for {url}")
        self.url = url


def monitor_id(email: str, url: str) -> str:
    digest = hashlib.sha1(url.strip().lower().encode("utf-8")).hexdigest()[:10]
    return f"{slugify(email.strip().lower())}-{digest}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MonitorService:
    """
    In-memory registry of price monitors, at most one per product URL.

    Every monitor owns an asyncio task that re-extracts the product every
    `check_interval` seconds and mails the owner once the price is at or
    below the target. Nothing survives a restart.
    """

    def __init__(
        self,
        settings: Settings,
        extract: Optional[Extractor] = None,
        notify: Optional[Notifier] = None,
    ):
        self.settings = settings
        self._extract = extract or partial(extract_product, **settings.extract_kwargs())
        self._notify = notify or partial(send_price_drop_email, settings)
        self._monitors: Dict[str, Monitor] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    async def extract(self, url: str) -> ProductRecord:
        return await self._extract(url)

    def get(self, url: str) -> Monitor:
        monitor = self._monitors.get(url)
        if monitor is None:
            raise MonitorNotFound(url)
        return monitor

    def list_monitors(self, email: Optional[str] = None) -> List[Monitor]:
        monitors = list(self._monitors.values())
        if email:
            monitors = [m for m in monitors if m.email.lower() == email.strip().lower()]
        return monitors

    async def start(
        self, url: str, email: str, target_price: float, check_interval: Optional[int] = None
    ) -> Tuple[Monitor, bool]:
        interval = check_interval or self.settings.default_check_interval
        record = await self._extract(url)

        if url in self._monitors:
            logger.info("Replacing existing monitor for %s", url)
            self._cancel(url)

        now = _now()
        monitor = Monitor(
            monitor_id=monitor_id(email, url),
            url=url,
            email=email,
            target_price=target_price,
            check_interval=interval,
            next_check_at=now + timedelta(seconds=interval),
            title=record.title,
            last_price=record.price,
            last_checked=now,
            is_simulated=record.is_simulated,
        )
        self._monitors[url] = monitor
        self._tasks[url] = asyncio.create_task(self._run(url))
        logger.info("Monitoring %s for %s every %ss (target %s)", url, email, interval, target_price)

        notified = await self._maybe_notify(monitor, record.price, record.is_simulated, previous=None)
        return monitor, notified

    async def stop(self, url: str) -> bool:
        existed = self._monitors.pop(url, None) is not None
        self._cancel(url)
        if existed:
            logger.info("Stopped monitoring %s", url)
        return existed

    async def check(self, url: str) -> Tuple[Monitor, bool]:
        """One price check; a manual price, once set, wins over what the page says."""
        monitor = self.get(url)
        previous = monitor.last_price
        record = await self._extract(url)

        monitor.title = record.title or monitor.title
        if monitor.manual_price_update:
            price, simulated = monitor.last_price, False
        else:
            price, simulated = record.price, record.is_simulated
            monitor.last_price = price
            monitor.is_simulated = simulated

        now = _now()
        monitor.last_checked = now
        monitor.next_check_at = now + timedelta(seconds=monitor.check_interval)
        logger.info("Checked %s: %s%s", url, price, " (simulated)" if simulated else "")

        notified = await self._maybe_notify(monitor, price, simulated, previous)
        return monitor, notified

    async def update_price(self, url: str, price: float, send_notification: bool = False) -> Tuple[Monitor, bool]:
        monitor = self.get(url)
        previous = monitor.last_price
        monitor.last_price = price
        monitor.manual_price_update = True
        monitor.is_simulated = False
        monitor.last_checked = _now()
        logger.info("Manual price %s recorded for %s", price, url)

        if send_notification or price <= monitor.target_price:
            return monitor, await self._deliver(monitor, price, previous)
        return monitor, False

    async def send_notification(
        self,
        email: str,
        title: str,
        url: str,
        target_price: float,
        current_price: float,
        previous_price: Optional[float] = None,
    ):
        """Raises NotificationError when delivery fails."""
        await asyncio.to_thread(self._notify, email, title, url, target_price, current_price, previous_price)

    async def shutdown(self):
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._monitors.clear()

    async def _run(self, url: str):
        while url in self._monitors:
            await asyncio.sleep(self._monitors[url].check_interval)
            try:
                await self.check(url)
            except MonitorNotFound:
                return
            except Exception:
                logger.exception("Scheduled price check failed for %s", url)

    def _cancel(self, url: str):
        task = self._tasks.pop(url, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _maybe_notify(self, monitor: Monitor, price, simulated: bool, previous) -> bool:
        if price is None or price > monitor.target_price:
            return False
        if simulated:
            logger.warning("Simulated price %s for %s is under target; not notifying", price, monitor.url)
            return False
        return await self._deliver(monitor, price, previous)

    async def _deliver(self, monitor: Monitor, price: float, previous) -> bool:
        try:
            await self.send_notification(
                monitor.email, monitor.title or monitor.url, monitor.url, monitor.target_price, price, previous
            )
        except NotificationError:
            logger.exception("Notification for %s to %s failed", monitor.url, monitor.email)
            return False
        return True


def get_monitor_service(request: Request) -> MonitorService:
    return request.app.state.monitors
