import logging
import smtplib
import time
from email.message import EmailMessage
from email.utils import formataddr
from html import escape
from typing import Optional

from .config import Settings

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


class NotificationError(Exception):
    pass


def group_indian(whole: int) -> str:
    """12345678 -> '1,23,45,678' (last three digits, then pairs)."""
    digits = str(whole)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_price(price) -> str:
    value = float(price)
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    return f"{sign}₹{group_indian(int(whole))}.{frac}"


def calculate_savings(target_price, previous_price: Optional[float]) -> str:
    """Savings of the target against the last known price, or N/A when there are none."""
    if previous_price is None:
        return "N/A"
    target, previous = float(target_price), float(previous_price)
    if previous <= target:
        return "N/A"
    savings = previous - target
    return f"{format_price(savings)} ({savings / previous * 100:.2f}%)"


def render_email(title: str, url: str, target_price, current_price, previous_price=None) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #eee; border-radius: 10px;">
      <h1 style="color: #4285f4;">Price Drop Alert!</h1>
      <p>Good news! The price for <strong>{escape(title)}</strong> has dropped to your target price.</p>
      <div style="margin: 20px 0; padding: 15px; background-color: #f9f9f9; border-radius: 5px;">
        <p style="margin: 5px 0;"><strong>Current Price:</strong> {format_price(current_price)}</p>
        <p style="margin: 5px 0;"><strong>Target Price:</strong> {format_price(target_price)}</p>
        <p style="margin: 5px 0;"><strong>Savings:</strong> {calculate_savings(target_price, previous_price)}</p>
      </div>
      <p>Click the button below to view the product:</p>
      <div style="text-align: center; margin: 30px 0;">
        <a href="{escape(url, quote=True)}" style="background-color: #4285f4; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; font-weight: bold;">View Product</a>
      </div>
      <p style="color: #666; font-size: 12px;">This is an automated notification from Price Drop Alert.</p>
    </div>
    """


def build_message(settings: Settings, to_addr: str, title: str, html: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = formataddr((settings.email_from_name, settings.email_user or "noreply@localhost"))
    msg["To"] = to_addr
    msg["Subject"] = f"Price Drop Alert: {title}"
    msg.set_content(f"The price for {title} has dropped to your target price.")
    msg.add_alternative(html, subtype="html")
    return msg


def _deliver(settings: Settings, msg: EmailMessage):
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as s:
        if settings.email_user and settings.email_pass:
            s.starttls()
            s.login(settings.email_user, settings.email_pass)
        s.send_message(msg)


def send_price_drop_email(
    settings: Settings,
    email: str,
    title: str,
    url: str,
    target_price: float,
    current_price: float,
    previous_price: Optional[float] = None,
    sleep=time.sleep,
):
    """
    Send the price-drop email, retrying up to MAX_ATTEMPTS times with a
    growing pause. Raises NotificationError once every attempt has failed.
    Blocking; call through asyncio.to_thread from async code.
    """
    html = render_email(title, url, target_price, current_price, previous_price)
    msg = build_message(settings, email, title, html)

    last_error = None
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            _deliver(settings, msg)
            logger.info("Price drop email sent to %s for %s (attempt %d)", email, url, attempt)
            return
        except (smtplib.SMTPException, OSError) as exc:
            last_error = exc
            logger.warning("Email attempt %d/%d to %s failed: %s", attempt, MAX_ATTEMPTS, email, exc)
            if attempt < MAX_ATTEMPTS:
                sleep(2 * attempt)

    raise NotificationError(f"failed to send email to {email} after {MAX_ATTEMPTS} attempts: {last_error}")
