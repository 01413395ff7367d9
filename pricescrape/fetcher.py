import asyncio
import logging
from typing import Dict, List, Optional

import requests

from .schema import SiteType

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15
SPECIALIZED_TIMEOUT = 20
DEFAULT_RETRY_DELAY = 1.0
# requests' timeout bounds connect and each read, not the whole download
DEADLINE_MARGIN = 5.0

UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36"

GENERIC_HEADERS = {
    "User-Agent": UA,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

_BROWSER_HEADERS = {
    "Accept-Language": "en-US,en;q=0.5",
    "Referer": "https://www.google.com/",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "cross-site",
    "Cache-Control": "max-age=0",
}

# Tried in order for sites that push back on plain clients.
IDENTITY_PROFILES: List[Dict[str, str]] = [
    {
        **_BROWSER_HEADERS,
        "User-Agent": UA,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "sec-ch-ua": '"Chromium";v="96", "Google Chrome";v="96"',
        "sec-ch-ua-platform": '"Windows"',
        "sec-ch-ua-mobile": "?0",
    },
    {
        **_BROWSER_HEADERS,
        "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    },
    {
        **_BROWSER_HEADERS,
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36 Edg/123.0.0.0",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "sec-ch-ua": '"Microsoft Edge";v="123", "Chromium";v="123"',
        "sec-ch-ua-platform": '"Windows"',
        "sec-ch-ua-mobile": "?0",
    },
    {
        **_BROWSER_HEADERS,
        "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/100.0.4896.127 Safari/537.36",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "sec-ch-ua-platform": '"Linux"',
    },
]


class FetchError(Exception):
    def __init__(self, url: str, message: str, status: Optional[int] = None, partial: Optional[str] = None):
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status = status
        self.partial = partial


def _get(url: str, headers: Dict[str, str], timeout: float, allow_redirects: bool) -> requests.Response:
    resp = requests.get(url, headers=headers, timeout=timeout, allow_redirects=allow_redirects)
    if "charset" not in resp.headers.get("Content-Type", "").lower():
        # requests falls back to latin-1 for text/html, which mangles ₹
        resp.encoding = resp.apparent_encoding
    return resp


async def _get_within_deadline(url: str, headers: Dict[str, str], timeout: float, allow_redirects: bool) -> requests.Response:
    """
    One request, abandoned after timeout + DEADLINE_MARGIN seconds even if
    the server keeps trickling bytes. The worker thread is left to finish
    on its own; its result is discarded.
    """
    return await asyncio.wait_for(
        asyncio.to_thread(_get, url, headers, timeout, allow_redirects),
        timeout + DEADLINE_MARGIN,
    )


async def fetch_generic(url: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """One request with a desktop identity; anything but a 200 is a FetchError."""
    try:
        resp = await _get_within_deadline(url, GENERIC_HEADERS, timeout, True)
    except asyncio.TimeoutError as exc:
        raise FetchError(url, f"no complete response within {timeout + DEADLINE_MARGIN}s") from exc
    except requests.RequestException as exc:
        raise FetchError(url, f"request failed: {type(exc).__name__}: {exc}") from exc

    if resp.status_code != 200:
        raise FetchError(url, f"HTTP {resp.status_code}", status=resp.status_code, partial=resp.text or None)
    return resp.text


async def fetch_with_rotation(
    url: str,
    profiles: List[Dict[str, str]] = IDENTITY_PROFILES,
    timeout: float = SPECIALIZED_TIMEOUT,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> str:
    """
    Walk the identity profiles in order until one gets a 200. Redirects are
    not followed: on these sites they lead to a bot challenge.
    """
    status, partial = None, None
    for attempt, headers in enumerate(profiles):
        if attempt:
            await asyncio.sleep(retry_delay * attempt)
        logger.debug("Attempt %d/%d for %s as %s...", attempt + 1, len(profiles), url, headers["User-Agent"][:30])
        try:
            resp = await _get_within_deadline(url, headers, timeout, False)
        except asyncio.TimeoutError:
            logger.info("Attempt %d for %s ran past its deadline", attempt + 1, url)
            continue
        except requests.RequestException as exc:
            logger.info("Attempt %d failed for %s: %s", attempt + 1, url, exc)
            continue

        if resp.status_code == 200:
            logger.info("Fetched %s on attempt %d", url, attempt + 1)
            return resp.text
        status = resp.status_code
        partial = resp.text or partial
        logger.info("Attempt %d for %s returned HTTP %s", attempt + 1, url, status)

    raise FetchError(url, f"no identity profile succeeded after {len(profiles)} attempts", status=status, partial=partial)


async def fetch_html(
    url: str,
    site_type: SiteType,
    timeout: float = DEFAULT_TIMEOUT,
    specialized_timeout: float = SPECIALIZED_TIMEOUT,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> str:
    if site_type == SiteType.FLIPKART:
        return await fetch_with_rotation(url, timeout=specialized_timeout, retry_delay=retry_delay)
    return await fetch_generic(url, timeout=timeout)
