import asyncio
import logging
import sys
from typing import List, Optional

import orjson

from .adapters import detect_site, pick_adapter
from .classifier import is_electronics_like  # noqa: F401  (public entry point)
from .fetcher import DEFAULT_RETRY_DELAY, DEFAULT_TIMEOUT, SPECIALIZED_TIMEOUT, FetchError, fetch_html
from .normalizer import normalize, simulated_record
from .schema import ProductRecord, SiteType
from .selection import DEFAULT_POLICY, SelectionPolicy

logger = logging.getLogger(__name__)


def _check_url(url: str):
    if not isinstance(url, str) or not url.strip().lower().startswith(("http://", "https://")):
        raise ValueError(f"expected an http(s) product URL, got {url!r}")


def extract_from_html(
    url: str,
    html: str,
    policy: SelectionPolicy = DEFAULT_POLICY,
    site_type: Optional[SiteType] = None,
) -> ProductRecord:
    """Extraction over markup already in hand; no network."""
    _check_url(url)
    site_type = site_type or detect_site(url)
    page = pick_adapter(site_type)(html, url, policy=policy)
    return normalize(url, site_type, page)


def _extract_partial(url: str, html: str, policy: SelectionPolicy, site_type: SiteType) -> ProductRecord:
    page = pick_adapter(site_type)(html, url, policy=policy, structural=False)
    return normalize(url, site_type, page)


async def extract_product(
    url: str,
    policy: SelectionPolicy = DEFAULT_POLICY,
    timeout: float = DEFAULT_TIMEOUT,
    specialized_timeout: float = SPECIALIZED_TIMEOUT,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> ProductRecord:
    """
    Fetch and extract one product page.

    Never raises for unreachable pages or missing prices: those come back
    as a record with is_simulated=True. Only a malformed `url` raises.
    """
    _check_url(url)
    site_type = detect_site(url)
    try:
        html = await fetch_html(
            url,
            site_type,
            timeout=timeout,
            specialized_timeout=specialized_timeout,
            retry_delay=retry_delay,
        )
    except FetchError as exc:
        logger.warning("Fetch failed for %s: %s", url, exc)
        if exc.partial:
            return await asyncio.to_thread(_extract_partial, url, exc.partial, policy, site_type)
        return simulated_record(url, site_type)

    # lxml parse and locator steps run off the event loop
    record = await asyncio.to_thread(extract_from_html, url, html, policy, site_type)
    logger.info("Extracted %s | %s | %s%s", url, record.title, record.currency, record.price)
    return record


def extract_product_sync(url: str, **kwargs) -> ProductRecord:
    return asyncio.run(extract_product(url, **kwargs))


async def main(urls: List[str], concurrency: int = 3):
    print(f"[INIT] Extracting {len(urls)} URL(s)", file=sys.stderr)
    sem = asyncio.Semaphore(concurrency)

    async def safe_process(url: str):
        async with sem:
            print(f"[JOB] FETCH → {url}", file=sys.stderr)
            try:
                record = await extract_product(url)
            except ValueError as e:
                print(f"[JOB] ERR  → {url} | {e}", file=sys.stderr)
                return
            flag = " (simulated)" if record.is_simulated else ""
            print(f"[JOB] OK   → {record.site_type.value} | {record.title} | {record.price}{flag}", file=sys.stderr)
            sys.stdout.buffer.write(orjson.dumps(record.model_dump(mode="json")) + b"\n")

    await asyncio.gather(*(safe_process(u) for u in urls))
    print("[DONE] Extraction finished.", file=sys.stderr)


def cli():
    #   pricescrape https://www.flipkart.com/... https://www.amazon.in/...
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) < 2:
        print("usage: pricescrape URL [URL ...]", file=sys.stderr)
        sys.exit(2)
    asyncio.run(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()
