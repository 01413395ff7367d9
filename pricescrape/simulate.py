import hashlib
import logging
import re
from typing import Optional
from urllib.parse import urlparse

from slugify import slugify

from .schema import SiteType

logger = logging.getLogger(__name__)

# (keywords, low, high) - checked in order; audio first so "headphone"
# is not mistaken for a phone.
SIMULATED_RANGES = [
    (("headphone", "earphone", "earbud"), 1_000, 30_000),
    (("mobile", "phone", "smartphone"), 15_000, 80_000),
    (("tv", "television"), 15_000, 150_000),
    (("laptop", "computer", "notebook"), 30_000, 200_000),
    (("camera", "dslr"), 5_000, 100_000),
]
DEFAULT_RANGE = (500, 50_000)

URL_CATEGORIES = [
    (("headphone", "earphone", "earbud", "buds"), "Headphones"),
    (("mobile", "phone"), "Mobile Phone"),
    (("laptop",), "Laptop"),
    (("tv", "television"), "Television"),
    (("watch",), "Watch"),
    (("camera",), "Camera"),
    (("refrigerator", "fridge"), "Refrigerator"),
    (("washing-machine",), "Washing Machine"),
    (("air-conditioner", "ac-"), "Air Conditioner"),
]

# ordered: "redmi" must be tried before "mi"
COMMON_BRANDS = [
    "samsung", "apple", "xiaomi", "redmi", "oneplus", "poco", "realme", "oppo", "vivo",
    "nokia", "motorola", "sony", "lg", "panasonic", "hp", "dell", "lenovo", "asus", "acer",
    "boat", "jbl", "zebronics", "philips", "whirlpool", "haier", "godrej", "voltas", "daikin", "mi",
]

ASIN_RE = re.compile(r"/([A-Z0-9]{10})(?:/|\?|$)")
FLIPKART_PID_RE = re.compile(r"pid=([A-Z0-9]+)", re.IGNORECASE)
FLIPKART_P_RE = re.compile(r"/p/([a-z0-9]+)", re.IGNORECASE)
LONG_ID_RE = re.compile(r"([a-z0-9]{16,})", re.IGNORECASE)
SLUG_BEFORE_P_RE = re.compile(r"/([^/]+)/p/")
UNIT_RE = re.compile(r"\b\d+\s*(gb|tb|inch|cm)\b", re.IGNORECASE)


def make_id(url: str, name: str = None) -> str:
    dom = urlparse(url).netloc
    base = slugify((name or urlparse(url).path or url)[0:80])
    return f"{dom}-{base}" if base else dom


def product_id(url: str, site_type: SiteType = SiteType.OTHER) -> str:
    """Stable identifier for a product URL; falls back to a slug of the URL."""
    if site_type == SiteType.FLIPKART:
        for rx in (FLIPKART_PID_RE, FLIPKART_P_RE, LONG_ID_RE):
            m = rx.search(url)
            if m:
                return m.group(1)
    elif site_type == SiteType.AMAZON:
        m = ASIN_RE.search(url)
        if m:
            return m.group(1)
    return make_id(url)


def stable_hash(value: str) -> int:
    return int(hashlib.sha1(value.encode("utf-8")).hexdigest()[:12], 16)


def simulated_range(url: str):
    url_lower = (url or "").lower()
    for keywords, low, high in SIMULATED_RANGES:
        if any(kw in url_lower for kw in keywords):
            return low, high
    return DEFAULT_RANGE


def simulated_price(url: str, identifier: Optional[str] = None) -> float:
    """
    Placeholder price for a product whose real price cannot be read.
    Same URL in, same price out, so re-checks never show phantom changes.
    """
    low, high = simulated_range(url)
    value = low + stable_hash(identifier or url) % (high - low)
    logger.debug("Simulated price %s for %s (range %s-%s)", value, url, low, high)
    return float(value)


def _titlecase(word: str) -> str:
    return word[:1].upper() + word[1:]


def url_category(url: str) -> Optional[str]:
    url_lower = url.lower()
    for keywords, label in URL_CATEGORIES:
        if any(kw in url_lower for kw in keywords):
            return label
    return None


def url_brand(url: str) -> Optional[str]:
    tokens = set(re.split(r"[^a-z0-9]+", url.lower()))
    for brand in COMMON_BRANDS:
        if brand in tokens:
            return _titlecase(brand)
    return None


def _humanize_slug(slug: str) -> str:
    words = slug.replace("-", " ").split()
    name = " ".join(_titlecase(w) for w in words)
    return UNIT_RE.sub(lambda m: m.group(0).upper(), name)


def _domain_label(url: str) -> Optional[str]:
    host = urlparse(url).hostname or ""
    host = host[4:] if host.startswith("www.") else host
    label = host.split(".")[0] if host else ""
    return _titlecase(label) if label else None


def placeholder_title(url: str, site_type: SiteType = SiteType.OTHER) -> str:
    """Readable product name built from the URL alone."""
    if site_type == SiteType.AMAZON:
        m = ASIN_RE.search(url)
        return f"Amazon Product {m.group(1)}" if m else "Amazon Product"

    if site_type == SiteType.FLIPKART:
        m = SLUG_BEFORE_P_RE.search(url)
        if m:
            return _humanize_slug(m.group(1))

    category = url_category(url)
    brand = url_brand(url)
    if category or brand:
        return " ".join(part for part in (brand, category or "Product") if part)

    if site_type == SiteType.FLIPKART:
        return "Flipkart Product"
    domain = _domain_label(url)
    return f"{domain} Product" if domain else "Online Product"
