# adapter_flipkart.py
from ..parser_generic import (
    class_scan_step,
    locate_page,
    page_text_step,
    selector_step,
    structured_data_step,
)
from ..schema import LocatedPage, SiteType
from ..selection import DEFAULT_POLICY, SelectionPolicy

TITLE_SELECTORS = [
    ".B_NuCI",
    "._35KyD6",
    "h1 span",
    ".yhB1nd span",
    "h1",
]

# Obfuscated class names rotate; most reliable first.
PRICE_SELECTORS = [
    "._30jeq3._1_WHN1",
    "._30jeq3._16Jk6d",
    "._30jeq3",
    ".dyC4hf .CEmiEU",
    ".dyC4hf",
    "._1vC4OE",
    "._16Jk6d",
    ".CEmiEU ._30jeq3",
    "._25b18w",
    "[data-price]",
    ".a-price-whole",
    ".a-offscreen",
]

PRICE_CLASS_HINTS = ["price", "prc", "amount", "_30jeq", "rupee", "value", "rate"]

PRICE_STEPS = [
    ("selector", selector_step(PRICE_SELECTORS, require_currency=True)),
    ("class-scan", class_scan_step(PRICE_CLASS_HINTS)),
    ("page-text", page_text_step(use_selection=True)),
    ("structured-data", structured_data_step()),
]


def extract_flipkart(html: str, url: str, policy: SelectionPolicy = DEFAULT_POLICY, structural: bool = True) -> LocatedPage:
    return locate_page(html, url, SiteType.FLIPKART, TITLE_SELECTORS, PRICE_STEPS, policy, structural)
