# adapter_amazon.py
from ..parser_generic import locate_page, page_text_step, selector_step, structured_data_step
from ..schema import LocatedPage, SiteType
from ..selection import DEFAULT_POLICY, SelectionPolicy

TITLE_SELECTORS = [
    "#productTitle",
    "#title",
    ".product-title",
    ".a-size-large.product-title-word-break",
]

# .a-offscreen carries the full "₹24,999.00"; .a-price-whole is the bare integer part.
# .a-text-price wraps the struck-through list price.
PRICE_SELECTORS = [
    ".a-price:not(.a-text-price) .a-offscreen",
    "#priceblock_ourprice",
    "#priceblock_dealprice",
    ".a-price-whole",
    "#price_inside_buybox",
    "#newBuyBoxPrice",
]

PRICE_STEPS = [
    ("selector", selector_step(PRICE_SELECTORS)),
    ("page-text", page_text_step()),
    ("structured-data", structured_data_step()),
]


def extract_amazon(html: str, url: str, policy: SelectionPolicy = DEFAULT_POLICY, structural: bool = True) -> LocatedPage:
    """
    Works for amazon.in, amazon.com, amazon.co.uk and the other storefronts;
    the buy-box markup is shared across them.
    """
    return locate_page(html, url, SiteType.AMAZON, TITLE_SELECTORS, PRICE_STEPS, policy, structural)
