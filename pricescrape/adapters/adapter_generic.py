from ..parser_generic import locate_page, page_text_step, selector_step, structured_data_step
from ..schema import LocatedPage, SiteType
from ..selection import DEFAULT_POLICY, SelectionPolicy

TITLE_SELECTORS = [
    "h1",
    ".product-title",
    ".product-name",
    ".product_title",
    ".title",
    ".name",
    "title",
]

PRICE_SELECTORS = [
    ".product-price",
    ".price",
    ".offer-price",
    ".current-price",
    ".sale-price",
    ".our-price",
    "[itemprop='price']",
    ".special-price .price",
    ".special-price",
]

PRICE_STEPS = [
    ("selector", selector_step(PRICE_SELECTORS)),
    ("page-text", page_text_step()),
    ("structured-data", structured_data_step()),
]


def extract_generic(html: str, url: str, policy: SelectionPolicy = DEFAULT_POLICY, structural: bool = True) -> LocatedPage:
    return locate_page(html, url, SiteType.OTHER, TITLE_SELECTORS, PRICE_STEPS, policy, structural)
