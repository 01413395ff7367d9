from .classifier import classify, classify_product, is_electronics_like
from .fetcher import FetchError
from .prices import normalize_price
from .schema import Category, CategoryVerdict, PriceCandidate, ProductRecord, SiteType
from .scrape import extract_from_html, extract_product, extract_product_sync
from .selection import SelectionPolicy, select

__all__ = [
    "Category",
    "CategoryVerdict",
    "FetchError",
    "PriceCandidate",
    "ProductRecord",
    "SelectionPolicy",
    "SiteType",
    "classify",
    "classify_product",
    "extract_from_html",
    "extract_product",
    "extract_product_sync",
    "is_electronics_like",
    "normalize_price",
    "select",
]
