from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SiteType(str, Enum):
    FLIPKART = "flipkart"        # specialized extractor, anti-scraping site
    AMAZON = "amazon"
    OTHER = "other"


class Category(str, Enum):
    ELECTRONICS = "electronics"
    FASHION = "fashion"
    OTHER = "other"


class CategoryVerdict(BaseModel):
    category: Category
    score: int
    is_confident: bool = False


class PriceCandidate(BaseModel):
    text: str                    # matched display text, e.g. "₹9,490"
    value: float
    position: int                # offset of first appearance in the scanned text


class NormalizeContext(BaseModel):
    """
    Request-scoped data threaded through price normalization so the
    classifier can be consulted when several prices compete.
    """
    url: str = ""
    title: str = ""
    prefer_second: Optional[bool] = None    # precomputed verdict; None => classify url + title


class LocatedPage(BaseModel):
    title: Optional[str] = None
    raw_price_text: Optional[str] = None
    price: Optional[float] = None
    price_source: str = "none"   # selector | class-scan | page-text | structured-data | none
    page_text: str = ""
    all_price_matches: List[PriceCandidate] = Field(default_factory=list)


class ProductRecord(BaseModel):
    url: str
    title: str
    price: Optional[float] = None
    currency: str = "₹"
    site_type: SiteType = SiteType.OTHER
    price_options: List[float] = Field(default_factory=list)
    price_display_options: List[str] = Field(default_factory=list)
    is_simulated: bool = False
