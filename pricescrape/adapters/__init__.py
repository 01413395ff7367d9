import tldextract

from ..schema import SiteType
from . import adapter_amazon, adapter_flipkart, adapter_generic

# bundled public-suffix snapshot only; never fetch the list at runtime
_extract = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)

SITE_FAMILIES = {
    "flipkart": SiteType.FLIPKART,
    "amazon": SiteType.AMAZON,
}

ADAPTERS = {
    SiteType.FLIPKART: adapter_flipkart.extract_flipkart,
    SiteType.AMAZON: adapter_amazon.extract_amazon,
    SiteType.OTHER: adapter_generic.extract_generic,
}


def detect_site(url: str) -> SiteType:
    """amazon.in / amazon.co.uk / dl.flipkart.com all resolve by registrable name."""
    return SITE_FAMILIES.get(_extract(url).domain.lower(), SiteType.OTHER)


def pick_adapter(site_type: SiteType):
    return ADAPTERS.get(site_type, adapter_generic.extract_generic)
