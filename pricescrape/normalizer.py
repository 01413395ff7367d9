import logging

from .parser_generic import currency_for
from .prices import DEFAULT_CURRENCY
from .schema import LocatedPage, ProductRecord, SiteType
from .selection import price_options
from .simulate import placeholder_title, product_id, simulated_price

logger = logging.getLogger(__name__)


def normalize(url: str, site_type: SiteType, page: LocatedPage) -> ProductRecord:
    """Turn one locator pass into a ProductRecord, simulating the price if none was found."""
    values, display = price_options(page.all_price_matches)
    title = page.title or placeholder_title(url, site_type)

    if page.price is None:
        logger.warning("No real price for %s; substituting a simulated one", url)
        return simulated_record(url, site_type, title=title, options=(values, display))

    return ProductRecord(
        url=url,
        title=title,
        price=page.price,
        currency=currency_for(page),
        site_type=site_type,
        price_options=values,
        price_display_options=display,
        is_simulated=False,
    )


def simulated_record(url: str, site_type: SiteType, title: str = None, options=None) -> ProductRecord:
    values, display = options or ([], [])
    return ProductRecord(
        url=url,
        title=title or placeholder_title(url, site_type),
        price=simulated_price(url, product_id(url, site_type)),
        currency=DEFAULT_CURRENCY,
        site_type=site_type,
        price_options=values,
        price_display_options=display,
        is_simulated=True,
    )
