import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Comment, Tag

from .prices import detect_currency, find_price_candidates, normalize_price, scan_anchored
from .schema import LocatedPage, NormalizeContext, SiteType
from .selection import DEFAULT_POLICY, SelectionPolicy, prefers_second, select_in_context
from .simulate import placeholder_title

logger = logging.getLogger(__name__)

PRICE_CEILING = 1_000_000

STRIKE_TAGS = {"del", "s", "strike"}
STRUCK_PRICE_CLASSES = {"a-text-price"}
PAGE_ROOTS = {"body", "html", "[document]"}
HIDDEN_TEXT_PARENTS = {"script", "style", "noscript", "template", "head", "title"}

PriceHit = Tuple[str, float]
PriceStep = Callable[[BeautifulSoup, LocatedPage, NormalizeContext], Optional[PriceHit]]


def _squash(text: str) -> str:
    return " ".join((text or "").split())


def node_text(node) -> str:
    content = node.get("content")
    if content:
        return _squash(content)
    return _squash(node.get_text(" "))


def _is_struck(node) -> bool:
    """Inside <del>/<s>/<strike>, or Amazon's struck list-price markup."""
    for el in [node, *node.parents]:
        if el.name in STRIKE_TAGS or el.get("data-a-strike") == "true":
            return True
        if STRUCK_PRICE_CLASSES.intersection(el.get("class") or []):
            return True
    return False


def _price_count(text: str) -> int:
    return len(scan_anchored(text, include_promotional=True, include_reference=True))


def _is_labelled_reference(text: str) -> bool:
    """Some anchored price in `text` comes right after an MRP / list price label."""
    return _price_count(text) > len(scan_anchored(text, include_promotional=True))


def _label_before(node) -> str:
    """Text of the nearest non-blank preceding sibling."""
    for sib in node.previous_siblings:
        text = _squash(sib.get_text(" ") if isinstance(sib, Tag) else str(sib))
        if text:
            return text
    return ""


def is_reference_price(node) -> bool:
    """
    Crossed-out MRP / list prices. Decided from the node's own label
    context only: its own text, a bare label right before it, and the
    enclosing elements up to the first one that also holds another price.
    """
    if _is_struck(node):
        return True

    own = node_text(node)
    own_count = _price_count(own)
    if own_count == 1 and _is_labelled_reference(own):
        return True

    label = _label_before(node)
    if label and not _price_count(label) and _is_labelled_reference(f"{label} {own}"):
        return True

    for holder in node.parents:
        if holder.name in PAGE_ROOTS:
            break
        text = holder.get_text(" ")
        if _price_count(text) > own_count:
            break
        if _is_labelled_reference(text):
            return True
    return False


def plausible(value: Optional[float]) -> bool:
    return value is not None and 0 < value < PRICE_CEILING


def first_text(soup: BeautifulSoup, selectors: Iterable[str]) -> Optional[str]:
    for sel in selectors:
        node = soup.select_one(sel)
        if node is None:
            continue
        text = node_text(node)
        if text:
            logger.debug("Title matched %r: %s", sel, text)
            return text
    return None


def fallback_title(soup: BeautifulSoup) -> Optional[str]:
    return first_text(soup, ["h1", "title"])


def visible_text(soup: BeautifulSoup) -> str:
    root = soup.body or soup
    parts = []
    for s in root.find_all(string=True):
        if isinstance(s, Comment) or s.parent is None or s.parent.name in HIDDEN_TEXT_PARENTS:
            continue
        parts.append(s)
    return _squash(" ".join(parts))


def _has_glyph(text: str) -> bool:
    return "₹" in text or "Rs" in text


def _accept(text: str, ctx: NormalizeContext, require_currency: bool) -> Optional[float]:
    if not text or (require_currency and not _has_glyph(text)):
        return None
    value = normalize_price(text, ctx)
    return value if plausible(value) else None


def selector_step(selectors: Sequence[str], require_currency: bool = False) -> PriceStep:
    """Ordered structural selectors; first element that yields a price wins."""
    def step(soup, page, ctx):
        for sel in selectors:
            for node in soup.select(sel):
                text = node_text(node)
                if not text:
                    continue
                if is_reference_price(node):
                    logger.debug("Skipping reference price %r (%s)", text, sel)
                    continue
                value = _accept(text, ctx, require_currency)
                if value is not None:
                    logger.debug("Price matched %r: %s -> %s", sel, text, value)
                    return text, value
        return None
    return step


def class_scan_step(hints: Sequence[str]) -> PriceStep:
    """Any element whose class names hint at a price, in document order."""
    def step(soup, page, ctx):
        for node in soup.find_all(class_=True):
            classes = " ".join(node.get("class") or [])
            if not any(h in classes for h in hints):
                continue
            text = node_text(node)
            if is_reference_price(node):
                continue
            value = _accept(text, ctx, require_currency=True)
            if value is not None:
                logger.debug("Price found by class scan (%s): %s -> %s", classes, text, value)
                return text, value
        return None
    return step


def page_text_step(use_selection: bool = False) -> PriceStep:
    """First currency-anchored price in the page text, or the policy's pick."""
    def step(soup, page, ctx):
        matches = [c for c in page.all_price_matches if plausible(c.value)]
        if not matches:
            return None
        cand = select_in_context(matches, ctx) if use_selection else matches[0]
        return cand.text, cand.value
    return step


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", "").strip())
        except ValueError:
            return None
    return None


def _ld_items(data: Any) -> List[Dict]:
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        items = data.get("@graph") or [data]
    else:
        items = []
    return [i for i in items if isinstance(i, dict)]


def _offer_price(item: Dict) -> Optional[PriceHit]:
    offers = item.get("offers")
    if isinstance(offers, dict):
        offers = [offers]
    for offer in offers if isinstance(offers, list) else []:
        if not isinstance(offer, dict):
            continue
        for key in ("price", "lowPrice"):
            value = _to_float(offer.get(key))
            if plausible(value):
                return f"{offer.get('priceCurrency') or ''} {offer.get(key)}".strip(), value
    value = _to_float(item.get("price"))
    if plausible(value):
        return f"{item.get('priceCurrency') or ''} {item.get('price')}".strip(), value
    return None


def parse_ld_json_price(soup: BeautifulSoup) -> Optional[PriceHit]:
    for tag in soup.find_all("script", type=lambda t: t and "ld+json" in t):
        try:
            data = json.loads(tag.string or tag.get_text() or "null")
        except ValueError:
            logger.debug("Unparseable JSON-LD block skipped")
            continue
        for item in _ld_items(data):
            hit = _offer_price(item)
            if hit:
                logger.debug("Structured data price: %s", hit[0])
                return hit
    return None


def structured_data_step() -> PriceStep:
    def step(soup, page, ctx):
        return parse_ld_json_price(soup)
    return step


STRUCTURAL_SOURCES = {"selector", "class-scan"}


def locate_page(
    html: str,
    url: str,
    site_type: SiteType,
    title_selectors: Sequence[str],
    price_steps: Sequence[Tuple[str, PriceStep]],
    policy: SelectionPolicy = DEFAULT_POLICY,
    structural: bool = True,
) -> LocatedPage:
    """
    Run a site family's title selectors and price steps over `html`.
    With structural=False (partial or challenge markup) only the
    text-pattern and structured-data steps run.
    """
    soup = BeautifulSoup(html or "", "lxml")

    title = None
    if structural:
        title = first_text(soup, title_selectors) or fallback_title(soup)
    if not title:
        title = placeholder_title(url, site_type)
        logger.debug("Using placeholder title %r", title)

    page = LocatedPage(title=title, page_text=visible_text(soup))
    page.all_price_matches = find_price_candidates(page.page_text)

    ctx = NormalizeContext(url=url, title=title, prefer_second=prefers_second(url, title, policy))
    for source, step in price_steps:
        if not structural and source in STRUCTURAL_SOURCES:
            continue
        hit = step(soup, page, ctx)
        if hit and plausible(hit[1]):
            page.raw_price_text, page.price = hit
            page.price_source = source
            logger.info("Price %s located via %s for %s", page.price, source, url)
            break
    else:
        logger.info("No price located for %s", url)

    return page


def currency_for(page: LocatedPage) -> str:
    return detect_currency(page.raw_price_text)
