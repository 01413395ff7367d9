"""
Price token normalization.

Turns a captured price string (currency glyph, grouping separators,
decimal marks, surrounding promo copy) into a number. Steps run in a
fixed order and the first one that produces a value wins:

1. unambiguous currency-anchored match
2. promotional-text guard
3. strip-and-parse of a single numeric run
4. decimal-shift correction for implausibly large results
5. re-extraction for implausibly small results
6. candidate selection when several anchored prices compete
"""
import logging
import re
from typing import List, Optional

from .schema import NormalizeContext, PriceCandidate
from .selection import order_candidates, select_in_context

logger = logging.getLogger(__name__)

MAX_PLAUSIBLE_PRICE = 500_000
MIN_PLAUSIBLE_PRICE = 100
MAX_CANDIDATE_PRICE = 10_000_000
MAX_CANDIDATES = 5

_GLYPH = r"(?:₹|₨|\bRs\.?|\bINR|\$|€|£)"

ANCHORED_PRICE_RE = re.compile(
    r"(?P<glyph>" + _GLYPH + r")\s*"
    r"(?P<whole>\d{1,3}(?:,\d{2,3})+|\d+)"
    r"(?:\.(?P<dec>\d{1,2}))?"
    r"(?!\d|\.\d|,\d)",
    re.IGNORECASE,
)

# "€ 1.299", "₹ : 12 499" - grouped thousands with any separator
LOOSE_ANCHORED_RE = re.compile(
    _GLYPH + r"[^\d]{0,3}?(?P<num>\d{1,3}(?:[.,\s]\d{3})+|\d{3,})",
    re.IGNORECASE,
)

PROMO_WORDS_RE = re.compile(r"\b(?:off|save|up\s*to)\b", re.IGNORECASE)
PROMO_AFTER_RE = re.compile(r"^\s*%?\s*off\b", re.IGNORECASE)
PROMO_BEFORE_RE = re.compile(r"\b(?:save|savings?|up\s*to|upto|extra)\b\D*$", re.IGNORECASE)

# crossed-out reference prices: "MRP ₹2,999", "M.R.P.: ₹2,999", "List Price: $20"
REFERENCE_BEFORE_RE = re.compile(r"(?:\bm\.?r\.?p\b\.?|\blist\s*price\b|\boriginal(?:\s*price)?\b)\W*$", re.IGNORECASE)

NUMERIC_RUN_RE = re.compile(r"\d[\d.,]*")
DECIMAL_SHIFT_RE = re.compile(r"\d+,\d+\.\d{2}(?!\d)")

CURRENCY_GLYPHS = [
    ("₹", "₹"),
    ("₨", "₹"),
    ("INR", "₹"),
    ("Rs", "₹"),
    ("$", "$"),
    ("USD", "$"),
    ("EUR", "€"),
    ("GBP", "£"),
    ("€", "€"),
    ("£", "£"),
]
DEFAULT_CURRENCY = "₹"


def _clean(text: str) -> str:
    return text.replace("\xa0", " ").replace("\u202f", " ").strip()


def _anchored_value(m: re.Match) -> float:
    whole = m.group("whole").replace(",", "")
    dec = m.group("dec")
    return float(f"{whole}.{dec}") if dec else float(whole)


def _is_promotional(text: str, m: re.Match, prev_end: int) -> bool:
    after = text[m.end():m.end() + 10]
    before = text[max(prev_end, m.start() - 16):m.start()]
    return bool(PROMO_AFTER_RE.match(after) or PROMO_BEFORE_RE.search(before))


def scan_anchored(
    text: str, include_promotional: bool = False, include_reference: bool = False
) -> List[PriceCandidate]:
    """
    Every currency-anchored price in `text`, in document order (not
    deduplicated). Promotional amounts and prices labelled as MRP or list
    price are left out unless asked for.
    """
    if not text:
        return []
    text = _clean(text)
    found: List[PriceCandidate] = []
    prev_end = 0
    for m in ANCHORED_PRICE_RE.finditer(text):
        promo = _is_promotional(text, m, prev_end)
        reference = bool(REFERENCE_BEFORE_RE.search(text[prev_end:m.start()]))
        prev_end = m.end()
        if (promo and not include_promotional) or (reference and not include_reference):
            continue
        found.append(PriceCandidate(text=m.group(0).strip(), value=_anchored_value(m), position=m.start()))
    return found


def find_price_candidates(page_text: str, limit: int = MAX_CANDIDATES) -> List[PriceCandidate]:
    """
    Anchored prices found anywhere in the page text, in order of first
    appearance, one per numeric value, capped at `limit`.
    """
    candidates: List[PriceCandidate] = []
    seen = set()
    for cand in scan_anchored(page_text):
        if not (0 < cand.value < MAX_CANDIDATE_PRICE) or cand.value in seen:
            continue
        seen.add(cand.value)
        candidates.append(cand)
        if len(candidates) >= limit:
            break
    return candidates


def detect_currency(text: Optional[str], default: str = DEFAULT_CURRENCY) -> str:
    if not text:
        return default
    for glyph, symbol in CURRENCY_GLYPHS:
        if glyph in text:
            return symbol
    return default


def _strip_and_parse(text: str) -> Optional[float]:
    runs = [r.rstrip(".,") for r in NUMERIC_RUN_RE.findall(text)]
    runs = [r for r in runs if r]
    if len(runs) != 1:
        # several separate numbers cannot be glued into one price
        return None

    digits = runs[0]
    if "." in digits:
        whole, dec = digits.rsplit(".", 1)
        if len(dec) > 2:
            logger.debug("Truncating decimal part %r of %r", dec, text)
            dec = dec[:2]
        digits = f"{whole.replace(',', '')}.{dec}"
    else:
        digits = digits.replace(",", "")

    try:
        return float(digits)
    except ValueError:
        return None


def _rescue_low(text: str) -> Optional[float]:
    m = LOOSE_ANCHORED_RE.search(text)
    if not m:
        return None
    value = float(re.sub(r"[.,\s]", "", m.group("num")))
    return value if value >= MIN_PLAUSIBLE_PRICE else None


def normalize_price(raw_text: Optional[str], context: Optional[NormalizeContext] = None) -> Optional[float]:
    """
    Numeric price for `raw_text`, or None when no step yields a usable
    positive number.
    """
    if not raw_text:
        return None
    text = _clean(raw_text)

    anchored = order_candidates(scan_anchored(text))
    if len(anchored) == 1 and anchored[0].value > 0:
        logger.debug("Anchored price %s -> %s", anchored[0].text, anchored[0].value)
        return anchored[0].value

    if not anchored and PROMO_WORDS_RE.search(text):
        logger.debug("Promotional text without a real price: %r", text)
        return None

    value = _strip_and_parse(text)

    if value is not None and value > MAX_PLAUSIBLE_PRICE and DECIMAL_SHIFT_RE.search(text):
        corrected = round(value / 100, 2)
        logger.debug("Decimal shift suspected in %r: %s -> %s", text, value, corrected)
        return corrected

    if value is not None and value < MIN_PLAUSIBLE_PRICE:
        rescued = _rescue_low(text)
        if rescued is not None:
            logger.debug("Low price %s re-extracted as %s from %r", value, rescued, text)
            return rescued

    if value is None and len(anchored) > 1:
        chosen = select_in_context(anchored, context)
        logger.debug("Chose %s among %d anchored prices", chosen.text, len(anchored))
        return chosen.value

    if value is None or value <= 0:
        logger.debug("No price in %r", text)
        return None
    return value
