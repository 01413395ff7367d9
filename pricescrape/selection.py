import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .classifier import is_electronics_like
from .schema import NormalizeContext, PriceCandidate

logger = logging.getLogger(__name__)

MAX_PRICE_OPTIONS = 2


@dataclass(frozen=True)
class SelectionPolicy:
    # Two-price layouts on electronics listings tend to show the list price
    # first and the card/bank "effective" price second. Tunable, not a rule.
    prefer_second_for_electronics: bool = True


DEFAULT_POLICY = SelectionPolicy()


def order_candidates(candidates: Sequence[PriceCandidate]) -> List[PriceCandidate]:
    """Document order of first appearance, one entry per numeric value."""
    seen = set()
    ordered: List[PriceCandidate] = []
    for cand in sorted(candidates, key=lambda c: c.position):
        if cand.value in seen:
            continue
        seen.add(cand.value)
        ordered.append(cand)
    return ordered


def prefers_second(url: str, title: str, policy: SelectionPolicy = DEFAULT_POLICY) -> bool:
    return policy.prefer_second_for_electronics and is_electronics_like(url, title)


def select_candidate(
    candidates: Sequence[PriceCandidate],
    url: str = "",
    title: str = "",
    policy: SelectionPolicy = DEFAULT_POLICY,
    prefer_second: Optional[bool] = None,
) -> PriceCandidate:
    if not candidates:
        raise ValueError("select_candidate needs at least one candidate")

    ordered = order_candidates(candidates)
    if prefer_second is None:
        prefer_second = prefers_second(url, title, policy)

    if prefer_second and len(ordered) > 1:
        chosen = ordered[1]
        logger.debug("Selected %s (second of %d, electronics-like)", chosen.text, len(ordered))
    else:
        chosen = ordered[0]
        logger.debug("Selected %s (first of %d)", chosen.text, len(ordered))
    return chosen


def select(
    candidates: Sequence[PriceCandidate],
    url: str = "",
    title: str = "",
    policy: SelectionPolicy = DEFAULT_POLICY,
) -> float:
    return select_candidate(candidates, url, title, policy).value


def select_in_context(candidates: Sequence[PriceCandidate], context: Optional[NormalizeContext]) -> PriceCandidate:
    context = context or NormalizeContext()
    return select_candidate(candidates, context.url, context.title, prefer_second=context.prefer_second)


def price_options(candidates: Sequence[PriceCandidate]):
    """Top candidates for human review: (values, display texts)."""
    top = order_candidates(candidates)[:MAX_PRICE_OPTIONS]
    return [c.value for c in top], [c.text for c in top]
