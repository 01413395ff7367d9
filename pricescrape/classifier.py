from typing import Dict, List, Tuple

from .schema import Category, CategoryVerdict

CLASSIFICATION_THRESHOLD = 10
NEGATIVE_PENALTY = -15

# Declaration order matters: on an exact tie the first category wins.
CATEGORIES: List[Tuple[Category, Dict[str, int], List[str]]] = [
    (
        Category.ELECTRONICS,
        {
            # core devices
            "mobile": 10, "phone": 10, "smartphone": 10, "tv": 10, "television": 10,
            "laptop": 10, "computer": 10, "tablet": 10, "ipad": 10, "camera": 10,
            # audio / video
            "headphone": 8, "earphone": 8, "speaker": 8, "bluetooth": 8, "wireless": 8,
            "soundbar": 8, "projector": 8, "microphone": 8, "audio": 8,
            # peripherals
            "monitor": 7, "printer": 7, "keyboard": 7, "mouse": 7, "router": 7,
            "modem": 7, "webcam": 7, "scanner": 7,
            # components
            "processor": 6, "cpu": 6, "gpu": 6, "ram": 6, "ssd": 6, "hdd": 6,
            "motherboard": 6, "graphics": 6, "battery": 6, "charger": 6,
            # brands make other things too, so they weigh less
            "samsung": 3, "apple": 3, "sony": 3, "lg": 3, "dell": 4, "hp": 4,
            "lenovo": 4, "asus": 4, "acer": 4, "xiaomi": 3, "oneplus": 4,
        },
        ["shirt", "dress", "pant", "clothing", "fashion", "apparel"],
    ),
    (
        Category.FASHION,
        {
            "shirt": 10, "tshirt": 10, "t-shirt": 10, "dress": 10, "pant": 10,
            "trouser": 10, "jeans": 10, "skirt": 10, "top": 8, "blouse": 10,
            "saree": 10, "kurta": 10, "kurti": 10, "lehenga": 10, "dupatta": 9,
            "salwar": 9, "palazzo": 9, "ethnic": 8,
            "jacket": 9, "coat": 9, "sweater": 9, "sweatshirt": 9, "hoodie": 9,
            "blazer": 9, "shrug": 8,
            "fashion": 7, "clothing": 7, "apparel": 7, "wear": 6, "outfit": 6,
            "designer": 6, "boutique": 6, "trendy": 5, "stylish": 5,
            "cotton": 4, "silk": 4, "wool": 4, "polyester": 4, "linen": 4,
            "denim": 4, "leather": 4, "fabric": 4,
        },
        ["electronics", "mobile", "laptop", "charger", "digital"],
    ),
]


def category_scores(text: str) -> Dict[Category, int]:
    """Raw per-category scores; keywords match as plain substrings."""
    text = (text or "").lower()
    scores: Dict[Category, int] = {}
    for category, keywords, negatives in CATEGORIES:
        score = sum(weight for kw, weight in keywords.items() if kw in text)
        score += NEGATIVE_PENALTY * sum(1 for kw in negatives if kw in text)
        scores[category] = score
    return scores


def classify(text: str) -> CategoryVerdict:
    best_category, best_score = None, None
    for category, score in category_scores(text).items():
        if best_score is None or score > best_score:
            best_category, best_score = category, score

    if best_score is None or best_score < CLASSIFICATION_THRESHOLD:
        return CategoryVerdict(category=Category.OTHER, score=0, is_confident=False)

    return CategoryVerdict(
        category=best_category,
        score=best_score,
        is_confident=best_score >= CLASSIFICATION_THRESHOLD * 2,
    )


def classify_product(url: str, title: str = "") -> CategoryVerdict:
    return classify(f"{url or ''} {title or ''}")


def is_electronics_like(url: str, title: str = "") -> bool:
    return classify_product(url, title).category == Category.ELECTRONICS
