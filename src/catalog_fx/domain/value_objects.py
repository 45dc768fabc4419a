from enum import Enum


class PriceField(str, Enum):
    REGULAR = "regular"
    SALE = "sale"


class ProductStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PUBLISH = "publish"
    PRIVATE = "private"
    AUTO_DRAFT = "auto-draft"
    TRASH = "trash"


def normalize_currency_code(code: str) -> str:
    """Return an upper-cased 3-letter code, raising ValueError otherwise."""
    normalized = str(code).strip().upper()
    if len(normalized) != 3 or not normalized.isalpha():
        raise ValueError(f"Invalid currency: {code}")
    return normalized
