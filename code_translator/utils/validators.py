from typing import Optional
from urllib.parse import urlparse


def is_blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def is_valid_url(value: str) -> bool:
    v = value.strip()
    try:
        parsed = urlparse(v)
        return bool(parsed.scheme in ("http", "https") and parsed.netloc)
    except ValueError:
        return False
