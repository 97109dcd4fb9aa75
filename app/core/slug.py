"""URL slugs and tenant codes derived from titles and names."""

import re
import unicodedata
from typing import Iterable

_NON_SLUG = re.compile(r"[^a-z0-9\s_-]")
_SEPARATORS = re.compile(r"[\s_-]+")


def generate_slug(text: str) -> str:
    """"Grand Opening: Café Week!" -> "grand-opening-cafe-week" """
    if not text:
        return ""
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = _NON_SLUG.sub("", ascii_text.lower().strip())
    return _SEPARATORS.sub("-", slug).strip("-")


def unique_slug(base: str, existing: Iterable[str]) -> str:
    """Append -1, -2, ... to ``base`` until it is not in ``existing``"""
    taken = set(existing)
    slug = base
    counter = 1
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def is_valid_slug(slug: str) -> bool:
    return bool(slug) and re.fullmatch(r"[a-z0-9]+(-[a-z0-9]+)*", slug) is not None


def generate_tenant_code(name: str) -> str:
    """First word of the name, upper-cased alphanumerics, at most 20 characters"""
    if not name or not name.split():
        return ""
    return re.sub(r"[^A-Z0-9]", "", name.split()[0].upper())[:20]
