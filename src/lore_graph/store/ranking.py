"""Search ranking shared by every row store backend.

Lower rank is better. The precedence is fixed:

    0  exact slug or name
    1  slugified term equals the slug ("Imperium of Man" -> imperium-of-man)
    2  slug or name starts with the term
    3  name contains the term
    4  summary contains the term
    5  description contains the term
    6  composite search text contains the term

Rows matching none of these are excluded.
"""

import re
from typing import Any

from .base import Row, normalize

EXACT = 0
NORMALIZED_SLUG = 1
PREFIX = 2
NAME_SUBSTRING = 3
SUMMARY_SUBSTRING = 4
DESCRIPTION_SUBSTRING = 5
ANYWHERE = 6


def slugify(text: str) -> str:
    """Turn free text into slug form."""
    text = normalize(text).replace("'", "").replace("’", "")
    return re.sub(r"[^a-z0-9]+", "-", text).strip("-")


def search_text(row: Row, search_fields: list[str]) -> str:
    """Build the lowercase composite text a row is searched by."""
    parts: list[str] = []
    for field in search_fields:
        value: Any = row.get(field)
        if value is None or value == "":
            continue
        if isinstance(value, (list, tuple)):
            parts.extend(str(item) for item in value if item)
        else:
            parts.append(str(value))
    return " ".join(parts).lower()


def rank_row(row: Row, term: str, search_fields: list[str]) -> int | None:
    """Rank a row against a search term, or None when it does not match."""
    needle = normalize(term)
    if not needle:
        return None

    slug = normalize(row.get("slug"))
    name = normalize(row.get("name"))

    if needle in (slug, name):
        return EXACT
    if slugify(needle) and slugify(needle) == slug:
        return NORMALIZED_SLUG
    if slug.startswith(needle) or name.startswith(needle):
        return PREFIX
    if needle in name:
        return NAME_SUBSTRING
    if needle in normalize(row.get("summary")):
        return SUMMARY_SUBSTRING
    if needle in normalize(row.get("description")):
        return DESCRIPTION_SUBSTRING
    if needle in search_text(row, search_fields):
        return ANYWHERE
    return None
