"""
Normalizer - Turn parsed feed entries into canonical items.

Each entry gets a stable identity (guid, else link, else title), resolved
content, an escaped plain-text snippet for list views, and a timestamp that
is never missing. Entries that cannot be identified are skipped, not fatal.
"""

import html
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from bs4 import BeautifulSoup

from .feeds import ParsedEntry
from .sanitizer import bound_markup

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 500

# Elements whose text is never part of the readable snippet
_NON_TEXT_TAGS = ["script", "style", "noscript", "template", "head", "title"]


@dataclass
class CanonicalItem:
    """An entry ready to be stored."""
    identity: str
    title: str
    link: str
    author: str
    raw_content: str  # Unsanitized HTML as published
    snippet: str  # HTML-escaped plain text of at most SNIPPET_LENGTH characters
    published_at: datetime


def resolve_identity(entry: ParsedEntry) -> str:
    """First non-blank of guid, link, title; "" if none."""
    for candidate in (entry.guid, entry.link, entry.title):
        if candidate and candidate.strip():
            return candidate.strip()
    return ""


def derive_snippet(content: str | None, limit: int = SNIPPET_LENGTH) -> str:
    """
    Strip all markup from content and truncate for list display.

    Script and style bodies are dropped, whitespace is collapsed, and text
    longer than `limit` is cut at a word boundary with an ellipsis.
    """
    if not content:
        return ""

    soup = BeautifulSoup(bound_markup(content), "html.parser")
    for tag in soup.find_all(_NON_TEXT_TAGS):
        tag.decompose()

    text = re.sub(r"\s+", " ", soup.get_text(separator=" ")).strip()
    if len(text) <= limit:
        return text

    cut = text[:limit - 1]
    if " " in cut[limit // 2:]:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip() + "…"


def normalize_entry(entry: ParsedEntry, now: datetime | None = None) -> CanonicalItem | None:
    """
    Normalize one entry.

    Returns None when the entry has no usable identity.
    """
    identity = resolve_identity(entry)
    if not identity:
        return None

    content = entry.content or entry.summary or ""

    return CanonicalItem(
        identity=identity,
        title=entry.title.strip(),
        link=entry.link.strip(),
        author=entry.author.strip(),
        raw_content=content,
        # The summary column holds HTML
        snippet=html.escape(derive_snippet(content), quote=False),
        published_at=entry.published or now or datetime.now(timezone.utc),
    )


def normalize_entries(
    entries: list[ParsedEntry],
    now: datetime | None = None
) -> list[CanonicalItem]:
    """
    Normalize every entry of one document.

    Unidentifiable entries are dropped and logged. When the same identity
    appears twice in one document, the first occurrence wins.
    """
    now = now or datetime.now(timezone.utc)

    items: list[CanonicalItem] = []
    seen: set[str] = set()
    skipped = 0
    duplicates = 0

    for entry in entries:
        item = normalize_entry(entry, now)
        if item is None:
            skipped += 1
            continue
        if item.identity in seen:
            duplicates += 1
            continue
        seen.add(item.identity)
        items.append(item)

    if skipped:
        logger.warning(f"Skipped {skipped} entries with no guid, link or title")
    if duplicates:
        logger.info(f"Ignored {duplicates} entries repeating an identity in the same document")

    return items
