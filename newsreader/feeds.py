"""
Feed Parser - Detect and parse RSS and Atom documents.

Handles:
- RSS 2.0/0.9x and RSS 1.0 (RDF) documents
- Atom 1.0 and legacy Atom 0.3 documents
- Text delivered as plain text, CDATA, escaped or inline markup
- RFC 822 and ISO 8601 dates (and the usual real-world variants)

Parsing is done by feedparser, which falls back to a lenient parser when a
document is not well-formed, so one bad item does not cost the rest of the
feed. Both dialects produce the same FeedDocument. Nothing here touches the
network or the database.
"""

import email.utils
import html
import io
import logging
import xml.sax
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import feedparser
from dateutil import parser as dateparser

from .exceptions import MalformedFeed, UnrecognizedFormat

logger = logging.getLogger(__name__)


# feedparser version strings for RSS 0.90 and RSS 1.0, both RDF based
RDF_VERSIONS = {"rss090", "rss10"}

# Common timezone abbreviations
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "Z": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
    "CET": timezone(timedelta(hours=1)),
    "CEST": timezone(timedelta(hours=2)),
}


@dataclass
class ParsedEntry:
    """One item/entry as found in the document, before normalization."""
    guid: str = ""
    title: str = ""
    link: str = ""
    author: str = ""
    content: str = ""  # Full-content field (content:encoded, atom:content)
    summary: str = ""  # Description/summary field
    published: datetime | None = None


@dataclass
class FeedDocument:
    """A parsed feed, independent of its dialect."""
    format: str  # "rss", "rdf" or "atom"
    title: str
    description: str
    site_link: str
    items: list[ParsedEntry] = field(default_factory=list)


# ─────────────────────────────────────────────────────────────
# Text and date helpers
# ─────────────────────────────────────────────────────────────

def coerce_text(value) -> str:
    """
    Read a text value, whatever shape feedparser gave it.

    Fallback order:
        1. a plain string is used directly
        2. a detail mapping ({"type": ..., "value": ...}) returns its value;
           CDATA sections and escaped markup are delivered here
        3. a list of details (entry.content) returns the first non-empty value
        4. anything else, including a missing value, is ""
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Mapping):
        return coerce_text(value.get("value"))
    if isinstance(value, (list, tuple)):
        for part in value:
            text = coerce_text(part)
            if text:
                return text
    return ""


def _as_html(detail) -> str:
    """
    Value of a content detail, always returned as HTML.

    Plain-text constructs (Atom type="text") are escaped so that stored
    content has a single representation.
    """
    if isinstance(detail, (list, tuple)):
        detail = next((d for d in detail if coerce_text(d)), None)
    if not isinstance(detail, Mapping):
        return coerce_text(detail)

    text = coerce_text(detail)
    if (detail.get("type") or "").lower() == "text/plain":
        return html.escape(text, quote=False)
    return text


def parse_date(value: str | None) -> datetime | None:
    """
    Parse an RFC 822 or ISO 8601 style timestamp into an aware UTC datetime.

    Returns None for missing or unparseable values; never raises.
    """
    value = (value or "").strip()
    if not value:
        return None

    parsed = None
    try:
        parsed = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        parsed = None

    if parsed is None:
        try:
            parsed = dateparser.parse(value, tzinfos=TZINFOS)
        except (ValueError, OverflowError, TypeError):
            return None

    if parsed is None:
        return None

    try:
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


# ─────────────────────────────────────────────────────────────
# Field extraction
# ─────────────────────────────────────────────────────────────

def _alternate_link(node) -> str:
    """The alternate (HTML) link of a feed or entry."""
    link = coerce_text(node.get("link"))
    if link:
        return link
    for candidate in node.get("links") or []:
        rel = (candidate.get("rel") or "alternate").lower()
        href = coerce_text(candidate.get("href"))
        if rel == "alternate" and href:
            return href
    return ""


def _author(node) -> str:
    """
    Author name of a feed or entry.

    A bare name (dc:creator, Atom author/name) wins over the RSS <author>
    element, which carries an email address.
    """
    authors = [a for a in node.get("authors") or [] if isinstance(a, Mapping)]

    for detail in authors:
        name = coerce_text(detail.get("name"))
        if name and not detail.get("email"):
            return name
    for detail in authors:
        name = coerce_text(detail.get("name"))
        if name:
            return name
    return coerce_text(node.get("author"))


def _parse_entry(entry, feed_author: str) -> ParsedEntry:
    return ParsedEntry(
        guid=coerce_text(entry.get("id")),
        title=coerce_text(entry.get("title")),
        link=_alternate_link(entry),
        author=_author(entry) or feed_author,
        content=_as_html(entry.get("content")),
        summary=_as_html(entry.get("summary_detail") or entry.get("summary")),
        published=parse_date(
            coerce_text(entry.get("published")) or coerce_text(entry.get("updated"))
        ),
    )


# ─────────────────────────────────────────────────────────────
# Detection and dispatch
# ─────────────────────────────────────────────────────────────

def detect_format(parsed) -> str:
    """
    Identify the dialect of a feedparser result.

    Raises:
        MalformedFeed: If no feed could be recovered from a document that
            is not well-formed XML
        UnrecognizedFormat: If the document is neither RSS, RDF nor Atom
    """
    version = parsed.get("version") or ""

    if version in RDF_VERSIONS:
        return "rdf"
    if version.startswith("rss"):
        return "rss"
    if version.startswith("atom"):
        return "atom"

    error = parsed.get("bozo_exception")
    if parsed.get("bozo") and isinstance(error, xml.sax.SAXException):
        raise MalformedFeed(f"Invalid XML: {error}")
    raise UnrecognizedFormat(
        f"Unrecognized feed format{f' ({version})' if version else ''}: not an RSS or Atom document"
    )


def _prepare(raw: bytes | str) -> bytes:
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    # Stray whitespace before the XML declaration is a fatal XML error
    return raw.removeprefix(b"\xef\xbb\xbf").lstrip()


def parse_feed(raw: bytes | str) -> FeedDocument:
    """
    Parse a raw feed body into a FeedDocument.

    Args:
        raw: The response body, as bytes (preferred, so the XML declaration
            decides the encoding) or text

    Raises:
        MalformedFeed: If the body is empty or not a recoverable document
        UnrecognizedFormat: If the document is not RSS, RDF or Atom
    """
    data = _prepare(raw)
    if not data:
        raise MalformedFeed("Invalid XML: empty document")

    try:
        # A stream, so feedparser never treats the body as a URL or filename
        parsed = feedparser.parse(
            io.BytesIO(data),
            sanitize_html=False,
            resolve_relative_uris=False,
        )
    except (RecursionError, ValueError) as e:
        raise MalformedFeed(f"Invalid XML: {e}")

    feed_format = detect_format(parsed)
    if parsed.get("bozo"):
        logger.debug(f"Recovered {feed_format} document after: {parsed.get('bozo_exception')}")

    channel = parsed.get("feed") or {}
    feed_author = _author(channel) if feed_format == "atom" else ""

    document = FeedDocument(
        format=feed_format,
        title=coerce_text(channel.get("title")),
        description=coerce_text(channel.get("subtitle")) or coerce_text(channel.get("description")),
        site_link=_alternate_link(channel),
        items=[_parse_entry(entry, feed_author) for entry in parsed.get("entries") or []],
    )
    logger.debug(f"Parsed {feed_format} document '{document.title}' with {len(document.items)} items")
    return document
