"""
HTML Sanitizer - Make third-party feed content safe to render.

Feed content is written by whoever controls the feed. Before it reaches a
display surface it goes through an allowlist transform:

- Allowed formatting elements are kept with a per-element attribute allowlist
- Harmless structural wrappers are unwrapped: their children are kept
- Dangerous elements (script, style, form, iframe, ...) and any element with
  an on* event handler are removed with their whole subtree
- Everything else, including unknown elements, comments and doctypes, is
  removed

A script-blocking content policy on the host does not stop HTML-only attacks
such as a fake login form or a <style> block that repaints the window, so
this transform is applied on every read. Stored content is never rewritten;
policy changes apply to existing articles on the next read.
"""

import logging
import re
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, NavigableString, Tag

from .url_validator import is_http_url

logger = logging.getLogger(__name__)


ALLOWED_TAGS = {
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "a", "ul", "ol", "li",
    "em", "strong", "b", "i",
    "blockquote", "img", "code", "pre", "br", "span",
}

# Attributes kept per element; anything else is dropped
ALLOWED_ATTRIBUTES = {
    "a": {"href", "title"},
    "img": {"src", "alt", "title", "width", "height"},
    "code": {"class"},
    "pre": {"class"},
}

URL_ATTRIBUTES = {"href", "src"}

ALLOWED_URL_SCHEMES = {"http", "https"}

# Removed together with everything inside them
DANGEROUS_TAGS = {
    "script", "style", "form", "iframe", "frame", "frameset",
    "object", "embed", "applet", "param",
    "input", "button", "select", "textarea", "option", "optgroup",
    "link", "meta", "base", "head", "title",
    "svg", "math", "template", "noscript", "noembed", "noframes",
    "audio", "video", "source", "track", "canvas", "dialog",
    "portal", "xmp", "plaintext", "listing",
}

# Structural wrappers: the element goes, its (sanitized) children stay
UNWRAP_TAGS = {
    "html", "body", "div", "section", "article", "header", "footer", "main",
    "aside", "nav", "hgroup", "figure", "figcaption", "picture",
    "center", "font", "small", "big", "sub", "sup", "u", "s", "strike",
    "del", "ins", "mark", "abbr", "cite", "q", "time", "dfn",
    "kbd", "samp", "var", "tt", "label", "address", "details", "summary",
    "table", "thead", "tbody", "tfoot", "tr", "td", "th", "caption",
    "colgroup", "col", "dl", "dt", "dd",
}

ANCHOR_REL = "noopener noreferrer nofollow"

# Work bounds: sanitizing runs on every read, synchronously
MAX_HTML_LENGTH = 256 * 1024
MAX_NESTING_DEPTH = 100

# Elements that never take a closing tag
VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}

_EVENT_HANDLER = re.compile(r"^on", re.IGNORECASE)
_CONTROL_AND_SPACE = re.compile(r"[\x00-\x20\x7f]+")
_DIMENSION = re.compile(r"\d{1,4}")
_CODE_CLASS = re.compile(r"language-[A-Za-z0-9_+#-]{1,40}")
_MARKUP_TOKEN = re.compile(
    r"<!--.*?(?:-->|\Z)"
    r"|<!\[CDATA\[.*?(?:\]\]>|\Z)"
    r"|<[!?][^>]*(?:>|\Z)"
    r"|<(/?)([A-Za-z][^\s/>]*)[^>]*(?:>|\Z)",
    re.DOTALL,
)
_RAW_TEXT_END = {
    "script": re.compile(r"</script", re.IGNORECASE),
    "style": re.compile(r"</style", re.IGNORECASE),
}


def bound_markup(raw_html: str) -> str:
    """
    Cut markup down to a size and nesting depth that parse in bounded time.

    Tags are tracked the way the HTML parser nests them: a closing tag pops
    back to the nearest open element of the same name, stray closing tags
    are ignored, and comments and script/style bodies are skipped. The
    document is cut where it first grows past MAX_NESTING_DEPTH, so only
    content after that point is lost.
    """
    if len(raw_html) > MAX_HTML_LENGTH:
        logger.warning(f"Truncating {len(raw_html)} characters of markup to {MAX_HTML_LENGTH}")
        raw_html = raw_html[:MAX_HTML_LENGTH]

    open_tags: list[str] = []
    pos = 0
    while True:
        match = _MARKUP_TOKEN.search(raw_html, pos)
        if match is None:
            return raw_html
        pos = match.end()

        name = (match.group(2) or "").lower()
        if not name or name in VOID_TAGS or match.group(0).endswith("/>"):
            continue

        if match.group(1):
            if name in open_tags:
                last = len(open_tags) - 1 - open_tags[::-1].index(name)
                del open_tags[last:]
            continue

        if name in _RAW_TEXT_END:
            end = _RAW_TEXT_END[name].search(raw_html, pos)
            pos = end.start() if end else len(raw_html)
            continue

        open_tags.append(name)
        if len(open_tags) > MAX_NESTING_DEPTH:
            logger.warning(f"Markup nested deeper than {MAX_NESTING_DEPTH} levels; cutting at offset {match.start()}")
            return raw_html[:match.start()]


def _has_event_handler(tag: Tag) -> bool:
    return any(_EVENT_HANDLER.match(name) for name in tag.attrs)


def safe_url(value: str | None, base_url: str | None = None) -> str | None:
    """
    Return the URL if it is an absolute http(s) URL, else None.

    Relative URLs are resolved against base_url when one is given. Control
    characters and whitespace are ignored when reading the scheme, the way
    browsers do, so "java\\tscript:" is still recognized as javascript.
    """
    if not value:
        return None

    value = value.strip()
    compact = _CONTROL_AND_SPACE.sub("", value)
    if not compact:
        return None

    try:
        parsed = urlparse(compact)
        if not parsed.scheme:
            if not is_http_url(base_url):
                return None
            value = urljoin(base_url, value)
            compact = _CONTROL_AND_SPACE.sub("", value)
            parsed = urlparse(compact)
    except ValueError:
        return None

    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES or not parsed.netloc:
        return None
    return value


def _sanitize_attributes(tag: Tag, base_url: str | None):
    allowed = ALLOWED_ATTRIBUTES.get(tag.name, set())
    cleaned = {}

    for name, value in tag.attrs.items():
        name = name.lower()
        if name not in allowed:
            continue

        if isinstance(value, list):
            value = " ".join(value)

        if name in URL_ATTRIBUTES:
            url = safe_url(value, base_url)
            if url:
                cleaned[name] = url
        elif name in ("width", "height"):
            if _DIMENSION.fullmatch(value.strip()):
                cleaned[name] = value.strip()
        elif name == "class":
            classes = [c for c in value.split() if _CODE_CLASS.fullmatch(c)]
            if classes:
                cleaned[name] = " ".join(classes)
        else:
            cleaned[name] = value

    if tag.name == "a" and "href" in cleaned:
        cleaned["rel"] = ANCHOR_REL

    tag.attrs = cleaned


def _sanitize_tree(root: BeautifulSoup, base_url: str | None):
    """Walk the tree iteratively, so deeply nested input cannot exhaust the stack."""
    to_unwrap: list[Tag] = []
    stack: list[Tag] = [root]

    while stack:
        node = stack.pop()
        for child in list(node.children):
            if not isinstance(child, Tag):
                # Plain text stays; comments, doctypes, CDATA and
                # processing instructions are NavigableString subclasses
                if type(child) is not NavigableString:
                    child.extract()
                continue

            name = (child.name or "").lower()

            if name in DANGEROUS_TAGS or _has_event_handler(child):
                child.decompose()
            elif name in UNWRAP_TAGS:
                to_unwrap.append(child)
                stack.append(child)
            elif name in ALLOWED_TAGS:
                child.name = name
                _sanitize_attributes(child, base_url)
                if name == "img" and "src" not in child.attrs:
                    child.decompose()
                    continue
                stack.append(child)
            else:
                child.decompose()

    # Innermost first, so each unwrap moves an already flattened subtree
    for tag in reversed(to_unwrap):
        tag.unwrap()


def render_safe(raw_html: str | None, base_url: str | None = None) -> str:
    """
    Produce render-safe HTML from arbitrary third-party HTML.

    Pure and total: never raises. If anything goes wrong the result is the
    empty string, so a failure can only ever remove content.

    Args:
        raw_html: Content as stored from the feed
        base_url: Article or site URL used to resolve relative links
    """
    if not raw_html or not isinstance(raw_html, str):
        return ""

    try:
        soup = BeautifulSoup(bound_markup(raw_html), "html.parser")
        _sanitize_tree(soup, base_url)
        return str(soup).strip()
    except Exception:
        logger.exception("Sanitizer failed; dropping content")
        return ""


def sanitize_text(value: str | None) -> str:
    """
    Reduce a short field (title, author) to plain text.

    Markup is removed, script/style bodies are dropped and whitespace is
    collapsed. Never raises.
    """
    if not value or not isinstance(value, str):
        return ""
    if "<" not in value and "&" not in value:
        return re.sub(r"\s+", " ", value).strip()

    try:
        soup = BeautifulSoup(bound_markup(value), "html.parser")
        for tag in soup.find_all(["script", "style", "template"]):
            tag.decompose()
        return re.sub(r"\s+", " ", soup.get_text(separator=" ")).strip()
    except Exception:
        logger.exception("Text sanitizer failed; dropping value")
        return ""
