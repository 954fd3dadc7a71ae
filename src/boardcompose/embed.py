"""Embed parsing — turn a pasted post embed into post card fields.

Accepts either the HTML embed snippet a social site hands out, e.g.

  <blockquote class="twitter-tweet" data-theme="dark">
    <p lang="en">Shipped the thing</p>&mdash; Jane Doe (@jane)
    <a href="https://x.com/jane/status/1">Jan 1, 2024</a>
  </blockquote>

or anything else (a bare status URL, plain text). Only the first case is
parsed; everything else becomes a card whose text is the trimmed input.
No network access happens here: avatar_url is derived from the handle.
"""

import logging
import re
from html.parser import HTMLParser
from urllib.parse import quote

logger = logging.getLogger(__name__)

AVATAR_URL_TEMPLATE = "https://unavatar.io/twitter/{handle}"

# "— Jane Doe (@jane)" or "- Jane Doe (@jane)"
BYLINE_RE = re.compile(r"[—-]\s*([^(@]+)\s*\(@([^)]+)\)")

VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}


# ── Minimal element tree ──────────────────────────────────────────


class _Element:
    def __init__(self, tag: str, attrs: dict[str, str], parent=None):
        self.tag = tag
        self.attrs = attrs
        self.parent = parent
        self.children: list = []

    def text_content(self) -> str:
        parts = []
        for child in self.children:
            parts.append(child if isinstance(child, str) else child.text_content())
        return "".join(parts)

    def iter(self, tag: str):
        """Yield descendant elements with *tag* in document order."""
        for child in self.children:
            if isinstance(child, _Element):
                if child.tag == tag:
                    yield child
                yield from child.iter(tag)

    def has_class(self, name: str) -> bool:
        return name in (self.attrs.get("class") or "").split()


class _TreeBuilder(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = _Element("#document", {})
        self._stack = [self.root]

    def handle_starttag(self, tag, attrs):
        element = _Element(tag, {k: v or "" for k, v in attrs}, self._stack[-1])
        self._stack[-1].children.append(element)
        if tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag, attrs):
        element = _Element(tag, {k: v or "" for k, v in attrs}, self._stack[-1])
        self._stack[-1].children.append(element)

    def handle_endtag(self, tag):
        # Close up to the nearest open element with this tag; stray end tags are ignored.
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth].tag == tag:
                del self._stack[depth:]
                return

    def handle_data(self, data):
        self._stack[-1].children.append(data)


def _parse_document(markup: str) -> _Element:
    builder = _TreeBuilder()
    builder.feed(markup)
    builder.close()
    return builder.root


# ── Public API ────────────────────────────────────────────────────


def avatar_url_for_handle(handle: str) -> str:
    """Deterministic avatar URL for '@name' or 'name'."""
    return AVATAR_URL_TEMPLATE.format(handle=quote(handle.lstrip("@"), safe=""))


def _find_block(doc: _Element) -> _Element | None:
    blocks = list(doc.iter("blockquote"))
    for block in blocks:
        if block.has_class("twitter-tweet"):
            return block
    return blocks[0] if blocks else None


def _parse_block(block: _Element, fallback: str) -> dict:
    block_text = block.text_content()

    first_p = next(block.iter("p"), None)
    text = (first_p.text_content().strip() if first_p else "") or block_text.strip() or fallback
    result = {"text": text}

    match = BYLINE_RE.search(block_text)
    if match:
        result["author"] = match.group(1).strip()
        result["handle"] = f"@{match.group(2).strip()}"

    anchors = list(block.iter("a"))
    if anchors:
        date_text = anchors[-1].text_content().strip()
        if date_text:
            result["date_text"] = date_text

    result["theme"] = "dark" if block.attrs.get("data-theme") == "dark" else "light"

    if "handle" in result:
        result["avatar_url"] = avatar_url_for_handle(result["handle"])
    return result


def parse_embed(raw: str) -> dict:
    """Parse pasted embed markup or a URL into post card fields.

    Returns a dict with 'text' always set, plus whichever of 'author',
    'handle', 'date_text', 'theme', 'avatar_url' could be extracted.
    Keys that were not found are absent. Never raises: anything that is
    not parseable markup degrades to {'text': <trimmed input>}.
    """
    trimmed = raw.strip()
    if trimmed.startswith("<"):
        try:
            block = _find_block(_parse_document(trimmed))
            if block is not None:
                return _parse_block(block, trimmed)
        except Exception as exc:
            logger.debug("Embed markup could not be parsed: %s", exc)
    return {"text": trimmed}
