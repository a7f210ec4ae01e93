import re
from itertools import chain
from typing import Dict, Iterator, List, Optional, Union

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

# Attributes stamped by the live browser snapshot (see browser.py)
STAMP_PREFIX = "data-aria-audit-"
STAMPED_PROPERTIES = ("display", "visibility")

# Tags the browser never paints (SVG title/desc are name and description sources only)
NON_RENDERED_TAGS = {
    "head", "script", "style", "template", "noscript", "meta", "link", "base", "title", "desc",
}

HIDDEN_VISIBILITY = ("hidden", "collapse")

_STYLE_DECL = re.compile(r"\s*([a-zA-Z-]+)\s*:\s*([^;]+)")
_IMPORTANT = re.compile(r"\s*!\s*important\s*$", re.I)


class Document:
    """
    Read-only view over a parsed HTML tree.

    Element handles are the bs4 Tags inside it. Nothing is cached: every
    lookup reflects the tree at call time, so re-running an audit after a
    mutation sees the mutation.
    """

    def __init__(self, html_content: str = "", soup: Optional[BeautifulSoup] = None):
        self.soup = soup if soup is not None else BeautifulSoup(html_content or "", "html.parser")

    @classmethod
    def from_soup(cls, soup: BeautifulSoup) -> "Document":
        return cls(soup=soup)

    @property
    def body(self) -> Optional[Tag]:
        return self.soup.find("body")

    def elements(self) -> List[Tag]:
        """All elements in document order."""
        return self.soup.find_all(True)

    def get_by_id(self, element_id: str) -> Optional[Tag]:
        if not element_id:
            return None
        return self.soup.find(attrs={"id": element_id})

    def computed_style(self, el: Tag, prop: str) -> str:
        """Resolve a style property: live snapshot stamp, inline style, then host defaults."""
        if prop == "visibility":
            # Inherited: the nearest element that sets it decides
            for node in chain((el,), ancestors(el)):
                value = _own_visibility(node)
                if value is not None:
                    return value
            return "visible"

        stamped = el.get(STAMP_PREFIX + prop)
        if stamped is not None:
            return str(stamped).strip().lower()

        declared = inline_style(el).get(prop)
        if declared and declared not in ("inherit", "unset", "initial"):
            return declared

        if prop == "display" and (el.has_attr("hidden") or tag_name(el) in NON_RENDERED_TAGS):
            return "none"
        return ""

    def rendered_text(self, el: Tag) -> str:
        """Approximation of innerText: text of rendered, visible descendants, whitespace collapsed."""
        chunks: List[str] = []
        # (node, visibility in effect for it); children pushed reversed to keep document order
        stack = [(el, self.computed_style(el, "visibility"))]
        while stack:
            node, visibility = stack.pop()
            if not isinstance(node, Tag):
                if visibility not in HIDDEN_VISIBILITY:
                    chunks.append(str(node))
                continue
            for child in reversed(list(node.children)):
                if isinstance(child, Tag):
                    if self.computed_style(child, "display") != "none":
                        stack.append((child, _own_visibility(child) or visibility))
                elif _is_text(child):
                    stack.append((child, visibility))
        return re.sub(r"\s+", " ", "".join(chunks)).strip()


def as_document(source: Union[Document, BeautifulSoup, str, None]) -> Document:
    if isinstance(source, Document):
        return source
    if isinstance(source, BeautifulSoup):
        return Document.from_soup(source)
    return Document(source or "")


def _own_visibility(el: Tag) -> Optional[str]:
    """Visibility set on el itself (stamp or inline), or None when it inherits."""
    stamped = el.get(STAMP_PREFIX + "visibility")
    if stamped is not None:
        return str(stamped).strip().lower() or None
    declared = inline_style(el).get("visibility")
    if declared == "initial":
        return "visible"
    if declared and declared not in ("inherit", "unset"):
        return declared
    return None


def _is_text(node) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def tag_name(el: Tag) -> str:
    return (el.name or "").lower()


def attr(el: Tag, name: str) -> Optional[str]:
    """Attribute value as a string, or None when absent. Multi-valued attributes are joined."""
    value = el.get(name)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def explicit_role(el: Tag) -> Optional[str]:
    """First token of the role attribute, lower-cased; None if absent or blank."""
    value = (attr(el, "role") or "").strip().lower()
    if not value:
        return None
    return value.split()[0]


def class_string(el: Tag) -> str:
    return attr(el, "class") or ""


def inline_style(el: Tag) -> Dict[str, str]:
    declarations = {}
    for match in _STYLE_DECL.finditer(attr(el, "style") or ""):
        value = _IMPORTANT.sub("", match.group(2)).strip().lower()
        declarations[match.group(1).lower()] = value
    return declarations


def ancestors(el: Tag) -> Iterator[Tag]:
    """Parent chain, nearest first, up to and including <html>."""
    parent = el.parent
    while isinstance(parent, Tag) and parent.name != "[document]":
        yield parent
        parent = parent.parent


def text_content(el: Tag) -> str:
    """DOM textContent: every descendant text node, rendered or not."""
    return "".join(str(node) for node in el.descendants if _is_text(node))


def is_visible(document: Document, el: Tag) -> bool:
    """False when the element has no box (display:none on it or an ancestor) or is visibility:hidden."""
    if not isinstance(el, Tag):
        return False
    if document.computed_style(el, "display") == "none":
        return False
    for parent in ancestors(el):
        if document.computed_style(parent, "display") == "none":
            return False
    return document.computed_style(el, "visibility") not in HIDDEN_VISIBILITY


def is_aria_hidden(el: Tag) -> bool:
    """True if the element or any ancestor carries aria-hidden="true"."""
    if (attr(el, "aria-hidden") or "").strip().lower() == "true":
        return True
    return any((attr(p, "aria-hidden") or "").strip().lower() == "true" for p in ancestors(el))


def css_path(el: Tag) -> str:
    """Positional selector (html > body > div:nth-of-type(2) > button) for locating an element."""
    parts = []
    node = el
    while isinstance(node, Tag) and node.name != "[document]":
        name = tag_name(node)
        parent = node.parent
        if isinstance(parent, Tag):
            # Tag.__eq__ is structural, so siblings are matched by identity
            same = [c for c in parent.find_all(node.name, recursive=False)]
            if len(same) > 1:
                position = next(i for i, c in enumerate(same) if c is node) + 1
                name += f":nth-of-type({position})"
        parts.append(name)
        node = parent
    return " > ".join(reversed(parts))
