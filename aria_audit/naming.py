"""
Accessible name computation.

This is a deliberately reduced subset of the W3C accname algorithm, enough to
audit icons and SVGs. It does NOT handle alt text, table captions, <label>
association for form controls, or CSS generated content. Do not use it as a
general-purpose name calculator.

When an element carries both aria-label and aria-labelledby, the aria-label
text is the name.
"""
from bs4.element import Tag

from aria_audit.dom import Document, attr, tag_name, text_content


def labelledby_text(document: Document, el: Tag) -> str:
    """Referenced texts joined by a space. Unresolved IDs are skipped."""
    parts = []
    for ref_id in (attr(el, "aria-labelledby") or "").split():
        ref = document.get_by_id(ref_id)
        if ref is not None:
            parts.append(text_content(ref))
    return " ".join(parts).strip()


def compute_name(document: Document, el: Tag) -> str:
    """Returns the trimmed accessible name of el, or "" if it has none."""
    # 1. aria-label
    label = (attr(el, "aria-label") or "").strip()
    if label:
        return label

    # 2. aria-labelledby
    name = labelledby_text(document, el)
    if name:
        return name

    # 3. Native: <svg><title>
    if tag_name(el) == "svg":
        title = el.find("title", recursive=False)
        if title is not None:
            name = text_content(title).strip()
            if name:
                return name

    # 4. Rendered content
    return document.rendered_text(el)
