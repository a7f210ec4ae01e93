import logging
from typing import List

from bs4.element import Tag

from aria_audit.classifier import prohibited_naming_reason
from aria_audit.dom import Document, attr, tag_name, text_content
from aria_audit.models import Finding, RULE_PROHIBITED_NAMING

logger = logging.getLogger(__name__)

# Children that could carry the name instead
NAMEABLE_CHILDREN = ("input", "button", "a", "select", "textarea")
UNRESOLVED_REFERENCE = "[ID ref]"


def _nameable_child(el: Tag):
    for child in el.find_all(NAMEABLE_CHILDREN):
        if tag_name(child) != "a" or child.has_attr("href"):
            return child
    return None


def _suggestion(el: Tag, attribute: str) -> str:
    child = _nameable_child(el)
    if child is not None:
        return f"Move {attribute} to <{tag_name(child)}> child"
    if tag_name(el) == "label":
        return "Remove (use visible text inside label)"
    return 'Remove attribute (or add role="group" or role="region" if container)'


def _reported_value(document: Document, el: Tag) -> str:
    label = attr(el, "aria-label")
    if label is not None:
        return label
    ids = (attr(el, "aria-labelledby") or "").split()
    ref = document.get_by_id(ids[0]) if ids else None
    if ref is not None:
        return text_content(ref).strip()
    return UNRESOLVED_REFERENCE


def check_prohibited_naming(document: Document) -> List[Finding]:
    findings = []
    for el in document.elements():
        has_label = el.has_attr("aria-label")
        if not has_label and not el.has_attr("aria-labelledby"):
            continue

        reason = prohibited_naming_reason(el)
        if reason is None:
            continue

        attribute = "aria-label" if has_label else "aria-labelledby"
        findings.append(
            Finding.for_elements(
                RULE_PROHIBITED_NAMING,
                [el],
                message=reason,
                suggestion=_suggestion(el, attribute),
                details={"attribute": attribute, "value": _reported_value(document, el)},
            )
        )

    logger.debug(f"prohibited-naming: {len(findings)} findings")
    return findings
