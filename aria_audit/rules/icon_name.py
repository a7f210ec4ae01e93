import re
import logging
from typing import List, Optional

from bs4.element import Tag

from aria_audit.config import AuditSettings
from aria_audit.dom import Document, class_string, explicit_role, is_aria_hidden, is_visible, tag_name
from aria_audit.models import (
    Finding,
    RULE_ICON_NAME,
    STATUS_FAIL,
    STATUS_PASS_DECORATIVE,
    STATUS_PASS_MEANINGFUL,
)
from aria_audit.naming import compute_name

logger = logging.getLogger(__name__)

TITLE_IS_NOT_A_NAME = (
    "The title attribute computes to a Description, not a Name, "
    "so it is not an accessible name and does not count as a substitute for one."
)


def _icon_class_pattern(tokens: List[str]):
    return re.compile("|".join(re.escape(t) for t in tokens), re.I) if tokens else None


def _candidates(document: Document, settings: AuditSettings) -> List[Tag]:
    pattern = _icon_class_pattern(settings.icon_class_tokens)
    candidates = []
    for el in document.elements():
        tag = tag_name(el)
        if tag in ("svg", "i") or explicit_role(el) == "img":
            candidates.append(el)
        elif tag == "span" and pattern is not None and pattern.search(class_string(el)):
            candidates.append(el)
    return candidates


def _evaluate(document: Document, el: Tag, settings: AuditSettings) -> Optional[Finding]:
    if not is_visible(document, el):
        return None

    tag = tag_name(el)
    role = explicit_role(el)
    if tag != "svg" and role != "img":
        # Real italic/bold text that happens to match the icon selectors
        if len(document.rendered_text(el)) > settings.icon_text_threshold:
            return None

    hidden = is_aria_hidden(el)
    name = compute_name(document, el)
    details = {
        "type": "SVG" if tag == "svg" else "Icon Font",
        "hidden": "true" if hidden else "false",
        "name": name or "-",
    }

    if hidden:
        return Finding.for_elements(RULE_ICON_NAME, [el], status=STATUS_PASS_DECORATIVE, details=details)

    missing_role = role != "img"
    missing_name = not name
    title_note = f" {TITLE_IS_NOT_A_NAME}" if missing_name and el.has_attr("title") else ""

    if missing_role and missing_name:
        message = 'Visible icon missing role="img" AND accessible name.' + title_note
        suggestion = 'Add aria-hidden="true" if decorative. OR add role="img" and aria-label="..." if meaningful.'
    elif missing_role:
        message = 'Visible icon missing role="img".'
        suggestion = 'Add role="img" to ensure it is treated as an image.'
    elif missing_name:
        if title_note:
            message = 'Icon uses title="..." but missing aria-label.' + title_note
            suggestion = 'Use aria-label="..." to provide a valid accessible name.'
        else:
            message = "Visible icon missing accessible name."
            suggestion = 'Add aria-label="..." describing the icon, or aria-hidden="true" if decorative.'
    else:
        return Finding.for_elements(RULE_ICON_NAME, [el], status=STATUS_PASS_MEANINGFUL, details=details)

    return Finding.for_elements(
        RULE_ICON_NAME, [el], status=STATUS_FAIL, message=message, suggestion=suggestion, details=details
    )


def check_icon_names(document: Document, settings: Optional[AuditSettings] = None) -> List[Finding]:
    """Audits SVGs and icon fonts. Failures come first; discovery order is kept within each group."""
    settings = settings or AuditSettings()
    findings = []
    for el in _candidates(document, settings):
        finding = _evaluate(document, el, settings)
        if finding is not None:
            findings.append(finding)

    findings.sort(key=lambda f: 0 if f.is_failure else 1)
    logger.debug(f"icon-name: {len(findings)} icons, {sum(f.is_failure for f in findings)} failing")
    return findings
