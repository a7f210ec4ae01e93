"""
Nested interactive controls (e.g. <button> inside <a href>).

Only the nearest enclosing container is reported for each interactive
element. For A > B > C that means "C inside B" and "B inside A", never
"C inside A": one report per boundary keeps deep nesting readable.
"""
import logging
from typing import List

from aria_audit.classifier import is_interactive, is_prohibiting_container
from aria_audit.dom import Document, ancestors, explicit_role, is_visible, tag_name
from aria_audit.models import Finding, RULE_NESTED_INTERACTIVE

logger = logging.getLogger(__name__)

# A <label> may legitimately wrap its own form control
LABELABLE_CONTROLS = ("input", "select", "textarea")


def _display_tag(el) -> str:
    role = explicit_role(el)
    if role:
        return f'<{tag_name(el)} role="{role}">'
    return f"<{tag_name(el)}>"


def check_nested_interactive(document: Document) -> List[Finding]:
    findings = []
    for child in document.elements():
        if not is_interactive(child) or not is_visible(document, child):
            continue

        for parent in ancestors(child):
            if tag_name(parent) in ("body", "html"):
                break
            if not is_prohibiting_container(parent):
                continue
            if tag_name(parent) == "label" and tag_name(child) in LABELABLE_CONTROLS:
                continue

            findings.append(
                Finding.for_elements(
                    RULE_NESTED_INTERACTIVE,
                    [child, parent],
                    message=f"Nested Interactive Controls: <{tag_name(child)}> inside {_display_tag(parent)}",
                    suggestion=(
                        "Move the inner control out so the two are DOM siblings, "
                        "or replace it with a non-interactive element."
                    ),
                )
            )
            break

    logger.debug(f"nested-interactive: {len(findings)} findings")
    return findings
