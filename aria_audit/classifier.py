from dataclasses import dataclass
from typing import Optional

from bs4.element import Tag

from aria_audit.dom import attr, explicit_role, tag_name

# Roles whose content model forbids interactive descendants
CONTAINER_ROLES = (
    "button",
    "link",
    "menuitem",
    "menuitemcheckbox",
    "menuitemradio",
    "option",
    "tab",
    "checkbox",
    "radio",
    "switch",
)

INTERACTIVE_TAGS = ("button", "select", "textarea", "details", "embed", "iframe", "label")
INTERACTIVE_ROLES = (
    "button",
    "link",
    "checkbox",
    "radio",
    "switch",
    "textbox",
    "combobox",
    "listbox",
    "menu",
    "tab",
)

# ARIA 1.2: roles that must not carry aria-label / aria-labelledby
PROHIBITED_NAMING_ROLES = (
    "caption",
    "code",
    "deletion",
    "emphasis",
    "generic",
    "insertion",
    "paragraph",
    "presentation",
    "none",
    "strong",
    "subscript",
    "superscript",
)
GENERIC_TAGS = ("div", "span")
PROHIBITED_NAMING_TAGS = ("p", "b", "i", "strong", "em", "code", "s", "u", "label")


@dataclass(frozen=True)
class Classification:
    effective_role: Optional[str]
    is_interactive: bool
    is_prohibiting_container: bool
    is_naming_prohibited: bool


def _is_link(el: Tag) -> bool:
    return tag_name(el) == "a" and el.has_attr("href")


def is_prohibiting_container(el: Tag) -> bool:
    if _is_link(el) or tag_name(el) == "button":
        return True
    return explicit_role(el) in CONTAINER_ROLES


def is_interactive(el: Tag) -> bool:
    tag = tag_name(el)
    if _is_link(el) or tag in INTERACTIVE_TAGS:
        return True
    if tag == "input" and (attr(el, "type") or "").strip().lower() != "hidden":
        return True
    if explicit_role(el) in INTERACTIVE_ROLES:
        return True
    return (attr(el, "tabindex") or "").strip() == "0"


def prohibited_naming_reason(el: Tag) -> Optional[str]:
    """Why el may not be named, or None. The explicit role wins over tag semantics."""
    role = explicit_role(el)
    tag = tag_name(el)
    if role:
        if role in PROHIBITED_NAMING_ROLES:
            return f'Role "{role}" prohibits naming attributes'
        return None
    if tag in GENERIC_TAGS:
        return f"Generic <{tag}> prohibits naming attributes"
    if tag in PROHIBITED_NAMING_TAGS:
        return f"<{tag}> prohibits naming attributes"
    return None


def is_naming_prohibited(el: Tag) -> bool:
    return prohibited_naming_reason(el) is not None


def classify(el: Tag) -> Classification:
    return Classification(
        effective_role=explicit_role(el),
        is_interactive=is_interactive(el),
        is_prohibiting_container=is_prohibiting_container(el),
        is_naming_prohibited=is_naming_prohibited(el),
    )
