import json
from html import escape
from typing import Dict, List, Optional

from aria_audit.models import (
    Finding,
    RULE_ICON_NAME,
    RULE_NESTED_INTERACTIVE,
    RULE_ORDER,
    RULE_PROHIBITED_NAMING,
    RULE_TITLES,
    IMPLICIT_ROLE,
)

RECOMMENDED_FIXES = {
    RULE_NESTED_INTERACTIVE: [
        ("Refactor Layout (Siblings)", "Move the inner interactive element out of the parent so they are DOM siblings. Use CSS (absolute positioning) to visually overlay them if needed."),
        ("Remove Redundancy", "If the outer element is already actionable (e.g. an accordion header), remove the inner interactive element (e.g. the chevron button) and just use a non-interactive icon."),
        ("Simplify Tab Stops", 'Consolidate nested controls into a single interactive element to improve keyboard navigation and avoid "tab traps".'),
    ],
    RULE_PROHIBITED_NAMING: [
        ("Scenario A (Interactive Child)", "If the container holds an input/button, move the aria-label to that interactive element."),
        ("Scenario B (Label)", "A <label> should not have an aria-label. Put the text inside the label or on the input."),
        ("Scenario C (Generic Container)", 'If it is just a container, remove the attribute. If it is a landmark, add role="region" or role="group".'),
        ("Note", 'Avoid role="text", role="img", or role="button" on containers with interactive children. These roles have "Children Presentational: True", which strips semantics from all descendants.'),
    ],
    RULE_ICON_NAME: [
        ("Safest Logic", 'Target the SVG directly. If it has no accessible name, apply aria-hidden="true" and focusable="false".'),
        ("Targeting", "Apply attributes to the SVG element itself to avoid accidentally hiding sibling content."),
        ("Containers", 'aria-hidden="true" on a parent container is also valid (e.g. a wrapper div).'),
        ("Meaningful Icons", 'MUST have role="img" AND a valid Accessible Name.'),
        ("Tooltips", "The title attribute is for mouse hover only. It does NOT count as an accessible name here. Use aria-label."),
    ],
}

EMPTY_MESSAGES = {
    RULE_NESTED_INTERACTIVE: "No nested interactive controls found!",
    RULE_PROHIBITED_NAMING: "No prohibited naming attributes found!",
    RULE_ICON_NAME: "No SVGs or Icons found!",
}


def _by_rule(findings: List[Finding], rules: Optional[List[str]] = None) -> Dict[str, List[Finding]]:
    grouped: Dict[str, List[Finding]] = {rule: [] for rule in (rules or RULE_ORDER)}
    for finding in findings:
        grouped.setdefault(finding.rule_id, []).append(finding)
    return grouped


def render_text(findings: List[Finding], rules: Optional[List[str]] = None) -> str:
    lines = ["### SYSTEM REPORT: ARIA AUDIT"]
    for rule_id, items in _by_rule(findings, rules).items():
        failures = [f for f in items if f.is_failure]
        lines.append(f"\n#### {RULE_TITLES.get(rule_id, rule_id)} ({len(failures)} failing)")
        if not items:
            lines.append(f"- {EMPTY_MESSAGES.get(rule_id, 'Nothing to report.')}")
        for f in items:
            if f.is_failure:
                lines.append(f"- [FAIL] {f.message} -> {f.suggestion} ({f.selectors[0]})")
            else:
                lines.append(f"- [{f.status.upper()}] <{f.tags[0]}> name='{f.details.get('name', '-')}' ({f.selectors[0]})")
    return "\n".join(lines)


def render_json(findings: List[Finding], indent: int = 2) -> str:
    return json.dumps([f.model_dump() for f in findings], indent=indent)


def findings_to_rows(findings: List[Finding]) -> List[Dict[str, str]]:
    """Flat rows (one per finding) for spreadsheets."""
    rows = []
    for f in findings:
        rows.append({
            "Rule": f.rule_id,
            "Status": f.status,
            "Element": f"<{f.tags[0]}>" if f.tags else "",
            "Role": f.roles[0] if f.roles else "",
            "Parent": f"<{f.tags[1]}>" if len(f.tags) > 1 else "",
            "Parent Role": f.roles[1] if len(f.roles) > 1 else "",
            "Message": f.message,
            "Suggestion": f.suggestion,
            "Selector": f.selectors[0] if f.selectors else "",
        })
    return rows


# --- HTML ---

_STYLE = """
body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; margin: 0; padding: 20px; background: #f4f5f7; color: #172b4d; }
header { background: #fff; padding: 20px; border-radius: 8px; box-shadow: 0 1px 2px rgba(0,0,0,0.1); margin: 20px 0; }
h1 { margin: 0 0 10px 0; font-size: 24px; color: #bf2600; }
.count { font-size: 16px; color: #5e6c84; }
.fixes { margin-top: 15px; padding: 15px; background: #e3fcef; border-radius: 6px; border: 1px solid #006644; color: #006644; font-size: 13px; }
.empty { padding: 20px; text-align: center; color: #006644; }
table { width: 100%; background: #fff; border-collapse: collapse; border-radius: 8px; overflow: hidden; box-shadow: 0 1px 2px rgba(0,0,0,0.1); }
th { background: #fafbfc; text-align: left; padding: 12px; border-bottom: 2px solid #dfe1e6; font-size: 12px; text-transform: uppercase; color: #5e6c84; }
td { padding: 12px; border-bottom: 1px solid #dfe1e6; font-size: 14px; vertical-align: top; }
code { background: #ebecf0; padding: 2px 4px; border-radius: 3px; font-family: monospace; font-size: 12px; }
.selector { font-size: 11px; color: #666; font-family: monospace; }
.status-pass { color: #006644; font-weight: bold; }
.status-fail { color: #bf2600; font-weight: bold; }
.suggestion { color: #006644; font-weight: bold; }
"""


def _tag(name: str) -> str:
    return f"<code>&lt;{escape(name)}&gt;</code>"


def _selector(f: Finding, index: int = 0) -> str:
    if index >= len(f.selectors):
        return ""
    return f'<div class="selector">{escape(f.selectors[index])}</div>'


def _nested_rows(items: List[Finding]):
    head = ["Child (Inner)", "Parent (Outer)", "Issue"]
    rows = []
    for f in items:
        rows.append([
            f'{_tag(f.tags[0])}<div>role="{escape(f.roles[0])}"</div>{_selector(f, 0)}',
            f'{_tag(f.tags[1])}<div>role="{escape(f.roles[1])}"</div>{_selector(f, 1)}',
            escape(f.message),
        ])
    return head, rows


def _naming_rows(items: List[Finding]):
    head = ["Element", "Attribute", "Value", "Error", "Suggested Fix"]
    rows = []
    for f in items:
        rows.append([
            _tag(f.tags[0]) + _selector(f),
            f"<code>{escape(f.details.get('attribute', ''))}</code>",
            f"<em>{escape(f.details.get('value', ''))}</em>",
            escape(f.message),
            f'<span class="suggestion">{escape(f.suggestion)}</span>',
        ])
    return head, rows


def _icon_rows(items: List[Finding]):
    head = ["Element", "Type", "Hidden?", "Role", "Acc Name", "Status", "Issue / Fix"]
    rows = []
    for f in items:
        css = "status-fail" if f.is_failure else "status-pass"
        role = f.roles[0] if f.roles and f.roles[0] != IMPLICIT_ROLE else "-"
        rows.append([
            _tag(f.tags[0]) + _selector(f),
            escape(f.details.get("type", "")),
            escape(f.details.get("hidden", "")),
            f"<code>{escape(role)}</code>",
            escape(f.details.get("name", "-")),
            f'<span class="{css}">{escape(f.status)}</span>',
            f"<div>{escape(f.message)}</div><div class=\"suggestion\">{escape(f.suggestion)}</div>",
        ])
    return head, rows


_TABLES = {
    RULE_NESTED_INTERACTIVE: _nested_rows,
    RULE_PROHIBITED_NAMING: _naming_rows,
    RULE_ICON_NAME: _icon_rows,
}


def _section(rule_id: str, items: List[Finding]) -> str:
    title = RULE_TITLES.get(rule_id, rule_id)
    noun = "icons" if rule_id == RULE_ICON_NAME else "issues"
    fixes = "".join(
        f"<li><strong>{escape(label)}:</strong> {escape(text)}</li>" for label, text in RECOMMENDED_FIXES.get(rule_id, [])
    )
    parts = [
        f'<section id="{escape(rule_id)}">',
        "<header>",
        f"<h1>{escape(title)}</h1>",
        f'<div class="count">Found {len(items)} {noun}</div>',
        f'<div class="fixes"><strong>Recommended Fixes:</strong><ul>{fixes}</ul></div>',
        "</header>",
    ]
    if not items:
        parts.append(f'<div class="empty"><h3>{escape(EMPTY_MESSAGES.get(rule_id, ""))}</h3></div>')
    else:
        head, rows = _TABLES[rule_id](items)
        parts.append("<table><thead><tr>" + "".join(f"<th>{h}</th>" for h in head) + "</tr></thead><tbody>")
        for row in rows:
            parts.append("<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>")
        parts.append("</tbody></table>")
    parts.append("</section>")
    return "\n".join(parts)


def render_html(findings: List[Finding], title: str = "ARIA Audit", rules: Optional[List[str]] = None) -> str:
    """Standalone report page with one section per audited rule (all rules by default)."""
    sections = "\n".join(_section(rule_id, items) for rule_id, items in _by_rule(findings, rules).items())
    return (
        "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{escape(title)}</title>\n<style>{_STYLE}</style>\n</head>\n<body>\n{sections}\n</body>\n</html>\n"
    )
