from aria_audit.auditor import AccessibilityAuditor, IssueCollector, run_audit
from aria_audit.classifier import Classification, classify
from aria_audit.config import AuditSettings, load_settings
from aria_audit.dom import Document, is_aria_hidden, is_visible
from aria_audit.models import AuditResult, Finding
from aria_audit.naming import compute_name
from aria_audit.rules import check_icon_names, check_nested_interactive, check_prohibited_naming

__all__ = [
    "AccessibilityAuditor",
    "AuditResult",
    "AuditSettings",
    "Classification",
    "Document",
    "Finding",
    "IssueCollector",
    "check_icon_names",
    "check_nested_interactive",
    "check_prohibited_naming",
    "classify",
    "compute_name",
    "is_aria_hidden",
    "is_visible",
    "load_settings",
    "run_audit",
]
