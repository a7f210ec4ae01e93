import logging
from typing import Callable, Dict, Iterable, List, Optional, Union

from bs4 import BeautifulSoup

from aria_audit.config import AuditSettings, load_settings
from aria_audit.dom import Document, as_document
from aria_audit.errors import AuditInputError
from aria_audit.models import (
    AuditResult,
    Finding,
    RULE_ICON_NAME,
    RULE_NESTED_INTERACTIVE,
    RULE_ORDER,
    RULE_PROHIBITED_NAMING,
    RULE_TITLES,
    count_findings,
)
from aria_audit.rules import check_icon_names, check_nested_interactive, check_prohibited_naming

logger = logging.getLogger(__name__)


class IssueCollector:
    """Ordered findings for one audit run. Insertion order is discovery order."""

    def __init__(self):
        self._findings: List[Finding] = []
        self._seen = set()

    def add(self, finding: Finding) -> bool:
        key = (finding.rule_id, tuple(id(el) for el in finding.subjects))
        if finding.subjects and key in self._seen:
            return False
        self._seen.add(key)
        self._findings.append(finding)
        return True

    def extend(self, findings: Iterable[Finding]) -> int:
        return sum(1 for f in findings if self.add(f))

    @property
    def findings(self) -> List[Finding]:
        return list(self._findings)

    def __len__(self):
        return len(self._findings)


def resolve_rules(rules: Optional[Iterable[str]]) -> List[str]:
    """Validates requested rule ids and returns them in the fixed audit order."""
    if not rules:
        return list(RULE_ORDER)
    requested = set(rules)
    unknown = sorted(requested - set(RULE_ORDER))
    if unknown:
        raise AuditInputError(f"Unknown rule(s): {', '.join(unknown)}. Expected any of: {', '.join(RULE_ORDER)}")
    return [rule for rule in RULE_ORDER if rule in requested]


class AccessibilityAuditor:
    def __init__(self, source: Union[Document, BeautifulSoup, str], settings: Optional[AuditSettings] = None):
        self.document = as_document(source)
        self.settings = settings or load_settings()
        self.execution_trace: List[str] = []

    def _rules(self) -> Dict[str, Callable[[], List[Finding]]]:
        return {
            RULE_NESTED_INTERACTIVE: lambda: check_nested_interactive(self.document),
            RULE_PROHIBITED_NAMING: lambda: check_prohibited_naming(self.document),
            RULE_ICON_NAME: lambda: check_icon_names(self.document, self.settings),
        }

    def _log_trace(self, message: str):
        self.execution_trace.append(f"- {message}")

    def _log_section(self, title: str):
        self.execution_trace.append(f"\n### {title}")

    def analyze(self, rules: Optional[Iterable[str]] = None) -> AuditResult:
        """
        Runs the selected rules (all by default) sequentially in the fixed
        order and returns their concatenated findings. Each call starts from
        a fresh collector and trace, so re-running is always safe.
        """
        selected = resolve_rules(rules)
        collector = IssueCollector()
        self.execution_trace = []
        runners = self._rules()

        for index, rule_id in enumerate(selected, 1):
            self._log_section(f"{index}. {RULE_TITLES[rule_id].upper()}")
            findings = runners[rule_id]()
            collector.extend(findings)

            failures = [f for f in findings if f.is_failure]
            for finding in failures:
                self._log_trace(f"[FAIL] {finding.message} ({finding.selectors[0]})")
            for finding in findings:
                if not finding.is_failure:
                    self._log_trace(f"[PASS] {finding.status}: <{finding.tags[0]}> ({finding.selectors[0]})")
            if not failures:
                self._log_trace(f"[PASS] {RULE_TITLES[rule_id]}: no violations found.")
            logger.info(f"Rule {rule_id}: {len(failures)} failures out of {len(findings)} findings")

        findings = collector.findings
        return AuditResult(findings=findings, counts=count_findings(findings), execution_trace=self.execution_trace)


def run_audit(
    source: Union[Document, BeautifulSoup, str],
    rules: Optional[Iterable[str]] = None,
    settings: Optional[AuditSettings] = None,
) -> List[Finding]:
    """Combined audit: nested-interactive, prohibited-naming, icon-name, concatenated in that order."""
    return AccessibilityAuditor(source, settings=settings).analyze(rules).findings
