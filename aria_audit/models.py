from typing import Dict, List, Optional, Tuple

from bs4.element import Tag
from pydantic import BaseModel, ConfigDict, Field
from pydantic.json_schema import SkipJsonSchema

from aria_audit.dom import css_path, explicit_role, tag_name

RULE_NESTED_INTERACTIVE = "nested-interactive"
RULE_PROHIBITED_NAMING = "prohibited-naming"
RULE_ICON_NAME = "icon-name"

# Fixed order of the combined audit
RULE_ORDER = (RULE_NESTED_INTERACTIVE, RULE_PROHIBITED_NAMING, RULE_ICON_NAME)

RULE_TITLES = {
    RULE_NESTED_INTERACTIVE: "Invalid Nested Interactive Controls",
    RULE_PROHIBITED_NAMING: "Prohibited Naming Attributes",
    RULE_ICON_NAME: "SVG & Icon Audit",
}

STATUS_FAIL = "Fail"
STATUS_PASS_DECORATIVE = "Pass (Decorative)"
STATUS_PASS_MEANINGFUL = "Pass (Meaningful)"

IMPLICIT_ROLE = "(implicit)"


class Finding(BaseModel):
    """One rule result. The element handles travel with it but are never serialised."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    rule_id: str
    status: str = STATUS_FAIL
    message: str = ""
    suggestion: str = ""
    tags: List[str] = Field(default_factory=list)
    roles: List[str] = Field(default_factory=list)
    selectors: List[str] = Field(default_factory=list)
    details: Dict[str, str] = Field(default_factory=dict)
    subjects: SkipJsonSchema[Tuple[Tag, ...]] = Field(default=(), exclude=True, repr=False)

    @classmethod
    def for_elements(cls, rule_id: str, elements: List[Tag], **fields) -> "Finding":
        return cls(
            rule_id=rule_id,
            tags=[tag_name(el) for el in elements],
            roles=[explicit_role(el) or IMPLICIT_ROLE for el in elements],
            selectors=[css_path(el) for el in elements],
            subjects=tuple(elements),
            **fields,
        )

    @property
    def is_failure(self) -> bool:
        return self.status.startswith(STATUS_FAIL)

    @property
    def element(self) -> Optional[Tag]:
        return self.subjects[0] if self.subjects else None

    @property
    def parent(self) -> Optional[Tag]:
        return self.subjects[1] if len(self.subjects) > 1 else None


class AuditResult(BaseModel):
    findings: List[Finding] = Field(default_factory=list)
    counts: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    execution_trace: List[str] = Field(default_factory=list, description="Linear log of the audit run")


def count_findings(findings: List[Finding]) -> Dict[str, Dict[str, int]]:
    """{rule_id: {status: n}} for every rule, zero-filled."""
    counts: Dict[str, Dict[str, int]] = {rule: {} for rule in RULE_ORDER}
    for finding in findings:
        per_rule = counts.setdefault(finding.rule_id, {})
        per_rule[finding.status] = per_rule.get(finding.status, 0) + 1
    return counts
