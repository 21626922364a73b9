# nimbus_policy/core/governance/reports.py
"""
Analysis output models - violations, summaries and autofix results.

All models are immutable and created fresh per call.
"""

import copy
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from nimbus_policy.core.governance.rules import Category, Severity


class ReportModel(BaseModel):
    """Base model for report objects."""
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        use_enum_values=False,
    )


class Violation(ReportModel):
    """One failed rule against one component configuration."""
    rule_id: str
    category: Category
    severity: Severity
    component: str
    title: str
    message: str = Field(..., description="The rule's description of the problem")
    recommendation: str
    field: Optional[str] = Field(None, description="Config key that triggered the violation")
    value: Any = Field(None, description="Value of that key in the analysed config")
    can_autofix: bool = False


class ReportSummary(ReportModel):
    total_rules_checked: int = Field(ge=0)
    violations_found: int = Field(ge=0)
    violations_by_severity: Dict[str, int] = Field(default_factory=dict)
    violations_by_category: Dict[str, int] = Field(default_factory=dict)
    autofixable_violations: int = Field(default=0, ge=0)


class ComponentSummary(ReportModel):
    """Per-component slice of a multi-component analysis."""
    component: str
    summary: ReportSummary


class AnalysisReport(ReportModel):
    summary: ReportSummary
    violations: Tuple[Violation, ...] = ()
    recommendations: Tuple[str, ...] = ()
    components: Optional[Tuple[ComponentSummary, ...]] = None

    @model_validator(mode="after")
    def _check_counts(self) -> "AnalysisReport":
        if self.summary.violations_found != len(self.violations):
            raise ValueError(
                f"summary.violations_found ({self.summary.violations_found}) does not match "
                f"{len(self.violations)} violations"
            )
        return self

    @property
    def passed(self) -> bool:
        return not self.violations

    def violations_for(self, rule_id: str) -> List[Violation]:
        return [v for v in self.violations if v.rule_id == rule_id]


class AutofixResult(ReportModel):
    fixed_config: Mapping[str, Any] = Field(..., description="Read-only view of the remediated configuration")
    applied_fixes: Tuple[str, ...] = ()
    violations_remaining: AnalysisReport

    @field_validator("fixed_config")
    @classmethod
    def _read_only(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(copy.deepcopy(dict(v)))

    @field_serializer("fixed_config")
    def _dump_config(self, v: Mapping[str, Any]) -> Dict[str, Any]:
        return copy.deepcopy(dict(v))


def build_summary(violations: Sequence[Violation], total_rules_checked: int) -> ReportSummary:
    """Aggregate counts for a list of violations."""
    by_severity = {severity.value: 0 for severity in Severity}
    by_category = {category.value: 0 for category in Category}
    autofixable = 0

    for violation in violations:
        by_severity[violation.severity.value] += 1
        by_category[violation.category.value] += 1
        if violation.can_autofix:
            autofixable += 1

    return ReportSummary(
        total_rules_checked=total_rules_checked,
        violations_found=len(violations),
        violations_by_severity=by_severity,
        violations_by_category=by_category,
        autofixable_violations=autofixable,
    )


def unique_recommendations(violations: Sequence[Violation]) -> List[str]:
    """Recommendations de-duplicated in first-seen order."""
    return list(dict.fromkeys(v.recommendation for v in violations))


__all__ = [
    "Violation",
    "ReportSummary",
    "ComponentSummary",
    "AnalysisReport",
    "AutofixResult",
    "build_summary",
    "unique_recommendations",
]
