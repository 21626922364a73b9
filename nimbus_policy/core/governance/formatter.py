# nimbus_policy/core/governance/formatter.py
"""
Human-readable rendering of analysis reports and safety assessments.
"""

from typing import Dict, List, Sequence

from nimbus_policy.core.governance.analyzer import get_compliance_score, get_security_score
from nimbus_policy.core.governance.assessment import Risk, SafetyAssessment
from nimbus_policy.core.governance.reports import AnalysisReport, Violation
from nimbus_policy.core.governance.rules import Severity

SEVERITY_ORDER = [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]

SEVERITY_MARKERS = {
    Severity.CRITICAL: "🔴",
    Severity.HIGH: "🟠",
    Severity.MEDIUM: "🟡",
    Severity.LOW: "🔵",
}


def _counts(title: str, counts: Dict[str, int]) -> List[str]:
    lines = [f"### {title}", ""]
    lines += [f"- **{name}**: {count}" for name, count in counts.items() if count > 0]
    lines.append("")
    return lines


def _violation_block(violation: Violation) -> List[str]:
    lines = [
        f"#### {violation.title}",
        "",
        f"- **Rule ID**: {violation.rule_id}",
        f"- **Severity**: {violation.severity.value}",
        f"- **Category**: {violation.category.value}",
        f"- **Component**: {violation.component}",
        f"- **Description**: {violation.message}",
        f"- **Recommendation**: {violation.recommendation}",
    ]
    if violation.field:
        lines.append(f"- **Field**: `{violation.field}` = `{violation.value!r}`")
    lines.append(f"- **Can Autofix**: {'Yes' if violation.can_autofix else 'No'}")
    lines.append("")
    return lines


def format_report_as_markdown(report: AnalysisReport) -> str:
    """Render a report with Summary and Violations sections."""
    summary = report.summary
    lines = [
        "# Best Practices Report",
        "",
        "## Summary",
        "",
        f"- **Total Rules Checked**: {summary.total_rules_checked}",
        f"- **Violations Found**: {summary.violations_found}",
        f"- **Compliance Score**: {get_compliance_score(report)}%",
        f"- **Security Score**: {get_security_score(report)}%",
        f"- **Autofixable Violations**: {summary.autofixable_violations}",
        "",
    ]
    lines += _counts("Violations by Severity", summary.violations_by_severity)
    lines += _counts("Violations by Category", summary.violations_by_category)

    if report.components:
        lines += ["### Components", ""]
        lines += [
            f"- **{c.component}**: {c.summary.violations_found} violations "
            f"/ {c.summary.total_rules_checked} rules"
            for c in report.components
        ]
        lines.append("")

    if report.violations:
        lines += ["## Violations", ""]
        for severity in SEVERITY_ORDER:
            group = [v for v in report.violations if v.severity == severity]
            if not group:
                continue
            lines += [f"### {severity.value.upper()} Severity", ""]
            for violation in group:
                lines += _violation_block(violation)

    return "\n".join(lines)


def format_risks(risks: Sequence[Risk]) -> List[str]:
    """One ``<marker> [SEVERITY] message`` line per risk."""
    return [
        f"{SEVERITY_MARKERS.get(risk.severity, '⚪')} [{risk.severity.value.upper()}] {risk.message}"
        for risk in risks
    ]


def format_assessment_as_markdown(assessment: SafetyAssessment) -> str:
    verdict = "PASSED" if assessment.passed else "BLOCKED"
    lines = [
        "# Safety Assessment",
        "",
        f"- **Operation**: {assessment.operation}",
        f"- **Verdict**: {verdict}",
        f"- **Requires Approval**: {'Yes' if assessment.requires_approval else 'No'}",
    ]
    if assessment.estimated_cost is not None:
        lines.append(f"- **Estimated Cost**: ${assessment.estimated_cost:.2f}")
    if assessment.plan_changes is not None:
        changes = assessment.plan_changes
        lines.append(
            f"- **Planned Changes**: {changes.add} to add, {changes.change} to change, "
            f"{changes.destroy} to destroy"
        )
    lines.append("")

    if assessment.risks:
        lines += ["## Risks", ""]
        lines += [f"- {line}" for line in format_risks(assessment.risks)]
        lines.append("")
    if assessment.blockers:
        lines += ["## Blockers", ""]
        lines += [f"- `{risk.id}`: {risk.message}" for risk in assessment.blockers]
        lines.append("")
    if assessment.affected_resources:
        lines += ["## Affected Resources", ""]
        lines += [f"- {resource}" for resource in assessment.affected_resources]
        lines.append("")

    return "\n".join(lines)


__all__ = [
    "format_report_as_markdown",
    "format_risks",
    "format_assessment_as_markdown",
]
