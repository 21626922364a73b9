# nimbus_policy/core/governance/analyzer.py
"""
Best-practices analyzer.

Runs the registry's applicable rules against component configurations and
derives violation reports and severity-weighted scores. The analyzer holds
no state of its own beyond a reference to the registry it reads.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from nimbus_policy.constants import MAX_COMPLIANCE_SCORE, MIN_COMPLIANCE_SCORE, SEVERITY_WEIGHTS
from nimbus_policy.core.governance.registry import RuleRegistry
from nimbus_policy.core.governance.reports import (
    AnalysisReport,
    ComponentSummary,
    Violation,
    build_summary,
    unique_recommendations,
)
from nimbus_policy.core.governance.rules import Category, Config, Rule, Severity

logger = logging.getLogger(__name__)


def _as_categories(values: Optional[Iterable[Union[Category, str]]]) -> Optional[set]:
    if not values:
        return None
    return {Category(v) for v in values}


def _as_severities(values: Optional[Iterable[Union[Severity, str]]]) -> Optional[set]:
    if not values:
        return None
    return {Severity(v) for v in values}


class BestPracticesAnalyzer:
    """Evaluates configurations against the rules of one registry."""

    def __init__(self, registry: RuleRegistry):
        self.registry = registry

    def applicable_rules(
        self,
        component: str,
        categories: Optional[Iterable[Union[Category, str]]] = None,
        severities: Optional[Iterable[Union[Severity, str]]] = None,
    ) -> List[Rule]:
        """Rules for the component after category/severity filtering, in registration order."""
        category_filter = _as_categories(categories)
        severity_filter = _as_severities(severities)

        rules = self.registry.rules_for_component(component)
        if category_filter is not None:
            rules = [r for r in rules if r.category in category_filter]
        if severity_filter is not None:
            rules = [r for r in rules if r.severity in severity_filter]
        return rules

    @staticmethod
    def passes(rule: Rule, config: Config) -> bool:
        """Run a rule's check. A predicate that raises counts as non-compliant."""
        try:
            return bool(rule.check(config))
        except Exception as e:
            logger.error(f"Error checking rule {rule.id}: {e}", exc_info=True)
            return False

    def analyze(
        self,
        component: str,
        config: Mapping[str, Any],
        categories: Optional[Iterable[Union[Category, str]]] = None,
        severities: Optional[Iterable[Union[Severity, str]]] = None,
    ) -> AnalysisReport:
        """
        Analyze one component configuration.

        Args:
            component: Component type, e.g. "rds" or "s3".
            config: Arbitrary key/value configuration. Missing keys are normal values.
            categories: Restrict to these rule categories.
            severities: Restrict to these rule severities.
        """
        config = config or {}
        rules = self.applicable_rules(component, categories, severities)
        logger.debug(f"Checking {len(rules)} rules for component: {component}")

        violations = []
        for rule in rules:
            if self.passes(rule, config):
                continue
            field_name = rule.failing_field(config)
            violations.append(
                Violation(
                    rule_id=rule.id,
                    category=rule.category,
                    severity=rule.severity,
                    component=component,
                    title=rule.title,
                    message=rule.description,
                    recommendation=rule.recommendation,
                    field=field_name,
                    value=config.get(field_name) if field_name else None,
                    can_autofix=rule.can_autofix,
                )
            )

        logger.info(
            f"Best practices analysis complete for {component}: "
            f"{len(violations)} violations found out of {len(rules)} rules checked"
        )
        return AnalysisReport(
            summary=build_summary(violations, len(rules)),
            violations=violations,
            recommendations=unique_recommendations(violations),
        )

    def analyze_all(self, configs: Sequence[Mapping[str, Any]]) -> AnalysisReport:
        """
        Analyze several components with default options.

        Each entry is a mapping with ``component`` and ``config`` keys. The
        aggregate summary sums the per-component summaries, which are also
        returned in ``components``.
        """
        violations: List[Violation] = []
        breakdown: List[ComponentSummary] = []
        total_rules_checked = 0

        for entry in configs:
            component = entry["component"]
            report = self.analyze(component, entry.get("config") or {})
            violations.extend(report.violations)
            total_rules_checked += report.summary.total_rules_checked
            breakdown.append(ComponentSummary(component=component, summary=report.summary))

        return AnalysisReport(
            summary=build_summary(violations, total_rules_checked),
            violations=violations,
            recommendations=unique_recommendations(violations),
            components=breakdown,
        )


def _weighted_score(violations: Iterable[Violation]) -> int:
    penalty = sum(SEVERITY_WEIGHTS[v.severity.value] for v in violations)
    return max(MIN_COMPLIANCE_SCORE, MAX_COMPLIANCE_SCORE - penalty)


def get_compliance_score(report: AnalysisReport) -> int:
    """100 minus the severity-weighted penalty of every violation, floored at 0."""
    if not report.violations:
        return MAX_COMPLIANCE_SCORE
    return _weighted_score(report.violations)


def get_security_score(report: AnalysisReport) -> int:
    """Same weighting as the compliance score, over security violations only."""
    return _weighted_score(v for v in report.violations if v.category == Category.SECURITY)


__all__ = [
    "BestPracticesAnalyzer",
    "get_compliance_score",
    "get_security_score",
]
