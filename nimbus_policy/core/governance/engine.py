# nimbus_policy/core/governance/engine.py
"""
PolicyEngine - main entry point for command handlers and route handlers.

Owns one rule registry and one safety policy and wires the analyzer,
autofix engine and safety evaluator around them. Engines are independent:
two instances never share rules or policy state.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from nimbus_policy.core.governance.analyzer import (
    BestPracticesAnalyzer,
    get_compliance_score,
    get_security_score,
)
from nimbus_policy.core.governance.assessment import SafetyAssessment
from nimbus_policy.core.governance.autofix import AutofixEngine
from nimbus_policy.core.governance.evaluator import ContextLike, SafetyEvaluator
from nimbus_policy.core.governance.formatter import (
    format_assessment_as_markdown,
    format_report_as_markdown,
)
from nimbus_policy.core.governance.registry import RuleRegistry
from nimbus_policy.core.governance.reports import AnalysisReport, AutofixResult
from nimbus_policy.core.governance.rules import Category, Rule, Severity
from nimbus_policy.core.governance.safety_policy import SafetyPolicy, load_safety_policy

logger = logging.getLogger(__name__)


class PolicyEngine:
    """
    Infrastructure safety and compliance policy engine.

    The engine classifies and scores; it never executes the operations it
    evaluates and does not persist anything.
    """

    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        policy: Optional[SafetyPolicy] = None,
        policy_path: Optional[Union[str, Path]] = None,
    ):
        """
        Args:
            registry: Rule registry to use. A fresh one with the built-in rules by default.
            policy: Safety policy to use. Takes precedence over policy_path.
            policy_path: Policy file to load when no policy is given. When both
                are omitted the conventional location is tried, then defaults.
        """
        self.registry = registry if registry is not None else RuleRegistry()
        self.policy = policy if policy is not None else load_safety_policy(policy_path)
        self.analyzer = BestPracticesAnalyzer(self.registry)
        self.autofixer = AutofixEngine(self.analyzer)
        self.evaluator = SafetyEvaluator(self.policy)
        logger.info(f"Initialized PolicyEngine with {len(self.registry)} rules")

    # --- registry -----------------------------------------------------------
    def add_rule(self, rule: Rule) -> None:
        self.registry.add_rule(rule)

    def remove_rule(self, rule_id: str) -> None:
        self.registry.remove_rule(rule_id)

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        return self.registry.get_rule(rule_id)

    def list_rules(self) -> List[Rule]:
        return self.registry.list_rules()

    def get_rules_by_category(self, category: Union[Category, str]) -> List[Rule]:
        return self.registry.rules_by_category(category)

    # --- best practices -------------------------------------------------------
    def analyze(
        self,
        component: str,
        config: Mapping[str, Any],
        categories: Optional[Iterable[Union[Category, str]]] = None,
        severities: Optional[Iterable[Union[Severity, str]]] = None,
    ) -> AnalysisReport:
        return self.analyzer.analyze(component, config, categories=categories, severities=severities)

    def analyze_all(self, configs: Sequence[Mapping[str, Any]]) -> AnalysisReport:
        return self.analyzer.analyze_all(configs)

    def autofix(
        self,
        component: str,
        config: Mapping[str, Any],
        categories: Optional[Iterable[Union[Category, str]]] = None,
        severities: Optional[Iterable[Union[Severity, str]]] = None,
        rule_ids: Optional[Iterable[str]] = None,
    ) -> AutofixResult:
        return self.autofixer.autofix(
            component, config, categories=categories, severities=severities, rule_ids=rule_ids
        )

    @staticmethod
    def get_compliance_score(report: AnalysisReport) -> int:
        return get_compliance_score(report)

    @staticmethod
    def get_security_score(report: AnalysisReport) -> int:
        return get_security_score(report)

    @staticmethod
    def format_report_as_markdown(report: AnalysisReport) -> str:
        return format_report_as_markdown(report)

    # --- safety -----------------------------------------------------------------
    def requires_safety_check(self, operation: str) -> bool:
        return self.evaluator.requires_safety_check(operation)

    def requires_approval(self, operation: str, context: Optional[ContextLike] = None) -> bool:
        return self.evaluator.requires_approval(operation, context)

    def evaluate_safety(self, context: ContextLike) -> SafetyAssessment:
        return self.evaluator.evaluate_safety(context)

    @staticmethod
    def format_assessment_as_markdown(assessment: SafetyAssessment) -> str:
        return format_assessment_as_markdown(assessment)


__all__ = ["PolicyEngine"]
