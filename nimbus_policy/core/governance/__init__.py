# nimbus_policy/core/governance/__init__.py
"""
Nimbus Governance Module
Best-practice rule analysis, autofix and safety approval gating
"""

from .rules import Category, Severity, Rule, builtin_rules
from .registry import RuleRegistry
from .reports import (
    Violation,
    ReportSummary,
    ComponentSummary,
    AnalysisReport,
    AutofixResult,
)
from .analyzer import BestPracticesAnalyzer, get_compliance_score, get_security_score
from .autofix import AutofixEngine
from .context import OperationType, SafetyContext
from .safety_policy import (
    SafetyPolicy,
    SafetyRule,
    DEFAULT_SAFETY_POLICY,
    default_safety_policy,
    load_safety_policy,
    validate_safety_policy,
)
from .plan_output import PlanChanges, analyze_plan_output
from .assessment import Risk, SafetyAssessment
from .evaluator import SafetyEvaluator, requires_safety_check, requires_approval, evaluate_safety
from .formatter import format_report_as_markdown, format_risks, format_assessment_as_markdown
from .engine import PolicyEngine

__all__ = [
    # Rules
    "Category",
    "Severity",
    "Rule",
    "builtin_rules",
    "RuleRegistry",

    # Reports
    "Violation",
    "ReportSummary",
    "ComponentSummary",
    "AnalysisReport",
    "AutofixResult",

    # Analysis
    "BestPracticesAnalyzer",
    "AutofixEngine",
    "get_compliance_score",
    "get_security_score",

    # Safety
    "OperationType",
    "SafetyContext",
    "SafetyPolicy",
    "SafetyRule",
    "DEFAULT_SAFETY_POLICY",
    "default_safety_policy",
    "load_safety_policy",
    "validate_safety_policy",
    "PlanChanges",
    "analyze_plan_output",
    "Risk",
    "SafetyAssessment",
    "SafetyEvaluator",
    "requires_safety_check",
    "requires_approval",
    "evaluate_safety",

    # Formatting
    "format_report_as_markdown",
    "format_risks",
    "format_assessment_as_markdown",

    # Facade
    "PolicyEngine",
]
