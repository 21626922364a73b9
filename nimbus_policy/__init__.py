"""
Nimbus Policy - Infrastructure Safety & Compliance Policy Engine

This package provides:
- Best-practice rule registry, analyzer and autofix for component configurations
- Severity-weighted compliance and security scores
- Safety policy loading and approval gating for infrastructure operations
- Markdown rendering of reports and assessments

The engine is advisory: it classifies and scores, it never executes.
"""

__version__ = "1.0.0"

from .core.errors import (
    PolicyEngineError,
    DuplicateRuleError,
    InvalidContextError,
    PolicyLoadError,
)
from .core.governance import (
    Category,
    Severity,
    Rule,
    RuleRegistry,
    Violation,
    AnalysisReport,
    AutofixResult,
    BestPracticesAnalyzer,
    AutofixEngine,
    get_compliance_score,
    get_security_score,
    OperationType,
    SafetyContext,
    SafetyPolicy,
    SafetyRule,
    load_safety_policy,
    validate_safety_policy,
    Risk,
    SafetyAssessment,
    SafetyEvaluator,
    requires_safety_check,
    requires_approval,
    evaluate_safety,
    format_report_as_markdown,
    format_risks,
    format_assessment_as_markdown,
    PolicyEngine,
)

__all__ = [
    "__version__",

    # Errors
    "PolicyEngineError",
    "DuplicateRuleError",
    "InvalidContextError",
    "PolicyLoadError",

    # Best practices
    "Category",
    "Severity",
    "Rule",
    "RuleRegistry",
    "Violation",
    "AnalysisReport",
    "AutofixResult",
    "BestPracticesAnalyzer",
    "AutofixEngine",
    "get_compliance_score",
    "get_security_score",

    # Safety
    "OperationType",
    "SafetyContext",
    "SafetyPolicy",
    "SafetyRule",
    "load_safety_policy",
    "validate_safety_policy",
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
