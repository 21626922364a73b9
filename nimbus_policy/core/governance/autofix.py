# nimbus_policy/core/governance/autofix.py
"""
Autofix engine - best-effort remediation of rule violations.

Fixes are applied in registration order to a running copy of the
configuration, so later fixes see earlier fixes' output. A fix is applied
only when its rule fails against the running configuration at the point it
is reached; already-compliant rules are left alone, which makes repeated
runs converge.
"""

import copy
import logging
from typing import Any, Iterable, Mapping, Optional, Union

from nimbus_policy.core.governance.analyzer import BestPracticesAnalyzer
from nimbus_policy.core.governance.reports import AutofixResult
from nimbus_policy.core.governance.rules import Category, Severity

logger = logging.getLogger(__name__)


class AutofixEngine:
    """Applies rule remediations using an analyzer's rule selection."""

    def __init__(self, analyzer: BestPracticesAnalyzer):
        self.analyzer = analyzer

    def autofix(
        self,
        component: str,
        config: Mapping[str, Any],
        categories: Optional[Iterable[Union[Category, str]]] = None,
        severities: Optional[Iterable[Union[Severity, str]]] = None,
        rule_ids: Optional[Iterable[str]] = None,
    ) -> AutofixResult:
        """
        Apply fixes for a component configuration.

        Rules targeted by ``rule_ids`` that have no fix function are skipped
        silently. The input mapping is never modified.

        Returns:
            AutofixResult whose ``violations_remaining`` is a fresh, unfiltered
            analysis of the fixed configuration.
        """
        fixed = copy.deepcopy(dict(config or {}))
        applied = []

        rules = self.analyzer.applicable_rules(component, categories, severities)
        if rule_ids is not None:
            wanted = set(rule_ids)
            rules = [r for r in rules if r.id in wanted]

        for rule in rules:
            if not rule.can_autofix:
                continue
            if self.analyzer.passes(rule, fixed):
                continue
            try:
                # each fix gets its own copy of the running config
                fixed = dict(rule.fix(copy.deepcopy(fixed)))
            except Exception as e:
                logger.error(f"Error applying autofix for rule {rule.id}: {e}", exc_info=True)
                continue
            applied.append(rule.id)
            logger.debug(f"Applied autofix for rule: {rule.id}")

        remaining = self.analyzer.analyze(component, fixed)
        logger.info(
            f"Applied {len(applied)} autofixes to {component}, "
            f"{remaining.summary.violations_found} violations remaining"
        )
        return AutofixResult(
            fixed_config=fixed,
            applied_fixes=applied,
            violations_remaining=remaining,
        )


__all__ = ["AutofixEngine"]
