# nimbus_policy/core/governance/evaluator.py
"""
Safety evaluator - risk classification and approval gating for operations.

Each evaluation is a single pure transition from a SafetyContext to a
SafetyAssessment under one SafetyPolicy. Two fast-path predicates are
exposed for callers that only need a yes/no answer:

- ``requires_safety_check``: False for read-only operations on the skip list.
- ``requires_approval``: True when the operation, environment, cost or a
  high-severity custom rule mandates human approval.

``evaluate_safety`` always runs every check. Its ``requires_approval`` is
computed by the same predicate, so the two never disagree.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from nimbus_policy.constants import DESTRUCTIVE_KEYWORDS, MASS_DESTRUCTION_THRESHOLD
from nimbus_policy.core.errors import InvalidContextError
from nimbus_policy.core.governance.assessment import Risk, SafetyAssessment
from nimbus_policy.core.governance.context import SafetyContext, coerce_context
from nimbus_policy.core.governance.plan_output import PlanChanges, analyze_plan_output
from nimbus_policy.core.governance.rules import Severity
from nimbus_policy.core.governance.safety_policy import SafetyPolicy, SafetyRule, default_safety_policy

logger = logging.getLogger(__name__)

ContextLike = Union[SafetyContext, Mapping[str, Any]]


def _require_operation(operation: Optional[str]) -> str:
    if not isinstance(operation, str) or not operation.strip():
        raise InvalidContextError("operation must be a non-empty string", field="operation")
    return operation


class SafetyEvaluator:
    """Evaluates operations against one safety policy."""

    def __init__(self, policy: Optional[SafetyPolicy] = None):
        self.policy = policy if policy is not None else default_safety_policy()

    # -------------------------------------------------------------------------
    # Fast paths
    # -------------------------------------------------------------------------
    def requires_safety_check(self, operation: str) -> bool:
        """False iff the operation matches a skip-list keyword."""
        operation = _require_operation(operation)
        return self.policy.skipped_operation(operation) is None

    def requires_approval(self, operation: str, context: Optional[ContextLike] = None) -> bool:
        """
        True if any of:
            (a) the operation matches an always-require-approval entry,
            (b) the context environment is protected,
            (c) the estimated cost exceeds the policy threshold,
            (d) a high or critical custom rule matches the context.
        """
        operation = _require_operation(operation)
        ctx = self._context_for(operation, context) if context is not None else None
        return self._approval_needed(operation, ctx)

    # -------------------------------------------------------------------------
    # Full evaluation
    # -------------------------------------------------------------------------
    def evaluate_safety(self, context: ContextLike) -> SafetyAssessment:
        """Derive every risk for the context and the resulting approval verdict."""
        ctx = coerce_context(context)
        operation = ctx.operation
        policy = self.policy

        risks: List[Risk] = []
        approval_entry = policy.approval_operation(operation)
        normalized_op = operation.lower()

        destructive = next((k for k in DESTRUCTIVE_KEYWORDS if k in normalized_op), None)
        if destructive:
            risks.append(
                Risk(
                    id="destructive-operation",
                    severity=Severity.CRITICAL,
                    message=f"Destructive operation: {operation}",
                    check_type="destructive",
                    source_fields=["operation"],
                    details={"keyword": destructive},
                    requires_approval=approval_entry is not None,
                )
            )
        elif approval_entry:
            risks.append(
                Risk(
                    id="mutation-operation",
                    severity=Severity.MEDIUM,
                    message="This operation will modify infrastructure",
                    check_type="mutation",
                    source_fields=["operation"],
                    details={"matched": approval_entry},
                    requires_approval=True,
                )
            )

        protected = policy.protected_environment(ctx.environment)
        if protected:
            risks.append(
                Risk(
                    id="protected-environment",
                    severity=Severity.HIGH,
                    message=f"Operating on protected environment: {ctx.environment}",
                    check_type="environment",
                    source_fields=["environment"],
                    details={"matched": protected},
                    requires_approval=True,
                )
            )

        if policy.exceeds_cost(ctx.estimated_cost):
            risks.append(
                Risk(
                    id="high-cost",
                    severity=Severity.HIGH,
                    message=(
                        f"Estimated cost ${ctx.estimated_cost:.2f} exceeds threshold "
                        f"${policy.cost_threshold:.2f}"
                    ),
                    check_type="cost",
                    source_fields=["estimated_cost"],
                    details={"estimated_cost": ctx.estimated_cost, "threshold": policy.cost_threshold},
                    requires_approval=True,
                )
            )

        matched_rules = self._matching_custom_rules(ctx)
        for rule in matched_rules:
            risks.append(
                Risk(
                    id=rule.id,
                    severity=rule.severity,
                    message=rule.message,
                    check_type="custom",
                    details={"name": rule.name},
                    requires_approval=rule.forces_approval,
                )
            )

        plan_changes: Optional[PlanChanges] = None
        if ctx.plan_output:
            plan_changes = analyze_plan_output(ctx.plan_output)
            risks.extend(self._plan_risks(plan_changes))

        requires_approval = self._approval_needed(operation, ctx, matched_rules)
        has_critical = any(r.severity == Severity.CRITICAL for r in risks)
        blockers = [r for r in risks if r.is_blocker]
        passed = not has_critical and not requires_approval

        logger.info(
            f"Safety evaluation for '{operation}': {len(risks)} risks, "
            f"{len(blockers)} blockers, passed={passed}, requires_approval={requires_approval}"
        )
        return SafetyAssessment(
            operation=operation,
            risks=risks,
            passed=passed,
            requires_approval=requires_approval,
            blockers=blockers,
            affected_resources=list(ctx.resources),
            estimated_cost=ctx.estimated_cost,
            plan_changes=plan_changes,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _approval_needed(
        self,
        operation: str,
        ctx: Optional[SafetyContext],
        matched_rules: Optional[List[SafetyRule]] = None,
    ) -> bool:
        if self.policy.approval_operation(operation):
            return True
        if ctx is None:
            return False
        if self.policy.protected_environment(ctx.environment):
            return True
        if self.policy.exceeds_cost(ctx.estimated_cost):
            return True
        if matched_rules is None:
            matched_rules = self._matching_custom_rules(ctx)
        return any(rule.forces_approval for rule in matched_rules)

    @staticmethod
    def _context_for(operation: str, context: ContextLike) -> SafetyContext:
        if isinstance(context, SafetyContext):
            return context
        if not isinstance(context, Mapping):
            return coerce_context(context)
        return coerce_context({"operation": operation, **context})

    def _matching_custom_rules(self, ctx: SafetyContext) -> List[SafetyRule]:
        matched = []
        for rule in self.policy.custom_rules:
            try:
                if rule.check(ctx):
                    matched.append(rule)
            except Exception as e:
                logger.error(f"Error evaluating safety rule {rule.id}: {e}", exc_info=True)
        return matched

    @staticmethod
    def _plan_risks(changes: PlanChanges) -> List[Risk]:
        if changes.destroy > 0:
            severity = Severity.CRITICAL if changes.destroy >= MASS_DESTRUCTION_THRESHOLD else Severity.HIGH
            return [
                Risk(
                    id="resource-destruction",
                    severity=severity,
                    message=f"{changes.destroy} resources will be destroyed",
                    check_type="plan",
                    source_fields=["plan_output"],
                    details={"add": changes.add, "change": changes.change, "destroy": changes.destroy},
                )
            ]
        if not changes.recognized:
            return [
                Risk(
                    id="plan-impact-unknown",
                    severity=Severity.MEDIUM,
                    message="Could not determine destructive impact from plan output",
                    check_type="plan",
                    source_fields=["plan_output"],
                )
            ]
        return []


# -----------------------------------------------------------------------------
# Module-level convenience functions
# -----------------------------------------------------------------------------
def requires_safety_check(operation: str, policy: Optional[SafetyPolicy] = None) -> bool:
    return SafetyEvaluator(policy).requires_safety_check(operation)


def requires_approval(
    operation: str,
    context: Optional[ContextLike] = None,
    policy: Optional[SafetyPolicy] = None,
) -> bool:
    return SafetyEvaluator(policy).requires_approval(operation, context)


def evaluate_safety(context: ContextLike, policy: Optional[SafetyPolicy] = None) -> SafetyAssessment:
    return SafetyEvaluator(policy).evaluate_safety(context)


__all__ = [
    "SafetyEvaluator",
    "requires_safety_check",
    "requires_approval",
    "evaluate_safety",
]
