# nimbus_policy/core/governance/assessment.py
"""
SafetyAssessment - the advisory output of the safety evaluator.

The engine never acts on an assessment. Command handlers gate execution on
``passed`` / ``requires_approval`` and persist the snapshot themselves, keyed
by an operation id they generate (see ``to_records``).
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from nimbus_policy.core.governance.plan_output import PlanChanges
from nimbus_policy.core.governance.rules import Severity


class Risk(BaseModel):
    """One identified hazard within an assessment."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    severity: Severity
    message: str
    check_type: str = Field(..., description="Hazard family: destructive, environment, cost, plan, mutation, custom")
    source_fields: Tuple[str, ...] = Field(
        (),
        description="SafetyContext fields that produced this risk",
    )
    details: Dict[str, Any] = Field(default_factory=dict)
    requires_approval: bool = Field(
        False, description="Policy mandates approval because this risk is present"
    )

    @property
    def is_blocker(self) -> bool:
        return self.severity == Severity.CRITICAL or self.requires_approval


class SafetyAssessment(BaseModel):
    """Immutable result of evaluating one SafetyContext."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    operation: str
    risks: Tuple[Risk, ...] = ()
    passed: bool
    requires_approval: bool
    blockers: Tuple[Risk, ...] = ()
    affected_resources: Tuple[str, ...] = ()
    estimated_cost: Optional[float] = None
    plan_changes: Optional[PlanChanges] = None

    @property
    def highest_severity(self) -> Optional[Severity]:
        if not self.risks:
            return None
        return max((r.severity for r in self.risks), key=lambda s: s.rank)

    def risk(self, risk_id: str) -> Optional[Risk]:
        return next((r for r in self.risks if r.id == risk_id), None)

    def to_records(self, operation_id: str) -> List[Dict[str, Any]]:
        """
        Flatten into safety-check rows for an external store.

        One row per risk; an assessment without risks yields a single passing row.
        """
        if not self.risks:
            return [
                {
                    "operationId": operation_id,
                    "checkType": "safety",
                    "checkName": "safety-evaluation",
                    "passed": True,
                    "severity": "low",
                    "message": f"No risks identified for {self.operation}",
                    "requiresApproval": self.requires_approval,
                }
            ]
        return [
            {
                "operationId": operation_id,
                "checkType": risk.check_type,
                "checkName": risk.id,
                "passed": not risk.is_blocker,
                "severity": risk.severity.value,
                "message": risk.message,
                "requiresApproval": risk.requires_approval,
            }
            for risk in self.risks
        ]


__all__ = ["Risk", "SafetyAssessment"]
