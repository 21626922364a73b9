# nimbus_policy/core/governance/context.py
"""
Safety context - the caller-built description of one infrastructure operation.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from nimbus_policy.core.errors import InvalidContextError


class OperationType(str, Enum):
    """Tool family the operation is executed with."""
    TERRAFORM = "terraform"
    KUBERNETES = "kubernetes"
    HELM = "helm"
    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"


class SafetyContext(BaseModel):
    """
    Transient input to the safety evaluator.

    Field names accept both the snake_case attribute and the camelCase alias
    used by command handlers (``estimatedCost``, ``planOutput``).
    """
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
    )

    operation: str = Field(..., description="Operation name, e.g. 'terraform apply'")
    type: OperationType = Field(..., description="Tool family")
    environment: Optional[str] = None
    estimated_cost: Optional[float] = Field(None, alias="estimatedCost", ge=0)
    plan_output: Optional[str] = Field(None, alias="planOutput")
    resources: List[str] = Field(
        default_factory=list,
        alias="affectedResources",
        description="Identifiers of the resources the operation touches",
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("operation")
    @classmethod
    def _operation_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("operation must be a non-empty string")
        return v

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SafetyContext":
        """Build a context, converting validation failures to InvalidContextError."""
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            errors = e.errors()
            field = ".".join(str(p) for p in errors[0]["loc"]) if errors else None
            raise InvalidContextError(f"Invalid safety context: {e}", field=field) from e


def coerce_context(context: Union[SafetyContext, Mapping[str, Any]]) -> SafetyContext:
    if isinstance(context, SafetyContext):
        return context
    if not isinstance(context, Mapping):
        raise InvalidContextError(
            f"Safety context must be a SafetyContext or mapping, got {type(context).__name__}"
        )
    return SafetyContext.from_mapping(context)


__all__ = ["OperationType", "SafetyContext", "coerce_context"]
