# nimbus_policy/core/errors.py
"""
Exception taxonomy for the policy engine.

Rule registration and context construction errors are surfaced to the
caller. Policy file defects are absorbed by the loader and never escape.
"""

from typing import Optional


class PolicyEngineError(Exception):
    """Base class for all engine errors."""
    pass


class DuplicateRuleError(PolicyEngineError, KeyError):
    """Raised when a rule id is registered twice in the same registry."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(rule_id)

    def __str__(self) -> str:
        return f"Rule '{self.rule_id}' is already registered"


class InvalidContextError(PolicyEngineError, ValueError):
    """Raised when a safety context is missing required fields."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class PolicyLoadError(PolicyEngineError):
    """A policy file could not be read or parsed. Never leaves the loader."""
    pass


__all__ = [
    "PolicyEngineError",
    "DuplicateRuleError",
    "InvalidContextError",
    "PolicyLoadError",
]
