# nimbus_policy/core/governance/safety_policy.py
"""
Safety policy - which operations need human approval.

The policy is loaded once per process from an optional YAML document and is
read-only afterwards. A missing, unreadable or malformed document is not an
error: the built-in default policy is used instead. A section present in the
document replaces the corresponding default wholesale; sections are never
merged element by element.

Accepted document shapes::

    safety:
      alwaysRequireApproval: [destroy, delete, apply]
      protectedEnvironments: [production, prod]
      skipSafetyFor: [plan, list, describe]
      costThreshold: 500

or the same keys at top level. snake_case keys are accepted too, and
``requireApproval: false`` clears the always-require-approval list.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from nimbus_policy.constants import (
    DEFAULT_COST_THRESHOLD,
    DEFAULT_POLICY_DIR,
    DEFAULT_POLICY_FILE,
    MAX_CUSTOM_SAFETY_RULES,
    MAX_POLICY_ENTRIES,
    POLICY_PATH_ENV,
    POLICY_SECTION,
    REQUIRED_APPROVAL_OPERATIONS,
    REQUIRED_PROTECTED_ENVIRONMENTS,
    REQUIRED_SKIP_OPERATIONS,
)
from nimbus_policy.core.errors import PolicyLoadError
from nimbus_policy.core.governance.rules import Severity

logger = logging.getLogger(__name__)

DEFAULT_ALWAYS_REQUIRE_APPROVAL = ("destroy", "delete", "terminate", "update", "apply", "create")
DEFAULT_PROTECTED_ENVIRONMENTS = ("production", "prod", "prd", "live", "main", "master")
DEFAULT_SKIP_SAFETY_FOR = ("plan", "validate", "show", "list", "get", "describe", "logs", "status")


@dataclass(frozen=True)
class SafetyRule:
    """
    A programmatic safety rule attached to a policy.

    ``check`` receives the SafetyContext and returns True when the rule's
    hazard is present.
    """
    id: str
    name: str
    description: str
    severity: Severity
    check: Callable[[Any], bool]
    message: str

    @property
    def forces_approval(self) -> bool:
        return Severity(self.severity) in (Severity.HIGH, Severity.CRITICAL)


def _contains_any(text: Optional[str], entries: Sequence[str]) -> Optional[str]:
    """First entry found as a case-insensitive substring of text."""
    if not text:
        return None
    normalized = text.lower()
    for entry in entries:
        if entry and entry.lower() in normalized:
            return entry
    return None


def _keyword_match(text: str, entries: Sequence[str]) -> Optional[str]:
    """First entry found as a whole word of text (so 'get' does not match '-target')."""
    normalized = text.lower()
    for entry in entries:
        if not entry:
            continue
        pattern = r"(?<![a-z0-9])" + re.escape(entry.lower()) + r"(?![a-z0-9])"
        if re.search(pattern, normalized):
            return entry
    return None


class SafetyPolicy(BaseModel):
    """Operative safety policy."""
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
    )

    always_require_approval: Tuple[str, ...] = Field(
        DEFAULT_ALWAYS_REQUIRE_APPROVAL,
        alias="alwaysRequireApproval",
        description="Operation-name substrings that always need approval",
    )
    protected_environments: Tuple[str, ...] = Field(
        DEFAULT_PROTECTED_ENVIRONMENTS,
        alias="protectedEnvironments",
    )
    skip_safety_for: Tuple[str, ...] = Field(
        DEFAULT_SKIP_SAFETY_FOR,
        alias="skipSafetyFor",
        description="Operation keywords exempt from all safety checks",
    )
    cost_threshold: float = Field(DEFAULT_COST_THRESHOLD, alias="costThreshold")
    custom_rules: Tuple[SafetyRule, ...] = Field((), alias="customRules")

    def approval_operation(self, operation: str) -> Optional[str]:
        return _contains_any(operation, self.always_require_approval)

    def protected_environment(self, environment: Optional[str]) -> Optional[str]:
        return _contains_any(environment, self.protected_environments)

    def skipped_operation(self, operation: str) -> Optional[str]:
        return _keyword_match(operation, self.skip_safety_for)

    def exceeds_cost(self, estimated_cost: Optional[float]) -> bool:
        return estimated_cost is not None and estimated_cost > self.cost_threshold

    def with_custom_rules(self, *rules: SafetyRule) -> "SafetyPolicy":
        """Copy of this policy with extra programmatic rules appended."""
        return self.model_copy(update={"custom_rules": (*self.custom_rules, *rules)})


def default_safety_policy() -> SafetyPolicy:
    return SafetyPolicy()


DEFAULT_SAFETY_POLICY = default_safety_policy()


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------
_KEY_ALIASES = {
    "alwaysRequireApproval": "always_require_approval",
    "always_require_approval": "always_require_approval",
    "protectedEnvironments": "protected_environments",
    "protected_environments": "protected_environments",
    "skipSafetyFor": "skip_safety_for",
    "skip_safety_for": "skip_safety_for",
    "costThreshold": "cost_threshold",
    "cost_threshold": "cost_threshold",
}
_REQUIRE_APPROVAL_KEYS = ("requireApproval", "require_approval")


def default_policy_path() -> Path:
    """Policy path from the environment, else ./.nimbus/config.yaml."""
    env_path = os.environ.get(POLICY_PATH_ENV)
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_POLICY_DIR / DEFAULT_POLICY_FILE


def parse_safety_config(content: str) -> Optional[Dict[str, Any]]:
    """
    Extract policy overrides from a YAML document.

    Returns:
        A dict of snake_case field overrides, or None when the document holds
        no safety policy at all.

    Raises:
        PolicyLoadError: The document is not valid YAML or has the wrong shape.
    """
    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise PolicyLoadError(f"Invalid YAML: {e}") from e

    if document is None:
        return None
    if not isinstance(document, dict):
        raise PolicyLoadError("Policy document must be a mapping")

    if POLICY_SECTION in document:
        section = document[POLICY_SECTION]
        if section is None:
            return None
        if not isinstance(section, dict):
            raise PolicyLoadError(f"'{POLICY_SECTION}' section must be a mapping")
    elif any(key in document for key in (*_KEY_ALIASES, *_REQUIRE_APPROVAL_KEYS)):
        section = document
    else:
        return None

    overrides: Dict[str, Any] = {}
    for key, value in section.items():
        field = _KEY_ALIASES.get(key)
        if field is not None:
            overrides[field] = value

    for key in _REQUIRE_APPROVAL_KEYS:
        if section.get(key) is False and "always_require_approval" not in overrides:
            overrides["always_require_approval"] = []

    return overrides


def load_safety_policy(path: Optional[Union[str, Path]] = None) -> SafetyPolicy:
    """
    Load the safety policy, falling back to the built-in default.

    Never raises: read and parse failures are logged and yield the default.
    """
    policy_path = Path(path) if path else default_policy_path()

    if not policy_path.is_file():
        logger.debug(f"No safety policy at {policy_path}, using defaults")
        return default_safety_policy()

    try:
        content = policy_path.read_text(encoding="utf-8")
        overrides = parse_safety_config(content)
        if overrides is None:
            logger.debug(f"No safety section in {policy_path}, using defaults")
            return default_safety_policy()
        policy = SafetyPolicy(**overrides)
    except (OSError, UnicodeDecodeError, PolicyLoadError, ValidationError) as e:
        logger.warning(f"Could not load safety policy from {policy_path}: {e}; using defaults")
        return default_safety_policy()

    logger.info(f"Loaded safety policy from {policy_path} (overrides: {sorted(overrides)})")
    return policy


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------
def validate_safety_policy(policy: SafetyPolicy) -> Dict[str, Any]:
    """
    Check a policy against the shipped-policy expectations.

    The engine does not enforce these; callers may surface the result.

    Returns:
        Dictionary with keys:
            - valid: bool
            - errors: list of error messages
            - warnings: list of warning messages
    """
    errors = []
    warnings = []

    if policy.cost_threshold < 0:
        errors.append(f"costThreshold must not be negative (got {policy.cost_threshold})")

    lists = {
        "alwaysRequireApproval": (policy.always_require_approval, REQUIRED_APPROVAL_OPERATIONS),
        "protectedEnvironments": (policy.protected_environments, REQUIRED_PROTECTED_ENVIRONMENTS),
        "skipSafetyFor": (policy.skip_safety_for, REQUIRED_SKIP_OPERATIONS),
    }
    for name, (entries, required) in lists.items():
        if len(entries) > MAX_POLICY_ENTRIES:
            errors.append(f"{name} has {len(entries)} entries, limit is {MAX_POLICY_ENTRIES}")
        present = {e.lower() for e in entries}
        missing = [r for r in required if r not in present]
        if missing:
            warnings.append(f"{name} is missing expected entries: {missing}")

    overlap = {e.lower() for e in policy.always_require_approval} & {e.lower() for e in policy.skip_safety_for}
    if overlap:
        warnings.append(f"Operations both skipped and approval-gated: {sorted(overlap)}")

    if len(policy.custom_rules) > MAX_CUSTOM_SAFETY_RULES:
        errors.append(
            f"{len(policy.custom_rules)} custom rules exceed limit {MAX_CUSTOM_SAFETY_RULES}"
        )
    rule_ids = [r.id for r in policy.custom_rules]
    duplicates = sorted({i for i in rule_ids if rule_ids.count(i) > 1})
    if duplicates:
        errors.append(f"Duplicate custom rule ids: {duplicates}")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


__all__ = [
    "SafetyPolicy",
    "SafetyRule",
    "DEFAULT_SAFETY_POLICY",
    "default_safety_policy",
    "default_policy_path",
    "parse_safety_config",
    "load_safety_policy",
    "validate_safety_policy",
]
