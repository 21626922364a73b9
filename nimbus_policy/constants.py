# nimbus_policy/constants.py
"""
Engine tunables - severity weights, safety keywords and validation limits.
"""

from typing import Final, Tuple

# === COMPLIANCE SCORING ===
# Points subtracted from 100 per violation; the score is floored at 0.
SEVERITY_WEIGHTS: Final[dict] = {
    "critical": 25,
    "high": 15,
    "medium": 8,
    "low": 3,
}
MAX_COMPLIANCE_SCORE: Final[int] = 100
MIN_COMPLIANCE_SCORE: Final[int] = 0

# === SAFETY EVALUATION ===
DESTRUCTIVE_KEYWORDS: Final[Tuple[str, ...]] = ("destroy", "delete", "terminate")
# Planned destruction of this many resources or more is critical.
MASS_DESTRUCTION_THRESHOLD: Final[int] = 10
DEFAULT_COST_THRESHOLD: Final[float] = 500.0

# === POLICY FILE ===
DEFAULT_POLICY_DIR: Final[str] = ".nimbus"
DEFAULT_POLICY_FILE: Final[str] = "config.yaml"
POLICY_PATH_ENV: Final[str] = "NIMBUS_SAFETY_POLICY"
POLICY_SECTION: Final[str] = "safety"

# === VALIDATION LIMITS ===
MAX_POLICY_ENTRIES: Final[int] = 100
MAX_CUSTOM_SAFETY_RULES: Final[int] = 50

# Entries every shipped policy is expected to contain.
REQUIRED_APPROVAL_OPERATIONS: Final[Tuple[str, ...]] = ("destroy", "delete", "apply")
REQUIRED_PROTECTED_ENVIRONMENTS: Final[Tuple[str, ...]] = ("production", "prod")
REQUIRED_SKIP_OPERATIONS: Final[Tuple[str, ...]] = ("plan", "list", "describe")
