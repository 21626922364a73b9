# nimbus_policy/core/governance/rules.py
"""
Best-practice rule definitions.

A rule is a named, categorised predicate over a component configuration
(an arbitrary string-keyed mapping) plus an optional remediation. Predicates
return True when the configuration is compliant. Remediations return a new
mapping and never mutate their input, so they can be chained.

Security-critical booleans fail closed: a missing key is non-compliant.
Advisory checks over optional structures (ingress rules, tags) fail open on
the structure itself, and absence is reported by a separate, lower-severity
rule where it matters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

# -----------------------------------------------------------------------------
# Type Aliases for Readability
# -----------------------------------------------------------------------------
ConfigValue = Union[bool, int, float, str, List[Any], Dict[str, Any], None]
Config = Mapping[str, ConfigValue]
CheckFn = Callable[[Config], bool]
FixFn = Callable[[Config], Dict[str, ConfigValue]]


class Category(str, Enum):
    SECURITY = "security"
    COST = "cost"
    RELIABILITY = "reliability"
    PERFORMANCE = "performance"
    COMPLIANCE = "compliance"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordinal used for sorting; higher is more severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


@dataclass(frozen=True)
class Rule:
    """A single best-practice rule.

    ``fields`` lists the configuration keys the check reads. Checks built with
    ``all_true``/``any_true`` can name the key that failed; otherwise a
    violation names the key only when the rule reads exactly one.
    """
    id: str
    category: Category
    severity: Severity
    title: str
    description: str
    recommendation: str
    applies_to: Tuple[str, ...]
    check: CheckFn
    fix: Optional[FixFn] = None
    fields: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.id:
            raise ValueError("Rule id must be a non-empty string")
        object.__setattr__(self, "category", Category(self.category))
        object.__setattr__(self, "severity", Severity(self.severity))
        object.__setattr__(self, "applies_to", tuple(self.applies_to))
        object.__setattr__(self, "fields", tuple(self.fields))

    @property
    def can_autofix(self) -> bool:
        return self.fix is not None

    def applies(self, component: str) -> bool:
        return component in self.applies_to

    def failing_field(self, config: Config) -> Optional[str]:
        locate = getattr(self.check, "failing_field", None)
        if locate is not None:
            return locate(config)
        if len(self.fields) == 1:
            return self.fields[0]
        return None


# -----------------------------------------------------------------------------
# Predicate / remediation building blocks
# -----------------------------------------------------------------------------
def _is_true(config: Config, key: str) -> bool:
    return config.get(key) is True


def _number(value: Any) -> float:
    """Lenient numeric coercion; anything non-numeric counts as zero."""
    if value is None or isinstance(value, (list, dict)):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _is_production(config: Config) -> bool:
    return config.get("environment") == "production"


def _tags(config: Config) -> Optional[Mapping[str, Any]]:
    tags = config.get("tags")
    return tags if isinstance(tags, Mapping) else None


def _first_not_true(keys: Tuple[str, ...]) -> Callable[[Config], Optional[str]]:
    def locate(config: Config) -> Optional[str]:
        return next((key for key in keys if not _is_true(config, key)), None)
    return locate


def all_true(*keys: str) -> CheckFn:
    """Compliant only when every key is explicitly True."""
    def check(config: Config) -> bool:
        return all(_is_true(config, key) for key in keys)
    check.failing_field = _first_not_true(keys)
    return check


def any_true(*keys: str) -> CheckFn:
    """Compliant when at least one key is explicitly True."""
    def check(config: Config) -> bool:
        return any(_is_true(config, key) for key in keys)
    check.failing_field = _first_not_true(keys)
    return check


def set_values(**values: ConfigValue) -> FixFn:
    """Remediation that overlays fixed values onto the configuration."""
    def fix(config: Config) -> Dict[str, ConfigValue]:
        return {**config, **values}
    return fix


# --- security ---------------------------------------------------------------
def check_deletion_protection(config: Config) -> bool:
    if _is_production(config):
        return _is_true(config, "deletion_protection")
    return True


def fix_deletion_protection(config: Config) -> Dict[str, ConfigValue]:
    if _is_production(config):
        return {**config, "deletion_protection": True}
    return dict(config)


def check_eks_api_access(config: Config) -> bool:
    if config.get("endpoint_public_access") is False:
        return True
    cidrs = config.get("public_access_cidrs")
    return isinstance(cidrs, list) and len(cidrs) > 0


def _ingress_rules(config: Config) -> List[Mapping[str, Any]]:
    rules = config.get("ingress_rules")
    if not isinstance(rules, list):
        return []
    return [r for r in rules if isinstance(r, Mapping)]


def check_ssh_restricted(config: Config) -> bool:
    return not any(
        r.get("port") == 22 and r.get("cidr") == "0.0.0.0/0"
        for r in _ingress_rules(config)
    )


def check_ingress_cidrs(config: Config) -> bool:
    return not any(r.get("cidr") == "0.0.0.0/0" for r in _ingress_rules(config))


def check_alb_https(config: Config) -> bool:
    return config.get("listener_protocol") == "HTTPS" or _is_true(config, "redirect_http_to_https")


def check_waf(config: Config) -> bool:
    return _is_true(config, "enable_waf") or _is_true(config, "internal")


def fix_waf(config: Config) -> Dict[str, ConfigValue]:
    if not _is_true(config, "internal"):
        return {**config, "enable_waf": True}
    return dict(config)


def check_iam_roles(config: Config) -> bool:
    return _is_true(config, "use_iam_role") or config.get("access_key_id") is None


def check_mfa_delete(config: Config) -> bool:
    if _is_production(config):
        return _is_true(config, "mfa_delete")
    return True


def check_private_subnets(config: Config) -> bool:
    return _is_true(config, "use_private_subnets") or config.get("publicly_accessible") is False


# --- compliance / tagging -----------------------------------------------------
MANDATORY_TAGS = ("Environment", "ManagedBy", "Project")


def check_mandatory_tags(config: Config) -> bool:
    tags = _tags(config)
    if tags is None:
        return False
    return all(tag in tags for tag in MANDATORY_TAGS)


def fix_mandatory_tags(config: Config) -> Dict[str, ConfigValue]:
    tags = dict(_tags(config) or {})
    tags.setdefault("Environment", config.get("environment") or "development")
    tags.setdefault("ManagedBy", "Terraform")
    tags.setdefault("Project", config.get("project_name") or "unassigned")
    return {**config, "tags": tags}


def check_cost_allocation_tags(config: Config) -> bool:
    tags = _tags(config)
    if tags is None:
        return False
    return "CostCenter" in tags or "Team" in tags


def check_compliance_framework_tag(config: Config) -> bool:
    tags = _tags(config)
    return tags is not None and "ComplianceFramework" in tags


def check_log_retention(config: Config) -> bool:
    return _number(config.get("log_retention_days")) >= 90


def fix_log_retention(config: Config) -> Dict[str, ConfigValue]:
    current = _number(config.get("log_retention_days"))
    return {**config, "log_retention_days": max(int(current), 90)}


# --- cost -------------------------------------------------------------------
def check_single_nat_gateway(config: Config) -> bool:
    if _is_production(config):
        return True
    return _is_true(config, "single_nat_gateway")


def fix_single_nat_gateway(config: Config) -> Dict[str, ConfigValue]:
    if not _is_production(config):
        return {**config, "single_nat_gateway": True, "nat_gateway_count": 1}
    return dict(config)


def check_spot_capacity(config: Config) -> bool:
    if _is_production(config):
        return True
    return config.get("node_capacity_type") == "SPOT"


def check_storage_autoscaling(config: Config) -> bool:
    if config.get("create_cluster"):
        return True
    max_storage = _number(config.get("max_allocated_storage"))
    return max_storage > 0 and max_storage > _number(config.get("db_allocated_storage"))


def check_multipart_cleanup(config: Config) -> bool:
    return config.get("abort_incomplete_multipart_days") is not None


def check_reserved_capacity(config: Config) -> bool:
    if _is_production(config):
        return _is_true(config, "reserved_capacity") or _is_true(config, "savings_plan")
    return True


def check_node_group_sizing(config: Config) -> bool:
    min_size = _number(config.get("node_min_size"))
    max_size = _number(config.get("node_max_size"))
    return min_size > 0 and max_size > 0 and max_size >= min_size


# --- reliability --------------------------------------------------------------
def check_multi_az(config: Config) -> bool:
    if not _is_production(config):
        return True
    return _is_true(config, "enable_multi_az") or _is_true(config, "create_cluster")


def fix_multi_az(config: Config) -> Dict[str, ConfigValue]:
    if _is_production(config) and not config.get("create_cluster"):
        return {**config, "enable_multi_az": True}
    return dict(config)


def check_backup_retention(config: Config) -> bool:
    retention = _number(config.get("backup_retention_days"))
    if _is_production(config):
        return retention >= 7
    return retention >= 1


def fix_backup_retention(config: Config) -> Dict[str, ConfigValue]:
    return {**config, "backup_retention_days": 7 if _is_production(config) else 3}


def check_multi_az_subnets(config: Config) -> bool:
    return _number(config.get("private_subnet_count")) >= 2


def check_health_check(config: Config) -> bool:
    return config.get("health_check_path") is not None


def fix_health_check(config: Config) -> Dict[str, ConfigValue]:
    return {
        **config,
        "health_check_path": config.get("health_check_path") or "/health",
        "health_check_interval": config.get("health_check_interval") or 30,
        "healthy_threshold": config.get("healthy_threshold") or 3,
        "unhealthy_threshold": config.get("unhealthy_threshold") or 3,
    }


def check_termination_protection(config: Config) -> bool:
    if _is_production(config):
        return _is_true(config, "disable_api_termination") or _is_true(config, "deletion_protection")
    return True


def fix_termination_protection(config: Config) -> Dict[str, ConfigValue]:
    if _is_production(config):
        return {**config, "disable_api_termination": True, "deletion_protection": True}
    return dict(config)


def check_cross_region_backup(config: Config) -> bool:
    if _is_production(config):
        return _is_true(config, "enable_cross_region_backup")
    return True


def check_pod_disruption_budget(config: Config) -> bool:
    return config.get("pod_disruption_budget") is not None


# --- performance ----------------------------------------------------------------
def check_gp3_storage(config: Config) -> bool:
    if config.get("create_cluster"):
        return True
    return config.get("db_storage_type") == "gp3"


def fix_gp3_storage(config: Config) -> Dict[str, ConfigValue]:
    if not config.get("create_cluster"):
        return {**config, "db_storage_type": "gp3"}
    return dict(config)


# -----------------------------------------------------------------------------
# Built-in rule set (registration order is significant)
# -----------------------------------------------------------------------------
SECURITY_RULES: List[Rule] = [
    Rule(
        id="sec-001",
        category=Category.SECURITY,
        severity=Severity.CRITICAL,
        title="Enable Encryption at Rest",
        description="All data stores should have encryption at rest enabled",
        recommendation="Enable encryption at rest using AWS KMS for all data storage services",
        applies_to=("rds", "s3", "ebs", "efs"),
        check=any_true("storage_encrypted", "encryption_enabled"),
        fix=set_values(storage_encrypted=True, encryption_enabled=True),
        fields=("storage_encrypted", "encryption_enabled"),
    ),
    Rule(
        id="sec-002",
        category=Category.SECURITY,
        severity=Severity.HIGH,
        title="Enable VPC Flow Logs",
        description="VPC should have flow logs enabled for security monitoring",
        recommendation="Enable VPC flow logs to monitor and troubleshoot network traffic",
        applies_to=("vpc",),
        check=all_true("enable_flow_logs"),
        fix=set_values(enable_flow_logs=True, flow_logs_retention_days=30),
        fields=("enable_flow_logs",),
    ),
    Rule(
        id="sec-003",
        category=Category.SECURITY,
        severity=Severity.CRITICAL,
        title="Block Public Access for S3",
        description="S3 buckets should block all public access unless explicitly required",
        recommendation="Enable all S3 public access block settings",
        applies_to=("s3",),
        check=all_true("block_public_acls", "block_public_policy", "ignore_public_acls", "restrict_public_buckets"),
        fix=set_values(
            block_public_acls=True,
            block_public_policy=True,
            ignore_public_acls=True,
            restrict_public_buckets=True,
        ),
        fields=("block_public_acls", "block_public_policy", "ignore_public_acls", "restrict_public_buckets"),
    ),
    Rule(
        id="sec-004",
        category=Category.SECURITY,
        severity=Severity.HIGH,
        title="Enable S3 Versioning",
        description="S3 buckets should have versioning enabled for data protection",
        recommendation="Enable S3 versioning to protect against accidental deletion",
        applies_to=("s3",),
        check=all_true("enable_versioning"),
        fix=set_values(enable_versioning=True),
        fields=("enable_versioning",),
    ),
    Rule(
        id="sec-005",
        category=Category.SECURITY,
        severity=Severity.CRITICAL,
        title="Use Private Subnets for Databases",
        description="Databases should not be publicly accessible",
        recommendation="Deploy RDS instances in private subnets only",
        applies_to=("rds",),
        check=lambda config: config.get("publicly_accessible") is False,
        fix=set_values(publicly_accessible=False),
        fields=("publicly_accessible",),
    ),
    Rule(
        id="sec-006",
        category=Category.SECURITY,
        severity=Severity.HIGH,
        title="Enable Deletion Protection",
        description="Production databases should have deletion protection enabled",
        recommendation="Enable deletion protection for RDS instances",
        applies_to=("rds",),
        check=check_deletion_protection,
        fix=fix_deletion_protection,
        fields=("deletion_protection", "environment"),
    ),
    Rule(
        id="sec-007",
        category=Category.SECURITY,
        severity=Severity.MEDIUM,
        title="Enable EKS Cluster Logging",
        description="EKS clusters should have control plane logging enabled",
        recommendation="Enable all EKS cluster log types for auditing and troubleshooting",
        applies_to=("eks",),
        check=all_true("enable_cluster_logs"),
        fix=set_values(
            enable_cluster_logs=True,
            cluster_log_types=["api", "audit", "authenticator", "controllerManager", "scheduler"],
            cluster_log_retention_days=30,
        ),
        fields=("enable_cluster_logs",),
    ),
    Rule(
        id="sec-008",
        category=Category.SECURITY,
        severity=Severity.HIGH,
        title="Enable EKS Secret Encryption",
        description="EKS should encrypt Kubernetes secrets at rest",
        recommendation="Configure KMS key for EKS secret encryption",
        applies_to=("eks",),
        check=all_true("enable_secret_encryption"),
        fix=set_values(enable_secret_encryption=True),
        fields=("enable_secret_encryption",),
    ),
    Rule(
        id="sec-009",
        category=Category.SECURITY,
        severity=Severity.MEDIUM,
        title="Restrict EKS API Access",
        description="EKS API endpoint should not be publicly accessible without restrictions",
        recommendation="Limit public access CIDR blocks or use private endpoint only",
        applies_to=("eks",),
        check=check_eks_api_access,
        fields=("endpoint_public_access", "public_access_cidrs"),
    ),
    Rule(
        id="sec-010",
        category=Category.SECURITY,
        severity=Severity.HIGH,
        title="Enable RDS Enhanced Monitoring",
        description="RDS instances should have enhanced monitoring enabled",
        recommendation="Enable enhanced monitoring with 60-second granularity",
        applies_to=("rds",),
        check=all_true("enable_enhanced_monitoring"),
        fix=set_values(enable_enhanced_monitoring=True),
        fields=("enable_enhanced_monitoring",),
    ),
    Rule(
        id="sec-011",
        category=Category.SECURITY,
        severity=Severity.HIGH,
        title="Enable CloudTrail Logging",
        description="CloudTrail should be enabled for all API calls",
        recommendation="Enable CloudTrail logging in all regions for audit and compliance",
        applies_to=("cloudtrail", "account"),
        check=all_true("enable_cloudtrail"),
        fix=set_values(enable_cloudtrail=True, cloudtrail_multi_region=True),
        fields=("enable_cloudtrail",),
    ),
    Rule(
        id="sec-012",
        category=Category.SECURITY,
        severity=Severity.HIGH,
        title="Use HTTPS-Only for ALB Listeners",
        description="Application Load Balancers should only use HTTPS listeners",
        recommendation="Configure ALB listeners to use HTTPS with valid SSL certificates",
        applies_to=("alb", "elb"),
        check=check_alb_https,
        fix=set_values(redirect_http_to_https=True),
        fields=("listener_protocol", "redirect_http_to_https"),
    ),
    Rule(
        id="sec-013",
        category=Category.SECURITY,
        severity=Severity.CRITICAL,
        title="Restrict SSH Access",
        description="SSH access should not be open to 0.0.0.0/0",
        recommendation="Restrict SSH (port 22) access to known CIDR ranges only",
        applies_to=("security_group", "vpc"),
        check=check_ssh_restricted,
        fields=("ingress_rules",),
    ),
    Rule(
        id="sec-014",
        category=Category.SECURITY,
        severity=Severity.MEDIUM,
        title="Enable WAF for Public-Facing ALBs",
        description="Public-facing ALBs should have WAF enabled",
        recommendation="Attach AWS WAF to public-facing Application Load Balancers",
        applies_to=("alb",),
        check=check_waf,
        fix=fix_waf,
        fields=("enable_waf", "internal"),
    ),
    Rule(
        id="sec-015",
        category=Category.SECURITY,
        severity=Severity.MEDIUM,
        title="Enable GuardDuty",
        description="GuardDuty should be enabled for threat detection",
        recommendation="Enable Amazon GuardDuty for intelligent threat detection",
        applies_to=("account", "guardduty"),
        check=all_true("enable_guardduty"),
        fix=set_values(enable_guardduty=True),
        fields=("enable_guardduty",),
    ),
    Rule(
        id="sec-016",
        category=Category.SECURITY,
        severity=Severity.HIGH,
        title="Use IAM Roles Instead of Access Keys",
        description="Prefer IAM roles over long-lived access keys",
        recommendation="Use IAM roles for EC2/ECS/EKS instead of embedding access keys",
        applies_to=("iam", "ec2", "ecs", "eks"),
        check=check_iam_roles,
        fields=("access_key_id", "use_iam_role"),
    ),
    Rule(
        id="sec-017",
        category=Category.SECURITY,
        severity=Severity.MEDIUM,
        title="Enable MFA Delete on S3 Buckets",
        description="S3 buckets should have MFA delete enabled for critical data",
        recommendation="Enable MFA delete to prevent accidental or malicious deletion",
        applies_to=("s3",),
        check=check_mfa_delete,
        fields=("mfa_delete", "environment"),
    ),
    Rule(
        id="sec-018",
        category=Category.SECURITY,
        severity=Severity.HIGH,
        title="Encrypt EBS Volumes by Default",
        description="EBS volumes should be encrypted by default",
        recommendation="Enable default EBS encryption for all new volumes",
        applies_to=("ebs", "ec2"),
        check=any_true("ebs_encryption", "encrypted"),
        fix=set_values(ebs_encryption=True, encrypted=True),
        fields=("ebs_encryption", "encrypted"),
    ),
]

TAGGING_RULES: List[Rule] = [
    Rule(
        id="tag-001",
        category=Category.COMPLIANCE,
        severity=Severity.MEDIUM,
        title="Mandatory Tags Present",
        description="All resources should have mandatory tags",
        recommendation="Include Environment, ManagedBy, Project, and Owner tags on all resources",
        applies_to=("vpc", "eks", "rds", "s3"),
        check=check_mandatory_tags,
        fix=fix_mandatory_tags,
        fields=("tags",),
    ),
    Rule(
        id="tag-002",
        category=Category.COMPLIANCE,
        severity=Severity.LOW,
        title="Cost Allocation Tags",
        description="Resources should include cost allocation tags",
        recommendation="Add CostCenter and Team tags for cost tracking",
        applies_to=("vpc", "eks", "rds", "s3"),
        check=check_cost_allocation_tags,
        fields=("tags",),
    ),
]

COST_RULES: List[Rule] = [
    Rule(
        id="cost-001",
        category=Category.COST,
        severity=Severity.MEDIUM,
        title="Enable S3 Lifecycle Policies",
        description="S3 buckets should have lifecycle policies to optimize storage costs",
        recommendation="Configure lifecycle rules to transition old objects to cheaper storage classes",
        applies_to=("s3",),
        check=all_true("enable_lifecycle_rules"),
        fix=set_values(
            enable_lifecycle_rules=True,
            transition_to_ia_days=30,
            transition_to_glacier_days=90,
            expiration_days=365,
        ),
        fields=("enable_lifecycle_rules",),
    ),
    Rule(
        id="cost-002",
        category=Category.COST,
        severity=Severity.LOW,
        title="Use Single NAT Gateway for Non-Production",
        description="Non-production environments can use a single NAT gateway to reduce costs",
        recommendation="Use single_nat_gateway = true for development/staging environments",
        applies_to=("vpc",),
        check=check_single_nat_gateway,
        fix=fix_single_nat_gateway,
        fields=("single_nat_gateway", "environment"),
    ),
    Rule(
        id="cost-003",
        category=Category.COST,
        severity=Severity.MEDIUM,
        title="Use Spot Instances for EKS Node Groups",
        description="Consider using Spot instances for non-production EKS workloads",
        recommendation='Set capacity_type = "SPOT" for development environments to reduce costs by up to 90%',
        applies_to=("eks",),
        check=check_spot_capacity,
        fields=("node_capacity_type", "environment"),
    ),
    Rule(
        id="cost-004",
        category=Category.COST,
        severity=Severity.LOW,
        title="Enable RDS Storage Autoscaling",
        description="RDS should use storage autoscaling to optimize costs",
        recommendation="Set max_allocated_storage to enable storage autoscaling",
        applies_to=("rds",),
        check=check_storage_autoscaling,
        fields=("max_allocated_storage", "db_allocated_storage"),
    ),
    Rule(
        id="cost-005",
        category=Category.COST,
        severity=Severity.MEDIUM,
        title="Clean Up Incomplete Multipart Uploads",
        description="S3 should automatically clean up incomplete multipart uploads",
        recommendation="Add lifecycle rule to abort incomplete uploads after 7 days",
        applies_to=("s3",),
        check=check_multipart_cleanup,
        fix=set_values(enable_lifecycle_rules=True, abort_incomplete_multipart_days=7),
        fields=("abort_incomplete_multipart_days",),
    ),
    Rule(
        id="cost-006",
        category=Category.COST,
        severity=Severity.MEDIUM,
        title="Use Reserved Capacity for Production",
        description="Production workloads should consider reserved capacity",
        recommendation="Use Reserved Instances or Savings Plans for predictable production workloads",
        applies_to=("ec2", "rds", "eks"),
        check=check_reserved_capacity,
        fields=("reserved_capacity", "savings_plan"),
    ),
    Rule(
        id="cost-007",
        category=Category.COST,
        severity=Severity.LOW,
        title="Enable Intelligent Tiering for S3",
        description="S3 buckets should use Intelligent-Tiering for cost optimization",
        recommendation="Enable S3 Intelligent-Tiering to automatically move data to cheaper tiers",
        applies_to=("s3",),
        check=all_true("intelligent_tiering"),
        fix=set_values(intelligent_tiering=True),
        fields=("intelligent_tiering",),
    ),
    Rule(
        id="cost-008",
        category=Category.COST,
        severity=Severity.MEDIUM,
        title="Right-Size EKS Node Groups",
        description="EKS node groups should have appropriate min/max/desired counts",
        recommendation="Set min, max, and desired node counts to avoid over-provisioning",
        applies_to=("eks",),
        check=check_node_group_sizing,
        fields=("node_min_size", "node_max_size"),
    ),
    Rule(
        id="cost-009",
        category=Category.COST,
        severity=Severity.LOW,
        title="Set Budget Alerts for Cost Thresholds",
        description="AWS Budget alerts should be configured for cost monitoring",
        recommendation="Set up AWS Budgets with alerts at 80% and 100% of expected spend",
        applies_to=("account", "budget"),
        check=all_true("enable_budget_alerts"),
        fix=set_values(enable_budget_alerts=True),
        fields=("enable_budget_alerts",),
    ),
]

RELIABILITY_RULES: List[Rule] = [
    Rule(
        id="rel-001",
        category=Category.RELIABILITY,
        severity=Severity.HIGH,
        title="Enable Multi-AZ for Production RDS",
        description="Production databases should be deployed across multiple availability zones",
        recommendation="Enable multi_az = true for production RDS instances",
        applies_to=("rds",),
        check=check_multi_az,
        fix=fix_multi_az,
        fields=("enable_multi_az", "environment"),
    ),
    Rule(
        id="rel-002",
        category=Category.RELIABILITY,
        severity=Severity.HIGH,
        title="Enable RDS Automated Backups",
        description="RDS should have automated backups with sufficient retention",
        recommendation="Set backup retention to at least 7 days for production",
        applies_to=("rds",),
        check=check_backup_retention,
        fix=fix_backup_retention,
        fields=("backup_retention_days",),
    ),
    Rule(
        id="rel-003",
        category=Category.RELIABILITY,
        severity=Severity.MEDIUM,
        title="Deploy EKS Across Multiple AZs",
        description="EKS should be deployed across at least 2 availability zones",
        recommendation="Use at least 2 private subnets in different AZs",
        applies_to=("eks",),
        check=check_multi_az_subnets,
        fields=("private_subnet_count",),
    ),
    Rule(
        id="rel-004",
        category=Category.RELIABILITY,
        severity=Severity.MEDIUM,
        title="Enable Auto Minor Version Upgrades",
        description="Enable automatic minor version upgrades for security patches",
        recommendation="Set auto_minor_version_upgrade = true for RDS",
        applies_to=("rds",),
        check=all_true("auto_minor_version_upgrade"),
        fix=set_values(auto_minor_version_upgrade=True),
        fields=("auto_minor_version_upgrade",),
    ),
    Rule(
        id="rel-005",
        category=Category.RELIABILITY,
        severity=Severity.HIGH,
        title="Configure Health Checks for ALB Target Groups",
        description="ALB target groups should have health checks configured",
        recommendation="Configure health check path, interval, and thresholds for target groups",
        applies_to=("alb", "target_group"),
        check=check_health_check,
        fix=fix_health_check,
        fields=("health_check_path",),
    ),
    Rule(
        id="rel-006",
        category=Category.RELIABILITY,
        severity=Severity.MEDIUM,
        title="Set Termination Protection on Production Instances",
        description="Production instances should have termination protection enabled",
        recommendation="Enable termination protection to prevent accidental instance termination",
        applies_to=("ec2", "rds"),
        check=check_termination_protection,
        fix=fix_termination_protection,
        fields=("disable_api_termination", "deletion_protection"),
    ),
    Rule(
        id="rel-007",
        category=Category.RELIABILITY,
        severity=Severity.MEDIUM,
        title="Enable Cross-Region Backup for Production RDS",
        description="Production RDS instances should have cross-region backups",
        recommendation="Enable cross-region automated backups for disaster recovery",
        applies_to=("rds",),
        check=check_cross_region_backup,
        fields=("enable_cross_region_backup", "environment"),
    ),
    Rule(
        id="rel-008",
        category=Category.RELIABILITY,
        severity=Severity.MEDIUM,
        title="Configure Pod Disruption Budgets",
        description="Kubernetes deployments should have Pod Disruption Budgets",
        recommendation="Set PodDisruptionBudget to ensure minimum availability during disruptions",
        applies_to=("eks", "kubernetes", "deployment"),
        check=check_pod_disruption_budget,
        fields=("pod_disruption_budget",),
    ),
]

PERFORMANCE_RULES: List[Rule] = [
    Rule(
        id="perf-001",
        category=Category.PERFORMANCE,
        severity=Severity.MEDIUM,
        title="Enable RDS Performance Insights",
        description="Enable Performance Insights for database performance monitoring",
        recommendation="Enable performance_insights for RDS instances",
        applies_to=("rds",),
        check=all_true("enable_performance_insights"),
        fix=set_values(enable_performance_insights=True, performance_insights_retention=7),
        fields=("enable_performance_insights",),
    ),
    Rule(
        id="perf-002",
        category=Category.PERFORMANCE,
        severity=Severity.LOW,
        title="Use GP3 Storage for RDS",
        description="Use gp3 storage type for better price-performance ratio",
        recommendation='Set storage_type = "gp3" for RDS instances',
        applies_to=("rds",),
        check=check_gp3_storage,
        fix=fix_gp3_storage,
        fields=("db_storage_type",),
    ),
]

NETWORKING_RULES: List[Rule] = [
    Rule(
        id="net-001",
        category=Category.SECURITY,
        severity=Severity.HIGH,
        title="Use Private Subnets for Application Workloads",
        description="Application workloads should be deployed in private subnets",
        recommendation="Deploy application servers, databases, and backend services in private subnets",
        applies_to=("vpc", "subnet", "eks", "rds"),
        check=check_private_subnets,
        fix=set_values(use_private_subnets=True, publicly_accessible=False),
        fields=("use_private_subnets", "publicly_accessible"),
    ),
    Rule(
        id="net-002",
        category=Category.SECURITY,
        severity=Severity.CRITICAL,
        title="Restrict Security Group CIDR Ranges",
        description="Security groups should not allow 0.0.0.0/0 ingress",
        recommendation="Restrict security group ingress rules to specific CIDR ranges",
        applies_to=("security_group", "vpc"),
        check=check_ingress_cidrs,
        fields=("ingress_rules",),
    ),
    Rule(
        id="net-003",
        category=Category.SECURITY,
        severity=Severity.LOW,
        title="Use Network ACLs as Additional Defense",
        description="Network ACLs provide an additional layer of security",
        recommendation="Configure Network ACLs in addition to security groups for defense in depth",
        applies_to=("vpc", "subnet"),
        check=all_true("enable_network_acls"),
        fields=("enable_network_acls",),
    ),
    Rule(
        id="net-004",
        category=Category.SECURITY,
        severity=Severity.MEDIUM,
        title="Enable DNS Hostnames and Resolution in VPC",
        description="VPCs should have DNS hostnames and resolution enabled",
        recommendation="Enable enable_dns_hostnames and enable_dns_support in VPC",
        applies_to=("vpc",),
        check=all_true("enable_dns_hostnames", "enable_dns_support"),
        fix=set_values(enable_dns_hostnames=True, enable_dns_support=True),
        fields=("enable_dns_hostnames", "enable_dns_support"),
    ),
    Rule(
        id="net-005",
        category=Category.SECURITY,
        severity=Severity.MEDIUM,
        title="Use VPC Endpoints for AWS Service Access",
        description="Use VPC endpoints to access AWS services without internet gateway",
        recommendation="Create VPC endpoints for S3, DynamoDB, and other frequently accessed services",
        applies_to=("vpc",),
        check=all_true("enable_vpc_endpoints"),
        fix=set_values(enable_vpc_endpoints=True),
        fields=("enable_vpc_endpoints",),
    ),
]

COMPLIANCE_RULES: List[Rule] = [
    Rule(
        id="comp-001",
        category=Category.COMPLIANCE,
        severity=Severity.MEDIUM,
        title="Enable Access Logging for S3",
        description="S3 buckets should have access logging enabled",
        recommendation="Enable server access logging for S3 buckets to track requests",
        applies_to=("s3",),
        check=all_true("enable_access_logging"),
        fix=set_values(enable_access_logging=True),
        fields=("enable_access_logging",),
    ),
    Rule(
        id="comp-002",
        category=Category.COMPLIANCE,
        severity=Severity.MEDIUM,
        title="Enable Audit Logging for RDS",
        description="RDS instances should have audit logging enabled",
        recommendation="Enable audit logging for database activity tracking",
        applies_to=("rds",),
        check=all_true("enable_audit_logging"),
        fix=set_values(enable_audit_logging=True),
        fields=("enable_audit_logging",),
    ),
    Rule(
        id="comp-003",
        category=Category.COMPLIANCE,
        severity=Severity.MEDIUM,
        title="Retain CloudWatch Logs for 90+ Days",
        description="CloudWatch log groups should retain logs for at least 90 days",
        recommendation="Set CloudWatch log retention to at least 90 days for compliance",
        applies_to=("cloudwatch", "eks", "rds", "vpc"),
        check=check_log_retention,
        fix=fix_log_retention,
        fields=("log_retention_days",),
    ),
    Rule(
        id="comp-004",
        category=Category.COMPLIANCE,
        severity=Severity.LOW,
        title="Tag Resources with Compliance Framework",
        description="All resources should be tagged with compliance framework identifier",
        recommendation="Add a ComplianceFramework tag (e.g., SOC2, HIPAA, PCI-DSS) to all resources",
        applies_to=("vpc", "eks", "rds", "s3", "ec2"),
        check=check_compliance_framework_tag,
        fields=("tags",),
    ),
    Rule(
        id="comp-005",
        category=Category.COMPLIANCE,
        severity=Severity.MEDIUM,
        title="Enable Config Recording for Drift Detection",
        description="AWS Config should be enabled to record resource configurations",
        recommendation="Enable AWS Config recording for drift detection and compliance auditing",
        applies_to=("account", "config"),
        check=all_true("enable_config_recording"),
        fix=set_values(enable_config_recording=True),
        fields=("enable_config_recording",),
    ),
]


def builtin_rules() -> List[Rule]:
    """Return the built-in rule set in registration order."""
    return [
        *SECURITY_RULES,
        *TAGGING_RULES,
        *COST_RULES,
        *RELIABILITY_RULES,
        *PERFORMANCE_RULES,
        *NETWORKING_RULES,
        *COMPLIANCE_RULES,
    ]


__all__ = [
    "Category",
    "Severity",
    "Rule",
    "Config",
    "ConfigValue",
    "CheckFn",
    "FixFn",
    "all_true",
    "any_true",
    "set_values",
    "builtin_rules",
    "MANDATORY_TAGS",
]
