import logging

import pytest

from nimbus_policy.core.governance.analyzer import BestPracticesAnalyzer
from nimbus_policy.core.governance.autofix import AutofixEngine
from nimbus_policy.core.governance.registry import RuleRegistry
from nimbus_policy.core.governance.reports import AnalysisReport
from nimbus_policy.core.governance.rules import Category, Rule, Severity, set_values


def _engine(registry=None):
    return AutofixEngine(BestPracticesAnalyzer(registry or RuleRegistry()))


def test_autofix_rds_encryption_and_public_access():
    engine = _engine()
    config = {"storage_encrypted": False, "publicly_accessible": True}
    result = engine.autofix("rds", config)

    assert result.fixed_config["storage_encrypted"] is True
    assert result.fixed_config["publicly_accessible"] is False
    assert "sec-001" in result.applied_fixes
    assert "sec-005" in result.applied_fixes
    assert isinstance(result.violations_remaining, AnalysisReport)
    assert result.violations_remaining.violations_for("sec-001") == []
    assert result.violations_remaining.violations_for("sec-005") == []


def test_autofix_does_not_mutate_input():
    engine = _engine()
    config = {"storage_encrypted": False, "tags": {"Environment": "dev"}}
    engine.autofix("rds", config)
    assert config == {"storage_encrypted": False, "tags": {"Environment": "dev"}}


def test_autofix_is_deterministic():
    engine = _engine()
    config = {"storage_encrypted": False, "environment": "production"}
    assert engine.autofix("rds", config).fixed_config == engine.autofix("rds", config).fixed_config


def test_autofix_converges():
    engine = _engine()
    first = engine.autofix("rds", {"environment": "production"})
    second = engine.autofix("rds", first.fixed_config)
    assert second.fixed_config == first.fixed_config
    assert second.applied_fixes == ()


def test_only_unfixable_violations_remain():
    engine = _engine()
    result = engine.autofix("rds", {"environment": "production"})
    remaining = result.violations_remaining.violations
    assert remaining
    assert all(not v.can_autofix for v in remaining)


def test_compliant_rule_is_not_refixed():
    engine = _engine()
    result = engine.autofix("rds", {"storage_encrypted": True})
    assert "sec-001" not in result.applied_fixes


def test_rule_ids_restrict_fixes():
    engine = _engine()
    config = {"storage_encrypted": False, "publicly_accessible": True}
    result = engine.autofix("rds", config, rule_ids=["sec-005"])

    assert result.applied_fixes == ("sec-005",)
    assert result.fixed_config["storage_encrypted"] is False
    # remaining violations are an unfiltered analysis
    assert result.violations_remaining.violations_for("sec-001")


def test_targeted_rule_without_fix_is_skipped():
    engine = _engine()
    result = engine.autofix("rds", {}, rule_ids=["cost-004"])
    assert result.applied_fixes == ()
    assert result.fixed_config == {}


def test_category_filter_limits_fixes():
    engine = _engine()
    result = engine.autofix("rds", {}, categories=["performance"])
    assert result.applied_fixes
    assert all(rule_id.startswith("perf-") for rule_id in result.applied_fixes)


def test_fixes_see_earlier_fixes():
    first = Rule(
        id="chain-001",
        category=Category.RELIABILITY,
        severity=Severity.HIGH,
        title="x set",
        description="x is not set",
        recommendation="Set x",
        applies_to=("widget",),
        check=lambda config: config.get("x") == 1,
        fix=set_values(x=1),
    )
    second = Rule(
        id="chain-002",
        category=Category.RELIABILITY,
        severity=Severity.HIGH,
        title="y derived from x",
        description="y is not derived",
        recommendation="Derive y",
        applies_to=("widget",),
        check=lambda config: config.get("y") == 2,
        fix=lambda config: {**config, "y": config.get("x", 0) + 1},
    )
    registry = RuleRegistry(rules=[first, second], include_builtin=False)
    result = _engine(registry).autofix("widget", {})

    assert result.applied_fixes == ("chain-001", "chain-002")
    assert result.fixed_config == {"x": 1, "y": 2}
    assert result.violations_remaining.passed


def test_raising_fix_is_skipped(caplog):
    def broken_fix(config):
        raise RuntimeError("cannot fix")

    broken = Rule(
        id="broken-001",
        category=Category.COST,
        severity=Severity.LOW,
        title="Broken fix",
        description="d",
        recommendation="r",
        applies_to=("widget",),
        check=lambda config: config.get("ok") is True,
        fix=broken_fix,
    )
    working = Rule(
        id="working-001",
        category=Category.COST,
        severity=Severity.LOW,
        title="Working fix",
        description="d",
        recommendation="r",
        applies_to=("widget",),
        check=lambda config: config.get("other") is True,
        fix=set_values(other=True),
    )
    registry = RuleRegistry(rules=[broken, working], include_builtin=False)
    with caplog.at_level(logging.ERROR):
        result = _engine(registry).autofix("widget", {})

    assert result.applied_fixes == ("working-001",)
    assert result.fixed_config == {"other": True}
    assert result.violations_remaining.violations_for("broken-001")
    assert "broken-001" in caplog.text


def test_mandatory_tags_preserve_existing_values():
    engine = _engine()
    result = engine.autofix("s3", {"tags": {"Environment": "staging"}}, rule_ids=["tag-001"])
    assert result.applied_fixes == ("tag-001",)
    assert result.fixed_config["tags"]["Environment"] == "staging"
    assert {"ManagedBy", "Project"} <= set(result.fixed_config["tags"])


def test_internal_flag_must_be_true_to_skip_waf():
    engine = _engine()
    result = engine.autofix("alb", {"internal": "yes"}, rule_ids=["sec-014"])
    assert result.applied_fixes == ("sec-014",)
    assert result.fixed_config["enable_waf"] is True
    assert result.violations_remaining.violations_for("sec-014") == []


def test_result_is_read_only():
    engine = _engine()
    result = engine.autofix("rds", {"storage_encrypted": False})
    assert isinstance(result.applied_fixes, tuple)
    with pytest.raises(TypeError):
        result.fixed_config["storage_encrypted"] = False
    dumped = result.model_dump()["fixed_config"]
    assert isinstance(dumped, dict)
    assert dumped["storage_encrypted"] is True
