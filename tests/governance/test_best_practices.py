import logging

import pytest
from nimbus_policy.core.governance.analyzer import (
    BestPracticesAnalyzer,
    get_compliance_score,
    get_security_score,
)
from nimbus_policy.core.governance.registry import RuleRegistry
from nimbus_policy.core.governance.rules import Category, Rule, Severity, all_true


def _widget_registry(count, severity=Severity.HIGH):
    rules = [
        Rule(
            id=f"wid-{i:03d}",
            category=Category.RELIABILITY,
            severity=severity,
            title=f"Flag k{i} enabled",
            description=f"k{i} is not enabled",
            recommendation=f"Enable k{i}",
            applies_to=("widget",),
            check=all_true(f"k{i}"),
            fields=(f"k{i}",),
        )
        for i in range(count)
    ]
    return RuleRegistry(rules=rules, include_builtin=False)


def test_unencrypted_rds_is_critical():
    analyzer = BestPracticesAnalyzer(RuleRegistry())
    report = analyzer.analyze("rds", {"storage_encrypted": False, "environment": "production"})

    violations = report.violations_for("sec-001")
    assert len(violations) == 1
    assert violations[0].severity == Severity.CRITICAL
    assert violations[0].component == "rds"
    assert violations[0].field == "storage_encrypted"
    assert violations[0].value is False
    assert violations[0].can_autofix


def test_missing_keys_fail_closed_for_security_booleans():
    analyzer = BestPracticesAnalyzer(RuleRegistry())
    report = analyzer.analyze("rds", {})
    assert report.violations_for("sec-001")
    assert report.violations_for("sec-005")


def test_missing_ingress_rules_fail_open():
    analyzer = BestPracticesAnalyzer(RuleRegistry())
    report = analyzer.analyze("security_group", {})
    assert report.violations_for("sec-013") == []
    assert report.violations_for("net-002") == []


def test_open_ssh_ingress_flagged():
    analyzer = BestPracticesAnalyzer(RuleRegistry())
    report = analyzer.analyze(
        "security_group",
        {"ingress_rules": [{"port": 22, "cidr": "0.0.0.0/0"}]},
    )
    assert report.violations_for("sec-013")
    assert report.violations_for("net-002")


def test_every_builtin_component_tolerates_empty_config():
    registry = RuleRegistry()
    analyzer = BestPracticesAnalyzer(registry)
    components = {c for rule in registry.list_rules() for c in rule.applies_to}
    for component in components:
        report = analyzer.analyze(component, {})
        assert report.summary.total_rules_checked == len(registry.rules_for_component(component))


def test_category_and_severity_filters():
    analyzer = BestPracticesAnalyzer(RuleRegistry())
    report = analyzer.analyze("rds", {}, categories=["security"], severities=["critical"])
    # sec-001 and sec-005 are the only critical security rules for rds
    assert report.summary.total_rules_checked == 2
    assert {v.rule_id for v in report.violations} == {"sec-001", "sec-005"}


def test_category_filter_restricts_violations():
    analyzer = BestPracticesAnalyzer(RuleRegistry())
    report = analyzer.analyze("vpc", {}, categories=[Category.SECURITY])
    assert report.violations
    assert all(v.category == Category.SECURITY for v in report.violations)


def test_unknown_component_has_nothing_to_check():
    analyzer = BestPracticesAnalyzer(RuleRegistry())
    report = analyzer.analyze("mainframe", {"anything": 1})
    assert report.summary.total_rules_checked == 0
    assert report.passed
    assert get_compliance_score(report) == 100


def test_summary_counts():
    analyzer = BestPracticesAnalyzer(_widget_registry(3))
    report = analyzer.analyze("widget", {"k0": True})

    assert report.summary.total_rules_checked == 3
    assert report.summary.violations_found == 2
    assert report.summary.violations_by_severity["high"] == 2
    assert report.summary.violations_by_category["reliability"] == 2
    assert report.summary.autofixable_violations == 0
    assert report.recommendations == ("Enable k1", "Enable k2")


def test_violations_follow_registration_order():
    analyzer = BestPracticesAnalyzer(_widget_registry(4))
    report = analyzer.analyze("widget", {})
    assert [v.rule_id for v in report.violations] == ["wid-000", "wid-001", "wid-002", "wid-003"]


def test_recommendations_deduplicated():
    rules = [
        Rule(
            id=f"dup-{i}",
            category=Category.COST,
            severity=Severity.LOW,
            title="t",
            description="d",
            recommendation="Same advice",
            applies_to=("widget",),
            check=all_true(f"k{i}"),
        )
        for i in range(3)
    ]
    analyzer = BestPracticesAnalyzer(RuleRegistry(rules=rules, include_builtin=False))
    report = analyzer.analyze("widget", {})
    assert report.recommendations == ("Same advice",)


def test_raising_predicate_counts_as_violation(caplog):
    def boom(config):
        raise RuntimeError("broken predicate")

    rule = Rule(
        id="boom-001",
        category=Category.SECURITY,
        severity=Severity.MEDIUM,
        title="Broken",
        description="Broken check",
        recommendation="Fix the check",
        applies_to=("widget",),
        check=boom,
    )
    analyzer = BestPracticesAnalyzer(RuleRegistry(rules=[rule], include_builtin=False))
    with caplog.at_level(logging.ERROR):
        report = analyzer.analyze("widget", {})
    assert report.violations_for("boom-001")
    assert "boom-001" in caplog.text


def test_compliant_report_scores_100():
    analyzer = BestPracticesAnalyzer(_widget_registry(1))
    report = analyzer.analyze("widget", {"k0": True})
    assert report.summary.total_rules_checked == 1
    assert report.passed
    assert get_compliance_score(report) == 100


def test_score_weights():
    analyzer = BestPracticesAnalyzer(_widget_registry(2, severity=Severity.HIGH))
    report = analyzer.analyze("widget", {})
    # two high violations at 15 each
    assert get_compliance_score(report) == 70


def test_score_is_floored_at_zero():
    analyzer = BestPracticesAnalyzer(_widget_registry(7, severity=Severity.CRITICAL))
    report = analyzer.analyze("widget", {})
    assert get_compliance_score(report) == 0


def test_score_never_increases_with_more_violations():
    analyzer = BestPracticesAnalyzer(_widget_registry(6))
    config = {f"k{i}": True for i in range(6)}
    scores = []
    for i in range(6):
        config[f"k{i}"] = False
        scores.append(get_compliance_score(analyzer.analyze("widget", config)))
    assert scores == sorted(scores, reverse=True)
    assert all(0 <= s <= 100 for s in scores)


def test_security_score_ignores_other_categories():
    analyzer = BestPracticesAnalyzer(_widget_registry(2))
    report = analyzer.analyze("widget", {})
    assert get_security_score(report) == 100
    assert get_compliance_score(report) < 100


def test_analyze_all_aggregates_components():
    registry = RuleRegistry()
    analyzer = BestPracticesAnalyzer(registry)
    report = analyzer.analyze_all(
        [
            {"component": "vpc", "config": {"enable_flow_logs": True}},
            {"component": "rds", "config": {"storage_encrypted": True}},
        ]
    )
    vpc = analyzer.analyze("vpc", {"enable_flow_logs": True})
    rds = analyzer.analyze("rds", {"storage_encrypted": True})

    assert report.summary.total_rules_checked == (
        vpc.summary.total_rules_checked + rds.summary.total_rules_checked
    )
    assert report.summary.violations_found == len(vpc.violations) + len(rds.violations)
    assert [c.component for c in report.components] == ["vpc", "rds"]
    assert {v.component for v in report.violations} == {"vpc", "rds"}
    assert report.violations_for("sec-002") == []
    assert report.violations_for("sec-001") == []


@pytest.mark.parametrize("severity", ["low", "medium", "high", "critical"])
def test_single_violation_weight(severity):
    weights = {"low": 3, "medium": 8, "high": 15, "critical": 25}
    analyzer = BestPracticesAnalyzer(_widget_registry(1, severity=Severity(severity)))
    report = analyzer.analyze("widget", {})
    assert get_compliance_score(report) == 100 - weights[severity]


def test_violation_names_the_key_that_failed():
    analyzer = BestPracticesAnalyzer(RuleRegistry())
    report = analyzer.analyze(
        "s3",
        {
            "block_public_acls": True,
            "block_public_policy": True,
            "ignore_public_acls": False,
            "restrict_public_buckets": True,
        },
    )
    violation = report.violations_for("sec-003")[0]
    assert violation.field == "ignore_public_acls"
    assert violation.value is False


def test_multi_key_custom_check_reports_no_field():
    analyzer = BestPracticesAnalyzer(RuleRegistry())
    report = analyzer.analyze("rds", {"environment": "production"})
    # rel-001 reads enable_multi_az and environment through a custom check
    violation = report.violations_for("rel-001")[0]
    assert violation.field is None
    assert violation.value is None


def test_report_collections_are_read_only():
    analyzer = BestPracticesAnalyzer(RuleRegistry())
    report = analyzer.analyze("rds", {})
    assert isinstance(report.violations, tuple)
    assert isinstance(report.recommendations, tuple)
    with pytest.raises(AttributeError):
        report.violations.clear()
    assert report.summary.violations_found == len(report.violations)
