import pytest
from nimbus_policy.core.errors import DuplicateRuleError
from nimbus_policy.core.governance.registry import RuleRegistry
from nimbus_policy.core.governance.rules import Category, Rule, Severity, all_true, builtin_rules


def _widget_rule(rule_id="wid-001", severity=Severity.HIGH):
    return Rule(
        id=rule_id,
        category=Category.RELIABILITY,
        severity=severity,
        title="Widget must be enabled",
        description="Widget is disabled",
        recommendation="Enable the widget",
        applies_to=("widget",),
        check=all_true("enabled"),
    )


def test_builtin_rules_registered():
    registry = RuleRegistry()
    assert len(registry) == len(builtin_rules())
    assert "sec-001" in registry
    assert registry.get_rule("sec-001").severity == Severity.CRITICAL


def test_builtin_rule_ids_unique():
    ids = [rule.id for rule in builtin_rules()]
    assert len(ids) == len(set(ids))


def test_empty_registry():
    registry = RuleRegistry(include_builtin=False)
    assert len(registry) == 0
    assert registry.list_rules() == []


def test_add_rule_appends_in_order():
    registry = RuleRegistry()
    rule = _widget_rule()
    registry.add_rule(rule)
    assert registry.list_rules()[-1] is rule


def test_duplicate_rule_rejected():
    registry = RuleRegistry()
    with pytest.raises(DuplicateRuleError) as exc:
        registry.add_rule(_widget_rule(rule_id="sec-001"))
    assert exc.value.rule_id == "sec-001"
    # still a KeyError for callers that only catch the builtin
    assert isinstance(exc.value, KeyError)


def test_remove_then_readd():
    registry = RuleRegistry()
    registry.remove_rule("sec-001")
    assert "sec-001" not in registry
    assert registry.get_rule("sec-001") is None

    registry.add_rule(_widget_rule(rule_id="sec-001"))
    assert "sec-001" in registry
    with pytest.raises(DuplicateRuleError):
        registry.add_rule(_widget_rule(rule_id="sec-001"))


def test_remove_unknown_rule_is_noop():
    registry = RuleRegistry()
    before = len(registry)
    registry.remove_rule("does-not-exist")
    assert len(registry) == before


def test_rules_for_component_keeps_registration_order():
    registry = RuleRegistry()
    order = [rule.id for rule in registry.list_rules()]
    rds_ids = [rule.id for rule in registry.rules_for_component("rds")]
    assert rds_ids
    assert [order.index(i) for i in rds_ids] == sorted(order.index(i) for i in rds_ids)
    assert registry.rules_for_component("unknown-component") == []


def test_rules_by_category():
    registry = RuleRegistry()
    cost_rules = registry.rules_by_category("cost")
    assert cost_rules
    assert all(rule.category == Category.COST for rule in cost_rules)
    # tagging rules are reported as compliance
    assert registry.get_rule("tag-001") in registry.rules_by_category(Category.COMPLIANCE)


def test_registries_are_independent():
    first = RuleRegistry()
    second = RuleRegistry()
    first.remove_rule("sec-001")
    assert "sec-001" in second


def test_extra_rules_registered_after_builtins():
    rule = _widget_rule()
    registry = RuleRegistry(rules=[rule])
    assert registry.list_rules()[-1] is rule


def test_rule_requires_id():
    with pytest.raises(ValueError):
        _widget_rule(rule_id="")


def test_rule_coerces_enum_strings():
    rule = Rule(
        id="wid-002",
        category="cost",
        severity="low",
        title="t",
        description="d",
        recommendation="r",
        applies_to=["widget"],
        check=all_true("enabled"),
    )
    assert rule.category is Category.COST
    assert rule.severity is Severity.LOW
    assert rule.applies_to == ("widget",)
    assert not rule.can_autofix
