import logging

import pytest
from nimbus_policy.core.errors import PolicyLoadError
from nimbus_policy.core.governance.rules import Severity
from nimbus_policy.core.governance.safety_policy import (
    SafetyPolicy,
    SafetyRule,
    default_policy_path,
    default_safety_policy,
    load_safety_policy,
    parse_safety_config,
    validate_safety_policy,
)


def _write(tmp_path, text, name="config.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_default_policy_contains_required_entries():
    policy = default_safety_policy()
    assert {"destroy", "delete", "terminate"} <= set(policy.always_require_approval)
    assert {"production", "prod"} <= set(policy.protected_environments)
    assert {"plan", "validate", "show", "list", "get", "describe"} <= set(policy.skip_safety_for)
    assert policy.cost_threshold == 500


def test_default_policy_validates_cleanly():
    result = validate_safety_policy(default_safety_policy())
    assert result["valid"]
    assert result["errors"] == []
    assert result["warnings"] == []


def test_missing_file_yields_defaults(tmp_path):
    policy = load_safety_policy(tmp_path / "nope.yaml")
    assert policy == SafetyPolicy()


def test_conventional_location_used(tmp_path):
    (tmp_path / ".nimbus").mkdir()
    _write(tmp_path / ".nimbus", "safety:\n  costThreshold: 42\n")
    assert default_policy_path() == tmp_path / ".nimbus" / "config.yaml"
    assert load_safety_policy().cost_threshold == 42


def test_env_var_overrides_location(tmp_path, monkeypatch):
    path = _write(tmp_path, "safety:\n  costThreshold: 7\n", name="elsewhere.yaml")
    monkeypatch.setenv("NIMBUS_SAFETY_POLICY", str(path))
    assert default_policy_path() == path
    assert load_safety_policy().cost_threshold == 7


def test_section_replaces_defaults_wholesale(tmp_path):
    path = _write(tmp_path, "safety:\n  protectedEnvironments:\n    - staging\n")
    policy = load_safety_policy(path)

    assert policy.protected_environments == ("staging",)
    # untouched sections keep their defaults
    assert policy.always_require_approval == SafetyPolicy().always_require_approval
    assert policy.skip_safety_for == SafetyPolicy().skip_safety_for
    assert policy.cost_threshold == 500


def test_flat_document_accepted(tmp_path):
    path = _write(tmp_path, "costThreshold: 1000\nskipSafetyFor: [plan]\n")
    policy = load_safety_policy(path)
    assert policy.cost_threshold == 1000
    assert policy.skip_safety_for == ("plan",)


def test_snake_case_keys_accepted(tmp_path):
    path = _write(tmp_path, "safety:\n  always_require_approval: [destroy]\n")
    assert load_safety_policy(path).always_require_approval == ("destroy",)


def test_require_approval_false_clears_list(tmp_path):
    path = _write(tmp_path, "safety:\n  requireApproval: false\n")
    assert load_safety_policy(path).always_require_approval == ()


def test_explicit_list_wins_over_require_approval_flag():
    overrides = parse_safety_config(
        "safety:\n  requireApproval: false\n  alwaysRequireApproval: [destroy]\n"
    )
    assert overrides == {"always_require_approval": ["destroy"]}


def test_document_without_safety_section(tmp_path):
    path = _write(tmp_path, "project:\n  name: demo\n")
    assert parse_safety_config(path.read_text()) is None
    assert load_safety_policy(path) == SafetyPolicy()


def test_invalid_yaml_degrades_to_defaults(tmp_path, caplog):
    path = _write(tmp_path, "safety: [unclosed\n")
    with caplog.at_level(logging.WARNING):
        policy = load_safety_policy(path)
    assert policy == SafetyPolicy()
    assert "Could not load safety policy" in caplog.text


def test_wrong_shape_degrades_to_defaults(tmp_path):
    assert load_safety_policy(_write(tmp_path, "safety: [a, b]\n")) == SafetyPolicy()
    assert load_safety_policy(_write(tmp_path, "- just\n- a list\n", name="list.yaml")) == SafetyPolicy()


def test_wrong_value_type_degrades_to_defaults(tmp_path):
    path = _write(tmp_path, "safety:\n  costThreshold: lots\n")
    assert load_safety_policy(path) == SafetyPolicy()


def test_parse_rejects_invalid_yaml():
    with pytest.raises(PolicyLoadError):
        parse_safety_config("safety: [unclosed\n")


def test_empty_document_has_no_overrides():
    assert parse_safety_config("") is None


def test_policy_matching_helpers():
    policy = SafetyPolicy()
    assert policy.approval_operation("terraform DESTROY") == "destroy"
    assert policy.approval_operation("helm rollback") is None
    assert policy.protected_environment("Production-EU") == "production"
    assert policy.protected_environment(None) is None
    assert policy.skipped_operation("kubectl get pods") == "get"
    # whole words only
    assert policy.skipped_operation("terraform destroy -target=module.db") is None
    assert policy.exceeds_cost(500.01)
    assert not policy.exceeds_cost(500)
    assert not policy.exceeds_cost(None)


def test_aliases_and_field_names_both_accepted():
    by_alias = SafetyPolicy(costThreshold=10, protectedEnvironments=["prod"])
    by_name = SafetyPolicy(cost_threshold=10, protected_environments=["prod"])
    assert by_alias == by_name


def test_with_custom_rules_returns_copy():
    rule = SafetyRule(
        id="no-friday",
        name="No Friday deploys",
        description="Deployments on Fridays need approval",
        severity=Severity.HIGH,
        check=lambda ctx: ctx.metadata.get("weekday") == "friday",
        message="Friday deployment",
    )
    base = SafetyPolicy()
    extended = base.with_custom_rules(rule)
    assert base.custom_rules == ()
    assert extended.custom_rules == (rule,)
    assert rule.forces_approval


def test_validate_reports_errors_and_warnings():
    policy = SafetyPolicy(
        protected_environments=["staging"],
        skip_safety_for=["plan", "destroy"],
        cost_threshold=-1,
    )
    result = validate_safety_policy(policy)
    assert not result["valid"]
    assert any("costThreshold" in e for e in result["errors"])
    assert any("protectedEnvironments" in w for w in result["warnings"])
    assert any("destroy" in w for w in result["warnings"])


def test_validate_rejects_duplicate_custom_rule_ids():
    rule = SafetyRule(
        id="dup",
        name="dup",
        description="dup",
        severity=Severity.LOW,
        check=lambda ctx: False,
        message="dup",
    )
    result = validate_safety_policy(SafetyPolicy().with_custom_rules(rule, rule))
    assert not result["valid"]
    assert any("dup" in e for e in result["errors"])
