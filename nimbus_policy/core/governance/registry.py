# nimbus_policy/core/governance/registry.py
"""
Rule registry - an ordered, mutable collection of best-practice rules.

Registration order is semantically significant: analysis reports list
violations, and autofix applies remediations, in the order rules were added.
Each registry is an independent instance; there is no module-level singleton.
"""

import logging
import threading
from typing import Dict, Iterable, Iterator, List, Optional, Union

from nimbus_policy.core.errors import DuplicateRuleError
from nimbus_policy.core.governance.rules import Category, Rule, builtin_rules

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Thread-safe ordered store of rules keyed by id."""

    def __init__(self, rules: Optional[Iterable[Rule]] = None, include_builtin: bool = True):
        """
        Args:
            rules: Extra rules registered after the built-in set.
            include_builtin: Pre-register the built-in rule set.
        """
        # dicts keep insertion order, which is the registration order
        self._rules: Dict[str, Rule] = {}
        self._lock = threading.RLock()

        if include_builtin:
            for rule in builtin_rules():
                self.add_rule(rule)
        for rule in rules or ():
            self.add_rule(rule)

        logger.info(f"Initialized RuleRegistry with {len(self._rules)} rules")

    def add_rule(self, rule: Rule) -> None:
        """Append a rule. Raises DuplicateRuleError if the id is taken."""
        with self._lock:
            if rule.id in self._rules:
                raise DuplicateRuleError(rule.id)
            self._rules[rule.id] = rule
        logger.debug(f"Added rule: {rule.id}")

    def remove_rule(self, rule_id: str) -> None:
        """Remove a rule by id. Unknown ids are ignored."""
        with self._lock:
            removed = self._rules.pop(rule_id, None)
        if removed is not None:
            logger.debug(f"Removed rule: {rule_id}")

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        with self._lock:
            return self._rules.get(rule_id)

    def list_rules(self) -> List[Rule]:
        """Snapshot of all rules in registration order."""
        with self._lock:
            return list(self._rules.values())

    def rules_for_component(self, component: str) -> List[Rule]:
        return [rule for rule in self.list_rules() if rule.applies(component)]

    def rules_by_category(self, category: Union[Category, str]) -> List[Rule]:
        category = Category(category)
        return [rule for rule in self.list_rules() if rule.category == category]

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        with self._lock:
            return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.list_rules())


__all__ = ["RuleRegistry"]
