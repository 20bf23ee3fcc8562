"""Protection rule model.

Name-based rules that keep system-managed objects out of a revert plan.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RuleType(Enum):
    """How a rule matches object names."""

    PREFIX = "prefix"
    LITERAL = "literal"
    REGEX = "regex"


@dataclass
class ProtectionRule:
    """Protection rule entity.

    Attributes:
        rule_id: Unique identifier for the rule
        rule_type: prefix, literal or regex matching
        patterns: Prefixes, literal names or regular expressions to match
        enabled: Disabled rules are ignored (default: True)
        priority: Evaluation order, 1 = highest (default: 100)
        description: Human-readable reason shown when the rule matches (optional)
    """

    rule_id: str
    rule_type: RuleType
    patterns: list[str] = field(default_factory=list)
    enabled: bool = True
    priority: int = 100
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.rule_type == RuleType.REGEX:
            try:
                self._compiled = [re.compile(pattern) for pattern in self.patterns]
            except re.error as e:
                raise ValueError(f"Rule {self.rule_id} has an invalid pattern: {e}") from e
        else:
            self._compiled = []

    def matches(self, name: str) -> bool:
        """Check whether an object name falls under this rule."""
        if self.rule_type == RuleType.PREFIX:
            return any(name.startswith(prefix) for prefix in self.patterns)
        elif self.rule_type == RuleType.LITERAL:
            return name in self.patterns
        elif self.rule_type == RuleType.REGEX:
            return any(regex.search(name) for regex in self._compiled)
        return False

    def matched_pattern(self, name: str) -> Optional[str]:
        """Return the first pattern that matches the name, if any."""
        if self.rule_type == RuleType.PREFIX:
            return next((p for p in self.patterns if name.startswith(p)), None)
        elif self.rule_type == RuleType.LITERAL:
            return name if name in self.patterns else None
        elif self.rule_type == RuleType.REGEX:
            return next((r.pattern for r in self._compiled if r.search(name)), None)
        return None

    def validate(self) -> bool:
        """Validate rule invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if not self.rule_id:
            raise ValueError("Rule requires a rule_id")

        if not self.patterns:
            raise ValueError(f"Rule {self.rule_id} has no patterns")

        if self.priority < 1:
            raise ValueError("Priority must be >= 1")

        return True


def default_namespace_rules(
    prefixes: Optional[list[str]] = None,
    names: Optional[list[str]] = None,
) -> list[ProtectionRule]:
    """Build the rules that protect system namespaces.

    Defaults cover kube-*, openshift, openshift-*, openshift*, default and
    redhat-operators.
    """
    prefixes = ["kube-", "openshift"] if prefixes is None else prefixes
    names = ["default", "redhat-operators"] if names is None else names

    rules = []
    if prefixes:
        rules.append(
            ProtectionRule(
                rule_id="system-namespace-prefix",
                rule_type=RuleType.PREFIX,
                patterns=list(prefixes),
                priority=1,
            )
        )
    if names:
        rules.append(
            ProtectionRule(
                rule_id="system-namespace-name",
                rule_type=RuleType.LITERAL,
                patterns=list(names),
                priority=2,
            )
        )
    return rules
