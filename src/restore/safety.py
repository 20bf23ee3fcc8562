"""Safety checks and protection rule evaluation.

Evaluates object names against protection rules to keep system-managed
objects out of a revert plan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from src.models.protection_rule import ProtectionRule


@dataclass
class PartitionResult:
    """Split of candidate names into eligible and protected.

    ``skipped`` maps each protected name to the reason it was kept.
    """

    eligible: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)


class SafetyChecker:
    """Safety checker for name protection evaluation.

    Attributes:
        rules: List of protection rules sorted by priority
    """

    def __init__(self, rules: list[ProtectionRule]) -> None:
        """Initialize safety checker.

        Args:
            rules: List of protection rules (sorted by priority, 1=highest)

        Raises:
            ValueError: If a rule is invalid
        """
        for rule in rules:
            rule.validate()
        self.rules = sorted(rules, key=lambda r: r.priority)

    def is_protected(self, name: str) -> tuple[bool, Optional[str]]:
        """Check if an object name is protected by any rule.

        Evaluates enabled rules in priority order. Returns on first matching
        rule (highest priority wins).

        Args:
            name: Object name

        Returns:
            Tuple of (is_protected, reason)
                is_protected: True if the name matches any protection rule
                reason: Human-readable reason for protection, None if not protected
        """
        for rule in self.rules:
            if not rule.enabled:
                continue

            if rule.matches(name):
                return True, self._get_protection_reason(rule, name)

        return False, None

    def partition(self, names: Iterable[str]) -> PartitionResult:
        """Partition names into eligible and skipped.

        Every input name lands in exactly one of the two groups. Eligible
        names keep their input order.
        """
        result = PartitionResult()

        for name in names:
            is_protected, reason = self.is_protected(name)
            if is_protected:
                result.skipped[name] = reason or "Protected by safety rules"
            else:
                result.eligible.append(name)

        return result

    def _get_protection_reason(self, rule: ProtectionRule, name: str) -> str:
        """Generate human-readable protection reason."""
        if rule.description:
            return f"{rule.description} (rule: {rule.rule_id})"

        pattern = rule.matched_pattern(name)
        if rule.rule_type.value == "prefix":
            return f"Name starts with reserved prefix '{pattern}' (rule: {rule.rule_id})"

        elif rule.rule_type.value == "literal":
            return f"Reserved name '{name}' (rule: {rule.rule_id})"

        elif rule.rule_type.value == "regex":
            return f"Name matches /{pattern}/ (rule: {rule.rule_id})"

        return f"Protected by rule {rule.rule_id}"
