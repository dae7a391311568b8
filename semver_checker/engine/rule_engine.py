"""
Rule evaluation engine.

The engine runs every enabled rule over a RepositoryState, in ascending
priority order, and appends the issues they return. Rules read the state
snapshot only, so evaluating the same snapshot twice yields the same issues.
Once all rules have run the state is sealed: from then on issues can only
change status.

Example:
    >>> engine = RuleEngine()
    >>> issues = engine.evaluate(state)
    >>> state.sealed
    True
"""

from collections.abc import Iterable

import structlog

from semver_checker.config.settings import CheckerConfig
from semver_checker.exceptions import RuleEvaluationError
from semver_checker.models.domain import RepositoryState, ValidationIssue
from semver_checker.rules import DEFAULT_RULES
from semver_checker.rules.base import Rule

log = structlog.get_logger(__name__)


class RuleEngine:
    """Evaluate validation rules against a repository state.

    Attributes:
        rules: Rules in evaluation order. Ties keep registration order.
    """

    def __init__(self, rules: Iterable[Rule] | None = None) -> None:
        rules = DEFAULT_RULES if rules is None else rules
        self.rules = sorted(rules, key=lambda rule: rule.priority)

    def evaluate(self, state: RepositoryState, config: CheckerConfig | None = None) -> list[ValidationIssue]:
        """Run all enabled rules and record their issues on the state.

        Args:
            state: Collected state, not yet sealed
            config: Options to evaluate with, defaults to ``state.config``

        Returns:
            The issues detected during this evaluation

        Raises:
            RuleEvaluationError: If a rule fails or two rules report the same issue
            RuntimeError: If the state was already sealed
        """
        if state.sealed:
            raise RuntimeError("Repository state is sealed; evaluate a fresh snapshot")

        config = config or state.config
        seen = {issue.id for issue in state.issues}
        detected: list[ValidationIssue] = []

        for rule in self.rules:
            if not rule.is_enabled(config):
                log.debug("rule_skipped", rule=rule.name)
                continue

            try:
                issues = rule.evaluate(state, config)
            except Exception as e:
                raise RuleEvaluationError(f"Rule {rule.name} failed: {e}", rule=rule.name) from e

            for issue in issues:
                if issue.id in seen:
                    raise RuleEvaluationError(f"Issue {issue.id} reported twice", rule=rule.name)
                seen.add(issue.id)
                log.info(
                    "issue_detected",
                    rule=rule.name,
                    issue=issue.id,
                    severity=issue.severity.value,
                    message=issue.message,
                )
                detected.append(issue)

            log.debug("rule_evaluated", rule=rule.name, issues=len(issues))

        for issue in detected:
            state.add_issue(issue)
        state.seal()

        log.info(
            "evaluation_completed",
            rules=len(self.rules),
            issues=len(detected),
            errors=state.error_count,
            warnings=state.warning_count,
        )
        return detected
