"""Tests for semver_checker/engine/rule_engine.py - rule evaluation engine."""

from unittest.mock import Mock

import pytest
from builders import SHA_A, SHA_B, SHA_C, branch, refs_only_config, release, tag

from semver_checker.config.settings import CheckerConfig
from semver_checker.engine.rule_engine import RuleEngine
from semver_checker.enums import CheckLevel, IssueType, RefKind, Severity
from semver_checker.exceptions import RuleEvaluationError
from semver_checker.models.domain import RepositoryState, ValidationIssue
from semver_checker.remediation.actions import UpdateRefAction
from semver_checker.remediation.planner import RemediationPlanner
from semver_checker.rules.base import Rule

MISSING_TO_INCORRECT = {
    IssueType.MISSING_MAJOR_VERSION: IssueType.INCORRECT_VERSION,
    IssueType.MISSING_MINOR_VERSION: IssueType.INCORRECT_MINOR_VERSION,
}


def make_rule(name, priority, issues=(), enabled=True, error=None):
    """Build a stub rule returning fixed issues."""
    rule = Mock(spec=Rule)
    rule.name = name
    rule.priority = priority
    rule.is_enabled.return_value = enabled
    if error is not None:
        rule.evaluate.side_effect = error
    else:
        rule.evaluate.return_value = list(issues)
    return rule


def stub_issue(version):
    return ValidationIssue(
        type=IssueType.MISSING_MAJOR_VERSION,
        severity=Severity.ERROR,
        message=f"{version} missing",
        version=version,
    )


def sample_states():
    """States exercising most rules, rebuilt fresh on each call."""
    return [
        RepositoryState(tags=[tag("v1.0.0", SHA_A)]),
        RepositoryState(tags=[tag("v1", SHA_A), tag("v1.0.0", SHA_A), tag("v1.1.0", SHA_B)]),
        RepositoryState(
            tags=[tag("v1.0.0", SHA_A), tag("v1.0", SHA_B), tag("v2.0.0", SHA_C), tag("latest", SHA_A)],
            branches=[branch("v1", SHA_A), branch("v2.1.0", SHA_C)],
            releases=[release("v1.0.0", 1, draft=True), release("v1.0", 2, immutable=False)],
        ),
        RepositoryState(
            tags=[tag("v3", SHA_A), tag("v3.0.0", SHA_B)],
            branches=[branch("v3", SHA_C)],
            config=CheckerConfig(floating_versions_use="branches", check_minor_version="warning"),
        ),
    ]


class TestScenarios:
    """End-to-end evaluation scenarios."""

    def test_only_exact_version(self):
        """Should report the missing major and minor, both pointing at the exact version."""
        state = RepositoryState(
            tags=[tag("v1.0.0", SHA_A)],
            config=refs_only_config(check_minor_version=CheckLevel.ERROR),
        )

        issues = RuleEngine().evaluate(state)

        assert [(issue.type, issue.version) for issue in issues] == [
            (IssueType.MISSING_MAJOR_VERSION, "v1"),
            (IssueType.MISSING_MINOR_VERSION, "v1.0"),
        ]
        assert all(issue.expected_sha == SHA_A for issue in issues)

    def test_mistargeted_major(self):
        """Should report one incorrect_version planned as a forced update."""
        state = RepositoryState(
            tags=[tag("v1", SHA_A), tag("v1.0.0", SHA_B)],
            config=CheckerConfig(check_releases="none", check_minor_version="none"),
        )

        [issue] = RuleEngine().evaluate(state)

        assert issue.type == IssueType.INCORRECT_VERSION
        assert issue.version == "v1"
        assert issue.expected_sha == SHA_B
        [planned] = RemediationPlanner(state.issues).plan()
        assert planned.action == UpdateRefAction(ref_kind=RefKind.TAG, name="v1", sha=SHA_B, force=True)

    def test_draft_release(self):
        """Should report only the draft release."""
        state = RepositoryState(
            tags=[tag("v1", SHA_A), tag("v1.0", SHA_A), tag("v1.0.0", SHA_A)],
            releases=[release("v1.0.0", 9, draft=True)],
        )

        [issue] = RuleEngine().evaluate(state)

        assert issue.type == IssueType.DRAFT_RELEASE
        assert issue.action.release_id == 9

    def test_healthy_state_has_no_issues(self, healthy_state):
        """Should report nothing for a conforming repository."""
        assert RuleEngine().evaluate(healthy_state) == []
        assert healthy_state.sealed


class TestProperties:
    """Structural properties of evaluation."""

    def test_evaluation_is_idempotent(self):
        """Should produce identical issues for identical snapshots."""
        for first, second in zip(sample_states(), sample_states(), strict=True):
            issues_a = RuleEngine().evaluate(first)
            issues_b = RuleEngine().evaluate(second)

            assert [(i.id, i.message, i.action, i.dependencies) for i in issues_a] == [
                (i.id, i.message, i.action, i.dependencies) for i in issues_b
            ]

    def test_missing_and_mistargeted_disjoint(self):
        """Should never report the same floating version as both missing and mistargeted."""
        for state in sample_states():
            issues = RuleEngine().evaluate(state)
            reported = {(issue.type, issue.version) for issue in issues}
            for missing, incorrect in MISSING_TO_INCORRECT.items():
                missing_versions = {version for kind, version in reported if kind == missing}
                incorrect_versions = {version for kind, version in reported if kind == incorrect}
                assert not missing_versions & incorrect_versions

    def test_dependencies_resolve_within_run(self):
        """Should only depend on issues produced by the same evaluation."""
        for state in sample_states():
            issues = RuleEngine().evaluate(state)
            ids = {issue.id for issue in issues}
            for issue in issues:
                assert set(issue.dependencies) <= ids
            RemediationPlanner(issues).plan()

    def test_no_rule_mutates_refs(self):
        """Should leave refs and releases untouched."""
        state = sample_states()[2]
        before = (list(state.tags), list(state.branches), list(state.releases))

        RuleEngine().evaluate(state)

        assert (state.tags, state.branches, state.releases) == before


class TestRuleEngine:
    """Tests for RuleEngine mechanics."""

    def test_rules_run_in_priority_order(self):
        """Should sort rules by priority."""
        late = make_rule("late", 20, [stub_issue("v2")])
        early = make_rule("early", 10, [stub_issue("v1")])

        issues = RuleEngine([late, early]).evaluate(RepositoryState())

        assert [issue.version for issue in issues] == ["v1", "v2"]

    def test_disabled_rule_skipped(self):
        """Should not evaluate disabled rules."""
        rule = make_rule("off", 10, [stub_issue("v1")], enabled=False)

        assert RuleEngine([rule]).evaluate(RepositoryState()) == []
        rule.evaluate.assert_not_called()

    def test_state_sealed_with_issues(self):
        """Should record issues on the state and seal it."""
        state = RepositoryState()

        RuleEngine([make_rule("r", 10, [stub_issue("v1")])]).evaluate(state)

        assert [issue.id for issue in state.issues] == ["missing_major_version:v1"]
        assert state.sealed

    def test_sealed_state_rejected(self):
        """Should refuse to evaluate a sealed state."""
        state = RepositoryState()
        state.seal()

        with pytest.raises(RuntimeError):
            RuleEngine([]).evaluate(state)

    def test_rule_failure_wrapped(self):
        """Should wrap rule exceptions in RuleEvaluationError."""
        state = RepositoryState()
        rule = make_rule("broken", 10, error=KeyError("boom"))

        with pytest.raises(RuleEvaluationError) as exc_info:
            RuleEngine([rule]).evaluate(state)

        assert exc_info.value.rule == "broken"
        assert not state.sealed

    def test_duplicate_issue_rejected(self):
        """Should refuse two issues with the same id."""
        rules = [make_rule("a", 10, [stub_issue("v1")]), make_rule("b", 20, [stub_issue("v1")])]

        with pytest.raises(RuleEvaluationError, match="reported twice"):
            RuleEngine(rules).evaluate(RepositoryState())
