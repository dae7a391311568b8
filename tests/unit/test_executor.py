"""Tests for semver_checker/remediation/executor.py - remediation execution."""

from unittest.mock import Mock, call

import httpx
import pytest
from builders import SHA_A, SHA_B, branch, release, tag

from semver_checker.config.settings import CheckerConfig, RetryConfig
from semver_checker.engine.rule_engine import RuleEngine
from semver_checker.enums import IssueStatus, IssueType, RefKind, Severity
from semver_checker.exceptions import PlanningError, TransportError, UnfixableConflictError
from semver_checker.models.domain import RepositoryState, ValidationIssue
from semver_checker.remediation.actions import CreateRefAction, UpdateRefAction
from semver_checker.remediation.executor import RemediationExecutor


def evaluated(state: RepositoryState) -> RepositoryState:
    RuleEngine().evaluate(state)
    return state


def sealed_with(*issues: ValidationIssue) -> RepositoryState:
    state = RepositoryState()
    for issue in issues:
        state.add_issue(issue)
    state.seal()
    return state


def make_issue(version, action=None, dependencies=None, severity=Severity.ERROR, issue_type=None):
    return ValidationIssue(
        type=issue_type or IssueType.MISSING_MAJOR_VERSION,
        severity=severity,
        message=f"{version} is missing",
        version=version,
        action=action,
        dependencies=dependencies or [],
    )


def create(name, sha=SHA_A):
    return CreateRefAction(ref_kind=RefKind.TAG, name=name, sha=sha)


@pytest.fixture
def executor(mock_repository, no_sleep):
    return RemediationExecutor(mock_repository, retry=RetryConfig(max_retries=2, initial_delay=1.0), sleep=no_sleep)


class TestManualMode:
    """Tests for manual (default) mode."""

    def test_no_repository_calls(self, mock_repository):
        """Should render commands without touching the repository."""
        state = evaluated(RepositoryState(tags=[tag("v1", SHA_A), tag("v1.0.0", SHA_B)]))

        summary = RemediationExecutor(mock_repository).run(state)

        assert mock_repository.method_calls == []
        assert all(issue.status == IssueStatus.PENDING for issue in state.issues)
        assert f"git push --force origin {SHA_B}:refs/tags/v1" in summary.manual_commands
        assert not summary.success

    def test_commands_deduplicated_in_plan_order(self):
        """Should list each command once, in execution order."""
        state = sealed_with(
            make_issue("v2", create("v2")),
            make_issue("v1", create("v1"), issue_type=IssueType.MISSING_MINOR_VERSION),
            make_issue("v1", create("v1")),
        )

        summary = RemediationExecutor().run(state)

        assert summary.manual_commands == [
            f"git push origin {SHA_A}:refs/tags/v2",
            f"git push origin {SHA_A}:refs/tags/v1",
        ]

    def test_clean_state_succeeds(self, healthy_state):
        """Should report success when nothing is wrong."""
        summary = RemediationExecutor().run(evaluated(healthy_state))

        assert summary.success
        assert summary.total == 0
        assert summary.manual_commands == []

    def test_unsealed_state_rejected(self):
        """Should refuse to run before evaluation completed."""
        with pytest.raises(PlanningError):
            RemediationExecutor().run(RepositoryState())

    def test_auto_fix_requires_repository(self):
        """Should refuse auto-fix without a repository."""
        with pytest.raises(ValueError):
            RemediationExecutor().run(sealed_with(), auto_fix=True)


class TestAutoFix:
    """Tests for auto-fix outcomes."""

    def test_draft_release_published(self, executor, mock_repository):
        """Should publish the draft and mark the issue fixed."""
        state = evaluated(
            RepositoryState(
                tags=[tag("v1", SHA_A), tag("v1.0", SHA_A), tag("v1.0.0", SHA_A)],
                releases=[release("v1.0.0", 9, draft=True)],
            )
        )

        summary = executor.run(state, auto_fix=True)

        mock_repository.publish_release.assert_called_once_with(9)
        [issue] = state.issues
        assert issue.status == IssueStatus.FIXED
        assert summary.fixed == 1
        assert summary.success
        assert summary.manual_commands == []

    def test_locked_tag_unfixable_without_calls(self, executor, mock_repository):
        """Should mark a locked retarget unfixable and keep its manual command."""
        action = UpdateRefAction(ref_kind=RefKind.TAG, name="v1", sha=SHA_B, locked=True)
        state = sealed_with(make_issue("v1", action, issue_type=IssueType.INCORRECT_VERSION))

        summary = executor.run(state, auto_fix=True)

        mock_repository.update_ref.assert_not_called()
        assert state.issues[0].status == IssueStatus.UNFIXABLE
        assert summary.unfixable == 1
        assert summary.manual_commands == [f"git push --force origin {SHA_B}:refs/tags/v1"]
        assert not summary.success

    def test_provider_conflict_unfixable(self, executor, mock_repository):
        """Should mark the issue unfixable when the provider reports a conflict."""
        mock_repository.create_ref.side_effect = UnfixableConflictError("protected")
        state = sealed_with(make_issue("v1", create("v1")))

        executor.run(state, auto_fix=True)

        assert state.issues[0].status == IssueStatus.UNFIXABLE
        mock_repository.create_ref.assert_called_once()

    def test_transport_failure_after_retries(self, executor, mock_repository, no_sleep):
        """Should retry transient failures and mark the issue failed when exhausted."""
        mock_repository.create_ref.side_effect = TransportError("unavailable", status_code=503, retryable=True)
        state = sealed_with(make_issue("v1", create("v1")))

        summary = executor.run(state, auto_fix=True)

        assert mock_repository.create_ref.call_count == 3
        assert no_sleep.call_args_list == [call(1.0), call(2.0)]
        assert state.issues[0].status == IssueStatus.FAILED
        assert summary.failed == 1

    def test_failures_do_not_stop_the_run(self, executor, mock_repository):
        """Should continue with independent issues after a failure."""
        mock_repository.create_ref.side_effect = [TransportError("bad request", status_code=400), None]
        state = sealed_with(make_issue("v1", create("v1")), make_issue("v2", create("v2")))

        executor.run(state, auto_fix=True)

        assert [issue.status for issue in state.issues] == [IssueStatus.FAILED, IssueStatus.FIXED]

    def test_partial_conversion_failed(self, executor, mock_repository):
        """Should mark a conversion failed when the source cannot be deleted."""
        mock_repository.delete_ref.side_effect = TransportError("forbidden", status_code=403)
        state = evaluated(
            RepositoryState(
                tags=[tag("v1.0.0", SHA_A)],
                branches=[branch("v1", SHA_A)],
                config=CheckerConfig(check_minor_version="none", check_releases="none"),
            )
        )

        executor.run(state, auto_fix=True)

        [issue] = state.issues
        assert issue.type == IssueType.WRONG_REF_KIND
        assert issue.status == IssueStatus.FAILED
        assert "created tag v1" in issue.status_message
        assert "deleting branch v1 failed" in issue.status_message
        mock_repository.create_ref.assert_called_once_with(RefKind.TAG, "v1", SHA_A)

    def test_dependency_not_fixed_skips_dependent(self, executor, mock_repository):
        """Should not run an action whose dependency did not reach fixed."""
        mock_repository.create_ref.side_effect = TransportError("bad request", status_code=400)
        base = make_issue("v1", create("v1"), issue_type=IssueType.WRONG_REF_KIND)
        dependent = make_issue(
            "v1",
            UpdateRefAction(ref_kind=RefKind.TAG, name="v1", sha=SHA_B),
            dependencies=[base.id],
            issue_type=IssueType.INCORRECT_VERSION,
        )
        state = sealed_with(dependent, base)

        summary = executor.run(state, auto_fix=True)

        mock_repository.update_ref.assert_not_called()
        assert base.status == IssueStatus.FAILED
        assert dependent.status == IssueStatus.MANUAL_FIX_REQUIRED
        assert "wrong_ref_kind:v1" in dependent.status_message
        assert summary.manual_fix_required == 1

    def test_issue_without_action_needs_manual_fix(self, executor):
        """Should mark non-actionable issues manual_fix_required."""
        state = sealed_with(make_issue("v1"))

        executor.run(state, auto_fix=True)

        assert state.issues[0].status == IssueStatus.MANUAL_FIX_REQUIRED

    def test_warnings_do_not_fail_the_run(self, executor, mock_repository):
        """Should succeed when only warnings remain unresolved."""
        mock_repository.create_ref.side_effect = TransportError("bad request", status_code=400)
        state = sealed_with(make_issue("v1", create("v1"), severity=Severity.WARNING))

        summary = executor.run(state, auto_fix=True)

        assert summary.success
        assert summary.failed == 1

    def test_statuses_are_terminal_after_auto_fix(self, executor, mock_repository):
        """Should leave no pending issue and never revisit a terminal one."""
        state = evaluated(
            RepositoryState(
                tags=[tag("v1.0.0", SHA_A), tag("v1.1.0", SHA_B), tag("v1", SHA_A)],
                branches=[branch("v1.0", SHA_A)],
                releases=[release("v1.0.0", 1, immutable=False)],
            )
        )

        executor.run(state, auto_fix=True)
        statuses = [issue.status for issue in state.issues]

        assert all(status.is_terminal for status in statuses)
        executor.run(state, auto_fix=True)
        assert [issue.status for issue in state.issues] == statuses

    def test_retried_delete_already_applied_is_fixed(self, executor, mock_repository):
        """Should count a delete as done when its retry finds the ref gone."""
        mock_repository.delete_ref.side_effect = [
            TransportError("unavailable", status_code=503, retryable=True),
            TransportError("Reference does not exist", status_code=422),
        ]
        state = evaluated(
            RepositoryState(
                tags=[tag("v1.0.0", SHA_A), tag("v1", SHA_A)],
                branches=[branch("v1", SHA_A)],
                config=CheckerConfig(check_minor_version="none", check_releases="none"),
            )
        )

        executor.run(state, auto_fix=True)

        [issue] = state.issues
        assert issue.id == "ambiguous_ref:v1"
        assert issue.status == IssueStatus.FIXED
        assert mock_repository.delete_ref.call_count == 2

    def test_dropped_connection_marks_failed(self, executor, mock_repository):
        """Should absorb raw httpx transport errors into a failed status."""
        mock_repository.create_ref.side_effect = httpx.RemoteProtocolError("Server disconnected")
        state = sealed_with(make_issue("v1", create("v1")), make_issue("v2", create("v2")))

        summary = executor.run(state, auto_fix=True)

        assert [issue.status for issue in state.issues] == [IssueStatus.FAILED, IssueStatus.FAILED]
        assert mock_repository.create_ref.call_count == 6
        assert summary.failed == 2
