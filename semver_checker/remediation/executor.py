"""Remediation execution.

Runs after rule evaluation has completed and the state is sealed. In manual
mode nothing is changed: the planned issues' manual commands are collected
and de-duplicated. In auto-fix mode each planned action runs against the
repository and its issue moves to a terminal status:

    success                                   -> fixed
    UnfixableConflictError                    -> unfixable (manual commands kept)
    TransportError once retries are exhausted -> failed
    composite action stopped midway           -> failed, or unfixable when the
                                                 failing step hit a structural
                                                 conflict; the message names
                                                 the completed steps
    dependency not fixed                      -> manual_fix_required
    issue without an action                   -> manual_fix_required

Transport errors never escape ``run``.
"""

from collections.abc import Callable
from typing import Any

import httpx
import structlog

from semver_checker.config.settings import RetryConfig
from semver_checker.enums import IssueStatus, Severity
from semver_checker.exceptions import (
    PartialRemediationError,
    PlanningError,
    TransportError,
    UnfixableConflictError,
)
from semver_checker.models.domain import RemediationSummary, RepositoryState, ValidationIssue
from semver_checker.providers.base import RefRepository
from semver_checker.remediation.actions import execute_action
from semver_checker.remediation.planner import RemediationPlanner
from semver_checker.utils.retry import with_retry

log = structlog.get_logger(__name__)


def _dedupe(commands: list[str]) -> list[str]:
    seen: set[str] = set()
    unique = []
    for command in commands:
        if command not in seen:
            seen.add(command)
            unique.append(command)
    return unique


class RemediationExecutor:
    """Render or apply the remediation plan of a sealed RepositoryState."""

    def __init__(
        self,
        repository: RefRepository | None = None,
        retry: RetryConfig | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            repository: Target repository, required for auto-fix
            retry: Retry budget per repository call
            sleep: Sleep function handed to the retry wrapper
        """
        self.repository = repository
        self.retry = retry or RetryConfig()
        self.sleep = sleep

    def _run_call(self, operation: Callable[[], Any], name: str) -> Any:
        return with_retry(
            operation,
            max_retries=self.retry.max_retries,
            initial_delay=self.retry.initial_delay,
            sleep=self.sleep,
            name=name,
        )

    def run(self, state: RepositoryState, auto_fix: bool = False) -> RemediationSummary:
        """Render or apply remediation for every issue of the state.

        Args:
            state: Evaluated and sealed state
            auto_fix: Apply actions instead of only rendering commands

        Returns:
            Summary of the run

        Raises:
            PlanningError: If the state was not sealed or actions cannot be ordered
            ValueError: If auto_fix is requested without a repository
        """
        if not state.sealed:
            raise PlanningError("Remediation requires a completed rule evaluation")
        if auto_fix and self.repository is None:
            raise ValueError("Auto-fix requires a repository")

        plan = RemediationPlanner(state.issues).plan()

        if auto_fix:
            manual_commands = self._apply(state, plan)
        else:
            manual_commands = [command for issue in plan for command in issue.manual_commands]

        return self.summarize(state, manual_commands)

    def _apply(self, state: RepositoryState, plan: list[ValidationIssue]) -> list[str]:
        manual_commands: list[str] = []

        for issue in plan:
            if issue.status.is_terminal:
                continue
            blocking = [
                dep_id
                for dep_id in issue.dependencies
                if (dep := state.get_issue(dep_id)) is not None and dep.status != IssueStatus.FIXED
            ]
            if blocking:
                issue.transition(
                    IssueStatus.MANUAL_FIX_REQUIRED,
                    f"Skipped: depends on unresolved {', '.join(blocking)}",
                )
                manual_commands.extend(issue.manual_commands)
                log.warning("action_skipped", issue=issue.id, blocking=blocking)
                continue

            self._execute_issue(issue)
            if issue.status != IssueStatus.FIXED:
                manual_commands.extend(issue.manual_commands)

        for issue in state.issues:
            if not issue.is_actionable and not issue.status.is_terminal:
                issue.transition(IssueStatus.MANUAL_FIX_REQUIRED, "No automatic fix available")

        return manual_commands

    def _execute_issue(self, issue: ValidationIssue) -> None:
        action = issue.action
        assert action is not None
        try:
            execute_action(action, self.repository, self._run_call)
        except UnfixableConflictError as e:
            issue.transition(IssueStatus.UNFIXABLE, e.message)
            log.warning("action_unfixable", issue=issue.id, reason=e.message)
        except PartialRemediationError as e:
            status = IssueStatus.UNFIXABLE if isinstance(e.cause, UnfixableConflictError) else IssueStatus.FAILED
            issue.transition(status, e.message)
            log.error("action_partially_applied", issue=issue.id, completed=e.completed, failed=e.failed_step)
        except (TransportError, ConnectionError, TimeoutError, httpx.HTTPError) as e:
            issue.transition(IssueStatus.FAILED, str(e))
            log.error("action_failed", issue=issue.id, error=str(e))
        else:
            issue.transition(IssueStatus.FIXED, action.describe())
            log.info("action_succeeded", issue=issue.id, action=action.describe())

    @staticmethod
    def summarize(state: RepositoryState, manual_commands: list[str]) -> RemediationSummary:
        """Build the summary returned to the caller."""
        unresolved_errors = [
            issue for issue in state.issues if issue.severity == Severity.ERROR and not issue.is_resolved
        ]
        return RemediationSummary(
            total=len(state.issues),
            fixed=state.fixed_count,
            failed=state.failed_count,
            unfixable=state.unfixable_count,
            manual_fix_required=state.manual_fix_required_count,
            manual_commands=_dedupe(manual_commands),
            success=not unresolved_errors,
        )
