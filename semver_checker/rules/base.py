"""
Base class for validation rules.

A rule is three pure functions over a RepositoryState snapshot:

1. ``condition(state, config)`` selects the candidate items the rule applies to.
2. ``check(item, state, config)`` tells whether a candidate is valid.
3. ``create_issue(item, state, config)`` materializes a ValidationIssue for an
   invalid candidate, including its remediation action and dependencies.

Rules never mutate the state; the engine appends the issues they return.
Dependencies are issue ids computed from the snapshot alone, never from other
rules' output, so evaluation order does not affect the result.

Creating New Rules:
    1. Subclass Rule and set ``name``, ``issue_type`` and ``priority``
    2. Implement ``condition``, ``check`` and ``create_issue``
    3. Override ``is_enabled``/``severity`` when a config option drives them
    4. Register an instance in ``semver_checker.rules.DEFAULT_RULES``

Example:
    >>> class NoLatestRule(Rule):
    ...     name = "no_latest"
    ...     issue_type = IssueType.AMBIGUOUS_REF
    ...     priority = 999
    ...     def condition(self, state, config):
    ...         return [ref for ref in state.all_refs() if ref.is_latest]
    ...     def check(self, item, state, config):
    ...         return False
    ...     def create_issue(self, item, state, config):
    ...         return self.make_issue(config, "latest is not allowed", item.version)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

import structlog

from semver_checker.config.settings import CheckerConfig
from semver_checker.enums import IssueType, RefKind, Severity
from semver_checker.models.domain import RepositoryState, ValidationIssue, VersionRef
from semver_checker.utils.versions import (
    highest_patch_for,
    highest_patch_global,
    is_valid_ignore_pattern,
    matches_ignore,
)

log = structlog.get_logger(__name__)


class Rule(ABC):
    """Abstract base class for all validation rules.

    Attributes:
        name: Stable rule identifier used in logs
        issue_type: Taxonomy key of the issues the rule reports
        priority: Evaluation order, ascending
    """

    name: ClassVar[str]
    issue_type: ClassVar[IssueType]
    priority: ClassVar[int]

    def is_enabled(self, config: CheckerConfig) -> bool:
        """Whether the rule runs under this configuration."""
        return True

    def severity(self, config: CheckerConfig) -> Severity:
        """Severity of the issues the rule reports."""
        return Severity.ERROR

    @abstractmethod
    def condition(self, state: RepositoryState, config: CheckerConfig) -> Sequence[Any]:
        """Select the candidate items this rule applies to."""

    @abstractmethod
    def check(self, item: Any, state: RepositoryState, config: CheckerConfig) -> bool:
        """Return True when the candidate is valid."""

    @abstractmethod
    def create_issue(self, item: Any, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        """Build the issue for an invalid candidate."""

    def evaluate(self, state: RepositoryState, config: CheckerConfig) -> list[ValidationIssue]:
        """Run condition, check and create_issue over the state."""
        issues = []
        for item in self.condition(state, config):
            if not self.check(item, state, config):
                issues.append(self.create_issue(item, state, config))
        return issues

    def make_issue(self, config: CheckerConfig, message: str, version: str, **kwargs: Any) -> ValidationIssue:
        """Build an issue of this rule's type and severity."""
        return ValidationIssue(
            type=self.issue_type,
            severity=self.severity(config),
            message=message,
            version=version,
            **kwargs,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


# ----------------------------------------------------------------------
# Shared helpers
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class FloatingTarget:
    """A floating version and the exact version it should point at.

    ``ref`` is None when the floating version does not exist yet.
    """

    version: str
    ref: VersionRef | None
    target: VersionRef


def floating_ref(state: RepositoryState, version: str, config: CheckerConfig) -> VersionRef | None:
    """The ref a floating version resolves to: the configured kind first."""
    preferred = config.floating_kind
    return state.find_ref(version, preferred) or state.find_ref(version, preferred.other)


def is_ignored_version(state: RepositoryState, version: str, config: CheckerConfig) -> bool:
    """Whether a version is excluded, for refs and for releases without a ref."""
    ref = state.find_ref(version)
    if ref is not None:
        return ref.is_ignored
    patterns = [pattern.strip() for pattern in config.ignore_versions if is_valid_ignore_pattern(pattern)]
    return matches_ignore(version, patterns)


def expected_target(
    state: RepositoryState,
    config: CheckerConfig,
    major: int | None = None,
    minor: int | None = None,
) -> VersionRef | None:
    """Exact version a floating version should track; global when major is None."""
    if major is None:
        return highest_patch_global(state.all_refs(), state.releases, config.ignore_preview_releases)
    return highest_patch_for(
        state.all_refs(),
        state.releases,
        major,
        minor,
        ignore_prerelease=config.ignore_preview_releases,
    )


def is_locked(state: RepositoryState, version: str, config: CheckerConfig) -> bool:
    """Whether the floating ref is a tag pinned by an immutable release."""
    if config.floating_kind != RefKind.TAG:
        return False
    release = state.find_release(version)
    return release is not None and release.is_immutable


def retarget_dependencies(state: RepositoryState, version: str, config: CheckerConfig) -> list[str]:
    """Issues that must be resolved before a floating ref is moved.

    - a wrong-kind ref is converted first
    - a mutable release on the floating tag is deleted first
    """
    dependencies = []
    preferred = config.floating_kind
    if state.find_ref(version, preferred) is None and state.find_ref(version, preferred.other) is not None:
        dependencies.append(ValidationIssue.make_id(IssueType.WRONG_REF_KIND, version))

    release = state.find_release(version)
    if (
        preferred == RefKind.TAG
        and config.check_releases.enabled
        and release is not None
        and not release.is_immutable
    ):
        dependencies.append(ValidationIssue.make_id(IssueType.FLOATING_RELEASE, version))
    return dependencies


def short_sha(sha: str | None) -> str:
    return sha[:7] if sha else "-"
