"""
Domain models for version-reference validation.

This module contains the data classes representing one run of the checker:
version refs (tags and branches) and releases collected from the repository,
the issues detected by the rule engine, and the aggregate RepositoryState
that ties them together.

A RepositoryState is built once from collected data, read by the rule engine
(which only appends issues), sealed, and then handed to the remediation
executor, which only changes issue statuses.

Example:
    Building a state by hand::

        state = RepositoryState(
            tags=[VersionRef.from_name("v1.0.0", sha="abc123", kind=RefKind.TAG)],
            config=CheckerConfig(),
        )
        assert state.find_ref("v1.0.0").is_patch
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from semver_checker.config.settings import CheckerConfig
from semver_checker.enums import IssueStatus, IssueType, RefKind, Severity
from semver_checker.exceptions import IllegalStatusTransitionError

if TYPE_CHECKING:
    from semver_checker.remediation.actions import RemediationAction

LATEST = "latest"

_VERSION_PATTERN = re.compile(r"^v(0|[1-9]\d*)(?:\.(0|[1-9]\d*))?(?:\.(0|[1-9]\d*))?$")


@dataclass(frozen=True)
class ParsedVersion:
    """Numeric components of a ``vN``, ``vN.M`` or ``vN.M.P`` name."""

    major: int
    minor: int | None = None
    patch: int | None = None

    @classmethod
    def parse(cls, version: str) -> ParsedVersion | None:
        """Parse a version name, returning None for anything else.

        Prerelease suffixes (``v1.0.0-beta``) and names without the leading
        ``v`` are not versions.
        """
        match = _VERSION_PATTERN.match(version)
        if match is None:
            return None
        major, minor, patch = match.groups()
        return cls(
            major=int(major),
            minor=int(minor) if minor is not None else None,
            patch=int(patch) if patch is not None else None,
        )

    @property
    def key(self) -> tuple[int, int, int]:
        """Sort key ordering versions numerically."""
        return (self.major, self.minor or 0, self.patch or 0)

    def __str__(self) -> str:
        parts = [str(self.major)]
        if self.minor is not None:
            parts.append(str(self.minor))
        if self.patch is not None:
            parts.append(str(self.patch))
        return "v" + ".".join(parts)


@dataclass(frozen=True)
class RawRef:
    """A ref as listed by the repository, before version parsing."""

    name: str
    ref: str
    sha: str
    kind: RefKind


@dataclass(frozen=True)
class VersionRef:
    """A tag or branch naming a version.

    Exactly one of is_major, is_minor, is_patch is true, except for
    ``latest`` which is none of them.
    """

    version: str
    ref: str
    sha: str
    kind: RefKind
    parsed: ParsedVersion | None = None
    is_ignored: bool = False

    def __post_init__(self) -> None:
        if self.version == LATEST:
            if self.parsed is not None:
                raise ValueError("'latest' carries no version components")
        elif self.parsed is None:
            raise ValueError(f"'{self.version}' is not a version name")

    @classmethod
    def from_name(
        cls,
        version: str,
        sha: str,
        kind: RefKind,
        is_ignored: bool = False,
    ) -> VersionRef:
        """Build a ref from its short name, deriving the ref path.

        Raises:
            ValueError: If the name is neither a version nor ``latest``
        """
        parsed = None if version == LATEST else ParsedVersion.parse(version)
        return cls(
            version=version,
            ref=f"{kind.ref_prefix}{version}",
            sha=sha,
            kind=kind,
            parsed=parsed,
            is_ignored=is_ignored,
        )

    @property
    def is_latest(self) -> bool:
        return self.version == LATEST

    @property
    def is_major(self) -> bool:
        return self.parsed is not None and self.parsed.minor is None

    @property
    def is_minor(self) -> bool:
        return self.parsed is not None and self.parsed.minor is not None and self.parsed.patch is None

    @property
    def is_patch(self) -> bool:
        return self.parsed is not None and self.parsed.patch is not None

    @property
    def is_floating(self) -> bool:
        """Whether the ref is an alias expected to move (major, minor, latest)."""
        return not self.is_patch


@dataclass(frozen=True)
class ReleaseInfo:
    """A published (or draft) artifact release."""

    tag_name: str
    id: int
    is_draft: bool = False
    is_prerelease: bool = False
    is_immutable: bool = False
    url: str = ""
    target_sha: str | None = None

    @property
    def parsed(self) -> ParsedVersion | None:
        return ParsedVersion.parse(self.tag_name)


@dataclass
class ValidationIssue:
    """One detected defect.

    Issues are created by rules and only their status changes afterwards.
    Status transitions are monotone: once terminal, an issue keeps its status
    for the rest of the run.
    """

    type: IssueType
    severity: Severity
    message: str
    version: str
    current_sha: str | None = None
    expected_sha: str | None = None
    status: IssueStatus = IssueStatus.PENDING
    action: RemediationAction | None = None
    dependencies: list[str] = field(default_factory=list)
    status_message: str | None = None

    @staticmethod
    def make_id(issue_type: IssueType, version: str) -> str:
        """Build the identifier used for issue-to-issue dependencies."""
        return f"{issue_type.value}:{version}"

    @property
    def id(self) -> str:
        return self.make_id(self.type, self.version)

    @property
    def is_actionable(self) -> bool:
        return self.action is not None

    @property
    def is_resolved(self) -> bool:
        return self.status == IssueStatus.FIXED

    @property
    def manual_commands(self) -> list[str]:
        """Commands a maintainer can run to fix the issue by hand."""
        if self.action is None:
            return []
        return self.action.manual_commands()

    def transition(self, new_status: IssueStatus, message: str | None = None) -> None:
        """Move the issue to a new status.

        Args:
            new_status: Target status
            message: Optional explanation shown next to the status

        Raises:
            IllegalStatusTransitionError: If the issue is already terminal
        """
        if self.status.is_terminal:
            raise IllegalStatusTransitionError(
                f"Issue {self.id} is already {self.status.value}; cannot become {new_status.value}"
            )
        self.status = new_status
        if message is not None:
            self.status_message = message


@dataclass
class RemediationSummary:
    """Outcome of a run, returned to the caller."""

    total: int
    fixed: int
    failed: int
    unfixable: int
    manual_fix_required: int
    manual_commands: list[str]
    success: bool


@dataclass
class RepositoryState:
    """Aggregate root for one run.

    Tags, branches and releases are read-only once built. Issues grow only
    through ``add_issue`` until the state is sealed at the end of evaluation.
    ``supports_immutable_releases`` is False for platforms whose releases
    cannot be sealed.
    """

    tags: list[VersionRef] = field(default_factory=list)
    branches: list[VersionRef] = field(default_factory=list)
    releases: list[ReleaseInfo] = field(default_factory=list)
    config: CheckerConfig = field(default_factory=CheckerConfig)
    issues: list[ValidationIssue] = field(default_factory=list)
    sealed: bool = False
    supports_immutable_releases: bool = True

    def __post_init__(self) -> None:
        for refs, kind in ((self.tags, RefKind.TAG), (self.branches, RefKind.BRANCH)):
            seen: set[str] = set()
            for ref in refs:
                if ref.kind != kind:
                    raise ValueError(f"{ref.version} is a {ref.kind.value}, listed with {kind.value}s")
                if ref.version in seen:
                    raise ValueError(f"Duplicate {kind.value} '{ref.version}'")
                seen.add(ref.version)
        self._tags = {ref.version: ref for ref in self.tags}
        self._branches = {ref.version: ref for ref in self.branches}
        self._releases = {release.tag_name: release for release in self.releases}

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_ref(self, version: str, kind: RefKind | None = None) -> VersionRef | None:
        """Find a ref by version name.

        Without an explicit kind the tag wins over a branch of the same name.
        """
        if kind == RefKind.TAG:
            return self._tags.get(version)
        if kind == RefKind.BRANCH:
            return self._branches.get(version)
        return self._tags.get(version) or self._branches.get(version)

    def find_release(self, tag_name: str) -> ReleaseInfo | None:
        return self._releases.get(tag_name)

    def all_refs(self) -> list[VersionRef]:
        """Tags followed by branches."""
        return [*self.tags, *self.branches]

    def version_names(self) -> list[str]:
        """Distinct version names across both kinds, sorted numerically."""
        names = {ref.version for ref in self.all_refs()}
        return sorted(names, key=_version_sort_key)

    def patch_refs(self, include_ignored: bool = False) -> list[VersionRef]:
        """Exact-version refs of either kind."""
        return [ref for ref in self.all_refs() if ref.is_patch and (include_ignored or not ref.is_ignored)]

    def majors(self) -> list[int]:
        """Major numbers that have at least one non-ignored exact version."""
        return sorted({ref.parsed.major for ref in self.patch_refs() if ref.parsed})

    def minors(self) -> list[tuple[int, int]]:
        """(major, minor) pairs that have at least one non-ignored exact version."""
        return sorted(
            {
                (ref.parsed.major, ref.parsed.minor)
                for ref in self.patch_refs()
                if ref.parsed and ref.parsed.minor is not None
            }
        )

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    def add_issue(self, issue: ValidationIssue) -> None:
        """Append an issue detected during evaluation.

        Raises:
            RuntimeError: If evaluation has already completed
        """
        if self.sealed:
            raise RuntimeError("Repository state is sealed; issues can no longer be added")
        self.issues.append(issue)

    def seal(self) -> None:
        """Mark the end of rule evaluation."""
        self.sealed = True

    def get_issue(self, issue_id: str) -> ValidationIssue | None:
        for issue in self.issues:
            if issue.id == issue_id:
                return issue
        return None

    def _count(self, status: IssueStatus) -> int:
        return sum(1 for issue in self.issues if issue.status == status)

    @property
    def fixed_count(self) -> int:
        return self._count(IssueStatus.FIXED)

    @property
    def failed_count(self) -> int:
        return self._count(IssueStatus.FAILED)

    @property
    def unfixable_count(self) -> int:
        return self._count(IssueStatus.UNFIXABLE)

    @property
    def manual_fix_required_count(self) -> int:
        return self._count(IssueStatus.MANUAL_FIX_REQUIRED)

    @property
    def pending_count(self) -> int:
        return self._count(IssueStatus.PENDING)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == Severity.WARNING)

    @property
    def unresolved_error_count(self) -> int:
        """Error-severity issues not brought to FIXED."""
        return sum(1 for issue in self.issues if issue.severity == Severity.ERROR and not issue.is_resolved)


def _version_sort_key(version: str) -> tuple[int, tuple[int, int, int], int]:
    """Order versions numerically, with ``latest`` last.

    Within the same numbers, majors sort before minors before patches.
    """
    parsed = ParsedVersion.parse(version)
    if parsed is None:
        return (1, (0, 0, 0), 0)
    depth = 0 if parsed.minor is None else 1 if parsed.patch is None else 2
    return (0, parsed.key, depth)


def sort_refs(refs: Iterable[VersionRef]) -> list[VersionRef]:
    """Sort refs numerically by version name, tags before branches."""
    return sorted(refs, key=lambda ref: (_version_sort_key(ref.version), ref.kind != RefKind.TAG))
