"""Domain models for version-reference validation.

Key Models:
    - VersionRef: A tag or branch naming a version
    - ReleaseInfo: A published or draft release
    - ValidationIssue: One detected defect and its remediation status
    - RepositoryState: Aggregate root for one run
    - RemediationSummary: Counts and manual commands returned to the caller

Example:
    >>> from semver_checker.models import RepositoryState, VersionRef
    >>> state = RepositoryState(tags=[VersionRef.from_name("v1.0.0", "abc", RefKind.TAG)])
"""

from semver_checker.models.domain import (
    LATEST,
    ParsedVersion,
    RawRef,
    ReleaseInfo,
    RemediationSummary,
    RepositoryState,
    ValidationIssue,
    VersionRef,
)

__all__ = [
    "LATEST",
    "ParsedVersion",
    "RawRef",
    "ReleaseInfo",
    "RemediationSummary",
    "RepositoryState",
    "ValidationIssue",
    "VersionRef",
]
