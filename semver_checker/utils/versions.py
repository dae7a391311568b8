"""Version resolution helpers.

Pure functions answering "which exact version should a floating version
track": the highest qualifying ``vN.M.P`` within a major, a minor, or across
the whole repository. Comparison is numeric on (major, minor, patch); there is
no string or prerelease-suffix comparison.

Prerelease filtering is driven by releases: with ``ignore_prerelease`` an exact
version whose release is marked prerelease does not qualify, unless every
version in scope is a prerelease, in which case the unfiltered scope is used.
"""

import fnmatch
from collections.abc import Iterable, Sequence

import structlog

from semver_checker.enums import RefKind
from semver_checker.models.domain import ReleaseInfo, VersionRef

log = structlog.get_logger(__name__)


def is_valid_ignore_pattern(pattern: str) -> bool:
    """Check that a glob is usable: non-empty with balanced brackets."""
    if not pattern.strip():
        return False
    depth = 0
    for char in pattern:
        if char == "[":
            if depth:
                return False
            depth += 1
        elif char == "]" and depth:
            depth -= 1
    return depth == 0


def compile_ignore_patterns(patterns: Iterable[str]) -> list[str]:
    """Return the usable ignore globs, skipping malformed ones with a warning."""
    valid = []
    for pattern in patterns:
        if is_valid_ignore_pattern(pattern):
            valid.append(pattern.strip())
        else:
            log.warning("ignore_pattern_skipped", pattern=pattern)
    return valid


def matches_ignore(version: str, patterns: Sequence[str]) -> bool:
    """Whether a version name matches any ignore glob (case-sensitive)."""
    return any(fnmatch.fnmatchcase(version, pattern) for pattern in patterns)


def _is_prerelease(ref: VersionRef, releases: dict[str, ReleaseInfo]) -> bool:
    release = releases.get(ref.version)
    return release is not None and release.is_prerelease


def _select_highest(
    candidates: list[VersionRef],
    releases: Iterable[ReleaseInfo],
    ignore_prerelease: bool,
) -> VersionRef | None:
    if not candidates:
        return None

    pool = candidates
    if ignore_prerelease:
        by_tag = {release.tag_name: release for release in releases}
        stable = [ref for ref in candidates if not _is_prerelease(ref, by_tag)]
        if stable:
            pool = stable

    # Tags win ties against a branch of the same version
    return max(pool, key=lambda ref: (ref.parsed.key, ref.kind == RefKind.TAG))


def highest_patch_for(
    refs: Iterable[VersionRef],
    releases: Iterable[ReleaseInfo],
    major: int,
    minor: int | None = None,
    ignore_prerelease: bool = True,
) -> VersionRef | None:
    """Highest exact version within a major (and optionally minor) scope.

    Args:
        refs: Refs of either kind; non-exact and ignored refs are skipped
        releases: Releases used to detect prerelease versions
        major: Major version scope
        minor: Minor version scope, or None for the whole major
        ignore_prerelease: Exclude versions whose release is a prerelease

    Returns:
        The qualifying ref, or None when nothing is in scope
    """
    candidates = [
        ref
        for ref in refs
        if ref.is_patch
        and not ref.is_ignored
        and ref.parsed.major == major
        and (minor is None or ref.parsed.minor == minor)
    ]
    return _select_highest(candidates, releases, ignore_prerelease)


def highest_patch_global(
    refs: Iterable[VersionRef],
    releases: Iterable[ReleaseInfo],
    ignore_prerelease: bool = True,
) -> VersionRef | None:
    """Highest exact version in the repository, the target of ``latest``."""
    candidates = [ref for ref in refs if ref.is_patch and not ref.is_ignored]
    return _select_highest(candidates, releases, ignore_prerelease)
