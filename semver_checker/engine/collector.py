"""Build a RepositoryState from a ref/release repository.

Refs whose names are neither versions (``vN``, ``vN.M``, ``vN.M.P``) nor
``latest`` are dropped here, so rules only ever see version refs. Refs
matching an ``ignore-versions`` glob are kept but flagged as ignored.
"""

from collections.abc import Callable

import structlog

from semver_checker.config.settings import CheckerConfig, RetryConfig
from semver_checker.enums import RefKind
from semver_checker.models.domain import LATEST, ParsedVersion, RawRef, RepositoryState, VersionRef
from semver_checker.providers.base import RefRepository
from semver_checker.utils.retry import with_retry
from semver_checker.utils.versions import compile_ignore_patterns, matches_ignore

log = structlog.get_logger(__name__)


def to_version_ref(raw: RawRef, ignore_patterns: list[str]) -> VersionRef | None:
    """Convert a listed ref, returning None when its name is not a version."""
    if raw.name != LATEST and ParsedVersion.parse(raw.name) is None:
        return None
    return VersionRef.from_name(
        raw.name,
        sha=raw.sha,
        kind=raw.kind,
        is_ignored=matches_ignore(raw.name, ignore_patterns),
    )


def collect_state(
    repository: RefRepository,
    config: CheckerConfig,
    retry: RetryConfig | None = None,
    sleep: Callable[[float], None] | None = None,
) -> RepositoryState:
    """List refs and releases and assemble the state for one run.

    Args:
        repository: Connected repository provider
        config: Check options stored on the state
        retry: Retry budget for the listing calls
        sleep: Sleep function handed to the retry wrapper

    Returns:
        An unsealed RepositoryState
    """
    retry = retry or RetryConfig()
    raw_refs = with_retry(
        repository.list_refs,
        max_retries=retry.max_retries,
        initial_delay=retry.initial_delay,
        sleep=sleep,
        name="list_refs",
    )
    releases = with_retry(
        repository.list_releases,
        max_retries=retry.max_retries,
        initial_delay=retry.initial_delay,
        sleep=sleep,
        name="list_releases",
    )

    patterns = compile_ignore_patterns(config.ignore_versions)
    tags: dict[str, VersionRef] = {}
    branches: dict[str, VersionRef] = {}
    skipped = 0

    for raw in raw_refs:
        ref = to_version_ref(raw, patterns)
        if ref is None:
            skipped += 1
            continue
        target = tags if ref.kind == RefKind.TAG else branches
        if ref.version in target:
            log.warning("duplicate_ref_skipped", ref=ref.ref)
            continue
        target[ref.version] = ref

    log.info(
        "state_collected",
        tags=len(tags),
        branches=len(branches),
        releases=len(releases),
        skipped_refs=skipped,
    )
    return RepositoryState(
        tags=list(tags.values()),
        branches=list(branches.values()),
        releases=list(releases),
        config=config,
        supports_immutable_releases=bool(repository.supports_immutable_releases),
    )
