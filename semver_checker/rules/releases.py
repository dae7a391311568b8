"""Rules checking releases.

Exact versions need a published, immutable release. Floating versions must
not have releases: a release pins its tag, and an immutable one pins it for
good.
"""

import structlog

from semver_checker.config.settings import CheckerConfig
from semver_checker.enums import IssueType, RefKind, Severity
from semver_checker.models.domain import LATEST, ReleaseInfo, RepositoryState, ValidationIssue, VersionRef, sort_refs
from semver_checker.remediation.actions import (
    CreateReleaseAction,
    DeleteReleaseAction,
    PublishReleaseAction,
    RepublishReleaseAction,
)
from semver_checker.rules.base import Rule, is_ignored_version

log = structlog.get_logger(__name__)


def _patch_releases(state: RepositoryState, config: CheckerConfig) -> list[ReleaseInfo]:
    releases = []
    for release in state.releases:
        parsed = release.parsed
        if parsed is None or parsed.patch is None:
            continue
        if is_ignored_version(state, release.tag_name, config):
            continue
        releases.append(release)
    return sorted(releases, key=lambda release: release.parsed.key)


class MissingReleaseRule(Rule):
    """Every exact version tag needs a release."""

    name = "missing_release"
    issue_type = IssueType.MISSING_RELEASE
    priority = 110

    def is_enabled(self, config: CheckerConfig) -> bool:
        return config.check_releases.enabled

    def severity(self, config: CheckerConfig) -> Severity:
        return config.check_releases.to_severity()

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[VersionRef]:
        return [ref for ref in sort_refs(state.tags) if ref.is_patch and not ref.is_ignored]

    def check(self, item: VersionRef, state: RepositoryState, config: CheckerConfig) -> bool:
        return state.find_release(item.version) is not None

    def create_issue(self, item: VersionRef, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        seal = config.check_release_immutability.enabled
        return self.make_issue(
            config,
            f"Exact version {item.version} has no release",
            item.version,
            current_sha=item.sha,
            action=CreateReleaseAction(tag_name=item.version, draft=seal, publish=seal),
        )


class DraftReleaseRule(Rule):
    """Releases of exact versions must be published."""

    name = "draft_release"
    issue_type = IssueType.DRAFT_RELEASE
    priority = 120

    def is_enabled(self, config: CheckerConfig) -> bool:
        return config.check_release_immutability.enabled

    def severity(self, config: CheckerConfig) -> Severity:
        return config.check_release_immutability.to_severity()

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[ReleaseInfo]:
        return [release for release in _patch_releases(state, config) if release.is_draft]

    def check(self, item: ReleaseInfo, state: RepositoryState, config: CheckerConfig) -> bool:
        return not item.is_draft

    def create_issue(self, item: ReleaseInfo, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        return self.make_issue(
            config,
            f"Release {item.tag_name} is still a draft",
            item.tag_name,
            current_sha=item.target_sha,
            action=PublishReleaseAction(tag_name=item.tag_name, release_id=item.id),
        )


class MutableReleaseRule(Rule):
    """Published releases of exact versions must be immutable.

    Not applicable on platforms without immutable releases.
    """

    name = "mutable_release"
    issue_type = IssueType.MUTABLE_RELEASE
    priority = 130

    def is_enabled(self, config: CheckerConfig) -> bool:
        return config.check_release_immutability.enabled

    def severity(self, config: CheckerConfig) -> Severity:
        return config.check_release_immutability.to_severity()

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[ReleaseInfo]:
        if not state.supports_immutable_releases:
            log.info("rule_not_applicable", rule=self.name, reason="platform has no immutable releases")
            return []
        return [release for release in _patch_releases(state, config) if not release.is_draft]

    def check(self, item: ReleaseInfo, state: RepositoryState, config: CheckerConfig) -> bool:
        return item.is_immutable

    def create_issue(self, item: ReleaseInfo, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        return self.make_issue(
            config,
            f"Release {item.tag_name} is published but not immutable",
            item.tag_name,
            current_sha=item.target_sha,
            action=RepublishReleaseAction(tag_name=item.tag_name, release_id=item.id),
        )


class FloatingReleaseRule(Rule):
    """Floating versions must not have releases."""

    name = "floating_release"
    issue_type = IssueType.FLOATING_RELEASE
    priority = 100

    def is_enabled(self, config: CheckerConfig) -> bool:
        return config.check_releases.enabled

    def severity(self, config: CheckerConfig) -> Severity:
        return config.check_releases.to_severity()

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[ReleaseInfo]:
        releases = []
        for release in state.releases:
            parsed = release.parsed
            is_floating = release.tag_name == LATEST or (parsed is not None and parsed.patch is None)
            if is_floating and not is_ignored_version(state, release.tag_name, config):
                releases.append(release)
        return sorted(releases, key=lambda release: release.parsed.key if release.parsed else (float("inf"),))

    def check(self, item: ReleaseInfo, state: RepositoryState, config: CheckerConfig) -> bool:
        return False

    def create_issue(self, item: ReleaseInfo, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        message = f"Floating version {item.tag_name} has a release"
        if item.is_immutable:
            message += " which is immutable; the tag can no longer be moved"
        tag = state.find_ref(item.tag_name, RefKind.TAG)
        return self.make_issue(
            config,
            message,
            item.tag_name,
            current_sha=tag.sha if tag else item.target_sha,
            action=DeleteReleaseAction(tag_name=item.tag_name, release_id=item.id, immutable=item.is_immutable),
        )
