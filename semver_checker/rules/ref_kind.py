"""Rules checking which ref kind each version uses.

Exact versions are always tags. Floating versions use the kind selected by
``floating-versions-use``. A version must not exist as both kinds.
"""

from semver_checker.config.settings import CheckerConfig
from semver_checker.enums import IssueType, RefKind
from semver_checker.models.domain import RepositoryState, ValidationIssue, VersionRef, sort_refs
from semver_checker.remediation.actions import ConvertRefKindAction, DeleteRefAction
from semver_checker.rules.base import Rule, short_sha


def _expected_kind(ref: VersionRef, config: CheckerConfig) -> RefKind:
    return RefKind.TAG if ref.is_patch else config.floating_kind


class AmbiguousRefRule(Rule):
    """A version name must not exist as both a tag and a branch."""

    name = "ambiguous_ref"
    issue_type = IssueType.AMBIGUOUS_REF
    priority = 10

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[VersionRef]:
        return [
            tag
            for tag in sort_refs(state.tags)
            if not tag.is_ignored and state.find_ref(tag.version, RefKind.BRANCH) is not None
        ]

    def check(self, item: VersionRef, state: RepositoryState, config: CheckerConfig) -> bool:
        return state.find_ref(item.version, RefKind.BRANCH) is None

    def create_issue(self, item: VersionRef, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        branch = state.find_ref(item.version, RefKind.BRANCH)
        assert branch is not None
        kept, duplicate = (item, branch) if _expected_kind(item, config) == RefKind.TAG else (branch, item)
        return self.make_issue(
            config,
            f"{item.version} exists as both tag ({short_sha(item.sha)}) and branch ({short_sha(branch.sha)}); "
            f"the {duplicate.kind.value} should be removed",
            item.version,
            current_sha=duplicate.sha,
            expected_sha=kept.sha,
            action=DeleteRefAction(ref_kind=duplicate.kind, name=item.version),
        )


class FloatingRefKindRule(Rule):
    """Floating versions must use the configured ref kind."""

    name = "wrong_ref_kind"
    issue_type = IssueType.WRONG_REF_KIND
    priority = 20

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[VersionRef]:
        wrong_kind = config.floating_kind.other
        refs = state.tags if wrong_kind == RefKind.TAG else state.branches
        return [
            ref
            for ref in sort_refs(refs)
            if ref.is_floating and not ref.is_ignored and state.find_ref(ref.version, config.floating_kind) is None
        ]

    def check(self, item: VersionRef, state: RepositoryState, config: CheckerConfig) -> bool:
        return item.kind == config.floating_kind

    def create_issue(self, item: VersionRef, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        target = config.floating_kind
        return self.make_issue(
            config,
            f"Floating version {item.version} is a {item.kind.value} but floating versions use {target.value}s",
            item.version,
            current_sha=item.sha,
            expected_sha=item.sha,
            action=ConvertRefKindAction(
                name=item.version,
                sha=item.sha,
                source_kind=item.kind,
                target_kind=target,
            ),
        )


class PatchRefKindRule(Rule):
    """Exact versions must be tags."""

    name = "patch_not_tag"
    issue_type = IssueType.PATCH_NOT_TAG
    priority = 30

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[VersionRef]:
        return [
            ref
            for ref in sort_refs(state.branches)
            if ref.is_patch and not ref.is_ignored and state.find_ref(ref.version, RefKind.TAG) is None
        ]

    def check(self, item: VersionRef, state: RepositoryState, config: CheckerConfig) -> bool:
        return item.kind == RefKind.TAG

    def create_issue(self, item: VersionRef, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        return self.make_issue(
            config,
            f"Exact version {item.version} is a branch but exact versions must be tags",
            item.version,
            current_sha=item.sha,
            expected_sha=item.sha,
            action=ConvertRefKindAction(
                name=item.version,
                sha=item.sha,
                source_kind=RefKind.BRANCH,
                target_kind=RefKind.TAG,
            ),
        )
