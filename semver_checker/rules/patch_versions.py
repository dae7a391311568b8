"""Rule creating the exact version behind a floating version that has none."""

from dataclasses import dataclass

from semver_checker.config.settings import CheckerConfig
from semver_checker.enums import IssueType, RefKind
from semver_checker.models.domain import RepositoryState, ValidationIssue, VersionRef
from semver_checker.remediation.actions import CreateRefAction
from semver_checker.rules.base import Rule, floating_ref, short_sha


@dataclass(frozen=True)
class MissingPatch:
    floating: VersionRef
    version: str


def _has_patch(state: RepositoryState, major: int, minor: int | None) -> bool:
    return any(
        ref.parsed.major == major and (minor is None or ref.parsed.minor == minor)
        for ref in state.patch_refs(include_ignored=True)
    )


def _has_minor(state: RepositoryState, major: int) -> bool:
    return any(ref.is_minor and ref.parsed.major == major for ref in state.all_refs())


class MissingPatchVersionRule(Rule):
    """A floating ``vN`` or ``vN.M`` needs at least one exact version.

    The exact version ``vN.0.0`` (or ``vN.M.0``) is created as a tag at the
    commit the floating version points to. A major that already has minor
    versions is left to them.
    """

    name = "missing_patch_version"
    issue_type = IssueType.MISSING_PATCH_VERSION
    priority = 40

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[MissingPatch]:
        items = []
        for version in state.version_names():
            ref = floating_ref(state, version, config)
            if ref is None or ref.is_ignored or not (ref.is_major or ref.is_minor):
                continue
            major, minor = ref.parsed.major, ref.parsed.minor
            if ref.is_major and _has_minor(state, major):
                continue
            items.append(MissingPatch(ref, f"v{major}.{minor or 0}.0"))
        return items

    def check(self, item: MissingPatch, state: RepositoryState, config: CheckerConfig) -> bool:
        parsed = item.floating.parsed
        return _has_patch(state, parsed.major, parsed.minor)

    def create_issue(self, item: MissingPatch, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        return self.make_issue(
            config,
            f"{item.floating.version} has no exact version; {item.version} should be created at "
            f"{short_sha(item.floating.sha)}",
            item.version,
            expected_sha=item.floating.sha,
            action=CreateRefAction(ref_kind=RefKind.TAG, name=item.version, sha=item.floating.sha),
        )
