"""Rules checking that floating versions track the highest exact version.

"Missing" and "mistargeted" rules partition each scope on whether a ref of
either kind exists for the floating version, so one defect is reported once.
"""

from semver_checker.config.settings import CheckerConfig
from semver_checker.enums import IssueType, Severity
from semver_checker.models.domain import LATEST, RepositoryState, ValidationIssue
from semver_checker.remediation.actions import CreateRefAction, UpdateRefAction
from semver_checker.rules.base import (
    FloatingTarget,
    Rule,
    expected_target,
    floating_ref,
    is_locked,
    retarget_dependencies,
    short_sha,
)


def _major_targets(state: RepositoryState, config: CheckerConfig) -> list[FloatingTarget]:
    targets = []
    for major in state.majors():
        target = expected_target(state, config, major)
        if target is None:
            continue
        version = f"v{major}"
        targets.append(FloatingTarget(version, floating_ref(state, version, config), target))
    return targets


def _minor_targets(state: RepositoryState, config: CheckerConfig) -> list[FloatingTarget]:
    targets = []
    for major, minor in state.minors():
        target = expected_target(state, config, major, minor)
        if target is None:
            continue
        version = f"v{major}.{minor}"
        targets.append(FloatingTarget(version, floating_ref(state, version, config), target))
    return targets


def _create_missing(rule: Rule, item: FloatingTarget, config: CheckerConfig, label: str) -> ValidationIssue:
    kind = config.floating_kind
    return rule.make_issue(
        config,
        f"{label} {item.version} is missing; it should point to {item.target.version} "
        f"({short_sha(item.target.sha)})",
        item.version,
        expected_sha=item.target.sha,
        action=CreateRefAction(ref_kind=kind, name=item.version, sha=item.target.sha),
    )


def _create_mistargeted(
    rule: Rule,
    item: FloatingTarget,
    state: RepositoryState,
    config: CheckerConfig,
    label: str,
) -> ValidationIssue:
    assert item.ref is not None
    locked = is_locked(state, item.version, config)
    message = (
        f"{label} {item.version} points to {short_sha(item.ref.sha)} but should point to "
        f"{item.target.version} ({short_sha(item.target.sha)})"
    )
    if locked:
        message += "; the tag carries an immutable release and cannot be moved"
    return rule.make_issue(
        config,
        message,
        item.version,
        current_sha=item.ref.sha,
        expected_sha=item.target.sha,
        action=UpdateRefAction(
            ref_kind=config.floating_kind,
            name=item.version,
            sha=item.target.sha,
            force=True,
            locked=locked,
        ),
        dependencies=[] if locked else retarget_dependencies(state, item.version, config),
    )


class MissingMajorVersionRule(Rule):
    """Every major with exact versions needs a ``vN`` floating version."""

    name = "missing_major_version"
    issue_type = IssueType.MISSING_MAJOR_VERSION
    priority = 50

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[FloatingTarget]:
        return [item for item in _major_targets(state, config) if item.ref is None]

    def check(self, item: FloatingTarget, state: RepositoryState, config: CheckerConfig) -> bool:
        return state.find_ref(item.version) is not None

    def create_issue(self, item: FloatingTarget, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        return _create_missing(self, item, config, "Major version")


class IncorrectMajorVersionRule(Rule):
    """``vN`` must point at the highest exact version of major N."""

    name = "incorrect_version"
    issue_type = IssueType.INCORRECT_VERSION
    priority = 60

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[FloatingTarget]:
        return [item for item in _major_targets(state, config) if item.ref is not None and not item.ref.is_ignored]

    def check(self, item: FloatingTarget, state: RepositoryState, config: CheckerConfig) -> bool:
        return item.ref is not None and item.ref.sha == item.target.sha

    def create_issue(self, item: FloatingTarget, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        return _create_mistargeted(self, item, state, config, "Major version")


class MissingMinorVersionRule(Rule):
    """Every minor with exact versions needs a ``vN.M`` floating version."""

    name = "missing_minor_version"
    issue_type = IssueType.MISSING_MINOR_VERSION
    priority = 70

    def is_enabled(self, config: CheckerConfig) -> bool:
        return config.check_minor_version.enabled

    def severity(self, config: CheckerConfig) -> Severity:
        return config.check_minor_version.to_severity()

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[FloatingTarget]:
        return [item for item in _minor_targets(state, config) if item.ref is None]

    def check(self, item: FloatingTarget, state: RepositoryState, config: CheckerConfig) -> bool:
        return state.find_ref(item.version) is not None

    def create_issue(self, item: FloatingTarget, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        return _create_missing(self, item, config, "Minor version")


class IncorrectMinorVersionRule(Rule):
    """``vN.M`` must point at the highest exact version of minor N.M."""

    name = "incorrect_minor_version"
    issue_type = IssueType.INCORRECT_MINOR_VERSION
    priority = 80

    def is_enabled(self, config: CheckerConfig) -> bool:
        return config.check_minor_version.enabled

    def severity(self, config: CheckerConfig) -> Severity:
        return config.check_minor_version.to_severity()

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[FloatingTarget]:
        return [item for item in _minor_targets(state, config) if item.ref is not None and not item.ref.is_ignored]

    def check(self, item: FloatingTarget, state: RepositoryState, config: CheckerConfig) -> bool:
        return item.ref is not None and item.ref.sha == item.target.sha

    def create_issue(self, item: FloatingTarget, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        return _create_mistargeted(self, item, state, config, "Minor version")


class LatestVersionRule(Rule):
    """An existing ``latest`` must point at the highest exact version overall.

    A missing ``latest`` is not reported: the alias is optional.
    """

    name = "incorrect_latest"
    issue_type = IssueType.INCORRECT_LATEST
    priority = 90

    def condition(self, state: RepositoryState, config: CheckerConfig) -> list[FloatingTarget]:
        ref = floating_ref(state, LATEST, config)
        if ref is None or ref.is_ignored:
            return []
        target = expected_target(state, config)
        if target is None:
            return []
        return [FloatingTarget(LATEST, ref, target)]

    def check(self, item: FloatingTarget, state: RepositoryState, config: CheckerConfig) -> bool:
        return item.ref is not None and item.ref.sha == item.target.sha

    def create_issue(self, item: FloatingTarget, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        return _create_mistargeted(self, item, state, config, "Floating version")
