"""Validation rules.

Each rule inspects a RepositoryState snapshot and returns the issues it
detects. ``DEFAULT_RULES`` lists one instance of every rule in evaluation
order.

Example:
    >>> from semver_checker.engine.rule_engine import RuleEngine
    >>> from semver_checker.rules import DEFAULT_RULES
    >>> issues = RuleEngine(DEFAULT_RULES).evaluate(state)
"""

from semver_checker.rules.base import Rule
from semver_checker.rules.patch_versions import MissingPatchVersionRule
from semver_checker.rules.ref_kind import AmbiguousRefRule, FloatingRefKindRule, PatchRefKindRule
from semver_checker.rules.releases import (
    DraftReleaseRule,
    FloatingReleaseRule,
    MissingReleaseRule,
    MutableReleaseRule,
)
from semver_checker.rules.version_tracking import (
    IncorrectMajorVersionRule,
    IncorrectMinorVersionRule,
    LatestVersionRule,
    MissingMajorVersionRule,
    MissingMinorVersionRule,
)

DEFAULT_RULES: tuple[Rule, ...] = (
    AmbiguousRefRule(),
    FloatingRefKindRule(),
    PatchRefKindRule(),
    MissingPatchVersionRule(),
    MissingMajorVersionRule(),
    IncorrectMajorVersionRule(),
    MissingMinorVersionRule(),
    IncorrectMinorVersionRule(),
    LatestVersionRule(),
    FloatingReleaseRule(),
    MissingReleaseRule(),
    DraftReleaseRule(),
    MutableReleaseRule(),
)

__all__ = [
    "DEFAULT_RULES",
    "AmbiguousRefRule",
    "DraftReleaseRule",
    "FloatingRefKindRule",
    "FloatingReleaseRule",
    "IncorrectMajorVersionRule",
    "IncorrectMinorVersionRule",
    "LatestVersionRule",
    "MissingMajorVersionRule",
    "MissingMinorVersionRule",
    "MissingPatchVersionRule",
    "MissingReleaseRule",
    "MutableReleaseRule",
    "PatchRefKindRule",
    "Rule",
]
