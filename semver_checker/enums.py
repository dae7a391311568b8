"""Enumerations for ref kinds, check levels and issue taxonomy."""

from enum import Enum


class RefKind(str, Enum):
    """The two pointer mechanisms a version can be published with."""

    TAG = "tag"
    BRANCH = "branch"

    def __str__(self) -> str:
        return self.value

    @property
    def ref_prefix(self) -> str:
        """Fully qualified ref prefix (``refs/tags/`` or ``refs/heads/``)."""
        return "refs/tags/" if self == RefKind.TAG else "refs/heads/"

    @property
    def other(self) -> "RefKind":
        """The opposite ref kind."""
        return RefKind.BRANCH if self == RefKind.TAG else RefKind.TAG


class FloatingRefKind(str, Enum):
    """Value of the ``floating-versions-use`` option."""

    TAGS = "tags"
    BRANCHES = "branches"

    def __str__(self) -> str:
        return self.value

    def to_ref_kind(self) -> RefKind:
        """Convert the plural option value to a RefKind."""
        return RefKind.TAG if self == FloatingRefKind.TAGS else RefKind.BRANCH


class CheckLevel(str, Enum):
    """How strictly an optional check is enforced."""

    ERROR = "error"
    WARNING = "warning"
    NONE = "none"

    def __str__(self) -> str:
        return self.value

    @property
    def enabled(self) -> bool:
        """Whether the check runs at all."""
        return self != CheckLevel.NONE

    def to_severity(self) -> "Severity":
        """Map an enabled check level to the severity of its issues.

        Raises:
            ValueError: If the check is disabled
        """
        if self == CheckLevel.NONE:
            raise ValueError("Disabled checks do not produce issues")
        return Severity(self.value)


class Severity(str, Enum):
    """Severity of a detected issue."""

    ERROR = "error"
    WARNING = "warning"

    def __str__(self) -> str:
        return self.value


class IssueStatus(str, Enum):
    """Lifecycle status of a ValidationIssue.

    The typical auto-fix path is PENDING -> FIXED. In manual mode issues stay
    PENDING. FIXED, FAILED, UNFIXABLE and MANUAL_FIX_REQUIRED are terminal.
    """

    PENDING = "pending"
    """Detected, no remediation attempted yet."""

    FIXED = "fixed"
    """The remediation action completed successfully."""

    FAILED = "failed"
    """The remediation action failed after exhausting retries."""

    UNFIXABLE = "unfixable"
    """A structural constraint (immutable release, protected ref) blocks the fix."""

    MANUAL_FIX_REQUIRED = "manual_fix_required"
    """No automatic attempt was possible; the manual commands must be run."""

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        """Whether the status can no longer change within a run."""
        return self != IssueStatus.PENDING


class IssueType(str, Enum):
    """Taxonomy key of a validation issue."""

    AMBIGUOUS_REF = "ambiguous_ref"
    WRONG_REF_KIND = "wrong_ref_kind"
    PATCH_NOT_TAG = "patch_not_tag"
    MISSING_MAJOR_VERSION = "missing_major_version"
    INCORRECT_VERSION = "incorrect_version"
    MISSING_MINOR_VERSION = "missing_minor_version"
    INCORRECT_MINOR_VERSION = "incorrect_minor_version"
    MISSING_PATCH_VERSION = "missing_patch_version"
    INCORRECT_LATEST = "incorrect_latest"
    MISSING_RELEASE = "missing_release"
    DRAFT_RELEASE = "draft_release"
    MUTABLE_RELEASE = "mutable_release"
    FLOATING_RELEASE = "floating_release"

    def __str__(self) -> str:
        return self.value


class ActionKind(str, Enum):
    """Variant tag of a remediation action."""

    CREATE_REF = "create_ref"
    UPDATE_REF = "update_ref"
    DELETE_REF = "delete_ref"
    CONVERT_REF_KIND = "convert_ref_kind"
    CREATE_RELEASE = "create_release"
    PUBLISH_RELEASE = "publish_release"
    REPUBLISH_RELEASE = "republish_release"
    DELETE_RELEASE = "delete_release"

    def __str__(self) -> str:
        return self.value
