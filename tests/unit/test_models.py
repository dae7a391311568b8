"""Tests for semver_checker/models/domain.py - domain models."""

import pytest
from builders import SHA_A, SHA_B, branch, release, tag

from semver_checker.enums import IssueStatus, IssueType, RefKind, Severity
from semver_checker.exceptions import IllegalStatusTransitionError
from semver_checker.models.domain import (
    ParsedVersion,
    RepositoryState,
    ValidationIssue,
    VersionRef,
    sort_refs,
)
from semver_checker.remediation.actions import CreateRefAction


def make_issue(version: str = "v1", issue_type: IssueType = IssueType.MISSING_MAJOR_VERSION, **kwargs):
    return ValidationIssue(
        type=issue_type,
        severity=kwargs.pop("severity", Severity.ERROR),
        message="test issue",
        version=version,
        **kwargs,
    )


class TestParsedVersion:
    """Tests for version name parsing."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("v1", ParsedVersion(1)),
            ("v1.2", ParsedVersion(1, 2)),
            ("v1.2.3", ParsedVersion(1, 2, 3)),
            ("v0.0.0", ParsedVersion(0, 0, 0)),
            ("v10.20.30", ParsedVersion(10, 20, 30)),
        ],
    )
    def test_parses_version_forms(self, name, expected):
        """Should parse vN, vN.M and vN.M.P."""
        assert ParsedVersion.parse(name) == expected

    @pytest.mark.parametrize(
        "name",
        ["1.2.3", "v1.2.3-beta", "v1.2.3.4", "latest", "main", "v01", "v1.02", "", "v"],
    )
    def test_rejects_non_versions(self, name):
        """Should return None for anything that is not a version."""
        assert ParsedVersion.parse(name) is None

    def test_key_orders_numerically(self):
        """Should compare v1.10.0 above v1.9.0."""
        assert ParsedVersion.parse("v1.10.0").key > ParsedVersion.parse("v1.9.0").key

    def test_str_round_trips_name(self):
        """Should render the original name."""
        assert str(ParsedVersion(2, 1)) == "v2.1"


class TestVersionRef:
    """Tests for VersionRef."""

    def test_from_name_derives_ref_path(self):
        """Should build the fully qualified ref from the kind."""
        ref = VersionRef.from_name("v1", sha=SHA_A, kind=RefKind.BRANCH)

        assert ref.ref == "refs/heads/v1"
        assert ref.parsed == ParsedVersion(1)

    def test_exactly_one_shape_flag(self):
        """Should classify each version as major, minor or patch."""
        for name, expected in (("v1", "major"), ("v1.2", "minor"), ("v1.2.3", "patch")):
            ref = tag(name, SHA_A)
            flags = {"major": ref.is_major, "minor": ref.is_minor, "patch": ref.is_patch}
            assert [key for key, value in flags.items() if value] == [expected]

    def test_latest_is_floating_without_shape(self):
        """Should treat latest as floating but neither major, minor nor patch."""
        ref = tag("latest", SHA_A)

        assert ref.is_latest
        assert ref.is_floating
        assert not (ref.is_major or ref.is_minor or ref.is_patch)

    def test_rejects_non_version_name(self):
        """Should refuse names that are not versions."""
        with pytest.raises(ValueError, match="not a version"):
            VersionRef.from_name("main", sha=SHA_A, kind=RefKind.BRANCH)

    def test_sort_refs_numeric_tags_first(self):
        """Should sort numerically with tags ahead of same-named branches."""
        refs = [tag("v1.10.0", SHA_A), branch("v1.9.0", SHA_A), tag("v1.9.0", SHA_B), tag("latest", SHA_A)]

        ordered = sort_refs(refs)

        assert [(ref.version, ref.kind) for ref in ordered] == [
            ("v1.9.0", RefKind.TAG),
            ("v1.9.0", RefKind.BRANCH),
            ("v1.10.0", RefKind.TAG),
            ("latest", RefKind.TAG),
        ]


class TestValidationIssue:
    """Tests for ValidationIssue."""

    def test_id_combines_type_and_version(self):
        """Should expose a stable dependency id."""
        assert make_issue("v2").id == "missing_major_version:v2"

    def test_actionable_only_with_action(self):
        """Should report whether an action is attached."""
        assert not make_issue().is_actionable
        action = CreateRefAction(ref_kind=RefKind.TAG, name="v1", sha=SHA_A)
        assert make_issue(action=action).is_actionable

    def test_manual_commands_from_action(self):
        """Should delegate manual commands to the action."""
        action = CreateRefAction(ref_kind=RefKind.TAG, name="v1", sha=SHA_A)

        assert make_issue(action=action).manual_commands == [f"git push origin {SHA_A}:refs/tags/v1"]
        assert make_issue().manual_commands == []

    def test_transition_from_pending(self):
        """Should move a pending issue to a terminal status."""
        issue = make_issue()

        issue.transition(IssueStatus.FIXED, "done")

        assert issue.status == IssueStatus.FIXED
        assert issue.status_message == "done"
        assert issue.is_resolved

    @pytest.mark.parametrize(
        "terminal",
        [IssueStatus.FIXED, IssueStatus.FAILED, IssueStatus.UNFIXABLE, IssueStatus.MANUAL_FIX_REQUIRED],
    )
    def test_terminal_status_is_final(self, terminal):
        """Should refuse any transition out of a terminal status."""
        issue = make_issue()
        issue.transition(terminal)

        with pytest.raises(IllegalStatusTransitionError):
            issue.transition(IssueStatus.PENDING)
        assert issue.status == terminal


class TestRepositoryState:
    """Tests for RepositoryState."""

    def test_rejects_duplicate_versions(self):
        """Should refuse two tags with the same name."""
        with pytest.raises(ValueError, match="Duplicate tag"):
            RepositoryState(tags=[tag("v1", SHA_A), tag("v1", SHA_B)])

    def test_rejects_misfiled_kind(self):
        """Should refuse a branch listed among tags."""
        with pytest.raises(ValueError, match="listed with tags"):
            RepositoryState(tags=[branch("v1", SHA_A)])

    def test_find_ref_prefers_tag(self):
        """Should return the tag when both kinds exist."""
        state = RepositoryState(tags=[tag("v1", SHA_A)], branches=[branch("v1", SHA_B)])

        assert state.find_ref("v1").kind == RefKind.TAG
        assert state.find_ref("v1", RefKind.BRANCH).sha == SHA_B
        assert state.find_ref("v2") is None

    def test_majors_and_minors_skip_ignored(self):
        """Should derive scopes from non-ignored exact versions only."""
        state = RepositoryState(
            tags=[tag("v1.0.0", SHA_A), tag("v1.2.0", SHA_A), tag("v2.0.0", SHA_A, ignored=True)],
            branches=[branch("v3.1.4", SHA_B)],
        )

        assert state.majors() == [1, 3]
        assert state.minors() == [(1, 0), (1, 2), (3, 1)]

    def test_version_names_sorted(self):
        """Should list distinct names numerically with latest last."""
        state = RepositoryState(
            tags=[tag("latest", SHA_A), tag("v1.10.0", SHA_A), tag("v1", SHA_A)],
            branches=[branch("v1", SHA_B), branch("v1.2.0", SHA_B)],
        )

        assert state.version_names() == ["v1", "v1.2.0", "v1.10.0", "latest"]

    def test_find_release(self):
        """Should index releases by tag name."""
        state = RepositoryState(releases=[release("v1.0.0", 7)])

        assert state.find_release("v1.0.0").id == 7
        assert state.find_release("v2.0.0") is None

    def test_add_issue_after_seal_fails(self):
        """Should refuse new issues once evaluation is complete."""
        state = RepositoryState()
        state.add_issue(make_issue("v1"))
        state.seal()

        with pytest.raises(RuntimeError, match="sealed"):
            state.add_issue(make_issue("v2"))
        assert len(state.issues) == 1

    def test_counts(self):
        """Should count issues by status and severity."""
        state = RepositoryState()
        fixed = make_issue("v1")
        failed = make_issue("v2")
        warning = make_issue("v3", severity=Severity.WARNING)
        for issue in (fixed, failed, warning):
            state.add_issue(issue)
        fixed.transition(IssueStatus.FIXED)
        failed.transition(IssueStatus.FAILED)

        assert state.fixed_count == 1
        assert state.failed_count == 1
        assert state.pending_count == 1
        assert state.error_count == 2
        assert state.warning_count == 1
        assert state.unresolved_error_count == 1
        assert state.get_issue("missing_major_version:v2") is failed
