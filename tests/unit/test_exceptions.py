"""Tests for semver_checker/exceptions.py - exception hierarchy."""

import pytest

from semver_checker.exceptions import (
    ConfigurationError,
    IllegalStatusTransitionError,
    PartialRemediationError,
    PlanningError,
    RuleEvaluationError,
    SemverCheckerError,
    TransportError,
    UnfixableConflictError,
)


class TestHierarchy:
    """Tests for the exception base class."""

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad config"),
            TransportError("down"),
            UnfixableConflictError("immutable"),
            PartialRemediationError(["step one"], "step two", ValueError("x")),
            PlanningError("cycle"),
            RuleEvaluationError("failed"),
            IllegalStatusTransitionError("terminal"),
        ],
    )
    def test_all_derive_from_base(self, error):
        """Should be catchable as SemverCheckerError with a message."""
        assert isinstance(error, SemverCheckerError)
        assert error.message


class TestTransportError:
    """Tests for TransportError."""

    def test_status_in_str(self):
        """Should append the HTTP status to the string form only."""
        error = TransportError("Service unavailable", status_code=503, retryable=True)

        assert str(error) == "Service unavailable (HTTP 503)"
        assert error.message == "Service unavailable"
        assert error.status_code == 503
        assert error.retryable

    def test_defaults(self):
        """Should default to a non-retryable error without status."""
        error = TransportError("boom")

        assert str(error) == "boom"
        assert error.status_code is None
        assert not error.retryable


class TestPlanningError:
    """Tests for PlanningError."""

    def test_cycle_in_str(self):
        """Should list the cycle in the string form."""
        error = PlanningError("Circular dependency detected", cycle=["a:v1", "b:v1", "a:v1"])

        assert str(error) == "Circular dependency detected: a:v1 -> b:v1 -> a:v1"
        assert error.message == "Circular dependency detected"

    def test_without_cycle(self):
        """Should default to an empty cycle."""
        assert PlanningError("Invalid dependency").cycle == []


class TestPartialRemediationError:
    """Tests for PartialRemediationError."""

    def test_message_names_steps(self):
        """Should describe the completed and the failed step."""
        cause = TransportError("forbidden", status_code=403)
        error = PartialRemediationError(["created tag v1"], "deleting branch v1", cause)

        assert error.message == "Completed created tag v1; deleting branch v1 failed: forbidden (HTTP 403)"
        assert error.cause is cause


class TestRuleEvaluationError:
    """Tests for RuleEvaluationError."""

    def test_rule_in_str(self):
        """Should name the failing rule."""
        error = RuleEvaluationError("Rule crashed", rule="missing_release")

        assert str(error) == "Rule crashed (rule: missing_release)"
        assert error.rule == "missing_release"
