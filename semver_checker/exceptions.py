"""Custom exception hierarchy for semver-checker.

Validation defects are never raised: they are ValidationIssue records. The
exceptions below cover configuration, transport, planning and state machine
failures.

Exception Hierarchy:
    SemverCheckerError (base)
    ├── ConfigurationError
    ├── TransportError
    ├── UnfixableConflictError
    ├── PartialRemediationError
    ├── PlanningError
    ├── RuleEvaluationError
    └── IllegalStatusTransitionError

Example Usage:
    >>> from semver_checker.exceptions import ConfigurationError
    >>> try:
    ...     CheckerConfig.from_options(options)
    ... except ValidationError as e:
    ...     raise ConfigurationError(f"Invalid check options: {e}") from e
"""


class SemverCheckerError(Exception):
    """Base exception for all semver-checker errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(SemverCheckerError):
    """Configuration-related errors.

    Raised when an option holds a value outside its enumerated set, the
    configuration file is missing or unreadable, or required provider
    settings are absent. Fatal to the run.
    """

    pass


class TransportError(SemverCheckerError):
    """Communication with the ref/release repository failed.

    Attributes:
        status_code: HTTP status code, if the failure carried one
        retryable: Whether the retry wrapper may try the call again
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            retryable: True for timeouts, connection resets, HTTP 429 and 5xx
        """
        self.status_code = status_code
        self.retryable = retryable

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        self.message = message


class UnfixableConflictError(SemverCheckerError):
    """A structural constraint prevents an automatic fix.

    Examples:
        - Moving a floating tag that carries an immutable release
        - Deleting an immutable release
        - Rewriting a protected branch
    """

    pass


class PartialRemediationError(SemverCheckerError):
    """A composite action stopped after some of its steps completed.

    Attributes:
        completed: Descriptions of the steps that succeeded
        failed_step: Description of the step that failed
        cause: The exception raised by the failed step
    """

    def __init__(
        self,
        completed: list[str],
        failed_step: str,
        cause: Exception,
    ) -> None:
        """Initialize exception.

        Args:
            completed: Steps that succeeded before the failure
            failed_step: Step that failed
            cause: Exception raised by the failed step
        """
        self.completed = completed
        self.failed_step = failed_step
        self.cause = cause
        done = ", ".join(completed) if completed else "nothing"
        super().__init__(f"Completed {done}; {failed_step} failed: {cause}")


class PlanningError(SemverCheckerError):
    """Remediation actions cannot be ordered.

    Attributes:
        cycle: Issue ids forming the dependency cycle, if one was found
    """

    def __init__(self, message: str, cycle: list[str] | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            cycle: Issue ids along the detected cycle
        """
        self.cycle = cycle or []
        full_message = message
        if self.cycle:
            full_message = f"{message}: {' -> '.join(self.cycle)}"
        super().__init__(full_message)
        self.message = message


class RuleEvaluationError(SemverCheckerError):
    """A rule raised while evaluating the repository state.

    Issue counts assume every rule ran to completion, so this aborts the run.

    Attributes:
        rule: Name of the failing rule
    """

    def __init__(self, message: str, rule: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            rule: Name of the failing rule
        """
        self.rule = rule
        full_message = f"{message} (rule: {rule})" if rule else message
        super().__init__(full_message)
        self.message = message


class IllegalStatusTransitionError(SemverCheckerError):
    """An issue in a terminal status was asked to change status."""

    pass
