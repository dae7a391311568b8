"""
Remediation actions.

Each corrective unit is a small dataclass carrying the data it needs, a
priority used by the planner, and the manual commands a maintainer would run
instead. Execution against a RefRepository is dispatched through
ACTION_HANDLERS, keyed by the action's kind.

Priorities (lower runs first):
    10 DeleteRelease     remove a release from a floating version
    20 DeleteRef         remove the duplicate of an ambiguous ref
    30 ConvertRefKind    turn a branch into a tag or vice versa
    40 CreateRef         create a missing ref
    50 UpdateRef         retarget a floating version
    60 CreateRelease     release an exact version
    70 PublishRelease    publish a draft
    80 RepublishRelease  make a mutable release immutable

Every action except the deletes can be retried safely. A retried delete that
finds its target gone counts as done. Composite actions (convert,
create-and-publish, delete-and-recreate on platforms that cannot move a ref)
run their steps in order, each retried on its own, and stop at the first
failure, raising PartialRemediationError when an earlier step had already
changed the repository.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar

import structlog

from semver_checker.enums import ActionKind, RefKind
from semver_checker.exceptions import PartialRemediationError, TransportError, UnfixableConflictError
from semver_checker.providers.base import RefRepository

log = structlog.get_logger(__name__)

Runner = Callable[[Callable[[], Any], str], Any]
"""Runs one repository call, typically through the retry wrapper."""


def _direct(operation: Callable[[], Any], name: str) -> Any:
    return operation()


_ALREADY_GONE = (404, 422)


def _run_delete(run: Runner, operation: Callable[[], Any], name: str) -> None:
    """Run a delete through the runner, accepting "not found" on a retry.

    A retried delete finds nothing when the earlier attempt was applied but
    its response was lost.
    """
    attempts = 0

    def attempt() -> Any:
        nonlocal attempts
        attempts += 1
        try:
            return operation()
        except TransportError as e:
            if attempts > 1 and e.status_code in _ALREADY_GONE:
                log.info("delete_already_applied", operation=name, status=e.status_code)
                return None
            raise

    run(attempt, name)


@dataclass
class RemediationAction(ABC):
    """Base class for all corrective actions."""

    kind: ClassVar[ActionKind]
    default_priority: ClassVar[int]

    priority: int | None = field(default=None, kw_only=True)

    def __post_init__(self) -> None:
        if self.priority is None:
            self.priority = self.default_priority

    @property
    def is_destructive(self) -> bool:
        """Whether the action deletes something that retries cannot restore."""
        return False

    @abstractmethod
    def describe(self) -> str:
        """One-line human description."""

    @abstractmethod
    def manual_commands(self) -> list[str]:
        """Shell commands performing the same change by hand."""


def _push(sha: str, kind: RefKind, name: str, force: bool = False) -> str:
    flag = " --force" if force else ""
    return f"git push{flag} origin {sha}:{kind.ref_prefix}{name}"


def _push_delete(kind: RefKind, name: str) -> str:
    return f"git push origin :{kind.ref_prefix}{name}"


@dataclass
class CreateRefAction(RemediationAction):
    kind: ClassVar[ActionKind] = ActionKind.CREATE_REF
    default_priority: ClassVar[int] = 40

    ref_kind: RefKind
    name: str
    sha: str

    def describe(self) -> str:
        return f"Create {self.ref_kind.value} {self.name} at {self.sha}"

    def manual_commands(self) -> list[str]:
        return [_push(self.sha, self.ref_kind, self.name)]


@dataclass
class UpdateRefAction(RemediationAction):
    """Retarget a ref.

    A locked ref (a tag carrying an immutable release) cannot be moved; the
    handler reports it unfixable without touching the repository.
    """

    kind: ClassVar[ActionKind] = ActionKind.UPDATE_REF
    default_priority: ClassVar[int] = 50

    ref_kind: RefKind
    name: str
    sha: str
    force: bool = True
    locked: bool = False

    def describe(self) -> str:
        return f"Update {self.ref_kind.value} {self.name} to {self.sha}"

    def manual_commands(self) -> list[str]:
        return [_push(self.sha, self.ref_kind, self.name, force=self.force)]


@dataclass
class DeleteRefAction(RemediationAction):
    kind: ClassVar[ActionKind] = ActionKind.DELETE_REF
    default_priority: ClassVar[int] = 20

    ref_kind: RefKind
    name: str

    @property
    def is_destructive(self) -> bool:
        return True

    def describe(self) -> str:
        return f"Delete {self.ref_kind.value} {self.name}"

    def manual_commands(self) -> list[str]:
        return [_push_delete(self.ref_kind, self.name)]


@dataclass
class ConvertRefKindAction(RemediationAction):
    """Replace a ref of one kind by the other kind at the same commit.

    The source is deleted only once the target exists.
    """

    kind: ClassVar[ActionKind] = ActionKind.CONVERT_REF_KIND
    default_priority: ClassVar[int] = 30

    name: str
    sha: str
    source_kind: RefKind
    target_kind: RefKind

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.source_kind == self.target_kind:
            raise ValueError(f"Cannot convert {self.name} from {self.source_kind.value} to itself")

    @property
    def is_destructive(self) -> bool:
        return True

    def describe(self) -> str:
        return f"Convert {self.name} from {self.source_kind.value} to {self.target_kind.value}"

    def manual_commands(self) -> list[str]:
        return [
            _push(self.sha, self.target_kind, self.name),
            _push_delete(self.source_kind, self.name),
        ]


@dataclass
class CreateReleaseAction(RemediationAction):
    """Create a release for an exact version.

    With ``publish`` the release is created as a draft and then published,
    which is how platforms with immutable releases seal it.
    """

    kind: ClassVar[ActionKind] = ActionKind.CREATE_RELEASE
    default_priority: ClassVar[int] = 60

    tag_name: str
    draft: bool = True
    publish: bool = True

    def describe(self) -> str:
        if self.draft and self.publish:
            return f"Create and publish release {self.tag_name}"
        return f"Create {'draft ' if self.draft else ''}release {self.tag_name}"

    def manual_commands(self) -> list[str]:
        draft = " --draft" if self.draft else ""
        commands = [f'gh release create {self.tag_name}{draft} --title "{self.tag_name}" --notes ""']
        if self.draft and self.publish:
            commands.append(f"gh release edit {self.tag_name} --draft=false")
        return commands


@dataclass
class PublishReleaseAction(RemediationAction):
    kind: ClassVar[ActionKind] = ActionKind.PUBLISH_RELEASE
    default_priority: ClassVar[int] = 70

    tag_name: str
    release_id: int

    def describe(self) -> str:
        return f"Publish draft release {self.tag_name}"

    def manual_commands(self) -> list[str]:
        return [f"gh release edit {self.tag_name} --draft=false"]


@dataclass
class RepublishReleaseAction(RemediationAction):
    kind: ClassVar[ActionKind] = ActionKind.REPUBLISH_RELEASE
    default_priority: ClassVar[int] = 80

    tag_name: str
    release_id: int

    def describe(self) -> str:
        return f"Republish release {self.tag_name} to make it immutable"

    def manual_commands(self) -> list[str]:
        return [
            f"gh release edit {self.tag_name} --draft=true",
            f"gh release edit {self.tag_name} --draft=false",
        ]


@dataclass
class DeleteReleaseAction(RemediationAction):
    kind: ClassVar[ActionKind] = ActionKind.DELETE_RELEASE
    default_priority: ClassVar[int] = 10

    tag_name: str
    release_id: int
    immutable: bool = False

    @property
    def is_destructive(self) -> bool:
        return True

    def describe(self) -> str:
        return f"Delete release {self.tag_name}"

    def manual_commands(self) -> list[str]:
        return [f"gh release delete {self.tag_name} --yes"]


# ----------------------------------------------------------------------
# Handlers
# ----------------------------------------------------------------------


def _handle_create_ref(action: CreateRefAction, repository: RefRepository, run: Runner) -> None:
    run(lambda: repository.create_ref(action.ref_kind, action.name, action.sha), "create_ref")


def _handle_update_ref(action: UpdateRefAction, repository: RefRepository, run: Runner) -> None:
    if action.locked:
        raise UnfixableConflictError(
            f"{action.ref_kind.value} {action.name} carries an immutable release and cannot be moved"
        )
    if repository.supports_ref_update:
        run(
            lambda: repository.update_ref(action.ref_kind, action.name, action.sha, force=action.force),
            "update_ref",
        )
        return

    ref = f"{action.ref_kind.value} {action.name}"
    _run_delete(run, lambda: repository.delete_ref(action.ref_kind, action.name), "delete_ref")
    try:
        run(lambda: repository.create_ref(action.ref_kind, action.name, action.sha), "create_ref")
    except Exception as e:
        raise PartialRemediationError(
            completed=[f"deleted {ref}"],
            failed_step=f"recreating {ref} at {action.sha}",
            cause=e,
        ) from e


def _handle_delete_ref(action: DeleteRefAction, repository: RefRepository, run: Runner) -> None:
    _run_delete(run, lambda: repository.delete_ref(action.ref_kind, action.name), "delete_ref")


def _handle_convert_ref_kind(action: ConvertRefKindAction, repository: RefRepository, run: Runner) -> None:
    created = f"{action.target_kind.value} {action.name}"
    run(lambda: repository.create_ref(action.target_kind, action.name, action.sha), "create_ref")
    try:
        _run_delete(run, lambda: repository.delete_ref(action.source_kind, action.name), "delete_ref")
    except Exception as e:
        raise PartialRemediationError(
            completed=[f"created {created}"],
            failed_step=f"deleting {action.source_kind.value} {action.name}",
            cause=e,
        ) from e


def _handle_create_release(action: CreateReleaseAction, repository: RefRepository, run: Runner) -> None:
    release_id = run(lambda: repository.create_release(action.tag_name, draft=action.draft), "create_release")
    if not (action.draft and action.publish):
        return
    try:
        run(lambda: repository.publish_release(release_id), "publish_release")
    except Exception as e:
        raise PartialRemediationError(
            completed=[f"created draft release {action.tag_name}"],
            failed_step=f"publishing release {action.tag_name}",
            cause=e,
        ) from e


def _handle_publish_release(action: PublishReleaseAction, repository: RefRepository, run: Runner) -> None:
    run(lambda: repository.publish_release(action.release_id), "publish_release")


def _handle_republish_release(action: RepublishReleaseAction, repository: RefRepository, run: Runner) -> None:
    run(lambda: repository.republish_release(action.release_id), "republish_release")


def _handle_delete_release(action: DeleteReleaseAction, repository: RefRepository, run: Runner) -> None:
    if action.immutable:
        raise UnfixableConflictError(f"Release {action.tag_name} is immutable and cannot be deleted")
    _run_delete(run, lambda: repository.delete_release(action.release_id), "delete_release")


ACTION_HANDLERS: dict[ActionKind, Callable[[Any, RefRepository, Runner], None]] = {
    ActionKind.CREATE_REF: _handle_create_ref,
    ActionKind.UPDATE_REF: _handle_update_ref,
    ActionKind.DELETE_REF: _handle_delete_ref,
    ActionKind.CONVERT_REF_KIND: _handle_convert_ref_kind,
    ActionKind.CREATE_RELEASE: _handle_create_release,
    ActionKind.PUBLISH_RELEASE: _handle_publish_release,
    ActionKind.REPUBLISH_RELEASE: _handle_republish_release,
    ActionKind.DELETE_RELEASE: _handle_delete_release,
}


def execute_action(action: RemediationAction, repository: RefRepository, run: Runner | None = None) -> None:
    """Execute an action against the repository.

    Args:
        action: Action to execute
        repository: Target repository
        run: Wrapper for each repository call; defaults to a direct call

    Raises:
        UnfixableConflictError: If a structural constraint blocks the change
        PartialRemediationError: If a composite action stopped midway
        TransportError: If a repository call failed
    """
    handler = ACTION_HANDLERS.get(action.kind)
    if handler is None:
        raise ValueError(f"No handler registered for action kind {action.kind}")
    log.info(
        "action_executing",
        kind=action.kind.value,
        action=action.describe(),
        destructive=action.is_destructive,
    )
    handler(action, repository, run or _direct)
