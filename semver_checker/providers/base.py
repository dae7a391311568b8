"""
Abstract base class for ref/release repository providers.

The rule engine and the remediation executor never talk HTTP themselves:
they depend on this capability. Implementations translate their client
library's failures into the checker's error taxonomy:

- TransportError(retryable=True) for timeouts, connection resets, HTTP 429/5xx
- TransportError(retryable=False) for other client errors
- UnfixableConflictError when the platform refuses the change structurally
  (immutable release, protected ref)
"""

import re
from abc import ABC, abstractmethod
from typing import Any

from semver_checker.enums import RefKind
from semver_checker.models.domain import RawRef, ReleaseInfo

_SHA_PATTERN = re.compile(r"[0-9a-f]{40}")


def commit_sha(value: str | None) -> str | None:
    """Return value if it is a full commit sha, else None.

    Release payloads name their target as a branch or a commit.
    """
    if value and _SHA_PATTERN.fullmatch(value):
        return value
    return None


class RefRepository(ABC):
    """Abstract base class for repository provider implementations.

    All methods are blocking. Convert-kind operations are composed by the
    caller from create_ref and delete_ref.

    Class attributes describe what the platform can do:

    - supports_ref_update: update_ref moves a ref in one call. When False the
      caller deletes and recreates the ref itself.
    - supports_immutable_releases: releases can be sealed against changes.
    """

    supports_ref_update: bool = True
    supports_immutable_releases: bool = True

    def connect(self) -> None:
        """Open the underlying client. Default implementation does nothing."""

    def disconnect(self) -> None:
        """Release the underlying client. Default implementation does nothing."""

    def __enter__(self) -> "RefRepository":
        self.connect()
        return self

    def __exit__(self, *args: Any) -> None:
        self.disconnect()

    @abstractmethod
    def list_refs(self) -> list[RawRef]:
        """List all tags and branches with the commit sha they point to.

        Annotated tags are dereferenced to the commit they tag.
        """
        pass

    @abstractmethod
    def list_releases(self) -> list[ReleaseInfo]:
        """List all releases, drafts included."""
        pass

    @abstractmethod
    def create_ref(self, kind: RefKind, name: str, sha: str) -> None:
        """Create a tag or branch pointing at a commit.

        Args:
            kind: Tag or branch
            name: Short ref name (``v1``)
            sha: Commit sha
        """
        pass

    @abstractmethod
    def update_ref(self, kind: RefKind, name: str, sha: str, force: bool = True) -> None:
        """Move an existing tag or branch to another commit.

        Args:
            kind: Tag or branch
            name: Short ref name
            sha: New commit sha
            force: Allow a non fast-forward move
        """
        pass

    @abstractmethod
    def delete_ref(self, kind: RefKind, name: str) -> None:
        """Delete a tag or branch."""
        pass

    @abstractmethod
    def create_release(self, tag_name: str, draft: bool = True) -> int:
        """Create a release for an existing tag.

        Returns:
            The id of the new release
        """
        pass

    @abstractmethod
    def publish_release(self, release_id: int) -> None:
        """Turn a draft release into a published one."""
        pass

    @abstractmethod
    def republish_release(self, release_id: int) -> None:
        """Unpublish and publish a release again so the platform seals it."""
        pass

    @abstractmethod
    def delete_release(self, release_id: int) -> None:
        """Delete a release, keeping its tag."""
        pass
