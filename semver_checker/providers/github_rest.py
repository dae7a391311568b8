"""GitHub provider implementation using PyGithub and REST API."""

from collections.abc import Callable
from typing import TypeVar

import structlog
from github import Github, GithubException  # type: ignore[import-not-found]
from github.GitRef import GitRef as GHGitRef  # type: ignore[import-not-found]
from github.GitRelease import GitRelease as GHRelease  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from semver_checker.enums import RefKind
from semver_checker.exceptions import TransportError, UnfixableConflictError
from semver_checker.models.domain import RawRef, ReleaseInfo
from semver_checker.providers.base import RefRepository, commit_sha
from semver_checker.utils.retry import is_retryable_status

log = structlog.get_logger(__name__)

T = TypeVar("T")

_CONFLICT_MARKERS = ("immutable", "protected")


def translate_github_error(error: GithubException, operation: str) -> Exception:
    """Map a PyGithub failure onto the checker's error taxonomy."""
    status = error.status
    detail = str(error.data) if error.data else str(error)
    if status in (403, 422) and any(marker in detail.lower() for marker in _CONFLICT_MARKERS):
        return UnfixableConflictError(f"GitHub refused {operation}: {detail}")
    return TransportError(
        f"GitHub {operation} failed: {detail}",
        status_code=status,
        retryable=is_retryable_status(status),
    )


class GitHubRestRepository(RefRepository):
    """GitHub implementation using PyGithub library."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize GitHub provider.

        Args:
            token: GitHub personal access token or App token
            owner: Repository owner (user or organization)
            repo: Repository name
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    def connect(self) -> None:
        """Initialize GitHub client."""
        self._client = Github(self.token, base_url=self.base_url)
        self._repo = self._call(lambda: self._client.get_repo(f"{self.owner}/{self.repo}"), "get_repo")
        log.info(
            "github_connected",
            base_url=self.base_url,
            owner=self.owner,
            repo=self.repo,
        )

    def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            self._client.close()
            self._client = None
            self._repo = None

    @property
    def repository(self) -> GHRepository:
        if self._repo is None:
            raise TransportError("GitHub provider is not connected")
        return self._repo

    def _call(self, operation: Callable[[], T], name: str) -> T:
        try:
            return operation()
        except GithubException as e:
            log.error("github_call_failed", operation=name, status=e.status, error=str(e))
            raise translate_github_error(e, name) from e
        except OSError as e:
            log.error("github_connection_failed", operation=name, error=str(e))
            raise TransportError(f"GitHub {name} failed: {e}", retryable=True) from e

    # ------------------------------------------------------------------
    # Refs
    # ------------------------------------------------------------------

    def list_refs(self) -> list[RawRef]:
        """List tags and branches via the git refs API."""
        log.info("list_refs")
        git_refs = self._call(lambda: list(self.repository.get_git_refs()), "list_refs")
        refs = []
        for git_ref in git_refs:
            raw = self._convert_ref(git_ref)
            if raw is not None:
                refs.append(raw)
        return refs

    def _convert_ref(self, git_ref: GHGitRef) -> RawRef | None:
        for kind in RefKind:
            if git_ref.ref.startswith(kind.ref_prefix):
                name = git_ref.ref[len(kind.ref_prefix) :]
                break
        else:
            return None

        sha = git_ref.object.sha
        # Annotated tags point at a tag object; resolve it to the tagged commit
        if git_ref.object.type == "tag":
            tag = self._call(lambda: self.repository.get_git_tag(sha), "get_git_tag")
            sha = tag.object.sha
        return RawRef(name=name, ref=git_ref.ref, sha=sha, kind=kind)

    def create_ref(self, kind: RefKind, name: str, sha: str) -> None:
        log.info("create_ref", kind=kind.value, name=name, sha=sha)
        self._call(
            lambda: self.repository.create_git_ref(ref=f"{kind.ref_prefix}{name}", sha=sha),
            "create_ref",
        )

    def update_ref(self, kind: RefKind, name: str, sha: str, force: bool = True) -> None:
        log.info("update_ref", kind=kind.value, name=name, sha=sha, force=force)

        def _update() -> None:
            git_ref = self.repository.get_git_ref(f"{kind.ref_prefix.removeprefix('refs/')}{name}")
            git_ref.edit(sha, force=force)

        self._call(_update, "update_ref")

    def delete_ref(self, kind: RefKind, name: str) -> None:
        log.info("delete_ref", kind=kind.value, name=name)

        def _delete() -> None:
            git_ref = self.repository.get_git_ref(f"{kind.ref_prefix.removeprefix('refs/')}{name}")
            git_ref.delete()

        self._call(_delete, "delete_ref")

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------

    def list_releases(self) -> list[ReleaseInfo]:
        log.info("list_releases")
        gh_releases = self._call(lambda: list(self.repository.get_releases()), "list_releases")
        return [self._convert_release(gh_release) for gh_release in gh_releases]

    def create_release(self, tag_name: str, draft: bool = True) -> int:
        log.info("create_release", tag=tag_name, draft=draft)
        gh_release = self._call(
            lambda: self.repository.create_git_release(tag_name, tag_name, "", draft=draft),
            "create_release",
        )
        return gh_release.id

    def publish_release(self, release_id: int) -> None:
        log.info("publish_release", release_id=release_id)
        self._call(lambda: self._set_draft(release_id, False), "publish_release")

    def republish_release(self, release_id: int) -> None:
        """Move the release back to draft and publish it again.

        Publishing is what makes GitHub seal a release when immutable
        releases are enabled on the repository.
        """
        log.info("republish_release", release_id=release_id)
        self._call(lambda: self._set_draft(release_id, True), "unpublish_release")
        self._call(lambda: self._set_draft(release_id, False), "publish_release")

    def delete_release(self, release_id: int) -> None:
        log.info("delete_release", release_id=release_id)
        self._call(lambda: self.repository.get_release(release_id).delete_release(), "delete_release")

    def _set_draft(self, release_id: int, draft: bool) -> None:
        gh_release = self.repository.get_release(release_id)
        gh_release.update_release(
            name=gh_release.title or gh_release.tag_name,
            message=gh_release.body or "",
            draft=draft,
        )

    def _convert_release(self, gh_release: GHRelease) -> ReleaseInfo:
        raw = gh_release.raw_data or {}
        return ReleaseInfo(
            tag_name=gh_release.tag_name,
            id=gh_release.id,
            is_draft=gh_release.draft,
            is_prerelease=gh_release.prerelease,
            is_immutable=bool(raw.get("immutable", False)),
            url=gh_release.html_url or "",
            target_sha=commit_sha(raw.get("target_commitish")),
        )
