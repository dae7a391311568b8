"""Gitea provider implementation using direct REST API calls."""

from typing import Any

import httpx
import structlog

from semver_checker.enums import RefKind
from semver_checker.exceptions import TransportError, UnfixableConflictError
from semver_checker.models.domain import RawRef, ReleaseInfo
from semver_checker.providers.base import RefRepository, commit_sha
from semver_checker.utils.retry import is_retryable_status

log = structlog.get_logger(__name__)

_PAGE_SIZE = 50
_CONFLICT_MARKERS = ("immutable", "protected")


def translate_gitea_error(response: httpx.Response, operation: str) -> Exception:
    """Map a failed Gitea response onto the checker's error taxonomy."""
    status = response.status_code
    detail = response.text
    if status in (403, 409, 422) and any(marker in detail.lower() for marker in _CONFLICT_MARKERS):
        return UnfixableConflictError(f"Gitea refused {operation}: {detail}")
    return TransportError(
        f"Gitea {operation} failed: {detail}",
        status_code=status,
        retryable=is_retryable_status(status),
    )


class GiteaRestRepository(RefRepository):
    """Gitea implementation using direct REST API calls.

    Gitea has no endpoint to move a ref, so update_ref deletes and recreates
    it; the remediation handlers do the same step by step so that a failed
    recreate is reported. Gitea releases have no immutability flag; they are
    never reported as immutable.
    """

    supports_ref_update = False
    supports_immutable_releases = False

    def __init__(
        self,
        base_url: str,
        token: str,
        owner: str,
        repo: str,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 30.0,
    ):
        """Initialize Gitea provider.

        Args:
            base_url: Gitea base URL (e.g., http://gitea.example.com)
            token: API token
            owner: Repository owner
            repo: Repository name
            transport: Optional httpx transport, used by tests
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.api_base = f"{self.base_url}/api/v1"
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        self.transport = transport
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def connect(self) -> None:
        """Open the HTTP client and verify connectivity."""
        self._client = httpx.Client(
            base_url=self.api_base,
            headers={
                "Authorization": f"token {self.token}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=self.transport,
        )
        self._request("GET", "/version", "connect")
        log.info("gitea_connected", base_url=self.base_url, owner=self.owner, repo=self.repo)

    def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def _request(self, method: str, path: str, operation: str, **kwargs: Any) -> httpx.Response:
        if self._client is None:
            raise TransportError("Gitea provider is not connected")
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            log.error("gitea_connection_failed", operation=operation, error=str(e))
            raise TransportError(f"Gitea {operation} failed: {e}", retryable=True) from e

        if response.is_error:
            log.error("gitea_call_failed", operation=operation, status=response.status_code)
            raise translate_gitea_error(response, operation)
        return response

    def _paginate(self, path: str, operation: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            response = self._request("GET", path, operation, params={"page": page, "limit": _PAGE_SIZE})
            batch = response.json() or []
            items.extend(batch)
            if len(batch) < _PAGE_SIZE:
                return items
            page += 1

    # ------------------------------------------------------------------
    # Refs
    # ------------------------------------------------------------------

    def list_refs(self) -> list[RawRef]:
        """List tags and branches; tag commits are already dereferenced by Gitea."""
        log.info("list_refs")
        refs = [
            RawRef(
                name=tag["name"],
                ref=f"{RefKind.TAG.ref_prefix}{tag['name']}",
                sha=tag["commit"]["sha"],
                kind=RefKind.TAG,
            )
            for tag in self._paginate(f"{self.repo_path}/tags", "list_tags")
        ]
        refs.extend(
            RawRef(
                name=branch["name"],
                ref=f"{RefKind.BRANCH.ref_prefix}{branch['name']}",
                sha=branch["commit"]["id"],
                kind=RefKind.BRANCH,
            )
            for branch in self._paginate(f"{self.repo_path}/branches", "list_branches")
        )
        return refs

    def create_ref(self, kind: RefKind, name: str, sha: str) -> None:
        log.info("create_ref", kind=kind.value, name=name, sha=sha)
        if kind == RefKind.TAG:
            self._request("POST", f"{self.repo_path}/tags", "create_tag", json={"tag_name": name, "target": sha})
        else:
            self._request(
                "POST",
                f"{self.repo_path}/branches",
                "create_branch",
                json={"new_branch_name": name, "old_ref_name": sha},
            )

    def update_ref(self, kind: RefKind, name: str, sha: str, force: bool = True) -> None:
        log.info("update_ref", kind=kind.value, name=name, sha=sha, force=force)
        self.delete_ref(kind, name)
        self.create_ref(kind, name, sha)

    def delete_ref(self, kind: RefKind, name: str) -> None:
        log.info("delete_ref", kind=kind.value, name=name)
        collection = "tags" if kind == RefKind.TAG else "branches"
        self._request("DELETE", f"{self.repo_path}/{collection}/{name}", f"delete_{kind.value}")

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------

    def list_releases(self) -> list[ReleaseInfo]:
        log.info("list_releases")
        return [
            self._parse_release(data)
            for data in self._paginate(f"{self.repo_path}/releases", "list_releases")
        ]

    def create_release(self, tag_name: str, draft: bool = True) -> int:
        log.info("create_release", tag=tag_name, draft=draft)
        response = self._request(
            "POST",
            f"{self.repo_path}/releases",
            "create_release",
            json={"tag_name": tag_name, "name": tag_name, "body": "", "draft": draft},
        )
        return response.json()["id"]

    def publish_release(self, release_id: int) -> None:
        log.info("publish_release", release_id=release_id)
        self._set_draft(release_id, False, "publish_release")

    def republish_release(self, release_id: int) -> None:
        log.info("republish_release", release_id=release_id)
        self._set_draft(release_id, True, "unpublish_release")
        self._set_draft(release_id, False, "publish_release")

    def delete_release(self, release_id: int) -> None:
        log.info("delete_release", release_id=release_id)
        self._request("DELETE", f"{self.repo_path}/releases/{release_id}", "delete_release")

    def _set_draft(self, release_id: int, draft: bool, operation: str) -> None:
        self._request("PATCH", f"{self.repo_path}/releases/{release_id}", operation, json={"draft": draft})

    def _parse_release(self, data: dict[str, Any]) -> ReleaseInfo:
        return ReleaseInfo(
            tag_name=data["tag_name"],
            id=data["id"],
            is_draft=data.get("draft", False),
            is_prerelease=data.get("prerelease", False),
            is_immutable=False,
            url=data.get("html_url", ""),
            target_sha=commit_sha(data.get("target_commitish")),
        )
