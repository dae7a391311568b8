"""Ref/release repository providers.

Key Components:
    - RefRepository: Abstract base for repository providers
    - GitHubRestRepository: GitHub implementation using PyGithub
    - GiteaRestRepository: Gitea REST API implementation using httpx
    - create_ref_repository: Builds the provider selected by CheckerSettings

Example:
    >>> from semver_checker.providers import create_ref_repository
    >>> with create_ref_repository(settings) as repository:
    ...     refs = repository.list_refs()
"""

from semver_checker.providers.base import RefRepository
from semver_checker.providers.factory import create_ref_repository
from semver_checker.providers.gitea_rest import GiteaRestRepository
from semver_checker.providers.github_rest import GitHubRestRepository

__all__ = [
    "GitHubRestRepository",
    "GiteaRestRepository",
    "RefRepository",
    "create_ref_repository",
]
