"""Factory for creating ref/release repository providers from settings."""

import structlog

from semver_checker.config.settings import CheckerSettings
from semver_checker.exceptions import ConfigurationError
from semver_checker.providers.base import RefRepository
from semver_checker.providers.gitea_rest import GiteaRestRepository
from semver_checker.providers.github_rest import GitHubRestRepository

log = structlog.get_logger(__name__)


def create_ref_repository(settings: CheckerSettings) -> RefRepository:
    """Create the repository provider selected by the settings.

    The provider is returned unconnected.

    Args:
        settings: Run settings with provider and repository sections

    Returns:
        GitHubRestRepository or GiteaRestRepository

    Raises:
        ConfigurationError: If the repository or token is missing
    """
    if settings.repository is None:
        raise ConfigurationError("Repository owner and name are required")
    if settings.provider.token is None:
        raise ConfigurationError(f"A {settings.provider.provider_type} token is required")

    token = settings.provider.token.get_secret_value()
    owner = settings.repository.owner
    name = settings.repository.name
    log.debug("create_ref_repository", provider=settings.provider.provider_type, owner=owner, repo=name)

    if settings.provider.provider_type == "gitea":
        return GiteaRestRepository(base_url=settings.provider.base_url, token=token, owner=owner, repo=name)
    return GitHubRestRepository(token=token, owner=owner, repo=name, base_url=settings.provider.base_url)
