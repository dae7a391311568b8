"""Pytest configuration and shared fixtures."""

from unittest.mock import Mock

import pytest

from semver_checker.config.settings import CheckerConfig
from semver_checker.enums import CheckLevel, RefKind
from semver_checker.models.domain import ReleaseInfo, RepositoryState, VersionRef
from semver_checker.providers.base import RefRepository


@pytest.fixture
def default_config() -> CheckerConfig:
    """CheckerConfig with every option at its default."""
    return CheckerConfig()


@pytest.fixture
def refs_config() -> CheckerConfig:
    """CheckerConfig with release checks disabled."""
    return CheckerConfig(
        check_releases=CheckLevel.NONE,
        check_release_immutability=CheckLevel.NONE,
    )


@pytest.fixture
def healthy_state() -> RepositoryState:
    """State that satisfies every rule under the default config."""
    sha_old, sha_new = "a" * 40, "b" * 40
    tags = [
        ("v1.0.0", sha_old),
        ("v1.1.0", sha_new),
        ("v1.0", sha_old),
        ("v1.1", sha_new),
        ("v1", sha_new),
        ("latest", sha_new),
    ]
    return RepositoryState(
        tags=[VersionRef.from_name(name, sha=sha, kind=RefKind.TAG) for name, sha in tags],
        releases=[
            ReleaseInfo(tag_name="v1.0.0", id=1, is_immutable=True),
            ReleaseInfo(tag_name="v1.1.0", id=2, is_immutable=True),
        ],
        config=CheckerConfig(),
    )


@pytest.fixture
def mock_repository() -> Mock:
    """Mock RefRepository whose calls all succeed."""
    repository = Mock(spec=RefRepository)
    repository.supports_ref_update = True
    repository.supports_immutable_releases = True
    repository.create_release.return_value = 100
    return repository


@pytest.fixture
def no_sleep() -> Mock:
    """Sleep replacement recording requested delays."""
    return Mock()
