"""Configuration for semver-checker.

This package provides type-safe configuration management using Pydantic.

Key Components:
    - CheckerConfig: Enumerated check options read by the rule engine
    - CheckerSettings: Run settings with YAML and environment loading
    - ProviderConfig: Repository provider (GitHub, Gitea)
    - RepositoryConfig: Owner and name of the checked repository
    - RetryConfig: Retry budget for repository calls

Example:
    >>> from semver_checker.config import CheckerSettings
    >>> settings = CheckerSettings.from_yaml("semver-checker.yaml")
    >>> settings.checks.floating_versions_use
"""

from semver_checker.config.settings import (
    CheckerConfig,
    CheckerSettings,
    ProviderConfig,
    RepositoryConfig,
    RetryConfig,
)

__all__ = [
    "CheckerConfig",
    "CheckerSettings",
    "ProviderConfig",
    "RepositoryConfig",
    "RetryConfig",
]
