"""
Configuration system using Pydantic for type-safe settings management.

This module provides the enumerated check options consumed by the rule
engine (CheckerConfig) and the run-level settings wrapping them: which
repository provider to talk to, retry budget and whether to auto-fix.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from semver_checker.enums import CheckLevel, FloatingRefKind, RefKind
from semver_checker.exceptions import ConfigurationError


class CheckerConfig(BaseModel):
    """Enumerated option set read by every rule.

    Option names are accepted in their hyphenated form
    (``check-minor-version``) as well as their Python attribute names.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    check_minor_version: CheckLevel = Field(
        default=CheckLevel.ERROR,
        alias="check-minor-version",
        description="Whether vN.M floating versions are required and tracked",
    )
    check_releases: CheckLevel = Field(
        default=CheckLevel.ERROR,
        alias="check-releases",
        description="Whether exact versions need releases and floating versions must not have them",
    )
    check_release_immutability: CheckLevel = Field(
        default=CheckLevel.ERROR,
        alias="check-release-immutability",
        description="Whether releases must be published and immutable",
    )
    floating_versions_use: FloatingRefKind = Field(
        default=FloatingRefKind.TAGS,
        alias="floating-versions-use",
        description="Ref kind used for vN, vN.M and latest",
    )
    ignore_preview_releases: bool = Field(
        default=True,
        alias="ignore-preview-releases",
        description="Skip prerelease versions when resolving what floating versions track",
    )
    ignore_versions: list[str] = Field(
        default_factory=list,
        alias="ignore-versions",
        description="Glob patterns of versions excluded from validation",
    )

    @field_validator("ignore_versions", mode="before")
    @classmethod
    def split_ignore_versions(cls, value: Any) -> Any:
        """Accept a comma or newline separated string as well as a list."""
        if isinstance(value, str):
            return [part.strip() for part in re.split(r"[,\n]", value) if part.strip()]
        return value

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> CheckerConfig:
        """Build a config from a raw option map.

        Args:
            options: Option names (hyphenated or not) mapped to values

        Returns:
            Validated CheckerConfig

        Raises:
            ConfigurationError: If an option is unknown or holds a value
                outside its enumerated set
        """
        try:
            return cls.model_validate(dict(options))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid check options: {e}") from e

    @property
    def floating_kind(self) -> RefKind:
        """Ref kind floating versions are expected to use."""
        return self.floating_versions_use.to_ref_kind()


class ProviderConfig(BaseModel):
    """Ref/release repository provider configuration."""

    provider_type: Literal["github", "gitea"] = Field(default="github", description="Type of repository provider")
    base_url: str = Field(default="https://api.github.com", description="API base URL of the provider")
    token: SecretStr | None = Field(default=None, description="API token for authentication")


class RepositoryConfig(BaseModel):
    """Repository configuration."""

    owner: str = Field(..., description="Repository owner/organization")
    name: str = Field(..., description="Repository name")


class RetryConfig(BaseModel):
    """Retry budget for repository calls."""

    max_retries: int = Field(default=3, ge=0, le=10, description="Retries after the first attempt")
    initial_delay: float = Field(default=1.0, ge=0.0, le=60.0, description="Seconds before the first retry")


class CheckerSettings(BaseSettings):
    """Main settings.

    Combines all configuration sections and provides loading from YAML files
    with environment variable interpolation.
    """

    model_config = SettingsConfigDict(
        env_prefix="SEMVER_CHECKER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    repository: RepositoryConfig | None = None
    checks: CheckerConfig = Field(default_factory=CheckerConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    auto_fix: bool = Field(default=False, description="Apply remediation actions instead of printing them")

    @classmethod
    def from_yaml(cls, config_path: str) -> CheckerSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} and ${VAR_NAME:-default} substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            CheckerSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                yaml_content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e
        except TypeError as e:
            raise ConfigurationError(f"Missing or invalid configuration fields: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        YAML comment lines are left unchanged.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        lines = []
        for line in content.splitlines(keepends=True):
            if line.lstrip().startswith("#"):
                lines.append(line)
            else:
                lines.append(pattern.sub(replace_var, line))
        return "".join(lines)
