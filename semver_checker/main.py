"""CLI entry point for semver-checker."""

import sys
from pathlib import Path

import click
import structlog
from pydantic import SecretStr, ValidationError

from semver_checker.config.settings import CheckerSettings, RepositoryConfig
from semver_checker.engine.collector import collect_state
from semver_checker.engine.rule_engine import RuleEngine
from semver_checker.enums import IssueStatus
from semver_checker.exceptions import ConfigurationError, PlanningError, SemverCheckerError
from semver_checker.models.domain import RemediationSummary, RepositoryState
from semver_checker.providers.factory import create_ref_repository
from semver_checker.remediation.executor import RemediationExecutor
from semver_checker.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_UNRESOLVED = 1
EXIT_CONFIG = 2


@click.group()
@click.option("--config", default=None, help="Path to configuration file")
@click.option("--log-level", default="WARNING", help="Logging level")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str) -> None:
    """semver-checker: validate and repair version tags, branches and releases."""
    configure_logging(log_level)

    try:
        if config is None:
            settings = CheckerSettings()
        else:
            if not Path(config).exists():
                raise ConfigurationError(f"Configuration file not found: {config}")
            settings = CheckerSettings.from_yaml(config)
    except ValidationError as e:
        click.echo(f"Error: invalid settings: {e}", err=True)
        sys.exit(EXIT_CONFIG)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("config_error", exc_info=True)
        sys.exit(EXIT_CONFIG)

    ctx.obj = {"settings": settings}


@cli.command()
@click.option("--auto-fix", is_flag=True, default=False, help="Apply fixes instead of printing commands")
@click.option("--owner", help="Repository owner (overrides config)")
@click.option("--repo", help="Repository name (overrides config)")
@click.option("--token", envvar="GITHUB_TOKEN", help="API token (overrides config)")
@click.option("--provider", type=click.Choice(["github", "gitea"]), help="Provider type (overrides config)")
@click.option("--base-url", help="Provider API base URL (overrides config)")
@click.pass_context
def check(
    ctx: click.Context,
    auto_fix: bool,
    owner: str | None,
    repo: str | None,
    token: str | None,
    provider: str | None,
    base_url: str | None,
) -> None:
    """Check version refs and releases, optionally fixing them."""
    settings: CheckerSettings = ctx.obj["settings"]

    try:
        settings = apply_overrides(settings, owner, repo, token, provider, base_url)
        state, summary = run_check(settings, auto_fix or settings.auto_fix)
    except (ConfigurationError, PlanningError) as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("check_error", exc_info=True)
        sys.exit(EXIT_CONFIG)
    except SemverCheckerError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("check_error", exc_info=True)
        sys.exit(EXIT_UNRESOLVED)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    report(state, summary)
    sys.exit(EXIT_OK if summary.success else EXIT_UNRESOLVED)


def apply_overrides(
    settings: CheckerSettings,
    owner: str | None = None,
    repo: str | None = None,
    token: str | None = None,
    provider: str | None = None,
    base_url: str | None = None,
) -> CheckerSettings:
    """Return settings with command line values taking precedence.

    Raises:
        ConfigurationError: If only one of owner and repo is known
    """
    provider_update: dict[str, object] = {}
    if provider:
        provider_update["provider_type"] = provider
    if base_url:
        provider_update["base_url"] = base_url
    if token:
        provider_update["token"] = SecretStr(token)

    update: dict[str, object] = {}
    if provider_update:
        update["provider"] = settings.provider.model_copy(update=provider_update)

    if owner or repo:
        current = settings.repository
        owner = owner or (current.owner if current else None)
        repo = repo or (current.name if current else None)
        if not owner or not repo:
            raise ConfigurationError("Both --owner and --repo are required")
        update["repository"] = RepositoryConfig(owner=owner, name=repo)

    return settings.model_copy(update=update) if update else settings


def run_check(settings: CheckerSettings, auto_fix: bool) -> tuple[RepositoryState, RemediationSummary]:
    """Collect, evaluate and remediate one repository.

    Args:
        settings: Run settings
        auto_fix: Apply remediation actions

    Returns:
        The evaluated state and the remediation summary
    """
    repository = create_ref_repository(settings)
    with repository:
        state = collect_state(repository, settings.checks, settings.retry)
        RuleEngine().evaluate(state)
        executor = RemediationExecutor(repository, retry=settings.retry)
        summary = executor.run(state, auto_fix=auto_fix)

    log.info(
        "check_completed",
        issues=summary.total,
        fixed=summary.fixed,
        failed=summary.failed,
        unfixable=summary.unfixable,
        success=summary.success,
    )
    return state, summary


def report(state: RepositoryState, summary: RemediationSummary) -> None:
    """Print issues, manual commands and the summary line."""
    if not state.issues:
        click.echo("No issues found.")
        return

    for issue in state.issues:
        line = f"[{issue.severity.value.upper()}] {issue.version}: {issue.message}"
        if issue.status != IssueStatus.PENDING:
            line += f" ({issue.status.value}"
            line += f": {issue.status_message})" if issue.status_message else ")"
        click.echo(line)

    if summary.manual_commands:
        click.echo("\nRun these commands to fix the remaining issues:")
        for command in summary.manual_commands:
            click.echo(f"  {command}")

    click.echo(
        f"\n{summary.total} issue(s): {summary.fixed} fixed, {summary.failed} failed, "
        f"{summary.unfixable} unfixable, {summary.manual_fix_required} need a manual fix"
    )


if __name__ == "__main__":
    cli()
