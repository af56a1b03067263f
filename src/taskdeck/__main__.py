"""CLI entry point for Taskdeck."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from taskdeck import __version__
from taskdeck.config import TaskdeckConfig
from taskdeck.core.errors import BoardDataSourceError, ConfigError
from taskdeck.paths import get_config_path


def _load_config(
    config_path: Path | None,
    *,
    api_url: str | None = None,
    token: str | None = None,
    tenant: str | None = None,
) -> TaskdeckConfig:
    try:
        config = TaskdeckConfig.load(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    return config.with_overrides(api_url=api_url, token=token, tenant_id=tenant)


_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.toml (default: user config dir)",
)
_api_options = [
    click.option("--api-url", default=None, help="Base URL of the board REST API"),
    click.option("--token", default=None, help="Bearer token for the API"),
    click.option("--tenant", default=None, help="Tenant id sent as X-Tenant-Id"),
]


def _with_api_options(func):
    for option in reversed(_api_options):
        func = option(func)
    return _config_option(func)


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version and exit")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """Terminal board client with drag-and-drop task ordering."""
    if version:
        click.echo(f"taskdeck {__version__}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("project_id")
@_with_api_options
def board(
    project_id: str,
    api_url: str | None,
    token: str | None,
    tenant: str | None,
    config_path: Path | None,
) -> None:
    """Open the board of PROJECT_ID in the terminal UI."""
    config = _load_config(config_path, api_url=api_url, token=token, tenant=tenant)

    from taskdeck.tui.app import TaskdeckApp

    app = TaskdeckApp(config, project_id, config_path=config_path)
    app.run()


@cli.command()
@click.argument("project_id")
@_with_api_options
def show(
    project_id: str,
    api_url: str | None,
    token: str | None,
    tenant: str | None,
    config_path: Path | None,
) -> None:
    """Print the sections and task order of PROJECT_ID."""
    from taskdeck.adapters.http import HttpBoardDataSource

    config = _load_config(config_path, api_url=api_url, token=token, tenant=tenant)

    async def _fetch():
        async with HttpBoardDataSource.from_config(config.api) as source:
            return await source.fetch_board(project_id)

    try:
        snapshot = asyncio.run(_fetch())
    except BoardDataSourceError as exc:
        raise click.ClickException(f"Could not load board: {exc}") from exc

    if not snapshot.sections:
        click.echo("No sections.")
        return
    for section in snapshot.sections:
        click.secho(f"{section.name or section.id} ({len(section.tasks)})", bold=True)
        for index, task in enumerate(section.tasks):
            click.echo(f"  {index:>3}  {task.priority.icon} {task.title}  [{task.status.label}]")


@cli.group()
def config() -> None:
    """Create or inspect the configuration file."""


@config.command("path")
def config_path_cmd() -> None:
    """Print where the configuration file lives."""
    click.echo(str(get_config_path()))


@config.command("init")
@_config_option
@click.option("--api-url", default=None, help="Base URL to store in the new file")
@click.option("--tenant", default=None, help="Tenant id to store in the new file")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_init(
    config_path: Path | None,
    api_url: str | None,
    tenant: str | None,
    force: bool,
) -> None:
    """Write a starter configuration file."""
    path = config_path or get_config_path()
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")
    starter = TaskdeckConfig().with_overrides(api_url=api_url, tenant_id=tenant)
    try:
        asyncio.run(starter.save(path))
    except OSError as exc:
        raise click.ClickException(f"Could not write {path}: {exc}") from exc
    click.echo(f"Wrote {path}")


@config.command("show")
@_config_option
def config_show(config_path: Path | None) -> None:
    """Print the effective configuration (token redacted)."""
    loaded = _load_config(config_path)
    if loaded.api.token:
        loaded = loaded.with_overrides(token="********")
    click.echo(loaded.to_toml().rstrip())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
