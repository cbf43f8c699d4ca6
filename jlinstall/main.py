"""
jlinstall — CLI entrypoint.

Usage:
    jlinstall                      interactive menu
    jlinstall install [latest|lts|<version>]   (alias: i)
    jlinstall list
    jlinstall uninstall <version>
    jlinstall use <version>
    jlinstall available [--all]
    jlinstall help                 (alias: h)
"""

from __future__ import annotations

import json
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import click

from jlinstall import __version__
from jlinstall.core.config.loader import ConfigError
from jlinstall.core.errors import InstallerError
from jlinstall.core.observability.logging_config import resolve_level, setup_logging


class InstallerGroup(click.Group):
    """Click group whose usage errors exit with status 1.

    Also accepts the short command names ``i`` and ``h``.
    """

    aliases = {"i": "install", "h": "help"}

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def _emit_error(payload: dict[str, Any], message: str, exit_code: int, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps({"error": payload}, indent=2))
    else:
        click.secho(f"❌ {message}", fg="red")
    sys.exit(exit_code)


@contextmanager
def _reported(as_json: bool = False) -> Iterator[None]:
    """Turn installer and config errors into a message and an exit code."""
    try:
        yield
    except InstallerError as e:
        _emit_error(e.to_dict(), e.message, e.exit_code, as_json)
    except ConfigError as e:
        payload = {"type": "ConfigError", "kind": "invalid_config", "message": str(e)}
        _emit_error(payload, str(e), 1, as_json)
    except OSError as e:
        # Filesystem errors outside an engine step (e.g. an unreadable install root).
        payload = {"type": type(e).__name__, "kind": "filesystem", "message": str(e)}
        _emit_error(payload, str(e), 1, as_json)


def _runtime(ctx: click.Context):
    from jlinstall.core.use_cases.runtime import Runtime

    return Runtime.build(ctx.obj.get("config_path"))


@click.group(
    cls=InstallerGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=__version__, prog_name="jlinstall")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to config.yml (default: $JLINSTALL_CONFIG or ~/.config/jlinstall/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """jlinstall — install and manage Julia versions.

    Run without a command for the interactive menu.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(
            debug=debug,
            verbose=verbose,
            quiet=quiet,
            env_level=os.environ.get("JLINSTALL_LOG_LEVEL"),
        ),
        log_file=os.environ.get("JLINSTALL_LOG_FILE"),
        log_file_level=os.environ.get("JLINSTALL_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )

    if ctx.invoked_subcommand is None:
        _interactive(ctx)


def _interactive(ctx: click.Context) -> None:
    from jlinstall.adapters.prompt import Prompter
    from jlinstall.core.services.menu import InteractiveMenu

    prompter = Prompter()
    with _reported():
        runtime = _runtime(ctx)
        runtime.check_dependencies()
        menu = InteractiveMenu(
            prompter,
            runtime.layout,
            load_catalog=runtime.fetch_catalog,
            platform=runtime.platform,
            install=lambda ident, catalog: runtime.installer(confirm=prompter.confirm).install(
                ident, catalog,
            ),
            uninstall=runtime.uninstaller().uninstall,
        )
        outcome = menu.run()

    if outcome.action == "install":
        _print_install(outcome.result)
    elif outcome.action == "uninstall":
        click.secho(f"✅ {outcome.result.name} deleted successfully", fg="green")


def _print_install(result) -> None:
    if result.already_installed:
        click.secho(f"⚠️  {result.name} is already installed on this system", fg="yellow")
        return
    click.secho("✅ Installation completed successfully!", fg="green", bold=True)
    click.echo(f"   Installation directory: {result.path}")
    click.echo(f"   Launcher: {result.launcher}")
    if result.became_default:
        click.echo(f"   Default: {result.name}")


# ── Commands ────────────────────────────────────────────────────


@cli.command()
@click.argument("version", required=False, default="latest")
@click.option(
    "--default/--no-default",
    "make_default",
    default=None,
    help="Make this the default version (asks when omitted).",
)
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Retry fetching the download page on network errors.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    version: str,
    make_default: bool | None,
    retries: int,
    as_json: bool,
) -> None:
    """Install VERSION: latest (default), lts, or x.y.z."""
    from jlinstall.adapters.prompt import Prompter
    from jlinstall.core.use_cases.versions import install_version

    # JSON output never prompts.
    confirm = None if as_json else Prompter().confirm

    with _reported(as_json):
        result = install_version(
            _runtime(ctx),
            version,
            make_default=make_default,
            confirm=confirm,
            retries=retries,
        )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    _print_install(result)


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool) -> None:
    """List installed versions, one per line."""
    from jlinstall.core.use_cases.versions import list_installed

    with _reported(as_json):
        result = list_installed(_runtime(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    for iv in result.installed:
        click.echo(iv.name)


@cli.command()
@click.argument("version")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def uninstall(ctx: click.Context, version: str, as_json: bool) -> None:
    """Uninstall an installed VERSION."""
    from jlinstall.core.use_cases.versions import uninstall_version

    with _reported(as_json):
        result = uninstall_version(_runtime(ctx), version)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    click.secho(f"✅ {result.name} deleted successfully", fg="green")
    if result.was_default:
        click.echo("   The default launcher was removed as well.")


@cli.command()
@click.argument("version")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def use(ctx: click.Context, version: str, as_json: bool) -> None:
    """Make an installed VERSION the default."""
    from jlinstall.core.use_cases.versions import use_version

    with _reported(as_json):
        result = use_version(_runtime(ctx), version)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    if result.changed:
        click.secho(f"✅ {result.name} is now the default", fg="green")
    else:
        click.echo(f"{result.name} is already the default")


@cli.command()
@click.option("--all", "show_all", is_flag=True, help="Show builds for every platform.")
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Retry fetching the download page on network errors.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def available(ctx: click.Context, show_all: bool, retries: int, as_json: bool) -> None:
    """Show install options from the download page."""
    from jlinstall.core.use_cases.versions import list_available

    with _reported(as_json):
        result = list_available(_runtime(ctx), show_all=show_all, retries=retries)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    catalog = result.catalog
    if not ctx.obj.get("quiet"):
        click.secho(f"\n📦 {catalog.source_url}", fg="cyan", bold=True)
        click.echo(f"   latest: {catalog.latest or '—'}")
        click.echo(f"   lts:    {catalog.lts or '—'}")
        click.echo()
    for ident in result.options:
        click.echo(ident)


@cli.command("help")
@click.pass_context
def help_cmd(ctx: click.Context) -> None:
    """Show this message and exit."""
    click.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
