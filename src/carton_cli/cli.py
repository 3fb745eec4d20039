"""Command-line entry point for carton."""

from pathlib import Path

import click

from . import __version__
from .commands.config import config
from .commands.deps import check, show
from .config import resolve_settings
from .utils.console import _rich_echo, set_color


@click.group(help="carton - Perl module dependency manager", invoke_without_command=True)
@click.option("--color/--no-color", "color", default=None,
              help="Colorize output (default: from config)")
@click.option("--verbose/--no-verbose", "verbose", default=False,
              help="Print extra detail")
@click.option("-C", "--project-root", "project_root", default=None,
              type=click.Path(file_okay=False, path_type=Path),
              help="Project directory (default: current directory)")
@click.pass_context
def cli(ctx, color, verbose, project_root):
    """Resolve settings once and hand them to every subcommand."""
    settings = resolve_settings(project_root=project_root, color=color, verbose=verbose)
    set_color(settings.color)
    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command(help="Show carton version")
def version():
    _rich_echo(f"carton {__version__}")


cli.add_command(show)
cli.add_command(show, name="list")
cli.add_command(check)
cli.add_command(config)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
