"""CLI entrypoint for plugkit."""

import sys
from pathlib import Path

import click

from . import __version__
from .config.load import CONFIG_ENV_VAR, find_config_path


@click.group()
@click.version_option(__version__, prog_name="plugkit")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to the plugin catalog (defaults to ${CONFIG_ENV_VAR} or the nearest config.json)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """plugkit - inspect a plugin's method catalog.

    List methods, validate the catalog, and check which method an
    autocomplete parameter set resolves to.
    """
    ctx.ensure_object(dict)
    if config_path is None:
        config_path = find_config_path(Path.cwd())
        if config_path is None:
            raise click.ClickException(
                "Catalog not found. Pass --config /path/to/config.json or run from the plugin directory."
            )
    ctx.obj["config"] = config_path


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output methods as JSON")
@click.pass_context
def methods(ctx: click.Context, output_json: bool) -> None:
    """List declared methods, their parameters and redaction flags."""
    from .commands.catalog_cmd import run_methods

    sys.exit(run_methods(ctx.obj["config"], output_json=output_json))


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Load the catalog and report declaration errors."""
    from .commands.catalog_cmd import run_check

    sys.exit(run_check(ctx.obj["config"]))


@cli.command()
@click.argument("param_names", nargs=-1, required=True)
@click.option("--json", "output_json", is_flag=True, help="Output the match as JSON")
@click.pass_context
def match(ctx: click.Context, param_names: tuple[str, ...], output_json: bool) -> None:
    """Resolve which method PARAM_NAMES (autocomplete parameters) belong to."""
    from .commands.catalog_cmd import run_match

    sys.exit(run_match(ctx.obj["config"], list(param_names), output_json=output_json))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
