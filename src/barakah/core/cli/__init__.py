"""Barakah CLI: entry point for calculate, classify, nisab and hawl commands."""

import click

from barakah import __version__
from barakah.core.utils.logging import setup_logging


@click.group()
@click.version_option(version=__version__, package_name="barakah")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None, help="YAML or JSON config file.")
@click.option("--log-level", default="WARNING", show_default=True, help="DEBUG, INFO, WARNING or ERROR.")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Also write barakah.log and audit.log here (default: paths.log_dir from config).",
)
@click.pass_context
def main(ctx: click.Context, config_file: str | None, log_level: str, log_dir: str | None) -> None:
    """Barakah: zakat classification and calculation."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    if log_dir is None:
        configured = load_settings(ctx).paths.log_dir
        log_dir = str(configured) if configured else None
    setup_logging(level=log_level.upper(), log_dir=log_dir)


# Register subcommands
from .calculate_cmd import calculate  # noqa: E402
from .classify_cmd import classify  # noqa: E402
from .common import load_settings  # noqa: E402
from .hawl_cmd import hawl  # noqa: E402
from .nisab_cmd import nisab  # noqa: E402

main.add_command(calculate)
main.add_command(classify)
main.add_command(nisab)
main.add_command(hawl)
