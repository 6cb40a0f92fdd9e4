"""
PeWalk CLI -- PE Header Walker
===============================

Click-based command-line interface.  Decodes the DOS header, NT head and
section table of one PE32 file and prints them as Rich tables or JSON.

Usage::

    # Table output
    pewalk /path/to/image.exe

    # Include the 16 data directories
    pewalk /path/to/image.exe --directories

    # JSON to stdout, or to a file
    pewalk /path/to/image.exe --json
    pewalk /path/to/image.exe --output report.json

Exit status is 0 on success and 1 when the walk fails; the message names
the failure kind and the step it happened in.
"""

from __future__ import annotations

import sys

import click
from rich.markup import escape

from shared.config import AppConfig
from shared.console import ToolConsole
from shared.logger import ToolLogger

from pewalk import __version__
from pewalk.core.errors import PEWalkError
from pewalk.core.walker import ImageWalker
from pewalk.output.console import PeWalkConsoleOutput
from pewalk.output.report import PeWalkReportGenerator


@click.command("pewalk")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the decoded headers as JSON to stdout.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write a JSON report to this path.",
)
@click.option(
    "--directories", "-d",
    is_flag=True,
    default=False,
    help="Show the 16 optional header data directories.",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TOML configuration file.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging of every walk step.",
)
@click.version_option(__version__, prog_name="pewalk")
def pewalk_cli(
    path: str,
    json_output: bool,
    output_path: str | None,
    directories: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Decode and report the headers of the PE32 image at PATH."""
    console = ToolConsole()

    try:
        config = AppConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Could not load configuration: {escape(str(exc))}")
        sys.exit(1)

    settings = config.global_settings
    logger = ToolLogger(
        "walker",
        log_level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
        json_logs=settings.log_json,
        # Walk failures reach the user once, through console.error below.
        console_max_level="WARNING",
    )
    if directories:
        config.pewalk.show_data_directories = True

    walker = ImageWalker(config=config, logger=logger)
    try:
        image = walker.walk_file(path)
    except PEWalkError as exc:
        console.error(escape(exc.describe()))
        sys.exit(1)
    except OSError as exc:
        console.error(f"Cannot read {escape(path)}: {escape(str(exc))}")
        sys.exit(1)

    report_gen = PeWalkReportGenerator()

    as_json = json_output or config.pewalk.output_format == "json"
    if as_json:
        click.echo(report_gen.to_json(image))
    else:
        PeWalkConsoleOutput(console=console, config=config.pewalk).display(image)

    if output_path:
        report_path = report_gen.generate_json(image, output_path)
        # stdout carries only the JSON document in JSON mode.
        if not as_json:
            console.success(f"JSON report saved: {escape(str(report_path))}")


def main() -> None:
    """Entry point for the ``pewalk`` script and ``python -m pewalk``."""
    pewalk_cli()


if __name__ == "__main__":
    main()
