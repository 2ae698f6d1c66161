"""histgrab CLI entry point."""

import sys
from pathlib import Path
from typing import Literal

import click

from histgrab import __version__
from histgrab.cli.output import OutputFormat, OutputFormatter, output_json
from histgrab.collectors.browsers import BrowserLocator
from histgrab.collectors.staging import HistoryCollector
from histgrab.core.context import build_run_context
from histgrab.core.errors import HistgrabError
from histgrab.core.logging import RunLogger, Verbosity
from histgrab.models.error import ErrorCode, StructuredError
from histgrab.models.run import LocateResult

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INVALID_ARGS = 2


@click.command(name="histgrab")
@click.option(
    "--user",
    "-u",
    "target_user",
    default=None,
    help="User whose profile is searched (default: current user)",
)
@click.option(
    "--destination",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base directory for staging and archive (default: %APPDATA%)",
)
@click.option(
    "--gather",
    "-g",
    is_flag=True,
    default=False,
    help="Copy the discovered databases into <destination>/<run id>.zip",
)
@click.option(
    "--suppress",
    "-s",
    is_flag=True,
    default=False,
    help="Suppress all listing, log and error output",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose logging to stderr",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["human", "json", "jsonl"]),
    default="human",
    help="Output format (default: human)",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Log format for stderr (default: text)",
)
@click.option(
    "--system-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory standing in for the system drive, e.g. a mounted image (default: %SystemDrive%)",
)
@click.version_option(version=__version__, prog_name="histgrab")
@click.pass_context
def cli(
    ctx: click.Context,
    target_user: str | None,
    destination: Path | None,
    gather: bool,
    suppress: bool,
    verbose: bool,
    format: OutputFormat,
    log_format: Literal["text", "json"],
    system_root: Path | None,
) -> None:
    """Locate browser history databases of a Windows user.

    Searches the Chrome, Edge and Firefox profile directories of the
    target user and lists every history database found. With --gather
    the databases are also copied into a single ZIP archive named by
    the run id.
    """
    logger = RunLogger(
        verbosity=Verbosity.from_flags(suppress=suppress, verbose=verbose),
        log_format=log_format,
    )
    formatter = OutputFormatter(format=format, enabled=not suppress)

    try:
        context = build_run_context(
            target_user=target_user,
            output_dir=destination,
            system_root=system_root,
        )
    except HistgrabError as e:
        logger.error(e.error.message)
        formatter.error(e.to_structured_error())
        ctx.exit(EXIT_INVALID_ARGS)

    locator = BrowserLocator(context, logger=logger)
    files = locator.locate()
    formatter.listing(
        LocateResult(
            run_id=context.run_id,
            hostname=context.hostname,
            target_user=context.target_user,
            files=files,
            errors=locator.errors,
        )
    )

    if not gather:
        ctx.exit(EXIT_SUCCESS)

    collector = HistoryCollector(context, logger=logger)
    result = collector.collect(
        files,
        progress_callback=lambda path, current, total: logger.debug(
            f"Copying {current}/{total}: {path}"
        ),
    )
    formatter.collection(result)

    ctx.exit(EXIT_SUCCESS if result.success else EXIT_ERROR)


def main() -> None:
    """Main entry point.

    Unexpected exceptions are reported as an INTERNAL_ERROR structured
    error on stdout.
    """
    try:
        cli()
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        output_json(
            StructuredError(
                code=ErrorCode.INTERNAL_ERROR,
                message=str(e),
                remediation="This is an unexpected error. Please report it.",
                retryable=False,
                context={"type": type(e).__name__},
            )
        )
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
