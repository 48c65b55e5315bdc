"""Entry point: hushline [filter <report>... | tags <path>...]."""

import logging
import pathlib
import sys
import typing

import typer

app = typer.Typer()


def _setup_logging(verbose: bool) -> None:  # noqa: FBT001
    """Send log records to stderr; debug level when *verbose*."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _read_reports(reports: list[pathlib.Path] | None) -> list[str]:
    """Return the lines of every report, reading stdin for none or ``-``."""
    lines: list[str] = []
    for report in reports or [pathlib.Path("-")]:
        if str(report) == "-":
            lines.extend(sys.stdin.read().splitlines())
            continue
        try:
            lines.extend(report.read_text(encoding="utf-8").splitlines())
        except (OSError, UnicodeDecodeError) as e:
            typer.echo(f"error: {e}", err=True)
    return lines


@app.command(name="filter")
def filter_report(
    reports: typing.Annotated[
        list[pathlib.Path] | None,
        typer.Argument(help="Linter output files; reads stdin when omitted or '-'."),
    ] = None,
    verbose: typing.Annotated[  # noqa: FBT002
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """Drop findings that fall inside suppressed regions of their source files.

    Lines that are not findings are passed through unchanged.

    Raises:
        typer.Exit: With code 1 if any finding remains, 2 on a
            configuration error.
    """
    from hushline import chain as hushline_chain  # noqa: PLC0415
    from hushline import config as hushline_config  # noqa: PLC0415
    from hushline import report  # noqa: PLC0415

    _setup_logging(verbose)
    cfg = hushline_config.load_config()
    try:
        chain = hushline_chain.FilterChain(hushline_config.build_filters(cfg))
    except hushline_config.ConfigurationError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=2) from e

    files = report.FileCache()
    found_any = False
    suppressed = 0
    for text, event in report.parse_report(_read_reports(reports), files):
        if event is None:
            typer.echo(text)
            continue
        try:
            accepted = chain.accept(event)
        except hushline_config.ConfigurationError as e:
            typer.echo(f"error: {e}", err=True)
            raise typer.Exit(code=2) from e
        if accepted:
            typer.echo(text)
            found_any = True
        else:
            suppressed += 1

    logging.getLogger(__name__).debug("Suppressed %d finding(s)", suppressed)
    if found_any:
        raise typer.Exit(code=1)


@app.command(no_args_is_help=True)
def tags(
    paths: typing.Annotated[
        list[pathlib.Path],
        typer.Argument(help="Source files whose marker lines to list."),
    ],
    verbose: typing.Annotated[  # noqa: FBT002
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """List the suppression tags found in each file.

    Raises:
        typer.Exit: With code 2 on a configuration error.
    """
    from hushline import config as hushline_config  # noqa: PLC0415
    from hushline import index as hushline_index  # noqa: PLC0415
    from hushline.filters import base, line  # noqa: PLC0415

    _setup_logging(verbose)
    cfg = hushline_config.load_config()
    try:
        flt = line.SuppressionLine(
            off_format=cfg.off_format,
            on_format=cfg.on_format,
            check_name_format=cfg.check_name_format,
            message_format=cfg.message_format,
            module_id_format=cfg.module_id_format,
        )
        for file_path in paths:
            try:
                context = base.FileContext.read(file_path)
            except (OSError, UnicodeDecodeError) as e:
                typer.echo(f"error: {e}", err=True)
                continue
            index = hushline_index.SuppressionIndex.build(
                context.lines, flt.off_pattern, flt.on_pattern, flt.templates
            )
            for tag in index:
                typer.echo(
                    f"{file_path}:{tag.line + 1}: {tag.direction.name} {tag.text}"
                )
    except hushline_config.ConfigurationError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=2) from e


def main() -> None:
    """Dispatch to the filter or tags command."""
    app()


if __name__ == "__main__":
    main()
