"""CLI interface for folio."""

import functools
import http.server
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from folio.config import SiteConfig, load_config, merge_cli_overrides
from folio.errors import BuildError, ErrorRecord
from folio.site.assembler import BuildContext, build_site, load_site

app = typer.Typer(
    name="folio",
    help="Build a static academic website from publication and post documents.",
)

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to folio.toml (default: search CWD)."),
]
ContentOption = Annotated[
    Optional[Path],
    typer.Option("--content", help="Content directory (overrides config)."),
]
OutputOption = Annotated[
    Optional[Path],
    typer.Option("--output", "-o", help="Output directory (overrides config)."),
]
StrictOption = Annotated[
    Optional[bool],
    typer.Option("--strict/--no-strict", help="Abort on the first per-file error."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from folio import __version__

        console.print(f"folio {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=verbose)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging."),
    ] = False,
) -> None:
    """folio - academic site builder."""
    _setup_logging(verbose)


def _resolve_config(config_path: Path | None, **overrides: object) -> SiteConfig:
    return merge_cli_overrides(load_config(config_path), **overrides)


def _print_errors(errors: list[ErrorRecord]) -> None:
    table = Table(title=f"{len(errors)} error(s)", show_lines=False)
    table.add_column("File")
    table.add_column("Error")
    table.add_column("Message")
    for err in errors:
        table.add_row(err.path or "-", err.kind, err.message)
    console.print(table)


def _run_build(config: SiteConfig) -> int:
    """Run a build and print its summary; returns the exit code."""
    context = BuildContext.from_config(config)
    try:
        result = build_site(context)
    except BuildError as exc:
        console.print(f"[red]Build aborted:[/red] {exc}")
        _print_errors(exc.report.errors)
        return 1

    console.print(f"[green]Pages written:[/green] {result.pages_written}")
    console.print(f"[green]Assets copied:[/green] {result.assets_copied}")
    console.print(f"  Output: {context.output_root}")
    if not result.ok:
        _print_errors(result.errors)
        return 1
    return 0


@app.command()
def build(
    config_path: ConfigOption = None,
    content: ContentOption = None,
    output: OutputOption = None,
    strict: StrictOption = None,
    clean: Annotated[
        Optional[bool],
        typer.Option("--clean/--no-clean", help="Remove the output directory before writing."),
    ] = None,
) -> None:
    """Build the site.

    Exits non-zero when any document failed to parse or the build aborted.
    """
    config = _resolve_config(
        config_path, content_dir=content, output_dir=output, strict=strict, clean=clean
    )
    code = _run_build(config)
    if code:
        raise typer.Exit(code)


@app.command()
def check(
    config_path: ConfigOption = None,
    content: ContentOption = None,
    strict: StrictOption = None,
) -> None:
    """Parse and index all content without writing anything."""
    config = _resolve_config(config_path, content_dir=content, strict=strict)
    context = BuildContext.from_config(config)
    try:
        site = load_site(context)
    except BuildError as exc:
        console.print(f"[red]Check aborted:[/red] {exc}")
        _print_errors(exc.report.errors)
        raise typer.Exit(1)

    for kind, collection in site.index.collections.items():
        console.print(f"  {kind.plural}: {len(collection.documents)}")
    console.print(f"  assets: {len(site.assets)}")
    if site.report.has_errors:
        _print_errors(site.report.errors)
        raise typer.Exit(1)
    console.print("[green]No problems found.[/green]")


@app.command()
def serve(
    config_path: ConfigOption = None,
    content: ContentOption = None,
    output: OutputOption = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port to listen on.")] = None,
    no_build: Annotated[
        bool, typer.Option("--no-build", help="Serve the existing output as-is.")
    ] = False,
) -> None:
    """Build, then serve the output directory for local preview."""
    config = _resolve_config(config_path, content_dir=content, output_dir=output, port=port)
    if not no_build and _run_build(config):
        raise typer.Exit(1)

    site_dir = config.output_root
    if not site_dir.is_dir():
        console.print(f"[red]Error:[/red] {site_dir} does not exist; run `folio build` first.")
        raise typer.Exit(1)

    handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(site_dir))
    httpd = http.server.ThreadingHTTPServer((config.serve.host, config.serve.port), handler)
    console.print(f"Serving http://{config.serve.host}:{config.serve.port}/ (site dir: {site_dir})")
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        console.print("Shutting down server.")
    finally:
        httpd.server_close()


@app.command(name="import-publications")
def import_publications_cmd(
    tsv: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="Tab-separated publication list."),
    ],
    config_path: ConfigOption = None,
    content: ContentOption = None,
    overwrite: Annotated[
        bool, typer.Option("--overwrite", help="Replace documents that already exist.")
    ] = False,
) -> None:
    """Generate _publications/ documents from a TSV file.

    Columns: pub_date, title, venue, excerpt, citation, url_slug, paper_url.
    """
    from folio.content.importer import import_publications

    config = _resolve_config(config_path, content_dir=content)
    result = import_publications(tsv, config.content_root, overwrite=overwrite)

    console.print(f"[green]Written:[/green] {len(result.written)}")
    if result.skipped:
        console.print(f"[yellow]Skipped (already exist):[/yellow] {len(result.skipped)}")
    if result.errors:
        _print_errors([ErrorRecord.from_exception(e) for e in result.errors])
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
