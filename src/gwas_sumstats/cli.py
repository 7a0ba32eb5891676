"""gwas-sumstats: command-line access to the GWAS Catalog summary statistics API."""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from . import __version__, api, router
from .client import DEFAULT_SIZE, DEFAULT_START, GwasClient
from .config import Settings, load_settings
from .downloader import (
    DownloadReport,
    DownloadTask,
    TaskOutcome,
    destination_for_url,
    download_all,
    download_summary_stats_files,
)


def version_callback(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


app = typer.Typer(
    name="gwas-sumstats", help="Query GWAS Catalog summary statistics and download their files"
)
console = Console()

files_app = typer.Typer(help="List and download summary statistics files")
app.add_typer(files_app, name="files")

config_app = typer.Typer(help="Inspect configuration")
app.add_typer(config_app, name="config")


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version and exit"
        ),
    ] = None,
) -> None:
    pass


def setup_logging(verbose: bool, quiet: bool, default_level: str = "INFO") -> None:
    """Configure logging based on verbosity flags."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(default_level)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("gwas_sumstats").setLevel(level)


ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="TOML configuration file")
]
BaseUrlOption = Annotated[
    str | None, typer.Option("--base-url", help="API root URL (overrides configuration)")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging")]
QuietOption = Annotated[bool, typer.Option("--quiet", "-q", help="Suppress non-error output")]
StartOption = Annotated[
    int | None, typer.Option("--start", help=f"Result offset (API default {DEFAULT_START})")
]
SizeOption = Annotated[
    int | None, typer.Option("--size", help=f"Page size (API default {DEFAULT_SIZE})")
]


def _load(
    config: Path | None,
    verbose: bool,
    quiet: bool,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings and configure logging, exiting on invalid configuration."""
    try:
        settings = load_settings(config_path=config, overrides=overrides)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None
    setup_logging(verbose, quiet, settings.log_level)
    return settings


def _emit(result: api.ApiResult) -> None:
    """Print result data as JSON, or the error in red and exit 1."""
    if not result.ok:
        console.print(f"[red]{result.error}[/red]")
        raise typer.Exit(1)
    typer.echo(json.dumps(result.data, indent=2))


@app.command()
def get(
    entity_type: str = typer.Argument(..., help="chromosomes, studies or traits"),
    entity_id: Annotated[
        str | None, typer.Option("--id", help="Fetch a single entity instead of listing")
    ] = None,
    start: StartOption = None,
    size: SizeOption = None,
    config: ConfigOption = None,
    base_url: BaseUrlOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Fetch a chromosome, study or trait, or list them."""
    settings = _load(config, verbose, quiet, {"base_url": base_url})
    with GwasClient(base_url=settings.base_url) as client:
        result = api.gwas_get(entity_type, entity_id, start, size, client=client)
    _emit(result)


@app.command()
def associations(
    kind: Annotated[
        str | None,
        typer.Option("--kind", "-k", help="Scope: variant, chromosome, study or trait"),
    ] = None,
    entity_id: Annotated[str | None, typer.Option("--id", help="Id of the scoping entity")] = None,
    p_min: Annotated[str | None, typer.Option("--p-min", help="Lower p-value bound")] = None,
    p_max: Annotated[str | None, typer.Option("--p-max", help="Upper p-value bound")] = None,
    bp_min: Annotated[int | None, typer.Option("--bp-min", help="Lower base-pair bound")] = None,
    bp_max: Annotated[int | None, typer.Option("--bp-max", help="Upper base-pair bound")] = None,
    study: Annotated[str | None, typer.Option("--study", help="Study accession")] = None,
    trait: Annotated[str | None, typer.Option("--trait", help="Trait id, e.g. EFO_0001360")] = None,
    reveal: Annotated[str | None, typer.Option("--reveal", help="'raw' or 'all'")] = None,
    start: StartOption = None,
    size: SizeOption = None,
    config: ConfigOption = None,
    base_url: BaseUrlOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Fetch associations, optionally scoped to one entity."""
    settings = _load(config, verbose, quiet, {"base_url": base_url})
    with GwasClient(base_url=settings.base_url) as client:
        result = api.gwas_associations(
            kind,
            entity_id,
            p_value_min=p_min,
            p_value_max=p_max,
            bp_min=bp_min,
            bp_max=bp_max,
            study=study,
            trait_id=trait,
            reveal=reveal,
            start=start,
            size=size,
            client=client,
        )
    _emit(result)


@files_app.command("list")
def files_list(
    kind: str = typer.Argument(..., help="study or trait"),
    entity_id: str = typer.Argument(..., help="Study accession or trait id"),
    study: Annotated[
        str | None, typer.Option("--study", help="Restrict a trait listing to one study")
    ] = None,
    config: ConfigOption = None,
    base_url: BaseUrlOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """List summary statistics files for a study or trait."""
    settings = _load(config, verbose, quiet, {"base_url": base_url})
    with GwasClient(base_url=settings.base_url) as client:
        result = api.gwas_list_files(kind, entity_id, study, client=client)
    _emit(result)


def _run_with_progress(total: int, show: bool, run) -> DownloadReport:
    """Call ``run(progress_callback)`` under a rich progress bar when ``show`` is set."""
    if not show:
        return run(None)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress_bar:
        bar = progress_bar.add_task("Downloading...", total=total)

        def update_progress(task: DownloadTask) -> None:
            progress_bar.update(bar, advance=1, description=task.destination.name)

        return run(update_progress)


def _print_report(report: DownloadReport, quiet: bool) -> None:
    if not quiet:
        for task in report.tasks:
            if task.outcome is TaskOutcome.SUCCEEDED:
                size = f"{task.bytes_written:,} bytes"
                console.print(f"[green]✓[/green] {task.destination} ({size})")
    for failure in report.failures:
        console.print(f"[red]✗ {failure}[/red]")

    color = "green" if report.ok else "yellow"
    console.print(
        f"[{color}]Downloaded {report.succeeded} of {report.total} files successfully.[/{color}]"
    )
    if not report.ok:
        raise typer.Exit(1)


@files_app.command("download")
def files_download(
    urls: list[str] = typer.Argument(..., help="URLs to download"),
    output: Annotated[
        list[Path] | None,
        typer.Option("--output", "-o", help="Destination path, one per URL, in order"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-d", help="Directory to save files under their URL names"),
    ] = None,
    concurrency: Annotated[
        int | None, typer.Option("--concurrency", "-j", help="Maximum parallel downloads")
    ] = None,
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show progress bar"),
    config: ConfigOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Download files concurrently to explicit paths or into a directory."""
    settings = _load(config, verbose, quiet, {"max_concurrency": concurrency})

    if output and output_dir is not None:
        console.print("[red]Error: Use either --output or --output-dir, not both[/red]")
        raise typer.Exit(1)
    if output:
        destinations = list(output)
    elif output_dir is not None:
        destinations = [destination_for_url(url, output_dir) for url in urls]
    else:
        destinations = [destination_for_url(url, Path.cwd()) for url in urls]

    try:
        report = _run_with_progress(
            len(urls),
            progress and not quiet,
            lambda callback: download_all(
                urls,
                destinations,
                settings.max_concurrency,
                chunk_size=settings.chunk_size,
                progress_callback=callback,
            ),
        )
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    _print_report(report, quiet)


@files_app.command("fetch")
def files_fetch(
    kind: str = typer.Argument(..., help="study or trait"),
    entity_id: str = typer.Argument(..., help="Study accession or trait id"),
    output_dir: Annotated[
        Path, typer.Option("--output-dir", "-d", help="Directory to save files into")
    ] = Path("."),
    study: Annotated[
        str | None, typer.Option("--study", help="Restrict a trait listing to one study")
    ] = None,
    concurrency: Annotated[
        int | None, typer.Option("--concurrency", "-j", help="Maximum parallel downloads")
    ] = None,
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show progress bar"),
    config: ConfigOption = None,
    base_url: BaseUrlOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """List the files of a study or trait and download all of them."""
    settings = _load(
        config, verbose, quiet, {"base_url": base_url, "max_concurrency": concurrency}
    )

    try:
        with GwasClient(base_url=settings.base_url) as client:
            envelope = router.list_files(client, kind, entity_id, study)
        files = [file for group in (envelope.embedded or {}).values() for file in group]

        if not files:
            console.print(f"[yellow]No summary statistics files for {kind} {entity_id}[/yellow]")
            return

        if not quiet:
            console.print(f"Found {len(files)} files for {kind} {entity_id}")

        report = _run_with_progress(
            len(files),
            progress and not quiet,
            lambda callback: download_summary_stats_files(
                files,
                output_dir,
                settings.max_concurrency,
                chunk_size=settings.chunk_size,
                progress_callback=callback,
            ),
        )
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    _print_report(report, quiet)


@config_app.command("show")
def config_show(
    config: ConfigOption = None,
    base_url: BaseUrlOption = None,
) -> None:
    """Print the effective settings as JSON."""
    try:
        settings = load_settings(config_path=config, overrides={"base_url": base_url})
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None
    typer.echo(json.dumps(settings.to_dict(), indent=2))


if __name__ == "__main__":
    app()
