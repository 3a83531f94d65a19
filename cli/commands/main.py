"""Main CLI interface using Typer."""

import typer
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.table import Table

from booktrans.core.exceptions import BookTransError, DeadlineExceeded
from booktrans.core.pipeline import TranslationPipeline, PipelineConfig
from booktrans.translation.backends import BACKENDS, create_backend
from booktrans.utils.config_loader import load_config
from booktrans.utils.logger import setup_logger
from booktrans.utils.progress import ProgressReporter

app = typer.Typer(
    name="booktrans",
    help="booktrans: translate EPUB books while preserving their markup",
    add_completion=False
)

console = Console()

EXIT_FAILURE = 1
EXIT_TIMEOUT = 2


@app.command()
def translate(
    input_file: Path = typer.Argument(..., help="Input EPUB file"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output file path"),
    source_lang: Optional[str] = typer.Option(None, "-s", "--source", help="Source language (default: en)"),
    target_lang: Optional[str] = typer.Option(None, "-t", "--target", help="Target language (default: ru)"),
    backend: Optional[str] = typer.Option(None, "-b", "--backend", help="Translation backend (free/google/local)"),
    workers: Optional[int] = typer.Option(None, "-w", "--workers", help="Parallel chapters (default: 3)"),
    deadline: Optional[float] = typer.Option(None, "--deadline", help="Overall time limit in seconds (default: 7200)"),
    batch_limit: Optional[int] = typer.Option(None, "--batch-limit", help="Max characters per service call (default: 1800)"),
    corrections: Optional[Path] = typer.Option(None, "--corrections", help="YAML file of post-translation corrections"),
    config_file: Optional[Path] = typer.Option(None, "-c", "--config", help="YAML configuration file"),
    debug_mode: bool = typer.Option(False, "--debug/--no-debug", help="Enable debug logging"),
):
    """Translate an EPUB book."""

    try:
        settings = load_config(str(config_file) if config_file else None)
    except BookTransError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(EXIT_FAILURE)

    overrides = {
        "source_lang": source_lang,
        "target_lang": target_lang,
        "backend": backend,
        "max_workers": workers,
        "deadline_seconds": deadline,
        "batch_size_limit": batch_limit,
        "corrections_path": corrections,
    }
    settings.update({key: value for key, value in overrides.items() if value is not None})
    if debug_mode:
        settings["log_level"] = "DEBUG"

    config = PipelineConfig.from_dict(settings)
    setup_logger(level=config.log_level, log_file=str(config.log_file) if config.log_file else None)

    if not input_file.exists():
        console.print(f"[red]Error: Input file not found: {input_file}[/red]")
        raise typer.Exit(EXIT_FAILURE)

    if output is None:
        output = input_file.with_name(f"{input_file.stem}_{config.target_lang}.epub")

    if output.resolve() == input_file.resolve():
        console.print("[red]Error: Output path matches the input book; refusing to overwrite it[/red]")
        raise typer.Exit(EXIT_FAILURE)

    console.print(f"[bold blue]booktrans[/bold blue]")
    console.print(f"Input: {input_file}")
    console.print(f"Output: {output}")
    console.print(f"Translation: {config.source_lang} → {config.target_lang}")
    console.print(f"Backend: {config.backend} ({config.max_workers} workers)\n")

    reporter = ProgressReporter(description="Translating", console=console)
    try:
        pipeline = TranslationPipeline(config, progress_callback=reporter.update)
        reporter.start()
        try:
            result = pipeline.translate_file(input_file, output)
        finally:
            reporter.finish()
    except DeadlineExceeded as e:
        console.print(f"\n[red]✗ Timed out: {e.message}[/red]")
        raise typer.Exit(EXIT_TIMEOUT)
    except BookTransError as e:
        console.print(f"\n[red]✗ Critical error: {e}[/red]")
        raise typer.Exit(EXIT_FAILURE)

    _display_summary(pipeline.get_run_summary(result))
    console.print(f"\n[bold green]✓ Success! Book saved: {output}[/bold green]")


@app.command()
def backends():
    """List available translation backends."""

    console.print("\n[bold]Available Translation Backends[/bold]\n")
    for name in sorted(BACKENDS):
        try:
            backend = create_backend(name)
            status = "✓ Available" if backend.is_available() else "✗ Not configured"
            color = "green" if backend.is_available() else "yellow"
            console.print(f"[{color}]{status}[/{color}] {name} ({backend.model})")
        except Exception as e:
            console.print(f"[red]✗ Error[/red] {name}: {str(e)}")


@app.command()
def test(
    backend: str = typer.Option("free", "--backend", "-b", help="Backend to test"),
    sample: str = typer.Option("Hello ||| world ||| Bye", "--sample", help="Sample text"),
    source_lang: str = typer.Option("en", "-s", "--source", help="Source language"),
    target_lang: str = typer.Option("ru", "-t", "--target", help="Target language"),
):
    """Translate a sample string through the retrying translator."""

    console.print(f"\n[bold cyan]Testing {backend} backend[/bold cyan]\n")
    console.print(f"Sample text: {sample}\n")

    try:
        config = PipelineConfig(backend=backend, source_lang=source_lang, target_lang=target_lang)
        pipeline = TranslationPipeline(config)
    except BookTransError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(EXIT_FAILURE)

    translator = pipeline.build_translator()
    translation = translator.translate(sample)
    stats = translator.get_stats()

    if stats["degraded"]:
        console.print(f"[yellow]✗ No translation after {stats['calls']} attempts; original kept[/yellow]")
        raise typer.Exit(EXIT_FAILURE)
    console.print(f"[green]✓ Translation:[/green] {translation}")


def _display_summary(summary: dict):
    """Show the run summary as a table."""
    table = Table(title="Run Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    for key, value in summary.items():
        table.add_row(key.replace("_", " "), str(value))
    console.print()
    console.print(table)


def cli():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    cli()
