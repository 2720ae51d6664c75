from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from ..config import AppConfig, load_config
from ..core import ConversionService
from ..errors import ConversionError
from ..models import Archive, ImageEncoding, ProgressEvent
from ..session import ConverterSession
from ..settings import get_settings

console = Console()

app = typer.Typer(help="Convert PDF pages into PNG or JPEG images")


def _load_config(path: Path | None) -> AppConfig:
    settings = get_settings()
    config = load_config(path or settings.config_path)
    if settings.output_dir is not None:
        config.runtime.output_dir = settings.output_dir
    return config


@app.command()
def convert(
    file: Path,
    pages: str = typer.Option("", "--pages", "-p", help="Page range, e.g. '1, 3-5'. Empty means all pages"),
    dpi: int | None = typer.Option(None, "--dpi", min=1, help="Resolution in dots per inch"),
    image_format: str | None = typer.Option(None, "--format", "-f", help="png or jpeg"),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Where to write the result"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    try:
        settings = cfg.render.to_settings(dpi=dpi, encoding=image_format)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    service = ConversionService(cfg)

    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress_bar:
        task = progress_bar.add_task("Opening document", total=100)

        def _on_progress(event: ProgressEvent) -> None:
            if event.stage == "packaging":
                description = "Compressing ZIP"
            else:
                description = f"Page {event.page_number} ({event.completed}/{event.total})"
            progress_bar.update(task, description=description, completed=event.percent)

        try:
            saved = service.convert_file(
                file,
                page_range=pages,
                settings=settings,
                output_dir=output_dir,
                progress=_on_progress,
            )
        except ConversionError as exc:
            progress_bar.stop()
            console.print(f"[red]Conversion failed[/red]: {exc.code} - {exc}")
            raise typer.Exit(1) from exc

    kind = "ZIP archive" if isinstance(saved.result, Archive) else "image"
    console.print(f"[green]Success[/green]: {len(saved.pages)} page(s) -> {kind} {saved.output_path}")
    for warning in saved.warnings:
        console.print(f"[yellow]Warning[/yellow]: {warning}")


@app.command("pages")
def preview_pages(
    file: Path,
    pages: str = typer.Option("", "--pages", "-p", help="Page range to preview"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    with ConverterSession(cfg) as session:
        try:
            session.load(file)
        except ConversionError as exc:
            console.print(f"[red]Cannot open document[/red]: {exc.code} - {exc}")
            raise typer.Exit(1) from exc
        session.page_range = pages
        selection = session.selection
        table = Table(title=file.name)
        table.add_column("Total pages")
        table.add_column("Selected")
        table.add_column("Output")
        output = "image" if session.is_single_output else "ZIP archive"
        table.add_row(str(session.page_count), ", ".join(map(str, selection)) or "-", output if selection else "-")
        console.print(table)
        for warning in session.warnings:
            console.print(f"[yellow]Warning[/yellow]: {warning}")
        if not selection:
            console.print("[red]No valid pages selected.[/red]")
            raise typer.Exit(1)


@app.command()
def presets(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    table = Table(title="Render presets")
    table.add_column("DPI")
    table.add_column("Scale")
    for value in cfg.render.dpi_presets:
        table.add_row(str(value), f"{value / 72:.4f}")
    console.print(table)
    console.print(f"Formats: {', '.join(encoding.value for encoding in ImageEncoding)}")


if __name__ == "__main__":
    app()
