from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, load_config
from ..core import ConversionError, ConversionService
from ..formats import FitPolicy, ImageFormat
from ..models import ConversionOptions, FailurePolicy
from ..utils import atomic_write_bytes

console = Console()

app = typer.Typer(help="Image and ZIP archive format converter")


def _load_config(path: Path | None) -> AppConfig:
    return load_config(path)


def _build_options(
    to: ImageFormat,
    quality: int | None,
    width: int | None,
    height: int | None,
    fit: FitPolicy | None,
) -> ConversionOptions:
    return ConversionOptions(output_format=to, quality=quality, width=width, height=height, fit=fit)


def _default_output(source: Path, suffix: str) -> Path:
    candidate = source.with_suffix(suffix)
    if candidate == source:
        candidate = source.with_name(f"{source.stem}-converted{suffix}")
    return candidate


@app.command()
def convert(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    to: ImageFormat = typer.Option(..., "--to", help="Output image format"),
    quality: int | None = typer.Option(None, "--quality", min=1, max=100),
    width: int | None = typer.Option(None, "--width", min=1),
    height: int | None = typer.Option(None, "--height", min=1),
    fit: FitPolicy | None = typer.Option(None, "--fit"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Destination file"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    service = ConversionService(cfg)
    options = _build_options(to, quality, width, height, fit)
    try:
        result = service.convert_image(file.read_bytes(), options, source=str(file))
    except ConversionError as exc:
        console.print(f"[red]Conversion failed[/red]: {exc.code} - {exc}")
        raise typer.Exit(1) from exc
    destination = output or _default_output(file, to.extension)
    atomic_write_bytes(destination, result.data)
    console.print(f"[green]Success[/green]: {file.name} ({result.input_format.value}) -> {destination}")


@app.command()
def archive(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    to: ImageFormat = typer.Option(..., "--to", help="Output image format"),
    quality: int | None = typer.Option(None, "--quality", min=1, max=100),
    width: int | None = typer.Option(None, "--width", min=1),
    height: int | None = typer.Option(None, "--height", min=1),
    fit: FitPolicy | None = typer.Option(None, "--fit"),
    isolate: bool = typer.Option(False, "--isolate", help="Keep failing images unchanged instead of aborting"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Destination archive"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    service = ConversionService(cfg)
    options = _build_options(to, quality, width, height, fit)
    policy = FailurePolicy.ISOLATE if isolate else None
    try:
        result = service.convert_archive(file.read_bytes(), options, failure_policy=policy, source=str(file))
    except ConversionError as exc:
        console.print(f"[red]Conversion failed[/red]: {exc.code} - {exc}")
        raise typer.Exit(1) from exc
    destination = output or file.with_name(f"{file.stem}-converted.zip")
    atomic_write_bytes(destination, result.data)

    report = result.report
    if report.failures:
        table = Table(title="Failed entries")
        table.add_column("Entry")
        table.add_column("Code")
        table.add_column("Message")
        for failure in report.failures:
            table.add_row(failure.entry_name, failure.code, failure.message)
        console.print(table)
    console.print(
        f"Processed {report.total} entries: {report.converted} converted, "
        f"{report.passthrough} passed through, {report.directories} directories, {report.failed} failed."
    )
    console.print(f"Output archive: {destination}")


@app.command()
def formats(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    table = Table(title="Supported formats")
    table.add_column("Format")
    table.add_column("Input")
    table.add_column("Output")
    for fmt in ImageFormat:
        table.add_row(
            fmt.value,
            "yes" if fmt.value in cfg.input_formats else "-",
            "yes" if fmt.value in cfg.output_formats else "-",
        )
    console.print(table)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    import uvicorn

    from api.app import create_app

    cfg = _load_config(config)
    web_app = create_app(cfg, require_enabled=False)
    uvicorn.run(web_app, host=host or cfg.api.host, port=port or cfg.api.port)


if __name__ == "__main__":
    app()
