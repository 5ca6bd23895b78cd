"""CLI runner for the ffmpeg video editing pipeline.

Usage:
    python -m video_editor render project.yaml
    python -m video_editor command project.yaml
    python -m video_editor transitions --category shortform
    python -m video_editor presets
    python -m video_editor convert-subtitles captions.srt captions.vtt
    python -m video_editor check
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from video_editor.config import get_ffmpeg_binary, get_ffmpeg_timeout, get_fonts_dir, load_config
from video_editor.models import ProgressInfo

console = Console()


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _settings(ctx: click.Context) -> tuple[dict, str | None]:
    config_path = ctx.obj["config"]
    return load_config(config_path), config_path


@click.group()
@click.option("--config", "-c", default=None, help="Path to config.yaml (optional)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """FFmpeg video editing pipeline."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    _setup_logging(verbose)


@cli.command("render")
@click.argument("project")
@click.pass_context
def cmd_render(ctx: click.Context, project: str) -> None:
    """Compile a project YAML and render it with ffmpeg."""
    from video_editor.pipeline import execute_pipeline
    from video_editor.project import load_project

    try:
        settings, config_path = _settings(ctx)
        pipeline_config = load_project(project)
        binary = get_ffmpeg_binary(settings)
        timeout = get_ffmpeg_timeout(settings)
        fonts_dir = get_fonts_dir(settings, config_path)
    except FileNotFoundError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"[red]Configuration error: {exc}[/red]")
        sys.exit(1)

    console.print(f"[bold]Rendering {pipeline_config.output.path}...[/bold]")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Preparing...", total=100)

            def on_progress(info: ProgressInfo) -> None:
                progress.update(task, completed=info.percent, description=info.stage.capitalize())

            result = asyncio.run(execute_pipeline(
                pipeline_config,
                on_progress,
                binary=binary,
                fonts_dir=fonts_dir,
                timeout=timeout,
            ))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(130)

    if not result.success:
        console.print(f"[red]Render failed: {result.error}[/red]")
        sys.exit(1)

    size_mb = (result.file_size or 0) / 1024 / 1024
    console.print(
        f"\n[bold green]Done:[/bold green] {result.output_path} "
        f"({size_mb:.1f} MB, {result.processing_time / 1000:.1f}s)"
    )


@cli.command("command")
@click.argument("project")
@click.pass_context
def cmd_command(ctx: click.Context, project: str) -> None:
    """Print the ffmpeg command a project compiles to, without running it."""
    from video_editor.concatenate import command_to_string
    from video_editor.pipeline import compile_pipeline
    from video_editor.project import load_project

    try:
        settings, config_path = _settings(ctx)
        compiled = compile_pipeline(
            load_project(project),
            get_ffmpeg_binary(settings),
            get_fonts_dir(settings, config_path),
        )
    except FileNotFoundError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"[red]Configuration error: {exc}[/red]")
        sys.exit(1)

    click.echo(command_to_string(compiled.argv))


@cli.command("transitions")
@click.option("--category", default=None, help="Only list one category")
def cmd_transitions(category: str | None) -> None:
    """List the transition catalog."""
    from video_editor.transitions import (
        TRANSITION_DEFINITIONS,
        get_transition_categories,
        get_transitions_by_category,
    )

    if category is not None:
        if category not in get_transition_categories():
            console.print(
                f"[red]Error: unknown category '{category}'. "
                f"Choose from: {', '.join(get_transition_categories())}[/red]"
            )
            sys.exit(1)
        definitions = get_transitions_by_category(category)
    else:
        definitions = list(TRANSITION_DEFINITIONS.values())

    table = Table(title="Transitions", show_lines=True)
    table.add_column("Type", style="cyan")
    table.add_column("Category")
    table.add_column("xfade", justify="center")
    table.add_column("Default", justify="right")
    table.add_column("Range", justify="right")
    table.add_column("Description")

    for d in definitions:
        table.add_row(
            d.type,
            d.category,
            d.xfade_name or "[dim]-[/dim]",
            f"{d.default_duration}s",
            f"{d.min_duration}-{d.max_duration}s",
            d.description,
        )

    console.print(table)


@cli.command("presets")
def cmd_presets() -> None:
    """Show platform and quality presets."""
    from video_editor.presets import CRF_BY_QUALITY, PLATFORM_PRESETS, QUALITY_PRESETS, get_dimensions

    table = Table(title="Platforms", show_lines=True)
    table.add_column("Platform", style="cyan")
    table.add_column("Aspect", justify="center")
    table.add_column("Size", justify="center")
    table.add_column("FPS", justify="center")
    table.add_column("Max length", justify="right")
    table.add_column("Bitrates", justify="center")

    for name, preset in PLATFORM_PRESETS.items():
        dims = get_dimensions(preset.aspect_ratio, preset.resolution)
        max_len = f"{preset.max_duration}s" if preset.max_duration else "[dim]none[/dim]"
        table.add_row(
            name,
            preset.aspect_ratio,
            f"{dims.width}x{dims.height}",
            str(preset.fps),
            max_len,
            f"{preset.video_bitrate} / {preset.audio_bitrate}",
        )
    console.print(table)
    console.print()

    table = Table(title="Quality", show_lines=True)
    table.add_column("Quality", style="cyan")
    table.add_column("CRF", justify="center")
    table.add_column("Bitrates", justify="center")
    table.add_column("FPS", justify="center")

    for name, preset in QUALITY_PRESETS.items():
        table.add_row(
            name,
            CRF_BY_QUALITY[name],
            f"{preset.video_bitrate} / {preset.audio_bitrate}",
            str(preset.fps),
        )
    console.print(table)


@cli.command("convert-subtitles")
@click.argument("source")
@click.argument("destination")
def cmd_convert_subtitles(source: str, destination: str) -> None:
    """Convert between SRT and WebVTT, chosen by DESTINATION's extension."""
    from video_editor.subtitles import generate_srt, generate_vtt, is_vtt, parse_srt, parse_vtt

    writers = {".srt": generate_srt, ".vtt": generate_vtt}
    dest = Path(destination)
    writer = writers.get(dest.suffix.lower())
    if writer is None:
        console.print(f"[red]Error: destination must end in .srt or .vtt, got {dest.name}[/red]")
        sys.exit(1)

    src = Path(source)
    if not src.exists():
        console.print(f"[red]Error: Subtitle file not found: {src}[/red]")
        sys.exit(1)

    content = src.read_text(encoding="utf-8")
    cues = parse_vtt(content) if is_vtt(content) else parse_srt(content)
    if not cues:
        console.print(f"[yellow]No cues found in {src}.[/yellow]")

    dest.write_text(writer(cues), encoding="utf-8")
    console.print(f"[green]Wrote {len(cues)} cue(s) to {dest}[/green]")


@cli.command("check")
@click.pass_context
def cmd_check(ctx: click.Context) -> None:
    """Check that ffmpeg can be run."""
    from video_editor.pipeline import get_ffmpeg_version

    try:
        settings, _ = _settings(ctx)
        binary = get_ffmpeg_binary(settings)
    except FileNotFoundError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"[red]Configuration error: {exc}[/red]")
        sys.exit(1)

    version = get_ffmpeg_version(binary)
    if version is None:
        console.print(f"[red]ffmpeg not available ({binary})[/red]")
        sys.exit(1)
    console.print(f"[green]ffmpeg {version}[/green] ({binary})")


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
