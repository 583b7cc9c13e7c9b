"""CLI runner for mediagen.

Usage:
    mediagen generate image flux-kontext-pro "a red fox in the snow"
    mediagen generate video veo3_fast "waves at dusk" --aspect-ratio 16:9 --download out/waves.mp4
    mediagen generate image google/nano-banana "a lighthouse" --dry-run
    mediagen models --kind video
    mediagen status jobs-generic 3f1c9a...
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from mediagen.config import Settings, load_settings
from mediagen.errors import (
    DownloadError,
    DryRunInterrupt,
    GenerationError,
    PollTransportError,
    SubmissionError,
    UnknownModel,
)
from mediagen.models import MediaKind, PollEvent, UserInput
from mediagen.orchestrator import Orchestrator
from mediagen.registry import DEFAULT_REGISTRY

console = Console()

_DEFAULT_CONFIG = "config.yaml"
_KINDS = [kind.value for kind in MediaKind]


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # Quiet down httpx unless debugging
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def _settings(ctx: click.Context) -> Settings:
    """Load settings; a missing default config file means built-in defaults."""
    config_path = ctx.obj["config"]
    if config_path is None:
        if not Path(_DEFAULT_CONFIG).exists():
            return Settings()
        config_path = _DEFAULT_CONFIG
    return load_settings(config_path)


def _parse_overrides(pairs: tuple[str, ...]) -> dict:
    """Turn ``key=value`` pairs into a dict, YAML-typing each value."""
    extra = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--set")
        extra[key.strip()] = yaml.safe_load(raw) if raw else ""
    return extra


async def _generate(
    settings: Settings,
    kind: str,
    model: str,
    user_input: UserInput,
    dry_run: bool,
    download: str | None,
) -> str:
    async with Orchestrator.from_settings(settings, dry_run=dry_run) as orchestrator:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            bar = progress.add_task(f"Submitting {kind} job to {model}...", total=None)

            def on_event(event: PollEvent) -> None:
                description = f"{event.family} {event.remote_task_id}: {event.canonical_status.value}"
                if event.transient_error:
                    description += f" [yellow]({event.transient_error})[/yellow]"
                progress.update(
                    bar, description=description, completed=event.attempt, total=event.max_attempts,
                )

            orchestrator.on_event = on_event
            url = await orchestrator.generate(kind, model, user_input)

        if download:
            await orchestrator.client.download_file(url, download)
        return url


@click.group()
@click.option("--config", "-c", default=None, help="Path to config.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Generate images, video, music, speech and slides through one interface."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    _setup_logging(verbose)


@cli.command("generate")
@click.argument("kind", type=click.Choice(_KINDS))
@click.argument("model")
@click.argument("prompt")
@click.option("--aspect-ratio", default=None, help="Output aspect ratio, e.g. 16:9")
@click.option("--duration", type=int, default=None, help="Clip length in seconds")
@click.option("--quality", default=None, help="Quality tier or resolution, e.g. 720p")
@click.option("--style", default=None, help="Style or genre")
@click.option("--negative-prompt", default=None, help="What to avoid")
@click.option("--image-url", "image_urls", multiple=True, help="Reference image URL (repeatable)")
@click.option("--voice", default=None, help="Voice id for speech or avatar video")
@click.option("--title", default=None, help="Title for music or slides")
@click.option("--instrumental", is_flag=True, help="Music without vocals")
@click.option("--set", "overrides", multiple=True, help="Provider field override key=value (repeatable)")
@click.option("--download", default=None, type=click.Path(dir_okay=False), help="Save the artifact here")
@click.option("--dry-run", is_flag=True, help="Print the request instead of sending it")
@click.pass_context
def cmd_generate(
    ctx: click.Context,
    kind: str,
    model: str,
    prompt: str,
    aspect_ratio: str | None,
    duration: int | None,
    quality: str | None,
    style: str | None,
    negative_prompt: str | None,
    image_urls: tuple[str, ...],
    voice: str | None,
    title: str | None,
    instrumental: bool,
    overrides: tuple[str, ...],
    download: str | None,
    dry_run: bool,
) -> None:
    """Generate one artifact and print its URL."""
    user_input = UserInput(
        prompt=prompt,
        aspect_ratio=aspect_ratio,
        duration=duration,
        quality=quality,
        style=style,
        negative_prompt=negative_prompt,
        title=title,
        instrumental=instrumental,
        voice=voice,
        image_urls=list(image_urls),
        extra=_parse_overrides(overrides),
    )

    try:
        settings = _settings(ctx)
        url = asyncio.run(_generate(settings, kind, model, user_input, dry_run, download))
    except DryRunInterrupt as exc:
        console.print(f"[bold][DRY RUN][/bold] {exc.method} {exc.url}", soft_wrap=True)
        console.print_json(data=exc.body)
        return
    except UnknownModel as exc:
        console.print(f"[red]Error: {exc}[/red]")
        console.print("Run [bold]mediagen models[/bold] to list supported models.")
        sys.exit(2)
    except SubmissionError as exc:
        console.print(f"[red]Submission failed: {exc}[/red]")
        sys.exit(1)
    except DownloadError as exc:
        console.print(f"[red]{exc}[/red]", soft_wrap=True)
        sys.exit(1)
    except GenerationError as exc:
        console.print(f"[red]Generation failed ({type(exc).__name__}): {exc}[/red]")
        sys.exit(1)
    except FileNotFoundError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"[red]Configuration error: {exc}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted. The provider job may still finish server-side.[/yellow]")
        sys.exit(130)

    console.print(f"[green]Done:[/green] {url}", soft_wrap=True)
    if download:
        console.print(f"Saved to {download}")


@cli.command("models")
@click.option("--kind", "-k", type=click.Choice(_KINDS), default=None, help="Only this media kind")
def cmd_models(kind: str | None) -> None:
    """List registered models and the provider family serving each."""
    media_kind = MediaKind(kind) if kind else None
    table = Table(title="Models", show_lines=False)
    table.add_column("Kind", style="cyan")
    table.add_column("Model")
    table.add_column("Family", style="dim")

    rows = sorted(DEFAULT_REGISTRY.models(media_kind), key=lambda row: (row[0].value, row[1]))
    for row_kind, model_id, family in rows:
        table.add_row(row_kind.value, model_id, family)

    console.print(table)
    console.print(f"{len(rows)} model(s)")


@cli.command("status")
@click.argument("family")
@click.argument("remote_id")
@click.pass_context
def cmd_status(ctx: click.Context, family: str, remote_id: str) -> None:
    """Fetch the status of an existing provider task once."""

    async def _check() -> tuple:
        async with Orchestrator.from_settings(settings) as orchestrator:
            return await orchestrator.check_status(family, remote_id)

    try:
        settings = _settings(ctx)
        normalized, url = asyncio.run(_check())
    except KeyError as exc:
        console.print(f"[red]Error: {exc.args[0]}[/red]")
        console.print(f"Known families: {', '.join(DEFAULT_REGISTRY.families())}")
        sys.exit(2)
    except (GenerationError, PollTransportError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)
    except FileNotFoundError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"[red]Configuration error: {exc}[/red]")
        sys.exit(1)

    table = Table(title=f"{family} {remote_id}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Status", normalized.canonical_status.value)
    table.add_row("Success signal", repr(normalized.raw_success_signal))
    table.add_row("Failure signal", repr(normalized.raw_failure_signal))
    table.add_row("Error", normalized.error_detail or "")
    table.add_row("Result URL", url or "")
    console.print(table)


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
