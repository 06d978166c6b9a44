"""CLI entry point for geo-tutor."""

from __future__ import annotations

import asyncio
import json
import logging
import mimetypes
from datetime import datetime
from pathlib import Path

import click

from . import __version__
from .exceptions import ConfigError, ExtractionError, GeoTutorError

logger = logging.getLogger("geo-tutor")

# Every failure kind looks the same to the user; details go to the log.
FAILURE_MESSAGE = "Computation failed. Check your connection or input and try again."

PROVIDERS = [
    ("google", "Google Gemini"),
    ("anthropic", "Anthropic Claude"),
    ("openai", "OpenAI"),
    ("openai-compatible", "Any OpenAI-compatible endpoint"),
]


# ── Helpers ──────────────────────────────────────────────


def _init(ctx: click.Context):
    """Load config and configure logging for a command."""
    from .config import load_config
    from .log_setup import configure_logging

    try:
        config = load_config(ctx.obj["config_path"])
    except ConfigError as e:
        raise click.ClickException(str(e))
    configure_logging(config.logging, verbose=ctx.obj["verbose"])
    return config


def _fail() -> None:
    click.echo(click.style(FAILURE_MESSAGE, fg="red"), err=True)
    raise SystemExit(1)


def _print_solution(solution: dict, output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps(solution, indent=2, ensure_ascii=False))
        return

    click.echo(click.style("Problem: ", bold=True) + str(solution["problemSummary"]))
    steps = solution["steps"] if isinstance(solution["steps"], list) else []
    for i, step in enumerate(steps, 1):
        if not isinstance(step, dict):
            continue
        click.echo(f"\nStep {step.get('stepId', i)}: {step.get('title', '')}")
        if step.get("description"):
            click.echo(f"  {step['description']}")
        if step.get("mathExpression"):
            click.echo(f"  math: {step['mathExpression']}")
        visuals = step.get("visuals") or {}
        if isinstance(visuals, dict):
            click.echo(
                f"  visuals: {len(visuals.get('points') or [])} points, "
                f"{len(visuals.get('lines') or [])} lines, "
                f"{len(visuals.get('polygons') or [])} polygons"
            )
    click.echo(click.style("\nAnswer: ", bold=True) + str(solution["finalAnswer"]))


def _save_transcript(text: str, path: Path | None, transcripts_dir: str) -> None:
    """Write the raw stream for later `geo-tutor extract` runs."""
    if not text:
        return
    targets: list[Path] = []
    if path is not None:
        targets.append(path)
    if transcripts_dir:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        targets.append(Path(transcripts_dir).expanduser() / f"solve-{stamp}.txt")
    for target in targets:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
            logger.info("Transcript saved to %s", target)
        except OSError as e:
            logger.warning("Could not save transcript to %s: %s", target, e)


class ThinkingEcho:
    """Progress sink that types the model's reasoning out on stderr."""

    def __init__(self) -> None:
        from .reasoning.progress import StreamPhase

        self._shown = ""
        self._phase = StreamPhase.ANALYZING

    def __call__(self, text: str) -> None:
        from .reasoning.progress import StreamPhase, StreamProgress

        progress = StreamProgress.from_text(text)
        if progress.thinking.startswith(self._shown):
            delta = progress.thinking[len(self._shown) :]
        else:
            # The opening tag arrived late and the view switched to its content
            delta = "\n" + progress.thinking
        if delta:
            click.echo(delta, nl=False, err=True)
            self._shown = progress.thinking

        if progress.phase != self._phase:
            self._phase = progress.phase
            if progress.phase == StreamPhase.COMPILING:
                click.echo(
                    click.style("\n> Compiling geometric data...", fg="cyan"),
                    err=True,
                )
            elif progress.phase == StreamPhase.DONE:
                click.echo(click.style("> Done.", fg="cyan"), err=True)


# ── CLI Commands ─────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="geo-tutor")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs on stderr")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """geo-tutor — step-by-step 3D geometry solutions."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


@main.command()
@click.argument("problem", required=False, default="")
@click.option(
    "--image",
    "image_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Picture of the problem (PNG, JPEG, ...)",
)
@click.option("--sample", is_flag=True, help="Solve the built-in sample problem")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Solution output format",
)
@click.option("--quiet", "-q", is_flag=True, help="Don't stream the model's thinking")
@click.option(
    "--save-transcript",
    "transcript_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the raw model output to this file",
)
@click.pass_context
def solve(
    ctx: click.Context,
    problem: str,
    image_path: Path | None,
    sample: bool,
    output_format: str,
    quiet: bool,
    transcript_path: Path | None,
) -> None:
    """Solve a geometry problem step by step."""
    from .reasoning.factory import create_provider
    from .reasoning.prompts import SAMPLE_PROBLEM
    from .reasoning.solver import GeometrySolver, SolveRequest

    config = _init(ctx)
    if sample:
        problem = SAMPLE_PROBLEM

    image = None
    mime_type = None
    if image_path is not None:
        mime_type, _ = mimetypes.guess_type(image_path.name)
        if not mime_type or not mime_type.startswith("image/"):
            raise click.BadParameter(
                f"{image_path.name} does not look like an image", param_hint="--image"
            )
        image = image_path.read_bytes()

    try:
        request = SolveRequest(
            problem_text=problem, image=image, image_mime_type=mime_type
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    try:
        provider = create_provider(config)
    except ImportError as e:
        raise click.ClickException(str(e))
    if provider is None:
        raise click.ClickException(
            "No model provider configured. Run 'geo-tutor setup' or set "
            "GEO_TUTOR_PROVIDER and GEO_TUTOR_API_KEY."
        )

    solver = GeometrySolver(provider, timeout=config.reasoning.llm_timeout_seconds)
    try:
        solution = asyncio.run(
            solver.solve(request, on_progress=None if quiet else ThinkingEcho())
        )
    except GeoTutorError as e:
        logger.error("Solve failed (%s): %s", type(e).__name__, e)
        _fail()
    finally:
        _save_transcript(solver.last_text, transcript_path, config.transcripts_dir)

    if not quiet:
        click.echo("", err=True)
    _print_solution(solution, output_format)


@main.command()
@click.argument("transcript", type=click.File("r", encoding="utf-8"))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="json",
    help="Solution output format",
)
@click.pass_context
def extract(ctx: click.Context, transcript, output_format: str) -> None:
    """Extract the solution from a saved transcript ('-' for stdin)."""
    from .reasoning.extractor import extract_solution

    _init(ctx)
    text = transcript.read()
    try:
        solution = extract_solution(text)
    except ExtractionError as e:
        logger.error("Extraction failed (%s): %s", type(e).__name__, e)
        _fail()
    _print_solution(solution, output_format)


@main.command()
def schema() -> None:
    """Print the solution schema embedded in the prompt."""
    from .reasoning.prompts import schema_description

    click.echo(schema_description())


@main.command()
@click.pass_context
def setup(ctx: click.Context) -> None:
    """Interactive setup wizard."""
    from .config import (
        DEFAULT_CONFIG_PATH,
        GeoTutorConfig,
        load_config,
        save_config,
    )
    from .reasoning.factory import DEFAULT_MODELS

    config_path = ctx.obj["config_path"]
    config_file = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
    config = GeoTutorConfig()
    if config_file.exists():
        # Keep logging and transcript settings from the existing file
        try:
            config = load_config(config_file)
        except ConfigError as e:
            raise click.ClickException(f"{e}\nFix or remove the file, then rerun setup.")

    click.echo("geo-tutor Setup")
    click.echo("=" * 40)

    click.echo("\n  Providers:")
    for i, (name, desc) in enumerate(PROVIDERS, 1):
        click.echo(f"    {i}. {name} — {desc}")
    choice = click.prompt(
        "  Provider choice", type=click.IntRange(1, len(PROVIDERS)), default=1
    )
    provider = PROVIDERS[choice - 1][0]

    api_key = click.prompt("  API key", hide_input=True)
    base_url = ""
    if provider == "openai-compatible":
        base_url = click.prompt("  Base URL")
    default_model = DEFAULT_MODELS.get(provider.split("-")[0], "")
    model = click.prompt("  Model", default=default_model)

    config.reasoning = config.reasoning.model_copy(
        update={
            "provider": provider,
            "api_key": api_key,
            "model": model,
            "base_url": base_url,
        }
    )
    path = save_config(config, config_path)
    click.echo(f"\nConfig saved to {path}")
    click.echo(f"Edit it later or rerun setup. Default location: {DEFAULT_CONFIG_PATH}")
    click.echo("Try it:  geo-tutor solve --sample")


if __name__ == "__main__":
    main()
