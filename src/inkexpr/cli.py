"""Main CLI entry point."""

import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from PIL import Image, UnidentifiedImageError
from rich.console import Console
from rich.logging import RichHandler

from inkexpr.config import PipelineConfig, Provider, ProviderConfig
from inkexpr.errors import ConfigError
from inkexpr.pipeline import Outcome, recognize_expression
from inkexpr.providers.anthropic import AnthropicProvider
from inkexpr.providers.openai import OpenAIProvider
from inkexpr.providers.tesseract import TesseractProvider

console = Console(stderr=True)
load_dotenv()

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp"}

EXIT_FAILURE = 1
EXIT_NO_EXPRESSION = 2


@click.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--provider", "-p",
    type=click.Choice([p.value for p in Provider], case_sensitive=False),
    default="tesseract",
    show_default=True,
    help="Recognition engine to use.",
)
@click.option(
    "--model", "-m",
    default=None,
    help="Model name override for the LLM providers.",
)
@click.option(
    "--api-key",
    default=None,
    help="API key (overrides environment variable).",
)
@click.option("--threshold", type=click.IntRange(0, 255), default=None, help="Binarization threshold.")
@click.option("--scale", type=click.IntRange(min=1), default=None, help="Upscale factor.")
@click.option("--margin", type=click.IntRange(min=0), default=None, help="Crop margin in pixels.")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=0,
    help="Seconds before a tesseract call is abandoned (0 = no limit).",
)
@click.option(
    "--save-preprocessed",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the binarized image sent to the engine to this PNG path.",
)
@click.option("--raw", is_flag=True, help="Print the engine's text without normalization.")
@click.option("--verbose", "-v", is_flag=True, help="Log each pipeline stage to stderr.")
@click.version_option()
def main(input_path, provider, model, api_key, threshold, scale, margin, timeout,
         save_preprocessed, raw, verbose):
    """Read a hand-drawn math expression from an image.

    INPUT_PATH is a canvas snapshot (.png, .jpg, .jpeg, .webp, .gif or .bmp)
    with dark ink on a white background.  The normalized expression is
    written to stdout.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    suffix = input_path.suffix.lower()
    if suffix not in IMAGE_EXTENSIONS:
        console.print(f"[red]Unsupported file type:[/red] {suffix}")
        sys.exit(EXIT_FAILURE)

    try:
        pipeline_config = PipelineConfig.from_env(
            binarize_threshold=threshold,
            scale_factor=scale,
            margin_px=margin,
        )
        provider_config = ProviderConfig.from_env(
            provider=Provider(provider),
            model_override=model,
            api_key_override=api_key,
        )
    except (ConfigError, RuntimeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_FAILURE)

    try:
        with Image.open(input_path) as img:
            img.load()
            snapshot = img.copy()
    except (UnidentifiedImageError, OSError) as e:
        console.print(f"[red]Cannot read image:[/red] {e}")
        sys.exit(EXIT_FAILURE)

    provider_obj = _build_provider(provider_config, timeout=timeout)

    with console.status(f"[cyan]Recognizing via {provider} ({provider_config.model})..."):
        result = recognize_expression(snapshot, provider_obj, pipeline_config)

    if save_preprocessed and result.prepared is not None:
        result.prepared.save(save_preprocessed, format="PNG")
        console.print(f"[green]Preprocessed image written to {save_preprocessed}[/green]")

    if result.outcome == Outcome.RECOGNITION_FAILED:
        console.print(f"[red]Recognition failed:[/red] {result.error}")
        sys.exit(EXIT_FAILURE)
    if result.outcome == Outcome.NO_INK:
        console.print("[yellow]No ink found in the image.[/yellow]")
        sys.exit(EXIT_NO_EXPRESSION)

    if result.outcome == Outcome.EMPTY_EXPRESSION:
        console.print("[yellow]No expression found.[/yellow]")
        sys.exit(EXIT_NO_EXPRESSION)

    click.echo(result.raw_text if raw else result.expression)


def _build_provider(config: ProviderConfig, timeout: float = 0):
    if config.provider == Provider.TESSERACT:
        return TesseractProvider(tesseract_cmd=config.tesseract_cmd, timeout=timeout)
    elif config.provider == Provider.ANTHROPIC:
        return AnthropicProvider(api_key=config.api_key, model=config.model)
    elif config.provider == Provider.OPENAI:
        return OpenAIProvider(api_key=config.api_key, model=config.model)
    else:
        raise ValueError(f"Unknown provider: {config.provider}")
