import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import rich.traceback
import typer
from rich.console import Console
from rich.logging import RichHandler

from cquant import legend
from cquant.bucketing import BucketingMapGenerator
from cquant.clustering import DEFAULT_MAX_ITERATIONS, ClusteringMapGenerator
from cquant.errors import QuantizationError
from cquant.generator import ColorMapGenerator
from cquant.metrics import get_metric
from cquant.quantize import ColorQuantizer

console = Console(stderr=True)
logger = logging.getLogger("cquantgen")


class MetricChoice(str, Enum):
    EUCLIDEAN = "euclidean"
    HUE = "hue"


class StrategyChoice(str, Enum):
    CLUSTERING = "clustering"
    BUCKETING = "bucketing"


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
    )


def build_generator(strategy: StrategyChoice, metric: MetricChoice, max_iterations: int) -> ColorMapGenerator:
    if strategy == StrategyChoice.BUCKETING:
        return BucketingMapGenerator()
    return ClusteringMapGenerator(get_metric(metric.value), max_iterations=max_iterations)


def cquant_cli(
    input_path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True,
        help="Image to quantize (BMP, PNG, or anything Pillow reads).",
    ),
    output_path: Path = typer.Argument(
        ..., dir_okay=False,
        help="Where to write the quantized image: .bmp, .png or .tif (BMP if the extension is unknown).",
    ),
    num_colors: int = typer.Option(16, "--num-colors", "-n", min=1, help="Target palette size. Default: 16."),
    metric: MetricChoice = typer.Option(
        MetricChoice.EUCLIDEAN, "--metric", case_sensitive=False,
        help="Distance metric for clustering: euclidean (RGB) or hue (circular hue angle).",
    ),
    strategy: StrategyChoice = typer.Option(
        StrategyChoice.CLUSTERING, "--strategy", case_sensitive=False,
        help="Palette strategy: clustering (k-means) or bucketing (fixed color-space buckets).",
    ),
    max_iterations: int = typer.Option(
        DEFAULT_MAX_ITERATIONS, "--max-iterations", min=1,
        help=f"Iteration cap for clustering. Default: {DEFAULT_MAX_ITERATIONS}.",
    ),
    legend_path: Optional[Path] = typer.Option(
        None, "--legend", dir_okay=False, help="Also write a palette legend PNG to this path.",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Overwrite existing files."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every clustering iteration."),
):
    """
    Reduce the colors of an image to a fixed-size palette.
    """
    setup_logging(verbose)

    clobbered = [p for p in (output_path, legend_path) if p is not None and p.exists()]
    if clobbered and not yes:
        typer.secho("Error: Files already exist:", fg=typer.colors.RED)
        for path in clobbered:
            typer.secho(f"  {path}", fg=typer.colors.RED)
        typer.secho("Use --yes (-y) to overwrite.", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    command_line_str = " ".join(sys.argv)
    try:
        generator = build_generator(strategy, metric, max_iterations)
        logger.debug("Using %r", generator)
        quantizer = ColorQuantizer.from_file(input_path, generator)
        result = quantizer.quantize_to_file(
            output_path,
            num_colors,
            command_line_invocation=command_line_str,
            additional_metadata={"SourceImage": str(input_path)},
        )
    except QuantizationError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if legend_path is not None:
        legend_image = legend.create_legend_image(result.palette)
        try:
            legend_path.parent.mkdir(parents=True, exist_ok=True)
            legend_image.save(legend_path, "PNG")
        except OSError as e:
            typer.secho(f"Error saving legend to {legend_path}: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        typer.echo(f"Palette legend saved to: {legend_path}")

    typer.echo(f"Palette: {len(result.palette)} colors")
    for idx, color in enumerate(result.palette):
        typer.echo(f"  {idx}: #{color.red:02x}{color.green:02x}{color.blue:02x}")
    if not result.converged:
        typer.secho(
            f"Warning: clustering did not converge within {result.iterations} iterations; "
            "the palette is a best-effort result.",
            fg=typer.colors.YELLOW,
        )
    elif result.iterations:
        typer.echo(f"Converged after {result.iterations} iterations.")
    typer.echo(f"Completed. Output written to: {output_path.resolve()}")


if __name__ == "__main__":
    rich.traceback.install(show_locals=False, suppress=[typer])
    typer.run(cquant_cli)
