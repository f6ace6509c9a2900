"""Command-line driver for DepHealth."""

import asyncio
import json
from pathlib import Path
from typing import Dict, Optional, Tuple

import typer
from rich.console import Console

from ..config import EngineConfig
from ..core.ecosystems import Ecosystem
from ..core.engine import DependencyHealthEngine
from ..core.models import DependencyReport
from ..http.client import FetchClient
from ..manifest import load_package_json
from ..utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="dephealth",
    help="Check declared dependencies for known vulnerabilities and newer releases",
    add_completion=False
)

console = Console()
logger = get_logger("CLI")


@app.command()
def analyze(
    path: Path = typer.Argument(
        Path("package.json"),
        help="Path to the package.json to analyze"
    ),
    ecosystem: Optional[str] = typer.Option(
        None,
        "--ecosystem",
        "-e",
        help="Registry of every dependency (npm, PyPI, Maven, NuGet, Go, RubyGems); guessed per name if omitted"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for JSON results"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
    performance: bool = typer.Option(
        False,
        "--performance",
        help="Show performance summary"
    )
) -> None:
    """Analyze the dependencies declared in a manifest."""
    setup_logging(verbose=verbose)

    try:
        forced_ecosystem = Ecosystem.parse(ecosystem) if ecosystem else None
        dependencies = load_package_json(path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not dependencies:
        console.print("[yellow]No dependencies found[/yellow]")
        return

    config = EngineConfig.from_env()
    report, engine = asyncio.run(_run(dependencies, forced_ecosystem, config))

    result = report.to_dict()
    console.print_json(data=result)

    if output:
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(result, f, indent=2)
        console.print(f"Results saved to {output}")

    if performance and engine.performance_monitor is not None:
        engine.performance_monitor.print_summary(console)


async def _run(
    dependencies: Dict[str, str],
    ecosystem: Optional[Ecosystem],
    config: EngineConfig
) -> Tuple[DependencyReport, DependencyHealthEngine]:
    async with FetchClient(config) as client:
        engine = DependencyHealthEngine.create(client, config)
        report = await engine.analyze(dependencies, ecosystem)
    return report, engine


def main() -> None:
    app()


if __name__ == "__main__":
    main()
