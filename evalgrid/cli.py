"""CLI interface for evalgrid.

Usage:
    evalgrid run                                  # All agents, detected mode, unlimited containers
    evalgrid run --agent claude-code              # Single agent
    evalgrid run --mode test                      # Test mode (5 prompts)
    evalgrid run --search-provider you            # Specific MCP server
    evalgrid run -j 4                             # 4 containers in parallel
    evalgrid run -j 0                             # Unlimited container parallelism
    evalgrid run --prompt-concurrency 8           # 8 prompts per container
    evalgrid run --dry-run                        # Show what would run
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Tuple

import click
from dotenv import load_dotenv

from .config import Config
from .exceptions import EvalGridError
from .models.scenario import ALL_AGENTS, Mode, Unbounded
from .orchestration.matrix import build_matrix, detect_mode, search_providers
from .orchestration.runner import MatrixRunner, DryRunner
from .reporting.reporter import Reporter


def setup_logging(verbose: bool, quiet: bool):
    """Configure logging based on verbosity."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def load_config(
    config_path: Optional[Path],
    agents: Tuple[str, ...],
    mode: Optional[str],
    search_provider: Optional[str],
    concurrency: Optional[int],
    prompt_concurrency: Optional[int],
    timeout: Optional[float],
    heartbeat_interval: Optional[float],
) -> Config:
    """Layer config: defaults < YAML file < environment < CLI flags."""
    config = Config.from_yaml(config_path) if config_path else Config.default()
    data = Config.from_env(config).to_dict()

    if agents:
        data["matrix"]["agents"] = list(agents)
    if mode:
        data["matrix"]["mode"] = mode
    if search_provider:
        data["matrix"]["search_provider"] = search_provider
    if concurrency is not None:
        data["execution"]["concurrency"] = concurrency
    if prompt_concurrency is not None:
        data["execution"]["prompt_concurrency"] = prompt_concurrency
    if timeout is not None:
        data["execution"]["timeout_seconds"] = timeout
    if heartbeat_interval is not None:
        data["execution"]["heartbeat_interval_seconds"] = heartbeat_interval

    return Config.from_dict(data)


@click.group()
@click.version_option(package_name="evalgrid")
def cli():
    """evalgrid - Run agent × search provider evaluation matrices in parallel."""
    pass


@cli.command()
@click.option("--agent", "agents", multiple=True, type=click.Choice(ALL_AGENTS), help="Agent to run (repeatable, default: all)")
@click.option("--mode", type=click.Choice([m.value for m in Mode]), default=None, help="Dataset mode (default: detect from docker/entrypoint)")
@click.option("--search-provider", "--mcp", "search_provider", default=None, help="Single search provider (default: builtin + all MCP servers)")
@click.option("-j", "--concurrency", type=click.IntRange(min=0), default=None, help="Containers in parallel (0 = unlimited, the default)")
@click.option("--prompt-concurrency", type=click.IntRange(min=1), default=None, help="Prompts per container (default: 1)")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None, help="Per-scenario timeout in seconds (default: none)")
@click.option("--heartbeat-interval", type=click.FloatRange(min=0, min_open=True), default=None, help="Seconds between progress lines (default: 30)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Path to config YAML")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write a report to this file")
@click.option("--format", "-f", "output_format", type=click.Choice(["json", "markdown"]), default="json", help="Report format for --output")
@click.option("--dry-run", is_flag=True, help="Show what would run")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Errors only")
def run(
    agents: Tuple[str, ...],
    mode: Optional[str],
    search_provider: Optional[str],
    concurrency: Optional[int],
    prompt_concurrency: Optional[int],
    timeout: Optional[float],
    heartbeat_interval: Optional[float],
    config_path: Optional[Path],
    output: Optional[Path],
    output_format: str,
    dry_run: bool,
    verbose: bool,
    quiet: bool,
):
    """Run every agent × search provider scenario.

    Example:
        evalgrid run --agent codex --mode test -j 2
    """
    # Load .env from current directory or home
    load_dotenv()
    load_dotenv(Path.home() / ".env")
    setup_logging(verbose, quiet)

    try:
        config = load_config(
            config_path, agents, mode, search_provider,
            concurrency, prompt_concurrency, timeout, heartbeat_interval,
        )

        prefix = "[DRY RUN] " if dry_run else ""
        if dry_run:
            click.echo("[DRY RUN] Validation mode - no docker commands will run\n")

        current_mode = Mode(config.matrix.mode) if config.matrix.mode else detect_mode(config.matrix.entrypoint)
        providers = search_providers(config.matrix)
        click.echo(f"{prefix}Running in {current_mode.value} mode")
        click.echo(f"Agents: {', '.join(config.matrix.agents)}")
        click.echo(f"Search providers: {', '.join(providers)}")
        click.echo()

        prompt_concurrency = config.execution.prompt_concurrency
        matrix = build_matrix(config.matrix, current_mode, prompt_concurrency)
        limit = config.execution.concurrency_limit
        limit_label = "unlimited" if isinstance(limit, Unbounded) else limit.label
        click.echo(
            f"{'[DRY RUN] Would run' if dry_run else 'Running'} {len(matrix)} scenarios "
            f"(container concurrency: {limit_label}, prompt concurrency: {prompt_concurrency})\n"
        )

        if dry_run:
            DryRunner().print_plan(matrix)
            raise SystemExit(0)

        runner = MatrixRunner(config)
        results, summary = asyncio.run(runner.execute(matrix))

        if output:
            reporter = Reporter()
            report = reporter.generate(matrix, results, summary, current_mode.value, limit.label)
            text = reporter.to_json(report) if output_format == "json" else reporter.to_markdown(report)
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(text)
            click.echo(f"\nReport saved to: {output}")

    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)
        raise SystemExit(130)
    except EvalGridError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    raise SystemExit(summary.exit_code)


if __name__ == "__main__":
    cli()
