"""
Run matrix construction for evalgrid.

Turns agents × search providers into an ordered list of ScenarioSpecs,
each a `docker compose run` invocation, and detects the dataset mode
from the container entrypoint when it is not given.
"""

import re
from pathlib import Path
from typing import List, Optional, Sequence

from ..config import MatrixConfig
from ..exceptions import ConfigurationError, MatrixError
from ..models.scenario import BUILTIN_PROVIDER, Mode, RunConfig, ScenarioSpec

_DATASET_DEFAULT = re.compile(r'const DATASET = process\.env\.DATASET \|\| "(\w+)"')


def detect_mode(entrypoint: Path) -> Mode:
    """Read the default dataset mode from the container entrypoint.

    Looks for the DATASET default first, then falls back to the prompt
    file paths the entrypoint references.

    Raises:
        ConfigurationError: If the file is missing or no mode is found
    """
    try:
        content = entrypoint.read_text()
    except OSError as e:
        raise ConfigurationError(f"Could not read {entrypoint}: {e}")

    match = _DATASET_DEFAULT.search(content)
    if match:
        try:
            return Mode(match.group(1))
        except ValueError:
            raise ConfigurationError(f"Unknown dataset mode in {entrypoint}: {match.group(1)}")

    if "/eval/data/prompts/${DATASET}.jsonl" in content or "prompts/test.jsonl" in content:
        return Mode.TEST
    if "prompts/full.jsonl" in content:
        return Mode.FULL
    raise ConfigurationError(f"Could not detect current mode from {entrypoint}")


def search_providers(config: MatrixConfig) -> List[str]:
    """Providers to cover: the one requested, or builtin plus every MCP server."""
    if config.search_provider:
        return [config.search_provider]
    return [BUILTIN_PROVIDER, *config.mcp_servers]


def build_runs(agents: Sequence[str], providers: Sequence[str]) -> List[RunConfig]:
    """Cross agents with providers, agent-major."""
    if not agents:
        raise MatrixError("No agents to run")
    if not providers:
        raise MatrixError("No search providers to run")
    return [RunConfig(agent, provider) for agent in agents for provider in providers]


def scenario_env(run: RunConfig, mode: Mode, prompt_concurrency: int) -> dict:
    return {
        "SEARCH_PROVIDER": run.search_provider,
        "DATASET": mode.value,
        "PROMPT_CONCURRENCY": str(prompt_concurrency),
    }


def build_matrix(
    config: MatrixConfig,
    mode: Mode,
    prompt_concurrency: int = 1,
    runs: Optional[Sequence[RunConfig]] = None,
) -> List[ScenarioSpec]:
    """Build the ordered run matrix.

    Args:
        config: Agents, providers and compose command
        mode: Dataset mode passed to every container
        prompt_concurrency: Passed through unchanged to every container
        runs: Explicit pairings (defaults to agents × providers)

    Returns:
        One ScenarioSpec per pairing, ids 1..N in matrix order

    Raises:
        MatrixError: If there is nothing to run
    """
    if runs is None:
        runs = build_runs(config.agents, search_providers(config))
    if not runs:
        raise MatrixError("Run matrix is empty")

    total = len(runs)
    matrix = []
    for index, run in enumerate(runs, 1):
        env_vars = scenario_env(run, mode, prompt_concurrency)
        command = [*config.compose_command, "run", "--rm"]
        for key, value in env_vars.items():
            command += ["-e", f"{key}={value}"]
        command.append(run.agent)

        matrix.append(
            ScenarioSpec(
                id=index,
                name=run.name,
                label=f"[{index}/{total}] {run.name}",
                command=tuple(command),
                env_vars=env_vars,
            )
        )
    return matrix
