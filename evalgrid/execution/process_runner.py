"""
External process runner for evalgrid.

Runs one scenario's command to completion, streaming its output live
with the scenario label attached, and turns every outcome (including a
command that could not be started) into a ScenarioResult.
"""

import asyncio
import contextlib
import os
import sys
import time
from typing import Optional, Tuple
import logging

from ..exceptions import LaunchError
from ..models.scenario import ScenarioSpec
from ..models.result import (
    LAUNCH_FAILURE_EXIT_CODE,
    TIMEOUT_EXIT_CODE,
    ScenarioResult,
    format_duration,
)

logger = logging.getLogger(__name__)

# Max bytes buffered for a single output line
STREAM_LIMIT = 1024 * 1024

SUCCESS_GLYPH = "✓"
FAILURE_GLYPH = "✗"


class ProcessRunner:
    """Runs a ScenarioSpec as an external process.

    Never raises for process problems: a non-zero exit is a normal
    result, and a launch failure becomes a result with
    LAUNCH_FAILURE_EXIT_CODE.

    Usage:
        runner = ProcessRunner()
        result = await runner.run(spec)
        if not result.passed:
            print(f"{spec.label} failed with {result.exit_code}")

    Attributes:
        timeout_seconds: Optional per-scenario limit; None waits forever
    """

    def __init__(self, timeout_seconds: Optional[float] = None):
        self.timeout_seconds = timeout_seconds

    async def run(self, spec: ScenarioSpec) -> ScenarioResult:
        """Run one scenario and report its completion.

        Args:
            spec: The scenario to run

        Returns:
            ScenarioResult with the real exit code, or a sentinel code
            if the process could not start or timed out
        """
        start = time.monotonic()
        print(f"{spec.label}: started", flush=True)
        logger.debug(f"{spec.label}: {spec.command_line}")

        try:
            process = await self._launch(spec)
        except LaunchError as e:
            logger.error(f"{spec.label}: {e}")
            result = ScenarioResult(
                id=spec.id,
                exit_code=LAUNCH_FAILURE_EXIT_CODE,
                duration_ms=_elapsed_ms(start),
                error=str(e),
            )
            self._print_completion(spec, result)
            return result

        exit_code, error = await self._wait(process, spec)
        result = ScenarioResult(
            id=spec.id,
            exit_code=exit_code,
            duration_ms=_elapsed_ms(start),
            error=error,
        )
        self._print_completion(spec, result)
        return result

    async def _launch(self, spec: ScenarioSpec) -> asyncio.subprocess.Process:
        """Start the child process with the scenario's environment.

        Raises:
            LaunchError: If the command is empty or cannot be executed
        """
        if not spec.command:
            raise LaunchError(spec.command, ValueError("empty command"))

        env = {**os.environ, **spec.env_vars}
        try:
            return await asyncio.create_subprocess_exec(
                *spec.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
                limit=STREAM_LIMIT,
            )
        except OSError as e:
            raise LaunchError(spec.command, e)

    async def _wait(
        self,
        process: asyncio.subprocess.Process,
        spec: ScenarioSpec,
    ) -> Tuple[int, Optional[str]]:
        """Stream output until the child exits.

        Returns:
            (exit_code, error) where error is set only on timeout
        """
        pumps = asyncio.gather(
            _pump(process.stdout, spec.label, to_stderr=False),
            _pump(process.stderr, spec.label, to_stderr=True),
            return_exceptions=True,
        )
        try:
            if self.timeout_seconds is None:
                exit_code = await process.wait()
            else:
                exit_code = await asyncio.wait_for(process.wait(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"{spec.label}: timed out after {self.timeout_seconds}s, killing")
            _kill(process)
            await process.wait()
            pumps.cancel()
            await asyncio.gather(pumps, return_exceptions=True)
            return TIMEOUT_EXIT_CODE, f"Timed out after {self.timeout_seconds}s"
        except BaseException:
            pumps.cancel()
            raise
        finally:
            _kill(process)

        for outcome in await pumps:
            if isinstance(outcome, Exception):
                logger.error(f"{spec.label}: output stream failed: {outcome}")
        return exit_code, None

    def _print_completion(self, spec: ScenarioSpec, result: ScenarioResult) -> None:
        glyph = SUCCESS_GLYPH if result.passed else FAILURE_GLYPH
        print(
            f"{spec.label}: {glyph} exit={result.exit_code} "
            f"({format_duration(result.duration_seconds)})",
            flush=True,
        )


async def _pump(stream: Optional[asyncio.StreamReader], label: str, to_stderr: bool) -> None:
    """Copy a child stream to ours line by line, prefixed with the label.

    A line longer than STREAM_LIMIT is emitted in STREAM_LIMIT-sized
    pieces, so the pipe keeps draining and the child never blocks.
    """
    if stream is None:
        return
    overran = False
    while True:
        try:
            line = await stream.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            # EOF, possibly after a final unterminated line
            if e.partial:
                _emit(e.partial, label, to_stderr)
            return
        except asyncio.LimitOverrunError as e:
            _emit(await stream.read(e.consumed or STREAM_LIMIT), label, to_stderr)
            overran = True
            continue
        # Terminator of an oversized line already emitted in pieces
        if not (overran and line.strip(b"\r\n") == b""):
            _emit(line, label, to_stderr)
        overran = False


def _emit(line: bytes, label: str, to_stderr: bool) -> None:
    text = line.decode(errors="replace").rstrip("\r\n")
    # sys.stdout/sys.stderr are looked up per line so redirection is honored
    print(f"{label} | {text}", file=sys.stderr if to_stderr else sys.stdout, flush=True)


def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
