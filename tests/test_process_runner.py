"""Tests for the external process runner."""

import asyncio

import pytest

from evalgrid.execution.process_runner import STREAM_LIMIT, ProcessRunner
from evalgrid.models.result import LAUNCH_FAILURE_EXIT_CODE, TIMEOUT_EXIT_CODE
from evalgrid.models.scenario import ScenarioSpec


def run_spec(spec, timeout_seconds=None):
    return asyncio.run(ProcessRunner(timeout_seconds=timeout_seconds).run(spec))


class TestExitCodes:
    """Real exit codes are recorded as data, never raised."""

    def test_success(self, python_spec):
        result = run_spec(python_spec(1, "pass"))

        assert result.id == 1
        assert result.exit_code == 0
        assert result.passed
        assert result.error is None
        assert result.duration_ms >= 0

    def test_nonzero_exit(self, python_spec):
        result = run_spec(python_spec(2, "import sys; sys.exit(3)", total=2))

        assert result.id == 2
        assert result.exit_code == 3
        assert not result.passed

    def test_duration_measured(self, python_spec):
        result = run_spec(python_spec(1, "import time; time.sleep(0.2)"))

        assert result.duration_ms >= 200


class TestLaunchFailure:
    """A command that cannot start becomes a sentinel result."""

    def test_missing_executable(self, capsys):
        spec = ScenarioSpec(
            id=1,
            name="missing",
            label="[1/1] missing",
            command=("definitely-not-a-real-binary-evalgrid",),
        )

        result = run_spec(spec)

        assert result.exit_code == LAUNCH_FAILURE_EXIT_CODE
        assert "definitely-not-a-real-binary-evalgrid" in result.error
        out = capsys.readouterr().out
        assert "[1/1] missing: ✗ exit=1" in out

    def test_empty_command(self):
        spec = ScenarioSpec(id=1, name="empty", label="[1/1] empty", command=())

        result = run_spec(spec)

        assert result.exit_code == LAUNCH_FAILURE_EXIT_CODE
        assert "empty command" in result.error


class TestStreaming:
    """Child output is streamed live, attributed to the scenario label."""

    def test_stdout_and_stderr_prefixed(self, python_spec, capsys):
        code = (
            "import sys\n"
            "print('first')\n"
            "print('second')\n"
            "print('oops', file=sys.stderr)\n"
        )

        run_spec(python_spec(1, code, name="agent-you"))

        captured = capsys.readouterr()
        assert "[1/1] agent-you | first" in captured.out
        assert "[1/1] agent-you | second" in captured.out
        assert captured.out.index("| first") < captured.out.index("| second")
        assert "[1/1] agent-you | oops" in captured.err

    def test_start_and_completion_lines(self, python_spec, capsys):
        run_spec(python_spec(1, "pass", name="agent-you"))

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "[1/1] agent-you: started"
        assert lines[-1].startswith("[1/1] agent-you: ✓ exit=0 (")

    def test_env_vars_injected(self, python_spec, capsys):
        code = "import os; print(os.environ['SEARCH_PROVIDER'], os.environ['DATASET'])"

        result = run_spec(python_spec(1, code, env_vars={"SEARCH_PROVIDER": "exa", "DATASET": "test"}))

        assert result.passed
        assert "| exa test" in capsys.readouterr().out

    def test_parent_environment_kept(self, python_spec, monkeypatch):
        monkeypatch.setenv("EVALGRID_TEST_MARKER", "present")
        code = "import os, sys; sys.exit(0 if os.environ.get('EVALGRID_TEST_MARKER') == 'present' else 5)"

        assert run_spec(python_spec(1, code)).exit_code == 0


class TestLongOutput:
    """Lines beyond the stream limit are streamed in pieces, never fatal."""

    def test_huge_unterminated_line(self, python_spec, capsys):
        size = 4 * STREAM_LIMIT + 12345
        code = f"import sys; sys.stdout.write('x' * {size}); sys.stdout.flush()"

        result = asyncio.run(asyncio.wait_for(ProcessRunner().run(python_spec(1, code)), 30))

        assert result.exit_code == 0
        assert result.error is None
        assert result.duration_ms < 30_000
        out = capsys.readouterr().out
        assert _streamed(out, "[1/1] py-1") == "x" * size
        assert out.splitlines()[-1].startswith("[1/1] py-1: ✓ exit=0 (")

    def test_lines_after_oversized_line_kept(self, python_spec, capsys):
        code = (
            "import sys\n"
            f"sys.stdout.write('y' * {STREAM_LIMIT + 10} + '\\n')\n"
            "print('after')\n"
            "print('long', file=sys.stderr)\n"
        )

        result = run_spec(python_spec(1, code))

        assert result.passed
        captured = capsys.readouterr()
        assert _streamed(captured.out, "[1/1] py-1") == "y" * (STREAM_LIMIT + 10) + "after"
        assert "[1/1] py-1 | after" in captured.out
        assert "[1/1] py-1 | long" in captured.err

    def test_stderr_flood_does_not_block_child(self, python_spec):
        code = f"import sys; sys.stderr.write('z' * {3 * STREAM_LIMIT}); sys.exit(4)"

        result = asyncio.run(asyncio.wait_for(ProcessRunner().run(python_spec(1, code)), 30))

        assert result.exit_code == 4


class TestTimeout:
    """The opt-in timeout kills the child and records a sentinel."""

    def test_timeout_kills_process(self, python_spec):
        result = run_spec(python_spec(1, "import time; time.sleep(30)"), timeout_seconds=0.3)

        assert result.exit_code == TIMEOUT_EXIT_CODE
        assert "Timed out" in result.error
        assert result.duration_ms < 10_000

    def test_fast_process_unaffected_by_timeout(self, python_spec):
        result = run_spec(python_spec(1, "pass"), timeout_seconds=30)

        assert result.exit_code == 0


class TestConcurrentRuns:
    """Waiting on one child does not block siblings."""

    def test_two_sleepers_overlap(self, python_spec):
        specs = [python_spec(i, "import time; time.sleep(1.0)", total=2) for i in (1, 2)]

        async def both():
            runner = ProcessRunner()
            return await asyncio.gather(*(runner.run(s) for s in specs))

        results, elapsed = asyncio.run(_timed(both))
        assert [r.id for r in results] == [1, 2]
        assert elapsed < 1.9


async def _timed(factory):
    loop = asyncio.get_running_loop()
    start = loop.time()
    value = await factory()
    return value, loop.time() - start


def _streamed(output, label):
    """Concatenate the payloads of every line streamed under label."""
    prefix = f"{label} | "
    return "".join(line[len(prefix):] for line in output.splitlines() if line.startswith(prefix))
