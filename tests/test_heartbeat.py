"""Tests for the periodic progress heartbeat."""

import asyncio
import time

import pytest

from evalgrid.models.scenario import Bounded, Unbounded
from evalgrid.orchestration.heartbeat import StatusHeartbeat, create_status_heartbeat


class TestStatusLine:
    """Line format: completed/total, elapsed, concurrency."""

    def test_bounded_line(self, abcd_matrix):
        heartbeat = StatusHeartbeat(abcd_matrix, {1, 3}, Bounded(2), start_time=time.monotonic() - 5)

        line = heartbeat.status_line()

        assert line.startswith("2/4 scenarios done (")
        assert "5." in line
        assert line.endswith("[concurrency=2]")

    def test_unbounded_line(self, abcd_matrix):
        heartbeat = StatusHeartbeat(abcd_matrix, set(), Unbounded())

        assert heartbeat.status_line().endswith("[concurrency=unbounded]")

    def test_reads_completion_set_by_reference(self, abcd_matrix, capsys):
        completed = set()
        heartbeat = StatusHeartbeat(abcd_matrix, completed, Bounded(2))

        heartbeat.tick()
        completed.add(2)
        heartbeat.tick()

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("0/4 ")
        assert lines[1].startswith("1/4 ")

    def test_rejects_non_positive_interval(self, abcd_matrix):
        with pytest.raises(ValueError):
            StatusHeartbeat(abcd_matrix, set(), Unbounded(), interval_seconds=0)


class TestTicking:
    """Periodic output on the event loop, and a clean stop."""

    def test_count_changes_between_ticks(self, abcd_matrix, capsys):
        async def scenario():
            completed = set()
            heartbeat = create_status_heartbeat(abcd_matrix, completed, Bounded(2), interval_seconds=0.2)
            await asyncio.sleep(0.3)  # first tick at 0.2
            completed.add(1)
            await asyncio.sleep(0.2)  # second tick at 0.4
            heartbeat.stop()

        asyncio.run(scenario())

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("0/4 ")
        assert lines[1].startswith("1/4 ")

    def test_stop_before_first_tick(self, abcd_matrix, capsys):
        async def scenario():
            heartbeat = create_status_heartbeat(abcd_matrix, set(), Unbounded(), interval_seconds=0.05)
            heartbeat.stop()
            await asyncio.sleep(0.15)
            return heartbeat

        heartbeat = asyncio.run(scenario())

        assert capsys.readouterr().out == ""
        assert not heartbeat.running

    def test_no_output_after_stop(self, abcd_matrix, capsys):
        async def scenario():
            heartbeat = create_status_heartbeat(abcd_matrix, set(), Unbounded(), interval_seconds=0.1)
            await asyncio.sleep(0.15)
            heartbeat.stop()
            seen = capsys.readouterr().out
            await asyncio.sleep(0.15)
            heartbeat.tick()
            return seen

        seen = asyncio.run(scenario())

        assert seen.count("scenarios done") == 1
        assert capsys.readouterr().out == ""

    def test_stop_is_idempotent(self, abcd_matrix):
        async def scenario():
            heartbeat = create_status_heartbeat(abcd_matrix, set(), Unbounded())
            heartbeat.stop()
            heartbeat.stop()
            return heartbeat

        assert not asyncio.run(scenario()).running

    def test_start_without_event_loop_fails(self, abcd_matrix):
        with pytest.raises(RuntimeError):
            StatusHeartbeat(abcd_matrix, set(), Unbounded()).start()
