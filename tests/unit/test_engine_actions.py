"""Tests for violet.engine.actions."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from structlog.testing import capture_logs

from violet.config.settings import VioletSettings
from violet.engine.actions import Command, Log, Parallel, Sequential, TaskRun, invoke
from violet.engine.context import ContextSlot
from violet.engine.log_gate import LogGate
from violet.enums import Severity, StderrPolicy
from violet.exceptions import CommandError


def make_run(settings: VioletSettings | None = None, shell: AsyncMock | None = None) -> TaskRun:
    return TaskRun(
        task_name="job",
        slot=ContextSlot(),
        gate=LogGate(),
        settings=settings or VioletSettings(),
        shell=shell or AsyncMock(return_value=("", "", 0)),
    )


def lines(logs):
    return [(e["log_level"], e["event"]) for e in logs if e["log_level"] != "debug"]


class TestInvoke:
    """Tests for invoke."""

    @pytest.mark.asyncio
    async def test_sync_function(self):
        """Test a plain function's result is returned."""
        assert await invoke(lambda ctx: {"n": ctx["n"] + 1}, {"n": 1}) == {"n": 2}

    @pytest.mark.asyncio
    async def test_async_function(self):
        """Test a coroutine function is awaited."""

        async def fn(ctx):
            await asyncio.sleep(0)
            return None

        assert await invoke(fn, {}) is None


class TestSequential:
    """Tests for the Sequential action."""

    @pytest.mark.asyncio
    async def test_receives_current_context(self):
        """Test the function sees the live context object."""
        run = make_run()
        seen = []

        await Sequential(seen.append).execute(run)

        assert seen == [run.slot.current]
        assert seen[0] is run.slot.current

    @pytest.mark.asyncio
    async def test_none_after_replacement_keeps_it(self):
        """Test a returned value replaces the context."""
        run = make_run()

        await Sequential(lambda ctx: {"x": 1}).execute(run)
        await Sequential(lambda ctx: None).execute(run)

        assert run.slot.current == {"x": 1}


class TestParallel:
    """Tests for the Parallel action."""

    @pytest.mark.asyncio
    async def test_branches_run_concurrently(self):
        """Test every branch starts before any finishes."""
        run = make_run()
        events: list[str] = []

        def branch(label: str):
            async def fn(ctx):
                events.append(f"{label}-start")
                await asyncio.sleep(0.01)
                events.append(f"{label}-end")

            return fn

        await Parallel((branch("a"), branch("b"), branch("c"))).execute(run)

        assert set(events[:3]) == {"a-start", "b-start", "c-start"}
        assert len(events) == 6

    @pytest.mark.asyncio
    async def test_last_assignment_wins_race(self):
        """Test racing replacements leave one of the branch values.

        Which branch assigns last is up to the scheduler, so only the set
        of possible outcomes is fixed.
        """
        run = make_run()

        async def slow(ctx):
            await asyncio.sleep(0.01)
            return {"n": 1}

        async def fast(ctx):
            return {"n": 2}

        await Parallel((slow, fast)).execute(run)

        assert run.slot.current["n"] in {1, 2}

    @pytest.mark.asyncio
    async def test_branches_share_starting_context(self):
        """Test every branch receives the context the group started with."""
        run = make_run()
        run.slot.current = start = {"start": True}
        seen = []

        def first(ctx):
            seen.append(ctx)
            return {"first": True}

        def second(ctx):
            seen.append(ctx)

        await Parallel((first, second)).execute(run)

        assert seen[0] is start
        assert seen[1] is start
        assert run.slot.current == {"first": True}

    @pytest.mark.asyncio
    async def test_branch_failure_propagates(self):
        """Test a failing branch fails the whole action."""
        run = make_run()

        async def bad(ctx):
            raise ValueError("branch failed")

        with pytest.raises(ValueError, match="branch failed"):
            await Parallel((bad, lambda ctx: None)).execute(run)


class TestCommand:
    """Tests for the Command action and its stderr policy."""

    def test_command_line_joins_with_spaces(self):
        """Test arguments are joined without extra quoting."""
        assert Command(("echo", "hello world", "x")).command_line == "echo hello world x"

    @pytest.mark.asyncio
    async def test_passes_settings_to_shell(self, tmp_path: Path):
        """Test cwd and timeout come from settings and check is disabled."""
        shell = AsyncMock(return_value=("", "", 0))
        run = make_run(VioletSettings(working_directory=tmp_path, command_timeout=5), shell)

        await Command(("echo", "hi")).execute(run)

        shell.assert_awaited_once_with("echo hi", cwd=tmp_path, check=False, timeout=5)

    @pytest.mark.asyncio
    async def test_stdout_logged(self):
        """Test captured stdout is logged at log severity."""
        run = make_run(shell=AsyncMock(return_value=("built\n", "", 0)))

        with capture_logs() as logs:
            await Command(("make",)).execute(run)

        assert lines(logs) == [("info", "built")]

    @pytest.mark.asyncio
    async def test_silent_success_logs_nothing(self):
        """Test a command with no output completes quietly."""
        run = make_run()

        with capture_logs() as logs:
            await Command(("true",)).execute(run)

        assert lines(logs) == []

    @pytest.mark.asyncio
    async def test_nonzero_exit_fails(self):
        """Test a non-zero exit raises CommandError and logs an error."""
        run = make_run(shell=AsyncMock(return_value=("", "no such target\n", 2)))

        with capture_logs() as logs:
            with pytest.raises(CommandError) as exc_info:
                await Command(("make", "nope")).execute(run)

        assert exc_info.value.returncode == 2
        assert exc_info.value.command == "make nope"
        assert exc_info.value.stderr == "no such target\n"
        assert lines(logs) == [
            ("error", "Command failed with exit code 2: make nope"),
            ("warning", "no such target"),
        ]

    @pytest.mark.asyncio
    async def test_stderr_fails_under_fail_policy(self):
        """Test any stderr output fails the command under the fail policy."""
        shell = AsyncMock(return_value=("out\n", "deprecated flag\n", 0))
        run = make_run(VioletSettings(stderr_policy=StderrPolicy.FAIL), shell)

        with capture_logs() as logs:
            with pytest.raises(CommandError) as exc_info:
                await Command(("tool",)).execute(run)

        assert exc_info.value.returncode == 0
        assert lines(logs) == [("info", "out"), ("warning", "deprecated flag")]

    @pytest.mark.asyncio
    async def test_stderr_logged_under_log_policy(self):
        """Test stderr is only a warning under the log policy."""
        shell = AsyncMock(return_value=("", "deprecated flag\n", 0))
        run = make_run(VioletSettings(stderr_policy="log"), shell)

        with capture_logs() as logs:
            await Command(("tool",)).execute(run)

        assert lines(logs) == [("warning", "deprecated flag")]

    @pytest.mark.asyncio
    async def test_launch_error_fails(self):
        """Test an OSError from the shell becomes a CommandError."""
        run = make_run(shell=AsyncMock(side_effect=PermissionError("denied")))

        with capture_logs() as logs:
            with pytest.raises(CommandError) as exc_info:
                await Command(("tool",)).execute(run)

        assert exc_info.value.returncode is None
        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert lines(logs)[0][0] == "error"

    @pytest.mark.asyncio
    async def test_timeout_fails(self):
        """Test a timed out command becomes a CommandError."""
        shell = AsyncMock(side_effect=TimeoutError())
        run = make_run(VioletSettings(command_timeout=0.5), shell)

        with pytest.raises(CommandError, match="timed out after 0.5s"):
            await Command(("sleep", "10")).execute(run)

    @pytest.mark.asyncio
    async def test_real_shell(self):
        """Test the default adapter runs through the platform shell."""
        run = TaskRun(task_name="job", slot=ContextSlot(), gate=LogGate(), settings=VioletSettings())

        with capture_logs() as logs:
            await Command(("echo", "hi", "|", "tr", "a-z", "A-Z")).execute(run)

        assert lines(logs) == [("info", "HI")]


class TestLog:
    """Tests for the Log action."""

    @pytest.mark.asyncio
    async def test_values_joined_with_spaces(self):
        """Test values are rendered with str and joined by spaces."""
        run = make_run()

        with capture_logs() as logs:
            await Log(Severity.WARN, ("disk", 93, "%")).execute(run)

        assert logs == [{"task": "job", "event": "disk 93 %", "log_level": "warning"}]

    @pytest.mark.asyncio
    async def test_does_not_touch_context(self):
        """Test a log action leaves the context as it was."""
        run = make_run()
        before = run.slot.current

        await Log(Severity.LOG, ("x",)).execute(run)

        assert run.slot.current is before
