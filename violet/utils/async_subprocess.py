"""Async shell command execution.

Runs command lines through the platform shell without blocking the event
loop, so ``exec`` actions and parallel branches interleave cooperatively.

Example:
    >>> from violet.utils.async_subprocess import run_shell_command
    >>> stdout, stderr, code = await run_shell_command("echo hi", check=False)
    >>> stdout
    'hi\\n'
"""

import asyncio
import subprocess
from collections.abc import Awaitable
from pathlib import Path
from typing import Protocol


class ShellRunner(Protocol):
    """Callable that runs one shell command line.

    Implementations return ``(stdout, stderr, returncode)`` and only raise
    for launch failures or timeouts when called with ``check=False``.
    """

    def __call__(
        self,
        command: str,
        *,
        cwd: Path | str | None = None,
        check: bool = True,
        timeout: float | None = None,
    ) -> Awaitable[tuple[str, str, int]]: ...


async def run_shell_command(
    command: str,
    *,
    cwd: Path | str | None = None,
    check: bool = True,
    timeout: float | None = None,
) -> tuple[str, str, int]:
    """Run a shell command asynchronously.

    Args:
        command: Complete shell command string to execute. This is passed
            to /bin/sh -c on Unix or cmd.exe on Windows.
        cwd: Working directory for command execution. If None, uses the
            current working directory.
        check: If True (default), raise CalledProcessError on non-zero
            exit code. If False, return exit code without raising.
        timeout: Maximum seconds to wait. Process is killed if exceeded.
            None means wait indefinitely.

    Returns:
        Tuple of (stdout, stderr, return_code) where stdout and stderr are
        decoded UTF-8 strings, and return_code is the process exit code.

    Raises:
        subprocess.CalledProcessError: If check=True and command returns
            non-zero exit code.
        TimeoutError: If timeout is exceeded.
        asyncio.CancelledError: If the awaiting task is cancelled; the
            process is killed first.
        OSError: If the shell itself cannot be started.

    Warning:
        The command line is subject to shell parsing. Callers are
        responsible for quoting arguments that contain spaces.
    """
    process = await asyncio.create_subprocess_shell(
        command,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(),
            timeout=timeout,
        )
    except (TimeoutError, asyncio.CancelledError):
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise

    stdout = (stdout_bytes or b"").decode("utf-8", errors="replace")
    stderr = (stderr_bytes or b"").decode("utf-8", errors="replace")

    if check and process.returncode != 0:
        raise subprocess.CalledProcessError(
            process.returncode,
            command,
            stdout,
            stderr,
        )

    return stdout, stderr, process.returncode or 0
