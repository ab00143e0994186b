# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Spawn the api-linter executable and collect its output."""

from __future__ import annotations

import asyncio
import shlex
from collections.abc import Sequence
from pathlib import Path

from ..constants import SUCCESS_EXIT_CODES, TIMEOUT_EXIT_CODE
from ..errors import ExecutableNotFoundError, ProcessExitError, SpawnError
from ..logging import get_logger

_LOGGER = get_logger(__name__)


async def run_linter(
    executable: Path,
    argv: Sequence[str],
    working_directory: Path,
    *,
    timeout: float | None = None,
) -> str:
    """Run ``executable`` with ``argv`` and return its decoded stdout.

    Exit codes 0 (clean) and 1 (findings) are successful; the child is never
    started through a shell.

    Args:
        executable: Linter binary.
        argv: Arguments, typically from :func:`build_arguments`.
        working_directory: Directory the process runs in.
        timeout: Seconds before the process is killed; ``None`` waits forever.

    Returns:
        str: Complete stdout.

    Raises:
        ExecutableNotFoundError: If the binary is missing or not runnable.
        SpawnError: For any other OS-level spawn failure.
        ProcessExitError: For any other exit status, including a timeout
            (reported as exit code 124).
    """

    _LOGGER.info("Running: %s %s", executable, shlex.join(argv))
    _LOGGER.debug("Working directory: %s", working_directory)
    try:
        process = await asyncio.create_subprocess_exec(
            str(executable),
            *argv,
            cwd=working_directory,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError, NotADirectoryError) as exc:
        raise ExecutableNotFoundError(executable) from exc
    except OSError as exc:
        raise SpawnError(f"Failed to start {executable}: {exc}", executable=executable) from exc

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError as exc:
        process.kill()
        await process.wait()
        raise ProcessExitError(executable, TIMEOUT_EXIT_CODE, f"timed out after {timeout}s") from exc

    stdout = stdout_bytes.decode("utf-8", errors="replace")
    stderr = stderr_bytes.decode("utf-8", errors="replace")
    code = process.returncode if process.returncode is not None else -1
    if stderr.strip():
        _LOGGER.debug("stderr: %s", stderr.strip())
    if code not in SUCCESS_EXIT_CODES:
        _LOGGER.warning("api-linter exited with code %s; stdout: %s", code, stdout.strip())
        raise ProcessExitError(executable, code, stderr or None)
    return stdout


__all__ = ["run_linter"]
