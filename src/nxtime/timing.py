"""Timing capture for a single command execution.

Measures wall-clock time, user CPU time and system CPU time for exactly
one child process.  The child is created with ``os.fork`` and replaced
with the program found on ``PATH`` as execvp(3) would.  The parent
waits with ``os.wait4`` so the CPU times come from the resource usage
of that exact child, accumulated by the kernel at reap time.
"""

from __future__ import annotations

import errno
import logging
import os
import sys
import time
from dataclasses import dataclass
from typing import Sequence

log = logging.getLogger("nxtime")

# Exit codes the child uses when exec fails, as a POSIX shell does.
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126

# Interpreter for executable files that lack a "#!" line.
_SHELL = "/bin/sh"


class SpawnError(OSError):
    """The process-creation primitive itself failed (e.g. EAGAIN)."""


# ---------------------------------------------------------------------------
# Sample / RunOutcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Sample:
    """Timing of one execution, in seconds."""

    real_time: float
    user_time: float
    sys_time: float

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.real_time, self.user_time, self.sys_time)


@dataclass(frozen=True)
class RunOutcome:
    """How a child terminated.

    Exactly one of ``exit_code`` and ``signal`` is set.
    """

    exit_code: int | None = None
    signal: int | None = None

    @property
    def abnormal(self) -> bool:
        """True if the child was terminated by a signal."""
        return self.exit_code is None

    @classmethod
    def from_wait_status(cls, status: int) -> RunOutcome:
        """Decode a raw status as returned by ``os.wait4``."""
        if os.WIFEXITED(status):
            return cls(exit_code=os.WEXITSTATUS(status))
        if os.WIFSIGNALED(status):
            return cls(signal=os.WTERMSIG(status))
        # Stopped/continued statuses are not reported without WUNTRACED.
        return cls(signal=0)


@dataclass(frozen=True)
class TimedRun:
    """Result of a timed execution: the sample plus how the child ended."""

    sample: Sample
    outcome: RunOutcome

    @property
    def exit_code(self) -> int | None:
        return self.outcome.exit_code


# ---------------------------------------------------------------------------
# Core timing implementation
# ---------------------------------------------------------------------------


def run_timed(command: Sequence[str]) -> TimedRun:
    """Execute *command* once and capture its timing.

    The child inherits stdin, stdout and stderr.  The call blocks until
    the child terminates; there is no timeout.

    Args:
        command: Program name followed by its arguments.  The program is
            looked up on ``PATH`` like a shell would.

    Returns:
        TimedRun with the timing sample and termination descriptor.

    Raises:
        SpawnError: If the child process could not be created.
    """
    argv = list(command)
    if not argv:
        raise ValueError("command must not be empty")

    # Anything still buffered would otherwise be written by both processes.
    sys.stdout.flush()
    sys.stderr.flush()

    wall_start = time.perf_counter()
    try:
        pid = os.fork()
    except OSError as exc:
        raise SpawnError(exc.errno, f"cannot create process: {exc.strerror}") from exc

    if pid == 0:
        _exec_child(argv)

    _, status, rusage = os.wait4(pid, 0)
    wall_time = time.perf_counter() - wall_start

    outcome = RunOutcome.from_wait_status(status)
    log.debug("pid %d finished: %s", pid, outcome)

    sample = Sample(
        real_time=max(wall_time, 0.0),
        user_time=max(rusage.ru_utime, 0.0),
        sys_time=max(rusage.ru_stime, 0.0),
    )
    return TimedRun(sample=sample, outcome=outcome)


def _exec_child(argv: list[str]) -> None:
    """Replace the forked child with *argv*; never returns."""
    code = EXIT_NOT_EXECUTABLE
    try:
        _execvp(argv)
    except OSError as exc:
        code = exec_failure_exit_code(exc)
        try:
            os.write(2, f"{argv[0]}: {exc.strerror}\n".encode(errors="replace"))
        except OSError:
            pass
    finally:
        os._exit(code)


def _execvp(argv: list[str]) -> None:
    """Search ``PATH`` and exec like execvp(3).

    A name containing a slash is executed as is.  A candidate failing
    with ENOENT, ENOTDIR or EACCES moves the search on; any other error
    stops it.  EACCES is reported if it was seen and nothing succeeded.
    """
    name = argv[0]
    not_found = FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), name)
    if not name:
        raise not_found
    if "/" in name:
        candidates = [name]
    else:
        candidates = [os.path.join(d, name) for d in os.get_exec_path()]

    denied: OSError | None = None
    for path in candidates:
        try:
            _exec_path(path, argv)
        except OSError as exc:
            if exc.errno == errno.EACCES:
                denied = denied or exc
            elif exc.errno not in (errno.ENOENT, errno.ENOTDIR):
                raise
    raise denied or not_found


def _exec_path(path: str, argv: list[str]) -> None:
    """Exec *path*; a file without a ``#!`` line is run by ``/bin/sh``."""
    try:
        os.execv(path, argv)
    except OSError as exc:
        if exc.errno != errno.ENOEXEC:
            raise
        try:
            os.execv(_SHELL, [_SHELL, path, *argv[1:]])
        except OSError:
            raise exc from None


def exec_failure_exit_code(exc: OSError) -> int:
    """Map an exec failure to the shell's convention: 127 or 126."""
    if exc.errno == errno.ENOENT:
        return EXIT_NOT_FOUND
    return EXIT_NOT_EXECUTABLE
