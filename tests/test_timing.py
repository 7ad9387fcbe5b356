"""Tests for nxtime.timing — timing capture for a single execution."""

from __future__ import annotations

import errno
import os
import signal
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from nxtime.timing import (
    EXIT_NOT_EXECUTABLE,
    EXIT_NOT_FOUND,
    RunOutcome,
    Sample,
    SpawnError,
    TimedRun,
    exec_failure_exit_code,
    run_timed,
)


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class TestSample(unittest.TestCase):
    """Tests for the Sample dataclass."""

    def test_as_tuple_order(self) -> None:
        self.assertEqual(Sample(1.0, 2.0, 3.0).as_tuple(), (1.0, 2.0, 3.0))

    def test_immutable(self) -> None:
        s = Sample(1.0, 2.0, 3.0)
        with self.assertRaises(AttributeError):
            s.real_time = 5.0  # type: ignore[misc]


class TestRunOutcome(unittest.TestCase):
    """Tests for RunOutcome decoding."""

    def test_normal_exit(self) -> None:
        outcome = RunOutcome.from_wait_status(3 << 8)
        self.assertEqual(outcome.exit_code, 3)
        self.assertIsNone(outcome.signal)
        self.assertFalse(outcome.abnormal)

    def test_signaled(self) -> None:
        outcome = RunOutcome.from_wait_status(signal.SIGKILL)
        self.assertIsNone(outcome.exit_code)
        self.assertEqual(outcome.signal, signal.SIGKILL)
        self.assertTrue(outcome.abnormal)

    def test_timed_run_exit_code(self) -> None:
        run = TimedRun(Sample(0.0, 0.0, 0.0), RunOutcome(exit_code=7))
        self.assertEqual(run.exit_code, 7)


class TestExecFailureExitCode(unittest.TestCase):
    """Tests for the exec failure to exit code mapping."""

    def test_not_found(self) -> None:
        exc = FileNotFoundError(errno.ENOENT, "No such file or directory")
        self.assertEqual(exec_failure_exit_code(exc), 127)

    def test_permission_denied(self) -> None:
        exc = PermissionError(errno.EACCES, "Permission denied")
        self.assertEqual(exec_failure_exit_code(exc), 126)

    def test_other_errors(self) -> None:
        exc = OSError(errno.ENOEXEC, "Exec format error")
        self.assertEqual(exec_failure_exit_code(exc), 126)


# ---------------------------------------------------------------------------
# run_timed tests (real child processes)
# ---------------------------------------------------------------------------


class TestRunTimed(unittest.TestCase):
    """Tests for run_timed()."""

    def test_simple_command(self) -> None:
        result = run_timed([sys.executable, "-c", "pass"])
        self.assertEqual(result.exit_code, 0)
        self.assertFalse(result.outcome.abnormal)
        self.assertGreater(result.sample.real_time, 0)
        self.assertGreaterEqual(result.sample.user_time, 0)
        self.assertGreaterEqual(result.sample.sys_time, 0)

    def test_captures_exit_code(self) -> None:
        result = run_timed([sys.executable, "-c", "import sys; sys.exit(42)"])
        self.assertEqual(result.exit_code, 42)

    def test_captures_wall_time(self) -> None:
        result = run_timed([sys.executable, "-c", "import time; time.sleep(0.3)"])
        self.assertGreater(result.sample.real_time, 0.25)
        self.assertLess(result.sample.real_time, 5.0)

    def test_captures_cpu_time(self) -> None:
        """A CPU-bound child should register user CPU time."""
        result = run_timed([sys.executable, "-c", "sum(range(10**7))"])
        self.assertEqual(result.exit_code, 0)
        self.assertGreater(result.sample.user_time, 0)

    def test_cpu_time_scoped_to_child(self) -> None:
        """A sleeping child accumulates almost no CPU time."""
        run_timed([sys.executable, "-c", "sum(range(10**7))"])
        result = run_timed([sys.executable, "-c", "import time; time.sleep(0.2)"])
        self.assertLess(result.sample.user_time, result.sample.real_time)

    def test_command_not_found(self) -> None:
        result = run_timed(["nxtime-no-such-command-xyz"])
        self.assertEqual(result.exit_code, EXIT_NOT_FOUND)
        self.assertFalse(result.outcome.abnormal)

    def test_command_not_executable(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            script = Path(tmpdir) / "script.sh"
            script.write_text("#!/bin/sh\nexit 0\n")
            os.chmod(script, 0o644)
            result = run_timed([str(script)])
        self.assertEqual(result.exit_code, EXIT_NOT_EXECUTABLE)

    def test_script_without_shebang_runs_under_sh(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            script = Path(tmpdir) / "plain-script"
            script.write_text("exit 3\n")
            os.chmod(script, 0o755)
            result = run_timed([str(script)])
        self.assertEqual(result.exit_code, 3)

    def test_script_without_shebang_found_on_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            script = Path(tmpdir) / "nxtime-plain-script"
            script.write_text('exit "$1"\n')
            os.chmod(script, 0o755)
            path = tmpdir + os.pathsep + os.environ.get("PATH", "")
            with patch.dict(os.environ, {"PATH": path}):
                result = run_timed(["nxtime-plain-script", "5"])
        self.assertEqual(result.exit_code, 5)

    def test_empty_command_name_not_found(self) -> None:
        result = run_timed([""])
        self.assertEqual(result.exit_code, EXIT_NOT_FOUND)

    def test_signaled_child(self) -> None:
        result = run_timed(
            [sys.executable, "-c", "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"]
        )
        self.assertTrue(result.outcome.abnormal)
        self.assertIsNone(result.exit_code)
        self.assertEqual(result.outcome.signal, signal.SIGTERM)
        self.assertGreaterEqual(result.sample.real_time, 0)

    def test_empty_command(self) -> None:
        with self.assertRaises(ValueError):
            run_timed([])

    def test_fork_failure_raises_spawn_error(self) -> None:
        with patch(
            "nxtime.timing.os.fork",
            side_effect=BlockingIOError(errno.EAGAIN, "Resource temporarily unavailable"),
        ):
            with self.assertRaises(SpawnError) as ctx:
                run_timed(["true"])
        self.assertEqual(ctx.exception.errno, errno.EAGAIN)
        self.assertIsInstance(ctx.exception, OSError)


if __name__ == "__main__":
    unittest.main()
