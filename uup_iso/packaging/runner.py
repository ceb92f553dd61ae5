"""Runner for the vendor conversion script.

This module handles:
- Composing the platform-specific conversion script command
- Executing it with subprocess, teeing output to a log file
- Condensing the script's chatty output for the console log
- Enforcing the conversion timeout
"""

from __future__ import annotations

import logging
import os
import re
import shlex
import signal
import subprocess
import sys
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from uup_iso.errors import ConversionError

logger = logging.getLogger(__name__)

WINDOWS_SCRIPT = "uup_download_windows.cmd"
LINUX_SCRIPT = "uup_download_linux.sh"

PROGRESS_PATTERN = re.compile(r"\((\d{1,3}(?:\.\d+)?)%\)|\b(\d{1,3}(?:\.\d+)?)%")


def _popen_group_kwargs() -> dict[str, object]:
    """Start the script as the leader of its own process group."""
    if sys.platform.startswith("win"):
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def kill_process_tree(process: subprocess.Popen) -> None:
    """Kill the script together with every process it started.

    The vendor script's children (aria2c, the converter) hold its output
    pipe open and must go down with it.
    """
    if sys.platform.startswith("win"):
        subprocess.run(
            ["taskkill", "/F", "/T", "/PID", str(process.pid)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
        process.kill()
        return
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


@dataclass
class ConversionResult:
    """Result of a conversion script run.

    Attributes:
        success: Whether the script exited with code 0.
        exit_code: Process exit code.
        log_path: Path to the full script log.
        started_at: Start time.
        finished_at: Finish time.
        command: The command that was executed.
        error_message: Error message if the script failed.
    """

    success: bool
    exit_code: int
    log_path: Path
    started_at: datetime
    finished_at: datetime
    command: str
    error_message: str | None = None


class ConversionLogFilter:
    """Condenses conversion script output before it reaches the logger.

    Identical consecutive lines are dropped, and lines reporting a download
    percentage are only passed on when the percentage enters a new bucket.
    One instance is created per script run.
    """

    def __init__(self, bucket_size: int = 10) -> None:
        self.bucket_size = bucket_size
        self._last_line: str | None = None
        self._last_bucket: int | None = None

    def feed(self, line: str) -> str | None:
        """Return the line if it should be logged, else None."""
        line = line.rstrip()
        if not line or line == self._last_line:
            return None
        self._last_line = line

        match = PROGRESS_PATTERN.search(line)
        if match is None:
            self._last_bucket = None
            return line

        percent = float(match.group(1) or match.group(2))
        bucket = int(percent) // self.bucket_size
        if bucket == self._last_bucket:
            return None
        self._last_bucket = bucket
        return line


def compose_conversion_command(root: Path, platform: str | None = None) -> list[str]:
    """Compose the command that starts the conversion script.

    Args:
        root: Extracted package directory.
        platform: Platform name (defaults to sys.platform).

    Returns:
        Command as list of strings suitable for subprocess.

    Raises:
        ConversionError: If the package does not contain the script.
    """
    platform = platform or sys.platform
    if platform.startswith("win"):
        script = WINDOWS_SCRIPT
        cmd = ["cmd.exe", "/c", script]
    else:
        script = LINUX_SCRIPT
        cmd = ["bash", script]

    if not (root / script).is_file():
        raise ConversionError(
            f"Conversion script {script} not found in {root}",
            code="script_not_found",
        )
    return cmd


def run_conversion(
    root: Path,
    log_path: Path,
    timeout: int | None = None,
    log_filter: ConversionLogFilter | None = None,
    platform: str | None = None,
) -> ConversionResult:
    """Execute the conversion script in an extracted package.

    Args:
        root: Extracted package directory (working directory).
        log_path: File receiving the full script output.
        timeout: Timeout in seconds (None = no timeout).
        log_filter: Filter condensing output for the console log.
        platform: Platform name (defaults to sys.platform).

    Returns:
        ConversionResult with execution details.

    Raises:
        ConversionError: If the script cannot be started or times out.
    """
    cmd = compose_conversion_command(root, platform)
    log_filter = log_filter or ConversionLogFilter()
    cmd_str = shlex.join(cmd)

    logger.info("Executing conversion: %s", cmd_str)
    logger.info("Working directory: %s", root)

    log_path.parent.mkdir(parents=True, exist_ok=True)
    started_at = datetime.now(timezone.utc)
    error_message: str | None = None
    timed_out = threading.Event()

    try:
        with log_path.open("w", encoding="utf-8") as log_file:
            log_file.write(f"# Command: {cmd_str}\n")
            log_file.write(f"# Started: {started_at.isoformat()}\n")
            log_file.write(f"# CWD: {root}\n")
            log_file.write("# " + "=" * 70 + "\n\n")
            log_file.flush()

            with subprocess.Popen(
                cmd,
                cwd=root,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                **_popen_group_kwargs(),  # type: ignore[call-overload]
            ) as process:

                def _kill() -> None:
                    timed_out.set()
                    kill_process_tree(process)

                timer = threading.Timer(timeout, _kill) if timeout else None
                if timer is not None:
                    timer.start()
                try:
                    assert process.stdout is not None
                    for line in process.stdout:
                        log_file.write(line)
                        shown = log_filter.feed(line)
                        if shown is not None:
                            logger.info("%s", shown)
                    exit_code = process.wait()
                except BaseException:
                    logger.error("Stopping conversion script after an error")
                    kill_process_tree(process)
                    process.wait()
                    raise
                finally:
                    if timer is not None:
                        timer.cancel()

    except OSError as e:
        error_message = f"Failed to execute conversion: {e}"
        logger.error(error_message)
        raise ConversionError(error_message, code="execution_error") from e

    if timed_out.is_set():
        error_message = f"Conversion timed out after {timeout} seconds"
        logger.error("%s. See log: %s", error_message, log_path)
        with log_path.open("a", encoding="utf-8") as log_file:
            log_file.write(f"\n# TIMEOUT after {timeout} seconds\n")
        raise ConversionError(error_message, exit_code=-1, code="conversion_timeout")

    success = exit_code == 0
    if not success:
        error_message = f"Conversion failed with exit code {exit_code}"
        logger.error("%s. See log: %s", error_message, log_path)

    finished_at = datetime.now(timezone.utc)

    with log_path.open("a", encoding="utf-8") as log_file:
        log_file.write(f"\n# Finished: {finished_at.isoformat()}\n")
        log_file.write(f"# Exit code: {exit_code}\n")
        duration = (finished_at - started_at).total_seconds()
        log_file.write(f"# Duration: {duration:.1f}s\n")

    return ConversionResult(
        success=success,
        exit_code=exit_code,
        log_path=log_path,
        started_at=started_at,
        finished_at=finished_at,
        command=cmd_str,
        error_message=error_message,
    )


__all__ = [
    "LINUX_SCRIPT",
    "WINDOWS_SCRIPT",
    "ConversionLogFilter",
    "ConversionResult",
    "compose_conversion_command",
    "kill_process_tree",
    "run_conversion",
]
