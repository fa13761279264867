"""Keep the display awake while a routine is running.

The lock is a helper process that holds an OS idle-sleep inhibitor for as
long as it lives: ``caffeinate`` on macOS, ``systemd-inhibit`` on Linux.
Any failure means "no lock"; timing never depends on it.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys

from loguru import logger


def default_command(platform: str = sys.platform) -> list[str] | None:
    """The inhibitor command for *platform*, or None if there isn't one."""
    if platform == "darwin":
        # -d: prevent display sleep; -w: exit with us if we crash
        return ["caffeinate", "-d", "-w", str(os.getpid())]
    if platform.startswith("linux"):
        return [
            "systemd-inhibit",
            "--what=idle",
            "--who=Cronos",
            "--why=Routine running",
            "--mode=block",
            "sleep", "infinity",
        ]
    return None


class ProcessWakeLock:
    """Wake-lock port backed by an inhibitor subprocess."""

    def __init__(self, command: list[str] | None = None) -> None:
        self._command = command if command is not None else default_command()

    @property
    def available(self) -> bool:
        return bool(self._command) and shutil.which(self._command[0]) is not None

    def acquire(self) -> subprocess.Popen | None:
        if not self.available:
            logger.debug("No wake-lock helper on this platform")
            return None
        try:
            proc = subprocess.Popen(
                self._command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            logger.warning("Could not start {}: {}", self._command[0], exc)
            return None
        logger.debug("Wake lock acquired (pid {})", proc.pid)
        return proc

    def release(self, handle: subprocess.Popen) -> None:
        if handle.poll() is not None:
            return
        handle.terminate()
        try:
            handle.wait(timeout=2)
        except subprocess.TimeoutExpired:
            handle.kill()
            handle.wait()
        logger.debug("Wake lock released (pid {})", handle.pid)
