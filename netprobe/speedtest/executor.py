"""Shell command execution used by every external probe."""

from __future__ import annotations

import logging
import subprocess
from typing import Optional, Protocol

LOGGER = logging.getLogger(__name__)


class Executor(Protocol):
    def run(self, command: str, timeout: Optional[float] = None) -> str:
        ...


class CommandExecutor:
    """Runs shell commands and returns trimmed stdout.

    Any failure (non-zero exit, timeout, missing binary) yields an empty
    string so call sites only ever deal with "data" or "no data".
    """

    def __init__(self, default_timeout: float = 30):
        self.default_timeout = default_timeout

    def run(self, command: str, timeout: Optional[float] = None) -> str:
        limit = timeout if timeout is not None else self.default_timeout
        try:
            completed = subprocess.run(
                ["sh", "-c", command],
                capture_output=True,
                text=True,
                timeout=limit,
                check=False,
            )
        except subprocess.TimeoutExpired:
            LOGGER.debug("Command timed out after %ss: %s", limit, command)
            return ""
        except OSError as exc:
            LOGGER.debug("Command could not be started (%s): %s", exc, command)
            return ""

        if completed.returncode != 0:
            LOGGER.debug("Command exited %s: %s", completed.returncode, command)
            return ""
        return (completed.stdout or "").strip()
