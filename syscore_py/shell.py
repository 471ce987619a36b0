"""
PowerShell integration for Syscore.

Wraps every call to the external scripting host with an explicit timeout.
"""

import logging
import shlex
import subprocess
from typing import List, Tuple

from syscore_py.sources import ScriptFailure

logger = logging.getLogger("syscore.shell")

DEFAULT_TIMEOUT = 30.0


def ps_quote(value: str) -> str:
    """Quote *value* as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


def run_powershell(
    script: str,
    powershell: str = "powershell",
    timeout: float = DEFAULT_TIMEOUT,
) -> Tuple[int, str, str]:
    """
    Run a PowerShell command.

    Args:
        script: Command text passed to ``-Command``
        powershell: PowerShell executable
        timeout: Seconds before the process is killed

    Returns:
        Tuple of (return_code, stdout, stderr)

    Raises:
        ScriptFailure: If PowerShell is missing or the call times out.
    """
    cmd: List[str] = [
        powershell,
        "-NoProfile",
        "-NonInteractive",
        "-ExecutionPolicy",
        "Bypass",
        "-Command",
        script,
    ]
    logger.debug(f"Running command: {' '.join(shlex.quote(a) for a in cmd[:-1])} <script>")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ScriptFailure(f"`{powershell}` command not found") from e
    except subprocess.TimeoutExpired as e:
        raise ScriptFailure(f"PowerShell call timed out after {timeout}s") from e
    return result.returncode, result.stdout or "", result.stderr or ""

