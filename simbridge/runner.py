"""runner.py - Spawn external tools with structured argument lists."""

import os
import subprocess
import sys

from simbridge.errors import CommandError


def _log(msg: str) -> None:
    print(f"[run] {msg}", file=sys.stderr)


def run_command(
    cmd: list[str],
    timeout: float | None = None,
    input_text: str | None = None,
) -> str:
    """Run cmd without a shell and return its stripped stdout.

    Raises CommandError when the process exits non-zero without writing
    anything to stdout; the message is the tool's stderr verbatim.
    """
    _log(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            input=input_text,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise CommandError(f"executable not found: {cmd[0]}", cmd=cmd) from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandError(
            f"{os.path.basename(cmd[0])} timed out after {timeout}s", cmd=cmd
        ) from exc

    stdout = (result.stdout or "").strip()
    stderr = (result.stderr or "").strip()

    if result.returncode != 0:
        _log(f"exit {result.returncode} stderr: {stderr}")
        if not stdout:
            message = stderr or f"{os.path.basename(cmd[0])} exited with status {result.returncode}"
            raise CommandError(message, cmd=cmd, returncode=result.returncode, stderr=stderr)

    return stdout
