#!/usr/bin/env python3
"""Environment checks for ios-sim-mcp.

A *read-only* diagnostic covering:
1) the external tools each backend shells out to (idb, xcrun, sips, cliclick, osascript)
2) macOS UI scripting permission (Accessibility/Automation), needed by the desktop backend
"""

from __future__ import annotations

import json
import os
import shutil
import subprocess
import sys

from simbridge.config import BridgeConfig, load_config, load_env_files

# Tools every backend needs, and the extras each backend adds.
_COMMON_TOOLS = ("sips",)
_BACKEND_TOOLS = {
    "idb": ("idb",),
    "desktop": ("xcrun", "idb", "cliclick", "osascript", "pbcopy"),
}


def _run(cmd: list[str], timeout: int = 10) -> dict:
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        return {
            "ok": proc.returncode == 0,
            "returncode": proc.returncode,
            "stdout": (proc.stdout or "").strip(),
            "stderr": (proc.stderr or "").strip(),
        }
    except (OSError, subprocess.TimeoutExpired) as exc:
        return {"ok": False, "error": str(exc), "returncode": -1, "stdout": "", "stderr": ""}


def _resolve(executable: str) -> str:
    if os.path.sep in executable:
        return executable if os.access(executable, os.X_OK) else ""
    return shutil.which(executable) or ""


def _check_tool(executable: str) -> dict:
    path = _resolve(executable)
    return {"ok": bool(path), "configured": executable, "path": path}


def _check_osascript_permissions() -> dict:
    # Non-destructive: asks System Events for a boolean setting.
    return _run(["osascript", "-e", 'tell application "System Events" to get UI elements enabled'])


def collect_checks(config: BridgeConfig) -> dict:
    executables = {
        "idb": config.idb_path,
        "cliclick": config.cliclick_path,
        "xcrun": "xcrun",
        "sips": "sips",
        "osascript": "osascript",
        "pbcopy": "pbcopy",
    }
    tools = {name: _check_tool(path) for name, path in executables.items()}

    checks: dict = {
        "python": {"executable": sys.executable, "version": sys.version.split()[0]},
        "backend": config.backend,
        "title_bar_height": config.title_bar_height,
        "timeout": config.timeout,
        "tools": tools,
    }

    problems: list[str] = []
    required = _COMMON_TOOLS + _BACKEND_TOOLS.get(config.backend, ())
    for name in required:
        if not tools[name]["ok"]:
            problems.append(f"{name} not found ({executables[name]})")

    if config.backend == "desktop":
        ui_scripting = _check_osascript_permissions() if tools["osascript"]["ok"] else {"ok": False}
        checks["macos_automation"] = {
            "osascript_system_events": ui_scripting,
            "note": "If this fails, enable Accessibility + Automation permissions for the app running the server.",
        }
        if not ui_scripting.get("ok"):
            problems.append("macOS UI scripting permissions likely missing (Accessibility/Automation)")

    checks["problems"] = problems
    checks["ok"] = not problems
    return checks


def main() -> int:
    load_env_files()
    payload = collect_checks(load_config())
    print(json.dumps(payload, indent=2))
    return 0 if payload.get("ok") else 1


if __name__ == "__main__":
    raise SystemExit(main())
