"""config.py - Resolve tool paths and runtime settings once at startup."""

import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from simbridge.errors import ConfigError

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

BACKENDS = ("idb", "desktop")
DEFAULT_TITLE_BAR_HEIGHT = 28

# Checked in order after IDB_PATH and the interpreter's own bin directory.
IDB_CANDIDATES = (
    os.path.join(os.path.expanduser("~"), "Library/Python/3.9/bin/idb"),
    "/opt/homebrew/bin/idb",
    "/usr/local/bin/idb",
)


def _log(msg: str) -> None:
    print(f"[config] {msg}", file=sys.stderr)


@dataclass(frozen=True)
class BridgeConfig:
    """Settings shared by every component that spawns external tools."""

    backend: str = "idb"
    idb_path: str = "idb"
    cliclick_path: str = "cliclick"
    title_bar_height: int = DEFAULT_TITLE_BAR_HEIGHT
    timeout: float | None = None


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_idb(environ: Mapping[str, str] | None = None) -> str:
    """Locate the idb CLI.

    Order: IDB_PATH, the running interpreter's bin directory (venv installs of
    fb-idb), the well-known install locations, then PATH. Falls back to the
    bare name so the process search path decides at spawn time.
    """
    env = os.environ if environ is None else environ

    override = env.get("IDB_PATH")
    if override:
        _log(f"idb from IDB_PATH: {override}")
        return override

    venv_idb = os.path.join(os.path.dirname(sys.executable), "idb")
    if _is_executable(venv_idb):
        _log(f"idb found in venv: {venv_idb}")
        return venv_idb

    for candidate in IDB_CANDIDATES:
        if os.path.exists(candidate):
            _log(f"idb found at {candidate}")
            return candidate

    system_idb = shutil.which("idb")
    if system_idb:
        _log(f"idb found on PATH: {system_idb}")
        return system_idb

    _log("idb not found, relying on PATH at spawn time")
    return "idb"


def _int_setting(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got '{raw}'") from exc


def _timeout_setting(env: Mapping[str, str]) -> float | None:
    raw = env.get("SIM_COMMAND_TIMEOUT", "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"SIM_COMMAND_TIMEOUT must be a number of seconds, got '{raw}'") from exc
    if value <= 0:
        raise ConfigError("SIM_COMMAND_TIMEOUT must be positive")
    return value


def load_env_files() -> None:
    """Load .env from the project root, then ~/.env (existing vars win)."""
    load_dotenv(_PROJECT_ROOT / ".env")
    load_dotenv(Path.home() / ".env")


def load_config(environ: Mapping[str, str] | None = None) -> BridgeConfig:
    """Build the process-wide BridgeConfig from environment variables."""
    env = os.environ if environ is None else environ

    backend = env.get("SIM_BACKEND", "idb").strip().lower() or "idb"
    if backend not in BACKENDS:
        raise ConfigError(
            f"SIM_BACKEND must be one of {', '.join(BACKENDS)}, got '{backend}'"
        )

    config = BridgeConfig(
        backend=backend,
        idb_path=find_idb(env),
        cliclick_path=env.get("CLICLICK_PATH", "").strip() or "cliclick",
        title_bar_height=_int_setting(env, "SIM_TITLE_BAR_HEIGHT", DEFAULT_TITLE_BAR_HEIGHT),
        timeout=_timeout_setting(env),
    )
    _log(f"backend={config.backend} idb={config.idb_path}")
    return config
