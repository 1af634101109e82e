"""Temporary and persisted simulator screenshot files."""

import os
import re
import sys
import tempfile
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from simbridge import runner
from simbridge.parsers import parse_pixel_dimensions


def _log(msg: str) -> None:
    print(f"[screenshot] {msg}", file=sys.stderr)


def _timestamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S_%f")


def _sanitize_label(label: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_-]", "_", label)


@contextmanager
def temporary_capture(prefix: str = "screenshot") -> Iterator[str]:
    """Yield a fresh temp PNG path and remove the file on every exit path."""
    name = f"sim-{_sanitize_label(prefix)}-{_timestamp()}-{uuid.uuid4().hex[:8]}.png"
    path = os.path.join(tempfile.gettempdir(), name)
    try:
        yield path
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


def read_png(path: str) -> bytes:
    with open(path, "rb") as f:
        data = f.read()
    _log(f"read {len(data)} bytes from {path}")
    return data


def save_png(data: bytes, dest: str) -> str:
    """Write PNG bytes to dest; a directory gets a timestamped filename.

    Returns the absolute path written.
    """
    if os.path.isdir(dest) or dest.endswith(os.sep):
        os.makedirs(dest, exist_ok=True)
        dest = os.path.join(dest, f"screenshot_{_timestamp()}.png")
    else:
        parent = os.path.dirname(os.path.abspath(dest))
        os.makedirs(parent, exist_ok=True)

    with open(dest, "wb") as f:
        f.write(data)
    path = os.path.abspath(dest)
    _log(f"saved {path}")
    return path


def pixel_size(path: str, timeout: float | None = None) -> tuple[int, int]:
    """Read (width, height) of a PNG with `sips`."""
    output = runner.run_command(
        ["sips", "-g", "pixelWidth", "-g", "pixelHeight", path],
        timeout=timeout,
    )
    return parse_pixel_dimensions(output)
