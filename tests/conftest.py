import struct
import zlib

import pytest

from simbridge import runner

SCREEN_PIXELS = (1179, 2556)


def _chunk(kind: bytes, data: bytes) -> bytes:
    body = kind + data
    return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body))


# Signature, IHDR (8-bit RGBA) and IEND: enough for readers of the header.
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n"
    + _chunk(b"IHDR", struct.pack(">IIBBBBB", *SCREEN_PIXELS, 8, 6, 0, 0, 0))
    + _chunk(b"IEND", b"")
)
SIPS_OUTPUT = (
    f"/tmp/capture.png\n  pixelWidth: {SCREEN_PIXELS[0]}\n  pixelHeight: {SCREEN_PIXELS[1]}"
)


def png_dimensions(data: bytes) -> tuple[int, int]:
    """Width and height from the IHDR chunk of a PNG."""
    assert data[:8] == b"\x89PNG\r\n\x1a\n"
    assert data[12:16] == b"IHDR"
    return struct.unpack(">II", data[16:24])


class FakeTools:
    """Stands in for runner.run_command, recording every command line.

    outputs maps a substring of the joined command line to its stdout (or to
    an exception instance to raise); `sips` reports SCREEN_PIXELS unless
    overridden. Screenshot commands write PNG_BYTES to the .png path they
    were given.
    """

    def __init__(self):
        self.calls: list[list[str]] = []
        self.inputs: list[str | None] = []
        self.outputs: dict[str, object] = {"sips": SIPS_OUTPUT}

    def __call__(self, cmd, timeout=None, input_text=None):
        self.calls.append(list(cmd))
        self.inputs.append(input_text)
        if "screenshot" in cmd:
            path = next(arg for arg in cmd if arg.endswith(".png"))
            with open(path, "wb") as f:
                f.write(PNG_BYTES)
        line = " ".join(cmd)
        for needle, result in self.outputs.items():
            if needle in line:
                if isinstance(result, Exception):
                    raise result
                return result
        return ""

    def commands_starting(self, *prefix: str) -> list[list[str]]:
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]


@pytest.fixture
def fake_tools(monkeypatch):
    tools = FakeTools()
    monkeypatch.setattr(runner, "run_command", tools)
    return tools
