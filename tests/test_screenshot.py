import os

import pytest

from simbridge import screenshot


def test_temporary_capture_removes_file_after_use():
    with screenshot.temporary_capture("size") as path:
        assert os.path.basename(path).startswith("sim-size-")
        with open(path, "wb") as f:
            f.write(b"\x89PNG")
        assert screenshot.read_png(path) == b"\x89PNG"

    assert not os.path.exists(path)


def test_temporary_capture_removes_file_on_error():
    with pytest.raises(RuntimeError):
        with screenshot.temporary_capture() as path:
            with open(path, "wb") as f:
                f.write(b"partial")
            raise RuntimeError("sips failed")

    assert not os.path.exists(path)


def test_temporary_capture_tolerates_tool_never_writing_file():
    with screenshot.temporary_capture() as path:
        pass
    assert not os.path.exists(path)


def test_temporary_capture_paths_are_unique():
    with screenshot.temporary_capture() as a, screenshot.temporary_capture() as b:
        assert a != b


def test_save_png_into_directory(tmp_path):
    path = screenshot.save_png(b"\x89PNG", str(tmp_path) + os.sep)

    assert os.path.dirname(path) == str(tmp_path)
    assert os.path.basename(path).startswith("screenshot_")
    with open(path, "rb") as f:
        assert f.read() == b"\x89PNG"


def test_save_png_to_file(tmp_path):
    dest = tmp_path / "shots" / "home.png"

    path = screenshot.save_png(b"data", str(dest))

    assert path == str(dest)
    assert dest.read_bytes() == b"data"


def test_pixel_size_runs_sips(monkeypatch):
    calls = []

    def fake_run(cmd, timeout=None, input_text=None):
        calls.append(cmd)
        return "/tmp/x.png\n  pixelWidth: 1179\n  pixelHeight: 2556"

    monkeypatch.setattr(screenshot.runner, "run_command", fake_run)

    assert screenshot.pixel_size("/tmp/x.png") == (1179, 2556)
    assert calls == [["sips", "-g", "pixelWidth", "-g", "pixelHeight", "/tmp/x.png"]]
