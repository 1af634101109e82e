"""parsers.py - Turn idb/simctl/sips/osascript output into records."""

import json
import re

from simbridge.errors import ParseError
from simbridge.models import AppInfo, Simulator, WindowBounds, normalize_state

_RUNTIME_PREFIX = "com.apple.CoreSimulator.SimRuntime."

_BUNDLE_ID_RE = re.compile(r'CFBundleIdentifier\s*=\s*"?([^";]+)"?;')
_DISPLAY_NAME_RE = re.compile(r'CFBundleDisplayName\s*=\s*"?([^";]+)"?;')

_PIXEL_WIDTH_RE = re.compile(r"pixelWidth: (\d+)")
_PIXEL_HEIGHT_RE = re.compile(r"pixelHeight: (\d+)")

_BOUNDS_RE = re.compile(
    r"^\{?\s*(-?[\d.]+)\s*,\s*(-?[\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*\}?$"
)


def _columns(line: str) -> list[str]:
    return [part.strip() for part in line.split("|")]


def _column(parts: list[str], index: int) -> str:
    return parts[index] if index < len(parts) else ""


def parse_list_targets(text: str) -> list[Simulator]:
    """Parse `idb list-targets`: name | udid | state | type | os_version | ..."""
    simulators = []
    for line in text.splitlines():
        if not line.strip():
            continue
        parts = _columns(line)
        simulators.append(Simulator(
            name=_column(parts, 0),
            udid=_column(parts, 1),
            state=normalize_state(_column(parts, 2)),
            type=_column(parts, 3),
            os_version=_column(parts, 4),
        ))
    return simulators


def _runtime_version(runtime_key: str) -> str:
    # com.apple.CoreSimulator.SimRuntime.iOS-17-0 -> iOS 17.0
    short = runtime_key.replace(_RUNTIME_PREFIX, "")
    platform, _, version = short.partition("-")
    if not version:
        return short
    return f"{platform} {version.replace('-', '.')}"


def parse_simctl_devices(text: str) -> list[Simulator]:
    """Parse `xcrun simctl list devices -j`, keeping available devices only."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"simctl device list is not valid JSON: {exc}") from exc

    simulators = []
    for runtime, devices in data.get("devices", {}).items():
        for dev in devices:
            if not dev.get("isAvailable", False):
                continue
            type_id = dev.get("deviceTypeIdentifier", "")
            simulators.append(Simulator(
                udid=dev.get("udid", ""),
                name=dev.get("name", ""),
                state=normalize_state(dev.get("state", "")),
                type="simulator",
                os_version=_runtime_version(runtime),
                device_type=type_id.rsplit(".", 1)[-1] if "." in type_id else type_id,
            ))
    return simulators


def parse_idb_apps(text: str) -> list[AppInfo]:
    """Parse `idb list-apps`: bundle_id | name | install_type | archs | state | ..."""
    apps = []
    for line in text.splitlines():
        if not line.strip():
            continue
        parts = _columns(line)
        process_state = _column(parts, 4)
        apps.append(AppInfo(
            bundle_id=_column(parts, 0),
            name=_column(parts, 1) or None,
            install_type=_column(parts, 2) or None,
            running=(process_state == "Running") if process_state else None,
        ))
    return apps


def parse_simctl_apps(text: str) -> list[AppInfo]:
    """Parse the plist-style dump printed by `xcrun simctl listapps`.

    Keys inside each app block are sorted, so CFBundleDisplayName (when
    present) precedes the CFBundleIdentifier it belongs to.
    """
    apps = []
    pending_name = None
    for line in text.splitlines():
        m = _DISPLAY_NAME_RE.search(line)
        if m:
            pending_name = m.group(1).strip()
            continue
        m = _BUNDLE_ID_RE.search(line)
        if m:
            apps.append(AppInfo(bundle_id=m.group(1).strip(), name=pending_name))
            pending_name = None
    return apps


def parse_pixel_dimensions(text: str) -> tuple[int, int]:
    """Extract (pixelWidth, pixelHeight) from `sips -g` output."""
    width = _PIXEL_WIDTH_RE.search(text)
    height = _PIXEL_HEIGHT_RE.search(text)
    if not width or not height:
        raise ParseError(f"could not read image dimensions from sips output: {text!r}")
    return int(width.group(1)), int(height.group(1))


def parse_window_bounds(text: str) -> WindowBounds:
    """Parse AppleScript's `x, y, w, h` list output."""
    m = _BOUNDS_RE.match(text.strip())
    if not m:
        raise ParseError(f"unexpected window bounds output: {text!r}")
    x, y, w, h = (float(g) for g in m.groups())
    return WindowBounds(x=x, y=y, width=w, height=h)
