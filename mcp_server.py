#!/usr/bin/env python3
"""MCP server exposing iOS Simulator control.

Every tool resolves its target simulator (the `udid` argument, or the booted
simulator when it is omitted), runs the matching simbridge operation and
returns text, JSON text or a PNG image. Operation failures raise; FastMCP
turns them into error-flagged tool results so the server keeps running.

Sample config for ~/.claude/mcp_servers.json:

    {
      "mcpServers": {
        "ios-sim": {
          "command": "/path/to/ios-sim-mcp/.venv/bin/ios-sim-mcp",
          "env": {"SIM_BACKEND": "idb"}
        }
      }
    }

Run standalone:  python mcp_server.py
"""

import json
import sys
from typing import Annotated, Literal

from mcp.server.fastmcp import FastMCP, Image
from pydantic import Field

from simbridge import config, doctor
from simbridge.controller import SimulatorController, build_controller

config.load_env_files()
CONFIG = config.load_config()

ButtonName = Literal["home", "lock", "siri", "side_button", "apple_pay", "volume_up", "volume_down"]

Udid = Annotated[
    str,
    Field(description="Simulator UDID (optional, uses the booted simulator if not provided)"),
]


def _log(msg: str) -> None:
    print(f"[server] {msg}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Lazy controller
# ---------------------------------------------------------------------------

_controller: SimulatorController | None = None


def _get_controller() -> SimulatorController:
    """Build the backend for CONFIG on first use."""
    global _controller
    if _controller is None:
        _controller = build_controller(CONFIG)
    return _controller


def _as_json(payload) -> str:
    return json.dumps(payload, indent=2)


# ---------------------------------------------------------------------------
# MCP server
# ---------------------------------------------------------------------------

mcp = FastMCP(
    "ios-sim-mcp",
    instructions=(
        "iOS Simulator control: boot devices, take screenshots, tap, swipe, type, "
        "manage apps and inspect the accessibility tree. Coordinates are in points "
        "unless the desktop backend is configured."
    ),
)


@mcp.tool()
def list_simulators() -> str:
    """List all available iOS simulators with their UDID, state and OS version."""
    sims = _get_controller().list_simulators()
    return _as_json([s.to_dict() for s in sims])


@mcp.tool()
def boot_simulator(udid: Annotated[str, Field(description="Simulator UDID")]) -> str:
    """Boot an iOS simulator by UDID."""
    return _get_controller().boot_simulator(udid)


@mcp.tool()
def shutdown_simulator(udid: Annotated[str, Field(description="Simulator UDID")]) -> str:
    """Shutdown an iOS simulator by UDID."""
    return _get_controller().shutdown_simulator(udid)


@mcp.tool()
def screenshot(udid: Udid = "") -> Image:
    """Take a screenshot of the simulator. Returns a base64 PNG image."""
    data = _get_controller().screenshot(udid or None)
    return Image(data=data, format="png")


@mcp.tool()
def launch_app(
    bundle_id: Annotated[str, Field(description="App bundle identifier, e.g. com.apple.Preferences")],
    udid: Udid = "",
) -> str:
    """Launch an app on the simulator."""
    return _get_controller().launch_app(bundle_id, udid or None)


@mcp.tool()
def terminate_app(
    bundle_id: Annotated[str, Field(description="App bundle identifier")],
    udid: Udid = "",
) -> str:
    """Terminate a running app on the simulator."""
    return _get_controller().terminate_app(bundle_id, udid or None)


@mcp.tool()
def list_apps(udid: Udid = "") -> str:
    """List apps installed on the simulator."""
    apps = _get_controller().list_apps(udid or None)
    return _as_json([a.to_dict() for a in apps])


@mcp.tool()
def tap(
    x: Annotated[float, Field(description="X coordinate")],
    y: Annotated[float, Field(description="Y coordinate")],
    udid: Udid = "",
) -> str:
    """Tap at x,y coordinates on the simulator screen."""
    return _get_controller().tap(x, y, udid or None)


@mcp.tool()
def swipe(
    start_x: Annotated[float, Field(description="Start X coordinate")],
    start_y: Annotated[float, Field(description="Start Y coordinate")],
    end_x: Annotated[float, Field(description="End X coordinate")],
    end_y: Annotated[float, Field(description="End Y coordinate")],
    duration: Annotated[float, Field(description="Duration in milliseconds (0 = tool default)", ge=0)] = 0,
    udid: Udid = "",
) -> str:
    """Swipe from one point to another on the simulator screen."""
    return _get_controller().swipe(
        start_x, start_y, end_x, end_y, duration or None, udid or None
    )


@mcp.tool()
def type_text(
    text: Annotated[str, Field(description="Text to type into the focused field")],
    udid: Udid = "",
) -> str:
    """Type text into the currently focused field."""
    return _get_controller().type_text(text, udid or None)


@mcp.tool()
def press_key(
    key: Annotated[
        str,
        Field(description=(
            "Key to press: return, enter, delete, backspace, escape, tab, space, "
            "up, down, left, right, or any single character. The idb backend also "
            "accepts a numeric HID usage code of two or more digits, e.g. 79."
        )),
    ],
    udid: Udid = "",
) -> str:
    """Press a keyboard key."""
    return _get_controller().press_key(key, udid or None)


@mcp.tool()
def press_button(
    button: Annotated[
        ButtonName,
        Field(description=(
            "Hardware button. idb backend: home, lock, siri, side_button, apple_pay. "
            "Desktop backend: home, lock, siri, volume_up, volume_down."
        )),
    ],
    udid: Udid = "",
) -> str:
    """Press a device hardware button."""
    return _get_controller().press_button(button, udid or None)


@mcp.tool()
def open_url(
    url: Annotated[str, Field(description="URL to open (web or custom scheme)")],
    udid: Udid = "",
) -> str:
    """Open a URL in the simulator."""
    return _get_controller().open_url(url, udid or None)


@mcp.tool()
def describe_screen(udid: Udid = "") -> str:
    """List the on-screen accessibility elements with type, label, value and frame.

    Frames are in points; use them with tap or tap_element.
    """
    elements = _get_controller().describe_screen(udid or None)
    return _as_json([el.to_dict() for el in elements])


@mcp.tool()
def describe_point(
    x: Annotated[float, Field(description="X coordinate in points")],
    y: Annotated[float, Field(description="Y coordinate in points")],
    udid: Udid = "",
) -> str:
    """Describe the accessibility element at a point."""
    element = _get_controller().describe_point(x, y, udid or None)
    if element is None:
        return f"No element at ({x:g}, {y:g})"
    return _as_json(element.to_dict())


@mcp.tool()
def find_elements(
    label: Annotated[str, Field(description="Text to search for in element labels (case-insensitive)")],
    udid: Udid = "",
) -> str:
    """Find accessibility elements whose label contains the given text."""
    elements = _get_controller().find_elements(label, udid or None)
    return _as_json([el.to_dict() for el in elements])


@mcp.tool()
def tap_element(
    label: Annotated[str, Field(description="Text contained in the element's label (case-insensitive)")],
    udid: Udid = "",
) -> str:
    """Tap the first element whose label contains the given text."""
    return _get_controller().tap_element(label, udid or None)


@mcp.tool()
def get_screen_size(udid: Udid = "") -> str:
    """Get the simulator screen size in pixels and points, plus the scale factor."""
    size = _get_controller().get_screen_size(udid or None)
    return _as_json(size.to_dict())


@mcp.tool()
def runtime_health() -> str:
    """Report which external tools the configured backend can reach."""
    return _as_json(doctor.collect_checks(CONFIG))


def main() -> None:
    _log(f"iOS Simulator MCP server running on stdio ({CONFIG.backend} backend)")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
