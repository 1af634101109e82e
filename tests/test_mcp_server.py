import asyncio
import base64
import json

import pytest
from mcp.server.fastmcp.exceptions import ToolError

import mcp_server
from conftest import PNG_BYTES, png_dimensions
from simbridge.config import BridgeConfig
from simbridge.controller import SimulatorController, build_backend
from simbridge.errors import NoBootedSimulatorError
from simbridge.models import Frame, ScreenSize, Simulator, UIElement

TOOL_NAMES = {
    "list_simulators",
    "boot_simulator",
    "shutdown_simulator",
    "screenshot",
    "launch_app",
    "terminate_app",
    "list_apps",
    "tap",
    "swipe",
    "type_text",
    "press_key",
    "press_button",
    "open_url",
    "describe_screen",
    "describe_point",
    "find_elements",
    "tap_element",
    "get_screen_size",
    "runtime_health",
}


class FakeController:
    def __init__(self):
        self.calls = []

    def list_simulators(self):
        return [Simulator(udid="U1", name="iPhone 15", state="Booted", os_version="iOS 17.2")]

    def screenshot(self, udid=None):
        self.calls.append(("screenshot", udid))
        return PNG_BYTES

    def tap(self, x, y, udid=None):
        self.calls.append(("tap", x, y, udid))
        return f"Tapped at ({x:g}, {y:g})"

    def swipe(self, start_x, start_y, end_x, end_y, duration_ms=None, udid=None):
        self.calls.append(("swipe", start_x, start_y, end_x, end_y, duration_ms, udid))
        return "Swiped"

    def describe_point(self, x, y, udid=None):
        return None

    def find_elements(self, label, udid=None):
        return [UIElement(type="Button", label="Sign In", frame=Frame(10, 20, 100, 40))]

    def get_screen_size(self, udid=None):
        return ScreenSize(1179, 2556, 393, 852)

    def launch_app(self, bundle_id, udid=None):
        raise NoBootedSimulatorError()


@pytest.fixture
def controller(monkeypatch):
    fake = FakeController()
    monkeypatch.setattr(mcp_server, "_controller", fake)
    return fake


def test_every_operation_is_registered():
    tools = asyncio.run(mcp_server.mcp.list_tools())
    assert {tool.name for tool in tools} == TOOL_NAMES


def test_press_button_schema_lists_buttons():
    tools = {tool.name: tool for tool in asyncio.run(mcp_server.mcp.list_tools())}
    button = tools["press_button"].inputSchema["properties"]["button"]

    assert "home" in button["enum"]
    assert "volume_up" in button["enum"]
    assert tools["press_button"].inputSchema["required"] == ["button"]


def test_udid_is_optional_for_screen_tools():
    tools = {tool.name: tool for tool in asyncio.run(mcp_server.mcp.list_tools())}

    assert "udid" not in tools["tap"].inputSchema.get("required", [])
    assert "udid" in tools["boot_simulator"].inputSchema["required"]


def test_screenshot_returns_png_image(controller):
    image = mcp_server.screenshot()

    content = image.to_image_content()
    assert content.mimeType == "image/png"
    assert base64.b64decode(content.data) == PNG_BYTES
    assert controller.calls == [("screenshot", None)]


def test_tap_passes_udid_through(controller):
    assert mcp_server.tap(200, 400, udid="U1") == "Tapped at (200, 400)"
    mcp_server.swipe(0, 0, 10, 10)

    assert controller.calls == [
        ("tap", 200, 400, "U1"),
        ("swipe", 0, 0, 10, 10, None, None),
    ]


def test_json_tools(controller):
    sims = json.loads(mcp_server.list_simulators())
    found = json.loads(mcp_server.find_elements("sign"))
    size = json.loads(mcp_server.get_screen_size())

    assert sims[0]["udid"] == "U1"
    assert found[0]["frame"] == {"x": 10, "y": 20, "width": 100, "height": 40}
    assert size["scale"] == 3


def test_describe_point_without_element(controller):
    assert mcp_server.describe_point(5, 6) == "No element at (5, 6)"


def test_tool_errors_surface_as_tool_errors(controller):
    with pytest.raises(ToolError, match="No booted simulator found"):
        asyncio.run(mcp_server.mcp.call_tool("launch_app", {"bundle_id": "com.example.app"}))


def test_runtime_health_reports_backend(monkeypatch):
    monkeypatch.setattr(
        mcp_server.doctor,
        "collect_checks",
        lambda cfg: {"backend": cfg.backend, "ok": True},
    )

    payload = json.loads(mcp_server.runtime_health())

    assert payload == {"backend": mcp_server.CONFIG.backend, "ok": True}


BACKEND_OUTPUTS = {
    "idb": {
        "list-targets": "iPhone 15 | U1 | Booted | simulator | iOS 17.2",
        "describe-all": json.dumps([{
            "type": "Application",
            "AXLabel": "Home",
            "frame": {"x": 0, "y": 0, "width": 393, "height": 852},
        }]),
    },
    "desktop": {
        "list devices": json.dumps({"devices": {
            "com.apple.CoreSimulator.SimRuntime.iOS-17-2": [{
                "udid": "U1",
                "name": "iPhone 15",
                "state": "Booted",
                "isAvailable": True,
                "deviceTypeIdentifier": "com.apple.CoreSimulator.SimDeviceType.iPhone-15",
            }],
        }}),
    },
}


@pytest.mark.parametrize("backend_name", sorted(BACKEND_OUTPUTS))
def test_screenshot_dimensions_match_screen_size(monkeypatch, fake_tools, backend_name):
    fake_tools.outputs.update(BACKEND_OUTPUTS[backend_name])
    backend = build_backend(BridgeConfig(backend=backend_name))
    monkeypatch.setattr(mcp_server, "_controller", SimulatorController(backend))

    content = mcp_server.screenshot().to_image_content()
    size = json.loads(mcp_server.get_screen_size())

    width, height = png_dimensions(base64.b64decode(content.data))
    assert (width, height) == (size["pixels"]["width"], size["pixels"]["height"])
    assert size["points"] == {"width": 393, "height": 852}
