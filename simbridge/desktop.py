"""desktop.py - Simulator backend built on xcrun simctl and host input tools.

Device and app management go through `xcrun simctl`. Touches move the host
mouse with cliclick after mapping simulator coordinates onto the Simulator
window, text goes through the pasteboard, and keys and hardware buttons are
sent with AppleScript. Accessibility inspection is delegated to idb, the
only tool that exposes the simulator's accessibility tree.
"""

import sys

from simbridge import runner
from simbridge.config import BridgeConfig
from simbridge.device_config import points_from_pixels
from simbridge.errors import (
    CommandError,
    InvalidButtonError,
    InvalidKeyError,
    ParseError,
    WindowNotFoundError,
)
from simbridge.geometry import format_coord, map_to_host
from simbridge.idb import IdbBackend
from simbridge.models import (
    AppInfo,
    ScreenSize,
    Simulator,
    UIElement,
    WindowBounds,
    round_half_up,
)
from simbridge.parsers import parse_simctl_apps, parse_simctl_devices, parse_window_bounds
from simbridge.screenshot import pixel_size, read_png, temporary_capture

DEFAULT_SWIPE_MS = 300

# button -> (menu item, menu) in the Simulator menu bar
BUTTON_MENU_ITEMS = {
    "home": ("Home", "Device"),
    "lock": ("Lock", "Device"),
    "siri": ("Siri", "Device"),
    "volume_up": ("Increase Volume", "I/O"),
    "volume_down": ("Decrease Volume", "I/O"),
}

BUTTONS = {
    "home": "go to home screen",
    "lock": "toggle screen lock",
    "siri": "activate Siri",
    "volume_up": "raise volume",
    "volume_down": "lower volume",
}

# macOS virtual key codes for System Events `key code`.
KEY_CODES = {
    "return": 36,
    "enter": 36,
    "tab": 48,
    "space": 49,
    "delete": 51,
    "backspace": 51,
    "escape": 53,
    "left": 123,
    "right": 124,
    "down": 125,
    "up": 126,
}

_WINDOW_BOUNDS_SCRIPT = """
tell application "System Events"
  tell process "Simulator"
    set frontWindow to front window
    set {x, y} to position of frontWindow
    set {w, h} to size of frontWindow
    return {x, y, w, h}
  end tell
end tell
"""


def _log(msg: str) -> None:
    print(f"[desktop] {msg}", file=sys.stderr)


def _applescript_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _simulator_script(action: str) -> str:
    """Wrap a System Events action so it targets the frontmost Simulator."""
    return (
        'tell application "System Events"\n'
        '  tell process "Simulator"\n'
        "    set frontmost to true\n"
        f"    {action}\n"
        "  end tell\n"
        "end tell"
    )


class DesktopBackend:
    """simctl for device state, mouse and keyboard automation for input."""

    name = "desktop"
    buttons = BUTTONS

    def __init__(self, config: BridgeConfig, inspector: IdbBackend | None = None):
        self.config = config
        self.inspector = inspector or IdbBackend(config)

    def _run(self, cmd: list[str], input_text: str | None = None) -> str:
        return runner.run_command(cmd, timeout=self.config.timeout, input_text=input_text)

    def _simctl(self, args: list[str]) -> str:
        return self._run(["xcrun", "simctl"] + args)

    def _osascript(self, script: str) -> str:
        return self._run(["osascript", "-e", script])

    def _cliclick(self, commands: list[str]) -> str:
        return self._run([self.config.cliclick_path] + commands)

    # -- devices -----------------------------------------------------------

    def list_simulators(self) -> list[Simulator]:
        simulators = parse_simctl_devices(self._simctl(["list", "devices", "-j"]))
        _log(f"Found {len(simulators)} available simulator(s)")
        return simulators

    def boot(self, udid: str) -> str:
        try:
            self._simctl(["boot", udid])
        except CommandError as exc:
            if "current state: Booted" in str(exc):
                _log(f"Simulator {udid} was already booted")
                return f"Simulator {udid} already booted"
            raise
        self._run(["open", "-a", "Simulator"])
        return f"Booted simulator {udid}"

    def shutdown(self, udid: str) -> str:
        try:
            self._simctl(["shutdown", udid])
        except CommandError as exc:
            if "current state: Shutdown" in str(exc):
                _log(f"Simulator {udid} was already shut down")
                return f"Simulator {udid} already shut down"
            raise
        return f"Shut down simulator {udid}"

    def screenshot(self, udid: str) -> bytes:
        with temporary_capture("screenshot") as path:
            self._simctl(["io", udid, "screenshot", path])
            return read_png(path)

    def _screen_pixels(self, udid: str) -> tuple[int, int]:
        with temporary_capture("size") as path:
            self._simctl(["io", udid, "screenshot", path])
            return pixel_size(path, self.config.timeout)

    def _device_type(self, udid: str) -> str:
        for sim in self.list_simulators():
            if sim.udid == udid:
                return sim.device_type
        return ""

    def get_screen_size(self, udid: str) -> ScreenSize:
        pixel_width, pixel_height = self._screen_pixels(udid)
        point_width, point_height = points_from_pixels(
            pixel_width, pixel_height, self._device_type(udid)
        )
        return ScreenSize(pixel_width, pixel_height, point_width, point_height)

    def point_scale(self, udid: str) -> float:
        """Taps here take screen pixels, so accessibility points need scaling."""
        return float(self.get_screen_size(udid).scale)

    # -- apps --------------------------------------------------------------

    def launch_app(self, udid: str, bundle_id: str) -> str:
        output = self._simctl(["launch", udid, bundle_id])
        return output or f"Launched {bundle_id}"

    def terminate_app(self, udid: str, bundle_id: str) -> str:
        self._simctl(["terminate", udid, bundle_id])
        return f"Terminated {bundle_id}"

    def list_apps(self, udid: str) -> list[AppInfo]:
        return parse_simctl_apps(self._simctl(["listapps", udid]))

    def open_url(self, udid: str, url: str) -> str:
        self._simctl(["openurl", udid, url])
        return f"Opened URL: {url}"

    # -- pointer -----------------------------------------------------------

    def window_bounds(self) -> WindowBounds:
        try:
            return parse_window_bounds(self._osascript(_WINDOW_BOUNDS_SCRIPT))
        except (CommandError, ParseError) as exc:
            _log(f"window bounds unavailable: {exc}")
            raise WindowNotFoundError() from exc

    def _mapper(self, udid: str):
        bounds = self.window_bounds()
        screen_width, screen_height = self._screen_pixels(udid)
        title_bar = self.config.title_bar_height

        def to_host(x: float, y: float) -> tuple[int, int]:
            return map_to_host(x, y, bounds, screen_width, screen_height, title_bar)

        return to_host

    def tap(self, udid: str, x: float, y: float) -> str:
        to_host = self._mapper(udid)
        sx, sy = to_host(x, y)
        self._cliclick([f"c:{sx},{sy}"])
        return f"Tapped at ({format_coord(x)}, {format_coord(y)}) -> screen ({sx}, {sy})"

    def swipe(
        self,
        udid: str,
        start_x: float,
        start_y: float,
        end_x: float,
        end_y: float,
        duration_ms: float | None = None,
    ) -> str:
        to_host = self._mapper(udid)
        sx1, sy1 = to_host(start_x, start_y)
        sx2, sy2 = to_host(end_x, end_y)
        wait = max(1, round_half_up(duration_ms or DEFAULT_SWIPE_MS))
        self._cliclick([
            f"dd:{sx1},{sy1}",
            f"w:{wait}",
            f"dm:{sx2},{sy2}",
            f"du:{sx2},{sy2}",
        ])
        return (
            f"Swiped from ({format_coord(start_x)}, {format_coord(start_y)}) "
            f"to ({format_coord(end_x)}, {format_coord(end_y)})"
        )

    # -- keyboard ----------------------------------------------------------

    def type_text(self, udid: str, text: str) -> str:
        self._run(["pbcopy"], input_text=text)
        self._osascript(_simulator_script('keystroke "v" using command down'))
        _log(f"Typed text via pasteboard ({len(text)} chars)")
        return f"Typed: {text}"

    def press_key(self, udid: str, key: str) -> str:
        code = KEY_CODES.get(key.lower())
        if code is not None:
            action = f"key code {code}"
        elif len(key) == 1:
            action = f"keystroke {_applescript_string(key)}"
        else:
            raise InvalidKeyError(key, sorted(KEY_CODES))
        self._osascript(_simulator_script(action))
        return f"Pressed key: {key}"

    def press_button(self, udid: str, button: str) -> str:
        normalized = button.lower().replace("-", "_")
        if normalized not in BUTTON_MENU_ITEMS:
            raise InvalidButtonError(button, BUTTONS)
        item, menu = BUTTON_MENU_ITEMS[normalized]
        self._osascript(_simulator_script(
            f"click menu item {_applescript_string(item)} of menu "
            f"{_applescript_string(menu)} of menu bar 1"
        ))
        return f"Pressed button: {button}"

    # -- accessibility -----------------------------------------------------

    def describe_all(self, udid: str) -> list[UIElement]:
        return self.inspector.describe_all(udid)

    def describe_point(self, udid: str, x: float, y: float) -> UIElement | None:
        return self.inspector.describe_point(udid, x, y)
