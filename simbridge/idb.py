"""idb.py - Simulator backend driven entirely through the Facebook idb CLI."""

import sys

from simbridge import runner, screen_mapper
from simbridge.config import BridgeConfig
from simbridge.device_config import points_from_pixels
from simbridge.errors import InvalidButtonError, InvalidKeyError
from simbridge.geometry import format_coord
from simbridge.models import AppInfo, ScreenSize, Simulator, UIElement
from simbridge.parsers import parse_idb_apps, parse_list_targets
from simbridge.screenshot import pixel_size, read_png, temporary_capture

BUTTONS = {
    "home": "go to home screen",
    "lock": "toggle screen lock",
    "siri": "activate Siri",
    "side_button": "press the side button",
    "apple_pay": "trigger Apple Pay",
}

# HID keyboard usage codes accepted by `idb ui key`.
KEY_CODES = {
    "return": 40,
    "enter": 40,
    "escape": 41,
    "delete": 42,
    "backspace": 42,
    "tab": 43,
    "space": 44,
    "right": 79,
    "left": 80,
    "down": 81,
    "up": 82,
}


def _log(msg: str) -> None:
    print(f"[idb] {msg}", file=sys.stderr)


class IdbBackend:
    """Runs every operation as an `idb` subcommand."""

    name = "idb"
    buttons = BUTTONS

    def __init__(self, config: BridgeConfig):
        self.config = config

    def _run(self, args: list[str]) -> str:
        return runner.run_command([self.config.idb_path] + args, timeout=self.config.timeout)

    def _run_on(self, udid: str, args: list[str]) -> str:
        return self._run(args + ["--udid", udid])

    # -- devices -----------------------------------------------------------

    def list_simulators(self) -> list[Simulator]:
        simulators = parse_list_targets(self._run(["list-targets"]))
        _log(f"Found {len(simulators)} target(s)")
        return simulators

    def boot(self, udid: str) -> str:
        self._run(["boot", "--udid", udid])
        return f"Booted simulator {udid}"

    def shutdown(self, udid: str) -> str:
        self._run(["shutdown", "--udid", udid])
        return f"Shut down simulator {udid}"

    def screenshot(self, udid: str) -> bytes:
        with temporary_capture("screenshot") as path:
            self._run(["screenshot", path, "--udid", udid])
            return read_png(path)

    def get_screen_size(self, udid: str) -> ScreenSize:
        with temporary_capture("size") as path:
            self._run(["screenshot", path, "--udid", udid])
            pixel_width, pixel_height = pixel_size(path, self.config.timeout)

        app = next((el for el in self.describe_all(udid) if el.type == "Application"), None)
        fallback_width, fallback_height = points_from_pixels(pixel_width, pixel_height)
        point_width = int(app.frame.width) if app and app.frame.width else fallback_width
        point_height = int(app.frame.height) if app and app.frame.height else fallback_height

        return ScreenSize(pixel_width, pixel_height, point_width, point_height)

    def point_scale(self, udid: str) -> float:
        """idb taps are expressed in points, same as accessibility frames."""
        return 1.0

    # -- apps --------------------------------------------------------------

    def launch_app(self, udid: str, bundle_id: str) -> str:
        self._run_on(udid, ["launch", bundle_id])
        return f"Launched {bundle_id}"

    def terminate_app(self, udid: str, bundle_id: str) -> str:
        self._run_on(udid, ["terminate", bundle_id])
        return f"Terminated {bundle_id}"

    def list_apps(self, udid: str) -> list[AppInfo]:
        return parse_idb_apps(self._run_on(udid, ["list-apps"]))

    def open_url(self, udid: str, url: str) -> str:
        self._run_on(udid, ["open", url])
        return f"Opened URL: {url}"

    # -- input -------------------------------------------------------------

    def tap(self, udid: str, x: float, y: float) -> str:
        self._run_on(udid, ["ui", "tap", format_coord(x), format_coord(y)])
        return f"Tapped at ({format_coord(x)}, {format_coord(y)})"

    def swipe(
        self,
        udid: str,
        start_x: float,
        start_y: float,
        end_x: float,
        end_y: float,
        duration_ms: float | None = None,
    ) -> str:
        args = [
            "ui", "swipe",
            format_coord(start_x), format_coord(start_y),
            format_coord(end_x), format_coord(end_y),
        ]
        if duration_ms:
            args += ["--duration", str(duration_ms / 1000)]
        self._run_on(udid, args)
        return (
            f"Swiped from ({format_coord(start_x)}, {format_coord(start_y)}) "
            f"to ({format_coord(end_x)}, {format_coord(end_y)})"
        )

    def type_text(self, udid: str, text: str) -> str:
        self._run_on(udid, ["ui", "text", text])
        _log(f"Typed text ({len(text)} chars)")
        return f"Typed: {text}"

    def press_key(self, udid: str, key: str) -> str:
        code = KEY_CODES.get(key.lower())
        if code is None and len(key) > 1 and key.isascii() and key.isdigit():
            code = int(key)
        if code is not None:
            self._run_on(udid, ["ui", "key", str(code)])
        elif len(key) == 1:
            self._run_on(udid, ["ui", "text", key])
        else:
            raise InvalidKeyError(key, sorted(KEY_CODES), numeric=True)
        return f"Pressed key: {key}"

    def press_button(self, udid: str, button: str) -> str:
        normalized = button.lower()
        if normalized not in BUTTONS:
            raise InvalidButtonError(button, BUTTONS)
        self._run_on(udid, ["ui", "button", normalized.upper()])
        return f"Pressed button: {button}"

    # -- accessibility -----------------------------------------------------

    def describe_all(self, udid: str) -> list[UIElement]:
        raw = self._run_on(udid, ["ui", "describe-all", "--nested"])
        return screen_mapper.flatten_elements(screen_mapper.parse_tree(raw))

    def describe_point(self, udid: str, x: float, y: float) -> UIElement | None:
        raw = self._run_on(udid, ["ui", "describe-point", format_coord(x), format_coord(y)])
        tree = screen_mapper.parse_tree(raw)
        if isinstance(tree, list):
            tree = tree[0] if tree else None
        if not isinstance(tree, dict):
            return None
        return screen_mapper.normalize_element(tree)
