"""controller.py - Simulator operations shared by every backend.

The controller resolves which simulator a call targets, delegates the
tool-specific work to the configured backend, and owns the backend-neutral
pieces: label search and tap-by-label.
"""

import sys

from simbridge import screen_mapper
from simbridge.config import BridgeConfig
from simbridge.desktop import DesktopBackend
from simbridge.errors import NoBootedSimulatorError
from simbridge.idb import IdbBackend
from simbridge.models import AppInfo, ScreenSize, Simulator, UIElement, round_half_up


def _log(msg: str) -> None:
    print(f"[controller] {msg}", file=sys.stderr)


class SimulatorController:
    """One entry point per MCP tool; every method targets one simulator."""

    def __init__(self, backend):
        self.backend = backend

    # -- target resolution -------------------------------------------------

    def booted_simulator(self) -> Simulator | None:
        for sim in self.backend.list_simulators():
            if sim.booted:
                return sim
        return None

    def resolve_udid(self, udid: str | None = None) -> str:
        """Return udid, or the first booted simulator's when udid is empty."""
        if udid:
            return udid
        sim = self.booted_simulator()
        if sim is None:
            raise NoBootedSimulatorError()
        _log(f"Using booted simulator {sim.name} ({sim.udid})")
        return sim.udid

    # -- devices -----------------------------------------------------------

    def list_simulators(self) -> list[Simulator]:
        return self.backend.list_simulators()

    def boot_simulator(self, udid: str) -> str:
        return self.backend.boot(udid)

    def shutdown_simulator(self, udid: str) -> str:
        return self.backend.shutdown(udid)

    def screenshot(self, udid: str | None = None) -> bytes:
        return self.backend.screenshot(self.resolve_udid(udid))

    def get_screen_size(self, udid: str | None = None) -> ScreenSize:
        return self.backend.get_screen_size(self.resolve_udid(udid))

    # -- apps --------------------------------------------------------------

    def launch_app(self, bundle_id: str, udid: str | None = None) -> str:
        return self.backend.launch_app(self.resolve_udid(udid), bundle_id)

    def terminate_app(self, bundle_id: str, udid: str | None = None) -> str:
        return self.backend.terminate_app(self.resolve_udid(udid), bundle_id)

    def list_apps(self, udid: str | None = None) -> list[AppInfo]:
        return self.backend.list_apps(self.resolve_udid(udid))

    def open_url(self, url: str, udid: str | None = None) -> str:
        return self.backend.open_url(self.resolve_udid(udid), url)

    # -- input -------------------------------------------------------------

    def tap(self, x: float, y: float, udid: str | None = None) -> str:
        return self.backend.tap(self.resolve_udid(udid), x, y)

    def swipe(
        self,
        start_x: float,
        start_y: float,
        end_x: float,
        end_y: float,
        duration_ms: float | None = None,
        udid: str | None = None,
    ) -> str:
        return self.backend.swipe(
            self.resolve_udid(udid), start_x, start_y, end_x, end_y, duration_ms
        )

    def type_text(self, text: str, udid: str | None = None) -> str:
        return self.backend.type_text(self.resolve_udid(udid), text)

    def press_key(self, key: str, udid: str | None = None) -> str:
        return self.backend.press_key(self.resolve_udid(udid), key)

    def press_button(self, button: str, udid: str | None = None) -> str:
        return self.backend.press_button(self.resolve_udid(udid), button)

    # -- accessibility -----------------------------------------------------

    def describe_screen(self, udid: str | None = None) -> list[UIElement]:
        return self.backend.describe_all(self.resolve_udid(udid))

    def describe_point(self, x: float, y: float, udid: str | None = None) -> UIElement | None:
        return self.backend.describe_point(self.resolve_udid(udid), x, y)

    def find_elements(self, label: str, udid: str | None = None) -> list[UIElement]:
        elements = self.backend.describe_all(self.resolve_udid(udid))
        return screen_mapper.find_elements(elements, label)

    def tap_element(self, label: str, udid: str | None = None) -> str:
        """Tap the centre of the first element whose label contains label."""
        target = self.resolve_udid(udid)
        element = screen_mapper.first_match(self.backend.describe_all(target), label)
        cx, cy = element.frame.center()

        scale = self.backend.point_scale(target)
        if scale != 1:
            self.backend.tap(target, round_half_up(cx * scale), round_half_up(cy * scale))
        else:
            self.backend.tap(target, cx, cy)
        return f'Tapped "{element.label}" at ({cx}, {cy})'


def build_backend(config: BridgeConfig):
    if config.backend == "desktop":
        return DesktopBackend(config)
    return IdbBackend(config)


def build_controller(config: BridgeConfig) -> SimulatorController:
    controller = SimulatorController(build_backend(config))
    _log(f"Using {controller.backend.name} backend")
    return controller
