"""Plain records returned by simulator operations."""

import math
from dataclasses import asdict, dataclass, field

DEVICE_STATES = ("Booted", "Booting", "Shutdown", "Shutting Down", "Unknown")


def round_half_up(value: float) -> int:
    """Round .5 toward positive infinity, like JavaScript Math.round."""
    return int(math.floor(value + 0.5))


def normalize_state(raw: str) -> str:
    """Map a tool-reported power state onto DEVICE_STATES."""
    cleaned = (raw or "").strip()
    for state in DEVICE_STATES:
        if cleaned.lower() == state.lower():
            return state
    return "Unknown"


@dataclass(frozen=True)
class Simulator:
    udid: str
    name: str
    state: str
    type: str = ""
    os_version: str = ""
    device_type: str = ""

    @property
    def booted(self) -> bool:
        return self.state == "Booted"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Frame:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def center(self) -> tuple[int, int]:
        return (
            round_half_up(self.x + self.width / 2),
            round_half_up(self.y + self.height / 2),
        )


@dataclass(frozen=True)
class UIElement:
    type: str
    label: str | None = None
    value: str | None = None
    frame: Frame = field(default_factory=Frame)
    enabled: bool = True

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ScreenSize:
    pixel_width: int
    pixel_height: int
    point_width: int
    point_height: int

    @property
    def scale(self) -> int:
        if self.point_width <= 0:
            return 1
        return max(1, round_half_up(self.pixel_width / self.point_width))

    def to_dict(self) -> dict:
        return {
            "pixels": {"width": self.pixel_width, "height": self.pixel_height},
            "points": {"width": self.point_width, "height": self.point_height},
            "scale": self.scale,
        }


@dataclass(frozen=True)
class WindowBounds:
    """Simulator window rectangle on the host screen, in host pixels."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class AppInfo:
    bundle_id: str
    name: str | None = None
    install_type: str | None = None
    running: bool | None = None

    def to_dict(self) -> dict:
        return asdict(self)
