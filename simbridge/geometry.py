"""geometry.py - Map simulator screen coordinates onto the host display."""

from simbridge.errors import SimulatorError
from simbridge.models import WindowBounds, round_half_up


def map_to_host(
    x: float,
    y: float,
    bounds: WindowBounds,
    screen_width: float,
    screen_height: float,
    title_bar_height: int,
) -> tuple[int, int]:
    """Linear scale-and-offset from simulator screen space to host pixels.

    The window content area (below the title bar) is assumed to cover the
    simulator screen exactly; bezels and letterboxing are not modelled.
    """
    if screen_width <= 0 or screen_height <= 0:
        raise SimulatorError(
            f"invalid simulator screen size {screen_width}x{screen_height}"
        )

    content_height = bounds.height - title_bar_height
    scale_x = bounds.width / screen_width
    scale_y = content_height / screen_height

    return (
        round_half_up(bounds.x + x * scale_x),
        round_half_up(bounds.y + title_bar_height + y * scale_y),
    )


def format_coord(value: float) -> str:
    """Render integral coordinates without a trailing .0."""
    return str(int(value)) if float(value).is_integer() else str(value)
