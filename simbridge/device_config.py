"""device_config.py - Known screen geometry for simulator device types."""

from simbridge.models import round_half_up

# (point width, point height, scale) by simctl device type suffix, i.e. the
# tail of com.apple.CoreSimulator.SimDeviceType.<suffix>.
_KNOWN_GEOMETRY: dict[str, tuple[int, int, int]] = {
    "iPhone-17-Pro": (402, 874, 3),
    "iPhone-17-Pro-Max": (440, 956, 3),
    "iPhone-17": (402, 874, 3),
    "iPhone-Air": (420, 912, 3),
    "iPhone-16e": (390, 844, 3),
    "iPhone-16-Pro": (402, 874, 3),
    "iPhone-16-Pro-Max": (440, 956, 3),
    "iPhone-16": (393, 852, 3),
    "iPhone-16-Plus": (430, 932, 3),
    "iPhone-15-Pro": (393, 852, 3),
    "iPhone-15-Pro-Max": (430, 932, 3),
    "iPhone-15": (393, 852, 3),
    "iPhone-15-Plus": (430, 932, 3),
    "iPhone-14-Pro": (393, 852, 3),
    "iPhone-14-Pro-Max": (430, 932, 3),
    "iPhone-14": (390, 844, 3),
    "iPhone-14-Plus": (428, 926, 3),
    "iPhone-13-Pro": (390, 844, 3),
    "iPhone-13-Pro-Max": (428, 926, 3),
    "iPhone-13": (390, 844, 3),
    "iPhone-13-mini": (375, 812, 3),
    "iPhone-SE-3rd-generation": (375, 667, 2),
    "iPad-10th-generation": (820, 1180, 2),
    "iPad-Air-5th-generation": (820, 1180, 2),
    "iPad-mini-6th-generation": (744, 1133, 2),
    "iPad-Pro-11-inch-4th-generation": (834, 1194, 2),
}

# Every current simulator device renders at 2x or 3x; 3x is the iPhone norm.
DEFAULT_SCALE = 3


def known_geometry(device_type: str) -> tuple[int, int, int] | None:
    """Return (width, height, scale) in points for a device type, if known."""
    if not device_type:
        return None
    return _KNOWN_GEOMETRY.get(device_type)


def points_from_pixels(
    pixel_width: int, pixel_height: int, device_type: str = ""
) -> tuple[int, int]:
    """Point size for a screenshot of the given pixel size.

    Uses the known scale for device_type, otherwise DEFAULT_SCALE.
    """
    geometry = known_geometry(device_type)
    if geometry is not None:
        width, height, _ = geometry
        # Landscape screenshots swap the axes.
        if pixel_width > pixel_height and width < height:
            width, height = height, width
        return width, height
    return (
        round_half_up(pixel_width / DEFAULT_SCALE),
        round_half_up(pixel_height / DEFAULT_SCALE),
    )
