"""screen_mapper.py - Flatten idb accessibility trees and resolve elements by label.

Accepts the JSON printed by `idb ui describe-all --nested` (or a single
`describe-point` node) and normalizes it into UIElement records suitable
for label lookup and tap coordinate calculation.
"""

import json
import re
import sys

from simbridge.errors import ElementNotFoundError, ParseError
from simbridge.models import Frame, UIElement

_PREFIX = "[mapper]"

# Node types kept by flatten_elements even when they carry no label.
INTERACTIVE_TYPES = frozenset({
    "Button",
    "TextField",
    "StaticText",
    "Image",
    "Switch",
    "Slider",
    "Application",
})


def _log(msg: str) -> None:
    print(f"{_PREFIX} {msg}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Frame parsing
# ---------------------------------------------------------------------------

# AXFrame strings look like "{{20, 100}, {350, 44}}"
_FRAME_CURLY_RE = re.compile(
    r"\{\{(-?[\d.]+),\s*(-?[\d.]+)\},\s*\{([\d.]+),\s*([\d.]+)\}\}"
)

_FRAME_KEYSETS = (
    ("x", "y", "width", "height"),
    ("X", "Y", "Width", "Height"),
    ("x", "y", "w", "h"),
)


def _frame_from_string(raw: str) -> Frame | None:
    m = _FRAME_CURLY_RE.search(raw)
    if not m:
        return None
    x, y, w, h = (float(g) for g in m.groups())
    return Frame(x=x, y=y, width=w, height=h)


def _frame_from_dict(d: dict) -> Frame | None:
    for keys in _FRAME_KEYSETS:
        if all(k in d for k in keys):
            try:
                return Frame(*(float(d[k]) for k in keys))
            except (TypeError, ValueError):
                return None

    # {"origin": {"x":..,"y":..}, "size": {"width":..,"height":..}}
    origin = d.get("origin") or {}
    size = d.get("size") or {}
    if origin and size:
        try:
            return Frame(
                x=float(origin.get("x", 0)),
                y=float(origin.get("y", 0)),
                width=float(size.get("width", 0)),
                height=float(size.get("height", 0)),
            )
        except (TypeError, ValueError):
            return None
    return None


def extract_frame(node: dict) -> Frame:
    """Pull a frame from a node; a missing or unreadable frame is all zeros."""
    for key in ("frame", "AXFrame", "rect", "bounds"):
        val = node.get(key)
        if isinstance(val, dict):
            frame = _frame_from_dict(val)
        elif isinstance(val, str):
            frame = _frame_from_string(val)
        else:
            continue
        if frame is not None:
            return frame
    return Frame()


# ---------------------------------------------------------------------------
# Tree handling
# ---------------------------------------------------------------------------


def parse_tree(raw_text: str) -> list | dict:
    """Decode describe-all / describe-point JSON output."""
    if not raw_text or not raw_text.strip():
        _log("empty input")
        return []
    try:
        return json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"accessibility output is not valid JSON: {exc}") from exc


def _text(value) -> str | None:
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def normalize_element(node: dict) -> UIElement:
    """Turn a single tree node into a UIElement (children are not carried)."""
    enabled = node.get("enabled")
    return UIElement(
        type=node.get("type") or node.get("role") or "Unknown",
        label=_text(node.get("AXLabel") or node.get("label")),
        value=_text(node.get("AXValue") or node.get("value")),
        frame=extract_frame(node),
        enabled=True if enabled is None else bool(enabled),
    )


def _walk(tree, results: list[UIElement]) -> None:
    if isinstance(tree, list):
        for item in tree:
            _walk(item, results)
        return
    if not isinstance(tree, dict):
        return

    element = normalize_element(tree)
    if element.label or element.type in INTERACTIVE_TYPES:
        results.append(element)
    _walk(tree.get("children") or [], results)


def flatten_elements(tree) -> list[UIElement]:
    """Pre-order walk keeping labelled and interactive nodes."""
    results: list[UIElement] = []
    _walk(tree, results)
    _log(f"flattened {len(results)} elements")
    return results


def find_elements(elements: list[UIElement], label: str) -> list[UIElement]:
    """Case-insensitive substring match on labels, in traversal order."""
    needle = label.lower()
    return [el for el in elements if el.label and needle in el.label.lower()]


def first_match(elements: list[UIElement], label: str) -> UIElement:
    """First element whose label contains label; raises when none does."""
    matches = find_elements(elements, label)
    if not matches:
        raise ElementNotFoundError(label)
    if len(matches) > 1:
        _log(f"'{label}' matched {len(matches)} elements, using the first")
    return matches[0]


def dump_json(elements: list[UIElement]) -> str:
    return json.dumps([el.to_dict() for el in elements], indent=2)
