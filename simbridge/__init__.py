"""iOS Simulator control primitives behind the ios-sim-mcp server.

Backends shell out to idb, xcrun simctl, osascript and cliclick; the
controller resolves the target simulator and reshapes tool output into
plain records.
"""

__version__ = "0.3.0"
