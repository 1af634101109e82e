"""Exception hierarchy for simulator operations.

Every operation raises a SimulatorError subclass; the MCP dispatch boundary
and the CLI turn them into error responses.
"""


class SimulatorError(RuntimeError):
    """Base class for all simulator control failures."""


class ConfigError(SimulatorError):
    """Invalid environment configuration."""


class CommandError(SimulatorError):
    """An external tool failed without producing usable output."""

    def __init__(self, message: str, cmd: list[str] | None = None,
                 returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.cmd = list(cmd or [])
        self.returncode = returncode
        self.stderr = stderr


class ParseError(SimulatorError):
    """Tool output did not have the expected shape."""


class NoBootedSimulatorError(SimulatorError):
    def __init__(self):
        super().__init__(
            "No booted simulator found. Use list_simulators to find available "
            "simulators, then boot_simulator with a UDID."
        )


class ElementNotFoundError(SimulatorError):
    def __init__(self, label: str):
        super().__init__(
            f'No element found with label containing "{label}". Use '
            "describe_screen to see all available elements and their labels, "
            "or use find_elements to search with different text."
        )
        self.label = label


class InvalidButtonError(SimulatorError):
    def __init__(self, button: str, valid: dict[str, str]):
        options = ", ".join(f"{name} ({meaning})" for name, meaning in valid.items())
        super().__init__(f"Invalid button '{button}'. Valid options: {options}.")
        self.button = button


class InvalidKeyError(SimulatorError):
    def __init__(self, key: str, named: list[str], numeric: bool = False):
        codes = ", a numeric HID usage code" if numeric else ""
        super().__init__(
            f"Invalid key '{key}'. Use a single character{codes} or one of: {', '.join(named)}."
        )
        self.key = key


class WindowNotFoundError(SimulatorError):
    def __init__(self):
        super().__init__("Could not get Simulator window bounds. Is Simulator running?")
