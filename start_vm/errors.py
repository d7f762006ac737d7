"""Errors reported to the operator before the emulator is started."""


class LaunchError(Exception):
    """Base class for failures that abort a run with a labeled message."""

    label = "Error"
    exit_code = 1


class UnsupportedPlatform(LaunchError):
    label = "Unsupported platform"


class UsageError(LaunchError):
    """A command line problem; the usage text is shown alongside the message."""

    label = "Usage error"


class UnknownOption(UsageError):
    label = "Unknown option"

    def __init__(self, option):
        self.option = option
        super().__init__(f"Unknown option: {option}")


class MissingValue(UsageError):
    label = "Missing value"

    def __init__(self, option):
        self.option = option
        super().__init__(f"Option {option} requires a value")


class InvalidValue(UsageError):
    label = "Invalid value"


class ImageNotFound(LaunchError):
    label = "Image not found"


class EmulatorNotInstalled(LaunchError):
    label = "Emulator not installed"


class FirmwareMissing(LaunchError):
    label = "Firmware missing"


class InstallError(LaunchError):
    label = "Install failed"


class HelpRequested(Exception):
    """Raised when -h/--help appears on the command line."""
