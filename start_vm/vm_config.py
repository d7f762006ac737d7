import argparse
import logging
import os
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from . import config as app_config
from .errors import (
    EmulatorNotInstalled,
    FirmwareMissing,
    HelpRequested,
    ImageNotFound,
    InvalidValue,
    MissingValue,
    UnknownOption,
    UsageError,
)
from .host import Architecture, emulator_candidates, find_emulator, install_hint

logger = logging.getLogger(__name__)

HELP_OPTIONS = ("-h", "--help")
# Options that consume the following token.
VALUE_OPTIONS = ("-n", "--name", "-m", "--memory", "-c", "--cpus", "-p", "--ssh-port", "--efi")


@dataclass(frozen=True)
class Settings:
    """Process environment captured once at startup."""
    repo_root: Path
    base_dir: Path
    default_firmware: Path


@dataclass(frozen=True)
class LaunchConfig:
    name: str
    memory_mb: int
    cpu_count: int
    ssh_port: int
    disk_image: Optional[Path]
    firmware_path: Optional[Path]
    shared_dir: Path


def resolve_repo_root(environ, cwd=None):
    """
    Picks the host directory shared with the guest.

    START_VM_REPO wins; otherwise the checkout this package runs from, if
    there is one; otherwise the current working directory.
    """
    explicit = environ.get(app_config.REPO_ROOT_ENV)
    if explicit:
        return Path(explicit).expanduser()
    if (app_config.CHECKOUT_ROOT / app_config.CHECKOUT_MARKER).is_file():
        return app_config.CHECKOUT_ROOT
    return Path.cwd() if cwd is None else cwd


def load_settings(environ=None, cwd=None):
    """Builds Settings from the environment, honouring QEMU_BASE_DIR and START_VM_REPO."""
    environ = os.environ if environ is None else environ
    base_dir = environ.get(app_config.BASE_DIR_ENV)
    repo_root = resolve_repo_root(environ, cwd)
    settings = Settings(
        repo_root=repo_root,
        base_dir=Path(base_dir) if base_dir else app_config.DEFAULT_BASE_DIR,
        default_firmware=repo_root / app_config.FIRMWARE_RELATIVE_PATH,
    )
    logger.debug("Settings: %s", settings)
    return settings


def resolve_defaults(settings, now=None):
    """Returns the LaunchConfig used when no options are given."""
    now = datetime.now() if now is None else now
    return LaunchConfig(
        name=f"{app_config.NAME_PREFIX}-{now.strftime(app_config.NAME_TIMESTAMP_FORMAT)}",
        memory_mb=app_config.MEMORY_MB,
        cpu_count=app_config.CPU_COUNT,
        ssh_port=app_config.SSH_PORT,
        disk_image=None,
        firmware_path=settings.default_firmware,
        shared_dir=settings.repo_root,
    )


# --- Option Parsing ---

def _positive_int(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got '{text}'")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got '{text}'")
    return value


def _port_number(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a port number, got '{text}'")
    if not 1 <= value <= 65535:
        raise argparse.ArgumentTypeError(f"port must be between 1 and 65535, got {value}")
    return value


class _OverrideParser(argparse.ArgumentParser):
    """An ArgumentParser that raises instead of printing and exiting."""

    def error(self, message):
        raise UsageError(message)


def _build_override_parser():
    parser = _OverrideParser(prog="start-vm", add_help=False, allow_abbrev=False, exit_on_error=False)
    parser.add_argument("-n", "--name", dest="name", default=argparse.SUPPRESS)
    parser.add_argument("-m", "--memory", dest="memory_mb", type=_positive_int, default=argparse.SUPPRESS)
    parser.add_argument("-c", "--cpus", dest="cpu_count", type=_positive_int, default=argparse.SUPPRESS)
    parser.add_argument("-p", "--ssh-port", dest="ssh_port", type=_port_number, default=argparse.SUPPRESS)
    parser.add_argument("--efi", dest="firmware_path", type=Path, default=argparse.SUPPRESS)
    return parser


def apply_overrides(config, args):
    """
    Overlays the options in `args` onto `config`.

    Only options present in `args` replace fields; everything else keeps the
    value it had in `config`.

    Raises:
        HelpRequested: if -h/--help is present.
        MissingValue: if an option expecting a value is the last token, or
                      is directly followed by another option.
        UnknownOption: on any token the parser does not recognize.
        InvalidValue: if a numeric option is out of range.
    """
    args = list(args)
    if any(arg in HELP_OPTIONS for arg in args):
        raise HelpRequested()
    if args and args[-1] in VALUE_OPTIONS:
        raise MissingValue(args[-1])

    parser = _build_override_parser()
    try:
        namespace, extras = parser.parse_known_args(args)
    except argparse.ArgumentError as err:
        if err.message == "expected one argument":
            raise MissingValue(err.argument_name) from err
        raise InvalidValue(str(err)) from err

    if extras:
        raise UnknownOption(extras[0])

    overrides = vars(namespace)
    if overrides:
        logger.debug("Applying overrides: %s", overrides)
    return replace(config, **overrides)


# --- Validation ---

def validate(config, host, settings=None):
    """
    Checks every prerequisite for launching `config` on `host`.

    `settings` supplies the default firmware location named in the
    FirmwareMissing hint; without it the configured path is named.

    Returns:
        The path of the emulator binary to run.

    Raises:
        ImageNotFound, EmulatorNotInstalled, FirmwareMissing
    """
    image = config.disk_image
    if image is None or not image.is_file():
        raise ImageNotFound(f"Image not found: {image}")
    if not os.access(image, os.R_OK):
        raise ImageNotFound(f"Image is not readable: {image}")

    emulator = find_emulator(host)
    if emulator is None:
        names = ", ".join(emulator_candidates(host))
        raise EmulatorNotInstalled(
            f"{names} not found. Install QEMU first:\n  {install_hint(host)}"
        )

    if host.architecture is Architecture.ARM64:
        firmware = config.firmware_path
        if firmware is None or not firmware.is_file():
            default = settings.default_firmware if settings is not None else firmware
            raise FirmwareMissing(
                f"UEFI firmware not found: {firmware}\n"
                f"Provide it via --efi <path> or place it at: {default}"
            )

    return emulator
