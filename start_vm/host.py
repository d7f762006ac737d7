import logging
import platform
import shutil
from dataclasses import dataclass
from enum import Enum

from . import config as app_config
from .errors import UnsupportedPlatform

logger = logging.getLogger(__name__)


class OsFamily(Enum):
    """Host operating systems the launcher knows how to drive."""
    LINUX = "linux"
    MACOS = "macos"


class Architecture(Enum):
    """Host CPU architectures; guests always match the host."""
    X86_64 = "x86_64"
    ARM64 = "arm64"


_OS_NAMES = {
    "Linux": OsFamily.LINUX,
    "Darwin": OsFamily.MACOS,
}

_MACHINE_NAMES = {
    "x86_64": Architecture.X86_64,
    "amd64": Architecture.X86_64,
    "arm64": Architecture.ARM64,
    "aarch64": Architecture.ARM64,
}


@dataclass(frozen=True)
class HostProfile:
    os_family: OsFamily
    architecture: Architecture

    def __str__(self):
        return f"{self.os_family.value} / {self.architecture.value}"


def detect_host(system=None, machine=None):
    """
    Determines the host OS family and CPU architecture.

    Args:
        system: Kernel name as reported by `uname -s`; read from the
                running interpreter if omitted.
        machine: Machine type as reported by `uname -m`; read from the
                 running interpreter if omitted.

    Returns:
        A HostProfile.

    Raises:
        UnsupportedPlatform: if either value is not one we can launch on.
    """
    system = platform.system() if system is None else system
    machine = platform.machine() if machine is None else machine

    os_family = _OS_NAMES.get(system)
    if os_family is None:
        raise UnsupportedPlatform(f"Unsupported OS: {system or 'unknown'}")

    architecture = _MACHINE_NAMES.get(machine.lower())
    if architecture is None:
        raise UnsupportedPlatform(f"Unsupported architecture: {machine or 'unknown'}")

    host = HostProfile(os_family, architecture)
    logger.debug("Detected host %s (system=%r, machine=%r)", host, system, machine)
    return host


def emulator_candidates(host):
    """Returns the QEMU binary names to look for on this host, in order."""
    return list(app_config.EMULATOR_BINARIES[host.architecture.value])


def find_emulator(host):
    """Returns the path of the first emulator binary found on PATH, or None."""
    for name in emulator_candidates(host):
        path = shutil.which(name)
        if path:
            logger.debug("Found emulator %s at %s", name, path)
            return path
    return None


def install_hint(host):
    """Package manager command that provides the emulator on this host."""
    return app_config.INSTALL_HINTS[(host.os_family.value, host.architecture.value)]
