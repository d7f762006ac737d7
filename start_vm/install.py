import logging
import os
import platform
import shutil
import subprocess
import sys

from . import config as app_config
from .errors import InstallError, UnknownOption
from .logging_utils import configure_logging
from .report import Reporter

logger = logging.getLogger(__name__)

USAGE = """\
Usage: install-qemu

What this command does:
  - Detects your operating system
  - Detects your CPU architecture
  - Checks whether QEMU is already installed
  - Installs QEMU system emulators if missing

Supported OS:
  - macOS
  - Ubuntu / Debian
  - Fedora
  - Arch Linux

Supported architectures:
  - x86_64
  - arm64 / aarch64

Safe to re-run multiple times.
"""


def describe_architecture(machine):
    """Human readable name for a `uname -m` value."""
    if machine.lower() in ("x86_64", "amd64"):
        return "x86_64"
    if machine.lower() in ("arm64", "aarch64"):
        return "ARM64 (AArch64)"
    return f"Unknown ({machine})"


def have_qemu():
    return any(shutil.which(name) for name in app_config.INSTALLED_EMULATORS)


def _sudo():
    return ["sudo"] if os.geteuid() != 0 else []


def linux_distribution():
    """Returns the ID field of /etc/os-release."""
    try:
        os_release = platform.freedesktop_os_release()
    except OSError as e:
        raise InstallError("Cannot detect Linux distribution") from e
    return os_release.get("ID", "")


def install_plan(system, distribution=None):
    """
    Returns the list of commands that install QEMU on this host.

    Raises:
        InstallError: for an unsupported OS or distribution, or when
                      Homebrew is missing on macOS.
    """
    if system == "Darwin":
        brew = shutil.which(app_config.BREW_EXECUTABLE)
        if not brew:
            raise InstallError("Homebrew not found (https://brew.sh)")
        return [[brew, "install", "qemu"]]

    if system == "Linux":
        distribution = linux_distribution() if distribution is None else distribution
        commands = app_config.LINUX_INSTALL_PLANS.get(distribution)
        if commands is None:
            raise InstallError(f"Unsupported Linux distribution: {distribution or 'unknown'}")
        return [_sudo() + command for command in commands]

    raise InstallError(f"Unsupported operating system: {system or 'unknown'}")


def _run_commands(commands, runner):
    for command in commands:
        logger.debug("Running: %s", " ".join(command))
        try:
            runner(command, check=True)
        except FileNotFoundError as e:
            raise InstallError(f"Command not found: {command[0]}") from e
        except subprocess.CalledProcessError as e:
            raise InstallError(f"Command failed with status {e.returncode}: {' '.join(command)}") from e


def run(argv, reporter=None, system=None, machine=None, runner=subprocess.run):
    """Runs one install-qemu invocation and returns the process exit status."""
    reporter = reporter or Reporter()
    system = platform.system() if system is None else system
    machine = platform.machine() if machine is None else machine

    if any(arg in ("-h", "--help") for arg in argv):
        reporter.text(USAGE)
        return 0

    try:
        if argv:
            raise UnknownOption(argv[0])

        reporter.info("Detecting operating system and CPU architecture...")
        reporter.info(f"OS detected: {system}")
        reporter.info(f"CPU architecture detected: {describe_architecture(machine)}")

        if have_qemu():
            reporter.ok("QEMU already installed")
            return 0

        if system == "Linux":
            distribution = linux_distribution()
            reporter.info(f"Linux distribution: {distribution}")
            commands = install_plan(system, distribution)
        else:
            commands = install_plan(system)

        reporter.info(f"Installing QEMU on {'macOS' if system == 'Darwin' else 'Linux'}...")
        _run_commands(commands, runner)
        reporter.ok(f"QEMU installed on {'macOS' if system == 'Darwin' else 'Linux'}")
    except InstallError as e:
        reporter.error(str(e))
        return e.exit_code
    except UnknownOption as e:
        reporter.error(str(e))
        reporter.text(USAGE, file=reporter.err)
        return e.exit_code

    reporter.info("Available QEMU system emulators:")
    for name in app_config.REPORTED_EMULATORS:
        if shutil.which(name):
            reporter.text(f"  - {name}")

    reporter.ok("Setup complete")
    return 0


def main():
    """Entry point for the install-qemu command."""
    configure_logging()
    sys.exit(run(sys.argv[1:]))
