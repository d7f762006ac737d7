import logging
import sys
from dataclasses import replace
from enum import Enum, auto
from pathlib import Path

from . import config as app_config
from .arguments import build_arguments
from .errors import HelpRequested, LaunchError, UsageError
from .host import Architecture, detect_host
from .logging_utils import configure_logging
from .process import exit_status, launch
from .report import Reporter
from .vm_config import HELP_OPTIONS, apply_overrides, load_settings, resolve_defaults, validate

logger = logging.getLogger(__name__)

USAGE = """\
start-vm - Boot a VM from an existing disk image (no cloning)

Usage:
  start-vm <image.qcow2> [options]

Positional:
  image.qcow2          Path to an existing qcow2 disk image to boot (required)

Options:
  -n, --name NAME      Name for the VM (default: test-<timestamp>)
  -m, --memory MB      Memory in MB (default: 4096)
  -c, --cpus N         Number of CPU cores (default: 2)
  -p, --ssh-port PORT  SSH port forwarding (default: 2222)
      --efi PATH       Path to EFI/UEFI firmware (QEMU_EFI.fd), arm64 only.
                       Default: ./efi/QEMU_EFI.fd (relative to repo root)
  -h, --help           Show this help message

Example:
  start-vm ~/vm-images/ubuntu.qcow2
  start-vm ~/vm-images/ubuntu.qcow2 -n mytest -m 8192
  start-vm ~/vm-images/ubuntu.qcow2 --efi ./efi/QEMU_EFI.fd
"""


class LaunchState(Enum):
    """Stages of a single start-vm run; a run only ever moves forward."""
    INIT = auto()
    DETECTING = auto()
    VALIDATING = auto()
    CONFIGURING = auto()
    CONFIRMING = auto()
    LAUNCHED = auto()
    TERMINAL = auto()


def _enter(state):
    logger.debug("State: %s", state.name)
    return state


def parse_command_line(argv, defaults):
    """
    Splits argv into the positional image path and options.

    The image path must come first. Returns `defaults` with the options and
    the image path applied.
    """
    argv = list(argv)
    if any(arg in HELP_OPTIONS for arg in argv):
        raise HelpRequested()
    if not argv or argv[0].startswith("-"):
        raise UsageError("Missing required positional argument: <image.qcow2>")

    image_path, options = argv[0], argv[1:]
    config = apply_overrides(defaults, options)
    return replace(config, disk_image=Path(image_path))


def _configuration_sections(config, host):
    system = [("Architecture", host.architecture.value), ("OS", host.os_family.value)]
    if host.architecture is Architecture.ARM64:
        system.append(("UEFI firmware", config.firmware_path))
    return [
        ("VM Configuration:", [
            ("Name", config.name),
            ("Memory", f"{config.memory_mb}MB"),
            ("CPUs", config.cpu_count),
            ("SSH Port", config.ssh_port),
        ]),
        ("Paths:", [
            ("Disk image", config.disk_image),
            ("Shared repo", config.shared_dir),
        ]),
        ("System:", system),
    ]


def _connection_sections(config):
    tag, mount_point = app_config.MOUNT_TAG, app_config.GUEST_MOUNT_POINT
    return [
        (None, [(None, f"SSH access (after boot):  ssh -p {config.ssh_port} user@localhost")]),
        ("Inside VM, mount the shared repo:", [
            (None, f"sudo mkdir -p {mount_point}"),
            (None, f"sudo mount -t 9p -o trans=virtio,version=9p2000.L {tag} {mount_point}"),
        ]),
    ]


def run(argv, reporter=None, environ=None, host=None, launcher=launch, now=None):
    """
    Runs one start-vm invocation and returns the process exit status.

    Args:
        argv: Command line arguments, without the program name.
        reporter: Output sink; a Reporter on stdout/stderr by default.
        environ: Environment mapping; os.environ by default.
        host: HostProfile to use instead of detecting one.
        launcher: Callable (emulator, arguments) -> Popen-style return code.
        now: Timestamp used for the default VM name.
    """
    reporter = reporter or Reporter()
    state = _enter(LaunchState.INIT)
    try:
        settings = load_settings(environ)
        config = parse_command_line(argv, resolve_defaults(settings, now))

        state = _enter(LaunchState.DETECTING)
        host = host or detect_host()
        reporter.info(f"Detecting system: {host}")

        state = _enter(LaunchState.VALIDATING)
        emulator = validate(config, host, settings)

        state = _enter(LaunchState.CONFIGURING)
        arguments = build_arguments(config, host)
    except HelpRequested:
        reporter.text(USAGE)
        return 0
    except UsageError as e:
        reporter.error(str(e))
        reporter.text(USAGE, file=reporter.err)
        return e.exit_code
    except LaunchError as e:
        reporter.error(str(e))
        logger.debug("Aborted in state %s: %s", state.name, e.label)
        return e.exit_code

    state = _enter(LaunchState.CONFIRMING)
    reporter.banner("Start VM From Existing Disk", _configuration_sections(config, host))
    if not reporter.confirm("Start this VM?"):
        reporter.info("Cancelled by user")
        _enter(LaunchState.TERMINAL)
        return 0

    reporter.banner(f"VM: {config.name}  |  Memory: {config.memory_mb}MB  |  CPUs: {config.cpu_count}",
                    _connection_sections(config))

    state = _enter(LaunchState.LAUNCHED)
    reporter.info("Starting VM...")
    try:
        returncode = launcher(emulator, arguments)
    except LaunchError as e:
        reporter.error(str(e))
        return e.exit_code
    finally:
        _enter(LaunchState.TERMINAL)

    if returncode == 0:
        reporter.ok("VM shut down")
    return exit_status(returncode)


def main():
    """Entry point for the start-vm command."""
    configure_logging()
    try:
        sys.exit(run(sys.argv[1:]))
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
