import shlex
from typing import NamedTuple, Optional

from . import config as app_config
from .host import Architecture, OsFamily


class Argument(NamedTuple):
    """One emulator flag and its value; `value` is None for bare switches."""
    flag: str
    value: Optional[str] = None


def _common_arguments(config):
    """Arguments shared by every architecture."""
    return (
        Argument("-name", config.name),
        Argument("-m", str(config.memory_mb)),
        Argument("-smp", f"{config.cpu_count},cores={config.cpu_count}"),
        Argument("-drive", f"file={config.disk_image},format={app_config.DISK_FORMAT},"
                           f"if={app_config.DISK_INTERFACE},cache={app_config.DISK_CACHE}"),
        Argument("-netdev", f"{app_config.NETWORK_MODE},id={app_config.NETWORK_ID},"
                            f"hostfwd=tcp::{config.ssh_port}-:{app_config.GUEST_SSH_PORT}"),
        Argument("-device", app_config.NETWORK_DEVICE),
        Argument("-device", app_config.USB_CONTROLLER),
        Argument("-device", app_config.KEYBOARD_DEVICE),
        Argument("-device", app_config.MOUSE_DEVICE),
        Argument("-virtfs", f"local,path={config.shared_dir},mount_tag={app_config.MOUNT_TAG},"
                            f"security_model={app_config.VIRTFS_SECURITY_MODEL},id={app_config.MOUNT_TAG}"),
    )


def _display(host):
    return Argument("-display", app_config.DISPLAY_TYPES[host.os_family.value])


def _x86_64_arguments(config, host):
    args = (
        Argument("-cpu", app_config.CPU_MODEL),
        Argument("-vga", app_config.X86_VGA_TYPE),
    )
    if host.os_family is OsFamily.LINUX:
        accel = (Argument("-enable-kvm"),)
    else:
        accel = (Argument("-accel", "hvf"),)
    return args + accel + (_display(host),)


def _arm64_arguments(config, host):
    accel = "kvm" if host.os_family is OsFamily.LINUX else "hvf"
    return (
        Argument("-machine", app_config.ARM_MACHINE_TYPE),
        Argument("-accel", accel),
        Argument("-cpu", app_config.CPU_MODEL),
        Argument("-bios", str(config.firmware_path)),
        Argument("-device", app_config.ARM_GPU_DEVICE),
        _display(host),
    )


_ARCH_ARGUMENTS = {
    Architecture.X86_64: _x86_64_arguments,
    Architecture.ARM64: _arm64_arguments,
}


def build_arguments(config, host):
    """
    Assembles the emulator arguments for a validated config.

    The result depends only on `config` and `host`; calling this twice with
    the same inputs yields the same tuple.
    """
    try:
        arch_arguments = _ARCH_ARGUMENTS[host.architecture]
    except KeyError:
        raise ValueError(f"No argument layout for architecture {host.architecture}") from None
    return _common_arguments(config) + arch_arguments(config, host)


def to_argv(emulator, arguments):
    """Flattens an argument tuple into a command line for `emulator`."""
    argv = [emulator]
    for argument in arguments:
        argv.append(argument.flag)
        if argument.value is not None:
            argv.append(argument.value)
    return argv


def format_command(argv):
    """Renders a command line one flag per line, shell-quoted."""
    lines = [shlex.quote(argv[0])]
    current = []
    for arg in argv[1:]:
        if arg.startswith("-") and current:
            lines.append("    " + " ".join(current))
            current = []
        current.append(shlex.quote(arg))
    if current:
        lines.append("    " + " ".join(current))
    return " \\\n".join(lines)
