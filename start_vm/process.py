import logging
import subprocess

from .arguments import format_command, to_argv
from .errors import EmulatorNotInstalled

logger = logging.getLogger(__name__)

# Shells report death by signal N as status 128 + N.
SIGNAL_EXIT_BASE = 128


def exit_status(returncode):
    """Converts a Popen return code into the status a shell would report."""
    if returncode < 0:
        return SIGNAL_EXIT_BASE - returncode
    return returncode


def launch(emulator, arguments):
    """
    Runs the emulator in the foreground and waits for it to exit.

    The emulator inherits the terminal. The raw Popen return code is
    returned, negative when the emulator was killed by a signal; pass it
    through exit_status() before handing it to sys.exit().
    """
    argv = to_argv(emulator, arguments)
    logger.debug("Starting QEMU with the following command:\n%s", format_command(argv))

    try:
        process = subprocess.Popen(argv)
    except FileNotFoundError as e:
        raise EmulatorNotInstalled(f"QEMU executable '{emulator}' not found.") from e

    returncode = process.wait()
    logger.debug("QEMU exited with status %d", returncode)
    return returncode
