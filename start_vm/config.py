# --- Global Configuration & Defaults ---

from pathlib import Path

# The source checkout this package lives in, when run from one (bin/ scripts,
# editable installs). An installed copy sits in site-packages instead.
CHECKOUT_ROOT = Path(__file__).resolve().parent.parent
# A file present at the top of a checkout but never in site-packages.
CHECKOUT_MARKER = "pyproject.toml"
# Explicit directory to share with the guest; wins over everything else.
REPO_ROOT_ENV = "START_VM_REPO"
# Firmware used by the arm64 'virt' machine unless --efi is given, relative to the shared repo.
FIRMWARE_RELATIVE_PATH = Path("efi") / "QEMU_EFI.fd"
# Base working directory; overridable via the QEMU_BASE_DIR environment variable.
DEFAULT_BASE_DIR = Path.home() / "_qemu_vm"
BASE_DIR_ENV = "QEMU_BASE_DIR"

# Prefix for generated VM names; a timestamp is appended.
NAME_PREFIX = "test"
NAME_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
# The default amount of RAM, in megabytes.
MEMORY_MB = 4096
# The default number of virtual CPU cores for the guest system.
CPU_COUNT = 2
# Host port forwarded to the guest's SSH port.
SSH_PORT = 2222
GUEST_SSH_PORT = 22

# --- Emulator Binaries ---

# Candidate QEMU binaries per architecture, tried in order on PATH.
EMULATOR_BINARIES = {
    "x86_64": ["qemu-system-x86_64"],
    "arm64": ["qemu-system-aarch64"],
}

# Package manager hints shown when no emulator binary is found.
INSTALL_HINTS = {
    ("linux", "x86_64"): "sudo apt install qemu-kvm qemu-utils",
    ("linux", "arm64"): "sudo apt install qemu-system-aarch64 qemu-utils",
    ("macos", "x86_64"): "brew install qemu",
    ("macos", "arm64"): "brew install qemu",
}

# --- Device Configuration ---

# Disk image format and caching mode for the virtio block device.
DISK_FORMAT = "qcow2"
DISK_INTERFACE = "virtio"
DISK_CACHE = "writeback"
# The virtual USB controller model.
USB_CONTROLLER = "qemu-xhci"
# The virtual keyboard device.
KEYBOARD_DEVICE = "usb-kbd"
# The virtual tablet device, for accurate cursor tracking.
MOUSE_DEVICE = "usb-tablet"
# The CPU model; 'host' passes through the host CPU features.
CPU_MODEL = "host"
# Graphics for x86_64 guests.
X86_VGA_TYPE = "virtio"
# Machine type and graphics for arm64 guests.
ARM_MACHINE_TYPE = "virt,highmem=on"
ARM_GPU_DEVICE = "virtio-gpu-pci"

# Display backend per host OS family.
DISPLAY_TYPES = {
    "linux": "gtk,grab-on-hover=on",
    "macos": "cocoa",
}

# --- Network Configuration ---

# The network backend mode for QEMU user-mode networking (SLIRP/NAT).
NETWORK_MODE = "user"
NETWORK_ID = "net0"
NETWORK_DEVICE = f"virtio-net-pci,netdev={NETWORK_ID}"

# --- Directory Sharing Configuration ---
VIRTFS_SECURITY_MODEL = "mapped-xattr"
MOUNT_TAG = "pcsetup"
GUEST_MOUNT_POINT = "/mnt/pcsetup"

# --- Installer ---

# Emulators whose presence means QEMU is already installed.
INSTALLED_EMULATORS = ["qemu-system-aarch64", "qemu-system-x86_64"]
# Emulators listed after installation.
REPORTED_EMULATORS = ["qemu-system-aarch64", "qemu-system-arm", "qemu-system-x86_64"]
# The command for the Homebrew package manager.
BREW_EXECUTABLE = "brew"

# Package commands per /etc/os-release ID; prefixed with sudo when not root.
_APT_PACKAGES = ["qemu-system-aarch64", "qemu-system-arm", "qemu-system-x86", "qemu-utils", "qemu-efi-aarch64"]
LINUX_INSTALL_PLANS = {
    "ubuntu": [["apt", "update"], ["apt", "install", "-y"] + _APT_PACKAGES],
    "debian": [["apt", "update"], ["apt", "install", "-y"] + _APT_PACKAGES],
    "fedora": [["dnf", "install", "-y", "qemu-system-aarch64", "qemu-system-arm", "qemu-system-x86"]],
    "arch": [["pacman", "-Sy", "--noconfirm", "qemu", "qemu-arch-extra"]],
}
