import io
from datetime import datetime
from pathlib import Path

import pytest

from start_vm.host import Architecture, HostProfile, OsFamily
from start_vm.report import Reporter
from start_vm.vm_config import Settings, resolve_defaults


class ScriptedReporter(Reporter):
    """A Reporter writing to in-memory streams with a canned confirmation answer."""

    def __init__(self, answer=True):
        super().__init__(out=io.StringIO(), err=io.StringIO())
        self.answer = answer
        self.questions = []

    def confirm(self, question):
        self.questions.append(question)
        return self.answer

    @property
    def stdout(self):
        return self.out.getvalue()

    @property
    def stderr(self):
        return self.err.getvalue()


@pytest.fixture
def reporter():
    return ScriptedReporter()


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a temporary checkout."""
    return Settings(
        repo_root=tmp_path / "repo",
        base_dir=tmp_path / "base",
        default_firmware=tmp_path / "repo" / "efi" / "QEMU_EFI.fd",
    )


@pytest.fixture
def defaults(settings):
    return resolve_defaults(settings, now=datetime(2026, 1, 2, 3, 4, 5))


@pytest.fixture
def disk_image(tmp_path):
    image = tmp_path / "disk.qcow2"
    image.write_bytes(b"QFI\xfb")
    return image


@pytest.fixture
def qemu_on_path(monkeypatch):
    """Pretends every qemu-system-* binary is installed under /usr/bin."""
    monkeypatch.setattr("start_vm.host.shutil.which", lambda name: f"/usr/bin/{name}")


@pytest.fixture
def no_qemu(monkeypatch):
    monkeypatch.setattr("start_vm.host.shutil.which", lambda name: None)


LINUX_X86 = HostProfile(OsFamily.LINUX, Architecture.X86_64)
MACOS_X86 = HostProfile(OsFamily.MACOS, Architecture.X86_64)
LINUX_ARM = HostProfile(OsFamily.LINUX, Architecture.ARM64)
MACOS_ARM = HostProfile(OsFamily.MACOS, Architecture.ARM64)
