import subprocess

import pytest

from start_vm.errors import InstallError
from start_vm.install import describe_architecture, install_plan, run

from conftest import ScriptedReporter


class RecordingRunner:
    """Stands in for subprocess.run."""

    def __init__(self, fail_on=None):
        self.commands = []
        self.fail_on = fail_on

    def __call__(self, command, check):
        self.commands.append(command)
        if self.fail_on and self.fail_on in command:
            raise subprocess.CalledProcessError(100, command)
        return subprocess.CompletedProcess(command, 0)


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def installed(monkeypatch):
    """Simulates which binaries are on PATH; tests add names to the returned set."""
    names = set()
    monkeypatch.setattr("start_vm.install.shutil.which",
                        lambda name: f"/usr/bin/{name}" if name in names else None)
    return names


@pytest.fixture
def os_release(monkeypatch):
    def _set(distribution):
        monkeypatch.setattr("start_vm.install.platform.freedesktop_os_release", lambda: {"ID": distribution})
    return _set


@pytest.fixture
def as_user(monkeypatch):
    monkeypatch.setattr("start_vm.install.os.geteuid", lambda: 1000)


@pytest.mark.parametrize("machine, expected", [
    ("x86_64", "x86_64"),
    ("amd64", "x86_64"),
    ("arm64", "ARM64 (AArch64)"),
    ("aarch64", "ARM64 (AArch64)"),
    ("mips", "Unknown (mips)"),
])
def test_describe_architecture(machine, expected):
    assert describe_architecture(machine) == expected


class TestInstallPlan:
    """Tests for choosing the package commands."""

    @pytest.mark.parametrize("distribution", ["ubuntu", "debian"])
    def test_apt(self, as_user, distribution):
        plan = install_plan("Linux", distribution)
        assert plan[0] == ["sudo", "apt", "update"]
        assert plan[1][:4] == ["sudo", "apt", "install", "-y"]
        assert "qemu-efi-aarch64" in plan[1]

    def test_fedora(self, as_user):
        assert install_plan("Linux", "fedora") == [
            ["sudo", "dnf", "install", "-y", "qemu-system-aarch64", "qemu-system-arm", "qemu-system-x86"],
        ]

    def test_arch(self, as_user):
        assert install_plan("Linux", "arch") == [["sudo", "pacman", "-Sy", "--noconfirm", "qemu", "qemu-arch-extra"]]

    def test_no_sudo_as_root(self, monkeypatch):
        monkeypatch.setattr("start_vm.install.os.geteuid", lambda: 0)
        assert install_plan("Linux", "arch")[0][0] == "pacman"

    def test_macos(self, installed):
        installed.add("brew")
        assert install_plan("Darwin") == [["/usr/bin/brew", "install", "qemu"]]

    def test_macos_without_homebrew(self, installed):
        with pytest.raises(InstallError, match="Homebrew"):
            install_plan("Darwin")

    def test_unsupported_distribution(self):
        with pytest.raises(InstallError, match="gentoo"):
            install_plan("Linux", "gentoo")

    def test_unsupported_os(self):
        with pytest.raises(InstallError, match="Windows"):
            install_plan("Windows")

    def test_unreadable_os_release(self, monkeypatch):
        def missing():
            raise OSError("no os-release")
        monkeypatch.setattr("start_vm.install.platform.freedesktop_os_release", missing)
        with pytest.raises(InstallError, match="Cannot detect"):
            install_plan("Linux")


class TestRun:
    """End-to-end installer runs with package managers replaced by a recorder."""

    def test_already_installed(self, installed, runner):
        installed.add("qemu-system-x86_64")
        reporter = ScriptedReporter()
        assert run([], reporter=reporter, system="Linux", machine="x86_64", runner=runner) == 0
        assert "QEMU already installed" in reporter.stdout
        assert runner.commands == []

    def test_installs_on_fedora(self, installed, os_release, as_user, runner):
        os_release("fedora")
        reporter = ScriptedReporter()
        assert run([], reporter=reporter, system="Linux", machine="aarch64", runner=runner) == 0
        assert runner.commands[0][:3] == ["sudo", "dnf", "install"]
        assert "Linux distribution: fedora" in reporter.stdout
        assert "CPU architecture detected: ARM64 (AArch64)" in reporter.stdout
        assert "[OK] Setup complete" in reporter.stdout

    def test_installs_with_homebrew(self, installed, runner):
        installed.add("brew")
        reporter = ScriptedReporter()
        assert run([], reporter=reporter, system="Darwin", machine="arm64", runner=runner) == 0
        assert runner.commands == [["/usr/bin/brew", "install", "qemu"]]
        assert "QEMU installed on macOS" in reporter.stdout

    def test_failing_package_manager(self, installed, os_release, as_user):
        os_release("ubuntu")
        runner = RecordingRunner(fail_on="install")
        reporter = ScriptedReporter()
        assert run([], reporter=reporter, system="Linux", machine="x86_64", runner=runner) == 1
        assert len(runner.commands) == 2
        assert "status 100" in reporter.stderr
        assert "Setup complete" not in reporter.stdout

    def test_unsupported_os(self, installed, runner):
        reporter = ScriptedReporter()
        assert run([], reporter=reporter, system="Windows", machine="x86_64", runner=runner) == 1
        assert "Unsupported operating system: Windows" in reporter.stderr

    def test_help(self, runner):
        reporter = ScriptedReporter()
        assert run(["--help"], reporter=reporter, system="Linux", machine="x86_64", runner=runner) == 0
        assert "Usage: install-qemu" in reporter.stdout
        assert runner.commands == []

    def test_unknown_option(self, installed, runner):
        reporter = ScriptedReporter()
        assert run(["--force"], reporter=reporter, system="Linux", machine="x86_64", runner=runner) == 1
        assert "Unknown option: --force" in reporter.stderr
