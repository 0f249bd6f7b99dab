from __future__ import annotations

import subprocess
import sys
import time

import pytest

from castpair.core.errors import NeighborLaunchError, NeighborTimeoutError
from castpair.neighbors.arp import ArpCommandTable, select_neighbor_table


@pytest.mark.parametrize(
    ("platform_id", "name", "argv"),
    [
        ("win32", "windows", ("arp", "-a")),
        ("cygwin", "windows", ("arp", "-a")),
        ("linux", "linux", ("arp", "-n")),
        ("aix7", "linux", ("arp", "-n")),
        ("darwin", "bsd", ("arp", "-n")),
        ("freebsd14", "bsd", ("arp", "-n")),
    ],
)
def test_platform_selection(platform_id: str, name: str, argv: tuple[str, ...]) -> None:
    table = select_neighbor_table(platform_id)
    assert isinstance(table, ArpCommandTable)
    assert table.name == name
    assert table.argv == argv


def test_lookup_merges_stderr_and_passes_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen.update(kwargs)
        return subprocess.CompletedProcess(cmd, 0, stdout="? (10.0.0.2) at 11:22:33:44:55:66 [ether] on eth0\n")

    monkeypatch.setattr(subprocess, "run", fake_run)

    output = ArpCommandTable("linux", ["arp", "-n"]).lookup("10.0.0.2", timeout_s=1.5)

    assert "11:22:33:44:55:66" in output
    assert seen["cmd"] == ["arp", "-n", "10.0.0.2"]
    assert seen["stderr"] is subprocess.STDOUT
    assert seen["timeout"] == 1.5
    assert seen["check"] is False


def test_nonzero_exit_still_returns_output(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, stdout="10.0.0.2 (10.0.0.2) -- no entry\n")

    monkeypatch.setattr(subprocess, "run", fake_run)
    assert "no entry" in ArpCommandTable("bsd", ["arp", "-n"]).lookup("10.0.0.2", timeout_s=1.0)


def test_timeout_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(NeighborTimeoutError):
        ArpCommandTable("linux", ["arp", "-n"]).lookup("10.0.0.2", timeout_s=0.1)


def test_missing_binary_is_launch_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(NeighborLaunchError):
        ArpCommandTable("linux", ["arp", "-n"]).lookup("10.0.0.2", timeout_s=1.0)


def test_overrunning_command_is_killed_at_deadline() -> None:
    table = ArpCommandTable("slow", [sys.executable, "-c", "import sys, time; time.sleep(float(sys.argv[1]))"])

    started = time.monotonic()
    with pytest.raises(NeighborTimeoutError):
        table.lookup("5", timeout_s=0.3)

    assert time.monotonic() - started < 3


def test_real_command_stderr_is_captured() -> None:
    table = ArpCommandTable("noisy", [sys.executable, "-c", "import sys; sys.stderr.write('no entry for ' + sys.argv[1])"])

    assert table.lookup("10.0.0.2", timeout_s=10).strip() == "no entry for 10.0.0.2"
