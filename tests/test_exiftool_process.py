"""
Tests for ExifToolProcess supervision.

Author: Michael Economou
Date: 2026-02-10
"""

from __future__ import annotations

import io
import subprocess
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from exifgate.errors import WorkerLaunchError
from exifgate.infra.external.exiftool_process import ExifToolProcess, build_launch_args
from exifgate.infra.filesystem.permissions import WindowsAclPermissionPolicy
from exifgate.infra.filesystem.secure_workspace import SecureWorkspace

PROCESS_MODULE = "exifgate.infra.external.exiftool_process"


class NullPolicy:
    def secure_directory(self, path: Path) -> None:
        pass

    def secure_file(self, path: Path) -> None:
        pass

    def secure_executable(self, path: Path) -> None:
        pass


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    ws = SecureWorkspace(policy=NullPolicy())
    yield ws
    ws.destroy()


def fake_popen(pid: int = 4242) -> MagicMock:
    proc = MagicMock()
    proc.pid = pid
    proc.stdin = io.StringIO()
    proc.stdout = io.StringIO()
    proc.poll.return_value = None
    proc.wait.return_value = 0
    proc.returncode = 0
    return proc


class TestLaunch:
    """Starting the worker."""

    def test_launch_args(self) -> None:
        assert build_launch_args("exiftool") == ["exiftool", "-stay_open", "True", "-@", "-"]

    def test_start_uses_command_and_pipes(self, workspace) -> None:
        proc = fake_popen()
        with patch("subprocess.Popen", return_value=proc) as mock_popen:
            supervisor = ExifToolProcess(workspace, command="exiftool")
            protocol = supervisor.start()

        args, kwargs = mock_popen.call_args
        assert args[0] == ["exiftool", "-stay_open", "True", "-@", "-"]
        assert kwargs["stdin"] == subprocess.PIPE
        assert kwargs["stdout"] == subprocess.PIPE
        assert kwargs["text"] is True
        assert protocol is supervisor.protocol
        assert supervisor.extracted_binary is None

    def test_missing_executable_on_posix_fails(self, workspace) -> None:
        with patch(f"{PROCESS_MODULE}.is_windows", return_value=False):
            supervisor = ExifToolProcess(workspace, command="definitely-not-exiftool-4f1c")
            with pytest.raises(WorkerLaunchError, match="PATH") as exc_info:
                supervisor.start()

        assert isinstance(exc_info.value.__cause__, OSError)
        assert supervisor.process is None


class TestWindowsFallback:
    """Embedded binary extraction when exiftool is not on PATH."""

    def test_extracts_and_relaunches(self, workspace, tmp_path) -> None:
        bundled = tmp_path / "bundled_exiftool.exe"
        bundled.write_bytes(b"MZ fake windows binary")
        proc = fake_popen()

        with (
            patch(f"{PROCESS_MODULE}.is_windows", return_value=True),
            patch(
                "subprocess.Popen", side_effect=[FileNotFoundError("exiftool"), proc]
            ) as mock_popen,
        ):
            supervisor = ExifToolProcess(workspace, bundled_binary=bundled)
            supervisor.start()

        extracted = supervisor.extracted_binary
        assert extracted is not None
        assert extracted.parent == workspace.path
        assert extracted.suffix == ".exe"
        assert extracted.read_bytes() == bundled.read_bytes()
        assert mock_popen.call_args_list[1][0][0][0] == str(extracted)

    def test_extracted_binary_keeps_execute_right(self, tmp_path, monkeypatch) -> None:
        """The ACL on the extracted exe lets the owner run it."""
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
        bundled = tmp_path / "bundled_exiftool.exe"
        bundled.write_bytes(b"MZ")

        with (
            patch(f"{PROCESS_MODULE}.is_windows", return_value=True),
            patch("subprocess.run") as mock_run,
            patch("subprocess.Popen", side_effect=[FileNotFoundError("exiftool"), fake_popen()]),
        ):
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
            ws = SecureWorkspace(policy=WindowsAclPermissionPolicy(user="alice"))
            supervisor = ExifToolProcess(ws, bundled_binary=bundled)
            supervisor.start()

        grants = {call.args[0][1]: call.args[0][-1] for call in mock_run.call_args_list}
        assert grants[str(ws.path)] == "alice:(OI)(CI)F"
        assert grants[str(supervisor.extracted_binary)] == "alice:(RX,W)"
        ws.destroy()

    def test_extraction_failure_wraps_original_cause(self, workspace, tmp_path) -> None:
        original = FileNotFoundError("exiftool")
        with (
            patch(f"{PROCESS_MODULE}.is_windows", return_value=True),
            patch("subprocess.Popen", side_effect=original),
        ):
            supervisor = ExifToolProcess(workspace, bundled_binary=tmp_path / "missing.exe")
            with pytest.raises(WorkerLaunchError, match="embedded") as exc_info:
                supervisor.start()

        assert exc_info.value.__cause__ is original
        assert list(workspace.path.iterdir()) == []

    def test_relaunch_failure_wraps_original_cause(self, workspace, tmp_path) -> None:
        bundled = tmp_path / "bundled_exiftool.exe"
        bundled.write_bytes(b"MZ")
        original = FileNotFoundError("exiftool")

        with (
            patch(f"{PROCESS_MODULE}.is_windows", return_value=True),
            patch("subprocess.Popen", side_effect=[original, PermissionError("blocked")]),
        ):
            supervisor = ExifToolProcess(workspace, bundled_binary=bundled)
            with pytest.raises(WorkerLaunchError) as exc_info:
                supervisor.start()

        assert exc_info.value.__cause__ is original

    def test_stop_deletes_extracted_binary(self, workspace, tmp_path) -> None:
        bundled = tmp_path / "bundled_exiftool.exe"
        bundled.write_bytes(b"MZ")
        proc = fake_popen()

        with (
            patch(f"{PROCESS_MODULE}.is_windows", return_value=True),
            patch("subprocess.Popen", side_effect=[FileNotFoundError("exiftool"), proc]),
        ):
            supervisor = ExifToolProcess(workspace, bundled_binary=bundled)
            supervisor.start()

        supervisor.stop(grace_period=0, wait_timeout=1)

        assert not supervisor.extracted_binary.exists()


class TestStop:
    """Shutdown sequence."""

    def _started(self, workspace, proc: MagicMock) -> ExifToolProcess:
        with patch("subprocess.Popen", return_value=proc):
            supervisor = ExifToolProcess(workspace)
            supervisor.start()
        return supervisor

    def test_sends_exit_then_sleeps_then_waits(self, workspace) -> None:
        proc = fake_popen()
        stdin = MagicMock()
        proc.stdin = stdin
        supervisor = self._started(workspace, proc)
        calls = []
        stdin.write.side_effect = lambda text: calls.append(("write", text))
        proc.wait.side_effect = lambda timeout: calls.append(("wait", timeout))

        with patch(f"{PROCESS_MODULE}.time.sleep", side_effect=lambda s: calls.append(("sleep", s))):
            supervisor.stop(grace_period=5.0, wait_timeout=30.0)

        assert calls == [("write", "-stay_open\nFalse\n"), ("sleep", 5.0), ("wait", 30.0)]

    def test_timeout_without_kill_leaves_process(self, workspace) -> None:
        proc = fake_popen()
        proc.wait.side_effect = subprocess.TimeoutExpired("exiftool", 1)
        supervisor = self._started(workspace, proc)

        with patch.object(ExifToolProcess, "_kill_tree") as mock_kill:
            supervisor.stop(grace_period=0, wait_timeout=1, kill_on_timeout=False)

        mock_kill.assert_not_called()
        proc.kill.assert_not_called()

    def test_timeout_with_kill_kills_tree(self, workspace) -> None:
        proc = fake_popen(pid=777)
        proc.wait.side_effect = subprocess.TimeoutExpired("exiftool", 1)
        supervisor = self._started(workspace, proc)

        with patch.object(ExifToolProcess, "_kill_tree") as mock_kill:
            supervisor.stop(grace_period=0, wait_timeout=1, kill_on_timeout=True)

        mock_kill.assert_called_once_with(777)

    def test_broken_pipe_on_exit_is_swallowed(self, workspace) -> None:
        proc = fake_popen()
        proc.stdin = MagicMock()
        proc.stdin.write.side_effect = BrokenPipeError()
        supervisor = self._started(workspace, proc)

        supervisor.stop(grace_period=0, wait_timeout=1)

        proc.wait.assert_called_once()

    def test_stop_is_idempotent(self, workspace) -> None:
        proc = fake_popen()
        supervisor = self._started(workspace, proc)

        supervisor.stop(grace_period=0, wait_timeout=1)
        supervisor.stop(grace_period=0, wait_timeout=1)

        proc.wait.assert_called_once()

    def test_stop_before_start(self, workspace) -> None:
        ExifToolProcess(workspace).stop(grace_period=0, wait_timeout=1)


@pytest.mark.posix_only
class TestWithFakeWorker:
    """Real subprocess using the fake stay-open exiftool."""

    def test_start_and_graceful_stop(self, workspace, fake_exiftool) -> None:
        supervisor = ExifToolProcess(workspace, command=fake_exiftool)
        supervisor.start()
        assert supervisor.is_running()

        health = supervisor.health_check()
        assert health["process_alive"] is True
        assert health["pid"] == supervisor.process.pid

        supervisor.stop(grace_period=0, wait_timeout=5)

        assert supervisor.process.returncode == 0
        assert not supervisor.is_running()

    def test_kill_tree_terminates_process(self, workspace, fake_exiftool) -> None:
        supervisor = ExifToolProcess(workspace, command=fake_exiftool)
        supervisor.start()

        ExifToolProcess._kill_tree(supervisor.process.pid)
        supervisor.process.wait(timeout=5)

        assert not supervisor.is_running()

    def test_health_check_before_start(self, workspace) -> None:
        health = ExifToolProcess(workspace).health_check()
        assert health["process_alive"] is False
        assert health["process_status"] == "not started"
