"""
Tests for bounded command execution and the local host wrapper.
"""
import os
import sys
import threading

from helpers.host import LocalHost, probe, run_bounded
from helpers.process import RC_NOT_FOUND, RC_TIMEOUT, get_evidence, run_cmd


def test_run_cmd_success():
    rc, stdout, stderr = run_cmd([sys.executable, "-c", "print('  hello  ')"])
    assert rc == 0
    assert stdout == "hello"
    assert stderr == ""


def test_run_cmd_missing_binary():
    rc, stdout, stderr = run_cmd(["definitely-not-a-real-tool-4711", "--version"])
    assert rc == RC_NOT_FOUND
    assert stdout == ""
    assert "FileNotFoundError" in stderr


def test_run_cmd_timeout():
    rc, _stdout, stderr = run_cmd([sys.executable, "-c", "import time; time.sleep(10)"], timeout_s=0.5)
    assert rc == RC_TIMEOUT
    assert "timed out" in stderr


def test_get_evidence():
    assert get_evidence(["git", "--version"], 0, "git version 2.43.0", "") == {
        "cmd": "git --version",
        "rc": 0,
        "stdout": "git version 2.43.0",
        "stderr": "",
    }


class TestLocalHost:
    def test_filesystem_queries(self, tmp_path):
        (tmp_path / "14.40").mkdir()
        (tmp_path / "14.44").mkdir()
        (tmp_path / "readme.txt").write_text("x", encoding="utf-8")
        host = LocalHost()

        assert host.list_dirs(str(tmp_path)) == ["14.40", "14.44"]
        assert host.list_dirs(str(tmp_path / "missing")) == []
        assert host.is_file(str(tmp_path / "readme.txt"))
        assert not host.is_file(str(tmp_path / "14.40"))
        assert host.is_dir(str(tmp_path / "14.40"))

    def test_getenv_treats_empty_as_unset(self, monkeypatch):
        monkeypatch.setenv("READINESS_TEST_VAR", "")
        assert LocalHost().getenv("READINESS_TEST_VAR") is None
        monkeypatch.setenv("READINESS_TEST_VAR", "value")
        assert LocalHost().getenv("READINESS_TEST_VAR") == "value"

    def test_which_current_interpreter(self):
        assert LocalHost().which(sys.executable) is not None
        assert LocalHost().which("definitely-not-a-real-tool-4711") is None

    def test_run_uses_timeout(self):
        host = LocalHost(command_timeout_s=0.5)
        rc, _out, _err = host.run([sys.executable, "-c", "import time; time.sleep(10)"])
        assert rc == RC_TIMEOUT


def test_probe_decorator_downgrades_faults():
    @probe
    def broken():
        raise PermissionError(os.strerror(13))

    result = broken()
    assert result.found is False
    assert result.error.startswith("PermissionError:")


class TestRunBounded:
    def test_collects_every_result(self):
        calls = {"a": lambda: 1, "b": lambda: 2, "c": lambda: 3}
        assert run_bounded(calls, 5, workers=2) == {"a": 1, "b": 2, "c": 3}

    def test_single_worker_keeps_order(self):
        seen = []
        calls = {key: (lambda k=key: seen.append(k)) for key in ("x", "y", "z")}
        run_bounded(calls, 5, workers=1)
        assert seen == ["x", "y", "z"]

    def test_late_and_queued_calls_are_dropped(self):
        release = threading.Event()
        started = []

        def slow():
            release.wait(5)
            return "late"

        calls = {"first": lambda: "ok", "slow": slow, "never": lambda: started.append(1)}
        try:
            assert run_bounded(calls, 0.2, workers=1) == {"first": "ok"}
        finally:
            release.set()
        # the queued call behind the hung one is not started afterwards
        assert not started

    def test_raising_call_is_omitted(self):
        def boom():
            raise OSError("no such device")

        assert run_bounded({"boom": boom, "fine": lambda: 7}, 5, workers=1) == {"fine": 7}

    def test_empty(self):
        assert run_bounded({}, 1) == {}
