"""
Tests for environment-driven engine configuration and the entry point.
"""
import logging

import pytest

import main
from core.config import EngineConfig, ToolchainConfig, setup_logging
from core.errors import ConfigError
from core.models import CheckRow, HardwareSummary, ProbeResult, RowSet, SystemSummary


def test_defaults():
    config = EngineConfig.from_env({})
    assert config.parallel is True
    assert config.toolchain.override_path is None
    assert config.supported_os_families == ("Windows 10", "Windows 11")
    assert config.toolchain.host_target_subpaths[0] == ("bin", "Hostx64", "x64")


def test_environment_overrides():
    config = EngineConfig.from_env({
        "READINESS_COMPILER_PATH": r"D:\tools\cl.exe",
        "READINESS_PROBE_TIMEOUT": "5",
        "READINESS_PARALLEL": "false",
        "READINESS_SUPPORTED_OS": "Windows 11, Windows Server 2022",
        "READINESS_SYSTEM_VOLUME": "D:\\",
        "READINESS_LOG_LEVEL": "debug",
    })
    assert config.toolchain.override_path == r"D:\tools\cl.exe"
    assert config.probe_timeout_s == 5.0
    assert config.parallel is False
    assert config.supported_os_families == ("Windows 11", "Windows Server 2022")
    assert config.system_volume == "D:\\"
    assert config.log.level == "debug"


@pytest.mark.parametrize("name, value", [
    ("READINESS_PROBE_TIMEOUT", "soon"),
    ("READINESS_COMMAND_TIMEOUT", "-1"),
    ("READINESS_MAX_WORKERS", "2.5"),
    ("READINESS_MAX_WORKERS", "0"),
])
def test_malformed_numbers_raise_config_error(name, value):
    with pytest.raises(ConfigError) as exc:
        EngineConfig.from_env({name: value})
    assert name in str(exc.value)


def test_blank_numbers_use_defaults():
    config = EngineConfig.from_env({"READINESS_PROBE_TIMEOUT": " ", "READINESS_MAX_WORKERS": ""})
    assert config.probe_timeout_s == 60.0
    assert config.max_workers == 8


def test_fixed_roots_cover_both_program_files():
    roots = ToolchainConfig().fixed_roots
    assert any("Program Files (x86)" in r for r in roots)
    assert any("Program Files" in r and "(x86)" not in r for r in roots)
    assert any("BuildTools" in r for r in roots) and any("Community" in r for r in roots)


def test_setup_logging_level(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    setup_logging(EngineConfig.from_env({"READINESS_LOG_LEVEL": "warning"}))
    setup_logging(EngineConfig.from_env({"READINESS_LOG_LEVEL": "chatty"}))

    assert calls[0]["level"] == logging.WARNING
    assert calls[0]["force"] is True
    assert "%(name)s" in calls[0]["format"]
    # unknown level names fall back to INFO
    assert calls[1]["level"] == logging.INFO


class TestMain:
    def _patch(self, monkeypatch, passed):
        rowset = RowSet(rows=(CheckRow("RAM (GB)", ">= 4", "8" if passed else "2", passed),))
        monkeypatch.setattr(main, "run", lambda catalog, config: rowset)
        monkeypatch.setattr(main, "setup_logging", lambda config: None)

    def test_exit_code_and_output(self, monkeypatch, tmp_path, capsys):
        self._patch(monkeypatch, passed=False)
        out = tmp_path / "report.txt"
        code = main.main(["--no-summary", "--output", str(out), "--json", str(tmp_path / "r.json")])

        assert code == 1
        assert "Overall: FAIL (0/1 checks passed)" in capsys.readouterr().out
        assert out.read_text(encoding="utf-8").startswith("Build Environment Readiness Report")
        assert (tmp_path / "r.json").exists()

    def test_passing_run(self, monkeypatch):
        self._patch(monkeypatch, passed=True)
        assert main.main(["--no-summary"]) == 0

    def test_bad_catalog(self, monkeypatch, tmp_path, capsys):
        self._patch(monkeypatch, passed=True)
        path = tmp_path / "catalog.json"
        path.write_text('[{"name": "x", "kind": "nope", "fact": "ram_gb", "threshold": 1}]', encoding="utf-8")
        assert main.main(["--catalog", str(path)]) == 2
        assert "unknown requirement kind" in capsys.readouterr().err

    def test_bad_environment(self, monkeypatch, capsys):
        self._patch(monkeypatch, passed=True)
        monkeypatch.setenv("READINESS_PROBE_TIMEOUT", "soon")
        assert main.main(["--no-summary"]) == 2
        assert "Invalid configuration: READINESS_PROBE_TIMEOUT" in capsys.readouterr().err

    def test_summaries_in_report(self, monkeypatch, capsys):
        self._patch(monkeypatch, passed=True)
        monkeypatch.setattr(main, "collect_summaries", lambda config: (
            SystemSummary(machine_name="BUILD-01"), HardwareSummary(cpu_name="Xeon"),
        ))
        assert main.main([]) == 0
        out = capsys.readouterr().out
        assert "BUILD-01" in out and "Xeon" in out


def test_probe_result_helpers():
    assert ProbeResult.absent("boom") == ProbeResult(found=False, error="boom")
    assert ProbeResult.present(4, "/x", "psutil").source == "psutil"
