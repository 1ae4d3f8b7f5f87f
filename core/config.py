# core/config.py
# Engine configuration: immutable values passed into each run

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from core.errors import ConfigError

logger = logging.getLogger(__name__)

_PF = r"C:\Program Files"
_PF86 = r"C:\Program Files (x86)"


def _fixed_msvc_roots() -> tuple[str, ...]:
    roots = []
    for program_files, channel in ((_PF, "2022"), (_PF86, "2022"), (_PF86, "2019"), (_PF, "2019")):
        for edition in ("BuildTools", "Community", "Professional", "Enterprise", "Preview"):
            roots.append(os.path.join(program_files, "Microsoft Visual Studio", channel, edition,
                                      "VC", "Tools", "MSVC"))
    return tuple(roots)


def _env_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ConfigError(f"{name}={raw!r} is not a valid {cast.__name__}") from None
    if value <= 0:
        raise ConfigError(f"{name}={raw!r} must be greater than zero")
    return value


@dataclass(frozen=True)
class ToolchainConfig:
    override_path: Optional[str] = None
    binary_name: str = "cl.exe"
    installer_query_path: str = os.path.join(_PF86, "Microsoft Visual Studio", "Installer", "vswhere.exe")
    installer_component: str = "Microsoft.VisualStudio.Component.VC.Tools.x86.x64"
    # relative to an installation root reported by the installer query
    toolset_dir: tuple = ("VC", "Tools", "MSVC")
    env_var: str = "VCToolsInstallDir"
    fixed_roots: tuple = field(default_factory=_fixed_msvc_roots)
    # 64->64, 64->32, 32->32, in that order
    host_target_subpaths: tuple = (
        ("bin", "Hostx64", "x64"),
        ("bin", "Hostx64", "x86"),
        ("bin", "Hostx86", "x86"),
    )
    version_pattern: str = r"Version\s+(\d+(?:\.\d+)+)"


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class EngineConfig:
    probe_timeout_s: float = 60.0
    command_timeout_s: float = 10.0
    parallel: bool = True
    max_workers: int = 8
    supported_os_families: tuple = ("Windows 10", "Windows 11")
    system_volume: Optional[str] = None
    runtime_candidates: tuple = (("py", "-3"), ("python",), ("python3",))
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        env = os.environ if environ is None else environ

        toolchain = ToolchainConfig()
        override = env.get("READINESS_COMPILER_PATH")
        if override:
            toolchain = replace(toolchain, override_path=override)

        families = env.get("READINESS_SUPPORTED_OS", "")
        supported = tuple(f.strip() for f in families.split(",") if f.strip()) or cls.supported_os_families

        return cls(
            probe_timeout_s=_env_number(env, "READINESS_PROBE_TIMEOUT", 60.0, float),
            command_timeout_s=_env_number(env, "READINESS_COMMAND_TIMEOUT", 10.0, float),
            parallel=env.get("READINESS_PARALLEL", "true").lower() == "true",
            max_workers=_env_number(env, "READINESS_MAX_WORKERS", 8, int),
            supported_os_families=supported,
            system_volume=env.get("READINESS_SYSTEM_VOLUME") or None,
            toolchain=toolchain,
            log=LogConfig(level=env.get("READINESS_LOG_LEVEL", "INFO")),
        )


def setup_logging(config: Optional[EngineConfig] = None) -> None:
    cfg = config or EngineConfig()
    logging.basicConfig(
        level=getattr(logging, cfg.log.level.upper(), logging.INFO),
        format=cfg.log.format,
        force=True,
    )
