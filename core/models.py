# core/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal, Union

Status = Literal["PASS", "FAIL"]
ProbeValue = Union[str, int, float, None]

NOT_FOUND = "Not found"
VERSION_UNKNOWN = "Found (version unknown)"


class RequirementKind(str, Enum):
    MIN_NUMERIC = "minimum-numeric"
    MIN_VERSION = "minimum-version"
    PRESENCE = "boolean-presence"
    TOOL_LIST = "string-list"


class Fact(str, Enum):
    """The host fact a requirement is checked against."""
    OS_SUPPORTED = "os_supported"
    OS_BUILD = "os_build"
    RAM_GB = "ram_gb"
    CPU_CORES = "cpu_cores"
    DISK_FREE_GB = "disk_free_gb"
    RUNTIME = "runtime"
    PACKAGE_MANAGER = "package_manager"
    VCS = "vcs"
    COMPILER = "compiler"
    TOOLS = "tools"


@dataclass(frozen=True)
class Requirement:
    name: str
    kind: RequirementKind
    fact: Fact
    threshold: object
    mandatory: bool = True


@dataclass(frozen=True)
class ProbeResult:
    """
        Outcome of one host query.

        found=False is an ordinary outcome (tool not installed, metric unavailable).
        `error` carries the text of a platform fault that was downgraded to absence,
        `source` names the candidate or resolver tier that produced the result.
    """
    found: bool
    value: ProbeValue = None
    path: str | None = None
    source: str | None = None
    error: str | None = None

    @classmethod
    def absent(cls, error: str | None = None) -> ProbeResult:
        return cls(found=False, error=error)

    @classmethod
    def present(cls, value: ProbeValue = None, path: str | None = None,
                source: str | None = None) -> ProbeResult:
        return cls(found=True, value=value, path=path, source=source)


@dataclass(frozen=True)
class CheckRow:
    item: str
    required: str
    actual: str
    passed: bool
    mandatory: bool = True

    @property
    def status(self) -> Status:
        return "PASS" if self.passed else "FAIL"


@dataclass(frozen=True)
class RowSet:
    rows: tuple[CheckRow, ...]
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def overall_passed(self) -> bool:
        # optional rows never pull the result down
        return all(row.passed for row in self.rows if row.mandatory)

    @property
    def pass_count(self) -> int:
        return sum(1 for row in self.rows if row.passed)

    @property
    def total(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class SystemSummary:
    machine_name: str | None = None
    os_caption: str | None = None
    os_version: str | None = None
    os_build: str | None = None
    architecture: str | None = None
    ram_gb: int | None = None
    disk_free_gb: int | None = None
    time_zone: str | None = None


@dataclass(frozen=True)
class HardwareSummary:
    cpu_name: str | None = None
    cpu_socket: str | None = None
    cpu_cores: int | None = None
    cpu_logical_processors: int | None = None
    cpu_max_clock_mhz: int | None = None
    cpu_l2_cache_kb: int | None = None
    cpu_l3_cache_kb: int | None = None
    board: str | None = None
    bios: str | None = None
    display_adapter: str | None = None
    memory_modules: tuple[str, ...] = ()
    fixed_drives: tuple[str, ...] = ()
