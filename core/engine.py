"""
    Aggregator: probe the host for every fact a catalog needs and turn the
    results into one CheckRow per requirement, in catalog order.

        rows = run(default_catalog())
        text = render_report(rows, get_system_summary(), get_hardware_summary())

    Nothing is cached between runs; each call probes the host again and returns
    a fresh RowSet.
"""
import logging
from datetime import datetime
from functools import partial
from typing import Callable, Mapping, Optional

from core.config import EngineConfig
from core.models import (
    NOT_FOUND,
    VERSION_UNKNOWN,
    CheckRow,
    Fact,
    HardwareSummary,
    ProbeResult,
    Requirement,
    RequirementKind,
    RowSet,
    SystemSummary,
)
from core.version import version_satisfies
from helpers.host import LocalHost, run_bounded
from shared.hardware import get_hardware_summary, probe_cpu_cores, probe_disk_free_gb, probe_ram_gb
from shared.system import get_system_summary, probe_os_build, probe_os_supported
from shared.toolchain import probe_compiler
from shared.tools import probe_named_tool, probe_package_manager, probe_runtime, probe_vcs

logger = logging.getLogger(__name__)

ProbeFn = Callable[[EngineConfig, object], ProbeResult]

DEFAULT_PROBES: dict[str, ProbeFn] = {
    Fact.OS_SUPPORTED.value: lambda cfg, host: probe_os_supported(cfg.supported_os_families),
    Fact.OS_BUILD.value: lambda cfg, host: probe_os_build(),
    Fact.RAM_GB.value: lambda cfg, host: probe_ram_gb(),
    Fact.CPU_CORES.value: lambda cfg, host: probe_cpu_cores(),
    Fact.DISK_FREE_GB.value: lambda cfg, host: probe_disk_free_gb(cfg.system_volume),
    Fact.RUNTIME.value: lambda cfg, host: probe_runtime(cfg.runtime_candidates, host),
    Fact.VCS.value: lambda cfg, host: probe_vcs(host),
    Fact.COMPILER.value: lambda cfg, host: probe_compiler(cfg.toolchain, host),
}


def tool_key(name: str) -> str:
    return f"tool:{name}"


def _isolated(key: str, fn: Callable[[], ProbeResult]) -> Callable[[], ProbeResult]:
    def call() -> ProbeResult:
        try:
            result = fn()
        except Exception as e:
            logger.warning("Probe %s failed: %s: %s", key, type(e).__name__, e)
            return ProbeResult.absent(error=f"{type(e).__name__}: {e}")
        if not isinstance(result, ProbeResult):
            logger.warning("Probe %s returned %s instead of a ProbeResult", key, type(result).__name__)
            return ProbeResult.absent(error=f"invalid probe result: {result!r}")
        return result
    return call


def _collect(tasks: dict[str, Callable[[], ProbeResult]], config: EngineConfig) -> dict[str, ProbeResult]:
    """
    Run independent probes and return their results keyed like `tasks`.
    Probes still running when the timeout expires are recorded as absent,
    in sequential mode as well as in parallel mode.
    """
    calls = {key: _isolated(key, fn) for key, fn in tasks.items()}
    workers = max(1, config.max_workers) if config.parallel else 1
    finished = run_bounded(calls, config.probe_timeout_s, workers=workers)

    results = {}
    for key in calls:
        if key in finished:
            results[key] = finished[key]
        else:
            logger.warning("Probe %s did not finish within %ss", key, config.probe_timeout_s)
            results[key] = ProbeResult.absent(error=f"timed out after {config.probe_timeout_s}s")
    return results


def collect_summaries(config: Optional[EngineConfig] = None) -> tuple[SystemSummary, HardwareSummary]:
    """System and hardware snapshots, each bounded by the probe timeout. A late one is empty."""
    config = config or EngineConfig()
    finished = run_bounded(
        {
            "system": partial(get_system_summary, config.system_volume),
            "hardware": get_hardware_summary,
        },
        config.probe_timeout_s,
        workers=2,
        name="summary",
    )
    for key in ("system", "hardware"):
        if key not in finished:
            logger.warning("%s summary did not finish within %ss", key.capitalize(), config.probe_timeout_s)
    return finished.get("system") or SystemSummary(), finished.get("hardware") or HardwareSummary()


def _format_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _presence_actual(result: ProbeResult) -> str:
    if result.found:
        if result.value not in (None, ""):
            return str(result.value)
        return result.path or "Found"
    if result.value not in (None, ""):
        # answered, but not acceptable (e.g. an unsupported OS caption)
        return f"{result.value} (unsupported)"
    return NOT_FOUND


def _required_text(req: Requirement) -> str:
    if req.kind is RequirementKind.MIN_NUMERIC:
        return f">= {_format_number(req.threshold)}"
    if req.kind is RequirementKind.MIN_VERSION:
        return f">= {req.threshold}"
    return "present" if req.mandatory and req.threshold else "optional"


def _evaluate(req: Requirement, result: ProbeResult) -> tuple[str, bool]:
    """(actual text, comparison outcome) for a scalar requirement."""
    if req.kind is RequirementKind.MIN_NUMERIC:
        if not result.found or result.value is None:
            return NOT_FOUND, False
        try:
            passed = float(result.value) >= float(req.threshold)
        except (TypeError, ValueError):
            return str(result.value), False
        return _format_number(result.value), passed

    if req.kind is RequirementKind.MIN_VERSION:
        if not result.found:
            return NOT_FOUND, False
        if not result.value:
            return VERSION_UNKNOWN, False
        return str(result.value), version_satisfies(str(result.value), req.threshold)

    # PRESENCE: threshold False means presence is informational only
    return _presence_actual(result), result.found or not req.threshold


def build_row(req: Requirement, result: ProbeResult) -> CheckRow:
    actual, passed = _evaluate(req, result)
    return CheckRow(
        item=req.name,
        required=_required_text(req),
        actual=actual,
        # optional requirements always pass
        passed=passed or not req.mandatory,
        mandatory=req.mandatory,
    )


def build_tool_rows(req: Requirement, results: Mapping[str, ProbeResult]) -> list[CheckRow]:
    """One row per named tool; an empty list still yields one (passing) row."""
    if not req.threshold:
        return [CheckRow(item=req.name, required="none", actual="-", passed=True, mandatory=req.mandatory)]

    rows = []
    for name in req.threshold:
        result = results.get(tool_key(name), ProbeResult.absent())
        if result.found:
            actual = str(result.value) if result.value else (result.path or "Found")
        else:
            actual = NOT_FOUND
        rows.append(CheckRow(
            item=name,
            required="present" if req.mandatory else "optional",
            actual=actual,
            passed=result.found or not req.mandatory,
            mandatory=req.mandatory,
        ))
    return rows


def run(catalog, config: Optional[EngineConfig] = None, host=None,
        probes: Optional[Mapping[str, ProbeFn]] = None, now: Optional[datetime] = None) -> RowSet:
    """
    Probe the host and validate every requirement in `catalog`.

    `probes` replaces default probe functions, keyed by fact value
    ("ram_gb", "compiler", ...) or "tool:<name>" for a named build tool.
    Every requirement is evaluated; a failing probe never stops the run.
    """
    config = config or EngineConfig()
    host = host or LocalHost(command_timeout_s=config.command_timeout_s)
    registry = {**DEFAULT_PROBES, **(probes or {})}
    started = now or datetime.now()

    facts = catalog.facts()
    tool_names = []
    for req in catalog:
        if req.kind is not RequirementKind.TOOL_LIST:
            continue
        for name in req.threshold:
            if name not in tool_names:
                tool_names.append(name)

    # ---- Phase 1: independent probes ----
    tasks = {}
    for fact in sorted(facts, key=lambda f: f.value):
        if fact in (Fact.TOOLS, Fact.PACKAGE_MANAGER):
            continue
        tasks[fact.value] = partial(registry[fact.value], config, host)

    # the package manager is looked up through the runtime
    if Fact.PACKAGE_MANAGER in facts and Fact.PACKAGE_MANAGER.value not in registry:
        tasks.setdefault(Fact.RUNTIME.value, partial(registry[Fact.RUNTIME.value], config, host))

    for name in tool_names:
        fn = registry.get(tool_key(name))
        if fn is None:
            tasks[tool_key(name)] = partial(probe_named_tool, name, host)
        else:
            tasks[tool_key(name)] = partial(fn, config, host)

    results = _collect(tasks, config)

    # ---- Phase 2: probes that depend on phase 1 ----
    if Fact.PACKAGE_MANAGER in facts:
        override = registry.get(Fact.PACKAGE_MANAGER.value)
        if override is not None:
            task = partial(override, config, host)
        else:
            runtime = results.get(Fact.RUNTIME.value, ProbeResult.absent())
            task = partial(probe_package_manager, runtime, host)
        results.update(_collect({Fact.PACKAGE_MANAGER.value: task}, config))

    # ---- Rows, strictly in catalog order ----
    rows: list[CheckRow] = []
    for req in catalog:
        if req.kind is RequirementKind.TOOL_LIST:
            rows.extend(build_tool_rows(req, results))
        else:
            rows.append(build_row(req, results.get(req.fact.value, ProbeResult.absent())))

    rowset = RowSet(rows=tuple(rows), generated_at=started)
    logger.info(
        "Readiness run: %s (%d/%d checks passed)",
        "PASS" if rowset.overall_passed else "FAIL", rowset.pass_count, rowset.total,
    )
    return rowset
