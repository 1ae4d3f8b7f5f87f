import logging
import os

import psutil

from core.models import HardwareSummary, ProbeResult
from helpers.host import probe
from shared.system import get_os

logger = logging.getLogger(__name__)

GIB = 1024 ** 3


def system_volume() -> str:
    """Root of the volume the OS lives on: "C:\\" on Windows, "/" elsewhere."""
    if get_os() == "windows":
        drive = os.environ.get("SystemDrive", "C:")
        return drive.rstrip("\\/") + "\\"
    return "/"


@probe
def probe_ram_gb() -> ProbeResult:
    """Installed RAM in whole GiB (rounded down)."""
    total = psutil.virtual_memory().total
    return ProbeResult.present(value=int(total // GIB), source="psutil")


@probe
def probe_cpu_cores() -> ProbeResult:
    """Logical processors, summed across sockets on multi-socket Windows machines."""
    if get_os() == "windows":
        try:
            from collectors.windows import get_windows_logical_processor_count
            count = get_windows_logical_processor_count()
            if count:
                return ProbeResult.present(value=count, source="wmi")
        except Exception as e:
            logger.warning("WMI processor query failed, using psutil: %s: %s", type(e).__name__, e)

    count = psutil.cpu_count(logical=True)
    if not count:
        return ProbeResult.absent()
    return ProbeResult.present(value=int(count), source="psutil")


@probe
def probe_disk_free_gb(volume=None) -> ProbeResult:
    """Free space on the system volume in whole GiB (rounded down)."""
    path = volume or system_volume()
    usage = psutil.disk_usage(path)
    return ProbeResult.present(value=int(usage.free // GIB), path=path, source="psutil")


def get_cpu_info():
    """
        CPU facts from psutil. cpu_freq() can return None (containers, some ARM
        boards), so clock speed is optional.
    """
    try:
        freq = psutil.cpu_freq()
    except (OSError, NotImplementedError):
        freq = None
    cpu_info = {
        "physical_cores": psutil.cpu_count(logical=False),
        "total_cores": psutil.cpu_count(logical=True),
        "max_frequency": int(freq.max) if freq and freq.max else None,
    }
    return cpu_info


def _format_module(mem) -> str:
    parts = [f"{mem['capacity'] // GIB} GB" if mem.get("capacity") else "unknown size"]
    if mem.get("speed"):
        parts.append(f"{mem['speed']} MHz")
    if mem.get("manufacturer"):
        parts.append(mem["manufacturer"])
    return f"{mem.get('bank') or 'Module'}: {', '.join(parts)}"


def _format_drive(drive) -> str:
    label = drive.get("device_id") or "?"
    fs = drive.get("file_system") or "?"
    size = drive.get("size")
    free = drive.get("free_space")
    if size is None or free is None:
        return f"{label} ({fs})"
    return f"{label} ({fs}) {free // GIB} GB free of {size // GIB} GB"


def _windows_hardware_summary() -> HardwareSummary:
    from collectors.windows import get_windows_hardware_details

    details = get_windows_hardware_details()
    cpus = details["cpu"]
    first = cpus[0] if cpus else {}

    def _sum(key):
        values = [c[key] for c in cpus if c.get(key)]
        return sum(values) if values else None

    return HardwareSummary(
        cpu_name=first.get("name"),
        cpu_socket=first.get("socket"),
        cpu_cores=_sum("number_of_cores"),
        cpu_logical_processors=_sum("logical_processors"),
        cpu_max_clock_mhz=first.get("max_clock_speed"),
        cpu_l2_cache_kb=first.get("l2_cache_kb"),
        cpu_l3_cache_kb=first.get("l3_cache_kb"),
        board=details["board"],
        bios=details["bios"],
        display_adapter=details["display_adapter"],
        memory_modules=tuple(_format_module(m) for m in details["memory"]),
        fixed_drives=tuple(_format_drive(d) for d in details["fixed_drives"]),
    )


def _fixed_drives_psutil() -> tuple[str, ...]:
    drives = []
    for part in psutil.disk_partitions(all=False):
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except OSError:
            continue
        drives.append(_format_drive({
            "device_id": part.mountpoint,
            "file_system": part.fstype,
            "size": usage.total,
            "free_space": usage.free,
        }))
    return tuple(drives)


def _generic_hardware_summary() -> HardwareSummary:
    os_key = get_os()
    cpu_name = None
    board = {"board": None, "bios": None}
    if os_key == "linux":
        from collectors.linux.linux_system import get_linux_board_info, get_linux_cpu_name
        cpu_name = get_linux_cpu_name()
        board = get_linux_board_info()
    elif os_key == "mac":
        from collectors.mac import get_mac_cpu_name
        cpu_name = get_mac_cpu_name()

    cpu_info = get_cpu_info()
    return HardwareSummary(
        cpu_name=cpu_name,
        cpu_cores=cpu_info["physical_cores"],
        cpu_logical_processors=cpu_info["total_cores"],
        cpu_max_clock_mhz=cpu_info["max_frequency"],
        board=board["board"],
        bios=board["bios"],
        fixed_drives=_fixed_drives_psutil(),
    )


def get_hardware_summary() -> HardwareSummary:
    """
        Read-only hardware snapshot for the report. WMI on Windows, psutil plus
        the Linux/macOS collectors elsewhere. A failing query yields an empty summary.
    """
    try:
        if get_os() == "windows":
            return _windows_hardware_summary()
        return _generic_hardware_summary()
    except Exception as e:
        logger.warning("Hardware summary query failed: %s: %s", type(e).__name__, e)
        return HardwareSummary()
