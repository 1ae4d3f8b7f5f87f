"""
    Shared utility functions for operating system identity.
"""
import logging
import platform
import time
from datetime import datetime

from core.models import ProbeResult, SystemSummary
from helpers.host import probe

logger = logging.getLogger(__name__)


def get_os():
    """
        Returns a short key for the current operating system.
        Used as a switch for the OS-specific collectors.
    """
    operating_system = platform.system()
    switcher = {
        "Windows": "windows",
        "Linux": "linux",
        "Darwin": "mac",
    }
    return switcher.get(operating_system, "unknown")


def get_os_identity():
    """
        Caption, version, build, architecture and machine name of the running OS.
        The OS-specific collector is imported lazily so its platform bindings
        (wmi, pyobjc) are only required on that platform.
    """
    os_key = get_os()
    if os_key == "windows":
        from collectors.windows import get_windows_operating_system_info
        return get_windows_operating_system_info()
    if os_key == "mac":
        from collectors.mac import get_mac_operating_system_info
        return get_mac_operating_system_info()
    if os_key == "linux":
        from collectors.linux.linux_system import get_linux_operating_system_info
        return get_linux_operating_system_info()

    return {
        "caption": f"{platform.system()} {platform.release()}".strip() or None,
        "version": platform.version() or None,
        "build": None,
        "architecture": platform.machine() or None,
        "machine_name": platform.node() or None,
    }


@probe
def probe_os_supported(families, identity=None) -> ProbeResult:
    """found when the OS caption contains one of the supported release families."""
    info = identity if identity is not None else get_os_identity()
    caption = info.get("caption")
    if not caption:
        return ProbeResult.absent()

    lowered = caption.lower()
    for family in families:
        if family.lower() in lowered:
            return ProbeResult.present(value=caption, source=family)

    logger.debug("OS %r is not in a supported family %s", caption, list(families))
    # Known OS but unsupported: report the caption so the row shows what was found
    return ProbeResult(found=False, value=caption)


@probe
def probe_os_build(identity=None) -> ProbeResult:
    info = identity if identity is not None else get_os_identity()
    build = info.get("build")
    try:
        return ProbeResult.present(value=int(str(build).strip()))
    except (TypeError, ValueError):
        return ProbeResult.absent()


def _local_time_zone():
    name = datetime.now().astimezone().tzname()
    return name or (time.tzname[0] if time.tzname else None)


def get_system_summary(volume=None):
    """
        Read-only system snapshot for the report header. Every field degrades to
        None on its own; nothing here is validated.
    """
    from shared.hardware import probe_disk_free_gb, probe_ram_gb

    try:
        identity = get_os_identity()
    except Exception as e:
        logger.warning("OS identity query failed: %s: %s", type(e).__name__, e)
        identity = {}

    if get_os() == "windows":
        try:
            from collectors.windows import get_windows_time_zone
            time_zone = get_windows_time_zone()
        except Exception as e:
            logger.warning("Time zone query failed: %s: %s", type(e).__name__, e)
            time_zone = _local_time_zone()
    else:
        time_zone = _local_time_zone()

    ram = probe_ram_gb()
    disk = probe_disk_free_gb(volume)

    return SystemSummary(
        machine_name=identity.get("machine_name") or platform.node() or None,
        os_caption=identity.get("caption"),
        os_version=identity.get("version"),
        os_build=identity.get("build"),
        architecture=identity.get("architecture"),
        ram_gb=ram.value if ram.found else None,
        disk_free_gb=disk.value if disk.found else None,
        time_zone=time_zone,
    )
