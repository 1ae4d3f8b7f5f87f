from typing import Any
import os
import platform

DMI_DIR = "/sys/class/dmi/id"


# -----------------------------
# 1) Distribution identity
# -----------------------------
def read_os_release(path: str = "/etc/os-release") -> dict[str, str]:
    """
    Parse /etc/os-release into a dict.

    Lines look like:
      PRETTY_NAME="Ubuntu 22.04.4 LTS"
      VERSION_ID="22.04"
    Unreadable file -> {}.
    """
    values: dict[str, str] = {}
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            text = f.read()
    except OSError:
        return values

    for line in text.splitlines():
        s = line.strip()
        if not s or s.startswith("#") or "=" not in s:
            continue
        k, v = s.split("=", 1)
        values[k.strip()] = v.strip().strip('"').strip("'")
    return values


def get_linux_operating_system_info() -> dict[str, Any]:
    release = read_os_release()
    caption = release.get("PRETTY_NAME") or release.get("NAME") or f"Linux {platform.release()}"
    return {
        "caption": caption,
        "version": release.get("VERSION_ID") or platform.release() or None,
        # Linux has no single OS build number
        "build": None,
        "architecture": platform.machine() or None,
        "machine_name": platform.node() or None,
    }


# -----------------------------
# 2) CPU / board identity
# -----------------------------
def get_linux_cpu_name(path: str = "/proc/cpuinfo") -> str | None:
    """First "model name" line of /proc/cpuinfo (x86); None if absent."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                if line.lower().startswith("model name") and ":" in line:
                    return line.split(":", 1)[1].strip() or None
    except OSError:
        return None
    return None


def _read_dmi(field: str) -> str | None:
    try:
        with open(os.path.join(DMI_DIR, field), "r", encoding="utf-8", errors="replace") as f:
            return f.read().strip() or None
    except OSError:
        # board_serial and friends are root-only; others may be missing in VMs
        return None


def get_linux_board_info() -> dict[str, str | None]:
    board = " ".join(p for p in (_read_dmi("board_vendor"), _read_dmi("board_name")) if p)
    bios = " ".join(p for p in (_read_dmi("bios_vendor"), _read_dmi("bios_version")) if p)
    return {"board": board or None, "bios": bios or None}
