"""
    macOS specific collectors and utilities.
"""

import platform  # used for OS detection, Hardware information
import SystemConfiguration

from helpers.process import run_cmd


def get_mac_computer_name():
    """User-visible computer name via pyobjc (SCDynamicStoreCopyComputerName)."""
    name, _encoding = SystemConfiguration.SCDynamicStoreCopyComputerName(None, None)
    return str(name) if name else None


def get_mac_operating_system_info():
    """
        macOS identity: product version from platform.mac_ver(), build from sw_vers.
    """
    release, _versioninfo, machine = platform.mac_ver()
    rc, stdout, _stderr = run_cmd(["sw_vers", "-buildVersion"], timeout_s=5)
    return {
        "caption": f"macOS {release}" if release else "macOS",
        "version": release or None,
        # macOS builds are alphanumeric ("23F79"); they are not a numeric build number
        "build": stdout if rc == 0 and stdout else None,
        "architecture": machine or platform.machine() or None,
        "machine_name": get_mac_computer_name(),
    }


def get_mac_cpu_name():
    rc, stdout, _stderr = run_cmd(["sysctl", "-n", "machdep.cpu.brand_string"], timeout_s=5)
    return stdout if rc == 0 and stdout else None
