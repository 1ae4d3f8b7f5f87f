"""
    Windows collectors backed by WMI.

    Probes may run on worker threads, and WMI is a COM API, so every query opens
    its own connection inside a COM initialise/uninitialise pair for the calling
    thread. Results are copied into plain dicts before COM is released.
"""
from contextlib import contextmanager

import pythoncom
import wmi


@contextmanager
def _connect():
    pythoncom.CoInitialize()
    try:
        yield wmi.WMI()
    finally:
        pythoncom.CoUninitialize()


def _int_or_none(v):
    if v is None:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _clean(v):
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def get_windows_operating_system_info():
    """
        Retrieve Windows operating system information using WMI.
        Identity and Context - Who/What is this Windows machine.

        Returns:
            dict: caption, version, build, architecture and machine name.
    """
    with _connect() as c:
        os_info = c.Win32_OperatingSystem()[0]
        computer = c.Win32_ComputerSystem()[0]
        system_info = {
            "caption": _clean(os_info.Caption),
            "version": _clean(os_info.Version),
            "build": _clean(os_info.BuildNumber),
            "architecture": _clean(os_info.OSArchitecture),
            "machine_name": _clean(computer.Name),
        }
    return system_info


def get_windows_time_zone():
    """Caption of the configured time zone, e.g. "(UTC+01:00) Amsterdam, Berlin, ..."."""
    with _connect() as c:
        for tz in c.Win32_TimeZone():
            return _clean(tz.Caption)
    return None


def get_windows_logical_processor_count():
    """Logical processors summed across every populated socket."""
    total = 0
    with _connect() as c:
        for cpu in c.Win32_Processor():
            total += _int_or_none(cpu.NumberOfLogicalProcessors) or 0
    return total or None


def get_windows_hardware_details():
    """
        Retrieve Windows hardware details using WMI.
        Hardware and Capacity - What is inside this Windows machine.
    """
    with _connect() as c:
        return _hardware_details(c)


def _hardware_details(c):
    # Initialise hardware details dictionary
    hardware_details = {
        "cpu": [],
        "board": None,
        "bios": None,
        "display_adapter": None,
        "memory": [],
        "fixed_drives": [],
    }

    # Get CPU details (one entry per socket)
    for cpu in c.Win32_Processor():
        cpu_info = {
            "name": _clean(cpu.Name),
            "socket": _clean(cpu.SocketDesignation),
            "number_of_cores": _int_or_none(cpu.NumberOfCores),
            "logical_processors": _int_or_none(cpu.NumberOfLogicalProcessors),
            "max_clock_speed": _int_or_none(cpu.MaxClockSpeed),
            "l2_cache_kb": _int_or_none(cpu.L2CacheSize),
            "l3_cache_kb": _int_or_none(cpu.L3CacheSize),
        }
        hardware_details["cpu"].append(cpu_info)

    for board in c.Win32_BaseBoard():
        hardware_details["board"] = " ".join(
            part for part in (_clean(board.Manufacturer), _clean(board.Product)) if part
        ) or None
        break

    for bios in c.Win32_BIOS():
        hardware_details["bios"] = " ".join(
            part for part in (_clean(bios.Manufacturer), _clean(bios.SMBIOSBIOSVersion)) if part
        ) or None
        break

    # Primary display adapter is the first one WMI reports
    for adapter in c.Win32_VideoController():
        hardware_details["display_adapter"] = _clean(adapter.Name)
        break

    # Get RAM details
    for mem in c.Win32_PhysicalMemory():
        mem_info = {
            "bank": _clean(mem.BankLabel) or _clean(mem.DeviceLocator),
            "capacity": _int_or_none(mem.Capacity),
            "speed": _int_or_none(mem.Speed),
            "manufacturer": _clean(mem.Manufacturer),
        }
        hardware_details["memory"].append(mem_info)

    # Local fixed drives only (DriveType 3)
    for l_disk in c.Win32_LogicalDisk(DriveType=3):
        disk_info = {
            "device_id": _clean(l_disk.DeviceID),
            "file_system": _clean(l_disk.FileSystem),
            "size": _int_or_none(l_disk.Size),
            "free_space": _int_or_none(l_disk.FreeSpace),
        }
        hardware_details["fixed_drives"].append(disk_info)

    return hardware_details
