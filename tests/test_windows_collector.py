"""
Tests for the WMI collector, run against fake wmi / pythoncom modules so they
work on any platform.
"""
import importlib
import sys
import types
from types import SimpleNamespace

import pytest

GIB = 1024 ** 3


class FakeWMI:
    def __init__(self):
        self.disk_filters = []

    def Win32_OperatingSystem(self):
        return [SimpleNamespace(Caption="Microsoft Windows 11 Pro ", Version="10.0.22631",
                                BuildNumber="22631", OSArchitecture="64-bit")]

    def Win32_ComputerSystem(self):
        return [SimpleNamespace(Name="BUILD-01")]

    def Win32_TimeZone(self):
        return [SimpleNamespace(Caption="(UTC+01:00) Amsterdam, Berlin")]

    def Win32_Processor(self):
        cpu = dict(Name="Intel(R) Xeon(R) Gold 6338", SocketDesignation="CPU0", NumberOfCores=32,
                   NumberOfLogicalProcessors=64, MaxClockSpeed=2000, L2CacheSize=40960,
                   L3CacheSize=49152)
        return [SimpleNamespace(**cpu), SimpleNamespace(**{**cpu, "SocketDesignation": "CPU1"})]

    def Win32_BaseBoard(self):
        return [SimpleNamespace(Manufacturer="Supermicro", Product="X12DPi-NT6")]

    def Win32_BIOS(self):
        return [SimpleNamespace(Manufacturer="American Megatrends Inc.", SMBIOSBIOSVersion="1.4b")]

    def Win32_VideoController(self):
        return [SimpleNamespace(Name="ASPEED Graphics Family"), SimpleNamespace(Name="Second")]

    def Win32_PhysicalMemory(self):
        return [SimpleNamespace(BankLabel="P1-DIMMA1", DeviceLocator="DIMM0", Capacity=str(16 * GIB),
                                Speed=3200, Manufacturer="Samsung")]

    def Win32_LogicalDisk(self, **filters):
        self.disk_filters.append(filters)
        return [SimpleNamespace(DeviceID="C:", FileSystem="NTFS", Size=str(476 * GIB),
                                FreeSpace=str(120 * GIB))]


@pytest.fixture
def windows(monkeypatch):
    connection = FakeWMI()
    com_calls = []

    fake_wmi = types.ModuleType("wmi")
    fake_wmi.WMI = lambda: connection
    fake_pythoncom = types.ModuleType("pythoncom")
    fake_pythoncom.CoInitialize = lambda: com_calls.append("init")
    fake_pythoncom.CoUninitialize = lambda: com_calls.append("uninit")

    monkeypatch.setitem(sys.modules, "wmi", fake_wmi)
    monkeypatch.setitem(sys.modules, "pythoncom", fake_pythoncom)
    monkeypatch.delitem(sys.modules, "collectors.windows", raising=False)
    module = importlib.import_module("collectors.windows")
    yield SimpleNamespace(module=module, connection=connection, com_calls=com_calls)
    sys.modules.pop("collectors.windows", None)


def test_operating_system_info(windows):
    info = windows.module.get_windows_operating_system_info()
    assert info["caption"] == "Microsoft Windows 11 Pro"
    assert info["build"] == "22631"
    assert info["machine_name"] == "BUILD-01"
    assert "total_physical_memory" not in info
    assert windows.com_calls == ["init", "uninit"]


def test_logical_processors_summed_across_sockets(windows):
    assert windows.module.get_windows_logical_processor_count() == 128


def test_time_zone(windows):
    assert windows.module.get_windows_time_zone() == "(UTC+01:00) Amsterdam, Berlin"


def test_hardware_details(windows):
    details = windows.module.get_windows_hardware_details()
    assert len(details["cpu"]) == 2
    assert details["board"] == "Supermicro X12DPi-NT6"
    assert details["bios"] == "American Megatrends Inc. 1.4b"
    assert details["display_adapter"] == "ASPEED Graphics Family"
    assert details["memory"][0]["capacity"] == 16 * GIB
    assert details["fixed_drives"][0]["device_id"] == "C:"
    assert windows.connection.disk_filters == [{"DriveType": 3}]


def test_windows_hardware_summary(windows, monkeypatch):
    import shared.hardware as hardware

    monkeypatch.setattr(hardware, "get_os", lambda: "windows")
    summary = hardware.get_hardware_summary()
    assert summary.cpu_name == "Intel(R) Xeon(R) Gold 6338"
    assert summary.cpu_cores == 64
    assert summary.cpu_logical_processors == 128
    assert summary.memory_modules == ("P1-DIMMA1: 16 GB, 3200 MHz, Samsung",)
    assert summary.fixed_drives == ("C: (NTFS) 120 GB free of 476 GB",)


def test_com_released_after_each_query(windows):
    windows.module.get_windows_time_zone()
    windows.module.get_windows_logical_processor_count()
    windows.module.get_windows_hardware_details()
    assert windows.com_calls == ["init", "uninit"] * 3


def test_com_released_when_query_fails(windows, monkeypatch):
    def broken():
        raise RuntimeError("RPC server unavailable")

    monkeypatch.setattr(windows.connection, "Win32_Processor", broken)
    with pytest.raises(RuntimeError):
        windows.module.get_windows_logical_processor_count()
    assert windows.com_calls == ["init", "uninit"]
