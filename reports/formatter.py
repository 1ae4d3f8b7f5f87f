"""
    Report formatting functions

    render_report() is a pure view over an already computed RowSet: it never
    queries the host, so the same rows can be previewed and saved without
    probing again, and identical inputs always produce identical text.
"""
from datetime import datetime

TITLE = "Build Environment Readiness Report"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
UNKNOWN = "Unknown"
LABEL_WIDTH = 22
COLUMN_GAP = "  "
TABLE_HEADER = ("Item", "Required", "Actual", "Status")


def _value(v, unit=""):
    if v is None or v == "":
        return UNKNOWN
    return f"{v}{unit}"


def _block(title, fields):
    lines = [f"[{title}]"]
    for label, value in fields:
        lines.append(f"  {label.ljust(LABEL_WIDTH)}: {value}")
    return lines


def _list_field(label, items):
    """First item on the label line, the rest aligned underneath."""
    if not items:
        return [(label, UNKNOWN)]
    return [(label, items[0])] + [("", item) for item in items[1:]]


def format_system_block(system):
    return _block("System", [
        ("Machine name", _value(system.machine_name)),
        ("Operating system", _value(system.os_caption)),
        ("Version", _value(system.os_version)),
        ("Build", _value(system.os_build)),
        ("Architecture", _value(system.architecture)),
        ("RAM", _value(system.ram_gb, " GB")),
        ("Free disk (system)", _value(system.disk_free_gb, " GB")),
        ("Time zone", _value(system.time_zone)),
    ])


def format_cpu_block(hardware):
    return _block("CPU", [
        ("Name", _value(hardware.cpu_name)),
        ("Socket", _value(hardware.cpu_socket)),
        ("Cores", _value(hardware.cpu_cores)),
        ("Logical processors", _value(hardware.cpu_logical_processors)),
        ("Max clock", _value(hardware.cpu_max_clock_mhz, " MHz")),
        ("L2 cache", _value(hardware.cpu_l2_cache_kb, " KB")),
        ("L3 cache", _value(hardware.cpu_l3_cache_kb, " KB")),
    ])


def format_hardware_block(hardware):
    fields = [
        ("Board", _value(hardware.board)),
        ("BIOS", _value(hardware.bios)),
        ("Display adapter", _value(hardware.display_adapter)),
    ]
    fields += _list_field("Memory modules", list(hardware.memory_modules))
    fields += _list_field("Fixed drives", list(hardware.fixed_drives))
    return _block("Hardware", fields)


def format_rows(rows):
    """
    One line per CheckRow: item / required / actual / status, each column
    padded to its widest cell so reports diff cleanly across runs.
    """
    table = [TABLE_HEADER] + [(r.item, r.required, r.actual, r.status) for r in rows]
    widths = [max(len(line[i]) for line in table) for i in range(len(TABLE_HEADER))]

    def _line(cells):
        return COLUMN_GAP.join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

    lines = [_line(TABLE_HEADER), COLUMN_GAP.join("-" * w for w in widths)]
    lines += [_line(cells) for cells in table[1:]]
    return lines


def render_report(rowset, system=None, hardware=None, timestamp: datetime | None = None) -> str:
    """
    Render rows (plus optional system/hardware context) as plain text.

    `timestamp` defaults to the time the rows were generated, not the current
    time, so re-rendering a cached RowSet is byte-identical.
    """
    when = timestamp or rowset.generated_at
    verdict = "PASS" if rowset.overall_passed else "FAIL"

    lines = [
        TITLE,
        "=" * len(TITLE),
        f"Generated: {when.strftime(TIMESTAMP_FORMAT)}",
        f"Overall: {verdict} ({rowset.pass_count}/{rowset.total} checks passed)",
        "",
    ]

    if system is not None:
        lines += format_system_block(system) + [""]
    if hardware is not None:
        lines += format_cpu_block(hardware) + [""]
        lines += format_hardware_block(hardware) + [""]

    lines.append("[Requirements]")
    lines += format_rows(rowset.rows)

    return "\n".join(line.rstrip() for line in lines) + "\n"
