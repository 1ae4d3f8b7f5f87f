import json
from dataclasses import asdict
from pathlib import Path

from reports.formatter import TIMESTAMP_FORMAT


def write_text_report(text: str, out_path: str | Path) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    # newline="" keeps the rendered "\n" endings on every platform
    with out_path.open("w", encoding="utf-8", newline="") as f:
        f.write(text)

    return out_path


def write_json_report(rowset, out_path: str | Path, system=None, hardware=None) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    report = {
        "generated_at": rowset.generated_at.strftime(TIMESTAMP_FORMAT),
        "overall": "PASS" if rowset.overall_passed else "FAIL",
        "passed": rowset.pass_count,
        "total": rowset.total,
        "system": asdict(system) if system is not None else None,
        "hardware": asdict(hardware) if hardware is not None else None,
        "checks": [{**asdict(row), "status": row.status} for row in rowset.rows],
    }

    with out_path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    return out_path
