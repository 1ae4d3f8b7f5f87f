"""
    Main entry point for the build environment readiness check
"""
import argparse
import sys

from core.catalog import default_catalog, load_catalog
from core.config import EngineConfig, setup_logging
from core.engine import collect_summaries, run
from core.errors import CatalogError, ConfigError
from core.report import write_json_report, write_text_report
from reports.formatter import render_report


def main(argv=None):
    """
        Probe the machine against a requirement catalog, print the report and
        optionally save it. Exit code 0 when every mandatory requirement passes,
        1 when one fails, 2 for a bad catalog or environment setting.
    """
    parser = argparse.ArgumentParser(description="Check this machine against the build pipeline prerequisites.")
    parser.add_argument("--catalog", help="JSON requirement catalog (default: built-in catalog)")
    parser.add_argument("--output", help="save the text report to this path")
    parser.add_argument("--json", dest="json_path", help="save a JSON report to this path")
    parser.add_argument("--no-summary", action="store_true", help="omit the system/hardware blocks")
    args = parser.parse_args(argv)

    try:
        config = EngineConfig.from_env()
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    setup_logging(config)

    try:
        catalog = load_catalog(args.catalog) if args.catalog else default_catalog()
    except CatalogError as e:
        print(f"Invalid catalog: {e}", file=sys.stderr)
        return 2

    rowset = run(catalog, config)

    system = hardware = None
    if not args.no_summary:
        system, hardware = collect_summaries(config)

    text = render_report(rowset, system, hardware)
    print(text, end="")

    if args.output:
        path = write_text_report(text, args.output)
        print(f"\nReport saved to {path}")
    if args.json_path:
        path = write_json_report(rowset, args.json_path, system, hardware)
        print(f"JSON report saved to {path}")

    return 0 if rowset.overall_passed else 1


if __name__ == "__main__":
    sys.exit(main())
