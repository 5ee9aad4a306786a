"""Entry point for running the network benchmark."""

from __future__ import annotations

import argparse
from typing import List, Optional

from netprobe import __version__, bootstrap
from netprobe.report import ConsoleReporter, format_history, render_json, write_text_report


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Multi-region network speed benchmark")
    parser.add_argument("--config", help="Path to config.yaml", default=None)
    parser.add_argument("--servers", type=_positive_int, default=None, help="Number of speed test servers")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--no-save", action="store_true", help="Do not store the run in local history")
    parser.add_argument("--report", action="store_true", help="Write a text report to the data directory")
    parser.add_argument("--export-csv", action="store_true", help="Write all stored runs to CSV")
    parser.add_argument("--history", type=_positive_int, default=None, metavar="N", help="Show the last N stored runs and exit")
    parser.add_argument("--debug", action="store_true", help="Log debug output to the console")
    parser.add_argument("--version", action="version", version=f"netprobe {__version__}")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    context = bootstrap(args.config, "DEBUG" if args.debug else None)

    if args.history:
        runs = context.store.get_runs(limit=args.history)
        print(format_history([context.store.to_dict(run) for run in runs]))
        return

    reporter = ConsoleReporter()
    if not args.json:
        reporter.header()

    result = context.benchmark.run(
        args.servers,
        on_result=None if args.json else reporter.row,
        on_progress=None if args.json else reporter.progress,
    )

    if args.json:
        print(render_json(result))
    else:
        reporter.summary(result)

    if not args.no_save:
        context.store.save(result)
    if args.report:
        path = write_text_report(result, context.config.paths.data_dir)
        print(f"  Report written to {path}")
    if args.export_csv:
        path = context.exporter.write_snapshot()
        print(f"  CSV written to {path}")


if __name__ == "__main__":
    main()
