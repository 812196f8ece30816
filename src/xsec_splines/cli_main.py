"""xsec-splines CLI: inspect, evaluate, and merge cross-section spline files.

Commands:
    info: Load a spline file and print the list options and keys.
    keys: List spline keys, optionally filtered by substring.
    eval: Evaluate one spline at given energies (1e-38 cm^2).
    merge: Combine several spline files into one.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from xsec_splines import __version__
from xsec_splines.config import load_config_file
from xsec_splines.numerical import InterpolationMode, Spline
from xsec_splines.spline_list import XSecSplineList, format_spline_summary, split_spline_key
from xsec_splines.units import XSEC_DISPLAY_UNIT, parse_energy_gev, to_display_xsec

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the xsec-splines CLI."""
    parser = argparse.ArgumentParser(
        prog="xsec-splines",
        description="Inspect, evaluate and merge cross-section spline XML files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="Print spline list options and keys")
    info.add_argument("file", type=Path, help="Spline XML file")
    info.add_argument("--summary", action="store_true", help="Print a one-line summary per spline")

    keys = subparsers.add_parser("keys", help="List spline keys")
    keys.add_argument("file", type=Path, help="Spline XML file")
    keys.add_argument("--match", default="", help="Only list keys containing this text")
    keys.add_argument("--algorithm", default="", help="Only list keys computed by this algorithm name")

    eval_cmd = subparsers.add_parser("eval", help="Evaluate a spline at given energies")
    eval_cmd.add_argument("file", type=Path, help="Spline XML file")
    eval_cmd.add_argument("key", help="Spline key")
    eval_cmd.add_argument(
        "-e",
        "--energy",
        nargs="+",
        required=True,
        help="Energies (GeV, or with units such as '500MeV')",
    )
    eval_cmd.add_argument(
        "--mode",
        choices=[m.value for m in InterpolationMode],
        default=InterpolationMode.LINEAR.value,
        help="Interpolation mode",
    )
    eval_cmd.add_argument("--json", action="store_true", help="Output results as JSON")

    merge = subparsers.add_parser("merge", help="Merge spline files into one")
    merge.add_argument("output", type=Path, help="Output spline XML file")
    merge.add_argument("inputs", type=Path, nargs="+", help="Input spline XML files (later files win)")
    merge.add_argument("--config", type=Path, default=None, help="YAML/JSON spline list config")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the xsec-splines CLI.

    Returns:
        Exit code (0 for success, 1 for load/save failures).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = logging.WARNING
    if args.verbose >= 1:
        log_level = logging.INFO
    if args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    try:
        if args.command == "info":
            return _cmd_info(args)
        elif args.command == "keys":
            return _cmd_keys(args)
        elif args.command == "eval":
            return _cmd_eval(args)
        elif args.command == "merge":
            return _cmd_merge(args)
        else:
            parser.error(f"Unknown command: {args.command}")
            return 2
    except Exception as e:
        logger.error("Error: %s", e)
        if args.verbose >= 2:
            import traceback

            traceback.print_exc()
        return 1


# =============================================================================
# Command Handlers
# =============================================================================


def _load(path: Path, splines: XSecSplineList | None = None, keep: bool = False) -> XSecSplineList | None:
    splines = splines if splines is not None else XSecSplineList()
    status = splines.load_from_xml(path, keep=keep)
    if not status.is_ok:
        sys.stderr.write(f"{status.message}: {path}\n")
        return None
    return splines


def _cmd_info(args: argparse.Namespace) -> int:
    splines = _load(args.file)
    if splines is None:
        return 1
    splines.print(sys.stdout)
    if args.summary:
        for key, spline in splines.items():
            print(format_spline_summary(key, spline))
    return 0


def _cmd_keys(args: argparse.Namespace) -> int:
    splines = _load(args.file)
    if splines is None:
        return 1
    for key in splines.keys():
        if args.match and args.match not in key:
            continue
        if args.algorithm and split_spline_key(key)[0] != args.algorithm:
            continue
        print(key)
    return 0


def _cmd_eval(args: argparse.Namespace) -> int:
    splines = _load(args.file)
    if splines is None:
        return 1
    stored = splines.get(args.key)
    if stored is None:
        sys.stderr.write(f"No spline with key: {args.key}\n")
        return 1

    energies = [parse_energy_gev(text) for text in args.energy]
    mode = InterpolationMode(args.mode)
    spline = stored if mode is stored.mode else Spline(stored.x, stored.y, mode=mode)

    rows: list[dict[str, Any]] = []
    for energy in energies:
        rows.append(
            {
                "energy_gev": energy,
                "xsec_1e38_cm2": to_display_xsec(spline.evaluate(energy)),
                "in_range": spline.is_in_range(energy),
            }
        )

    if args.json:
        payload = {"key": args.key, "mode": mode.value, "unit": XSEC_DISPLAY_UNIT, "values": rows}
        sys.stdout.write(json.dumps(payload, sort_keys=True, indent=2) + "\n")
    else:
        print(f"{args.key}")
        for row in rows:
            flag = "" if row["in_range"] else "  (outside spline range)"
            print(f"  E = {row['energy_gev']:<12g} GeV  xsec = {row['xsec_1e38_cm2']:.6g} x {XSEC_DISPLAY_UNIT}{flag}")
    return 0


def _cmd_merge(args: argparse.Namespace) -> int:
    splines = XSecSplineList.from_config(load_config_file(args.config)) if args.config else XSecSplineList()
    for path in args.inputs:
        if _load(path, splines, keep=True) is None:
            return 1
    if not splines.save_as_xml(args.output, save_initial=True):
        sys.stderr.write(f"Couldn't write spline file: {args.output}\n")
        return 1
    print(f"Merged {len(splines)} splines from {len(args.inputs)} files into {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
