"""Command line interface for select_device."""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from core.command_runner import SubprocessCommandRunner

from .src.devices import DeviceSelectionError, select_device


def main(args: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="select_device",
        description="Select a Flutter device by 0-based index or device ID",
    )
    parser.add_argument(
        "device_spec",
        nargs="?",
        default="",
        help="Device ID (e.g. emulator-5554) or index (0 = first device); empty means auto-select",
    )
    parser.add_argument(
        "--flutter",
        default="flutter",
        help="Flutter executable (default: flutter, resolved on PATH)",
    )

    parsed_args = parser.parse_args(sys.argv[1:] if args is None else args)

    try:
        device_id = select_device(parsed_args.device_spec, SubprocessCommandRunner(), parsed_args.flutter)
    except DeviceSelectionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # No trailing newline: callers embed the ID with $(select_device 0).
    print(device_id, end="")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
