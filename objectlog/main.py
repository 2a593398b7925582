#!/usr/bin/env python3
"""
Command-line entry point for objectlog.

Usage:
    # Append a record
    python -m objectlog.main append events.log '{"id": 1, "tag": "a"}'

    # Print every record as a JSON line
    python -m objectlog.main dump events.log

    # Check a binary log for a torn or corrupted tail
    python -m objectlog.main verify events.log

    # Write sample records and read them back
    python -m objectlog.main demo demo.log
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from objectlog.core.codec import EncodeError
from objectlog.core.log.log import ENCODINGS, BinaryLog, LogOpenError, open_log
from objectlog.core.log.writer import LogWriteError
from objectlog.utils.config import Config
from objectlog.utils.logging import configure_from_config, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="objectlog",
        description="objectlog - append structured records to a file and read them back",
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML configuration file",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from configuration)",
    )

    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=["json", "console"],
        help="Logging format (default: from configuration)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    append = subparsers.add_parser("append", help="Append one JSON record")
    append.add_argument("path", help="Log file")
    append.add_argument("record", help="Record as a JSON document")
    append.add_argument("--encoding", choices=ENCODINGS, default="binary")

    dump = subparsers.add_parser("dump", help="Print every record as a JSON line")
    dump.add_argument("path", help="Log file")
    dump.add_argument("--encoding", choices=ENCODINGS, default="binary")

    verify = subparsers.add_parser("verify", help="Check a binary log for a damaged tail")
    verify.add_argument("path", help="Log file")

    demo = subparsers.add_parser("demo", help="Write sample records and read them back")
    demo.add_argument("path", help="Log file")
    demo.add_argument("--encoding", choices=ENCODINGS, default="binary")
    demo.add_argument("--count", type=int, default=5, help="Records to write (default: 5)")

    return parser


def cmd_append(args: argparse.Namespace, config: Config) -> int:
    try:
        record = json.loads(args.record)
    except json.JSONDecodeError as e:
        print(f"error: record is not valid JSON: {e}", file=sys.stderr)
        return 2

    with open_log(args.path, encoding=args.encoding, config=config) as log:
        size = log.append(record)

    print(f"appended {size} bytes to {args.path}")
    return 0


def require_existing(path: str) -> bool:
    """Report a missing log file. Reading commands never create one."""
    if Path(path).is_file():
        return True
    print(f"error: no such log file: {path}", file=sys.stderr)
    return False


def cmd_dump(args: argparse.Namespace, config: Config) -> int:
    if not require_existing(args.path):
        return 1

    with open_log(args.path, encoding=args.encoding, config=config) as log:
        if isinstance(log, BinaryLog):
            for record in log.records():
                print(json.dumps(record, default=str))
            return 0

        status = 0
        for entry in log.records():
            if entry.ok:
                print(json.dumps(entry.value))
            else:
                print(f"error at position {entry.position}: {entry.error}", file=sys.stderr)
                status = 1
        return status


def cmd_verify(args: argparse.Namespace, config: Config) -> int:
    if not require_existing(args.path):
        return 1

    with BinaryLog(args.path, config=config) as log:
        report = log.verify()

    print(f"records:     {report.records}")
    print(f"valid bytes: {report.valid_bytes}")
    print(f"file size:   {report.file_size}")
    print(f"stopped:     {report.halt.reason.value}")
    if report.halt.detail:
        print(f"detail:      {report.halt.detail}")

    return 0 if report.intact else 1


def sample_records(count: int) -> List[dict]:
    """Build demonstration records with nested objects."""
    return [
        {
            "id": i,
            "comment": "test",
            "objects": [{"a": i, "b": i} for _ in range(3)],
        }
        for i in range(count)
    ]


def cmd_demo(args: argparse.Namespace, config: Config) -> int:
    with open_log(args.path, encoding=args.encoding, config=config) as log:
        for record in sample_records(args.count):
            size = log.append(record)
            print(f"wrote record {record['id']} ({size} bytes)")

        if isinstance(log, BinaryLog):
            records = list(log.records())
        else:
            records = [entry.unwrap() for entry in log.records()]

    for record in records:
        print(f"read back: {json.dumps(record)}")

    print(f"{len(records)} records in {args.path}")
    return 0


COMMANDS = {
    "append": cmd_append,
    "dump": cmd_dump,
    "verify": cmd_verify,
    "demo": cmd_demo,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config = Config(args.config)
    if args.log_level:
        config.set("logging.level", args.log_level)
    if args.log_format:
        config.set("logging.format", args.log_format)

    configure_from_config(config)

    try:
        return COMMANDS[args.command](args, config)
    except (LogOpenError, LogWriteError, EncodeError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
