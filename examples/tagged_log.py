#!/usr/bin/env python3
"""
tagged_log.py: end-to-end example using rochefort_sdk

What this script does:
1) Appends a few log lines to a namespace, tagging each with its level.
2) Reserves room in the first record and patches it in place.
3) Fetches everything back in one batch call.
4) Searches for error OR warning lines, then scans the whole namespace.
5) Deletes the namespace (unless --keep).

Requirements
------------
- A running rochefort store speaking the v2 protocol.
- The SDK installed (editable is OK): `python -m pip install -e .`

  ROCHEFORT_URL       (default: http://127.0.0.1:8000)
  ROCHEFORT_TIMEOUT   (default: 1.0)
"""

from __future__ import annotations

import argparse
import sys

from rochefort_sdk import AppendEntry, Client, ClientConfig, RochefortError, any_of

LINES = [
    ("info", b"service started"),
    ("warning", b"disk 85% full"),
    ("error", b"write failed: EIO"),
    ("info", b"retrying write"),
]


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    ap.add_argument("--namespace", default="example-log")
    ap.add_argument("--keep", action="store_true", help="do not delete the namespace")
    args = ap.parse_args(argv)

    cfg = ClientConfig.from_env()
    try:
        with Client(cfg) as r:
            status = r.append(args.namespace, b"status: starting", alloc_size=32)
            offsets = r.set([AppendEntry(args.namespace, line, (level,)) for level, line in LINES])
            print(f"appended {len(offsets) + 1} records, status at offset {status}")

            r.modify(args.namespace, status, 8, b"running ")
            print("status now:", r.get_one(args.namespace, status).decode())

            for off, data in zip(offsets, r.get([(args.namespace, o) for o in offsets])):
                print(f"  {off:>8}  {data.decode()}")

            print("errors and warnings:")
            with r.search(args.namespace, any_of("error", "warning")) as hits:
                for off, data in hits:
                    print(f"  {off:>8}  {data.decode()}")

            total = r.scan(args.namespace, lambda off, data: None)
            print(f"scan saw {total} records")

            if not args.keep:
                r.delete(args.namespace)
    except RochefortError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
