"""Command-line entry point: ``ddfs-client`` / ``python -m disco.ddfs``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .blobs import tag_blob_sizes
from .config import Config, default_config
from .errors import DDFSError
from .jobs import submit_jobpack
from .logs import setup_logging
from .tags import resolve_tag
from .transport import HttpTransport, transport_scope
from .uri import uri_to_string


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ddfs-client", description="Query DDFS tags and submit Disco jobs.")
    parser.add_argument("--master", help="master hostname (default: $DISCO_MASTER_HOST or localhost)")
    parser.add_argument("--port", type=int, help="master port (default: $DISCO_PORT or 8989)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug diagnostics")
    parser.add_argument("--log-file", help="also write JSON logs to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    tag = sub.add_parser("tag", help="print a tag as JSON")
    tag.add_argument("name")

    sizes = sub.add_parser("sizes", help="print the size of every blob of a tag")
    sizes.add_argument("name")

    submit = sub.add_parser("submit", help="submit a pre-built job package")
    submit.add_argument("jobpack", type=Path)
    submit.add_argument("--timeout", type=float, default=None)
    return parser


def _config(args: argparse.Namespace) -> Config:
    cfg = default_config()
    return Config(
        master_host=args.master or cfg.master_host,
        master_port=args.port if args.port is not None else cfg.master_port,
    )


def _cmd_tag(args: argparse.Namespace, cfg: Config, transport: HttpTransport) -> int:
    tag = resolve_tag(args.name, cfg=cfg, transport=transport)
    print(json.dumps(tag.to_dict(), indent=2))
    return 0


def _cmd_sizes(args: argparse.Namespace, cfg: Config, transport: HttpTransport) -> int:
    for group, size in tag_blob_sizes(args.name, cfg=cfg, transport=transport):
        label = str(size) if size is not None else "unknown"
        print(f"{label}\t{' '.join(uri_to_string(u) for u in group)}")
    return 0


def _cmd_submit(args: argparse.Namespace, cfg: Config, transport: HttpTransport) -> int:
    payload = args.jobpack.read_bytes()
    response = submit_jobpack(payload, cfg=cfg, timeout=args.timeout, transport=transport)
    if response.status == "ok":
        print(f"Submitted job: {response.value}")
    elif response.status == "error":
        print(response.value)
    else:
        print(f"Unknown response: {response.value}")
    return 0


COMMANDS = {"tag": _cmd_tag, "sizes": _cmd_sizes, "submit": _cmd_submit}


def main(argv: Optional[List[str]] = None, transport: Optional[HttpTransport] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)
    try:
        with transport_scope(transport) as http:
            return COMMANDS[args.command](args, _config(args), http)
    except (DDFSError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
