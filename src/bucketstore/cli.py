"""bucketstore CLI - deterministic command-line access to a bucket store.

Usage:
    bucketstore [--backend B] [--base-dir DIR] [--root ROOT] mkdir NAME
    bucketstore ls [NAME]
    bucketstore rmdir NAME
    bucketstore put NAME [--input PATH | --data TEXT]
    bucketstore get NAME [--out PATH]
    bucketstore rm NAME
    bucketstore stat [NAME]

Global options fall back to BUCKETSTORE_* environment variables.

Exit codes:
    0: Operation succeeded
    1: Internal error / invalid configuration
    2: Operation failed (error message or absent resource)
"""

from __future__ import annotations

import argparse
import hashlib
import json
import logging
import sys
from pathlib import Path
from typing import Any

from bucketstore.config import ConfigError, StoreSettings, open_store
from bucketstore.errors import StoreConstructionError
from bucketstore.observability import configure_tracing
from bucketstore.store import BucketStore

logger = logging.getLogger(__name__)


def _output_json(data: dict[str, Any]) -> None:
    """Output JSON to stdout with deterministic ordering."""
    print(json.dumps(data, sort_keys=True, indent=2))


def _make_error_result(code: str, message: str) -> dict[str, Any]:
    return {"error": {"code": code, "message": message}, "ok": False}


def _mutation_result(name: str, error: str | None) -> int:
    if error is not None:
        _output_json(_make_error_result("OPERATION_FAILED", error) | {"name": name})
        return 2
    _output_json({"name": name, "ok": True})
    return 0


def cmd_mkdir(store: BucketStore, args: argparse.Namespace) -> int:
    return _mutation_result(args.name, store.create_bucket(args.name))


def cmd_rmdir(store: BucketStore, args: argparse.Namespace) -> int:
    return _mutation_result(args.name, store.delete_bucket(args.name))


def cmd_rm(store: BucketStore, args: argparse.Namespace) -> int:
    return _mutation_result(args.name, store.delete_object(args.name))


def cmd_ls(store: BucketStore, args: argparse.Namespace) -> int:
    contents = store.list_contents(args.name)
    if contents is None:
        _output_json(_make_error_result("NOT_FOUND", f"Cannot list bucket '{args.name}'"))
        return 2
    _output_json({"contents": list(contents), "name": args.name, "ok": True})
    return 0


def cmd_put(store: BucketStore, args: argparse.Namespace) -> int:
    if args.data is not None:
        data = args.data.encode("utf-8")
    elif args.input:
        try:
            data = Path(args.input).read_bytes()
        except OSError as e:
            _output_json(_make_error_result("INVALID_INPUT", f"Cannot read input: {e}"))
            return 2
    else:
        data = sys.stdin.buffer.read()
    return _mutation_result(args.name, store.set_object(args.name, data))


def cmd_get(store: BucketStore, args: argparse.Namespace) -> int:
    value = store.get_object(args.name)
    if value is None:
        _output_json(_make_error_result("NOT_FOUND", f"Cannot read object '{args.name}'"))
        return 2
    data = value if isinstance(value, bytes) else str(value).encode("utf-8")

    result: dict[str, Any] = {
        "name": args.name,
        "ok": True,
        "sha256": hashlib.sha256(data).hexdigest(),
        "size_bytes": len(data),
    }
    if args.out:
        Path(args.out).write_bytes(data)
        result["out"] = args.out
    else:
        try:
            result["text"] = data.decode("utf-8")
        except UnicodeDecodeError:
            result["text"] = None
    _output_json(result)
    return 0


def cmd_stat(store: BucketStore, args: argparse.Namespace) -> int:
    _output_json(
        {
            "is_bucket": store.is_bucket(args.name),
            "is_local": store.is_local(),
            "is_object": store.is_object(args.name),
            "name": args.name,
            "ok": True,
        }
    )
    return 0


COMMAND_DISPATCH = {
    "mkdir": cmd_mkdir,
    "ls": cmd_ls,
    "rmdir": cmd_rmdir,
    "put": cmd_put,
    "get": cmd_get,
    "rm": cmd_rm,
    "stat": cmd_stat,
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bucketstore",
        description="Root-confined bucket and object storage",
    )
    parser.add_argument("--backend", choices=["memory", "filesystem"], default=None)
    parser.add_argument("--base-dir", default=None, help="Filesystem backend base directory")
    parser.add_argument("--root", default=None, help="Root bucket of the store")
    parser.add_argument("--client-id", default=None, help="Client identity")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    mkdir_parser = subparsers.add_parser("mkdir", help="Create a bucket")
    mkdir_parser.add_argument("name")

    ls_parser = subparsers.add_parser("ls", help="List a bucket (default: root)")
    ls_parser.add_argument("name", nargs="?", default="")

    rmdir_parser = subparsers.add_parser("rmdir", help="Delete an empty bucket")
    rmdir_parser.add_argument("name")

    put_parser = subparsers.add_parser("put", help="Create or update an object")
    put_parser.add_argument("name")
    source = put_parser.add_mutually_exclusive_group()
    source.add_argument("--input", "-i", default=None, help="Read content from file")
    source.add_argument("--data", default=None, help="Use TEXT as content")

    get_parser = subparsers.add_parser("get", help="Read an object")
    get_parser.add_argument("name")
    get_parser.add_argument("--out", "-o", default=None, help="Write content to file")

    rm_parser = subparsers.add_parser("rm", help="Delete an object")
    rm_parser.add_argument("name")

    stat_parser = subparsers.add_parser("stat", help="Describe a name")
    stat_parser.add_argument("name", nargs="?", default="")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Exit codes:
        0: Success
        1: Internal error / invalid configuration
        2: Operation failed
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = StoreSettings.from_env(
            backend=args.backend,
            base_dir=args.base_dir,
            root=args.root,
            client_id=args.client_id,
            log_level="DEBUG" if args.verbose else None,
        )
        logging.basicConfig(
            level=settings.log_level,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )
        configure_tracing()
        store = open_store(settings)
        return COMMAND_DISPATCH[args.command](store, args)

    except ConfigError as e:
        _output_json(_make_error_result("INVALID_CONFIG", "; ".join([e.message, *e.errors])))
        return 1
    except StoreConstructionError as e:
        _output_json(_make_error_result("INVALID_ROOT", e.message))
        return 1
    except Exception as e:
        # Fail-closed: unexpected errors return exit code 1
        logger.debug("Unhandled CLI error", exc_info=True)
        _output_json(_make_error_result("INTERNAL_ERROR", str(e)))
        return 1


if __name__ == "__main__":
    sys.exit(main())
