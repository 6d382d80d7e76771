"""Command line tooling for inspecting and migrating persisted records.

Examples::

    fetchfile show settings.yaml --format yaml
    fetchfile show config.bin --format binary --type myapp.config:Config
    fetchfile convert config.bin config.json --type myapp.config:Config --from binary --to json
    fetchfile init config.yaml --type myapp.config:Config --format yaml
"""
from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from typing import Any, List, Optional

from . import recovery, storage
from .codec import Format, codec_for
from .config import CodecOptions
from .errors import FetchError
from .logging_config import configure_logging
from .records import to_plain

logger = logging.getLogger(__name__)


def resolve_type(spec: str) -> type:
    """Import a record type given as ``package.module:ClassName``."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise argparse.ArgumentTypeError(f"Expected module:Class, got {spec!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise argparse.ArgumentTypeError(f"Cannot import {module_name!r}: {exc}") from exc
    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise argparse.ArgumentTypeError(f"{module_name!r} has no attribute {attr!r}") from exc
    if not isinstance(obj, type):
        raise argparse.ArgumentTypeError(f"{spec!r} is not a class")
    return obj


def _format_arg(value: str) -> Format:
    try:
        return Format.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fetchfile", description="Inspect and convert persisted records")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Decode a file and print it as JSON")
    show.add_argument("path")
    show.add_argument("--format", dest="fmt", type=_format_arg, required=True)
    show.add_argument("--type", dest="record_type", type=resolve_type, default=None)

    convert = sub.add_parser("convert", help="Re-encode a file in another format")
    convert.add_argument("src")
    convert.add_argument("dst")
    convert.add_argument("--type", dest="record_type", type=resolve_type, required=True)
    convert.add_argument("--from", dest="src_fmt", type=_format_arg, required=True)
    convert.add_argument("--to", dest="dst_fmt", type=_format_arg, required=True)

    init = sub.add_parser("init", help="Write the type's default unless a readable file exists")
    init.add_argument("path")
    init.add_argument("--type", dest="record_type", type=resolve_type, required=True)
    init.add_argument("--format", dest="fmt", type=_format_arg, default=None)
    return parser


def _cmd_show(args: argparse.Namespace, options: CodecOptions) -> int:
    codec = codec_for(args.fmt, options)
    data = storage.read_bytes(args.path)
    if args.record_type is None:
        plain = codec.loads_plain(data)
    else:
        plain = to_plain(codec.decode(data, args.record_type))
    print(json.dumps(plain, indent=options.json_indent, ensure_ascii=False, default=str))
    return 0


def _cmd_convert(args: argparse.Namespace, options: CodecOptions) -> int:
    value = codec_for(args.src_fmt, options).decode(storage.read_bytes(args.src), args.record_type)
    storage.write_bytes(args.dst, codec_for(args.dst_fmt, options).encode(value))
    logger.info("Converted %s (%s) -> %s (%s)", args.src, args.src_fmt.value, args.dst, args.dst_fmt.value)
    return 0


def _cmd_init(args: argparse.Namespace, options: CodecOptions) -> int:
    outcome = recovery.fetch_or_init(args.record_type, args.path, args.fmt, options)
    if outcome.used_default:
        print(f"wrote default {args.record_type.__name__} to {args.path}")
    else:
        print(f"{args.path} already holds a valid {args.record_type.__name__}")
    return 0


_COMMANDS = {
    "show": _cmd_show,
    "convert": _cmd_convert,
    "init": _cmd_init,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=logging.DEBUG if args.debug else None)
    options = CodecOptions.from_env()
    try:
        return _COMMANDS[args.command](args, options)
    except FetchError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
