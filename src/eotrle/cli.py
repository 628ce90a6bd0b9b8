"""eotrle CLI: unified entry point.

Usage:
    eotrle encode data.bin                  # writes data.bin.rle
    eotrle encode data.bin -o out.rle --escape-marker
    eotrle decode data.bin.rle              # writes data.bin
    eotrle decode blob -o out --lenient     # copy truncated blocks as-is
    eotrle decode big.rle --max-output 1000000
    eotrle verify data.bin --no-escape-marker
    eotrle verify data.bin --json           # round-trip check
    eotrle stats data.bin                   # runs, predicted size, collisions
    eotrle config list                      # merged config with sources
    eotrle config set escape_marker true --global
    eotrle metrics                          # usage summary
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from eotrle.log import info, warn, error


# ============================================================
# HELPERS
# ============================================================

def _flag(args, name, config):
    """CLI flag wins when given, else config."""
    value = getattr(args, name, None)
    return config.get(name) if value is None else value


def _record(config, op, input_size, output_size, ok=True):
    if not config.get("metrics"):
        return
    from eotrle import metrics
    try:
        metrics.record(op, input_size, output_size, ok=ok)
    except OSError as e:
        warn("metrics", f"could not record: {e}")


# ============================================================
# CODEC COMMANDS
# ============================================================

def cmd_encode(args, config):
    from eotrle.io import encode_file
    from eotrle.verify import verify
    escape = _flag(args, "escape_marker", config)
    dst = encode_file(args.file, args.output, escape_marker=escape)
    size_in, size_out = Path(args.file).stat().st_size, dst.stat().st_size
    print(f"  Encoded: {dst} ({size_in} -> {size_out} bytes)")
    _record(config, "encode", size_in, size_out)

    if config.get("verify"):
        result = verify(Path(args.file).read_bytes(), escape_marker=escape)
        if result.is_lossless:
            info("verify", "round trip lossless")
        else:
            warn("verify", result.drift_report)
            return 1
    return 0


def cmd_decode(args, config):
    from eotrle.io import decode_file
    strict = _flag(args, "strict", config)
    dst = decode_file(args.file, args.output, strict=strict, max_output=args.max_output)
    size_in, size_out = Path(args.file).stat().st_size, dst.stat().st_size
    print(f"  Decoded: {dst} ({size_in} -> {size_out} bytes)")
    _record(config, "decode", size_in, size_out)
    return 0


def cmd_verify(args, config):
    from eotrle.verify import verify
    data = Path(args.file).read_bytes()
    result = verify(data, escape_marker=_flag(args, "escape_marker", config))
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(f"\n  Lossless: {result.is_lossless}")
        print(f"  Size:     {result.original_size} -> {result.encoded_size} bytes "
              f"({result.compression_ratio:.2f}x)")
        if result.drift_report:
            print()
            print(result.drift_report)
        print()
    return 0 if result.is_lossless else 1


def cmd_stats(args, config):
    from eotrle.stats import analyze
    data = Path(args.file).read_bytes()
    stats = analyze(data, escape_marker=_flag(args, "escape_marker", config))
    if args.json:
        print(json.dumps(stats.to_dict(), indent=2))
    else:
        print()
        print(stats.summary())
        print()
    return 0


# ============================================================
# CONFIG + METRICS
# ============================================================

def cmd_config(args, config):
    from eotrle import config as cfg
    op = args.op
    if op == "list":
        for key, entry in cfg.list_config().items():
            print(f"  {key:<14} {str(entry['value']):<6} ({entry['source']})")
    elif op == "get":
        if args.key not in cfg.DEFAULTS:
            error("config", f"unknown key '{args.key}'. have: {list(cfg.DEFAULTS)}")
            return 1
        print(cfg.get_value(args.key))
    elif op == "set":
        if args.key not in cfg.DEFAULTS:
            error("config", f"unknown key '{args.key}'. have: {list(cfg.DEFAULTS)}")
            return 1
        value = cfg.parse_bool(args.value or "")
        if value is None:
            error("config", f"'{args.value}' is not a boolean")
            return 1
        if args.use_global:
            cfg.set_global_value(args.key, value)
        else:
            cfg.set_project_value(args.key, value)
        info("config", f"{args.key} = {value}")
    elif op == "init":
        print(f"  {cfg.init_project_config()}")
    return 0


def cmd_metrics(args, config):
    from eotrle import metrics
    s = metrics.summary()
    if args.json:
        print(json.dumps(s, indent=2))
        return 0
    print(f"\n  Operations: {s['total']} ({s['failures']} failed)")
    for op, count in sorted(s["ops"].items()):
        print(f"    {op:<8} {count}")
    print(f"  Bytes:      {s['bytes_in']} in, {s['bytes_out']} out")
    print(f"  Encode:     {s['encode_ratio']:.2f}x\n")
    return 0


# ============================================================
# PARSER
# ============================================================

def _add_escape_arg(p):
    p.add_argument("--escape-marker", dest="escape_marker",
                   action=argparse.BooleanOptionalAction, default=None,
                   help="Always block runs of byte 4 so the output decodes exactly (overrides config)")


def _build_parsers(subparsers):
    """register all subcommands."""
    p = subparsers.add_parser("encode", help="Encode a file")
    p.add_argument("file")
    p.add_argument("--output", "-o", default=None, help="Destination (default: FILE.rle)")
    _add_escape_arg(p)
    p.set_defaults(func=cmd_encode)

    p = subparsers.add_parser("decode", help="Decode a file")
    p.add_argument("file")
    p.add_argument("--output", "-o", default=None, help="Destination (default: FILE without .rle)")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--strict", dest="strict", action="store_const", const=True, default=None,
                      help="Fail on truncated or zero-length blocks (overrides config)")
    mode.add_argument("--lenient", dest="strict", action="store_const", const=False,
                      help="Copy truncated blocks literally instead of failing")
    p.add_argument("--max-output", type=int, default=None, metavar="BYTES",
                   help="Refuse to decode more than BYTES (--lenient stops there instead)")
    p.set_defaults(func=cmd_decode)

    p = subparsers.add_parser("verify", help="Round-trip check")
    p.add_argument("file")
    _add_escape_arg(p)
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=cmd_verify)

    p = subparsers.add_parser("stats", help="Run analysis and predicted size")
    p.add_argument("file")
    _add_escape_arg(p)
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=cmd_stats)

    p = subparsers.add_parser("config", help="Show or change configuration")
    p.add_argument("op", choices=["list", "get", "set", "init"], default="list", nargs="?")
    p.add_argument("key", nargs="?", default="")
    p.add_argument("value", nargs="?", default="")
    p.add_argument("--global", dest="use_global", action="store_true",
                   help="Write to ~/.eotrle/config.json instead of .eotrle.json")
    p.set_defaults(func=cmd_config)

    p = subparsers.add_parser("metrics", help="Usage summary")
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=cmd_metrics)


def main(argv=None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="eotrle",
        description="Run-length codec with an End-of-Transmission escape marker.",
    )
    subparsers = parser.add_subparsers(dest="command")
    _build_parsers(subparsers)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    from eotrle.codec import DecodeError
    from eotrle.config import load_config
    config = load_config()

    try:
        return args.func(args, config)
    except DecodeError as e:
        error("codec", f"{args.file}: {e}")
        _record(config, args.command, 0, 0, ok=False)
        return 1
    except OSError as e:
        error("cli", str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
