"""io.py - file codec and JSON/JSONL utilities.

encode_file, decode_file for whole files.
read_json, write_json, read_jsonl, append_jsonl for config and metrics.
"""

import json
from pathlib import Path

from eotrle.codec import encode, decode
from eotrle.log import span, info
from eotrle.paths import ensure_dir

SUFFIX = ".rle"


# ============================================================
# FILE CODEC
# ============================================================

def encode_file(src, dst=None, escape_marker: bool = False) -> Path:
    """encode a file. default destination is <src>.rle."""
    src = Path(src)
    dst = Path(dst) if dst else src.with_name(src.name + SUFFIX)
    with span("encode_file", subsystem="io", src=src, dst=dst):
        data = src.read_bytes()
        encoded = encode(data, escape_marker=escape_marker)
        ensure_dir(dst.parent)
        dst.write_bytes(encoded)
        info("io", f"{src} -> {dst} ({len(data)} -> {len(encoded)} bytes)")
    return dst


def decode_file(src, dst=None, strict: bool = True, max_output=None) -> Path:
    """decode a file. strips .rle for the destination, else appends .out.
    max_output caps the decoded size (see codec.decode)."""
    src = Path(src)
    if dst:
        dst = Path(dst)
    elif src.suffix == SUFFIX:
        dst = src.with_suffix("")
    else:
        dst = src.with_name(src.name + ".out")
    with span("decode_file", subsystem="io", src=src, dst=dst):
        data = src.read_bytes()
        decoded = decode(data, strict=strict, max_output=max_output)
        ensure_dir(dst.parent)
        dst.write_bytes(decoded)
        info("io", f"{src} -> {dst} ({len(data)} -> {len(decoded)} bytes)")
    return dst


# ============================================================
# JSON
# ============================================================

def read_json(path: Path, default=None):
    """read a JSON file. returns default if missing or corrupt."""
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return default


def write_json(path: Path, data, indent: int = 2):
    """write data as JSON. creates parent dirs."""
    ensure_dir(path.parent)
    path.write_text(json.dumps(data, indent=indent) + "\n")


def read_jsonl(path: Path) -> list[dict]:
    """read a JSONL file. skips blank/corrupt lines."""
    if not path.exists():
        return []
    records = []
    try:
        with open(path, "r") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
    except OSError:
        pass
    return records


def append_jsonl(path: Path, record: dict):
    """append one record to a JSONL file. creates parent dirs."""
    ensure_dir(path.parent)
    with open(path, "a") as f:
        f.write(json.dumps(record) + "\n")
