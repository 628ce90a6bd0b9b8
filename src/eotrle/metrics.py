"""metrics.py - what the codec has been doing.

every CLI encode/decode appends one line to ~/.eotrle/metrics.jsonl.
summary() folds them into counts, bytes in/out and an overall ratio.
"""

import time
from collections import Counter

from eotrle import paths
from eotrle.io import read_jsonl, append_jsonl


def record(op: str, input_size: int, output_size: int, ok: bool = True):
    """record one codec operation."""
    append_jsonl(paths.METRICS_FILE, {
        "ts": int(time.time()),
        "op": op,
        "input_size": input_size,
        "output_size": output_size,
        "ok": ok,
    })


def summary() -> dict:
    records = read_jsonl(paths.METRICS_FILE)
    ops = Counter(r.get("op", "?") for r in records)
    encodes = [r for r in records if r.get("op") == "encode" and r.get("ok", True)]
    raw = sum(r.get("input_size", 0) for r in encodes)
    packed = sum(r.get("output_size", 0) for r in encodes)
    return {
        "total": len(records),
        "ops": dict(ops),
        "failures": sum(1 for r in records if not r.get("ok", True)),
        "bytes_in": sum(r.get("input_size", 0) for r in records),
        "bytes_out": sum(r.get("output_size", 0) for r in records),
        "encode_ratio": raw / packed if packed else 0.0,
    }
