"""eotrle: run-length codec with an End-of-Transmission escape marker."""

from eotrle.codec import (
    MARKER, THRESHOLD, BLOCK_SIZE, MAX_RUN,
    DecodeError, Run,
    encode, compress, decode, decompress, encode_block, iter_runs,
)
from eotrle.verify import verify, RoundTrip
from eotrle.stats import analyze, run_lengths, RunStats

__version__ = "0.1.0"

__all__ = [
    "MARKER", "THRESHOLD", "BLOCK_SIZE", "MAX_RUN",
    "DecodeError", "Run",
    "encode", "compress", "decode", "decompress", "encode_block", "iter_runs",
    "verify", "RoundTrip",
    "analyze", "run_lengths", "RunStats",
]
