"""stats.py - run analysis without encoding.

finds every maximal run with numpy, then prices each one under the
same threshold, split and escape rules the encoder uses. the predicted
size matches len(encode(data)) exactly.
"""

from dataclasses import dataclass, asdict

import numpy as np

from eotrle import codec


@dataclass
class RunStats:
    """What the encoder would do with this input."""
    input_size: int
    runs: int
    longest_run: int
    encoded_runs: int
    literal_bytes: int
    marker_collisions: int
    encoded_size: int
    compression_ratio: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)

    def summary(self) -> str:
        lines = [
            f"  Input:      {self.input_size} bytes in {self.runs} runs "
            f"(longest {self.longest_run})",
            f"  Encoded:    {self.encoded_size} bytes "
            f"({self.encoded_runs} blocks, {self.literal_bytes} literal)",
            f"  Ratio:      {self.compression_ratio:.2f}x",
        ]
        if self.marker_collisions:
            lines.append(
                f"  Collisions: {self.marker_collisions} short run(s) of byte "
                f"{codec.MARKER}; use --escape-marker for a lossless stream"
            )
        return "\n".join(lines)


def run_lengths(data) -> tuple[np.ndarray, np.ndarray]:
    """(values, lengths) of every maximal run, as arrays."""
    arr = np.frombuffer(codec.as_bytes(data), dtype=np.uint8)
    if arr.size == 0:
        return np.empty(0, dtype=np.uint8), np.empty(0, dtype=np.int64)
    # uint8 diff wraps, but stays nonzero exactly where neighbours differ
    starts = np.concatenate(([0], np.flatnonzero(np.diff(arr)) + 1))
    lengths = np.diff(np.append(starts, arr.size)).astype(np.int64)
    return arr[starts], lengths


def analyze(data, escape_marker: bool = False) -> RunStats:
    values, lengths = run_lengths(data)
    input_size = int(lengths.sum())

    full_blocks = (lengths - 1) // codec.MAX_RUN
    remainder = lengths - full_blocks * codec.MAX_RUN
    is_marker = values == codec.MARKER
    blocked = remainder >= codec.THRESHOLD
    if escape_marker:
        blocked |= is_marker

    encoded_runs = int(full_blocks.sum() + blocked.sum())
    literal_bytes = int(remainder[~blocked].sum())
    encoded_size = encoded_runs * codec.BLOCK_SIZE + literal_bytes

    return RunStats(
        input_size=input_size,
        runs=int(lengths.size),
        longest_run=int(lengths.max()) if lengths.size else 0,
        encoded_runs=encoded_runs,
        literal_bytes=literal_bytes,
        marker_collisions=int((is_marker & (lengths < codec.THRESHOLD)).sum()),
        encoded_size=encoded_size,
        compression_ratio=input_size / encoded_size if encoded_size else 0.0,
    )
