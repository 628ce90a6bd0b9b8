"""verify.py - round-trip check. encode, decode, compare hashes.

the default format leaves short runs of the marker byte literal, and
the decoder reads every marker as a block header. verify is how that
shows up: is_lossless goes false and the drift report says where.
"""

import hashlib
from dataclasses import dataclass, asdict

from eotrle.codec import MARKER, THRESHOLD, as_bytes, encode, decode, iter_runs


@dataclass
class RoundTrip:
    """Verifier output."""
    data_hash: str
    decoded_hash: str
    is_lossless: bool
    original_size: int
    encoded_size: int
    compression_ratio: float = 0.0
    drift_report: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


def _sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _first_difference(a: bytes, b: bytes) -> int:
    for i, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return i
    return min(len(a), len(b))


def verify(data, escape_marker: bool = False, strict: bool = False) -> RoundTrip:
    """Encode then decode, and report whether the bytes came back.

    Decoding is lenient unless strict is set, in which case a
    DecodeError propagates instead of becoming a drift report. Decoding
    is capped just past the input size, so a misread marker never
    expands into gigabytes.
    """
    original = as_bytes(data)
    encoded = encode(original, escape_marker=escape_marker)
    # one byte past the original is already drift; never expand further
    decoded = decode(encoded, strict=strict, max_output=len(original) + 1)

    data_hash = _sha256(original)
    decoded_hash = _sha256(decoded)
    is_lossless = data_hash == decoded_hash

    drift_report = ""
    if not is_lossless:
        collisions = sum(
            1 for value, length in iter_runs(original)
            if value == MARKER and length < THRESHOLD
        )
        drift_report = (
            f"DRIFT DETECTED\n"
            f"  Expected:   {data_hash[:16]} ({len(original)} bytes)\n"
            f"  Got:        {decoded_hash[:16]} ({len(decoded)} bytes)\n"
            f"  First diff: offset {_first_difference(original, decoded)}\n"
            f"  Collisions: {collisions} literal marker run(s)"
        )

    ratio = len(original) / len(encoded) if encoded else 0.0

    return RoundTrip(
        data_hash=data_hash, decoded_hash=decoded_hash,
        is_lossless=is_lossless, original_size=len(original),
        encoded_size=len(encoded), compression_ratio=ratio,
        drift_report=drift_report,
    )
