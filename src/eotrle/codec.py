"""
EOT-RLE: run-length codec
Encoder / Decoder

Runs of six or more identical bytes become a 6-byte block:
the End-of-Transmission marker (4), the run length as a big-endian
u32, then the repeated byte. Shorter runs are copied as they are.
"""

from dataclasses import dataclass
from typing import Iterator

from eotrle.log import codec_span


# ===== FORMAT =====

# https://en.wikipedia.org/wiki/End-of-Transmission_character
MARKER = 4
THRESHOLD = 6
BLOCK_SIZE = 6
MAX_RUN = 2**32 - 1


class DecodeError(ValueError):
    """Encoded stream cannot be expanded."""

    def __init__(self, message: str, offset: int):
        super().__init__(message)
        self.offset = offset


@dataclass
class Run:
    """The pending run. Value is the last byte seen, length how many in a row."""
    value: int = 0
    length: int = 0


def as_bytes(data) -> bytes:
    """Coerce bytes-like input or an iterable of ints to bytes.

    Buffers must hold single bytes; wider items (int64 arrays and the
    like) are rejected rather than read as raw memory.
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        raise TypeError("str has no byte identity; encode it first")
    if isinstance(data, int):
        raise TypeError(f"expected a byte sequence, got int {data}")
    try:
        view = memoryview(data)
    except TypeError:
        # iterables of ints; bytes() raises ValueError outside 0..255
        return bytes(data)
    if view.itemsize != 1:
        raise TypeError(
            f"buffer items are {view.itemsize} bytes wide; expected single bytes"
        )
    return view.tobytes()


# ===== ENCODER =====

def encode_block(value: int, length: int) -> bytes:
    """One encoded block: marker, big-endian length, value."""
    if not 0 <= value <= 255:
        raise ValueError(f"value {value} is not a byte")
    if not 1 <= length <= MAX_RUN:
        raise ValueError(f"run length {length} outside 1..{MAX_RUN}")
    return bytes((MARKER,)) + length.to_bytes(4, "big") + bytes((value,))


def _flush(run: Run, output: bytearray, escape_marker: bool):
    length = run.length
    # runs past the u32 range are split, never wrapped
    while length > MAX_RUN:
        output += encode_block(run.value, MAX_RUN)
        length -= MAX_RUN
    if length >= THRESHOLD or (escape_marker and run.value == MARKER and length):
        output += encode_block(run.value, length)
    else:
        output += bytes((run.value,)) * length


def encode(data, escape_marker: bool = False) -> bytes:
    """Encode bytes to EOT-RLE.

    Only runs of 6 or more are shortened; below that a block costs more
    than the literal bytes. With escape_marker, runs of the marker byte
    are always blocked so the output decodes back exactly.
    """
    src = as_bytes(data)
    with codec_span("encode", input_size=len(src), escape_marker=escape_marker) as s:
        output = bytearray()
        run = Run()

        for byte in src:
            if byte == run.value:
                run.length += 1
            else:
                _flush(run, output, escape_marker)
                run = Run(byte, 1)

        _flush(run, output, escape_marker)

        s.set_attribute("eotrle.output_size", len(output))
        return bytes(output)


compress = encode


def iter_runs(data) -> Iterator[tuple[int, int]]:
    """Yield (value, length) for every maximal run, in order."""
    run = None
    for byte in as_bytes(data):
        if run is not None and byte == run.value:
            run.length += 1
            continue
        if run is not None:
            yield run.value, run.length
        run = Run(byte, 1)
    if run is not None:
        yield run.value, run.length


# ===== DECODER =====

def _room(output: bytearray, count: int, max_output, strict: bool, offset: int) -> int:
    """How many of count bytes may still be appended under max_output."""
    if max_output is None or len(output) + count <= max_output:
        return count
    if strict:
        raise DecodeError(
            f"output would exceed {max_output} bytes at offset {offset}", offset=offset,
        )
    return max_output - len(output)


def decode(data, strict: bool = True, max_output=None) -> bytes:
    """Expand an EOT-RLE stream. Mechanical, not clever.

    A marker byte always starts a block. Strict mode rejects truncated
    and zero-length blocks; lenient mode copies a truncated tail as-is
    and expands zero-length blocks to nothing.

    max_output caps the decoded size, since a single 6-byte block can
    ask for 4 GiB. Past the cap, strict mode raises DecodeError and
    lenient mode stops with exactly max_output bytes.
    """
    src = as_bytes(data)
    with codec_span("decode", input_size=len(src), strict=strict) as s:
        output = bytearray()
        i, n = 0, len(src)

        while i < n:
            j = src.find(MARKER, i)
            end = n if j < 0 else j
            k = _room(output, end - i, max_output, strict, i)
            output += src[i:i + k]
            if j < 0 or k < end - i:
                break

            if j + BLOCK_SIZE > n:
                if strict:
                    raise DecodeError(
                        f"truncated block at offset {j}: "
                        f"need {BLOCK_SIZE} bytes, have {n - j}", offset=j,
                    )
                k = _room(output, n - j, max_output, strict, j)
                output += src[j:j + k]
                break

            length = int.from_bytes(src[j + 1:j + 5], "big")
            if length == 0 and strict:
                raise DecodeError(f"zero-length block at offset {j}", offset=j)
            k = _room(output, length, max_output, strict, j)
            output += src[j + 5:j + 6] * k
            if k < length:
                break
            i = j + BLOCK_SIZE

        s.set_attribute("eotrle.output_size", len(output))
        return bytes(output)


decompress = decode
