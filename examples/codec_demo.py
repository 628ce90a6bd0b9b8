#!/usr/bin/env python3
"""
EOT-RLE Codec Demo
Long runs become six bytes. Short runs stay as they are.
"""

from eotrle import encode, decode, verify, analyze


def show(label, data, escape_marker=False):
    encoded = encode(data, escape_marker=escape_marker)
    result = verify(data, escape_marker=escape_marker)
    print(f"[{label}] {len(data)} -> {len(encoded)} bytes")
    print(f"  In:       {list(data[:16])}{' ...' if len(data) > 16 else ''}")
    print(f"  Out:      {list(encoded[:16])}{' ...' if len(encoded) > 16 else ''}")
    print(f"  Lossless: {result.is_lossless}")
    if result.drift_report:
        print(result.drift_report)
    print()


def demo():
    print("=" * 60)
    print("EOT-RLE DEMO")
    print("Marker 4, u32 big-endian length, value.")
    print("=" * 60 + "\n")

    show("NO RUNS", bytes([0, 1, 2, 3, 5, 6, 7]))
    show("BELOW THRESHOLD", bytes([0] * 5))
    show("TWO BLOCKS", bytes([0] * 6 + [1] * 6))
    show("BLOCK + LITERALS", bytes([0] * 63 + [64, 64, 230]))

    print("-" * 60)
    collision = bytes([4, 0, 0, 0, 2, 7, 1])
    show("MARKER COLLISION", collision)
    show("MARKER ESCAPED", collision, escape_marker=True)

    print("-" * 60)
    image_row = bytes([255] * 200 + [0] * 40 + [128, 129, 130] + [255] * 300)
    print("[STATS] scanline")
    print(analyze(image_row).summary())
    assert decode(encode(image_row)) == image_row


if __name__ == "__main__":
    demo()
