"""
Compress a file with Huffman coding and decompress it again

How to run:
  python driver.py notes.txt
  python driver.py image.bmp --binary --outdir out
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import huffman as huff
from bitio import DEFAULT_ENCODING
from codec import compress, decompress
from errors import FormatError, UnknownSymbolError

EXIT_IO_ERROR = 2
EXIT_UNKNOWN_SYMBOL = 3
EXIT_FORMAT_ERROR = 4


def output_paths(input_path: Path, outdir: Path):
    compressed = outdir / f"{input_path.stem}_compressed.bin"
    decompressed = outdir / f"{input_path.stem}_decompressed{input_path.suffix}"
    return compressed, decompressed


def run(input_path: Path, outdir: Path, binary: bool, encoding: str, quiet: bool) -> int:
    report = (lambda *a: None) if quiet else print

    freqs = huff.count_frequencies(input_path, binary=binary, encoding=encoding)
    report(f"Symbols read: {sum(freqs.values())} ({len(freqs)} distinct)")
    report("Frequencies:", freqs)

    tree = huff.build_tree(freqs)
    codes = huff.build_code_table(tree)
    report("Codes:", codes)
    report(f"Tree depth: {huff.tree_depth(tree)}")

    outdir.mkdir(parents=True, exist_ok=True)
    compressed_path, decompressed_path = output_paths(input_path, outdir)

    bits = compress(codes, input_path, compressed_path, binary=binary, encoding=encoding)
    original_bytes = input_path.stat().st_size
    compressed_bytes = compressed_path.stat().st_size
    report(f"Compressed {input_path} -> {compressed_path} ({bits} bits, {compressed_bytes} bytes)")

    # same in-memory tree, the compressed file carries no table
    decompress(compressed_path, decompressed_path, tree, binary=binary, encoding=encoding)
    report(f"Decompressed {compressed_path} -> {decompressed_path}")

    if original_bytes:
        report(f"Compression ratio: {compressed_bytes / original_bytes:.3f}")
    if decompressed_path.read_bytes() != input_path.read_bytes():
        print("Round trip mismatch", file=sys.stderr)
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Huffman compress and decompress a file")
    ap.add_argument("input", type=Path, help="File to compress")
    ap.add_argument("--outdir", type=Path, default=None, help="Where to write outputs (default: next to the input)")
    ap.add_argument("--binary", action="store_true", help="Treat the input as bytes instead of text")
    ap.add_argument("--encoding", default=DEFAULT_ENCODING, help="Text encoding of the input")
    ap.add_argument("--quiet", action="store_true", help="Only report errors")
    args = ap.parse_args(argv)

    outdir = args.outdir if args.outdir is not None else args.input.parent
    try:
        return run(args.input, outdir, args.binary, args.encoding, args.quiet)
    except UnknownSymbolError as e:
        print(f"Code table does not match the input: {e}", file=sys.stderr)
        return EXIT_UNKNOWN_SYMBOL
    except FormatError as e:
        print(f"Bad compressed file: {e}", file=sys.stderr)
        return EXIT_FORMAT_ERROR
    except (OSError, UnicodeError) as e: # unreadable input or bad text encoding
        print(f"Failed to read or write a file: {e}", file=sys.stderr)
        return EXIT_IO_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
