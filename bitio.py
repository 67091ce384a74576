"""
Stream and bit-level I/O for the Huffman codec

Sources and sinks are either paths, which are opened here and closed on every
exit path, or open file objects, which belong to the caller and are left open.
Bits are packed most-significant-bit first; the last byte is padded with 0 bits.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import IO, Iterator, Union

CHUNK_SIZE = 64 * 1024 # bytes (or characters) per read/write
DEFAULT_ENCODING = "utf-8"

Source = Union[str, os.PathLike, IO]


def _is_path(obj) -> bool:
    return isinstance(obj, (str, os.PathLike))


@contextmanager
def open_source(source: Source, *, binary: bool = False, encoding: str = DEFAULT_ENCODING) -> Iterator[IO]:
    if not _is_path(source):
        yield source # caller owns the stream
        return
    if binary:
        with open(source, "rb") as f:
            yield f
    else:
        # newline="" keeps \r\n intact so the round trip is exact
        with open(source, "r", encoding=encoding, newline="") as f:
            yield f


@contextmanager
def open_sink(sink: Source, *, binary: bool = False, encoding: str = DEFAULT_ENCODING) -> Iterator[IO]:
    if not _is_path(sink):
        try:
            yield sink
        finally:
            sink.flush() # caller keeps the stream, but whatever was written must be out
        return
    if binary:
        with open(sink, "wb") as f:
            yield f
    else:
        with open(sink, "w", encoding=encoding, newline="") as f:
            yield f


def read_chunks(stream: IO, size: int = CHUNK_SIZE):
    while True:
        chunk = stream.read(size)
        if not chunk:
            return
        yield chunk


def iter_symbols(stream: IO):
    """Yields one symbol at a time: a 1-char str for text streams, an int for binary ones."""
    for chunk in read_chunks(stream):
        yield from chunk


def iter_bits(stream: IO) -> Iterator[int]:
    for chunk in read_chunks(stream):
        for byte in chunk:
            for i in range(7, -1, -1):
                yield (byte >> i) & 1


class BitWriter:
    """Packs variable-length codes into bytes and writes them to a binary sink."""

    def __init__(self, sink: IO, buffer_size: int = CHUNK_SIZE):
        self._sink = sink
        self._buffer_size = buffer_size
        self._buf = bytearray()
        self._acc = 0
        self._acc_bits = 0 # bits currently held in _acc (0..7 between calls)
        self.bits_written = 0

    def write_code(self, code: int, length: int) -> None:
        """Write the low `length` bits of `code`, MSB first."""
        self._acc = (self._acc << length) | code
        self._acc_bits += length
        self.bits_written += length
        while self._acc_bits >= 8:
            self._acc_bits -= 8
            self._buf.append((self._acc >> self._acc_bits) & 0xFF)
        self._acc &= (1 << self._acc_bits) - 1
        if len(self._buf) >= self._buffer_size:
            self._drain()

    def finish(self) -> int:
        """Pad the last partial byte with zeros and write everything out. Returns the pad bit count."""
        pad_bits = 0
        if self._acc_bits:
            pad_bits = 8 - self._acc_bits
            self._buf.append((self._acc << pad_bits) & 0xFF)
            self._acc = 0
            self._acc_bits = 0
        self._drain()
        self._sink.flush()
        return pad_bits

    def _drain(self) -> None:
        if self._buf:
            self._sink.write(bytes(self._buf))
            self._buf.clear()
