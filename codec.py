"""
Encoder and decoder between a symbol stream and a packed Huffman bitstream

The compressed artifact has no header: decompress() must be given the tree that
produced the code table (or one built from the same frequency table). The tree's
root weight is the number of symbols encoded, which tells the decoder where the
meaningful bits end and the zero padding of the last byte begins.
"""

from __future__ import annotations

import io
from typing import Dict, Hashable, List, Optional, Tuple, Union

from bitio import CHUNK_SIZE, DEFAULT_ENCODING, BitWriter, Source, iter_bits, iter_symbols, open_sink, open_source
from errors import FormatError, UnknownSymbolError
from huffman import Leaf, Node, Placeholder, has_byte_symbols


def _code_words(code_table: Dict[Hashable, str]) -> Dict[Hashable, Tuple[int, int]]: # symbol -> (code as int, bit length)
    return {symbol: (int(code, 2), len(code)) for symbol, code in code_table.items()}


def _join(symbols: List[Hashable]) -> Union[str, bytes]:
    if isinstance(symbols[0], int):
        return bytes(symbols)
    return "".join(symbols)


def compress(code_table: Dict[Hashable, str], source: Source, sink: Source, *,
             binary: bool = False, encoding: str = DEFAULT_ENCODING) -> int:
    """
    Encode every symbol of `source` with `code_table` and write the packed bits to `sink`

    `source` is read as text unless binary=True (paths only; open files are read as they are).
    `sink` receives bytes. Returns the number of meaningful bits written.
    Raises UnknownSymbolError for a symbol missing from the table; OSError propagates.
    """
    words = _code_words(code_table)
    with open_source(source, binary=binary, encoding=encoding) as reader, open_sink(sink, binary=True) as writer:
        bits = BitWriter(writer)
        for position, symbol in enumerate(iter_symbols(reader)):
            try:
                code, length = words[symbol]
            except KeyError:
                raise UnknownSymbolError(symbol, position) from None
            bits.write_code(code, length)
        bits.finish()
    return bits.bits_written


def _output_is_binary(root: Optional[Node], binary: Optional[bool]) -> bool:
    if root is None:
        return bool(binary)
    tree_binary = has_byte_symbols(root)
    if binary is not None and binary != tree_binary:
        kind = "byte values" if tree_binary else "characters"
        raise ValueError(f"binary={binary} does not match a tree whose symbols are {kind}")
    return tree_binary


def decompress(source: Source, sink: Source, root: Optional[Node], *,
               binary: Optional[bool] = None, encoding: str = DEFAULT_ENCODING,
               symbol_count: Optional[int] = None) -> int:
    """
    Decode the packed bits in `source` by walking the tree and write the symbols to `sink`

    The tree's symbols decide the output: bytes for byte values, text for characters.
    A path sink is opened to match; `binary`, if given, must agree with the tree.
    Decoding stops after `symbol_count` symbols (default: the root weight). Only zero
    padding may follow, and the walk has to end back at the root; anything else
    raises FormatError. A None tree writes nothing. Returns the symbol count written.
    """
    binary = _output_is_binary(root, binary)
    if root is None:
        with open_sink(sink, binary=binary, encoding=encoding):
            return 0 # no tree, nothing was encoded

    count = root.weight if symbol_count is None else symbol_count
    with open_source(source, binary=True) as reader, open_sink(sink, binary=binary, encoding=encoding) as writer:
        bits = iter_bits(reader)
        out: List[Hashable] = []
        node = root
        emitted = 0
        while emitted < count:
            bit = next(bits, None)
            if bit is None:
                if node is root:
                    raise FormatError(f"bitstream ended after {emitted} of {count} symbols")
                raise FormatError(f"bitstream ended in the middle of a code after {emitted} of {count} symbols")
            node = node.right if bit else node.left

            if isinstance(node, Leaf):
                out.append(node.symbol)
                emitted += 1
                node = root
                if len(out) >= CHUNK_SIZE:
                    writer.write(_join(out))
                    out.clear()
            elif isinstance(node, Placeholder):
                raise FormatError(f"code for symbol {emitted} leads to the placeholder leaf")

        if out:
            writer.write(_join(out))
        _check_padding(bits)
    return emitted


def _check_padding(bits) -> None:
    # whatever follows the last symbol must be the zero fill of its byte
    pad_bits = 0
    for bit in bits:
        pad_bits += 1
        if pad_bits >= 8:
            raise FormatError("unexpected data after the last symbol")
        if bit:
            raise FormatError("padding bits after the last symbol are not zero")


def compress_bytes(code_table: Dict[Hashable, str], data: Union[str, bytes]) -> bytes:
    source = io.StringIO(data, newline="") if isinstance(data, str) else io.BytesIO(data)
    sink = io.BytesIO()
    compress(code_table, source, sink)
    return sink.getvalue()


def decompress_bytes(packed: bytes, root: Optional[Node], symbol_count: Optional[int] = None, *,
                     binary: Optional[bool] = None) -> Union[str, bytes]:
    """Returns bytes for a byte-value tree and str for a character tree. Without a tree, `binary` picks the type of the empty result."""
    binary = _output_is_binary(root, binary)
    sink = io.BytesIO() if binary else io.StringIO(newline="")
    decompress(io.BytesIO(packed), sink, root, binary=binary, symbol_count=symbol_count)
    return sink.getvalue()
