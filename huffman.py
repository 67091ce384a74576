from __future__ import annotations

import heapq
import itertools
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, Optional, Union

from bitio import DEFAULT_ENCODING, Source, open_source, read_chunks


@dataclass(frozen=True)
class Leaf: # one input symbol and its count
    symbol: Hashable
    weight: int


@dataclass(frozen=True)
class Placeholder: # symbolless leaf that gives a one-symbol alphabet a two-child root
    weight: int = 0


@dataclass(frozen=True)
class Internal: # merge point, weight = left.weight + right.weight
    weight: int
    left: Node
    right: Node


Node = Union[Leaf, Placeholder, Internal]


def count_symbols(data: Iterable[Hashable]) -> Dict[Hashable, int]: # data already in memory: str, bytes or any iterable of symbols
    return dict(Counter(data))


def count_frequencies(source: Source, *, binary: bool = False, encoding: str = DEFAULT_ENCODING) -> Dict[Hashable, int]:
    """
    Count how many times each symbol appears in a path or open file
    Text sources give 1-char str symbols, binary sources give byte values (int)
    An empty source gives an empty table; OSError propagates
    """
    counts: Counter = Counter()
    with open_source(source, binary=binary, encoding=encoding) as stream:
        for chunk in read_chunks(stream):
            counts.update(chunk)
    return dict(counts)


def build_tree(frequency_table: Dict[Hashable, int]) -> Optional[Node]:
    """
    Build the Huffman tree for a frequency table, or None if the table is empty

    Leaves are seeded in (weight, symbol) order and every heap entry gets a sequence
    number, so equal weights pop in insertion order and the same table always
    gives the same tree no matter how the dict is ordered.
    """
    if not frequency_table:
        return None # nothing to encode

    order = itertools.count()
    priority_queue = [
        (weight, next(order), Leaf(symbol, weight))
        for symbol, weight in sorted(frequency_table.items(), key=lambda kv: (kv[1], kv[0]))
    ]
    if len(priority_queue) == 1:
        # a lone symbol would otherwise get the empty code
        priority_queue.append((0, next(order), Placeholder()))
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        left_weight, _, left = heapq.heappop(priority_queue)
        right_weight, _, right = heapq.heappop(priority_queue)
        merged = Internal(left_weight + right_weight, left, right)
        heapq.heappush(priority_queue, (merged.weight, next(order), merged))

    return priority_queue[0][2] # root of the tree


def build_code_table(root: Optional[Node]) -> Dict[Hashable, str]:
    """
    Map every symbol to its path from the root, '0' for left and '1' for right

    The placeholder leaf is walked over but gets no entry. A root that is itself
    a leaf cannot come out of build_tree, so it is not given a special code.
    """
    codes: Dict[Hashable, str] = {}
    if root is None:
        return codes

    def walk(node: Node, path: str) -> None:
        if isinstance(node, Internal):
            walk(node.left, path + "0")
            walk(node.right, path + "1")
        elif isinstance(node, Leaf):
            codes[node.symbol] = path

    walk(root, "")
    return codes


def has_byte_symbols(root: Optional[Node]) -> bool: # True when the leaves hold byte values (int), False for characters
    node = root
    while isinstance(node, Internal):
        node = node.right if isinstance(node.left, Placeholder) else node.left
    return isinstance(node, Leaf) and isinstance(node.symbol, int)


def tree_depth(root: Optional[Node]) -> int: # length of the longest code
    if not isinstance(root, Internal):
        return 0
    return 1 + max(tree_depth(root.left), tree_depth(root.right))


def encoded_bit_length(frequency_table: Dict[Hashable, int], code_table: Dict[Hashable, str]) -> int:
    return sum(count * len(code_table[symbol]) for symbol, count in frequency_table.items())
