"""
Hash tree construction.

Input bytes are split into fixed-size blocks (the last one zero-padded),
each block becomes a leaf, and levels are reduced bottom-up until a single
root remains.

Tie-break for short groups (fewer children than fan_out):
- TieBreak.EMPTY: every missing sibling contributes b"" to the aggregate,
  so with fan_out=2 an odd trailing node yields Agg(left, b"").
- TieBreak.OMIT: only present children are aggregated. Not bit-compatible
  with EMPTY.

A single-block input produces a tree that is exactly one leaf.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Sequence, Union

from hashtree.core.hashing import AggregateFunction, Digest, HashFunction
from hashtree.core.node import InternalNode, LeafNode, Node
from hashtree.core.settings import load_settings
from hashtree.core.tree import HashTree
from hashtree.protocol.enums import TieBreak
from hashtree.protocol.errors import ConfigurationError, InputEmptyError
from hashtree.utils.logging import get_logger

logger = get_logger(__name__)

EMPTY_CONTRIBUTION = b""


def _as_bytes(data) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"Expected bytes-like input, got {type(data).__name__}")
    return bytes(data)


# ===========================================================================
# Blocks
# ===========================================================================


def pad_block(block: bytes, block_size: int) -> bytes:
    """Zero-pad a short block to block_size."""
    if len(block) < block_size:
        return block + b"\x00" * (block_size - len(block))
    return block


def iter_blocks(data: bytes, block_size: int) -> Iterator[bytes]:
    """
    Split data into block_size chunks; only the final chunk is padded.
    """
    for offset in range(0, len(data), block_size):
        yield pad_block(data[offset:offset + block_size], block_size)


def iter_stream_blocks(chunks: Iterable[bytes], block_size: int) -> Iterator[bytes]:
    """
    Re-chunk an iterable of arbitrarily sized byte chunks into blocks.

    Produces the same blocks as iter_blocks over the concatenated chunks.
    """
    buffer = bytearray()
    for chunk in chunks:
        buffer.extend(chunk)
        while len(buffer) >= block_size:
            yield bytes(buffer[:block_size])
            del buffer[:block_size]

    if buffer:
        yield pad_block(bytes(buffer), block_size)


# ===========================================================================
# Aggregation
# ===========================================================================


def aggregate_children(
    aggregate_fn: AggregateFunction,
    digests: Sequence[Digest],
    fan_out: int,
    tie_break: TieBreak,
) -> Digest:
    """
    Apply aggregate_fn to a group of child digests, honoring the tie-break.

    Shared by construction and verification so both pad identically.
    """
    digests = list(digests)
    if tie_break == TieBreak.EMPTY and len(digests) < fan_out:
        digests.extend([EMPTY_CONTRIBUTION] * (fan_out - len(digests)))
    return aggregate_fn(digests)


# ===========================================================================
# Tree Builder
# ===========================================================================


class TreeBuilder:
    """
    Builds hash trees with a fixed set of functions and parameters.

    Unspecified options fall back to HashTreeSettings
    (HASHTREE_BLOCK_SIZE, HASHTREE_FAN_OUT, HASHTREE_TIE_BREAK).
    """

    def __init__(
        self,
        hash_fn: HashFunction,
        aggregate_fn: AggregateFunction,
        *,
        block_size: Optional[int] = None,
        fan_out: Optional[int] = None,
        tie_break: Optional[Union[TieBreak, str]] = None,
    ) -> None:
        settings = load_settings()

        self.hash_fn = hash_fn
        self.aggregate_fn = aggregate_fn
        self.block_size = settings.block_size if block_size is None else block_size
        self.fan_out = settings.fan_out if fan_out is None else fan_out

        try:
            self.tie_break = TieBreak(settings.tie_break if tie_break is None else tie_break)
        except ValueError as e:
            raise ConfigurationError(f"Unknown tie-break rule: {tie_break!r}") from e

        if self.block_size < 1:
            raise ConfigurationError(f"Block size must be positive, got {self.block_size}")
        if self.fan_out < 2:
            raise ConfigurationError(f"Fan-out must be at least 2, got {self.fan_out}")

    def build(self, data: bytes) -> HashTree:
        """
        Build a tree over data.

        Raises:
            InputEmptyError: If data is empty
        """
        data = _as_bytes(data)
        if not data:
            raise InputEmptyError()
        return self._build_from_blocks(iter_blocks(data, self.block_size))

    def build_stream(self, chunks: Iterable[bytes]) -> HashTree:
        """
        Build a tree from an iterable of byte chunks.

        Raises:
            InputEmptyError: If the chunks contain no bytes at all
        """
        return self._build_from_blocks(iter_stream_blocks(chunks, self.block_size))

    def build_from_digests(self, digests: Sequence[Digest]) -> HashTree:
        """
        Build a content-less tree over known leaf digests.

        Internal digests are computed; leaves carry no content, so the
        result identifies content but never passes a consistency check.
        """
        if not digests:
            raise InputEmptyError("Cannot build a hash tree from zero digests")

        leaves: List[Node] = [
            LeafNode(digest=digest, index=i) for i, digest in enumerate(digests)
        ]
        return self._tree(self._reduce(leaves))

    def compute_root(self, data: bytes) -> Digest:
        """
        Root digest of data without retaining the tree.

        Raises:
            InputEmptyError: If data is empty
        """
        data = _as_bytes(data)
        if not data:
            raise InputEmptyError()
        return self.compute_root_from_digests(
            [self.hash_fn(block) for block in iter_blocks(data, self.block_size)]
        )

    def compute_root_from_digests(self, digests: Sequence[Digest]) -> Digest:
        """Root digest over known leaf digests."""
        if not digests:
            raise InputEmptyError("Cannot compute a root from zero digests")

        current_level = list(digests)
        while len(current_level) > 1:
            current_level = [
                aggregate_children(
                    self.aggregate_fn,
                    current_level[i:i + self.fan_out],
                    self.fan_out,
                    self.tie_break,
                )
                for i in range(0, len(current_level), self.fan_out)
            ]
        return current_level[0]

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _build_from_blocks(self, blocks: Iterable[bytes]) -> HashTree:
        leaves: List[Node] = [
            LeafNode(digest=self.hash_fn(block), content=block, index=i)
            for i, block in enumerate(blocks)
        ]
        if not leaves:
            raise InputEmptyError()

        tree = self._tree(self._reduce(leaves))
        logger.debug(
            "Built hash tree: %d blocks of %d bytes, height %d, fan-out %d",
            len(leaves),
            self.block_size,
            tree.height,
            self.fan_out,
        )
        return tree

    def _reduce(self, current_level: List[Node]) -> Node:
        # Build tree bottom-up
        while len(current_level) > 1:
            next_level: List[Node] = []

            for i in range(0, len(current_level), self.fan_out):
                children = current_level[i:i + self.fan_out]
                parent_digest = aggregate_children(
                    self.aggregate_fn,
                    [child.digest for child in children],
                    self.fan_out,
                    self.tie_break,
                )
                next_level.append(InternalNode(digest=parent_digest, children=children))

            current_level = next_level

        return current_level[0]

    def _tree(self, root: Node) -> HashTree:
        return HashTree(
            root,
            block_size=self.block_size,
            fan_out=self.fan_out,
            tie_break=self.tie_break,
        )


# ===========================================================================
# Convenience Functions
# ===========================================================================


def build(
    data: bytes,
    hash_fn: HashFunction,
    aggregate_fn: AggregateFunction,
    *,
    block_size: Optional[int] = None,
    fan_out: Optional[int] = None,
    tie_break: Optional[Union[TieBreak, str]] = None,
) -> HashTree:
    """
    Build a hash tree over data.

    Raises:
        InputEmptyError: If data is empty
    """
    builder = TreeBuilder(
        hash_fn,
        aggregate_fn,
        block_size=block_size,
        fan_out=fan_out,
        tie_break=tie_break,
    )
    return builder.build(data)


def build_stream(
    chunks: Iterable[bytes],
    hash_fn: HashFunction,
    aggregate_fn: AggregateFunction,
    *,
    block_size: Optional[int] = None,
    fan_out: Optional[int] = None,
    tie_break: Optional[Union[TieBreak, str]] = None,
) -> HashTree:
    builder = TreeBuilder(
        hash_fn,
        aggregate_fn,
        block_size=block_size,
        fan_out=fan_out,
        tie_break=tie_break,
    )
    return builder.build_stream(chunks)


def compute_root(
    data: bytes,
    hash_fn: HashFunction,
    aggregate_fn: AggregateFunction,
    *,
    block_size: Optional[int] = None,
    fan_out: Optional[int] = None,
    tie_break: Optional[Union[TieBreak, str]] = None,
) -> Digest:
    """
    Convenience function for computing the root without building a tree.
    """
    builder = TreeBuilder(
        hash_fn,
        aggregate_fn,
        block_size=block_size,
        fan_out=fan_out,
        tie_break=tie_break,
    )
    return builder.compute_root(data)


def compute_root_from_digests(
    digests: Sequence[Digest],
    aggregate_fn: AggregateFunction,
    *,
    fan_out: Optional[int] = None,
    tie_break: Optional[Union[TieBreak, str]] = None,
) -> Digest:
    """
    Root digest over already-hashed leaves.

    The leaf HashFunction is never called here.
    """

    def _unused_hash(data: bytes) -> Digest:
        raise ConfigurationError("Leaf hashing is not available when computing from digests")

    builder = TreeBuilder(
        _unused_hash,
        aggregate_fn,
        fan_out=fan_out,
        tie_break=tie_break,
    )
    return builder.compute_root_from_digests(digests)
