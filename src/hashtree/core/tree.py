"""
The HashTree container.

A HashTree owns a root node plus the parameters it was built with.
It is read-only once constructed; verification never mutates it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from hashtree.core.hashing import AggregateFunction, Digest, HashFunction
from hashtree.core.node import LeafNode, Node, iter_leaves, iter_nodes, node_height
from hashtree.protocol.enums import TieBreak

if TYPE_CHECKING:
    from hashtree.core.checker import ConsistencyReport


class HashTree:
    """
    A built (or received) hash tree.

    Attributes:
        root: Root node
        block_size: Block size used to split content (None if unknown)
        fan_out: Maximum children per internal node
        tie_break: Rule used for groups shorter than fan_out
    """

    def __init__(
        self,
        root: Node,
        *,
        block_size: Optional[int] = None,
        fan_out: int = 2,
        tie_break: TieBreak = TieBreak.EMPTY,
    ) -> None:
        self._root = root
        self.block_size = block_size
        self.fan_out = fan_out
        self.tie_break = tie_break

    @classmethod
    def from_digest(
        cls,
        digest: Digest,
        *,
        block_size: Optional[int] = None,
    ) -> "HashTree":
        """
        Tree consisting of a single content-less leaf.

        Represents an expected or remote root for later comparison with
        matches(). Such a tree never passes a consistency check.
        """
        return cls(LeafNode(digest=digest), block_size=block_size)

    @property
    def root(self) -> Node:
        return self._root

    @property
    def root_digest(self) -> Digest:
        return self._root.digest

    @property
    def root_hex(self) -> str:
        return self._root.digest.hex()

    @property
    def leaf_count(self) -> int:
        return sum(1 for _ in iter_leaves(self._root))

    @property
    def node_count(self) -> int:
        return sum(1 for _ in iter_nodes(self._root))

    @property
    def height(self) -> int:
        return node_height(self._root)

    def leaves(self) -> List[LeafNode]:
        """All leaves, left to right."""
        return list(iter_leaves(self._root))

    def matches(self, other: "HashTree") -> bool:
        """Compare root digests only."""
        return self.root_digest == other.root_digest

    def is_consistent(self, hash_fn: HashFunction, aggregate_fn: AggregateFunction) -> bool:
        from hashtree.core.checker import ConsistencyChecker

        checker = ConsistencyChecker(
            hash_fn,
            aggregate_fn,
            fan_out=self.fan_out,
            tie_break=self.tie_break,
        )
        return checker.is_consistent(self)

    def check(self, hash_fn: HashFunction, aggregate_fn: AggregateFunction) -> "ConsistencyReport":
        from hashtree.core.checker import ConsistencyChecker

        checker = ConsistencyChecker(
            hash_fn,
            aggregate_fn,
            fan_out=self.fan_out,
            tie_break=self.tie_break,
        )
        return checker.check(self)

    def __repr__(self) -> str:
        return (
            f"HashTree(root={self.root_hex[:16]}..., leaves={self.leaf_count}, "
            f"height={self.height}, block_size={self.block_size})"
        )


def root_digest(tree: HashTree) -> Digest:
    """Root digest of a tree, usable as a whole-content fingerprint."""
    return tree.root_digest
