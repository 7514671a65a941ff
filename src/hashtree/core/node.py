"""
Hash tree nodes.

A node is either:
- a LeafNode: optional block content plus its digest
- an InternalNode: an ordered list of children plus their aggregated digest

Each node exclusively owns its children. Nodes built by TreeBuilder are
never shared between parents and never form cycles; hand-built trees are
checked for both by the ConsistencyChecker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterator, List, Optional, Union

from hashtree.core.hashing import Digest
from hashtree.protocol.enums import NodeKind


# ===========================================================================
# Nodes
# ===========================================================================


@dataclass
class LeafNode:
    """
    A leaf of the hash tree.

    Attributes:
        digest: Stored digest of the block
        content: Padded block bytes (None for sparse or remote trees)
        index: Position of the block in the input (None if unknown)
    """
    digest: Digest
    content: Optional[bytes] = None
    index: Optional[int] = None

    kind: ClassVar[NodeKind] = NodeKind.LEAF

    @property
    def has_content(self) -> bool:
        return self.content is not None


@dataclass
class InternalNode:
    """
    An internal node of the hash tree.

    Attributes:
        digest: Stored aggregate of the children's digests
        children: Ordered child nodes (1..fan_out when built)
    """
    digest: Digest
    children: List["Node"] = field(default_factory=list)

    kind: ClassVar[NodeKind] = NodeKind.INTERNAL


Node = Union[LeafNode, InternalNode]


def leaf(digest: Digest, content: Optional[bytes] = None) -> LeafNode:
    """Create a leaf from a known digest, optionally with its content."""
    return LeafNode(digest=digest, content=content)


def internal(children: List[Node], digest: Digest) -> InternalNode:
    """Create an internal node from children and a stored digest."""
    return InternalNode(digest=digest, children=list(children))


# ===========================================================================
# Traversal
# ===========================================================================


def iter_nodes(root: Node) -> Iterator[Node]:
    """
    Yield every node depth-first, parents before children, left to right.
    """
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, InternalNode):
            stack.extend(reversed(node.children))


def iter_leaves(root: Node) -> Iterator[LeafNode]:
    """Yield leaves left to right."""
    for node in iter_nodes(root):
        if isinstance(node, LeafNode):
            yield node


def node_height(root: Node) -> int:
    """
    Number of edges on the longest root-to-leaf path (0 for a single leaf).
    """
    height = 0
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        height = max(height, depth)
        if isinstance(node, InternalNode):
            stack.extend((child, depth + 1) for child in node.children)
    return height
