"""
Hash tree consistency verification.

Recomputes every stored digest from its subtree and compares:
- Leaf: content present AND hash_fn(content) == digest
- Internal: at least one child, every child valid, AND
  aggregate(children digests, same tie-break as construction) == digest

Verification never raises on a corrupted or fabricated tree. Every problem
becomes a ConsistencyReport carrying the path of the first violation.
Traversal uses an explicit stack, so tree depth is bounded only by memory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from hashtree.core.builder import aggregate_children
from hashtree.core.hashing import AggregateFunction, HashFunction
from hashtree.core.node import InternalNode, LeafNode, Node
from hashtree.core.settings import load_settings
from hashtree.core.tree import HashTree
from hashtree.protocol.enums import TieBreak, ViolationKind
from hashtree.protocol.errors import ConfigurationError
from hashtree.utils.logging import get_logger

logger = get_logger(__name__)

NodePath = Tuple[int, ...]

# (child index, parent link); materialized into a NodePath only on failure
_PathLink = Optional[Tuple[int, Any]]


# ===========================================================================
# Consistency Report
# ===========================================================================


@dataclass(frozen=True)
class ConsistencyReport:
    """
    Outcome of a consistency check.

    Attributes:
        consistent: True if every stored digest is reproducible
        path: Child indices from the root to the first invalid node
        violation: Why that node is invalid
        detail: Human-readable description
        nodes_checked: Nodes visited before stopping
    """
    consistent: bool
    path: Optional[NodePath] = None
    violation: Optional[ViolationKind] = None
    detail: str = ""
    nodes_checked: int = 0

    def __bool__(self) -> bool:
        return self.consistent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "consistent": self.consistent,
            "path": list(self.path) if self.path is not None else None,
            "violation": self.violation.value if self.violation else None,
            "detail": self.detail,
            "nodesChecked": self.nodes_checked,
        }


class _Violation(Exception):
    def __init__(self, link: _PathLink, kind: ViolationKind, detail: str):
        super().__init__(detail)
        self.path = _materialize(link)
        self.kind = kind
        self.detail = detail


def _materialize(link: _PathLink) -> NodePath:
    indices = []
    while link is not None:
        index, link = link
        indices.append(index)
    return tuple(reversed(indices))


# ===========================================================================
# Consistency Checker
# ===========================================================================


class ConsistencyChecker:
    """
    Verifies trees against a HashFunction / AggregateFunction pair.

    fan_out and tie_break default to the parameters recorded on the
    HashTree being checked. A bare Node carries no such record, so it
    falls back to HashTreeSettings; pass fan_out and tie_break explicitly
    when checking a bare node (e.g. tree.root) built with other values.

    A checker holds no per-check state and may be shared between threads.
    """

    def __init__(
        self,
        hash_fn: HashFunction,
        aggregate_fn: AggregateFunction,
        *,
        fan_out: Optional[int] = None,
        tie_break: Optional[Union[TieBreak, str]] = None,
    ) -> None:
        self.hash_fn = hash_fn
        self.aggregate_fn = aggregate_fn
        self.fan_out = fan_out
        try:
            self.tie_break = TieBreak(tie_break) if tie_break is not None else None
        except ValueError as e:
            raise ConfigurationError(f"Unknown tie-break rule: {tie_break!r}") from e

    def is_consistent(self, tree: Union[HashTree, Node]) -> bool:
        return self.check(tree).consistent

    def check(self, tree: Union[HashTree, Node]) -> ConsistencyReport:
        fan_out, tie_break = self._parameters(tree)
        root = tree.root if isinstance(tree, HashTree) else tree

        seen: Set[int] = set()
        try:
            checked = self._walk(root, fan_out, tie_break, seen)
        except _Violation as v:
            logger.debug(
                "Consistency violation at %s: %s (%s)",
                list(v.path),
                v.kind.value,
                v.detail,
            )
            return ConsistencyReport(
                consistent=False,
                path=v.path,
                violation=v.kind,
                detail=v.detail,
                nodes_checked=len(seen),
            )

        return ConsistencyReport(consistent=True, nodes_checked=checked)

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _parameters(self, tree: Union[HashTree, Node]) -> Tuple[int, TieBreak]:
        fan_out = self.fan_out
        tie_break = self.tie_break

        if isinstance(tree, HashTree):
            fan_out = fan_out if fan_out is not None else tree.fan_out
            tie_break = tie_break if tie_break is not None else tree.tie_break

        if fan_out is None or tie_break is None:
            settings = load_settings()
            if fan_out is None:
                fan_out = settings.fan_out
            if tie_break is None:
                tie_break = settings.tie_break
        return fan_out, TieBreak(tie_break)

    def _walk(self, root: Node, fan_out: int, tie_break: TieBreak, seen: Set[int]) -> int:
        # (node, path, children_done): internal nodes are pushed twice,
        # once to expand and once to verify after all children passed.
        stack: List[Tuple[Any, _PathLink, bool]] = [(root, None, False)]

        while stack:
            node, path, children_done = stack.pop()

            if children_done:
                self._verify_internal(node, path, fan_out, tie_break)
                continue

            if id(node) in seen:
                raise _Violation(path, ViolationKind.MALFORMED_NODE, "Node is shared or cyclic")
            seen.add(id(node))

            if isinstance(node, LeafNode):
                self._verify_leaf(node, path)
            elif isinstance(node, InternalNode):
                children = node.children
                if not isinstance(children, (list, tuple)):
                    raise _Violation(path, ViolationKind.MALFORMED_NODE, "Children are not a sequence")
                if not children:
                    raise _Violation(path, ViolationKind.EMPTY_INTERNAL, "Internal node has no children")

                stack.append((node, path, True))
                for i in reversed(range(len(children))):
                    stack.append((children[i], (i, path), False))
            else:
                raise _Violation(
                    path,
                    ViolationKind.MALFORMED_NODE,
                    f"Not a tree node: {type(node).__name__}",
                )

        return len(seen)

    def _verify_leaf(self, node: LeafNode, path: _PathLink) -> None:
        if not node.has_content:
            raise _Violation(path, ViolationKind.MISSING_CONTENT, "Leaf has no content")

        try:
            computed = self.hash_fn(node.content)
        except (ValueError, TypeError) as e:
            raise _Violation(path, ViolationKind.HASH_ERROR, f"Hash function failed: {e}") from e

        if computed != node.digest:
            raise _Violation(
                path,
                ViolationKind.LEAF_DIGEST_MISMATCH,
                "Leaf digest does not match its content",
            )

    def _verify_internal(
        self,
        node: InternalNode,
        path: _PathLink,
        fan_out: int,
        tie_break: TieBreak,
    ) -> None:
        try:
            computed = aggregate_children(
                self.aggregate_fn,
                [child.digest for child in node.children],
                fan_out,
                tie_break,
            )
        except (ValueError, TypeError) as e:
            raise _Violation(path, ViolationKind.HASH_ERROR, f"Aggregate function failed: {e}") from e

        if computed != node.digest:
            raise _Violation(
                path,
                ViolationKind.INTERNAL_DIGEST_MISMATCH,
                "Internal digest does not match its children",
            )


# ===========================================================================
# Convenience Functions
# ===========================================================================


def check_consistency(
    tree: Union[HashTree, Node],
    hash_fn: HashFunction,
    aggregate_fn: AggregateFunction,
    *,
    fan_out: Optional[int] = None,
    tie_break: Optional[Union[TieBreak, str]] = None,
) -> ConsistencyReport:
    """
    Verify a tree and report the first violation, if any.
    """
    checker = ConsistencyChecker(hash_fn, aggregate_fn, fan_out=fan_out, tie_break=tie_break)
    return checker.check(tree)


def is_consistent(
    tree: Union[HashTree, Node],
    hash_fn: HashFunction,
    aggregate_fn: AggregateFunction,
    *,
    fan_out: Optional[int] = None,
    tie_break: Optional[Union[TieBreak, str]] = None,
) -> bool:
    """
    True if every stored digest in the tree is reproducible from its subtree.

    Never raises for corrupted or adversarial trees.
    """
    return check_consistency(
        tree,
        hash_fn,
        aggregate_fn,
        fan_out=fan_out,
        tie_break=tie_break,
    ).consistent
