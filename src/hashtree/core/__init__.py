from .hashing import (
    Digest,
    HashFunction,
    AggregateFunction,
    HashScheme,
    hashlib_hash,
    concat_aggregate,
    prefixed_hash,
    prefixed_aggregate,
)
from .node import LeafNode, InternalNode, Node, leaf, internal
from .tree import HashTree, root_digest
from .builder import (
    TreeBuilder,
    build,
    build_stream,
    compute_root,
    compute_root_from_digests,
    iter_blocks,
)
from .checker import ConsistencyChecker, ConsistencyReport, check_consistency, is_consistent
from .settings import HashTreeSettings, get_settings, load_settings

__all__ = [
    "Digest",
    "HashFunction",
    "AggregateFunction",
    "HashScheme",
    "hashlib_hash",
    "concat_aggregate",
    "prefixed_hash",
    "prefixed_aggregate",
    "LeafNode",
    "InternalNode",
    "Node",
    "leaf",
    "internal",
    "HashTree",
    "root_digest",
    "TreeBuilder",
    "build",
    "build_stream",
    "compute_root",
    "compute_root_from_digests",
    "iter_blocks",
    "ConsistencyChecker",
    "ConsistencyReport",
    "check_consistency",
    "is_consistent",
    "HashTreeSettings",
    "get_settings",
    "load_settings",
]
