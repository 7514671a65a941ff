from .core.hashing import HashScheme, hashlib_hash, concat_aggregate
from .core.node import LeafNode, InternalNode, leaf, internal
from .core.tree import HashTree, root_digest
from .core.builder import TreeBuilder, build, build_stream, compute_root
from .core.checker import ConsistencyChecker, ConsistencyReport, check_consistency, is_consistent
from .protocol import (
    TieBreak,
    ViolationKind,
    HashTreeError,
    InputEmptyError,
    ConfigurationError,
    UnsupportedAlgorithmError,
)

__all__ = [
    "HashScheme",
    "hashlib_hash",
    "concat_aggregate",
    "LeafNode",
    "InternalNode",
    "leaf",
    "internal",
    "HashTree",
    "root_digest",
    "TreeBuilder",
    "build",
    "build_stream",
    "compute_root",
    "ConsistencyChecker",
    "ConsistencyReport",
    "check_consistency",
    "is_consistent",
    "TieBreak",
    "ViolationKind",
    "HashTreeError",
    "InputEmptyError",
    "ConfigurationError",
    "UnsupportedAlgorithmError",
]
