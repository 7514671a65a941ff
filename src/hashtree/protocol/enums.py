from enum import Enum


class ErrorCode(str, Enum):
    INPUT_EMPTY = "input_empty"
    CONFIGURATION_ERROR = "configuration_error"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    INTERNAL_ERROR = "internal_error"


class TieBreak(str, Enum):
    """
    How a parent digest is computed when a group has fewer children
    than the fan-out.

    EMPTY pads each missing sibling with b"" (binary-compatible default).
    OMIT aggregates only the children that are present.
    """

    EMPTY = "empty"
    OMIT = "omit"


class NodeKind(str, Enum):
    LEAF = "leaf"
    INTERNAL = "internal"


class ViolationKind(str, Enum):
    """
    Why a subtree failed the consistency check.
    """

    MISSING_CONTENT = "missing_content"
    LEAF_DIGEST_MISMATCH = "leaf_digest_mismatch"
    INTERNAL_DIGEST_MISMATCH = "internal_digest_mismatch"
    EMPTY_INTERNAL = "empty_internal"
    MALFORMED_NODE = "malformed_node"
    HASH_ERROR = "hash_error"
