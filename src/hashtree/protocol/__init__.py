from .enums import ErrorCode, TieBreak, NodeKind, ViolationKind
from .errors import (
    HashTreeError,
    InputEmptyError,
    ConfigurationError,
    UnsupportedAlgorithmError,
)

__all__ = [
    "ErrorCode",
    "TieBreak",
    "NodeKind",
    "ViolationKind",
    "HashTreeError",
    "InputEmptyError",
    "ConfigurationError",
    "UnsupportedAlgorithmError",
]
