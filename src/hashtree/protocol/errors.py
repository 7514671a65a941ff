from typing import Optional
from .enums import ErrorCode


class HashTreeError(Exception):
    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.code = code or ErrorCode.INTERNAL_ERROR


class InputEmptyError(HashTreeError):
    """Raised when a tree is built from zero bytes."""

    def __init__(self, message: str = "Cannot build a hash tree from empty input"):
        super().__init__(message, ErrorCode.INPUT_EMPTY)


class ConfigurationError(HashTreeError):
    """Raised when block size, fan-out or tie-break settings are invalid."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR)


class UnsupportedAlgorithmError(HashTreeError):
    """Raised when a digest algorithm name is not known to hashlib."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.UNSUPPORTED_ALGORITHM)

