"""
Pluggable digest functions.

A hash tree never calls a concrete algorithm directly. Callers supply:

- a HashFunction mapping block bytes to a digest
- an AggregateFunction mapping an ordered sequence of child digests
  to a parent digest

Both MUST be pure and deterministic. The order of digests passed to an
AggregateFunction is the order of the children in the tree.

The hashlib adapters below are conveniences; any callables with the same
shape work.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from hashtree.protocol.errors import UnsupportedAlgorithmError


Digest = bytes

LEAF_PREFIX = b"\x00"
INTERNAL_PREFIX = b"\x01"


class HashFunction(Protocol):
    def __call__(self, data: bytes) -> Digest:
        ...


class AggregateFunction(Protocol):
    def __call__(self, digests: Sequence[Digest]) -> Digest:
        ...


# ===========================================================================
# hashlib adapters
# ===========================================================================


def _digest_factory(name: str) -> Callable[[], "hashlib._Hash"]:
    name = name.lower()
    try:
        probe = hashlib.new(name)
    except (ValueError, TypeError) as e:
        raise UnsupportedAlgorithmError(f"Unknown hash algorithm: {name}") from e

    if probe.digest_size == 0:
        # shake_* needs an explicit length and cannot produce a fixed digest here
        raise UnsupportedAlgorithmError(f"Variable-length algorithm not supported: {name}")

    return lambda: hashlib.new(name)


def hashlib_hash(name: str = "sha1") -> HashFunction:
    """
    HashFunction over a hashlib algorithm.

    Raises:
        UnsupportedAlgorithmError: If hashlib does not provide the algorithm
    """
    factory = _digest_factory(name)

    def hash_block(data: bytes) -> Digest:
        hasher = factory()
        hasher.update(data)
        return hasher.digest()

    return hash_block


def concat_aggregate(hash_fn: HashFunction) -> AggregateFunction:
    """
    AggregateFunction hashing the plain concatenation of child digests.

    An empty contribution (b"") adds nothing to the concatenation, so
    Agg(d, b"") == H(d).
    """

    def aggregate(digests: Sequence[Digest]) -> Digest:
        return hash_fn(b"".join(digests))

    return aggregate


def prefixed_hash(name: str = "sha256") -> HashFunction:
    """
    Leaf HashFunction with domain separation: H(0x00 || data).
    """
    factory = _digest_factory(name)

    def hash_block(data: bytes) -> Digest:
        hasher = factory()
        hasher.update(LEAF_PREFIX)
        hasher.update(data)
        return hasher.digest()

    return hash_block


def prefixed_aggregate(name: str = "sha256") -> AggregateFunction:
    """
    Internal AggregateFunction with domain separation: H(0x01 || d1 || d2 ...).

    Prevents a leaf from being reinterpreted as an internal node
    (second-preimage attacks).
    """
    factory = _digest_factory(name)

    def aggregate(digests: Sequence[Digest]) -> Digest:
        hasher = factory()
        hasher.update(INTERNAL_PREFIX)
        for digest in digests:
            hasher.update(digest)
        return hasher.digest()

    return aggregate


# ===========================================================================
# Hash Scheme
# ===========================================================================


@dataclass(frozen=True)
class HashScheme:
    """
    A named pair of HashFunction and AggregateFunction.

    Attributes:
        name: Identifier of the scheme (e.g. "sha256", "sha256+ds")
        hash_fn: Block hashing function
        aggregate_fn: Child digest aggregation function
    """
    name: str
    hash_fn: HashFunction
    aggregate_fn: AggregateFunction

    @classmethod
    def from_name(cls, algorithm: str, domain_separated: bool = False) -> "HashScheme":
        """
        Build a scheme from a hashlib algorithm name.

        With domain_separated=False, aggregation is H(d1 || d2 ...), which
        reproduces the reference test vectors for sha1.
        """
        algorithm = algorithm.lower()
        if domain_separated:
            return cls(
                name=f"{algorithm}+ds",
                hash_fn=prefixed_hash(algorithm),
                aggregate_fn=prefixed_aggregate(algorithm),
            )

        hash_fn = hashlib_hash(algorithm)
        return cls(
            name=algorithm,
            hash_fn=hash_fn,
            aggregate_fn=concat_aggregate(hash_fn),
        )

    @classmethod
    def default(cls, algorithm: Optional[str] = None) -> "HashScheme":
        """Scheme configured by HASHTREE_HASH_ALGORITHM / HASHTREE_DOMAIN_SEPARATED."""
        from hashtree.core.settings import load_settings

        settings = load_settings()
        return cls.from_name(
            algorithm or settings.hash_algorithm,
            domain_separated=settings.domain_separated,
        )
