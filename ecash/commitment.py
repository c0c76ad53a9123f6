"""
Hash commitments to the identity strings of a coin.

Example:
    >>> com = build_identity_commitment("alice", 4, SeededRandomSource(3))
    >>> fragment = com.encoder.encode_fragment(2, Side.RIGHT)
    >>> com.verify_fragment(2, Side.RIGHT, fragment)
    True
    >>> com.verify_fragment(2, Side.LEFT, fragment)
    False
"""

from __future__ import annotations

from hashlib import sha256
from typing import (
    Optional,
    Tuple,
)

import attr

from . import config
from .identity import IdentityEncoder, Side
from .rand import RandomSource, SeededRandomSource


def hash_fragment(fragment: bytes) -> str:
    """SHA-256 of a fragment, hex encoded."""
    return sha256(fragment).hexdigest()


def build_commitments(encoder: IdentityEncoder) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Commit to both fragments of every index.

    Returns:
        (left_hashes, right_hashes), one hash per index
    """
    left = tuple(hash_fragment(encoder.encode_fragment(i, Side.LEFT)) for i in range(len(encoder)))
    right = tuple(hash_fragment(encoder.encode_fragment(i, Side.RIGHT)) for i in range(len(encoder)))
    return left, right


@attr.s(slots=True, frozen=True)
class IdentityCommitment:
    """Commitments together with the secrets needed to open them."""
    encoder = attr.ib()      # type: IdentityEncoder
    left_hashes = attr.ib()  # type: Tuple[str, ...]
    right_hashes = attr.ib() # type: Tuple[str, ...]

    def hashes(self, side: Side) -> Tuple[str, ...]:
        return self.left_hashes if side == Side.LEFT else self.right_hashes


    def verify_fragment(self, index: int, side: Side, fragment: bytes) -> bool:
        return hash_fragment(fragment) == self.hashes(side)[index]


def build_identity_commitment(
        identity: str,
        ris_length: int = config.COIN_RIS_LENGTH,
        rng: Optional[RandomSource] = None
    ) -> IdentityCommitment:
    """Draw fresh masks for identity and commit to every fragment."""
    encoder = IdentityEncoder.new(identity, ris_length, rng)
    left, right = build_commitments(encoder)
    return IdentityCommitment(encoder, left, right)


def main():
    import doctest
    doctest.testmod(verbose=True)


if __name__ == '__main__':
    main()
