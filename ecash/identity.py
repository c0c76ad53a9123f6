"""
Identity strings hidden inside a coin.

For every index i the coin owner holds a pair of fragments (L_i, R_i) where
L_i is a fresh one-time pad and R_i is the padded identity plaintext
`IDENT:<owner>`. One fragment alone is uniformly random, both together give
back the owner's identity:

    >>> encoder = IdentityEncoder.new("alice", 3, SeededRandomSource(1))
    >>> left = encoder.encode_fragment(0, Side.LEFT)
    >>> right = encoder.encode_fragment(0, Side.RIGHT)
    >>> xor_bytes(left, right)
    b'IDENT:alice'
"""

from __future__ import annotations

from enum import IntEnum
from typing import (
    Optional,
    Tuple,
    Union,
)

from . import config
from .rand import RandomSource, SeededRandomSource, default_source


class InvalidArgument(ValueError):
    """An argument violates the caller's contract."""


class Side(IntEnum):
    """Half of an identity string pair."""
    LEFT = 0
    RIGHT = 1

    @classmethod
    def coerce(cls, side: Union[Side, bool, int]) -> Side:
        """Accept a Side, or a boolean meaning 'pick left'."""
        if isinstance(side, bool):
            return cls.LEFT if side else cls.RIGHT
        return cls(side)


def xor_bytes(a: bytes, b: bytes) -> bytes:
    if len(a) != len(b):
        raise InvalidArgument(f"Cannot xor buffers of length {len(a)} and {len(b)}")
    return bytes(x ^ y for x, y in zip(a, b))


def validate_identity(identity: str) -> None:
    if not isinstance(identity, str) or not identity:
        raise InvalidArgument("Identity must be a non-empty string")


def identity_plaintext(identity: str) -> bytes:
    """The plaintext an identity string pair reveals."""
    validate_identity(identity)
    return f"{config.IDENT_STR}{config.IDENT_SEPARATOR}{identity}".encode('utf8')


class IdentityEncoder:
    """Holds the owner's identity and one random mask per index.

    :param identity: owner's identity
    :param masks: one pad per index, each as long as the identity plaintext
    """

    __slots__ = ("identity", "masks", "_plaintext")

    def __init__(self, identity: str, masks: Tuple[bytes, ...]) -> None:
        self._plaintext: bytes = identity_plaintext(identity)
        if not masks:
            raise InvalidArgument("At least one mask is required")
        if any(len(mask) != len(self._plaintext) for mask in masks):
            raise InvalidArgument("Every mask must match the identity plaintext length")
        self.identity: str = identity
        self.masks: Tuple[bytes, ...] = tuple(masks)


    @classmethod
    def new(
            cls,
            identity: str,
            ris_length: int = config.COIN_RIS_LENGTH,
            rng: Optional[RandomSource] = None
        ) -> IdentityEncoder:
        """Draw a fresh mask for each of the ris_length indices."""
        if not isinstance(ris_length, int) or ris_length < 1:
            raise InvalidArgument(f"Invalid RIS length: {ris_length}")
        rng = default_source(rng)
        size = len(identity_plaintext(identity))
        return cls(identity, tuple(rng.random_bytes(size) for _ in range(ris_length)))


    def __len__(self) -> int:
        return len(self.masks)


    def encode_fragment(self, index: int, side: Union[Side, bool, int]) -> bytes:
        """Return the left or right identity fragment at index."""
        if not (0 <= index < len(self.masks)):
            raise InvalidArgument(f"Index {index} out of range")
        mask = self.masks[index]
        if Side.coerce(side) == Side.LEFT:
            return mask
        return xor_bytes(self._plaintext, mask)


def encode_fragment(encoder: IdentityEncoder, index: int, side: Union[Side, bool, int]) -> bytes:
    return encoder.encode_fragment(index, side)


def main():
    import doctest
    doctest.testmod(verbose=True)


if __name__ == "__main__":
    main()
