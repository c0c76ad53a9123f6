"""
Sources of randomness for masks, coin identifiers and merchant challenges.

Every protocol step that draws randomness accepts an optional source so that
scenarios can be replayed with a seeded generator:

    >>> rng = SeededRandomSource(7)
    >>> len(rng.random_bytes(16))
    16
    >>> rng.random_bit() in (True, False)
    True
"""

import random
import secrets
from abc import ABC, abstractmethod
from typing import Optional


class RandomSource(ABC):
    """Base class for randomness providers."""

    @abstractmethod
    def random_bytes(self, n: int) -> bytes:
        raise NotImplementedError


    @abstractmethod
    def random_bit(self) -> bool:
        raise NotImplementedError


    def random_guid(self) -> str:
        """A 128 bit identifier encoded as 32 hex characters."""
        return self.random_bytes(16).hex()


class SystemRandomSource(RandomSource):
    """Cryptographically secure randomness from the operating system."""

    def random_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)


    def random_bit(self) -> bool:
        return secrets.randbits(1) == 1


class SeededRandomSource(RandomSource):
    """Deterministic randomness. Only suitable for tests and demos.

    :param seed: seed of the underlying generator
    """

    __slots__ = ("_random",)

    def __init__(self, seed: Optional[int] = None) -> None:
        self._random = random.Random(seed)


    def random_bytes(self, n: int) -> bytes:
        return bytes(self._random.getrandbits(8) for _ in range(n))


    def random_bit(self) -> bool:
        return self._random.getrandbits(1) == 1


def default_source(rng: Optional[RandomSource] = None) -> RandomSource:
    return SystemRandomSource() if rng is None else rng
