import pytest

from ecash.bank import Bank
from ecash.rand import RandomSource, SeededRandomSource


TEST_KEY_BITS = 1024


class FixedSideSource(SeededRandomSource):
    """Seeded bytes, but always challenges the same half."""

    def __init__(self, pick_left: bool, seed: int = 0) -> None:
        super().__init__(seed)
        self.pick_left = pick_left


    def random_bit(self) -> bool:
        return self.pick_left


class ScriptedSideSource(SeededRandomSource):
    """Seeded bytes, challenge bits taken from a script."""

    def __init__(self, bits, seed: int = 0) -> None:
        super().__init__(seed)
        self.bits = list(bits)


    def random_bit(self) -> bool:
        return self.bits.pop(0)


@pytest.fixture(scope="session")
def bank() -> Bank:
    return Bank(bits=TEST_KEY_BITS)


@pytest.fixture
def rng() -> RandomSource:
    return SeededRandomSource(1234)
