import pytest

from ecash.rand import *


def test_random_source_is_abstract():
    with pytest.raises(TypeError):
        RandomSource()


def test_incomplete_random_source():
    class BytesOnly(RandomSource):
        def random_bytes(self, n):
            return bytes(n)

    with pytest.raises(TypeError):
        BytesOnly()


def test_seeded_source_is_reproducible():
    rng1 = SeededRandomSource(42)
    rng2 = SeededRandomSource(42)
    assert rng1.random_bytes(32) == rng2.random_bytes(32)
    assert [rng1.random_bit() for _ in range(16)] == [rng2.random_bit() for _ in range(16)]


def test_random_guid():
    guid = SystemRandomSource().random_guid()
    assert len(guid) == 32
    assert int(guid, 16) >= 0
    assert default_source(None).random_guid() != guid
