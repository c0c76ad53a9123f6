import attr
import pytest

from ecash.coin import Coin
from ecash.commitment import build_identity_commitment
from ecash.identity import IdentityEncoder, Side, xor_bytes
from ecash.merchant import *

from conftest import FixedSideSource, ScriptedSideSource


def sign_and_unblind(bank, coin):
    coin.receive_signature(bank.sign_coin(coin.blind()))
    coin.unblind()
    return coin


def tampered_coin(bank, index, side, ris_length=10):
    com = build_identity_commitment("alice", ris_length)
    hashes = list(com.hashes(side))
    hashes[index] = "00" * 32
    if side == Side.LEFT:
        com = attr.evolve(com, left_hashes=tuple(hashes))
    else:
        com = attr.evolve(com, right_hashes=tuple(hashes))
    return Coin("alice", 20, bank.n, bank.e, ris_length=ris_length, commitment=com)


def test_accept_coin(bank):
    coin = sign_and_unblind(bank, Coin("alice", 20, bank.n, bank.e, ris_length=10))
    revealed = Merchant("shop").accept(coin)

    assert revealed.guid == coin.guid
    assert len(revealed.ris) == len(revealed.sides) == 10
    for i, (ris, side) in enumerate(zip(revealed.ris, revealed.sides)):
        assert bytes.fromhex(ris) == coin.get_ris(side, i)


def test_accept_follows_challenge_bits(bank):
    coin = sign_and_unblind(bank, Coin("alice", 20, bank.n, bank.e, ris_length=4))
    bits = [True, False, False, True]
    revealed = Merchant("shop", ScriptedSideSource(bits)).accept(coin)
    assert revealed.sides == (Side.LEFT, Side.RIGHT, Side.RIGHT, Side.LEFT)


def test_accept_does_not_mutate_the_coin(bank):
    coin = sign_and_unblind(bank, Coin("alice", 20, bank.n, bank.e, ris_length=4))
    before = (coin.to_string(), coin.signature, coin.state)
    accept_coin(coin)
    accept_coin(coin)
    assert (coin.to_string(), coin.signature, coin.state) == before


def test_reject_unsigned_coin(bank):
    coin = Coin("alice", 20, bank.n, bank.e, ris_length=4)
    with pytest.raises(SignatureInvalid):
        accept_coin(coin)


def test_reject_coin_before_unblinding(bank):
    coin = Coin("alice", 20, bank.n, bank.e, ris_length=4)
    coin.receive_signature(bank.sign_coin(coin.blind()))
    with pytest.raises(SignatureInvalid):
        accept_coin(coin)


def test_reject_coin_signed_by_another_bank(bank):
    from ecash.bank import Bank
    other = Bank(bits=1024)
    coin = Coin("alice", 20, bank.n, bank.e, ris_length=4)
    blinded = coin.blind()
    coin.receive_signature(other.sign_coin(blinded % other.public.n))
    coin.unblind()
    with pytest.raises(SignatureInvalid):
        accept_coin(coin)


def test_reject_tampered_amount(bank):
    coin = sign_and_unblind(bank, Coin("alice", 20, bank.n, bank.e, ris_length=4))
    coin.amount = 2000
    with pytest.raises(SignatureInvalid):
        accept_coin(coin)


def test_reject_tampered_hash_after_signing(bank):
    com = build_identity_commitment("alice", 4)
    coin = sign_and_unblind(bank, Coin("alice", 20, bank.n, bank.e, ris_length=4, commitment=com))
    hashes = list(com.left_hashes)
    hashes[1] = "00" * 32
    coin._commitment = attr.evolve(com, left_hashes=tuple(hashes))

    # signature is checked before any identity string is revealed
    rng = ScriptedSideSource([])
    with pytest.raises(SignatureInvalid):
        Merchant("shop", rng).accept(coin)


@pytest.mark.parametrize("side", [Side.LEFT, Side.RIGHT])
def test_hash_mismatch_on_challenged_side(bank, side):
    coin = sign_and_unblind(bank, tampered_coin(bank, 3, side))
    with pytest.raises(HashMismatch) as ex:
        Merchant("shop", FixedSideSource(side == Side.LEFT)).accept(coin)
    assert ex.value.index == 3
    assert ex.value.side == side


@pytest.mark.parametrize("side", [Side.LEFT, Side.RIGHT])
def test_hash_mismatch_on_other_side_goes_unnoticed(bank, side):
    coin = sign_and_unblind(bank, tampered_coin(bank, 3, side))
    revealed = Merchant("shop", FixedSideSource(side != Side.LEFT)).accept(coin)
    assert len(revealed.ris) == 10


def test_hash_mismatch_with_wrong_answer(bank):
    coin = sign_and_unblind(bank, Coin("alice", 20, bank.n, bank.e, ris_length=4))
    com = coin._commitment
    masks = list(com.encoder.masks)
    masks[2] = bytes(len(masks[2]))
    coin._commitment = attr.evolve(com, encoder=IdentityEncoder("alice", tuple(masks)))

    with pytest.raises(HashMismatch) as ex:
        Merchant("shop", FixedSideSource(True)).accept(coin)
    assert ex.value.index == 2


def test_revealed_identity_halves_are_useless_alone(bank):
    coin = sign_and_unblind(bank, Coin("alice", 20, bank.n, bank.e, ris_length=4))
    revealed = Merchant("shop", FixedSideSource(True)).accept(coin)
    assert all(b"alice" not in bytes.fromhex(ris) for ris in revealed.ris)
    left = bytes.fromhex(revealed.ris[0])
    assert xor_bytes(left, coin.get_ris(Side.RIGHT, 0)) == b"IDENT:alice"


def test_revealed_identity_converts_fields():
    revealed = RevealedIdentity("guid", ["00", "ff"], [True, 1])
    assert revealed.ris == ("00", "ff")
    assert revealed.sides == (Side.LEFT, Side.RIGHT)
