import pytest

from ecash.bank import *
from ecash.blind_signature import generate_new_key_pair
from ecash.coin import Coin, InvalidIdentity
from ecash.detection import DoubleSpent, MalformedRis, MerchantCheated
from ecash.merchant import Merchant, RevealedIdentity

from conftest import FixedSideSource


def signed_coin(bank, owner="alice", ris_length=10):
    coin = Coin(owner, 20, bank.n, bank.e, ris_length=ris_length)
    coin.receive_signature(bank.sign_coin(coin.blind()))
    coin.unblind()
    return coin


def test_bank_with_existing_key():
    priv, pk = generate_new_key_pair(bits=1024)
    bank = Bank(priv)
    assert bank.public == pk
    assert bank.n == pk.n_str
    assert bank.e == "65537"


def test_bank_signs_blindly(bank):
    coin = Coin("alice", 20, bank.n, bank.e, ris_length=4)
    blinded = coin.blind()
    assert coin.to_string().encode('utf8') not in blinded.binary()
    coin.receive_signature(bank.sign_coin(blinded))
    assert bank.public.verify_signature(coin.unblind(), coin.to_string())


def test_bank_parse_coin(bank):
    coin = Coin("alice", 20, bank.n, bank.e, ris_length=4)
    assert bank.parse_coin(coin.to_string()).guid == coin.guid
    with pytest.raises(InvalidIdentity):
        bank.parse_coin("BANK-20-guid-a-b")


def test_first_deposit(bank):
    coin = signed_coin(bank)
    revealed = Merchant("shop").accept(coin)
    assert bank.deposit("shop", revealed) is None
    assert bank.deposits(coin.guid) == {"shop": revealed}
    assert bank.deposits("unknown") == {}


def test_repeated_deposit_is_idempotent(bank):
    coin = signed_coin(bank)
    revealed = Merchant("shop").accept(coin)
    assert bank.deposit("shop", revealed) is None
    assert bank.deposit("shop", revealed) is None
    assert list(bank.deposits(coin.guid)) == ["shop"]


def test_conflicting_deposit_is_rejected(bank):
    coin = signed_coin(bank)
    bank.deposit("shop", Merchant("shop", FixedSideSource(True)).accept(coin))
    with pytest.raises(AlreadyDeposited):
        bank.deposit("shop", Merchant("shop", FixedSideSource(False)).accept(coin))


def test_deposit_detects_double_spending(bank):
    coin = signed_coin(bank, owner="carol")
    assert bank.deposit("shop", Merchant("shop", FixedSideSource(True)).accept(coin)) is None
    outcome = bank.deposit("cafe", Merchant("cafe", FixedSideSource(False)).accept(coin))
    assert outcome == DoubleSpent(coin.guid, "carol")


def test_deposit_detects_merchant_replay(bank):
    coin = signed_coin(bank)
    revealed = Merchant("shop").accept(coin)
    bank.deposit("shop", revealed)
    replayed = RevealedIdentity(revealed.guid, revealed.ris, revealed.sides)
    assert bank.deposit("cafe", replayed) == MerchantCheated(coin.guid)


def test_deposits_are_compared_with_every_earlier_deposit(bank):
    coin = signed_coin(bank, owner="dave")
    bank.deposit("shop", Merchant("shop", FixedSideSource(True)).accept(coin))
    bank.deposit("cafe", Merchant("cafe", FixedSideSource(False)).accept(coin))
    outcome = bank.deposit("bar", Merchant("bar", FixedSideSource(True)).accept(coin))
    assert outcome == DoubleSpent(coin.guid, "dave")
    assert list(bank.deposits(coin.guid)) == ["shop", "cafe", "bar"]


def test_replayed_deposits_are_merchant_cheating(bank):
    coin = signed_coin(bank)
    revealed = Merchant("shop").accept(coin)
    bank.deposit("shop", revealed)
    bank.deposit("cafe", RevealedIdentity(revealed.guid, revealed.ris, revealed.sides))
    outcome = bank.deposit("bar", RevealedIdentity(revealed.guid, revealed.ris, revealed.sides))
    assert outcome == MerchantCheated(coin.guid)


def test_malformed_deposit_is_not_recorded(bank):
    coin = signed_coin(bank)
    bank.deposit("shop", Merchant("shop").accept(coin))
    revealed = Merchant("cafe").accept(coin)
    truncated = RevealedIdentity(revealed.guid, revealed.ris[:2], revealed.sides[:2])

    with pytest.raises(MalformedRis):
        bank.deposit("cafe", truncated)
    assert list(bank.deposits(coin.guid)) == ["shop"]

    # retrying the same data fails again
    with pytest.raises(MalformedRis):
        bank.deposit("cafe", truncated)

    # a correct deposit is still accepted afterwards
    assert bank.deposit("cafe", revealed) is not None
    assert list(bank.deposits(coin.guid)) == ["shop", "cafe"]
