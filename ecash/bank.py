"""
The bank: issues coins by blind signing and collects merchants' deposits.

How to use:
    >>> bank = Bank(bits=1024)
    >>> coin = Coin("alice", 20, bank.n, bank.e, ris_length=10)
    >>> coin.receive_signature(bank.sign_coin(coin.blind()))
    >>> _ = coin.unblind()
    >>> bank.deposit("shop", Merchant("shop").accept(coin)) is None
    True
    >>> bank.deposit("cafe", Merchant("cafe").accept(coin))
    DoubleSpent(guid=..., identity='alice')

The last result holds unless both merchants happened to pick the same half at
every index, which has probability 2**-10 here.
"""

from __future__ import annotations

import logging
from typing import (
    Dict,
    List,
    Optional,
)

from petlib.bn import Bn

from . import config
from .blind_signature import (
    RsaPrivateKey,
    RsaPublicKey,
    RsaSigner,
    generate_new_key_pair,
)
from .coin import Coin, ParsedCoin, parse_coin
from .detection import DoubleSpent, Outcome, determine_cheater
from .merchant import Merchant, RevealedIdentity


logger = logging.getLogger(__name__)


class AlreadyDeposited(Exception):
    """The merchant already deposited different data for this coin."""


class Bank:
    """A bank holding an RSA key pair and a ledger of deposited coins.

    :param private: bank's private key, generated if missing
    :param public: bank's public key, derived from private if missing
    :param bits: modulus size when generating a new key pair
    """

    __slots__ = ("private", "public", "signer", "_ledger")

    def __init__(
            self,
            private: Optional[RsaPrivateKey] = None,
            public: Optional[RsaPublicKey] = None,
            bits: int = config.DEFAULT_KEY_BITS
        ) -> None:
        if private is None:
            private, public = generate_new_key_pair(bits)
        elif public is None:
            public = private.public_key()
        self.private: RsaPrivateKey = private
        self.public: RsaPublicKey = public
        self.signer: RsaSigner = RsaSigner(private)
        self._ledger: Dict[str, Dict[str, RevealedIdentity]] = dict()


    @property
    def n(self) -> str:
        return self.public.n_str


    @property
    def e(self) -> str:
        return self.public.e_str


    def sign_coin(self, blinded: Bn) -> Bn:
        """Sign a blinded coin. The bank learns nothing about the coin.

        :param blinded: the blinded hash of the coin
        :return: the bank's blind signature
        """
        return self.signer.sign(blinded)


    def parse_coin(self, s: str) -> ParsedCoin:
        return parse_coin(s)


    def deposits(self, guid: str) -> Dict[str, RevealedIdentity]:
        """Deposits recorded for a coin, keyed by merchant."""
        return dict(self._ledger.get(guid, {}))


    def deposit(self, merchant: str, revealed: RevealedIdentity) -> Optional[Outcome]:
        """Record a merchant's deposit of a coin.

        The first deposit per (coin, merchant) is kept. Repeating it is a no-op.

        :param merchant: depositing merchant
        :param revealed: identity strings the merchant received for the coin
        :raises AlreadyDeposited: the merchant already deposited other data for the coin
        :raises MalformedRis: the deposit can not be compared with earlier ones, it
            is not recorded
        :return: None for the first deposit of a coin. Otherwise DoubleSpent if any
            earlier deposit exposes the owner, MerchantCheated if none does
        """
        entries = self._ledger.get(revealed.guid, dict())
        previous = entries.get(merchant)
        if previous is not None:
            if previous == revealed:
                return None
            raise AlreadyDeposited(f"Merchant {merchant} already deposited coin {revealed.guid}")

        outcomes: List[Outcome] = [determine_cheater(earlier, revealed) for earlier in entries.values()]
        entries[merchant] = revealed
        self._ledger[revealed.guid] = entries
        if not outcomes:
            logger.debug("Merchant %s deposited coin %s", merchant, revealed.guid)
            return None

        logger.debug("Coin %s deposited again by %s", revealed.guid, merchant)
        for outcome in outcomes:
            if isinstance(outcome, DoubleSpent):
                return outcome
        return outcomes[0]


def main():
    import doctest
    doctest.testmod(verbose=True, optionflags=doctest.ELLIPSIS)


if __name__ == "__main__":
    main()
