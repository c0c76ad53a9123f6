"""
Coins and their canonical string encoding.

A coin commits to its owner's identity through left/right hash lists and is
signed by the bank blindly. The bank only ever sees the blinded digest of the
canonical string

    BANK_STR-amount-guid-lh_0,lh_1,...-rh_0,rh_1,...

and the owner's identity is never part of it.

Example:
    >>> bank_priv, bank_pk = generate_new_key_pair(bits=1024)
    >>> coin = Coin("alice", 20, bank_pk.n_str, bank_pk.e_str, ris_length=10)
    >>> blinded = coin.blind()
    >>> coin.receive_signature(sign(blinded, bank_priv))
    >>> sig = coin.unblind()
    >>> bank_pk.verify_signature(sig, coin.to_string())
    True
    >>> parse_coin(coin.to_string()).amount
    20
"""

from __future__ import annotations

import logging
import math
import re
from enum import IntEnum
from typing import (
    Optional,
    Tuple,
    Union,
)

import attr
from petlib.bn import Bn

from . import config
from .blind_signature import RsaPublicKey, blind, generate_new_key_pair, sign, unblind
from .commitment import IdentityCommitment, build_identity_commitment
from .identity import InvalidArgument, Side
from .rand import RandomSource, default_source


logger = logging.getLogger(__name__)

Amount = Union[int, float]

_INT_AMOUNT = re.compile(r"^[0-9]+$")
_FLOAT_AMOUNT = re.compile(r"^[0-9]+\.[0-9]+$")
_HASH = re.compile(r"^[0-9a-f]{64}$")


class InvalidIdentity(ValueError):
    """The coin was not issued by this bank."""


class MalformedCoin(ValueError):
    """The canonical coin string can not be parsed."""


class CoinStateInvalid(Exception):
    """A coin lifecycle step was attempted out of order."""


class CoinState(IntEnum):
    """Lifecycle of a coin."""
    CREATED = 0
    BLINDED = 1
    SIGNED = 2
    UNBLINDED = 3


def format_amount(amount: Amount) -> str:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidArgument(f"Invalid amount: {amount!r}")
    if not amount > 0 or (isinstance(amount, float) and not math.isfinite(amount)):
        raise InvalidArgument(f"Amount must be positive, got {amount!r}")
    s = str(amount)
    if not (_INT_AMOUNT.match(s) or _FLOAT_AMOUNT.match(s)):
        raise InvalidArgument(f"Amount {amount!r} has no plain decimal form")
    return s


def _parse_amount(s: str) -> Amount:
    if _INT_AMOUNT.match(s):
        amount: Amount = int(s)
    elif _FLOAT_AMOUNT.match(s):
        amount = float(s)
    else:
        raise MalformedCoin(f"Invalid amount field: {s!r}")
    if not amount > 0:
        raise MalformedCoin(f"Amount must be positive, got {s!r}")
    return amount


def _parse_hashes(s: str, side: Side) -> Tuple[str, ...]:
    hashes = tuple(s.split(config.HASH_SEPARATOR))
    if not all(_HASH.match(h) for h in hashes):
        raise MalformedCoin(f"Invalid {side.name.lower()} hash list")
    return hashes


@attr.s(slots=True, frozen=True)
class ParsedCoin:
    """Public fields recovered from a canonical coin string."""
    amount = attr.ib()       # type: Amount
    guid = attr.ib()         # type: str
    left_hashes = attr.ib(converter=tuple)  # type: Tuple[str, ...]
    right_hashes = attr.ib(converter=tuple) # type: Tuple[str, ...]

    def to_string(self) -> str:
        return coin_string(self.amount, self.guid, self.left_hashes, self.right_hashes)


def coin_string(
        amount: Amount,
        guid: str,
        left_hashes: Tuple[str, ...],
        right_hashes: Tuple[str, ...]
    ) -> str:
    return config.FIELD_SEPARATOR.join((
        config.BANK_STR,
        format_amount(amount),
        guid,
        config.HASH_SEPARATOR.join(left_hashes),
        config.HASH_SEPARATOR.join(right_hashes),
    ))


def parse_coin(s: str) -> ParsedCoin:
    """Parse a canonical coin string.

    :param s: string representation of a coin
    :raises InvalidIdentity: the bank tag does not match BANK_STR
    :raises MalformedCoin: any other field is invalid
    :return: the coin's amount, guid and identity hashes
    """
    if not isinstance(s, str):
        raise MalformedCoin("Coin string must be a str")

    fields = s.split(config.FIELD_SEPARATOR)
    if fields[0] != config.BANK_STR:
        raise InvalidIdentity(
            f"Invalid identity string: {fields[0]} received, but {config.BANK_STR} expected"
        )
    if len(fields) != 5:
        raise MalformedCoin(f"Expected 5 fields, got {len(fields)}")

    _, amount, guid, left, right = fields
    if not guid:
        raise MalformedCoin("Missing guid")

    left_hashes = _parse_hashes(left, Side.LEFT)
    right_hashes = _parse_hashes(right, Side.RIGHT)
    if len(left_hashes) != len(right_hashes):
        raise MalformedCoin("Left and right hash lists differ in length")

    return ParsedCoin(_parse_amount(amount), guid, left_hashes, right_hashes)


class Coin:
    """A coin owned by 'owner' and signed blindly by a bank.

    :param owner: identity of the coin's owner, only ever committed to
    :param amount: positive value of the coin
    :param n: bank's RSA modulus
    :param e: bank's RSA public exponent
    :param ris_length: number of identity string pairs, COIN_RIS_LENGTH by default
    :param rng: source for the guid and the identity masks
    :param commitment: prebuilt identity commitment for owner
    :raises InvalidArgument: owner, amount or ris_length is invalid, or the
        commitment does not match owner and ris_length
    """

    __slots__ = (
        "owner",
        "amount",
        "guid",
        "n",
        "e",
        "blinded",
        "signature",
        "state",
        "_commitment",
        "_blinding_factor",
    )

    def __init__(
            self,
            owner: str,
            amount: Amount,
            n: Union[Bn, int, str],
            e: Union[Bn, int, str],
            ris_length: Optional[int] = None,
            rng: Optional[RandomSource] = None,
            commitment: Optional[IdentityCommitment] = None
        ) -> None:
        format_amount(amount)
        rng = default_source(rng)

        if commitment is None:
            if ris_length is None:
                ris_length = config.COIN_RIS_LENGTH
            commitment = build_identity_commitment(owner, ris_length, rng)
        elif commitment.encoder.identity != owner:
            raise InvalidArgument("Commitment was built for another identity")
        elif ris_length is not None and ris_length != len(commitment.left_hashes):
            raise InvalidArgument(
                f"Commitment has {len(commitment.left_hashes)} identity strings, "
                f"expected {ris_length}"
            )

        self.owner: str = owner
        self.amount: Amount = amount
        self.guid: str = rng.random_guid()
        self.n: str = n.repr() if isinstance(n, Bn) else str(n)
        self.e: str = e.repr() if isinstance(e, Bn) else str(e)
        self.blinded: Optional[Bn] = None
        self.signature: Optional[Bn] = None
        self.state: CoinState = CoinState.CREATED
        self._commitment: IdentityCommitment = commitment
        self._blinding_factor: Optional[Bn] = None
        logger.debug("Created coin %s worth %s", self.guid, self.amount)


    def __str__(self) -> str:
        return self.to_string()


    def __repr__(self) -> str:
        return f"<{type(self).__name__}:{self.guid} amount={self.amount} state={self.state.name}>"


    @property
    def left_hashes(self) -> Tuple[str, ...]:
        return self._commitment.left_hashes


    @property
    def right_hashes(self) -> Tuple[str, ...]:
        return self._commitment.right_hashes


    @property
    def ris_length(self) -> int:
        return len(self._commitment.left_hashes)


    def to_string(self) -> str:
        """The canonical string that the bank signs."""
        return coin_string(self.amount, self.guid, self.left_hashes, self.right_hashes)


    def public_key(self) -> RsaPublicKey:
        return RsaPublicKey.from_strings(self.n, self.e)


    def _expect(self, state: CoinState, action: str) -> None:
        if self.state != state:
            raise CoinStateInvalid(
                f"Can not {action} coin {self.guid} in state {self.state.name}, "
                f"expected {state.name}"
            )


    def blind(self) -> Bn:
        """Blind the canonical string for the bank.

        :raises CoinStateInvalid: the coin was already blinded
        :return: the blinded value to send to the bank
        """
        self._expect(CoinState.CREATED, "blind")
        self.blinded, self._blinding_factor = blind(self.to_string(), self.n, self.e)
        self.state = CoinState.BLINDED
        return self.blinded


    def receive_signature(self, signature: Bn) -> None:
        """Store the bank's signature over the blinded value."""
        self._expect(CoinState.BLINDED, "sign")
        self.signature = signature
        self.state = CoinState.SIGNED


    def unblind(self) -> Bn:
        """Turn the blind signature into a signature over the canonical string."""
        self._expect(CoinState.SIGNED, "unblind")
        self.signature = unblind(self._blinding_factor, self.signature, self.n)
        self._blinding_factor = None
        self.state = CoinState.UNBLINDED
        logger.debug("Coin %s is ready to spend", self.guid)
        return self.signature


    def get_ris(self, side: Union[Side, bool], index: int) -> bytes:
        """Answer a merchant's challenge for one half of an identity string.

        :param side: the requested half, or True to request the left half
        :param index: position of the identity string pair
        """
        return self._commitment.encoder.encode_fragment(index, side)


def main():
    import doctest
    doctest.testmod(verbose=True)


if __name__ == "__main__":
    main()
