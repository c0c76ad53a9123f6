"""
Merchant side of a payment.

The merchant checks the bank's signature over the coin, then challenges the
owner for a random half of every identity string pair and checks each answer
against the committed hash. The revealed halves are later deposited at the
bank, which can expose the owner if the coin was spent twice.
"""

from __future__ import annotations

import logging
from typing import (
    Optional,
    Tuple,
)

import attr

from .blind_signature import verify
from .coin import Coin, parse_coin
from .commitment import hash_fragment
from .identity import Side
from .rand import RandomSource, default_source


logger = logging.getLogger(__name__)


class SignatureInvalid(Exception):
    """The bank's signature over the coin is missing or invalid."""


class HashMismatch(Exception):
    """A revealed identity string does not match its committed hash."""

    def __init__(self, index: int, side: Side) -> None:
        super().__init__(f"Hash mismatch for {side.name.lower()} identity at index {index}")
        self.index: int = index
        self.side: Side = side


def _sides(sides) -> Tuple[Side, ...]:
    return tuple(Side.coerce(side) for side in sides)


@attr.s(slots=True, frozen=True)
class RevealedIdentity:
    """Identity string halves revealed to one merchant for one coin.

    Attributes:
        guid (str): coin identifier
        ris (Tuple[str]): hex encoded halves, one per index
        sides (Tuple[Side]): which half was revealed at each index
    """
    guid = attr.ib()  # type: str
    ris = attr.ib(converter=tuple)    # type: Tuple[str, ...]
    sides = attr.ib(converter=_sides) # type: Tuple[Side, ...]


class Merchant:
    """A merchant accepting coins.

    :param name: merchant identifier used when depositing at the bank
    :param rng: source of the challenge bits
    """

    __slots__ = ("name", "rng")

    def __init__(self, name: str, rng: Optional[RandomSource] = None) -> None:
        self.name: str = name
        self.rng: RandomSource = default_source(rng)


    def accept(self, coin: Coin) -> RevealedIdentity:
        """Accept a coin.

        :param coin: the coin that a purchaser wants to use
        :raises SignatureInvalid: the signature does not verify, nothing was revealed
        :raises HashMismatch: the owner answered a challenge with a wrong half
        :return: the revealed halves and the side picked at each index
        """
        message = coin.to_string()
        if coin.signature is None or not verify(coin.signature, message, coin.n, coin.e):
            logger.warning("Merchant %s rejected coin %s: invalid signature", self.name, coin.guid)
            raise SignatureInvalid(f"Coin {coin.guid} signature is invalid")

        parsed = parse_coin(message)
        ris = []
        sides = []
        for i, (left, right) in enumerate(zip(parsed.left_hashes, parsed.right_hashes)):
            side = Side.LEFT if self.rng.random_bit() else Side.RIGHT
            fragment = coin.get_ris(side, i)
            expected = left if side == Side.LEFT else right
            if hash_fragment(fragment) != expected:
                logger.warning("Merchant %s rejected coin %s at index %d", self.name, coin.guid, i)
                raise HashMismatch(i, side)
            ris.append(fragment.hex())
            sides.append(side)

        logger.debug("Merchant %s accepted coin %s", self.name, coin.guid)
        return RevealedIdentity(parsed.guid, tuple(ris), tuple(sides))


def accept_coin(coin: Coin, rng: Optional[RandomSource] = None) -> RevealedIdentity:
    return Merchant("merchant", rng).accept(coin)
